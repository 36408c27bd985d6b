# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Conversion of KCL field types and annotations into OpenAPI property schemas.

References to other schemas are expanded inline, recursively. The names of
the schemas being expanded are threaded through every call so that a cycle
raises :class:`CyclicSchemaReferenceError` instead of recursing forever.
"""

from __future__ import annotations

import logging
from typing import Any

import yaml

from kcl2xrd.generator.errors import CyclicSchemaReferenceError
from kcl2xrd.model.document import PropertySchema
from kcl2xrd.model.schema import Field, Schema, ValidationRule
from kcl2xrd.parser.annotations import split_top_level

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

PRIMITIVE_TYPES: dict[str, str] = {
    "str": "string",
    "int": "integer",
    "float": "number",
    "bool": "boolean",
}

ANY_TYPE = "any"

IMMUTABLE_RULE = "self == oldSelf"


def convert_field(field: Field, schemas: dict[str, Schema], *, path: tuple[str, ...] = ()) -> PropertySchema:
    """Convert one field, including its default and validation annotations.

    Args:
        field: The field to convert.
        schemas: The schema table used to expand references.
        path: Names of the schemas currently being expanded.

    Raises:
        CyclicSchemaReferenceError: If the field type leads back into *path*.
    """
    node = convert_type(field.type, schemas, path=path)
    if field.description:
        node.description = field.description
    default = coerce_default(field.default, node.type)
    if default is not None:
        node.default = default
    _apply_annotations(node, field)
    return node


def convert_type(type_expr: str, schemas: dict[str, Schema], *, path: tuple[str, ...] = ()) -> PropertySchema:
    """Convert a raw KCL type expression into a property schema.

    ``any`` yields a typeless node, ``[T]`` an array, ``{K:V}`` an object whose
    ``additionalProperties`` is the value type, and a schema name an inline
    object. Unknown names fall back to a plain object.
    """
    text = type_expr.strip()
    if text in PRIMITIVE_TYPES:
        return PropertySchema(type=PRIMITIVE_TYPES[text])
    if text == ANY_TYPE:
        return PropertySchema()

    if text.startswith("[") and text.endswith("]"):
        inner = text[1:-1].strip()
        if _is_any_map(inner):
            # Arbitrary objects keep unknown fields on the item, not on the array.
            items = PropertySchema(type="object", preserve_unknown_fields=True)
        else:
            items = convert_type(inner, schemas, path=path)
        return PropertySchema(type="array", items=items)

    if text.startswith("{") and text.endswith("}"):
        split = _split_map(text[1:-1])
        if split is None:
            logger.debug("Malformed map type %r, using a plain object", text)
            return PropertySchema(type="object")
        # Keys are always strings in OpenAPI; only the value type is kept.
        return PropertySchema(type="object", additional_properties=convert_type(split[1], schemas, path=path))

    if text in schemas:
        if text in path:
            raise CyclicSchemaReferenceError([*path, text])
        return convert_schema(schemas[text], schemas, path=path)

    logger.debug("Unknown type %r, using a plain object", text)
    return PropertySchema(type="object")


def convert_schema(schema: Schema, schemas: dict[str, Schema], *, path: tuple[str, ...] = ()) -> PropertySchema:
    """Expand *schema* into an object node with its fields as properties."""
    properties, required = convert_fields(schema.fields, schemas, path=(*path, schema.name))
    return PropertySchema(
        type="object",
        description=schema.description or None,
        properties=properties,
        required=required or None,
        one_of=lower_groups(schema.one_of),
        any_of=lower_groups(schema.any_of),
    )


def convert_fields(
    fields: list[Field], schemas: dict[str, Schema], *, path: tuple[str, ...] = ()
) -> tuple[dict[str, PropertySchema], list[str]]:
    """Convert *fields* in declaration order.

    Returns:
        The ``properties`` mapping and the names of the required fields.
    """
    properties: dict[str, PropertySchema] = {}
    required: list[str] = []
    for field in fields:
        properties[field.name] = convert_field(field, schemas, path=path)
        if field.required:
            required.append(field.name)
    return properties, required


def lower_groups(groups: list[list[str]]) -> list[PropertySchema] | None:
    """Turn field-name groups into ``oneOf``/``anyOf`` alternatives of ``required`` lists."""
    if not groups:
        return None
    return [PropertySchema(required=list(group)) for group in groups]


def coerce_default(raw: str, type_: str | None) -> Any:
    """Convert a raw default literal according to the resolved OpenAPI type.

    Returns None when there is no default. Values that do not coerce fall back
    to the literal with its surrounding quotes removed.
    """
    raw = raw.strip()
    if not raw or raw in ("None", "Undefined"):
        return None
    value = _strip_quotes(raw)
    if type_ in ("array", "object"):
        try:
            parsed = yaml.safe_load(raw)
        except yaml.YAMLError:
            return value
        return parsed if isinstance(parsed, (list, dict)) else value
    return _coerce_scalar(value, type_)


# ################
# Implementation
# ################


def _is_any_map(text: str) -> bool:
    split = _split_map(text[1:-1]) if text.startswith("{") and text.endswith("}") else None
    return split == (ANY_TYPE, ANY_TYPE)


def _split_map(inner: str) -> tuple[str, str] | None:
    """Split ``K:V`` on the first colon outside brackets."""
    parts = split_top_level(inner, separator=":")
    if len(parts) < 2:
        return None
    return parts[0], ":".join(parts[1:])


def _coerce_scalar(value: str, type_: str | None) -> Any:
    if type_ == "integer":
        try:
            return int(value)
        except ValueError:
            return value
    if type_ == "number":
        try:
            return float(value)
        except ValueError:
            return value
    if type_ == "boolean":
        return {"true": True, "false": False}.get(value.lower(), value)
    return value


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return text


def _apply_annotations(node: PropertySchema, field: Field) -> None:
    """Mirror the field's validation and structural hints onto *node*."""
    for attribute in (
        "pattern",
        "min_length",
        "max_length",
        "minimum",
        "maximum",
        "min_items",
        "max_items",
        "format",
        "map_type",
        "list_type",
    ):
        value = getattr(field, attribute)
        if value is not None:
            setattr(node, attribute, value)
    if field.enum is not None:
        node.enum = [_coerce_scalar(_strip_quotes(value), node.type) for value in field.enum]
    if field.list_map_keys is not None:
        node.list_map_keys = list(field.list_map_keys)

    if field.preserve_unknown_fields:
        node.preserve_unknown_fields = True
    if node.items is not None:
        if field.items_preserve_unknown_fields:
            node.items.preserve_unknown_fields = True
        if field.items_format:
            node.items.format = field.items_format
    if field.additional_properties and node.additional_properties is None:
        node.additional_properties = True

    node.one_of = _merge_groups(node, node.one_of, lower_groups(field.one_of), "one_of")
    node.any_of = _merge_groups(node, node.any_of, lower_groups(field.any_of), "any_of")

    rules = [rule.model_copy() for rule in field.validations]
    if field.immutable:
        rules.append(ValidationRule(rule=IMMUTABLE_RULE, message=f"{field.name} is immutable"))
    if rules:
        node.validations = rules


def _merge_groups(
    node: PropertySchema,
    schema_groups: list[PropertySchema] | None,
    field_groups: list[PropertySchema] | None,
    keyword: str,
) -> list[PropertySchema] | None:
    """Combine the groups of an expanded schema with those of the field using it.

    When both sides declare groups each set is wrapped in its own ``allOf``
    entry so that both constraints hold. The return value is what stays on
    the keyword itself.
    """
    if not schema_groups or not field_groups:
        return field_groups or schema_groups
    node.all_of = [
        *(node.all_of or []),
        PropertySchema(**{keyword: schema_groups}),
        PropertySchema(**{keyword: field_groups}),
    ]
    return None
