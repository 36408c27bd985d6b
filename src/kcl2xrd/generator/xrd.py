# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Assembly of a Crossplane CompositeResourceDefinition from scanned schemas.

The root schema's fields are partitioned into three places:

* ``spec.parameters``: ordinary fields (the default);
* ``spec`` directly: fields annotated with ``@spec``;
* ``status``: fields annotated with ``@status``, after the fields of any
  schema marked ``@status`` elsewhere in the file.

Schemas marked ``@specMount("name")`` are expanded under ``spec.<name>``.
Every list and property order follows declaration order, so converting the
same input twice yields identical documents.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from kcl2xrd.config.options import XRDOptions
from kcl2xrd.generator.errors import AmbiguousRootError, MissingGroupError, SchemaNotFoundError
from kcl2xrd.generator.types import convert_fields, convert_schema, lower_groups
from kcl2xrd.model.document import (
    CompositeResourceDefinition,
    Names,
    ObjectMeta,
    PropertySchema,
    VersionSchema,
    XRDSpec,
    XRDVersion,
)
from kcl2xrd.model.schema import Field, ParseResult, PrinterColumn, Schema, XRDMetadata

# ###############
# Public Interface
# ###############

DEFAULT_VERSION = "v1alpha1"
CLAIM_PREFIX = "X"


@dataclass(frozen=True)
class ResolvedOptions:
    """Conversion settings after options, file metadata and defaults are merged."""

    group: str
    version: str = DEFAULT_VERSION
    kind: str | None = None
    with_claims: bool = False
    claim_kind: str | None = None
    claim_plural: str | None = None
    served: bool = True
    referenceable: bool = True
    categories: list[str] = field(default_factory=list)
    printer_columns: list[PrinterColumn] = field(default_factory=list)
    status_preserve_unknown: bool = False


def select_schema(result: ParseResult, name: str | None = None) -> Schema:
    """Pick the conversion root from a scan result.

    Order of precedence: the explicitly requested *name*; the single schema
    marked ``@xrd``; the schema named by ``__xrd_kind``; the primary (last)
    schema of the file.

    Raises:
        SchemaNotFoundError: If *name* is given but not declared in the file.
        AmbiguousRootError: If more than one schema is marked ``@xrd``.
    """
    if name:
        if name not in result.schemas:
            raise SchemaNotFoundError(name, list(result.schemas))
        return result.schemas[name]

    marked = [schema for schema in result.schemas.values() if schema.is_xrd]
    if len(marked) > 1:
        raise AmbiguousRootError([schema.name for schema in marked])
    if marked:
        return marked[0]

    kind = result.metadata.kind
    if kind and kind in result.schemas:
        return result.schemas[kind]
    return result.primary


def resolve_options(options: XRDOptions, metadata: XRDMetadata) -> ResolvedOptions:
    """Merge caller options over file metadata and built-in defaults.

    Raises:
        MissingGroupError: If neither source provides an API group.
    """
    group = options.group or metadata.group
    if not group:
        raise MissingGroupError()
    return ResolvedOptions(
        group=group,
        version=options.version or metadata.version or DEFAULT_VERSION,
        kind=options.kind or metadata.kind,
        with_claims=bool(options.with_claims),
        claim_kind=options.claim_kind,
        claim_plural=options.claim_plural,
        served=_first_set(options.served, metadata.served, True),
        referenceable=_first_set(options.referenceable, metadata.referenceable, True),
        categories=list(options.categories or metadata.categories),
        printer_columns=list(options.printer_columns or metadata.printer_columns),
        status_preserve_unknown=_first_set(options.status_preserve_unknown, metadata.status_preserve_unknown, False),
    )


def plural_of(kind: str) -> str:
    """Return the lower-cased kind with an ``s`` appended."""
    return kind.lower() + "s"


def derive_claim_names(kind: str) -> tuple[str, str]:
    """Split a configured kind into ``(exposed_kind, claim_kind)``.

    ``Bucket`` and ``XBucket`` both yield ``("XBucket", "Bucket")``. Any kind
    starting with ``X`` is taken as already prefixed, so ``Xylophone`` yields
    ``("Xylophone", "ylophone")``. A bare ``X`` is treated as unprefixed.
    """
    if _has_claim_prefix(kind):
        return kind, kind[len(CLAIM_PREFIX) :]
    return CLAIM_PREFIX + kind, kind


def generate_xrd(
    schema: Schema,
    schemas: dict[str, Schema],
    options: XRDOptions | None = None,
    metadata: XRDMetadata | None = None,
) -> CompositeResourceDefinition:
    """Convert *schema* into a CompositeResourceDefinition.

    Args:
        schema: The root schema.
        schemas: Every schema of the file, used for reference expansion,
            mounted schemas and the status schema.
        options: Caller settings; they override *metadata*.
        metadata: File-level ``__xrd_*`` settings.

    Raises:
        MissingGroupError: If no API group is available.
        CyclicSchemaReferenceError: If schema references form a cycle.
    """
    resolved = resolve_options(options or XRDOptions(), metadata or XRDMetadata())

    kind = resolved.kind or schema.name
    claim_names: Names | None = None
    if resolved.with_claims:
        kind, claim_kind = derive_claim_names(kind)
        claim_kind = resolved.claim_kind or claim_kind
        claim_names = Names(kind=claim_kind, plural=resolved.claim_plural or plural_of(claim_kind))
    plural = plural_of(kind)

    version = XRDVersion(
        name=resolved.version,
        served=resolved.served,
        referenceable=resolved.referenceable,
        additional_printer_columns=list(resolved.printer_columns) or None,
        version_schema=VersionSchema(
            open_api_v3_schema=build_openapi_schema(
                schema,
                schemas,
                status_preserve_unknown=resolved.status_preserve_unknown,
            )
        ),
    )
    return CompositeResourceDefinition(
        metadata=ObjectMeta(name=f"{plural}.{resolved.group}"),
        spec=XRDSpec(
            group=resolved.group,
            names=Names(kind=kind, plural=plural, categories=list(resolved.categories) or None),
            claim_names=claim_names,
            versions=[version],
        ),
    )


def build_openapi_schema(
    schema: Schema,
    schemas: dict[str, Schema],
    *,
    status_preserve_unknown: bool = False,
) -> PropertySchema:
    """Build the ``openAPIV3Schema`` root node for *schema*."""
    parameter_fields, spec_fields, status_fields = partition_fields(schema.fields)
    path = (schema.name,)

    properties, required = convert_fields(parameter_fields, schemas, path=path)
    parameters = PropertySchema(
        type="object",
        properties=properties,
        required=required or None,
        one_of=lower_groups(schema.one_of),
        any_of=lower_groups(schema.any_of),
    )

    spec_properties: dict[str, PropertySchema] = {"parameters": parameters}
    spec_required = ["parameters"]
    properties, required = convert_fields(spec_fields, schemas, path=path)
    spec_properties.update(properties)
    spec_required.extend(required)
    for other in schemas.values():
        if other.name != schema.name and other.spec_mount_path:
            spec_properties[other.spec_mount_path] = convert_schema(other, schemas)

    status_properties: dict[str, PropertySchema] = {}
    for other in schemas.values():
        if other.name != schema.name and other.is_status:
            properties, _ = convert_fields(other.fields, schemas, path=(other.name,))
            status_properties.update(properties)
    properties, _ = convert_fields(status_fields, schemas, path=path)
    status_properties.update(properties)

    root_properties: dict[str, PropertySchema] = {
        "spec": PropertySchema(type="object", properties=spec_properties, required=spec_required),
    }
    # Observed state is written by the system, so status never lists required fields.
    if status_properties:
        root_properties["status"] = PropertySchema(type="object", properties=status_properties)
    elif status_preserve_unknown:
        root_properties["status"] = PropertySchema(type="object", preserve_unknown_fields=True)

    return PropertySchema(
        type="object",
        description=schema.description or None,
        properties=root_properties,
        required=["spec"],
    )


def partition_fields(fields: list[Field]) -> tuple[list[Field], list[Field], list[Field]]:
    """Split fields into ``(parameters, top-level spec, status)`` in one pass.

    ``@status`` wins over ``@spec`` when a field carries both.
    """
    parameters: list[Field] = []
    spec: list[Field] = []
    status: list[Field] = []
    for item in fields:
        if item.is_status:
            status.append(item)
        elif item.is_spec:
            spec.append(item)
        else:
            parameters.append(item)
    return parameters, spec, status


# ################
# Implementation
# ################


def _first_set(*values: bool | None) -> bool:
    for value in values:
        if value is not None:
            return value
    return False


def _has_claim_prefix(kind: str) -> bool:
    return kind.startswith(CLAIM_PREFIX) and len(kind) > len(CLAIM_PREFIX)
