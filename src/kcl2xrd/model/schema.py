# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Source-side model: schemas, fields and file metadata scanned from KCL text."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class ValidationRule(BaseModel):
    """A CEL validation rule attached to a field via ``@validate``."""

    rule: str
    message: str | None = None


class PrinterColumn(BaseModel):
    """An additional printer column shown by ``kubectl get``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: str
    json_path: str = _Field(alias="jsonPath")
    description: str | None = None


class Field(BaseModel):
    """One declared member of a KCL schema.

    Attributes:
        name: The attribute name as written in the source.
        type: The literal type token (``str``, ``[T]``, ``{K:V}``, ``any`` or a schema name).
        description: Text collected from comments or a docstring.
        required: False when the name carries the ``?`` optional marker.
        default: Raw default literal, empty when none was declared.
    """

    name: str
    type: str
    description: str | None = None
    required: bool = True
    default: str = ""

    # Validation
    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    minimum: int | None = None
    maximum: int | None = None
    min_items: int | None = None
    max_items: int | None = None
    enum: list[str] | None = None
    immutable: bool = False
    validations: list[ValidationRule] = _Field(default_factory=list)

    # Kubernetes structural-schema hints
    preserve_unknown_fields: bool = False
    items_preserve_unknown_fields: bool = False
    format: str | None = None
    items_format: str | None = None
    map_type: str | None = None
    list_type: str | None = None
    list_map_keys: list[str] | None = None
    additional_properties: bool = False

    # Placement
    is_status: bool = False
    is_spec: bool = False
    one_of: list[list[str]] = _Field(default_factory=list)
    any_of: list[list[str]] = _Field(default_factory=list)


class Schema(BaseModel):
    """A named group of fields parsed from one ``schema <Name>:`` block."""

    name: str
    description: str | None = None
    fields: list[Field] = _Field(default_factory=list)
    is_xrd: bool = False
    is_status: bool = False
    spec_mount_path: str | None = None
    one_of: list[list[str]] = _Field(default_factory=list)
    any_of: list[list[str]] = _Field(default_factory=list)


class XRDMetadata(BaseModel):
    """File-level settings taken from ``__xrd_*`` variables.

    Every attribute is optional: ``None`` (or an empty list) means the file did
    not set it, or set it to an expression that could not be resolved.
    """

    kind: str | None = None
    group: str | None = None
    version: str | None = None
    categories: list[str] = _Field(default_factory=list)
    served: bool | None = None
    referenceable: bool | None = None
    printer_columns: list[PrinterColumn] = _Field(default_factory=list)
    status_preserve_unknown: bool | None = None

    def merged_over(self, base: XRDMetadata) -> XRDMetadata:
        """Return *base* with every value set on ``self`` taking precedence."""
        update = {}
        for key in type(self).model_fields:
            value = getattr(self, key)
            if value is not None and value != []:
                update[key] = value
        return base.model_copy(update=update)


class ParseResult(BaseModel):
    """Output of the schema scanner.

    Attributes:
        schemas: All schemas seen, keyed by name.
        primary: The last schema closed; the default conversion root.
        metadata: File-level ``__xrd_*`` settings.
    """

    schemas: dict[str, Schema]
    primary: Schema
    metadata: XRDMetadata = _Field(default_factory=XRDMetadata)
