# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Output model: the OpenAPI property tree and the Crossplane XRD that wraps it.

Attribute names are Pythonic; aliases carry the OpenAPI / Kubernetes spelling
used when the document is dumped with ``by_alias=True``. Declaration order is
the order keys appear in the rendered YAML.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from kcl2xrd.model.schema import PrinterColumn, ValidationRule

# ###############
# Public Interface
# ###############

XRD_API_VERSION = "apiextensions.crossplane.io/v1"
XRD_KIND = "CompositeResourceDefinition"


class PropertySchema(BaseModel):
    """A node of the OpenAPI v3 schema tree.

    A node without ``type`` is intentionally typeless (a KCL ``any`` field).
    Markers such as ``preserve_unknown_fields`` are ``None`` rather than
    ``False`` when unset so that they are omitted from the output.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str | None = None
    description: str | None = None
    format: str | None = None
    default: Any = None
    enum: list[Any] | None = None
    pattern: str | None = None
    min_length: int | None = _Field(default=None, alias="minLength")
    max_length: int | None = _Field(default=None, alias="maxLength")
    minimum: int | None = None
    maximum: int | None = None
    min_items: int | None = _Field(default=None, alias="minItems")
    max_items: int | None = _Field(default=None, alias="maxItems")
    items: PropertySchema | None = None
    properties: dict[str, PropertySchema] | None = None
    required: list[str] | None = None
    additional_properties: PropertySchema | bool | None = _Field(default=None, alias="additionalProperties")
    one_of: list[PropertySchema] | None = _Field(default=None, alias="oneOf")
    any_of: list[PropertySchema] | None = _Field(default=None, alias="anyOf")
    all_of: list[PropertySchema] | None = _Field(default=None, alias="allOf")
    preserve_unknown_fields: bool | None = _Field(default=None, alias="x-kubernetes-preserve-unknown-fields")
    map_type: str | None = _Field(default=None, alias="x-kubernetes-map-type")
    list_type: str | None = _Field(default=None, alias="x-kubernetes-list-type")
    list_map_keys: list[str] | None = _Field(default=None, alias="x-kubernetes-list-map-keys")
    validations: list[ValidationRule] | None = _Field(default=None, alias="x-kubernetes-validations")


class ObjectMeta(BaseModel):
    """Kubernetes object metadata (only the name is emitted)."""

    name: str


class Names(BaseModel):
    """Kind and plural of the composite resource or its claim."""

    kind: str
    plural: str
    categories: list[str] | None = None


class VersionSchema(BaseModel):
    """Wrapper holding the OpenAPI schema of one served version."""

    model_config = ConfigDict(populate_by_name=True)

    open_api_v3_schema: PropertySchema = _Field(alias="openAPIV3Schema")


class XRDVersion(BaseModel):
    """One entry of ``spec.versions``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    served: bool = True
    referenceable: bool = True
    additional_printer_columns: list[PrinterColumn] | None = _Field(default=None, alias="additionalPrinterColumns")
    version_schema: VersionSchema = _Field(alias="schema")


class XRDSpec(BaseModel):
    """The ``spec`` of a CompositeResourceDefinition."""

    model_config = ConfigDict(populate_by_name=True)

    group: str
    names: Names
    claim_names: Names | None = _Field(default=None, alias="claimNames")
    versions: list[XRDVersion] = _Field(default_factory=list)


class CompositeResourceDefinition(BaseModel):
    """The complete document produced for one conversion."""

    model_config = ConfigDict(populate_by_name=True)

    api_version: str = _Field(default=XRD_API_VERSION, alias="apiVersion")
    kind: str = XRD_KIND
    metadata: ObjectMeta
    spec: XRDSpec

    def to_dict(self) -> dict[str, Any]:
        """Return the document as plain data with Kubernetes key spelling."""
        return self.model_dump(by_alias=True, exclude_none=True)


# Resolve forward references in self-referential models.
PropertySchema.model_rebuild()
