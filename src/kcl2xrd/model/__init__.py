# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model for kcl2xrd: scanned KCL schemas and the generated XRD document."""

from kcl2xrd.model.document import (
    XRD_API_VERSION,
    XRD_KIND,
    CompositeResourceDefinition,
    Names,
    ObjectMeta,
    PropertySchema,
    VersionSchema,
    XRDSpec,
    XRDVersion,
)
from kcl2xrd.model.schema import (
    Field,
    ParseResult,
    PrinterColumn,
    Schema,
    ValidationRule,
    XRDMetadata,
)

__all__ = [
    # Source model
    "Field",
    "Schema",
    "ParseResult",
    "PrinterColumn",
    "ValidationRule",
    "XRDMetadata",
    # Document model
    "XRD_API_VERSION",
    "XRD_KIND",
    "PropertySchema",
    "ObjectMeta",
    "Names",
    "VersionSchema",
    "XRDVersion",
    "XRDSpec",
    "CompositeResourceDefinition",
]
