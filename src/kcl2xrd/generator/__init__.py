# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Conversion of scanned KCL schemas into Crossplane XRDs."""

from kcl2xrd.generator.errors import (
    AmbiguousRootError,
    CyclicSchemaReferenceError,
    GeneratorError,
    MissingGroupError,
    SchemaNotFoundError,
)
from kcl2xrd.generator.render import render_yaml, write_xrd
from kcl2xrd.generator.types import coerce_default, convert_field, convert_schema, convert_type
from kcl2xrd.generator.xrd import (
    DEFAULT_VERSION,
    ResolvedOptions,
    build_openapi_schema,
    derive_claim_names,
    generate_xrd,
    partition_fields,
    plural_of,
    resolve_options,
    select_schema,
)

__all__ = [
    "GeneratorError",
    "SchemaNotFoundError",
    "AmbiguousRootError",
    "MissingGroupError",
    "CyclicSchemaReferenceError",
    "convert_field",
    "convert_type",
    "convert_schema",
    "coerce_default",
    "DEFAULT_VERSION",
    "ResolvedOptions",
    "resolve_options",
    "select_schema",
    "derive_claim_names",
    "plural_of",
    "partition_fields",
    "build_openapi_schema",
    "generate_xrd",
    "render_yaml",
    "write_xrd",
]
