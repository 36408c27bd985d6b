# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Scanning of KCL schema files: annotations, expressions and schema blocks."""

from kcl2xrd.parser.evaluator import EvaluatorError, KclCliEvaluator
from kcl2xrd.parser.expressions import resolve_expression
from kcl2xrd.parser.scanner import (
    LINE_RULES,
    MetadataEvaluator,
    Mode,
    NoSchemaError,
    ParseError,
    ScannerState,
    process_line,
    scan,
    scan_file,
)

__all__ = [
    "scan",
    "scan_file",
    "process_line",
    "LINE_RULES",
    "Mode",
    "ScannerState",
    "MetadataEvaluator",
    "ParseError",
    "NoSchemaError",
    "resolve_expression",
    "KclCliEvaluator",
    "EvaluatorError",
]
