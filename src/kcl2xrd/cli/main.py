# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the kcl2xrd command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from kcl2xrd.config.options import ConfigError, XRDOptions, find_config, load_config
from kcl2xrd.generator.errors import GeneratorError
from kcl2xrd.generator.render import render_yaml, write_xrd
from kcl2xrd.generator.xrd import generate_xrd, select_schema
from kcl2xrd.model.schema import PrinterColumn
from kcl2xrd.parser.annotations import parse_printer_column
from kcl2xrd.parser.evaluator import KclCliEvaluator
from kcl2xrd.parser.scanner import ParseError, scan_file

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the kcl2xrd CLI."""
    parser = _build_parser()
    args = parser.parse_args()
    sys.exit(_run(args))


# ################
# Implementation
# ################


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kcl2xrd",
        description="Convert KCL schemas to Crossplane CompositeResourceDefinitions (XRDs).",
    )
    parser.add_argument("-i", "--input", required=True, help="Input KCL schema file")
    parser.add_argument("-o", "--output", help="Output XRD file (stdout if not specified)")
    parser.add_argument(
        "-g",
        "--group",
        help="API group for the XRD (optional if set in the KCL file via __xrd_group)",
    )
    parser.add_argument("-v", "--version", help="API version for the XRD (default: v1alpha1)")
    parser.add_argument(
        "-s",
        "--schema",
        help="Schema to convert (defaults to the @xrd marked schema, __xrd_kind, or the last schema in the file)",
    )
    parser.add_argument("--kind", help="Kind of the composite resource (defaults to the schema name)")
    parser.add_argument(
        "--with-claims",
        action="store_true",
        default=None,
        help="Generate the XRD with claimNames",
    )
    parser.add_argument("--claim-kind", help="Kind for the claim (defaults to the kind without the 'X' prefix)")
    parser.add_argument("--claim-plural", help="Plural for the claim (derived from the claim kind if not given)")
    parser.add_argument(
        "--served",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Mark the version as served (default: true)",
    )
    parser.add_argument(
        "--referenceable",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Mark the version as referenceable (default: true)",
    )
    parser.add_argument("--categories", help="Comma-separated categories for the XRD")
    parser.add_argument(
        "--printer-column",
        action="append",
        dest="printer_columns",
        metavar="NAME:TYPE:JSONPATH[:DESCRIPTION]",
        help="Additional printer column (repeatable)",
    )
    parser.add_argument(
        "--status-preserve-unknown",
        action="store_true",
        default=None,
        help="Emit a status section that preserves unknown fields when no status fields are declared",
    )
    parser.add_argument(
        "--config",
        help="Configuration file (default: .kcl2xrd.yaml next to the input file, if present)",
    )
    parser.add_argument(
        "--kcl-eval",
        action="store_true",
        help="Evaluate the file with the kcl CLI to resolve metadata the scanner cannot",
    )
    parser.add_argument("--verbose", action="store_true", help="Log debug information to stderr")
    return parser


def _run(args: argparse.Namespace) -> int:
    """Convert the input file; return the process exit code."""
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: input file '{input_path}' does not exist.", file=sys.stderr)
        return 1

    try:
        options = _cli_options(args).merged_over(_file_options(args, input_path))
    except (ConfigError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    evaluator = None
    if args.kcl_eval:
        evaluator = KclCliEvaluator()
        if not evaluator.is_available():
            print("Warning: kcl executable not found on PATH, skipping evaluation.", file=sys.stderr)
            evaluator = None

    try:
        result = scan_file(input_path, evaluator=evaluator)
    except ParseError as exc:
        print(f"Error: failed to parse KCL file: {exc}", file=sys.stderr)
        return 1

    try:
        schema = select_schema(result, options.schema_name)
        xrd = generate_xrd(schema, result.schemas, options, result.metadata)
    except GeneratorError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not args.output:
        print(render_yaml(xrd), end="")
        return 0

    output_path = Path(args.output)
    try:
        write_xrd(xrd, output_path)
    except OSError as exc:
        print(f"Error: failed to write output file: {exc}", file=sys.stderr)
        return 1
    print(f"XRD written to {output_path}", file=sys.stderr)
    return 0


def _file_options(args: argparse.Namespace, input_path: Path) -> XRDOptions:
    """Load options from --config or the default config file, if any."""
    if args.config:
        return load_config(Path(args.config))
    config_path = find_config(input_path.resolve().parent)
    if config_path is None:
        return XRDOptions()
    return load_config(config_path)


def _cli_options(args: argparse.Namespace) -> XRDOptions:
    """Build options from the flags that were actually given."""
    categories = None
    if args.categories:
        categories = [c.strip() for c in args.categories.split(",") if c.strip()]
    return XRDOptions(
        group=args.group,
        version=args.version,
        kind=args.kind,
        schema_name=args.schema,
        with_claims=args.with_claims,
        claim_kind=args.claim_kind,
        claim_plural=args.claim_plural,
        served=args.served,
        referenceable=args.referenceable,
        categories=categories,
        printer_columns=_parse_printer_columns(args.printer_columns),
        status_preserve_unknown=args.status_preserve_unknown,
    )


def _parse_printer_columns(specs: list[str] | None) -> list[PrinterColumn] | None:
    if not specs:
        return None
    columns: list[PrinterColumn] = []
    for spec in specs:
        column = parse_printer_column(spec)
        if column is None:
            raise ValueError(f"invalid printer column '{spec}', expected NAME:TYPE:JSONPATH[:DESCRIPTION]")
        columns.append(column)
    return columns
