# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Metadata evaluation through the ``kcl`` command-line tool.

Running the file with the real KCL runtime resolves ``__xrd_*`` values the
scanner cannot, such as ones built from imported settings. The evaluator is
strictly optional: any failure yields None and the scanner keeps the values
it resolved itself.
"""

import json
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any

from kcl2xrd.model.schema import XRDMetadata
from kcl2xrd.parser.annotations import parse_printer_column

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class EvaluatorError(Exception):
    """Raised when the kcl executable cannot be run or returns unusable output."""


class KclCliEvaluator:
    """Evaluate KCL source with ``kcl run`` and extract ``__xrd_*`` variables.

    Instances are callables usable as the scanner's ``evaluator`` argument.
    When the file's path is known it is run in place, from its own
    directory, so imports of sibling modules and the package's ``kcl.mod``
    resolve. Source without a path, and the import-free retry, run from a
    temporary copy.

    Args:
        executable: Name or path of the kcl binary.
        timeout: Seconds before a single ``kcl run`` is abandoned.
    """

    def __init__(self, executable: str = "kcl", *, timeout: int = 30) -> None:
        self.executable = executable
        self.timeout = timeout

    def is_available(self) -> bool:
        """Return True if the kcl executable is on PATH."""
        return shutil.which(self.executable) is not None

    def __call__(self, source: str, path: Path | None = None) -> XRDMetadata | None:
        try:
            values = self._evaluate_file(path) if path is not None else self._evaluate_source(source)
        except EvaluatorError as first:
            # Unresolvable imports are the usual cause; retry without them.
            stripped = strip_imports(source)
            if stripped == source:
                logger.debug("kcl evaluation failed: %s", first)
                return None
            try:
                values = self._evaluate_source(stripped)
            except EvaluatorError as exc:
                logger.debug("kcl evaluation without imports failed: %s", exc)
                return None
        return metadata_from_values(values)

    def _evaluate_file(self, path: Path) -> dict[str, Any]:
        output = _run_kcl(self._command(path.name), timeout=self.timeout, cwd=path.parent)
        return _parse_output(output)

    def _evaluate_source(self, source: str) -> dict[str, Any]:
        with tempfile.TemporaryDirectory(prefix="kcl2xrd-") as tmp:
            path = Path(tmp) / "main.k"
            path.write_text(source, encoding="utf-8")
            output = _run_kcl(self._command(str(path)), timeout=self.timeout)
        return _parse_output(output)

    def _command(self, target: str) -> list[str]:
        return [self.executable, "run", target, "--format", "json", "-H"]


def strip_imports(source: str) -> str:
    """Return *source* without its ``import`` statements."""
    return "".join(line for line in source.splitlines(keepends=True) if not line.strip().startswith("import "))


def metadata_from_values(values: dict[str, Any]) -> XRDMetadata:
    """Build XRDMetadata from evaluated top-level KCL values; wrong types are skipped."""
    metadata = XRDMetadata()
    for key in ("kind", "group", "version"):
        value = values.get(f"__xrd_{key}")
        if isinstance(value, str) and value:
            setattr(metadata, key, value)
    for key in ("served", "referenceable", "status_preserve_unknown"):
        value = values.get(f"__xrd_{key}")
        if isinstance(value, bool):
            setattr(metadata, key, value)
    categories = values.get("__xrd_categories")
    if isinstance(categories, list):
        metadata.categories = [c for c in categories if isinstance(c, str)]
    columns = values.get("__xrd_printer_columns")
    if isinstance(columns, list):
        parsed = [parse_printer_column(c) for c in columns if isinstance(c, str)]
        metadata.printer_columns = [c for c in parsed if c is not None]
    return metadata


# ################
# Implementation
# ################


def _run_kcl(args: list[str], *, timeout: int, cwd: Path | None = None) -> str:
    """Run kcl, from *cwd* when given, and return stdout.

    Raises:
        EvaluatorError: If kcl is missing, times out, or exits with a non-zero code.
    """
    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=timeout, cwd=cwd)
    except FileNotFoundError as exc:
        raise EvaluatorError(f"{args[0]} executable not found on PATH") from exc
    except subprocess.TimeoutExpired as exc:
        raise EvaluatorError(f"kcl run timed out after {timeout}s") from exc
    if result.returncode != 0:
        raise EvaluatorError(f"kcl run failed: {result.stderr.strip()}")
    return result.stdout


def _parse_output(output: str) -> dict[str, Any]:
    try:
        values = json.loads(output) if output.strip() else {}
    except json.JSONDecodeError as exc:
        raise EvaluatorError(f"kcl returned invalid JSON: {exc}") from exc
    if not isinstance(values, dict):
        raise EvaluatorError("kcl output is not a mapping")
    return values
