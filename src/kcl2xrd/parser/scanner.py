# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Line-oriented scanner for KCL schema files.

The scanner walks the source once and extracts every ``schema`` block, its
fields and their annotation comments, plus file-level ``__xrd_*`` metadata.
It is deliberately not a KCL parser: each line is classified by an ordered
list of ``(predicate, handler)`` rules, :data:`LINE_RULES`, and all mutable
state lives in one :class:`ScannerState` value.
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from kcl2xrd.model.schema import Field, ParseResult, Schema, XRDMetadata
from kcl2xrd.parser import annotations as ann
from kcl2xrd.parser.expressions import resolve_expression

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

METADATA_PREFIX = "__xrd_"

# Supplies metadata from a real KCL evaluation of the source text. The second
# argument is the file the text came from, or None for in-memory source.
MetadataEvaluator = Callable[[str, Path | None], XRDMetadata | None]


class ParseError(Exception):
    """Raised when a KCL file cannot be scanned."""


class NoSchemaError(ParseError):
    """Raised when the input contains no ``schema`` block at all."""

    def __init__(self) -> None:
        super().__init__("no schema found in file")


class Mode(enum.Enum):
    """Whether the scanner is currently inside a schema body."""

    PRE_SCHEMA = "pre-schema"
    IN_SCHEMA = "in-schema"


@dataclass
class ScannerState:
    """Everything the scanner tracks between lines.

    ``in_block_comment`` is orthogonal to ``mode``: a docstring can be opened
    from either mode and returns to it when closed.
    """

    mode: Mode = Mode.PRE_SCHEMA
    in_block_comment: bool = False
    current_schema: Schema | None = None
    current_field: Field | None = None
    pending_annotations: list[str] = field(default_factory=list)
    pending_comments: list[str] = field(default_factory=list)
    block_lines: list[str] = field(default_factory=list)
    variables: dict[str, str] = field(default_factory=dict)
    schemas: dict[str, Schema] = field(default_factory=dict)
    primary: Schema | None = None
    metadata: XRDMetadata = field(default_factory=XRDMetadata)


def scan(source: str, *, evaluator: MetadataEvaluator | None = None, path: Path | None = None) -> ParseResult:
    """Scan KCL source text into schemas and file metadata.

    Args:
        source: The full text of a ``.k`` file.
        evaluator: Optional callable that evaluates the source with a real KCL
            runtime. Metadata it returns takes precedence over values the
            scanner resolved itself; if it fails, the scanned values are kept.
        path: The file *source* was read from, handed to the evaluator so
            that it can resolve imports relative to it.

    Returns:
        A ParseResult holding every schema, the primary (last) schema and the
        file metadata.

    Raises:
        NoSchemaError: If the source declares no schema.
    """
    state = ScannerState()
    for line in source.splitlines():
        process_line(state, line)
    _finalize_schema(state)

    if state.primary is None:
        raise NoSchemaError()

    metadata = state.metadata
    if evaluator is not None:
        evaluated = _run_evaluator(evaluator, source, path)
        if evaluated is not None:
            metadata = evaluated.merged_over(metadata)

    return ParseResult(schemas=state.schemas, primary=state.primary, metadata=metadata)


def scan_file(path: Path, *, evaluator: MetadataEvaluator | None = None) -> ParseResult:
    """Read *path* and scan it; see :func:`scan`.

    Raises:
        ParseError: If the file cannot be read or contains no schema.
    """
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ParseError(f"Cannot read KCL file '{path}': {exc}") from exc
    return scan(source, evaluator=evaluator, path=path)


def process_line(state: ScannerState, line: str) -> None:
    """Feed one source line through :data:`LINE_RULES`.

    Rules are tried in order; the first handler that consumes the line stops
    the evaluation. A handler may act and still decline the line (the
    indentation-drop rule does), letting later rules see it.
    """
    for predicate, handler in LINE_RULES:
        if predicate(state, line) and handler(state, line):
            return


# ################
# Implementation
# ################

_BLOCK_DELIMITER_RE = re.compile(r"""(?:(?<!\w)[rRuUbB])?(\"\"\"|''')""")
_HEADER_RE = re.compile(r"^\s*schema\s+(?P<name>\w+)\s*(?:\(\s*[\w.]+\s*\))?\s*:\s*$")
_FIELD_RE = re.compile(
    r"^\s*(?P<name>\w+)\s*(?P<optional>\?)?\s*:\s*(?P<type>.+?)(?:\s*=\s*(?P<default>.+))?\s*$"
)
_ASSIGNMENT_RE = re.compile(r"^(?P<name>[A-Za-z_]\w*)\s*(?::\s*[^=]+?)?\s*=\s*(?P<value>[^=].*)$")
_BOOL_VALUES = {"true": True, "false": False}

# Field directives grouped by argument shape: directive name -> Field attribute.
_FIELD_FLAGS = {
    "immutable": "immutable",
    "preserveUnknownFields": "preserve_unknown_fields",
    "itemsPreserveUnknownFields": "items_preserve_unknown_fields",
    "additionalProperties": "additional_properties",
    "status": "is_status",
    "spec": "is_spec",
}
_FIELD_STRINGS = {
    "pattern": "pattern",
    "format": "format",
    "itemsFormat": "items_format",
    "mapType": "map_type",
    "listType": "list_type",
}
_FIELD_INTS = {
    "minLength": "min_length",
    "maxLength": "max_length",
    "minimum": "minimum",
    "maximum": "maximum",
    "minItems": "min_items",
    "maxItems": "max_items",
}
_FIELD_LISTS = {
    "enum": "enum",
    "listMapKeys": "list_map_keys",
}
_GROUPS = {
    "oneOf": "one_of",
    "anyOf": "any_of",
}


def _strip_inline_comment(line: str) -> str:
    """Remove a trailing ``# comment`` that is not inside a string literal."""
    quote: str | None = None
    prev = ""
    for index, ch in enumerate(line):
        if quote is not None:
            if ch == quote and prev != "\\":
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == "#":
            return line[:index].rstrip()
        prev = ch
    return line.rstrip()


# -------- predicates --------


def _is_block_delimiter(state: ScannerState, line: str) -> bool:
    return _BLOCK_DELIMITER_RE.search(line) is not None


def _in_block_comment(state: ScannerState, line: str) -> bool:
    return state.in_block_comment


def _is_blank(state: ScannerState, line: str) -> bool:
    return not line.strip()


def _is_comment(state: ScannerState, line: str) -> bool:
    return line.lstrip().startswith("#")


def _is_indentation_drop(state: ScannerState, line: str) -> bool:
    # Any leading space or tab counts as indentation; only column-0 code ends a schema.
    return state.mode is Mode.IN_SCHEMA and line[:1] not in (" ", "\t") and not _is_comment(state, line)


def _is_top_level_assignment(state: ScannerState, line: str) -> bool:
    return (
        state.mode is Mode.PRE_SCHEMA
        and line[:1] not in (" ", "\t")
        and _ASSIGNMENT_RE.match(_strip_inline_comment(line)) is not None
    )


def _is_schema_header(state: ScannerState, line: str) -> bool:
    return _HEADER_RE.match(_strip_inline_comment(line)) is not None


def _is_field(state: ScannerState, line: str) -> bool:
    return (
        state.mode is Mode.IN_SCHEMA
        and state.current_schema is not None
        and _FIELD_RE.match(_strip_inline_comment(line)) is not None
    )


# -------- handlers --------


def _toggle_block_comment(state: ScannerState, line: str) -> bool:
    stripped = line.strip()
    delimiters = list(_BLOCK_DELIMITER_RE.finditer(stripped))
    if state.in_block_comment:
        _buffer_block_text(state, stripped[: delimiters[0].start()])
        _close_block_comment(state)
    elif len(delimiters) >= 2:
        _buffer_block_text(state, stripped[delimiters[0].end() : delimiters[-1].start()])
        _close_block_comment(state)
    else:
        state.in_block_comment = True
        _buffer_block_text(state, stripped[delimiters[0].end() :])
    return True


def _buffer_block_line(state: ScannerState, line: str) -> bool:
    _buffer_block_text(state, line)
    return True


def _buffer_block_text(state: ScannerState, text: str) -> None:
    text = text.strip()
    if text:
        state.block_lines.append(text)


def _close_block_comment(state: ScannerState) -> None:
    state.in_block_comment = False
    text = " ".join(state.block_lines)
    state.block_lines = []
    if not text:
        return
    if state.current_field is not None:
        state.current_field.description = text
    elif state.current_schema is not None and not state.current_schema.description:
        state.current_schema.description = text


def _handle_blank(state: ScannerState, line: str) -> bool:
    if state.mode is Mode.PRE_SCHEMA:
        state.pending_comments = []
    return True


def _end_schema_block(state: ScannerState, line: str) -> bool:
    _finalize_schema(state)
    state.mode = Mode.PRE_SCHEMA
    state.pending_comments = []
    # The line itself is re-evaluated by the remaining rules.
    return False


def _handle_assignment(state: ScannerState, line: str) -> bool:
    m = _ASSIGNMENT_RE.match(_strip_inline_comment(line))
    assert m is not None
    name, value = m.group("name"), m.group("value").strip()
    if name.startswith(METADATA_PREFIX):
        _apply_metadata(state, name[len(METADATA_PREFIX) :], value)
    else:
        resolved = resolve_expression(value, state.variables)
        if resolved is not None:
            state.variables[name] = resolved
    return True


def _handle_comment(state: ScannerState, line: str) -> bool:
    text = line.strip()[1:].strip()
    if text.startswith("@"):
        state.pending_annotations.append(text)
    elif state.mode is Mode.IN_SCHEMA and text:
        state.pending_comments.append(text)
    return True


def _open_schema(state: ScannerState, line: str) -> bool:
    m = _HEADER_RE.match(_strip_inline_comment(line))
    assert m is not None
    _finalize_schema(state)

    schema = Schema(name=m.group("name"))
    for annotation in state.pending_annotations:
        if ann.match_flag(annotation, "xrd"):
            schema.is_xrd = True
        if ann.match_flag(annotation, "status"):
            schema.is_status = True
        mount = ann.match_string(annotation, "specMount")
        if mount:
            schema.spec_mount_path = mount
        for directive, attribute in _GROUPS.items():
            groups = ann.match_nested_list(annotation, directive)
            if groups is not None:
                setattr(schema, attribute, groups)

    state.current_schema = schema
    state.current_field = None
    state.pending_annotations = []
    state.pending_comments = []
    state.mode = Mode.IN_SCHEMA
    return True


def _add_field(state: ScannerState, line: str) -> bool:
    m = _FIELD_RE.match(_strip_inline_comment(line))
    assert m is not None and state.current_schema is not None

    new_field = Field(
        name=m.group("name"),
        type=m.group("type").strip(),
        required=m.group("optional") is None,
        default=(m.group("default") or "").strip(),
    )
    if state.pending_comments:
        new_field.description = "\n".join(state.pending_comments)
    _apply_field_annotations(new_field, state.pending_annotations)

    state.pending_annotations = []
    state.pending_comments = []
    state.current_schema.fields.append(new_field)
    state.current_field = new_field
    return True


LINE_RULES: tuple[tuple[Callable[[ScannerState, str], bool], Callable[[ScannerState, str], bool]], ...] = (
    (_is_block_delimiter, _toggle_block_comment),
    (_in_block_comment, _buffer_block_line),
    (_is_blank, _handle_blank),
    (_is_indentation_drop, _end_schema_block),
    (_is_top_level_assignment, _handle_assignment),
    (_is_comment, _handle_comment),
    (_is_schema_header, _open_schema),
    (_is_field, _add_field),
)


# -------- helpers --------


def _finalize_schema(state: ScannerState) -> None:
    """Move the open schema, if any, into the schema table."""
    schema = state.current_schema
    if schema is None:
        return
    # A redefinition replaces the earlier schema and moves it to the end.
    state.schemas.pop(schema.name, None)
    state.schemas[schema.name] = schema
    state.primary = schema
    state.current_schema = None
    state.current_field = None


def _apply_field_annotations(target: Field, annotations: list[str]) -> None:
    """Apply buffered annotation lines to *target*; later lines win per directive."""
    for annotation in annotations:
        for directive, attribute in _FIELD_FLAGS.items():
            if ann.match_flag(annotation, directive):
                setattr(target, attribute, True)
        for directive, attribute in _FIELD_STRINGS.items():
            text = ann.match_string(annotation, directive)
            if text is not None:
                setattr(target, attribute, text)
        for directive, attribute in _FIELD_INTS.items():
            number = ann.match_int(annotation, directive)
            if number is not None:
                setattr(target, attribute, number)
        for directive, attribute in _FIELD_LISTS.items():
            values = ann.match_string_list(annotation, directive)
            if values is not None:
                setattr(target, attribute, values)
        for directive, attribute in _GROUPS.items():
            groups = ann.match_nested_list(annotation, directive)
            if groups is not None:
                setattr(target, attribute, groups)
        rule = ann.match_validation(annotation)
        if rule is not None:
            target.validations.append(rule)


def _apply_metadata(state: ScannerState, key: str, value: str) -> None:
    """Store one ``__xrd_<key> = value`` assignment into the file metadata."""
    metadata = state.metadata
    if key in ("kind", "group", "version"):
        resolved = resolve_expression(value, state.variables)
        if resolved is None:
            logger.debug("Leaving __xrd_%s unset: cannot resolve %r", key, value)
            return
        setattr(metadata, key, resolved)
    elif key in ("served", "referenceable", "status_preserve_unknown"):
        flag = _BOOL_VALUES.get(value.lower())
        if flag is None:
            logger.debug("Leaving __xrd_%s unset: %r is not a boolean", key, value)
            return
        setattr(metadata, key, flag)
    elif key == "categories":
        categories = ann.parse_string_list(value)
        if categories is None:
            logger.debug("Leaving __xrd_categories unset: %r is not a list", value)
            return
        metadata.categories = categories
    elif key == "printer_columns":
        specs = ann.parse_string_list(value)
        if specs is None:
            logger.debug("Leaving __xrd_printer_columns unset: %r is not a list", value)
            return
        columns = [ann.parse_printer_column(spec) for spec in specs]
        metadata.printer_columns = [c for c in columns if c is not None]
    else:
        logger.debug("Ignoring unknown metadata variable __xrd_%s", key)


def _run_evaluator(evaluator: MetadataEvaluator, source: str, path: Path | None) -> XRDMetadata | None:
    try:
        return evaluator(source, path)
    except Exception as exc:
        logger.warning("KCL evaluation failed, using scanned metadata: %s", exc)
        return None
