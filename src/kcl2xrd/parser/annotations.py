# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Matchers for ``@directive(args)`` annotation comments.

Every matcher takes one annotation line and a directive name and returns the
extracted value, or ``None`` when the line does not carry that directive in
the expected shape. A mismatch is never an error: several directives are
checked against the same line independently.
"""

from __future__ import annotations

import functools
import logging
import re

from kcl2xrd.model.schema import PrinterColumn, ValidationRule

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def match_flag(line: str, name: str) -> bool:
    """Return True if *line* starts with the directive ``@name`` (with or without arguments).

    Only the leading directive counts, so an ``@name`` inside another
    directive's arguments is not a match.
    """
    return _flag_regex(name).match(line.strip()) is not None


def match_args(line: str, name: str) -> str | None:
    """Return the raw text between the parentheses of ``@name(...)``, or None."""
    m = _args_regex(name).match(line.strip())
    if m is None:
        return None
    return m.group("args").strip()


def match_string(line: str, name: str) -> str | None:
    """Match ``@name("value")`` or ``@name('value')`` and return the unquoted value."""
    args = match_args(line, name)
    if args is None:
        return None
    return unquote(args)


def match_int(line: str, name: str) -> int | None:
    """Match ``@name(number)`` and return the integer.

    Malformed numbers (``@minLength(abc)``, ``@minLength(1.5)``) yield None.
    """
    args = match_args(line, name)
    if args is None:
        return None
    if not _INT_RE.match(args):
        logger.debug("Ignoring @%s with non-integer argument %r", name, args)
        return None
    return int(args)


def match_string_list(line: str, name: str) -> list[str] | None:
    """Match ``@name(["a", "b"])`` and return the list of strings."""
    args = match_args(line, name)
    if args is None:
        return None
    return parse_string_list(args)


def match_nested_list(line: str, name: str) -> list[list[str]] | None:
    """Match ``@name([["a", "b"], ["c"]])`` and return the list of string lists."""
    args = match_args(line, name)
    if args is None:
        return None
    inner = _strip_brackets(args)
    if inner is None:
        return None
    groups: list[list[str]] = []
    for part in split_top_level(inner):
        group = parse_string_list(part)
        if group is None:
            logger.debug("Ignoring @%s with malformed group %r", name, part)
            return None
        groups.append(group)
    return groups


def match_validation(line: str) -> ValidationRule | None:
    """Match ``@validate("rule")`` or ``@validate("rule", "message")``."""
    args = match_args(line, "validate")
    if args is None:
        return None
    parts = split_top_level(args)
    if not 1 <= len(parts) <= 2:
        return None
    rule = unquote(parts[0])
    if rule is None:
        return None
    message = unquote(parts[1]) if len(parts) == 2 else None
    return ValidationRule(rule=rule, message=message or None)


def unquote(text: str) -> str | None:
    """Return the content of a single- or double-quoted literal, or None."""
    m = _QUOTED_RE.match(text.strip())
    if m is None:
        return None
    quote = m.group("quote")
    return m.group("body").replace("\\" + quote, quote)


def parse_string_list(text: str) -> list[str] | None:
    """Parse ``["a", 'b', c]`` into ``["a", "b", "c"]``; None if not a list literal."""
    inner = _strip_brackets(text)
    if inner is None:
        return None
    items: list[str] = []
    for part in split_top_level(inner):
        value = unquote(part)
        items.append(value if value is not None else part.strip())
    return items


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split *text* on *separator* where it is outside quotes and brackets.

    Quote state is tracked character by character; a quote preceded by a
    backslash does not open or close a string. Empty pieces are dropped.
    """
    parts: list[str] = []
    current: list[str] = []
    quote: str | None = None
    depth = 0
    prev = ""
    for ch in text:
        if quote is not None:
            if ch == quote and prev != "\\":
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch in "[{(":
            depth += 1
        elif ch in "]})":
            depth -= 1
        elif ch == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            prev = ch
            continue
        current.append(ch)
        prev = ch
    parts.append("".join(current).strip())
    return [p for p in parts if p]


def parse_printer_column(spec: str) -> PrinterColumn | None:
    """Parse ``"Name:type:.json.path[:description]"`` into a PrinterColumn.

    Fewer than three colon-separated parts yields None. The description keeps
    any further colons.
    """
    parts = spec.strip().split(":", 3)
    if len(parts) < 3 or not all(p.strip() for p in parts[:3]):
        return None
    description = parts[3].strip() if len(parts) == 4 else None
    return PrinterColumn(
        name=parts[0].strip(),
        type=parts[1].strip(),
        json_path=parts[2].strip(),
        description=description or None,
    )


# ################
# Implementation
# ################

_INT_RE = re.compile(r"^[+-]?\d+$")
_QUOTED_RE = re.compile(r"^(?P<quote>['\"])(?P<body>(?:\\.|(?!(?P=quote)).)*)(?P=quote)$", re.DOTALL)


@functools.lru_cache(maxsize=None)
def _flag_regex(name: str) -> re.Pattern[str]:
    return re.compile(rf"@{re.escape(name)}(?![\w])")


@functools.lru_cache(maxsize=None)
def _args_regex(name: str) -> re.Pattern[str]:
    # Greedy up to the last closing parenthesis so patterns may contain parentheses.
    return re.compile(rf"@{re.escape(name)}\s*\((?P<args>.*)\)")


def _strip_brackets(text: str) -> str | None:
    text = text.strip()
    if len(text) < 2 or text[0] != "[" or text[-1] != "]":
        return None
    return text[1:-1]
