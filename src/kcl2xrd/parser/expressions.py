# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Conservative resolution of simple KCL string expressions.

Only three forms are understood: a variable bound earlier in the same file, a
quoted literal, and ``"template{}".format(a, b)`` whose arguments are of the
first two forms. Anything else resolves to None so that the caller falls back
to an explicit option instead of a guessed value.
"""

import logging
import re

from kcl2xrd.parser.annotations import split_top_level, unquote

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def resolve_expression(expr: str, variables: dict[str, str]) -> str | None:
    """Resolve *expr* against *variables*.

    Args:
        expr: The right-hand side of an assignment.
        variables: ``name -> literal value`` bindings seen so far.

    Returns:
        The resolved string, or None if any part of the expression cannot be
        bound (unknown names, attribute access, nested calls, placeholder
        count mismatches).
    """
    expr = expr.strip()
    atom = _resolve_atom(expr, variables)
    if atom is not None:
        return atom

    m = _FORMAT_RE.match(expr)
    if m is None:
        logger.debug("Cannot resolve expression %r", expr)
        return None

    template = unquote(m.group("template"))
    if template is None:
        return None

    args: list[str] = []
    for raw in split_top_level(m.group("args")):
        value = _resolve_atom(raw, variables)
        if value is None:
            logger.debug("Cannot resolve format argument %r in %r", raw, expr)
            return None
        args.append(value)

    pieces = template.split("{}")
    if len(pieces) - 1 != len(args):
        logger.debug("Placeholder count mismatch in %r", expr)
        return None
    if any("{" in p or "}" in p for p in pieces):
        return None

    result = pieces[0]
    for value, piece in zip(args, pieces[1:]):
        result += value + piece
    return result


# ################
# Implementation
# ################

_IDENT_RE = re.compile(r"^[A-Za-z_]\w*$")
_FORMAT_RE = re.compile(r"""^(?P<template>(['"]).*?\2)\s*\.format\((?P<args>.*)\)$""")


def _resolve_atom(text: str, variables: dict[str, str]) -> str | None:
    """Resolve a bound name or a quoted literal."""
    text = text.strip()
    literal = unquote(text)
    if literal is not None:
        return literal
    if _IDENT_RE.match(text):
        return variables.get(text)
    return None
