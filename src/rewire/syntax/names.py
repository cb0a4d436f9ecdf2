"""Helpers for reading and building dotted names."""
from __future__ import annotations

from typing import Iterator

import libcst as cst


def render_name(node: cst.CSTNode) -> str | None:
    """Render a ``Name``/``Attribute`` chain as dotted text.

    Returns None for anything that is not a plain dotted name, including
    attribute chains hanging off a call or subscript.
    """
    parts: list[str] = []
    while isinstance(node, cst.Attribute):
        parts.append(node.attr.value)
        node = node.value
    if not isinstance(node, cst.Name):
        return None
    parts.append(node.value)
    return ".".join(reversed(parts))


def build_name(dotted: str) -> cst.Name | cst.Attribute:
    """Build a ``Name`` or ``Attribute`` chain from dotted text."""
    parts = dotted.split(".")
    result: cst.Name | cst.Attribute = cst.Name(parts[0])
    for part in parts[1:]:
        result = cst.Attribute(value=result, attr=cst.Name(part))
    return result


def reference_names(expr: cst.BaseExpression) -> list[cst.Name]:
    """Identifiers along a dotted reference, outermost first.

    ``System.Web.Mvc.HttpStatusCodeResult`` gives the four ``Name`` nodes in
    source order. The walk stops at anything that is not an attribute access,
    so ``make().Foo`` only yields ``Foo`` and the receiver call is not
    inspected.
    """
    names: list[cst.Name] = []
    while isinstance(expr, cst.Attribute):
        names.append(expr.attr)
        expr = expr.value
    if isinstance(expr, cst.Name):
        names.append(expr)
    names.reverse()
    return names


def iter_names(node: cst.CSTNode) -> Iterator[cst.Name]:
    """Yield every ``Name`` in the subtree rooted at ``node``, pre-order."""
    if isinstance(node, cst.Name):
        yield node
    for child in node.children:
        yield from iter_names(child)
