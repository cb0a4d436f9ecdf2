"""Closed enumeration of the node kinds rules can listen on."""
from __future__ import annotations

from enum import Enum

import libcst as cst


class NodeKind(Enum):
    """Kinds of syntax node the engine dispatches on.

    Every LibCST node type maps to exactly one kind; types with no special
    meaning for migration rules map to ``OTHER``.
    """

    DIRECTIVE = "directive"
    OBJECT_CREATION = "object_creation"
    IDENTIFIER = "identifier"
    QUALIFIED_NAME = "qualified_name"
    ARGUMENT = "argument"
    OTHER = "other"


_KIND_BY_TYPE: dict[type[cst.CSTNode], NodeKind] = {
    cst.Import: NodeKind.DIRECTIVE,
    cst.ImportFrom: NodeKind.DIRECTIVE,
    cst.Call: NodeKind.OBJECT_CREATION,
    cst.Name: NodeKind.IDENTIFIER,
    cst.Attribute: NodeKind.QUALIFIED_NAME,
    cst.Arg: NodeKind.ARGUMENT,
}


def kind_of(node: cst.CSTNode) -> NodeKind:
    """Return the kind of ``node`` (exact type lookup, no subclass checks)."""
    return _KIND_BY_TYPE.get(type(node), NodeKind.OTHER)
