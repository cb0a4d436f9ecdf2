"""Syntax tree model: node kinds, documents, spans and name helpers.

Trees are LibCST modules. Nodes are immutable; editing a tree means building
replacement nodes and substituting them, never mutating in place.
"""
from __future__ import annotations

from .document import Document, SourceSpan
from .kinds import NodeKind, kind_of
from .names import build_name, iter_names, reference_names, render_name

__all__ = [
    "Document",
    "NodeKind",
    "SourceSpan",
    "build_name",
    "iter_names",
    "kind_of",
    "reference_names",
    "render_name",
]
