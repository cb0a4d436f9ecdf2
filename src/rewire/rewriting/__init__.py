"""Rewriters producing replacement subtrees for matched nodes."""
from __future__ import annotations

from .rewriters import DEFAULT_KEY, ConstructorRewriter, DirectiveRewriter, Rewriter

__all__ = [
    "DEFAULT_KEY",
    "ConstructorRewriter",
    "DirectiveRewriter",
    "Rewriter",
]
