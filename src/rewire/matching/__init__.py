"""Structural pattern matchers."""
from __future__ import annotations

from .matchers import (
    ConstructorArgumentMatcher,
    DirectiveNameMatcher,
    Matcher,
    MatchResult,
    MatchStatus,
)

__all__ = [
    "ConstructorArgumentMatcher",
    "DirectiveNameMatcher",
    "MatchResult",
    "MatchStatus",
    "Matcher",
]
