"""Outcome values for migrating source text.

- Result - one document migrated (or left alone)
- ErrorResult - one document that could not be migrated
- BatchResult - several documents migrated together
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from rewire.core.diff import combine_diffs


@dataclass
class Result:
    """Outcome of migrating one document.

    Bad input source is reported here rather than raised.

    Attributes:
        success: False only when the document could not be processed
        message: Summary of what was migrated
        documents_changed: Identity of the document, if it was rewritten
        data: The migrated source (the input source when nothing changed)
        diff: Unified diff of the migration, None when nothing changed
        diffs: The same diff keyed by document identity
        migrated: Number of fixes applied
        skipped: Number of diagnostics left unfixed
    """

    success: bool
    message: str
    documents_changed: list[str] = field(default_factory=list)
    data: Any = None
    diff: str | None = None
    diffs: dict[str, str] = field(default_factory=dict)
    migrated: int = 0
    skipped: int = 0

    def __bool__(self) -> bool:
        return self.success

    def get_diff(self, document: str | None = None) -> str | None:
        """Diff of ``document``, or the whole diff when no document is named."""
        if document is None:
            return self.diff
        return self.diffs.get(document)


@dataclass
class ErrorResult(Result):
    """A document that could not be migrated, typically because it does not parse.

    Attributes:
        exception: The parser error (or other cause)
        operation: Engine operation that failed
        target_repr: Identity of the document
    """

    success: bool = field(default=False, init=False)
    exception: Exception | None = None
    operation: str = ""
    target_repr: str = ""


@dataclass
class BatchResult:
    """Per-document results of one migration run, in document order."""

    results: list[Result] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no document failed."""
        return all(r.success for r in self.results)

    @property
    def partial_success(self) -> bool:
        return any(r.success for r in self.results)

    @property
    def failed(self) -> list[Result]:
        return [r for r in self.results if not r.success]

    @property
    def migrated(self) -> int:
        """Fixes applied across every document."""
        return sum(r.migrated for r in self.results)

    @property
    def documents_changed(self) -> list[str]:
        return sorted({doc for r in self.results for doc in r.documents_changed})

    @property
    def diffs(self) -> dict[str, str]:
        merged: dict[str, str] = {}
        for r in self.results:
            merged.update(r.diffs)
        return merged

    @property
    def diff(self) -> str | None:
        """All per-document diffs joined in document order."""
        merged = self.diffs
        return combine_diffs(merged) if merged else None

    def __bool__(self) -> bool:
        return self.success

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[Result]:
        return iter(self.results)
