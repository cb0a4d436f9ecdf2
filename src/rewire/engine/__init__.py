"""Walking documents, collecting diagnostics and applying fixes."""
from __future__ import annotations

from .fixer import FixApplier, FixOutcome
from .migrator import MigrationEngine
from .reporter import CollectingReporter, DiagnosticReporter
from .walker import Walker, WalkResult

__all__ = [
    "CollectingReporter",
    "DiagnosticReporter",
    "FixApplier",
    "FixOutcome",
    "MigrationEngine",
    "WalkResult",
    "Walker",
]
