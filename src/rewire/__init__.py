"""
Rewire - rule-based migration of obsolete API usage.

Rules find syntactic patterns of obsolete API use in LibCST trees and rewrite
them to the modern equivalent, keeping every byte of formatting outside the
rewritten nodes.

Example
-------
>>> from rewire import Document, MigrationEngine
>>>
>>> engine = MigrationEngine()
>>> document = Document.from_source(source, "controllers.py")
>>>
>>> # Report obsolete usage
>>> for diagnostic in engine.analyze(document):
...     print(diagnostic)
>>>
>>> # Fix everything that was found
>>> outcome = engine.fix(document)
>>> print(outcome.document.code)

Classes
-------
MigrationEngine
    Entry point: analyze, fix and migrate source.

Walker
    Runs rule matchers over a document and reports diagnostics.

FixApplier
    Applies the rewriters of a batch of diagnostics in one pass.

MigrationRule
    Binds a matcher and rewriter to a diagnostic identity.

RuleRegistry
    Read-only rule table; ``default_registry()`` holds the built-in rules.

Document
    A parsed module plus its identity and position metadata.

Result
    Result class for source-level operations. Contains success status,
    message, and the migrated source and diff.
"""
from __future__ import annotations

import logging

from rewire.core.cancellation import CancellationToken
from rewire.core.config import EngineConfig, load_config
from rewire.core.errors import ConfigError, HostContractError, RewireError, StaleMatchError
from rewire.core.results import BatchResult, ErrorResult, Result
from rewire.engine.fixer import FixApplier, FixOutcome
from rewire.engine.migrator import MigrationEngine
from rewire.engine.reporter import CollectingReporter, DiagnosticReporter
from rewire.engine.walker import Walker, WalkResult
from rewire.matching.matchers import (
    ConstructorArgumentMatcher,
    DirectiveNameMatcher,
    Matcher,
    MatchResult,
    MatchStatus,
)
from rewire.rewriting.rewriters import ConstructorRewriter, DirectiveRewriter, Rewriter
from rewire.rules.base import Diagnostic, MigrationRule, Severity
from rewire.rules.registry import RuleRegistry, default_registry
from rewire.syntax.document import Document, SourceSpan
from rewire.syntax.kinds import NodeKind, kind_of

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "BatchResult",
    "CancellationToken",
    "CollectingReporter",
    "ConfigError",
    "ConstructorArgumentMatcher",
    "ConstructorRewriter",
    "Diagnostic",
    "DiagnosticReporter",
    "DirectiveNameMatcher",
    "DirectiveRewriter",
    "Document",
    "EngineConfig",
    "ErrorResult",
    "FixApplier",
    "FixOutcome",
    "HostContractError",
    "MatchResult",
    "MatchStatus",
    "Matcher",
    "MigrationEngine",
    "MigrationRule",
    "NodeKind",
    "Result",
    "Rewriter",
    "RewireError",
    "RuleRegistry",
    "Severity",
    "SourceSpan",
    "StaleMatchError",
    "WalkResult",
    "Walker",
    "default_registry",
    "kind_of",
    "load_config",
]
