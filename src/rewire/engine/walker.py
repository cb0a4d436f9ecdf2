"""Rule-driven traversal of a document."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import libcst as cst

from rewire.core.cancellation import CancellationToken
from rewire.core.errors import HostContractError
from rewire.engine.reporter import CollectingReporter, DiagnosticReporter
from rewire.matching.matchers import MatchStatus
from rewire.rules.base import Diagnostic, MigrationRule
from rewire.rules.registry import RuleRegistry
from rewire.syntax.document import Document, SourceSpan
from rewire.syntax.kinds import kind_of

logger = logging.getLogger(__name__)


@dataclass
class WalkResult:
    """Everything a walk over one document found.

    Attributes
    ----------
    document : Document
        The document that was walked.
    diagnostics : list[Diagnostic]
        Matches, ordered by span.
    malformed : list[tuple[SourceSpan | None, str]]
        Nodes a matcher rejected as malformed, with the reason.
    visited : int
        Number of nodes visited.
    cancelled : bool
        True if the walk stopped early on a cancellation request.
    """

    document: Document
    diagnostics: list[Diagnostic] = field(default_factory=list)
    malformed: list[tuple[SourceSpan | None, str]] = field(default_factory=list)
    visited: int = 0
    cancelled: bool = False

    def __bool__(self) -> bool:
        return len(self.diagnostics) > 0

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self):
        return iter(self.diagnostics)


class _RuleVisitor(cst.CSTVisitor):
    """Pre-order visitor running every rule registered for a node's kind."""

    def __init__(self, walk: _Walk) -> None:
        super().__init__()
        self._walk = walk
        self.visited = 0

    def on_visit(self, node: cst.CSTNode) -> bool:
        if self._walk.cancelled:
            return False
        self.visited += 1
        for rule in self._walk.registry.for_kind(kind_of(node)):
            self._walk.run_rule(rule, node)
        return True


class _Walk:
    """State shared by the visitors of one walk."""

    def __init__(
        self,
        registry: RuleRegistry,
        document: Document,
        reporter: DiagnosticReporter | None,
        cancellation: CancellationToken | None,
    ) -> None:
        self.registry = registry
        self.document = document
        self.collector = CollectingReporter()
        self.reporter = reporter
        self.cancellation = cancellation
        self.malformed: list[tuple[SourceSpan | None, str]] = []
        self._malformed_lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self.cancellation is not None and self.cancellation.cancelled

    def run_rule(self, rule: MigrationRule, node: cst.CSTNode) -> None:
        result = rule.matcher.match(node)
        if result.status is MatchStatus.MATCHED:
            diagnostic = Diagnostic(
                rule_id=rule.id,
                title=rule.title,
                message=rule.format_message(self.document.code_for(node)),
                span=self.document.span_of(node),
                severity=rule.severity,
                node=node,
                fields=result.fields,
            )
            self.collector.report(diagnostic)
            if self.reporter is not None:
                self.reporter.report(diagnostic)
        elif result.status is MatchStatus.MALFORMED:
            span = self.document.span_of(node)
            logger.warning(
                "%s: %s left malformed %s untouched: %s",
                span or self.document.uri,
                rule.id,
                type(node).__name__,
                result.reason,
            )
            with self._malformed_lock:
                self.malformed.append((span, result.reason))


class Walker:
    """Single-pass, depth-first, pre-order rule runner.

    Every node is visited exactly once. For each node, every rule listening
    on the node's kind runs its matcher, and each match is reported as a
    :class:`Diagnostic` spanning exactly the matched node.

    Parameters
    ----------
    registry : RuleRegistry
        Rules to run.
    max_workers : int
        With more than one worker, the module's top-level children are
        walked concurrently. Diagnostics merge through a thread-safe sink.

    Examples
    --------
    >>> walker = Walker(default_registry())
    >>> result = walker.walk(Document.from_source("import PagedList\\n"))
    >>> [d.rule_id for d in result]
    ['GCP0002']
    """

    def __init__(self, registry: RuleRegistry, max_workers: int = 1) -> None:
        if registry is None:
            raise HostContractError("Walker needs a RuleRegistry")
        if max_workers < 1:
            raise HostContractError(f"max_workers must be at least 1, got {max_workers}")
        self.registry = registry
        self.max_workers = max_workers

    def walk(
        self,
        document: Document,
        reporter: DiagnosticReporter | None = None,
        cancellation: CancellationToken | None = None,
    ) -> WalkResult:
        """Walk ``document`` and report every match.

        Parameters
        ----------
        document : Document
            The document to walk.
        reporter : DiagnosticReporter | None
            External sink receiving each diagnostic as it is found.
        cancellation : CancellationToken | None
            Checked before every node visit.

        Returns
        -------
        WalkResult
            Diagnostics (sorted by span), malformed nodes, and counters.

        Raises
        ------
        HostContractError
            If ``document`` is None.
        """
        if document is None:
            raise HostContractError("walk() needs a Document")
        if len(self.registry) == 0:
            return WalkResult(document)

        walk = _Walk(self.registry, document, reporter, cancellation)
        document.resolve_positions()

        if self.max_workers == 1:
            visited = self._visit(walk, document.module)
        else:
            visited = self._visit_concurrently(walk, document.module)

        result = WalkResult(
            document=document,
            diagnostics=walk.collector.sorted(),
            malformed=walk.malformed,
            visited=visited,
            cancelled=walk.cancelled,
        )
        logger.debug(
            "Walked %s: %d nodes, %d diagnostics%s",
            document.uri,
            result.visited,
            len(result.diagnostics),
            " (cancelled)" if result.cancelled else "",
        )
        return result

    @staticmethod
    def _visit(walk: _Walk, node: cst.CSTNode) -> int:
        visitor = _RuleVisitor(walk)
        node.visit(visitor)
        return visitor.visited

    def _visit_concurrently(self, walk: _Walk, module: cst.Module) -> int:
        # the module node itself, then each top-level subtree on the pool
        if walk.cancelled:
            return 0
        visited = 1
        for rule in self.registry.for_kind(kind_of(module)):
            walk.run_rule(rule, module)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self._visit, walk, child) for child in module.children]
            for future in futures:
                visited += future.result()
        return visited
