"""Batch fix application for a single document.

All fixes of a batch are applied in one transformer pass over the tree.
Targets are keyed by node identity, so replacing one subtree never disturbs
how another target is found, and the outcome does not depend on the order in
which diagnostics were submitted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

import libcst as cst

from rewire.core.cancellation import CancellationToken
from rewire.core.errors import HostContractError, StaleMatchError
from rewire.rules.base import Diagnostic, MigrationRule
from rewire.rules.registry import RuleRegistry
from rewire.syntax.document import Document

logger = logging.getLogger(__name__)


@dataclass
class FixOutcome:
    """Result of applying a batch of fixes to one document.

    Attributes
    ----------
    document : Document
        The document after the batch. The input document when nothing
        was applied.
    fixed : list[Diagnostic]
        Diagnostics whose fix was applied, in span order.
    skipped : list[tuple[Diagnostic, str]]
        Diagnostics left unfixed, with the reason.
    cancelled : bool
        True if the batch stopped early on a cancellation request.
    """

    document: Document
    fixed: list[Diagnostic] = field(default_factory=list)
    skipped: list[tuple[Diagnostic, str]] = field(default_factory=list)
    cancelled: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.fixed)

    def is_fixed(self, diagnostic: Diagnostic) -> bool:
        return diagnostic in self.fixed

    def __bool__(self) -> bool:
        return self.changed


class _BatchFixTransformer(cst.CSTTransformer):
    """Replace every planned node on the way back up the tree.

    The paired matcher is re-run on the updated node first, so a target whose
    children were rewritten earlier in the same pass is validated against
    what it is now, not what it was.
    """

    def __init__(
        self,
        plan: dict[cst.CSTNode, list[tuple[Diagnostic, MigrationRule]]],
        cancellation: CancellationToken | None,
    ) -> None:
        super().__init__()
        self.plan = plan
        self.cancellation = cancellation
        self.fixed: list[Diagnostic] = []
        self.skipped: list[tuple[Diagnostic, str]] = []
        self.cancelled = False

    def on_leave(
        self, original_node: cst.CSTNode, updated_node: cst.CSTNode
    ) -> cst.CSTNode:
        entries = self.plan.get(original_node)
        if not entries:
            return updated_node

        for diagnostic, rule in entries:
            if self.cancellation is not None and self.cancellation.cancelled:
                self.cancelled = True
                self.skipped.append((diagnostic, "cancelled"))
                continue
            match = rule.matcher.match(updated_node)
            if not match:
                self._skip(diagnostic, "node no longer matches the rule")
                continue
            try:
                updated_node = rule.rewriter.rewrite(updated_node, match)
            except StaleMatchError as e:
                self._skip(diagnostic, f"stale match: {e}")
                continue
            self.fixed.append(diagnostic)
        return updated_node

    def _skip(self, diagnostic: Diagnostic, reason: str) -> None:
        logger.info("Skipping %s at %s: %s", diagnostic.rule_id, diagnostic.span, reason)
        self.skipped.append((diagnostic, reason))


class FixApplier:
    """Apply the rewriters of reported diagnostics to a document.

    Each diagnostic is resolved against the *current* tree, first by the
    node captured when it was reported, then by its exact span. Fixes that
    cannot be resolved, no longer match, or hit a stale match are skipped;
    partial success is a normal outcome and never raises.

    When one target lies inside another, only the enclosing fix is applied;
    the inner one would be discarded along with the outer node's arguments.

    Parameters
    ----------
    registry : RuleRegistry
        Rules whose rewriters may be applied.
    verify_output : bool
        Re-parse the fixed source and reject the whole batch if it would not
        parse.

    Examples
    --------
    >>> walk = Walker(registry).walk(document)
    >>> outcome = FixApplier(registry).apply(document, walk.diagnostics)
    >>> outcome.document.code
    """

    def __init__(self, registry: RuleRegistry, verify_output: bool = True) -> None:
        if registry is None:
            raise HostContractError("FixApplier needs a RuleRegistry")
        self.registry = registry
        self.verify_output = verify_output

    def apply_one(
        self,
        document: Document,
        diagnostic: Diagnostic,
        cancellation: CancellationToken | None = None,
    ) -> FixOutcome:
        """Fix a single diagnostic."""
        if diagnostic is None:
            raise HostContractError("apply_one() needs a Diagnostic")
        return self.apply(document, [diagnostic], cancellation)

    def apply(
        self,
        document: Document,
        diagnostics: Iterable[Diagnostic],
        cancellation: CancellationToken | None = None,
    ) -> FixOutcome:
        """Fix a batch of diagnostics in one pass.

        Parameters
        ----------
        document : Document
            The document as it is now.
        diagnostics : Iterable[Diagnostic]
            Diagnostics previously reported for this document; the full set
            ("fix all") or any subset.
        cancellation : CancellationToken | None
            Checked between diagnostics and before every rewrite.

        Returns
        -------
        FixOutcome
            The new document and which fixes went in.

        Raises
        ------
        HostContractError
            If ``document`` or ``diagnostics`` is None.
        """
        if document is None:
            raise HostContractError("apply() needs a Document")
        if diagnostics is None:
            raise HostContractError("apply() needs a collection of diagnostics")

        ordered = sorted(set(diagnostics), key=lambda d: d.sort_key)
        outcome = FixOutcome(document)
        resolved: list[tuple[Diagnostic, MigrationRule, cst.CSTNode]] = []

        for index, diagnostic in enumerate(ordered):
            if cancellation is not None and cancellation.cancelled:
                outcome.cancelled = True
                outcome.skipped.extend((d, "cancelled") for d in ordered[index:])
                break
            rule, node, reason = self._resolve(document, diagnostic)
            if node is None:
                self._skip(outcome, diagnostic, reason)
                continue
            resolved.append((diagnostic, rule, node))

        # a fix nested in another fix's target would be rewritten away by it
        spans = [document.span_of(node) for _, _, node in resolved]
        plan: dict[cst.CSTNode, list[tuple[Diagnostic, MigrationRule]]] = {}
        for (diagnostic, rule, node), span in zip(resolved, spans):
            if any(other.encloses(span) for other in spans):
                self._skip(outcome, diagnostic, "covered by enclosing fix")
                continue
            plan.setdefault(node, []).append((diagnostic, rule))

        if not plan:
            return self._sorted(outcome)

        transformer = _BatchFixTransformer(plan, cancellation)
        module = document.module.visit(transformer)
        outcome.skipped.extend(transformer.skipped)
        outcome.cancelled = outcome.cancelled or transformer.cancelled

        if not transformer.fixed:
            return self._sorted(outcome)

        if self.verify_output and not self._parses(module, document):
            outcome.skipped.extend(
                (d, "fix output does not parse") for d in transformer.fixed
            )
            return self._sorted(outcome)

        outcome.document = document.with_module(module)
        outcome.fixed = sorted(transformer.fixed, key=lambda d: d.sort_key)
        logger.debug(
            "Fixed %d of %d diagnostics in %s",
            len(outcome.fixed),
            len(ordered),
            document.uri,
        )
        return self._sorted(outcome)

    def _resolve(
        self, document: Document, diagnostic: Diagnostic
    ) -> tuple[MigrationRule | None, cst.CSTNode | None, str]:
        """Find the rule and current node a diagnostic refers to."""
        rule = self.registry.get(diagnostic.rule_id)
        if rule is None:
            return None, None, f"unknown rule {diagnostic.rule_id}"
        if not rule.fixable:
            return rule, None, f"rule {rule.id} has no fix"
        if diagnostic.span.document != document.uri:
            return rule, None, f"diagnostic belongs to {diagnostic.span.document}"

        if diagnostic.node is not None and document.contains(diagnostic.node):
            return rule, diagnostic.node, ""
        node = document.node_at(diagnostic.span, rule.kinds)
        if node is None:
            return rule, None, "node no longer present"
        return rule, node, ""

    @staticmethod
    def _skip(outcome: FixOutcome, diagnostic: Diagnostic, reason: str) -> None:
        logger.info("Skipping %s at %s: %s", diagnostic.rule_id, diagnostic.span, reason)
        outcome.skipped.append((diagnostic, reason))

    @staticmethod
    def _parses(module: cst.Module, document: Document) -> bool:
        try:
            cst.parse_module(module.code)
        except cst.ParserSyntaxError as e:
            logger.warning("Discarding fixes for %s, output does not parse: %s", document.uri, e)
            return False
        return True

    @staticmethod
    def _sorted(outcome: FixOutcome) -> FixOutcome:
        outcome.skipped.sort(key=lambda entry: entry[0].sort_key)
        return outcome
