"""
Tests for rewire.engine.fixer module.

This module tests batch fix application:
- Fix-all produces the fully migrated document
- Fixes are idempotent and independent of submission order
- Diagnostics that cannot be resolved are skipped, never raised
- Output that would not parse is rejected as a batch
"""
from __future__ import annotations

import dataclasses
import logging

import libcst as cst
import pytest

from rewire.core.cancellation import CancellationToken
from rewire.core.errors import HostContractError
from rewire.engine.fixer import FixApplier
from rewire.engine.walker import Walker
from rewire.rewriting.rewriters import Rewriter
from rewire.rules.aspnet import HTTP_STATUS_CODE_RESULT_RULE, PAGED_LIST_RULE
from rewire.rules.registry import RuleRegistry
from rewire.syntax.document import Document


class _KeywordRewriter(Rewriter):
    """Replaces any node with a bare keyword, which never parses."""

    def rewrite(self, node, match):
        return cst.Name("import")


def _rename_import(document: Document, name: str) -> Document:
    """Rename the first import of ``document`` without going through a rule."""
    import_node = document.module.body[0].body[0]
    alias = import_node.names[0]
    replacement = import_node.with_changes(names=[alias.with_changes(name=cst.Name(name))])
    return document.with_module(document.module.deep_replace(import_node, replacement))


@pytest.fixture
def diagnostics(walker, controller_document):
    return walker.walk(controller_document).diagnostics


# =============================================================================
# Fix-all Tests
# =============================================================================

class TestFixAll:
    """Tests for fixing every diagnostic of a document."""

    def test_fix_all(self, fixer, controller_document, diagnostics, migrated_controller_code):
        outcome = fixer.apply(controller_document, diagnostics)

        assert outcome.changed
        assert outcome.document.code == migrated_controller_code
        assert outcome.fixed == diagnostics
        assert outcome.skipped == []
        assert outcome.document.uri == "controllers.py"

    def test_input_document_untouched(self, fixer, controller_document, diagnostics, sample_controller_code):
        fixer.apply(controller_document, diagnostics)

        assert controller_document.code == sample_controller_code

    def test_idempotent(self, fixer, walker, controller_document, diagnostics):
        """Fixed output reports nothing on a second walk."""
        outcome = fixer.apply(controller_document, diagnostics)

        assert len(walker.walk(outcome.document)) == 0

    def test_order_independent(self, fixer, controller_document, diagnostics):
        forward = fixer.apply(controller_document, diagnostics)
        backward = fixer.apply(controller_document, list(reversed(diagnostics)))

        assert forward.document.code == backward.document.code
        assert forward.fixed == backward.fixed

    def test_duplicates_fixed_once(self, fixer, controller_document, diagnostics, migrated_controller_code):
        outcome = fixer.apply(controller_document, diagnostics + diagnostics)

        assert len(outcome.fixed) == len(diagnostics)
        assert outcome.document.code == migrated_controller_code

    def test_subset(self, fixer, controller_document, diagnostics, sample_controller_code):
        outcome = fixer.apply(controller_document, diagnostics[1:2])

        expected = sample_controller_code.replace(
            "HttpStatusCodeResult(HttpStatusCode.NotFound)", "NotFoundResult()"
        )
        assert outcome.document.code == expected
        assert outcome.is_fixed(diagnostics[1])
        assert not outcome.is_fixed(diagnostics[0])

    def test_apply_one(self, fixer, controller_document, diagnostics, sample_controller_code):
        outcome = fixer.apply_one(controller_document, diagnostics[0])

        assert outcome.document.code == sample_controller_code.replace(
            "PagedList  # paging", "PagedList.Core  # paging"
        )

    def test_empty_batch(self, fixer, controller_document):
        outcome = fixer.apply(controller_document, [])

        assert not outcome
        assert outcome.document is controller_document


# =============================================================================
# Resolution Tests
# =============================================================================

class TestResolution:
    """Tests for locating diagnostics in the current tree."""

    def test_relocates_by_span(self, fixer, controller_document, diagnostics, migrated_controller_code):
        """A re-parsed copy of the document has new nodes but the same spans."""
        reparsed = Document.from_source(controller_document.code, "controllers.py")

        outcome = fixer.apply(reparsed, diagnostics)

        assert outcome.document.code == migrated_controller_code

    def test_partial_failure(self, fixer, controller_document, diagnostics, migrated_controller_code):
        """One target no longer matches; the others still go in."""
        edited = _rename_import(controller_document, "PagedLisX")

        outcome = fixer.apply(edited, diagnostics)

        assert len(outcome.fixed) == 3
        assert outcome.skipped == [(diagnostics[0], "node no longer matches the rule")]
        assert outcome.document.code == migrated_controller_code.replace(
            "PagedList.Core", "PagedLisX"
        )

    def test_node_gone(self, fixer, controller_document, diagnostics):
        shifted = Document.from_source("import os\n" + controller_document.code, "controllers.py")

        outcome = fixer.apply(shifted, diagnostics[:1])

        assert not outcome.changed
        assert outcome.skipped == [(diagnostics[0], "node no longer present")]

    def test_other_document(self, fixer, clean_document, diagnostics):
        outcome = fixer.apply(clean_document, diagnostics)

        assert outcome.document is clean_document
        assert len(outcome.skipped) == 4
        assert all(reason == "diagnostic belongs to controllers.py" for _, reason in outcome.skipped)

    def test_unknown_rule(self, controller_document, diagnostics):
        outcome = FixApplier(RuleRegistry()).apply(controller_document, diagnostics[:1])

        assert outcome.skipped == [(diagnostics[0], "unknown rule GCP0002")]

    def test_report_only_rule(self, controller_document):
        registry = RuleRegistry([dataclasses.replace(PAGED_LIST_RULE, rewriter=None)])
        found = Walker(registry).walk(controller_document).diagnostics

        outcome = FixApplier(registry).apply(controller_document, found)

        assert len(found) == 1
        assert not outcome.changed
        assert outcome.skipped == [(found[0], "rule GCP0002 has no fix")]

    def test_skipped_are_sorted(self, controller_document, diagnostics):
        outcome = FixApplier(RuleRegistry()).apply(controller_document, reversed(diagnostics))

        assert [d for d, _ in outcome.skipped] == diagnostics


# =============================================================================
# Cancellation and Verification Tests
# =============================================================================

class TestCancellationAndVerification:
    """Tests for cancelled batches and output verification."""

    def test_cancelled(self, fixer, controller_document, diagnostics):
        token = CancellationToken()
        token.cancel()

        outcome = fixer.apply(controller_document, diagnostics, cancellation=token)

        assert outcome.cancelled is True
        assert not outcome.changed
        assert outcome.document is controller_document
        assert [reason for _, reason in outcome.skipped] == ["cancelled"] * 4

    def test_unparseable_output_is_rejected(self, controller_document, caplog):
        rule = dataclasses.replace(HTTP_STATUS_CODE_RESULT_RULE, rewriter=_KeywordRewriter())
        registry = RuleRegistry([rule])
        found = Walker(registry).walk(controller_document).diagnostics

        with caplog.at_level(logging.WARNING, logger="rewire.engine.fixer"):
            outcome = FixApplier(registry).apply(controller_document, found)

        assert not outcome.changed
        assert outcome.document is controller_document
        assert [reason for _, reason in outcome.skipped] == ["fix output does not parse"] * 3
        assert "does not parse" in caplog.text

    def test_verification_can_be_disabled(self, controller_document):
        rule = dataclasses.replace(HTTP_STATUS_CODE_RESULT_RULE, rewriter=_KeywordRewriter())
        registry = RuleRegistry([rule])
        found = Walker(registry).walk(controller_document).diagnostics

        outcome = FixApplier(registry, verify_output=False).apply(controller_document, found)

        assert len(outcome.fixed) == 3
        assert "return import\n" in outcome.document.code


# =============================================================================
# Contract Tests
# =============================================================================

class TestContract:
    """Tests for invalid inputs."""

    def test_none_document(self, fixer, diagnostics):
        with pytest.raises(HostContractError):
            fixer.apply(None, diagnostics)

    def test_none_diagnostics(self, fixer, controller_document):
        with pytest.raises(HostContractError):
            fixer.apply(controller_document, None)

    def test_apply_one_none(self, fixer, controller_document):
        with pytest.raises(HostContractError):
            fixer.apply_one(controller_document, None)

    def test_none_registry(self):
        with pytest.raises(HostContractError):
            FixApplier(None)


# =============================================================================
# Nested Target Tests
# =============================================================================

NESTED_SOURCE = "x = HttpStatusCodeResult(HttpStatusCodeResult(HttpStatusCode.NotFound))\n"


class TestNestedTargets:
    """Tests for constructions nested inside another construction."""

    @pytest.fixture
    def nested_document(self) -> Document:
        return Document.from_source(NESTED_SOURCE, "nested.py")

    def test_both_calls_are_reported(self, walker, nested_document):
        outer, inner = walker.walk(nested_document).diagnostics

        assert outer.span.encloses(inner.span)

    def test_fix_all_matches_fixing_outer_alone(self, fixer, walker, nested_document):
        outer, inner = walker.walk(nested_document).diagnostics

        single = fixer.apply_one(nested_document, outer)
        batch = fixer.apply(nested_document, [inner, outer])

        assert single.document.code == "x = NotFoundResult()\n"
        assert batch.document.code == single.document.code

    def test_inner_fix_is_skipped(self, fixer, walker, nested_document):
        outer, inner = walker.walk(nested_document).diagnostics

        outcome = fixer.apply(nested_document, [outer, inner])

        assert outcome.fixed == [outer]
        assert outcome.skipped == [(inner, "covered by enclosing fix")]

    def test_inner_alone_is_fixed(self, fixer, walker, nested_document):
        _, inner = walker.walk(nested_document).diagnostics

        outcome = fixer.apply_one(nested_document, inner)

        assert outcome.document.code == "x = HttpStatusCodeResult(NotFoundResult())\n"
