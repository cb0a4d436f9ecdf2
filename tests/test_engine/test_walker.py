"""
Tests for rewire.engine.walker and rewire.engine.reporter modules.

This module tests the rule-driven traversal:
- Every match is reported once, spanning exactly the matched node
- Diagnostics come back in span order
- Concurrent walks agree with sequential ones
- Cancellation, malformed nodes and external reporters
"""
from __future__ import annotations

import logging
import threading

import libcst as cst
import pytest

from rewire.core.cancellation import CancellationToken
from rewire.core.errors import HostContractError
from rewire.engine.reporter import CollectingReporter
from rewire.engine.walker import Walker
from rewire.rules.registry import RuleRegistry
from rewire.syntax.document import Document


def _malformed_import_document() -> Document:
    """A module whose only import names ``load().PagedList``."""
    module = cst.Module(
        body=[
            cst.SimpleStatementLine(
                body=[
                    cst.Import(
                        names=[
                            cst.ImportAlias(
                                name=cst.Attribute(
                                    value=cst.Call(func=cst.Name("load")),
                                    attr=cst.Name("PagedList"),
                                )
                            )
                        ]
                    )
                ]
            )
        ]
    )
    return Document(module, "broken.py")


# =============================================================================
# Walker Tests
# =============================================================================

class TestWalker:
    """Tests for Walker.walk."""

    def test_finds_every_obsolete_usage(self, walker, controller_document):
        result = walker.walk(controller_document)

        assert len(result) == 4
        assert [d.rule_id for d in result] == ["GCP0002", "GCP0001", "GCP0001", "GCP0001"]
        assert result.cancelled is False
        assert result.malformed == []

    def test_clean_code_has_no_diagnostics(self, walker, clean_document):
        result = walker.walk(clean_document)

        assert not result
        assert result.visited > 0

    def test_diagnostics_span_matched_node(self, walker, controller_document):
        result = walker.walk(controller_document)
        code = controller_document.code

        for diagnostic in result:
            assert code[diagnostic.span.start:diagnostic.span.end] == (
                controller_document.code_for(diagnostic.node)
            )
            assert diagnostic.span.document == "controllers.py"

    def test_diagnostics_are_sorted(self, walker, controller_document):
        result = walker.walk(controller_document)

        starts = [d.span.start for d in result]
        assert starts == sorted(starts)

    def test_directive_diagnostic(self, walker, controller_document):
        diagnostic = walker.walk(controller_document).diagnostics[0]

        assert diagnostic.span.start == 0
        assert diagnostic.span.end == len("import    PagedList")
        assert (diagnostic.span.line, diagnostic.span.column) == (1, 0)
        assert diagnostic.message == "PagedList import    PagedList is not valid in ASP.NET Core"
        assert diagnostic.title == "ASP.NET Core should use PagedList.Core"
        assert isinstance(diagnostic.node, cst.Import)
        assert diagnostic.fields["name"] == "PagedList"

    def test_constructor_diagnostic(self, walker, controller_document):
        diagnostic = walker.walk(controller_document).diagnostics[1]

        assert diagnostic.message == (
            "HttpStatusCodeResult HttpStatusCodeResult(HttpStatusCode.NotFound)"
            " is not valid in ASP.NET Core"
        )
        assert diagnostic.span.line == 7
        assert diagnostic.fields["argument"] == "NotFound"

    def test_walk_is_repeatable(self, walker, controller_document):
        first = walker.walk(controller_document)
        second = walker.walk(controller_document)

        assert first.diagnostics == second.diagnostics
        assert first.visited == second.visited

    def test_empty_registry(self, controller_document):
        result = Walker(RuleRegistry()).walk(controller_document)

        assert len(result) == 0
        assert result.document is controller_document

    def test_concurrent_walk_matches_sequential(self, registry, controller_document):
        sequential = Walker(registry).walk(controller_document)
        concurrent = Walker(registry, max_workers=4).walk(controller_document)

        assert concurrent.diagnostics == sequential.diagnostics
        assert concurrent.visited == sequential.visited

    def test_external_reporter(self, walker, controller_document):
        reporter = CollectingReporter()

        result = walker.walk(controller_document, reporter=reporter)

        assert len(reporter) == 4
        assert reporter.sorted() == result.diagnostics

    def test_cancelled_before_start(self, walker, controller_document):
        token = CancellationToken()
        token.cancel()

        result = walker.walk(controller_document, cancellation=token)

        assert result.cancelled is True
        assert result.visited == 0
        assert len(result) == 0

    def test_cancelled_concurrent(self, registry, controller_document):
        token = CancellationToken()
        token.cancel()

        result = Walker(registry, max_workers=2).walk(controller_document, cancellation=token)

        assert result.cancelled is True
        assert result.visited == 0

    def test_malformed_node_is_logged_not_reported(self, walker, caplog):
        document = _malformed_import_document()

        with caplog.at_level(logging.WARNING, logger="rewire.engine.walker"):
            result = walker.walk(document)

        assert len(result) == 0
        assert len(result.malformed) == 1
        span, reason = result.malformed[0]
        assert span.document == "broken.py"
        assert "not a dotted name" in reason
        assert "GCP0002" in caplog.text

    def test_none_document(self, walker):
        with pytest.raises(HostContractError):
            walker.walk(None)

    @pytest.mark.parametrize("max_workers", [0, -1])
    def test_invalid_workers(self, registry, max_workers):
        with pytest.raises(HostContractError):
            Walker(registry, max_workers=max_workers)

    def test_none_registry(self):
        with pytest.raises(HostContractError):
            Walker(None)


# =============================================================================
# CollectingReporter Tests
# =============================================================================

class TestCollectingReporter:
    """Tests for CollectingReporter."""

    def test_collects_from_many_threads(self, walker, controller_document):
        diagnostics = walker.walk(controller_document).diagnostics
        reporter = CollectingReporter()

        def report_all():
            for diagnostic in diagnostics:
                reporter.report(diagnostic)

        threads = [threading.Thread(target=report_all) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(reporter) == 8 * len(diagnostics)
        assert set(reporter) == set(diagnostics)

    def test_snapshot_is_a_copy(self, walker, controller_document):
        reporter = CollectingReporter()
        walker.walk(controller_document, reporter=reporter)

        snapshot = reporter.diagnostics
        snapshot.clear()

        assert len(reporter) == 4
