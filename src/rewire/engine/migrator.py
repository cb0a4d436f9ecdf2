"""Engine facade tying rules, configuration, walker and fix applier together."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Mapping

import libcst as cst

from rewire.core.cancellation import CancellationToken
from rewire.core.config import EngineConfig
from rewire.core.diff import generate_diff
from rewire.core.errors import HostContractError
from rewire.core.results import BatchResult, ErrorResult, Result
from rewire.engine.fixer import FixApplier, FixOutcome
from rewire.engine.reporter import DiagnosticReporter
from rewire.engine.walker import Walker, WalkResult
from rewire.rules.base import Diagnostic
from rewire.rules.registry import RuleRegistry, default_registry
from rewire.syntax.document import Document

logger = logging.getLogger(__name__)


class MigrationEngine:
    """Analyze documents for obsolete API usage and migrate them.

    Parameters
    ----------
    registry : RuleRegistry | None
        Rules to draw from. Defaults to the built-in rules.
    config : EngineConfig | None
        Rule selection and runtime settings. Defaults to ``EngineConfig()``.

    Examples
    --------
    >>> engine = MigrationEngine()
    >>> result = engine.migrate_source("import PagedList\\n", "views.py")
    >>> result.data
    'import PagedList.Core\\n'
    >>> print(result.diff)
    --- a/views.py
    +++ b/views.py
    @@ -1 +1 @@
    -import PagedList
    +import PagedList.Core
    """

    def __init__(
        self,
        registry: RuleRegistry | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        if config is not None and not isinstance(config, EngineConfig):
            raise HostContractError(f"config must be an EngineConfig, got {type(config).__name__}")
        self.config = config if config is not None else EngineConfig()
        base = registry if registry is not None else default_registry()
        self.registry = base.select(self.config)
        self.walker = Walker(self.registry, max_workers=self.config.max_workers)
        self.fixer = FixApplier(self.registry, verify_output=self.config.verify_output)

    def analyze(
        self,
        document: Document,
        reporter: DiagnosticReporter | None = None,
        cancellation: CancellationToken | None = None,
    ) -> WalkResult:
        """Report every rule match in ``document``."""
        if document is None:
            raise HostContractError("analyze() needs a Document")
        if not self.config.analyze_generated and document.is_generated:
            logger.debug("Skipping generated document %s", document.uri)
            return WalkResult(document)
        return self.walker.walk(document, reporter, cancellation)

    def fix(
        self,
        document: Document,
        diagnostics: Iterable[Diagnostic] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> FixOutcome:
        """Apply fixes to ``document``.

        Parameters
        ----------
        document : Document
            The document to fix.
        diagnostics : Iterable[Diagnostic] | None
            The diagnostics to fix. None analyzes the document first and
            fixes everything found.
        cancellation : CancellationToken | None
            Forwarded to the walk and the fix batch.
        """
        if document is None:
            raise HostContractError("fix() needs a Document")
        if diagnostics is None:
            walk = self.analyze(document, cancellation=cancellation)
            if walk.cancelled:
                return FixOutcome(document, cancelled=True)
            diagnostics = walk.diagnostics
        return self.fixer.apply(document, diagnostics, cancellation)

    def migrate_source(self, source: str, uri: str = "<memory>") -> Result:
        """Migrate one source string.

        Returns
        -------
        Result
            ``data`` holds the migrated source and ``diff`` the unified diff.
            An ErrorResult when the source does not parse.
        """
        try:
            document = Document.from_source(source, uri)
        except cst.ParserSyntaxError as e:
            return ErrorResult(
                message=f"Failed to parse {uri}: {e}",
                exception=e,
                operation="migrate_source",
                target_repr=uri,
            )

        outcome = self.fix(document)
        if not outcome.changed:
            message = f"No obsolete API usage to migrate in {uri}"
            if outcome.skipped:
                message = f"{len(outcome.skipped)} usage(s) in {uri} could not be migrated"
            return Result(
                success=True,
                message=message,
                data=source,
                skipped=len(outcome.skipped),
            )

        new_source = outcome.document.code
        diff = generate_diff(source, new_source, uri)
        return Result(
            success=True,
            message=f"Migrated {len(outcome.fixed)} usage(s) in {uri}",
            documents_changed=[uri],
            data=new_source,
            diff=diff,
            diffs={uri: diff},
            migrated=len(outcome.fixed),
            skipped=len(outcome.skipped),
        )

    def migrate_sources(
        self, sources: Mapping[str, str], max_workers: int | None = None
    ) -> BatchResult:
        """Migrate independent documents in parallel, keyed by identity."""
        if sources is None:
            raise HostContractError("migrate_sources() needs a mapping of sources")
        uris = sorted(sources)
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(lambda uri: self.migrate_source(sources[uri], uri), uris))
        return BatchResult(results)
