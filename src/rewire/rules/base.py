"""Migration rules and the diagnostics they produce."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

import libcst as cst

from rewire.matching.matchers import Matcher
from rewire.rewriting.rewriters import Rewriter
from rewire.syntax.document import SourceSpan
from rewire.syntax.kinds import NodeKind


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class MigrationRule:
    """A matcher and rewriter bound to a diagnostic identity.

    Attributes
    ----------
    id : str
        Stable rule id, e.g. ``"GCP0002"``.
    title : str
        Short title, also used as the title of the fix.
    message : str
        Message template with one ``{0}`` placeholder for the matched text.
    kinds : frozenset[NodeKind]
        Node kinds the rule listens on.
    matcher : Matcher
        Decides whether a node is an instance of the pattern.
    rewriter : Rewriter | None
        Builds the replacement. Rules without one only report.
    """

    id: str
    title: str
    message: str
    kinds: frozenset[NodeKind]
    matcher: Matcher
    rewriter: Rewriter | None = None
    description: str = ""
    category: str = "Upgrade"
    severity: Severity = Severity.WARNING
    enabled_by_default: bool = True

    @property
    def fixable(self) -> bool:
        return self.rewriter is not None

    def listens_to(self, kind: NodeKind) -> bool:
        return kind in self.kinds

    def format_message(self, matched_text: str) -> str:
        return self.message.format(matched_text)


@dataclass(frozen=True)
class Diagnostic:
    """A rule match reported against a span of a document.

    ``node`` and ``fields`` ride along for the fix applier; they take no part
    in equality or hashing, so two reports of the same rule on the same span
    are the same diagnostic.
    """

    rule_id: str
    title: str
    message: str
    span: SourceSpan
    severity: Severity = Severity.WARNING
    node: cst.CSTNode | None = field(default=None, compare=False, repr=False)
    fields: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def sort_key(self) -> tuple[int, int, str]:
        return (self.span.start, self.span.end, self.rule_id)

    def __str__(self) -> str:
        return f"{self.span}: {self.severity.value} {self.rule_id} {self.message}"
