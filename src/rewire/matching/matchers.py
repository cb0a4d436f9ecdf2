"""Pattern matchers.

A matcher looks at a single node and decides whether it is an instance of a
migration pattern. Matching is purely structural and textual on identifier
spelling: no symbol or type resolution happens, so a user-defined class that
shares the obsolete type's name matches as well.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

import libcst as cst

from rewire.syntax.names import iter_names, reference_names, render_name


class MatchStatus(Enum):
    MATCHED = "matched"
    NO_MATCH = "no_match"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class MatchResult:
    """Outcome of running a matcher on one node.

    Attributes
    ----------
    status : MatchStatus
        MATCHED, NO_MATCH, or MALFORMED when the node lacks the shape the
        matcher depends on.
    node : cst.CSTNode | None
        The matched (or malformed) node. No other tree reference is kept.
    fields : Mapping[str, str | None]
        Data extracted for the paired rewriter.
    reason : str
        Why a MALFORMED node was rejected.
    """

    status: MatchStatus
    node: cst.CSTNode | None = None
    fields: Mapping[str, str | None] = field(default_factory=dict)
    reason: str = ""

    @classmethod
    def matched(cls, node: cst.CSTNode, **fields: str | None) -> MatchResult:
        return cls(MatchStatus.MATCHED, node, dict(fields))

    @classmethod
    def no_match(cls) -> MatchResult:
        return cls(MatchStatus.NO_MATCH)

    @classmethod
    def malformed(cls, node: cst.CSTNode, reason: str) -> MatchResult:
        return cls(MatchStatus.MALFORMED, node, reason=reason)

    @property
    def is_malformed(self) -> bool:
        return self.status is MatchStatus.MALFORMED

    def get(self, key: str) -> str | None:
        return self.fields.get(key)

    def __bool__(self) -> bool:
        return self.status is MatchStatus.MATCHED


class Matcher(ABC):
    """Predicate-plus-extraction over a single node."""

    @abstractmethod
    def match(self, node: cst.CSTNode) -> MatchResult:
        """Match ``node``. Must never raise for unexpected node shapes."""


class DirectiveNameMatcher(Matcher):
    """Match an import whose module name is exactly ``target``.

    For ``import a, b`` every alias name is checked; for ``from m import x``
    the module ``m`` is. The comparison is on the whole dotted name and is
    case-sensitive: with ``target="PagedList"``, ``import PagedList`` and
    ``from PagedList import IPagedList`` match, while
    ``import PagedList.Extended`` and ``import MyPagedList`` do not.

    On success ``fields["name"]`` holds the matched dotted name.
    """

    def __init__(self, target: str) -> None:
        self.target = target

    def match(self, node: cst.CSTNode) -> MatchResult:
        if isinstance(node, cst.Import):
            names = [alias.name for alias in node.names]
        elif isinstance(node, cst.ImportFrom):
            if node.relative:
                # relative imports name a local package, never the target
                return MatchResult.no_match()
            if node.module is None:
                return MatchResult.malformed(node, "absolute from-import without a module")
            names = [node.module]
        else:
            return MatchResult.no_match()

        for name in names:
            rendered = render_name(name)
            if rendered is None:
                return MatchResult.malformed(
                    node, f"import name is a {type(name).__name__}, not a dotted name"
                )
            if rendered == self.target:
                return MatchResult.matched(node, name=rendered)
        return MatchResult.no_match()

    def __repr__(self) -> str:
        return f"DirectiveNameMatcher({self.target!r})"


class ConstructorArgumentMatcher(Matcher):
    """Match a call constructing ``type_name`` and extract its argument.

    The type is recognised on the call's dotted type reference, so
    ``HttpStatusCodeResult(...)``, ``mvc.HttpStatusCodeResult(...)`` and
    ``System.Web.Mvc.HttpStatusCodeResult(...)`` all match. Identifiers
    inside the arguments or behind a call receiver are not considered,
    which keeps matches of nested calls from overlapping.

    ``fields["argument"]`` is the last identifier of the single argument
    (``HttpStatusCode.NotFound`` gives ``"NotFound"``). It is None when
    there is no argument, more than one, or no identifier in it.
    """

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name

    def match(self, node: cst.CSTNode) -> MatchResult:
        if not isinstance(node, cst.Call):
            return MatchResult.no_match()
        if not any(n.value == self.type_name for n in reference_names(node.func)):
            return MatchResult.no_match()
        return MatchResult.matched(
            node, type_name=self.type_name, argument=self.extract_argument(node)
        )

    @staticmethod
    def extract_argument(node: cst.Call) -> str | None:
        if len(node.args) != 1:
            return None
        names = list(iter_names(node.args[0].value))
        if not names:
            return None
        return names[-1].value

    def __repr__(self) -> str:
        return f"ConstructorArgumentMatcher({self.type_name!r})"
