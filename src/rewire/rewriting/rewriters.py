"""Rewriters build the replacement for a matched node.

Rewriters only ever touch the smallest child that has to change and rebuild
the matched node with ``with_changes``, so keywords, whitespace and comments
around the edit come through untouched.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Sequence

import libcst as cst

from rewire.core.errors import StaleMatchError
from rewire.matching.matchers import MatchResult
from rewire.syntax.names import build_name, reference_names, render_name

DEFAULT_KEY = "default"


class Rewriter(ABC):
    """Pure function from a matched node to its replacement."""

    @abstractmethod
    def rewrite(self, node: cst.CSTNode, match: MatchResult) -> cst.CSTNode:
        """Return the replacement for ``node``.

        Raises
        ------
        StaleMatchError
            If ``node`` no longer has the shape ``match`` described.
        """


class DirectiveRewriter(Rewriter):
    """Point an import at a new module name.

    Only the qualified-name child is replaced::

        import    PagedList  # paging     ->  import    PagedList.Core  # paging
        from PagedList import IPagedList  ->  from PagedList.Core import IPagedList

    Aliases (``import PagedList as pl``) are kept.
    """

    def __init__(self, source: str, target: str) -> None:
        self.source = source
        self.target = target

    def rewrite(self, node: cst.CSTNode, match: MatchResult) -> cst.CSTNode:
        if isinstance(node, cst.Import):
            aliases = list(node.names)
            replaced = False
            for index, alias in enumerate(aliases):
                if render_name(alias.name) == self.source:
                    aliases[index] = alias.with_changes(name=build_name(self.target))
                    replaced = True
            if replaced:
                return node.with_changes(names=aliases)
        elif (
            isinstance(node, cst.ImportFrom)
            and not node.relative
            and node.module is not None
            and render_name(node.module) == self.source
        ):
            return node.with_changes(module=build_name(self.target))
        raise StaleMatchError(f"{type(node).__name__} no longer imports {self.source}")

    def __repr__(self) -> str:
        return f"DirectiveRewriter({self.source!r} -> {self.target!r})"


class ConstructorRewriter(Rewriter):
    """Swap an obsolete constructor for an argument-less replacement type.

    The replacement is looked up in ``table`` by the identifier the matcher
    extracted from the single argument, falling back to the ``default``
    entry for unknown or missing identifiers. All arguments are dropped,
    the parentheses and the whitespace inside them are kept, and comments
    attached to the arguments move in front of the closing parenthesis::

        HttpStatusCodeResult(HttpStatusCode.NotFound)  ->  NotFoundResult()
        mvc.HttpStatusCodeResult(HttpStatusCode.OK)     ->  mvc.OkResult()

    A dotted replacement is fully qualified and so takes the place of the
    whole type reference, receiver included.

    Parameters
    ----------
    type_name : str
        Identifier of the obsolete type.
    table : Mapping[str, str]
        Extracted identifier -> replacement type. Must contain ``default_key``.
    default_key : str
        Fallback entry of ``table``.
    """

    def __init__(
        self,
        type_name: str,
        table: Mapping[str, str],
        default_key: str = DEFAULT_KEY,
    ) -> None:
        if default_key not in table:
            raise ValueError(f"Replacement table has no {default_key!r} entry")
        self.type_name = type_name
        self.table = dict(table)
        self.default_key = default_key

    def resolve(self, argument: str | None) -> str:
        """Replacement type for an extracted argument identifier."""
        if argument is not None and argument in self.table:
            return self.table[argument]
        return self.table[self.default_key]

    def rewrite(self, node: cst.CSTNode, match: MatchResult) -> cst.CSTNode:
        if not isinstance(node, cst.Call):
            raise StaleMatchError(f"expected a call, found {type(node).__name__}")
        candidates = [n for n in reference_names(node.func) if n.value == self.type_name]
        if not candidates:
            raise StaleMatchError(f"call no longer constructs {self.type_name}")

        replacement = self.resolve(match.get("argument"))
        func = self._replace_type(node.func, candidates[-1], replacement)
        return node.with_changes(
            func=func,
            args=(),
            whitespace_before_args=_keep_comments(
                node.whitespace_before_args, _arg_comments(node.args)
            ),
        )

    @staticmethod
    def _replace_type(
        func: cst.BaseExpression, obsolete: cst.Name, replacement: str
    ) -> cst.BaseExpression:
        new_name = build_name(replacement)
        if func is obsolete or isinstance(new_name, cst.Attribute):
            # keep any parentheses wrapped around the old reference
            return new_name.with_changes(lpar=func.lpar, rpar=func.rpar)
        return func.deep_replace(obsolete, new_name)

    def __repr__(self) -> str:
        return f"ConstructorRewriter({self.type_name!r}, {len(self.table)} entries)"


def _arg_comments(args: Sequence[cst.Arg]) -> list[cst.Comment]:
    """Comments in the whitespace trailing each argument, in source order."""
    comments: list[cst.Comment] = []
    for arg in args:
        trailing = []
        if isinstance(arg.comma, cst.Comma):
            trailing.extend((arg.comma.whitespace_before, arg.comma.whitespace_after))
        trailing.append(arg.whitespace_after_arg)
        for whitespace in trailing:
            if not isinstance(whitespace, cst.ParenthesizedWhitespace):
                continue
            if whitespace.first_line.comment is not None:
                comments.append(whitespace.first_line.comment)
            comments.extend(
                line.comment for line in whitespace.empty_lines if line.comment is not None
            )
    return comments


def _keep_comments(
    whitespace: cst.BaseParenthesizableWhitespace, comments: list[cst.Comment]
) -> cst.BaseParenthesizableWhitespace:
    """Fold ``comments`` into the whitespace after an opening parenthesis.

    The first comment trails the parenthesis, the rest go on lines of their
    own at the arguments' indentation, and the closing parenthesis moves to
    a new line.
    """
    if not comments:
        return whitespace
    comments = list(comments)
    if isinstance(whitespace, cst.ParenthesizedWhitespace):
        first_line = whitespace.first_line
        empty_lines = list(whitespace.empty_lines)
        indent = whitespace.last_line
    else:
        first_line = cst.TrailingWhitespace()
        empty_lines = []
        indent = cst.SimpleWhitespace("")
    if first_line.comment is None:
        first_line = first_line.with_changes(
            whitespace=cst.SimpleWhitespace("  "), comment=comments.pop(0)
        )
    empty_lines.extend(cst.EmptyLine(whitespace=indent, comment=c) for c in comments)
    return cst.ParenthesizedWhitespace(
        first_line=first_line,
        empty_lines=empty_lines,
        indent=True,
        last_line=cst.SimpleWhitespace(""),
    )
