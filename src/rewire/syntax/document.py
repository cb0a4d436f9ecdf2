"""Documents: a parsed module plus its identity and position metadata."""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Collection, Mapping

import libcst as cst
from libcst.metadata import (
    ByteSpanPositionProvider,
    CodeRange,
    CodeSpan,
    MetadataWrapper,
    PositionProvider,
)

from rewire.core.errors import HostContractError
from rewire.syntax.kinds import NodeKind, kind_of

GENERATED_MARKER = "@generated"


@dataclass(frozen=True)
class SourceSpan:
    """Half-open byte range ``[start, end)`` of a node inside a document.

    ``line`` (1-based) and ``column`` (0-based) locate the start for
    display. Spans are only used for reporting and for re-locating a node
    whose identity was lost; matching never looks at them.
    """

    document: str
    start: int
    end: int
    line: int = 0
    column: int = 0

    def __len__(self) -> int:
        return self.end - self.start

    def overlaps(self, other: SourceSpan) -> bool:
        return (
            self.document == other.document
            and self.start < other.end
            and other.start < self.end
        )

    def same_range(self, other: SourceSpan) -> bool:
        return self.start == other.start and self.end == other.end

    def encloses(self, other: SourceSpan) -> bool:
        """True if ``other`` lies inside this span without being the same range."""
        return (
            self.document == other.document
            and self.start <= other.start
            and other.end <= self.end
            and not self.same_range(other)
        )

    def __str__(self) -> str:
        return f"{self.document}:{self.line}:{self.column}"


class Document:
    """A parsed module and the identity it is reported under.

    The module is never copied, so node objects handed out by a walk are the
    very nodes of ``document.module`` and can be looked up again by identity.
    Position metadata is resolved lazily, once, and is safe to share between
    threads.

    Parameters
    ----------
    module : cst.Module
        The parsed tree.
    uri : str
        Identity of the document (usually its path).

    Examples
    --------
    >>> doc = Document.from_source("import PagedList\\n", "views.py")
    >>> doc.span_of(doc.module.body[0].body[0])
    SourceSpan(document='views.py', start=0, end=16, line=1, column=0)
    """

    def __init__(self, module: cst.Module, uri: str = "<memory>") -> None:
        if not isinstance(module, cst.Module):
            raise HostContractError(
                f"Document needs a libcst.Module, got {type(module).__name__}"
            )
        self.module = module
        self.uri = uri
        self._wrapper = MetadataWrapper(module, unsafe_skip_copy=True)
        self._spans: Mapping[cst.CSTNode, CodeSpan] | None = None
        self._ranges: Mapping[cst.CSTNode, CodeRange] | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_source(cls, source: str, uri: str = "<memory>") -> Document:
        """Parse ``source`` with LibCST.

        Raises
        ------
        libcst.ParserSyntaxError
            If the source does not parse.
        """
        return cls(cst.parse_module(source), uri)

    def with_module(self, module: cst.Module) -> Document:
        """A new document with the same identity and a different tree."""
        return Document(module, self.uri)

    @property
    def code(self) -> str:
        return self.module.code

    @property
    def is_generated(self) -> bool:
        """True if the comments opening the module carry an ``@generated`` marker."""
        lines = list(self.module.header)
        if self.module.body:
            lines.extend(self.module.body[0].leading_lines)
        return any(
            line.comment is not None and GENERATED_MARKER in line.comment.value
            for line in lines
        )

    def resolve_positions(self) -> None:
        """Resolve byte spans and line/column ranges, once."""
        with self._lock:
            if self._spans is None:
                self._spans = self._wrapper.resolve(ByteSpanPositionProvider)
            if self._ranges is None:
                self._ranges = self._wrapper.resolve(PositionProvider)

    @property
    def spans(self) -> Mapping[cst.CSTNode, CodeSpan]:
        """Byte span of every node in the tree."""
        if self._spans is None:
            self.resolve_positions()
        return self._spans

    @property
    def ranges(self) -> Mapping[cst.CSTNode, CodeRange]:
        """Line/column range of every node in the tree."""
        if self._ranges is None:
            self.resolve_positions()
        return self._ranges

    def contains(self, node: cst.CSTNode) -> bool:
        """True if ``node`` (by identity) is part of this document's tree."""
        return node in self.spans

    def span_of(self, node: cst.CSTNode) -> SourceSpan | None:
        span = self.spans.get(node)
        if span is None:
            return None
        position = self.ranges[node].start
        return SourceSpan(
            document=self.uri,
            start=span.start,
            end=span.start + span.length,
            line=position.line,
            column=position.column,
        )

    def node_at(
        self, span: SourceSpan, kinds: Collection[NodeKind]
    ) -> cst.CSTNode | None:
        """Find a node of one of ``kinds`` covering exactly ``span``."""
        for node, code_span in self.spans.items():
            if (
                code_span.start == span.start
                and code_span.start + code_span.length == span.end
                and kind_of(node) in kinds
            ):
                return node
        return None

    def code_for(self, node: cst.CSTNode) -> str:
        """Source text of ``node`` as it would be rendered in this module."""
        return self.module.code_for_node(node)

    def __repr__(self) -> str:
        return f"Document({self.uri!r})"
