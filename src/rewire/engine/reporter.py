"""Diagnostic sinks."""
from __future__ import annotations

import threading
from typing import Iterator, Protocol

from rewire.rules.base import Diagnostic


class DiagnosticReporter(Protocol):
    """Anything that accepts diagnostics as they are found.

    Walkers running with several workers call ``report`` from several
    threads at once.
    """

    def report(self, diagnostic: Diagnostic) -> None:
        ...


class CollectingReporter:
    """Thread-safe accumulation point for diagnostics.

    Diagnostics are kept in arrival order, which is only meaningful for a
    sequential walk; use :meth:`sorted` for a stable order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._diagnostics: list[Diagnostic] = []

    def report(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._diagnostics.append(diagnostic)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        with self._lock:
            return list(self._diagnostics)

    def sorted(self) -> list[Diagnostic]:
        """Diagnostics ordered by span start, span end, then rule id."""
        return sorted(self.diagnostics, key=lambda d: d.sort_key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)
