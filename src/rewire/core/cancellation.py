"""Cooperative cancellation for walks and fix batches."""
from __future__ import annotations

import threading


class CancellationToken:
    """Flag checked between node visits and between individual fixes.

    Examples
    --------
    >>> token = CancellationToken()
    >>> result = walker.walk(document, cancellation=token)
    >>> token.cancel()  # from another thread
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
