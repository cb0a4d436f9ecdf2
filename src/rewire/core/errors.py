"""Exception types raised by rewire.

Only host-contract violations and configuration problems are raised past the
public API. Stale matches are raised by rewriters and recovered by the fix
applier; a pattern that simply does not match is not an error at all.
"""
from __future__ import annotations


class RewireError(Exception):
    """Base class for all rewire errors."""


class HostContractError(RewireError, ValueError):
    """The caller broke a precondition of the API (missing tree, registry...)."""


class StaleMatchError(RewireError):
    """A rewriter no longer finds the structure its match promised.

    Raised when the tree changed between matching and fixing. The fix applier
    skips the affected fix and carries on with the rest of the batch.
    """


class ConfigError(RewireError):
    """Invalid or unreadable engine configuration."""
