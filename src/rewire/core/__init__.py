"""Core building blocks shared by the rest of rewire."""
from __future__ import annotations

from .cancellation import CancellationToken
from .config import EngineConfig, load_config
from .diff import combine_diffs, generate_diff
from .errors import ConfigError, HostContractError, RewireError, StaleMatchError
from .results import BatchResult, ErrorResult, Result

__all__ = [
    "BatchResult",
    "CancellationToken",
    "ConfigError",
    "EngineConfig",
    "ErrorResult",
    "HostContractError",
    "Result",
    "RewireError",
    "StaleMatchError",
    "combine_diffs",
    "generate_diff",
    "load_config",
]
