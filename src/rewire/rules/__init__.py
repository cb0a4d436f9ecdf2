"""Migration rules, the rule registry and the built-in ASP.NET rules."""
from __future__ import annotations

from .aspnet import (
    HTTP_STATUS_CODE_RESULT_RULE,
    PAGED_LIST_RULE,
    STATUS_CODE_RESULTS,
)
from .base import Diagnostic, MigrationRule, Severity
from .registry import RuleRegistry, default_registry

__all__ = [
    "Diagnostic",
    "HTTP_STATUS_CODE_RESULT_RULE",
    "MigrationRule",
    "PAGED_LIST_RULE",
    "RuleRegistry",
    "STATUS_CODE_RESULTS",
    "Severity",
    "default_registry",
]
