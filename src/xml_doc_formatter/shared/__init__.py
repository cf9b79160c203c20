"""Shared utilities for XML document formatting.

This module provides the preferences object, diagnostic and metrics types,
and the correlation-aware logger used across all formatting layers.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticKind,
    DiagnosticSeverity,
    FormatMetrics,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    FormattingPreferences,
    WellFormedValidation,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticKind",
    "DiagnosticSeverity",
    "FormatMetrics",
    "ConfigError",
    "ConfigValidationError",
    "FormattingPreferences",
    "WellFormedValidation",
    "CorrelationLogger",
    "get_logger",
]
