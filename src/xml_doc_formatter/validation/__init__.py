"""Well-formedness validation for XML document formatting.

This module turns tokenizer diagnostics into policy decisions: abort,
collect and warn, or ignore.
"""

from .validator import (
    InvalidDocumentError,
    ValidationOutcome,
    WellFormednessValidator,
)

__all__ = [
    "InvalidDocumentError",
    "ValidationOutcome",
    "WellFormednessValidator",
]
