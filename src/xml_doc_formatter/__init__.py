"""XML Document Formatter.

Reformats XML text into a canonical, indentation-normalized layout without
building a DOM or resolving external entities.

Progressive API Disclosure:
- Level 1: Simple function - format_xml()
- Level 2: Reusable formatter - XMLDocumentFormatter class
"""

__version__ = "0.1.0"
__author__ = "XML Document Formatter Team"

from .api import FormatResult, XMLDocumentFormatter, format_xml
from .shared.config import (
    ConfigError,
    ConfigValidationError,
    FormattingPreferences,
    WellFormedValidation,
)
from .validation import InvalidDocumentError

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple formatting function
    "format_xml",

    # Level 2: Reusable formatter and its result
    "XMLDocumentFormatter",
    "FormatResult",

    # Configuration
    "FormattingPreferences",
    "WellFormedValidation",
    "ConfigError",
    "ConfigValidationError",

    # Errors
    "InvalidDocumentError",
]
