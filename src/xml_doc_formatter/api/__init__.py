"""Public formatting API for XML documents.

Progressive disclosure:
- Level 1: ``format_xml()`` for one-off formatting
- Level 2: ``XMLDocumentFormatter`` for reuse with fixed preferences,
  with ``format_document()`` returning a ``FormatResult`` instead of raising
"""

from .formatter import (
    DEFAULT_LINE_SEPARATOR,
    FormatResult,
    XMLDocumentFormatter,
    format_xml,
)

__all__ = [
    "DEFAULT_LINE_SEPARATOR",
    "FormatResult",
    "XMLDocumentFormatter",
    "format_xml",
]
