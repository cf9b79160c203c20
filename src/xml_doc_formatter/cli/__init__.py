"""Command-line interface module for XML Document Formatter.

This module provides the xml-doc-format command for formatting files or
standard input, rewriting files in place and checking formatting in CI.
"""

from .main import main

__all__ = ["main"]
