"""Tokenization engine for XML document formatting.

This module provides a best-effort tokenizer that converts raw XML text into
a lazy stream of lexical tokens while reporting well-formedness diagnostics.

Key Components:
    XMLTokenizer: Main tokenization class producing single-pass token streams
    Token: Represents individual XML tokens with their source span
    TokenType: Enumeration of all supported XML token types
    TokenPosition: Position tracking for diagnostics
    Attribute: Ordered attribute payload of start tags
"""

from .tokenizer import (
    Attribute,
    DiagnosticCallback,
    Token,
    TokenPosition,
    TokenType,
    XMLTokenizer,
    is_name_char,
    is_name_start_char,
)

__all__ = [
    "Attribute",
    "DiagnosticCallback",
    "Token",
    "TokenPosition",
    "TokenType",
    "XMLTokenizer",
    "is_name_char",
    "is_name_start_char",
]
