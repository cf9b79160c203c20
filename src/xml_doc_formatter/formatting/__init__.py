"""Layout engine for XML document formatting.

Key Components:
    IndentationEngine: Places tokens on indented output lines
    NestingStack: Open element names for one render call
    LineComposer: Attribute splitting and long-line wrapping for start tags
"""

from .composer import LineComposer
from .indentation import IndentationEngine, NestingStack, count_line_breaks, split_lines

__all__ = [
    "IndentationEngine",
    "LineComposer",
    "NestingStack",
    "count_line_breaks",
    "split_lines",
]
