"""YARD-style documentation comment parsing."""

from sigdoc.docstrings.parser import (
    ParsedDocstring,
    format_tag,
    parse_docstring,
    split_types,
    strip_comment_marker,
)

__all__ = [
    "ParsedDocstring",
    "format_tag",
    "parse_docstring",
    "split_types",
    "strip_comment_marker",
]
