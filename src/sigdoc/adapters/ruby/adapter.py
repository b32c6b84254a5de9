"""Ruby source adapter using tree-sitter-ruby.

This module implements the SourceAdapter interface for Ruby source code.
Declarations are walked with tree-sitter; comments and sig blocks between
them are handed to the correlator as raw text.
"""

from __future__ import annotations

import tree_sitter_ruby as tsruby
from tree_sitter import Language, Parser

from sigdoc.adapters.base import RegistryBuilder, SourceAdapter
from sigdoc.adapters.ruby.scanner import RubyScanner
from sigdoc.core.config import SigdocConfig


class RubyAdapter(SourceAdapter):
    """Ruby source adapter using tree-sitter."""

    def __init__(self, config: SigdocConfig | None = None) -> None:
        """Initialize the Ruby adapter.

        Args:
            config: Settings to use (the cached global config by default).
        """
        super().__init__(config)
        self._language = Language(tsruby.language())
        self._parser = Parser(self._language)

    @property
    def language(self) -> str:
        """Return Ruby as the supported language."""
        return "ruby"

    def scan_source(self, content: bytes, builder: RegistryBuilder) -> None:
        RubyScanner(self._parser, file=builder.file).scan(content, builder)
