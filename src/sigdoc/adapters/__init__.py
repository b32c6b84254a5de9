"""Source adapters that walk declarations and build a documentation registry.

This module provides the base classes used to implement language-specific
walkers and the Ruby adapter built on tree-sitter-ruby.
"""

from sigdoc.adapters.base import RegistryBuilder, SourceAdapter, namespace_path
from sigdoc.adapters.ruby import RubyAdapter

__all__ = [
    "RegistryBuilder",
    "RubyAdapter",
    "SourceAdapter",
    "namespace_path",
]
