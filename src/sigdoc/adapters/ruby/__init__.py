"""Ruby language adapter."""

from sigdoc.adapters.ruby.adapter import RubyAdapter

__all__ = ["RubyAdapter"]
