"""Ruby AST utility helpers."""

from __future__ import annotations

from tree_sitter import Node

VISIBILITY_KEYWORDS = ("public", "protected", "private")
ACCESSOR_DIRECTIVES = ("attr_reader", "attr_writer", "attr_accessor")
CALL_TYPES = ("call", "method_call")


class RubyAstUtils:
    """Utility helpers for tree-sitter-ruby nodes."""

    @staticmethod
    def get_node_text(node: Node, content: bytes) -> str:
        return content[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    @staticmethod
    def line_of(content: bytes, offset: int) -> int:
        """Return the 1-based line number of a byte offset."""
        return content.count(b"\n", 0, offset) + 1

    @staticmethod
    def slice_text(content: bytes, start: int, end: int) -> str:
        return content[start:end].decode("utf-8", errors="ignore")

    @staticmethod
    def skip_line_tail(content: bytes, offset: int) -> int:
        """Move past the rest of the line when it holds only blanks or a comment."""
        newline = content.find(b"\n", offset)
        if newline == -1:
            newline = len(content)
        rest = content[offset:newline].strip()
        if not rest or rest.startswith(b"#"):
            return newline
        return offset

    @staticmethod
    def body_statements(node: Node) -> list[Node]:
        """Return the statements of a class, module or singleton class body.

        Older grammars inline the body statements into the declaration node,
        newer ones wrap them in a ``body_statement`` field.
        """
        body = node.child_by_field_name("body")
        if body is not None:
            return list(body.named_children)
        header: set[int] = set()
        for field in ("name", "superclass", "value"):
            child = node.child_by_field_name(field)
            if child is not None:
                header.add(child.start_byte)
        return [child for child in node.named_children if child.start_byte not in header]

    @staticmethod
    def header_end(node: Node) -> int:
        """Return the byte offset where a declaration's header ends."""
        end = node.start_byte
        for field in ("name", "superclass", "value"):
            child = node.child_by_field_name(field)
            if child is not None:
                end = max(end, child.end_byte)
        return end

    @staticmethod
    def body_end(node: Node) -> int:
        """Return the byte offset of the closing ``end`` keyword."""
        if node.children and node.children[-1].type == "end":
            return node.children[-1].start_byte
        return node.end_byte

    @staticmethod
    def superclass_text(node: Node, content: bytes) -> str | None:
        superclass = node.child_by_field_name("superclass")
        if superclass is None:
            return None
        if superclass.named_children:
            return RubyAstUtils.get_node_text(superclass.named_children[0], content)
        return RubyAstUtils.get_node_text(superclass, content).lstrip("<").strip()

    @staticmethod
    def call_name(node: Node, content: bytes) -> str | None:
        """Return the method name of a receiver-less call, or None."""
        if node.type == "identifier":
            return RubyAstUtils.get_node_text(node, content)
        if node.type not in CALL_TYPES or node.child_by_field_name("receiver") is not None:
            return None
        method = node.child_by_field_name("method")
        if method is None:
            return None
        return RubyAstUtils.get_node_text(method, content)

    @staticmethod
    def call_arguments(node: Node) -> list[Node]:
        if node.type not in CALL_TYPES:
            return []
        arguments = node.child_by_field_name("arguments")
        if arguments is None:
            return []
        return list(arguments.named_children)

    @staticmethod
    def symbol_name(node: Node, content: bytes) -> str | None:
        """Return the name carried by a symbol or string literal argument."""
        if node.type in ("simple_symbol", "symbol"):
            return RubyAstUtils.get_node_text(node, content).lstrip(":")
        if node.type in ("delimited_symbol", "string"):
            text = RubyAstUtils.get_node_text(node, content).lstrip(":")
            return text.strip("\"'")
        return None

    @staticmethod
    def method_name(node: Node, content: bytes) -> str | None:
        name = node.child_by_field_name("name")
        if name is None:
            return None
        return RubyAstUtils.get_node_text(name, content)
