"""Ruby declaration walker feeding a RegistryBuilder."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tree_sitter import Node, Parser

from sigdoc.adapters.base import RegistryBuilder, namespace_path
from sigdoc.adapters.ruby.ast_utils import (
    ACCESSOR_DIRECTIVES,
    VISIBILITY_KEYWORDS,
    RubyAstUtils,
)
from sigdoc.core.models import AccessorMode, DeclarationEvent, DeclarationKind, Visibility

logger = logging.getLogger(__name__)

_ACCESSOR_MODES = {
    "attr_reader": AccessorMode.READER,
    "attr_writer": AccessorMode.WRITER,
    "attr_accessor": AccessorMode.ACCESSOR,
}

_SKIPPED_NODES = ("comment", "uninterpreted", "empty_statement")


@dataclass
class _BodyContext:
    """Walk state for one namespace body."""

    namespace: list[str]
    class_level: bool
    cursor: int
    visibility: Visibility = Visibility.PUBLIC


class RubyScanner:
    """Walks a Ruby syntax tree and reports declarations in source order.

    Source between declarations is handed over as raw text, so comments and
    sig blocks are seen by the correlator exactly as they were written.
    """

    def __init__(self, parser: Parser, file: str | None = None) -> None:
        self._parser = parser
        self._file = file

    def scan(self, content: bytes, builder: RegistryBuilder) -> None:
        tree = self._parser.parse(content)
        root = tree.root_node
        context = _BodyContext(namespace=[], class_level=False, cursor=0)
        self._scan_statements(list(root.named_children), content, context, builder)
        builder.on_text(
            RubyAstUtils.slice_text(content, context.cursor, len(content)),
            RubyAstUtils.line_of(content, context.cursor),
        )

    def _scan_statements(
        self,
        statements: list[Node],
        content: bytes,
        context: _BodyContext,
        builder: RegistryBuilder,
    ) -> None:
        for node in statements:
            if node.type in _SKIPPED_NODES:
                if node.type == "uninterpreted":
                    break
                continue
            if node.type in ("class", "module"):
                self._scan_namespace(node, content, context, builder)
            elif node.type == "singleton_class":
                self._scan_singleton_class(node, content, context, builder)
            elif node.type in ("method", "singleton_method"):
                self._emit_method(
                    node, node.start_byte, content, context, context.visibility, builder
                )
            else:
                self._scan_call(node, content, context, builder)

    def _scan_call(
        self, node: Node, content: bytes, context: _BodyContext, builder: RegistryBuilder
    ) -> None:
        name = RubyAstUtils.call_name(node, content)
        if name == "sig":
            # stays in the preceding text of the next declaration
            return
        arguments = RubyAstUtils.call_arguments(node)

        if name in ACCESSOR_DIRECTIVES:
            self._emit_attribute(
                node, node.start_byte, name, content, context, context.visibility, builder
            )
            return

        if name in VISIBILITY_KEYWORDS:
            visibility = Visibility(name)
            if not arguments:
                self._feed(node, content, context, builder)
                context.visibility = visibility
                return
            wrapped = arguments[0]
            if len(arguments) == 1 and wrapped.type in ("method", "singleton_method"):
                self._emit_method(wrapped, node.start_byte, content, context, visibility, builder)
                return
            wrapped_name = RubyAstUtils.call_name(wrapped, content)
            if len(arguments) == 1 and wrapped_name in ACCESSOR_DIRECTIVES:
                self._emit_attribute(
                    wrapped, node.start_byte, wrapped_name, content, context, visibility, builder
                )
                return
            self._feed(node, content, context, builder)
            names = [n for n in (RubyAstUtils.symbol_name(a, content) for a in arguments) if n]
            builder.on_visibility(context.namespace, names, visibility, context.class_level)
            return

        self._feed(node, content, context, builder)

    def _scan_namespace(
        self, node: Node, content: bytes, context: _BodyContext, builder: RegistryBuilder
    ) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            self._feed(node, content, context, builder)
            return
        name = RubyAstUtils.get_node_text(name_node, content)
        kind = DeclarationKind.CLASS if node.type == "class" else DeclarationKind.MODULE
        builder.on_declaration(
            DeclarationEvent(
                kind=kind,
                namespace=list(context.namespace),
                name=name,
                superclass=RubyAstUtils.superclass_text(node, content),
                preceding_text=RubyAstUtils.slice_text(content, context.cursor, node.start_byte),
                preceding_line=RubyAstUtils.line_of(content, context.cursor),
                line=node.start_point[0] + 1,
                file=self._file,
            )
        )
        inner = _BodyContext(
            namespace=namespace_path(context.namespace, name),
            class_level=False,
            cursor=RubyAstUtils.skip_line_tail(content, RubyAstUtils.header_end(node)),
        )
        self._scan_body(node, content, inner, builder)
        context.cursor = RubyAstUtils.skip_line_tail(content, node.end_byte)

    def _scan_singleton_class(
        self, node: Node, content: bytes, context: _BodyContext, builder: RegistryBuilder
    ) -> None:
        self._feed(node, content, context, builder)
        inner = _BodyContext(
            namespace=list(context.namespace),
            class_level=True,
            cursor=RubyAstUtils.skip_line_tail(content, RubyAstUtils.header_end(node)),
        )
        self._scan_body(node, content, inner, builder)
        context.cursor = RubyAstUtils.skip_line_tail(content, node.end_byte)

    def _scan_body(
        self, node: Node, content: bytes, inner: _BodyContext, builder: RegistryBuilder
    ) -> None:
        builder.on_scope_open()
        self._scan_statements(RubyAstUtils.body_statements(node), content, inner, builder)
        end = max(RubyAstUtils.body_end(node), inner.cursor)
        builder.on_scope_close(
            RubyAstUtils.slice_text(content, inner.cursor, end),
            RubyAstUtils.line_of(content, inner.cursor),
        )

    def _emit_method(
        self,
        node: Node,
        start: int,
        content: bytes,
        context: _BodyContext,
        visibility: Visibility,
        builder: RegistryBuilder,
    ) -> None:
        name = RubyAstUtils.method_name(node, content)
        if name is None:
            logger.debug(f"Skipping method without a name at line {node.start_point[0] + 1}")
            return
        if node.type == "singleton_method":
            kind = DeclarationKind.SINGLETON_METHOD
        else:
            kind = DeclarationKind.METHOD
        builder.on_declaration(
            DeclarationEvent(
                kind=kind,
                namespace=list(context.namespace),
                name=name,
                class_level=context.class_level or kind == DeclarationKind.SINGLETON_METHOD,
                visibility=visibility,
                preceding_text=RubyAstUtils.slice_text(content, context.cursor, start),
                preceding_line=RubyAstUtils.line_of(content, context.cursor),
                line=node.start_point[0] + 1,
                file=self._file,
            )
        )
        context.cursor = RubyAstUtils.skip_line_tail(content, max(node.end_byte, start))

    def _emit_attribute(
        self,
        node: Node,
        start: int,
        directive: str,
        content: bytes,
        context: _BodyContext,
        visibility: Visibility,
        builder: RegistryBuilder,
    ) -> None:
        arguments = RubyAstUtils.call_arguments(node)
        names = [n for n in (RubyAstUtils.symbol_name(a, content) for a in arguments) if n]
        if not names:
            self._feed(node, content, context, builder)
            return
        builder.on_declaration(
            DeclarationEvent(
                kind=DeclarationKind.ATTRIBUTE,
                namespace=list(context.namespace),
                name=names[0],
                names=names,
                accessor_mode=_ACCESSOR_MODES[directive],
                class_level=context.class_level,
                visibility=visibility,
                preceding_text=RubyAstUtils.slice_text(content, context.cursor, start),
                preceding_line=RubyAstUtils.line_of(content, context.cursor),
                line=node.start_point[0] + 1,
                file=self._file,
            )
        )
        context.cursor = RubyAstUtils.skip_line_tail(content, max(node.end_byte, start))

    def _feed(
        self,
        node: Node,
        content: bytes,
        context: _BodyContext,
        builder: RegistryBuilder,
    ) -> None:
        """Hand over the text before a non-declaration statement and step past it."""
        builder.on_text(
            RubyAstUtils.slice_text(content, context.cursor, node.start_byte),
            RubyAstUtils.line_of(content, context.cursor),
        )
        context.cursor = RubyAstUtils.skip_line_tail(content, node.end_byte)
