"""Recursive-descent parser for sig block bodies.

Turns text such as ``params(x: Integer).returns(T.nilable(String))`` (or a
whole ``sig { ... }`` / ``sig do ... end`` block) into a SignatureNode whose
slots hold TypeExpression trees.
"""

from __future__ import annotations

import logging
import re

from sigdoc.core.models import Diagnostic, DiagnosticKind
from sigdoc.core.type_expr import (
    FixedHash,
    FixedTuple,
    GenericCollection,
    Nilable,
    ProcType,
    SignatureNode,
    Simple,
    SourceSpan,
    TypeExpression,
    TypeUnion,
    Untyped,
)
from sigdoc.signatures.errors import MalformedSignature, SignatureError, UnresolvedProcSpan
from sigdoc.signatures.lexer import OPENERS, Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

_NEWLINE_RUN = re.compile(r"\s*\n\s*")

# Constant names rewritten to their documentation spelling
_CONSTANT_ALIASES = {
    "NilClass": "nil",
    "T::Boolean": "Boolean",
}


def normalize_whitespace(raw: str) -> str:
    """Collapse every whitespace run containing a newline into a single space."""
    return _NEWLINE_RUN.sub(" ", raw.strip())


class _Reader:
    """Cursor over a token list bounded by ``limit`` (exclusive)."""

    def __init__(self, text: str, tokens: list[Token], start: int, limit: int) -> None:
        self.text = text
        self.tokens = tokens
        self.pos = start
        self.limit = limit

    def peek(self, ahead: int = 0) -> Token:
        index = self.pos + ahead
        if index >= self.limit:
            boundary = self.tokens[self.limit]
            return Token(TokenKind.EOF, "", boundary.start, boundary.start, boundary.line)
        return self.tokens[index]

    def advance(self) -> Token:
        token = self.peek()
        if token.kind != TokenKind.EOF:
            self.pos += 1
        return token

    def at_end(self) -> bool:
        return self.pos >= self.limit

    def accept(self, kind: TokenKind) -> Token | None:
        if self.peek().kind == kind:
            return self.advance()
        return None

    def expect(self, kind: TokenKind, what: str) -> Token:
        token = self.peek()
        if token.kind != kind:
            found = token.value or "end of signature"
            raise MalformedSignature(f"Expected {what}, found {found!r}", offset=token.start)
        return self.advance()

    def skip_balanced(self) -> Token:
        """Consume a bracketed group starting at the current opener.

        Returns:
            The closing token.

        Raises:
            UnresolvedProcSpan: If the group is still open at the limit.
        """
        opener = self.advance()
        stack = [OPENERS[opener.kind]]
        while stack:
            token = self.advance()
            if token.kind == TokenKind.EOF:
                raise UnresolvedProcSpan("Unbalanced brackets", offset=opener.start)
            if token.kind in OPENERS:
                stack.append(OPENERS[token.kind])
            elif token.kind in OPENERS.values():
                if token.kind != stack[-1]:
                    raise MalformedSignature(
                        f"Mismatched bracket {token.value!r}", offset=token.start
                    )
                stack.pop()
        return token


class SignatureParser:
    """Parses sig block text into SignatureNode and TypeExpression values."""

    def parse(
        self,
        text: str,
        start_line: int = 1,
        diagnostics: list[Diagnostic] | None = None,
    ) -> SignatureNode:
        """Parse a sig body (or a whole sig block) into a SignatureNode.

        Args:
            text: The sig block or its body, possibly spanning several lines.
            start_line: Source line of the first character of ``text``.
            diagnostics: Optional list collecting recovered problems.

        Returns:
            The parsed SignatureNode.

        Raises:
            MalformedSignature: If the chain does not terminate in
                ``returns(...)`` or ``void``, or brackets are unbalanced.
        """
        tokens = tokenize(text)
        start, limit = self._body_bounds(tokens)
        reader = _Reader(text, tokens, start, limit)
        sink = diagnostics if diagnostics is not None else []

        abstract = overridable = override = is_void = False
        abstract_text: str | None = None
        params: list[tuple[str, TypeExpression]] = []
        returns: TypeExpression | None = None
        terminated = False

        if reader.at_end():
            raise MalformedSignature("Empty signature")

        while True:
            token = reader.expect(TokenKind.IDENT, "a signature method")
            name = token.value
            if name == "params":
                params.extend(self._parse_params(reader, params, sink))
            elif name == "returns":
                reader.expect(TokenKind.LPAREN, "'(' after returns")
                returns = self._parse_type(reader, sink)
                reader.expect(TokenKind.RPAREN, "')' closing returns")
                terminated = True
            elif name == "void":
                is_void = True
                terminated = True
            else:
                if name == "abstract":
                    abstract = True
                    abstract_text = self._string_argument(reader)
                elif name == "overridable":
                    overridable = True
                elif name == "override":
                    override = True
                if reader.peek().kind == TokenKind.LPAREN:
                    self._skip_group(reader)

            if terminated:
                if not reader.at_end():
                    extra = reader.peek()
                    raise MalformedSignature(
                        f"Unexpected {extra.value!r} after signature terminator",
                        offset=extra.start,
                    )
                break
            if reader.at_end():
                raise MalformedSignature("Signature must end with returns(...) or void")
            reader.expect(TokenKind.DOT, "'.' between signature methods")

        first, last = tokens[start], tokens[limit - 1]
        return SignatureNode(
            abstract=abstract,
            abstract_text=abstract_text,
            overridable=overridable,
            override=override,
            params=tuple(params),
            returns=returns,
            is_void=is_void,
            span=SourceSpan(
                start_line=start_line + first.line - 1,
                end_line=start_line + last.line - 1,
            ),
        )

    def parse_type(self, text: str) -> TypeExpression:
        """Parse a standalone type expression such as ``T::Array[String]``.

        Raises:
            MalformedSignature: If the text is not exactly one type expression.
        """
        tokens = tokenize(text)
        reader = _Reader(text, tokens, 0, len(tokens) - 1)
        expr = self._parse_type(reader, [])
        if not reader.at_end():
            extra = reader.peek()
            raise MalformedSignature(f"Unexpected {extra.value!r} after type", offset=extra.start)
        return expr

    def _body_bounds(self, tokens: list[Token]) -> tuple[int, int]:
        """Return the token range of the chain, unwrapping ``sig { ... }`` blocks."""
        eof = len(tokens) - 1
        if not tokens[0].is_ident("sig"):
            return 0, eof

        reader = _Reader("", tokens, 1, eof)
        if reader.peek().kind == TokenKind.LPAREN:
            self._skip_group(reader)
        open_index = reader.pos
        opener = reader.peek()
        if opener.kind == TokenKind.LBRACE:
            try:
                reader.skip_balanced()
                close_index = reader.pos - 1
            except SignatureError as e:
                # unbalanced payload; the block still ends at the last brace
                if eof - 1 <= open_index or tokens[eof - 1].kind != TokenKind.RBRACE:
                    raise MalformedSignature("Unclosed sig block", offset=opener.start) from e
                close_index = eof - 1
        elif opener.is_ident("do"):
            close_index = eof - 1
            if close_index <= reader.pos or not tokens[close_index].is_ident("end"):
                raise MalformedSignature("sig do-block is missing 'end'", offset=opener.start)
        else:
            raise MalformedSignature("Expected a block after sig", offset=opener.start)

        if close_index != eof - 1:
            extra = tokens[close_index + 1]
            raise MalformedSignature(f"Unexpected {extra.value!r} after sig block", offset=extra.start)
        return open_index + 1, close_index

    def _string_argument(self, reader: _Reader) -> str | None:
        """Return the text of a lone string argument such as ``abstract("why")``."""
        if (
            reader.peek().kind == TokenKind.LPAREN
            and reader.peek(1).kind == TokenKind.STRING
            and reader.peek(2).kind == TokenKind.RPAREN
        ):
            return reader.peek(1).value[1:-1]
        return None

    def _skip_group(self, reader: _Reader) -> None:
        try:
            reader.skip_balanced()
        except UnresolvedProcSpan as e:
            raise MalformedSignature(e.message, offset=e.offset) from e

    def _parse_params(
        self,
        reader: _Reader,
        seen: list[tuple[str, TypeExpression]],
        sink: list[Diagnostic],
    ) -> list[tuple[str, TypeExpression]]:
        """Parse ``(name: type, ...)``; a trailing comma is allowed."""
        reader.expect(TokenKind.LPAREN, "'(' after params")
        params: list[tuple[str, TypeExpression]] = []
        known = {name for name, _ in seen}
        while not reader.accept(TokenKind.RPAREN):
            name_token = reader.peek()
            if name_token.kind not in (TokenKind.IDENT, TokenKind.CONST):
                found = name_token.value or "end of signature"
                raise MalformedSignature(f"Expected parameter name, found {found!r}",
                                         offset=name_token.start)
            reader.advance()
            reader.expect(TokenKind.COLON, f"':' after parameter {name_token.value!r}")
            if name_token.value in known:
                raise MalformedSignature(f"Duplicate parameter {name_token.value!r}",
                                         offset=name_token.start)
            known.add(name_token.value)
            params.append((name_token.value, self._parse_type(reader, sink)))
            if not reader.accept(TokenKind.COMMA):
                reader.expect(TokenKind.RPAREN, "',' or ')' in params")
                break
        return params

    def _parse_type_list(
        self, reader: _Reader, closer: TokenKind, sink: list[Diagnostic]
    ) -> list[TypeExpression]:
        items = [self._parse_type(reader, sink)]
        while reader.accept(TokenKind.COMMA):
            if reader.peek().kind == closer:
                break
            items.append(self._parse_type(reader, sink))
        reader.expect(closer, "closing bracket")
        return items

    def _parse_type(self, reader: _Reader, sink: list[Diagnostic]) -> TypeExpression:
        token = reader.peek()

        if token.kind == TokenKind.LBRACK:
            reader.advance()
            if reader.peek().kind == TokenKind.RBRACK:
                raise MalformedSignature("Empty tuple type", offset=token.start)
            return FixedTuple(elements=self._parse_type_list(reader, TokenKind.RBRACK, sink))

        if token.kind == TokenKind.LBRACE:
            # shape type such as {name: String}
            self._skip_group(reader)
            return FixedHash()

        if token.kind == TokenKind.CONST and token.value == "T" and reader.peek(1).kind == TokenKind.DOT:
            return self._parse_t_method(reader, sink)

        if token.kind in (TokenKind.CONST, TokenKind.SCOPE):
            return self._parse_constant(reader, sink)

        if token.kind == TokenKind.IDENT and token.value in ("nil", "void", "self", "true", "false"):
            reader.advance()
            return Simple(name=token.value)

        found = token.value or "end of signature"
        raise MalformedSignature(f"Expected a type, found {found!r}", offset=token.start)

    def _parse_t_method(self, reader: _Reader, sink: list[Diagnostic]) -> TypeExpression:
        """Parse ``T.<method>...`` forms."""
        t_token = reader.advance()
        reader.advance()  # '.'
        method = reader.expect(TokenKind.IDENT, "a T method")

        if method.value == "nilable":
            reader.expect(TokenKind.LPAREN, "'(' after T.nilable")
            inner = self._parse_type(reader, sink)
            reader.expect(TokenKind.RPAREN, "')' closing T.nilable")
            return Nilable(inner=inner)
        if method.value == "any":
            reader.expect(TokenKind.LPAREN, "'(' after T.any")
            return TypeUnion(alternatives=self._parse_type_list(reader, TokenKind.RPAREN, sink))
        if method.value == "untyped":
            return Untyped()
        if method.value == "self_type":
            return Simple(name="self")
        if method.value == "class_of":
            reader.expect(TokenKind.LPAREN, "'(' after T.class_of")
            target = self._parse_type(reader, sink)
            reader.expect(TokenKind.RPAREN, "')' closing T.class_of")
            return GenericCollection(container="Class", args=(target,))
        if method.value == "proc":
            return self._capture_proc(reader, t_token, sink)
        return self._opaque_t_method(reader, t_token, method)

    def _opaque_t_method(self, reader: _Reader, t_token: Token, method: Token) -> TypeExpression:
        """Keep an unrecognized ``T.<method>(...)`` form as verbatim text."""
        end = method.end
        if reader.peek().kind == TokenKind.LPAREN:
            try:
                end = reader.skip_balanced().end
            except UnresolvedProcSpan as e:
                raise MalformedSignature(e.message, offset=e.offset) from e
        raw = normalize_whitespace(reader.text[t_token.start:end])
        logger.debug(f"Keeping unrecognized type construct {raw!r} verbatim")
        return Simple(name=raw)

    def _capture_proc(self, reader: _Reader, t_token: Token, sink: list[Diagnostic]) -> TypeExpression:
        """Capture ``T.proc`` and its whole method chain verbatim."""
        end = reader.tokens[reader.pos - 1].end
        try:
            while reader.peek().kind == TokenKind.DOT and reader.peek(1).kind == TokenKind.IDENT:
                reader.advance()
                end = reader.advance().end
                if reader.peek().kind == TokenKind.LPAREN:
                    end = reader.skip_balanced().end
        except UnresolvedProcSpan as e:
            return self._recover_proc(reader, t_token, e, sink)
        return ProcType(raw=normalize_whitespace(reader.text[t_token.start:end]))

    def _recover_proc(
        self,
        reader: _Reader,
        t_token: Token,
        error: UnresolvedProcSpan,
        sink: list[Diagnostic],
    ) -> TypeExpression:
        """Fall back to the rest of the line as plain text after an unclosed proc."""
        boundary = reader.tokens[reader.limit].start
        line_end = reader.text.find("\n", t_token.start, boundary)
        if line_end == -1:
            line_end = boundary
        raw = reader.text[t_token.start:line_end].strip()
        logger.debug(f"Unclosed proc type at offset {error.offset}, using {raw!r}")
        sink.append(
            Diagnostic(
                kind=DiagnosticKind.UNRESOLVED_PROC_SPAN,
                message=f"Unbalanced parentheses in proc type: {raw}",
            )
        )
        reader.pos = next(
            (
                index
                for index in range(reader.tokens.index(t_token), reader.limit)
                if reader.tokens[index].line > t_token.line
            ),
            reader.limit,
        )
        return Simple(name=raw)

    def _read_constant_path(self, reader: _Reader) -> str:
        parts: list[str] = []
        if reader.accept(TokenKind.SCOPE):
            parts.append("")
        parts.append(reader.expect(TokenKind.CONST, "a constant").value)
        while reader.peek().kind == TokenKind.SCOPE and reader.peek(1).kind == TokenKind.CONST:
            reader.advance()
            parts.append(reader.advance().value)
        return "::".join(parts)

    def _parse_constant(self, reader: _Reader, sink: list[Diagnostic]) -> TypeExpression:
        """Parse a constant path and any collection payload that follows it."""
        start = reader.peek()
        path = self._read_constant_path(reader)
        if path in _CONSTANT_ALIASES:
            return Simple(name=_CONSTANT_ALIASES[path])

        sorbet_generic = path.startswith("T::") and path.count("::") == 1
        name = path[3:] if sorbet_generic else path
        follower = reader.peek()

        if follower.kind == TokenKind.LBRACK:
            reader.advance()
            args = self._parse_type_list(reader, TokenKind.RBRACK, sink)
            return self._collection(name, args, key_value=(name == "Hash"), offset=start.start)
        if follower.kind == TokenKind.LT:
            reader.advance()
            args = self._parse_type_list(reader, TokenKind.GT, sink)
            return self._collection(name, args, key_value=False, offset=start.start)
        if follower.kind == TokenKind.LBRACE:
            reader.advance()
            key = self._parse_type(reader, sink)
            reader.expect(TokenKind.ARROW, "'=>' in key/value type")
            value = self._parse_type(reader, sink)
            reader.expect(TokenKind.RBRACE, "'}' closing key/value type")
            return self._collection(name, [key, value], key_value=True, offset=start.start)
        if follower.kind == TokenKind.LPAREN and name == "Array":
            reader.advance()
            return FixedTuple(elements=self._parse_type_list(reader, TokenKind.RPAREN, sink))

        if name == "Hash":
            return FixedHash()
        return Simple(name=name if sorbet_generic else path)

    def _collection(
        self, name: str, args: list[TypeExpression], key_value: bool, offset: int
    ) -> GenericCollection:
        if key_value and len(args) != 2:
            raise MalformedSignature(
                f"{name} key/value type needs 2 arguments, got {len(args)}", offset=offset
            )
        return GenericCollection(container=name, args=tuple(args), key_value=key_value)


def parse_signature(text: str, start_line: int = 1) -> SignatureNode:
    """Parse a sig body with a fresh parser."""
    return SignatureParser().parse(text, start_line=start_line)


def parse_type(text: str) -> TypeExpression:
    """Parse a standalone type expression with a fresh parser."""
    return SignatureParser().parse_type(text)
