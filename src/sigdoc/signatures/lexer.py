"""Tokenizer for sig block bodies.

Newlines and indentation are insignificant; every token keeps its source
offsets so callers can slice the original text (used for proc types).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from sigdoc.signatures.errors import MalformedSignature


class TokenKind(Enum):
    IDENT = auto()  # foo, returns, void, nil
    CONST = auto()  # String, T
    SYMBOL = auto()  # :name
    STRING = auto()
    NUMBER = auto()
    DOT = auto()  # .
    SCOPE = auto()  # ::
    COMMA = auto()  # ,
    COLON = auto()  # : after a keyword label
    ARROW = auto()  # =>
    LPAREN = auto()
    RPAREN = auto()
    LBRACK = auto()
    RBRACK = auto()
    LBRACE = auto()
    RBRACE = auto()
    LT = auto()
    GT = auto()
    OTHER = auto()
    EOF = auto()


OPENERS = {TokenKind.LPAREN: TokenKind.RPAREN, TokenKind.LBRACK: TokenKind.RBRACK,
           TokenKind.LBRACE: TokenKind.RBRACE}

_SINGLE_CHAR = {
    ".": TokenKind.DOT,
    ",": TokenKind.COMMA,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACK,
    "]": TokenKind.RBRACK,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    start: int
    end: int
    line: int

    def is_ident(self, *names: str) -> bool:
        return self.kind == TokenKind.IDENT and (not names or self.value in names)


def _is_name_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def tokenize(text: str) -> list[Token]:
    """Split a sig body into tokens, ending with a single EOF token.

    Raises:
        MalformedSignature: On an unterminated string literal.
    """
    tokens: list[Token] = []
    i = 0
    line = 1
    n = len(text)

    while i < n:
        ch = text[i]

        if ch == "\n":
            line += 1
            i += 1
            continue
        if ch.isspace():
            i += 1
            continue
        if ch == "#":
            while i < n and text[i] != "\n":
                i += 1
            continue

        start = i
        if _is_name_start(ch):
            while i < n and _is_name_char(text[i]):
                i += 1
            if i < n and text[i] in "?!" and not text.startswith("!=", i):
                i += 1
            value = text[start:i]
            kind = TokenKind.CONST if value[0].isupper() else TokenKind.IDENT
            tokens.append(Token(kind, value, start, i, line))
            continue

        if ch.isdigit():
            while i < n and (text[i].isdigit() or text[i] in "._"):
                i += 1
            tokens.append(Token(TokenKind.NUMBER, text[start:i], start, i, line))
            continue

        if ch in "'\"":
            i += 1
            while i < n and text[i] != ch:
                if text[i] == "\\":
                    i += 1
                elif text[i] == "\n":
                    line += 1
                i += 1
            if i >= n:
                raise MalformedSignature("Unterminated string literal", offset=start)
            i += 1
            tokens.append(Token(TokenKind.STRING, text[start:i], start, i, line))
            continue

        if text.startswith("::", i):
            i += 2
            tokens.append(Token(TokenKind.SCOPE, "::", start, i, line))
            continue

        if ch == ":":
            glued_to_name = bool(tokens) and tokens[-1].end == start and tokens[-1].kind in (
                TokenKind.IDENT,
                TokenKind.CONST,
            )
            if not glued_to_name and i + 1 < n and _is_name_start(text[i + 1]):
                i += 1
                while i < n and _is_name_char(text[i]):
                    i += 1
                tokens.append(Token(TokenKind.SYMBOL, text[start:i], start, i, line))
                continue
            i += 1
            tokens.append(Token(TokenKind.COLON, ":", start, i, line))
            continue

        if text.startswith("=>", i):
            i += 2
            tokens.append(Token(TokenKind.ARROW, "=>", start, i, line))
            continue

        i += 1
        tokens.append(Token(_SINGLE_CHAR.get(ch, TokenKind.OTHER), ch, start, i, line))

    tokens.append(Token(TokenKind.EOF, "", n, n, line))
    return tokens
