"""Errors raised while reading signature blocks."""

from __future__ import annotations


class SignatureError(Exception):
    """Base class for signature parsing errors."""

    def __init__(self, message: str, offset: int | None = None, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.details = details


class MalformedSignature(SignatureError):
    """The sig body violates the signature grammar.

    Recoverable: the declaration is documented without signature data.
    """


class UnresolvedProcSpan(SignatureError):
    """A ``T.proc`` expression never closes its parentheses."""
