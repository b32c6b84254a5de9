"""Correlate sig blocks with the declarations they document.

The correlator consumes declaration events in source order. Each event's
preceding source text is scanned for comment runs, sig blocks and other
code; sig blocks wait in a per-scope pending slot until the next
declaration at the same level claims them.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from sigdoc.core.models import (
    AccessorMode,
    DeclarationEvent,
    DeclarationKind,
    DeclarationTarget,
    Diagnostic,
    DiagnosticKind,
    ObjectKind,
    TagEntry,
)
from sigdoc.core.type_expr import SignatureNode, SourceSpan
from sigdoc.docstrings import parse_docstring, strip_comment_marker
from sigdoc.signatures.errors import SignatureError
from sigdoc.signatures.parser import SignatureParser

logger = logging.getLogger(__name__)

_SIG_START = re.compile(r"sig\b\s*(?=[({]|do\b)")
_MAGIC_COMMENT = re.compile(
    r"^#\s*(?:-\*-.*-\*-|(?:typed|frozen_string_literal|encoding|coding|warn_indent|"
    r"shareable_constant_value)\s*:)"
)
_WORD = re.compile(r"[A-Za-z_]\w*[?!]?")
_BRACKETS = {"(": ")", "[": "]", "{": "}"}


class CorrelatorState(str, Enum):
    """State of a scope's pending signature slot."""

    IDLE = "idle"
    PENDING_SIG = "pending_sig"


class SegmentKind(str, Enum):
    BLANK = "blank"
    COMMENT = "comment"
    SIG = "sig"
    CODE = "code"


@dataclass
class Segment:
    """A classified slice of preceding source text."""

    kind: SegmentKind
    text: str
    line: int
    end_line: int


@dataclass
class Association:
    """Result of correlating one declaration event."""

    event: DeclarationEvent
    targets: list[DeclarationTarget] = field(default_factory=list)
    signature: SignatureNode | None = None
    chained: bool = False
    docstring: str = ""
    explicit_tags: list[TagEntry] = field(default_factory=list)


@dataclass
class _PendingSig:
    node: SignatureNode
    line: int


@dataclass
class _Scope:
    pending: list[_PendingSig] = field(default_factory=list)
    doc_runs: list[str] = field(default_factory=list)

    @property
    def state(self) -> CorrelatorState:
        return CorrelatorState.PENDING_SIG if self.pending else CorrelatorState.IDLE

    def reset(self) -> None:
        self.pending = []
        self.doc_runs = []


def _skip_string(text: str, index: int) -> int:
    quote = text[index]
    index += 1
    while index < len(text) and text[index] != quote:
        if text[index] == "\\":
            index += 1
        index += 1
    return index + 1


def _match_brackets(text: str, index: int) -> int | None:
    """Return the offset just past the bracket group opening at ``index``."""
    stack: list[str] = []
    while index < len(text):
        ch = text[index]
        if ch in "'\"":
            index = _skip_string(text, index)
            continue
        if ch == "#":
            newline = text.find("\n", index)
            index = len(text) if newline == -1 else newline
            continue
        if ch in _BRACKETS:
            stack.append(_BRACKETS[ch])
        elif ch in _BRACKETS.values():
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return index + 1
        index += 1
    return None


def _match_do_end(text: str, index: int) -> int | None:
    """Return the offset just past the ``end`` closing the ``do`` at ``index``."""
    depth = 0
    while index < len(text):
        ch = text[index]
        if ch in "'\"":
            index = _skip_string(text, index)
            continue
        if ch == "#":
            newline = text.find("\n", index)
            index = len(text) if newline == -1 else newline
            continue
        word = _WORD.match(text, index)
        if word and (index == 0 or not (text[index - 1].isalnum() or text[index - 1] == "_")):
            if word.group() == "do":
                depth += 1
            elif word.group() == "end":
                depth -= 1
                if depth == 0:
                    return word.end()
            index = word.end()
            continue
        index += 1
    return None


def sig_extent(text: str, start: int) -> int | None:
    """Find the end offset of the sig block starting at ``start``.

    Returns:
        Offset just past the closing ``}`` / ``end``, or None if the block
        does not close.
    """
    match = _SIG_START.match(text, start)
    if match is None:
        return None
    index = match.end()
    if text[index] == "(":
        after_args = _match_brackets(text, index)
        if after_args is None:
            return None
        index = after_args
        while index < len(text) and text[index].isspace():
            index += 1
    if text.startswith("{", index):
        return _match_brackets(text, index)
    if text.startswith("do", index):
        return _match_do_end(text, index)
    return None


def scan_segments(text: str, start_line: int = 1) -> list[Segment]:
    """Classify preceding text into blank, comment, sig and code segments.

    The first piece (the tail of the line before the text) and the last piece
    (the indentation of the declaration's own line) only count when they hold
    content.
    """
    pieces = text.split("\n")
    offsets: list[int] = []
    position = 0
    for piece in pieces:
        offsets.append(position)
        position += len(piece) + 1

    segments: list[Segment] = []
    index = 0
    in_block_comment = False
    while index < len(pieces):
        piece = pieces[index]
        stripped = piece.strip()
        line = start_line + index
        edge = index == 0 or index == len(pieces) - 1

        if in_block_comment:
            in_block_comment = not piece.startswith("=end")
            segments.append(Segment(SegmentKind.BLANK, piece, line, line))
        elif piece.startswith("=begin"):
            in_block_comment = True
            segments.append(Segment(SegmentKind.BLANK, piece, line, line))
        elif not stripped:
            if not edge:
                segments.append(Segment(SegmentKind.BLANK, piece, line, line))
        elif stripped.startswith("#"):
            kind = SegmentKind.BLANK if _MAGIC_COMMENT.match(stripped) else SegmentKind.COMMENT
            segments.append(Segment(kind, piece, line, line))
        elif _SIG_START.match(stripped):
            sig_start = offsets[index] + (len(piece) - len(piece.lstrip()))
            sig_end = sig_extent(text, sig_start)
            if sig_end is None:
                segments.append(Segment(SegmentKind.SIG, text[sig_start:], line, line))
            else:
                end_index = text.count("\n", 0, sig_end)
                segments.append(
                    Segment(SegmentKind.SIG, text[sig_start:sig_end], line, start_line + end_index)
                )
                index = end_index
        else:
            segments.append(Segment(SegmentKind.CODE, piece, line, line))
        index += 1
    return segments


def fold_signatures(nodes: list[SignatureNode]) -> SignatureNode:
    """Fold a chain of sigs; each later sig shadows earlier ones field by field."""
    folded = nodes[0]
    for later in nodes[1:]:
        params = dict(folded.params)
        params.update(later.params)
        declares_return = later.returns is not None or later.is_void
        span = folded.span
        if span is not None and later.span is not None:
            span = SourceSpan(start_line=span.start_line, end_line=later.span.end_line)
        folded = SignatureNode(
            abstract=later.abstract,
            abstract_text=later.abstract_text or folded.abstract_text,
            overridable=later.overridable,
            override=later.override,
            params=tuple(params.items()),
            returns=later.returns if declares_return else folded.returns,
            is_void=later.is_void if declares_return else folded.is_void,
            span=span or later.span,
        )
    return folded


def build_targets(event: DeclarationEvent, explicit_tags: list[TagEntry]) -> list[DeclarationTarget]:
    """Expand a declaration event into the targets it documents.

    Accessor directives yield a getter and/or setter per attribute name.
    """

    def target(kind: ObjectKind, name: str, class_level: bool) -> DeclarationTarget:
        return DeclarationTarget(
            kind=kind,
            namespace=list(event.namespace),
            name=name,
            class_level=class_level,
            visibility=event.visibility,
            explicit_tags=[tag.model_copy(deep=True) for tag in explicit_tags],
        )

    if event.kind == DeclarationKind.METHOD:
        kind = ObjectKind.CLASS_METHOD if event.class_level else ObjectKind.INSTANCE_METHOD
        return [target(kind, event.name, event.class_level)]
    if event.kind == DeclarationKind.SINGLETON_METHOD:
        return [target(ObjectKind.CLASS_METHOD, event.name, True)]
    if event.kind == DeclarationKind.ATTRIBUTE:
        mode = event.accessor_mode or AccessorMode.ACCESSOR
        targets: list[DeclarationTarget] = []
        for name in event.names or [event.name]:
            if mode in (AccessorMode.READER, AccessorMode.ACCESSOR):
                targets.append(target(ObjectKind.ACCESSOR_GETTER, name, event.class_level))
            if mode in (AccessorMode.WRITER, AccessorMode.ACCESSOR):
                targets.append(target(ObjectKind.ACCESSOR_SETTER, f"{name}=", event.class_level))
        return targets
    return []


class Correlator:
    """Matches sig blocks to the next declaration at the same nesting level.

    One instance serves one source unit. Hosts call ``open_scope`` and
    ``close_scope`` around every namespace body so each level keeps its own
    pending slot.
    """

    def __init__(self, parser: SignatureParser | None = None, file: str | None = None) -> None:
        """Initialize the correlator.

        Args:
            parser: Signature parser to use (a fresh one by default).
            file: Source unit name used in diagnostics.
        """
        self._parser = parser or SignatureParser()
        self._file = file
        self._scopes: list[_Scope] = [_Scope()]
        self.diagnostics: list[Diagnostic] = []

    @property
    def state(self) -> CorrelatorState:
        """State of the innermost open scope."""
        return self._scopes[-1].state

    def open_scope(self) -> None:
        """Enter a namespace body."""
        self._scopes.append(_Scope())

    def close_scope(self, trailing_text: str = "", trailing_line: int = 1) -> None:
        """Leave a namespace body, reporting sigs no declaration claimed.

        Args:
            trailing_text: Source between the last declaration and the end of the body.
            trailing_line: Line where ``trailing_text`` starts.
        """
        scope = self._scopes[-1]
        self._absorb(scope, trailing_text, trailing_line)
        self._drop_pending(scope, "end of scope")
        if len(self._scopes) > 1:
            self._scopes.pop()
        else:
            scope.reset()

    def feed(self, text: str, start_line: int = 1) -> None:
        """Absorb source that precedes a non-declaration construct.

        Sig blocks found in ``text`` stay pending in the current scope for the
        next declaration. A comment run directly before the construct belongs
        to it and is dropped.
        """
        self._absorb(self._scopes[-1], text, start_line)

    def finish(self, trailing_text: str = "", trailing_line: int = 1) -> list[Diagnostic]:
        """Close every open scope and return all diagnostics of the unit."""
        while len(self._scopes) > 1:
            self.close_scope()
        self.close_scope(trailing_text, trailing_line)
        return self.diagnostics

    def process(self, event: DeclarationEvent) -> Association | None:
        """Consume one declaration event.

        Returns:
            The association for the declaration, or None for sig events
            (which only fill the pending slot).
        """
        scope = self._scopes[-1]
        trailing_run = self._absorb(scope, event.preceding_text, event.preceding_line)

        if event.kind == DeclarationKind.SIGNATURE:
            if trailing_run:
                scope.doc_runs.append(trailing_run)
            self._add_signature(scope, event.source, event.line)
            return None

        doc_runs = [*scope.doc_runs, trailing_run] if trailing_run else list(scope.doc_runs)
        parsed = parse_docstring("\n".join(doc_runs))
        explicit_tags = [*event.explicit_tags, *parsed.tags]

        if event.kind in (DeclarationKind.CLASS, DeclarationKind.MODULE):
            self._drop_pending(scope, f"{event.kind.value} {event.name}")
            scope.reset()
            return Association(event=event, docstring=parsed.text, explicit_tags=explicit_tags)

        signature: SignatureNode | None = None
        chained = len(scope.pending) > 1
        if scope.pending:
            signature = fold_signatures([pending.node for pending in scope.pending])
        scope.reset()

        return Association(
            event=event,
            targets=build_targets(event, explicit_tags),
            signature=signature,
            chained=chained,
            docstring=parsed.text,
            explicit_tags=explicit_tags,
        )

    def _absorb(self, scope: _Scope, text: str, start_line: int) -> str:
        """Feed preceding text into a scope.

        Returns:
            The comment run that directly precedes the end of the text.
        """
        run: list[str] = []
        for segment in scan_segments(text, start_line):
            if segment.kind == SegmentKind.COMMENT:
                run.append(strip_comment_marker(segment.text))
                continue
            if segment.kind == SegmentKind.SIG:
                if run:
                    scope.doc_runs.append("\n".join(run))
                self._add_signature(scope, segment.text, segment.line)
            run = []
        return "\n".join(run)

    def _add_signature(self, scope: _Scope, text: str, line: int) -> None:
        found: list[Diagnostic] = []
        try:
            node = self._parser.parse(text, start_line=line, diagnostics=found)
        except SignatureError as e:
            logger.warning(f"Malformed signature at {self._location(line)}: {e.message}")
            self.diagnostics.extend(self._locate(found, line))
            self.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.MALFORMED_SIGNATURE,
                    message=e.message,
                    file=self._file,
                    line=line,
                )
            )
            return
        self.diagnostics.extend(self._locate(found, line))
        scope.pending.append(_PendingSig(node=node, line=line))

    def _drop_pending(self, scope: _Scope, reason: str) -> None:
        for pending in scope.pending:
            logger.info(f"Unmatched signature at {self._location(pending.line)} ({reason})")
            self.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.UNMATCHED_SIGNATURE,
                    message=f"Signature has no following method declaration ({reason})",
                    file=self._file,
                    line=pending.line,
                )
            )
        scope.pending = []

    def _locate(self, found: list[Diagnostic], line: int) -> list[Diagnostic]:
        return [d.model_copy(update={"file": self._file, "line": d.line or line}) for d in found]

    def _location(self, line: int) -> str:
        return f"{self._file or '<source>'}:{line}"
