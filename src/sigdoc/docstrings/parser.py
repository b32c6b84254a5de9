"""Parse YARD-style documentation comments into free text and tags.

Supported tag shapes::

    @param name [Type, Other] description
    @param [Type] name description
    @return [Type] description
    @abstract description
    @deprecated description

Lines indented below a tag continue that tag's text. ``@!`` directives are
ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from sigdoc.core.models import TagEntry

# Tags whose first word (after optional types) is a name
NAMED_TAGS = frozenset({"param", "yieldparam", "option", "attr", "attr_reader", "attr_writer"})

# Tags that may carry a [Types] list without a name
TYPED_TAGS = frozenset({"return", "yieldreturn", "raise"})

_TAG_LINE = re.compile(r"^@(?P<name>[A-Za-z_]\w*)(?:\s+(?P<rest>.*))?$")
_BRACKETS = {"[": "]", "<": ">", "{": "}", "(": ")"}


@dataclass
class ParsedDocstring:
    """Free text plus the structured tags of one documentation comment."""

    text: str = ""
    tags: list[TagEntry] = field(default_factory=list)


def strip_comment_marker(line: str) -> str:
    """Turn ``  # some text`` into ``some text`` (keeping deeper indentation)."""
    stripped = line.lstrip()
    if not stripped.startswith("#"):
        return line.rstrip()
    body = stripped[1:]
    if body.startswith(" "):
        body = body[1:]
    return body.rstrip()


def split_types(text: str) -> list[str]:
    """Split ``String, Array<A, B>, nil`` on top-level commas."""
    types: list[str] = []
    depth = 0
    current: list[str] = []
    for index, ch in enumerate(text):
        if ch == ">" and text[index - 1 : index] == "=":
            pass
        elif ch in _BRACKETS:
            depth += 1
        elif ch in _BRACKETS.values() and depth > 0:
            depth -= 1
        elif ch == "," and depth == 0:
            types.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    types.append("".join(current).strip())
    return [t for t in types if t]


def _read_types(rest: str) -> tuple[list[str] | None, str]:
    """Read a leading ``[...]`` type list; returns (types, remainder)."""
    if not rest.startswith("["):
        return None, rest
    depth = 0
    for index, ch in enumerate(rest):
        if ch == ">" and rest[index - 1 : index] == "=":
            continue
        if ch in _BRACKETS:
            depth += 1
        elif ch in _BRACKETS.values():
            depth -= 1
            if depth == 0:
                return split_types(rest[1:index]), rest[index + 1:].strip()
    return None, rest


def _build_tag(tag_name: str, rest: str) -> TagEntry:
    rest = rest.strip()
    if tag_name in NAMED_TAGS:
        types, rest = _read_types(rest)
        name, _, remainder = rest.partition(" ")
        remainder = remainder.strip()
        if types is None:
            types, remainder = _read_types(remainder)
        return TagEntry(tag_name=tag_name, name=name or None, types=types or [], text=remainder)
    if tag_name in TYPED_TAGS:
        types, rest = _read_types(rest)
        return TagEntry(tag_name=tag_name, types=types or [], text=rest)
    return TagEntry(tag_name=tag_name, text=rest)


def parse_docstring(comment: str) -> ParsedDocstring:
    """Parse comment text (markers already stripped) into text and tags."""
    text_lines: list[str] = []
    tags: list[TagEntry] = []
    current: TagEntry | None = None
    in_directive = False

    for line in comment.splitlines():
        match = _TAG_LINE.match(line)
        if line.startswith("@!"):
            current, in_directive = None, True
            continue
        if match:
            current = _build_tag(match.group("name"), match.group("rest") or "")
            tags.append(current)
            in_directive = False
            continue
        indented = line[:1] in (" ", "\t")
        if indented and line.strip() and (current is not None or in_directive):
            if current is not None:
                continuation = line.strip()
                current.text = f"{current.text}\n{continuation}" if current.text else continuation
            continue
        current, in_directive = None, False
        text_lines.append(line)

    return ParsedDocstring(text="\n".join(text_lines).strip(), tags=tags)


def format_tag(entry: TagEntry) -> str:
    """Render a tag back into its ``@name name [Types] text`` comment form."""
    parts = [f"@{entry.tag_name}"]
    if entry.name:
        parts.append(entry.name)
    if entry.types:
        parts.append(f"[{', '.join(entry.types)}]")
    if entry.text:
        parts.append(entry.text)
    return " ".join(parts)
