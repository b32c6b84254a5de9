"""Signature extraction: parsing, rendering, correlation and tag merging."""

from sigdoc.signatures.correlator import (
    Association,
    Correlator,
    CorrelatorState,
    build_targets,
    fold_signatures,
    scan_segments,
)
from sigdoc.signatures.errors import MalformedSignature, SignatureError, UnresolvedProcSpan
from sigdoc.signatures.merger import TagMerger, merge_tags
from sigdoc.signatures.parser import SignatureParser, parse_signature, parse_type
from sigdoc.signatures.renderer import render, render_first, render_return

__all__ = [
    "Association",
    "Correlator",
    "CorrelatorState",
    "MalformedSignature",
    "SignatureError",
    "SignatureParser",
    "TagMerger",
    "UnresolvedProcSpan",
    "build_targets",
    "fold_signatures",
    "merge_tags",
    "parse_signature",
    "parse_type",
    "render",
    "render_first",
    "render_return",
    "scan_segments",
]
