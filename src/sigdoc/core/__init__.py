"""Core module containing data models, configuration and serializer."""

from sigdoc.core.models import (
    AccessorMode,
    DeclarationEvent,
    DeclarationKind,
    DeclarationTarget,
    Diagnostic,
    DiagnosticKind,
    DocumentedObject,
    ObjectKind,
    Registry,
    TagEntry,
    Visibility,
)
from sigdoc.core.serializer import (
    SerializationError,
    deserialize,
    deserialize_from_dict,
    serialize,
    serialize_to_dict,
)
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

__all__ = [
    "AccessorMode",
    "DeclarationEvent",
    "DeclarationKind",
    "DeclarationTarget",
    "Diagnostic",
    "DiagnosticKind",
    "DocumentedObject",
    "FixedHash",
    "FixedTuple",
    "GenericCollection",
    "Nilable",
    "ObjectKind",
    "ProcType",
    "Registry",
    "SerializationError",
    "SignatureNode",
    "Simple",
    "SourceSpan",
    "TagEntry",
    "TypeExpression",
    "TypeUnion",
    "Untyped",
    "Visibility",
    "deserialize",
    "deserialize_from_dict",
    "serialize",
    "serialize_to_dict",
]
