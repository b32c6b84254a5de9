"""Unit tests for registry serialization."""

import json

import pytest

from sigdoc.core.models import (
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


@pytest.fixture
def registry() -> Registry:
    registry = Registry()
    registry.register(
        DocumentedObject(
            path="CollectionSigs#fixed_hash",
            name="fixed_hash",
            kind=ObjectKind.INSTANCE_METHOD,
            namespace=["CollectionSigs"],
            visibility=Visibility.PROTECTED,
            tags=[TagEntry(tag_name="return", types=["Hash"])],
            file="sig_handler.rb",
            line=12,
        )
    )
    registry.diagnostics.append(
        Diagnostic(kind=DiagnosticKind.UNMATCHED_SIGNATURE, message="dangling", line=3)
    )
    return registry


class TestSerialize:
    def test_json_shape(self, registry: Registry) -> None:
        data = json.loads(serialize(registry))
        obj = data["objects"]["CollectionSigs#fixed_hash"]
        assert obj["visibility"] == "protected"
        assert obj["tags"][0]["types"] == ["Hash"]
        assert data["diagnostics"][0]["kind"] == "unmatched_signature"

    def test_roundtrip(self, registry: Registry) -> None:
        assert deserialize(serialize(registry)) == registry

    def test_dict_roundtrip(self, registry: Registry) -> None:
        assert deserialize_from_dict(serialize_to_dict(registry)) == registry


class TestDeserializeErrors:
    def test_invalid_json(self) -> None:
        with pytest.raises(SerializationError) as exc_info:
            deserialize("{not json")
        assert exc_info.value.message == "Invalid JSON format"
        assert "Line 1" in exc_info.value.details

    def test_invalid_registry(self) -> None:
        with pytest.raises(SerializationError) as exc_info:
            deserialize_from_dict({"objects": {"X#y": {"path": "X#y"}}})
        assert exc_info.value.message == "Registry validation failed"
        assert "objects" in exc_info.value.details
