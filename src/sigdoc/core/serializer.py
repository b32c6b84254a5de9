"""Registry serialization and deserialization.

This module provides functions to serialize a registry of documented objects
to JSON and deserialize JSON back into a Registry.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from sigdoc.core.models import Registry


class SerializationError(Exception):
    """Error during serialization or deserialization."""

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


def _format_validation_error(error: ValidationError) -> str:
    error_details = []
    for err in error.errors():
        loc = ".".join(str(x) for x in err["loc"])
        error_details.append(f"{loc}: {err['msg']}")
    return "; ".join(error_details)


def serialize(registry: Registry) -> str:
    """Serialize a registry to a JSON string.

    Args:
        registry: The registry to serialize.

    Returns:
        JSON string representation of the registry.

    Raises:
        SerializationError: If serialization fails.
    """
    try:
        data = registry.model_dump(mode="json")
        return json.dumps(data, indent=2, ensure_ascii=False)
    except Exception as e:
        raise SerializationError(
            message="Failed to serialize registry",
            details=str(e),
        ) from e


def deserialize(json_str: str) -> Registry:
    """Deserialize a JSON string to a registry.

    Args:
        json_str: JSON string representation of a registry.

    Returns:
        The deserialized Registry.

    Raises:
        SerializationError: If deserialization fails with detailed error info.
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise SerializationError(
            message="Invalid JSON format",
            details=f"Line {e.lineno}, column {e.colno}: {e.msg}",
        ) from e
    return deserialize_from_dict(data)


def serialize_to_dict(registry: Registry) -> dict[str, Any]:
    """Serialize a registry to a dictionary."""
    return registry.model_dump(mode="json")


def deserialize_from_dict(data: dict[str, Any]) -> Registry:
    """Deserialize a dictionary to a registry.

    Raises:
        SerializationError: If the data does not describe a valid registry.
    """
    try:
        return Registry.model_validate(data)
    except ValidationError as e:
        raise SerializationError(
            message="Registry validation failed",
            details=_format_validation_error(e),
        ) from e
