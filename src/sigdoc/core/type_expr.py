"""Type expression model for parsed signature types.

A type expression is a closed tagged union of immutable pydantic models,
discriminated by the ``kind`` field. The parser builds these trees and the
renderer turns them back into documentation type strings.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _TypeNode(BaseModel):
    """Base class for all type expression variants."""

    model_config = ConfigDict(frozen=True)


class Simple(_TypeNode):
    """A bare identifier such as ``Integer``, ``void`` or ``nil``."""

    kind: Literal["simple"] = "simple"
    name: str = Field(..., min_length=1, description="Identifier or constant path")


class Nilable(_TypeNode):
    """An optional type, rendered as its inner alternatives plus ``nil``."""

    kind: Literal["nilable"] = "nilable"
    inner: TypeExpression


class TypeUnion(_TypeNode):
    """``T.any(A, B, ...)``: each alternative contributes its own type strings."""

    kind: Literal["union"] = "union"
    alternatives: tuple[TypeExpression, ...] = Field(..., min_length=1)


class GenericCollection(_TypeNode):
    """A parameterized container such as ``T::Array[String]``.

    ``key_value`` collections (``T::Hash[K, V]``) carry exactly two arguments.
    """

    kind: Literal["generic"] = "generic"
    container: str = Field(..., min_length=1)
    args: tuple[TypeExpression, ...] = Field(..., min_length=1)
    key_value: bool = False

    @model_validator(mode="after")
    def _check_key_value_arity(self) -> GenericCollection:
        if self.key_value and len(self.args) != 2:
            raise ValueError(
                f"{self.container} key/value collection needs 2 arguments, got {len(self.args)}"
            )
        return self


class FixedTuple(_TypeNode):
    """A fixed-size array literal ``[A, B]``."""

    kind: Literal["tuple"] = "tuple"
    elements: tuple[TypeExpression, ...] = Field(..., min_length=1)


class FixedHash(_TypeNode):
    """A bare ``Hash`` without declared key/value types."""

    kind: Literal["fixed_hash"] = "fixed_hash"


class ProcType(_TypeNode):
    """An opaque ``T.proc...`` expression kept verbatim (whitespace normalized)."""

    kind: Literal["proc"] = "proc"
    raw: str = Field(..., min_length=1)


class Untyped(_TypeNode):
    """``T.untyped``."""

    kind: Literal["untyped"] = "untyped"


TypeExpression = Annotated[
    Union[Simple, Nilable, TypeUnion, GenericCollection, FixedTuple, FixedHash, ProcType, Untyped],
    Field(discriminator="kind"),
]

for _model in (Nilable, TypeUnion, GenericCollection, FixedTuple):
    _model.model_rebuild()


class SourceSpan(BaseModel):
    """Line range (1-based, inclusive) of a sig block in its source unit."""

    model_config = ConfigDict(frozen=True)

    start_line: int = Field(..., ge=1)
    end_line: int = Field(..., ge=1)


class SignatureNode(BaseModel):
    """Structured form of one sig block.

    Exactly one of ``returns`` / ``is_void`` is meaningful for a parsed sig.
    """

    model_config = ConfigDict(frozen=True)

    abstract: bool = False
    abstract_text: str | None = None
    overridable: bool = False
    override: bool = False
    params: tuple[tuple[str, TypeExpression], ...] = ()
    returns: TypeExpression | None = None
    is_void: bool = False
    span: SourceSpan | None = None

    def param_type(self, name: str) -> TypeExpression | None:
        """Return the declared type of a parameter, if any."""
        for param_name, param_type in self.params:
            if param_name == name:
                return param_type
        return None

    @property
    def param_names(self) -> list[str]:
        return [name for name, _ in self.params]
