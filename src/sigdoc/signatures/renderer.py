"""Render type expressions as documentation type strings.

Every render produces a non-empty, ordered list of alternative type strings.
Collection arguments use the first alternative of each nested render, except
that a union argument keeps all of its alternatives.
"""

from __future__ import annotations

from sigdoc.core.type_expr import (
    FixedHash,
    FixedTuple,
    GenericCollection,
    Nilable,
    ProcType,
    SignatureNode,
    Simple,
    TypeExpression,
    TypeUnion,
    Untyped,
)


def render(expr: TypeExpression) -> list[str]:
    """Render a type expression into its list of alternative type strings."""
    if isinstance(expr, Simple):
        return [expr.name]
    if isinstance(expr, Nilable):
        return [*render(expr.inner), "nil"]
    if isinstance(expr, TypeUnion):
        types: list[str] = []
        for alternative in expr.alternatives:
            types.extend(render(alternative))
        return types
    if isinstance(expr, GenericCollection):
        if expr.key_value:
            key, value = expr.args
            return [f"{expr.container}{{{_render_argument(key)} => {_render_argument(value)}}}"]
        args = ", ".join(_render_argument(arg) for arg in expr.args)
        return [f"{expr.container}<{args}>"]
    if isinstance(expr, FixedTuple):
        elements = ", ".join(_render_argument(element) for element in expr.elements)
        return [f"Array({elements})"]
    if isinstance(expr, FixedHash):
        return ["Hash"]
    if isinstance(expr, ProcType):
        return [expr.raw]
    if isinstance(expr, Untyped):
        return ["T.untyped"]
    raise TypeError(f"Unknown type expression: {expr!r}")


def render_first(expr: TypeExpression) -> str:
    """Render a type expression and keep only its first alternative."""
    return render(expr)[0]


def _render_argument(expr: TypeExpression) -> str:
    # a union argument lists every alternative: T::Array[T.any(A, B)] -> Array<A, B>
    if isinstance(expr, TypeUnion):
        return ", ".join(render(expr))
    return render_first(expr)


def render_return(node: SignatureNode) -> list[str] | None:
    """Render the return slot of a signature.

    Returns:
        ``["void"]`` for void sigs, the rendered return type otherwise, or
        None when the signature declares neither.
    """
    if node.is_void:
        return ["void"]
    if node.returns is not None:
        return render(node.returns)
    return None
