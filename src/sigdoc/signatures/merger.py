"""Merge signature-derived type tags with explicitly authored tags."""

from __future__ import annotations

from sigdoc.core.config import MergePolicy
from sigdoc.core.models import DeclarationTarget, TagEntry
from sigdoc.core.type_expr import SignatureNode
from sigdoc.signatures.renderer import render, render_return


class TagMerger:
    """Combine a target's explicit tags with the data of its signature.

    The input tags are never mutated; ``merge`` returns a new tag list in
    which every tag the signature does not touch passes through unchanged.
    """

    def __init__(self, policy: MergePolicy = MergePolicy.SIGNATURE) -> None:
        self.policy = policy

    def merge(
        self,
        target: DeclarationTarget,
        signature: SignatureNode | None,
        chained: bool = False,
    ) -> list[TagEntry]:
        """Produce the final tag list for a target.

        Args:
            target: The declaration target with its explicit tags.
            signature: The folded signature, or None when there is none.
            chained: True when the signature folds more than one sig block.

        Returns:
            The merged tag list.
        """
        tags = [tag.model_copy(deep=True) for tag in target.explicit_tags]
        if signature is None:
            return tags

        if signature.abstract:
            self._ensure_abstract(tags, signature)
        if not target.is_getter:
            self._merge_params(tags, signature)

        return_types = self._return_types(target, signature)
        if return_types is not None:
            self._merge_return(tags, return_types, chained)
        return tags

    def _ensure_abstract(self, tags: list[TagEntry], signature: SignatureNode) -> None:
        if any(tag.tag_name == "abstract" for tag in tags):
            return
        tags.append(TagEntry(tag_name="abstract", text=signature.abstract_text or ""))

    def _merge_params(self, tags: list[TagEntry], signature: SignatureNode) -> None:
        for name, param_type in signature.params:
            types = render(param_type)
            existing = next(
                (tag for tag in tags if tag.tag_name == "param" and tag.name == name), None
            )
            if existing is None:
                tags.append(TagEntry(tag_name="param", name=name, types=types))
            else:
                existing.types = types

    def _return_types(self, target: DeclarationTarget, signature: SignatureNode) -> list[str] | None:
        types = render_return(signature)
        if target.is_setter and (types is None or types == ["void"]) and len(signature.params) == 1:
            return render(signature.params[0][1])
        return types

    def _merge_return(self, tags: list[TagEntry], types: list[str], chained: bool) -> None:
        existing = next((tag for tag in tags if tag.tag_name == "return"), None)
        if existing is None:
            tags.append(TagEntry(tag_name="return", types=types))
        elif not existing.types or self.policy == MergePolicy.SIGNATURE or chained:
            existing.types = types


def merge_tags(
    target: DeclarationTarget,
    signature: SignatureNode | None,
    chained: bool = False,
    policy: MergePolicy = MergePolicy.SIGNATURE,
) -> list[TagEntry]:
    """Merge with a one-off TagMerger."""
    return TagMerger(policy).merge(target, signature, chained)
