"""Base classes for source adapters.

This module defines the SourceAdapter abstract interface implemented by
language-specific walkers, and the RegistryBuilder that turns the walker's
declaration events into documented objects via the correlator and the tag
merger.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from sigdoc.core.config import SigdocConfig, get_config
from sigdoc.core.models import (
    DeclarationEvent,
    DeclarationKind,
    DocumentedObject,
    ObjectKind,
    Registry,
    TagEntry,
    Visibility,
    join_namespace,
    member_path,
    split_namespace,
)
from sigdoc.signatures.correlator import Association, Correlator
from sigdoc.signatures.merger import TagMerger


def namespace_path(namespace: list[str], name: str) -> list[str]:
    """Resolve a class/module name written inside ``namespace``.

    ``::Foo`` is absolute; ``Foo::Bar`` nests below the enclosing namespace.
    """
    if name.startswith("::"):
        return split_namespace(name)
    return [*namespace, *split_namespace(name)]


def _overlay_tags(base: list[TagEntry], extra: list[TagEntry]) -> list[TagEntry]:
    """Apply ``extra`` onto ``base``: same tag/name pairs replace, others append."""
    merged = [tag.model_copy(deep=True) for tag in base]
    for tag in extra:
        for index, existing in enumerate(merged):
            if existing.tag_name == tag.tag_name and existing.name == tag.name:
                merged[index] = tag.model_copy(deep=True)
                break
        else:
            merged.append(tag.model_copy(deep=True))
    return merged


class RegistryBuilder:
    """Receives a walker's events for one source unit and fills a Registry.

    Each builder owns its own Correlator, so source units never share
    pending-signature state.
    """

    def __init__(
        self,
        file: str | None = None,
        merger: TagMerger | None = None,
        registry: Registry | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            file: Name of the source unit, used in diagnostics and objects.
            merger: Tag merger (signature-wins policy by default).
            registry: Registry to write into (a new one by default).
        """
        self.file = file
        self.registry = registry if registry is not None else Registry()
        self._merger = merger or TagMerger()
        self._correlator = Correlator(file=file)

    @property
    def correlator(self) -> Correlator:
        return self._correlator

    def on_scope_open(self) -> None:
        self._correlator.open_scope()

    def on_scope_close(self, trailing_text: str, line: int) -> None:
        self._correlator.close_scope(trailing_text, line)

    def on_text(self, text: str, line: int) -> None:
        """Feed source that precedes a construct which is not a declaration."""
        self._correlator.feed(text, line)

    def on_declaration(self, event: DeclarationEvent) -> None:
        association = self._correlator.process(event)
        if association is None:
            return
        if event.kind in (DeclarationKind.CLASS, DeclarationKind.MODULE):
            self._register_namespace(association)
        else:
            self._register_members(association)

    def on_visibility(
        self,
        namespace: list[str],
        names: list[str],
        visibility: Visibility,
        class_level: bool = False,
    ) -> None:
        """Apply ``private :name`` style visibility to already declared members."""
        for name in names:
            for candidate in (name, f"{name}="):
                obj = self.registry.at(member_path(namespace, candidate, class_level))
                if obj is not None:
                    obj.visibility = visibility

    def finish(self) -> Registry:
        """Close the source unit and return the registry with its diagnostics."""
        self.registry.diagnostics.extend(self._correlator.finish())
        return self.registry

    def _register_namespace(self, association: Association) -> None:
        event = association.event
        path_parts = namespace_path(event.namespace, event.name)
        path = join_namespace(path_parts)
        existing = self.registry.at(path)
        if existing is not None:
            existing.append_docstring(association.docstring)
            existing.tags = _overlay_tags(existing.tags, association.explicit_tags)
            if existing.superclass is None:
                existing.superclass = event.superclass
            return
        self.registry.register(
            DocumentedObject(
                path=path,
                name=path_parts[-1] if path_parts else event.name,
                kind=ObjectKind.CLASS if event.kind == DeclarationKind.CLASS else ObjectKind.MODULE,
                namespace=path_parts[:-1],
                docstring=association.docstring,
                tags=association.explicit_tags,
                superclass=event.superclass,
                file=event.file or self.file,
                line=event.line,
            )
        )

    def _register_members(self, association: Association) -> None:
        event = association.event
        for target in association.targets:
            existing = self.registry.at(target.path)
            docstring = association.docstring
            if existing is not None:
                # re-declaration: earlier tags act as explicit documentation
                target = target.model_copy(
                    update={"explicit_tags": _overlay_tags(existing.tags, target.explicit_tags)}
                )
                docstring = existing.docstring
                if association.docstring:
                    docstring = (
                        f"{docstring}\n{association.docstring}" if docstring else association.docstring
                    )
            tags = self._merger.merge(target, association.signature, association.chained)
            self.registry.register(
                DocumentedObject(
                    path=target.path,
                    name=target.name,
                    kind=target.kind,
                    namespace=target.namespace,
                    visibility=target.visibility,
                    docstring=docstring,
                    tags=tags,
                    file=event.file or self.file,
                    line=event.line,
                )
            )


class SourceAdapter(ABC):
    """Abstract base class for language-specific declaration walkers.

    Subclasses walk one source unit and report declarations, scope
    boundaries and visibility changes to a RegistryBuilder.
    """

    def __init__(self, config: SigdocConfig | None = None) -> None:
        """Initialize the adapter.

        Args:
            config: Settings to use (the cached global config by default).
        """
        self._config = config or get_config()

    @property
    @abstractmethod
    def language(self) -> str:
        """Return the supported language name."""
        ...

    @abstractmethod
    def scan_source(self, content: bytes, builder: RegistryBuilder) -> None:
        """Walk one source unit, reporting its declarations to ``builder``.

        Args:
            content: Raw source bytes.
            builder: Receiver of declaration events for this unit.
        """
        ...

    def analyze_source(self, source: str | bytes, file: str | None = None) -> Registry:
        """Analyze one source unit and return its registry.

        Args:
            source: Source text or bytes.
            file: Name of the unit, used in diagnostics.

        Returns:
            Registry of documented objects with their merged tags.
        """
        content = source.encode("utf-8") if isinstance(source, str) else source
        builder = RegistryBuilder(file=file, merger=TagMerger(self._config.merge_policy))
        self.scan_source(content, builder)
        return builder.finish()

    def analyze_file(self, path: Path) -> Registry:
        """Analyze a single source file."""
        return self.analyze_source(path.read_bytes(), file=str(path))
