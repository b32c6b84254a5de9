"""Data models for sigdoc declaration processing.

This module defines the declaration events consumed by the correlator, the
targets and tags produced for each declaration, and the registry of
documented objects that collects the enriched documentation.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

NAMESPACE_SEPARATOR = "::"
INSTANCE_SEPARATOR = "#"
CLASS_SEPARATOR = "."


class Visibility(str, Enum):
    """Visibility of a documented member."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class DeclarationKind(str, Enum):
    """Kind of declaration event emitted by a source adapter."""

    METHOD = "method"
    SINGLETON_METHOD = "singleton_method"
    ATTRIBUTE = "attribute"
    CLASS = "class"
    MODULE = "module"
    SIGNATURE = "signature"  # a sig block delivered as its own construct


class AccessorMode(str, Enum):
    """Which accessor methods an attribute directive generates."""

    READER = "reader"
    WRITER = "writer"
    ACCESSOR = "accessor"


class ObjectKind(str, Enum):
    """Kind of documented object in the registry."""

    CLASS = "class"
    MODULE = "module"
    INSTANCE_METHOD = "instance_method"
    CLASS_METHOD = "class_method"
    ACCESSOR_GETTER = "accessor_getter"
    ACCESSOR_SETTER = "accessor_setter"


class DiagnosticKind(str, Enum):
    """Recoverable problems surfaced while correlating signatures."""

    MALFORMED_SIGNATURE = "malformed_signature"
    UNRESOLVED_PROC_SPAN = "unresolved_proc_span"
    UNMATCHED_SIGNATURE = "unmatched_signature"


def join_namespace(namespace: list[str]) -> str:
    """Join a namespace path into its ``A::B`` form."""
    return NAMESPACE_SEPARATOR.join(namespace)


def split_namespace(name: str) -> list[str]:
    """Split an ``A::B`` constant path into its parts (leading ``::`` ignored)."""
    return [part for part in name.split(NAMESPACE_SEPARATOR) if part]


def member_path(namespace: list[str], name: str, class_level: bool = False) -> str:
    """Build the qualified path of a member.

    Instance members use ``#`` and class-level members use ``.``, so
    ``Foo#bar`` and ``Foo.bar`` never collide.
    """
    separator = CLASS_SEPARATOR if class_level else INSTANCE_SEPARATOR
    return f"{join_namespace(namespace)}{separator}{name}"


class TagEntry(BaseModel):
    """A structured documentation tag such as ``@return [String] text``."""

    tag_name: str = Field(..., description="Tag name without '@'")
    name: str | None = Field(None, description="Named tags (param, option) carry a name")
    types: list[str] = Field(default_factory=list, description="Declared type strings")
    text: str = Field("", description="Free-text description")


class Diagnostic(BaseModel):
    """A non-fatal problem reported through the host's diagnostic channel."""

    kind: DiagnosticKind
    message: str
    file: str | None = None
    line: int | None = None


class DeclarationEvent(BaseModel):
    """A declaration as delivered by a source adapter, in source order.

    ``preceding_text`` is the raw source between the previous declaration at
    the same level (or the start of the enclosing body) and this declaration.
    """

    kind: DeclarationKind
    namespace: list[str] = Field(default_factory=list, description="Enclosing namespace path")
    name: str = Field("", description="Simple name of the declared entity")
    names: list[str] = Field(
        default_factory=list, description="Attribute names for accessor directives"
    )
    accessor_mode: AccessorMode | None = None
    class_level: bool = Field(False, description="Declared on the metaclass")
    visibility: Visibility = Visibility.PUBLIC
    preceding_text: str = ""
    source: str = Field("", description="Source of the construct itself (sig events)")
    preceding_line: int = Field(1, ge=1, description="Line where preceding_text starts")
    line: int = Field(1, ge=1, description="Line of the declaration itself")
    superclass: str | None = Field(None, description="Superclass expression of a class")
    file: str | None = None
    explicit_tags: list[TagEntry] = Field(default_factory=list)

    @property
    def qualified_name_path(self) -> list[str]:
        return [*self.namespace, self.name]


class DeclarationTarget(BaseModel):
    """The entity a signature documents."""

    kind: ObjectKind
    namespace: list[str] = Field(default_factory=list)
    name: str
    class_level: bool = False
    visibility: Visibility = Visibility.PUBLIC
    explicit_tags: list[TagEntry] = Field(default_factory=list)

    @property
    def path(self) -> str:
        return member_path(self.namespace, self.name, self.class_level)

    @property
    def is_setter(self) -> bool:
        return self.kind == ObjectKind.ACCESSOR_SETTER

    @property
    def is_getter(self) -> bool:
        return self.kind == ObjectKind.ACCESSOR_GETTER


class DocumentedObject(BaseModel):
    """A documented entity in the registry, owning its tag container."""

    path: str = Field(..., description="Fully qualified path, e.g. Foo::Bar#baz")
    name: str
    kind: ObjectKind
    namespace: list[str] = Field(default_factory=list)
    visibility: Visibility = Visibility.PUBLIC
    docstring: str = ""
    tags: list[TagEntry] = Field(default_factory=list)
    superclass: str | None = None
    file: str | None = None
    line: int | None = None

    def tag(self, tag_name: str) -> TagEntry | None:
        """Return the first tag with the given name."""
        for entry in self.tags:
            if entry.tag_name == tag_name:
                return entry
        return None

    def tags_named(self, tag_name: str) -> list[TagEntry]:
        """Return all tags with the given name, in order."""
        return [entry for entry in self.tags if entry.tag_name == tag_name]

    def find_param(self, name: str) -> TagEntry | None:
        """Return the ``@param`` tag documenting the named parameter."""
        for entry in self.tags:
            if entry.tag_name == "param" and entry.name == name:
                return entry
        return None

    def set_tag(self, entry: TagEntry) -> None:
        """Replace the first tag with the same name (and tag name), or append."""
        for index, existing in enumerate(self.tags):
            if existing.tag_name == entry.tag_name and existing.name == entry.name:
                self.tags[index] = entry
                return
        self.tags.append(entry)

    def add_tag(self, entry: TagEntry) -> None:
        """Append a tag unconditionally."""
        self.tags.append(entry)

    def append_docstring(self, text: str) -> None:
        """Concatenate more free text onto the docstring, joined by a line break."""
        if not text:
            return
        self.docstring = f"{self.docstring}\n{text}" if self.docstring else text


class Registry(BaseModel):
    """Registry of documented objects for one or more source units."""

    version: str = "1.0"
    objects: dict[str, DocumentedObject] = Field(default_factory=dict)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def at(self, path: str) -> DocumentedObject | None:
        """Look up an object by its qualified path."""
        return self.objects.get(path)

    def register(self, obj: DocumentedObject) -> DocumentedObject:
        """Add an object, replacing any object stored at the same path."""
        self.objects[obj.path] = obj
        return obj

    def __len__(self) -> int:
        return len(self.objects)

    def __contains__(self, path: object) -> bool:
        return path in self.objects

    def methods(self) -> list[DocumentedObject]:
        """Return all method-like objects (methods and accessors)."""
        namespace_kinds = (ObjectKind.CLASS, ObjectKind.MODULE)
        return [obj for obj in self.objects.values() if obj.kind not in namespace_kinds]

    def merge(self, other: Registry) -> Registry:
        """Merge two registries.

        Args:
            other: Another registry to merge with this one.

        Returns:
            A new Registry containing data from both; objects from ``other``
            win on path collisions.
        """
        return Registry(
            version=self.version,
            objects={**self.objects, **other.objects},
            diagnostics=self.diagnostics + other.diagnostics,
        )
