"""Unit tests for declaration and registry data models."""

import pytest
from pydantic import ValidationError

from sigdoc.core.models import (
    DeclarationEvent,
    DeclarationKind,
    DeclarationTarget,
    DocumentedObject,
    ObjectKind,
    Registry,
    TagEntry,
    Visibility,
    join_namespace,
    member_path,
    split_namespace,
)
from sigdoc.core.type_expr import GenericCollection, Nilable, SignatureNode, Simple


class TestEnums:
    """Tests for enum values."""

    def test_visibility_values(self) -> None:
        assert Visibility.PUBLIC.value == "public"
        assert Visibility.PROTECTED.value == "protected"
        assert Visibility.PRIVATE.value == "private"

    def test_declaration_kind_values(self) -> None:
        assert DeclarationKind.METHOD.value == "method"
        assert DeclarationKind.SINGLETON_METHOD.value == "singleton_method"
        assert DeclarationKind.ATTRIBUTE.value == "attribute"


class TestPaths:
    """Tests for qualified path helpers."""

    def test_join_and_split(self) -> None:
        assert join_namespace(["Outer", "Inner"]) == "Outer::Inner"
        assert split_namespace("::Outer::Inner") == ["Outer", "Inner"]

    def test_member_path_separators(self) -> None:
        assert member_path(["Foo"], "bar") == "Foo#bar"
        assert member_path(["Foo"], "bar", class_level=True) == "Foo.bar"

    def test_top_level_member(self) -> None:
        assert member_path([], "helper") == "#helper"

    def test_target_path(self) -> None:
        target = DeclarationTarget(
            kind=ObjectKind.ACCESSOR_SETTER, namespace=["A", "B"], name="value="
        )
        assert target.path == "A::B#value="
        assert target.is_setter
        assert not target.is_getter

    def test_event_qualified_name_path(self) -> None:
        event = DeclarationEvent(kind=DeclarationKind.METHOD, namespace=["A"], name="run")
        assert event.qualified_name_path == ["A", "run"]

    def test_event_line_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            DeclarationEvent(kind=DeclarationKind.METHOD, name="run", line=0)


class TestTypeExpressions:
    """Tests for the immutable type expression models."""

    def test_frozen(self) -> None:
        expr = Simple(name="String")
        with pytest.raises(ValidationError):
            expr.name = "Symbol"

    def test_key_value_needs_two_args(self) -> None:
        with pytest.raises(ValidationError):
            GenericCollection(container="Hash", args=(Simple(name="String"),), key_value=True)

    def test_equality_is_structural(self) -> None:
        assert Nilable(inner=Simple(name="String")) == Nilable(inner=Simple(name="String"))

    def test_signature_param_lookup(self) -> None:
        node = SignatureNode(params=(("a", Simple(name="Integer")),), is_void=True)
        assert node.param_type("a") == Simple(name="Integer")
        assert node.param_type("b") is None
        assert node.param_names == ["a"]


class TestDocumentedObject:
    """Tests for the tag container operations."""

    def _obj(self) -> DocumentedObject:
        return DocumentedObject(
            path="Foo#bar",
            name="bar",
            kind=ObjectKind.INSTANCE_METHOD,
            tags=[
                TagEntry(tag_name="param", name="a", types=["String"]),
                TagEntry(tag_name="return", types=["Integer"]),
            ],
        )

    def test_tag_lookup(self) -> None:
        obj = self._obj()
        assert obj.tag("return").types == ["Integer"]
        assert obj.tag("abstract") is None
        assert obj.find_param("a").types == ["String"]
        assert obj.find_param("b") is None

    def test_set_tag_replaces(self) -> None:
        obj = self._obj()
        obj.set_tag(TagEntry(tag_name="return", types=["void"]))
        assert len(obj.tags_named("return")) == 1
        assert obj.tag("return").types == ["void"]

    def test_add_tag_appends(self) -> None:
        obj = self._obj()
        obj.add_tag(TagEntry(tag_name="return", types=["nil"]))
        assert [t.types for t in obj.tags_named("return")] == [["Integer"], ["nil"]]

    def test_append_docstring(self) -> None:
        obj = self._obj()
        obj.append_docstring("first")
        obj.append_docstring("")
        obj.append_docstring("second")
        assert obj.docstring == "first\nsecond"


class TestRegistry:
    """Tests for Registry."""

    def _obj(self, path: str, kind: ObjectKind = ObjectKind.INSTANCE_METHOD) -> DocumentedObject:
        return DocumentedObject(path=path, name=path.split("#")[-1], kind=kind)

    def test_register_and_lookup(self) -> None:
        registry = Registry()
        registry.register(self._obj("Foo#bar"))
        assert "Foo#bar" in registry
        assert registry.at("Foo#bar").name == "bar"
        assert registry.at("Foo#baz") is None
        assert len(registry) == 1

    def test_methods_excludes_namespaces(self) -> None:
        registry = Registry()
        registry.register(self._obj("Foo", ObjectKind.CLASS))
        registry.register(self._obj("Foo#bar"))
        assert [obj.path for obj in registry.methods()] == ["Foo#bar"]

    def test_merge(self) -> None:
        left = Registry()
        left.register(self._obj("A#a"))
        right = Registry()
        right.register(self._obj("B#b"))
        merged = left.merge(right)
        assert len(merged) == 2
        assert len(left) == 1
