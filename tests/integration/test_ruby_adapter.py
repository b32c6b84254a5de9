"""Integration tests for the Ruby adapter on a sig-annotated sample file."""

from __future__ import annotations

from pathlib import Path

import pytest

from sigdoc.adapters import RubyAdapter
from sigdoc.core.config import MergePolicy, SigdocConfig
from sigdoc.core.models import DiagnosticKind, ObjectKind, Registry, Visibility


@pytest.fixture
def ruby_adapter(isolated_config: SigdocConfig) -> RubyAdapter:
    return RubyAdapter(isolated_config)


@pytest.fixture
def registry(ruby_adapter: RubyAdapter, sig_handler_path: Path) -> Registry:
    return ruby_adapter.analyze_file(sig_handler_path)


def param_tag(registry: Registry, path: str, name: str):
    obj = registry.at(path)
    assert obj is not None, path
    tag = obj.find_param(name)
    assert tag is not None, f"{path} @param {name}"
    return tag


class TestDocstrings:
    """Attaching comments to methods, whatever their surroundings."""

    @pytest.mark.parametrize(
        ("path", "docstring"),
        [
            ("Signatures#sig_void", "comment sig_void"),
            ("Signatures#sig_override_void", "comment sig_override_void"),
            ("Signatures#sig_arguments", "comment sig_arguments"),
            ("Signatures#sig_multiline_arguments", "comment sig_multiline_arguments"),
            (
                "Signatures#sig_multiline_comments",
                "comment sig_multiline_comments\ncomment sig_multiline_comments",
            ),
            ("Signatures.sig_class_method", "comment sig_class_method"),
            ("Subclass#method", "with subclass"),
            ("ClassWithCode#foo", "foo"),
            ("Outer#outer", "outer method"),
            ("Outer#outer2", "outer method 2"),
            ("Outer::Inner#inner", "inner method"),
            ("Module.foo", "module function"),
            ("Module#bar", "module instance method"),
            ("Signatures.reopening", "comment reopening"),
        ],
    )
    def test_docstring(self, registry: Registry, path: str, docstring: str) -> None:
        obj = registry.at(path)
        assert obj is not None, path
        assert obj.docstring == docstring

    def test_namespaces(self, registry: Registry) -> None:
        assert registry.at("Outer::Inner").kind == ObjectKind.CLASS
        assert registry.at("Module").kind == ObjectKind.MODULE
        assert registry.at("Subclass").superclass == "Signatures"

    def test_method_kinds(self, registry: Registry) -> None:
        assert registry.at("Signatures#sig_void").kind == ObjectKind.INSTANCE_METHOD
        assert registry.at("Signatures.sig_class_method").kind == ObjectKind.CLASS_METHOD
        assert registry.at("Signatures.reopening").kind == ObjectKind.CLASS_METHOD

    def test_lines_are_recorded(self, registry: Registry) -> None:
        assert registry.at("Signatures#sig_void").line == 9
        assert registry.at("Signatures#sig_void").file.endswith("sig_handler.rb")


class TestReturnTypes:
    """Return tags derived from sig blocks."""

    @pytest.mark.parametrize(
        ("path", "types"),
        [
            ("SigReturn#one", ["Integer"]),
            ("SigReturn#two", ["Integer"]),
            ("SigReturn#three", ["Integer"]),
            ("SigReturn#four", ["Integer"]),
            ("SigReturn#plus_one", ["Float"]),
            ("SigReturn#plus", ["Numeric", "String"]),
            ("SigReturn#void_method", ["void"]),
            ("SigAbstract#with_return", ["Boolean"]),
            ("SigAbstract#with_void", ["void"]),
            ("SigParams#blk_method", ["nil"]),
            ("SigParams#impl_blk_method", ["void"]),
            ("CollectionSigs#hash_method", ["Hash{String => Symbol}"]),
            ("CollectionSigs#fixed_array", ["Array(String, Integer)"]),
            ("CollectionSigs#fixed_hash", ["Hash"]),
            ("AttrSigs#my_accessor", ["String"]),
            ("AttrSigs#my_accessor=", ["String"]),
            ("AttrSigs#my_reader", ["Integer"]),
            ("AttrSigs#my_writer=", ["Symbol", "nil"]),
        ],
    )
    def test_return_types(self, registry: Registry, path: str, types: list[str]) -> None:
        obj = registry.at(path)
        assert obj is not None, path
        assert obj.tag("return").types == types

    def test_merges_other_tags(self, registry: Registry) -> None:
        assert registry.at("SigReturn#two").tag("deprecated").text == "do not use"

    def test_merges_return_text(self, registry: Registry) -> None:
        assert registry.at("SigReturn#four").tag("return").text == "the number four"

    def test_abstract(self, registry: Registry) -> None:
        assert registry.at("SigAbstract#one").tag("abstract").text == ""
        assert registry.at("SigAbstract#two").tag("abstract").text == "subclass must implement"
        assert registry.at("SigAbstract#with_return").tag("abstract").text == ""
        assert registry.at("SigReturn#one").tag("abstract") is None

    def test_explicit_policy_keeps_authored_return(
        self, isolated_config: SigdocConfig, sig_handler_path: Path
    ) -> None:
        config = isolated_config.model_copy(update={"merge_policy": MergePolicy.EXPLICIT})
        registry = RubyAdapter(config).analyze_file(sig_handler_path)
        assert registry.at("SigReturn#three").tag("return").types == ["String"]


class TestParams:
    """Parameter tags derived from sig blocks."""

    def test_params_keep_text(self, registry: Registry) -> None:
        bar = param_tag(registry, "SigParams#foo", "bar")
        assert bar.text == "the thing"
        assert bar.types == ["String", "Symbol"]
        baz = param_tag(registry, "SigParams#foo", "baz")
        assert baz.text == "the other thing"
        assert baz.types == ["String", "nil"]

    def test_block_param(self, registry: Registry) -> None:
        blk = param_tag(registry, "SigParams#blk_method", "blk")
        assert blk.types == ["T.proc.params(arg0: String).returns(T::Array[Hash])"]

    def test_block_param_with_newlines(self, registry: Registry) -> None:
        block = param_tag(registry, "SigParams#impl_blk_method", "block")
        assert block.types == ["T.proc.params( model: EmailConversation, mutator: T.untyped, ).void"]

    @pytest.mark.parametrize(
        ("path", "types"),
        [
            ("CollectionSigs#collection", ["Array<String>"]),
            ("CollectionSigs#nested_collection", ["Array<Array<String>>"]),
            ("CollectionSigs#mixed_collection", ["Array<String, Symbol>"]),
        ],
    )
    def test_collections(self, registry: Registry, path: str, types: list[str]) -> None:
        assert param_tag(registry, path, "arr").types == types

    def test_fixed_param_hash(self, registry: Registry) -> None:
        assert param_tag(registry, "CollectionSigs#fixed_param_hash", "tos_acceptance").types == [
            "Hash",
            "nil",
        ]

    def test_getter_has_no_params(self, registry: Registry) -> None:
        assert registry.at("AttrSigs#my_reader").tags_named("param") == []


class TestVisibility:
    def test_protected_section(self, registry: Registry) -> None:
        assert registry.at("CollectionSigs#fixed_hash").visibility == Visibility.PROTECTED
        assert registry.at("CollectionSigs#fixed_array").visibility == Visibility.PUBLIC

    def test_no_diagnostics(self, registry: Registry) -> None:
        assert registry.diagnostics == []


class TestInlineSources:
    """Smaller sources exercising visibility forms and recovery."""

    def test_private_def_and_symbol_forms(self, ruby_adapter: RubyAdapter) -> None:
        source = (
            "class Vault\n"
            "  sig { returns(String) }\n"
            "  private def secret\n"
            "    'x'\n"
            "  end\n"
            "\n"
            "  sig { returns(Integer) }\n"
            "  def count; 1; end\n"
            "  private :count\n"
            "\n"
            "  private\n"
            "\n"
            "  sig { void }\n"
            "  def hidden; end\n"
            "end\n"
        )
        registry = ruby_adapter.analyze_source(source, file="vault.rb")
        assert registry.at("Vault#secret").visibility == Visibility.PRIVATE
        assert registry.at("Vault#secret").tag("return").types == ["String"]
        assert registry.at("Vault#count").visibility == Visibility.PRIVATE
        assert registry.at("Vault#hidden").visibility == Visibility.PRIVATE
        assert registry.at("Vault#hidden").tag("return").types == ["void"]

    def test_malformed_sig_is_isolated(self, ruby_adapter: RubyAdapter) -> None:
        source = (
            "class Broken\n"
            "  # first\n"
            "  sig { params(a: Integer) }\n"
            "  def first(a); end\n"
            "\n"
            "  sig { returns(String) }\n"
            "  def second; end\n"
            "end\n"
        )
        registry = ruby_adapter.analyze_source(source, file="broken.rb")
        first = registry.at("Broken#first")
        assert first.docstring == "first"
        assert first.tag("return") is None
        assert registry.at("Broken#second").tag("return").types == ["String"]
        assert [(d.kind, d.line) for d in registry.diagnostics] == [
            (DiagnosticKind.MALFORMED_SIGNATURE, 3)
        ]

    def test_unbalanced_proc_sig_is_isolated(self, ruby_adapter: RubyAdapter) -> None:
        source = (
            "class Broken\n"
            "  sig { params(blk: T.proc.params(a: String).void }\n"
            "  def first(&blk); end\n"
            "\n"
            "  # second doc\n"
            "  sig { returns(String) }\n"
            "  def second; end\n"
            "end\n"
        )
        registry = ruby_adapter.analyze_source(source, file="broken.rb")
        assert registry.at("Broken#first").tags == []
        second = registry.at("Broken#second")
        assert second.docstring == "second doc"
        assert second.tag("return").types == ["String"]
        assert [(d.kind, d.line) for d in registry.diagnostics] == [
            (DiagnosticKind.MALFORMED_SIGNATURE, 2)
        ]

    def test_unknown_type_helper_keeps_params(self, ruby_adapter: RubyAdapter) -> None:
        source = (
            "class Halt\n"
            "  sig { params(a: String).returns(T.noreturn) }\n"
            "  def stop(a); end\n"
            "end\n"
        )
        registry = ruby_adapter.analyze_source(source, file="halt.rb")
        stop = registry.at("Halt#stop")
        assert stop.find_param("a").types == ["String"]
        assert stop.tag("return").types == ["T.noreturn"]
        assert registry.diagnostics == []

    def test_dangling_sig_at_end_of_class(self, ruby_adapter: RubyAdapter) -> None:
        source = "class Tail\n  def a; end\n\n  sig { void }\nend\n"
        registry = ruby_adapter.analyze_source(source, file="tail.rb")
        assert [(d.kind, d.line) for d in registry.diagnostics] == [
            (DiagnosticKind.UNMATCHED_SIGNATURE, 4)
        ]
        assert registry.at("Tail#a").tag("return") is None

    def test_absolute_and_compact_namespaces(self, ruby_adapter: RubyAdapter) -> None:
        source = (
            "module Outer\n"
            "  class Deep::Thing\n"
            "    sig { void }\n"
            "    def run; end\n"
            "  end\n"
            "end\n"
        )
        registry = ruby_adapter.analyze_source(source)
        assert registry.at("Outer::Deep::Thing#run").tag("return").types == ["void"]
