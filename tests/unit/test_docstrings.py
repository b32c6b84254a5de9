"""Unit tests for documentation comment parsing."""

from sigdoc.core.models import TagEntry
from sigdoc.docstrings import format_tag, parse_docstring, split_types, strip_comment_marker


class TestStripCommentMarker:
    def test_strips_marker_and_one_space(self) -> None:
        assert strip_comment_marker("  # comment") == "comment"
        assert strip_comment_marker("#   indented") == "  indented"
        assert strip_comment_marker("#") == ""


class TestSplitTypes:
    def test_top_level_commas(self) -> None:
        assert split_types("String, Array<A, B>, nil") == ["String", "Array<A, B>", "nil"]

    def test_hash_arrow(self) -> None:
        assert split_types("Hash{String => Symbol}, nil") == ["Hash{String => Symbol}", "nil"]


class TestParseDocstring:
    """Tests for parse_docstring."""

    def test_free_text(self) -> None:
        parsed = parse_docstring("first line\nsecond line")
        assert parsed.text == "first line\nsecond line"
        assert parsed.tags == []

    def test_param_name_first(self) -> None:
        parsed = parse_docstring("@param bar [String, Symbol] the thing")
        assert parsed.tags == [
            TagEntry(tag_name="param", name="bar", types=["String", "Symbol"], text="the thing")
        ]

    def test_param_types_first(self) -> None:
        parsed = parse_docstring("@param [Object] baz the other thing")
        assert parsed.tags[0].name == "baz"
        assert parsed.tags[0].types == ["Object"]
        assert parsed.tags[0].text == "the other thing"

    def test_param_without_types(self) -> None:
        tag = parse_docstring("@param bar the thing").tags[0]
        assert tag.name == "bar"
        assert tag.types == []
        assert tag.text == "the thing"

    def test_return_with_and_without_types(self) -> None:
        assert parse_docstring("@return [String]").tags[0].types == ["String"]
        tag = parse_docstring("@return the number four").tags[0]
        assert tag.types == []
        assert tag.text == "the number four"

    def test_free_text_tags(self) -> None:
        parsed = parse_docstring("Does things.\n@deprecated do not use\n@abstract")
        assert parsed.text == "Does things."
        assert parsed.tags[0] == TagEntry(tag_name="deprecated", text="do not use")
        assert parsed.tags[1] == TagEntry(tag_name="abstract")

    def test_indented_continuation(self) -> None:
        parsed = parse_docstring("@return [Integer] a count\n  of things\nmore text")
        assert parsed.tags[0].text == "a count\nof things"
        assert parsed.text == "more text"

    def test_directives_ignored(self) -> None:
        parsed = parse_docstring("@!visibility private\n  ignored\nvisible")
        assert parsed.tags == []
        assert parsed.text == "visible"


class TestFormatTag:
    def test_format(self) -> None:
        tag = TagEntry(tag_name="param", name="a", types=["String", "nil"], text="value")
        assert format_tag(tag) == "@param a [String, nil] value"
