"""Unit tests for the PHPDoc parser."""

from __future__ import annotations

import pytest

from phpscope.analysis.docblock import EMPTY_DOCBLOCK, DocBlockParser, DocTag, split_type
from phpscope.errors import DocParseError


@pytest.fixture
def parser() -> DocBlockParser:
    return DocBlockParser()


def test_summary_body_and_tags(parser: DocBlockParser) -> None:
    block = parser.parse(
        """/**
         * Round a value.
         * More details here
         * on two lines.
         *
         * @param float $value Raw value.
         * @return float
         */"""
    )
    assert block.summary == "Round a value."
    assert block.body == "More details here\non two lines."
    assert block.description == "Round a value.\n\nMore details here\non two lines."
    assert block.tags == (
        DocTag("param", "float", "value", "Raw value."),
        DocTag("return", "float", None, ""),
    )


def test_summary_ends_at_blank_line(parser: DocBlockParser) -> None:
    block = parser.parse("/**\n * First line\n * still summary\n *\n * Body text\n */")
    assert block.summary == "First line\nstill summary"
    assert block.body == "Body text"


def test_one_line_comment(parser: DocBlockParser) -> None:
    block = parser.parse("/** @var string Display name. */")
    assert block.description == ""
    assert block.tags_named("var") == [DocTag("var", "string", None, "Display name.")]


def test_tag_description_continues_on_next_lines(parser: DocBlockParser) -> None:
    block = parser.parse("/**\n * @deprecated use\n *   something else\n */")
    (tag,) = block.tags
    assert tag.name == "deprecated"
    assert tag.type is None
    assert tag.description == "use\n  something else"


def test_variable_without_type(parser: DocBlockParser) -> None:
    block = parser.parse("/** @param $name The name */")
    assert block.tags[0] == DocTag("param", None, "name", "The name")


def test_variadic_and_reference_variables(parser: DocBlockParser) -> None:
    block = parser.parse("/**\n * @param int ...$rest\n * @param array &$out Result.\n */")
    assert [t.variable for t in block.tags] == ["rest", "out"]
    assert block.tags[1].type == "array"


def test_generic_and_callable_types(parser: DocBlockParser) -> None:
    block = parser.parse(
        "/**\n"
        " * @param array<int, string> $map\n"
        " * @param callable(int): bool $filter Keep or drop.\n"
        " * @param array{a: int, b?: string} $shape\n"
        " */"
    )
    types = [t.type for t in block.tags_named("param")]
    assert types == ["array<int, string>", "callable(int): bool", "array{a: int, b?: string}"]
    assert block.tags[1].description == "Keep or drop."


def test_union_whitespace_is_collapsed() -> None:
    assert split_type("int | string $x") == ("int|string", "$x")
    assert split_type("?Foo rest") == ("?Foo", "rest")


def test_unbalanced_type_raises(parser: DocBlockParser) -> None:
    with pytest.raises(DocParseError, match="Unbalanced"):
        parser.parse("/** @param array<int $x */")
    with pytest.raises(DocParseError, match="Unbalanced"):
        parser.parse("/** @return int> */")


def test_invalid_tag_name_raises(parser: DocBlockParser) -> None:
    with pytest.raises(DocParseError, match="Invalid tag name"):
        parser.parse("/** @1param int $x */")
    with pytest.raises(DocParseError, match="Invalid tag name"):
        parser.parse("/** @param! int $x */")


def test_annotation_style_tag(parser: DocBlockParser) -> None:
    block = parser.parse('/** @ORM\\Column(type="string") */')
    assert block.tags[0].name == "ORM\\Column"
    assert block.tags[0].description == '(type="string")'


@pytest.mark.parametrize("raw", ["/* plain */", "// line", "/** unterminated", "/**/"])
def test_not_a_doc_comment_raises(parser: DocBlockParser, raw: str) -> None:
    with pytest.raises(DocParseError):
        parser.parse(raw)


def test_empty_docblock() -> None:
    assert EMPTY_DOCBLOCK.description == ""
    assert EMPTY_DOCBLOCK.tags_named("param") == []
