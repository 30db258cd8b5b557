"""Unit tests for the caching doc comment resolver."""

from __future__ import annotations

import logging
from unittest.mock import Mock

from phpscope.analysis.docblock import EMPTY_DOCBLOCK, DocBlock, DocTag
from phpscope.errors import DocParseError
from phpscope.reflection.doc_comments import (
    DocCommentResolver,
    constant_identity,
    function_identity,
    method_identity,
    property_identity,
)

RAW = "/** @var int Counter. */"


def _mock_parser() -> Mock:
    parser = Mock()
    parser.parse.return_value = DocBlock(
        summary="Counter.", tags=(DocTag("var", "int", None, "Counter."),)
    )
    return parser


def test_description_then_tags_parse_once() -> None:
    parser = _mock_parser()
    resolver = DocCommentResolver(parser)
    assert resolver.describe("A::$count", RAW).description == "Counter."
    assert resolver.tags_named("A::$count", RAW, "var")[0].type == "int"
    parser.parse.assert_called_once_with(RAW)


def test_distinct_identities_parse_separately() -> None:
    parser = _mock_parser()
    resolver = DocCommentResolver(parser)
    resolver.describe("A::$count", RAW)
    resolver.describe("B::$count", RAW)
    assert parser.parse.call_count == 2


def test_missing_comment_does_not_call_parser() -> None:
    parser = _mock_parser()
    resolver = DocCommentResolver(parser)
    assert resolver.describe("f()", None) is EMPTY_DOCBLOCK
    assert resolver.tags_named("f()", "", "param") == []
    parser.parse.assert_not_called()


def test_unknown_tag_name_gives_empty_list() -> None:
    resolver = DocCommentResolver(_mock_parser())
    assert resolver.tags_named("A::$count", RAW, "return") == []


def test_parse_error_degrades_to_empty_and_is_cached(caplog) -> None:
    parser = Mock()
    parser.parse.side_effect = DocParseError("Invalid tag name in '@1x'")
    resolver = DocCommentResolver(parser)
    with caplog.at_level(logging.WARNING, logger="phpscope"):
        block = resolver.describe("broken()", "/** @1x */")
        tags = resolver.tags_named("broken()", "/** @1x */", "param")
    assert block is EMPTY_DOCBLOCK
    assert tags == []
    assert parser.parse.call_count == 1
    assert "broken()" in caplog.text


def test_default_parser_is_used() -> None:
    resolver = DocCommentResolver()
    assert resolver.describe("x", "/** Hello. */").description == "Hello."


def test_identities() -> None:
    assert function_identity("App\\run") == "App\\run()"
    assert method_identity("App\\Job", "run") == "App\\Job::run()"
    assert property_identity("App\\Job", "queue") == "App\\Job::$queue"
    assert constant_identity("LIMIT", "App\\Job") == "App\\Job::LIMIT"
    assert constant_identity("LIMIT") == "::LIMIT"
