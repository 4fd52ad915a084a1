"""Tests for the parsing API and driver loop."""

import io
import logging
from pathlib import Path

import pytest

from bounded_xml_parser.api.parser import (
    BoundedXMLParser,
    ParseResult,
    create_tree,
    parse,
    parse_file,
    parse_string,
)
from bounded_xml_parser.shared import (
    DiagnosticSeverity,
    FailureReason,
    ParserConfig,
    QuoteStyle,
)
from bounded_xml_parser.tree import TreeAssembler, XMLElement, iter_elements


def _failure(text, config=None):
    result = parse_string(text, config)
    assert not result.success
    return result.failure


class TestWellFormedInput:
    """Test trees produced from accepted input."""

    @pytest.mark.parametrize("names", [["a"], ["a", "b"], ["a", "b", "c", "d", "e"]])
    def test_nesting_depth_matches_tree_depth(self, names):
        """Test that nested tags produce a chain of the same depth and names."""
        text = "".join(f"<{name}>" for name in names)
        text += "".join(f"</{name}>" for name in reversed(names))

        result = parse_string(text)

        assert result.success
        assert result.max_depth == len(names)
        chain = [element.name for element in iter_elements(result.root)][1:]
        assert chain == names

    def test_self_closing_child(self):
        """Test that a self-closing tag never pushes a frame."""
        result = parse_string("<a><b/></a>")

        assert result.success
        a = result.root.children[0]
        assert a.name == "a"
        assert [child.name for child in a.children] == ["b"]
        assert a.body is None
        assert a.attributes == []
        assert result.performance.max_stack_depth == 2

    def test_top_level_self_closing(self):
        """Test a document made of one self-closing tag."""
        result = parse_string("<a/>")

        assert result.success
        assert result.root.children[0].name == "a"

    def test_top_level_siblings(self):
        """Test several top-level elements under the root."""
        result = parse_string("<a/><b></b>")

        assert result.success
        assert [child.name for child in result.root.children] == ["a", "b"]

    def test_attribute(self):
        """Test a single double-quoted attribute."""
        result = parse_string('<a k="v"></a>')

        assert result.success
        attributes = result.root.children[0].attributes
        assert [(attr.name, attr.value) for attr in attributes] == [("k", "v")]

    def test_single_quoted_attribute(self):
        """Test the single quote configuration."""
        result = parse_string("<a k='v'></a>", ParserConfig.single_quoted())

        assert result.success
        assert result.root.children[0].attributes[0].value == "v"

    def test_wrong_quote_style(self):
        """Test that the other quote character is not accepted."""
        assert _failure("<a k='v'></a>") is FailureReason.UNEXPECTED_END_OF_INPUT

    def test_several_attributes_on_self_closing_tag(self):
        """Test attributes with spaces in values on a self-closing tag."""
        result = parse_string('<a><b k="v" j="two words"/></a>')

        assert result.success
        b = result.find("b")
        assert [(attr.name, attr.value) for attr in b.attributes] == [
            ("k", "v"),
            ("j", "two words"),
        ]
        assert b.children == []

    def test_attribute_then_body(self):
        """Test an attribute followed by body text."""
        result = parse_string('<a k="v"> hello world</a>')

        assert result.success
        assert result.find("a").body == "hello world"

    def test_comment_is_transparent(self):
        """Test that a comment yields the same tree as no comment."""
        with_comment = parse_string("<a><!-- ignored --></a>")
        without = parse_string("<a></a>")

        assert with_comment.success
        a = with_comment.root.children[0]
        assert a.children == []
        assert a.body is None
        assert with_comment.root.to_dict() == without.root.to_dict()

    def test_comment_between_elements(self):
        """Test a comment between body text and a child."""
        result = parse_string("<a>text<!--c--><b/></a>")

        assert result.success
        assert result.find("a").body == "text"
        assert result.count("b") == 1

    def test_whitespace_around_delimiters(self):
        """Test that whitespace where the grammar allows it is insignificant."""
        spaced = parse_string('<a  k="v"  >  text  </a  >')
        compact = parse_string('<a k="v">text</a>')

        assert spaced.success
        assert spaced.root.to_dict() == compact.root.to_dict()

    def test_whitespace_between_tags(self):
        """Test whitespace between nested tags."""
        spaced = parse_string("<a>\n  <b/>\n  <c></c>\n</a>\n")
        compact = parse_string("<a><b/><c></c></a>")

        assert spaced.success
        assert spaced.root.to_dict() == compact.root.to_dict()

    def test_body_keeps_last_fragment(self):
        """Test that text after a child replaces the earlier body."""
        result = parse_string("<a>one<b/>two</a>")

        assert result.success
        assert result.find("a").body == "two"

    def test_people_document(self):
        """Test a small realistic document."""
        text = (
            "<people>\n"
            '  <person id="1"><name>Ann</name><age>31</age></person>\n'
            '  <person id="2"><name>Bob</name></person>\n'
            "</people>"
        )

        result = parse_string(text)

        assert result.success
        assert result.count("person") == 2
        assert [e.body for e in result.find_all("name")] == ["Ann", "Bob"]
        assert result.element_count == 6
        assert result.attribute_count == 2


class TestMalformedInput:
    """Test failure reporting."""

    def test_mismatched_close_releases_tree(self):
        """Test that a mismatched close tag fails and leaves an empty root."""
        root = XMLElement.create_root()

        assert create_tree("<a></b>", root) is False
        assert root.name == "root"
        assert root.is_empty

    def test_mismatched_close_result(self):
        """Test failure details for a mismatched close tag."""
        result = parse_string("<a><b></b><c></a>")

        assert result.failure is FailureReason.CLOSE_TAG_MISMATCH
        assert result.root.is_empty
        assert result.element_count == 0
        assert result.has_errors()
        diagnostic = result.get_diagnostics_by_severity(DiagnosticSeverity.CRITICAL)[0]
        assert diagnostic.details["reason"] == "CLOSE_TAG_MISMATCH"
        assert diagnostic.details["released_elements"] == 3

    @pytest.mark.parametrize("text", ["", " <a></a>", "a></a>"])
    def test_missing_leading_delimiter(self, text):
        """Test input not starting with '<'."""
        assert _failure(text) is FailureReason.MISSING_LEADING_DELIMITER

    @pytest.mark.parametrize("text", ["<a>", "<a></a", "<a><b>text"])
    def test_unexpected_end_of_input(self, text):
        """Test input ending before the terminal state."""
        assert _failure(text) is FailureReason.UNEXPECTED_END_OF_INPUT

    def test_unbalanced_stack(self):
        """Test reaching the end with an element still open."""
        assert _failure("<a><b/>") is FailureReason.UNBALANCED_STACK

    def test_close_at_top_level(self):
        """Test a close tag with no open element."""
        assert _failure("<a/></a>") is FailureReason.CLOSE_TAG_MISMATCH

    def test_empty_name(self):
        """Test a tag whose name starts with whitespace."""
        assert _failure("< a></a>") is FailureReason.EMPTY_NAME

    def test_empty_attribute_value_not_accepted(self):
        """Test that attribute values must start with a body character."""
        assert _failure('<a k=""></a>') is FailureReason.UNEXPECTED_END_OF_INPUT

    def test_trailing_comment_not_accepted(self):
        """Test that a document cannot end inside a comment."""
        assert _failure("<a></a><!--c-->") is FailureReason.UNEXPECTED_END_OF_INPUT

    def test_embedded_nul_ends_input(self):
        """Test that a NUL character is treated as the end of input."""
        assert parse_string("<a></a>\0garbage").success
        assert _failure("<a>\0</a>") is FailureReason.UNEXPECTED_END_OF_INPUT


class TestBounds:
    """Test token length and nesting limits."""

    def test_token_at_limit(self):
        """Test a token of exactly the maximum length."""
        config = ParserConfig(max_token_length=3)

        assert parse_string("<abc></abc>", config).success

    def test_token_too_long(self):
        """Test a token beyond the maximum length."""
        config = ParserConfig(max_token_length=3)
        result = parse_string("<abcd></abcd>", config)

        assert result.failure is FailureReason.TOKEN_TOO_LONG
        assert result.diagnostics[0].position == {"offset": 4}

    def test_long_body_fails(self):
        """Test a body longer than the default limit."""
        text = "<a>" + "x" * 1001 + "</a>"

        assert _failure(text) is FailureReason.TOKEN_TOO_LONG
        assert parse_string("<a>" + "x" * 1000 + "</a>").success

    def test_nesting_at_capacity(self):
        """Test the deepest nesting the stack allows."""
        config = ParserConfig(stack_capacity=3)

        assert parse_string("<a><b></b></a>", config).success

    def test_nesting_too_deep(self):
        """Test nesting beyond the stack capacity."""
        config = ParserConfig(stack_capacity=3)
        root = XMLElement.create_root()

        assert not create_tree("<a><b><c></c></b></a>", root, config)
        assert root.is_empty
        assert _failure("<a><b><c></c></b></a>", config) is FailureReason.STACK_OVERFLOW

    def test_attribute_counts_toward_depth(self):
        """Test that attribute frames use stack capacity."""
        config = ParserConfig(stack_capacity=2)

        assert _failure('<a k="v"></a>', config) is FailureReason.STACK_OVERFLOW

    def test_deep_document_with_default_capacity(self):
        """Test that 99 nested elements fit the default stack."""
        text = "<n>" * 99 + "</n>" * 99

        result = parse_string(text)

        assert result.success
        assert result.max_depth == 99
        assert _failure("<n>" * 100 + "</n>" * 100) is FailureReason.STACK_OVERFLOW


class TestCloseTagPolicy:
    """Test exact and prefix close-tag matching."""

    def test_exact_rejects_prefix(self):
        """Test that exact matching needs the full name."""
        assert _failure("<abc></a>") is FailureReason.CLOSE_TAG_MISMATCH

    def test_legacy_accepts_prefix(self):
        """Test the legacy prefix behaviour."""
        result = parse_string("<abc></a>", ParserConfig.legacy())

        assert result.success
        assert result.find("abc") is not None

    def test_legacy_rejects_longer_close(self):
        """Test that the close name may not be longer than the open name."""
        assert _failure("<ab></abc>", ParserConfig.legacy()) is FailureReason.CLOSE_TAG_MISMATCH


class TestRootHandling:
    """Test reuse of caller-supplied roots."""

    def test_root_is_reset_before_parsing(self):
        """Test that a reused root only holds the latest document."""
        root = XMLElement.create_root()
        parser = BoundedXMLParser()

        assert parser.create_tree("<a></a>", root)
        assert parser.create_tree("<b></b>", root)

        assert [child.name for child in root.children] == ["b"]

    def test_failed_parse_clears_previous_tree(self):
        """Test that a failure leaves an empty root even if it held a tree."""
        root = XMLElement.create_root()
        parser = BoundedXMLParser()
        parser.create_tree("<a></a>", root)

        assert not parser.create_tree("<a>", root)
        assert root.is_empty


class TestInputTypes:
    """Test the different input entry points."""

    def test_parse_bytes(self):
        """Test bytes input decoded with the configured encoding."""
        assert parse(b"<a>caf\xc3\xa9</a>").find("a").body == "café"

    def test_parse_bytes_decode_error(self):
        """Test undecodable input."""
        result = parse(b"<a>\xff</a>")

        assert result.failure is FailureReason.INPUT_ERROR

    def test_unknown_encoding(self):
        """Test a configured encoding Python does not know."""
        parser = BoundedXMLParser(ParserConfig(encoding="no-such-codec"))

        assert parser.parse(b"<a></a>").failure is FailureReason.INPUT_ERROR

    def test_parse_file_like(self):
        """Test text and binary streams."""
        assert parse(io.StringIO("<a></a>")).success
        assert parse(io.BytesIO(b"<a></a>")).success

    def test_parse_path(self, tmp_path):
        """Test Path input and parse_file."""
        path = tmp_path / "doc.xml"
        path.write_text('<a k="v"></a>', encoding="utf-8")

        assert parse(path).success
        assert parse_file(str(path)).find("a").attributes[0].value == "v"

    def test_missing_file(self, tmp_path):
        """Test a file that cannot be read."""
        result = parse_file(tmp_path / "missing.xml")

        assert result.failure is FailureReason.INPUT_ERROR
        assert "Cannot read file" in result.diagnostics[0].message

    def test_unsupported_input(self):
        """Test rejection of unsupported input types."""
        with pytest.raises(TypeError, match="Unsupported input type"):
            parse(42)  # type: ignore[arg-type]


class TestParseResult:
    """Test ParseResult helpers and reporting."""

    def test_default_result(self):
        """Test an empty result."""
        result = ParseResult()

        assert result.success
        assert result.element_count == 0
        assert result.max_depth == 0
        assert not result.has_errors()

    def test_performance_metrics(self):
        """Test metrics gathered by the driver."""
        result = parse_string("<a><b/></a>")

        assert result.performance.characters_processed == len("<a><b/></a>")
        assert result.performance.transitions_taken == 3
        assert result.processing_time_ms >= 0

    def test_to_dict(self):
        """Test dictionary form."""
        data = parse_string('<a k="v"></a>').to_dict()

        assert data["success"] is True
        assert data["failure"] is None
        assert data["attribute_count"] == 1
        assert data["root"]["children"][0]["name"] == "a"

    def test_correlation_id(self):
        """Test correlation ID propagation into diagnostics."""
        result = parse_string("<a></b>", correlation_id="req-7")

        assert result.correlation_id == "req-7"
        assert result.diagnostics[0].correlation_id == "req-7"

    def test_find_missing(self):
        """Test find on a missing name."""
        assert parse_string("<a></a>").find("b") is None


class TestUnexpectedErrors:
    """Test errors that are not parse failures."""

    def test_unexpected_error_releases_tree_and_propagates(self, monkeypatch):
        """Test that the partial tree is released before the error escapes."""
        def fail(self, token, transition):
            raise RuntimeError("handler crashed")

        monkeypatch.setattr(TreeAssembler, "on_element_body", fail)
        root = XMLElement.create_root()

        with pytest.raises(RuntimeError, match="handler crashed"):
            BoundedXMLParser().parse_string("<a><b>text</b></a>", root)

        assert root.name == "root"
        assert root.is_empty


class TestLogging:
    """Test parser logging."""

    def test_failure_logged_as_warning(self, caplog):
        """Test the failure reason is logged."""
        with caplog.at_level(logging.WARNING, logger="bounded_xml_parser.api.parser"):
            parse_string("<a></b>")

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.reason == "CLOSE_TAG_MISMATCH"
        assert record.component == "bounded_parser"

    def test_trace_transitions(self, caplog):
        """Test per-transition debug records."""
        config = ParserConfig(trace_transitions=True)

        with caplog.at_level(logging.DEBUG, logger="bounded_xml_parser.api.parser"):
            parse_string("<a></a>", config)

        traces = [r for r in caplog.records if r.getMessage() == "Transition"]
        assert [(r.source, r.target, r.token) for r in traces] == [
            ("TAG_OPEN_NAME", "TAG_CLOSE_NAME", "a"),
            ("TAG_CLOSE_NAME", "END", "a"),
        ]

    def test_trace_skipped_when_debug_disabled(self, caplog):
        """Test that tracing emits nothing unless DEBUG is enabled."""
        config = ParserConfig(trace_transitions=True)

        with caplog.at_level(logging.INFO, logger="bounded_xml_parser.api.parser"):
            result = parse_string("<a></a>", config)

        assert result.success
        assert not [r for r in caplog.records if r.getMessage() == "Transition"]


def test_module_functions_use_fresh_parsers():
    """Test that module-level helpers accept a configuration."""
    config = ParserConfig(quote_style=QuoteStyle.SINGLE)

    assert parse_string("<a k='v'/>", config).success
    assert parse(Path(__file__).parent / "does-not-exist.xml").failure is FailureReason.INPUT_ERROR
