"""
Tests for the markup lexer and the recursive descent markup parser.
"""

import pytest

from themecheck.liquid.markup_lexer import MarkupLexer, MarkupLexerError
from themecheck.liquid.markup_parser import MarkupParseError, MarkupParser
from themecheck.liquid.nodes import (
    AssignMarkup,
    Comparison,
    ContentForMarkup,
    LiquidLiteral,
    LiquidVariable,
    LogicalExpression,
    NamedArgument,
    Number,
    Range,
    RenderMarkup,
    String,
    VariableLookup,
)


class TestMarkupLexer:

    def setup_method(self):
        self.lexer = MarkupLexer()

    def test_comparison_tokens(self):
        tokens = self.lexer.tokenize("block.id == '123'")
        assert [(t.type, t.value) for t in tokens] == [
            ("IDENTIFIER", "block"),
            ("SYMBOL", "."),
            ("IDENTIFIER", "id"),
            ("COMPARATOR", "=="),
            ("STRING", "'123'"),
            ("EOF", ""),
        ]

    def test_range_is_not_a_float(self):
        tokens = self.lexer.tokenize("(1..5)")
        assert [t.value for t in tokens] == ["(", "1", "..", "5", ")", ""]

    def test_numbers(self):
        tokens = self.lexer.tokenize("-3 4.25")
        assert [(t.type, t.value) for t in tokens[:2]] == [("NUMBER", "-3"), ("NUMBER", "4.25")]

    def test_identifiers_with_dash_and_question_mark(self):
        tokens = self.lexer.tokenize("section-id empty?")
        assert [t.value for t in tokens[:2]] == ["section-id", "empty?"]

    def test_positions_are_markup_relative(self):
        tokens = self.lexer.tokenize("  a  ==  b")
        assert [t.position for t in tokens] == [2, 5, 9, 10]

    def test_unterminated_string(self):
        with pytest.raises(MarkupLexerError, match="Unterminated string"):
            self.lexer.tokenize("'abc")

    def test_unknown_character(self):
        with pytest.raises(MarkupLexerError, match="Unexpected character"):
            self.lexer.tokenize("a & b")


class TestMarkupParser:

    def test_comparison_positions_are_absolute(self):
        markup = "block.id == '123'"
        node = MarkupParser(markup, offset=6).parse_condition()

        assert isinstance(node, Comparison)
        assert node.comparator == "=="
        assert (node.position.start, node.position.end) == (6, 6 + len(markup))

        left = node.left
        assert isinstance(left, VariableLookup)
        assert left.name == "block"
        assert [lookup.value for lookup in left.lookups] == ["id"]
        assert (left.position.start, left.position.end) == (6, 14)

        assert isinstance(node.right, String)
        assert node.right.value == "123"
        assert node.right.single_quote is True
        assert (node.right.position.start, node.right.position.end) == (18, 23)

    def test_bracket_lookup(self):
        node = MarkupParser("block['id']").parse_expression()
        assert isinstance(node, VariableLookup)
        assert isinstance(node.lookups[0], String)
        assert node.lookups[0].value == "id"

    def test_logical_operators_are_right_associative(self):
        node = MarkupParser("a and b or c").parse_condition()
        assert isinstance(node, LogicalExpression)
        assert node.relation == "and"
        assert isinstance(node.right, LogicalExpression)
        assert node.right.relation == "or"

    def test_contains(self):
        node = MarkupParser("product.tags contains 'sale'").parse_condition()
        assert isinstance(node, Comparison)
        assert node.comparator == "contains"

    def test_literals(self):
        for keyword, value in [("true", True), ("false", False), ("nil", None), ("blank", "")]:
            node = MarkupParser(keyword).parse_expression()
            assert isinstance(node, LiquidLiteral)
            assert node.keyword == keyword
            assert node.value == value

    def test_literal_name_followed_by_lookup_is_a_variable(self):
        node = MarkupParser("empty.size").parse_expression()
        assert isinstance(node, VariableLookup)
        assert node.name == "empty"

    def test_range(self):
        node = MarkupParser("(1..limit)").parse_expression()
        assert isinstance(node, Range)
        assert isinstance(node.start, Number)
        assert isinstance(node.end, VariableLookup)

    def test_variable_with_filters(self):
        markup = "product.title | upcase | truncate: 10, '...'"
        node = MarkupParser(markup).parse_variable()

        assert isinstance(node, LiquidVariable)
        assert [f.name for f in node.filters] == ["upcase", "truncate"]
        truncate = node.filters[1]
        assert [type(a) for a in truncate.args] == [Number, String]
        assert node.position.end == len(markup)

    def test_filter_named_arguments(self):
        node = MarkupParser("image | image_url: width: 300, height: 200").parse_variable()
        args = node.filters[0].args
        assert all(isinstance(a, NamedArgument) for a in args)
        assert [a.name for a in args] == ["width", "height"]

    def test_render_markup(self):
        markup = "'card' for products as item, size: 'small'"
        node = MarkupParser(markup).parse_render()

        assert isinstance(node, RenderMarkup)
        assert isinstance(node.snippet, String)
        assert node.snippet.value == "card"
        assert node.variable is not None
        assert node.variable.keyword == "for"
        assert node.alias == "item"
        assert [a.name for a in node.args] == ["size"]

    def test_render_with_arguments_without_leading_comma(self):
        node = MarkupParser("'price' product: product").parse_render()
        assert [a.name for a in node.args] == ["product"]

    def test_render_dynamic_name(self):
        node = MarkupParser("snippet_name").parse_render()
        assert isinstance(node.snippet, VariableLookup)

    def test_content_for(self):
        node = MarkupParser("'block', type: 'slide', id: 'slide-1'").parse_content_for()
        assert isinstance(node, ContentForMarkup)
        assert node.content_for_type.value == "block"
        assert [a.name for a in node.args] == ["type", "id"]

    def test_assign(self):
        node = MarkupParser("total = price | plus: 1").parse_assign()
        assert isinstance(node, AssignMarkup)
        assert node.name == "total"
        assert node.value.filters[0].name == "plus"

    def test_when_values(self):
        values = MarkupParser("'a', 'b' or 'c'").parse_when()
        assert [v.value for v in values] == ["a", "b", "c"]

    def test_error_position_is_absolute(self):
        with pytest.raises(MarkupParseError) as exc:
            MarkupParser("a ==", offset=10).parse_condition()
        assert exc.value.position == 14

    def test_trailing_tokens_are_an_error(self):
        with pytest.raises(MarkupParseError, match="Unexpected token"):
            MarkupParser("a b").parse_expression()
