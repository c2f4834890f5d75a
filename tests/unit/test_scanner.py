"""Tests for the scanner: source text to tokens."""

from __future__ import annotations

from fail.diagnostics import Diagnostics, NullSink
from fail.scanner import Scanner
from fail.tokens import TokenType


def _scan(source: str):
    diagnostics = Diagnostics(NullSink())
    return Scanner(source, diagnostics).scan_tokens(), diagnostics


def _types(source: str) -> list[TokenType]:
    tokens, _ = _scan(source)
    return [t.type for t in tokens]


class TestPunctuation:
    def test_single_character_tokens(self):
        assert _types("(){},.;:?") == [
            TokenType.LEFT_PAREN,
            TokenType.RIGHT_PAREN,
            TokenType.LEFT_BRACE,
            TokenType.RIGHT_BRACE,
            TokenType.COMMA,
            TokenType.DOT,
            TokenType.SEMICOLON,
            TokenType.COLON,
            TokenType.QUESTION_MARK,
            TokenType.EOF,
        ]

    def test_comparison_operators(self):
        assert _types("! != = == < <= > >=") == [
            TokenType.BANG,
            TokenType.BANG_EQUAL,
            TokenType.EQUAL,
            TokenType.EQUAL_EQUAL,
            TokenType.LESS,
            TokenType.LESS_EQUAL,
            TokenType.GREATER,
            TokenType.GREATER_EQUAL,
            TokenType.EOF,
        ]

    def test_arithmetic_and_compound_operators(self):
        assert _types("- -- -= + ++ += * ** **= *= / /=") == [
            TokenType.MINUS,
            TokenType.MINUS_MINUS,
            TokenType.MINUS_EQUAL,
            TokenType.PLUS,
            TokenType.PLUS_PLUS,
            TokenType.PLUS_EQUAL,
            TokenType.STAR,
            TokenType.STAR_STAR,
            TokenType.STAR_STAR_EQUAL,
            TokenType.STAR_EQUAL,
            TokenType.SLASH,
            TokenType.SLASH_EQUAL,
            TokenType.EOF,
        ]


class TestLiterals:
    def test_number_literal_is_float(self):
        tokens, _ = _scan("12 3.5")
        assert tokens[0].literal == 12.0
        assert isinstance(tokens[0].literal, float)
        assert tokens[1].literal == 3.5

    def test_trailing_dot_is_not_part_of_number(self):
        assert _types("1.") == [TokenType.NUMBER, TokenType.DOT, TokenType.EOF]

    def test_string_literal_excludes_quotes(self):
        tokens, _ = _scan('"hello"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].literal == "hello"
        assert tokens[0].lexeme == '"hello"'

    def test_string_escapes(self):
        tokens, _ = _scan(r'"a\tb\nc\"d\\"')
        assert tokens[0].literal == 'a\tb\nc"d\\'

    def test_multiline_string_advances_line(self):
        tokens, _ = _scan('"a\nb" x')
        assert tokens[1].line == 2

    def test_unterminated_string_reported(self):
        _, diagnostics = _scan('"abc')
        assert diagnostics.messages() == ["Unterminated string."]


class TestIdentifiersAndKeywords:
    def test_keywords(self):
        source = "and break class continue do else false for fun if none or print return super this true var while"
        types = _types(source)[:-1]
        assert TokenType.IDENTIFIER not in types
        assert len(types) == 19

    def test_identifier_with_digits_and_underscore(self):
        tokens, _ = _scan("_foo42 classy")
        assert [t.type for t in tokens[:2]] == [TokenType.IDENTIFIER] * 2
        assert tokens[1].lexeme == "classy"


class TestCommentsAndWhitespace:
    def test_line_comment_skipped(self):
        assert _types("1 // two\n3") == [
            TokenType.NUMBER,
            TokenType.NUMBER,
            TokenType.EOF,
        ]

    def test_nested_block_comment_skipped(self):
        tokens, diagnostics = _scan("a /* x /* y */ z\n */ b")
        assert [t.lexeme for t in tokens[:-1]] == ["a", "b"]
        assert tokens[1].line == 2
        assert not diagnostics.had_syntax_error

    def test_unterminated_block_comment_reported(self):
        _, diagnostics = _scan("/* open /* nested */")
        assert diagnostics.messages() == ["Unterminated block comment."]

    def test_newlines_counted(self):
        tokens, _ = _scan("a\n\nb")
        assert tokens[1].line == 3
        assert tokens[-1].line == 3


class TestErrors:
    def test_unexpected_character_reported_and_scanning_continues(self):
        tokens, diagnostics = _scan("a @ b")
        assert diagnostics.messages() == ["Unexpected character."]
        assert [t.lexeme for t in tokens[:-1]] == ["a", "b"]

    def test_unexpected_character_format(self):
        _, diagnostics = _scan("\n#")
        assert str(diagnostics.errors[0]) == "[line 2] Error: Unexpected character."
