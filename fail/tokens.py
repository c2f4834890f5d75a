"""Token types and the immutable Token record produced by the scanner."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class TokenType(str, Enum):
    # Single-character tokens
    LEFT_PAREN = "LEFT_PAREN"
    RIGHT_PAREN = "RIGHT_PAREN"
    LEFT_BRACE = "LEFT_BRACE"
    RIGHT_BRACE = "RIGHT_BRACE"
    COMMA = "COMMA"
    DOT = "DOT"
    MINUS = "MINUS"
    PLUS = "PLUS"
    SEMICOLON = "SEMICOLON"
    SLASH = "SLASH"
    STAR = "STAR"
    QUESTION_MARK = "QUESTION_MARK"
    COLON = "COLON"
    # One, two or three character tokens
    BANG = "BANG"
    BANG_EQUAL = "BANG_EQUAL"
    EQUAL = "EQUAL"
    EQUAL_EQUAL = "EQUAL_EQUAL"
    GREATER = "GREATER"
    GREATER_EQUAL = "GREATER_EQUAL"
    LESS = "LESS"
    LESS_EQUAL = "LESS_EQUAL"
    PLUS_PLUS = "PLUS_PLUS"
    MINUS_MINUS = "MINUS_MINUS"
    PLUS_EQUAL = "PLUS_EQUAL"
    MINUS_EQUAL = "MINUS_EQUAL"
    STAR_EQUAL = "STAR_EQUAL"
    SLASH_EQUAL = "SLASH_EQUAL"
    STAR_STAR = "STAR_STAR"
    STAR_STAR_EQUAL = "STAR_STAR_EQUAL"
    # Literals
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"
    # Keywords
    AND = "AND"
    BREAK = "BREAK"
    CLASS = "CLASS"
    CONTINUE = "CONTINUE"
    DO = "DO"
    ELSE = "ELSE"
    FALSE = "FALSE"
    FOR = "FOR"
    FUN = "FUN"
    IF = "IF"
    NONE = "NONE"
    OR = "OR"
    PRINT = "PRINT"
    RETURN = "RETURN"
    SUPER = "SUPER"
    THIS = "THIS"
    TRUE = "TRUE"
    VAR = "VAR"
    WHILE = "WHILE"

    EOF = "EOF"


KEYWORDS: dict[str, TokenType] = {
    "and": TokenType.AND,
    "break": TokenType.BREAK,
    "class": TokenType.CLASS,
    "continue": TokenType.CONTINUE,
    "do": TokenType.DO,
    "else": TokenType.ELSE,
    "false": TokenType.FALSE,
    "for": TokenType.FOR,
    "fun": TokenType.FUN,
    "if": TokenType.IF,
    "none": TokenType.NONE,
    "or": TokenType.OR,
    "print": TokenType.PRINT,
    "return": TokenType.RETURN,
    "super": TokenType.SUPER,
    "this": TokenType.THIS,
    "true": TokenType.TRUE,
    "var": TokenType.VAR,
    "while": TokenType.WHILE,
}

# Compound assignment operator → the binary operator it applies.
COMPOUND_ASSIGNMENT_OPERATORS: dict[TokenType, TokenType] = {
    TokenType.PLUS_EQUAL: TokenType.PLUS,
    TokenType.MINUS_EQUAL: TokenType.MINUS,
    TokenType.STAR_EQUAL: TokenType.STAR,
    TokenType.SLASH_EQUAL: TokenType.SLASH,
    TokenType.STAR_STAR_EQUAL: TokenType.STAR_STAR,
}

# Token kinds that mark a line as statements rather than a bare expression.
STATEMENT_MARKERS: frozenset[TokenType] = frozenset(
    {
        TokenType.SEMICOLON,
        TokenType.CLASS,
        TokenType.FUN,
        TokenType.VAR,
        TokenType.FOR,
        TokenType.IF,
        TokenType.DO,
        TokenType.WHILE,
        TokenType.BREAK,
        TokenType.CONTINUE,
        TokenType.PRINT,
        TokenType.RETURN,
        TokenType.LEFT_BRACE,
        TokenType.RIGHT_BRACE,
    }
)


class Token(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: TokenType
    lexeme: str
    literal: float | str | None = None
    line: int = 1

    def __str__(self) -> str:
        if self.literal is None:
            return f"{self.type.value} {self.lexeme}"
        return f"{self.type.value} {self.lexeme} {self.literal}"
