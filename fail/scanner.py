"""Scanner — source text to token stream."""

from __future__ import annotations

import logging

from .diagnostics import Diagnostics
from .tokens import KEYWORDS, Token, TokenType

logger = logging.getLogger(__name__)

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    ";": TokenType.SEMICOLON,
    ":": TokenType.COLON,
    "?": TokenType.QUESTION_MARK,
}

# Characters whose token changes when followed by '='.
_EQUAL_SUFFIXED: dict[str, tuple[TokenType, TokenType]] = {
    "!": (TokenType.BANG, TokenType.BANG_EQUAL),
    "=": (TokenType.EQUAL, TokenType.EQUAL_EQUAL),
    "<": (TokenType.LESS, TokenType.LESS_EQUAL),
    ">": (TokenType.GREATER, TokenType.GREATER_EQUAL),
}

_ESCAPES: dict[str, str] = {
    '"': '"',
    "\\": "\\",
    "b": "\b",
    "r": "\r",
    "n": "\n",
    "t": "\t",
}


class Scanner:
    def __init__(self, source: str, diagnostics: Diagnostics):
        self._source = source
        self._diagnostics = diagnostics
        self._tokens: list[Token] = []
        self._start = 0
        self._current = 0
        self._line = 1

    def scan_tokens(self) -> list[Token]:
        while not self._is_at_end():
            self._start = self._current
            self._scan_token()

        self._tokens.append(Token(type=TokenType.EOF, lexeme="", line=self._line))
        logger.debug("Scanned %d tokens over %d lines", len(self._tokens), self._line)
        return self._tokens

    # ── dispatch ─────────────────────────────────────────────────

    def _scan_token(self):
        c = self._advance()

        if c in _SINGLE_CHAR_TOKENS:
            self._add_token(_SINGLE_CHAR_TOKENS[c])
        elif c in _EQUAL_SUFFIXED:
            plain, suffixed = _EQUAL_SUFFIXED[c]
            self._add_token(suffixed if self._match("=") else plain)
        elif c == "-":
            self._add_token(
                TokenType.MINUS_MINUS
                if self._match("-")
                else TokenType.MINUS_EQUAL if self._match("=") else TokenType.MINUS
            )
        elif c == "+":
            self._add_token(
                TokenType.PLUS_PLUS
                if self._match("+")
                else TokenType.PLUS_EQUAL if self._match("=") else TokenType.PLUS
            )
        elif c == "*":
            self._star()
        elif c == "/":
            self._slash()
        elif c in " \r\t":
            pass
        elif c == "\n":
            self._line += 1
        elif c == '"':
            self._string()
        elif _is_digit(c):
            self._number()
        elif _is_alpha(c):
            self._identifier()
        else:
            self._diagnostics.syntax_error(self._line, "Unexpected character.")

    def _star(self):
        if self._match("*"):
            self._add_token(
                TokenType.STAR_STAR_EQUAL if self._match("=") else TokenType.STAR_STAR
            )
        else:
            self._add_token(TokenType.STAR_EQUAL if self._match("=") else TokenType.STAR)

    def _slash(self):
        if self._match("/"):
            while self._peek() != "\n" and not self._is_at_end():
                self._advance()
        elif self._match("*"):
            self._block_comment()
        elif self._match("="):
            self._add_token(TokenType.SLASH_EQUAL)
        else:
            self._add_token(TokenType.SLASH)

    # ── lexeme scanners ──────────────────────────────────────────

    def _block_comment(self):
        """Skip a ``/* … */`` comment; nested comments must balance."""
        depth = 1
        while not self._is_at_end():
            if self._peek() == "*" and self._peek_next() == "/":
                self._current += 2
                depth -= 1
                if depth == 0:
                    return
            elif self._peek() == "/" and self._peek_next() == "*":
                self._current += 2
                depth += 1
            else:
                if self._peek() == "\n":
                    self._line += 1
                self._advance()
        self._diagnostics.syntax_error(self._line, "Unterminated block comment.")

    def _string(self):
        chars: list[str] = []
        while self._peek() != '"' and not self._is_at_end():
            c = self._advance()
            if c == "\n":
                self._line += 1
            if c == "\\" and self._peek() in _ESCAPES:
                chars.append(_ESCAPES[self._advance()])
            else:
                chars.append(c)

        if self._is_at_end():
            self._diagnostics.syntax_error(self._line, "Unterminated string.")
            return

        self._advance()  # closing quote
        self._add_token(TokenType.STRING, "".join(chars))

    def _number(self):
        while _is_digit(self._peek()):
            self._advance()

        if self._peek() == "." and _is_digit(self._peek_next()):
            self._advance()
            while _is_digit(self._peek()):
                self._advance()

        self._add_token(
            TokenType.NUMBER, float(self._source[self._start : self._current])
        )

    def _identifier(self):
        while _is_alpha(self._peek()) or _is_digit(self._peek()):
            self._advance()

        text = self._source[self._start : self._current]
        self._add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    # ── helpers ──────────────────────────────────────────────────

    def _is_at_end(self) -> bool:
        return self._current >= len(self._source)

    def _advance(self) -> str:
        self._current += 1
        return self._source[self._current - 1]

    def _match(self, expected: str) -> bool:
        if self._is_at_end() or self._source[self._current] != expected:
            return False
        self._current += 1
        return True

    def _peek(self) -> str:
        if self._is_at_end():
            return "\0"
        return self._source[self._current]

    def _peek_next(self) -> str:
        if self._current + 1 >= len(self._source):
            return "\0"
        return self._source[self._current + 1]

    def _add_token(self, token_type: TokenType, literal: float | str | None = None):
        text = self._source[self._start : self._current]
        self._tokens.append(
            Token(type=token_type, lexeme=text, literal=literal, line=self._line)
        )


def _is_alpha(c: str) -> bool:
    return ("a" <= c <= "z") or ("A" <= c <= "Z") or c == "_"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"
