"""Exception types raised by the scanner, parser, resolver and interpreter."""

from __future__ import annotations

from .tokens import Token


class FailError(Exception):
    """Base class for every error raised by the fail package."""


class ParseError(FailError):
    """Raised inside the parser to unwind to the nearest synchronisation point.

    The diagnostic itself has already been reported when this is raised.
    The API helpers in :mod:`fail.api` also raise it when text does not parse.
    """


class FailRuntimeError(FailError):
    """A script-level runtime fault carrying the token that triggered it."""

    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message


class ScopeMismatchError(FailError):
    """Resolver and interpreter disagree about scope nesting.

    Never a user-facing error: it means a resolved distance could not be
    walked, or pointed at a scope that does not hold the name.
    """

    def __init__(self, name: str, distance: int, detail: str):
        super().__init__(
            f"Scope mismatch for '{name}' at distance {distance}: {detail}"
        )
        self.name = name
        self.distance = distance
