"""Composable API functions for the Fail pipeline.

Each function corresponds to a CLI workflow (--tokens, --ast, --rpn) but is
callable programmatically without argparse.
"""

from __future__ import annotations

import logging
from typing import Any

from . import ast_nodes as ast
from .ast_printer import AstPrinter, RpnPrinter
from .builtins import Builtins
from .diagnostics import Diagnostics, DiagnosticSink
from .errors import ParseError
from .parser import Parser
from .resolver import Resolver
from .scanner import Scanner
from .tokens import Token

logger = logging.getLogger(__name__)


def tokenize(source: str, sink: DiagnosticSink | None = None) -> list[Token]:
    """Scan source text into tokens, ending with EOF.

    Args:
        source: Program text.
        sink: Where scanner errors are echoed (stderr when omitted).

    Returns:
        The token list; scanning always completes, errors are reported.
    """
    return Scanner(source, Diagnostics(sink)).scan_tokens()


def parse_source(
    source: str, sink: DiagnosticSink | None = None
) -> list[ast.Stmt]:
    """Scan and parse source text.

    Raises:
        ParseError: when the text has syntax errors. The message lists them.
    """
    diagnostics = Diagnostics(sink)
    tokens = Scanner(source, diagnostics).scan_tokens()
    statements = Parser(tokens, diagnostics).parse()
    if diagnostics.had_syntax_error:
        raise ParseError("; ".join(str(d) for d in diagnostics.errors))
    logger.info("Parsed %d statements", len(statements))
    return statements


def parse_expression_source(
    source: str, sink: DiagnosticSink | None = None
) -> ast.Expr:
    """Scan and parse source text as a single expression."""
    diagnostics = Diagnostics(sink)
    tokens = Scanner(source, diagnostics).scan_tokens()
    expr = Parser(tokens, diagnostics).parse_expression()
    if expr is None or diagnostics.had_syntax_error:
        raise ParseError("; ".join(str(d) for d in diagnostics.errors))
    return expr


def resolve_source(
    source: str, sink: DiagnosticSink | None = None
) -> tuple[list[ast.Stmt], dict[Any, int], Diagnostics]:
    """Parse and resolve source text.

    Returns:
        The statements, the node → distance table, and the diagnostics
        collected while resolving (check ``had_resolution_error``).
    """
    statements = parse_source(source, sink)
    diagnostics = Diagnostics(sink)
    distances = Resolver(diagnostics, known_globals=Builtins.TABLE).resolve(statements)
    return statements, distances, diagnostics


def dump_tokens(source: str, sink: DiagnosticSink | None = None) -> str:
    """One token per line, as printed by ``--tokens``."""
    return "\n".join(str(token) for token in tokenize(source, sink))


def dump_ast(source: str, sink: DiagnosticSink | None = None) -> str:
    """Parenthesised rendering of each statement, as printed by ``--ast``."""
    return AstPrinter().print_program(parse_source(source, sink))


def dump_rpn(source: str, sink: DiagnosticSink | None = None) -> str:
    """Reverse Polish rendering of an expression, as printed by ``--rpn``."""
    return RpnPrinter().print(parse_expression_source(source, sink))
