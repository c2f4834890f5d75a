"""Shared helpers for the unit test suite."""

from __future__ import annotations

from fail.diagnostics import Diagnostics, NullSink
from fail.parser import Parser
from fail.run import run
from fail.run_types import RunConfig, RunResult
from fail.scanner import Scanner


def run_program(source: str, **config) -> tuple[list[str], RunResult]:
    """Run *source*; return the printed lines and the RunResult."""
    lines: list[str] = []
    result = run(
        source, output=lines.append, config=RunConfig(**config), sink=NullSink()
    )
    return lines, result


def output_of(source: str) -> list[str]:
    """Printed lines of a program that must run cleanly."""
    lines, result = run_program(source)
    assert result.ok, [str(d) for d in result.diagnostics]
    return lines


def error_messages(result: RunResult) -> list[str]:
    return [d.message for d in result.diagnostics if d.is_error]


def parse(source: str) -> tuple[list, Diagnostics]:
    diagnostics = Diagnostics(NullSink())
    tokens = Scanner(source, diagnostics).scan_tokens()
    return Parser(tokens, diagnostics).parse(), diagnostics
