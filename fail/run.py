"""Orchestrator — run() entry point and the interactive Session."""

from __future__ import annotations

import logging
import sys
import time

from .diagnostics import Diagnostics, DiagnosticSink
from .executor import Interpreter, OutputSink
from .parser import Parser
from .resolver import Resolver
from .run_types import RunConfig, RunOutcome, RunResult, RunStats
from .scanner import Scanner
from .tokens import STATEMENT_MARKERS, Token, TokenType

logger = logging.getLogger(__name__)


def _counting(output: OutputSink, stats: RunStats) -> OutputSink:
    def emit(text: str):
        stats.lines_printed += 1
        output(text)

    return emit


def _finish(
    outcome: RunOutcome,
    diagnostics: Diagnostics,
    stats: RunStats,
    started: float,
    config: RunConfig,
) -> RunResult:
    stats.total_time = time.perf_counter() - started
    logger.info("Run finished: %s in %.1fms", outcome.value, stats.total_time * 1000)
    if config.verbose:
        print(stats.report(), file=sys.stderr)
    return RunResult(outcome=outcome, diagnostics=list(diagnostics.entries), stats=stats)


def run(
    source: str,
    output: OutputSink = print,
    config: RunConfig = RunConfig(),
    sink: DiagnosticSink | None = None,
) -> RunResult:
    """End-to-end: scan → parse → resolve → interpret.

    Args:
        source: Program text.
        output: Receives each line written by ``print``.
        config: Run configuration.
        sink: Where diagnostics are echoed (stderr when omitted).

    Returns:
        A RunResult; syntax errors stop the run before resolution and
        resolution errors stop it before execution.
    """
    started = time.perf_counter()
    stats = RunStats(
        source_bytes=len(source.encode("utf-8")),
        source_lines=source.count("\n")
        + (1 if source and not source.endswith("\n") else 0),
    )
    diagnostics = Diagnostics(sink, echo_warnings=config.echo_warnings)

    # 1. Scan + parse
    t0 = time.perf_counter()
    tokens = Scanner(source, diagnostics).scan_tokens()
    t1 = time.perf_counter()
    stats.scan_time = t1 - t0
    stats.token_count = len(tokens)

    statements = Parser(tokens, diagnostics).parse()
    stats.parse_time = time.perf_counter() - t1
    stats.statement_count = len(statements)
    logger.info(
        "Parsed %d statements from %d tokens in %.1fms",
        stats.statement_count,
        stats.token_count,
        (stats.scan_time + stats.parse_time) * 1000,
    )
    if diagnostics.had_syntax_error:
        return _finish(RunOutcome.STATIC_ERROR, diagnostics, stats, started, config)

    # 2. Resolve
    interpreter = Interpreter(
        diagnostics,
        output=_counting(output, stats),
        max_call_depth=config.max_call_depth,
    )
    t0 = time.perf_counter()
    distances = Resolver(diagnostics, known_globals=interpreter.globals.names()).resolve(
        statements
    )
    stats.resolve_time = time.perf_counter() - t0
    stats.resolved_references = len(distances)
    if diagnostics.had_resolution_error:
        return _finish(RunOutcome.STATIC_ERROR, diagnostics, stats, started, config)

    # 3. Execute
    interpreter.record_distances(distances)
    t0 = time.perf_counter()
    completed = interpreter.interpret(statements)
    stats.execution_time = time.perf_counter() - t0
    outcome = RunOutcome.OK if completed else RunOutcome.RUNTIME_ERROR
    return _finish(outcome, diagnostics, stats, started, config)


def is_bare_expression(tokens: list[Token]) -> bool:
    """True when a line holds no statement syntax and should be echoed."""
    return len(tokens) > 1 and not any(t.type in STATEMENT_MARKERS for t in tokens)


class Session:
    """One interpreter kept alive across many lines of input.

    Definitions made by one line are visible to later lines. A failing line
    is reported and leaves earlier state in place.
    """

    def __init__(
        self,
        output: OutputSink = print,
        config: RunConfig = RunConfig(),
        sink: DiagnosticSink | None = None,
    ):
        self._output = output
        self._config = config
        self.diagnostics = Diagnostics(sink, echo_warnings=config.echo_warnings)
        self.interpreter = Interpreter(
            self.diagnostics, output=output, max_call_depth=config.max_call_depth
        )

    def run_line(self, line: str) -> RunResult:
        """Run one line: a bare expression has its value echoed, anything else
        runs as statements."""
        started = time.perf_counter()
        stats = RunStats(source_bytes=len(line.encode("utf-8")), source_lines=1)
        self.diagnostics.clear()

        tokens = Scanner(line, self.diagnostics).scan_tokens()
        stats.token_count = len(tokens)
        if self.diagnostics.had_syntax_error:
            return self._result(RunOutcome.STATIC_ERROR, stats, started)
        if all(t.type == TokenType.EOF for t in tokens):
            return self._result(RunOutcome.OK, stats, started)

        if is_bare_expression(tokens):
            return self._run_expression(tokens, stats, started)
        return self._run_statements(tokens, stats, started)

    def _run_expression(
        self, tokens: list[Token], stats: RunStats, started: float
    ) -> RunResult:
        expr = Parser(tokens, self.diagnostics).parse_expression()
        if expr is None or self.diagnostics.had_syntax_error:
            return self._result(RunOutcome.STATIC_ERROR, stats, started)

        distances = self._resolver().resolve_expression(expr)
        stats.resolved_references = len(distances)
        if self.diagnostics.had_resolution_error:
            return self._result(RunOutcome.STATIC_ERROR, stats, started)

        self.interpreter.record_distances(distances)
        text = self.interpreter.evaluate_and_render(expr)
        if text is None:
            return self._result(RunOutcome.RUNTIME_ERROR, stats, started)
        self._output(text)
        stats.lines_printed = 1
        return self._result(RunOutcome.OK, stats, started)

    def _run_statements(
        self, tokens: list[Token], stats: RunStats, started: float
    ) -> RunResult:
        statements = Parser(tokens, self.diagnostics).parse()
        stats.statement_count = len(statements)
        if self.diagnostics.had_syntax_error:
            return self._result(RunOutcome.STATIC_ERROR, stats, started)

        distances = self._resolver().resolve(statements)
        stats.resolved_references = len(distances)
        if self.diagnostics.had_resolution_error:
            return self._result(RunOutcome.STATIC_ERROR, stats, started)

        self.interpreter.record_distances(distances)
        if not self.interpreter.interpret(statements):
            return self._result(RunOutcome.RUNTIME_ERROR, stats, started)
        return self._result(RunOutcome.OK, stats, started)

    def _resolver(self) -> Resolver:
        return Resolver(
            self.diagnostics, known_globals=self.interpreter.globals.names()
        )

    def _result(self, outcome: RunOutcome, stats: RunStats, started: float) -> RunResult:
        stats.total_time = time.perf_counter() - started
        logger.debug("Line finished: %s", outcome.value)
        return RunResult(
            outcome=outcome, diagnostics=list(self.diagnostics.entries), stats=stats
        )
