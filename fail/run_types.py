"""Run pipeline data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from . import constants
from .diagnostics import Diagnostic


class RunOutcome(Enum):
    """How a run ended."""

    OK = "ok"
    STATIC_ERROR = "static_error"
    RUNTIME_ERROR = "runtime_error"

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self]


_EXIT_CODES: dict[RunOutcome, int] = {
    RunOutcome.OK: constants.EXIT_OK,
    RunOutcome.STATIC_ERROR: constants.EXIT_STATIC_ERROR,
    RunOutcome.RUNTIME_ERROR: constants.EXIT_RUNTIME_ERROR,
}


@dataclass(frozen=True)
class RunConfig:
    """Groups run configuration."""

    echo_warnings: bool = True
    max_call_depth: int = constants.DEFAULT_MAX_CALL_DEPTH
    verbose: bool = False


@dataclass
class RunStats:
    """Timing and size statistics for each pipeline stage."""

    source_bytes: int = 0
    source_lines: int = 0

    # Stage timings (seconds)
    scan_time: float = 0.0
    parse_time: float = 0.0
    resolve_time: float = 0.0
    execution_time: float = 0.0
    total_time: float = 0.0

    # Output sizes
    token_count: int = 0
    statement_count: int = 0
    resolved_references: int = 0
    lines_printed: int = 0

    def report(self) -> str:
        lines = [
            "═══ Run Statistics ═══",
            f"  Source: {self.source_lines} lines, {self.source_bytes} bytes",
            "",
            f"  {'Stage':<12} {'Time':>10}  {'Output':>24}",
            f"  {'─' * 12} {'─' * 10}  {'─' * 24}",
        ]

        stages = [
            ("Scan", self.scan_time, f"{self.token_count} tokens"),
            ("Parse", self.parse_time, f"{self.statement_count} statements"),
            ("Resolve", self.resolve_time, f"{self.resolved_references} references"),
            ("Execute", self.execution_time, f"{self.lines_printed} lines printed"),
        ]
        for name, t, output in stages:
            time_str = f"{t * 1000:>8.1f}ms"
            lines.append(f"  {name:<12} {time_str:>10}  {output:>24}")

        lines.append(f"  {'─' * 12} {'─' * 10}  {'─' * 24}")
        lines.append(f"  {'Total':<12} {self.total_time * 1000:>8.1f}ms")
        return "\n".join(lines)


@dataclass
class RunResult:
    """Returned by run(): the outcome plus everything reported along the way."""

    outcome: RunOutcome
    diagnostics: list[Diagnostic] = field(default_factory=list)
    stats: RunStats = field(default_factory=RunStats)

    @property
    def ok(self) -> bool:
        return self.outcome == RunOutcome.OK

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code
