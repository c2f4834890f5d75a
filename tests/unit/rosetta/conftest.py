"""Shared helpers for the Rosetta program suite."""

import logging

from fail.diagnostics import NullSink
from fail.run import run
from fail.run_types import RunOutcome

logger = logging.getLogger(__name__)

# Fail has no remainder operator; programs that need one define it.
MOD_PRELUDE = """\
fun mod(a, b) {
    while (a >= b) a -= b;
    return a;
}
"""


def execute(source: str) -> list[str]:
    """Run *source* to completion and return every printed line."""
    lines: list[str] = []
    result = run(source, output=lines.append, sink=NullSink())
    assert result.outcome == RunOutcome.OK, [str(d) for d in result.diagnostics]
    logger.debug("Executed %d statements", result.stats.statement_count)
    return lines
