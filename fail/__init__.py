"""Fail — a tree-walking interpreter for the Fail scripting language."""

from .run import run, Session  # noqa: F401
from .run_types import RunConfig, RunOutcome, RunResult  # noqa: F401
from .api import (  # noqa: F401
    tokenize,
    parse_source,
    resolve_source,
    dump_tokens,
    dump_ast,
    dump_rpn,
)
