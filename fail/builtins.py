"""Built-in functions bound in the global environment at startup."""

from __future__ import annotations

import time
from typing import Any

from .runtime_types import NativeFunction
from .values import stringify


def _builtin_clock() -> float:
    return time.time()


def _builtin_len(value: Any) -> float:
    return float(len(stringify(value)))


def _builtin_str(value: Any) -> str:
    return stringify(value)


class Builtins:
    """Table of native functions, keyed by the global name they bind to."""

    TABLE: dict[str, NativeFunction] = {
        "clock": NativeFunction("clock", 0, _builtin_clock),
        "len": NativeFunction("len", 1, _builtin_len),
        "str": NativeFunction("str", 1, _builtin_str),
    }
