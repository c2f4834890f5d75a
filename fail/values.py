"""Value semantics: truthiness, equality and textual rendering."""

from __future__ import annotations

from typing import Any

from . import constants


def is_truthy(value: Any) -> bool:
    """``none`` and ``false`` are falsy; everything else, including 0 and ""."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Any, b: Any) -> bool:
    """Equality per kind. Booleans never equal numbers; objects by identity."""
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, float) and isinstance(b, float):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return a is b


def is_number(value: Any) -> bool:
    return isinstance(value, float)


def format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def stringify(value: Any) -> str:
    if value is None:
        return constants.NONE_TEXT
    if isinstance(value, bool):
        return constants.TRUE_TEXT if value else constants.FALSE_TEXT
    if isinstance(value, float):
        return format_number(value)
    return str(value)
