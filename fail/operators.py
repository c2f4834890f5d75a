"""Binary and unary operator semantics with dynamic type checks."""

from __future__ import annotations

import math
from typing import Any, Callable

from . import constants
from .errors import FailRuntimeError
from .tokens import Token, TokenType
from .values import is_equal, is_number, is_truthy


def _check_number_operand(operator: Token, operand: Any):
    if not is_number(operand):
        raise FailRuntimeError(operator, "Operand must be a number.")


def _check_number_operands(operator: Token, left: Any, right: Any):
    if not (is_number(left) and is_number(right)):
        raise FailRuntimeError(operator, "Operands must be numbers.")


def _numeric(fn: Callable[[float, float], Any]) -> Callable[[Token, Any, Any], Any]:
    def apply(operator: Token, left: Any, right: Any) -> Any:
        _check_number_operands(operator, left, right)
        return fn(left, right)

    return apply


def _add(operator: Token, left: Any, right: Any) -> Any:
    if is_number(left) and is_number(right):
        return left + right
    if isinstance(left, str) and isinstance(right, str):
        return left + right
    raise FailRuntimeError(operator, "Operands must be two numbers or two strings.")


def _repeat(operator: Token, text: str, count: float) -> str:
    if not count.is_integer():
        raise FailRuntimeError(
            operator, "Text can only be repeated a whole number of times."
        )
    if not text or count <= 0:
        return ""
    if len(text) * count > constants.MAX_TEXT_LENGTH:
        raise FailRuntimeError(operator, "Repeated text is too long.")
    return text * int(count)


def _multiply(operator: Token, left: Any, right: Any) -> Any:
    if isinstance(left, str) and is_number(right):
        return _repeat(operator, left, right)
    if is_number(left) and isinstance(right, str):
        return _repeat(operator, right, left)
    _check_number_operands(operator, left, right)
    return left * right


def _divide(operator: Token, left: Any, right: Any) -> Any:
    """IEEE division: a zero divisor gives a signed infinity, or NaN for 0 / 0."""
    _check_number_operands(operator, left, right)
    if right != 0:
        return left / right
    if left == 0 or math.isnan(left):
        return math.nan
    return math.copysign(math.inf, left) * math.copysign(1.0, right)


def _is_odd_integer(value: float) -> bool:
    return value.is_integer() and value % 2 == 1


def _power(operator: Token, left: Any, right: Any) -> Any:
    """IEEE exponentiation: overflow gives an infinity, a domain error NaN."""
    _check_number_operands(operator, left, right)
    try:
        return math.pow(left, right)
    except OverflowError:
        return -math.inf if left < 0 and _is_odd_integer(right) else math.inf
    except ValueError:
        if left != 0:
            return math.nan
        # Zero to a negative power.
        return math.copysign(math.inf, left) if _is_odd_integer(right) else math.inf


def _comma(operator: Token, left: Any, right: Any) -> Any:
    return right


class Operators:
    """Tables of operator implementations keyed by token type."""

    BINOP_TABLE: dict[TokenType, Callable[[Token, Any, Any], Any]] = {
        TokenType.PLUS: _add,
        TokenType.MINUS: _numeric(lambda a, b: a - b),
        TokenType.STAR: _multiply,
        TokenType.SLASH: _divide,
        TokenType.STAR_STAR: _power,
        TokenType.GREATER: _numeric(lambda a, b: a > b),
        TokenType.GREATER_EQUAL: _numeric(lambda a, b: a >= b),
        TokenType.LESS: _numeric(lambda a, b: a < b),
        TokenType.LESS_EQUAL: _numeric(lambda a, b: a <= b),
        TokenType.EQUAL_EQUAL: lambda op, a, b: is_equal(a, b),
        TokenType.BANG_EQUAL: lambda op, a, b: not is_equal(a, b),
        TokenType.COMMA: _comma,
    }

    @classmethod
    def eval_binop(cls, operator: Token, left: Any, right: Any) -> Any:
        return cls.apply(operator.type, operator, left, right)

    @classmethod
    def apply(cls, op: TokenType, operator: Token, left: Any, right: Any) -> Any:
        """Apply binary operator *op*, reporting failures against *operator*.

        Compound assignment passes the ``+=``-style token as *operator* while
        *op* names the underlying binary operator.
        """
        fn = cls.BINOP_TABLE.get(op)
        if fn is None:
            raise FailRuntimeError(operator, f"Unknown operator '{operator.lexeme}'.")
        return fn(operator, left, right)

    @classmethod
    def eval_unop(cls, operator: Token, operand: Any) -> Any:
        if operator.type == TokenType.BANG:
            return not is_truthy(operand)
        if operator.type == TokenType.MINUS:
            _check_number_operand(operator, operand)
            return -operand
        raise FailRuntimeError(operator, f"Unknown operator '{operator.lexeme}'.")

    @classmethod
    def step(cls, operator: Token, operand: Any) -> float:
        """Next value for ``++`` / ``--`` applied to *operand*."""
        _check_number_operand(operator, operand)
        if operator.type == TokenType.PLUS_PLUS:
            return operand + 1
        return operand - 1
