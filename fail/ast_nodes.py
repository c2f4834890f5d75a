"""AST node set — pure data, no behaviour.

Nodes are frozen dataclasses compared and hashed by identity, so each node
can serve as the key under which the resolver records its scope distance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .tokens import Token

_NODE = dict(frozen=True, eq=False)


# ── Expressions ──────────────────────────────────────────────────


@dataclass(**_NODE)
class Literal:
    value: float | str | bool | None


@dataclass(**_NODE)
class Variable:
    name: Token


@dataclass(**_NODE)
class Assign:
    """``name = value`` or a compound form; ``operator`` holds which."""

    name: Token
    operator: Token
    value: Expr


@dataclass(**_NODE)
class Binary:
    left: Expr
    operator: Token
    right: Expr


@dataclass(**_NODE)
class Logical:
    left: Expr
    operator: Token
    right: Expr


@dataclass(**_NODE)
class Unary:
    operator: Token
    operand: Expr
    postfix: bool = False


@dataclass(**_NODE)
class Ternary:
    condition: Expr
    then_branch: Expr
    else_branch: Expr


@dataclass(**_NODE)
class Grouping:
    expression: Expr


@dataclass(**_NODE)
class Call:
    callee: Expr
    paren: Token
    arguments: tuple[Expr, ...] = ()


@dataclass(**_NODE)
class FunctionLiteral:
    keyword: Token
    params: tuple[Token, ...]
    body: tuple[Stmt, ...]


@dataclass(**_NODE)
class Get:
    object: Expr
    name: Token


@dataclass(**_NODE)
class Set:
    object: Expr
    name: Token
    value: Expr


@dataclass(**_NODE)
class This:
    keyword: Token


@dataclass(**_NODE)
class Super:
    keyword: Token
    method: Token


# ── Statements ───────────────────────────────────────────────────


@dataclass(**_NODE)
class Block:
    statements: tuple[Stmt, ...]


@dataclass(**_NODE)
class ExpressionStatement:
    expression: Expr


@dataclass(**_NODE)
class Function:
    name: Token
    function: FunctionLiteral


@dataclass(**_NODE)
class If:
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None = None


@dataclass(**_NODE)
class While:
    """Loop node shared by ``while``, ``for`` and ``do … while``.

    ``increment`` runs after every iteration, including ones cut short by
    ``continue``. With ``is_do_while`` the body runs once before the first
    condition test.
    """

    condition: Expr
    body: Stmt
    increment: Expr | None = None
    is_do_while: bool = False


@dataclass(**_NODE)
class Print:
    expression: Expr


@dataclass(**_NODE)
class Var:
    name: Token
    initializer: Expr | None = None


@dataclass(**_NODE)
class Return:
    keyword: Token
    value: Expr | None = None


@dataclass(**_NODE)
class Break:
    keyword: Token


@dataclass(**_NODE)
class Continue:
    keyword: Token


@dataclass(**_NODE)
class Class:
    name: Token
    superclass: Variable | None = None
    methods: tuple[Function, ...] = ()
    class_methods: tuple[Function, ...] = ()


Expr = Union[
    Literal,
    Variable,
    Assign,
    Binary,
    Logical,
    Unary,
    Ternary,
    Grouping,
    Call,
    FunctionLiteral,
    Get,
    Set,
    This,
    Super,
]

Stmt = Union[
    Block,
    ExpressionStatement,
    Function,
    If,
    While,
    Print,
    Var,
    Return,
    Break,
    Continue,
    Class,
]

EXPR_TYPES: tuple[type, ...] = Expr.__args__
STMT_TYPES: tuple[type, ...] = Stmt.__args__
