"""Resolver — static pass recording each variable reference's scope distance.

The resolver never evaluates anything. It walks the AST with a stack of
scopes mirroring the environments the interpreter will create, so that for
every ``Variable``, ``Assign``, ``This`` and ``Super`` node it can record how
many environment links separate the use from the definition. Scope and
placement problems are reported through ``Diagnostics`` without stopping the
walk, so one pass surfaces every problem in the program.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable

from . import ast_nodes as ast
from . import constants
from .diagnostics import Diagnostics
from .tokens import Token, TokenType

logger = logging.getLogger(__name__)


class FunctionType(Enum):
    NONE = "none"
    FUNCTION = "function"
    METHOD = "method"
    INITIALIZER = "initializer"


class ClassType(Enum):
    NONE = "none"
    CLASS = "class"
    SUBCLASS = "subclass"


class VariableState(Enum):
    DECLARED = "declared"
    DEFINED = "defined"
    READ = "read"


@dataclass
class Binding:
    token: Token
    state: VariableState


class Resolver:
    """Computes lexical distances for one AST.

    ``known_globals`` names the bindings already present in the global
    environment (built-ins, earlier interactive lines) so that a shadowing
    local initialiser such as ``{ var x = x; }`` can tell whether an outer
    ``x`` exists.
    """

    def __init__(
        self, diagnostics: Diagnostics, known_globals: Iterable[str] = ()
    ):
        self._diagnostics = diagnostics
        self._scopes: list[dict[str, Binding]] = []
        self._globals: set[str] = set(known_globals)
        self._distances: dict[Any, int] = {}
        self._current_function = FunctionType.NONE
        self._current_class = ClassType.NONE
        self._loop_depth = 0
        self._prevent_assignment = False

        self._STMT_DISPATCH: dict[type, Callable[[Any], None]] = {
            ast.Block: self._resolve_block,
            ast.ExpressionStatement: self._resolve_expression_statement,
            ast.Function: self._resolve_function_statement,
            ast.If: self._resolve_if,
            ast.While: self._resolve_while,
            ast.Print: self._resolve_print,
            ast.Var: self._resolve_var,
            ast.Return: self._resolve_return,
            ast.Break: self._resolve_break,
            ast.Continue: self._resolve_continue,
            ast.Class: self._resolve_class,
        }
        self._EXPR_DISPATCH: dict[type, Callable[[Any], None]] = {
            ast.Literal: self._resolve_literal,
            ast.Variable: self._resolve_variable,
            ast.Assign: self._resolve_assign,
            ast.Binary: self._resolve_binary,
            ast.Logical: self._resolve_binary,
            ast.Unary: self._resolve_unary,
            ast.Ternary: self._resolve_ternary,
            ast.Grouping: self._resolve_grouping,
            ast.Call: self._resolve_call,
            ast.FunctionLiteral: self._resolve_function_literal,
            ast.Get: self._resolve_get,
            ast.Set: self._resolve_set,
            ast.This: self._resolve_this,
            ast.Super: self._resolve_super,
        }
        _check_exhaustive(self, self._STMT_DISPATCH, ast.STMT_TYPES)
        _check_exhaustive(self, self._EXPR_DISPATCH, ast.EXPR_TYPES)

    # ── public API ───────────────────────────────────────────────

    def resolve(self, statements: Iterable[ast.Stmt]) -> dict[Any, int]:
        """Resolve a program and return its node → distance table."""
        for statement in statements:
            self._resolve_stmt(statement)
        logger.debug("Resolved %d references", len(self._distances))
        return self._distances

    def resolve_expression(self, expr: ast.Expr) -> dict[Any, int]:
        """Resolve a bare expression evaluated at global scope."""
        self._resolve_expr(expr)
        return self._distances

    @property
    def distances(self) -> dict[Any, int]:
        return self._distances

    # ── dispatch ─────────────────────────────────────────────────

    def _resolve_stmt(self, stmt: ast.Stmt):
        self._STMT_DISPATCH[type(stmt)](stmt)

    def _resolve_expr(self, expr: ast.Expr):
        self._EXPR_DISPATCH[type(expr)](expr)

    def _resolve_condition(self, condition: ast.Expr):
        enclosing = self._prevent_assignment
        self._prevent_assignment = True
        self._resolve_expr(condition)
        self._prevent_assignment = enclosing

    # ── statements ───────────────────────────────────────────────

    def _resolve_block(self, stmt: ast.Block):
        self._begin_scope()
        for statement in stmt.statements:
            self._resolve_stmt(statement)
        self._end_scope()

    def _resolve_expression_statement(self, stmt: ast.ExpressionStatement):
        self._resolve_expr(stmt.expression)

    def _resolve_function_statement(self, stmt: ast.Function):
        self._declare(stmt.name)
        self._define(stmt.name)
        self._resolve_function(stmt.function, FunctionType.FUNCTION)

    def _resolve_if(self, stmt: ast.If):
        self._resolve_condition(stmt.condition)
        self._resolve_stmt(stmt.then_branch)
        if stmt.else_branch is not None:
            self._resolve_stmt(stmt.else_branch)

    def _resolve_while(self, stmt: ast.While):
        self._resolve_condition(stmt.condition)
        self._loop_depth += 1
        self._resolve_stmt(stmt.body)
        self._loop_depth -= 1
        if stmt.increment is not None:
            self._resolve_expr(stmt.increment)

    def _resolve_print(self, stmt: ast.Print):
        self._resolve_expr(stmt.expression)

    def _resolve_var(self, stmt: ast.Var):
        self._declare(stmt.name)
        if stmt.initializer is not None:
            self._resolve_expr(stmt.initializer)
        self._define(stmt.name)

    def _resolve_return(self, stmt: ast.Return):
        if self._current_function == FunctionType.NONE:
            self._diagnostics.resolution_error(
                stmt.keyword, "Cannot return from top-level code."
            )
        if stmt.value is not None:
            if self._current_function == FunctionType.INITIALIZER:
                self._diagnostics.resolution_error(
                    stmt.keyword, "Cannot return a value from an initializer."
                )
            self._resolve_expr(stmt.value)

    def _resolve_break(self, stmt: ast.Break):
        if self._loop_depth == 0:
            self._diagnostics.resolution_error(
                stmt.keyword, "Cannot use 'break' outside of a loop."
            )

    def _resolve_continue(self, stmt: ast.Continue):
        if self._loop_depth == 0:
            self._diagnostics.resolution_error(
                stmt.keyword, "Cannot use 'continue' outside of a loop."
            )

    def _resolve_class(self, stmt: ast.Class):
        enclosing_class = self._current_class
        self._current_class = ClassType.CLASS

        self._declare(stmt.name)
        self._define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self._diagnostics.resolution_error(
                    stmt.superclass.name, "A class cannot inherit from itself."
                )
            self._current_class = ClassType.SUBCLASS
            self._resolve_expr(stmt.superclass)
            self._begin_scope()
            self._bind_synthetic(constants.SUPER_KEYWORD, stmt.name)

        self._begin_scope()
        self._bind_synthetic(constants.THIS_KEYWORD, stmt.name)
        for method in stmt.methods:
            kind = (
                FunctionType.INITIALIZER
                if method.name.lexeme == constants.INITIALIZER_NAME
                else FunctionType.METHOD
            )
            self._resolve_function(method.function, kind)
        self._end_scope()

        # Class-level methods: ``this`` is the class itself, one scope each.
        for method in stmt.class_methods:
            self._begin_scope()
            self._bind_synthetic(constants.THIS_KEYWORD, stmt.name)
            self._resolve_function(method.function, FunctionType.METHOD)
            self._end_scope()

        if stmt.superclass is not None:
            self._end_scope()

        self._current_class = enclosing_class

    # ── expressions ──────────────────────────────────────────────

    def _resolve_literal(self, expr: ast.Literal):
        pass

    def _resolve_variable(self, expr: ast.Variable):
        name = expr.name.lexeme
        if self._scopes:
            binding = self._scopes[-1].get(name)
            if (
                binding is not None
                and binding.state == VariableState.DECLARED
                and not self._has_outer_binding(name)
            ):
                self._diagnostics.resolution_error(
                    expr.name, "Cannot read local variable in its own initializer."
                )
        self._resolve_local(expr, expr.name, is_read=True)

    def _resolve_assign(self, expr: ast.Assign):
        if self._prevent_assignment:
            self._diagnostics.resolution_error(
                expr.operator,
                "Assignment is not allowed within if, loop or ternary condition.",
            )
        self._resolve_expr(expr.value)
        # A compound assignment reads the variable as well as writing it.
        self._resolve_local(
            expr, expr.name, is_read=expr.operator.type != TokenType.EQUAL
        )

    def _resolve_binary(self, expr: ast.Binary | ast.Logical):
        self._resolve_expr(expr.left)
        self._resolve_expr(expr.right)

    def _resolve_unary(self, expr: ast.Unary):
        self._resolve_expr(expr.operand)

    def _resolve_ternary(self, expr: ast.Ternary):
        self._resolve_condition(expr.condition)
        self._resolve_expr(expr.then_branch)
        self._resolve_expr(expr.else_branch)

    def _resolve_grouping(self, expr: ast.Grouping):
        self._resolve_expr(expr.expression)

    def _resolve_call(self, expr: ast.Call):
        self._resolve_expr(expr.callee)
        for argument in expr.arguments:
            self._resolve_expr(argument)

    def _resolve_function_literal(self, expr: ast.FunctionLiteral):
        self._resolve_function(expr, FunctionType.FUNCTION)

    def _resolve_get(self, expr: ast.Get):
        self._resolve_expr(expr.object)

    def _resolve_set(self, expr: ast.Set):
        self._resolve_expr(expr.value)
        self._resolve_expr(expr.object)

    def _resolve_this(self, expr: ast.This):
        if self._current_class == ClassType.NONE:
            self._diagnostics.resolution_error(
                expr.keyword, "Cannot use 'this' outside of a class."
            )
            return
        self._resolve_local(expr, expr.keyword, is_read=True)

    def _resolve_super(self, expr: ast.Super):
        if self._current_class == ClassType.NONE:
            self._diagnostics.resolution_error(
                expr.keyword, "Cannot use 'super' outside of a class."
            )
            return
        if self._current_class != ClassType.SUBCLASS:
            self._diagnostics.resolution_error(
                expr.keyword, "Cannot use 'super' in a class with no superclass."
            )
            return
        self._resolve_local(expr, expr.keyword, is_read=True)

    # ── scope machinery ──────────────────────────────────────────

    def _resolve_function(self, function: ast.FunctionLiteral, kind: FunctionType):
        enclosing_function = self._current_function
        enclosing_loop_depth = self._loop_depth
        enclosing_prevent = self._prevent_assignment
        self._current_function = kind
        self._loop_depth = 0
        self._prevent_assignment = False

        self._begin_scope()
        for param in function.params:
            self._declare(param)
            self._define(param)
        for statement in function.body:
            self._resolve_stmt(statement)
        self._end_scope()

        self._current_function = enclosing_function
        self._loop_depth = enclosing_loop_depth
        self._prevent_assignment = enclosing_prevent

    def _begin_scope(self):
        self._scopes.append({})

    def _end_scope(self):
        scope = self._scopes.pop()
        for binding in scope.values():
            if binding.state == VariableState.DEFINED:
                self._diagnostics.warning(binding.token, "Local variable is not used.")

    def _declare(self, name: Token):
        if not self._scopes:
            self._globals.add(name.lexeme)
            return

        scope = self._scopes[-1]
        if name.lexeme in scope:
            self._diagnostics.resolution_error(
                name, "Variable with this name already declared in this scope."
            )
        scope[name.lexeme] = Binding(name, VariableState.DECLARED)

    def _define(self, name: Token):
        if not self._scopes:
            return
        self._scopes[-1][name.lexeme].state = VariableState.DEFINED

    def _bind_synthetic(self, name: str, anchor: Token):
        # Synthetic bindings count as read so they never trigger warnings.
        self._scopes[-1][name] = Binding(anchor, VariableState.READ)

    def _has_outer_binding(self, name: str) -> bool:
        if any(name in scope for scope in self._scopes[:-1]):
            return True
        return name in self._globals

    def _resolve_local(self, expr: Any, name: Token, is_read: bool):
        depth = len(self._scopes)
        for index in range(depth - 1, -1, -1):
            binding = self._scopes[index].get(name.lexeme)
            if binding is None:
                continue
            # A name still being initialised in the innermost scope is not
            # visible yet; the reference falls through to an outer binding.
            if binding.state == VariableState.DECLARED and index == depth - 1:
                continue
            self._distances[expr] = depth - 1 - index
            if is_read:
                binding.state = VariableState.READ
            return

        # Not found: assume it is global.
        self._distances[expr] = depth


def _check_exhaustive(owner: object, table: dict[type, Any], node_types: tuple):
    missing = [t.__name__ for t in node_types if t not in table]
    if missing:
        raise TypeError(
            f"{type(owner).__name__} has no handler for: {', '.join(missing)}"
        )
