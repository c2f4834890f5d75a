"""Interpreter — executes a resolved AST against a live environment chain."""

from __future__ import annotations

import logging
import sys
import weakref
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator

from . import ast_nodes as ast
from . import constants
from .builtins import Builtins
from .diagnostics import Diagnostics
from .environment import Environment
from .errors import FailRuntimeError, ScopeMismatchError
from .operators import Operators
from .resolver import _check_exhaustive
from .runtime_types import (
    BREAK,
    CONTINUE,
    NORMAL,
    Completion,
    CompletionKind,
    FailCallable,
    FailClass,
    FailFunction,
    FailInstance,
    NativeFunction,
)
from .tokens import COMPOUND_ASSIGNMENT_OPERATORS, Token, TokenType
from .values import is_truthy, stringify

logger = logging.getLogger(__name__)

OutputSink = Callable[[str], None]


class Interpreter:
    """Tree-walking evaluator.

    Distances come from the resolver through :meth:`record_distances`; once a
    node has a distance, every access for it walks exactly that many
    environment links. The global environment is the root of every chain and
    holds the built-ins.

    Distances are held weakly, so entries for nodes no longer reachable
    from any statement or closure drop out between prompt lines.
    """

    def __init__(
        self,
        diagnostics: Diagnostics,
        output: OutputSink = print,
        natives: dict[str, NativeFunction] | None = None,
        max_call_depth: int = constants.DEFAULT_MAX_CALL_DEPTH,
    ):
        self._diagnostics = diagnostics
        self._output = output
        self._max_call_depth = max_call_depth
        self._call_depth = 0
        self.globals = Environment()
        self.environment = self.globals
        self.distances: weakref.WeakKeyDictionary[Any, int] = (
            weakref.WeakKeyDictionary()
        )

        for name, native in {**Builtins.TABLE, **(natives or {})}.items():
            self.globals.define(name, native)

        self._STMT_DISPATCH: dict[type, Callable[[Any], Completion]] = {
            ast.Block: self._exec_block,
            ast.ExpressionStatement: self._exec_expression_statement,
            ast.Function: self._exec_function,
            ast.If: self._exec_if,
            ast.While: self._exec_while,
            ast.Print: self._exec_print,
            ast.Var: self._exec_var,
            ast.Return: self._exec_return,
            ast.Break: lambda stmt: BREAK,
            ast.Continue: lambda stmt: CONTINUE,
            ast.Class: self._exec_class,
        }
        self._EXPR_DISPATCH: dict[type, Callable[[Any], Any]] = {
            ast.Literal: lambda expr: expr.value,
            ast.Variable: self._eval_variable,
            ast.Assign: self._eval_assign,
            ast.Binary: self._eval_binary,
            ast.Logical: self._eval_logical,
            ast.Unary: self._eval_unary,
            ast.Ternary: self._eval_ternary,
            ast.Grouping: lambda expr: self.evaluate(expr.expression),
            ast.Call: self._eval_call,
            ast.FunctionLiteral: self._eval_function_literal,
            ast.Get: self._eval_get,
            ast.Set: self._eval_set,
            ast.This: self._eval_this,
            ast.Super: self._eval_super,
        }
        _check_exhaustive(self, self._STMT_DISPATCH, ast.STMT_TYPES)
        _check_exhaustive(self, self._EXPR_DISPATCH, ast.EXPR_TYPES)

    # ── public API ───────────────────────────────────────────────

    def record_distances(self, distances: dict[Any, int]):
        self.distances.update(distances)

    def interpret(self, statements: Iterable[ast.Stmt]) -> bool:
        """Run *statements* in order; stop at and report the first runtime error.

        Returns True when every statement completed.
        """
        try:
            with self._recursion_headroom():
                for statement in statements:
                    self.execute(statement)
        except FailRuntimeError as error:
            logger.debug("Runtime error on line %d: %s", error.token.line, error)
            self._diagnostics.runtime_error(error)
            return False
        return True

    def evaluate_and_render(self, expr: ast.Expr) -> str | None:
        """Evaluate a bare expression and return its text, or None on failure."""
        try:
            with self._recursion_headroom():
                return stringify(self.evaluate(expr))
        except FailRuntimeError as error:
            self._diagnostics.runtime_error(error)
            return None

    @contextmanager
    def _recursion_headroom(self) -> Iterator[None]:
        """Raise Python's recursion limit so the call-depth guard fires first.

        The previous limit is restored on exit.
        """
        previous = sys.getrecursionlimit()
        needed = self._max_call_depth * constants.FRAMES_PER_CALL
        if previous < needed:
            logger.debug("Raising recursion limit %d -> %d", previous, needed)
            sys.setrecursionlimit(needed)
        try:
            yield
        finally:
            sys.setrecursionlimit(previous)

    def execute(self, stmt: ast.Stmt) -> Completion:
        return self._STMT_DISPATCH[type(stmt)](stmt)

    def evaluate(self, expr: ast.Expr) -> Any:
        return self._EXPR_DISPATCH[type(expr)](expr)

    def execute_block(
        self, statements: Iterable[ast.Stmt], environment: Environment
    ) -> Completion:
        previous = self.environment
        self.environment = environment
        try:
            for statement in statements:
                completion = self.execute(statement)
                if not completion.is_normal:
                    return completion
            return NORMAL
        finally:
            self.environment = previous

    # ── statements ───────────────────────────────────────────────

    def _exec_block(self, stmt: ast.Block) -> Completion:
        return self.execute_block(stmt.statements, Environment(self.environment))

    def _exec_expression_statement(self, stmt: ast.ExpressionStatement) -> Completion:
        self.evaluate(stmt.expression)
        return NORMAL

    def _exec_function(self, stmt: ast.Function) -> Completion:
        function = FailFunction(stmt.name.lexeme, stmt.function, self.environment)
        self.environment.define(stmt.name.lexeme, function)
        return NORMAL

    def _exec_if(self, stmt: ast.If) -> Completion:
        if is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return NORMAL

    def _exec_while(self, stmt: ast.While) -> Completion:
        first_pass = stmt.is_do_while
        while first_pass or is_truthy(self.evaluate(stmt.condition)):
            first_pass = False
            completion = self.execute(stmt.body)
            if completion.kind == CompletionKind.BREAK:
                break
            if completion.kind == CompletionKind.RETURN:
                return completion
            if stmt.increment is not None:
                self.evaluate(stmt.increment)
        return NORMAL

    def _exec_print(self, stmt: ast.Print) -> Completion:
        self._output(stringify(self.evaluate(stmt.expression)))
        return NORMAL

    def _exec_var(self, stmt: ast.Var) -> Completion:
        name = stmt.name.lexeme
        if stmt.initializer is None:
            self.environment.declare(name)
            return NORMAL
        # A closure called from its own initialiser finds the local slot
        # bound but unassigned.
        if not self.environment.is_global:
            self.environment.declare(name)
        self.environment.define(name, self.evaluate(stmt.initializer))
        return NORMAL

    def _exec_return(self, stmt: ast.Return) -> Completion:
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        return Completion.returning(value)

    def _exec_class(self, stmt: ast.Class) -> Completion:
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, FailClass):
                raise FailRuntimeError(
                    stmt.superclass.name, "Superclass must be a class."
                )

        self.environment.define(stmt.name.lexeme, None)

        method_env = self.environment
        if superclass is not None:
            method_env = Environment(self.environment)
            method_env.define(constants.SUPER_KEYWORD, superclass)

        methods = {
            method.name.lexeme: FailFunction(
                method.name.lexeme,
                method.function,
                method_env,
                is_initializer=method.name.lexeme == constants.INITIALIZER_NAME,
            )
            for method in stmt.methods
        }
        class_methods = {
            method.name.lexeme: FailFunction(
                method.name.lexeme, method.function, method_env
            )
            for method in stmt.class_methods
        }

        metaclass = FailClass(
            constants.METACLASS_NAME_TEMPLATE.format(name=stmt.name.lexeme),
            superclass.klass if superclass is not None else None,
            class_methods,
        )
        klass = FailClass(stmt.name.lexeme, superclass, methods, metaclass)
        self.environment.define(stmt.name.lexeme, klass)
        return NORMAL

    # ── variable access ──────────────────────────────────────────

    def _distance(self, expr: Any, name: str) -> int:
        distance = self.distances.get(expr)
        if distance is None:
            raise ScopeMismatchError(name, -1, "reference was never resolved")
        return distance

    def _look_up(self, name: Token, expr: Any) -> Any:
        distance = self._distance(expr, name.lexeme)
        target = self.environment.ancestor(distance, name.lexeme)
        if target.is_global:
            return target.get(name)
        return target.read_at(0, name)

    def _store(self, name: Token, expr: Any, value: Any):
        distance = self._distance(expr, name.lexeme)
        target = self.environment.ancestor(distance, name.lexeme)
        if target.is_global:
            target.assign(name, value)
        else:
            target.assign_at(0, name.lexeme, value)

    # ── expressions ──────────────────────────────────────────────

    def _eval_variable(self, expr: ast.Variable) -> Any:
        return self._look_up(expr.name, expr)

    def _eval_assign(self, expr: ast.Assign) -> Any:
        if expr.operator.type not in COMPOUND_ASSIGNMENT_OPERATORS:
            value = self.evaluate(expr.value)
            self._store(expr.name, expr, value)
            return value

        current = self._look_up(expr.name, expr)
        value = Operators.apply(
            COMPOUND_ASSIGNMENT_OPERATORS[expr.operator.type],
            expr.operator,
            current,
            self.evaluate(expr.value),
        )
        self._store(expr.name, expr, value)
        return value

    def _eval_binary(self, expr: ast.Binary) -> Any:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        return Operators.eval_binop(expr.operator, left, right)

    def _eval_logical(self, expr: ast.Logical) -> Any:
        left = self.evaluate(expr.left)
        if expr.operator.type == TokenType.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left
        return self.evaluate(expr.right)

    def _eval_unary(self, expr: ast.Unary) -> Any:
        if expr.operator.type not in (TokenType.PLUS_PLUS, TokenType.MINUS_MINUS):
            return Operators.eval_unop(expr.operator, self.evaluate(expr.operand))

        target = expr.operand
        if not isinstance(target, ast.Variable):
            raise FailRuntimeError(
                expr.operator,
                f"Operand of '{expr.operator.lexeme}' must be a variable.",
            )
        old = self._look_up(target.name, target)
        new = Operators.step(expr.operator, old)
        self._store(target.name, target, new)
        return old if expr.postfix else new

    def _eval_ternary(self, expr: ast.Ternary) -> Any:
        if is_truthy(self.evaluate(expr.condition)):
            return self.evaluate(expr.then_branch)
        return self.evaluate(expr.else_branch)

    def _eval_call(self, expr: ast.Call) -> Any:
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, FailCallable):
            raise FailRuntimeError(expr.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity():
            raise FailRuntimeError(
                expr.paren,
                f"Expected {callee.arity()} arguments but got {len(arguments)}.",
            )
        if self._call_depth >= self._max_call_depth:
            raise FailRuntimeError(expr.paren, "Stack overflow.")

        self._call_depth += 1
        try:
            return callee.call(self, arguments)
        finally:
            self._call_depth -= 1

    def _eval_function_literal(self, expr: ast.FunctionLiteral) -> Any:
        return FailFunction(None, expr, self.environment)

    def _eval_get(self, expr: ast.Get) -> Any:
        obj = self.evaluate(expr.object)
        if isinstance(obj, FailInstance):
            return obj.get(expr.name)
        raise FailRuntimeError(expr.name, "Only instances have properties.")

    def _eval_set(self, expr: ast.Set) -> Any:
        obj = self.evaluate(expr.object)
        if not isinstance(obj, FailInstance):
            raise FailRuntimeError(expr.name, "Only instances have fields.")
        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def _eval_this(self, expr: ast.This) -> Any:
        return self._look_up(expr.keyword, expr)

    def _eval_super(self, expr: ast.Super) -> Any:
        distance = self._distance(expr, constants.SUPER_KEYWORD)
        superclass: FailClass = self.environment.get_at(
            distance, constants.SUPER_KEYWORD
        )
        # ``this`` is always bound one scope inside the one holding ``super``.
        obj = self.environment.get_at(distance - 1, constants.THIS_KEYWORD)

        # Inside a class-level method ``this`` is the class; look in the
        # superclass's metaclass instead.
        lookup = superclass.klass if isinstance(obj, FailClass) else superclass
        method = lookup.find_method(expr.method.lexeme)
        if method is None:
            raise FailRuntimeError(
                expr.method, f"Undefined property '{expr.method.lexeme}'."
            )
        return method.bind(obj)
