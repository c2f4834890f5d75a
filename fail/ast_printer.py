"""Textual renderings of the AST, for ``--ast`` dumps and tests."""

from __future__ import annotations

from typing import Any, Callable

from . import ast_nodes as ast
from .resolver import _check_exhaustive
from .tokens import TokenType
from .values import stringify


def _literal_text(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    return stringify(value)


class AstPrinter:
    """Renders nodes as parenthesised prefix expressions.

    ``1 + 2 * 3`` prints as ``(+ 1 (* 2 3))``; statements print the same
    way, e.g. ``(var x 1)`` or ``(while (< i 3) (block ...))``.
    """

    def __init__(self):
        self._DISPATCH: dict[type, Callable[[Any], str]] = {
            ast.Literal: lambda n: _literal_text(n.value),
            ast.Variable: lambda n: n.name.lexeme,
            ast.Assign: lambda n: self._wrap(
                n.operator.lexeme, n.name.lexeme, n.value
            ),
            ast.Binary: lambda n: self._wrap(n.operator.lexeme, n.left, n.right),
            ast.Logical: lambda n: self._wrap(n.operator.lexeme, n.left, n.right),
            ast.Unary: self._unary,
            ast.Ternary: lambda n: self._wrap(
                "?:", n.condition, n.then_branch, n.else_branch
            ),
            ast.Grouping: lambda n: self._wrap("group", n.expression),
            ast.Call: lambda n: self._wrap("call", n.callee, *n.arguments),
            ast.FunctionLiteral: lambda n: self._function("fun", n),
            ast.Get: lambda n: self._wrap(".", n.object, n.name.lexeme),
            ast.Set: lambda n: self._wrap("=", n.object, n.name.lexeme, n.value),
            ast.This: lambda n: "this",
            ast.Super: lambda n: f"super.{n.method.lexeme}",
            ast.Block: lambda n: self._wrap("block", *n.statements),
            ast.ExpressionStatement: lambda n: self._wrap(";", n.expression),
            ast.Function: lambda n: self._function(f"fun {n.name.lexeme}", n.function),
            ast.If: self._if,
            ast.While: self._while,
            ast.Print: lambda n: self._wrap("print", n.expression),
            ast.Var: self._var,
            ast.Return: self._return,
            ast.Break: lambda n: "(break)",
            ast.Continue: lambda n: "(continue)",
            ast.Class: self._class,
        }
        _check_exhaustive(self, self._DISPATCH, ast.EXPR_TYPES + ast.STMT_TYPES)

    def print(self, node: Any) -> str:
        return self._DISPATCH[type(node)](node)

    def print_program(self, statements: list[ast.Stmt]) -> str:
        return "\n".join(self.print(stmt) for stmt in statements)

    def _wrap(self, name: str, *parts: Any) -> str:
        rendered = [part if isinstance(part, str) else self.print(part) for part in parts]
        return f"({' '.join([name, *rendered])})"

    def _unary(self, node: ast.Unary) -> str:
        name = f"post{node.operator.lexeme}" if node.postfix else node.operator.lexeme
        return self._wrap(name, node.operand)

    def _function(self, name: str, node: ast.FunctionLiteral) -> str:
        params = f"({' '.join(p.lexeme for p in node.params)})"
        return self._wrap(name, params, *node.body)

    def _if(self, node: ast.If) -> str:
        if node.else_branch is None:
            return self._wrap("if", node.condition, node.then_branch)
        return self._wrap("if-else", node.condition, node.then_branch, node.else_branch)

    def _while(self, node: ast.While) -> str:
        name = "do-while" if node.is_do_while else "while"
        parts: list[Any] = [node.condition, node.body]
        if node.increment is not None:
            parts.append(node.increment)
        return self._wrap(name, *parts)

    def _var(self, node: ast.Var) -> str:
        if node.initializer is None:
            return self._wrap("var", node.name.lexeme)
        return self._wrap("var", node.name.lexeme, node.initializer)

    def _return(self, node: ast.Return) -> str:
        if node.value is None:
            return "(return)"
        return self._wrap("return", node.value)

    def _class(self, node: ast.Class) -> str:
        parts: list[Any] = [node.name.lexeme]
        if node.superclass is not None:
            parts.append(f"< {node.superclass.name.lexeme}")
        parts.extend(node.methods)
        parts.extend(self._function(f"class {m.name.lexeme}", m.function) for m in node.class_methods)
        return self._wrap("class", *parts)


class RpnPrinter:
    """Renders expressions in reverse Polish notation: ``(1 + 2) * 3`` → ``1 2 + 3 *``."""

    def __init__(self):
        self._DISPATCH: dict[type, Callable[[Any], str]] = {
            ast.Literal: lambda n: stringify(n.value),
            ast.Variable: lambda n: n.name.lexeme,
            ast.Assign: lambda n: self._postfix(
                f"{n.name.lexeme} {n.operator.lexeme}", n.value
            ),
            ast.Binary: lambda n: self._postfix(n.operator.lexeme, n.left, n.right),
            ast.Logical: lambda n: self._postfix(n.operator.lexeme, n.left, n.right),
            ast.Unary: self._unary,
            ast.Ternary: lambda n: self._postfix(
                "?", n.condition, n.then_branch, n.else_branch
            ),
            ast.Grouping: lambda n: self.print(n.expression),
            ast.Call: lambda n: self._postfix("call", n.callee, *n.arguments),
            ast.FunctionLiteral: lambda n: "lambda",
            ast.Get: lambda n: self._postfix(f"get {n.name.lexeme}", n.object),
            ast.Set: lambda n: self._postfix(f"set {n.name.lexeme}", n.object, n.value),
            ast.This: lambda n: "this",
            ast.Super: lambda n: f"super {n.method.lexeme}",
        }
        _check_exhaustive(self, self._DISPATCH, ast.EXPR_TYPES)

    def print(self, expr: ast.Expr) -> str:
        return self._DISPATCH[type(expr)](expr)

    def _postfix(self, name: str, *exprs: ast.Expr) -> str:
        return " ".join([*(self.print(e) for e in exprs), name])

    def _unary(self, node: ast.Unary) -> str:
        if node.operator.type == TokenType.MINUS:
            return self._postfix("neg", node.operand)
        if node.postfix:
            return self._postfix(f"post{node.operator.lexeme}", node.operand)
        return self._postfix(node.operator.lexeme, node.operand)
