"""Recursive-descent parser — token stream to AST.

Grammar, lowest precedence first::

    program     → declaration* EOF
    declaration → classDecl | funDecl | varDecl | statement
    classDecl   → "class" IDENT ( "<" IDENT )? "{" ( "class"? method )* "}"
    funDecl     → "fun" IDENT "(" params? ")" block
    varDecl     → "var" IDENT ( "=" assignment )? ( "," IDENT "=" assignment )* ";"
    statement   → exprStmt | forStmt | ifStmt | printStmt | returnStmt
                | whileStmt | doWhileStmt | breakStmt | continueStmt | block
    expression  → comma
    comma       → assignment ( "," assignment )*
    assignment  → ( call "." )? IDENT assignOp assignment | ternary
    ternary     → or ( "?" expression ":" ternary )?
    or          → and ( "or" and )*
    and         → equality ( "and" equality )*
    equality    → comparison ( ( "!=" | "==" ) comparison )*
    comparison  → term ( ( ">" | ">=" | "<" | "<=" ) term )*
    term        → factor ( ( "-" | "+" ) factor )*
    factor      → exponent ( ( "/" | "*" ) exponent )*
    exponent    → unary ( "**" exponent )?
    unary       → ( "!" | "-" | "++" | "--" ) unary | postfix
    postfix     → call ( "++" | "--" )?
    call        → primary ( "(" arguments? ")" | "." IDENT )*
    primary     → literal | IDENT | "this" | "super" "." IDENT
                | "(" expression ")" | "fun" "(" params? ")" block
"""

from __future__ import annotations

import logging

from . import ast_nodes as ast
from .diagnostics import Diagnostics
from .errors import ParseError
from .tokens import COMPOUND_ASSIGNMENT_OPERATORS, Token, TokenType

logger = logging.getLogger(__name__)

MAX_ARGUMENTS = 255

_ASSIGNMENT_OPERATORS: tuple[TokenType, ...] = (
    TokenType.EQUAL,
    *COMPOUND_ASSIGNMENT_OPERATORS,
)

_SYNC_KEYWORDS: frozenset[TokenType] = frozenset(
    {
        TokenType.CLASS,
        TokenType.FUN,
        TokenType.VAR,
        TokenType.FOR,
        TokenType.IF,
        TokenType.DO,
        TokenType.WHILE,
        TokenType.PRINT,
        TokenType.RETURN,
        TokenType.BREAK,
        TokenType.CONTINUE,
    }
)

# Operators that cannot start an expression, with the message reported
# when one does (the left-hand operand is missing).
_MISSING_LEFT_OPERAND: dict[TokenType, str] = {
    TokenType.QUESTION_MARK: "Missing left-hand condition of ternary operator.",
    TokenType.BANG_EQUAL: "Missing left-hand operand.",
    TokenType.EQUAL_EQUAL: "Missing left-hand operand.",
    TokenType.GREATER: "Missing left-hand operand.",
    TokenType.GREATER_EQUAL: "Missing left-hand operand.",
    TokenType.LESS: "Missing left-hand operand.",
    TokenType.LESS_EQUAL: "Missing left-hand operand.",
    TokenType.PLUS: "Missing left-hand operand.",
    TokenType.SLASH: "Missing left-hand operand.",
    TokenType.STAR: "Missing left-hand operand.",
    TokenType.STAR_STAR: "Missing left-hand operand.",
}


class Parser:
    def __init__(self, tokens: list[Token], diagnostics: Diagnostics):
        self._tokens = tokens
        self._diagnostics = diagnostics
        self._current = 0

    # ── entry points ─────────────────────────────────────────────

    def parse(self) -> list[ast.Stmt]:
        statements: list[ast.Stmt] = []
        while not self._is_at_end():
            statements.extend(self._declarations())
        logger.debug("Parsed %d top-level statements", len(statements))
        return statements

    def parse_expression(self) -> ast.Expr | None:
        """Parse the whole token stream as one bare expression."""
        try:
            expr = self._expression()
            if not self._is_at_end():
                raise self._error(self._peek(), "Expect end of expression.")
            return expr
        except ParseError:
            return None

    # ── declarations ─────────────────────────────────────────────

    def _declarations(self) -> list[ast.Stmt]:
        try:
            if self._match(TokenType.CLASS):
                return [self._class_declaration()]
            if self._check(TokenType.FUN) and self._check_next(TokenType.IDENTIFIER):
                self._advance()
                return [self._function("function")]
            if self._match(TokenType.VAR):
                return self._var_declarations()
            return [self._statement()]
        except ParseError:
            self._synchronize()
            return []

    def _class_declaration(self) -> ast.Class:
        name = self._consume(TokenType.IDENTIFIER, "Expect class name.")

        superclass = None
        if self._match(TokenType.LESS):
            self._consume(TokenType.IDENTIFIER, "Expect superclass name.")
            superclass = ast.Variable(self._previous())

        self._consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")

        methods: list[ast.Function] = []
        class_methods: list[ast.Function] = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            if self._match(TokenType.CLASS):
                class_methods.append(self._function("method"))
            else:
                methods.append(self._function("method"))

        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")
        return ast.Class(name, superclass, tuple(methods), tuple(class_methods))

    def _function(self, kind: str) -> ast.Function:
        name = self._consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        return ast.Function(name, self._function_body(name, kind))

    def _function_body(self, keyword: Token, kind: str) -> ast.FunctionLiteral:
        self._consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params: list[Token] = []
        if not self._check(TokenType.RIGHT_PAREN):
            params.append(self._consume(TokenType.IDENTIFIER, "Expect parameter name."))
            while self._match(TokenType.COMMA):
                if len(params) >= MAX_ARGUMENTS:
                    self._error(
                        self._peek(),
                        f"Cannot have more than {MAX_ARGUMENTS} parameters.",
                    )
                params.append(
                    self._consume(TokenType.IDENTIFIER, "Expect parameter name.")
                )
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self._consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self._block()
        return ast.FunctionLiteral(keyword, tuple(params), tuple(body))

    def _var_declarations(self) -> list[ast.Stmt]:
        name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")
        initializer = self._assignment() if self._match(TokenType.EQUAL) else None
        declarations: list[ast.Stmt] = [ast.Var(name, initializer)]

        while self._match(TokenType.COMMA):
            name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")
            self._consume(
                TokenType.EQUAL,
                "Expect assignment in multiple variable declaration.",
            )
            declarations.append(ast.Var(name, self._assignment()))

        self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return declarations

    # ── statements ───────────────────────────────────────────────

    def _statement(self) -> ast.Stmt:
        if self._match(TokenType.FOR):
            return self._for_statement()
        if self._match(TokenType.IF):
            return self._if_statement()
        if self._match(TokenType.PRINT):
            return self._print_statement()
        if self._match(TokenType.RETURN):
            return self._return_statement()
        if self._match(TokenType.DO):
            return self._do_while_statement()
        if self._match(TokenType.WHILE):
            return self._while_statement()
        if self._match(TokenType.BREAK):
            keyword = self._previous()
            self._consume(TokenType.SEMICOLON, "Expect ';' after 'break'.")
            return ast.Break(keyword)
        if self._match(TokenType.CONTINUE):
            keyword = self._previous()
            self._consume(TokenType.SEMICOLON, "Expect ';' after 'continue'.")
            return ast.Continue(keyword)
        if self._match(TokenType.LEFT_BRACE):
            return ast.Block(tuple(self._block()))
        return self._expression_statement()

    def _for_statement(self) -> ast.Stmt:
        """Desugar ``for`` into a While inside a Block holding the initialiser."""
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self._match(TokenType.SEMICOLON):
            initializer: list[ast.Stmt] = []
        elif self._match(TokenType.VAR):
            initializer = self._var_declarations()
        else:
            initializer = [self._expression_statement()]

        condition: ast.Expr = ast.Literal(True)
        if not self._check(TokenType.SEMICOLON):
            condition = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self._check(TokenType.RIGHT_PAREN):
            increment = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        loop = ast.While(condition, self._statement(), increment)
        if not initializer:
            return loop
        return ast.Block((*initializer, loop))

    def _if_statement(self) -> ast.If:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self._statement()
        else_branch = self._statement() if self._match(TokenType.ELSE) else None
        return ast.If(condition, then_branch, else_branch)

    def _print_statement(self) -> ast.Print:
        value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return ast.Print(value)

    def _return_statement(self) -> ast.Return:
        keyword = self._previous()
        value = None
        if not self._check(TokenType.SEMICOLON):
            value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ast.Return(keyword, value)

    def _do_while_statement(self) -> ast.While:
        body = self._statement()
        self._consume(TokenType.WHILE, "Expect 'while' in a do-while loop.")
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        self._consume(TokenType.SEMICOLON, "Expect ';' after do-while statement.")
        return ast.While(condition, body, is_do_while=True)

    def _while_statement(self) -> ast.While:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return ast.While(condition, self._statement())

    def _expression_statement(self) -> ast.ExpressionStatement:
        expr = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ast.ExpressionStatement(expr)

    def _block(self) -> list[ast.Stmt]:
        statements: list[ast.Stmt] = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            statements.extend(self._declarations())
        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    # ── expressions ──────────────────────────────────────────────

    def _expression(self) -> ast.Expr:
        return self._comma()

    def _comma(self) -> ast.Expr:
        expr = self._assignment()
        while self._match(TokenType.COMMA):
            operator = self._previous()
            expr = ast.Binary(expr, operator, self._assignment())
        return expr

    def _assignment(self) -> ast.Expr:
        expr = self._ternary()

        if self._match(*_ASSIGNMENT_OPERATORS):
            operator = self._previous()
            value = self._assignment()

            if isinstance(expr, ast.Variable):
                return ast.Assign(expr.name, operator, value)
            if isinstance(expr, ast.Get) and operator.type == TokenType.EQUAL:
                return ast.Set(expr.object, expr.name, value)

            # Reported without unwinding: the parser is not confused.
            self._error(operator, "Invalid assignment target.")

        return expr

    def _ternary(self) -> ast.Expr:
        expr = self._or()
        if self._match(TokenType.QUESTION_MARK):
            then_branch = self._expression()
            self._consume(
                TokenType.COLON, "Expect ':' after then branch of ternary expression."
            )
            expr = ast.Ternary(expr, then_branch, self._ternary())
        return expr

    def _or(self) -> ast.Expr:
        expr = self._and()
        while self._match(TokenType.OR):
            operator = self._previous()
            expr = ast.Logical(expr, operator, self._and())
        return expr

    def _and(self) -> ast.Expr:
        expr = self._equality()
        while self._match(TokenType.AND):
            operator = self._previous()
            expr = ast.Logical(expr, operator, self._equality())
        return expr

    def _left_assoc(self, operand, *operators: TokenType) -> ast.Expr:
        expr = operand()
        while self._match(*operators):
            operator = self._previous()
            expr = ast.Binary(expr, operator, operand())
        return expr

    def _equality(self) -> ast.Expr:
        return self._left_assoc(
            self._comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL
        )

    def _comparison(self) -> ast.Expr:
        return self._left_assoc(
            self._term,
            TokenType.GREATER,
            TokenType.GREATER_EQUAL,
            TokenType.LESS,
            TokenType.LESS_EQUAL,
        )

    def _term(self) -> ast.Expr:
        return self._left_assoc(self._factor, TokenType.MINUS, TokenType.PLUS)

    def _factor(self) -> ast.Expr:
        return self._left_assoc(self._exponent, TokenType.SLASH, TokenType.STAR)

    def _exponent(self) -> ast.Expr:
        expr = self._unary()
        if self._match(TokenType.STAR_STAR):
            operator = self._previous()
            expr = ast.Binary(expr, operator, self._exponent())
        return expr

    def _unary(self) -> ast.Expr:
        if self._match(
            TokenType.BANG, TokenType.MINUS, TokenType.PLUS_PLUS, TokenType.MINUS_MINUS
        ):
            operator = self._previous()
            return ast.Unary(operator, self._unary())
        return self._postfix()

    def _postfix(self) -> ast.Expr:
        expr = self._call()
        if self._match(TokenType.PLUS_PLUS, TokenType.MINUS_MINUS):
            return ast.Unary(self._previous(), expr, postfix=True)
        return expr

    def _call(self) -> ast.Expr:
        expr = self._primary()
        while True:
            if self._match(TokenType.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self._match(TokenType.DOT):
                name = self._consume(
                    TokenType.IDENTIFIER, "Expect property name after '.'."
                )
                expr = ast.Get(expr, name)
            else:
                return expr

    def _finish_call(self, callee: ast.Expr) -> ast.Call:
        arguments: list[ast.Expr] = []
        if not self._check(TokenType.RIGHT_PAREN):
            arguments.append(self._assignment())
            while self._match(TokenType.COMMA):
                if len(arguments) >= MAX_ARGUMENTS:
                    self._error(
                        self._peek(),
                        f"Cannot have more than {MAX_ARGUMENTS} arguments.",
                    )
                arguments.append(self._assignment())

        paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return ast.Call(callee, paren, tuple(arguments))

    def _primary(self) -> ast.Expr:
        if self._match(TokenType.FALSE):
            return ast.Literal(False)
        if self._match(TokenType.TRUE):
            return ast.Literal(True)
        if self._match(TokenType.NONE):
            return ast.Literal(None)
        if self._match(TokenType.NUMBER, TokenType.STRING):
            return ast.Literal(self._previous().literal)
        if self._match(TokenType.IDENTIFIER):
            return ast.Variable(self._previous())
        if self._match(TokenType.THIS):
            return ast.This(self._previous())
        if self._match(TokenType.SUPER):
            keyword = self._previous()
            self._consume(TokenType.DOT, "Expect '.' after 'super'.")
            method = self._consume(
                TokenType.IDENTIFIER, "Expect superclass method name."
            )
            return ast.Super(keyword, method)
        if self._match(TokenType.FUN):
            return self._function_body(self._previous(), "function")
        if self._match(TokenType.LEFT_PAREN):
            expr = self._expression()
            self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return ast.Grouping(expr)

        if self._peek().type in _MISSING_LEFT_OPERAND:
            operator = self._advance()
            raise self._error(operator, _MISSING_LEFT_OPERAND[operator.type])

        raise self._error(self._peek(), "Expect expression.")

    # ── token helpers ────────────────────────────────────────────

    def _match(self, *types: TokenType) -> bool:
        for token_type in types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._check(token_type):
            return self._advance()
        raise self._error(self._peek(), message)

    def _check(self, token_type: TokenType) -> bool:
        if self._is_at_end():
            return False
        return self._peek().type == token_type

    def _check_next(self, token_type: TokenType) -> bool:
        if self._current + 1 >= len(self._tokens):
            return False
        return self._tokens[self._current + 1].type == token_type

    def _advance(self) -> Token:
        if not self._is_at_end():
            self._current += 1
        return self._previous()

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        return self._tokens[self._current]

    def _previous(self) -> Token:
        return self._tokens[self._current - 1]

    def _error(self, token: Token, message: str) -> ParseError:
        self._diagnostics.syntax_error(token.line, message, token)
        return ParseError(message)

    def _synchronize(self):
        self._advance()
        while not self._is_at_end():
            if self._previous().type == TokenType.SEMICOLON:
                return
            if self._peek().type in _SYNC_KEYWORDS:
                return
            self._advance()
