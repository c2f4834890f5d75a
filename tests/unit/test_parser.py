"""Tests for the parser: precedence, desugaring and error recovery."""

from __future__ import annotations

from fail import ast_nodes as ast
from fail.ast_printer import AstPrinter
from fail.tokens import TokenType

from tests.unit.conftest import parse


def _expr(source: str) -> str:
    statements, diagnostics = parse(source + ";")
    assert not diagnostics.had_syntax_error, diagnostics.messages()
    return AstPrinter().print(statements[0].expression)


class TestPrecedence:
    def test_factor_binds_tighter_than_term(self):
        assert _expr("1 + 2 * 3") == "(+ 1 (* 2 3))"

    def test_exponent_is_right_associative(self):
        assert _expr("2 ** 3 ** 2") == "(** 2 (** 3 2))"

    def test_exponent_binds_tighter_than_factor(self):
        assert _expr("2 * 3 ** 2") == "(* 2 (** 3 2))"

    def test_comparison_and_equality(self):
        assert _expr("1 < 2 == true") == "(== (< 1 2) true)"

    def test_logical_operators(self):
        assert _expr("a or b and c") == "(or a (and b c))"

    def test_ternary_is_right_associative(self):
        assert _expr("a ? b : c ? d : e") == "(?: a b (?: c d e))"

    def test_comma_is_lowest(self):
        assert _expr("a = 1, b = 2") == "(, (= a 1) (= b 2))"

    def test_grouping(self):
        assert _expr("(1 + 2) * 3") == "(* (group (+ 1 2)) 3)"

    def test_prefix_and_postfix_increment(self):
        assert _expr("++a") == "(++ a)"
        assert _expr("a--") == "(post-- a)"

    def test_compound_assignment_keeps_operator(self):
        statements, _ = parse("a **= 2;")
        assign = statements[0].expression
        assert isinstance(assign, ast.Assign)
        assert assign.operator.type == TokenType.STAR_STAR_EQUAL

    def test_property_set(self):
        assert _expr("a.b.c = 1") == "(= (. a b) c 1)"

    def test_call_chain(self):
        assert _expr("f(1)(2).x") == "(. (call (call f 1) 2) x)"


class TestStatements:
    def test_for_desugars_to_block_with_while(self):
        statements, _ = parse("for (var i = 0; i < 3; i = i + 1) print i;")
        block = statements[0]
        assert isinstance(block, ast.Block)
        assert isinstance(block.statements[0], ast.Var)
        loop = block.statements[1]
        assert isinstance(loop, ast.While)
        assert loop.increment is not None
        assert not loop.is_do_while

    def test_for_without_clauses(self):
        statements, _ = parse("for (;;) break;")
        loop = statements[0]
        assert isinstance(loop, ast.While)
        assert loop.condition.value is True
        assert loop.increment is None

    def test_do_while(self):
        statements, _ = parse("do print 1; while (false);")
        assert isinstance(statements[0], ast.While)
        assert statements[0].is_do_while

    def test_multiple_variable_declaration(self):
        statements, _ = parse("var a = 1, b = 2;")
        assert [s.name.lexeme for s in statements] == ["a", "b"]

    def test_multiple_declaration_requires_initialisers(self):
        _, diagnostics = parse("var a, b;")
        assert diagnostics.messages() == [
            "Expect assignment in multiple variable declaration."
        ]

    def test_class_with_superclass_and_class_methods(self):
        statements, _ = parse("class B < A { init() {} class make() {} }")
        klass = statements[0]
        assert isinstance(klass, ast.Class)
        assert klass.superclass.name.lexeme == "A"
        assert [m.name.lexeme for m in klass.methods] == ["init"]
        assert [m.name.lexeme for m in klass.class_methods] == ["make"]

    def test_function_declaration_and_literal(self):
        statements, _ = parse("fun f(a, b) { return a; } var g = fun (x) {};")
        assert isinstance(statements[0], ast.Function)
        assert [p.lexeme for p in statements[0].function.params] == ["a", "b"]
        assert isinstance(statements[1].initializer, ast.FunctionLiteral)


class TestErrors:
    def test_invalid_assignment_target(self):
        _, diagnostics = parse("1 = 2;")
        assert diagnostics.messages() == ["Invalid assignment target."]

    def test_compound_assignment_to_property_is_invalid(self):
        _, diagnostics = parse("a.b += 1;")
        assert diagnostics.messages() == ["Invalid assignment target."]

    def test_missing_left_operand(self):
        _, diagnostics = parse("* 2;")
        assert diagnostics.messages() == ["Missing left-hand operand."]

    def test_missing_ternary_condition(self):
        _, diagnostics = parse("? 1 : 2;")
        assert diagnostics.messages() == [
            "Missing left-hand condition of ternary operator."
        ]

    def test_error_at_end(self):
        _, diagnostics = parse("print 1")
        assert str(diagnostics.errors[0]) == "[line 1] Error at end: Expect ';' after value."

    def test_error_at_token(self):
        _, diagnostics = parse("var 1 = 2;")
        assert str(diagnostics.errors[0]) == (
            "[line 1] Error at '1': Expect variable name."
        )

    def test_recovers_at_statement_boundary(self):
        statements, diagnostics = parse("var = 1; print 2; var x = ; print 3;")
        assert len(diagnostics.errors) == 2
        assert [type(s) for s in statements] == [ast.Print, ast.Print]
