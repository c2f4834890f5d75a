"""Tests for the interpreter: expressions, statements, functions and errors."""

from __future__ import annotations

import sys

import pytest

from fail.diagnostics import Diagnostics, NullSink
from fail.errors import ScopeMismatchError
from fail.executor import Interpreter
from fail.resolver import Resolver
from fail.run_types import RunOutcome
from fail.runtime_types import NativeFunction

from tests.unit.conftest import error_messages, output_of, parse, run_program


def _runtime_error(source: str) -> tuple[list[str], str]:
    lines, result = run_program(source)
    assert result.outcome == RunOutcome.RUNTIME_ERROR
    [message] = error_messages(result)
    return lines, message


class TestArithmetic:
    def test_integral_results_print_without_fraction(self):
        assert output_of("print 1 + 2; print 3.0;") == ["3", "3"]

    def test_fractional_results(self):
        assert output_of("print 7 / 2; print 0.1 + 0.2;") == [
            "3.5",
            "0.30000000000000004",
        ]

    def test_string_concatenation(self):
        assert output_of('print "ab" + "cd";') == ["abcd"]

    def test_string_repetition(self):
        assert output_of('print "ab" * 3; print 3 * "ab";') == ["ababab", "ababab"]

    def test_repetition_by_zero_or_negative_is_empty(self):
        assert output_of('print "ab" * 0; print "ab" * -2;') == ["", ""]

    def test_repetition_by_fraction_fails(self):
        _, message = _runtime_error('print 2.5 * "ab";')
        assert message == "Text can only be repeated a whole number of times."

    def test_exponentiation(self):
        assert output_of("print 2 ** 10; print 2 ** 3 ** 2;") == ["1024", "512"]

    def test_exponentiation_domain_error_is_nan(self):
        assert output_of("print (-8) ** 0.5;") == ["nan"]

    def test_exponentiation_overflow_is_infinite(self):
        assert output_of("print 10 ** 400; print (-10) ** 401;") == ["inf", "-inf"]

    def test_zero_to_negative_power_is_infinite(self):
        assert output_of("print 0 ** -1;") == ["inf"]

    def test_division_by_zero_is_infinite(self):
        assert output_of("print 1 / 0; print -1 / 0; print 0 / 0;") == [
            "inf",
            "-inf",
            "nan",
        ]

    def test_huge_repetition_fails(self):
        _, message = _runtime_error('print "a" * 100000000000000000000;')
        assert message == "Repeated text is too long."

    def test_repetition_of_empty_text(self):
        assert output_of('print "" * 100000000000000000000 + "!";') == ["!"]

    def test_mixed_addition_fails(self):
        _, message = _runtime_error('print 1 + "a";')
        assert message == "Operands must be two numbers or two strings."

    def test_comparison_needs_numbers(self):
        _, message = _runtime_error('print 1 < "a";')
        assert message == "Operands must be numbers."

    def test_negation_needs_number(self):
        _, message = _runtime_error('print -"a";')
        assert message == "Operand must be a number."

    def test_comma_yields_right_operand(self):
        assert output_of("print (1, 2);") == ["2"]


class TestTruthAndEquality:
    def test_equality(self):
        source = """
        print 1 == 1;
        print none == none;
        print none == false;
        print true == 1;
        print "a" == "a";
        print "1" == 1;
        """
        assert output_of(source) == ["true", "true", "false", "false", "true", "false"]

    def test_only_none_and_false_are_falsy(self):
        assert output_of('print !0; print !""; print !none; print !false;') == [
            "false",
            "false",
            "true",
            "true",
        ]

    def test_logical_operators_yield_deciding_operand(self):
        assert output_of('print none or "x"; print 1 and 2; print 0 or 1;') == [
            "x",
            "2",
            "0",
        ]

    def test_logical_operators_short_circuit(self):
        assert output_of("print false and missing(); print true or missing();") == [
            "false",
            "true",
        ]

    def test_ternary_evaluates_one_branch(self):
        source = """
        fun f() { print "f"; return 1; }
        fun g() { print "g"; return 2; }
        print true ? f() : g();
        print false ? f() : g();
        """
        assert output_of(source) == ["f", "1", "g", "2"]


class TestAssignment:
    def test_compound_assignment(self):
        source = """
        var a = 2;
        a += 3; print a;
        a *= 2; print a;
        a -= 1; print a;
        a /= 3; print a;
        a **= 2; print a;
        """
        assert output_of(source) == ["5", "10", "9", "3", "9"]

    def test_compound_assignment_yields_new_value(self):
        assert output_of("var a = 1; print a += 1;") == ["2"]

    def test_compound_assignment_on_text(self):
        assert output_of('var s = "ab"; s *= 2; s += "!"; print s;') == ["abab!"]

    def test_increment_and_decrement(self):
        source = """
        var i = 1;
        print i++;
        print i;
        print ++i;
        print --i;
        print i--;
        print i;
        """
        assert output_of(source) == ["1", "2", "3", "2", "2", "1"]

    def test_increment_needs_variable(self):
        _, message = _runtime_error("print ++1;")
        assert message == "Operand of '++' must be a variable."

    def test_increment_needs_number(self):
        _, message = _runtime_error('var s = "a"; s++;')
        assert message == "Operand must be a number."

    def test_assignment_is_an_expression(self):
        assert output_of("var a; var b; a = b = 3; print a; print b;") == ["3", "3"]

    def test_local_assignment(self):
        assert output_of("{ var a = 1; a = 2; print a; }") == ["2"]

    def test_undefined_global_assignment(self):
        _, message = _runtime_error("nope = 1;")
        assert message == "Undefined variable 'nope'."


class TestScopes:
    def test_block_shadows_global(self):
        source = """
        var a = "global";
        { var a = "local"; print a; }
        print a;
        """
        assert output_of(source) == ["local", "global"]

    def test_shadowing_initialiser_reads_outer_value(self):
        assert output_of("var x = 1; { var x = x + 1; print x; } print x;") == [
            "2",
            "1",
        ]

    def test_closure_binds_at_resolution(self):
        source = """
        var a = "global";
        {
            fun showA() { print a; }
            showA();
            var a = "block";
            showA();
            print a;
        }
        """
        assert output_of(source) == ["global", "global", "block"]

    def test_undefined_global(self):
        _, message = _runtime_error("print nope;")
        assert message == "Undefined variable 'nope'."

    def test_reading_unassigned_variable_fails(self):
        lines, message = _runtime_error('var a; print "before"; print a;')
        assert lines == ["before"]
        assert message == "Unassigned variable 'a' accessed."

    def test_unassigned_local_variable_fails(self):
        _, message = _runtime_error("{ var a; print a; }")
        assert message == "Unassigned variable 'a' accessed."

    def test_first_assignment_makes_variable_readable(self):
        assert output_of("var a; a = 1; print a; { var b; b = a + 1; print b; }") == [
            "1",
            "2",
        ]

    def test_assignment_through_closure_counts(self):
        source = """
        {
            var a;
            fun set() { a = "set"; }
            set();
            print a;
        }
        """
        assert output_of(source) == ["set"]

    def test_closure_reading_its_own_initialiser(self):
        lines, message = _runtime_error(
            '{ var f = (fun () { return f; })(); print "unreached"; }'
        )
        assert lines == []
        assert message == "Unassigned variable 'f' accessed."

    def test_closure_called_later_sees_initialised_variable(self):
        source = """
        {
            var f = fun () { return f; };
            print f() == f;
        }
        """
        assert output_of(source) == ["true"]


class TestLoops:
    def test_while(self):
        assert output_of("var i = 0; while (i < 3) { print i; i = i + 1; }") == [
            "0",
            "1",
            "2",
        ]

    def test_for_continue_still_increments(self):
        source = """
        for (var i = 0; i < 3; i = i + 1) {
            if (i == 1) continue;
            print i;
        }
        """
        assert output_of(source) == ["0", "2"]

    def test_for_break(self):
        source = "for (var i = 0; i < 10; i++) { if (i == 2) break; print i; }"
        assert output_of(source) == ["0", "1"]

    def test_break_leaves_only_innermost_loop(self):
        source = """
        for (var i = 0; i < 2; i++) {
            for (var j = 0; j < 5; j++) {
                if (j == 1) break;
                print i * 10 + j;
            }
        }
        """
        assert output_of(source) == ["0", "10"]

    def test_do_while_runs_body_first(self):
        assert output_of('do print "once"; while (false);') == ["once"]

    def test_do_while_continue(self):
        source = """
        var i = 0;
        do {
            i++;
            if (i == 2) continue;
            print i;
        } while (i < 3);
        """
        assert output_of(source) == ["1", "3"]

    def test_loop_closures_share_one_variable(self):
        source = """
        var fs;
        for (var i = 0; i < 2; i++) { fs = fun () { return i; }; }
        print fs();
        """
        assert output_of(source) == ["2"]


class TestFunctions:
    def test_recursion(self):
        source = """
        fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); }
        print fib(10);
        """
        assert output_of(source) == ["55"]

    def test_return_from_inside_loop(self):
        assert output_of('fun f() { while (true) { return "out"; } } print f();') == [
            "out"
        ]

    def test_missing_return_yields_none(self):
        assert output_of("fun f() {} print f();") == ["none"]

    def test_function_rendering(self):
        assert output_of("fun f() {} print f; print fun () {}; print clock;") == [
            "<fn f>",
            "<fn>",
            "<native fn clock>",
        ]

    def test_counter_closures_are_independent(self):
        source = """
        fun makeCounter() {
            var i = 0;
            fun count() { i = i + 1; return i; }
            return count;
        }
        var c = makeCounter();
        print c();
        print c();
        var d = makeCounter();
        print d();
        """
        assert output_of(source) == ["1", "2", "1"]

    def test_function_literal_as_argument(self):
        source = """
        fun apply(f, x) { return f(x); }
        print apply(fun (n) { return n * 2; }, 21);
        """
        assert output_of(source) == ["42"]

    def test_arity_mismatch_stops_execution(self):
        lines, message = _runtime_error(
            'fun f(a) {} print "before"; f(); print "after";'
        )
        assert lines == ["before"]
        assert message == "Expected 1 arguments but got 0."

    def test_calling_non_callable(self):
        _, message = _runtime_error('"a"();')
        assert message == "Can only call functions and classes."

    def test_deep_recursion_is_stack_overflow(self):
        lines, result = run_program("fun f() { f(); } f();", max_call_depth=50)
        assert result.outcome == RunOutcome.RUNTIME_ERROR
        assert error_messages(result) == ["Stack overflow."]

    def test_recursion_within_depth_limit(self):
        source = "fun down(n) { if (n > 0) return down(n - 1); return 0; } print down(40);"
        lines, result = run_program(source, max_call_depth=50)
        assert result.ok
        assert lines == ["0"]

    def test_default_depth_allows_deep_linear_recursion(self):
        source = """
        fun count(n) { if (n == 0) return 0; return 1 + count(n - 1); }
        print count(1000);
        """
        assert output_of(source) == ["1000"]

    def test_recursion_limit_restored_after_run(self):
        before = sys.getrecursionlimit()
        run_program("fun f() { f(); } f();")
        assert sys.getrecursionlimit() == before


class TestNatives:
    def test_len_and_str(self):
        assert output_of('print len("abc"); print len(12.5); print str(1) + "x";') == [
            "3",
            "4",
            "1x",
        ]

    def test_clock(self):
        assert output_of("print clock() > 0;") == ["true"]

    def test_extra_natives(self):
        statements, diagnostics = parse("print twice(4);")
        lines: list[str] = []
        interpreter = Interpreter(
            diagnostics,
            output=lines.append,
            natives={"twice": NativeFunction("twice", 1, lambda x: x * 2)},
        )
        interpreter.record_distances(Resolver(diagnostics).resolve(statements))
        assert interpreter.interpret(statements)
        assert lines == ["8"]


class TestRuntimeErrorReporting:
    def test_runtime_error_format(self):
        _, result = run_program('print 1;\nprint -"a";')
        [diagnostic] = result.diagnostics
        assert str(diagnostic) == "Operand must be a number.\n[line 2]"

    def test_only_first_runtime_error_reported(self):
        lines, result = run_program("print nope; print alsoNope;")
        assert len(result.diagnostics) == 1


class TestScopeInvariants:
    def _interpret(self, statements, distances):
        diagnostics = Diagnostics(NullSink())
        interpreter = Interpreter(diagnostics, output=lambda text: None)
        interpreter.record_distances(distances)
        return interpreter.interpret(statements)

    def test_distance_past_root_is_scope_mismatch(self):
        statements, diagnostics = parse("{ var a = 1; print a; }")
        distances = Resolver(diagnostics).resolve(statements)
        distances[statements[0].statements[1].expression] = 5
        with pytest.raises(ScopeMismatchError):
            self._interpret(statements, distances)

    def test_distance_to_wrong_scope_is_scope_mismatch(self):
        statements, diagnostics = parse("{ var a = 1; { print a; } }")
        distances = Resolver(diagnostics).resolve(statements)
        inner_print = statements[0].statements[1].statements[0]
        distances[inner_print.expression] = 0
        with pytest.raises(ScopeMismatchError):
            self._interpret(statements, distances)

    def test_unresolved_reference_is_scope_mismatch(self):
        statements, _ = parse("{ var a = 1; print a; }")
        with pytest.raises(ScopeMismatchError):
            self._interpret(statements, {})
