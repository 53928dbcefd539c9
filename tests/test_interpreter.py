from decimal import Decimal

import pytest

from plc.analyzer import Analyzer
from plc.ast import Access, Binary, Call, ExpressionStmt, Function, Literal, Program, Return
from plc.errors import AnalysisError, EvaluationError
from plc.interpreter import Interpreter, divide_decimal, divide_integer, run_program
from plc.parser import parse_program
from plc.types import NIL, CharVal, ListVal


def run(source):
    return run_program(source)


def test_val_is_printed_and_main_returns_nil(capsys):
    result = run('VAL x = 5; FUN main() DO print(x); END')
    assert capsys.readouterr().out == '5\n'
    assert result is NIL


def test_var_assignment(capsys):
    run('VAR x = 1; FUN main() DO x = x + 1; print(x); END')
    assert capsys.readouterr().out == '2\n'


def test_exponent(capsys):
    run('FUN main() DO print(2 ^ 0); print(2 ^ 3); END')
    assert capsys.readouterr().out == '1\n8\n'


def test_list_access(capsys):
    run('LIST l = [1, 2, 3]; FUN main() DO print(l[1]); END')
    assert capsys.readouterr().out == '2\n'


def test_list_offset_out_of_range():
    with pytest.raises(EvaluationError) as e:
        run('LIST l = [1, 2, 3]; FUN main() DO print(l[5]); END')
    assert e.value.kind == 'RuntimeError'


def test_type_error_stops_before_execution(capsys):
    with pytest.raises(AnalysisError):
        run('VAL x: Integer = "hi"; FUN main() DO print(1); END')
    assert capsys.readouterr().out == ''


def test_switch_default(capsys):
    run('VAL n = 7; FUN main() DO SWITCH n CASE 1: print("one"); DEFAULT: print("other"); END END')
    assert capsys.readouterr().out == 'other\n'


def test_switch_matching_case(capsys):
    run('FUN main() DO SWITCH "b" CASE "a": print(1); CASE "b": print(2); DEFAULT print(3); END END')
    assert capsys.readouterr().out == '2\n'


def test_return_unwinds_nested_blocks(capsys):
    result = run(
        'FUN find(): Integer DO\n'
        '    LET i = 0;\n'
        '    WHILE TRUE DO\n'
        '        IF i == 3 DO RETURN i; END\n'
        '        i = i + 1;\n'
        '    END\n'
        'END\n'
        'FUN main(): Integer DO print(find()); RETURN 9; END\n'
    )
    assert capsys.readouterr().out == '3\n'
    assert result == 9


def test_function_without_return_yields_nil(capsys):
    run('FUN f() DO END FUN main() DO print(f()); END')
    assert capsys.readouterr().out == 'null\n'


def test_short_circuit(capsys):
    run(
        'FUN loud(): Boolean DO print("called"); RETURN TRUE; END\n'
        'FUN main() DO print(FALSE && loud()); print(TRUE || loud()); print(TRUE && loud()); END\n'
    )
    assert capsys.readouterr().out == 'false\ntrue\ncalled\ntrue\n'


def test_string_concatenation(capsys):
    run("FUN main() DO print(\"n=\" + 1 + ',' + 2.50 + TRUE + NIL); print('a' + \"\"); END")
    assert capsys.readouterr().out == 'n=1,2.50truenull\na\n'


def test_lists_are_shared_handles(capsys):
    run('LIST l = [1, 2]; FUN main() DO l[0] = 5; print(l[0] + l[1]); END')
    assert capsys.readouterr().out == '7\n'


def test_comparisons(capsys):
    run("FUN main() DO print('a' < 'b'); print(\"b\" > \"a\"); print(1.5 < 1.25); print(2 != 2); END")
    assert capsys.readouterr().out == 'true\ntrue\nfalse\nfalse\n'


def test_division_by_zero():
    with pytest.raises(EvaluationError):
        run('FUN main() DO print(1 / 0); END')
    with pytest.raises(EvaluationError):
        run('FUN main() DO print(1.0 / 0.0); END')


def test_negative_exponent_is_an_error():
    with pytest.raises(EvaluationError):
        run('FUN main() DO print(2 ^ -1); END')


def test_missing_main():
    with pytest.raises(EvaluationError):
        run('FUN f() DO END')


def test_recursion_and_arguments(capsys):
    run(
        'FUN fib(n: Integer): Integer DO\n'
        '    IF n < 2 DO RETURN n; END\n'
        '    RETURN fib(n - 1) + fib(n - 2);\n'
        'END\n'
        'FUN main() DO print(fib(15)); END\n'
    )
    assert capsys.readouterr().out == '610\n'


def test_divide_integer_truncates_toward_zero():
    assert divide_integer(7, 2) == 3
    assert divide_integer(-7, 2) == -3
    assert divide_integer(7, -2) == -3
    assert divide_integer(-7, -2) == 3


def test_divide_decimal_keeps_dividend_scale():
    assert divide_decimal(Decimal('1.0'), Decimal('3.0')) == Decimal('0.3')
    assert str(divide_decimal(Decimal('10.00'), Decimal('4'))) == '2.50'
    # half to even
    assert str(divide_decimal(Decimal('0.5'), Decimal('2'))) == '0.2'
    assert str(divide_decimal(Decimal('0.7'), Decimal('2'))) == '0.4'
    assert str(divide_decimal(Decimal('-1.0'), Decimal('3.0'))) == '-0.3'


def test_runtime_checks_on_unanalyzed_programs():
    # The interpreter does not rely on analysis; its own checks still apply.
    program = Program([], [
        Function('main', [], [], None, [Return(Binary('+', Literal(1), Literal(True)))]),
    ])
    with pytest.raises(EvaluationError):
        Interpreter().run(program)

    program = Program([], [
        Function('main', [], [], None, [ExpressionStmt(Call('print', [Access('missing')]))]),
    ])
    with pytest.raises(EvaluationError):
        Interpreter().run(program)


def test_builtin_print_of_values(capsys):
    interp = Interpreter()
    printer = interp.scope.lookup_function('print', 1)
    assert printer.invoke([ListVal([CharVal('x'), Decimal('1.0')])]) is NIL
    assert capsys.readouterr().out == '[x, 1.0]\n'


def test_analyzed_program_runs_with_shared_builtins(capsys):
    program = parse_program('FUN main(): Integer DO print("ok"); RETURN 3; END')
    Analyzer().analyze(program)
    assert Interpreter().run(program) == 3
    assert capsys.readouterr().out == 'ok\n'


def test_while_body_gets_a_fresh_scope_each_iteration(capsys):
    run('FUN main() DO LET i = 0; WHILE i < 3 DO LET y = i; print(y); i = i + 1; END END')
    assert capsys.readouterr().out == '0\n1\n2\n'


def test_mixed_logical_operators_group_left_to_right(capsys):
    run('FUN main() DO print(TRUE || FALSE && FALSE); END')
    assert capsys.readouterr().out == 'false\n'
