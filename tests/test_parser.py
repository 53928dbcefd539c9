from decimal import Decimal

import pytest

from plc.ast import (
    Access, Assignment, Binary, Call, Case, Declaration, ExpressionStmt,
    Function, Global, Group, If, ListLiteral, Literal, Program, Return, Switch,
    While,
)
from plc.errors import ParseError
from plc.parser import Parser, parse_program, unescape
from plc.lexer import tokenize
from plc.types import NIL, CharVal


def parse_expr(source):
    return Parser(tokenize(source)).parse_expression()


def parse_stmt(source):
    return Parser(tokenize(source)).parse_statement()


def test_empty_source():
    assert parse_program('') == Program([], [])


def test_globals_and_function():
    program = parse_program(
        'LIST l: Integer = [1, 2];\n'
        'VAR x;\n'
        'VAL y = 1.5;\n'
        'FUN f(a, b: String): Boolean DO END\n'
    )
    assert program.globals == [
        Global('l', True, 'Integer', ListLiteral([Literal(1), Literal(2)]), is_list=True),
        Global('x', True),
        Global('y', False, None, Literal(Decimal('1.5'))),
    ]
    assert program.functions == [Function('f', ['a', 'b'], [None, 'String'], 'Boolean', [])]


def test_binary_operators_are_left_associative():
    assert parse_expr('a - b - c') == Binary('-', Binary('-', Access('a'), Access('b')), Access('c'))
    assert parse_expr('2 ^ 3 ^ 2') == Binary('^', Binary('^', Literal(2), Literal(3)), Literal(2))


def test_precedence_tiers():
    expr = parse_expr('a || b && c == 1 + 2 * 3')
    assert expr == Binary(
        '&&',
        Binary('||', Access('a'), Access('b')),
        Binary('==', Access('c'), Binary('+', Literal(1), Binary('*', Literal(2), Literal(3)))),
    )


def test_primary_expressions():
    assert parse_expr('NIL') == Literal(NIL)
    assert parse_expr('TRUE') == Literal(True)
    assert parse_expr('FALSE') == Literal(False)
    assert parse_expr("'\\t'") == Literal(CharVal('\t'))
    assert parse_expr('"a\\nb"') == Literal('a\nb')
    assert parse_expr('(x)') == Group(Access('x'))
    assert parse_expr('f()') == Call('f', [])
    assert parse_expr('f(1, x)') == Call('f', [Literal(1), Access('x')])
    assert parse_expr('l[i + 1]') == Access('l', Binary('+', Access('i'), Literal(1)))


def test_unescape_is_single_pass():
    assert unescape('\\\\n') == '\\n'
    assert unescape('\\"\\\'\\b\\r') == '"\'\b\r'


def test_statements():
    assert parse_stmt('LET x: Integer = 1;') == Declaration('x', 'Integer', Literal(1))
    assert parse_stmt('LET y;') == Declaration('y')
    assert parse_stmt('x = 2;') == Assignment(Access('x'), Literal(2))
    assert parse_stmt('print(x);') == ExpressionStmt(Call('print', [Access('x')]))
    assert parse_stmt('RETURN NIL;') == Return(Literal(NIL))
    assert parse_stmt('WHILE TRUE DO END') == While(Literal(True), [])


def test_if_else():
    stmt = parse_stmt('IF c DO f(); ELSE g(); h(); END')
    assert stmt == If(
        Access('c'),
        [ExpressionStmt(Call('f', []))],
        [ExpressionStmt(Call('g', [])), ExpressionStmt(Call('h', []))],
    )


def test_switch_with_and_without_default_colon():
    expected = Switch(Access('n'), [
        Case(Literal(1), [ExpressionStmt(Call('f', []))]),
        Case(None, [ExpressionStmt(Call('g', []))]),
    ])
    assert parse_stmt('SWITCH n CASE 1: f(); DEFAULT g(); END') == expected
    assert parse_stmt('SWITCH n CASE 1: f(); DEFAULT: g(); END') == expected


@pytest.mark.parametrize('source, index', [
    ('LET x = 1', 9),            # missing semicolon at end of input
    ('LET x = 1 2;', 10),        # unexpected token
    ('LET = 1;', 4),             # missing name
    ('LET IF = 1;', 4),          # keyword as name
    ('IF TRUE DO f();', 15),     # missing END
    ('SWITCH x CASE 1: END', 17),  # missing DEFAULT
    ('f(1,);', 4),
])
def test_statement_errors(source, index):
    with pytest.raises(ParseError) as e:
        parse_stmt(source)
    assert e.value.index == index


def test_globals_after_functions_are_rejected():
    with pytest.raises(ParseError) as e:
        parse_program('FUN f() DO END VAR x;')
    assert e.value.index == 15


def test_val_requires_value():
    with pytest.raises(ParseError):
        parse_program('VAL x;')


def test_stray_token_at_top_level():
    with pytest.raises(ParseError) as e:
        parse_program('print(1);')
    assert e.value.index == 0
    assert str(e.value).startswith('SyntaxError: ')
