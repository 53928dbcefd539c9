"""Parser for the PLC language.

A hand-written recursive-descent parser over the token list produced by
`plc.lexer.tokenize`. Each grammar rule has its own `parse_*` method. The
binary operator tiers are parsed with loops rather than recursion so that
every operator is left-associative:

    expression     := logical
    logical        := comparison (('&&' | '||') comparison)*
    comparison     := additive (('<' | '>' | '==' | '!=') additive)*
    additive       := multiplicative (('+' | '-') multiplicative)*
    multiplicative := primary (('*' | '/' | '^') primary)*

Parsing stops at the first error; no partial AST is ever returned.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import List, Optional, Sequence, Union

from .ast import (
    Program, Global, Function, ExpressionStmt, Declaration, Assignment, If,
    Switch, Case, While, Return, Literal, Group, Binary, Access, Call,
    ListLiteral, Expression, Statement,
)
from .errors import ParseError
from .lexer import KEYWORDS, Token, TokenType, tokenize
from .types import NIL, CharVal

Pattern = Union[str, TokenType]

# Keywords that close the block currently being parsed.
BLOCK_TERMINATORS = ['END', 'ELSE', 'CASE', 'DEFAULT', 'LIST', 'VAR', 'VAL', 'FUN']

ESCAPES = {
    'b': '\b',
    'n': '\n',
    'r': '\r',
    't': '\t',
    "'": "'",
    '"': '"',
    '\\': '\\',
}
ESCAPE_RE = re.compile(r"\\([bnrt'\"\\])")


def unescape(text: str) -> str:
    """Decode backslash escapes in the body of a string or character literal."""
    return ESCAPE_RE.sub(lambda m: ESCAPES[m.group(1)], text)


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Optional[Token]:
        if self.pos + offset < len(self.tokens):
            return self.tokens[self.pos + offset]
        return None

    @staticmethod
    def _is(token: Optional[Token], expected: Pattern) -> bool:
        if token is None:
            return False
        if isinstance(expected, TokenType):
            return token.type == expected
        return token.literal == expected

    def match(self, expected: Union[Pattern, Sequence[Pattern]]) -> bool:
        """Return True if the current token matches `expected` (or any of a list)."""
        token = self.peek()
        if isinstance(expected, list):
            return any(self._is(token, e) for e in expected)
        return self._is(token, expected)

    def consume(self, expected: Union[Pattern, Sequence[Pattern]], message: Optional[str] = None) -> Token:
        if not self.match(expected):
            raise self.error(message or f"expected {self._describe(expected)}")
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def error(self, message: str) -> ParseError:
        token = self.peek()
        if token is not None:
            return ParseError(f"{message}, got {token.literal!r}", token.index)
        if self.tokens:
            last = self.tokens[-1]
            return ParseError(f"{message}, got end of input", last.index + len(last.literal))
        return ParseError(f"{message}, got end of input", 0)

    @staticmethod
    def _describe(expected: Union[Pattern, Sequence[Pattern]]) -> str:
        if isinstance(expected, list):
            return ' or '.join(Parser._describe(e) for e in expected)
        if isinstance(expected, TokenType):
            return expected.value.lower()
        return repr(expected)

    def consume_name(self, what: str = 'identifier') -> str:
        token = self.peek()
        if token is None or token.type != TokenType.IDENTIFIER or token.literal in KEYWORDS:
            raise self.error(f"expected {what}")
        self.pos += 1
        return token.literal

    def parse_type_annotation(self) -> Optional[str]:
        # [':' Type]
        if self.match(':'):
            self.consume(':')
            return self.consume_name('type name')
        return None

    # Top level

    def parse_source(self) -> Program:
        globals_: List[Global] = []
        functions: List[Function] = []
        while self.peek() is not None:
            if self.match(['LIST', 'VAR', 'VAL']):
                if functions:
                    raise self.error("globals must be declared before functions")
                globals_.append(self.parse_global())
            elif self.match('FUN'):
                functions.append(self.parse_function())
            else:
                raise self.error("expected LIST, VAR, VAL or FUN")
        return Program(globals_, functions)

    def parse_global(self) -> Global:
        if self.match('LIST'):
            return self.parse_list()
        if self.match('VAR'):
            return self.parse_mutable()
        return self.parse_immutable()

    def parse_list(self) -> Global:
        self.consume('LIST')
        name = self.consume_name()
        type_name = self.parse_type_annotation()
        self.consume('=')
        self.consume('[')
        values: List[Expression] = [self.parse_expression()]
        while self.match(','):
            self.consume(',')
            values.append(self.parse_expression())
        self.consume(']', "expected ']' to close the list")
        self.consume(';', "missing semicolon")
        return Global(name, True, type_name, ListLiteral(values), is_list=True)

    def parse_mutable(self) -> Global:
        self.consume('VAR')
        name = self.consume_name()
        type_name = self.parse_type_annotation()
        value: Optional[Expression] = None
        if self.match('='):
            self.consume('=')
            value = self.parse_expression()
        self.consume(';', "missing semicolon")
        return Global(name, True, type_name, value)

    def parse_immutable(self) -> Global:
        self.consume('VAL')
        name = self.consume_name()
        type_name = self.parse_type_annotation()
        self.consume('=', "VAL requires an initial value")
        value = self.parse_expression()
        self.consume(';', "missing semicolon")
        return Global(name, False, type_name, value)

    def parse_function(self) -> Function:
        self.consume('FUN')
        name = self.consume_name('function name')
        self.consume('(')
        parameters: List[str] = []
        parameter_type_names: List[Optional[str]] = []
        if not self.match(')'):
            while True:
                parameters.append(self.consume_name('parameter name'))
                parameter_type_names.append(self.parse_type_annotation())
                if not self.match(','):
                    break
                self.consume(',')
        self.consume(')', "expected ')' after parameters")
        return_type_name = self.parse_type_annotation()
        self.consume('DO', "expected DO")
        statements = self.parse_block()
        self.consume('END', "expected END to close function")
        return Function(name, parameters, parameter_type_names, return_type_name, statements)

    def parse_block(self) -> List[Statement]:
        statements: List[Statement] = []
        while self.peek() is not None and not self.match(BLOCK_TERMINATORS):
            statements.append(self.parse_statement())
        return statements

    # Statements

    def parse_statement(self) -> Statement:
        if self.match('LET'):
            return self.parse_declaration_statement()
        if self.match('SWITCH'):
            return self.parse_switch_statement()
        if self.match('IF'):
            return self.parse_if_statement()
        if self.match('WHILE'):
            return self.parse_while_statement()
        if self.match('RETURN'):
            return self.parse_return_statement()
        expr = self.parse_expression()
        if self.match('='):
            self.consume('=')
            value = self.parse_expression()
            self.consume(';', "missing semicolon")
            return Assignment(expr, value)
        self.consume(';', "missing semicolon")
        return ExpressionStmt(expr)

    def parse_declaration_statement(self) -> Declaration:
        self.consume('LET')
        name = self.consume_name()
        type_name = self.parse_type_annotation()
        value: Optional[Expression] = None
        if self.match('='):
            self.consume('=')
            value = self.parse_expression()
        self.consume(';', "missing semicolon")
        return Declaration(name, type_name, value)

    def parse_if_statement(self) -> If:
        self.consume('IF')
        condition = self.parse_expression()
        self.consume('DO', "expected DO")
        then_statements = self.parse_block()
        else_statements: List[Statement] = []
        if self.match('ELSE'):
            self.consume('ELSE')
            else_statements = self.parse_block()
        self.consume('END', "expected END to close IF")
        return If(condition, then_statements, else_statements)

    def parse_switch_statement(self) -> Switch:
        self.consume('SWITCH')
        condition = self.parse_expression()
        cases: List[Case] = []
        while self.match('CASE'):
            cases.append(self.parse_case_statement())
        self.consume('DEFAULT', "expected DEFAULT")
        if self.match(':'):
            self.consume(':')
        cases.append(Case(None, self.parse_block()))
        self.consume('END', "expected END to close SWITCH")
        return Switch(condition, cases)

    def parse_case_statement(self) -> Case:
        self.consume('CASE')
        value = self.parse_expression()
        self.consume(':', "expected ':' after CASE value")
        return Case(value, self.parse_block())

    def parse_while_statement(self) -> While:
        self.consume('WHILE')
        condition = self.parse_expression()
        self.consume('DO', "expected DO")
        statements = self.parse_block()
        self.consume('END', "expected END to close WHILE")
        return While(condition, statements)

    def parse_return_statement(self) -> Return:
        self.consume('RETURN')
        value = self.parse_expression()
        self.consume(';', "missing semicolon")
        return Return(value)

    # Expressions

    def parse_expression(self) -> Expression:
        return self.parse_logical_expression()

    def _parse_binary_tier(self, operators: List[str], operand) -> Expression:
        node = operand()
        while self.match(operators):
            op_token = self.consume(operators)
            right = operand()
            node = Binary(op_token.literal, node, right)
        return node

    def parse_logical_expression(self) -> Expression:
        return self._parse_binary_tier(['&&', '||'], self.parse_comparison_expression)

    def parse_comparison_expression(self) -> Expression:
        return self._parse_binary_tier(['<', '>', '==', '!='], self.parse_additive_expression)

    def parse_additive_expression(self) -> Expression:
        return self._parse_binary_tier(['+', '-'], self.parse_multiplicative_expression)

    def parse_multiplicative_expression(self) -> Expression:
        return self._parse_binary_tier(['*', '/', '^'], self.parse_primary_expression)

    def parse_primary_expression(self) -> Expression:
        token = self.peek()
        if token is None:
            raise self.error("expected expression")
        if self.match('NIL'):
            self.consume('NIL')
            return Literal(NIL)
        if self.match(['TRUE', 'FALSE']):
            self.consume(['TRUE', 'FALSE'])
            return Literal(token.literal == 'TRUE')
        if token.type == TokenType.INTEGER:
            self.consume(TokenType.INTEGER)
            return Literal(int(token.literal))
        if token.type == TokenType.DECIMAL:
            self.consume(TokenType.DECIMAL)
            return Literal(Decimal(token.literal))
        if token.type == TokenType.CHARACTER:
            self.consume(TokenType.CHARACTER)
            return Literal(CharVal(unescape(token.literal[1:-1])))
        if token.type == TokenType.STRING:
            self.consume(TokenType.STRING)
            return Literal(unescape(token.literal[1:-1]))
        if self.match('('):
            self.consume('(')
            expr = self.parse_expression()
            self.consume(')', "expected ')' to close group")
            return Group(expr)
        if token.type == TokenType.IDENTIFIER and token.literal not in KEYWORDS:
            name = self.consume_name()
            if self.match('('):
                return Call(name, self.parse_arguments())
            if self.match('['):
                self.consume('[')
                offset = self.parse_expression()
                self.consume(']', "expected ']' after list offset")
                return Access(name, offset)
            return Access(name)
        raise self.error("expected expression")

    def parse_arguments(self) -> List[Expression]:
        self.consume('(')
        args: List[Expression] = []
        if not self.match(')'):
            args.append(self.parse_expression())
            while self.match(','):
                self.consume(',')
                args.append(self.parse_expression())
        self.consume(')', "expected ')' after arguments")
        return args


def parse_program(source: str) -> Program:
    """Tokenize and parse PLC source text into a Program AST."""
    tokens = tokenize(source)
    parser = Parser(tokens)
    return parser.parse_source()
