"""Tree-walking interpreter for PLC.

The interpreter executes an analyzed `Program` directly over its AST.
Scopes are passed explicitly down every `execute`/`evaluate` call: each
block gets a fresh child scope and drops it on exit, and functions run in a
scope chained to the scope they were defined in.

Statement execution returns `None` when a statement completes normally and
a `Returned` outcome when a RETURN was executed. Block executors stop at the
first `Returned` and hand it upward until the function invocation unwraps
it, so RETURN never escapes past the call that contains it.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any, List, Optional

from .analyzer import Analyzer
from .ast import (
    Program, Global, Function, ExpressionStmt, Declaration, Assignment, If,
    Switch, While, Return, Literal, Group, Binary, Access, Call, ListLiteral,
    Node, Statement,
)
from .debug import DebugLog
from .errors import EvaluationError, ScopeError
from .parser import parse_program
from .scope import Function as FunctionBinding, Scope, Variable
from .std import populate_builtin_scope
from .types import ANY, NIL, CharVal, ListVal, is_integer, to_string, type_name, values_equal

# Context used for Decimal + - *; those results are always exact.
EXACT = decimal.Context(prec=decimal.MAX_PREC, Emax=decimal.MAX_EMAX, Emin=decimal.MIN_EMIN)


@dataclass
class Returned:
    """Outcome of a statement that executed a RETURN."""
    value: Any


def divide_integer(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def divide_decimal(a: Decimal, b: Decimal) -> Decimal:
    """Divide keeping the dividend's scale, rounding half to even."""
    exponent = a.as_tuple().exponent
    quotient = Fraction(a) / Fraction(b) / Fraction(10) ** exponent
    return Decimal(f"{round(quotient)}E{exponent}")


class Interpreter:
    """Executes an analyzed PLC program."""
    def __init__(self, parent: Optional[Scope] = None, log: Optional[DebugLog] = None):
        if parent is None:
            parent = populate_builtin_scope()
        self.scope = Scope(parent)
        self.log = log if log is not None else DebugLog()

    # Public API
    def run(self, program: Program) -> Any:
        """Evaluate globals, register functions and return the result of main()."""
        self.log.log(1, f"run: {len(program.globals)} globals, {len(program.functions)} functions")
        for global_ in program.globals:
            self.execute_global(global_, self.scope)
        for function in program.functions:
            self.define_function(function, self.scope)
        main = self.lookup_function(self.scope, 'main', 0)
        result = main.invoke([])
        self.log.log(1, f"main returned {to_string(result)}")
        return result

    # Scope helpers: scope failures are reported as runtime errors

    def lookup_variable(self, scope: Scope, name: str) -> Variable:
        try:
            return scope.lookup_variable(name)
        except ScopeError as e:
            raise EvaluationError(e.message) from None

    def lookup_function(self, scope: Scope, name: str, arity: int) -> FunctionBinding:
        try:
            return scope.lookup_function(name, arity)
        except ScopeError as e:
            raise EvaluationError(e.message) from None

    def define_variable(self, scope: Scope, variable: Variable) -> None:
        try:
            scope.define_variable(variable)
        except ScopeError as e:
            raise EvaluationError(e.message) from None

    # Top level

    def execute_global(self, node: Global, scope: Scope) -> None:
        value = self.evaluate(node.value, scope) if node.value is not None else NIL
        self.define_variable(scope, Variable(node.name, node.name, ANY, node.mutable, value, node.is_list))
        self.log.log(2, f"global {node.name} = {to_string(value)}")

    def define_function(self, node: Function, scope: Scope) -> None:
        def invoke(args: List[Any]) -> Any:
            return self.call_function(node, scope, args)

        binding = FunctionBinding(node.name, node.name, [ANY] * len(node.parameters), ANY, invoke)
        try:
            scope.define_function(binding)
        except ScopeError as e:
            raise EvaluationError(e.message) from None
        self.log.log(2, f"define function {node.name}/{binding.arity}")

    def call_function(self, node: Function, definition_scope: Scope, args: List[Any]) -> Any:
        if len(args) != len(node.parameters):
            raise EvaluationError(f"{node.name} expects {len(node.parameters)} arguments, received {len(args)}")
        call_scope = Scope(definition_scope)
        for name, arg in zip(node.parameters, args):
            self.define_variable(call_scope, Variable(name, name, value=arg))
        outcome = self.execute_block(node.statements, call_scope)
        if isinstance(outcome, Returned):
            self.log.log(3, f"{node.name} returned {to_string(outcome.value)}")
            return outcome.value
        return NIL

    # Statements

    def execute_block(self, statements: List[Statement], scope: Scope) -> Optional[Returned]:
        for stmt in statements:
            outcome = self.execute(stmt, scope)
            if outcome is not None:
                return outcome
        return None

    def execute(self, node: Node, scope: Scope) -> Optional[Returned]:
        if isinstance(node, ExpressionStmt):
            self.evaluate(node.expression, scope)
            return None
        if isinstance(node, Declaration):
            value = self.evaluate(node.value, scope) if node.value is not None else NIL
            self.define_variable(scope, Variable(node.name, node.name, value=value))
            self.log.log(2, f"declare {node.name} = {to_string(value)}")
            return None
        if isinstance(node, Assignment):
            self.assign(node.receiver, self.evaluate(node.value, scope), scope)
            return None
        if isinstance(node, If):
            condition = self.require_boolean(self.evaluate(node.condition, scope))
            self.log.log(3, f"if condition -> {to_string(condition)}")
            branch = node.then_statements if condition else node.else_statements
            return self.execute_block(branch, Scope(scope))
        if isinstance(node, Switch):
            condition = self.evaluate(node.condition, scope)
            for case in node.cases:
                if case.value is None or values_equal(self.evaluate(case.value, scope), condition):
                    return self.execute_block(case.statements, Scope(scope))
            return None
        if isinstance(node, While):
            while self.require_boolean(self.evaluate(node.condition, scope)):
                outcome = self.execute_block(node.statements, Scope(scope))
                if outcome is not None:
                    return outcome
            return None
        if isinstance(node, Return):
            return Returned(self.evaluate(node.value, scope))
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def assign(self, receiver: Node, value: Any, scope: Scope) -> None:
        if not isinstance(receiver, Access):
            raise EvaluationError("assignment receiver must be a variable or list element")
        variable = self.lookup_variable(scope, receiver.name)
        if receiver.offset is not None:
            items = self.require_list(variable)
            index = self.require_offset(self.evaluate(receiver.offset, scope), items)
            items.items[index] = value
            return
        if not variable.mutable:
            raise EvaluationError(f"cannot assign to immutable {receiver.name}")
        variable.value = value

    # Expressions

    def evaluate(self, node: Node, scope: Scope) -> Any:
        if isinstance(node, Literal):
            return node.literal
        if isinstance(node, Group):
            return self.evaluate(node.expression, scope)
        if isinstance(node, Binary):
            left = self.evaluate(node.left, scope)
            # Short-circuit for && and ||
            if node.operator == '&&':
                if not self.require_boolean(left):
                    return False
                return self.require_boolean(self.evaluate(node.right, scope))
            if node.operator == '||':
                if self.require_boolean(left):
                    return True
                return self.require_boolean(self.evaluate(node.right, scope))
            right = self.evaluate(node.right, scope)
            return self.apply_binary_op(node.operator, left, right)
        if isinstance(node, Access):
            variable = self.lookup_variable(scope, node.name)
            if node.offset is None:
                return variable.value
            items = self.require_list(variable)
            index = self.require_offset(self.evaluate(node.offset, scope), items)
            return items.items[index]
        if isinstance(node, Call):
            args = [self.evaluate(arg, scope) for arg in node.arguments]
            function = self.lookup_function(scope, node.name, len(args))
            self.log.log(3, f"call {node.name}({', '.join(to_string(a) for a in args)})")
            return function.invoke(args)
        if isinstance(node, ListLiteral):
            return ListVal([self.evaluate(value, scope) for value in node.values])
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    @staticmethod
    def require_boolean(value: Any) -> bool:
        if not isinstance(value, bool):
            raise EvaluationError(f"expected Boolean, received {type_name(value)}")
        return value

    @staticmethod
    def require_list(variable: Variable) -> ListVal:
        if not isinstance(variable.value, ListVal):
            raise EvaluationError(f"{variable.name} is not a list")
        return variable.value

    @staticmethod
    def require_offset(offset: Any, items: ListVal) -> int:
        if not is_integer(offset):
            raise EvaluationError(f"list offset must be Integer, received {type_name(offset)}")
        if offset < 0 or offset >= len(items.items):
            raise EvaluationError(f"list offset {offset} out of range")
        return offset

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op == '+':
            # String concatenation when either side is a String
            if isinstance(a, str) or isinstance(b, str):
                return to_string(a) + to_string(b)
            if is_integer(a) and is_integer(b):
                return a + b
            if isinstance(a, Decimal) and isinstance(b, Decimal):
                return EXACT.add(a, b)
            raise self.operand_error(op, a, b)
        if op == '-':
            if is_integer(a) and is_integer(b):
                return a - b
            if isinstance(a, Decimal) and isinstance(b, Decimal):
                return EXACT.subtract(a, b)
            raise self.operand_error(op, a, b)
        if op == '*':
            if is_integer(a) and is_integer(b):
                return a * b
            if isinstance(a, Decimal) and isinstance(b, Decimal):
                return EXACT.multiply(a, b)
            raise self.operand_error(op, a, b)
        if op == '/':
            if is_integer(a) and is_integer(b):
                if b == 0:
                    raise EvaluationError('division by zero')
                return divide_integer(a, b)
            if isinstance(a, Decimal) and isinstance(b, Decimal):
                if b == 0:
                    raise EvaluationError('division by zero')
                return divide_decimal(a, b)
            raise self.operand_error(op, a, b)
        if op == '^':
            if is_integer(a) and is_integer(b):
                if b < 0:
                    raise EvaluationError(f"negative exponent {b}")
                return a ** b
            raise self.operand_error(op, a, b)
        if op in ('==', '!='):
            eq = values_equal(a, b)
            return eq if op == '==' else not eq
        if op in ('<', '>'):
            left, right = self.orderable(op, a, b)
            return left < right if op == '<' else left > right
        raise EvaluationError(f"unsupported operator {op}")

    def orderable(self, op: str, a: Any, b: Any):
        if type_name(a) != type_name(b):
            raise self.operand_error(op, a, b)
        if isinstance(a, CharVal):
            return a.value, b.value
        if is_integer(a) or isinstance(a, (Decimal, str)):
            return a, b
        raise self.operand_error(op, a, b)

    @staticmethod
    def operand_error(op: str, a: Any, b: Any) -> EvaluationError:
        return EvaluationError(f"unsupported operands for {op}: {type_name(a)} and {type_name(b)}")


def run_program(source: str, debug_level: int = 0, debug_file: Optional[str] = 'debug.txt') -> Any:
    """Parse, analyze and run PLC source, returning the result of main()."""
    log = DebugLog(debug_level, debug_file)
    try:
        program = parse_program(source)
        builtin_scope = populate_builtin_scope()
        Analyzer(builtin_scope, log).analyze(program)
        return Interpreter(builtin_scope, log).run(program)
    finally:
        log.close()
