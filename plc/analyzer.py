"""Static semantic analysis for PLC.

The analyzer walks a parsed `Program`, resolves every name against a chain
of scopes, and annotates the AST in place: each expression gets its `type`,
each `Access`, `Declaration` and `Global` its `variable` binding, and each
`Call` and `Function` its `function` binding. The first violation raises
`AnalysisError`; a program that fails analysis must not be interpreted or
generated.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from .ast import (
    Program, Global, Function, ExpressionStmt, Declaration, Assignment, If,
    Switch, While, Return, Literal, Group, Binary, Access, Call, ListLiteral,
    Node, Statement,
)
from .debug import DebugLog
from .errors import AnalysisError, ScopeError
from .scope import Function as FunctionBinding, Scope, Variable
from .std import populate_builtin_scope
from .types import (
    ANY, BOOLEAN, CHARACTER, COMPARABLE, DECIMAL, INTEGER, NIL, NIL_TYPE,
    STRING, CharVal, Type, get_type, require_assignable,
)

# Name of the binding that records the enclosing function's return type.
# It cannot collide with a user name because identifiers never contain '<'.
RETURN_BINDING = '<return>'


class Analyzer:
    def __init__(self, parent: Optional[Scope] = None, log: Optional[DebugLog] = None):
        if parent is None:
            parent = populate_builtin_scope()
        self.scope = Scope(parent)
        self.log = log if log is not None else DebugLog()

    def analyze(self, program: Program) -> Program:
        self.log.log(1, f"analyze: {len(program.globals)} globals, {len(program.functions)} functions")
        self.analyze_source(program, self.scope)
        return program

    # Scope helpers: scope failures are reported as analysis errors

    def lookup_variable(self, scope: Scope, name: str) -> Variable:
        try:
            return scope.lookup_variable(name)
        except ScopeError as e:
            raise AnalysisError(e.message) from None

    def define_variable(self, scope: Scope, variable: Variable) -> Variable:
        try:
            return scope.define_variable(variable)
        except ScopeError as e:
            raise AnalysisError(e.message) from None

    def resolve_type(self, type_name: Optional[str], default: Type) -> Type:
        if type_name is None:
            return default
        return get_type(type_name)

    # Top level

    def analyze_source(self, program: Program, scope: Scope) -> None:
        for global_ in program.globals:
            self.analyze_global(global_, scope)
        # Signatures first so that functions may call each other in any order.
        for function in program.functions:
            self.declare_function(function, scope)
        for function in program.functions:
            self.analyze_function(function, scope)

    def analyze_global(self, node: Global, scope: Scope) -> None:
        if node.type_name is None and node.value is None:
            raise AnalysisError(f"global {node.name} needs a type or an initial value")
        declared = self.resolve_type(node.type_name, None)
        if node.value is not None:
            if isinstance(node.value, ListLiteral):
                node.value.type = declared
            self.analyze_expression(node.value, scope)
            if declared is None:
                declared = node.value.type
            else:
                require_assignable(declared, node.value.type)
        node.variable = self.define_variable(
            scope, Variable(node.name, node.name, declared, node.mutable, is_list=node.is_list))
        self.log.log(2, f"global {node.name}: {declared}")

    def declare_function(self, node: Function, scope: Scope) -> None:
        parameter_types = [self.resolve_type(name, ANY) for name in node.parameter_type_names]
        return_type = self.resolve_type(node.return_type_name, NIL_TYPE)
        binding = FunctionBinding(node.name, node.name, parameter_types, return_type, lambda args: NIL)
        try:
            node.function = scope.define_function(binding)
        except ScopeError as e:
            raise AnalysisError(e.message) from None
        self.log.log(2, f"function {node.name}/{binding.arity} -> {return_type}")

    def analyze_function(self, node: Function, scope: Scope) -> None:
        body_scope = Scope(scope)
        body_scope.define_variable(Variable(RETURN_BINDING, RETURN_BINDING, node.function.return_type, False))
        for name, param_type in zip(node.parameters, node.function.parameter_types):
            self.define_variable(body_scope, Variable(name, name, param_type))
        self.analyze_block(node.statements, body_scope)

    # Statements

    def analyze_block(self, statements: List[Statement], scope: Scope) -> None:
        for stmt in statements:
            self.analyze_statement(stmt, scope)

    def analyze_statement(self, node: Node, scope: Scope) -> None:
        if isinstance(node, ExpressionStmt):
            self.analyze_expression(node.expression, scope)
            if not isinstance(node.expression, Call):
                raise AnalysisError("expression statement must be a function call")
            return
        if isinstance(node, Declaration):
            if node.type_name is None and node.value is None:
                raise AnalysisError(f"declaration of {node.name} needs a type or an initial value")
            declared = self.resolve_type(node.type_name, None)
            if node.value is not None:
                self.analyze_expression(node.value, scope)
                if declared is None:
                    declared = node.value.type
                else:
                    require_assignable(declared, node.value.type)
            node.variable = self.define_variable(scope, Variable(node.name, node.name, declared))
            return
        if isinstance(node, Assignment):
            if not isinstance(node.receiver, Access):
                raise AnalysisError("assignment receiver must be a variable or list element")
            self.analyze_expression(node.value, scope)
            self.analyze_expression(node.receiver, scope)
            if not node.receiver.variable.mutable:
                raise AnalysisError(f"cannot assign to immutable {node.receiver.name}")
            require_assignable(node.receiver.type, node.value.type)
            return
        if isinstance(node, If):
            self.analyze_expression(node.condition, scope)
            require_assignable(BOOLEAN, node.condition.type)
            if not node.then_statements:
                raise AnalysisError("IF requires at least one statement in its DO block")
            self.analyze_block(node.then_statements, Scope(scope))
            self.analyze_block(node.else_statements, Scope(scope))
            return
        if isinstance(node, Switch):
            self.analyze_expression(node.condition, scope)
            last = len(node.cases) - 1
            for i, case in enumerate(node.cases):
                if case.value is not None:
                    if i == last:
                        raise AnalysisError("the last case of a SWITCH must be DEFAULT")
                    self.analyze_expression(case.value, scope)
                    require_assignable(node.condition.type, case.value.type)
                elif i != last:
                    raise AnalysisError("only the last case of a SWITCH may be DEFAULT")
                self.analyze_block(case.statements, Scope(scope))
            return
        if isinstance(node, While):
            self.analyze_expression(node.condition, scope)
            require_assignable(BOOLEAN, node.condition.type)
            self.analyze_block(node.statements, Scope(scope))
            return
        if isinstance(node, Return):
            self.analyze_expression(node.value, scope)
            try:
                return_binding = scope.lookup_variable(RETURN_BINDING)
            except ScopeError:
                raise AnalysisError("RETURN outside of a function") from None
            require_assignable(return_binding.type, node.value.type)
            return
        raise NotImplementedError(f"analyze_statement: unexpected node type {type(node)}")

    # Expressions

    def analyze_expression(self, node: Node, scope: Scope) -> None:
        if isinstance(node, Literal):
            node.type = self.literal_type(node.literal)
            return
        if isinstance(node, Group):
            if not isinstance(node.expression, Binary):
                raise AnalysisError("parentheses may only group a binary expression")
            self.analyze_expression(node.expression, scope)
            node.type = node.expression.type
            return
        if isinstance(node, Binary):
            self.analyze_expression(node.left, scope)
            self.analyze_expression(node.right, scope)
            node.type = self.binary_type(node.operator, node.left.type, node.right.type)
            return
        if isinstance(node, Access):
            if node.offset is not None:
                self.analyze_expression(node.offset, scope)
                if node.offset.type != INTEGER:
                    raise AnalysisError(f"list offset must be Integer, received {node.offset.type}")
            variable = self.lookup_variable(scope, node.name)
            if node.offset is not None and not variable.is_list:
                raise AnalysisError(f"{node.name} is not a list")
            if node.offset is None and variable.is_list:
                raise AnalysisError(f"list {node.name} must be accessed with an offset")
            node.variable = variable
            node.type = variable.type
            return
        if isinstance(node, Call):
            try:
                function = scope.lookup_function(node.name, len(node.arguments))
            except ScopeError as e:
                raise AnalysisError(e.message) from None
            for arg, param_type in zip(node.arguments, function.parameter_types):
                self.analyze_expression(arg, scope)
                require_assignable(param_type, arg.type)
            node.function = function
            node.type = function.return_type
            self.log.log(3, f"call {node.name}/{function.arity} -> {function.return_type}")
            return
        if isinstance(node, ListLiteral):
            for value in node.values:
                self.analyze_expression(value, scope)
                if node.type is None:
                    node.type = value.type
                require_assignable(node.type, value.type)
            return
        raise NotImplementedError(f"analyze_expression: unexpected node type {type(node)}")

    @staticmethod
    def literal_type(literal) -> Type:
        if literal is NIL:
            return NIL_TYPE
        if isinstance(literal, bool):
            return BOOLEAN
        if isinstance(literal, CharVal):
            return CHARACTER
        if isinstance(literal, str):
            return STRING
        if isinstance(literal, int):
            return INTEGER
        if isinstance(literal, Decimal):
            return DECIMAL
        raise AnalysisError(f"unsupported literal {literal!r}")

    @staticmethod
    def binary_type(operator: str, left: Type, right: Type) -> Type:
        if operator in ('&&', '||'):
            require_assignable(BOOLEAN, left)
            require_assignable(BOOLEAN, right)
            require_assignable(left, right)
            return BOOLEAN
        if operator in ('<', '>', '==', '!='):
            require_assignable(COMPARABLE, left)
            require_assignable(COMPARABLE, right)
            require_assignable(left, right)
            return BOOLEAN
        if operator == '+' and (left == STRING or right == STRING):
            return STRING
        if operator in ('+', '-', '*', '/'):
            if left == INTEGER and right == INTEGER:
                return INTEGER
            if left == DECIMAL and right == DECIMAL:
                return DECIMAL
            raise AnalysisError(f"operator {operator} needs two Integers or two Decimals, received {left} and {right}")
        if operator == '^':
            if left == INTEGER and right == INTEGER:
                return INTEGER
            raise AnalysisError(f"operator ^ needs two Integers, received {left} and {right}")
        raise AnalysisError(f"unknown operator {operator}")


def analyze(program: Program, scope: Optional[Scope] = None) -> Program:
    """Analyze `program` in place against `scope` (the builtin scope by default)."""
    return Analyzer(scope).analyze(program)
