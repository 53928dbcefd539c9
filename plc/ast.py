"""Abstract Syntax Tree (AST) definitions for PLC.

The parser builds these nodes once; the analyzer then fills in the
`type`, `variable` and `function` fields in place. The interpreter and the
generator only read them. Statements and expressions are closed sets: the
`Statement` and `Expression` unions below list every variant a consumer has
to handle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from .scope import Function as FunctionBinding, Variable
from .types import Type


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


# Expressions

@dataclass
class Literal(Node):
    literal: Any  # NIL, bool, CharVal, str, int or Decimal
    type: Optional[Type] = field(default=None, compare=False)


@dataclass
class Group(Node):
    expression: 'Expression'
    type: Optional[Type] = field(default=None, compare=False)


@dataclass
class Binary(Node):
    operator: str
    left: 'Expression'
    right: 'Expression'
    type: Optional[Type] = field(default=None, compare=False)


@dataclass
class Access(Node):
    name: str
    offset: Optional['Expression'] = None
    type: Optional[Type] = field(default=None, compare=False)
    variable: Optional[Variable] = field(default=None, compare=False, repr=False)


@dataclass
class Call(Node):
    name: str
    arguments: List['Expression']
    type: Optional[Type] = field(default=None, compare=False)
    function: Optional[FunctionBinding] = field(default=None, compare=False, repr=False)


@dataclass
class ListLiteral(Node):
    values: List['Expression']
    type: Optional[Type] = field(default=None, compare=False)


Expression = Union[Literal, Group, Binary, Access, Call, ListLiteral]


# Statements

@dataclass
class ExpressionStmt(Node):
    expression: Expression


@dataclass
class Declaration(Node):
    name: str
    type_name: Optional[str] = None
    value: Optional[Expression] = None
    variable: Optional[Variable] = field(default=None, compare=False, repr=False)


@dataclass
class Assignment(Node):
    receiver: Expression  # must be an Access
    value: Expression


@dataclass
class If(Node):
    condition: Expression
    then_statements: List['Statement']
    else_statements: List['Statement'] = field(default_factory=list)


@dataclass
class Case(Node):
    value: Optional[Expression]  # None marks the default case
    statements: List['Statement']


@dataclass
class Switch(Node):
    condition: Expression
    cases: List[Case]


@dataclass
class While(Node):
    condition: Expression
    statements: List['Statement']


@dataclass
class Return(Node):
    value: Expression


Statement = Union[ExpressionStmt, Declaration, Assignment, If, Switch, While, Return]


# Top level

@dataclass
class Global(Node):
    name: str
    mutable: bool
    type_name: Optional[str] = None
    value: Optional[Expression] = None
    is_list: bool = False
    variable: Optional[Variable] = field(default=None, compare=False, repr=False)


@dataclass
class Function(Node):
    name: str
    parameters: List[str]
    parameter_type_names: List[Optional[str]]
    return_type_name: Optional[str]
    statements: List[Statement]
    function: Optional[FunctionBinding] = field(default=None, compare=False, repr=False)


@dataclass
class Program(Node):
    globals: List[Global]
    functions: List[Function]
