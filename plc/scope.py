from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import ScopeError
from .types import ANY, NIL, Type


@dataclass
class Variable:
    """A variable binding.

    The analyzer fills in `type`; the interpreter stores the current `value`.
    `jvm_name` is the name the generator emits for it.
    """
    name: str
    jvm_name: str
    type: Type = ANY
    mutable: bool = True
    value: Any = NIL
    is_list: bool = False


@dataclass
class Function:
    """A function binding, identified by name and arity."""
    name: str
    jvm_name: str
    parameter_types: List[Type]
    return_type: Type
    invoke: Callable[[List[Any]], Any] = field(repr=False)

    @property
    def arity(self) -> int:
        return len(self.parameter_types)


class Scope:
    """A table of variable and function bindings chained to its parent.

    Lookups walk outward through the parents; a definition in this table hides
    any binding of the same name further out. A scope never refers to the
    scopes nested inside it.
    """
    def __init__(self, parent: Optional['Scope'] = None):
        self.parent = parent
        self.variables: Dict[str, Variable] = {}
        self.functions: Dict[Tuple[str, int], Function] = {}

    def define_variable(self, variable: Variable) -> Variable:
        if variable.name in self.variables:
            raise ScopeError(f"variable {variable.name} already defined in this scope", variable.name)
        self.variables[variable.name] = variable
        return variable

    def lookup_variable(self, name: str) -> Variable:
        scope: Optional[Scope] = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        raise ScopeError(f"undefined variable {name}", name)

    def define_function(self, function: Function) -> Function:
        key = (function.name, function.arity)
        if key in self.functions:
            raise ScopeError(f"function {function.name}/{function.arity} already defined in this scope", function.name)
        self.functions[key] = function
        return function

    def lookup_function(self, name: str, arity: int) -> Function:
        scope: Optional[Scope] = self
        while scope is not None:
            if (name, arity) in scope.functions:
                return scope.functions[(name, arity)]
            scope = scope.parent
        raise ScopeError(f"undefined function {name}/{arity}", name)
