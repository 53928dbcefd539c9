from typing import Any, List

from plc.scope import Function, Scope
from plc.types import ANY, NIL, NIL_TYPE, to_string


def populate_builtin_scope() -> Scope:
    """Return a fresh root scope holding the built-in functions.

    The same scope serves the analyzer (through the parameter and return
    types) and the interpreter (through `invoke`).
    """
    builtin_scope = Scope()

    def std_print(args: List[Any]) -> Any:
        print(to_string(args[0]))
        return NIL

    builtin_scope.define_function(Function('print', 'System.out.println', [ANY], NIL_TYPE, std_print))
    return builtin_scope
