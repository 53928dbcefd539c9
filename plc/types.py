"""Type lattice and runtime values for PLC.

This module defines the static types used by the analyzer and generator and
the value representation used by the interpreter. Types form a flat lattice:
every pair of types is compatible only through `is_assignable`, which is the
single compatibility check used throughout the toolchain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List

from .errors import AnalysisError


@dataclass(frozen=True)
class Type:
    """A PLC type together with the Java type it is generated as."""
    name: str
    jvm_name: str

    def __repr__(self) -> str:
        return self.name


NIL_TYPE = Type('Nil', 'Void')
BOOLEAN = Type('Boolean', 'boolean')
INTEGER = Type('Integer', 'int')
DECIMAL = Type('Decimal', 'double')
CHARACTER = Type('Character', 'char')
STRING = Type('String', 'String')
COMPARABLE = Type('Comparable', 'Comparable')
ANY = Type('Any', 'Object')

TYPES: Dict[str, Type] = {
    t.name: t for t in (NIL_TYPE, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING, COMPARABLE, ANY)
}

COMPARABLE_TYPES = (INTEGER, DECIMAL, CHARACTER, STRING)


def get_type(name: str) -> Type:
    """Return the type named `name`, raising AnalysisError for unknown names."""
    try:
        return TYPES[name]
    except KeyError:
        raise AnalysisError(f"unknown type {name}") from None


def is_assignable(target: Type, source: Type) -> bool:
    """Return True if a value of type `source` may be stored where `target` is expected.

    `Any` accepts every type, `Comparable` accepts the four ordered types and
    every other target (including `Nil`) requires an exact match.
    """
    if target == source:
        return True
    if target == ANY:
        return True
    if target == COMPARABLE:
        return source in COMPARABLE_TYPES
    return False


def require_assignable(target: Type, source: Type) -> None:
    if not is_assignable(target, source):
        raise AnalysisError(f"expected {target}, received {source}")


class NilVal:
    """Marker object for the PLC `NIL` value."""
    def __repr__(self) -> str:
        return 'NIL'


NIL = NilVal()


@dataclass(frozen=True)
class CharVal:
    """A single character; kept apart from one-character strings."""
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(eq=False)
class ListVal:
    """Mutable list handle.

    Every binding that holds the same ListVal sees element assignments made
    through any other binding.
    """
    items: List[Any] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"List({self.items!r})"


def is_integer(value: Any) -> bool:
    # bool is a subclass of int; it is not an Integer here
    return isinstance(value, int) and not isinstance(value, bool)


def type_name(value: Any) -> str:
    """Return the PLC type name of a runtime value."""
    if value is NIL:
        return 'Nil'
    if isinstance(value, bool):
        return 'Boolean'
    if isinstance(value, int):
        return 'Integer'
    if isinstance(value, Decimal):
        return 'Decimal'
    if isinstance(value, CharVal):
        return 'Character'
    if isinstance(value, str):
        return 'String'
    if isinstance(value, ListVal):
        return 'List'
    return type(value).__name__


def to_string(value: Any) -> str:
    """Textual representation used by `print` and string concatenation."""
    if value is NIL:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, ListVal):
        return '[' + ', '.join(to_string(item) for item in value.items) + ']'
    return str(value)


def values_equal(a: Any, b: Any) -> bool:
    """Structural equality over every value kind.

    Values of different kinds are never equal, so `true` and `1` differ even
    though Python would compare them equal.
    """
    if type_name(a) != type_name(b):
        return False
    if isinstance(a, ListVal):
        if len(a.items) != len(b.items):
            return False
        return all(values_equal(x, y) for x, y in zip(a.items, b.items))
    return a == b
