"""JSON serialization/deserialization for the PLC AST.

This module converts between PLC AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Only the parsed shape of
the tree is stored; the annotations added by the analyzer (types and
bindings) are dropped and must be recomputed by analyzing the loaded tree.
Literal values are tagged with their kind because JSON has no Decimal,
character or nil values.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from .ast import (
    Program,
    Global,
    Function,
    ExpressionStmt,
    Declaration,
    Assignment,
    If,
    Case,
    Switch,
    While,
    Return,
    Literal,
    Group,
    Binary,
    Access,
    Call,
    ListLiteral,
)
from .types import NIL, CharVal


def literal_to_obj(value: Any) -> Dict[str, Any]:
    if value is NIL:
        return {"kind": "Nil"}
    if isinstance(value, bool):
        return {"kind": "Boolean", "value": value}
    if isinstance(value, CharVal):
        return {"kind": "Character", "value": value.value}
    if isinstance(value, str):
        return {"kind": "String", "value": value}
    if isinstance(value, int):
        return {"kind": "Integer", "value": str(value)}
    if isinstance(value, Decimal):
        return {"kind": "Decimal", "value": str(value)}
    raise TypeError(f"Unsupported literal for serialization: {type(value).__name__}")


def literal_from_obj(o: Dict[str, Any]) -> Any:
    kind = o["kind"]
    if kind == "Nil":
        return NIL
    if kind == "Boolean":
        return bool(o["value"])
    if kind == "Character":
        return CharVal(o["value"])
    if kind == "String":
        return o["value"]
    if kind == "Integer":
        return int(o["value"])
    if kind == "Decimal":
        return Decimal(o["value"])
    raise ValueError(f"Unknown literal kind: {kind}")


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Program):
        return {
            "type": "Program",
            "globals": [ast_to_obj(g) for g in node.globals],
            "functions": [ast_to_obj(f) for f in node.functions],
        }
    if isinstance(node, Global):
        return {
            "type": "Global",
            "name": node.name,
            "mutable": node.mutable,
            "type_name": node.type_name,
            "value": ast_to_obj(node.value),
            "is_list": node.is_list,
        }
    if isinstance(node, Function):
        return {
            "type": "Function",
            "name": node.name,
            "parameters": list(node.parameters),
            "parameter_type_names": list(node.parameter_type_names),
            "return_type_name": node.return_type_name,
            "statements": [ast_to_obj(s) for s in node.statements],
        }
    if isinstance(node, ExpressionStmt):
        return {"type": "ExpressionStmt", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Declaration):
        return {
            "type": "Declaration",
            "name": node.name,
            "type_name": node.type_name,
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, Assignment):
        return {"type": "Assignment", "receiver": ast_to_obj(node.receiver), "value": ast_to_obj(node.value)}
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": ast_to_obj(node.condition),
            "then_statements": [ast_to_obj(s) for s in node.then_statements],
            "else_statements": [ast_to_obj(s) for s in node.else_statements],
        }
    if isinstance(node, Switch):
        return {
            "type": "Switch",
            "condition": ast_to_obj(node.condition),
            "cases": [ast_to_obj(c) for c in node.cases],
        }
    if isinstance(node, Case):
        return {
            "type": "Case",
            "value": ast_to_obj(node.value),
            "statements": [ast_to_obj(s) for s in node.statements],
        }
    if isinstance(node, While):
        return {
            "type": "While",
            "condition": ast_to_obj(node.condition),
            "statements": [ast_to_obj(s) for s in node.statements],
        }
    if isinstance(node, Return):
        return {"type": "Return", "value": ast_to_obj(node.value)}
    if isinstance(node, Literal):
        return {"type": "Literal", "literal": literal_to_obj(node.literal)}
    if isinstance(node, Group):
        return {"type": "Group", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Binary):
        return {
            "type": "Binary",
            "operator": node.operator,
            "left": ast_to_obj(node.left),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Access):
        return {"type": "Access", "name": node.name, "offset": ast_to_obj(node.offset)}
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "arguments": [ast_to_obj(a) for a in node.arguments]}
    if isinstance(node, ListLiteral):
        return {"type": "ListLiteral", "values": [ast_to_obj(v) for v in node.values]}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(
            globals=[ast_from_obj(g) for g in obj["globals"]],
            functions=[ast_from_obj(f) for f in obj["functions"]],
        )
    if t == "Global":
        return Global(
            name=obj["name"],
            mutable=bool(obj["mutable"]),
            type_name=obj.get("type_name"),
            value=ast_from_obj(obj.get("value")),
            is_list=bool(obj.get("is_list", False)),
        )
    if t == "Function":
        return Function(
            name=obj["name"],
            parameters=list(obj["parameters"]),
            parameter_type_names=list(obj["parameter_type_names"]),
            return_type_name=obj.get("return_type_name"),
            statements=[ast_from_obj(s) for s in obj["statements"]],
        )
    if t == "ExpressionStmt":
        return ExpressionStmt(expression=ast_from_obj(obj["expression"]))
    if t == "Declaration":
        return Declaration(
            name=obj["name"],
            type_name=obj.get("type_name"),
            value=ast_from_obj(obj.get("value")),
        )
    if t == "Assignment":
        return Assignment(receiver=ast_from_obj(obj["receiver"]), value=ast_from_obj(obj["value"]))
    if t == "If":
        return If(
            condition=ast_from_obj(obj["condition"]),
            then_statements=[ast_from_obj(s) for s in obj["then_statements"]],
            else_statements=[ast_from_obj(s) for s in obj.get("else_statements", [])],
        )
    if t == "Switch":
        return Switch(condition=ast_from_obj(obj["condition"]), cases=[ast_from_obj(c) for c in obj["cases"]])
    if t == "Case":
        return Case(value=ast_from_obj(obj.get("value")), statements=[ast_from_obj(s) for s in obj["statements"]])
    if t == "While":
        return While(condition=ast_from_obj(obj["condition"]), statements=[ast_from_obj(s) for s in obj["statements"]])
    if t == "Return":
        return Return(value=ast_from_obj(obj["value"]))
    if t == "Literal":
        return Literal(literal=literal_from_obj(obj["literal"]))
    if t == "Group":
        return Group(expression=ast_from_obj(obj["expression"]))
    if t == "Binary":
        return Binary(operator=obj["operator"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "Access":
        return Access(name=obj["name"], offset=ast_from_obj(obj.get("offset")))
    if t == "Call":
        return Call(name=obj["name"], arguments=[ast_from_obj(a) for a in obj["arguments"]])
    if t == "ListLiteral":
        return ListLiteral(values=[ast_from_obj(v) for v in obj["values"]])

    raise ValueError(f"Unknown AST node type: {t}")
