"""Java source generator for PLC.

Turns an analyzed `Program` into the source of a single Java class `Main`.
Globals become fields, functions become instance methods and, when the
program defines `main/0`, a static `main(String[])` entry point delegates to
it. Every name and type in the output comes from the bindings the analyzer
attached to the AST, so the generator must only be given analyzed programs.
"""

from __future__ import annotations

from typing import List, Optional

from .analyzer import Analyzer
from .ast import (
    Program, Global, Function, ExpressionStmt, Declaration, Assignment, If,
    Switch, While, Return, Literal, Group, Binary, Access, Call, ListLiteral,
    Node, Statement,
)
from .parser import parse_program
from .types import INTEGER, NIL, NIL_TYPE, CharVal, Type

JAVA_ESCAPES = {
    '\\': '\\\\',
    '\b': '\\b',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}

# Java binds && tighter than ||; PLC parses them in one left-associative tier.
# '^' becomes a cast of a Math.pow call, which binds tighter than any operator.
JAVA_PRECEDENCE = {
    '||': 1,
    '&&': 2,
    '==': 3, '!=': 3,
    '<': 4, '>': 4,
    '+': 5, '-': 5,
    '*': 6, '/': 6,
    '^': 7,
}


def escape_java(value: str, quote: str) -> str:
    """Escape text for a Java literal delimited by `quote`."""
    out = []
    for ch in value:
        if ch == quote:
            out.append('\\' + ch)
        else:
            out.append(JAVA_ESCAPES.get(ch, ch))
    return ''.join(out)


class Generator:
    """Emits the Java class for an analyzed program.

    Output is collected one line at a time; `indent` is the current block
    depth and every emitted line is prefixed with four spaces per level.
    """
    def __init__(self):
        self.indent = 0
        self.lines: List[str] = []
        self.return_type: Optional[Type] = None

    def generate(self, program: Program) -> str:
        self.indent = 0
        self.lines = []
        self.emit_source(program)
        return "\n".join(self.lines)

    def line(self, text: str = "") -> None:
        self.lines.append("    " * self.indent + text if text else "")

    # Top level

    def emit_source(self, program: Program) -> None:
        self.line("public class Main {")
        self.indent += 1
        if program.globals:
            self.line()
            for global_ in program.globals:
                self.emit_global(global_)
        main = next((f for f in program.functions if f.name == 'main' and not f.parameters), None)
        if main is not None:
            self.line()
            self.line("public static void main(String[] args) {")
            self.indent += 1
            if main.function.return_type == INTEGER:
                self.line("System.exit(new Main().main());")
            else:
                self.line("new Main().main();")
            self.indent -= 1
            self.line("}")
        for function in program.functions:
            self.line()
            self.emit_function(function)
        self.indent -= 1
        self.line()
        self.line("}")

    def emit_global(self, node: Global) -> None:
        jvm_type = node.variable.type.jvm_name
        name = node.variable.jvm_name
        if node.is_list:
            declaration = f"{jvm_type}[] {name}"
        elif node.mutable:
            declaration = f"{jvm_type} {name}"
        else:
            declaration = f"final {jvm_type} {name}"
        if node.value is not None:
            declaration += f" = {self.expr(node.value)}"
        self.line(declaration + ";")

    def emit_function(self, node: Function) -> None:
        binding = node.function
        return_type = 'void' if binding.return_type == NIL_TYPE else binding.return_type.jvm_name
        params = ', '.join(
            f"{param_type.jvm_name} {name}" for name, param_type in zip(node.parameters, binding.parameter_types))
        header = f"{return_type} {binding.jvm_name}({params}) {{"
        self.return_type = binding.return_type
        if not node.statements:
            self.line(header + "}")
            return
        self.line(header)
        self.emit_block(node.statements)
        self.line("}")

    # Statements

    def emit_block(self, statements: List[Statement]) -> None:
        self.indent += 1
        for stmt in statements:
            self.emit_statement(stmt)
        self.indent -= 1

    def emit_statement(self, node: Node) -> None:
        if isinstance(node, ExpressionStmt):
            self.line(f"{self.expr(node.expression)};")
        elif isinstance(node, Declaration):
            variable = node.variable
            text = f"{variable.type.jvm_name} {variable.jvm_name}"
            if node.value is not None:
                text += f" = {self.expr(node.value)}"
            self.line(text + ";")
        elif isinstance(node, Assignment):
            self.line(f"{self.expr(node.receiver)} = {self.expr(node.value)};")
        elif isinstance(node, If):
            self.line(f"if ({self.expr(node.condition)}) {{")
            self.emit_block(node.then_statements)
            if node.else_statements:
                self.line("} else {")
                self.emit_block(node.else_statements)
            self.line("}")
        elif isinstance(node, Switch):
            self.line(f"switch ({self.expr(node.condition)}) {{")
            self.indent += 1
            for case in node.cases:
                if case.value is None:
                    self.line("default:")
                    self.emit_block(case.statements)
                else:
                    self.line(f"case {self.expr(case.value)}:")
                    self.emit_block(case.statements)
                    self.indent += 1
                    self.line("break;")
                    self.indent -= 1
            self.indent -= 1
            self.line("}")
        elif isinstance(node, While):
            if not node.statements:
                self.line(f"while ({self.expr(node.condition)}) {{}}")
                return
            self.line(f"while ({self.expr(node.condition)}) {{")
            self.emit_block(node.statements)
            self.line("}")
        elif isinstance(node, Return):
            if self.return_type == NIL_TYPE:
                # void methods cannot return a value; keep a call for its effect
                if isinstance(node.value, Call):
                    self.line(f"{self.expr(node.value)};")
                self.line("return;")
            else:
                self.line(f"return {self.expr(node.value)};")
        else:
            raise NotImplementedError(f"emit_statement: unexpected node type {type(node)}")

    # Expressions

    def expr(self, node: Node) -> str:
        if isinstance(node, Literal):
            return self.literal(node.literal)
        if isinstance(node, Group):
            return f"({self.expr(node.expression)})"
        if isinstance(node, Binary):
            left = self.operand(node.left, node.operator, False)
            right = self.operand(node.right, node.operator, True)
            if node.operator == '^':
                return f"(int) Math.pow({left}, {right})"
            return f"{left} {node.operator} {right}"
        if isinstance(node, Access):
            name = node.variable.jvm_name
            if node.offset is not None:
                return f"{name}[{self.expr(node.offset)}]"
            return name
        if isinstance(node, Call):
            args = ', '.join(self.expr(arg) for arg in node.arguments)
            return f"{node.function.jvm_name}({args})"
        if isinstance(node, ListLiteral):
            return '{' + ', '.join(self.expr(value) for value in node.values) + '}'
        raise NotImplementedError(f"expr: unexpected node type {type(node)}")

    def operand(self, node: Node, parent_operator: str, is_right: bool) -> str:
        text = self.expr(node)
        if not isinstance(node, Binary) or parent_operator == '^':
            return text
        precedence = JAVA_PRECEDENCE[node.operator]
        parent = JAVA_PRECEDENCE[parent_operator]
        if precedence < parent or (is_right and precedence == parent):
            return f"({text})"
        return text

    @staticmethod
    def literal(value) -> str:
        if value is NIL:
            return 'null'
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, CharVal):
            return "'" + escape_java(value.value, "'") + "'"
        if isinstance(value, str):
            return '"' + escape_java(value, '"') + '"'
        return str(value)


def generate(program: Program) -> str:
    """Generate Java source for an analyzed program."""
    return Generator().generate(program)


def compile_program(source: str) -> str:
    """Parse, analyze and generate Java source for PLC source text."""
    program = parse_program(source)
    Analyzer().analyze(program)
    return generate(program)
