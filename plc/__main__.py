"""CLI entry point for the PLC toolchain.

Usage:
    python -m plc [-v|-vv|-vvv] <program_file>
    python -m plc [-v...] --check <program_file>
    python -m plc [-v...] --java <program_file>
    python -m plc [-v...] --emit-ast <program_file>
    python -m plc [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --check       Parse and analyze the program without running it
  --java        Print the Java source generated for the program
  --emit-ast    Parse the given .plc file and emit an AST JSON file
  --ast         Analyze and execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. When a program runs, the exit status is the
Integer returned by its `main` function (0 for any other result). Errors are
reported on stderr as `<kind>: <message>` with exit status 1.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .analyzer import Analyzer
from .ast import Program
from .ast_json import ast_to_obj, ast_from_obj
from .debug import DebugLog
from .errors import PlcError
from .generator import generate
from .interpreter import Interpreter
from .parser import parse_program
from .std import populate_builtin_scope
from .types import is_integer


def read_file(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def execute(program: Program, log: DebugLog) -> int:
    builtin_scope = populate_builtin_scope()
    Analyzer(builtin_scope, log).analyze(program)
    result = Interpreter(builtin_scope, log).run(program)
    # Exit statuses are a single byte, as with Java's System.exit
    return result & 0xFF if is_integer(result) else 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="PLC language toolchain")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--check', metavar='PLC_FILE', help='parse and analyze the given .plc file')
    group.add_argument('--java', metavar='PLC_FILE', help='print Java source for the given .plc file')
    group.add_argument('--emit-ast', metavar='PLC_FILE', help='emit AST JSON for the given .plc file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='PLC program file (.plc) to execute')
    args = parser.parse_args(argv)

    log = DebugLog(args.v)
    try:
        # Emit AST mode
        if args.emit_ast:
            program_file = Path(args.emit_ast)
            ast_program = parse_program(read_file(program_file))
            obj = ast_to_obj(ast_program)
            out_path = program_file.with_name(program_file.name + '.ast.json')
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(obj, out, ensure_ascii=False, indent=2)
            print(str(out_path))
            return 0

        if args.check:
            ast_program = parse_program(read_file(Path(args.check)))
            Analyzer(log=log).analyze(ast_program)
            return 0

        if args.java:
            ast_program = parse_program(read_file(Path(args.java)))
            Analyzer(log=log).analyze(ast_program)
            print(generate(ast_program))
            return 0

        # Execute from AST JSON
        if args.ast:
            ast_path = Path(args.ast)
            try:
                ast_program = ast_from_obj(json.loads(read_file(ast_path)))
            except (ValueError, KeyError, TypeError, ArithmeticError) as e:
                raise PlcError(f"malformed AST file {ast_path}: {e}") from None
            return execute(ast_program, log)

        # Default: execute source file
        if not args.program:
            parser.error('missing program file; or use --check/--java/--emit-ast/--ast')
        return execute(parse_program(read_file(Path(args.program))), log)
    except PlcError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        log.close()


if __name__ == '__main__':
    sys.exit(main())
