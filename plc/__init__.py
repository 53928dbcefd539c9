# PLC language package
# This package provides a parser, analyzer, interpreter and Java generator for PLC.
from .analyzer import Analyzer, analyze
from .errors import AnalysisError, EvaluationError, LexError, ParseError, PlcError, ScopeError
from .generator import Generator, compile_program, generate
from .interpreter import Interpreter, run_program
from .parser import Parser, parse_program

__all__ = [
    'Analyzer',
    'analyze',
    'Generator',
    'generate',
    'compile_program',
    'Interpreter',
    'run_program',
    'Parser',
    'parse_program',
    'PlcError',
    'ParseError',
    'LexError',
    'AnalysisError',
    'EvaluationError',
    'ScopeError',
]
