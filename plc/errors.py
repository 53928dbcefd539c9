from typing import Optional


class PlcError(Exception):
    """Base type for every error the toolchain reports to a caller."""
    kind = 'Error'

    def __init__(self, message: str):
        super().__init__(f"{self.kind}: {message}")
        self.message = message


class ParseError(PlcError):
    """Raised by the parser on the first token that violates the grammar."""
    kind = 'SyntaxError'

    def __init__(self, message: str, index: int):
        super().__init__(f"{message} at index {index}")
        self.message = message
        self.index = index


class LexError(ParseError):
    """Raised when the source contains a character no token can start with."""


class AnalysisError(PlcError):
    kind = 'TypeError'


class EvaluationError(PlcError):
    kind = 'RuntimeError'


class ScopeError(PlcError):
    """Unbound or duplicate name in a scope table."""
    kind = 'NameError'

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.name = name
