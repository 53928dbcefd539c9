"""Tokenizer for PLC source text.

Tokens are recognised by a small lark grammar run through lark's basic
lexer; only the lexing stage of lark is used, the token stream itself is
consumed by the hand-written recursive-descent parser in `parser.py`.
Keywords are not distinguished here: they are IDENTIFIER tokens that the
parser matches by their literal text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexError


class TokenType(Enum):
    IDENTIFIER = 'IDENTIFIER'
    INTEGER = 'INTEGER'
    DECIMAL = 'DECIMAL'
    CHARACTER = 'CHARACTER'
    STRING = 'STRING'
    OPERATOR = 'OPERATOR'


@dataclass(frozen=True)
class Token:
    type: TokenType
    literal: str
    index: int


KEYWORDS = frozenset({
    'LET', 'IF', 'ELSE', 'END', 'SWITCH', 'CASE', 'DEFAULT', 'WHILE', 'DO',
    'RETURN', 'FUN', 'LIST', 'VAR', 'VAL', 'NIL', 'TRUE', 'FALSE',
})


# Higher priorities are tried first; numbers must win over a leading sign
# operator and the other terminals must win over single-character OPERATORs.
PLC_TOKEN_GRAMMAR = r"""
    start: token*
    ?token: IDENTIFIER | DECIMAL | INTEGER | CHARACTER | STRING | OPERATOR

    DECIMAL.4: /[+-]?[0-9]+\.[0-9]+/
    INTEGER.3: /[+-]?[0-9]+/
    IDENTIFIER.2: /[A-Za-z_][A-Za-z0-9_]*/
    CHARACTER.2: /'([^'\\\n\r]|\\[bnrt'"\\])'/
    STRING.2: /"([^"\\\n\r]|\\[bnrt'"\\])*"/
    OPERATOR.1: /[<>!=]=?|&&|\|\||[!#$%&()*+,\-.\/:;<=>?@\[\]^`{|}~\\]/

    %import common.WS
    %ignore WS
"""


PLC_LEXER = Lark(
    PLC_TOKEN_GRAMMAR,
    parser='lalr',
    lexer='basic',
)


def tokenize(source: str) -> List[Token]:
    """Convert source text into a list of positioned tokens."""
    tokens: List[Token] = []
    try:
        for tok in PLC_LEXER.lex(source):
            tokens.append(Token(TokenType(tok.type), str(tok), tok.start_pos))
    except UnexpectedCharacters as e:
        raise LexError(f"unexpected character {source[e.pos_in_stream]!r}", e.pos_in_stream) from None
    return tokens
