"""
Lexer for the header of a compiler message, i.e. the part after the path in

    <path>:<line>:<col>: <line>:<col> <kind>: <message>

EBNF:

    colon      = ":" ;
    kind       = "error" | "warning" | "help" | "note" ;
    number     = digit , { digit } ;
    whitespace = " " ;
"""
from enum import Enum
from typing import NamedTuple, Optional, Union

from ..errors import LexError, UnknownKind, UnknownStartOfToken
from ..utils.kind import Kind, kind_for_char
from ..utils.span import BytePos
from .annotation_lexer import LexerState


class DiagTokenType(Enum):
    COLON = ":"
    KIND = "<kind>"
    NUMBER = "<number>"
    WHITESPACE = " "


class DiagToken(NamedTuple):
    type: DiagTokenType
    kind: Optional[Kind] = None
    number: Optional[int] = None


_COLON = DiagToken(DiagTokenType.COLON)
_SPACE = DiagToken(DiagTokenType.WHITESPACE)


class DiagnosticLexer:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.state = LexerState.RUNNING

    def next(self) -> Optional[Union[DiagToken, LexError]]:
        """Next token, the error that halted the lexer, or None at the end."""
        if self.state is LexerState.HALTED or self.pos >= len(self.text):
            return None

        i = self.pos
        c = self.text[i]
        self.pos += 1

        if c == " ":
            return _SPACE
        if c == ":":
            return _COLON
        if "0" <= c <= "9":
            while self.pos < len(self.text) and "0" <= self.text[self.pos] <= "9":
                self.pos += 1
            return DiagToken(DiagTokenType.NUMBER, number=int(self.text[i:self.pos]))

        kind = kind_for_char(c) if c.islower() else None
        if kind is None:
            return self._fatal(UnknownStartOfToken(c))

        needle = kind.needle
        if self.text.startswith(needle, i):
            self.pos = i + len(needle)
            return DiagToken(DiagTokenType.KIND, kind=kind)
        return self._fatal(UnknownKind(self.text[i:i + len(needle)]))

    def eat(self, token_type: DiagTokenType) -> Optional[DiagToken]:
        """Consume the next token if it has this type, else return None."""
        tok = self.next()
        if isinstance(tok, DiagToken) and tok.type is token_type:
            return tok
        return None

    def next_byte_pos(self) -> BytePos:
        return self.pos

    def _fatal(self, error: LexError) -> LexError:
        self.state = LexerState.HALTED
        return error
