"""
Lexer for the micro-syntax that follows a `//~` marker.

EBNF:

    caret      = "^" ;
    colon      = ":" ;
    kind       = "error" | "warning" | "help" | "note" ;   (any case)
    or         = "|" ;
    whitespace = " " | "\t" ;

Anything else is an error. The first error halts the lexer: it is yielded
once and no further tokens follow.
"""
from enum import Enum
from typing import Iterator, NamedTuple, Optional, Tuple, Union

from ..errors import LexError, UnknownKind, UnknownStartOfToken
from ..utils.kind import Kind, kind_for_char
from ..utils.span import BytePos, Span

WHITESPACE = (" ", "\t")


class TokenType(Enum):
    CARET = "^"
    COLON = ":"
    KIND = "<kind>"
    OR = "|"
    WHITESPACE = " "


class Token(NamedTuple):
    type: TokenType
    kind: Optional[Kind] = None

    def __str__(self) -> str:
        return self.type.value


CARET = Token(TokenType.CARET)
COLON = Token(TokenType.COLON)
OR = Token(TokenType.OR)
SPACE = Token(TokenType.WHITESPACE)
ANY_KIND = Token(TokenType.KIND)

Lexeme = Tuple[Span, Union[Token, LexError]]


class LexerState(Enum):
    RUNNING = "running"
    HALTED = "halted"


class AnnotationLexer:
    """
    Yields `(span, token_or_error)` pairs. Spans are shifted by `offset` so a
    lexer over a slice of a line reports positions relative to the whole line.
    """

    def __init__(self, text: str, offset: BytePos = 0):
        self.text = text
        self.offset = offset
        self.pos = 0
        self.state = LexerState.RUNNING
        self._peeked: Optional[Lexeme] = None
        self._has_peeked = False

    def __iter__(self) -> Iterator[Lexeme]:
        return self

    def __next__(self) -> Lexeme:
        item = self.next()
        if item is None:
            raise StopIteration
        return item

    def next(self) -> Optional[Lexeme]:
        if self._has_peeked:
            self._has_peeked = False
            return self._peeked
        return self._lex()

    def peek(self) -> Optional[Lexeme]:
        if not self._has_peeked:
            self._peeked = self._lex()
            self._has_peeked = True
        return self._peeked

    def next_byte_pos(self) -> BytePos:
        """Start of the next unconsumed lexeme, or end of input."""
        item = self.peek()
        if item is None:
            return len(self.text) + self.offset
        return item[0].start

    def _span(self, start: int, end: int) -> Span:
        return Span(start + self.offset, end + self.offset)

    def _fatal(self, start: int, end: int, error: LexError) -> Lexeme:
        self.state = LexerState.HALTED
        return self._span(start, end), error

    def _lex(self) -> Optional[Lexeme]:
        if self.state is LexerState.HALTED or self.pos >= len(self.text):
            return None

        i = self.pos
        c = self.text[i]
        self.pos += 1

        if c in WHITESPACE:
            return self._span(i, self.pos), SPACE
        if c == ":":
            return self._span(i, self.pos), COLON
        if c == "^":
            return self._span(i, self.pos), CARET
        if c == "|":
            return self._span(i, self.pos), OR

        kind = kind_for_char(c)
        if kind is None:
            return self._fatal(i, self.pos, UnknownStartOfToken(c))

        needle = kind.needle
        if self.text[i:i + len(needle)].lower() == needle:
            self.pos = i + len(needle)
            return self._span(i, self.pos), Token(TokenType.KIND, kind)

        end = self.text.find(" ", i)
        if end == -1:
            end = len(self.text)
        return self._fatal(i, end, UnknownKind(self.text[i:end]))


def starts_with_kind(text: str) -> bool:
    """True if the first lexeme of `text` is a kind keyword."""
    item = AnnotationLexer(text).next()
    return item is not None and isinstance(item[1], Token) and item[1].type is TokenType.KIND
