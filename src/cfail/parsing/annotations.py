"""
Extracts `//~` annotations from a source file.

Annotations take one of these forms:

    0.foo();  //~ ERROR <message>       inline, points at this line

    0.foo();
    //~^ ERROR <message>                adjusted, one line up per `^`

    let _: i8 = 0u8;
    //~^ ERROR <message>
    //~| <more message>                 continuation of the message above

    0.count_zeros();
    //~^ ERROR <message>
    //~| NOTE <message>                 shared, same line as the one above
"""
import logging
from typing import Dict, Iterator, List, Optional, Tuple

from rich.cells import cell_len

from ..errors import (
    AnnotationSyntaxError,
    Expected,
    LexError,
    LineDoesntExist,
    NoPrecedingAnnotation,
)
from ..records import Annotations
from ..utils.kind import Kind
from ..utils.span import BytePos, Line, LineMap, Span, iter_lines
from .annotation_lexer import (
    ANY_KIND,
    CARET,
    COLON,
    OR,
    SPACE,
    AnnotationLexer,
    Token,
    TokenType,
    starts_with_kind,
)

logger = logging.getLogger(__name__)

MARKER = "//~"
CONTINUATION = "//~|"

_CARET_WS = (CARET, SPACE)
_CARET_OR_WS = (CARET, OR, SPACE)
_COLON_WS = (COLON, SPACE)
_KIND = (ANY_KIND,)


def _is(item, token_type: TokenType) -> bool:
    return item is not None and isinstance(item[1], Token) and item[1].type is token_type


class AnnotationParser:
    """
    Iterates over `(line, kind, message)` triples in source order. The first
    syntax error is raised and ends the scan.
    """

    def __init__(self, source: str):
        self.lines: List[Tuple[BytePos, str]] = list(iter_lines(source))
        self.index = 0
        self.last_match: Optional[Line] = None
        self.start_of_line: BytePos = 0

    def __iter__(self) -> Iterator[Tuple[Line, Kind, str]]:
        while self.index < len(self.lines):
            self.start_of_line, line = self.lines[self.index]
            self.index += 1
            curr_line = Line(self.index)

            pos = line.find(MARKER)
            if pos == -1:
                # shared annotations only chain within a run of marker lines
                self.last_match = None
                continue

            yield self._parse_annotation(line, pos + len(MARKER), curr_line)

    def _fatal(self, span: Span, reason: LexError) -> AnnotationSyntaxError:
        return AnnotationSyntaxError(span + self.start_of_line, reason)

    def _parse_annotation(self, line: str, start: int, curr_line: Line) -> Tuple[Line, Kind, str]:
        lexer = AnnotationLexer(line[start:], start)

        first = lexer.next()
        if first is None:
            raise self._fatal(Span.at(start), Expected(_CARET_OR_WS))
        span, tok = first
        if not isinstance(tok, Token):
            raise self._fatal(span, tok)

        if tok.type is TokenType.CARET:
            ln = self._adjusted_line(lexer, span, curr_line)
        elif tok.type is TokenType.OR:
            if self.last_match is None:
                raise self._fatal(span, NoPrecedingAnnotation())
            ln = self.last_match
        elif tok.type is TokenType.WHITESPACE:
            ln = curr_line
        else:
            raise self._fatal(span, Expected(_CARET_OR_WS))

        self._skip_whitespace(lexer)

        item = lexer.next()
        if item is None:
            raise self._fatal(Span.at(len(line)), Expected(_KIND))
        span, tok = item
        if not isinstance(tok, Token):
            raise self._fatal(span, tok)
        if tok.type is not TokenType.KIND:
            raise self._fatal(span, Expected(_KIND))
        kind = tok.kind

        item = lexer.peek()
        if _is(item, TokenType.COLON):
            lexer.next()
        elif item is not None and not _is(item, TokenType.WHITESPACE):
            raise self._fatal(item[0], Expected(_COLON_WS))

        self._skip_whitespace(lexer)

        self.last_match = ln
        message = line[lexer.next_byte_pos():]
        message = self._read_continuation(message)

        logger.debug("annotation on line %d: %s %r", ln, kind, message)
        return ln, kind, message

    def _adjusted_line(self, lexer: AnnotationLexer, caret_span: Span, curr_line: Line) -> Line:
        adjust = 1
        while True:
            item = lexer.next()
            if item is None:
                raise self._fatal(Span.at(lexer.next_byte_pos()), Expected(_CARET_WS))
            span, tok = item
            if not isinstance(tok, Token):
                raise self._fatal(span, tok)
            if tok.type is TokenType.CARET:
                adjust += 1
            elif tok.type is TokenType.WHITESPACE:
                break
            else:
                raise self._fatal(span, Expected(_CARET_WS))

        ln = curr_line - adjust
        if ln is None:
            raise self._fatal(caret_span, LineDoesntExist())
        return ln

    @staticmethod
    def _skip_whitespace(lexer: AnnotationLexer) -> None:
        while _is(lexer.peek(), TokenType.WHITESPACE):
            lexer.next()

    def _read_continuation(self, message: str) -> str:
        """Append following `//~|` lines that don't start with a kind."""
        while self.index < len(self.lines):
            _, line = self.lines[self.index]
            pos = line.find(CONTINUATION)
            if pos == -1:
                break
            rest = line[pos + len(CONTINUATION):].strip()
            if starts_with_kind(rest):
                break
            message = message + "\n" + rest
            self.index += 1
        return message


def parse_annotations(source: str) -> LineMap[Annotations]:
    """
    Build the line map of expected messages for `source`.
    Raises AnnotationSyntaxError on the first malformed annotation.
    """
    line_map: Dict[Line, Annotations] = {}
    for ln, kind, message in AnnotationParser(source):
        line_map.setdefault(ln, Annotations()).insert(kind, message)
    return line_map


def format_annotation_error(path: str, source: str, error: AnnotationSyntaxError) -> str:
    """
    Render an annotation error the way the compiler renders its own:

        foo.rs:1:7: 1:11 error: unknown kind `ERRR`
        foo.rs:1 x; //~ ERRR oops
                        ^~~~
    """
    start, end = error.span
    for ln, (start_of_line, line) in enumerate(iter_lines(source), 1):
        if not start_of_line <= start <= start_of_line + len(line):
            continue

        col_start = start - start_of_line
        col_end = end - start_of_line
        header = f"{path}:{ln}:{col_start}: {ln}:{col_end} error: {error.reason.describe()}"
        excerpt = f"{path}:{ln} {line}"
        indent = cell_len(f"{path}:{ln} ") + cell_len(line[:col_start])
        tildes = max(cell_len(line[col_start:col_end]) - 1, 0)
        return "\n".join([header, excerpt, " " * indent + "^" + "~" * tildes])

    return f"{path}: error: {error.reason.describe()}"
