import logging
from typing import Dict, Iterator, List, Optional, Tuple

from ..errors import DiagnosticSyntaxError
from ..records import Messages
from ..utils.kind import Kind
from ..utils.span import BytePos, Line, LineMap, iter_lines
from .diagnostic_lexer import DiagnosticLexer, DiagToken, DiagTokenType

logger = logging.getLogger(__name__)

SUMMARY_PREFIX = "error: aborting due to "


class _Malformed(Exception):
    pass


def _type_of(tok) -> Optional[DiagTokenType]:
    return tok.type if isinstance(tok, DiagToken) else None


def _parse_header(rest: str) -> Optional[Tuple[Line, Kind, BytePos]]:
    """
    Parse what follows the path on a candidate line. Returns None for a span
    display line (`<path>:<line> <source>`), otherwise the line, the kind and
    the offset of the message start within `rest`.
    """
    lexer = DiagnosticLexer(rest)

    def expect(token_type: DiagTokenType):
        tok = lexer.eat(token_type)
        if tok is None:
            raise _Malformed()
        return tok

    expect(DiagTokenType.COLON)
    number = expect(DiagTokenType.NUMBER).number
    if number < 1:
        raise _Malformed()
    line = Line(number)

    tok = lexer.next()
    if _type_of(tok) is DiagTokenType.WHITESPACE:
        return None
    if _type_of(tok) is not DiagTokenType.COLON:
        raise _Malformed()

    # <col>: <line>:<col>, the colon after the first column is optional
    expect(DiagTokenType.NUMBER)
    tok = lexer.next()
    if _type_of(tok) is DiagTokenType.COLON:
        expect(DiagTokenType.WHITESPACE)
    elif _type_of(tok) is not DiagTokenType.WHITESPACE:
        raise _Malformed()
    expect(DiagTokenType.NUMBER)
    expect(DiagTokenType.COLON)
    expect(DiagTokenType.NUMBER)

    expect(DiagTokenType.WHITESPACE)
    kind = expect(DiagTokenType.KIND).kind
    expect(DiagTokenType.COLON)
    expect(DiagTokenType.WHITESPACE)

    return line, kind, lexer.next_byte_pos()


class DiagnosticParser:
    """
    Iterates over `(line, kind, message)` for every compiler message about
    `path`. A message runs from its header up to the next line that starts
    with the path (another message or a span display) or the summary line.
    Messages are slices of the original text.
    """

    def __init__(self, stderr: str, path: str):
        self.stderr = stderr
        self.path = path
        self.lines: List[Tuple[BytePos, str]] = list(iter_lines(stderr))
        self.index = 0

    def __iter__(self) -> Iterator[Tuple[Line, Kind, str]]:
        while self.index < len(self.lines):
            start_of_line, line = self.lines[self.index]
            self.index += 1

            if not line.startswith(self.path):
                continue

            try:
                header = _parse_header(line[len(self.path):])
            except _Malformed:
                raise DiagnosticSyntaxError(line) from None
            if header is None:
                continue

            ln, kind, offset = header
            start = start_of_line + len(self.path) + offset
            end = self._message_end(start_of_line + len(line))

            logger.debug("message on line %d: %s", ln, kind)
            yield ln, kind, self.stderr[start:end]

    def _message_end(self, end: BytePos) -> BytePos:
        while self.index < len(self.lines):
            start_of_line, line = self.lines[self.index]
            if line.startswith(self.path) or line.startswith(SUMMARY_PREFIX):
                break
            end = start_of_line + len(line)
            self.index += 1
        return end


def parse_diagnostics(stderr: str, path: str) -> LineMap[Messages]:
    """
    Build the line map of actual compiler messages about `path`.
    Raises DiagnosticSyntaxError on a header that doesn't match the grammar.
    """
    line_map: Dict[Line, Messages] = {}
    for ln, kind, message in DiagnosticParser(stderr, path):
        line_map.setdefault(ln, Messages()).insert(kind, message)
    return line_map
