"""
Positions shared by the annotation and diagnostic parsers.

Parsers work on one line at a time, so every span they produce is local to
that line. Adding the line's start offset turns it into an absolute span
into the whole file. Offsets index the decoded text.
"""
from typing import Dict, Iterator, NamedTuple, Optional, Tuple, TypeVar

BytePos = int

T = TypeVar("T")

# Line -> per-kind record. Always built with ascending keys (see sorted_items).
LineMap = Dict["Line", T]


class Span(NamedTuple):
    """Half-open range `[start, end)`."""
    start: BytePos
    end: BytePos

    def __add__(self, offset: BytePos) -> "Span":  # type: ignore[override]
        return Span(self.start + offset, self.end + offset)

    def __sub__(self, offset: BytePos) -> Optional["Span"]:
        if offset > self.start or offset > self.end:
            return None
        return Span(self.start - offset, self.end - offset)

    @classmethod
    def at(cls, pos: BytePos) -> "Span":
        """Empty span pointing at `pos`."""
        return cls(pos, pos)


class Line(int):
    """1-based source line number."""

    def __new__(cls, value: int):
        if value < 1:
            raise ValueError(f"line numbers start at 1, got {value}")
        return super().__new__(cls, value)

    def __add__(self, n: int) -> "Line":
        return Line(int(self) + n)

    def __sub__(self, n: int) -> Optional["Line"]:
        line = int(self) - n
        if line <= 0:
            return None
        return Line(line)


def sorted_items(line_map: Dict[Line, T]):
    """Iterate a line map in ascending line order."""
    return sorted(line_map.items(), key=lambda item: item[0])


def iter_lines(text: str) -> Iterator[Tuple[BytePos, str]]:
    """
    Yield `(line_start, line)` for every line of `text`. Lines are split on
    "\\n" only; a trailing "\\r" is dropped from the line but still counted in
    the offsets, and a final newline does not produce an empty last line.
    """
    start = 0
    length = len(text)
    while start < length:
        end = text.find("\n", start)
        if end == -1:
            end = next_start = length
        else:
            next_start = end + 1
        line = text[start:end]
        if line.endswith("\r"):
            line = line[:-1]
        yield start, line
        start = next_start
