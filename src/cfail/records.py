"""
Per-line records passed from the parsers to the matcher.

Each record maps a Kind to an ordered list. A kind is only present once it has
at least one entry, so an absent kind and an empty list never coexist.
"""
from dataclasses import dataclass, field
from typing import Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from .utils.kind import KINDS, Kind
from .utils.span import Line

T = TypeVar("T")


class PerKind(Generic[T]):
    """An optional ordered list per Kind, iterated in report order."""

    __slots__ = ("_buckets",)

    def __init__(self):
        self._buckets: Dict[Kind, List[T]] = {}

    def insert(self, kind: Kind, item: T) -> None:
        self._buckets.setdefault(kind, []).append(item)

    def get(self, kind: Kind) -> Optional[List[T]]:
        return self._buckets.get(kind)

    def kinds(self) -> Iterator[Kind]:
        return (k for k in KINDS if k in self._buckets)

    def items(self) -> Iterator[Tuple[Kind, List[T]]]:
        return ((k, self._buckets[k]) for k in KINDS if k in self._buckets)

    def is_empty(self) -> bool:
        return not self._buckets

    def __eq__(self, other) -> bool:
        if not isinstance(other, PerKind):
            return NotImplemented
        return type(self) is type(other) and self._buckets == other._buckets

    def __repr__(self) -> str:
        inner = ", ".join(f"{k.value}={v!r}" for k, v in self.items())
        return f"{type(self).__name__}({inner})"


class Annotations(PerKind[str]):
    """Expected messages for one source line."""


class Messages(PerKind[str]):
    """Actual compiler messages for one source line."""


@dataclass
class Mismatch:
    """What was left unmatched for one line and kind."""
    annotations: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)


class Mismatches(PerKind[Tuple[Line, Mismatch]]):
    """Mismatches for every kind, each list in ascending line order."""

    def push_annotations(self, line: Line, annotations: Annotations) -> None:
        for kind, anns in annotations.items():
            self.insert(kind, (line, Mismatch(annotations=list(anns))))

    def push_messages(self, line: Line, messages: Messages) -> None:
        for kind, msgs in messages.items():
            self.insert(kind, (line, Mismatch(messages=list(msgs))))
