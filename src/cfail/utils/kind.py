"""
Compiler message kinds. This module is the single source of truth for the
severity keywords used by both lexers and by the mismatch report.
"""
from enum import Enum
from typing import Optional


class Kind(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    HELP = "help"
    NOTE = "note"

    def __str__(self) -> str:
        return self.value

    @property
    def needle(self) -> str:
        """The keyword as it appears in annotations and compiler output."""
        return self.value


# Report order. Every per-kind structure iterates in this order.
KINDS = (Kind.ERROR, Kind.WARNING, Kind.HELP, Kind.NOTE)

# First character -> candidate kind, used by the lexers
_FIRST_CHAR = {k.value[0]: k for k in KINDS}


def kind_for_char(c: str) -> Optional[Kind]:
    """Return the only kind whose keyword could start with `c`, ignoring case."""
    return _FIRST_CHAR.get(c.lower())


def parse_kind(word: str) -> Optional[Kind]:
    """Case-insensitive keyword lookup."""
    try:
        return Kind(word.lower())
    except ValueError:
        return None
