"""
Error taxonomy for a single checked file.

Every failure that should be reported as "ERROR" for a file is a CfailError.
Lexers never raise; they hand back a LexError value and stop. Parsers turn
those into AnnotationSyntaxError / DiagnosticSyntaxError and raise.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Sequence

from .utils.span import Span


class Feature(str, Enum):
    AUX_BUILD = "aux-build"
    ERROR_PATTERN = "error-pattern"

    @property
    def directive(self) -> str:
        return f"// {self.value}"

    def __str__(self) -> str:
        if self is Feature.AUX_BUILD:
            return "auxiliar builds"
        return "error patterns"


class CfailError(Exception):
    """Base class for all per-file errors."""


class SourceReadError(CfailError):
    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(str(cause))


class CompilerError(CfailError):
    """The compiler could not be found or spawned."""


class SuccessfulCompilation(CfailError):
    def __init__(self):
        super().__init__("compilation succeeded")


class UnsupportedFeature(CfailError):
    def __init__(self, feature: Feature):
        self.feature = feature
        super().__init__(str(feature) + " are not currently supported")


class DiagnosticSyntaxError(CfailError):
    def __init__(self, line: str):
        self.line = line
        super().__init__(f"couldn't parse stderr: {line}")


# --- annotation syntax ---

class LexError(ABC):
    """Base for errors produced while lexing an annotation."""

    @abstractmethod
    def describe(self) -> str:
        """One-line message shown to the user."""


class Expected(LexError):
    def __init__(self, tokens: Sequence):
        self.tokens = tuple(tokens)

    def describe(self) -> str:
        if len(self.tokens) == 1:
            return f"expected token `{self.tokens[0]}`"
        return "expected one of " + ", ".join(f"`{t}`" for t in self.tokens)


class LineDoesntExist(LexError):
    def describe(self) -> str:
        return "adjusted line doesn't exist"


class NoPrecedingAnnotation(LexError):
    def describe(self) -> str:
        return "no annotation in previous line"


class UnknownKind(LexError):
    def __init__(self, word: str):
        self.word = word

    def describe(self) -> str:
        return f"unknown kind `{self.word}`"


class UnknownStartOfToken(LexError):
    def __init__(self, char: str):
        self.char = char

    def describe(self) -> str:
        return f"unknown start of token `{self.char}`"


class AnnotationSyntaxError(CfailError):
    """
    A malformed `//~` annotation. `span` is absolute within the source file.
    `rendered` holds the compiler-style excerpt once the engine has formatted
    it against the file path.
    """

    def __init__(self, span: Span, reason: LexError):
        self.span = span
        self.reason = reason
        self.rendered: Optional[str] = None
        super().__init__(reason.describe())

    def __str__(self) -> str:
        if self.rendered is not None:
            return self.rendered
        return self.reason.describe()
