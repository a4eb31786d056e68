"""Unit tests for the `//~` annotation lexer."""
import pytest
from cfail.errors import UnknownKind, UnknownStartOfToken
from cfail.parsing.annotation_lexer import (
    AnnotationLexer,
    LexerState,
    Token,
    TokenType,
    starts_with_kind,
)
from cfail.utils.kind import Kind
from cfail.utils.span import Span


def _types(text):
    return [tok.type for _, tok in AnnotationLexer(text)]


class TestPunctuation:
    """Single-character tokens."""

    def test_caret_or_colon_space(self):
        assert _types("^|: ") == [
            TokenType.CARET, TokenType.OR, TokenType.COLON, TokenType.WHITESPACE,
        ]

    def test_tab_is_whitespace(self):
        assert _types("\t") == [TokenType.WHITESPACE]

    def test_spans_are_shifted_by_offset(self):
        lexer = AnnotationLexer("^ ", offset=10)
        assert lexer.next() == (Span(10, 11), Token(TokenType.CARET))
        assert lexer.next() == (Span(11, 12), Token(TokenType.WHITESPACE))
        assert lexer.next() is None


class TestKindKeywords:
    """Kind keywords are matched regardless of case."""

    @pytest.mark.parametrize("word,kind", [
        ("ERROR", Kind.ERROR),
        ("error", Kind.ERROR),
        ("Warning", Kind.WARNING),
        ("HELP", Kind.HELP),
        ("note", Kind.NOTE),
    ])
    def test_kind(self, word, kind):
        span, tok = AnnotationLexer(word).next()
        assert tok == Token(TokenType.KIND, kind)
        assert span == Span(0, len(word))

    def test_kind_followed_by_colon(self):
        assert _types("ERROR:") == [TokenType.KIND, TokenType.COLON]

    def test_unknown_kind_spans_to_next_space(self):
        lexer = AnnotationLexer("ERRR oops", offset=3)
        span, err = lexer.next()
        assert isinstance(err, UnknownKind)
        assert err.word == "ERRR"
        assert span == Span(3, 7)


class TestErrorLatch:
    """The first error halts the lexer."""

    def test_unknown_start_of_token(self):
        lexer = AnnotationLexer("x^^")
        span, err = lexer.next()
        assert isinstance(err, UnknownStartOfToken)
        assert err.char == "x"
        assert span == Span(0, 1)
        assert lexer.state is LexerState.HALTED
        assert lexer.next() is None
        assert lexer.next() is None

    def test_tokens_before_error_are_yielded(self):
        items = list(AnnotationLexer("^ z"))
        assert len(items) == 3
        assert isinstance(items[2][1], UnknownStartOfToken)


class TestPeek:
    def test_peek_does_not_consume(self):
        lexer = AnnotationLexer(" ^")
        assert lexer.peek() == lexer.next()
        assert lexer.next()[1] == Token(TokenType.CARET)

    def test_next_byte_pos_at_end(self):
        lexer = AnnotationLexer("  ", offset=4)
        lexer.next()
        lexer.next()
        assert lexer.next_byte_pos() == 6


class TestStartsWithKind:
    def test_kind(self):
        assert starts_with_kind("NOTE candidate")

    def test_plain_text(self):
        assert not starts_with_kind("expected `i8`")
        assert not starts_with_kind("found `u8`")

    def test_empty(self):
        assert not starts_with_kind("")
