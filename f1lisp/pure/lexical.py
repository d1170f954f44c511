"""Lexical scanner for f1lisp. Turns source text into a flat list of Tokens by repeatedly running a deterministic finite
automaton from the current cursor position.

Token-wise the language is tiny:

```
<left>    ::= "("
<right>   ::= ")"
<number>  ::= [0-9]+
<symbol>  ::= <symchar> (<symchar> | [0-9])*    ; <symchar> is a letter or one of ! % & * + - . / : < = > ? @ $ ^
<comment> ::= ";" <char>*                       ; runs to the end of the line, discarded
```

Whitespace and comments are consumed but never produce tokens. Each run of the automaton takes the longest match it can
(maximal munch). If the automaton can't leave the start state, scanning stops there and the rest of the input is
dropped: tokenize never fails. Lexer.halted records where that happened.

Token spans are 1-indexed, half-open UTF-8 byte offsets, so `"1234"` spans (1, 5).
"""

import string
from dataclasses import dataclass
from enum import Enum


DIGITS = frozenset(string.digits)
SYMBOL_CHARS = frozenset(string.ascii_letters + "!%&*+-./:<=>?@$^")


@dataclass(frozen=True)
class Span:
    """Half-open range of 1-indexed byte offsets into the source. Span(0, 0) marks a synthetic token."""
    start: int
    end: int

    @property
    def is_synthetic(self):
        return self.start == 0 and self.end == 0

    def join(self, other):
        """Smallest span covering both self and other. Synthetic spans are ignored."""
        if self.is_synthetic:
            return other
        if other.is_synthetic:
            return self
        return Span(min(self.start, other.start), max(self.end, other.end))

    def slice(self, source):
        """The exact source text this span covers."""
        return source.encode("utf-8")[self.start - 1:self.end - 1].decode("utf-8")

    def char_range(self, source):
        """Converts this span into 0-indexed (start, end) str indices into source."""
        encoded = source.encode("utf-8")
        start = len(encoded[:self.start - 1].decode("utf-8", errors="ignore"))
        end = len(encoded[:self.end - 1].decode("utf-8", errors="ignore"))
        return start, end


NO_SPAN = Span(0, 0)


class TokenKind(Enum):
    LEFT_BRACKET = "("
    RIGHT_BRACKET = ")"
    NUMBER = "number"
    SYMBOL = "symbol"


@dataclass(frozen=True)
class Token:
    """A single lexical unit. value is the int for NUMBER tokens, the name for SYMBOL tokens and None for brackets."""
    kind: TokenKind
    value: object
    span: Span = NO_SPAN

    @classmethod
    def synthetic(cls, kind, value=None):
        """Token that wasn't produced by the tokenizer, e.g. when building trees by hand."""
        return cls(kind, value, NO_SPAN)

    @classmethod
    def symbol(cls, name, span=NO_SPAN):
        return cls(TokenKind.SYMBOL, name, span)

    @property
    def text(self):
        if self.value is None:
            return self.kind.value
        return str(self.value)

    def __str__(self):
        return self.text


MAX_DIGITS = 20
TOO_LONG = 10 ** MAX_DIGITS  # wider than any 64-bit integer


def decimal(digits):
    """int(digits), except that literals longer than MAX_DIGITS significant digits all become TOO_LONG."""
    if len(digits.lstrip("0")) > MAX_DIGITS:
        return TOO_LONG
    return int(digits)


def is_whitespace(char):
    """Unicode White_Space. str.isspace also accepts the information separators U+001C to U+001F."""
    return char.isspace() and char not in "\x1c\x1d\x1e\x1f"


class State(Enum):
    """States of the tokenizing automaton. START is the only non-accepting state."""
    START = 0
    LEFT_PAREN = 1
    RIGHT_PAREN = 2
    NUMBER = 3
    SYMBOL = 4
    WHITESPACE = 5
    COMMENT = 6


def transition(state, char):
    """Returns the state reached from state on char, or None if there is no transition."""
    if state is State.START:
        if char == "(":
            return State.LEFT_PAREN
        elif char == ")":
            return State.RIGHT_PAREN
        elif char in DIGITS:
            return State.NUMBER
        elif char in SYMBOL_CHARS:
            return State.SYMBOL
        elif char == ";":
            return State.COMMENT
        elif is_whitespace(char):
            return State.WHITESPACE

    elif state is State.NUMBER:
        if char in DIGITS:
            return State.NUMBER

    elif state is State.SYMBOL:
        if char in SYMBOL_CHARS or char in DIGITS:
            return State.SYMBOL

    elif state is State.WHITESPACE:
        if is_whitespace(char):
            return State.WHITESPACE

    elif state is State.COMMENT:
        if char not in "\r\n":
            return State.COMMENT

    return None


class Lexer:
    """Iterable over the tokens of source. After iteration finishes, halted is the span of the character that blocked
    the automaton, or None if the whole source was consumed.
    """

    def __init__(self, source):
        self.source = source
        self.halted = None

    def _munch(self, start):
        """Runs the automaton from source[start]. Returns the final state, the end index and the byte width matched."""
        state = State.START
        end = start

        while end < len(self.source):
            next_state = transition(state, self.source[end])
            if next_state is None:
                break

            state = next_state
            end += 1

        return state, end, len(self.source[start:end].encode("utf-8"))

    def __iter__(self):
        self.halted = None
        pos = 0
        offset = 1

        while pos < len(self.source):
            state, end, width = self._munch(pos)

            if state is State.START:
                char_width = len(self.source[pos].encode("utf-8"))
                self.halted = Span(offset, offset + char_width)
                return

            text = self.source[pos:end]
            span = Span(offset, offset + width)
            pos, offset = end, offset + width

            if state is State.LEFT_PAREN:
                yield Token(TokenKind.LEFT_BRACKET, None, span)
            elif state is State.RIGHT_PAREN:
                yield Token(TokenKind.RIGHT_BRACKET, None, span)
            elif state is State.NUMBER:
                yield Token(TokenKind.NUMBER, decimal(text), span)
            elif state is State.SYMBOL:
                yield Token(TokenKind.SYMBOL, text, span)
            # whitespace and comments are skipped

    def tokenize(self):
        return list(self)


def tokenize(source):
    """Returns the list of Tokens in source. Never raises."""
    return Lexer(source).tokenize()


def bracket_depth(tokens):
    """Number of unclosed brackets in tokens. Negative if there are more closing than opening brackets."""
    depth = 0
    for token in tokens:
        if token.kind is TokenKind.LEFT_BRACKET:
            depth += 1
        elif token.kind is TokenKind.RIGHT_BRACKET:
            depth -= 1
    return depth
