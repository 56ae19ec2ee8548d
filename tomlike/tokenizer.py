"""
Tomlike Tokenizer - Expectation-driven token matching.

Every call site states which token kinds are legal next. When the input
holds something else the error names both sides, e.g.:

    line end '\\n' reached but value expected

The grammar parsers for values (strings, numbers, keywords, arrays and
inline tables) live in tomlike.reader.Parser, which subclasses Tokenizer
and fills in the match_* hooks used by match_next().
"""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple

from tomlike.syntax import (
    CLOSERS,
    KEYWORD_START,
    MAX_END_REPR_LENGTH,
    NUMBER_START,
    OPENERS,
    QUOTES,
    ConfigError,
    describe,
)
from tomlike.stream import CharacterSource


class TokenKind(Enum):
    KEY = "KEY"
    VALUE = "VALUE"
    LIST_DIVIDER = "LIST_DIVIDER"
    LIST_END = "LIST_END"
    LINE_END = "LINE_END"
    INPUT_END = "INPUT_END"
    UNKNOWN = "UNKNOWN"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").lower()


class KeyLevel(Enum):
    ROOT = "ROOT"          # [section] headers allowed
    NESTED = "NESTED"      # inside an inline table


class Token(NamedTuple):
    """A matched unit: its value, the delimiter that ended it, and its kind.

    ``end`` is the character that stopped the match and has already been
    consumed from the source ("" when nothing was read past the token).
    It becomes the ``start`` of the next match_next() call.
    """
    value: Any
    end: str
    kind: TokenKind


def join_expected(expected: tuple[TokenKind, ...]) -> str:
    labels = [kind.label for kind in expected]
    if len(labels) > 1:
        return f"{', '.join(labels[:-1])} or {labels[-1]}"
    return "".join(labels)


class Tokenizer:

    def __init__(self, source: CharacterSource) -> None:
        self.source = source

    def match_until(self, delimiters: str, end_of_input: bool = False) -> tuple[str, str]:
        """Collect characters up to the first unescaped delimiter.

        Returns (text, delimiter). The delimiter is consumed and is "" when
        the input ran out, which is only allowed with end_of_input=True.
        """
        result: list[str] = []
        escaped = False
        char = self.source.read()
        while char:
            if escaped:
                result.append(char)
                escaped = False
            elif char == "\\":
                escaped = True
            elif char in delimiters:
                return "".join(result), char
            else:
                result.append(char)
            char = self.source.read()

        text = "".join(result)
        if not end_of_input:
            text = text.strip()
            found = f" (from {describe(text, MAX_END_REPR_LENGTH)})" if text else ""
            raise ConfigError(f"unexpected end of input{found}")
        return text, ""

    def skip_comment(self) -> None:
        """Discard the rest of the line. Backslashes are not escapes here."""
        char = self.source.read()
        while char and char != "\n":
            char = self.source.read()

    @staticmethod
    def check_match(expected: tuple[TokenKind, ...], char: str, kind: TokenKind) -> None:
        if kind in expected:
            return
        reached = f"{kind.label} reached" if not char else f"{kind.label} {describe(char)} reached"
        raise ConfigError(f"{reached} but {join_expected(expected)} expected")

    def match_next(
        self,
        expected: tuple[TokenKind, ...],
        start: str = "",
        key_level: KeyLevel | None = None,
        new_line: bool = False,
    ) -> Token:
        """Match the next token, which must be one of the expected kinds.

        start is a character already consumed by the previous match.
        With key_level set, anything that is not a divider, closer or line
        end is read as a key. With new_line=True the first line end is
        returned instead of skipped.
        """
        char = start or self.source.read()
        while char:
            if char in "\n#":
                self.check_match(expected, char, TokenKind.LINE_END)
                if char == "#":
                    self.skip_comment()
                if new_line:
                    return Token("", "\n", TokenKind.LINE_END)
            elif char.isspace():
                pass
            elif char == ",":
                self.check_match(expected, char, TokenKind.LIST_DIVIDER)
                return Token("", char, TokenKind.LIST_DIVIDER)
            elif char in CLOSERS:
                self.check_match(expected, char, TokenKind.LIST_END)
                return Token("", char, TokenKind.LIST_END)
            elif key_level is not None:
                self.check_match(expected, char, TokenKind.KEY)
                return self.match_key(char, key_level)
            elif char in QUOTES:
                self.check_match(expected, char, TokenKind.VALUE)
                return self.match_string(char)
            elif char in NUMBER_START:
                self.check_match(expected, char, TokenKind.VALUE)
                return self.match_number(char)
            elif char in KEYWORD_START:
                self.check_match(expected, char, TokenKind.VALUE)
                return self.match_keyword(char)
            elif char in OPENERS:
                self.check_match(expected, char, TokenKind.VALUE)
                return self.match_array(char)
            elif char == "{":
                self.check_match(expected, char, TokenKind.VALUE)
                return self.match_table()
            else:
                self.check_match(expected, char, TokenKind.UNKNOWN)
            char = self.source.read()

        self.check_match(expected, "", TokenKind.INPUT_END)
        return Token("", "", TokenKind.INPUT_END)

    # Grammar hooks, implemented by tomlike.reader.Parser. A bare Tokenizer
    # only serves match_until() and the divider, closer and line end tokens.

    def match_key(self, start: str, level: KeyLevel) -> Token:
        raise NotImplementedError

    def match_string(self, quote: str) -> Token:
        raise NotImplementedError

    def match_number(self, start: str) -> Token:
        raise NotImplementedError

    def match_keyword(self, start: str) -> Token:
        raise NotImplementedError

    def match_array(self, opener: str) -> Token:
        raise NotImplementedError

    def match_table(self) -> Token:
        raise NotImplementedError
