"""
Tomlike Reader - Recursive parser for tomlike documents.

Parsing features:
  - Single pass over a lazy character stream, no backtracking
  - Each grammar step declares the token kinds it accepts, so syntax
    errors always name what was expected and what was found
  - Errors inside a root entry carry the entry's key

Input features:
  - Text, byte blobs, iterables of text or byte chunks (file objects included)
  - Async streams: drained first, then parsed (decode returns an awaitable)
  - Multi-byte UTF-8 characters split across byte chunks are reassembled
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import AsyncIterable, Iterable
from datetime import date, datetime, timedelta, timezone
from typing import Any, Awaitable, Callable

from tomlike.syntax import (
    DELIMITERS,
    INF_KEYWORDS,
    KEY_PATTERN,
    KEYWORDS,
    NAN_KEYWORDS,
    OPENERS,
    ConfigError,
    describe,
)
from tomlike.document import AttrTable, Table
from tomlike.stream import CharacterSource, accumulate_chunks
from tomlike.tokenizer import KeyLevel, Token, TokenKind, Tokenizer

logger = logging.getLogger(__name__)

KEY = TokenKind.KEY
VALUE = TokenKind.VALUE
LIST_DIVIDER = TokenKind.LIST_DIVIDER
LIST_END = TokenKind.LIST_END
LINE_END = TokenKind.LINE_END
INPUT_END = TokenKind.INPUT_END

# Literals that go to the date parser instead of the number parser
_DATE_HINT = re.compile(r"[-+:/utc]", re.IGNORECASE)
_EXPONENT = re.compile(r"(?:\d+\.?\d*|\.\d+)[eE][+-]?\d+", re.ASCII)
_GROUPING = re.compile(r"[_ ](\d{3})", re.ASCII)
_INTEGER = re.compile(r"\d+", re.ASCII)
_DECIMAL = re.compile(r"\d+\.?\d*|\.\d+", re.ASCII)

_DATE = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2}|\d{4}/\d{2}/\d{2})"
    r"(?:(?:T| *)(?P<time>\d{2}:\d{2}(?::\d{2}(?P<fraction>\.\d+)?)?)?)?"
    r" *(?P<utc>UTC)? *(?P<offset>[+-] *(?:\d{2}:\d{2}|\d{1,2}))?",
    re.IGNORECASE | re.ASCII,
)

TableFactory = Callable[[], Table]


class SectionName(str):
    """Key read from a [bracketed] root header."""


def parse_date(raw: str) -> datetime:
    """Parse a date literal into an aware datetime.

    With an offset the result is in UTC; without one the wall-clock time
    is taken as local time.
    """
    match = _DATE.fullmatch(raw)
    if not match:
        raise ConfigError(f"date {describe(raw)} invalid")
    year, month, day = (int(part) for part in re.split(r"[-/]", match["date"]))
    hour, minute, second = 0, 0, 0
    if match["time"]:
        clock = match["time"].split(".")[0].split(":")
        hour, minute = int(clock[0]), int(clock[1])
        second = int(clock[2]) if len(clock) > 2 else 0
    if not 1 <= month <= 12 or not 1 <= day <= 31 or hour > 24 or minute > 60 or second > 60:
        raise ConfigError(f"date {describe(raw)} invalid")
    millisecond = round(float(f"0{match['fraction']}") * 1000) if match["fraction"] else 0

    # Out-of-range day/hour/minute/second values roll over
    try:
        moment = datetime.combine(date(year, month, 1), datetime.min.time()) + timedelta(
            days=day - 1, hours=hour, minutes=minute, seconds=second, milliseconds=millisecond
        )
    except (ValueError, OverflowError):
        raise ConfigError(f"date {describe(raw)} invalid") from None

    offset = match["offset"]
    shift = timedelta(0)
    if offset:
        sign = -1 if offset[0] == "-" else 1
        parts = offset[1:].split(":")
        shift = sign * timedelta(
            hours=int(parts[0]), minutes=int(parts[1]) if len(parts) > 1 else 0
        )
    try:
        if not offset and not match["utc"]:
            return moment.astimezone()
        return (moment - shift).replace(tzinfo=timezone.utc)
    except (OverflowError, OSError):
        raise ConfigError(f"date {describe(raw)} invalid") from None


class Parser(Tokenizer):
    """
    Grammar parser for one decode call.

    Usage:
        doc = Parser(CharacterSource.from_text("a = 1\\n")).parse()
    """

    def __init__(self, source: CharacterSource, table_factory: TableFactory = dict) -> None:
        super().__init__(source)
        self._table = table_factory

    # --- Scalars ---

    def match_key(self, start: str, level: KeyLevel) -> Token:
        text, end = self.match_until(DELIMITERS, end_of_input=True)
        if start == "[":
            shown = f"{start}{text.strip()}{end}"
            if level is not KeyLevel.ROOT:
                raise ConfigError(
                    f"key {describe(shown)} invalid ([...] syntax only at first level)"
                )
            if end != "]":
                raise ConfigError(
                    f"key {describe(shown)} invalid "
                    f"(delimiter {describe(end)} reached before {describe(']')})"
                )
            key = SectionName(text.strip())
            if key and not KEY_PATTERN.fullmatch(key):
                raise ConfigError(
                    f"section name {describe(str(key))} invalid "
                    f"(only letters, digits, _ and - allowed)"
                )
        else:
            key = f"{start}{text}".strip()
            start = ""
        if not key:
            raise ConfigError(f"key {describe(start + end)} invalid (blank)")
        return Token(key, end, KEY)

    def match_string(self, quote: str) -> Token:
        text, _ = self.match_until(quote)
        return Token(text, "", VALUE)

    def match_number(self, start: str) -> Token:
        text, end = self.match_until(DELIMITERS, end_of_input=True)
        sign = -1 if start == "-" else 1
        raw = (text if start in "+-" else f"{start}{text}").strip()

        upper = raw.upper()
        if upper in NAN_KEYWORDS:
            return Token(math.copysign(math.nan, sign), end, VALUE)
        if upper in INF_KEYWORDS:
            return Token(sign * math.inf, end, VALUE)
        if not _EXPONENT.fullmatch(raw) and _DATE_HINT.search(raw):
            if start in "+-":
                raise ConfigError(f"date {describe(start + raw)} invalid")
            return Token(parse_date(raw), end, VALUE)

        digits = _GROUPING.sub(r"\1", raw)
        if _INTEGER.fullmatch(digits):
            return Token(sign * int(digits), end, VALUE)
        if _DECIMAL.fullmatch(digits) or _EXPONENT.fullmatch(digits):
            return Token(sign * float(digits), end, VALUE)
        raise ConfigError(f"number {describe(raw)} invalid")

    def match_keyword(self, start: str) -> Token:
        text, end = self.match_until(DELIMITERS, end_of_input=True)
        raw = f"{start}{text}".strip()
        try:
            return Token(KEYWORDS[raw.upper()], end, VALUE)
        except KeyError:
            raise ConfigError(f"keyword {describe(raw)} invalid") from None

    # --- Collections ---

    def match_array(self, opener: str) -> Token:
        closer = OPENERS[opener]
        result: list[Any] = []
        start = ""
        expected = (VALUE, LIST_END, LINE_END)
        while True:
            token = self.match_next(expected, start=start)
            if token.kind is VALUE:
                result.append(token.value)
                start = token.end
                expected = (LIST_DIVIDER, LIST_END, LINE_END)
            elif token.kind is LIST_DIVIDER:
                start = ""
                expected = (VALUE, LIST_END, LINE_END)
            else:
                if token.end != closer:
                    raise ConfigError(
                        f"end of array {describe(closer)} expected "
                        f"but {describe(token.end)} reached"
                    )
                return Token(result, "", VALUE)

    def match_table(self) -> Token:
        result = self._table()
        start = ""
        expected = (KEY, LIST_END, LINE_END)
        while True:
            key = self.match_next(expected, start=start, key_level=KeyLevel.NESTED)
            if key.kind is LIST_DIVIDER:
                start = ""
                expected = (KEY, LIST_END, LINE_END)
                continue
            if key.kind is LIST_END:
                if key.end != "}":
                    raise ConfigError(
                        f"end of map {describe('}')} expected but {describe(key.end)} reached"
                    )
                return Token(result, "", VALUE)
            if key.end != "=":
                raise ConfigError(
                    f"assignment character {describe('=')} expected "
                    f"but {describe(key.end)} reached"
                )
            value = self.match_next((VALUE,))
            start = value.end
            result[key.value] = value.value
            expected = (LIST_DIVIDER, LIST_END, LINE_END)

    # --- Document root ---

    def parse(self) -> Table:
        """Parse root entries and [section] blocks until end of input."""
        result = self._table()
        target = result
        expected = (KEY, LINE_END, INPUT_END)
        while True:
            key = self.match_next(expected, key_level=KeyLevel.ROOT)
            if key.kind is INPUT_END:
                return result
            if isinstance(key.value, SectionName):
                target = self._table()
                result[str(key.value)] = target
                continue
            if key.end != "=":
                raise ConfigError(
                    f"assignment character {describe('=')} expected "
                    f"but {describe(key.end)} reached at entry {describe(key.value)}"
                )
            try:
                value = self.match_next((VALUE,))
                if value.end != "\n":
                    self.match_next((LINE_END, INPUT_END), start=value.end, new_line=True)
            except ConfigError as error:
                raise ConfigError(f"{error} at entry {describe(key.value)}") from error
            target[key.value] = value.value


def _parse(source: CharacterSource, attribute_access: bool, kind: str) -> Table:
    table_factory: TableFactory = AttrTable if attribute_access else dict
    doc = Parser(source, table_factory).parse()
    logger.debug(
        "decoded %s input: %d characters, %d root entries", kind, source.consumed, len(doc)
    )
    return doc


async def decode_async(
    stream: AsyncIterable[str | bytes], *, attribute_access: bool = False
) -> Table:
    """Drain an async chunk stream, then decode it."""
    chunks = await accumulate_chunks(stream)
    return _parse(CharacterSource.from_chunks(chunks), attribute_access, "async stream")


def decode(source: Any, *, attribute_access: bool = False) -> Table | Awaitable[Table]:
    """Decode a tomlike document.

    Text, byte blobs and chunk iterables are decoded immediately and the
    document is returned. An async stream (anything with __aiter__) returns
    an awaitable instead; errors are raised when it is awaited.
    """
    if isinstance(source, str):
        return _parse(CharacterSource.from_text(source), attribute_access, "text")
    if isinstance(source, (bytes, bytearray, memoryview)):
        return _parse(CharacterSource.from_bytes(source), attribute_access, "bytes")
    if hasattr(source, "__aiter__"):
        return decode_async(source, attribute_access=attribute_access)
    if isinstance(source, Iterable):
        return _parse(CharacterSource.from_chunks(source), attribute_access, "chunked")
    raise ConfigError(f"type of input {describe(source)} unimplemented")
