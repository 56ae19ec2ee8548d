"""
Tomlike Writer - Renders documents as canonical tomlike text.

Levels:
  0  document root:  key = value lines, then one [section] per table entry
  1  section body:   key = value lines; arrays may wrap one element per line
  2  inline tables:  { k = v, ... }, wrapped one entry per line when too wide
  3+ always single-line

A collection is wrapped only when its single-line form is longer than
MAX_LINE_WIDTH characters. Arrays and tables being rendered are tracked
by identity, so a self-referencing structure raises instead of recursing.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import date, datetime, timedelta, timezone
from typing import Any

from tomlike.syntax import INDENT, MAX_LINE_WIDTH, ConfigError, check_key, describe

logger = logging.getLogger(__name__)

_ARRAY_TYPES = (list, tuple, set, frozenset, bytes, bytearray)


def encode_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def encode_number(value: int | float) -> str:
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return "NAN"
        return "INFINITY" if value > 0 else "-INFINITY"
    # Subclasses such as IntEnum members carry their own repr
    if isinstance(value, float):
        return float.__repr__(value)
    return int.__repr__(value)


def encode_offset(offset: timedelta) -> str:
    minutes = round(offset.total_seconds() / 60)
    sign = "+" if minutes >= 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    if minutes:
        return f"{sign}{hours:02d}:{minutes:02d}"
    return f"{sign}{hours}"


def encode_date(value: date) -> str:
    """Render a date as YYYY-MM-DD HH:MM:SS[.mmm] UTC+H[H][:MM].

    Naive datetimes and plain dates are taken as local time.
    """
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    try:
        if value.tzinfo is None or value.utcoffset() is None:
            value = value.astimezone()
        value.astimezone(timezone.utc)
    except OverflowError:
        raise ConfigError(f"date {describe(value)} invalid (out of range in UTC)") from None
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    millisecond = value.microsecond // 1000
    if millisecond:
        text += f".{millisecond:03d}"
    return f"{text} UTC{encode_offset(value.utcoffset())}"


def _indent(text: str) -> str:
    return INDENT + text.replace("\n", "\n" + INDENT)


class Encoder:
    """
    Renders one document. Holds the set of collections currently being
    rendered, so an instance must not be shared between threads.

    Usage:
        text = Encoder().encode({"name": "demo", "server": {"port": 8080}})
    """

    def __init__(self) -> None:
        self._active: set[int] = set()

    def encode(self, document: Mapping[str, Any]) -> str:
        if not isinstance(document, Mapping):
            raise ConfigError(
                f"input {describe(document)} has invalid type (mapping expected)"
            )
        return self._enter(document, self._root)

    def _enter(self, value: Any, render: Any, *args: Any) -> Any:
        marker = id(value)
        if marker in self._active:
            raise ConfigError(f"circular reference to {describe(value)}")
        self._active.add(marker)
        try:
            return render(value, *args)
        finally:
            self._active.discard(marker)

    def _value(self, value: Any, level: int, nest_arrays: bool = True) -> str:
        """Render a value held by a collection at the given level.

        Nested collections render one level deeper, except arrays held
        directly by a section body (nest_arrays=False), which stay at
        level 1 like root arrays.
        """
        if isinstance(value, str):
            return encode_string(value)
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return str(value).upper()
        if isinstance(value, (int, float)):
            return encode_number(value)
        if isinstance(value, date):
            return encode_date(value)
        if isinstance(value, Mapping):
            return self._enter(value, self._inline_table, level + 1)
        if isinstance(value, _ARRAY_TYPES):
            return self._enter(value, self._array, level + 1 if nest_arrays else level)
        raise ConfigError(f"type of input {describe(value)} unimplemented")

    def _array(self, value: Any, level: int) -> str:
        items = [self._value(item, level) for item in value]
        if not items:
            return "[]"
        line = "[" + ", ".join(items) + "]"
        if level == 1 and len(line) > MAX_LINE_WIDTH:
            return "[\n" + "".join(f"{_indent(item)},\n" for item in items) + "]"
        return line

    def _inline_table(self, value: Mapping[str, Any], level: int) -> str:
        entries = [f"{check_key(k)} = {self._value(v, level)}" for k, v in value.items()]
        if not entries:
            return "{}"
        line = "{ " + ", ".join(entries) + " }"
        if level == 2 and len(line) > MAX_LINE_WIDTH:
            return "{\n" + "".join(f"{_indent(entry)},\n" for entry in entries) + "}"
        return line

    def _section(self, value: Mapping[str, Any]) -> list[str]:
        return [
            f"{check_key(k)} = {self._value(v, 1, nest_arrays=False)}" for k, v in value.items()
        ]

    def _root(self, value: Mapping[str, Any]) -> str:
        lines: list[str] = []
        sections: list[tuple[str, Mapping[str, Any]]] = []
        for key, item in value.items():
            key = check_key(key)
            if isinstance(item, Mapping):
                sections.append((key, item))
            else:
                lines.append(f"{key} = {self._value(item, 0)}")

        for key, section in sections:
            if lines:
                lines.append("")
            lines.append(f"[{key}]")
            lines.extend(self._enter(section, self._section))

        return "\n".join(lines) + "\n" if lines else ""


def encode(document: Mapping[str, Any]) -> str:
    """Encode a document (a mapping) as canonical tomlike text."""
    text = Encoder().encode(document)
    logger.debug("encoded %d root entries into %d characters", len(document), len(text))
    return text
