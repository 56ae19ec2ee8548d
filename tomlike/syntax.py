"""
Tomlike Syntax v1.0
===================

Layout:
    # comment                    <- Runs to end of line, discarded
    name = "value"               <- Root entry: KEY = VALUE, one per line
    count = 1_000                <- Numbers (grouping with _ or space every 3 digits)
    when = 2024-05-01 12:30 UTC+2
    flags = [TRUE, FALSE, NULL]  <- Arrays use [...] or (...)
    limits = { low = 1, high = NAN }
    [section]                    <- Section header (root level only)
    key = "value"                <- Belongs to [section] until the next header

Design Decisions:
    - A small fixed delimiter set (= \\n ; , ( ) [ ] { } #) ends every bare token
    - Backslash makes the next character literal everywhere, strings included
    - Keywords are case-insensitive: TRUE FALSE NULL INF INFINITY NA NAN N/A
    - Dates carry an optional UTC offset and are normalized to UTC on read
    - Sections only exist at the root; deeper tables use { inline } syntax

Canonical Output:
    - Root scalars and arrays first, then sections, each in insertion order
    - Collections wider than MAX_LINE_WIDTH are split one entry per line
    - Keys are restricted to ASCII letters, digits, _ and -
"""

from __future__ import annotations

import re
import string

# Characters that end any bare (unquoted) token
DELIMITERS = "=\n;,()[]{}#"

# Syntax version
FORMAT_VERSION = "1.0"

# Layout
MAX_LINE_WIDTH = 80                # Single-line collections longer than this are wrapped
INDENT = "    "                    # One level of indentation in wrapped collections

# Error display
MAX_REPR_LENGTH = 60               # Max chars of a value quoted in an error message
MAX_END_REPR_LENGTH = 20           # Max chars quoted for "unexpected end of input"

# Attribute access: table.key_items -> table["items"]
ATTRIBUTE_ESCAPE_PREFIX = "key_"

# Lookahead classes
QUOTES = "'\""
NUMBER_START = string.digits + ".+-"
KEYWORD_START = string.ascii_letters + "_"
OPENERS = {"[": "]", "(": ")"}
CLOSERS = "])}"

# Valid key (and section name) after trimming
KEY_PATTERN = re.compile(r"[A-Za-z0-9_-]+")
INVALID_KEY_CHAR = re.compile(r"[^A-Za-z0-9_-]")

NAN_KEYWORDS = frozenset({"NA", "NAN", "N/A"})
INF_KEYWORDS = frozenset({"INF", "INFINITY"})

KEYWORDS = {
    "TRUE": True,
    "FALSE": False,
    "NULL": None,
    "INF": float("inf"),
    "INFINITY": float("inf"),
    "NA": float("nan"),
    "NAN": float("nan"),
    "N/A": float("nan"),
}


class ConfigError(ValueError):
    """Syntax or encoding error in a tomlike document."""


def describe(value: object, max_length: int = MAX_REPR_LENGTH) -> str:
    """Short printable form of a value for error messages.

    Strings are shown as their repr. Anything else gets its type name
    appended, e.g. ``[1, 2] [list]``. Output longer than max_length is
    cut with a ``[+N]`` marker counting the dropped characters.
    """
    text = repr(value)
    over = len(text) - max_length
    if over > 0:
        text = f"{text[:max_length]} [+{over}]"
    if not isinstance(value, str):
        text = f"{text} [{type(value).__name__}]"
    return text


def check_key(key: object) -> str:
    """Validate a table key for output and return it trimmed."""
    if not isinstance(key, str):
        raise ConfigError(f"type of key {describe(key)} invalid (string expected)")
    key = key.strip()
    bad = INVALID_KEY_CHAR.search(key)
    if bad:
        raise ConfigError(
            f"invalid character {bad.group()!r} in key {describe(key)} "
            f"(only letters, digits, _ and - expected)"
        )
    if not key:
        raise ConfigError(f"key {describe(key)} invalid (blank)")
    return key
