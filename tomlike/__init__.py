"""
Tomlike - A small TOML-like configuration language.

Decode text, bytes or chunk streams into ordered tables; encode tables
back into canonical text.
"""

__version__ = "0.3.0"
__format_version__ = "1.0"

import logging

from tomlike.syntax import FORMAT_VERSION, ConfigError
from tomlike.document import AttrTable
from tomlike.reader import decode, decode_async
from tomlike.writer import encode

logging.getLogger(__name__).addHandler(logging.NullHandler())
