"""
Tomlike Document - Value model shared by the reader and the writer.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Union

from tomlike.syntax import ATTRIBUTE_ESCAPE_PREFIX

# A decoded value. Tables keep insertion order; a repeated key keeps the
# position of its first assignment and the value of its last.
Value = Union[str, int, float, bool, None, datetime, list["Value"], dict[str, "Value"]]
Table = dict[str, Value]


class AttrTable(dict):
    """
    Table with attribute-style access to its entries.

    Usage:
        doc = tomlike.decode(text, attribute_access=True)
        doc.server.port          # doc["server"]["port"]
        doc.server.port = 8080   # doc["server"]["port"] = 8080
        doc.key_items            # doc["items"] (name taken by dict.items)

    Attribute names starting with ATTRIBUTE_ESCAPE_PREFIX always have it
    stripped once, so doc.key_key_x reaches doc["key_x"]. Keys that are not
    identifiers (e.g. "max-size") are still reachable with getattr() or
    plain item access.
    """

    __slots__ = ()

    @staticmethod
    def _key(name: str) -> str:
        if name.startswith(ATTRIBUTE_ESCAPE_PREFIX):
            return name[len(ATTRIBUTE_ESCAPE_PREFIX):]
        return name

    def __getattr__(self, name: str) -> Any:
        # Only reached when regular lookup fails, so dict methods win
        try:
            return self[self._key(name)]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__!s} has no entry {self._key(name)!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        self[self._key(name)] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self[self._key(name)]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__!s} has no entry {self._key(name)!r}"
            ) from None

    def __dir__(self) -> list[str]:
        names = set(super().__dir__())
        names.update(k for k in self if isinstance(k, str) and k.isidentifier())
        return sorted(names)

    def __repr__(self) -> str:
        return f"AttrTable({dict.__repr__(self)})"
