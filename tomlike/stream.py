"""
Tomlike Character Source - One lazy character stream for every input shape.

Inputs:
    "a = 1\\n"                     <- Text, consumed verbatim
    [b"a = \\xf0\\x9f", b"\\x98\\x80"] <- Byte chunks, decoded as UTF-8 incrementally
    ["a = ", "1\\n"]               <- Text chunks, consumed verbatim
    open("cfg.tl", "rb")          <- Any iterable of chunks (binary or text)
    async for chunk in stream     <- Drained first, then treated like a chunk list

The text/bytes decision is made once, from the first chunk. Byte chunks
go through an incremental UTF-8 decoder, so a multi-byte character split
across two chunks is held back until its remaining bytes arrive. A byte
sequence that is malformed on its own still raises UnicodeDecodeError.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import AsyncIterable, Iterable, Iterator

from tomlike.syntax import ConfigError, describe

logger = logging.getLogger(__name__)

_BINARY_TYPES = (bytes, bytearray, memoryview)


def iter_chunks(chunks: Iterable[str | bytes]) -> Iterator[str]:
    """Yield characters from an iterable of text or byte chunks."""
    decoder = None
    binary: bool | None = None
    for chunk in chunks:
        if binary is None:
            if isinstance(chunk, str):
                binary = False
            elif isinstance(chunk, _BINARY_TYPES):
                binary = True
                decoder = codecs.getincrementaldecoder("utf-8")()
            else:
                raise ConfigError(f"chunk {describe(chunk)} invalid (text or bytes expected)")
            logger.debug("reading %s chunks", "byte" if binary else "text")

        if binary:
            if not isinstance(chunk, _BINARY_TYPES):
                raise ConfigError(f"chunk {describe(chunk)} invalid (bytes expected)")
            yield from decoder.decode(bytes(chunk))
        else:
            if not isinstance(chunk, str):
                raise ConfigError(f"chunk {describe(chunk)} invalid (text expected)")
            yield from chunk

    if decoder is not None:
        # Flush: a sequence still incomplete at end of input is an error
        yield from decoder.decode(b"", final=True)


async def accumulate_chunks(stream: AsyncIterable[str | bytes]) -> list[str | bytes]:
    """Drain an async stream into a list of chunks."""
    chunks = []
    async for chunk in stream:
        chunks.append(chunk)
    return chunks


class CharacterSource:
    """
    Cursor over a character iterator.

    read() returns the next character, or "" once the input is exhausted
    (and keeps returning "" after that). The source cannot be restarted.
    """

    def __init__(self, characters: Iterable[str]) -> None:
        self._characters = iter(characters)
        self._done = False
        self.consumed = 0

    @classmethod
    def from_text(cls, text: str) -> CharacterSource:
        return cls(text)

    @classmethod
    def from_chunks(cls, chunks: Iterable[str | bytes]) -> CharacterSource:
        return cls(iter_chunks(chunks))

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> CharacterSource:
        return cls(iter_chunks([bytes(data)]))

    def read(self) -> str:
        if self._done:
            return ""
        try:
            char = next(self._characters)
        except StopIteration:
            self._done = True
            return ""
        self.consumed += 1
        return char

    @property
    def exhausted(self) -> bool:
        return self._done
