"""Reassemble complete text lines from arbitrarily split network chunks."""

from __future__ import annotations

import codecs


class LineBuffer:
    """Accumulate byte/text chunks and hand back complete lines.

    Decoding is incremental: a multi-byte UTF-8 sequence split across two
    chunks is held in the decoder until the rest arrives.  The unterminated
    tail of the data seen so far is kept in ``pending`` until a newline (or
    the end of the stream) completes it.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: bytes | str) -> list[str]:
        """Add *chunk* and return every line it completed (without ``\\n``)."""
        if isinstance(chunk, bytes):
            text = self._decoder.decode(chunk)
        else:
            text = chunk
        if not text:
            return []
        parts = (self._pending + text).split("\n")
        self._pending = parts.pop()
        return parts

    def finish(self) -> list[str]:
        """Flush at end of stream.

        Returns the held tail as a final line when it has non-blank content,
        otherwise nothing.  The buffer is empty afterwards.
        """
        tail = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        self._decoder.reset()
        if tail.strip():
            return [tail]
        return []
