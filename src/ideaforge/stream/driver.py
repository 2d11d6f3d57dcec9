"""Drive a streamed chat response into content/thinking callbacks."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Callable, Protocol

from ideaforge.types import ProviderKind

from .frames import decode_event
from .line_buffer import LineBuffer

_logger = logging.getLogger(__name__)

DeltaCallback = Callable[[str], Any]
DoneCallback = Callable[[], Any]


class ByteStream(Protocol):
    """The part of ``httpx.Response`` the driver relies on."""

    def aiter_bytes(self) -> AsyncIterator[bytes]: ...

    async def aclose(self) -> None: ...


class StreamDriver:
    """Consume one response body for a given provider kind.

    Each ``run`` owns the response: it is closed exactly once when ``run``
    returns or raises.  ``on_done`` is called exactly once when the stream
    ends normally, either on the provider's end marker or when the
    transport closes.  If reading raises, ``on_done`` is not called and the
    exception propagates to the caller.
    """

    def __init__(self, kind: ProviderKind) -> None:
        self.kind = kind

    async def run(
        self,
        response: ByteStream,
        on_content: DeltaCallback,
        on_thinking: DeltaCallback,
        on_done: DoneCallback,
    ) -> None:
        buffer = LineBuffer()
        _logger.debug("--- Stream %s: START ---", self.kind.value)
        try:
            async for chunk in response.aiter_bytes():
                if self._dispatch(buffer.feed(chunk), on_content, on_thinking):
                    _logger.debug("--- Stream %s: END (marker) ---", self.kind.value)
                    on_done()
                    return
            # Transport closed; the tail may still hold a final line
            self._dispatch(buffer.finish(), on_content, on_thinking)
            _logger.debug("--- Stream %s: END (closed) ---", self.kind.value)
            on_done()
        finally:
            await response.aclose()

    def _dispatch(
        self,
        lines: list[str],
        on_content: DeltaCallback,
        on_thinking: DeltaCallback,
    ) -> bool:
        """Emit deltas for *lines*; return True as soon as one is terminal."""
        for line in lines:
            if not line.strip():
                continue
            event = decode_event(line, self.kind)
            if event.is_empty:
                continue
            if event.content_delta:
                on_content(event.content_delta)
            if event.thinking_delta:
                on_thinking(event.thinking_delta)
            if event.is_terminal:
                return True
        return False


async def run_stream(
    response: ByteStream,
    kind: ProviderKind,
    on_content: DeltaCallback,
    on_thinking: DeltaCallback,
    on_done: DoneCallback,
) -> None:
    """Shorthand for ``StreamDriver(kind).run(...)``."""
    await StreamDriver(kind).run(response, on_content, on_thinking, on_done)
