"""Frame parsing and event classification for both streaming dialects.

Hosted lines look like ``data: {...}`` and end with ``data: [DONE]``.
Self-hosted lines are bare JSON objects and end with ``{"done": true}``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from ideaforge.types import ParsedEvent, ProviderKind

_logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
HOSTED_SENTINEL = "data: [DONE]"

# Reasoning trace field names, in lookup order
_THINKING_KEYS = ("thinking", "reasoning_content", "reasoning")


# ---------------------------------------------------------------------------
# Frame parser
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Frame:
    """One decoded line.  ``payload`` is whatever JSON value the line held."""

    payload: Any
    prefixed: bool = False


@dataclass(frozen=True)
class Sentinel:
    """The hosted end-of-stream marker."""


@dataclass(frozen=True)
class MalformedLine:
    """A line that could not be decoded as JSON."""

    line: str
    error: str


def parse_line(line: str) -> Frame | Sentinel | MalformedLine:
    """Decode one complete, non-blank line.

    The sentinel is recognised before any JSON decoding is attempted.
    """
    text = line.strip()
    if text == HOSTED_SENTINEL:
        return Sentinel()

    prefixed = text.startswith(DATA_PREFIX)
    raw = text[len(DATA_PREFIX):] if prefixed else text
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        return MalformedLine(line=text, error=str(e))
    return Frame(payload=payload, prefixed=prefixed)


# ---------------------------------------------------------------------------
# Event classifier
# ---------------------------------------------------------------------------

def _message_of(payload: dict[str, Any], kind: ProviderKind) -> dict[str, Any]:
    if kind is ProviderKind.SELF_HOSTED:
        msg = payload.get("message")
    else:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return {}
        first = choices[0]
        msg = first.get("delta") if isinstance(first, dict) else None
    return msg if isinstance(msg, dict) else {}


def _string_field(msg: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = msg.get(key)
        if isinstance(value, str):
            return value or None
    return None


def classify(payload: Any, kind: ProviderKind) -> ParsedEvent:
    """Turn a decoded frame payload into a :class:`ParsedEvent`.

    Self-hosted frames end the stream with ``"done": true``; hosted frames
    never do (only the line-level sentinel ends a hosted stream).  Anything
    that is not a JSON object, or lacks the expected fields, yields an
    empty event.
    """
    if not isinstance(payload, dict):
        return ParsedEvent.EMPTY

    msg = _message_of(payload, kind)
    content = _string_field(msg, "content")
    thinking = _string_field(msg, *_THINKING_KEYS)
    terminal = kind is ProviderKind.SELF_HOSTED and payload.get("done") is True

    if content is None and thinking is None:
        return ParsedEvent.TERMINAL if terminal else ParsedEvent.EMPTY
    return ParsedEvent(
        content_delta=content,
        thinking_delta=thinking,
        is_terminal=terminal,
    )


def decode_event(line: str, kind: ProviderKind) -> ParsedEvent:
    """Parse and classify *line*; malformed lines are logged and ignored."""
    frame = parse_line(line)
    if isinstance(frame, Sentinel):
        return ParsedEvent.TERMINAL
    if isinstance(frame, MalformedLine):
        _logger.warning("Invalid JSON line skipped: %s (%s)", frame.line, frame.error)
        return ParsedEvent.EMPTY
    if frame.prefixed != (kind is ProviderKind.HOSTED):
        _logger.debug(
            "%s frame on a %s stream: %.80s",
            "Prefixed" if frame.prefixed else "Unprefixed", kind.value, line,
        )
    return classify(frame.payload, kind)
