"""Shared data types for ideaforge."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, ClassVar


# ---------------------------------------------------------------------------
# Provider types
# ---------------------------------------------------------------------------

class ProviderKind(enum.Enum):
    """Which backend a request goes to.

    HOSTED is the credentialed vendor API streaming ``data: `` frames;
    SELF_HOSTED is a local inference server streaming one JSON object per line.
    """

    HOSTED = "hosted"
    SELF_HOSTED = "selfhosted"

    @classmethod
    def parse(cls, value: str | ProviderKind) -> ProviderKind:
        if isinstance(value, ProviderKind):
            return value
        key = str(value).strip().lower()
        aliases = {
            "hosted": cls.HOSTED,
            "openai": cls.HOSTED,
            "selfhosted": cls.SELF_HOSTED,
            "self_hosted": cls.SELF_HOSTED,
            "ollama": cls.SELF_HOSTED,
        }
        try:
            return aliases[key]
        except KeyError:
            raise ValueError(f"Unknown provider kind: {value!r}") from None


@dataclass(frozen=True)
class RequestSpec:
    """Everything needed to issue one HTTP attempt."""

    url: str
    headers: dict[str, str]
    body: dict[str, Any]


# ---------------------------------------------------------------------------
# Stream types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParsedEvent:
    """Result of classifying one stream line."""

    content_delta: str | None = None
    thinking_delta: str | None = None
    is_terminal: bool = False

    TERMINAL: ClassVar[ParsedEvent]
    EMPTY: ClassVar[ParsedEvent]

    @property
    def is_empty(self) -> bool:
        return (
            not self.content_delta
            and not self.thinking_delta
            and not self.is_terminal
        )


ParsedEvent.TERMINAL = ParsedEvent(is_terminal=True)
ParsedEvent.EMPTY = ParsedEvent()


# ---------------------------------------------------------------------------
# Failures and attempt outcomes
# ---------------------------------------------------------------------------

class RequestFailed(Exception):
    """A request that did not open a stream.

    ``status`` is the HTTP status code, or ``None`` when the failure happened
    below HTTP (connection refused, DNS, ...).  ``body`` is the decoded JSON
    error body when it parses, otherwise the raw text.
    """

    def __init__(self, status: int | None, body: Any) -> None:
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status if status is not None else 'error'}: {body!r}")

    @property
    def error_text(self) -> str | None:
        """The ``error`` field of a JSON error body, if it is a string."""
        if isinstance(self.body, dict):
            err = self.body.get("error")
            if isinstance(err, str):
                return err
        return None


@dataclass
class Opened:
    """The attempt succeeded and ``response`` is an open stream."""

    response: Any  # httpx.Response


@dataclass
class Retryable:
    """The attempt failed in a way that a feature-reduced retry can fix."""

    reason: str
    failure: RequestFailed


@dataclass
class Fatal:
    """The attempt failed and must be surfaced unchanged."""

    failure: RequestFailed


AttemptOutcome = Opened | Retryable | Fatal


# ---------------------------------------------------------------------------
# Ideation inputs
# ---------------------------------------------------------------------------

@dataclass
class IdeaParams:
    """Project constraints collected from the user."""

    problem: str = ""
    budget: str = ""
    complexity: str = "Intermediate"
    innovation: int = 5
    technologies: list[str] = field(default_factory=list)
