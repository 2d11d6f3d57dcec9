"""Async streaming client for hosted and self-hosted chat backends.

Uses ``httpx.AsyncClient``.  ``send()`` opens a streamed response (retrying
once without reasoning when a self-hosted model rejects it) and
``stream()`` feeds that response through :class:`StreamDriver`.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from ideaforge.config import IdeaforgeConfig, ProviderProfile
from ideaforge.stream.driver import DeltaCallback, DoneCallback, StreamDriver
from ideaforge.types import (
    AttemptOutcome,
    Fatal,
    Opened,
    ProviderKind,
    RequestFailed,
    RequestSpec,
    Retryable,
)

from .provider import build_request

_logger = logging.getLogger(__name__)

# Error text a self-hosted server returns for models without reasoning output
_THINKING_UNSUPPORTED = "does not support thinking"

_PREVIEW_CHARS = 80


def _decode_error_body(raw: bytes) -> Any:
    text = raw.decode(errors="replace")
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _redact(headers: dict[str, str]) -> dict[str, str]:
    return {
        k: ("Bearer ***" if k.lower() == "authorization" else v)
        for k, v in headers.items()
    }


def classify_failure(failure: RequestFailed) -> Retryable | Fatal:
    """Decide whether a failed reasoning attempt may be retried without it.

    Only the literal server message about missing thinking support counts;
    everything else is fatal.
    """
    err = failure.error_text
    if err is not None and _THINKING_UNSUPPORTED in err:
        return Retryable(reason=err, failure=failure)
    return Fatal(failure=failure)


class IdeaClient:
    """Client bound to one provider profile."""

    def __init__(
        self,
        profile: ProviderProfile,
        *,
        temperature: float = 0.8,
        max_tokens: int = 2000,
        timeout: float = 120,
        connect_timeout: float = 30,
        read_timeout: float | None = 300,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.profile = profile
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=connect_timeout, read=read_timeout),
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: IdeaforgeConfig,
        profile: ProviderProfile | None = None,
        **kwargs: Any,
    ) -> IdeaClient:
        return cls(
            profile or config.active_profile,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            **kwargs,
        )

    @property
    def kind(self) -> ProviderKind:
        return self.profile.kind

    # ------------------------------------------------------------------
    # Single attempt
    # ------------------------------------------------------------------

    async def _attempt(self, spec: RequestSpec, reasoning: bool) -> AttemptOutcome:
        payload = json.dumps(spec.body)
        _logger.info(">>> POST %s", spec.url)
        _logger.debug("Request headers: %s", _redact(spec.headers))
        _logger.debug(
            "Request body (%d bytes) - preview: %r",
            len(payload), payload[:_PREVIEW_CHARS],
        )

        start = time.monotonic()
        request = self._client.build_request(
            "POST", spec.url, headers=spec.headers, content=payload,
        )
        try:
            resp = await self._client.send(request, stream=True)
        except httpx.TransportError as e:
            _logger.error("Request to %s failed: %s", spec.url, e)
            return Fatal(failure=RequestFailed(None, str(e)))

        latency = (time.monotonic() - start) * 1000
        _logger.info("<<< %d %s - %.1f ms", resp.status_code, resp.reason_phrase, latency)
        _logger.debug(
            "Response headers:\n%s",
            "\n".join(f"{k}: {v}" for k, v in resp.headers.items()),
        )

        if resp.is_success:
            return Opened(response=resp)

        try:
            raw = await resp.aread()
        except httpx.TransportError as e:
            _logger.error("Reading error body from %s failed: %s", spec.url, e)
            return Fatal(failure=RequestFailed(resp.status_code, str(e)))
        finally:
            await resp.aclose()
        failure = RequestFailed(resp.status_code, _decode_error_body(raw))
        _logger.error("Error body: %s", json.dumps(failure.body))

        if not reasoning:
            return Fatal(failure=failure)
        return classify_failure(failure)

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    async def send(
        self,
        model: str,
        prompt: str,
        reasoning: bool = False,
    ) -> httpx.Response:
        """Open a streamed chat response.

        Reasoning is only requested from self-hosted providers.  If the
        server rejects it for this model the request is re-issued once with
        reasoning off; no other failure is retried.

        Raises
        ------
        RequestFailed
            When the final attempt does not return a 2xx status.
        """
        reasoning = reasoning and self.kind is ProviderKind.SELF_HOSTED

        outcome = await self._attempt(self._build(model, prompt, reasoning), reasoning)
        if isinstance(outcome, Retryable):
            _logger.info("Thinking unsupported (%s) - retrying with think=false", outcome.reason)
            outcome = await self._attempt(self._build(model, prompt, False), False)

        if isinstance(outcome, Opened):
            return outcome.response
        raise outcome.failure

    async def stream(
        self,
        model: str,
        prompt: str,
        on_content: DeltaCallback,
        on_thinking: DeltaCallback,
        on_done: DoneCallback,
        reasoning: bool = False,
    ) -> None:
        """Send *prompt* and deliver the streamed reply through callbacks."""
        response = await self.send(model, prompt, reasoning=reasoning)
        await StreamDriver(self.kind).run(response, on_content, on_thinking, on_done)

    def _build(self, model: str, prompt: str, reasoning: bool) -> RequestSpec:
        return build_request(
            self.profile,
            model,
            prompt,
            stream=True,
            reasoning=reasoning,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def list_models(self) -> list[str]:
        """Return model names installed on a self-hosted server."""
        if self.kind is not ProviderKind.SELF_HOSTED:
            return list(self.profile.models)
        url = f"{self.profile.url.rstrip('/')}/api/tags"
        _logger.info("Fetching models from %s", url)
        try:
            resp = await self._client.get(url)
        except httpx.TransportError as e:
            raise RequestFailed(None, str(e)) from e
        if not resp.is_success:
            raise RequestFailed(resp.status_code, _decode_error_body(resp.content))
        try:
            data = resp.json()
        except json.JSONDecodeError as e:
            raise RequestFailed(resp.status_code, resp.text) from e
        models = data.get("models") if isinstance(data, dict) else None
        names = [
            m["name"] for m in models or []
            if isinstance(m, dict) and isinstance(m.get("name"), str)
        ]
        _logger.info("Fetched %d models", len(names))
        return names

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
