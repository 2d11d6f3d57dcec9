"""Build outbound chat requests for each provider kind."""

from __future__ import annotations

from typing import Any

from ideaforge.config import ProviderProfile
from ideaforge.types import ProviderKind, RequestSpec

# Token-limit field name per provider schema
_TOKEN_LIMIT_FIELD = {
    ProviderKind.HOSTED: "max_completion_tokens",
    ProviderKind.SELF_HOSTED: "max_tokens",
}


def chat_url(profile: ProviderProfile) -> str:
    if profile.kind is ProviderKind.HOSTED:
        return profile.url
    return f"{profile.url.rstrip('/')}/api/chat"


def build_request(
    profile: ProviderProfile,
    model: str,
    prompt: str,
    *,
    stream: bool = True,
    reasoning: bool = False,
    temperature: float = 0.8,
    max_tokens: int = 2000,
) -> RequestSpec:
    """Return the :class:`RequestSpec` for one attempt.

    Hosted requests never carry the reasoning flag; asking for it is not an
    error, it is just left out.
    """
    kind = profile.kind
    headers = {"Content-Type": "application/json"}
    if kind is ProviderKind.HOSTED:
        if not profile.api_key:
            raise ValueError("Hosted provider requires an API key (set api_key or OPENAI_API_KEY)")
        headers["Authorization"] = f"Bearer {profile.api_key}"

    body: dict[str, Any] = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": temperature,
        "stream": stream,
        _TOKEN_LIMIT_FIELD[kind]: max_tokens,
    }
    if kind is ProviderKind.SELF_HOSTED:
        body["think"] = bool(reasoning)

    return RequestSpec(url=chat_url(profile), headers=headers, body=body)
