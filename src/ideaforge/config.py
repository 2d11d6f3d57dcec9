"""Configuration for ideaforge.

Config discovery (first match wins):
  1. ``--config`` flag
  2. ``./ideaforge.yaml``
  3. ``~/.config/ideaforge/config.yaml``
  4. Built-in defaults
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ideaforge.types import ProviderKind

_logger = logging.getLogger(__name__)

HOSTED_CHAT_URL = "https://api.openai.com/v1/chat/completions"
SELF_HOSTED_URL = "http://localhost:11434"


# ---------------------------------------------------------------------------
# Config data structures
# ---------------------------------------------------------------------------

@dataclass
class ProviderProfile:
    """A named backend.

    For hosted profiles ``url`` is the full chat-completions endpoint; for
    self-hosted profiles it is the server base URL (``/api/chat`` is
    appended when requests are built).
    """

    kind: ProviderKind = ProviderKind.SELF_HOSTED
    url: str = SELF_HOSTED_URL
    api_key: str = ""
    models: list[str] = field(default_factory=lambda: ["qwen3:8b"])

    @property
    def default_model(self) -> str:
        return self.models[0] if self.models else ""


@dataclass
class IdeaforgeConfig:
    """Top-level config."""

    # Active profile name
    provider: str = "local"

    profiles: dict[str, ProviderProfile] = field(
        default_factory=lambda: {"local": ProviderProfile()}
    )

    # Request shaping
    temperature: float = 0.8
    max_tokens: int = 2000
    think: bool = True

    # Transport (seconds); read_timeout None waits on a silent stream forever
    timeout: float = 120
    connect_timeout: float = 30
    read_timeout: float | None = 300

    # Prompts
    idea_count: int = 3
    idea_template: str | None = None
    market_template: str | None = None

    @property
    def active_profile(self) -> ProviderProfile:
        return self.profiles.get(self.provider, ProviderProfile())


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

_SEARCH_PATHS = [
    Path("./ideaforge.yaml"),
    Path.home() / ".config" / "ideaforge" / "config.yaml",
]


def _parse_profile(raw: dict[str, Any]) -> ProviderProfile:
    kind = ProviderKind.parse(raw.get("kind", "selfhosted"))
    default_url = HOSTED_CHAT_URL if kind is ProviderKind.HOSTED else SELF_HOSTED_URL
    api_key = raw.get("api_key") or ""
    if kind is ProviderKind.HOSTED and not api_key:
        api_key = os.environ.get("OPENAI_API_KEY", "")
    models = raw.get("models")
    if isinstance(models, str):
        models = [models]
    if not models:
        models = ["gpt-3.5-turbo"] if kind is ProviderKind.HOSTED else ["qwen3:8b"]
    return ProviderProfile(
        kind=kind,
        url=raw.get("url") or default_url,
        api_key=api_key,
        models=list(models),
    )


def default_profiles() -> dict[str, ProviderProfile]:
    """Profiles used when the config file defines none."""
    return {
        "local": ProviderProfile(),
        "openai": _parse_profile({"kind": "hosted"}),
    }


def load_config(path: str | Path | None = None) -> IdeaforgeConfig:
    """Load configuration from YAML.

    Parameters
    ----------
    path:
        Explicit config path.  If *None*, search default locations.

    Returns
    -------
    IdeaforgeConfig
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            _logger.warning("Config file not found: %s - using defaults", path)
            return IdeaforgeConfig(profiles=default_profiles())
    else:
        for candidate in _SEARCH_PATHS:
            if candidate.exists():
                config_path = candidate
                break

    if config_path is None:
        _logger.info("No config file found - using defaults")
        return IdeaforgeConfig(profiles=default_profiles())

    _logger.info("Loading config from %s", config_path)
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    profiles: dict[str, ProviderProfile] = {}
    for name, praw in (raw.get("profiles") or {}).items():
        profiles[name] = _parse_profile(praw or {})
    if not profiles:
        profiles = default_profiles()

    defaults = IdeaforgeConfig()
    return IdeaforgeConfig(
        provider=raw.get("provider", next(iter(profiles))),
        profiles=profiles,
        temperature=raw.get("temperature", defaults.temperature),
        max_tokens=raw.get("max_tokens", defaults.max_tokens),
        think=raw.get("think", defaults.think),
        timeout=raw.get("timeout", defaults.timeout),
        connect_timeout=raw.get("connect_timeout", defaults.connect_timeout),
        read_timeout=raw.get("read_timeout", defaults.read_timeout),
        idea_count=raw.get("idea_count", defaults.idea_count),
        idea_template=raw.get("idea_template"),
        market_template=raw.get("market_template"),
    )
