"""Tests for ideaforge config loading."""

from pathlib import Path

import pytest
import yaml

from ideaforge.config import (
    HOSTED_CHAT_URL,
    SELF_HOSTED_URL,
    IdeaforgeConfig,
    ProviderProfile,
    load_config,
)
from ideaforge.types import ProviderKind


class TestProviderProfile:
    def test_defaults(self):
        p = ProviderProfile()
        assert p.kind is ProviderKind.SELF_HOSTED
        assert p.url == SELF_HOSTED_URL
        assert p.default_model == "qwen3:8b"

    def test_default_model_empty(self):
        assert ProviderProfile(models=[]).default_model == ""


class TestIdeaforgeConfig:
    def test_defaults(self):
        cfg = IdeaforgeConfig()
        assert cfg.provider == "local"
        assert cfg.temperature == 0.8
        assert cfg.max_tokens == 2000
        assert cfg.think is True

    def test_active_profile_fallback(self):
        cfg = IdeaforgeConfig(provider="nonexistent")
        assert cfg.active_profile.kind is ProviderKind.SELF_HOSTED


class TestProviderKind:
    @pytest.mark.parametrize("text,kind", [
        ("hosted", ProviderKind.HOSTED),
        ("OpenAI", ProviderKind.HOSTED),
        ("selfhosted", ProviderKind.SELF_HOSTED),
        ("ollama", ProviderKind.SELF_HOSTED),
    ])
    def test_parse(self, text, kind):
        assert ProviderKind.parse(text) is kind

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown provider kind"):
            ProviderKind.parse("gemini")


class TestLoadConfig:
    def test_defaults_when_no_file(self, tmp_path):
        cfg = load_config(tmp_path / "does_not_exist.yaml")
        assert cfg.provider == "local"
        assert set(cfg.profiles) == {"local", "openai"}
        assert cfg.profiles["openai"].url == HOSTED_CHAT_URL

    def test_search_paths_none_found(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("ideaforge.config._SEARCH_PATHS", [tmp_path / "missing.yaml"])
        cfg = load_config()
        assert cfg.profiles["local"].kind is ProviderKind.SELF_HOSTED

    def test_load_from_file(self, tmp_path):
        data = {
            "provider": "gpu",
            "temperature": 0.4,
            "max_tokens": 1500,
            "think": False,
            "read_timeout": None,
            "idea_count": 5,
            "profiles": {
                "gpu": {"kind": "selfhosted", "url": "http://gpu:11434", "models": ["qwen3:32b"]},
                "cloud": {"kind": "hosted", "api_key": "sk-abc", "models": ["gpt-4o-mini"]},
            },
        }
        path = tmp_path / "ideaforge.yaml"
        path.write_text(yaml.dump(data))

        cfg = load_config(path)
        assert cfg.provider == "gpu"
        assert cfg.temperature == 0.4
        assert cfg.max_tokens == 1500
        assert cfg.think is False
        assert cfg.read_timeout is None
        assert cfg.idea_count == 5
        assert cfg.active_profile.url == "http://gpu:11434"
        assert cfg.profiles["cloud"].kind is ProviderKind.HOSTED
        assert cfg.profiles["cloud"].url == HOSTED_CHAT_URL
        assert cfg.profiles["cloud"].api_key == "sk-abc"

    def test_hosted_key_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        path = tmp_path / "ideaforge.yaml"
        path.write_text(yaml.dump({"profiles": {"cloud": {"kind": "openai"}}}))
        cfg = load_config(path)
        assert cfg.provider == "cloud"
        assert cfg.active_profile.api_key == "sk-env"
        assert cfg.active_profile.models == ["gpt-3.5-turbo"]

    def test_invalid_kind(self, tmp_path):
        path = tmp_path / "ideaforge.yaml"
        path.write_text(yaml.dump({"profiles": {"x": {"kind": "gemini"}}}))
        with pytest.raises(ValueError):
            load_config(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "ideaforge.yaml"
        path.write_text("")
        cfg = load_config(Path(path))
        assert cfg.provider == "local"
        assert cfg.max_tokens == 2000

    def test_scalar_models_wrapped(self, tmp_path):
        path = tmp_path / "ideaforge.yaml"
        path.write_text("profiles:\n  box:\n    models: qwen3:8b\n")
        cfg = load_config(path)
        assert cfg.active_profile.models == ["qwen3:8b"]
        assert cfg.active_profile.default_model == "qwen3:8b"

    def test_null_url_uses_default(self, tmp_path):
        path = tmp_path / "ideaforge.yaml"
        path.write_text(
            "profiles:\n  box:\n    url: null\n  cloud:\n    kind: hosted\n    url:\n"
        )
        cfg = load_config(path)
        assert cfg.profiles["box"].url == SELF_HOSTED_URL
        assert cfg.profiles["cloud"].url == HOSTED_CHAT_URL
