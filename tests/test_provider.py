"""Tests for request construction per provider kind."""

from __future__ import annotations

import pytest

from ideaforge.config import HOSTED_CHAT_URL, ProviderProfile
from ideaforge.llm.provider import build_request, chat_url
from ideaforge.types import ProviderKind


@pytest.fixture
def hosted() -> ProviderProfile:
    return ProviderProfile(
        kind=ProviderKind.HOSTED,
        url=HOSTED_CHAT_URL,
        api_key="sk-test",
        models=["gpt-3.5-turbo"],
    )


@pytest.fixture
def self_hosted() -> ProviderProfile:
    return ProviderProfile(url="http://gpu-box:11434/", models=["qwen3:8b"])


class TestHosted:
    def test_url_and_auth(self, hosted: ProviderProfile):
        spec = build_request(hosted, "gpt-3.5-turbo", "hello")
        assert spec.url == "https://api.openai.com/v1/chat/completions"
        assert spec.headers["Authorization"] == "Bearer sk-test"
        assert spec.headers["Content-Type"] == "application/json"

    def test_body_fields(self, hosted: ProviderProfile):
        spec = build_request(hosted, "gpt-3.5-turbo", "hello", max_tokens=123, temperature=0.5)
        assert spec.body == {
            "model": "gpt-3.5-turbo",
            "messages": [{"role": "user", "content": "hello"}],
            "temperature": 0.5,
            "stream": True,
            "max_completion_tokens": 123,
        }

    @pytest.mark.parametrize("reasoning", [True, False])
    def test_reasoning_never_sent(self, hosted: ProviderProfile, reasoning: bool):
        spec = build_request(hosted, "m", "p", reasoning=reasoning)
        assert "think" not in spec.body
        assert "max_tokens" not in spec.body

    def test_missing_key_rejected(self, hosted: ProviderProfile):
        hosted.api_key = ""
        with pytest.raises(ValueError, match="API key"):
            build_request(hosted, "m", "p")


class TestSelfHosted:
    def test_url_appends_api_chat(self, self_hosted: ProviderProfile):
        assert chat_url(self_hosted) == "http://gpu-box:11434/api/chat"

    def test_no_credential(self, self_hosted: ProviderProfile):
        spec = build_request(self_hosted, "qwen3:8b", "hello")
        assert "Authorization" not in spec.headers

    def test_body_fields(self, self_hosted: ProviderProfile):
        spec = build_request(self_hosted, "qwen3:8b", "hello", reasoning=True, max_tokens=50)
        assert spec.body["max_tokens"] == 50
        assert "max_completion_tokens" not in spec.body
        assert spec.body["think"] is True
        assert spec.body["stream"] is True

    def test_think_false_included(self, self_hosted: ProviderProfile):
        spec = build_request(self_hosted, "qwen3:8b", "hello", reasoning=False)
        assert spec.body["think"] is False

    def test_spec_is_immutable(self, self_hosted: ProviderProfile):
        spec = build_request(self_hosted, "qwen3:8b", "hello")
        with pytest.raises(AttributeError):
            spec.url = "http://elsewhere"
