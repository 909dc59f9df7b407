"""
Tests for LLM routing, error classification and response parsing.
"""

import asyncio

import anthropic
import httpx
import pytest

from relief_engine.services.llm_errors import (
    ErrorCategory,
    LLMError,
    classify_scoring_error,
)
from relief_engine.services.llm_provider import LLMResponse, LLMRouter
from relief_engine.services.settings import LLMSettings
from relief_engine.utils.llm_parsing import extract_list, parse_llm_json


class FakeProvider:
    def __init__(self, name, fail=False):
        self.name = name
        self.fail = fail
        self.calls = []

    def is_available(self):
        return not self.fail

    def call(self, system_prompt, user_message, model, max_tokens, timeout=None):
        self.calls.append((model, max_tokens, timeout))
        if self.fail:
            raise RuntimeError(f"{self.name} down")
        return LLMResponse(text="{}", provider=self.name, model=model)


def router_with(settings, anthropic_fails=False, ollama_fails=False):
    router = LLMRouter(settings)
    router._providers = {
        "anthropic": FakeProvider("anthropic", anthropic_fails),
        "ollama": FakeProvider("ollama", ollama_fails),
    }
    return router


class TestRouter:

    def test_primary_provider(self):
        router = router_with(LLMSettings(provider="anthropic", model="m1", max_tokens=500))
        response = router.call("sys", "msg", timeout=3.0)
        assert response.provider == "anthropic"
        assert router.get_provider("anthropic").calls == [("m1", 500, 3.0)]

    def test_fallback_provider(self):
        settings = LLMSettings(provider="anthropic", model="m1", fallback_provider="ollama", fallback_model="llama3.1")
        router = router_with(settings, anthropic_fails=True)
        response = router.call("sys", "msg")
        assert response.provider == "ollama"
        assert response.model == "llama3.1"

    def test_no_fallback_reraises(self):
        router = router_with(LLMSettings(provider="anthropic"), anthropic_fails=True)
        with pytest.raises(RuntimeError):
            router.call("sys", "msg")

    def test_both_fail(self):
        settings = LLMSettings(provider="anthropic", fallback_provider="ollama")
        router = router_with(settings, anthropic_fails=True, ollama_fails=True)
        with pytest.raises(RuntimeError, match="ollama down"):
            router.call("sys", "msg")

    def test_unknown_provider(self):
        router = router_with(LLMSettings(provider="mystery"))
        with pytest.raises(ValueError):
            router.call("sys", "msg")

    def test_provider_status(self):
        router = router_with(LLMSettings(), ollama_fails=True)
        assert router.provider_status() == {"anthropic": True, "ollama": False}


class TestClassifyScoringError:

    def test_llm_error_passes_through(self):
        err = LLMError(ErrorCategory.PARTIAL, "invalid_json", "bad", "stub")
        assert classify_scoring_error(err, "other") is err

    def test_timeout(self):
        err = classify_scoring_error(asyncio.TimeoutError(), "llm")
        assert err.category == ErrorCategory.TRANSIENT
        assert err.error_code == "timeout"
        assert err.retryable is True

    def test_bad_payload(self):
        err = classify_scoring_error(KeyError("offerId"), "llm")
        assert err.category == ErrorCategory.PARTIAL
        assert err.error_code == "invalid_response"

    def test_unknown(self):
        err = classify_scoring_error(RuntimeError("boom"), "llm")
        assert err.category == ErrorCategory.TRANSIENT
        assert err.error_code == "unknown"
        assert "boom" in str(err)

    def test_anthropic_sdk_timeout(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        err = classify_scoring_error(anthropic.APITimeoutError(request=request), "llm")
        assert err.provider == "anthropic"
        assert err.error_code == "timeout"
        assert err.category == ErrorCategory.TRANSIENT

    def test_anthropic_sdk_connection_error(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        err = classify_scoring_error(anthropic.APIConnectionError(request=request), "llm")
        assert err.error_code == "connection_error"


class TestParsing:

    @pytest.mark.parametrize("text", [
        '{"matches": []}',
        '```json\n{"matches": []}\n```',
        '```\n{"matches": []}\n```',
        '  {"matches": []}  ',
    ])
    def test_parse_llm_json(self, text):
        assert parse_llm_json(text) == {"matches": []}

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_llm_json("")

    def test_extract_list(self):
        assert extract_list([1, 2], "matches") == [1, 2]
        assert extract_list({"matches": [3]}, "matches") == [3]
        with pytest.raises(ValueError):
            extract_list({"matches": "nope"}, "matches")
        with pytest.raises(ValueError):
            extract_list(42, "matches")
