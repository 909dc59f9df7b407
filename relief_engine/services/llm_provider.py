"""
Multi-LLM provider abstraction.

Routes LLM calls to Anthropic Claude or local Ollama (via OpenAI-compatible API),
with an optional fallback provider.  Used by the external match scorer.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

from .settings import LLMSettings, DEFAULT_LLM_MODEL

logger = logging.getLogger(__name__)


def _timeout_kwargs(timeout: Optional[float]) -> dict:
    # Omit the argument so the SDK default applies
    return {"timeout": timeout} if timeout is not None else {}


@dataclass
class LLMResponse:
    """Unified response from any LLM provider."""
    text: str
    provider: str
    model: str
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    latency_ms: Optional[int] = None


class AnthropicProvider:
    """Wraps the Anthropic SDK for Claude calls."""

    name = "anthropic"

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        self._client = None

    @property
    def client(self):
        if self._client is None and self._api_key:
            import anthropic
            self._client = anthropic.Anthropic(api_key=self._api_key)
        return self._client

    def is_available(self) -> bool:
        return bool(self._api_key)

    def call(
        self,
        system_prompt: str,
        user_message: str,
        model: str = DEFAULT_LLM_MODEL,
        max_tokens: int = 1500,
        timeout: Optional[float] = None,
    ) -> LLMResponse:
        if not self.client:
            raise RuntimeError("Anthropic API key not configured")

        start = time.time()
        message = self.client.messages.create(
            model=model,
            max_tokens=max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_message}],
            **_timeout_kwargs(timeout),
        )
        latency_ms = int((time.time() - start) * 1000)

        return LLMResponse(
            text=message.content[0].text,
            provider="anthropic",
            model=model,
            input_tokens=getattr(message.usage, "input_tokens", None),
            output_tokens=getattr(message.usage, "output_tokens", None),
            latency_ms=latency_ms,
        )


class OllamaProvider:
    """Wraps Ollama via its OpenAI-compatible API."""

    name = "ollama"

    def __init__(self, base_url: Optional[str] = None):
        self._base_url = base_url or os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/v1")
        self._client = None

    @property
    def client(self):
        if self._client is None:
            from openai import OpenAI
            self._client = OpenAI(
                base_url=self._base_url,
                api_key="ollama",  # Ollama doesn't need a real key
            )
        return self._client

    def is_available(self) -> bool:
        try:
            self.client.models.list()
            return True
        except Exception:
            return False

    def call(
        self,
        system_prompt: str,
        user_message: str,
        model: str = "llama3.1",
        max_tokens: int = 1500,
        timeout: Optional[float] = None,
    ) -> LLMResponse:
        start = time.time()
        response = self.client.chat.completions.create(
            model=model,
            max_tokens=max_tokens,
            response_format={"type": "json_object"},
            temperature=0.3,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            **_timeout_kwargs(timeout),
        )
        latency_ms = int((time.time() - start) * 1000)

        choice = response.choices[0]
        usage = response.usage

        return LLMResponse(
            text=choice.message.content or "",
            provider="ollama",
            model=model,
            input_tokens=getattr(usage, "prompt_tokens", None) if usage else None,
            output_tokens=getattr(usage, "completion_tokens", None) if usage else None,
            latency_ms=latency_ms,
        )


class LLMRouter:
    """Routes LLM calls to providers with optional fallback."""

    def __init__(self, settings: Optional[LLMSettings] = None):
        self.settings = settings or LLMSettings()
        self._providers = {
            "anthropic": AnthropicProvider(),
            "ollama": OllamaProvider(self.settings.ollama_base_url),
        }

    def get_provider(self, name: str):
        return self._providers.get(name)

    def provider_status(self) -> dict:
        """Return availability status for each provider."""
        return {
            name: provider.is_available()
            for name, provider in self._providers.items()
        }

    def call(
        self,
        system_prompt: str,
        user_message: str,
        timeout: Optional[float] = None,
    ) -> LLMResponse:
        """
        Route an LLM call to the configured provider, falling back once if a
        different fallback provider is configured.
        """
        cfg = self.settings
        provider = self._providers.get(cfg.provider)
        if not provider:
            raise ValueError(f"Unknown provider: {cfg.provider}")

        try:
            return provider.call(system_prompt, user_message, cfg.model, cfg.max_tokens, timeout)
        except Exception as e:
            logger.warning(f"Provider '{cfg.provider}' failed (model={cfg.model}): {e}")

            fb_name = cfg.fallback_provider
            if not fb_name or fb_name == cfg.provider or fb_name not in self._providers:
                raise

            fb_model = cfg.fallback_model or cfg.model
            logger.info(f"Falling back to '{fb_name}' (model={fb_model})")
            try:
                return self._providers[fb_name].call(
                    system_prompt, user_message, fb_model, cfg.max_tokens, timeout
                )
            except Exception as fb_err:
                logger.error(f"Fallback provider '{fb_name}' also failed: {fb_err}")
                raise fb_err from e
