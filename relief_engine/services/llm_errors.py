"""
External scorer error classification.

Classifies raw SDK exceptions from Anthropic and OpenAI (Ollama), timeouts
and malformed responses into categories so the match scorer can log a
meaningful degraded-mode event before falling back.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    TRANSIENT = "transient"    # Rate limit, timeout, server error
    PERMANENT = "permanent"    # Credits exhausted, auth failed, bad request
    PARTIAL = "partial"        # Bad LLM output (JSON parse, missing fields)


@dataclass
class LLMError(Exception):
    """Classified external scorer error with retry semantics."""
    category: ErrorCategory
    error_code: str
    message: str
    provider: str
    retryable: bool = True
    status_code: Optional[int] = None
    original: Optional[Exception] = field(default=None, repr=False)

    def __str__(self):
        return f"[{self.provider}:{self.category.value}] {self.error_code}: {self.message}"


# SDK exception class name -> (category, error_code, status_code).
# Anthropic and OpenAI share these names; order matters because the
# connection/timeout classes subclass each other.
_SDK_ERRORS = (
    ("AuthenticationError", ErrorCategory.PERMANENT, "authentication_error", 401),
    ("PermissionDeniedError", ErrorCategory.PERMANENT, "permission_denied", 403),
    ("BadRequestError", ErrorCategory.PERMANENT, "bad_request", 400),
    ("NotFoundError", ErrorCategory.PERMANENT, "not_found", 404),
    ("RateLimitError", ErrorCategory.TRANSIENT, "rate_limit", 429),
    ("InternalServerError", ErrorCategory.TRANSIENT, "server_error", 500),
    ("APITimeoutError", ErrorCategory.TRANSIENT, "timeout", None),
    ("APIConnectionError", ErrorCategory.TRANSIENT, "connection_error", None),
)


def _classify_sdk_error(exc: Exception, sdk, provider: str) -> LLMError:
    for class_name, category, code, status in _SDK_ERRORS:
        cls = getattr(sdk, class_name, None)
        if cls is not None and isinstance(exc, cls):
            if code == "permission_denied":
                # Includes credit_balance_too_low (403)
                code = _extract_error_type(exc) or code
            return LLMError(
                category=category,
                error_code=code,
                message=str(exc),
                provider=provider,
                retryable=category == ErrorCategory.TRANSIENT,
                status_code=getattr(exc, "status_code", status),
                original=exc,
            )

    status_error = getattr(sdk, "APIStatusError", None)
    if status_error is not None and isinstance(exc, status_error):
        status = getattr(exc, "status_code", None)
        if status and status >= 500:
            return LLMError(
                category=ErrorCategory.TRANSIENT,
                error_code=f"server_error_{status}",
                message=str(exc),
                provider=provider,
                retryable=True,
                status_code=status,
                original=exc,
            )
        return LLMError(
            category=ErrorCategory.PERMANENT,
            error_code=f"api_error_{status}",
            message=str(exc),
            provider=provider,
            retryable=False,
            status_code=status,
            original=exc,
        )

    # Fallback for unknown SDK errors
    return LLMError(
        category=ErrorCategory.TRANSIENT,
        error_code="unknown",
        message=str(exc),
        provider=provider,
        retryable=True,
        original=exc,
    )


def classify_anthropic_error(exc: Exception) -> LLMError:
    """Classify an Anthropic SDK exception into an LLMError."""
    import anthropic
    return _classify_sdk_error(exc, anthropic, "anthropic")


def classify_openai_error(exc: Exception, provider: str = "ollama") -> LLMError:
    """Classify an OpenAI SDK exception (used by Ollama) into an LLMError."""
    import openai
    return _classify_sdk_error(exc, openai, provider)


def classify_scoring_error(exc: BaseException, provider: str) -> LLMError:
    """Classify any failure raised while running an external scoring strategy."""
    if isinstance(exc, LLMError):
        return exc

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return LLMError(
            category=ErrorCategory.TRANSIENT,
            error_code="timeout",
            message=str(exc) or "scoring call timed out",
            provider=provider,
            retryable=True,
            original=exc,
        )

    module = type(exc).__module__ or ""
    if module.startswith("anthropic"):
        return classify_anthropic_error(exc)
    if module.startswith("openai"):
        return classify_openai_error(exc, provider)

    if isinstance(exc, (ValueError, KeyError, TypeError)):
        return LLMError(
            category=ErrorCategory.PARTIAL,
            error_code="invalid_response",
            message=str(exc),
            provider=provider,
            retryable=True,
            original=exc,
        )

    return LLMError(
        category=ErrorCategory.TRANSIENT,
        error_code="unknown",
        message=str(exc),
        provider=provider,
        retryable=True,
        original=exc,
    )


def _extract_error_type(exc) -> Optional[str]:
    """Extract the error type string from an API error body."""
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        error = body.get("error", {})
        if isinstance(error, dict):
            return error.get("type")
    return None
