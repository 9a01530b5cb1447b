"""LLM provider abstraction — unified via litellm.

litellm handles provider detection from the model string prefix
("gemini/...", "anthropic/...", "openai/...") and reads API keys from
environment variables. The agent only needs one thing from a provider:
given the directive and the serialized conversation, return the reply
text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

if TYPE_CHECKING:
    from litellm import ModelResponse

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini/gemini-2.0-flash"


@dataclass
class ProviderConfig:
    """Configuration for an LLM provider."""

    model: str = DEFAULT_MODEL
    temperature: float | None = None
    max_tokens: int | None = None
    timeout: float | None = None  # Transport-level request timeout
    json_mode: bool = True  # Ask for a JSON object response


@runtime_checkable
class ChatProvider(Protocol):
    """Protocol for LLM providers."""

    @property
    def config(self) -> ProviderConfig: ...

    async def complete(self, system: str, prompt: str) -> str:
        """Return the model's reply to ``prompt`` under directive ``system``."""
        ...


@dataclass
class LiteLLMProvider:
    """Unified LLM provider using litellm."""

    _config: ProviderConfig

    @property
    def config(self) -> ProviderConfig:
        return self._config

    async def complete(self, system: str, prompt: str) -> str:
        kwargs: dict[str, Any] = {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        }

        if self._config.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        if self._config.temperature is not None:
            kwargs["temperature"] = self._config.temperature

        if self._config.max_tokens is not None:
            kwargs["max_tokens"] = self._config.max_tokens

        if self._config.timeout is not None:
            kwargs["timeout"] = self._config.timeout

        response = await _acompletion_with_retry(**kwargs)
        return _response_text(response)


@retry(
    retry=retry_if_exception_type((ConnectionError, TimeoutError, OSError)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=30),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def _acompletion_with_retry(**kwargs: Any) -> ModelResponse:
    """Call litellm.acompletion, retrying transient transport errors only.

    A reply that arrives but is unusable is never retried here; that is
    for the agent loop to report.
    """
    import litellm

    return await litellm.acompletion(**kwargs)


def _response_text(response: Any) -> str:
    """Pull the assistant text out of an OpenAI-shaped response."""
    choices = getattr(response, "choices", None)
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content or ""


def create_provider(
    model: str = DEFAULT_MODEL,
    temperature: float | None = None,
    max_tokens: int | None = None,
    timeout: float | None = None,
    json_mode: bool = True,
) -> ChatProvider:
    """Create a LiteLLM provider.

    Args:
        model: Model name with provider prefix (e.g. "gemini/gemini-2.0-flash",
               "openai/gpt-4o").
        temperature: Sampling temperature.
        max_tokens: Max output tokens.
        timeout: Per-request transport timeout in seconds.
        json_mode: Request a JSON object response format.
    """
    config = ProviderConfig(
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=timeout,
        json_mode=json_mode,
    )
    return LiteLLMProvider(_config=config)
