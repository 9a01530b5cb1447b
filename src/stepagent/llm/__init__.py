"""LLM abstraction layer — unified via litellm."""

from stepagent.llm.provider import (
    ChatProvider,
    LiteLLMProvider,
    ProviderConfig,
    create_provider,
)

__all__ = [
    "ChatProvider",
    "LiteLLMProvider",
    "ProviderConfig",
    "create_provider",
]
