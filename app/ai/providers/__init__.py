"""
AI Providers Module - the Provider Gateway.

Users bring their own AI account, so providers are built per request
from a ProviderConfig rather than held as process-wide singletons:

- OpenAI (api.openai.com)
- Anthropic (Claude Messages API)
- OpenAI-compatible (any Chat Completions server at a custom URL)

Each provider has the same interface, making them interchangeable:
    provider = create_provider(config)
    response = await provider.generate_json(prompt, system_prompt=...)
    await provider.test_connection()

Every failure is raised as AIProviderError with one of six codes
(see app.ai.providers.base).
"""

from typing import Optional

from app.ai.providers.base import (
    AIErrorCode,
    AIProvider,
    AIProviderError,
    AIResponse,
    ImageInput,
    ProviderConfig,
    ProviderType,
    TokenUsage,
)
from app.ai.providers.openai_provider import OpenAIProvider
from app.ai.providers.anthropic_provider import AnthropicProvider


def create_provider(config: ProviderConfig, timeout: Optional[float] = None) -> AIProvider:
    """
    Build the provider client for one request.

    Args:
        config: The caller's provider configuration
        timeout: Optional request timeout override (seconds)

    Raises:
        AIProviderError(PROVIDER_ERROR) if the configuration is unusable
    """
    if config.provider == ProviderType.ANTHROPIC:
        return AnthropicProvider(config, timeout=timeout)
    return OpenAIProvider(config, timeout=timeout)


__all__ = [
    "AIErrorCode",
    "AIProvider",
    "AIProviderError",
    "AIResponse",
    "AnthropicProvider",
    "ImageInput",
    "OpenAIProvider",
    "ProviderConfig",
    "ProviderType",
    "TokenUsage",
    "create_provider",
]
