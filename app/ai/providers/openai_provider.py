"""
OpenAI Provider - Chat Completions client for OpenAI and compatible APIs.

Serves two provider variants with one implementation:
- "openai": api.openai.com (or an override endpoint)
- "openai-compatible": any server speaking the Chat Completions protocol
  (local LLM servers, gateways, other vendors); endpoint_url is required

Images are sent as `image_url` blocks carrying a base64 data URL.

API Documentation: https://platform.openai.com/docs/api-reference/chat
"""

import logging
from typing import Optional, Any, List, Tuple

import openai
from openai import AsyncOpenAI

from app.core.config import settings
from app.ai.providers.base import (
    AIErrorCode,
    AIProvider,
    AIProviderError,
    ImageInput,
    ProviderConfig,
    ProviderType,
    TokenUsage,
)

logger = logging.getLogger("binkeeper.ai.openai")


class OpenAIProvider(AIProvider):
    """
    OpenAI Chat Completions provider implementation.

    Usage:
        provider = OpenAIProvider(ProviderConfig(
            provider="openai", api_key="sk-...", model="gpt-4o-mini",
        ))
        response = await provider.generate_json(
            prompt="Add screwdriver to the tools bin",
            system_prompt=COMMAND_SYSTEM_PROMPT,
        )
    """

    def __init__(self, config: ProviderConfig, timeout: Optional[float] = None):
        """
        Initialize the OpenAI provider.

        Args:
            config: Provider configuration (openai or openai-compatible)
            timeout: Request timeout in seconds (default: settings.AI_REQUEST_TIMEOUT)
        """
        super().__init__(config, timeout)
        self.provider_type = config.provider

        if config.provider == ProviderType.OPENAI_COMPATIBLE and not config.endpoint_url:
            raise AIProviderError(
                AIErrorCode.PROVIDER_ERROR,
                "An endpoint URL is required for OpenAI-compatible providers",
            )

        base_url = (config.endpoint_url or settings.OPENAI_BASE_URL).rstrip("/")

        # Retries are disabled: one call per request, failures surface at once
        self._client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=base_url,
            timeout=timeout or settings.AI_REQUEST_TIMEOUT,
            max_retries=0,
        )
        logger.debug(f"OpenAI client ready ({self.provider_type.value}) base_url={base_url}")

    async def _send(
        self,
        prompt: str,
        system_prompt: Optional[str],
        images: List[ImageInput],
        temperature: float,
        max_tokens: int,
        expect_json: bool,
    ) -> Tuple[str, TokenUsage, Any]:
        """Call chat.completions.create and extract the first choice."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        if images:
            content: Any = [
                {"type": "image_url", "image_url": {"url": img.data_url}}
                for img in images
            ]
            content.append({"type": "text", "text": prompt})
        else:
            content = prompt
        messages.append({"role": "user", "content": content})

        request_params = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        # JSON mode only on the real OpenAI API; compatible servers vary
        if expect_json and self.provider_type == ProviderType.OPENAI:
            request_params["response_format"] = {"type": "json_object"}

        response = await self._client.chat.completions.create(**request_params)

        content_text = ""
        if response.choices:
            content_text = response.choices[0].message.content or ""

        usage = TokenUsage(
            prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
            completion_tokens=response.usage.completion_tokens if response.usage else 0,
        )
        return content_text, usage, response

    def _map_exception(self, exc: Exception) -> AIProviderError:
        """Classify openai SDK exceptions."""
        if isinstance(exc, openai.APIStatusError):
            return self._status_error(exc.status_code, str(exc.message))
        if isinstance(exc, openai.APIConnectionError):
            # Includes APITimeoutError
            return self._network_error(exc)
        logger.error(f"Unexpected OpenAI client failure: {exc!r}")
        return AIProviderError(AIErrorCode.PROVIDER_ERROR, self._scrub(str(exc))[:200])
