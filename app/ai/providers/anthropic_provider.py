"""
Anthropic Provider - Claude Messages API client.

Claude has no native JSON mode, but follows "respond with JSON only"
instructions reliably; the base class strips stray code fences before
parsing. Images are sent as base64 `image` content blocks.

API Documentation: https://docs.anthropic.com/en/api/messages
"""

import logging
from typing import Optional, Any, List, Tuple

import anthropic
from anthropic import AsyncAnthropic

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

logger = logging.getLogger("binkeeper.ai.anthropic")


class AnthropicProvider(AIProvider):
    """
    Anthropic Claude provider implementation.

    Usage:
        provider = AnthropicProvider(ProviderConfig(
            provider="anthropic", api_key="sk-ant-...", model="claude-sonnet-4-5",
        ))
        response = await provider.generate_json(prompt, system_prompt=SYSTEM)
    """

    provider_type = ProviderType.ANTHROPIC

    def __init__(self, config: ProviderConfig, timeout: Optional[float] = None):
        """
        Initialize the Anthropic provider.

        Args:
            config: Provider configuration (endpoint_url optional override)
            timeout: Request timeout in seconds (default: settings.AI_REQUEST_TIMEOUT)
        """
        super().__init__(config, timeout)

        base_url = (config.endpoint_url or settings.ANTHROPIC_BASE_URL).rstrip("/")

        self._client = AsyncAnthropic(
            api_key=config.api_key,
            base_url=base_url,
            timeout=timeout or settings.AI_REQUEST_TIMEOUT,
            max_retries=0,
        )
        logger.debug(f"Anthropic client ready base_url={base_url}")

    async def _send(
        self,
        prompt: str,
        system_prompt: Optional[str],
        images: List[ImageInput],
        temperature: float,
        max_tokens: int,
        expect_json: bool,
    ) -> Tuple[str, TokenUsage, Any]:
        """Call messages.create and join the text blocks."""
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": img.mime_type,
                    "data": img.base64,
                },
            }
            for img in images
        ]
        content.append({"type": "text", "text": prompt})

        request_params = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": content}],
        }

        system = system_prompt or ""
        if expect_json:
            system += (
                "\n\nIMPORTANT: You must respond with valid JSON only. "
                "No explanation, no markdown code blocks - just the raw JSON object."
            )
        if system.strip():
            request_params["system"] = system.strip()

        response = await self._client.messages.create(**request_params)

        # Claude returns a list of content blocks
        text = ""
        if response.content:
            for block in response.content:
                if getattr(block, "type", None) == "text":
                    text += block.text

        usage = TokenUsage(
            prompt_tokens=response.usage.input_tokens if response.usage else 0,
            completion_tokens=response.usage.output_tokens if response.usage else 0,
        )
        return text, usage, response

    def _map_exception(self, exc: Exception) -> AIProviderError:
        """Classify anthropic SDK exceptions."""
        if isinstance(exc, anthropic.APIStatusError):
            return self._status_error(exc.status_code, str(exc.message))
        if isinstance(exc, anthropic.APIConnectionError):
            # Includes APITimeoutError
            return self._network_error(exc)
        logger.error(f"Unexpected Anthropic client failure: {exc!r}")
        return AIProviderError(AIErrorCode.PROVIDER_ERROR, self._scrub(str(exc))[:200])
