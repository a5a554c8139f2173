"""
Base AI Provider - Abstract interface for all LLM providers.

This module defines the contract that all AI providers must follow.
It ensures consistent behavior regardless of which provider is used.

Design Pattern: Strategy + Template Method
==========================================
The base class owns the request lifecycle (logging, latency, JSON
handling, error mapping); each provider only knows how to talk to its
own SDK (`_send`) and how to classify that SDK's exceptions
(`_map_exception`).

Error contract:
===============
Every failure leaves this module as an AIProviderError carrying exactly
one of six codes. The HTTP layer maps each code to a distinct status,
so nothing else may escape:

    INVALID_KEY       authentication rejected (401/403)
    RATE_LIMITED      provider throttled (429)
    MODEL_NOT_FOUND   unknown model name (404)
    INVALID_RESPONSE  provider answered but the payload is unusable
    NETWORK_ERROR     transport failure or timeout
    PROVIDER_ERROR    any other non-2xx or unexpected failure

Example:
    provider = create_provider(ProviderConfig(
        provider=ProviderType.OPENAI, api_key="sk-...", model="gpt-4o-mini",
    ))
    response = await provider.generate_json(prompt, system_prompt=SYSTEM)
    print(response.data)
"""

import json
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Any, Dict, List, Tuple
from enum import Enum
import logging

from app.ai.monitoring.logger import ai_logger

logger = logging.getLogger("binkeeper.ai")


class ProviderType(str, Enum):
    """Enum of supported AI providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OPENAI_COMPATIBLE = "openai-compatible"


class AIErrorCode(str, Enum):
    """The closed set of failure kinds a provider call can end in."""
    INVALID_KEY = "INVALID_KEY"
    RATE_LIMITED = "RATE_LIMITED"
    MODEL_NOT_FOUND = "MODEL_NOT_FOUND"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    NETWORK_ERROR = "NETWORK_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"


class AIProviderError(Exception):
    """
    A provider call failed.

    Attributes:
        code: One of AIErrorCode
        message: Human-readable detail (never contains the API key)
    """

    def __init__(self, code: AIErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"AIProviderError({self.code.value}, {self.message!r})"


@dataclass
class ProviderConfig:
    """
    Caller-supplied provider configuration for one request.

    Built from the user's stored settings (or the connection-test form)
    and dropped when the request ends. The key is excluded from repr so
    it cannot leak through logs or tracebacks.
    """
    provider: ProviderType
    api_key: str = field(repr=False)
    model: str
    endpoint_url: Optional[str] = None

    def __post_init__(self):
        # Accept plain strings from the settings table / request bodies
        if not isinstance(self.provider, ProviderType):
            self.provider = ProviderType(self.provider)


@dataclass
class ImageInput:
    """A base64-encoded image attached to a vision request."""
    base64: str
    mime_type: str

    @property
    def data_url(self) -> str:
        """data: URL form used by OpenAI-style image_url blocks."""
        return f"data:{self.mime_type};base64,{self.base64}"


@dataclass
class TokenUsage:
    """
    Token usage statistics for an AI request.

    Used for:
    - Cost awareness (tokens = money, on the user's own account)
    - Performance logging
    """
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        """Calculate total if not provided."""
        if self.total_tokens == 0:
            self.total_tokens = self.prompt_tokens + self.completion_tokens


@dataclass
class AIResponse:
    """
    Standardized response from any AI provider.

    Attributes:
        content: The generated text response
        provider: Which provider generated this response
        model: The specific model used
        data: Parsed JSON payload when JSON was requested
        usage: Token usage statistics
        latency_ms: How long the request took
        raw_response: Original provider response (for debugging)
        metadata: Additional provider-specific data
        created_at: Timestamp of the response
    """
    content: str
    provider: ProviderType
    model: str
    data: Optional[Any] = None
    usage: TokenUsage = field(default_factory=TokenUsage)
    latency_ms: float = 0.0
    raw_response: Optional[Any] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "content": self.content[:100] + "..." if len(self.content) > 100 else self.content,
            "provider": self.provider.value,
            "model": self.model,
            "tokens": {
                "prompt": self.usage.prompt_tokens,
                "completion": self.usage.completion_tokens,
                "total": self.usage.total_tokens,
            },
            "latency_ms": self.latency_ms,
            "created_at": self.created_at.isoformat(),
        }


# ---------------------------------------------------------------------------
# SHARED HELPERS
# ---------------------------------------------------------------------------

def map_http_status(status: int) -> AIErrorCode:
    """Map a provider HTTP status code to an error code."""
    if status in (401, 403):
        return AIErrorCode.INVALID_KEY
    if status == 429:
        return AIErrorCode.RATE_LIMITED
    if status == 404:
        return AIErrorCode.MODEL_NOT_FOUND
    return AIErrorCode.PROVIDER_ERROR


def strip_code_fences(text: str) -> str:
    """Remove a ```json ... ``` (or bare ```) wrapper around model output."""
    s = text.strip()
    if s.startswith("```json"):
        s = s[7:]
    elif s.startswith("```"):
        s = s[3:]
    if s.endswith("```"):
        s = s[:-3]
    return s.strip()


def parse_json_content(content: str) -> Any:
    """
    Parse model output as JSON.

    Raises:
        AIProviderError(INVALID_RESPONSE) if the text is not valid JSON
    """
    try:
        return json.loads(strip_code_fences(content))
    except (json.JSONDecodeError, TypeError):
        raise AIProviderError(
            AIErrorCode.INVALID_RESPONSE,
            f"Failed to parse response as JSON: {content[:200]}",
        )


# ---------------------------------------------------------------------------
# PROVIDER BASE CLASS
# ---------------------------------------------------------------------------

class AIProvider(ABC):
    """
    Abstract base class for AI providers.

    Responsibilities:
    - Issue exactly one request per call
    - Normalize success into AIResponse
    - Normalize every failure into AIProviderError
    - Log request/response pairs (without the API key)

    Subclasses implement:
        _send(...)          -> (content, usage, raw_response)
        _map_exception(e)   -> AIProviderError
    """

    provider_type: ProviderType

    def __init__(self, config: ProviderConfig, timeout: Optional[float] = None):
        """
        Args:
            config: Provider, key, model and optional endpoint for this request
            timeout: Seconds before the SDK gives up (default: AI_REQUEST_TIMEOUT)
        """
        self.config = config
        self.model = config.model
        self.timeout = timeout

    @abstractmethod
    async def _send(
        self,
        prompt: str,
        system_prompt: Optional[str],
        images: List[ImageInput],
        temperature: float,
        max_tokens: int,
        expect_json: bool,
    ) -> Tuple[str, TokenUsage, Any]:
        """Perform the SDK call and return (text, usage, raw response)."""
        pass

    @abstractmethod
    def _map_exception(self, exc: Exception) -> AIProviderError:
        """Classify an SDK exception into one of the six error codes."""
        pass

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        images: Optional[List[ImageInput]] = None,
        temperature: float = 0.3,
        max_tokens: int = 1024,
        expect_json: bool = False,
    ) -> AIResponse:
        """
        Generate a response from the AI model.

        Args:
            prompt: The user's message
            system_prompt: Optional system instructions for the model
            images: Optional images for vision requests
            temperature: Creativity level (0=deterministic, 1=creative)
            max_tokens: Maximum tokens in the response
            expect_json: Parse the reply as JSON into AIResponse.data

        Returns:
            AIResponse with the generated content

        Raises:
            AIProviderError for every failure
        """
        request_id = str(uuid.uuid4())[:8]
        images = images or []
        start_time = time.time()

        ai_logger.log_request(
            request_id=request_id,
            prompt=prompt,
            provider=self.provider_type.value,
            model=self.model,
            image_count=len(images),
        )

        try:
            content, usage, raw = await self._send(
                prompt=prompt,
                system_prompt=system_prompt,
                images=images,
                temperature=temperature,
                max_tokens=max_tokens,
                expect_json=expect_json,
            )
            if not content or not content.strip():
                raise AIProviderError(
                    AIErrorCode.INVALID_RESPONSE, "No content in provider response"
                )
            data = parse_json_content(content) if expect_json else None
        except AIProviderError as e:
            self._log_failure(request_id, e, start_time)
            raise
        except Exception as e:
            error = self._map_exception(e)
            self._log_failure(request_id, error, start_time)
            raise error from e

        response = AIResponse(
            content=content,
            provider=self.provider_type,
            model=self.model,
            data=data,
            usage=usage,
            latency_ms=self._measure_latency(start_time),
            raw_response=raw,
        )
        ai_logger.log_response(request_id, response)
        return response

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        images: Optional[List[ImageInput]] = None,
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ) -> AIResponse:
        """
        Generate a JSON response from the AI model.

        Used when we need structured output (command actions, photo
        suggestions, item lists). Code fences are stripped before parsing.

        Returns:
            AIResponse whose `data` holds the parsed JSON value
        """
        return await self.generate(
            prompt=prompt,
            system_prompt=system_prompt,
            images=images,
            temperature=temperature,
            max_tokens=max_tokens,
            expect_json=True,
        )

    async def test_connection(self) -> None:
        """
        Check that the key and model are accepted.

        Sends a tiny prompt and ignores the answer.

        Raises:
            AIProviderError if authentication, the model, or the transport fails
        """
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()
        try:
            await self._send(
                prompt="Reply with OK",
                system_prompt=None,
                images=[],
                temperature=0.0,
                max_tokens=10,
                expect_json=False,
            )
        except AIProviderError as e:
            self._log_failure(request_id, e, start_time)
            raise
        except Exception as e:
            error = self._map_exception(e)
            self._log_failure(request_id, error, start_time)
            raise error from e
        logger.info(f"Connection test passed [{self.provider_type.value}] model={self.model}")

    def _measure_latency(self, start_time: float) -> float:
        """Calculate latency in milliseconds."""
        return (time.time() - start_time) * 1000

    def _scrub(self, text: str) -> str:
        """Remove the API key from text that may echo request details."""
        key = self.config.api_key
        if key and len(key) > 4 and key in text:
            text = text.replace(key, "****")
        return text

    def _status_error(self, status: int, body: str) -> AIProviderError:
        """Build the error for a non-2xx provider reply."""
        return AIProviderError(
            map_http_status(status),
            self._scrub(f"Provider returned {status}: {body[:200]}"),
        )

    def _network_error(self, exc: Exception) -> AIProviderError:
        """Build the error for a transport failure or timeout."""
        return AIProviderError(
            AIErrorCode.NETWORK_ERROR,
            self._scrub(f"Failed to connect: {exc}"),
        )

    def _log_failure(self, request_id: str, error: AIProviderError, start_time: float) -> None:
        ai_logger.log_error(
            request_id=request_id,
            provider=self.provider_type.value,
            model=self.model,
            code=error.code.value,
            error=error.message,
            latency_ms=self._measure_latency(start_time),
        )
