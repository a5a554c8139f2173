"""
AI Logger - Structured logging for AI operations.

This module provides structured logging specifically for AI operations.
It captures:
- Request details (provider, model, prompt size, image count)
- Response details (tokens, latency)
- Mapped errors (error code + truncated message)

Log Format:
==========
Each log entry is a single JSON object prefixed with a short label, so a
log shipper can parse it while a human can still read it.

Secrets:
========
API keys never reach this module. Providers pass only the provider
name and model; prompts are truncated to a preview.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from app.ai.providers.base import AIResponse

# Configure the AI logger
logger = logging.getLogger("binkeeper.ai")
logger.setLevel(logging.INFO)

# Create console handler if not exists
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _preview(text: str, limit: int = 100) -> str:
    return text[:limit] + "..." if len(text) > limit else text


class AILogger:
    """
    Structured logger for AI operations.

    Usage:
        ai_logger.log_request(
            request_id="abc123",
            prompt="Move the batteries to the garage",
            provider="openai",
            model="gpt-4o-mini",
        )
        ai_logger.log_response(request_id="abc123", response=ai_response)
    """

    def __init__(self):
        """Initialize the AI logger."""
        self._logger = logger

    def log_request(
        self,
        request_id: str,
        prompt: str,
        provider: str,
        model: str,
        image_count: int = 0,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log an AI request.

        Args:
            request_id: Unique request identifier
            prompt: The prompt being sent (truncated for privacy)
            provider: AI provider name
            model: Model name
            image_count: Number of attached images (photo analysis)
            metadata: Additional metadata
        """
        log_data = {
            "event": "ai_request",
            "request_id": request_id,
            "provider": provider,
            "model": model,
            "prompt_length": len(prompt),
            "prompt_preview": _preview(prompt),
            "image_count": image_count,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if metadata:
            log_data["metadata"] = metadata

        self._logger.info(f"AI Request: {json.dumps(log_data)}")

    def log_response(
        self,
        request_id: str,
        response: "AIResponse",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log a successful AI response.

        Args:
            request_id: Request identifier (for correlation)
            response: The AIResponse object
            metadata: Additional metadata
        """
        log_data = {
            "event": "ai_response",
            "request_id": request_id,
            "provider": response.provider.value,
            "model": response.model,
            "latency_ms": round(response.latency_ms, 2),
            "tokens": {
                "prompt": response.usage.prompt_tokens,
                "completion": response.usage.completion_tokens,
                "total": response.usage.total_tokens,
            },
            "response_length": len(response.content),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if metadata:
            log_data["metadata"] = metadata

        self._logger.info(f"AI Response: {json.dumps(log_data)}")

    def log_error(
        self,
        request_id: str,
        provider: str,
        model: str,
        code: str,
        error: str,
        latency_ms: float = 0.0,
    ) -> None:
        """
        Log a failed provider call after it has been mapped to an error code.

        Args:
            request_id: Request identifier
            provider: AI provider name
            model: Model name
            code: One of the AIErrorCode values
            error: Error message (already scrubbed of secrets)
            latency_ms: Time until the failure
        """
        log_data = {
            "event": "ai_error",
            "request_id": request_id,
            "provider": provider,
            "model": model,
            "code": code,
            "error": _preview(error, 200),
            "latency_ms": round(latency_ms, 2),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        self._logger.warning(f"AI Error: {json.dumps(log_data)}")


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
ai_logger = AILogger()
