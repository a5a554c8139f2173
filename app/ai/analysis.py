"""
Photo Analysis - suggest a bin's name, items, tags and notes from photos.

Sibling of the command flow: same provider gateway and error taxonomy,
different prompt and output shape.

Usage:
    suggestions = await analyze_images(config, [ImageInput(b64, "image/jpeg")],
                                       existing_tags=["tools", "cables"])
"""

import logging
from typing import Optional, List, Callable

from app.ai.providers import (
    AIErrorCode,
    AIProvider,
    AIProviderError,
    ImageInput,
    ProviderConfig,
    create_provider,
)
from app.ai.prompts.analysis_prompts import build_analysis_prompt, build_analysis_user_message
from app.ai.schemas.suggestions import AiSuggestions

logger = logging.getLogger("binkeeper.ai.analysis")


ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_TOKENS = 1500


async def analyze_images(
    config: ProviderConfig,
    images: List[ImageInput],
    existing_tags: Optional[List[str]] = None,
    custom_prompt: Optional[str] = None,
    provider_factory: Optional[Callable[[ProviderConfig], AIProvider]] = None,
) -> AiSuggestions:
    """
    Analyze 1-5 photos of one bin.

    Args:
        config: The user's provider configuration
        images: Photos of the same bin
        existing_tags: Tags already used in the location, offered for reuse
        custom_prompt: The user's own analysis prompt, if any

    Returns:
        Cleaned AiSuggestions

    Raises:
        AIProviderError on provider failure or a non-object response
    """
    if not images:
        raise ValueError("At least one image is required")

    system_prompt = build_analysis_prompt(existing_tags, custom_prompt, len(images))
    provider = (provider_factory or create_provider)(config)

    response = await provider.generate_json(
        prompt=build_analysis_user_message(len(images)),
        system_prompt=system_prompt,
        images=images,
        temperature=ANALYSIS_TEMPERATURE,
        max_tokens=ANALYSIS_MAX_TOKENS,
    )

    if not isinstance(response.data, dict):
        raise AIProviderError(
            AIErrorCode.INVALID_RESPONSE,
            f"Expected a JSON object, got: {response.content[:200]}",
        )

    suggestions = AiSuggestions.model_validate(response.data)
    logger.info(
        f"Photo analysis: '{suggestions.name}' with {len(suggestions.items)} item(s), "
        f"{len(suggestions.tags)} tag(s) from {len(images)} image(s)"
    )
    return suggestions
