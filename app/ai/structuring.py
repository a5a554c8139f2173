"""
Text Structuring - dictated or pasted text to a list of item names.

Usage:
    result = await structure_text(config, "three AA batteries and a flashlight",
                                  bin_name="Junk Drawer", existing_items=["tape"])
    result.items  # ["AA batteries (x3)", "flashlight"]
"""

import logging
from typing import Optional, List, Callable

from app.ai.providers import (
    AIErrorCode,
    AIProvider,
    AIProviderError,
    ProviderConfig,
    create_provider,
)
from app.ai.prompts.structure_prompts import STRUCTURE_SYSTEM_PROMPT, build_structure_prompt
from app.ai.schemas.suggestions import StructuredItems

logger = logging.getLogger("binkeeper.ai.structuring")


STRUCTURE_TEMPERATURE = 0.2
STRUCTURE_MAX_TOKENS = 1000


async def structure_text(
    config: ProviderConfig,
    text: str,
    bin_name: Optional[str] = None,
    existing_items: Optional[List[str]] = None,
    provider_factory: Optional[Callable[[ProviderConfig], AIProvider]] = None,
) -> StructuredItems:
    """
    Extract item names from free text.

    Items already in the bin are removed from the result even if the
    model repeats them (case-insensitive).

    Raises:
        AIProviderError on provider failure or a response without an items array
    """
    provider = (provider_factory or create_provider)(config)
    response = await provider.generate_json(
        prompt=build_structure_prompt(text, bin_name, existing_items),
        system_prompt=STRUCTURE_SYSTEM_PROMPT,
        temperature=STRUCTURE_TEMPERATURE,
        max_tokens=STRUCTURE_MAX_TOKENS,
    )

    data = response.data
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise AIProviderError(
            AIErrorCode.INVALID_RESPONSE,
            f"Expected {{\"items\": [...]}}, got: {response.content[:200]}",
        )

    result = StructuredItems.model_validate(data)

    if existing_items:
        existing = {i.strip().lower() for i in existing_items}
        result = StructuredItems(items=[i for i in result.items if i.lower() not in existing])

    logger.info(f"Structured {len(result.items)} item(s) from {len(text)} chars of text")
    return result
