"""
Prompts Module - Centralized prompt templates for AI interactions.

This module contains all prompt templates used by the AI system.
Keeping prompts centralized makes them:
- Easy to update and iterate
- Consistent across the application
- Testable and version-controlled

Every builder is a pure function: same inputs, same prompt text.
"""

from app.ai.prompts.command_prompts import (
    CONTEXT_PLACEHOLDER,
    DEFAULT_COMMAND_PROMPT,
    PromptPair,
    build_command_prompt,
)
from app.ai.prompts.analysis_prompts import (
    TAGS_PLACEHOLDER,
    DEFAULT_ANALYSIS_PROMPT,
    build_analysis_prompt,
    build_analysis_user_message,
)
from app.ai.prompts.structure_prompts import (
    STRUCTURE_SYSTEM_PROMPT,
    build_structure_prompt,
)

__all__ = [
    "CONTEXT_PLACEHOLDER",
    "DEFAULT_COMMAND_PROMPT",
    "PromptPair",
    "build_command_prompt",
    "TAGS_PLACEHOLDER",
    "DEFAULT_ANALYSIS_PROMPT",
    "build_analysis_prompt",
    "build_analysis_user_message",
    "STRUCTURE_SYSTEM_PROMPT",
    "build_structure_prompt",
]
