"""
Command Interpreter - turns a command into resolved inventory actions.

The interpreter:
1. Takes raw text ("Add screwdriver to the tools bin")
2. Builds the command prompt around the location's CommandContext
3. Calls the user's provider expecting JSON
4. Parses {actions, interpretation}, dropping malformed actions
5. Resolves bin/area names to ids, dropping actions on unknown bins

An empty action list is a valid answer (nothing matched, or the command
was ambiguous). Provider failures and an unusable top-level payload
raise AIProviderError; nothing is partially returned.
"""

import logging
import time
from typing import Optional, Callable

from app.ai.providers import AIProvider, AIProviderError, ProviderConfig, create_provider
from app.ai.prompts.command_prompts import build_command_prompt
from app.ai.command.context import CommandContext
from app.ai.command.resolver import resolve_actions
from app.ai.schemas.actions import InterpretationResult, parse_interpretation

logger = logging.getLogger("binkeeper.ai.interpreter")


COMMAND_TEMPERATURE = 0.2
COMMAND_MAX_TOKENS = 2000


class CommandInterpreter:
    """
    Interprets natural-language inventory commands.

    Usage:
        interpreter = CommandInterpreter()
        result = await interpreter.interpret(
            "Move the batteries bin to the garage", context, config,
        )
        for action in result.actions:
            print(action.type, action.bin_id)
    """

    def __init__(self, provider_factory: Optional[Callable[[ProviderConfig], AIProvider]] = None):
        """
        Args:
            provider_factory: Builds a provider from the caller's config
                              (default: create_provider)
        """
        self.provider_factory = provider_factory

    async def interpret(
        self,
        text: str,
        context: CommandContext,
        config: ProviderConfig,
        prompt_override: Optional[str] = None,
    ) -> InterpretationResult:
        """
        Interpret one command.

        Args:
            text: The user's command
            context: Snapshot of the target location
            config: The user's provider configuration
            prompt_override: The user's custom command prompt, if any

        Returns:
            InterpretationResult whose actions are all resolved

        Raises:
            AIProviderError on provider failure or an unusable response
        """
        start_time = time.time()
        logger.info(f"Interpreting command: {text[:50]}...")

        pair = build_command_prompt(text, context, prompt_override)
        provider = (self.provider_factory or create_provider)(config)

        try:
            response = await provider.generate_json(
                prompt=pair.user,
                system_prompt=pair.system,
                temperature=COMMAND_TEMPERATURE,
                max_tokens=COMMAND_MAX_TOKENS,
            )
            parsed = parse_interpretation(response.data)
        except AIProviderError as e:
            logger.warning(f"Command interpretation failed [{e.code.value}]: {e.message}")
            raise

        actions = resolve_actions(parsed.actions, context)
        result = InterpretationResult(actions=actions, interpretation=parsed.interpretation)

        elapsed = (time.time() - start_time) * 1000
        logger.info(
            f"Interpreted {len(parsed.actions)} action(s), {len(actions)} resolved "
            f"in {elapsed:.0f}ms: {result.interpretation[:80]}"
        )
        return result


# Singleton instance
command_interpreter = CommandInterpreter()
