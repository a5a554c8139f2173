"""
Command Session - the review/execute state machine for one command.

States:
=======
    idle ──submit──▶ parsing ──parse_succeeded──▶ preview ──confirm──▶ executing
     ▲  └─submit (no provider)─▶ needs_setup          │                     │
     │                                                 │                     │
     └──────── parse_failed / cancel ◀─────────────────┘    execution_finished

- idle -> parsing only when a provider is configured, else needs_setup
- parsing -> preview on any successful interpretation, even an empty one
- parsing -> idle on failure, with a user-facing message
- preview -> executing only with at least one action still included
- executing -> idle once every approved action was attempted

`transition` is the pure reducer; `CommandSession` drives it around the
interpreter and the executor and holds what a UI would render.

Usage:
    session = CommandSession(command_interpreter, store, location_id, config)
    await session.submit("Add screwdriver to the tools bin")
    session.toggle(1)                   # exclude the second action
    outcome = session.confirm()
    session.message                     # "1 action completed"
"""

import logging
from enum import Enum
from typing import Optional, List

from app.ai.providers import AIErrorCode, AIProviderError, ProviderConfig
from app.ai.command.context import CommandContext, build_command_context
from app.ai.command.interpreter import CommandInterpreter
from app.ai.schemas.actions import Action
from app.services.command_executor import CommandExecutor, ExecutionOutcome
from app.services.inventory_store import InventoryStore

logger = logging.getLogger("binkeeper.services.command_session")


EMPTY_RESULT_MESSAGE = (
    "No matching bins found, or the command was ambiguous. Try using exact bin names."
)
NEEDS_SETUP_MESSAGE = "Set up an AI provider in Settings > AI to use commands"

ERROR_MESSAGES = {
    AIErrorCode.INVALID_KEY: "Invalid API key or model — check Settings > AI",
    AIErrorCode.MODEL_NOT_FOUND: "Invalid API key or model — check Settings > AI",
    AIErrorCode.RATE_LIMITED: "AI provider rate limited — wait a moment and try again",
    AIErrorCode.INVALID_RESPONSE: "Your AI provider returned an error — verify your settings",
    AIErrorCode.NETWORK_ERROR: "Your AI provider returned an error — verify your settings",
    AIErrorCode.PROVIDER_ERROR: "Your AI provider returned an error — verify your settings",
}
FALLBACK_MESSAGE = "Couldn't understand that command — try rephrasing"


class CommandState(str, Enum):
    IDLE = "idle"
    NEEDS_SETUP = "needs_setup"
    PARSING = "parsing"
    PREVIEW = "preview"
    EXECUTING = "executing"


class CommandEvent(str, Enum):
    SUBMIT = "submit"
    PARSE_SUCCEEDED = "parse_succeeded"
    PARSE_FAILED = "parse_failed"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    EXECUTION_FINISHED = "execution_finished"


class InvalidTransition(Exception):
    """An event arrived in a state that does not accept it."""

    def __init__(self, state: CommandState, event: CommandEvent):
        super().__init__(f"Cannot {event.value} while {state.value}")
        self.state = state
        self.event = event


def transition(
    state: CommandState,
    event: CommandEvent,
    *,
    provider_configured: bool = True,
    selected_count: int = 0,
) -> CommandState:
    """
    Next state for (state, event).

    Args:
        provider_configured: Whether the user has AI settings (for submit)
        selected_count: Actions still included (for confirm)

    Raises:
        InvalidTransition for any pair not in the diagram
    """
    if event == CommandEvent.SUBMIT and state in (CommandState.IDLE, CommandState.NEEDS_SETUP):
        return CommandState.PARSING if provider_configured else CommandState.NEEDS_SETUP

    if state == CommandState.PARSING:
        if event == CommandEvent.PARSE_SUCCEEDED:
            return CommandState.PREVIEW
        if event in (CommandEvent.PARSE_FAILED, CommandEvent.CANCEL):
            return CommandState.IDLE

    if state == CommandState.PREVIEW:
        if event == CommandEvent.CONFIRM and selected_count > 0:
            return CommandState.EXECUTING
        if event == CommandEvent.CANCEL:
            return CommandState.IDLE

    if state == CommandState.NEEDS_SETUP and event == CommandEvent.CANCEL:
        return CommandState.IDLE

    if state == CommandState.EXECUTING and event == CommandEvent.EXECUTION_FINISHED:
        return CommandState.IDLE

    raise InvalidTransition(state, event)


def map_error_message(exc: Exception) -> str:
    """User-facing message for an interpretation failure. Never the raw error."""
    if isinstance(exc, AIProviderError):
        return ERROR_MESSAGES.get(exc.code, FALLBACK_MESSAGE)
    return FALLBACK_MESSAGE


class CommandSession:
    """
    One command from submit to execution.

    Attributes:
        state: Current CommandState
        message: Last user-facing message (error, empty result, or summary)
        interpretation: The model's one-line gloss
        actions: Resolved actions awaiting review (immutable)
        included: Parallel include flags, all True after parsing
        outcome: ExecutionOutcome of the last confirm
    """

    def __init__(
        self,
        interpreter: CommandInterpreter,
        store: InventoryStore,
        location_id: str,
        config: Optional[ProviderConfig],
        prompt_override: Optional[str] = None,
        created_by: Optional[str] = None,
    ):
        self.interpreter = interpreter
        self.store = store
        self.location_id = location_id
        self.config = config
        self.prompt_override = prompt_override
        self.created_by = created_by

        self.state = CommandState.IDLE
        self.message: Optional[str] = None
        self.interpretation = ""
        self.actions: List[Action] = []
        self.included: List[bool] = []
        self.outcome: Optional[ExecutionOutcome] = None
        self._context: Optional[CommandContext] = None

    def _apply(self, event: CommandEvent, **kwargs) -> None:
        new_state = transition(self.state, event, **kwargs)
        logger.debug(f"Command session {self.state.value} --{event.value}--> {new_state.value}")
        self.state = new_state

    def _clear(self) -> None:
        self.interpretation = ""
        self.actions = []
        self.included = []
        self._context = None

    async def submit(self, text: str) -> CommandState:
        """Interpret a command. Ends in preview, idle (error) or needs_setup."""
        self._apply(CommandEvent.SUBMIT, provider_configured=self.config is not None)
        self._clear()
        self.outcome = None

        if self.state == CommandState.NEEDS_SETUP:
            self.message = NEEDS_SETUP_MESSAGE
            return self.state

        self.message = None
        try:
            self._context = build_command_context(self.store, self.location_id)
            result = await self.interpreter.interpret(
                text, self._context, self.config, self.prompt_override
            )
        except Exception as e:
            if not isinstance(e, AIProviderError):
                logger.error(f"Unexpected command failure: {e}", exc_info=True)
            self._clear()
            self.message = map_error_message(e)
            self._apply(CommandEvent.PARSE_FAILED)
            return self.state

        self.interpretation = result.interpretation
        self.actions = list(result.actions)
        self.included = [True] * len(self.actions)
        if not self.actions:
            self.message = EMPTY_RESULT_MESSAGE
        self._apply(CommandEvent.PARSE_SUCCEEDED)
        return self.state

    def toggle(self, index: int) -> bool:
        """Flip one action's include flag; returns the new value."""
        if self.state != CommandState.PREVIEW:
            raise RuntimeError(f"No actions to review while {self.state.value}")
        self.included[index] = not self.included[index]
        return self.included[index]

    def selected_actions(self) -> List[Action]:
        return [a for a, keep in zip(self.actions, self.included) if keep]

    def confirm(self) -> ExecutionOutcome:
        """Execute the included actions and return to idle."""
        selected = self.selected_actions()
        self._apply(CommandEvent.CONFIRM, selected_count=len(selected))

        areas = self._context.areas if self._context is not None else None
        executor = CommandExecutor(
            self.store, self.location_id, areas=areas, created_by=self.created_by,
        )
        outcome = executor.execute(selected)

        self.outcome = outcome
        self.message = outcome.summary()
        self._clear()
        self._apply(CommandEvent.EXECUTION_FINISHED)
        return outcome

    def cancel(self) -> CommandState:
        """Discard pending actions without touching the store."""
        self._apply(CommandEvent.CANCEL)
        self._clear()
        self.message = None
        return self.state
