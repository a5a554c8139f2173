"""
Tests for the command review/execute state machine.

This module tests:
- The pure transition table
- Error messages shown to the user (never the raw provider error)
- A full submit -> toggle -> confirm cycle against the test database
"""

import pytest

from app.ai.command.interpreter import CommandInterpreter
from app.ai.providers.base import AIErrorCode, AIProviderError
from app.services.command_session import (
    EMPTY_RESULT_MESSAGE,
    ERROR_MESSAGES,
    FALLBACK_MESSAGE,
    NEEDS_SETUP_MESSAGE,
    CommandEvent,
    CommandSession,
    CommandState,
    InvalidTransition,
    map_error_message,
    transition,
)


class TestTransition:
    """Tests for the transition reducer."""

    @pytest.mark.parametrize("state,event,kwargs,expected", [
        (CommandState.IDLE, CommandEvent.SUBMIT, {}, CommandState.PARSING),
        (CommandState.IDLE, CommandEvent.SUBMIT, {"provider_configured": False}, CommandState.NEEDS_SETUP),
        (CommandState.NEEDS_SETUP, CommandEvent.SUBMIT, {}, CommandState.PARSING),
        (CommandState.NEEDS_SETUP, CommandEvent.CANCEL, {}, CommandState.IDLE),
        (CommandState.PARSING, CommandEvent.PARSE_SUCCEEDED, {}, CommandState.PREVIEW),
        (CommandState.PARSING, CommandEvent.PARSE_FAILED, {}, CommandState.IDLE),
        (CommandState.PARSING, CommandEvent.CANCEL, {}, CommandState.IDLE),
        (CommandState.PREVIEW, CommandEvent.CONFIRM, {"selected_count": 2}, CommandState.EXECUTING),
        (CommandState.PREVIEW, CommandEvent.CANCEL, {}, CommandState.IDLE),
        (CommandState.EXECUTING, CommandEvent.EXECUTION_FINISHED, {}, CommandState.IDLE),
    ])
    def test_valid_transitions(self, state, event, kwargs, expected):
        assert transition(state, event, **kwargs) == expected

    @pytest.mark.parametrize("state,event,kwargs", [
        (CommandState.PREVIEW, CommandEvent.CONFIRM, {"selected_count": 0}),
        (CommandState.IDLE, CommandEvent.CONFIRM, {"selected_count": 1}),
        (CommandState.PARSING, CommandEvent.SUBMIT, {}),
        (CommandState.EXECUTING, CommandEvent.CANCEL, {}),
        (CommandState.PREVIEW, CommandEvent.SUBMIT, {}),
        (CommandState.IDLE, CommandEvent.PARSE_SUCCEEDED, {}),
    ])
    def test_invalid_transitions(self, state, event, kwargs):
        with pytest.raises(InvalidTransition):
            transition(state, event, **kwargs)


class TestErrorMessages:
    """Tests for map_error_message."""

    def test_invalid_key(self):
        error = AIProviderError(AIErrorCode.INVALID_KEY, "Provider returned 401: bad key")

        assert map_error_message(error) == ERROR_MESSAGES[AIErrorCode.INVALID_KEY]
        assert "401" not in map_error_message(error)

    def test_every_code_has_a_message(self):
        for code in AIErrorCode:
            assert code in ERROR_MESSAGES

    def test_unexpected_exception(self):
        assert map_error_message(RuntimeError("boom")) == FALLBACK_MESSAGE


def _session(store, location, provider_config, mock_provider, config=True):
    interpreter = CommandInterpreter(provider_factory=lambda c: mock_provider)
    return CommandSession(
        interpreter, store, location.id, provider_config if config else None, created_by="user-1",
    )


class TestCommandSession:
    """Tests for CommandSession end to end."""

    @pytest.mark.asyncio
    async def test_submit_confirm(self, store, test_location, bins, provider_config, mock_provider, json_response):
        mock_provider.generate_json.return_value = json_response({
            "actions": [{"type": "add_items", "bin_name": "tools", "items": ["screwdriver"]}],
            "interpretation": "Add screwdriver to Tools",
        })
        session = _session(store, test_location, provider_config, mock_provider)

        state = await session.submit("Add screwdriver to the tools bin")

        assert state == CommandState.PREVIEW
        assert session.included == [True]
        assert session.interpretation == "Add screwdriver to Tools"

        outcome = session.confirm()

        assert session.state == CommandState.IDLE
        assert outcome.completed == 1
        assert session.message == "1 action completed"
        assert session.actions == []
        assert "screwdriver" in store.get_bin(bins["Tools"].id).items

    @pytest.mark.asyncio
    async def test_toggle_excludes_action(self, store, test_location, bins, provider_config, mock_provider, json_response):
        mock_provider.generate_json.return_value = json_response({
            "actions": [
                {"type": "add_tags", "bin_name": "Tools", "tags": ["garage"]},
                {"type": "delete_bin", "bin_name": "Empty Box"},
            ],
            "interpretation": "Tag Tools and delete Empty Box",
        })
        session = _session(store, test_location, provider_config, mock_provider)
        await session.submit("...")

        assert session.toggle(1) is False
        outcome = session.confirm()

        assert outcome.total == 1
        assert outcome.undo_snapshots == []
        assert store.get_bin(bins["Empty Box"].id).name == "Empty Box"
        assert "garage" in store.get_bin(bins["Tools"].id).tags

    @pytest.mark.asyncio
    async def test_confirm_with_nothing_selected_rejected(self, store, test_location, bins, provider_config, mock_provider, json_response):
        mock_provider.generate_json.return_value = json_response({
            "actions": [{"type": "delete_bin", "bin_name": "Empty Box"}],
            "interpretation": "Delete Empty Box",
        })
        session = _session(store, test_location, provider_config, mock_provider)
        await session.submit("...")
        session.toggle(0)

        with pytest.raises(InvalidTransition):
            session.confirm()

        assert session.state == CommandState.PREVIEW
        assert store.get_bin(bins["Empty Box"].id).name == "Empty Box"

    @pytest.mark.asyncio
    async def test_empty_result_shows_message(self, store, test_location, bins, provider_config, mock_provider, json_response):
        mock_provider.generate_json.return_value = json_response({
            "actions": [{"type": "delete_bin", "bin_name": "Nonexistent"}],
            "interpretation": "Delete Nonexistent",
        })
        session = _session(store, test_location, provider_config, mock_provider)

        state = await session.submit("Delete the nonexistent bin")

        assert state == CommandState.PREVIEW
        assert session.actions == []
        assert session.message == EMPTY_RESULT_MESSAGE

    @pytest.mark.asyncio
    async def test_invalid_key_returns_to_idle(self, store, test_location, bins, provider_config, mock_provider):
        """A 401 from the provider: idle, friendly message, nothing pending."""
        mock_provider.generate_json.side_effect = AIProviderError(
            AIErrorCode.INVALID_KEY, "Provider returned 401: invalid x-api-key",
        )
        session = _session(store, test_location, provider_config, mock_provider)

        state = await session.submit("Add tape to tools")

        assert state == CommandState.IDLE
        assert session.message == "Invalid API key or model — check Settings > AI"
        assert session.actions == []

    @pytest.mark.asyncio
    async def test_needs_setup(self, store, test_location, bins, provider_config, mock_provider):
        session = _session(store, test_location, provider_config, mock_provider, config=False)

        state = await session.submit("Add tape to tools")

        assert state == CommandState.NEEDS_SETUP
        assert session.message == NEEDS_SETUP_MESSAGE
        mock_provider.generate_json.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancel_discards_actions(self, store, test_location, bins, provider_config, mock_provider, json_response):
        mock_provider.generate_json.return_value = json_response({
            "actions": [{"type": "delete_bin", "bin_name": "Tools"}],
            "interpretation": "Delete Tools",
        })
        session = _session(store, test_location, provider_config, mock_provider)
        await session.submit("Delete tools")

        assert session.cancel() == CommandState.IDLE
        assert session.actions == []
        assert store.get_bin(bins["Tools"].id).name == "Tools"

    def test_toggle_outside_preview(self, store, test_location, provider_config, mock_provider):
        session = _session(store, test_location, provider_config, mock_provider)

        with pytest.raises(RuntimeError):
            session.toggle(0)
