"""
Tests for the Command Interpreter and the sibling photo / dictation flows.

The provider is always a mock; these tests check what is sent to it and
how its answers are parsed and resolved.
"""

import pytest
from unittest.mock import patch

from app.ai.analysis import analyze_images
from app.ai.command.context import make_command_context
from app.ai.command.interpreter import (
    COMMAND_MAX_TOKENS,
    COMMAND_TEMPERATURE,
    CommandInterpreter,
)
from app.ai.providers.base import AIErrorCode, AIProviderError, ImageInput
from app.ai.structuring import structure_text
from app.services.inventory_store import AreaRecord, BinRecord


def _context():
    return make_command_context(
        [
            BinRecord(id="bin-tools", location_id="loc", name="Tools", short_code="AAAAAA",
                      items=["hammer"]),
            BinRecord(id="bin-empty", location_id="loc", name="Empty Box", short_code="BBBBBB"),
            BinRecord(id="bin-batt", location_id="loc", name="Batteries", short_code="CCCCCC"),
        ],
        [AreaRecord(id="area-garage", location_id="loc", name="Garage")],
    )


class TestCommandInterpreter:
    """Tests for CommandInterpreter.interpret."""

    @pytest.mark.asyncio
    async def test_add_items_resolved(self, mock_provider, provider_config, json_response):
        """'Add screwdriver to the tools bin' -> one resolved add_items."""
        mock_provider.generate_json.return_value = json_response({
            "actions": [{"type": "add_items", "bin_name": "Tools", "items": ["screwdriver"]}],
            "interpretation": "Add screwdriver to Tools",
        })
        interpreter = CommandInterpreter(provider_factory=lambda config: mock_provider)

        result = await interpreter.interpret("Add screwdriver to the tools bin", _context(), provider_config)

        assert len(result.actions) == 1
        assert result.actions[0].type == "add_items"
        assert result.actions[0].bin_id == "bin-tools"
        assert result.interpretation == "Add screwdriver to Tools"

    @pytest.mark.asyncio
    async def test_request_parameters(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.return_value = json_response({"actions": []})
        interpreter = CommandInterpreter(provider_factory=lambda config: mock_provider)

        await interpreter.interpret("  Delete the empty box ", _context(), provider_config)

        mock_provider.generate_json.assert_awaited_once()
        kwargs = mock_provider.generate_json.call_args.kwargs
        assert kwargs["prompt"] == "Delete the empty box"
        assert '"name": "Empty Box"' in kwargs["system_prompt"]
        assert kwargs["temperature"] == COMMAND_TEMPERATURE
        assert kwargs["max_tokens"] == COMMAND_MAX_TOKENS

    @pytest.mark.asyncio
    async def test_prompt_override_used(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.return_value = json_response({"actions": []})
        interpreter = CommandInterpreter(provider_factory=lambda config: mock_provider)

        await interpreter.interpret("x", _context(), provider_config, prompt_override="MY RULES {context}")

        assert mock_provider.generate_json.call_args.kwargs["system_prompt"].startswith("MY RULES CURRENT INVENTORY")

    @pytest.mark.asyncio
    async def test_unknown_bin_dropped(self, mock_provider, provider_config, json_response):
        """Actions on bins that do not exist never reach the review list."""
        mock_provider.generate_json.return_value = json_response({
            "actions": [
                {"type": "delete_bin", "bin_name": "Nonexistent"},
                {"type": "set_area", "bin_name": "batteries", "area_name": "garage"},
            ],
            "interpretation": "Delete Nonexistent and move Batteries",
        })
        interpreter = CommandInterpreter(provider_factory=lambda config: mock_provider)

        result = await interpreter.interpret("...", _context(), provider_config)

        assert [a.type for a in result.actions] == ["set_area"]
        assert result.actions[0].bin_id == "bin-batt"
        assert result.actions[0].area_id == "area-garage"

    @pytest.mark.asyncio
    async def test_empty_result_is_not_an_error(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.return_value = json_response({
            "actions": [], "interpretation": "No bin called 'garden' exists",
        })
        interpreter = CommandInterpreter(provider_factory=lambda config: mock_provider)

        result = await interpreter.interpret("Water the garden bin", _context(), provider_config)

        assert result.actions == []
        assert result.interpretation == "No bin called 'garden' exists"

    @pytest.mark.asyncio
    async def test_missing_actions_is_invalid_response(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.return_value = json_response({"interpretation": "hmm"})
        interpreter = CommandInterpreter(provider_factory=lambda config: mock_provider)

        with pytest.raises(AIProviderError) as exc_info:
            await interpreter.interpret("x", _context(), provider_config)

        assert exc_info.value.code == AIErrorCode.INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.side_effect = AIProviderError(AIErrorCode.INVALID_KEY, "401")
        interpreter = CommandInterpreter(provider_factory=lambda config: mock_provider)

        with pytest.raises(AIProviderError) as exc_info:
            await interpreter.interpret("x", _context(), provider_config)

        assert exc_info.value.code == AIErrorCode.INVALID_KEY

    @pytest.mark.asyncio
    async def test_default_factory_is_create_provider(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.return_value = json_response({"actions": []})

        with patch("app.ai.command.interpreter.create_provider", return_value=mock_provider) as factory:
            await CommandInterpreter().interpret("x", _context(), provider_config)

        factory.assert_called_once_with(provider_config)


class TestAnalyzeImages:
    """Tests for photo analysis."""

    @pytest.mark.asyncio
    async def test_suggestions_cleaned(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.return_value = json_response({
            "name": "  USB Cables ",
            "items": ["USB-C cable (x3)", "", 42, "Lightning cable"],
            "tags": ["Electronics", "cables"],
            "notes": None,
        })

        result = await analyze_images(
            provider_config,
            [ImageInput("AAAA", "image/jpeg")],
            provider_factory=lambda config: mock_provider,
        )

        assert result.name == "USB Cables"
        assert result.items == ["USB-C cable (x3)", "Lightning cable"]
        assert result.tags == ["electronics", "cables"]
        assert result.notes == ""

    @pytest.mark.asyncio
    async def test_images_and_tags_forwarded(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.return_value = json_response({"name": "x"})
        images = [ImageInput("AAAA", "image/jpeg"), ImageInput("BBBB", "image/png")]

        await analyze_images(
            provider_config, images, existing_tags=["tools"],
            provider_factory=lambda config: mock_provider,
        )

        kwargs = mock_provider.generate_json.call_args.kwargs
        assert kwargs["images"] == images
        assert "tools" in kwargs["system_prompt"]
        assert "2 photos" in kwargs["prompt"]

    @pytest.mark.asyncio
    async def test_non_object_is_invalid_response(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.return_value = json_response(["tape"])

        with pytest.raises(AIProviderError) as exc_info:
            await analyze_images(provider_config, [ImageInput("AAAA", "image/jpeg")],
                                 provider_factory=lambda config: mock_provider)

        assert exc_info.value.code == AIErrorCode.INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_no_images_rejected(self, provider_config):
        with pytest.raises(ValueError):
            await analyze_images(provider_config, [])


class TestStructureText:
    """Tests for dictation structuring."""

    @pytest.mark.asyncio
    async def test_items_extracted(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.return_value = json_response({
            "items": ["AA batteries (x3)", "flashlight", "  "],
        })

        result = await structure_text(provider_config, "three AA batteries and a flashlight",
                                      provider_factory=lambda config: mock_provider)

        assert result.items == ["AA batteries (x3)", "flashlight"]

    @pytest.mark.asyncio
    async def test_existing_items_filtered(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.return_value = json_response({
            "items": ["Tape", "flashlight"],
        })

        result = await structure_text(provider_config, "tape and a flashlight",
                                      existing_items=["tape"],
                                      provider_factory=lambda config: mock_provider)

        assert result.items == ["flashlight"]

    @pytest.mark.asyncio
    async def test_missing_items_is_invalid_response(self, mock_provider, provider_config, json_response):
        mock_provider.generate_json.return_value = json_response({"things": []})

        with pytest.raises(AIProviderError) as exc_info:
            await structure_text(provider_config, "x", provider_factory=lambda config: mock_provider)

        assert exc_info.value.code == AIErrorCode.INVALID_RESPONSE
