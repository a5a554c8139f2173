"""
Tests for the prompt builders.

Covers placeholder injection (and the append fallback), the inventory
block, user overrides, and the photo / dictation prompts.
"""

import json

from app.ai.command.context import make_command_context
from app.ai.prompts.helpers import format_list, inject_block
from app.ai.prompts.command_prompts import (
    CONTEXT_PLACEHOLDER,
    DEFAULT_COMMAND_PROMPT,
    build_command_prompt,
    build_context_block,
)
from app.ai.prompts.analysis_prompts import (
    DEFAULT_ANALYSIS_PROMPT,
    build_analysis_prompt,
    build_analysis_user_message,
)
from app.ai.prompts.structure_prompts import build_structure_prompt
from app.ai.schemas.actions import ActionType
from app.services.inventory_store import AreaRecord, BinRecord


def _context():
    return make_command_context(
        [BinRecord(id="bin-1", location_id="loc", name="Tools", short_code="AAAAAA",
                   items=["hammer"], tags=["tools"])],
        [AreaRecord(id="area-1", location_id="loc", name="Garage")],
    )


class TestInjectBlock:
    """Tests for inject_block."""

    def test_replaces_placeholder(self):
        assert inject_block("Bins:\n{context}\nBe brief.", "{context}", "[]") == "Bins:\n[]\nBe brief."

    def test_appends_without_placeholder(self):
        assert inject_block("Be brief.  ", "{context}", "[]") == "Be brief.\n\n[]"

    def test_other_braces_untouched(self):
        template = 'Answer {"actions": []} only.\n{context}'

        assert inject_block(template, "{context}", "X") == 'Answer {"actions": []} only.\nX'

    def test_empty_block_removes_placeholder(self):
        assert inject_block("Tags: {available_tags}", "{available_tags}", "") == "Tags: "

    def test_format_list(self):
        assert format_list(["red", "blue"]) == "red, blue"


class TestCommandPrompt:
    """Tests for build_command_prompt."""

    def test_default_prompt_describes_every_action(self):
        for action_type in ActionType:
            assert f'"type": "{action_type.value}"' in DEFAULT_COMMAND_PROMPT

    def test_context_block_contains_inventory_json(self):
        block = build_context_block(_context())
        payload = block.split("CURRENT INVENTORY (JSON):\n", 1)[1].split("\n\nAVAILABLE COLORS", 1)[0]

        inventory = json.loads(payload)

        assert inventory["bins"][0]["name"] == "Tools"
        assert inventory["areas"][0]["name"] == "Garage"
        assert "AVAILABLE ICONS: Package, Box" in block

    def test_default_prompt_gets_context_appended(self):
        pair = build_command_prompt("  Add screwdriver to tools  ", _context())

        assert pair.system.startswith(DEFAULT_COMMAND_PROMPT)
        assert '"name": "Tools"' in pair.system
        assert pair.user == "Add screwdriver to tools"

    def test_override_with_placeholder(self):
        override = f"Custom rules.\n{CONTEXT_PLACEHOLDER}\nReply in JSON."

        pair = build_command_prompt("Add tape", _context(), prompt_override=override)

        assert pair.system.startswith("Custom rules.\nCURRENT INVENTORY")
        assert pair.system.endswith("Reply in JSON.")
        assert DEFAULT_COMMAND_PROMPT not in pair.system

    def test_blank_override_uses_default(self):
        pair = build_command_prompt("Add tape", _context(), prompt_override="   ")

        assert pair.system.startswith(DEFAULT_COMMAND_PROMPT)


class TestAnalysisPrompt:
    """Tests for the photo analysis prompt."""

    def test_existing_tags_offered(self):
        prompt = build_analysis_prompt(existing_tags=["tools", "cables"])

        assert "tools, cables" in prompt
        assert "{available_tags}" not in prompt

    def test_no_tags(self):
        prompt = build_analysis_prompt()

        assert "{available_tags}" not in prompt

    def test_multiple_images_mentioned(self):
        assert "3 photos" in build_analysis_prompt(image_count=3)
        assert "You are given" not in build_analysis_prompt(image_count=1)

    def test_custom_prompt_replaces_default(self):
        prompt = build_analysis_prompt(existing_tags=["tools"], custom_prompt="Name it. {available_tags}")

        assert prompt.startswith("Name it.")
        assert "tools" in prompt
        assert DEFAULT_ANALYSIS_PROMPT not in prompt

    def test_user_message(self):
        assert build_analysis_user_message(1) != build_analysis_user_message(2)


class TestStructurePrompt:
    """Tests for the dictation prompt."""

    def test_includes_text_and_bin(self):
        prompt = build_structure_prompt("three AA batteries", bin_name="Junk Drawer",
                                        existing_items=["tape"])

        assert "three AA batteries" in prompt
        assert "Junk Drawer" in prompt
        assert "tape" in prompt
