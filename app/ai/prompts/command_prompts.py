"""
Command Prompts - turn a typed or spoken command into inventory actions.

The system prompt carries everything the model needs to answer with
exact names: the location's bins and areas as JSON, the closed color
and icon vocabularies, and the shape of every action. The user's text
travels alone in the user message.

A user may replace the instructions with their own command prompt; the
`{context}` placeholder marks where the live inventory goes (appended
when absent).

Usage:
======
```python
from app.ai.prompts.command_prompts import build_command_prompt

pair = build_command_prompt("Add screwdriver to the tools bin", context)
response = await provider.generate_json(pair.user, system_prompt=pair.system)
```
"""

from dataclasses import dataclass
from typing import Optional

from app.ai.command.context import CommandContext
from app.ai.prompts.helpers import inject_block, format_json_block, format_list


CONTEXT_PLACEHOLDER = "{context}"


@dataclass(frozen=True)
class PromptPair:
    """System instructions plus the user message for one request."""
    system: str
    user: str


# ---------------------------------------------------------------------------
# DEFAULT COMMAND INSTRUCTIONS
# ---------------------------------------------------------------------------

DEFAULT_COMMAND_PROMPT = """You are an inventory assistant. The user manages physical storage bins and gives you short commands in plain language. Turn each command into a list of actions against the bins listed below.

ACTION TYPES (use exactly these shapes):
- {"type": "add_items", "bin_name": "...", "items": ["..."]}
- {"type": "remove_items", "bin_name": "...", "items": ["..."]}
- {"type": "modify_item", "bin_name": "...", "old_item": "...", "new_item": "..."}
- {"type": "create_bin", "name": "...", "area_name": "...", "items": ["..."], "tags": ["..."], "notes": "...", "icon": "...", "color": "..."}
  (only "name" is required for create_bin)
- {"type": "delete_bin", "bin_name": "..."}
- {"type": "add_tags", "bin_name": "...", "tags": ["..."]}
- {"type": "remove_tags", "bin_name": "...", "tags": ["..."]}
- {"type": "modify_tag", "bin_name": "...", "old_tag": "...", "new_tag": "..."}
- {"type": "set_area", "bin_name": "...", "area_name": "..."}
- {"type": "set_notes", "bin_name": "...", "notes": "...", "mode": "replace" | "append" | "clear"}
- {"type": "set_icon", "bin_name": "...", "icon": "..."}
- {"type": "set_color", "bin_name": "...", "color": "..."}

RULES:
1. "bin_name" must be copied exactly from the name of a bin in the inventory. Match the user's wording to the closest bin name, ignoring case.
2. If the command does not clearly refer to an existing bin, return no action for it. Never invent bins that the user did not ask to create.
3. For remove_items, modify_item, remove_tags and modify_tag, use the item or tag as it appears in that bin.
4. "icon" must be one of the available icons and "color" one of the available colors, spelled exactly as listed.
5. "area_name" may name an existing area or a new one; new areas are created automatically.
6. Lowercase new tags. A command may produce several actions, in the order they should run.

Respond with ONLY a JSON object, no markdown fences and no other text:
{"actions": [...], "interpretation": "one short sentence describing what you understood"}

If nothing matches, return {"actions": [], "interpretation": "..."} explaining why."""


def build_context_block(context: CommandContext) -> str:
    """Inventory snapshot plus vocabularies, as injected into the prompt."""
    inventory = {
        "bins": [b.to_dict() for b in context.bins],
        "areas": [a.to_dict() for a in context.areas],
    }
    return (
        "CURRENT INVENTORY (JSON):\n"
        f"{format_json_block(inventory)}\n\n"
        f"AVAILABLE COLORS: {format_list(context.available_colors)}\n"
        f"AVAILABLE ICONS: {format_list(context.available_icons)}"
    )


def build_command_prompt(
    text: str,
    context: CommandContext,
    prompt_override: Optional[str] = None,
) -> PromptPair:
    """
    Render the command prompt.

    Args:
        text: The user's command
        context: Inventory snapshot for the target location
        prompt_override: User's own instructions; blank means default

    Returns:
        PromptPair with the system instructions and the user text
    """
    template = prompt_override if prompt_override and prompt_override.strip() else DEFAULT_COMMAND_PROMPT
    system = inject_block(template, CONTEXT_PLACEHOLDER, build_context_block(context))
    return PromptPair(system=system, user=text.strip())
