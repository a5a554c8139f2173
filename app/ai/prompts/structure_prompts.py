"""
Structuring Prompts - dictated or pasted text to a clean item list.

"um, we've got three AA batteries, a flashlight and some zip ties"
-> {"items": ["AA batteries (x3)", "flashlight", "zip ties"]}
"""

from typing import Optional, List

from app.ai.prompts.helpers import format_json_block


STRUCTURE_SYSTEM_PROMPT = """You extract inventory items from dictated or pasted text.

Rules:
- Return one entry per distinct item, short and specific ("Phillips screwdriver", not "a screwdriver I use")
- Include quantity in parentheses when more than one: "AA batteries (x3)"
- Drop filler words, hesitations and anything that is not a physical item
- Do not repeat items that are already in the bin
- Keep the order the items were mentioned

Respond with ONLY a JSON object, no markdown fences and no other text:
{"items": ["..."]}"""


def build_structure_prompt(
    text: str,
    bin_name: Optional[str] = None,
    existing_items: Optional[List[str]] = None,
) -> str:
    """
    Render the user message for text structuring.

    Args:
        text: The dictated/pasted text
        bin_name: Bin the items are for, if known
        existing_items: Items already in that bin (skipped as duplicates)
    """
    parts = []
    if bin_name:
        parts.append(f'Bin: "{bin_name}"')
    if existing_items:
        parts.append(f"Items already in the bin:\n{format_json_block(existing_items)}")
    parts.append(f"Text:\n{text.strip()}")
    return "\n\n".join(parts)
