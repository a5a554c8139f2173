"""
Photo Analysis Prompts - catalog a bin from 1-5 photos.

The user may supply their own prompt in Settings > AI; the
`{available_tags}` placeholder marks where the location's existing tags
go so the model reuses them instead of inventing near-duplicates.
"""

from typing import Optional, List

from app.ai.prompts.helpers import inject_block, format_list


TAGS_PLACEHOLDER = "{available_tags}"


DEFAULT_ANALYSIS_PROMPT = """You are an inventory cataloging assistant. You analyze photos of physical storage bins and containers to create searchable inventory records.

You may receive 1-5 photos of the same bin from different angles. Cross-reference all images to build one unified inventory entry. Do not duplicate items visible in multiple photos.

Return a JSON object with exactly these four fields:

"name" - A concise title for the bin's contents (2-5 words, title case). Describe WHAT is stored, not the container. Good: "Assorted Screwdrivers", "Holiday Lights", "USB Cables". Bad: "Red Bin", "Stuff", "Miscellaneous Items".

"items" - A flat array of distinct items. Rules:
- One entry per distinct item type; include quantity in parentheses when more than one: "Phillips screwdriver (x3)"
- Be specific: "adjustable crescent wrench" not just "wrench"; "AA batteries (x8)" not "batteries"
- Include brand names, model numbers, or sizes when clearly readable on labels
- For sealed/packaged items, describe the product, not the packaging
- Omit the bin or container itself
- Order from most prominent to least prominent

"tags" - 2-5 lowercase single-word category labels for filtering. Rules:
- Each tag MUST be a single word. Good: "office", "tools", "craft". Bad: "office supplies", "hand tools"
- Use plural nouns: "tools", "cables", "batteries"
- Start broad, then add 1-2 specific subcategories: ["tools", "screwdrivers"] or ["electronics", "cables", "usb"]

"notes" - One sentence on organization or condition: how contents are arranged, their condition, or notable labels. Use "" if nothing notable.

Respond with ONLY valid JSON, no markdown fences, no extra text. Example:
{"name":"Assorted Screwdrivers","items":["Phillips screwdriver (x3)","flathead screwdriver (x2)","magnetic bit holder"],"tags":["tools","screwdrivers"],"notes":"Neatly organized with larger screwdrivers on the left."}"""


def build_tags_block(existing_tags: List[str]) -> str:
    if not existing_tags:
        return ""
    return (
        "EXISTING TAGS (reuse these when they fit before inventing new ones):\n"
        f"{format_list(existing_tags)}"
    )


def build_analysis_prompt(
    existing_tags: Optional[List[str]] = None,
    custom_prompt: Optional[str] = None,
    image_count: int = 1,
) -> str:
    """
    Render the system prompt for photo analysis.

    Args:
        existing_tags: Tags already used in the location
        custom_prompt: User's own instructions; blank means default
        image_count: Number of photos attached

    Returns:
        System prompt text
    """
    template = custom_prompt if custom_prompt and custom_prompt.strip() else DEFAULT_ANALYSIS_PROMPT
    prompt = inject_block(template, TAGS_PLACEHOLDER, build_tags_block(existing_tags or []))
    if image_count > 1:
        prompt += f"\n\nYou are given {image_count} photos of the same bin."
    return prompt


def build_analysis_user_message(image_count: int) -> str:
    if image_count > 1:
        return f"Catalog the contents of this bin from these {image_count} photos."
    return "Catalog the contents of this bin from this photo."
