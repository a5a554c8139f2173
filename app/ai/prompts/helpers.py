"""
Shared Prompt Helpers

Reusable functions for prompt construction so the command, photo and
dictation prompts handle user templates the same way.

Functions:
- inject_block(): Fill a {placeholder} in a template, or append the block
- format_json_block(): Render structured data for embedding in a prompt
- format_list(): Comma-separated vocabulary line
"""

import json
from typing import Any, Iterable


def inject_block(template: str, placeholder: str, block: str) -> str:
    """
    Put generated context into a (possibly user-written) prompt template.

    If the template contains the placeholder (e.g. "{context}"), every
    occurrence is replaced; otherwise the block is appended after a blank
    line. Nothing else in the template is touched, so literal braces in a
    user's prompt are safe.

    Args:
        template: Prompt text, used verbatim apart from the placeholder
        placeholder: Substitution point including braces
        block: Text to inject

    Example:
        >>> inject_block("Bins:\\n{context}\\nBe brief.", "{context}", "[]")
        'Bins:\\n[]\\nBe brief.'
        >>> inject_block("Be brief.", "{context}", "[]")
        'Be brief.\\n\\n[]'
    """
    if not block:
        return template.replace(placeholder, "")
    if placeholder in template:
        return template.replace(placeholder, block)
    return f"{template.rstrip()}\n\n{block}"


def format_json_block(data: Any) -> str:
    """JSON with stable key order, non-ASCII kept readable."""
    return json.dumps(data, ensure_ascii=False, indent=2)


def format_list(values: Iterable[str]) -> str:
    return ", ".join(values)
