"""
Suggestion Schemas - output shapes of the two sibling AI flows.

- AiSuggestions: photo analysis -> name, items, tags, notes for a new bin
- StructuredItems: dictated text -> a clean list of item names

Models are lenient on input: over-long strings are cut, not rejected,
and blank entries are dropped, since a slightly chatty model should
still produce a usable suggestion.
"""

from typing import Any, List

from pydantic import BaseModel, Field, field_validator


MAX_NAME_LENGTH = 255
MAX_ITEMS = 100
MAX_TAGS = 20
MAX_NOTES_LENGTH = 2000


def _clean_strings(value: Any, limit: int) -> List[str]:
    if not isinstance(value, list):
        return []
    cleaned = [v.strip() for v in value if isinstance(v, str) and v.strip()]
    return cleaned[:limit]


class AiSuggestions(BaseModel):
    """Suggested fields for a bin, from one or more photos."""
    name: str = ""
    items: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    notes: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def clean_name(cls, v: Any) -> str:
        if not isinstance(v, str):
            return ""
        return v.strip()[:MAX_NAME_LENGTH]

    @field_validator("items", mode="before")
    @classmethod
    def clean_items(cls, v: Any) -> List[str]:
        return _clean_strings(v, MAX_ITEMS)

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> List[str]:
        return [t.lower() for t in _clean_strings(v, MAX_TAGS)]

    @field_validator("notes", mode="before")
    @classmethod
    def clean_notes(cls, v: Any) -> str:
        if not isinstance(v, str):
            return ""
        return v.strip()[:MAX_NOTES_LENGTH]


class StructuredItems(BaseModel):
    """Item names extracted from free text."""
    items: List[str] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def clean_items(cls, v: Any) -> List[str]:
        return _clean_strings(v, MAX_ITEMS)
