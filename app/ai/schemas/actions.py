"""
Command Action Schemas - the typed actions a command can turn into.

The model answers a command with JSON shaped like:

```json
{
  "actions": [
    {"type": "add_items", "bin_name": "Tools", "items": ["screwdriver"]},
    {"type": "set_area", "bin_name": "Batteries", "area_name": "Garage"}
  ],
  "interpretation": "Add a screwdriver to Tools and move Batteries to the Garage"
}
```

Design:
=======
- One pydantic model per action type, joined into a discriminated union
  on the `type` field
- Models are frozen: the review UI keeps a parallel "included" flag per
  index instead of mutating actions, and the resolver returns copies
- Every action except create_bin targets an existing bin by `bin_name`
  (as the model wrote it) and gets `bin_id` filled in by the resolver
- A malformed action is dropped on its own; it never fails the whole
  command (see parse_interpretation)
"""

import logging
from enum import Enum
from typing import Optional, Dict, Any, List, Union, Literal, Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from app.ai.providers.base import AIErrorCode, AIProviderError


logger = logging.getLogger("binkeeper.ai.actions")


# ---------------------------------------------------------------------------
# ACTION TYPE ENUM
# ---------------------------------------------------------------------------

class ActionType(str, Enum):
    """Every mutation a command can produce."""
    ADD_ITEMS = "add_items"
    REMOVE_ITEMS = "remove_items"
    MODIFY_ITEM = "modify_item"
    CREATE_BIN = "create_bin"
    DELETE_BIN = "delete_bin"
    ADD_TAGS = "add_tags"
    REMOVE_TAGS = "remove_tags"
    MODIFY_TAG = "modify_tag"
    SET_AREA = "set_area"
    SET_NOTES = "set_notes"
    SET_ICON = "set_icon"
    SET_COLOR = "set_color"


# Actions shown in red in the review list
DESTRUCTIVE_ACTIONS = {ActionType.DELETE_BIN, ActionType.REMOVE_ITEMS, ActionType.REMOVE_TAGS}


def _clean_string_list(value: Any) -> Any:
    """Keep only non-empty strings, trimmed, in order."""
    if not isinstance(value, list):
        return value
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


# ---------------------------------------------------------------------------
# BASE MODELS
# ---------------------------------------------------------------------------

class _ActionBase(BaseModel):
    """Common configuration: immutable, unknown keys ignored."""
    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    @property
    def action_type(self) -> ActionType:
        return ActionType(self.type)

    @property
    def is_destructive(self) -> bool:
        return self.action_type in DESTRUCTIVE_ACTIONS


class BinTargetedAction(_ActionBase):
    """
    An action against one existing bin.

    bin_name: The name as the model produced it (lookup key)
    bin_id: Filled by the resolver; required before execution
    """
    bin_name: str = Field(min_length=1)
    bin_id: Optional[str] = None


class _ItemListAction(BinTargetedAction):
    items: List[str] = Field(min_length=1)

    @field_validator("items", mode="before")
    @classmethod
    def clean_items(cls, v: Any) -> Any:
        return _clean_string_list(v)


class _TagListAction(BinTargetedAction):
    tags: List[str] = Field(min_length=1)

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> Any:
        return _clean_string_list(v)


# ---------------------------------------------------------------------------
# ITEM ACTIONS
# ---------------------------------------------------------------------------

class AddItemsAction(_ItemListAction):
    """Append items to a bin."""
    type: Literal["add_items"] = "add_items"


class RemoveItemsAction(_ItemListAction):
    """Remove items from a bin (case-insensitive match)."""
    type: Literal["remove_items"] = "remove_items"


class ModifyItemAction(BinTargetedAction):
    """Rename an item inside a bin."""
    type: Literal["modify_item"] = "modify_item"
    old_item: str = Field(min_length=1)
    new_item: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# BIN LIFECYCLE ACTIONS
# ---------------------------------------------------------------------------

class CreateBinAction(_ActionBase):
    """
    Create a new bin.

    Never carries a bin_id. An unknown area_name is created on demand
    at execution time.
    """
    type: Literal["create_bin"] = "create_bin"
    name: str = Field(min_length=1)
    area_name: Optional[str] = None
    items: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None

    @field_validator("items", "tags", mode="before")
    @classmethod
    def clean_lists(cls, v: Any) -> Any:
        if v is None:
            return []
        return _clean_string_list(v)

    @field_validator("area_name", mode="after")
    @classmethod
    def blank_area_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class DeleteBinAction(BinTargetedAction):
    """Delete a bin (undoable from the captured snapshot)."""
    type: Literal["delete_bin"] = "delete_bin"


# ---------------------------------------------------------------------------
# TAG ACTIONS
# ---------------------------------------------------------------------------

class AddTagsAction(_TagListAction):
    """Add tags to a bin (set union)."""
    type: Literal["add_tags"] = "add_tags"


class RemoveTagsAction(_TagListAction):
    """Remove tags from a bin (case-insensitive match)."""
    type: Literal["remove_tags"] = "remove_tags"


class ModifyTagAction(BinTargetedAction):
    """Rename a tag on a bin."""
    type: Literal["modify_tag"] = "modify_tag"
    old_tag: str = Field(min_length=1)
    new_tag: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# FIELD ACTIONS
# ---------------------------------------------------------------------------

class SetAreaAction(BinTargetedAction):
    """
    Move a bin to an area.

    area_id is filled by the resolver when the area already exists;
    otherwise the area is created by name at execution time.
    """
    type: Literal["set_area"] = "set_area"
    area_name: Optional[str] = None
    area_id: Optional[str] = None

    @model_validator(mode="after")
    def require_area(self) -> "SetAreaAction":
        if not self.area_name and not self.area_id:
            raise ValueError("set_area requires area_name or area_id")
        return self


class SetNotesAction(BinTargetedAction):
    """
    Change a bin's notes.

    mode: replace (default) | append | clear
    """
    type: Literal["set_notes"] = "set_notes"
    notes: Optional[str] = None
    mode: Literal["replace", "append", "clear"] = "replace"

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: Any) -> Any:
        # Models sometimes answer "set" (older prompt wording) or nothing
        if v is None or v == "set":
            return "replace"
        return v

    @model_validator(mode="after")
    def require_notes(self) -> "SetNotesAction":
        if self.mode != "clear" and self.notes is None:
            raise ValueError("set_notes requires notes unless mode is clear")
        return self


class SetIconAction(BinTargetedAction):
    """Change a bin's icon (one of the icon vocabulary keys)."""
    type: Literal["set_icon"] = "set_icon"
    icon: str = Field(min_length=1)


class SetColorAction(BinTargetedAction):
    """Change a bin's color (one of the color vocabulary keys)."""
    type: Literal["set_color"] = "set_color"
    color: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# UNION TYPE
# ---------------------------------------------------------------------------

Action = Annotated[
    Union[
        AddItemsAction,
        RemoveItemsAction,
        ModifyItemAction,
        CreateBinAction,
        DeleteBinAction,
        AddTagsAction,
        RemoveTagsAction,
        ModifyTagAction,
        SetAreaAction,
        SetNotesAction,
        SetIconAction,
        SetColorAction,
    ],
    Field(discriminator="type"),
]

_action_adapter: TypeAdapter = TypeAdapter(Action)


class InterpretationResult(BaseModel):
    """
    What the model understood from one command.

    interpretation is shown to the user even when no action survived.
    """
    actions: List[Action] = Field(default_factory=list)
    interpretation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (JSON-safe)."""
        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# PARSING FUNCTIONS
# ---------------------------------------------------------------------------

def parse_action(raw: Any) -> Optional[Action]:
    """
    Validate one raw action object.

    Returns:
        The typed action, or None if the type is unknown or a
        required field is missing/invalid
    """
    if not isinstance(raw, dict):
        logger.debug(f"Dropping non-object action: {raw!r}")
        return None
    try:
        return _action_adapter.validate_python(raw)
    except ValidationError as e:
        logger.debug(f"Dropping malformed action {raw.get('type')!r}: {e.error_count()} error(s)")
        return None


def parse_interpretation(payload: Any) -> InterpretationResult:
    """
    Parse the model's top-level command response.

    Args:
        payload: The decoded JSON value

    Returns:
        InterpretationResult with only the well-formed actions, in order

    Raises:
        AIProviderError(INVALID_RESPONSE) if the payload is not an object
        with an `actions` array
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("actions"), list):
        raise AIProviderError(
            AIErrorCode.INVALID_RESPONSE,
            "Command response is missing the actions array",
        )

    actions = []
    for raw in payload["actions"]:
        action = parse_action(raw)
        if action is not None:
            actions.append(action)

    dropped = len(payload["actions"]) - len(actions)
    if dropped:
        logger.info(f"Dropped {dropped} malformed action(s) from command response")

    interpretation = payload.get("interpretation")
    if not isinstance(interpretation, str):
        interpretation = ""

    return InterpretationResult(actions=actions, interpretation=interpretation.strip())


def describe_action(action: Action) -> str:
    """One-line human description used in the review list and logs."""
    t = action.action_type
    if t == ActionType.ADD_ITEMS:
        return f'Add {", ".join(action.items)} to "{action.bin_name}"'
    if t == ActionType.REMOVE_ITEMS:
        return f'Remove {", ".join(action.items)} from "{action.bin_name}"'
    if t == ActionType.MODIFY_ITEM:
        return f'Rename "{action.old_item}" to "{action.new_item}" in "{action.bin_name}"'
    if t == ActionType.CREATE_BIN:
        desc = f'Create bin "{action.name}"'
        if action.area_name:
            desc += f" in {action.area_name}"
        if action.items:
            count = len(action.items)
            desc += f" with {count} item{'s' if count != 1 else ''}"
        return desc
    if t == ActionType.DELETE_BIN:
        return f'Delete "{action.bin_name}"'
    if t == ActionType.ADD_TAGS:
        plural = "s" if len(action.tags) != 1 else ""
        return f'Add tag{plural} {", ".join(action.tags)} to "{action.bin_name}"'
    if t == ActionType.REMOVE_TAGS:
        plural = "s" if len(action.tags) != 1 else ""
        return f'Remove tag{plural} {", ".join(action.tags)} from "{action.bin_name}"'
    if t == ActionType.MODIFY_TAG:
        return f'Rename tag "{action.old_tag}" to "{action.new_tag}" on "{action.bin_name}"'
    if t == ActionType.SET_AREA:
        return f'Move "{action.bin_name}" to area "{action.area_name or action.area_id}"'
    if t == ActionType.SET_NOTES:
        if action.mode == "clear":
            return f'Clear notes on "{action.bin_name}"'
        if action.mode == "append":
            return f'Append to notes on "{action.bin_name}"'
        return f'Set notes on "{action.bin_name}"'
    if t == ActionType.SET_ICON:
        return f'Set icon on "{action.bin_name}" to {action.icon}'
    return f'Set color on "{action.bin_name}" to {action.color}'
