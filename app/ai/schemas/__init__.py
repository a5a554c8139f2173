"""AI Schemas package - Structured response schemas."""

from app.ai.schemas.actions import (
    Action,
    ActionType,
    BinTargetedAction,
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
    InterpretationResult,
    DESTRUCTIVE_ACTIONS,
    parse_action,
    parse_interpretation,
    describe_action,
)
from app.ai.schemas.suggestions import AiSuggestions, StructuredItems

__all__ = [
    "Action",
    "ActionType",
    "BinTargetedAction",
    "AddItemsAction",
    "RemoveItemsAction",
    "ModifyItemAction",
    "CreateBinAction",
    "DeleteBinAction",
    "AddTagsAction",
    "RemoveTagsAction",
    "ModifyTagAction",
    "SetAreaAction",
    "SetNotesAction",
    "SetIconAction",
    "SetColorAction",
    "InterpretationResult",
    "DESTRUCTIVE_ACTIONS",
    "parse_action",
    "parse_interpretation",
    "describe_action",
    "AiSuggestions",
    "StructuredItems",
]
