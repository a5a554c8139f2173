"""
Action Resolver - attach live identifiers to model-produced names.

The model refers to bins and areas by name. Names are lookup keys into
the point-in-time CommandContext, nothing more: a name that does not
match (case-insensitive, surrounding whitespace ignored) is never
guessed at, and the action targeting it is dropped.

- Bin-targeted actions: bin_id attached, or the action is excluded
- create_bin: passed through untouched; its area is found or created
  at execution time
- set_area: area_id attached when the area exists, otherwise left empty
  so the executor creates the area

No store or network calls, no caching.
"""

import logging
from typing import Optional, List, Iterable

from app.ai.command.context import CommandContext, AreaSummary
from app.ai.schemas.actions import Action, ActionType, BinTargetedAction


logger = logging.getLogger("binkeeper.ai.resolver")


def normalize_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def resolve_bin(name: Optional[str], context: CommandContext) -> Optional[str]:
    """
    Find the id of the bin called `name`.

    Returns:
        The first bin in context order whose name matches, else None
    """
    key = normalize_name(name)
    if not key:
        return None
    for bin in context.bins:
        if normalize_name(bin.name) == key:
            return bin.id
    return None


def resolve_area(name: Optional[str], areas: Iterable[AreaSummary]) -> Optional[str]:
    """Find the id of the area called `name`, else None."""
    key = normalize_name(name)
    if not key:
        return None
    for area in areas:
        if normalize_name(area.name) == key:
            return area.id
    return None


def resolve_action(action: Action, context: CommandContext) -> Optional[Action]:
    """
    Resolve one action.

    Returns:
        A resolved copy, or None when its bin cannot be found
    """
    if action.action_type == ActionType.CREATE_BIN:
        return action

    if not isinstance(action, BinTargetedAction):
        return None

    bin_id = resolve_bin(action.bin_name, context)
    if bin_id is None:
        logger.info(f"Dropping {action.type}: no bin named '{action.bin_name}'")
        return None

    update = {"bin_id": bin_id}
    if action.action_type == ActionType.SET_AREA:
        if action.area_name:
            # Unknown area -> area_id stays None; created at execution time
            update["area_id"] = resolve_area(action.area_name, context.areas)
        elif action.area_id not in {a.id for a in context.areas}:
            logger.info(f"Dropping set_area: unknown area id '{action.area_id}'")
            return None

    return action.model_copy(update=update)


def resolve_actions(actions: List[Action], context: CommandContext) -> List[Action]:
    """
    Resolve a list of actions, preserving order.

    Args:
        actions: Parsed actions (not modified)
        context: Snapshot the names are looked up in

    Returns:
        New list holding only executable actions
    """
    resolved = []
    for action in actions:
        result = resolve_action(action, context)
        if result is not None:
            resolved.append(result)

    if len(resolved) != len(actions):
        logger.info(f"Resolved {len(resolved)} of {len(actions)} action(s)")
    return resolved
