"""
Command Executor - applies approved actions to the inventory.

Execution contract:
- Actions run one at a time, in the order the model returned them
- Each bin is re-read from the store right before it is modified, so a
  stale CommandContext costs at most one round trip of staleness
- A failing action is recorded and skipped; the run always continues
- delete_bin captures the full pre-delete record for undo

Usage:
    executor = CommandExecutor(store, location_id, areas=context.areas)
    outcome = executor.execute(approved_actions)
    print(outcome.summary())             # "2 of 3 actions completed"
    for snapshot in outcome.undo_snapshots:
        restore_bin(store, snapshot)      # undo a deletion
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Iterable, Callable

from app.ai.command.resolver import normalize_name
from app.ai.schemas.actions import (
    Action,
    ActionType,
    AddItemsAction,
    AddTagsAction,
    BinTargetedAction,
    CreateBinAction,
    DeleteBinAction,
    ModifyItemAction,
    ModifyTagAction,
    RemoveItemsAction,
    RemoveTagsAction,
    SetAreaAction,
    SetColorAction,
    SetIconAction,
    SetNotesAction,
    describe_action,
)
from app.services.inventory_store import InventoryStore, BinRecord, BinSnapshot, StoreError

logger = logging.getLogger("binkeeper.services.executor")


# ---------------------------------------------------------------------------
# OUTCOME
# ---------------------------------------------------------------------------

@dataclass
class ActionFailure:
    """One action that could not be applied."""
    index: int
    action_type: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "action_type": self.action_type, "message": self.message}


@dataclass
class ExecutionOutcome:
    """
    Result of one execution run.

    Attributes:
        completed: Actions applied successfully
        total: Actions attempted
        failures: What went wrong, per failed action
        undo_snapshots: Pre-delete records of every deleted bin
    """
    completed: int = 0
    total: int = 0
    failures: List[ActionFailure] = field(default_factory=list)
    undo_snapshots: List[BinSnapshot] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return self.completed == self.total

    def summary(self) -> str:
        """Completion message shown after the run."""
        if self.all_succeeded:
            return f"{self.completed} action{'s' if self.completed != 1 else ''} completed"
        return f"{self.completed} of {self.total} actions completed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completed": self.completed,
            "total": self.total,
            "failures": [f.to_dict() for f in self.failures],
            "undo_snapshots": [s.to_dict() for s in self.undo_snapshots],
            "summary": self.summary(),
        }


class ActionNotResolved(StoreError):
    """A bin-targeted action reached execution without a bin_id."""
    pass


# ---------------------------------------------------------------------------
# EXECUTOR
# ---------------------------------------------------------------------------

class CommandExecutor:
    """
    Runs resolved actions against an InventoryStore for one location.

    Areas created on demand are remembered for the rest of the run, so
    two actions naming the same new area create it once.
    """

    def __init__(
        self,
        store: InventoryStore,
        location_id: str,
        areas: Optional[Iterable[Any]] = None,
        created_by: Optional[str] = None,
    ):
        """
        Args:
            store: Inventory collaborator
            location_id: Location every action applies to
            areas: Known areas (anything with .id and .name); defaults to the store's list
            created_by: User id recorded on created bins
        """
        self.store = store
        self.location_id = location_id
        self.created_by = created_by
        if areas is None:
            areas = store.list_areas(location_id)
        self._areas: Dict[str, str] = {normalize_name(a.name): a.id for a in areas}

        self._handlers: Dict[ActionType, Callable[[Any, ExecutionOutcome], None]] = {
            ActionType.ADD_ITEMS: self._add_items,
            ActionType.REMOVE_ITEMS: self._remove_items,
            ActionType.MODIFY_ITEM: self._modify_item,
            ActionType.CREATE_BIN: self._create_bin,
            ActionType.DELETE_BIN: self._delete_bin,
            ActionType.ADD_TAGS: self._add_tags,
            ActionType.REMOVE_TAGS: self._remove_tags,
            ActionType.MODIFY_TAG: self._modify_tag,
            ActionType.SET_AREA: self._set_area,
            ActionType.SET_NOTES: self._set_notes,
            ActionType.SET_ICON: self._set_icon,
            ActionType.SET_COLOR: self._set_color,
        }
        missing = set(ActionType) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No executor handler for: {sorted(t.value for t in missing)}")

    def execute(self, actions: List[Action]) -> ExecutionOutcome:
        """
        Apply actions sequentially.

        Never raises for a single action's failure; see ExecutionOutcome.
        """
        outcome = ExecutionOutcome(total=len(actions))

        for index, action in enumerate(actions):
            try:
                self._handlers[action.action_type](action, outcome)
                outcome.completed += 1
            except Exception as e:
                logger.warning(f"Action {index} failed ({describe_action(action)}): {e}")
                outcome.failures.append(
                    ActionFailure(index=index, action_type=action.type, message=str(e))
                )

        logger.info(f"Executed actions for location {self.location_id}: {outcome.summary()}")
        return outcome

    # -----------------------------------------------------------------------
    # HELPERS
    # -----------------------------------------------------------------------

    def _load(self, action: BinTargetedAction) -> BinRecord:
        if not action.bin_id:
            raise ActionNotResolved(f"No bin resolved for '{action.bin_name}'")
        bin = self.store.get_bin(action.bin_id)
        if bin.location_id != self.location_id:
            raise StoreError(f"Bin {bin.id} is not in this location")
        return bin

    def _ensure_area(self, name: str) -> str:
        """Id of the named area, creating it when it does not exist."""
        key = normalize_name(name)
        area_id = self._areas.get(key)
        if area_id is None:
            area = self.store.create_area(self.location_id, name.strip())
            area_id = area.id
            self._areas[key] = area_id
            logger.info(f"Created area '{area.name}' on demand")
        return area_id

    # -----------------------------------------------------------------------
    # ITEMS
    # -----------------------------------------------------------------------

    def _add_items(self, action: AddItemsAction, outcome: ExecutionOutcome) -> None:
        bin = self._load(action)
        self.store.update_bin(bin.id, items=bin.items + list(action.items))

    def _remove_items(self, action: RemoveItemsAction, outcome: ExecutionOutcome) -> None:
        bin = self._load(action)
        removed = {i.lower() for i in action.items}
        self.store.update_bin(bin.id, items=[i for i in bin.items if i.lower() not in removed])

    def _modify_item(self, action: ModifyItemAction, outcome: ExecutionOutcome) -> None:
        bin = self._load(action)
        old = action.old_item.lower()
        self.store.update_bin(
            bin.id, items=[action.new_item if i.lower() == old else i for i in bin.items]
        )

    # -----------------------------------------------------------------------
    # BIN LIFECYCLE
    # -----------------------------------------------------------------------

    def _create_bin(self, action: CreateBinAction, outcome: ExecutionOutcome) -> None:
        area_id = self._ensure_area(action.area_name) if action.area_name else None
        self.store.create_bin(
            location_id=self.location_id,
            name=action.name,
            area_id=area_id,
            items=list(action.items),
            tags=list(action.tags),
            notes=action.notes or "",
            icon=action.icon or "",
            color=action.color or "",
            created_by=self.created_by,
        )

    def _delete_bin(self, action: DeleteBinAction, outcome: ExecutionOutcome) -> None:
        bin = self._load(action)
        snapshot = self.store.delete_bin(bin.id)
        outcome.undo_snapshots.append(snapshot)

    # -----------------------------------------------------------------------
    # TAGS
    # -----------------------------------------------------------------------

    def _add_tags(self, action: AddTagsAction, outcome: ExecutionOutcome) -> None:
        bin = self._load(action)
        merged = list(bin.tags)
        for tag in action.tags:
            if tag not in merged:
                merged.append(tag)
        self.store.update_bin(bin.id, tags=merged)

    def _remove_tags(self, action: RemoveTagsAction, outcome: ExecutionOutcome) -> None:
        bin = self._load(action)
        removed = {t.lower() for t in action.tags}
        self.store.update_bin(bin.id, tags=[t for t in bin.tags if t.lower() not in removed])

    def _modify_tag(self, action: ModifyTagAction, outcome: ExecutionOutcome) -> None:
        bin = self._load(action)
        old = action.old_tag.lower()
        self.store.update_bin(
            bin.id, tags=[action.new_tag if t.lower() == old else t for t in bin.tags]
        )

    # -----------------------------------------------------------------------
    # FIELDS
    # -----------------------------------------------------------------------

    def _set_area(self, action: SetAreaAction, outcome: ExecutionOutcome) -> None:
        bin = self._load(action)
        area_id = action.area_id
        # Only areas of this location; anything else falls back to the name
        if area_id not in self._areas.values():
            if not action.area_name:
                raise StoreError(f"Area {area_id} is not in this location")
            area_id = self._ensure_area(action.area_name)
        self.store.update_bin(bin.id, area_id=area_id)

    def _set_notes(self, action: SetNotesAction, outcome: ExecutionOutcome) -> None:
        bin = self._load(action)
        if action.mode == "clear":
            notes = ""
        elif action.mode == "append":
            notes = f"{bin.notes}\n{action.notes}" if bin.notes else action.notes
        else:
            notes = action.notes
        self.store.update_bin(bin.id, notes=notes)

    def _set_icon(self, action: SetIconAction, outcome: ExecutionOutcome) -> None:
        bin = self._load(action)
        self.store.update_bin(bin.id, icon=action.icon)

    def _set_color(self, action: SetColorAction, outcome: ExecutionOutcome) -> None:
        bin = self._load(action)
        self.store.update_bin(bin.id, color=action.color)


# ---------------------------------------------------------------------------
# UNDO
# ---------------------------------------------------------------------------

def restore_bin(store: InventoryStore, snapshot: BinSnapshot) -> BinRecord:
    """
    Recreate a deleted bin from its snapshot.

    The original id and short code are reused so printed labels and
    QR codes keep pointing at the bin. An area that is not in the bin's
    location is dropped.

    Raises:
        StoreError when the id or the short code is already taken
    """
    area_id = snapshot.area_id
    if area_id and area_id not in {a.id for a in store.list_areas(snapshot.location_id)}:
        logger.warning(f"Restoring bin {snapshot.id} without unknown area {area_id}")
        area_id = None

    record = store.create_bin(
        location_id=snapshot.location_id,
        name=snapshot.name,
        area_id=area_id,
        items=list(snapshot.items),
        tags=list(snapshot.tags),
        notes=snapshot.notes,
        icon=snapshot.icon,
        color=snapshot.color,
        bin_id=snapshot.id,
        short_code=snapshot.short_code,
        created_by=snapshot.created_by,
    )
    logger.info(f"Restored bin {record.id} '{record.name}' ({record.short_code})")
    return record
