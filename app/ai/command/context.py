"""
Command Context - the read-only inventory snapshot for one command.

Built fresh per request from the inventory store and handed to the
prompt builder and the action resolver. Nothing mutates it; it may be
stale by the time actions execute, which is why the executor re-reads
each bin before writing.

Usage:
======
```python
from app.ai.command.context import build_command_context

context = build_command_context(store, location_id)
prompt = build_command_prompt(text, context)
resolved = resolve_actions(actions, context)
```
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Tuple

from app.services.inventory_store import InventoryStore, BinRecord, AreaRecord


NOTES_PREVIEW_LENGTH = 200

AVAILABLE_COLORS: Tuple[str, ...] = (
    "red", "orange", "amber", "lime", "green", "teal", "cyan",
    "sky", "blue", "indigo", "purple", "rose", "pink", "gray",
)

AVAILABLE_ICONS: Tuple[str, ...] = (
    "Package", "Box", "Archive", "Wrench", "Shirt", "Book", "Utensils", "Laptop", "Camera", "Music",
    "Heart", "Star", "Home", "Car", "Bike", "Plane", "Briefcase", "ShoppingBag", "Gift", "Lightbulb",
    "Scissors", "Hammer", "Paintbrush", "Leaf", "Apple", "Coffee", "Wine", "Baby", "Dog", "Cat",
)


def truncate_notes(notes: Optional[str]) -> str:
    """Cut notes to the preview length the model sees."""
    if not notes:
        return ""
    if len(notes) > NOTES_PREVIEW_LENGTH:
        return notes[:NOTES_PREVIEW_LENGTH] + "..."
    return notes


@dataclass(frozen=True)
class BinSummary:
    """What the model is told about one bin."""
    id: str
    name: str
    items: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    area_id: Optional[str] = None
    area_name: str = ""
    notes: str = ""
    icon: str = ""
    color: str = ""
    short_code: str = ""

    @classmethod
    def from_record(cls, record: BinRecord) -> "BinSummary":
        return cls(
            id=record.id,
            name=record.name,
            items=tuple(record.items),
            tags=tuple(record.tags),
            area_id=record.area_id,
            area_name=record.area_name or "",
            notes=truncate_notes(record.notes),
            icon=record.icon or "",
            color=record.color or "",
            short_code=record.short_code,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "items": list(self.items),
            "tags": list(self.tags),
            "area_id": self.area_id,
            "area_name": self.area_name,
            "notes": self.notes,
            "icon": self.icon,
            "color": self.color,
            "short_code": self.short_code,
        }


@dataclass(frozen=True)
class AreaSummary:
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class CommandContext:
    """
    Snapshot of one location's bins and areas plus the fixed vocabularies.

    Attributes:
        bins: Bin summaries in store order
        areas: Area summaries
        available_colors: Allowed color keys
        available_icons: Allowed icon keys
    """
    bins: Tuple[BinSummary, ...] = ()
    areas: Tuple[AreaSummary, ...] = ()
    available_colors: Tuple[str, ...] = field(default=AVAILABLE_COLORS)
    available_icons: Tuple[str, ...] = field(default=AVAILABLE_ICONS)

    def to_dict(self) -> Dict[str, Any]:
        """Structured form embedded in the command prompt."""
        return {
            "bins": [b.to_dict() for b in self.bins],
            "areas": [a.to_dict() for a in self.areas],
            "available_colors": list(self.available_colors),
            "available_icons": list(self.available_icons),
        }


def make_command_context(
    bins: List[BinRecord],
    areas: List[AreaRecord],
) -> CommandContext:
    """Build a context from already-loaded records."""
    return CommandContext(
        bins=tuple(BinSummary.from_record(b) for b in bins),
        areas=tuple(AreaSummary(id=a.id, name=a.name) for a in areas),
    )


def build_command_context(store: InventoryStore, location_id: str) -> CommandContext:
    """
    Load the snapshot for one location.

    Args:
        store: Inventory collaborator
        location_id: Location the command targets
    """
    return make_command_context(
        bins=store.list_bins(location_id),
        areas=store.list_areas(location_id),
    )
