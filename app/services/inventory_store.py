"""
Inventory Store - read/write access to bins and areas.

The command pipeline never touches the ORM directly; it talks to an
InventoryStore so the executor can be tested against an in-memory
double and the HTTP layer can hand it a database-backed one.

Operations:
===========
read:   get_bin, list_bins, list_areas, list_tags
write:  update_bin, create_bin, delete_bin, create_area

The store owns identifier assignment (except where the caller supplies
one, as undo does), short-code generation and uniqueness. Only generated
short codes are retried on collision; a supplied one that is taken fails. It does no
locking: concurrent writers to one bin are last-write-wins.

Usage:
    store = SqlInventoryStore(db)
    bin = store.get_bin(bin_id)
    store.update_bin(bin_id, items=bin.items + ["screwdriver"])
"""

import logging
import secrets
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.area import Area
from app.models.bin import Bin


logger = logging.getLogger("binkeeper.services.inventory")


SHORT_CODE_CHARSET = "23456789ABCDEFGHJKMNPQRSTUVWXYZ"
SHORT_CODE_LENGTH = 6
SHORT_CODE_MAX_RETRIES = 10

# Fields update_bin may change
UPDATABLE_FIELDS = {"name", "items", "tags", "notes", "icon", "color", "area_id"}


class StoreError(Exception):
    """An inventory read or write failed."""
    pass


class BinNotFoundError(StoreError):
    """No bin with the given id exists."""

    def __init__(self, bin_id: str):
        super().__init__(f"Bin not found: {bin_id}")
        self.bin_id = bin_id


def generate_short_code() -> str:
    """Random 6-character label code without look-alike characters (0/O, 1/I/L)."""
    return "".join(secrets.choice(SHORT_CODE_CHARSET) for _ in range(SHORT_CODE_LENGTH))


# ---------------------------------------------------------------------------
# RECORDS
# ---------------------------------------------------------------------------

@dataclass
class BinRecord:
    """
    Full bin record as the store returns it.

    A BinRecord captured before deletion is the undo snapshot: it holds
    everything needed to recreate the bin with the same id and short code.
    """
    id: str
    location_id: str
    name: str
    short_code: str
    items: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    notes: str = ""
    icon: str = ""
    color: str = ""
    area_id: Optional[str] = None
    area_name: str = ""
    created_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BinRecord":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


# Snapshot captured by delete_bin; same shape as the live record
BinSnapshot = BinRecord


@dataclass
class AreaRecord:
    id: str
    location_id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# INTERFACE
# ---------------------------------------------------------------------------

class InventoryStore(ABC):
    """Abstract inventory collaborator used by the command pipeline."""

    @abstractmethod
    def get_bin(self, bin_id: str) -> BinRecord:
        """Fetch one bin. Raises BinNotFoundError."""
        pass

    @abstractmethod
    def list_bins(self, location_id: str) -> List[BinRecord]:
        pass

    @abstractmethod
    def list_areas(self, location_id: str) -> List[AreaRecord]:
        pass

    @abstractmethod
    def update_bin(self, bin_id: str, **fields: Any) -> BinRecord:
        """Overwrite the given fields. Raises BinNotFoundError."""
        pass

    @abstractmethod
    def create_bin(
        self,
        location_id: str,
        name: str,
        area_id: Optional[str] = None,
        items: Optional[List[str]] = None,
        tags: Optional[List[str]] = None,
        notes: str = "",
        icon: str = "",
        color: str = "",
        bin_id: Optional[str] = None,
        short_code: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> BinRecord:
        """
        Create a bin.

        bin_id / short_code are normally assigned by the store; undo
        passes the originals back in.
        """
        pass

    @abstractmethod
    def delete_bin(self, bin_id: str) -> BinSnapshot:
        """Delete a bin and return its full pre-delete record."""
        pass

    @abstractmethod
    def create_area(self, location_id: str, name: str) -> AreaRecord:
        pass

    def list_tags(self, location_id: str) -> List[str]:
        """Distinct tags used across a location, sorted."""
        tags = set()
        for record in self.list_bins(location_id):
            tags.update(record.tags)
        return sorted(tags)


# ---------------------------------------------------------------------------
# SQLALCHEMY IMPLEMENTATION
# ---------------------------------------------------------------------------

class SqlInventoryStore(InventoryStore):
    """
    InventoryStore over the application's database session.

    Each write commits immediately, so a failing action in a command run
    never rolls back the ones before it.
    """

    def __init__(self, db: Session):
        self.db = db

    def _to_record(self, bin: Bin, area_name: Optional[str] = None) -> BinRecord:
        if area_name is None:
            area_name = ""
            if bin.area_id:
                area = self.db.get(Area, bin.area_id)
                area_name = area.name if area else ""
        return BinRecord(
            id=bin.id,
            location_id=bin.location_id,
            name=bin.name,
            short_code=bin.short_code,
            items=list(bin.items or []),
            tags=list(bin.tags or []),
            notes=bin.notes or "",
            icon=bin.icon or "",
            color=bin.color or "",
            area_id=bin.area_id,
            area_name=area_name,
            created_by=bin.created_by,
        )

    def _get_or_raise(self, bin_id: str) -> Bin:
        bin = self.db.get(Bin, bin_id)
        if bin is None:
            raise BinNotFoundError(bin_id)
        return bin

    def get_bin(self, bin_id: str) -> BinRecord:
        return self._to_record(self._get_or_raise(bin_id))

    def list_bins(self, location_id: str) -> List[BinRecord]:
        rows = self.db.execute(
            select(Bin, Area.name)
            .outerjoin(Area, Area.id == Bin.area_id)
            .where(Bin.location_id == location_id)
            .order_by(Bin.name)
        ).all()
        return [self._to_record(bin, area_name or "") for bin, area_name in rows]

    def list_areas(self, location_id: str) -> List[AreaRecord]:
        areas = self.db.scalars(
            select(Area).where(Area.location_id == location_id).order_by(Area.name)
        ).all()
        return [AreaRecord(id=a.id, location_id=a.location_id, name=a.name) for a in areas]

    def update_bin(self, bin_id: str, **fields: Any) -> BinRecord:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise StoreError(f"Cannot update bin fields: {', '.join(sorted(unknown))}")

        bin = self._get_or_raise(bin_id)
        for key, value in fields.items():
            # JSON columns need a new list object to register as changed
            if key in ("items", "tags"):
                value = list(value)
            setattr(bin, key, value)

        self.db.commit()
        self.db.refresh(bin)
        logger.debug(f"Updated bin {bin_id}: {', '.join(sorted(fields))}")
        return self._to_record(bin)

    def create_bin(
        self,
        location_id: str,
        name: str,
        area_id: Optional[str] = None,
        items: Optional[List[str]] = None,
        tags: Optional[List[str]] = None,
        notes: str = "",
        icon: str = "",
        color: str = "",
        bin_id: Optional[str] = None,
        short_code: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> BinRecord:
        name = name.strip()
        if not name:
            raise StoreError("Bin name is required")

        if bin_id and self.db.get(Bin, bin_id) is not None:
            raise StoreError(f"Bin already exists: {bin_id}")

        code = short_code or generate_short_code()
        for attempt in range(SHORT_CODE_MAX_RETRIES + 1):
            bin = Bin(
                id=bin_id or str(uuid.uuid4()),
                location_id=location_id,
                area_id=area_id,
                name=name,
                items=list(items or []),
                tags=list(tags or []),
                notes=notes or "",
                icon=icon or "",
                color=color or "",
                short_code=code,
                created_by=created_by,
            )
            self.db.add(bin)
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                # A caller-supplied code (undo) must be kept exactly
                if short_code:
                    raise StoreError(f"Short code already in use: {short_code}") from e
                if attempt == SHORT_CODE_MAX_RETRIES:
                    raise StoreError("Failed to generate unique short code") from e
                logger.info(f"Short code {code} taken, retrying")
                code = generate_short_code()
                continue
            self.db.refresh(bin)
            logger.info(f"Created bin {bin.id} '{bin.name}' ({bin.short_code})")
            return self._to_record(bin)

        raise StoreError("Failed to generate unique short code")

    def delete_bin(self, bin_id: str) -> BinSnapshot:
        bin = self._get_or_raise(bin_id)
        snapshot = self._to_record(bin)
        self.db.delete(bin)
        self.db.commit()
        logger.info(f"Deleted bin {bin_id} '{snapshot.name}'")
        return snapshot

    def create_area(self, location_id: str, name: str) -> AreaRecord:
        name = name.strip()
        if not name:
            raise StoreError("Area name is required")

        area = Area(location_id=location_id, name=name)
        self.db.add(area)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise StoreError(f"Area already exists: {name}") from e
        self.db.refresh(area)
        logger.info(f"Created area {area.id} '{area.name}' in location {location_id}")
        return AreaRecord(id=area.id, location_id=area.location_id, name=area.name)
