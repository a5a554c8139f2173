"""
Bin model - a physical storage container tracked in the inventory.

A bin has a name, a list of items, tags, notes, an icon/color for the UI,
an optional area, and a short human-readable code printed on its label
(QR codes encode it, so it must survive delete + undo).
"""

import uuid  # For generating unique bin identifiers
from datetime import datetime, timezone  # For timestamps

from sqlalchemy import String, Text, DateTime, ForeignKey, JSON  # Column types
from sqlalchemy.orm import Mapped, mapped_column  # SQLAlchemy 2.0 ORM

from app.db.base import Base  # Declarative base class


class Bin(Base):
    """
    SQLAlchemy ORM model for the 'bins' table.

    Example: "Tools" in the Garage, items ["hammer", "tape measure"],
    tags ["tools"], short code "K7Q2MX".
    """

    __tablename__ = "bins"

    # ---------------------------------------------------------------------------
    # PRIMARY KEY
    # ---------------------------------------------------------------------------
    # id: UUID string; callers may supply it (undo recreates the original id)
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # ---------------------------------------------------------------------------
    # OWNERSHIP
    # ---------------------------------------------------------------------------
    location_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # area_id: Optional grouping; cleared if the area is deleted
    area_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("areas.id", ondelete="SET NULL"), nullable=True
    )

    # ---------------------------------------------------------------------------
    # CONTENTS
    # ---------------------------------------------------------------------------
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # items / tags: JSON arrays of strings, order preserved
    items: Mapped[list] = mapped_column(JSON, default=list)
    tags: Mapped[list] = mapped_column(JSON, default=list)

    notes: Mapped[str] = mapped_column(Text, default="")

    # icon: One of the icon vocabulary keys ("Package", "Wrench", ...), "" = default
    icon: Mapped[str] = mapped_column(String(50), default="")

    # color: One of the color vocabulary keys ("red", "blue", ...), "" = none
    color: Mapped[str] = mapped_column(String(50), default="")

    # short_code: 6-character label code, unique across all bins
    short_code: Mapped[str] = mapped_column(String(6), unique=True, nullable=False)

    # ---------------------------------------------------------------------------
    # AUDIT
    # ---------------------------------------------------------------------------
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
