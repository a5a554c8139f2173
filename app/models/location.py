"""
Location models - a shared inventory (a home, a workshop, an office).

Bins and areas belong to a location; users get access through
LocationMember rows.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Location(Base):
    """SQLAlchemy ORM model for the 'locations' table."""

    __tablename__ = "locations"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # name: "Home", "Garage workshop", ...
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    members: Mapped[list["LocationMember"]] = relationship(
        "LocationMember", back_populates="location", cascade="all, delete-orphan"
    )


class LocationMember(Base):
    """
    Membership of a user in a location.

    Every AI command is scoped to one location and requires membership.
    """

    __tablename__ = "location_members"
    __table_args__ = (UniqueConstraint("location_id", "user_id", name="uq_location_member"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    location_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # role: "admin" or "member"
    role: Mapped[str] = mapped_column(String(20), default="member")

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    location: Mapped["Location"] = relationship("Location", back_populates="members")
    user: Mapped["User"] = relationship("User", back_populates="memberships")
