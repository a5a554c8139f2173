"""
User model - represents a registered user of Binkeeper.
Users belong to one or more locations (shared inventories) and may
configure their own AI provider.
"""

import uuid  # Python's built-in module for generating unique identifiers
from datetime import datetime, timezone  # For timestamps with timezone awareness
from typing import Optional

from sqlalchemy import String, DateTime  # Column types for database
from sqlalchemy.orm import Mapped, mapped_column, relationship  # SQLAlchemy 2.0 ORM tools

from app.db.base import Base  # Our declarative base class that all models inherit from


class User(Base):
    """
    SQLAlchemy ORM model for the 'users' table.

    Credentials are owned by the auth service; this table only holds
    the identity that bearer tokens refer to.
    """

    __tablename__ = "users"

    # id: UUID string, stored in the "sub" claim of access tokens
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # is_active: Deactivated users are rejected even with a valid token
    is_active: Mapped[bool] = mapped_column(default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # memberships: Locations this user can see and edit
    memberships: Mapped[list["LocationMember"]] = relationship(
        "LocationMember", back_populates="user", cascade="all, delete-orphan"
    )

    # ai_settings: At most one provider configuration per user
    ai_settings: Mapped[Optional["UserAiSettings"]] = relationship(
        "UserAiSettings", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
