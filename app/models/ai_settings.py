"""
UserAiSettings model - a user's own AI provider configuration.

Each user brings their own provider account (OpenAI, Anthropic or any
OpenAI-compatible endpoint). The row is turned into a ProviderConfig
for the duration of one request and never cached elsewhere.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class UserAiSettings(Base):
    """SQLAlchemy ORM model for the 'user_ai_settings' table."""

    __tablename__ = "user_ai_settings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # user_id: unique - one configuration per user (upsert semantics)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    # provider: "openai" | "anthropic" | "openai-compatible"
    provider: Mapped[str] = mapped_column(String(30), nullable=False)

    # api_key: Never returned unmasked by the API
    api_key: Mapped[str] = mapped_column(Text, nullable=False)

    model: Mapped[str] = mapped_column(String(255), nullable=False)

    # endpoint_url: Required for openai-compatible, optional override otherwise
    endpoint_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # custom_prompt: Replaces the default photo-analysis prompt
    custom_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)

    # command_prompt: Replaces the default command-interpretation prompt
    command_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user: Mapped["User"] = relationship("User", back_populates="ai_settings")
