"""
AI Settings Service - a user's stored provider configuration.

One row per user in user_ai_settings. The API key only ever leaves this
service masked ("****" + last 4) or inside a ProviderConfig built for a
single request. A key that arrives masked means "keep the stored one",
so the settings form can round-trip what GET returned.

Usage:
    from app.services.ai_settings_service import ai_settings_service

    row = ai_settings_service.save(db, user.id, provider="openai",
                                   api_key="sk-...", model="gpt-4o-mini")
    config = ai_settings_service.get_provider_config(db, user.id)
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.ai.providers import ProviderConfig, ProviderType
from app.models.ai_settings import UserAiSettings

logger = logging.getLogger("binkeeper.services.ai_settings")


MASK_PREFIX = "****"


class SettingsValidationError(Exception):
    """Submitted AI settings are unusable."""
    pass


def mask_api_key(key: str) -> str:
    """Show only the last 4 characters."""
    if len(key) <= 4:
        return MASK_PREFIX
    return MASK_PREFIX + key[-4:]


def is_masked(key: str) -> bool:
    return key.startswith(MASK_PREFIX)


def _clean_prompt(prompt: Optional[str], label: str) -> Optional[str]:
    if prompt is None or not prompt.strip():
        return None
    if len(prompt) > settings.AI_PROMPT_MAX_LENGTH:
        raise SettingsValidationError(
            f"{label} must be {settings.AI_PROMPT_MAX_LENGTH} characters or less"
        )
    return prompt.strip()


class AiSettingsService:
    """Load, save and delete per-user AI settings."""

    def get(self, db: Session, user_id: str) -> Optional[UserAiSettings]:
        return db.scalar(select(UserAiSettings).where(UserAiSettings.user_id == user_id))

    def resolve_api_key(self, db: Session, user_id: str, api_key: str) -> str:
        """
        Return the real key for a submitted one.

        Raises:
            SettingsValidationError if the key is masked and none is stored
        """
        if not is_masked(api_key):
            return api_key
        row = self.get(db, user_id)
        if row is None:
            raise SettingsValidationError("No saved key found. Please enter your API key.")
        return row.api_key

    def save(
        self,
        db: Session,
        user_id: str,
        provider: str,
        api_key: str,
        model: str,
        endpoint_url: Optional[str] = None,
        custom_prompt: Optional[str] = None,
        command_prompt: Optional[str] = None,
    ) -> UserAiSettings:
        """
        Create or replace the user's settings.

        Raises:
            SettingsValidationError for an unknown provider, missing fields,
            an over-long prompt, or a masked key with nothing stored
        """
        try:
            provider_type = ProviderType(provider)
        except ValueError:
            raise SettingsValidationError("Invalid provider")

        if not api_key or not model or not model.strip():
            raise SettingsValidationError("provider, apiKey, and model are required")

        endpoint_url = endpoint_url.strip() if endpoint_url and endpoint_url.strip() else None
        if provider_type == ProviderType.OPENAI_COMPATIBLE and not endpoint_url:
            raise SettingsValidationError("An endpoint URL is required for OpenAI-compatible providers")

        final_key = self.resolve_api_key(db, user_id, api_key)
        custom = _clean_prompt(custom_prompt, "Custom prompt")
        command = _clean_prompt(command_prompt, "Command prompt")

        row = self.get(db, user_id)
        if row is None:
            row = UserAiSettings(user_id=user_id)
            db.add(row)

        row.provider = provider_type.value
        row.api_key = final_key
        row.model = model.strip()
        row.endpoint_url = endpoint_url
        row.custom_prompt = custom
        row.command_prompt = command

        db.commit()
        db.refresh(row)
        logger.info(f"Saved AI settings for user {user_id}: {row.provider}/{row.model}")
        return row

    def delete(self, db: Session, user_id: str) -> bool:
        row = self.get(db, user_id)
        if row is None:
            return False
        db.delete(row)
        db.commit()
        logger.info(f"Deleted AI settings for user {user_id}")
        return True

    def to_provider_config(self, row: UserAiSettings) -> ProviderConfig:
        return ProviderConfig(
            provider=ProviderType(row.provider),
            api_key=row.api_key,
            model=row.model,
            endpoint_url=row.endpoint_url,
        )

    def get_provider_config(self, db: Session, user_id: str) -> Optional[ProviderConfig]:
        """ProviderConfig for one request, or None when AI is not configured."""
        row = self.get(db, user_id)
        if row is None:
            return None
        return self.to_provider_config(row)


# Singleton instance
ai_settings_service = AiSettingsService()
