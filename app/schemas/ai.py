"""
AI schemas - Pydantic models for the /ai endpoints.
These define the request/response formats for AI settings, commands,
execution/undo, photo analysis and text structuring.
"""

import base64
import binascii
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import settings
from app.ai.schemas.actions import Action


ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")


def _check_text(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("text is required")
    if len(v) > settings.AI_COMMAND_MAX_TEXT_LENGTH:
        raise ValueError(f"text must be {settings.AI_COMMAND_MAX_TEXT_LENGTH} characters or less")
    return v.strip()


# ---------------------------------------------------------------------------
# SETTINGS
# ---------------------------------------------------------------------------

class AiSettingsUpdate(BaseModel):
    """
    Schema for saving AI settings.

    Example request body:
    {
        "provider": "openai",
        "api_key": "sk-...",
        "model": "gpt-4o-mini"
    }

    An api_key starting with "****" keeps the stored key.
    """
    provider: str = Field(..., description="openai | anthropic | openai-compatible")
    api_key: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1, max_length=255)
    endpoint_url: Optional[str] = Field(None, max_length=500)
    custom_prompt: Optional[str] = None
    command_prompt: Optional[str] = None


class AiSettingsOut(BaseModel):
    """
    Schema for AI settings in API responses.

    api_key is always masked ("****" + last 4 characters).
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    provider: str
    api_key: str
    model: str
    endpoint_url: Optional[str] = None
    custom_prompt: Optional[str] = None
    command_prompt: Optional[str] = None


class ConnectionTestRequest(BaseModel):
    """Credentials to try; a masked key means the stored one."""
    provider: str
    api_key: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    endpoint_url: Optional[str] = None


# ---------------------------------------------------------------------------
# COMMANDS
# ---------------------------------------------------------------------------

class CommandRequest(BaseModel):
    """
    Schema for interpreting a natural-language command.

    Example request body:
    {
        "text": "Add screwdriver to the tools bin",
        "location_id": "4f7c..."
    }
    """
    text: str
    location_id: str = Field(..., min_length=1)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _check_text(v)


class ExecuteRequest(BaseModel):
    """The approved, resolved actions to run in a location."""
    location_id: str = Field(..., min_length=1)
    actions: List[Action] = Field(default_factory=list)


class BinSnapshotSchema(BaseModel):
    """Full pre-delete bin record, as returned in undo_snapshots."""
    id: str
    location_id: str
    name: str
    short_code: str
    items: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    notes: str = ""
    icon: str = ""
    color: str = ""
    area_id: Optional[str] = None
    area_name: str = ""
    created_by: Optional[str] = None


class UndoRequest(BaseModel):
    location_id: str = Field(..., min_length=1)
    snapshot: BinSnapshotSchema


class ActionFailureOut(BaseModel):
    index: int
    action_type: str
    message: str


class ExecutionOutcomeOut(BaseModel):
    completed: int
    total: int
    failures: List[ActionFailureOut] = Field(default_factory=list)
    undo_snapshots: List[BinSnapshotSchema] = Field(default_factory=list)
    summary: str


# ---------------------------------------------------------------------------
# PHOTO ANALYSIS / STRUCTURING
# ---------------------------------------------------------------------------

class ImagePayload(BaseModel):
    """One base64-encoded photo."""
    data: str = Field(..., min_length=1, description="Base64 image bytes (no data: prefix)")
    mime_type: str

    @field_validator("mime_type")
    @classmethod
    def validate_mime_type(cls, v: str) -> str:
        if v not in ALLOWED_IMAGE_TYPES:
            raise ValueError("Image must be JPEG, PNG, WebP, or GIF")
        return v

    @field_validator("data")
    @classmethod
    def validate_data(cls, v: str) -> str:
        try:
            raw = base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("Image data is not valid base64")
        if len(raw) > settings.AI_MAX_IMAGE_BYTES:
            raise ValueError(f"Image exceeds {settings.AI_MAX_IMAGE_BYTES // (1024 * 1024)}MB")
        return v


class AnalyzeImageRequest(BaseModel):
    """
    1-5 photos of the same bin.

    location_id, when given, offers the location's existing tags for reuse.
    """
    images: List[ImagePayload] = Field(..., min_length=1)
    location_id: Optional[str] = None

    @field_validator("images")
    @classmethod
    def validate_count(cls, v: List[ImagePayload]) -> List[ImagePayload]:
        if len(v) > settings.AI_MAX_IMAGES:
            raise ValueError(f"At most {settings.AI_MAX_IMAGES} images per request")
        return v


class StructureTextRequest(BaseModel):
    text: str
    bin_name: Optional[str] = None
    existing_items: Optional[List[str]] = None

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _check_text(v)


class StructuredItemsOut(BaseModel):
    items: List[str]


class AiErrorOut(BaseModel):
    """Body of every provider failure response."""
    error: str
    code: str
