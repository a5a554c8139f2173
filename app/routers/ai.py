"""
AI Router - API endpoints for the user's AI features.

Endpoints:
==========
Settings (no provider call, not rate limited):
    GET    /ai/settings          masked settings or null
    PUT    /ai/settings          create/replace
    DELETE /ai/settings          remove

Provider calls (share the per-user hourly budget):
    POST   /ai/test              connection test
    POST   /ai/command           command -> resolved actions
    POST   /ai/analyze-image     photos -> bin suggestions
    POST   /ai/structure-text    dictation -> item list

Inventory writes:
    POST   /ai/execute           run approved actions
    POST   /ai/undo              recreate a deleted bin from its snapshot

Provider failures answer {"error": message, "code": code} with:
    INVALID_KEY, MODEL_NOT_FOUND                          -> 422
    RATE_LIMITED                                          -> 429
    INVALID_RESPONSE, NETWORK_ERROR, PROVIDER_ERROR       -> 502
    anything unexpected                                   -> 500 INTERNAL_ERROR
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user, require_location_member
from app.models.user import User
from app.models.ai_settings import UserAiSettings
from app.ai.providers import AIErrorCode, AIProviderError, ImageInput, ProviderConfig, create_provider
from app.ai.command.context import build_command_context
from app.ai.command.interpreter import command_interpreter
from app.ai.analysis import analyze_images
from app.ai.structuring import structure_text
from app.ai.schemas.actions import InterpretationResult
from app.ai.schemas.suggestions import AiSuggestions
from app.schemas.ai import (
    AiSettingsOut,
    AiErrorOut,
    AiSettingsUpdate,
    AnalyzeImageRequest,
    BinSnapshotSchema,
    CommandRequest,
    ConnectionTestRequest,
    ExecuteRequest,
    ExecutionOutcomeOut,
    StructureTextRequest,
    StructuredItemsOut,
    UndoRequest,
)
from app.services.ai_settings_service import (
    ai_settings_service,
    mask_api_key,
    SettingsValidationError,
)
from app.services.command_executor import CommandExecutor, restore_bin
from app.services.inventory_store import SqlInventoryStore, BinRecord, StoreError
from app.services.rate_limiter import ai_rate_limiter, RateLimitExceeded


# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger("binkeeper.routers.ai")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/ai", tags=["ai"])


AI_NOT_CONFIGURED = "AI not configured. Set up your AI provider first."

ERROR_STATUS = {
    AIErrorCode.INVALID_KEY: 422,
    AIErrorCode.MODEL_NOT_FOUND: 422,
    AIErrorCode.RATE_LIMITED: 429,
    AIErrorCode.INVALID_RESPONSE: 502,
    AIErrorCode.NETWORK_ERROR: 502,
    AIErrorCode.PROVIDER_ERROR: 502,
}

# OpenAPI documentation for endpoints that call the provider
PROVIDER_ERROR_RESPONSES = {
    status_code: {"model": AiErrorOut} for status_code in (422, 429, 500, 502)
}


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------

def ai_error_status(code: str) -> int:
    """HTTP status for an error code; unknown codes are internal errors."""
    try:
        return ERROR_STATUS.get(AIErrorCode(code), 500)
    except ValueError:
        return 500


def provider_error_response(error: AIProviderError) -> JSONResponse:
    return JSONResponse(
        status_code=ai_error_status(error.code.value),
        content={"error": error.message, "code": error.code.value},
    )


def internal_error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": message, "code": "INTERNAL_ERROR"},
    )


def enforce_ai_rate_limit(current_user: User = Depends(get_current_user)) -> User:
    """
    Spend one unit of the user's hourly AI budget.

    RateLimitExceeded is turned into a 429 by rate_limit_exceeded_handler.
    """
    ai_rate_limiter.check(current_user.id)
    return current_user


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Registered on the app in app.main."""
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": str(exc), "code": AIErrorCode.RATE_LIMITED.value},
        headers={"Retry-After": str(int(exc.retry_after) + 1)},
    )


def require_settings(db: Session, user: User) -> UserAiSettings:
    row = ai_settings_service.get(db, user.id)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=AI_NOT_CONFIGURED,
        )
    return row


def settings_out(row: UserAiSettings) -> AiSettingsOut:
    return AiSettingsOut(
        id=row.id,
        provider=row.provider,
        api_key=mask_api_key(row.api_key),
        model=row.model,
        endpoint_url=row.endpoint_url,
        custom_prompt=row.custom_prompt or None,
        command_prompt=row.command_prompt or None,
    )


def snapshot_out(record: BinRecord) -> BinSnapshotSchema:
    return BinSnapshotSchema(**record.to_dict())


# ---------------------------------------------------------------------------
# SETTINGS
# ---------------------------------------------------------------------------

@router.get("/settings", response_model=Optional[AiSettingsOut])
def get_ai_settings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Return the user's AI settings with the key masked, or null."""
    row = ai_settings_service.get(db, current_user.id)
    if row is None:
        return None
    return settings_out(row)


@router.put("/settings", response_model=AiSettingsOut)
def update_ai_settings(
    request: AiSettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create or replace the user's AI settings."""
    try:
        row = ai_settings_service.save(
            db,
            current_user.id,
            provider=request.provider,
            api_key=request.api_key,
            model=request.model,
            endpoint_url=request.endpoint_url,
            custom_prompt=request.custom_prompt,
            command_prompt=request.command_prompt,
        )
    except SettingsValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return settings_out(row)


@router.delete("/settings")
def delete_ai_settings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ai_settings_service.delete(db, current_user.id)
    return {"deleted": True}


# ---------------------------------------------------------------------------
# PROVIDER CALLS
# ---------------------------------------------------------------------------

@router.post("/test", responses=PROVIDER_ERROR_RESPONSES)
async def test_ai_connection(
    request: ConnectionTestRequest,
    current_user: User = Depends(enforce_ai_rate_limit),
    db: Session = Depends(get_db),
):
    """
    Check credentials against the provider without saving them.

    A masked api_key ("****1234") means the stored key.
    """
    try:
        api_key = ai_settings_service.resolve_api_key(db, current_user.id, request.api_key)
        config = ProviderConfig(
            provider=request.provider,
            api_key=api_key,
            model=request.model,
            endpoint_url=request.endpoint_url or None,
        )
    except SettingsValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Invalid provider")

    try:
        await create_provider(config).test_connection()
    except AIProviderError as e:
        return provider_error_response(e)
    except Exception as e:
        logger.error(f"AI test error: {e}", exc_info=True)
        return internal_error_response("Connection test failed")

    return {"success": True}


@router.post("/command", response_model=InterpretationResult, responses=PROVIDER_ERROR_RESPONSES)
async def interpret_command(
    request: CommandRequest,
    current_user: User = Depends(enforce_ai_rate_limit),
    db: Session = Depends(get_db),
):
    """
    Turn a natural-language command into resolved actions for review.

    Nothing is written here; approved actions go to POST /ai/execute.
    """
    require_location_member(db, current_user, request.location_id)
    row = require_settings(db, current_user)

    try:
        store = SqlInventoryStore(db)
        context = build_command_context(store, request.location_id)
        result = await command_interpreter.interpret(
            request.text,
            context,
            ai_settings_service.to_provider_config(row),
            prompt_override=row.command_prompt,
        )
    except AIProviderError as e:
        return provider_error_response(e)
    except Exception as e:
        logger.error(f"AI command error: {e}", exc_info=True)
        return internal_error_response("Failed to parse command")

    return result


@router.post("/analyze-image", response_model=AiSuggestions, responses=PROVIDER_ERROR_RESPONSES)
async def analyze_image(
    request: AnalyzeImageRequest,
    current_user: User = Depends(enforce_ai_rate_limit),
    db: Session = Depends(get_db),
):
    """Suggest name, items, tags and notes for a bin from 1-5 photos."""
    existing_tags = None
    if request.location_id:
        require_location_member(db, current_user, request.location_id)
        existing_tags = SqlInventoryStore(db).list_tags(request.location_id)
    row = require_settings(db, current_user)

    images = [ImageInput(base64=img.data, mime_type=img.mime_type) for img in request.images]
    try:
        suggestions = await analyze_images(
            ai_settings_service.to_provider_config(row),
            images,
            existing_tags=existing_tags,
            custom_prompt=row.custom_prompt,
        )
    except AIProviderError as e:
        return provider_error_response(e)
    except Exception as e:
        logger.error(f"AI analyze-image error: {e}", exc_info=True)
        return internal_error_response("Failed to analyze image")

    return suggestions


@router.post("/structure-text", response_model=StructuredItemsOut, responses=PROVIDER_ERROR_RESPONSES)
async def structure_dictation(
    request: StructureTextRequest,
    current_user: User = Depends(enforce_ai_rate_limit),
    db: Session = Depends(get_db),
):
    """Extract item names from dictated or pasted text."""
    row = require_settings(db, current_user)

    try:
        result = await structure_text(
            ai_settings_service.to_provider_config(row),
            request.text,
            bin_name=request.bin_name,
            existing_items=request.existing_items,
        )
    except AIProviderError as e:
        return provider_error_response(e)
    except Exception as e:
        logger.error(f"AI structure-text error: {e}", exc_info=True)
        return internal_error_response("Failed to structure text")

    return StructuredItemsOut(items=result.items)


# ---------------------------------------------------------------------------
# EXECUTION
# ---------------------------------------------------------------------------

@router.post("/execute", response_model=ExecutionOutcomeOut)
def execute_actions(
    request: ExecuteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Run the approved actions in order.

    Individual failures are reported in `failures`; the run never stops early.
    """
    require_location_member(db, current_user, request.location_id)

    executor = CommandExecutor(
        SqlInventoryStore(db), request.location_id, created_by=current_user.id,
    )
    outcome = executor.execute(request.actions)
    return outcome.to_dict()


@router.post("/undo", response_model=BinSnapshotSchema, status_code=status.HTTP_201_CREATED)
def undo_delete(
    request: UndoRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Recreate a deleted bin with its original id and short code."""
    require_location_member(db, current_user, request.location_id)
    if request.snapshot.location_id != request.location_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Snapshot belongs to another location",
        )

    snapshot = BinRecord.from_dict(request.snapshot.model_dump())
    try:
        record = restore_bin(SqlInventoryStore(db), snapshot)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return snapshot_out(record)
