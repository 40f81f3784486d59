"""
Wizard API Routes

Endpoints that drive one thumbnail creation flow through its steps.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from api.dependencies import get_optional_user
from database.db import get_db
from exceptions import GenerationError, StorageError, ValidationError
from i18n.i18n import translate as t
from services.wizard_service import WizardService, as_warnings
from style_resolver import StyleCatalog
from wizard_state import WizardStore


router = APIRouter()
logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class FaceUrlRequest(BaseModel):
    url: str


# =============================================================================
# HELPERS
# =============================================================================

def _validation_detail(error: ValidationError) -> str:
    return t(error.message_key) if error.message_key else str(error)


async def _load_or_404(service: WizardService, session_id: str) -> WizardStore:
    store = await service.load_session(session_id)
    if store is None:
        raise HTTPException(status_code=404, detail=t('api.errors.session_not_found'))
    return store


def _with_catalog(service: WizardService, store: WizardStore, catalog: StyleCatalog) -> dict:
    return {
        **service.describe(store),
        "styles": [option.to_dict() for option in catalog.options],
        "warnings": as_warnings(catalog.warnings),
    }


# =============================================================================
# SESSION LIFECYCLE
# =============================================================================

@router.post("")
async def create_session(user: Optional[dict] = Depends(get_optional_user)):
    """Start a new creation flow."""
    async with get_db() as db:
        service = WizardService(db)
        store = await service.create_session(owner_id=user["id"] if user else None)
        return service.describe(store)


@router.get("/{session_id}")
async def get_session(session_id: str):
    """Current session state and step metadata."""
    async with get_db() as db:
        service = WizardService(db)
        store = await _load_or_404(service, session_id)
        return service.describe(store)


@router.patch("/{session_id}")
async def update_session(session_id: str, values: dict[str, Any]):
    """
    Set one or more session fields.

    Body: JSON object of field name -> value.
    """
    async with get_db() as db:
        service = WizardService(db)
        store = await _load_or_404(service, session_id)
        try:
            await service.set_fields(store, values)
        except KeyError as e:
            raise HTTPException(
                status_code=422,
                detail=t('api.errors.unknown_field', field=e.args[0] if e.args else "")
            )
        return service.describe(store)


@router.delete("/{session_id}")
async def delete_session(session_id: str):
    async with get_db() as db:
        deleted = await WizardService(db).delete_session(session_id)

    if not deleted:
        raise HTTPException(status_code=404, detail=t('api.errors.session_not_found'))
    return {"success": True}


@router.post("/{session_id}/reset")
async def reset_session(session_id: str):
    """Abandon or finish the flow: back to an empty step 1."""
    async with get_db() as db:
        service = WizardService(db)
        store = await _load_or_404(service, session_id)
        await service.reset(store)
        return service.describe(store)


# =============================================================================
# NAVIGATION
# =============================================================================

@router.post("/{session_id}/advance")
async def advance(session_id: str):
    async with get_db() as db:
        service = WizardService(db)
        store = await _load_or_404(service, session_id)
        try:
            warnings = await service.advance(store)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=_validation_detail(e))
        return {**service.describe(store), "warnings": warnings}


@router.post("/{session_id}/retreat")
async def retreat(session_id: str):
    async with get_db() as db:
        service = WizardService(db)
        store = await _load_or_404(service, session_id)
        await service.retreat(store)
        return service.describe(store)


@router.get("/{session_id}/complete")
async def complete_check(session_id: str):
    """
    Guard for the completion view.

    ``redirected`` is true when the session had no result and was sent back
    to the review step.
    """
    async with get_db() as db:
        service = WizardService(db)
        store = await _load_or_404(service, session_id)
        guard = await service.complete_check(store)
        return {**service.describe(store), **guard}


# =============================================================================
# FACE IMAGE AND STYLES
# =============================================================================

@router.post("/{session_id}/face")
async def upload_face(session_id: str, file: UploadFile = File(...)):
    """Upload a face photo; refreshes the style catalog afterwards."""
    data = await file.read()

    async with get_db() as db:
        service = WizardService(db)
        store = await _load_or_404(service, session_id)
        try:
            catalog = await service.upload_face(store, data)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=_validation_detail(e))
        except StorageError as e:
            logger.error(f"Face upload failed for session {session_id}: {e}")
            raise HTTPException(status_code=502, detail=t('api.errors.upload_failed'))
        return _with_catalog(service, store, catalog)


@router.post("/{session_id}/face/url")
async def set_face_url(session_id: str, body: FaceUrlRequest):
    """Use an already hosted face image."""
    async with get_db() as db:
        service = WizardService(db)
        store = await _load_or_404(service, session_id)
        try:
            catalog = await service.set_face_url(store, body.url)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=_validation_detail(e))
        return _with_catalog(service, store, catalog)


@router.get("/{session_id}/styles")
async def refresh_styles(session_id: str):
    """Refresh the style catalog and re-validate the selection."""
    async with get_db() as db:
        service = WizardService(db)
        store = await _load_or_404(service, session_id)
        catalog = await service.refresh_styles(store)
        return _with_catalog(service, store, catalog)


# =============================================================================
# GENERATION
# =============================================================================

@router.post("/{session_id}/generate")
async def generate(session_id: str, user: Optional[dict] = Depends(get_optional_user)):
    """
    Generate (or regenerate) the thumbnail from the review step.

    Signed-in users get a saved record; a failed save is reported as a
    warning and does not fail the request.
    """
    async with get_db() as db:
        service = WizardService(db)
        store = await _load_or_404(service, session_id)
        try:
            outcome = await service.generate(store, owner_id=user["id"] if user else None)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=_validation_detail(e))
        except GenerationError as e:
            raise HTTPException(status_code=502, detail=t('api.errors.generation_failed', error=str(e)))

        if outcome["discarded"]:
            raise HTTPException(status_code=409, detail=t('api.errors.session_changed'))

        return {
            **service.describe(outcome["store"]),
            "result": outcome["result"],
            "record": outcome["record"],
            "warnings": outcome["warnings"],
        }
