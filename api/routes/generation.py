"""
Generation API Routes

Stateless thumbnail generation endpoint, callable cross-origin with the
same JSON contract the browser client uses.
"""

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from exceptions import GenerationError, ValidationError
from generation_proxy import GenerationProxy
from prompt_generation import GenerationRequest
from i18n.i18n import translate as t


router = APIRouter()
logger = logging.getLogger(__name__)


# ============================================================================
# MODELS
# ============================================================================

class GenerateThumbnailRequest(BaseModel):
    """camelCase body; missing required fields are reported as 400, not 422."""
    model_config = ConfigDict(populate_by_name=True)

    face_image: Optional[str] = Field(default=None, alias="faceImage")
    video_title: Optional[str] = Field(default=None, alias="videoTitle")
    video_description: Optional[str] = Field(default=None, alias="videoDescription")
    thumbnail_details: Optional[str] = Field(default=None, alias="thumbnailDetails")
    thumbnail_text: Optional[str] = Field(default=None, alias="thumbnailText")
    style: Optional[str] = None


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/generate-thumbnail")
async def generate_thumbnail(body: GenerateThumbnailRequest):
    """
    Generate a thumbnail description (and image, when enabled).

    Returns:
        {"thumbnailUrl": ..., "description": ...}
    """
    request = GenerationRequest(
        face_image=body.face_image or "",
        video_title=body.video_title or "",
        video_description=body.video_description,
        thumbnail_details=body.thumbnail_details,
        thumbnail_text=body.thumbnail_text,
        style=body.style,
    )

    try:
        result = await GenerationProxy().generate(request)
    except ValidationError as e:
        message = t(e.message_key) if e.message_key else str(e)
        return JSONResponse(status_code=400, content={"error": message})
    except GenerationError as e:
        return JSONResponse(status_code=502, content={"error": str(e)})

    return {"thumbnailUrl": result.result_url, "description": result.description}
