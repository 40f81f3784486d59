"""
Styles API Routes

Read-only view of the style catalog held in the styles bucket.
"""

from fastapi import APIRouter

from services.wizard_service import as_warnings
from style_resolver import StyleResolver


router = APIRouter()


@router.get("")
async def list_styles():
    """Current catalog in listing order."""
    catalog = await StyleResolver().fetch_catalog()
    return {
        "styles": [option.to_dict() for option in catalog.options],
        "warnings": as_warnings(catalog.warnings),
    }


@router.get("/{style_id}/preview")
async def get_style_preview(style_id: str):
    """Preview URL for a style id; ``available`` is false when no asset matches."""
    preview_url = await StyleResolver().resolve_preview_url(style_id)
    return {
        "style_id": style_id,
        "preview_url": preview_url,
        "available": preview_url is not None,
    }
