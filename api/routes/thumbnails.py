"""
Thumbnails API Routes

Saved generation results of the signed-in user.
"""

import mimetypes

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse, Response

from api.dependencies import get_current_user
from database.db import get_db
from i18n.i18n import translate as t
from services.thumbnail_service import ThumbnailService
from utils import is_data_uri, decode_data_uri, timestamped_filename


router = APIRouter()


@router.get("")
async def list_thumbnails(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    user: dict = Depends(get_current_user)
):
    """List the user's thumbnails, newest first."""
    async with get_db() as db:
        service = ThumbnailService(db)
        thumbnails = await service.list_records(user["id"], limit=limit, offset=offset)
        total = await service.count_records(user["id"])

    return {"thumbnails": thumbnails, "count": len(thumbnails), "total": total}


@router.get("/{thumbnail_id}")
async def get_thumbnail(thumbnail_id: int, user: dict = Depends(get_current_user)):
    async with get_db() as db:
        record = await ThumbnailService(db).get_record(user["id"], thumbnail_id)

    if not record:
        raise HTTPException(status_code=404, detail=t('api.errors.thumbnail_not_found'))
    return record


@router.delete("/{thumbnail_id}")
async def delete_thumbnail(thumbnail_id: int, user: dict = Depends(get_current_user)):
    async with get_db() as db:
        deleted = await ThumbnailService(db).delete_record(user["id"], thumbnail_id)

    if not deleted:
        raise HTTPException(status_code=404, detail=t('api.errors.thumbnail_not_found'))
    return {"success": True}


@router.get("/{thumbnail_id}/download")
async def download_thumbnail(thumbnail_id: int, user: dict = Depends(get_current_user)):
    """
    Download the generated image.

    Hosted results redirect to their URL; inline (data URI) results are
    streamed back as a file.
    """
    async with get_db() as db:
        record = await ThumbnailService(db).get_record(user["id"], thumbnail_id)

    if not record:
        raise HTTPException(status_code=404, detail=t('api.errors.thumbnail_not_found'))

    url = record["result_thumbnail_url"]
    if not is_data_uri(url):
        return RedirectResponse(url=url, status_code=307)

    try:
        mime_type, data = decode_data_uri(url)
    except ValueError:
        raise HTTPException(status_code=422, detail=t('api.errors.invalid_image_data'))

    media_type = mime_type if mime_type.startswith("image/") else "image/jpeg"
    extension = (mimetypes.guess_extension(media_type) or ".jpg").lstrip(".")
    if extension in ("jpe", "jpeg"):
        extension = "jpg"

    filename = timestamped_filename("thumbnail", extension)
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
