"""
Thumbnail Service

Persisted results of completed generations, owned by a user account.
Records are created and deleted, never updated.
"""

import logging
from typing import List, Optional
import aiosqlite

from database.db import fetch_one, fetch_all
from exceptions import PersistenceError


logger = logging.getLogger(__name__)


class ThumbnailService:
    """Service for ThumbnailRecord operations, keyed by owner."""

    RECORD_COLUMNS = """
        id, owner_id, title, description, style_id,
        source_face_image_url, result_thumbnail_url,
        generated_description, created_at
    """

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def create_record(
        self,
        owner_id: int,
        title: str,
        source_face_image_url: str,
        result_thumbnail_url: str,
        description: Optional[str] = None,
        style_id: Optional[str] = None,
        generated_description: Optional[str] = None
    ) -> dict:
        """
        Create a record for a finished generation.

        Raises:
            PersistenceError: the insert failed
        """
        query = """
            INSERT INTO thumbnail_records
            (owner_id, title, description, style_id, source_face_image_url,
             result_thumbnail_url, generated_description)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        try:
            cursor = await self.db.execute(query, [
                owner_id,
                title,
                description or None,
                style_id,
                source_face_image_url,
                result_thumbnail_url,
                generated_description
            ])
            await self.db.commit()
        except aiosqlite.Error as e:
            logger.error(f"Could not save thumbnail record for user {owner_id}: {e}")
            raise PersistenceError(f"Could not save thumbnail record: {e}") from e

        record = await self.get_record(owner_id, cursor.lastrowid)
        logger.info(f"Saved thumbnail record {cursor.lastrowid} for user {owner_id}")
        return record

    async def get_record(self, owner_id: int, record_id: int) -> Optional[dict]:
        """Get one record if it belongs to the owner."""
        query = f"""
            SELECT {self.RECORD_COLUMNS}
            FROM thumbnail_records
            WHERE id = ? AND owner_id = ?
        """
        return await fetch_one(self.db, query, [record_id, owner_id])

    async def list_records(self, owner_id: int, limit: int = 50, offset: int = 0) -> List[dict]:
        """List the owner's records, newest first."""
        query = f"""
            SELECT {self.RECORD_COLUMNS}
            FROM thumbnail_records
            WHERE owner_id = ?
            ORDER BY created_at DESC, id DESC
            LIMIT ? OFFSET ?
        """
        return await fetch_all(self.db, query, [owner_id, limit, offset])

    async def count_records(self, owner_id: int) -> int:
        async with self.db.execute(
            "SELECT COUNT(*) FROM thumbnail_records WHERE owner_id = ?",
            [owner_id]
        ) as cursor:
            row = await cursor.fetchone()
            return row[0] if row else 0

    async def delete_record(self, owner_id: int, record_id: int) -> bool:
        """
        Delete a record.

        Returns:
            False if the record does not exist or belongs to someone else
        """
        cursor = await self.db.execute(
            "DELETE FROM thumbnail_records WHERE id = ? AND owner_id = ?",
            [record_id, owner_id]
        )
        await self.db.commit()
        return cursor.rowcount > 0
