"""
Object Storage

Flat object containers ("buckets") for style assets, uploaded faces and
rendered thumbnails.

Backends:
    - LocalBucket: one directory per bucket under STORAGE_DIR, served by the
      app under PUBLIC_STORAGE_URL
    - SupabaseBucket: Supabase Storage via the supabase client

Every backend failure is raised as StorageError.
"""

import asyncio
import io
import mimetypes
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from config import (
    STORAGE_BACKEND,
    STORAGE_DIR,
    PUBLIC_STORAGE_URL,
    SUPABASE_URL,
    SUPABASE_KEY,
    MAX_UPLOAD_BYTES,
    FACE_IMAGE_MAX_SIDE,
)
from exceptions import StorageError, ValidationError
from utils import setup_logger, sanitize_filename, ensure_dir

logger = setup_logger(__name__)


# =============================================================================
# BUCKET INTERFACE
# =============================================================================

class StorageBucket:
    """A flat container of named objects."""

    name: str

    async def list_objects(self) -> list[dict]:
        """List objects in backend order. Each entry has at least a 'name'."""
        raise NotImplementedError

    def public_url(self, object_name: str) -> str:
        """Public URL of an object (does not check existence)."""
        raise NotImplementedError

    async def upload(self, object_name: str, data: bytes, content_type: str) -> str:
        """Store an object and return its public URL."""
        raise NotImplementedError

    async def exists(self, object_name: str) -> bool:
        objects = await self.list_objects()
        return any(obj.get("name") == object_name for obj in objects)


class LocalBucket(StorageBucket):
    """Bucket backed by a local directory."""

    def __init__(self, name: str, root: Path = STORAGE_DIR, public_base: str = PUBLIC_STORAGE_URL):
        self.name = name
        self.root = Path(root)
        self.path = self.root / name
        self.public_base = public_base.rstrip("/")

    async def list_objects(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            # Directory order is backend order; sorted for reproducible listings
            entries = sorted(self.path.iterdir(), key=lambda p: p.name)
            return [
                {"name": entry.name, "size": entry.stat().st_size}
                for entry in entries
                if entry.is_file()
            ]
        except OSError as e:
            raise StorageError(f"Could not list bucket '{self.name}': {e}") from e

    def public_url(self, object_name: str) -> str:
        return f"{self.public_base}/{self.name}/{object_name}"

    async def upload(self, object_name: str, data: bytes, content_type: str) -> str:
        safe_name = sanitize_filename(object_name)
        try:
            ensure_dir(self.path)
            (self.path / safe_name).write_bytes(data)
        except OSError as e:
            raise StorageError(f"Could not write '{safe_name}' to bucket '{self.name}': {e}") from e
        logger.info(f"Stored {safe_name} in bucket '{self.name}' ({len(data)} bytes)")
        return self.public_url(safe_name)


class SupabaseBucket(StorageBucket):
    """Bucket backed by Supabase Storage."""

    def __init__(self, name: str, client=None):
        self.name = name
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not SUPABASE_URL or not SUPABASE_KEY:
                raise StorageError("SUPABASE_URL or SUPABASE_KEY not set")
            from supabase import create_client
            self._client = create_client(SUPABASE_URL, SUPABASE_KEY)
        return self._client

    async def list_objects(self) -> list[dict]:
        try:
            # The supabase client is synchronous
            objects = await asyncio.to_thread(self.client.storage.from_(self.name).list)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Could not list bucket '{self.name}': {e}") from e
        return [obj for obj in (objects or []) if obj.get("name")]

    def public_url(self, object_name: str) -> str:
        return self.client.storage.from_(self.name).get_public_url(object_name)

    async def upload(self, object_name: str, data: bytes, content_type: str) -> str:
        try:
            await asyncio.to_thread(
                self.client.storage.from_(self.name).upload,
                object_name,
                data,
                {"content-type": content_type},
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Could not upload '{object_name}' to bucket '{self.name}': {e}") from e
        logger.info(f"Uploaded {object_name} to Supabase bucket '{self.name}'")
        return self.public_url(object_name)


# =============================================================================
# FACTORY
# =============================================================================

_buckets: dict[str, StorageBucket] = {}


def get_bucket(name: str) -> StorageBucket:
    """Get (and cache) the bucket for the configured backend."""
    if name not in _buckets:
        if STORAGE_BACKEND == "supabase":
            _buckets[name] = SupabaseBucket(name)
        elif STORAGE_BACKEND == "local":
            _buckets[name] = LocalBucket(name)
        else:
            raise StorageError(f"Unknown STORAGE_BACKEND: {STORAGE_BACKEND}")
    return _buckets[name]


# =============================================================================
# IMAGE HELPERS
# =============================================================================

def prepare_image_upload(data: bytes, max_side: int = FACE_IMAGE_MAX_SIDE) -> tuple[bytes, str, str]:
    """
    Validate an uploaded image and normalize it to JPEG.

    Returns:
        (jpeg_bytes, content_type, extension)

    Raises:
        ValidationError: empty, too large or not an image
    """
    if not data:
        raise ValidationError("empty upload", message_key="wizard.errors.empty_upload")

    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError("image too large", message_key="wizard.errors.upload_too_large")

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError(
            "please upload an image file",
            message_key="wizard.errors.not_an_image",
        ) from e

    if max(img.size) > max_side:
        img.thumbnail((max_side, max_side))

    if img.mode != "RGB":
        img = img.convert("RGB")

    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=90)
    return buffer.getvalue(), "image/jpeg", "jpg"


def guess_content_type(object_name: str) -> str:
    """Content type from the object name, defaulting to binary."""
    content_type, _ = mimetypes.guess_type(object_name)
    return content_type or "application/octet-stream"
