"""
Wizard Service

Orchestrates one creation flow per HTTP request: load the session, run the
store/sequencer/resolver/proxy operation, save the session back.
"""

import json
import logging
import uuid
from typing import Optional

import aiosqlite

from config import FACES_BUCKET
from database.db import fetch_one
from exceptions import PersistenceError, ValidationError
from generation_proxy import GenerationProxy
from prompt_generation import GenerationRequest
from step_sequencer import StepSequencer, Step, NO_STYLE_WARNING
from storage import StorageBucket, get_bucket, prepare_image_upload
from style_resolver import StyleResolver, StyleCatalog, CATALOG_UNAVAILABLE_WARNING, display_name_for
from utils import encode_data_uri
from wizard_state import WizardSession, WizardStore
from .thumbnail_service import ThumbnailService


logger = logging.getLogger(__name__)

# Warning categories returned alongside successful operations
WARNING_CODES = {
    NO_STYLE_WARNING: "style",
    CATALOG_UNAVAILABLE_WARNING: "catalog",
}

# References the model API can fetch
FACE_URL_PREFIXES = ("http://", "https://", "data:image/")


def _warning(code: str, message: str) -> dict:
    return {"code": code, "message": message}


def as_warnings(messages: list[str]) -> list[dict]:
    return [_warning(WARNING_CODES.get(message, "general"), message) for message in messages]


class WizardService:
    """Service for wizard session operations."""

    def __init__(
        self,
        db: aiosqlite.Connection,
        resolver: Optional[StyleResolver] = None,
        proxy: Optional[GenerationProxy] = None,
        faces_bucket: Optional[StorageBucket] = None
    ):
        self.db = db
        self._resolver = resolver
        self._proxy = proxy
        self._faces_bucket = faces_bucket

    @property
    def resolver(self) -> StyleResolver:
        if self._resolver is None:
            self._resolver = StyleResolver()
        return self._resolver

    @property
    def proxy(self) -> GenerationProxy:
        if self._proxy is None:
            self._proxy = GenerationProxy()
        return self._proxy

    @property
    def faces_bucket(self) -> StorageBucket:
        if self._faces_bucket is None:
            self._faces_bucket = get_bucket(FACES_BUCKET)
        return self._faces_bucket

    # =========================================================================
    # SESSION PERSISTENCE
    # =========================================================================

    async def create_session(self, owner_id: Optional[int] = None) -> WizardStore:
        """Start a new creation flow at step 1."""
        store = WizardStore()
        await self.db.execute(
            "INSERT INTO wizard_sessions (id, owner_id, state, catalog_ids) VALUES (?, ?, ?, ?)",
            [store.session.id, owner_id, store.session.model_dump_json(), None]
        )
        await self.db.commit()
        logger.info(f"Created wizard session {store.session.id}")
        return store

    async def load_session(self, session_id: str) -> Optional[WizardStore]:
        row = await fetch_one(
            self.db,
            "SELECT state, catalog_ids FROM wizard_sessions WHERE id = ?",
            [session_id]
        )
        if not row:
            return None

        session = WizardSession.model_validate_json(row["state"])
        catalog_ids = json.loads(row["catalog_ids"]) if row["catalog_ids"] else None
        return WizardStore(session, catalog_ids)

    async def save_session(self, store: WizardStore) -> None:
        catalog_ids = json.dumps(store.catalog_ids) if store.catalog_ids is not None else None
        await self.db.execute(
            """
            UPDATE wizard_sessions
            SET state = ?, catalog_ids = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            [store.session.model_dump_json(), catalog_ids, store.session.id]
        )
        await self.db.commit()

    async def delete_session(self, session_id: str) -> bool:
        cursor = await self.db.execute("DELETE FROM wizard_sessions WHERE id = ?", [session_id])
        await self.db.commit()
        return cursor.rowcount > 0

    def describe(self, store: WizardStore) -> dict:
        """Session fields plus step metadata."""
        return {
            "session": store.session.model_dump(),
            "step": StepSequencer(store).describe(),
        }

    # =========================================================================
    # FIELD EDITS AND NAVIGATION
    # =========================================================================

    async def set_fields(self, store: WizardStore, values: dict) -> None:
        """
        Apply form edits. A style written before the first catalog refresh
        (new or reset session) is checked against a fresh catalog.

        Raises:
            KeyError: unknown or read-only field name (nothing is saved)
        """
        store.apply_form(values)

        if values.get("selected_style_id") is not None and store.catalog_ids is None:
            await self.resolver.refresh(store)

        await self.save_session(store)

    async def advance(self, store: WizardStore) -> list[dict]:
        """
        Move forward one step. Entering the style step refreshes the catalog.

        Raises:
            ValidationError: the current step's gate does not hold
        """
        warnings = as_warnings(StepSequencer(store).advance())

        if store.current_step == Step.SELECT_STYLE:
            catalog = await self.resolver.refresh(store)
            warnings.extend(as_warnings(catalog.warnings))

        await self.save_session(store)
        return warnings

    async def retreat(self, store: WizardStore) -> None:
        StepSequencer(store).retreat()
        await self.save_session(store)

    async def refresh_styles(self, store: WizardStore) -> StyleCatalog:
        """Fetch the catalog and re-validate the selection."""
        catalog = await self.resolver.refresh(store)
        await self.save_session(store)
        return catalog

    async def complete_check(self, store: WizardStore) -> dict:
        """
        Guard for the completion view.

        Returns:
            {"redirected": bool, "step": int}
        """
        redirected = StepSequencer(store).ensure_terminal_state()
        if redirected:
            await self.save_session(store)
        return {"redirected": redirected, "step": store.current_step}

    async def reset(self, store: WizardStore) -> None:
        store.reset()
        await self.save_session(store)
        logger.info(f"Reset wizard session {store.session.id}")

    # =========================================================================
    # FACE IMAGE
    # =========================================================================

    async def upload_face(self, store: WizardStore, data: bytes) -> StyleCatalog:
        """
        Store an uploaded face image and point the session at it.

        The model API fetches the face itself, so a site-relative bucket URL
        (local backend) is replaced by the image as a data URI.

        Raises:
            ValidationError: not a usable image
            StorageError: the upload failed (session unchanged)
        """
        image_bytes, content_type, extension = prepare_image_upload(data)
        object_name = f"face-{uuid.uuid4().hex}.{extension}"
        url = await self.faces_bucket.upload(object_name, image_bytes, content_type)

        if not url.startswith(FACE_URL_PREFIXES):
            logger.debug(f"Face stored at {url}, sending it inline")
            url = encode_data_uri(image_bytes, content_type)

        store.set_field("face_image_ref", url)
        return await self.refresh_styles(store)

    async def set_face_url(self, store: WizardStore, url: str) -> StyleCatalog:
        """
        Use an already hosted image (or data URI) as the face.

        Raises:
            ValidationError: empty or unsupported reference
        """
        url = (url or "").strip()
        if not url.startswith(FACE_URL_PREFIXES):
            raise ValidationError(
                "invalid face image reference",
                message_key="wizard.errors.invalid_face_url",
                field="face_image_ref",
            )

        store.set_field("face_image_ref", url)
        return await self.refresh_styles(store)

    # =========================================================================
    # GENERATION
    # =========================================================================

    async def generate(self, store: WizardStore, owner_id: Optional[int] = None) -> dict:
        """
        Run one generation for the session (also used for "Regenerate").

        The result is discarded when the session was reset or deleted while
        the model call was in flight.

        Returns:
            {"discarded": bool, "result": dict|None, "record": dict|None,
             "warnings": [...], "store": WizardStore|None}

        Raises:
            ValidationError: not on the review/done step, or fields missing
            GenerationError: the model call failed (session unchanged)
        """
        sequencer = StepSequencer(store)
        if not sequencer.can_generate():
            raise ValidationError(
                "generation is only available from the review step",
                message_key="wizard.errors.not_on_review",
            )

        session = store.session
        request = GenerationRequest(
            face_image=session.face_image_ref or "",
            video_title=session.video_title,
            video_description=session.video_description or None,
            thumbnail_details=session.thumbnail_details or None,
            thumbnail_text=session.thumbnail_text or None,
            style=display_name_for(session.selected_style_id) if session.selected_style_id else None,
        )
        flow_id = session.flow_id

        result = await self.proxy.generate(request)

        current = await self.load_session(session.id)
        if current is None or current.session.flow_id != flow_id:
            logger.warning(f"Session {session.id} changed during generation, result discarded")
            return {"discarded": True, "result": None, "record": None, "warnings": [], "store": current}

        StepSequencer(current).complete_generation(result.result_url, result.description)
        await self.save_session(current)

        warnings = []
        record = None
        if owner_id is not None:
            try:
                record = await ThumbnailService(self.db).create_record(
                    owner_id=owner_id,
                    title=current.session.video_title,
                    description=current.session.video_description,
                    style_id=current.session.selected_style_id,
                    source_face_image_url=current.session.face_image_ref,
                    result_thumbnail_url=result.result_url,
                    generated_description=result.description,
                )
            except PersistenceError as e:
                warnings.append(_warning("persistence", str(e)))

        return {
            "discarded": False,
            "result": result.to_dict(),
            "record": record,
            "warnings": warnings,
            "store": current,
        }
