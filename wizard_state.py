"""
Thumbnail Wizard - Session State
================================
The in-progress thumbnail request and its single-writer store.

A WizardSession is owned by one creation flow (one browser tab). It is loaded,
mutated through a WizardStore and saved back explicitly by the caller; nothing
here keeps module-level state.
"""

import uuid
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field

from config import TOTAL_STEPS
from utils import setup_logger

logger = setup_logger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


# =============================================================================
# SESSION MODEL
# =============================================================================

class WizardSession(BaseModel):
    """State of one thumbnail creation flow."""

    id: str = Field(default_factory=_new_id)
    current_step: int = Field(default=1, ge=1, le=TOTAL_STEPS)

    # Step 1
    face_image_ref: Optional[str] = None          # Public URL or data URI

    # Step 2
    video_title: str = ""
    video_description: str = ""
    thumbnail_details: str = ""
    thumbnail_text: str = ""

    # Step 3
    selected_style_id: Optional[str] = None

    # Step 4/5
    generated_thumbnail_ref: Optional[str] = None
    generated_description: Optional[str] = None

    # Changes on every reset; in-flight work compares it to drop stale results
    flow_id: str = Field(default_factory=_new_id)


# Fields the store writes (form edits, face upload, generation results)
EDITABLE_FIELDS = (
    "face_image_ref",
    "video_title",
    "video_description",
    "thumbnail_details",
    "thumbnail_text",
    "selected_style_id",
    "generated_thumbnail_ref",
    "generated_description",
)

TEXT_FIELDS = ("video_title", "video_description", "thumbnail_details", "thumbnail_text")

# Fields a client may set directly; the face goes through the upload/URL
# checks and results are only written by a completed generation
FORM_FIELDS = TEXT_FIELDS + ("selected_style_id",)


# =============================================================================
# STORE
# =============================================================================

class WizardStore:
    """
    Authoritative holder of one WizardSession.

    Also remembers the style ids of the most recent catalog refresh so that a
    selection can be re-validated whenever it changes. ``catalog_ids`` is None
    until the first refresh.
    """

    def __init__(self, session: Optional[WizardSession] = None, catalog_ids: Optional[Iterable[str]] = None):
        self.session = session or WizardSession()
        self.catalog_ids: Optional[list[str]] = list(catalog_ids) if catalog_ids is not None else None

    @property
    def current_step(self) -> int:
        return self.session.current_step

    def set_field(self, name: str, value: Any) -> None:
        """
        Unconditionally update one field.

        Text fields store None as "". Setting a style id re-validates it
        against the last known catalog.
        """
        if name not in EDITABLE_FIELDS:
            raise KeyError(name)

        if name in TEXT_FIELDS:
            value = value or ""
        elif value == "":
            value = None

        setattr(self.session, name, value)

        # Clearing the style is an explicit opt-out; only unknown ids are replaced
        if name == "selected_style_id" and value is not None:
            self._revalidate_style()

    def set_fields(self, values: dict) -> None:
        """Apply several updates in the given order (last write wins)."""
        for name, value in values.items():
            self.set_field(name, value)

    def apply_form(self, values: dict) -> None:
        """
        Apply client edits. Every name is checked before anything is written.

        Raises:
            KeyError: a name outside FORM_FIELDS
        """
        for name in values:
            if name not in FORM_FIELDS:
                raise KeyError(name)
        self.set_fields(values)

    def go_to_step(self, step: int) -> None:
        """Jump to a step without validation. Out-of-range values are clamped."""
        self.session.current_step = max(1, min(TOTAL_STEPS, int(step)))

    def reset(self) -> None:
        """Restore the empty initial session, keeping its id."""
        self.session = WizardSession(id=self.session.id)
        self.catalog_ids = None

    def apply_catalog(self, catalog_ids: Iterable[str]) -> Optional[str]:
        """
        Record a freshly fetched catalog and re-validate the selection.

        Returns:
            The (possibly changed) selected style id
        """
        self.catalog_ids = list(catalog_ids)
        self._revalidate_style()
        return self.session.selected_style_id

    def _revalidate_style(self) -> None:
        if self.catalog_ids is None:
            return

        selected = self.session.selected_style_id
        if selected is not None and selected in self.catalog_ids:
            return

        fallback = self.catalog_ids[0] if self.catalog_ids else None
        if selected != fallback:
            logger.info(
                f"Style '{selected}' not in catalog for session {self.session.id}, "
                f"falling back to '{fallback}'"
            )
        self.session.selected_style_id = fallback
