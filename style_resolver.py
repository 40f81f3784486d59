"""
Thumbnail Wizard - Style Resolver
=================================
Reconciles the wizard's selected style with the style assets currently held
in the styles bucket.

Catalog derivation:
    "neon-glow.jpg" -> StyleOption(id="neon-glow", display_name="Neon Glow")

Entries keep the order the storage backend lists them in; the first entry is
the default when the current selection is missing.
"""

import re
from dataclasses import dataclass, field, asdict
from typing import Optional

from config import STYLE_IMAGE_EXTENSIONS, PREVIEW_EXTENSION_CANDIDATES, STYLES_BUCKET
from exceptions import StorageError
from storage import StorageBucket, get_bucket
from wizard_state import WizardStore
from utils import setup_logger

logger = setup_logger(__name__)

STYLE_FILE_PATTERN = re.compile(
    r"^(?P<id>.+)\.(?:" + "|".join(STYLE_IMAGE_EXTENSIONS) + r")$",
    re.IGNORECASE,
)

_NAME_SEPARATORS = re.compile(r"[-_]+")

CATALOG_UNAVAILABLE_WARNING = "style catalog unavailable"


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class StyleOption:
    """A selectable style, derived from one asset in the styles bucket."""
    id: str
    display_name: str
    preview_url: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class StyleCatalog:
    """Result of one catalog refresh."""
    options: list[StyleOption] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ids(self) -> list[str]:
        return [option.id for option in self.options]

    def get(self, style_id: str) -> Optional[StyleOption]:
        return next((option for option in self.options if option.id == style_id), None)


def display_name_for(style_id: str) -> str:
    """'neon-glow' -> 'Neon Glow'"""
    tokens = [token for token in _NAME_SEPARATORS.split(style_id) if token]
    return " ".join(token[:1].upper() + token[1:] for token in tokens)


def build_catalog(objects: list[dict], bucket: StorageBucket) -> list[StyleOption]:
    """Derive style options from a bucket listing, keeping listing order."""
    options = []
    seen = set()

    for obj in objects:
        name = obj.get("name") or ""
        match = STYLE_FILE_PATTERN.match(name)
        if not match:
            continue

        style_id = match.group("id")
        # Same id in two formats: the first listed wins
        if style_id in seen:
            continue
        seen.add(style_id)

        options.append(StyleOption(
            id=style_id,
            display_name=display_name_for(style_id),
            preview_url=bucket.public_url(name),
        ))

    return options


# =============================================================================
# RESOLVER
# =============================================================================

class StyleResolver:
    """Lists style assets and resolves style ids to preview URLs."""

    def __init__(self, bucket: Optional[StorageBucket] = None):
        self.bucket = bucket or get_bucket(STYLES_BUCKET)

    async def fetch_catalog(self) -> StyleCatalog:
        """
        Fetch the current catalog.

        A listing failure is not fatal: it yields an empty catalog and a warning.
        """
        try:
            objects = await self.bucket.list_objects()
        except StorageError as e:
            logger.warning(f"Could not list style assets: {e}")
            return StyleCatalog(warnings=[CATALOG_UNAVAILABLE_WARNING])

        return StyleCatalog(options=build_catalog(objects, self.bucket))

    async def refresh(self, store: WizardStore) -> StyleCatalog:
        """
        Fetch the catalog and re-validate the store's selection against it.

        Unset or vanished selections fall back to the first catalog entry
        (or None for an empty catalog).
        """
        catalog = await self.fetch_catalog()
        previous = store.session.selected_style_id

        # An empty catalog (failed listing included) clears the selection
        current = store.apply_catalog(catalog.ids)
        if previous != current:
            logger.info(f"Session {store.session.id}: style '{previous}' -> '{current}'")

        return catalog

    async def resolve_preview_url(self, style_id: Optional[str]) -> Optional[str]:
        """
        Resolve a style id to a displayable URL when only the id is known.

        Tries PREVIEW_EXTENSION_CANDIDATES in order against the live listing.

        Returns:
            Public URL of the first existing candidate, or None if unavailable
        """
        if not style_id:
            return None

        try:
            objects = await self.bucket.list_objects()
        except StorageError as e:
            logger.warning(f"Could not resolve preview for style '{style_id}': {e}")
            return None

        names = [obj.get("name") or "" for obj in objects]

        for suffix in PREVIEW_EXTENSION_CANDIDATES:
            candidate = f"{style_id}{suffix}"
            if candidate in names:
                return self.bucket.public_url(candidate)

            # Same candidate with an upper/mixed-case extension
            for name in names:
                if name.startswith(style_id) and name[len(style_id):].lower() == suffix:
                    return self.bucket.public_url(name)

        return None
