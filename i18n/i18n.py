"""
Internationalization (i18n) for the Thumbnail Wizard
====================================================
Server-side translations from JSON locale files, shared with the pages
through static/locales/.

Usage:
    from i18n.i18n import translate as t, set_language, get_language

    t('wizard.errors.title_required')     # "Please enter a video title"
    t('dashboard.count', count=3)         # "3 thumbnails"
"""

import json
import logging
from pathlib import Path
from typing import Optional
from contextvars import ContextVar

logger = logging.getLogger(__name__)

# Project root
PROJECT_DIR = Path(__file__).parent.parent

# Locales directory (shared with frontend in static/locales/)
LOCALES_DIR = PROJECT_DIR / "static" / "locales"

# Supported languages
SUPPORTED_LANGUAGES = ["en", "es"]
DEFAULT_LANGUAGE = "en"

# Current language (ContextVar: one value per request task)
_current_language: ContextVar[str] = ContextVar('current_language', default=DEFAULT_LANGUAGE)

# Cache for loaded translations
_translations_cache: dict[str, dict] = {}


def _load_translations(lang: str) -> dict:
    """Load translations from JSON file for a language."""
    if lang in _translations_cache:
        return _translations_cache[lang]

    locale_file = LOCALES_DIR / f"{lang}.json"
    if not locale_file.exists():
        logger.warning(f"Locale file not found: {locale_file}")
        return {}

    try:
        with open(locale_file, "r", encoding="utf-8") as f:
            translations = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing locale file {locale_file}: {e}")
        return {}

    _translations_cache[lang] = translations
    return translations


def _lookup(data: dict, key_path: str) -> Optional[str]:
    """Dot-notation lookup: 'wizard.errors.face_required'"""
    current = data
    for key in key_path.split("."):
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current if isinstance(current, str) else None


def _lookup_in(lang: str, key: str, count: Optional[int]) -> Optional[str]:
    translations = _load_translations(lang)
    if count is not None:
        # Plural forms are key_one / key_other in both locales
        plural_key = f"{key}_one" if count == 1 else f"{key}_other"
        value = _lookup(translations, plural_key)
        if value is not None:
            return value
    return _lookup(translations, key)


def get_language() -> str:
    """Get current language."""
    return _current_language.get()


def set_language(lang: str) -> bool:
    """Set current language. Returns False if not supported."""
    if lang not in SUPPORTED_LANGUAGES:
        return False
    _current_language.set(lang)
    return True


def translate(key: str, count: Optional[int] = None, **kwargs) -> str:
    """Translate a key to the current language.

    Falls back to English, then to "[key]" when the key is missing.
    """
    lang = _current_language.get()

    value = _lookup_in(lang, key, count)
    if value is None and lang != "en":
        value = _lookup_in("en", key, count)

    if value is None:
        return f"[{key}]"

    if count is not None:
        kwargs["count"] = count
    if not kwargs:
        return value

    try:
        return value.format(**kwargs)
    except (KeyError, IndexError):
        # Leave the template as-is if a placeholder is missing
        return value


def reload_translations():
    """Clear the translation cache (development)."""
    _translations_cache.clear()


def get_all_translations(lang: Optional[str] = None) -> dict:
    """All translations for a language, for the pages' scripts."""
    return _load_translations(lang or _current_language.get())


# Shorthand alias
t = translate
