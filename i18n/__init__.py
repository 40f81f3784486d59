# Internationalization (i18n) package
from .i18n import (
    t,
    translate,
    set_language,
    get_language,
    get_all_translations,
    reload_translations,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)

__all__ = [
    "t",
    "translate",
    "set_language",
    "get_language",
    "get_all_translations",
    "reload_translations",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
]
