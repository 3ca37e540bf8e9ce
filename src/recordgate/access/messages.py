"""Localized error text lookup."""

from typing import Any, Dict, Mapping, Optional

DEFAULT_LOCALE = "en"

BUILTIN_MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "not_found": "The requested record was not found.",
        "permission_denied": "You do not have permission to modify this record.",
        "save_error": "The record could not be saved.",
        "destroy_error": "The record could not be deleted.",
    },
}


def lookup(
    key: str,
    locale: Optional[str] = None,
    catalog: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> str:
    """
    Resolve a message key for a locale.

    Falls back from the configured catalog to the built-in catalog, then to
    the default locale, then to the key itself.
    """
    locale = locale or DEFAULT_LOCALE
    for source in (catalog or {}, BUILTIN_MESSAGES):
        for candidate in (locale, DEFAULT_LOCALE):
            text = (source.get(candidate) or {}).get(key)
            if text:
                return str(text)
    return key
