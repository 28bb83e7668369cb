"""
Language selection for bilingual (Thai/English) API messages.
"""
from typing import Optional

SUPPORTED_LANGUAGES = ("th", "en")

# Display prefixes for reference data that has been soft-deleted
DELETED_PREFIX = {"th": "[ลบ] ", "en": "[DELETED] "}


def resolve_language(accept_language: Optional[str], default: str = "th") -> str:
    """Pick "th" or "en" from the first entry of an Accept-Language header."""
    if not accept_language:
        return default
    primary = accept_language.split(",")[0].strip().lower()
    for lang in SUPPORTED_LANGUAGES:
        if primary.startswith(lang):
            return lang
    return default


def deleted_label(name: Optional[str], is_active: bool, lang: str = "en") -> str:
    name = name or "Unknown"
    if is_active:
        return name
    return f"{DELETED_PREFIX.get(lang, DELETED_PREFIX['en'])}{name}"
