"""
Multilingual field handling.

A multilingual field is a mapping from locale code to translated text. A
missing locale means "not translated yet"; readers fall back through a fixed
chain instead of failing.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from backoffice.errors import EntityValidationError


class Locale(str, Enum):
    """Supported content locales"""
    ID = "id"
    EN = "en"


SUPPORTED_LOCALES: Tuple[str, ...] = tuple(locale.value for locale in Locale)
DEFAULT_FALLBACK: Tuple[Locale, ...] = (Locale.ID, Locale.EN)
LOCALE_NAMES = {Locale.EN: "English", Locale.ID: "Indonesian"}

MultilingualText = Dict[str, str]


def resolve_text(
    field: Optional[Mapping[str, Any]],
    locale: Locale | str = Locale.ID,
    fallback: Iterable[Locale] = DEFAULT_FALLBACK,
    placeholder: str = "",
) -> str:
    """
    Pick the display value of a multilingual field.

    Order: requested locale, the fallback chain, any other non-empty value,
    then ``placeholder``. Never raises and always returns a string.
    """
    if not field or not isinstance(field, Mapping):
        return placeholder

    requested = locale.value if isinstance(locale, Locale) else str(locale)
    chain = [requested] + [item.value for item in fallback if item.value != requested]
    for code in chain:
        value = field.get(code)
        if isinstance(value, str) and value.strip():
            return value

    for value in field.values():
        if isinstance(value, str) and value.strip():
            return value
    return placeholder


def normalize_multilingual(value: Any, field_name: str) -> Optional[MultilingualText]:
    """
    Validate a multilingual payload against the closed locale set.

    ``None`` passes through. Empty translations are kept as empty strings.
    """
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise EntityValidationError(
            f"{field_name} must be an object keyed by locale", field=field_name
        )

    normalized: MultilingualText = {}
    for key, text in value.items():
        code = key.value if isinstance(key, Locale) else str(key)
        if code not in SUPPORTED_LOCALES:
            raise EntityValidationError(
                f"Unsupported locale '{code}' in {field_name}. Allowed: {list(SUPPORTED_LOCALES)}",
                field=field_name,
            )
        if text is None:
            text = ""
        if not isinstance(text, str):
            raise EntityValidationError(
                f"{field_name}.{code} must be a string", field=field_name
            )
        normalized[code] = text
    return normalized


def missing_translations(field: Optional[Mapping[str, Any]]) -> list[str]:
    """Locales without a non-empty translation."""
    field = field or {}
    return [
        code for code in SUPPORTED_LOCALES
        if not (isinstance(field.get(code), str) and field.get(code).strip())
    ]
