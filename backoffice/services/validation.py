"""Field-level validators shared by the domain services."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError

from backoffice.errors import EntityValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[+]?[\d\-\s]+$")

_url_adapter = TypeAdapter(AnyUrl)


def is_valid_url(value: str) -> bool:
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def validate_url(value: Optional[str], message: str, field: Optional[str] = None) -> None:
    """Empty values pass; anything else must parse as an absolute URL."""
    if value in (None, ""):
        return
    if not isinstance(value, str) or not is_valid_url(value):
        raise EntityValidationError(message, field=field)


def validate_email(value: Optional[str], field: str = "email") -> None:
    if value in (None, ""):
        return
    if not isinstance(value, str) or not EMAIL_PATTERN.match(value):
        raise EntityValidationError("Invalid email format", field=field)


def validate_phone(value: Optional[str], field: str = "no_phone") -> None:
    if value in (None, ""):
        return
    if not isinstance(value, str) or not PHONE_PATTERN.match(value):
        raise EntityValidationError("Invalid phone number format", field=field)


def _as_number(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise EntityValidationError(f"{field} must be a number", field=field)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise EntityValidationError(f"{field} must be a number", field=field) from None


def validate_range(
    value: Any,
    field: str,
    message: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> None:
    """Inclusive bounds check; ``None`` means "not provided"."""
    if value is None:
        return
    number = _as_number(value, field)
    if minimum is not None and number < minimum:
        raise EntityValidationError(message, field=field)
    if maximum is not None and number > maximum:
        raise EntityValidationError(message, field=field)


def require(value: Any, message: str, field: Optional[str] = None) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise EntityValidationError(message, field=field)


def slugify(text: str) -> str:
    """Lowercase, non-alphanumerics collapsed into single hyphens."""
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").strip().lower())
    return slug.strip("-")


def coerce_date(value: Any, field: str) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise EntityValidationError(f"{field} must be an ISO date", field=field) from None


def coerce_datetime(value: Any, field: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise EntityValidationError(f"{field} must be an ISO datetime", field=field) from None
