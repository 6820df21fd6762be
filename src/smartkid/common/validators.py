from __future__ import annotations

import re
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date

E = TypeVar("E", bound=Enum)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    return value.strip()


def require_min_length(value: Any, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters", field=field_name)
    return value


def require_email(value: Any, field_name: str = "email") -> str:
    email = require_non_empty(value, field_name).lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(f"{field_name} is not a valid email address", field=field_name)
    return email


def require_iso_date(value: Any, field_name: str) -> str:
    """Accept only zero-padded ``YYYY-MM-DD`` so string order matches date order."""
    raw = require_non_empty(value, field_name)
    try:
        return parse_iso_date(raw).isoformat()
    except ValueError:
        raise ValidationError(f"{field_name} must be a date in YYYY-MM-DD format", field=field_name)


def require_enum(value: Any, enum_cls: Type[E], field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}", field=field_name)


def require_int(value: Any, field_name: str) -> int:
    # bool is an int subclass; a fractional float would truncate to another id.
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"{field_name} must be an integer", field=field_name)
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field_name} must be an integer", field=field_name)



def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_int(value, field_name)


def optional_str(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text", field=field_name)
    return value.strip() or None


def require_str_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"{field_name} must be a list of strings", field=field_name)
    return [v.strip() for v in value if v.strip()]


def require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false", field=field_name)
    return value
