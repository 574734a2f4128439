from __future__ import annotations

from typing import Any, Optional

from ..core.enums import ErrorCode
from ..core.exceptions import ValidationError


def as_text(value: Any, field_name: str) -> str:
    """Stripped string form of a request value; JSON numbers and booleans are rejected."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text", ErrorCode.INVALID_FORMAT)
    return value.strip()


def require_non_empty(value: Optional[str], field_name: str) -> str:
    v = as_text(value, field_name)
    if not v:
        raise ValidationError(f"{field_name} is required")
    return v


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    as_text(value, field_name)
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def optional_text(value: Optional[str], field_name: str = "Value") -> Optional[str]:
    """Trimmed text, or None when blank."""
    return as_text(value, field_name) or None
