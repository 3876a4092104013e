from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Type, TypeVar, Union

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def require_ordered(check_in: Optional[datetime], check_out: Optional[datetime]) -> None:
    if check_in and check_out and check_out < check_in:
        raise ValidationError("Check-out time cannot be earlier than check-in time")


E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: Type[E], value: Union[E, str], field_name: str) -> E:
    """Accept an enum member, its value or its name (case-insensitive)."""

    if isinstance(value, enum_cls):
        return value
    text = (value or "").strip().upper().replace(" ", "_")
    for member in enum_cls:
        if text in (member.value.upper(), member.name):
            return member
    raise ValidationError(f"Invalid {field_name}: {value!r}")
