from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Protocol

import pytz

from ..core.exceptions import ValidationError


class TimeProvider(Protocol):
    def now(self, timezone: str) -> datetime:
        """Current wall-clock time in ``timezone`` as a naive datetime."""

        raise NotImplementedError


class PytzTimeProvider:
    """Resolve branch-local time from UTC with the pytz zone database.

    Unknown zone names fall back to UTC instead of failing the operation.
    """

    def now(self, timezone: str) -> datetime:
        return datetime.now(pytz.UTC).astimezone(_zone(timezone)).replace(tzinfo=None)


def _zone(name: str):
    try:
        return pytz.timezone(name or "UTC")
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_time_on(value: str, work_date: date) -> datetime:
    """Parse an ISO datetime, or a bare HH:MM[:SS] placed on ``work_date``."""

    v = (value or "").strip()
    if not v:
        raise ValidationError("Time value is required")

    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.combine(work_date, datetime.strptime(v, fmt).time())
        except ValueError:
            pass

    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"Invalid time value: {value!r} (expected HH:MM or ISO datetime)")
    return parsed.replace(tzinfo=None)


def parse_duration(value: str) -> timedelta:
    """Parse HH:MM into a timedelta."""

    v = (value or "").strip()
    parts = v.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValidationError(f"Invalid duration: {value!r} (expected HH:MM)")
    hours, minutes = int(parts[0]), int(parts[1])
    if minutes >= 60:
        raise ValidationError(f"Invalid duration: {value!r} (expected HH:MM)")
    return timedelta(hours=hours, minutes=minutes)


def format_duration(value: Optional[timedelta]) -> str:
    if value is None:
        return "-"
    minutes = int(value.total_seconds() // 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
