from __future__ import annotations

from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class AuditEvent:
    """One data modification written to the audit trail."""

    actor_id: int
    entity_type: str
    entity_id: int
    action: str
    before: Optional[dict] = None
    after: Optional[dict] = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc).replace(tzinfo=None))


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def snapshot(entity: Any) -> Optional[dict]:
    """JSON-ready dict of a domain dataclass (None passes through)."""

    if entity is None:
        return None
    if is_dataclass(entity):
        return _plain(asdict(entity))
    return _plain(dict(entity))
