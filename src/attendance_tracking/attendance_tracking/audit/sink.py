from __future__ import annotations

import json
import logging
from typing import Optional, Protocol

from .model import AuditEvent

logger = logging.getLogger("attendance_tracking.audit")


class AuditSink(Protocol):
    def log_data_modification(
        self,
        *,
        actor_id: int,
        entity_type: str,
        entity_id: int,
        action: str,
        before: Optional[dict],
        after: Optional[dict],
    ) -> None:
        raise NotImplementedError


class LoggingAuditSink(AuditSink):
    """Write audit events to the ``attendance_tracking.audit`` logger."""

    def log_data_modification(
        self,
        *,
        actor_id: int,
        entity_type: str,
        entity_id: int,
        action: str,
        before: Optional[dict],
        after: Optional[dict],
    ) -> None:
        event = AuditEvent(
            actor_id=actor_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            before=before,
            after=after,
        )
        logger.info(
            "audit at=%s actor=%s entity=%s#%s action=%s before=%s after=%s",
            event.occurred_at.isoformat(),
            event.actor_id,
            event.entity_type,
            event.entity_id,
            event.action,
            json.dumps(event.before, ensure_ascii=False, default=str),
            json.dumps(event.after, ensure_ascii=False, default=str),
        )
