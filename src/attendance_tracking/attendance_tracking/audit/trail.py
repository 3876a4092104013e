from __future__ import annotations

import logging
from typing import Any, Optional

from ..core.enums import AuditAction
from .model import snapshot
from .sink import AuditSink

logger = logging.getLogger(__name__)


class AuditTrail:
    """Best-effort audit emitter.

    Called after the primary write has been persisted. A failing sink is logged
    and never propagates, so the state change it describes is kept.
    """

    def __init__(self, sink: AuditSink):
        self._sink = sink

    def record(
        self,
        *,
        actor_id: int,
        entity_type: str,
        entity_id: int,
        action: AuditAction,
        before: Any = None,
        after: Any = None,
        extra: Optional[dict] = None,
    ) -> bool:
        after_snapshot = snapshot(after)
        if extra:
            after_snapshot = {**(after_snapshot or {}), **extra}
        try:
            self._sink.log_data_modification(
                actor_id=int(actor_id),
                entity_type=entity_type,
                entity_id=int(entity_id),
                action=action.value,
                before=snapshot(before),
                after=after_snapshot,
            )
            return True
        except Exception:
            logger.exception("Audit emission failed: %s %s#%s by %s", action.value, entity_type, entity_id, actor_id)
            return False
