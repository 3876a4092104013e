from __future__ import annotations

import json
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .sink import AuditSink


class MySQLAuditSink(AuditSink):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(actor_id, entity_type, entity_id, action, before_json, after_json)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(actor_id),
                    entity_type,
                    int(entity_id),
                    action,
                    json.dumps(before, ensure_ascii=False, default=str) if before is not None else None,
                    json.dumps(after, ensure_ascii=False, default=str) if after is not None else None,
                ),
            )
