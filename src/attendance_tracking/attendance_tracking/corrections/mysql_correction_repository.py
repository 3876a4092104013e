from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import CorrectionStatus, CorrectionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceCorrection
from .repository import CorrectionRepository

_COLUMNS = """
    c.correction_id, c.attendance_id, c.requested_by, c.correction_type,
    c.original_value, c.corrected_value, c.reason, c.status, c.created_at,
    c.decided_by, c.decided_at, c.decision_comment
"""


def _to_correction(r: Dict[str, Any]) -> AttendanceCorrection:
    return AttendanceCorrection(
        correction_id=int(r["correction_id"]),
        attendance_id=int(r["attendance_id"]),
        requested_by=int(r["requested_by"]),
        correction_type=CorrectionType(r["correction_type"]),
        original_value=r.get("original_value"),
        corrected_value=r["corrected_value"],
        reason=r["reason"],
        status=CorrectionStatus(r["status"]),
        created_at=r.get("created_at"),
        decided_by=int(r["decided_by"]) if r.get("decided_by") is not None else None,
        decided_at=r.get("decided_at"),
        decision_comment=r.get("decision_comment"),
    )


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, correction: AttendanceCorrection) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_corrections(
                    attendance_id, requested_by, correction_type, original_value,
                    corrected_value, reason, status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(correction.attendance_id),
                    int(correction.requested_by),
                    correction.correction_type.value,
                    correction.original_value,
                    correction.corrected_value,
                    correction.reason,
                    correction.status.value,
                    correction.created_at,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, correction_id: int) -> Optional[AttendanceCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_corrections c
                WHERE c.correction_id=%s
                """,
                (int(correction_id),),
            )
            r = fetchone(cur)
            return _to_correction(r) if r else None

    def update(self, correction: AttendanceCorrection) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_corrections
                SET status=%s, decided_by=%s, decided_at=%s, decision_comment=%s
                WHERE correction_id=%s
                """,
                (
                    correction.status.value,
                    correction.decided_by,
                    correction.decided_at,
                    correction.decision_comment,
                    int(correction.correction_id),
                ),
            )
            return cur.rowcount > 0

    def find_pending(self, attendance_id: int, correction_type: CorrectionType) -> Optional[AttendanceCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_corrections c
                WHERE c.attendance_id=%s AND c.correction_type=%s AND c.status=%s
                LIMIT 1
                """,
                (int(attendance_id), correction_type.value, CorrectionStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _to_correction(r) if r else None

    def list_pending(self, branch_id: Optional[int] = None) -> Sequence[AttendanceCorrection]:
        clauses = ["c.status=%s"]
        params: list[object] = [CorrectionStatus.PENDING.value]

        if branch_id is not None:
            clauses.append("e.branch_id=%s")
            params.append(int(branch_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_corrections c
                JOIN attendance_records a ON a.attendance_id = c.attendance_id
                JOIN employees e ON e.employee_id = a.employee_id
                WHERE {where}
                ORDER BY c.created_at ASC, c.correction_id ASC
                """,
                tuple(params),
            )
            return [_to_correction(r) for r in fetchall(cur)]
