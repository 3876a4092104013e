from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from ..attendance.manager import AttendanceRecordManager, overtime_for, with_totals
from ..attendance.model import AttendanceRecord
from ..audit.trail import AuditTrail
from ..common.datetime_utils import parse_duration, parse_time_on
from ..common.validators import coerce_enum, optional_text, require_non_empty, require_ordered
from ..core.constants import (
    AUDIT_ENTITY_ATTENDANCE,
    AUDIT_ENTITY_BREAK,
    AUDIT_ENTITY_CORRECTION,
    DEFAULT_NORMAL_WORKING_HOURS,
)
from ..core.enums import AttendanceStatus, AuditAction, CorrectionStatus, CorrectionType
from ..core.exceptions import ConflictError, InvalidStateError, NotFoundError
from ..employees.model import Branch
from .model import AttendanceCorrection
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)


def _require_closed(record: AttendanceRecord, what: str) -> None:
    if record.check_in_time is None or record.check_out_time is None:
        logger.warning("Correction rejected: attendance %s is not checked out", record.attendance_id)
        raise InvalidStateError(f"{what} can only be corrected after check-out")


def apply_correction(record: AttendanceRecord, correction: AttendanceCorrection, *, normal_hours: float) -> AttendanceRecord:
    """Return ``record`` with the corrected value applied and totals re-derived.

    Break duration and working hours only exist for a closed day and stay
    fixed through later recomputation. A break duration correction makes
    working time follow from it again.
    """

    value = correction.corrected_value
    kind = correction.correction_type

    if kind == CorrectionType.CHECK_IN_TIME:
        record = replace(record, check_in_time=parse_time_on(value, record.work_date))
    elif kind == CorrectionType.CHECK_OUT_TIME:
        record = replace(record, check_out_time=parse_time_on(value, record.work_date))
    elif kind == CorrectionType.BREAK_DURATION:
        _require_closed(record, "Break duration")
        record = replace(record, break_duration_adjusted=True, working_hours_adjusted=False)
        return with_totals(record, normal_hours=normal_hours, break_duration=parse_duration(value))
    elif kind == CorrectionType.WORKING_HOURS:
        _require_closed(record, "Working hours")
        worked = parse_duration(value)
        return replace(
            record,
            total_working=worked,
            overtime=overtime_for(worked, normal_hours),
            working_hours_adjusted=True,
        )
    elif kind == CorrectionType.ATTENDANCE_STATUS:
        return replace(record, status=coerce_enum(AttendanceStatus, value, "attendance status"))
    elif kind == CorrectionType.LOCATION:
        return replace(record, check_in_location=optional_text(value))

    require_ordered(record.check_in_time, record.check_out_time)
    return with_totals(record, normal_hours=normal_hours)


class CorrectionWorkflow:
    """Request, approve and reject corrections of attendance records.

    A correction moves PENDING -> APPROVED or PENDING -> REJECTED exactly once.
    Only approval touches the attendance record.
    """

    def __init__(self, corrections: CorrectionRepository, records: AttendanceRecordManager, audit: AuditTrail):
        self._corrections = corrections
        self._records = records
        self._audit = audit

    def get(self, correction_id: int) -> AttendanceCorrection:
        correction = self._corrections.get_by_id(correction_id)
        if not correction:
            raise NotFoundError(f"Correction with ID {correction_id} not found")
        return correction

    def request(
        self,
        *,
        attendance_id: int,
        requested_by: int,
        correction_type: CorrectionType,
        original_value: Optional[str],
        corrected_value: str,
        reason: str,
        now: datetime,
    ) -> AttendanceCorrection:
        self._records.get_record(attendance_id)
        reason = require_non_empty(reason, "Reason")
        corrected_value = require_non_empty(corrected_value, "Corrected value")

        if self._corrections.find_pending(attendance_id, correction_type):
            logger.warning(
                "Correction rejected: pending %s correction exists for attendance %s",
                correction_type.value,
                attendance_id,
            )
            raise ConflictError("A pending correction of this type already exists for this attendance record")

        correction = AttendanceCorrection(
            correction_id=0,
            attendance_id=int(attendance_id),
            requested_by=int(requested_by),
            correction_type=correction_type,
            original_value=optional_text(original_value),
            corrected_value=corrected_value,
            reason=reason,
            created_at=now,
        )
        correction = replace(correction, correction_id=self._corrections.add(correction))

        self._audit.record(
            actor_id=requested_by,
            entity_type=AUDIT_ENTITY_CORRECTION,
            entity_id=correction.correction_id,
            action=AuditAction.CORRECTION_REQUEST,
            after=correction,
        )
        logger.info(
            "Correction %s requested for attendance %s (%s)",
            correction.correction_id,
            attendance_id,
            correction_type.value,
        )
        return correction

    def _require_pending(self, correction_id: int) -> AttendanceCorrection:
        correction = self.get(correction_id)
        if not correction.is_pending:
            logger.warning("Correction %s already %s", correction_id, correction.status.value)
            raise InvalidStateError(f"Correction has already been {correction.status.value.lower()}")
        return correction

    def approve(
        self,
        correction_id: int,
        *,
        approved_by: int,
        comment: Optional[str] = None,
        now: datetime,
        branch: Optional[Branch] = None,
    ) -> AttendanceCorrection:
        correction = self._require_pending(correction_id)
        before = self._records.get_record(correction.attendance_id)
        normal_hours = branch.normal_working_hours if branch else DEFAULT_NORMAL_WORKING_HOURS

        # Parse and validate before anything is written.
        after = apply_correction(before, correction, normal_hours=normal_hours)
        open_break = closed_break = None
        if before.is_open() and after.check_out_time is not None:
            # A check-out time on an open day closes it the way check-out does.
            after, open_break, closed_break = self._records.finish_day(before, at=after.check_out_time, branch=branch)
        self._records.save(after)

        decided = replace(
            correction,
            status=CorrectionStatus.APPROVED,
            decided_by=int(approved_by),
            decided_at=now,
            decision_comment=optional_text(comment),
        )
        self._corrections.update(decided)

        if closed_break is not None:
            self._audit.record(
                actor_id=approved_by,
                entity_type=AUDIT_ENTITY_BREAK,
                entity_id=closed_break.break_id,
                action=AuditAction.BREAK_END,
                before=open_break,
                after=closed_break,
            )
        self._audit.record(
            actor_id=approved_by,
            entity_type=AUDIT_ENTITY_ATTENDANCE,
            entity_id=after.attendance_id,
            action=AuditAction.CORRECTION_APPROVE,
            before=before,
            after=after,
            extra={"correction_id": decided.correction_id},
        )
        self._audit.record(
            actor_id=approved_by,
            entity_type=AUDIT_ENTITY_CORRECTION,
            entity_id=decided.correction_id,
            action=AuditAction.CORRECTION_APPROVE,
            before=correction,
            after=decided,
        )
        logger.info("Correction %s approved by %s", correction_id, approved_by)
        return decided

    def reject(self, correction_id: int, *, rejected_by: int, reason: str, now: datetime) -> AttendanceCorrection:
        reason = require_non_empty(reason, "Rejection reason")
        correction = self._require_pending(correction_id)

        decided = replace(
            correction,
            status=CorrectionStatus.REJECTED,
            decided_by=int(rejected_by),
            decided_at=now,
            decision_comment=reason,
        )
        self._corrections.update(decided)

        self._audit.record(
            actor_id=rejected_by,
            entity_type=AUDIT_ENTITY_CORRECTION,
            entity_id=decided.correction_id,
            action=AuditAction.CORRECTION_REJECT,
            before=correction,
            after=decided,
        )
        logger.info("Correction %s rejected by %s", correction_id, rejected_by)
        return decided

    def list_pending(self, branch_id: Optional[int] = None) -> List[AttendanceCorrection]:
        return list(self._corrections.list_pending(branch_id))
