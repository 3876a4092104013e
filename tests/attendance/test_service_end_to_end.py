from __future__ import annotations

from datetime import datetime, timedelta

from src.attendance_tracking.attendance_tracking.core.enums import (
    AttendanceStatus,
    BreakApprovalStatus,
    BreakType,
    CorrectionStatus,
    CorrectionType,
)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 2, 2, hour, minute)


def test_working_day_with_breaks_and_correction(service, audit_sink):
    checked_in = service.check_in(1, location="Gate A", now=at(9, 12))
    assert checked_in.status == AttendanceStatus.LATE

    service.start_break(1, BreakType.TEA, now=at(10, 30))
    tea = service.end_break(1, now=at(10, 48))
    assert tea.exceeded_by == timedelta(minutes=3)
    assert tea.approval_status == BreakApprovalStatus.PENDING
    assert service.get_current_status(1, now=at(10, 50)) == AttendanceStatus.LATE

    service.start_break(1, BreakType.LUNCH, now=at(12, 30))
    service.end_break(1, now=at(13, 15))

    record = service.check_out(1, location="Gate B", now=at(18, 15))
    assert record.status == AttendanceStatus.LATE
    assert record.break_duration == timedelta(minutes=63)
    assert record.total_working == timedelta(hours=8)
    assert record.overtime == timedelta(0)

    correction = service.request_correction(
        record.attendance_id,
        1,
        CorrectionType.CHECK_IN_TIME,
        "09:12",
        "08:58",
        "Badge reader was down at the gate",
        now=at(18, 20),
    )
    service.approve_correction(correction.correction_id, 900, "Confirmed by CCTV", now=at(18, 30))

    final = service.get_record(record.attendance_id)
    assert final.check_in_time == at(8, 58)
    assert final.total_working == timedelta(hours=8, minutes=14)
    assert final.overtime == timedelta(minutes=14)
    assert service.list_pending_corrections() == []
    assert service.get_employee_attendance(1, at(0).date(), at(0).date()) == [final]

    assert audit_sink.actions() == [
        "CHECK_IN",
        "BREAK_START",
        "BREAK_END",
        "BREAK_START",
        "BREAK_END",
        "CHECK_OUT",
        "CORRECTION_REQUEST",
        "CORRECTION_APPROVE",
        "CORRECTION_APPROVE",
    ]
    assert correction.status == CorrectionStatus.PENDING


def test_day_with_tea_break_matches_reference_numbers(service, audit_sink):
    service.check_in(1, now=at(9, 0))
    service.start_break(1, BreakType.TEA, now=at(11, 0))
    tea = service.end_break(1, now=at(11, 15))
    record = service.check_out(1, now=at(17, 30))

    assert tea.duration == timedelta(minutes=15)
    assert not tea.is_exceeding
    assert record.status == AttendanceStatus.PRESENT
    assert record.break_duration == timedelta(minutes=15)
    assert record.total_working == timedelta(hours=8, minutes=15)
    assert record.overtime == timedelta(minutes=15)
    assert not record.is_early_out()
    assert audit_sink.actions() == ["CHECK_IN", "BREAK_START", "BREAK_END", "CHECK_OUT"]
