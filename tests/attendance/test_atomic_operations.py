from __future__ import annotations

from datetime import datetime

import pytest

from src.attendance_tracking.attendance_tracking.core.enums import AttendanceStatus, BreakType, CorrectionType


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 2, 2, hour, minute)


def fail(*args, **kwargs):
    raise RuntimeError("database went away")


def test_start_break_leaves_no_open_break_when_record_write_fails(
    service, attendance_repo, breaks_repo, unit_of_work, audit_sink, monkeypatch
):
    service.check_in(1, now=at(9, 0))
    monkeypatch.setattr(attendance_repo, "update", fail)

    with pytest.raises(RuntimeError):
        service.start_break(1, BreakType.TEA, now=at(10, 0))

    assert breaks_repo.rows == {}
    assert attendance_repo.get_for_employee_and_date(1, at(9).date()).status == AttendanceStatus.PRESENT
    assert unit_of_work.rolled_back == 1
    assert audit_sink.actions() == ["CHECK_IN"]


def test_check_out_keeps_break_open_when_record_write_fails(service, attendance_repo, breaks_repo, monkeypatch):
    service.check_in(1, now=at(9, 0))
    service.start_break(1, BreakType.LUNCH, now=at(12, 0))
    monkeypatch.setattr(attendance_repo, "update", fail)

    with pytest.raises(RuntimeError):
        service.check_out(1, now=at(12, 30))

    assert breaks_repo.rows[1].end_time is None
    monkeypatch.undo()
    assert service.get_current_status(1, now=at(12, 31)) == AttendanceStatus.ON_BREAK


def test_approval_leaves_record_untouched_when_correction_write_fails(
    service, attendance_repo, corrections_repo, monkeypatch
):
    service.check_in(1, now=at(8, 55))
    day = service.check_out(1, now=at(17, 55))
    correction = service.request_correction(
        day.attendance_id, 1, CorrectionType.CHECK_IN_TIME, "08:55", "08:30", "Forgot to badge", now=at(18)
    )
    monkeypatch.setattr(corrections_repo, "update", fail)

    with pytest.raises(RuntimeError):
        service.approve_correction(correction.correction_id, 900, now=at(19))

    assert attendance_repo.get_by_id(day.attendance_id).check_in_time == at(8, 55)
    assert corrections_repo.get_by_id(correction.correction_id).is_pending


def test_successful_operations_commit_once_each(service, unit_of_work):
    service.check_in(1, now=at(9, 0))
    service.start_break(1, BreakType.TEA, now=at(10, 0))
    service.end_break(1, now=at(10, 10))
    service.check_out(1, now=at(17, 0))

    assert unit_of_work.committed == 4
    assert unit_of_work.rolled_back == 0
