from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.attendance_tracking.attendance_tracking.core.enums import AttendanceStatus
from src.attendance_tracking.attendance_tracking.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

WORK_DATE = date(2026, 2, 1)


def create(service, **overrides):
    values = dict(
        employee_id=1,
        work_date="2026-02-01",
        check_in="09:00",
        check_out="17:30",
        status="PRESENT",
        reason="Badge reader offline",
        entered_by=99,
    )
    values.update(overrides)
    return service.create_manual_entry(**values)


def test_create_manual_entry(service, audit_sink):
    record = create(service, location="HQ", notes="confirmed by manager")

    assert record.is_manual_entry
    assert record.work_date == WORK_DATE
    assert record.check_in_time == datetime(2026, 2, 1, 9, 0)
    assert record.check_out_time == datetime(2026, 2, 1, 17, 30)
    assert record.status == AttendanceStatus.PRESENT
    assert record.total_working == timedelta(hours=8, minutes=30)
    assert record.overtime == timedelta(minutes=30)
    assert record.manual_entry_by == 99
    assert record.manual_entry_reason == "Badge reader offline"
    assert record.check_in_location == "HQ"

    event = audit_sink.events[-1]
    assert event["action"] == "MANUAL_CREATE"
    assert event["actor_id"] == 99
    assert event["after"]["reason"] == "Badge reader offline"
    assert event["after"]["entered_by"] == 99


def test_create_absent_day_without_times(service):
    record = create(service, check_in=None, check_out="", status="ABSENT", reason="No show")

    assert record.check_in_time is None
    assert record.check_out_time is None
    assert record.total_working is None


def test_create_conflicts_with_existing_record(service):
    create(service)

    with pytest.raises(ConflictError):
        create(service, check_in="10:00")


def test_create_conflicts_with_self_service_check_in(service, fixed_now):
    service.check_in(1, now=fixed_now)

    with pytest.raises(ConflictError):
        create(service, work_date=fixed_now.date())


def test_check_in_after_manual_entry_conflicts(service):
    create(service, work_date="2026-02-02")

    with pytest.raises(ConflictError):
        service.check_in(1, now=datetime(2026, 2, 2, 9, 0))


def test_create_requires_reason(service, attendance_repo):
    with pytest.raises(ValidationError):
        create(service, reason=" ")

    assert attendance_repo.rows == {}


def test_create_rejects_inverted_times(service):
    with pytest.raises(ValidationError) as exc:
        create(service, check_in="18:00", check_out="09:00")

    assert str(exc.value) == "Check-out time cannot be earlier than check-in time"


def test_create_rejects_bad_inputs(service):
    with pytest.raises(ValidationError):
        create(service, work_date="01/02/2026")
    with pytest.raises(ValidationError):
        create(service, status="SICK")


def test_create_unknown_employee(service):
    with pytest.raises(NotFoundError):
        create(service, employee_id=404)


def test_update_manual_entry(service, audit_sink):
    created = create(service)

    updated = service.update_manual_entry(
        created.attendance_id,
        datetime(2026, 2, 1, 8, 0),
        "12:00",
        AttendanceStatus.HALF_DAY,
        "Left early, approved",
        entered_by=100,
    )

    assert updated.check_in_time == datetime(2026, 2, 1, 8, 0)
    assert updated.check_out_time == datetime(2026, 2, 1, 12, 0)
    assert updated.status == AttendanceStatus.HALF_DAY
    assert updated.total_working == timedelta(hours=4)
    assert updated.overtime == timedelta(0)
    assert updated.manual_entry_by == 100

    event = audit_sink.events[-1]
    assert event["action"] == "MANUAL_UPDATE"
    assert event["before"]["status"] == "PRESENT"
    assert event["after"]["status"] == "HALF_DAY"


def test_update_to_absent_clears_totals(service):
    created = create(service)

    updated = service.update_manual_entry(created.attendance_id, None, None, "ABSENT", "Was on leave", 99)

    assert updated.total_working is None
    assert updated.overtime is None


def test_update_rejects_self_service_record(service, fixed_now):
    record = service.check_in(1, now=fixed_now)

    with pytest.raises(InvalidStateError):
        service.update_manual_entry(record.attendance_id, "09:00", "17:00", "PRESENT", "fix", 99)


def test_update_unknown_record(service):
    with pytest.raises(NotFoundError):
        service.update_manual_entry(404, "09:00", "17:00", "PRESENT", "fix", 99)


def test_update_keeps_approved_break_duration(service):
    created = create(service)
    correction = service.request_correction(
        created.attendance_id, 1, "BREAK_DURATION", "00:00", "01:00", "Lunch not logged", now=datetime(2026, 2, 2, 9)
    )
    service.approve_correction(correction.correction_id, 900, now=datetime(2026, 2, 2, 10))

    updated = service.update_manual_entry(created.attendance_id, "08:00", "17:30", "PRESENT", "Came in early", 99)

    assert updated.break_duration == timedelta(hours=1)
    assert updated.total_working == timedelta(hours=8, minutes=30)
    assert updated.overtime == timedelta(minutes=30)
