from datetime import date, datetime, time, timedelta

from src.attendance_tracking.attendance_tracking.attendance.factory import AttendanceStrategyFactory
from src.attendance_tracking.attendance_tracking.attendance.strategies.half_day_strategy import HalfDayStrategy
from src.attendance_tracking.attendance_tracking.attendance.strategies.late_strategy import LateStrategy
from src.attendance_tracking.attendance_tracking.attendance.strategies.normal_strategy import NormalStrategy
from src.attendance_tracking.attendance_tracking.core.enums import AttendanceStatus
from src.attendance_tracking.attendance_tracking.employees.model import Branch

BRANCH = Branch(branch_id=1, name="HQ", work_start_time=time(8, 0), normal_working_hours=8.0, late_grace_minutes=5)


def test_factory_checkin_on_time_within_grace():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=datetime(2025, 1, 1, 8, 4, 59), today=date(2025, 1, 1), branch=BRANCH)

    assert isinstance(strategy, NormalStrategy)


def test_factory_checkin_at_grace_boundary_is_on_time():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=datetime(2025, 1, 1, 8, 5, 0), today=date(2025, 1, 1), branch=BRANCH)

    assert isinstance(strategy, NormalStrategy)


def test_factory_checkin_late_after_grace():
    factory = AttendanceStrategyFactory()
    now = datetime(2025, 1, 1, 8, 6, 0)
    strategy = factory.for_checkin(now=now, today=date(2025, 1, 1), branch=BRANCH)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_checkin(now=now, expected_start=datetime(2025, 1, 1, 8, 0))
    assert decision.status == AttendanceStatus.LATE
    assert decision.note == "Late by 6 min"


def test_factory_without_branch_is_always_on_time():
    factory = AttendanceStrategyFactory()

    assert factory.expected_start(today=date(2025, 1, 1), branch=None) is None
    assert isinstance(factory.for_checkin(now=datetime(2025, 1, 1, 23, 0), today=date(2025, 1, 1), branch=None), NormalStrategy)


def test_factory_checkout_half_day_under_half_of_normal_hours():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(worked=timedelta(hours=3, minutes=59), branch=BRANCH, current_status=AttendanceStatus.PRESENT)

    assert isinstance(strategy, HalfDayStrategy)
    decision = strategy.decide_checkout(worked=timedelta(hours=3, minutes=59), normal_hours=8.0, current=AttendanceStatus.PRESENT)
    assert decision.status == AttendanceStatus.HALF_DAY
    assert decision.note == "Worked 03:59 of 08:00"


def test_factory_checkout_keeps_late_status():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(worked=timedelta(hours=8), branch=BRANCH, current_status=AttendanceStatus.LATE)

    decision = strategy.decide_checkout(worked=timedelta(hours=8), normal_hours=8.0, current=AttendanceStatus.LATE)
    assert decision.status == AttendanceStatus.LATE


def test_factory_checkout_full_day_keeps_present():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(worked=timedelta(hours=4), branch=BRANCH, current_status=AttendanceStatus.PRESENT)

    assert isinstance(strategy, NormalStrategy)
