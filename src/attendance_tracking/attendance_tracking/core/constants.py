"""Defaults for branch rules, locking and time, plus audit entity names."""

from datetime import time

DEFAULT_LATE_GRACE_MINUTES = 5
DEFAULT_WORK_START = time(9, 0)
DEFAULT_NORMAL_WORKING_HOURS = 8.0
DEFAULT_LOCK_TIMEOUT_SECONDS = 2.0
DEFAULT_TIMEZONE = "UTC"

# Entity names written to the audit trail.
AUDIT_ENTITY_ATTENDANCE = "Attendance"
AUDIT_ENTITY_BREAK = "Break"
AUDIT_ENTITY_CORRECTION = "AttendanceCorrection"
