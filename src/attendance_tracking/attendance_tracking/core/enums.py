from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status of one employee for one day."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    ON_BREAK = "ON_BREAK"
    HALF_DAY = "HALF_DAY"
    ON_LEAVE = "ON_LEAVE"


class BreakType(str, Enum):
    TEA = "TEA"
    LUNCH = "LUNCH"
    PERSONAL = "PERSONAL"
    MEETING = "MEETING"
    PRAYER = "PRAYER"
    MEDICAL = "MEDICAL"
    EMERGENCY = "EMERGENCY"
    OTHER = "OTHER"


class BreakApprovalStatus(str, Enum):
    """Approval state of a break that ran over its allowed duration."""

    NOT_REQUIRED = "NOT_REQUIRED"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class CorrectionType(str, Enum):
    CHECK_IN_TIME = "CHECK_IN_TIME"
    CHECK_OUT_TIME = "CHECK_OUT_TIME"
    BREAK_DURATION = "BREAK_DURATION"
    WORKING_HOURS = "WORKING_HOURS"
    ATTENDANCE_STATUS = "ATTENDANCE_STATUS"
    LOCATION = "LOCATION"


class CorrectionStatus(str, Enum):
    """Correction workflow state (PENDING -> APPROVED | REJECTED, once)."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID_STATE = "INVALID_STATE"
    VALIDATION = "VALIDATION"


class AuditAction(str, Enum):
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"
    CORRECTION_REQUEST = "CORRECTION_REQUEST"
    CORRECTION_APPROVE = "CORRECTION_APPROVE"
    CORRECTION_REJECT = "CORRECTION_REJECT"
    MANUAL_CREATE = "MANUAL_CREATE"
    MANUAL_UPDATE = "MANUAL_UPDATE"
