"""Attendance Tracking package.

Daily attendance core organized by feature modules (attendance, breaks,
corrections, audit, ...) with Protocol repositories and MySQL adapters.
"""
