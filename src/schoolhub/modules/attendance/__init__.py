"""Attendance module - daily records, day roster and statistics."""
