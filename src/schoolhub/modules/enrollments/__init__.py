"""
Enrollments module - enrollment request state machine and roster changes.
"""
