"""
Courses module - course catalog, detail view and cascade delete.
"""
