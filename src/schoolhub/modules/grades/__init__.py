"""
Grades module - grade scale, manual grade entries and course summaries.
"""
