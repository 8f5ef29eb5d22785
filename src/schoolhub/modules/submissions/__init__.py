"""
Submissions module - submit, grade and publish.
"""
