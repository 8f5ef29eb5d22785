"""Attachment registry for assignments, submissions and materials."""
