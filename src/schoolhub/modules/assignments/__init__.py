"""Assignments module."""
