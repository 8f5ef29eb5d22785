"""
Users module - profiles and identity records.
"""

from schoolhub.modules.users.models import User, UserRole
from schoolhub.modules.users.repository import UserRepository

__all__ = ["User", "UserRole", "UserRepository"]
