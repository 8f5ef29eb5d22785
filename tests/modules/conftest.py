"""
Fixtures for service-layer unit tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from schoolhub.core.auth import Actor
from schoolhub.modules.users.models import UserRole


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.expunge_all = MagicMock()
    return db


@pytest.fixture
def mock_store():
    store = AsyncMock()
    store.put = AsyncMock(side_effect=lambda key, data, content_type: f"http://files/{key}")
    store.delete = AsyncMock()
    return store


@pytest.fixture
def student_actor():
    return Actor(id="student-1", role=UserRole.STUDENT)


@pytest.fixture
def teacher_actor():
    return Actor(id="teacher-1", role=UserRole.TEACHER)
