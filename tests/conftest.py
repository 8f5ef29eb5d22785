"""
Shared fixtures.

The application runs against an in-memory SQLite database (aiosqlite)
with a single shared connection, and a LocalObjectStore rooted in a
temporary directory. Redis is never initialised, so the rate limiter
uses its in-memory fallback and logout cannot denylist tokens.
"""

import os

os.environ.setdefault("PYTHON_ENV", "test")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("JWT_SECRET", "test-signing-key")
os.environ.setdefault("STORAGE_PUBLIC_URL", "http://test/uploads")

from datetime import UTC, datetime, timedelta  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from schoolhub.core.database import get_db  # noqa: E402
from schoolhub.core.rate_limit import reset_memory_store  # noqa: E402
from schoolhub.core.security import create_access_token, hash_password  # noqa: E402
from schoolhub.core.storage import LocalObjectStore, get_object_store  # noqa: E402
from schoolhub.main import app  # noqa: E402
from schoolhub.models import Base  # noqa: E402
from schoolhub.modules.assignments import repository as assignment_repository  # noqa: E402
from schoolhub.modules.assignments.models import AssignmentType  # noqa: E402
from schoolhub.modules.courses import repository as course_repository  # noqa: E402
from schoolhub.modules.courses.models import Semester  # noqa: E402
from schoolhub.modules.users.models import UserRole  # noqa: E402
from schoolhub.modules.users.repository import UserRepository  # noqa: E402

DEFAULT_PASSWORD = "secret123"
# Hashed once; bcrypt is deliberately slow
DEFAULT_PASSWORD_HASH = hash_password(DEFAULT_PASSWORD)


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    reset_memory_store()
    yield
    reset_memory_store()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session factory bound to the test database."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(tmp_path):
    return LocalObjectStore(tmp_path / "uploads", "http://test/uploads")


@pytest.fixture
async def client(session_factory, store):
    """HTTP client against the app with the test database and store."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _auth_headers(user) -> dict[str, str]:
    token = create_access_token(user.id, {"role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(session_factory):
    """Create and commit a user."""

    async def _make(
        role: UserRole = UserRole.STUDENT,
        *,
        email: str | None = None,
        first_name: str = "Test",
        last_name: str | None = None,
        is_active: bool = True,
    ):
        async with session_factory() as db:
            user = await UserRepository.create(
                db,
                email=email or f"{role.value}-{uuid4().hex[:8]}@schoolhub.io",
                password_hash=DEFAULT_PASSWORD_HASH,
                first_name=first_name,
                last_name=last_name or role.value.capitalize(),
                role=role,
                is_active=is_active,
            )
            await db.commit()
            return user

    return _make


@pytest.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN, first_name="Ada")


@pytest.fixture
async def teacher(make_user):
    return await make_user(UserRole.TEACHER, first_name="Tom")


@pytest.fixture
async def student(make_user):
    return await make_user(UserRole.STUDENT, first_name="Sam")


@pytest.fixture
def make_course(session_factory):
    """Create a course, optionally with students already in the roster."""

    async def _make(teacher, *, code: str | None = None, students=()):
        async with session_factory() as db:
            course = await course_repository.create(
                db,
                name="Algebra I",
                code=code or f"MATH-{uuid4().hex[:6].upper()}",
                description="Linear equations and functions",
                teacher_id=teacher.id,
                grade="9",
                academic_year="2026-2027",
                semester=Semester.FALL,
                schedule=[],
            )
            if students:
                await course_repository.add_to_roster(db, course.id, [s.id for s in students])
            await db.commit()
            return course

    return _make


@pytest.fixture
def make_assignment(session_factory):
    """Create an assignment due in a week unless told otherwise."""

    async def _make(
        course,
        *,
        due_date: datetime | None = None,
        total_points: float = 100,
        allow_late_submissions: bool = False,
        late_penalty_pct: float = 0,
        published: bool = True,
        title: str = "Homework 1",
    ):
        async with session_factory() as db:
            assignment = await assignment_repository.create(
                db,
                course_id=course.id,
                title=title,
                description="Solve the exercises",
                due_date=due_date or datetime.now(UTC) + timedelta(days=7),
                total_points=total_points,
                type=AssignmentType.HOMEWORK,
                allow_late_submissions=allow_late_submissions,
                late_penalty_pct=late_penalty_pct,
                published=published,
                created_by=course.teacher_id,
            )
            await db.commit()
            return assignment

    return _make


@pytest.fixture
def auth():
    """Bearer headers for a user: auth(user)."""
    return _auth_headers
