"""
User Repository

Database operations for user management.
"""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: UserRole,
        phone: str | None = None,
        address: str | None = None,
        is_active: bool = True,
    ) -> User:
        """
        Create a new user record.

        Args:
            db: Database session
            email: User's email address (unique, stored lower-cased)
            password_hash: Hashed password
            first_name: User's first name
            last_name: User's last name
            role: User's role
            phone: Phone number (optional)
            address: Postal address (optional)
            is_active: Whether user is active

        Returns:
            Created User instance
        """
        user = User(
            email=email.strip().lower(),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
            phone=phone,
            address=address,
            is_active=is_active,
        )

        db.add(user)
        await db.flush()

        logger.info(f"Created user: {user.id} ({user.role.value})")
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> User | None:
        """
        Get a user by ID.

        Returns:
            User instance or None if not found
        """
        result = await db.execute(select(User).where(User.id == str(user_id)))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """
        Get a user by email address (case-insensitive).

        Returns:
            User instance or None if not found
        """
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def email_exists(db: AsyncSession, email: str) -> bool:
        """Check if an email address is already registered."""
        user = await UserRepository.get_by_email(db, email)
        return user is not None

    @staticmethod
    async def get_many(db: AsyncSession, user_ids: list[str]) -> list[User]:
        """Fetch every user whose id is in user_ids, in no particular order."""
        if not user_ids:
            return []
        result = await db.execute(select(User).where(User.id.in_(set(user_ids))))
        return list(result.scalars().all())

    @staticmethod
    async def list_users(
        db: AsyncSession,
        *,
        role: UserRole | None = None,
        search: str | None = None,
    ) -> list[User]:
        """
        List users ordered by last name, then first name.

        Args:
            role: Only users with this role
            search: Case-insensitive match on name or email
        """
        query = select(User)
        if role is not None:
            query = query.where(User.role == role)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                func.lower(User.first_name).like(pattern)
                | func.lower(User.last_name).like(pattern)
                | User.email.like(pattern)
            )
        query = query.order_by(User.last_name, User.first_name)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def update(db: AsyncSession, user: User, **fields) -> User:
        """Apply the given column values and flush."""
        for name, value in fields.items():
            setattr(user, name, value)
        await db.flush()
        return user

    @staticmethod
    async def delete_with_memberships(db: AsyncSession, user: User) -> None:
        """
        Delete a user and every row that belongs to them.

        Removes roster memberships, enrollment requests, submissions (and
        their attachments), attendance records, grade entries and
        notifications. Courses the user teaches are not touched; the caller
        must refuse to delete a teacher of record.
        """
        # Imported here: these modules depend on users.models
        from schoolhub.modules.attachments.models import Attachment
        from schoolhub.modules.attendance.models import AttendanceRecord
        from schoolhub.modules.courses.models import CourseStudent
        from schoolhub.modules.enrollments.models import EnrollmentRequest
        from schoolhub.modules.grades.models import GradeEntry
        from schoolhub.modules.notifications.models import Notification
        from schoolhub.modules.submissions.models import Submission

        submission_ids = select(Submission.id).where(Submission.student_id == user.id)
        await db.execute(delete(Attachment).where(Attachment.submission_id.in_(submission_ids)))
        await db.execute(delete(Submission).where(Submission.student_id == user.id))
        await db.execute(delete(CourseStudent).where(CourseStudent.student_id == user.id))
        await db.execute(delete(EnrollmentRequest).where(EnrollmentRequest.student_id == user.id))
        await db.execute(delete(AttendanceRecord).where(AttendanceRecord.student_id == user.id))
        await db.execute(delete(GradeEntry).where(GradeEntry.student_id == user.id))
        await db.execute(delete(Notification).where(Notification.recipient_id == user.id))
        await db.delete(user)
        await db.flush()

        logger.info(f"Deleted user {user.id} and their memberships")
