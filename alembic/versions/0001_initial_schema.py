"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 12:00:00.000000

This migration creates every table:
1. users
2. courses and the course_students roster
3. enrollment_requests
4. assignments, submissions, materials and their attachments
5. attendance_records, grade_entries and notifications

Enum columns store the member names (upper case), as SQLAlchemy does by
default.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

user_role = sa.Enum("STUDENT", "TEACHER", "ADMIN", name="user_role")
semester = sa.Enum("FALL", "SPRING", "SUMMER", name="semester")
enrollment_status = sa.Enum("PENDING", "APPROVED", "REJECTED", name="enrollment_status")
assignment_type = sa.Enum(
    "HOMEWORK", "QUIZ", "TEST", "PROJECT", "ESSAY", "OTHER", name="assignment_type"
)
submission_status = sa.Enum("SUBMITTED", "GRADED", "RETURNED", name="submission_status")
material_type = sa.Enum("FILE", "VIDEO", "LINK", "TEXT", "OTHER", name="material_type")
attendance_status = sa.Enum("PRESENT", "ABSENT", "LATE", "EXCUSED", name="attendance_status")
grade_entry_type = sa.Enum(
    "QUIZ", "TEST", "PROJECT", "MIDTERM", "FINAL", "PARTICIPATION", "OTHER",
    name="grade_entry_type",
)
notification_kind = sa.Enum(
    "ENROLLMENT", "ASSIGNMENT", "SUBMISSION", "GRADE", "ATTENDANCE", "MATERIAL", "SYSTEM",
    name="notification_kind",
)

ENUMS = (
    user_role,
    semester,
    enrollment_status,
    assignment_type,
    submission_status,
    material_type,
    attendance_status,
    grade_entry_type,
    notification_kind,
)


def _base_columns() -> list[sa.Column]:
    """Primary key and timestamps (from BaseModel)."""
    return [
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create all tables, indexes and constraints."""
    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "courses",
        *_base_columns(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("code", sa.String(length=30), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), nullable=False),
        sa.Column("grade", sa.String(length=30), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("semester", semester, nullable=False),
        sa.Column("schedule", sa.JSON(), nullable=False),
        sa.Column("syllabus_url", sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_courses_code", "courses", ["code"], unique=True)
    op.create_index("ix_courses_teacher_id", "courses", ["teacher_id"])
    op.create_index("ix_courses_year_semester", "courses", ["academic_year", "semester"])

    op.create_table(
        "course_students",
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("course_id", "student_id"),
    )
    op.create_index("ix_course_students_student_id", "course_students", ["student_id"])

    op.create_table(
        "enrollment_requests",
        *_base_columns(),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("status", enrollment_status, nullable=False),
        sa.Column("request_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("response_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("responder_id", sa.String(length=36), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "student_id", "course_id", name="uq_enrollment_requests_student_course"
        ),
    )
    op.create_index(
        "ix_enrollment_requests_course_status", "enrollment_requests", ["course_id", "status"]
    )

    op.create_table(
        "assignments",
        *_base_columns(),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_points", sa.Float(), nullable=False),
        sa.Column("type", assignment_type, nullable=False),
        sa.Column("allow_late_submissions", sa.Boolean(), nullable=False),
        sa.Column("late_penalty_pct", sa.Float(), nullable=False),
        sa.Column("published", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_assignments_course_id", "assignments", ["course_id"])

    op.create_table(
        "submissions",
        *_base_columns(),
        sa.Column("assignment_id", sa.String(length=36), nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_late", sa.Boolean(), nullable=False),
        sa.Column("status", submission_status, nullable=False),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("raw_score", sa.Float(), nullable=True),
        sa.Column("max_score", sa.Float(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("graded_by", sa.String(length=36), nullable=True),
        sa.Column("graded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("publish_grade", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["assignment_id"], ["assignments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "assignment_id", "student_id", name="uq_submissions_assignment_student"
        ),
    )
    op.create_index("ix_submissions_student_id", "submissions", ["student_id"])

    op.create_table(
        "materials",
        *_base_columns(),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", material_type, nullable=False),
        sa.Column("url", sa.String(length=1000), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("upload_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("added_by", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_materials_course_id", "materials", ["course_id"])

    op.create_table(
        "attachments",
        *_base_columns(),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("url", sa.String(length=1000), nullable=False),
        sa.Column("storage_key", sa.String(length=500), nullable=False),
        sa.Column("size", sa.BigInteger(), nullable=False),
        sa.Column("mime_type", sa.String(length=150), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("uploaded_by", sa.String(length=36), nullable=False),
        sa.Column("assignment_id", sa.String(length=36), nullable=True),
        sa.Column("submission_id", sa.String(length=36), nullable=True),
        sa.Column("material_id", sa.String(length=36), nullable=True),
        sa.ForeignKeyConstraint(["assignment_id"], ["assignments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["submission_id"], ["submissions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["material_id"], ["materials.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "(CASE WHEN assignment_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN submission_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN material_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_attachments_single_parent",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_attachments_assignment_id", "attachments", ["assignment_id"])
    op.create_index("ix_attachments_submission_id", "attachments", ["submission_id"])
    op.create_index("ix_attachments_material_id", "attachments", ["material_id"])

    op.create_table(
        "attendance_records",
        *_base_columns(),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", attendance_status, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recorded_by", sa.String(length=36), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "course_id", "student_id", "date", name="uq_attendance_course_student_date"
        ),
    )
    op.create_index("ix_attendance_records_student_id", "attendance_records", ["student_id"])

    op.create_table(
        "grade_entries",
        *_base_columns(),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("assignment_id", sa.String(length=36), nullable=True),
        sa.Column("type", grade_entry_type, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("max_score", sa.Float(), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("published", sa.Boolean(), nullable=False),
        sa.Column("graded_by", sa.String(length=36), nullable=False),
        sa.Column("graded_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["assignment_id"], ["assignments.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "student_id", "course_id", "type", "title", name="uq_grade_entries_student_item"
        ),
    )
    op.create_index("ix_grade_entries_student_id", "grade_entries", ["student_id"])
    op.create_index("ix_grade_entries_course_id", "grade_entries", ["course_id"])

    op.create_table(
        "notifications",
        *_base_columns(),
        sa.Column("recipient_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("kind", notification_kind, nullable=False),
        sa.Column("resource_type", sa.String(length=30), nullable=True),
        sa.Column("resource_id", sa.String(length=36), nullable=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_notifications_recipient_read", "notifications", ["recipient_id", "read_at"]
    )


def downgrade() -> None:
    """Drop every table, then the enum types."""
    for table in (
        "notifications",
        "grade_entries",
        "attendance_records",
        "attachments",
        "materials",
        "submissions",
        "assignments",
        "enrollment_requests",
        "course_students",
        "courses",
        "users",
    ):
        op.drop_table(table)

    for enum_type in ENUMS:
        enum_type.drop(op.get_bind(), checkfirst=True)
