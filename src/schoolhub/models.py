"""
Model registry.

Importing this module registers every table on Base.metadata, which
Alembic autogenerate and the test fixtures rely on.
"""

from schoolhub.core.database import Base
from schoolhub.modules.assignments.models import Assignment, AssignmentType
from schoolhub.modules.attachments.models import Attachment, AttachmentParent
from schoolhub.modules.attendance.models import AttendanceRecord, AttendanceStatus
from schoolhub.modules.courses.models import Course, CourseStudent, Semester, Weekday
from schoolhub.modules.enrollments.models import EnrollmentRequest, EnrollmentStatus
from schoolhub.modules.grades.models import GradeEntry, GradeEntryType
from schoolhub.modules.materials.models import Material, MaterialType
from schoolhub.modules.notifications.models import Notification, NotificationKind
from schoolhub.modules.submissions.models import Submission, SubmissionStatus
from schoolhub.modules.users.models import User, UserRole

__all__ = [
    "Base",
    "Assignment",
    "AssignmentType",
    "Attachment",
    "AttachmentParent",
    "AttendanceRecord",
    "AttendanceStatus",
    "Course",
    "CourseStudent",
    "Semester",
    "Weekday",
    "EnrollmentRequest",
    "EnrollmentStatus",
    "GradeEntry",
    "GradeEntryType",
    "Material",
    "MaterialType",
    "Notification",
    "NotificationKind",
    "Submission",
    "SubmissionStatus",
    "User",
    "UserRole",
]
