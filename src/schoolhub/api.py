from fastapi import APIRouter

from schoolhub.modules.assignments.router import router as assignments_router
from schoolhub.modules.attendance.router import router as attendance_router
from schoolhub.modules.auth.router import router as auth_router
from schoolhub.modules.courses.router import router as courses_router
from schoolhub.modules.enrollments.router import course_router as course_enrollment_router
from schoolhub.modules.enrollments.router import router as enrollment_requests_router
from schoolhub.modules.grades.router import router as grades_router
from schoolhub.modules.materials.router import router as materials_router
from schoolhub.modules.notifications.router import router as notifications_router
from schoolhub.modules.submissions.router import router as submissions_router
from schoolhub.modules.users.router import router as users_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(users_router, prefix="/users", tags=["Users"])

api_router.include_router(courses_router, prefix="/courses", tags=["Courses"])
api_router.include_router(course_enrollment_router, prefix="/courses", tags=["Enrollments"])
api_router.include_router(materials_router, prefix="/courses", tags=["Materials"])

api_router.include_router(
    enrollment_requests_router, prefix="/enrollment-requests", tags=["Enrollments"]
)

# Submissions first so /assignments/my-submissions is not read as an assignment id
api_router.include_router(submissions_router, prefix="/assignments", tags=["Submissions"])
api_router.include_router(assignments_router, prefix="/assignments", tags=["Assignments"])

api_router.include_router(attendance_router, prefix="/attendance", tags=["Attendance"])

api_router.include_router(grades_router, prefix="/grades", tags=["Grades"])

api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
