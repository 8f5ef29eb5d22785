"""
API tests for attendance.
"""

import pytest

from schoolhub.modules.users.models import UserRole

DAY = "2026-09-14"


@pytest.fixture
async def course(make_course, teacher, student):
    return await make_course(teacher, students=[student])


async def mark(client, course, student, teacher, auth, status="present", day=DAY):
    return await client.post(
        "/api/attendance",
        json={"courseId": course.id, "studentId": student.id, "date": day, "status": status},
        headers=auth(teacher),
    )


class TestRecord:
    async def test_record_and_read_day_roster(self, client, course, teacher, student, auth):
        response = await mark(client, course, student, teacher, auth, status="late")

        assert response.status_code == 201
        assert response.json()["data"]["recordedBy"] == teacher.id

        roster = await client.get(
            f"/api/attendance?course={course.id}&date={DAY}", headers=auth(teacher)
        )
        [entry] = roster.json()["data"]["entries"]
        assert entry["student"]["id"] == student.id
        assert entry["status"] == "late"

    async def test_unmarked_students_have_no_status(
        self, client, make_course, teacher, student, make_user, auth
    ):
        classmate = await make_user(last_name="Zed")
        course = await make_course(teacher, students=[student, classmate])
        await mark(client, course, student, teacher, auth)

        roster = await client.get(
            f"/api/attendance?course={course.id}&date={DAY}", headers=auth(teacher)
        )

        statuses = {e["student"]["id"]: e["status"] for e in roster.json()["data"]["entries"]}
        assert statuses == {student.id: "present", classmate.id: None}

    async def test_student_sees_only_own_entry(
        self, client, make_course, teacher, student, make_user, auth
    ):
        classmate = await make_user()
        course = await make_course(teacher, students=[student, classmate])

        roster = await client.get(
            f"/api/attendance?course={course.id}&date={DAY}", headers=auth(student)
        )

        assert [e["student"]["id"] for e in roster.json()["data"]["entries"]] == [student.id]

    async def test_duplicate_day(self, client, course, teacher, student, auth):
        await mark(client, course, student, teacher, auth)

        response = await mark(client, course, student, teacher, auth, status="absent")

        assert response.status_code == 409
        assert response.json()["error"] == "DUPLICATE_ATTENDANCE"

    async def test_student_must_be_enrolled(self, client, course, teacher, make_user, auth):
        outsider = await make_user()

        response = await mark(client, course, outsider, teacher, auth)

        assert response.status_code == 400
        assert response.json()["error"] == "NOT_ENROLLED"

    async def test_only_course_teacher_marks(self, client, course, student, make_user, auth):
        stranger = await make_user(UserRole.TEACHER)

        response = await mark(client, course, student, stranger, auth)

        assert response.status_code == 403

    async def test_absence_notifies_student(self, client, course, teacher, student, auth):
        await mark(client, course, student, teacher, auth, status="absent")

        notifications = await client.get("/api/notifications", headers=auth(student))

        [notification] = notifications.json()["data"]
        assert notification["kind"] == "attendance"
        assert DAY in notification["message"]

    async def test_update_status(self, client, course, teacher, student, auth):
        record_id = (await mark(client, course, student, teacher, auth)).json()["data"]["id"]

        response = await client.put(
            f"/api/attendance/{record_id}",
            json={"status": "excused", "notes": "Doctor's note"},
            headers=auth(teacher),
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "excused"
        assert response.json()["data"]["notes"] == "Doctor's note"

    async def test_status_change_keeps_notes(self, client, course, teacher, student, auth):
        created = await client.post(
            "/api/attendance",
            json={
                "courseId": course.id,
                "studentId": student.id,
                "date": DAY,
                "status": "absent",
                "notes": "Called in sick",
            },
            headers=auth(teacher),
        )
        record_id = created.json()["data"]["id"]

        response = await client.put(
            f"/api/attendance/{record_id}", json={"status": "excused"}, headers=auth(teacher)
        )

        assert response.json()["data"]["status"] == "excused"
        assert response.json()["data"]["notes"] == "Called in sick"


class TestStats:
    async def test_counts_and_rate(self, client, course, teacher, student, auth):
        for day, status in [
            ("2026-09-14", "present"),
            ("2026-09-15", "late"),
            ("2026-09-16", "absent"),
            ("2026-09-17", "excused"),
        ]:
            await mark(client, course, student, teacher, auth, status=status, day=day)

        response = await client.get(
            f"/api/attendance/stats?course={course.id}&student={student.id}",
            headers=auth(teacher),
        )

        stats = response.json()["data"]
        assert stats["total"] == 4
        assert (stats["present"], stats["late"], stats["absent"], stats["excused"]) == (1, 1, 1, 1)
        assert stats["attendanceRate"] == 50.0

    async def test_no_records_gives_zero_rate(self, client, course, student, auth):
        response = await client.get(
            f"/api/attendance/stats?course={course.id}", headers=auth(student)
        )

        assert response.json()["data"]["total"] == 0
        assert response.json()["data"]["attendanceRate"] == 0.0

    async def test_student_cannot_see_classmate(self, client, student, make_user, auth):
        classmate = await make_user()

        response = await client.get(
            f"/api/attendance/stats?student={classmate.id}", headers=auth(student)
        )

        assert response.status_code == 403

    async def test_teacher_needs_course(self, client, teacher, student, auth):
        response = await client.get(
            f"/api/attendance/stats?student={student.id}", headers=auth(teacher)
        )

        assert response.status_code == 400
