"""
API tests for the submission and grading pipeline.

These tests cover:
- Submitting text and files, resubmitting before grading
- Due dates and late penalties
- Grade masking until the grade is published
- Listing submissions per assignment and per student
"""

from datetime import UTC, datetime, timedelta

import pytest

from schoolhub.modules.users.models import UserRole


@pytest.fixture
async def course(make_course, teacher, student):
    return await make_course(teacher, students=[student])


def submit_url(assignment) -> str:
    return f"/api/assignments/{assignment.id}/submit"


class TestSubmit:
    async def test_submit_text(self, client, course, teacher, student, make_assignment, auth):
        assignment = await make_assignment(course)

        response = await client.post(
            submit_url(assignment), json={"content": "My answer"}, headers=auth(student)
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "submitted"
        assert data["isLate"] is False
        assert data["maxScore"] == 100
        assert data["score"] is None
        assert data["student"]["id"] == student.id

        notifications = await client.get("/api/notifications", headers=auth(teacher))
        assert notifications.json()["data"][0]["kind"] == "submission"

    async def test_resubmission_replaces_in_place(
        self, client, course, student, make_assignment, auth, store
    ):
        assignment = await make_assignment(course)
        first = await client.post(
            submit_url(assignment),
            data={"content": "draft"},
            files=[("files", ("v1.txt", b"one", "text/plain"))],
            headers=auth(student),
        )
        old_key = first.json()["data"]["attachments"][0]["url"].removeprefix(
            "http://test/uploads/"
        )

        second = await client.post(
            submit_url(assignment),
            data={"content": "final"},
            files=[("files", ("v2.txt", b"two", "text/plain"))],
            headers=auth(student),
        )

        assert second.status_code == 201
        data = second.json()["data"]
        assert data["id"] == first.json()["data"]["id"]
        assert data["content"] == "final"
        assert [a["fileName"] for a in data["attachments"]] == ["v2.txt"]
        assert not (store.base_dir / old_key).exists()

    async def test_empty_submission(self, client, course, student, make_assignment, auth):
        assignment = await make_assignment(course)

        response = await client.post(submit_url(assignment), headers=auth(student))

        assert response.status_code == 400

    async def test_past_due(self, client, course, student, make_assignment, auth):
        assignment = await make_assignment(course, due_date=datetime.now(UTC) - timedelta(hours=1))

        response = await client.post(
            submit_url(assignment), json={"content": "late"}, headers=auth(student)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "PAST_DUE"

    async def test_late_allowed_is_flagged(self, client, course, student, make_assignment, auth):
        assignment = await make_assignment(
            course,
            due_date=datetime.now(UTC) - timedelta(hours=1),
            allow_late_submissions=True,
        )

        response = await client.post(
            submit_url(assignment), json={"content": "late"}, headers=auth(student)
        )

        assert response.status_code == 201
        assert response.json()["data"]["isLate"] is True

    async def test_not_enrolled(self, client, course, make_user, make_assignment, auth):
        assignment = await make_assignment(course)
        outsider = await make_user()

        response = await client.post(
            submit_url(assignment), json={"content": "hi"}, headers=auth(outsider)
        )

        assert response.status_code == 403

    async def test_draft_assignment(self, client, course, student, make_assignment, auth):
        assignment = await make_assignment(course, published=False)

        response = await client.post(
            submit_url(assignment), json={"content": "hi"}, headers=auth(student)
        )

        assert response.status_code == 403

    async def test_unknown_assignment(self, client, student, auth):
        response = await client.post(
            "/api/assignments/missing/submit", json={"content": "hi"}, headers=auth(student)
        )

        assert response.status_code == 404


class TestGrade:
    async def submit(self, client, assignment, student, auth):
        response = await client.post(
            submit_url(assignment), json={"content": "answer"}, headers=auth(student)
        )
        return response.json()["data"]["id"]

    async def test_late_penalty_and_masking(
        self, client, course, teacher, student, make_assignment, auth
    ):
        assignment = await make_assignment(
            course,
            due_date=datetime.now(UTC) - timedelta(days=1),
            allow_late_submissions=True,
            late_penalty_pct=15,
        )
        submission_id = await self.submit(client, assignment, student, auth)
        grade_url = f"/api/assignments/submissions/{submission_id}"

        graded = await client.put(
            grade_url, json={"score": 87, "feedback": "Solid work"}, headers=auth(teacher)
        )

        assert graded.status_code == 200
        data = graded.json()["data"]
        assert data["status"] == "graded"
        assert data["rawScore"] == 87
        assert data["score"] == 74.0
        assert data["gradedBy"] == teacher.id

        hidden = await client.get(
            f"/api/assignments/{assignment.id}/submissions", headers=auth(student)
        )
        [own] = hidden.json()["data"]
        assert own["status"] == "graded"
        assert own["score"] is None
        assert own["feedback"] is None

        await client.put(
            grade_url, json={"score": 87, "feedback": "Solid work", "publishGrade": True},
            headers=auth(teacher),
        )
        visible = await client.get("/api/assignments/my-submissions", headers=auth(student))
        [own] = visible.json()["data"]
        assert own["status"] == "returned"
        assert own["score"] == 74.0
        assert own["feedback"] == "Solid work"
        assert own["assignment"]["title"] == assignment.title

    async def test_publish_notifies_student(
        self, client, course, teacher, student, make_assignment, auth
    ):
        assignment = await make_assignment(course)
        submission_id = await self.submit(client, assignment, student, auth)

        await client.put(
            f"/api/assignments/submissions/{submission_id}",
            json={"score": 95, "publishGrade": True},
            headers=auth(teacher),
        )

        notifications = await client.get("/api/notifications", headers=auth(student))
        assert notifications.json()["data"][0]["kind"] == "grade"

    async def test_score_out_of_range(
        self, client, course, teacher, student, make_assignment, auth
    ):
        assignment = await make_assignment(course, total_points=10)
        submission_id = await self.submit(client, assignment, student, auth)

        response = await client.put(
            f"/api/assignments/submissions/{submission_id}",
            json={"score": 11},
            headers=auth(teacher),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "SCORE_OUT_OF_RANGE"

    async def test_graded_submission_cannot_be_replaced(
        self, client, course, teacher, student, make_assignment, auth
    ):
        assignment = await make_assignment(course)
        submission_id = await self.submit(client, assignment, student, auth)
        await client.put(
            f"/api/assignments/submissions/{submission_id}",
            json={"score": 50},
            headers=auth(teacher),
        )

        response = await client.post(
            submit_url(assignment), json={"content": "second try"}, headers=auth(student)
        )

        assert response.status_code == 409
        assert response.json()["error"] == "ALREADY_GRADED"

    async def test_regrade_allowed(self, client, course, teacher, student, make_assignment, auth):
        assignment = await make_assignment(course)
        submission_id = await self.submit(client, assignment, student, auth)
        url = f"/api/assignments/submissions/{submission_id}"
        await client.put(url, json={"score": 50, "publishGrade": True}, headers=auth(teacher))

        response = await client.put(url, json={"score": 60}, headers=auth(teacher))

        assert response.json()["data"]["score"] == 60
        assert response.json()["data"]["status"] == "graded"

    async def test_other_teacher_cannot_grade(
        self, client, course, student, make_user, make_assignment, auth
    ):
        stranger = await make_user(UserRole.TEACHER)
        assignment = await make_assignment(course)
        submission_id = await self.submit(client, assignment, student, auth)

        response = await client.put(
            f"/api/assignments/submissions/{submission_id}",
            json={"score": 50},
            headers=auth(stranger),
        )

        assert response.status_code == 403


class TestListing:
    async def test_teacher_sees_all_students_see_own(
        self, client, make_course, teacher, student, make_user, make_assignment, auth
    ):
        classmate = await make_user()
        course = await make_course(teacher, students=[student, classmate])
        assignment = await make_assignment(course)
        for user in (student, classmate):
            await client.post(
                submit_url(assignment), json={"content": "answer"}, headers=auth(user)
            )
        url = f"/api/assignments/{assignment.id}/submissions"

        as_teacher = await client.get(url, headers=auth(teacher))
        as_student = await client.get(url, headers=auth(student))

        assert len(as_teacher.json()["data"]) == 2
        assert [s["studentId"] for s in as_student.json()["data"]] == [student.id]

    async def test_returned_grades_survive_unenrollment(
        self, client, course, teacher, student, make_assignment, auth
    ):
        graded = await make_assignment(course, title="Graded")
        pending = await make_assignment(course, title="Pending")
        graded_id = (
            await client.post(submit_url(graded), json={"content": "a"}, headers=auth(student))
        ).json()["data"]["id"]
        await client.post(submit_url(pending), json={"content": "b"}, headers=auth(student))
        await client.put(
            f"/api/assignments/submissions/{graded_id}",
            json={"score": 90, "publishGrade": True},
            headers=auth(teacher),
        )
        await client.put(
            f"/api/courses/{course.id}/unenroll",
            json={"studentIds": [student.id]},
            headers=auth(teacher),
        )

        response = await client.get("/api/assignments/my-submissions", headers=auth(student))

        assert [s["id"] for s in response.json()["data"]] == [graded_id]

    async def test_my_submissions_is_student_only(self, client, teacher, auth):
        response = await client.get("/api/assignments/my-submissions", headers=auth(teacher))

        assert response.status_code == 403
