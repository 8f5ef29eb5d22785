"""
API tests for assignments.
"""

from datetime import UTC, datetime, timedelta

import pytest

from schoolhub.core.config import settings
from schoolhub.modules.users.models import UserRole


def due_in(days: int) -> str:
    return (datetime.now(UTC) + timedelta(days=days)).isoformat()


@pytest.fixture
async def course(make_course, teacher, student):
    return await make_course(teacher, students=[student])


class TestCreateAssignment:
    async def test_create_json(self, client, course, teacher, student, auth):
        response = await client.post(
            "/api/assignments",
            json={
                "courseId": course.id,
                "title": "Lab report",
                "dueDate": due_in(7),
                "totalPoints": 50,
                "type": "Project",
                "allowLateSubmissions": True,
                "latePenaltyPct": 10,
            },
            headers=auth(teacher),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["title"] == "Lab report"
        assert data["published"] is True
        assert data["createdBy"] == teacher.id
        assert data["attachments"] == []

        notifications = await client.get("/api/notifications", headers=auth(student))
        assert notifications.json()["data"][0]["kind"] == "assignment"

    async def test_create_multipart_with_files(self, client, course, teacher, auth, store):
        response = await client.post(
            "/api/assignments",
            data={
                "courseId": course.id,
                "title": "Worksheet",
                "dueDate": due_in(3),
                "totalPoints": "20",
                "published": "false",
            },
            files=[
                ("files", ("sheet.pdf", b"%PDF-1.4 worksheet", "application/pdf")),
                ("files", ("answers template.txt", b"1.\n2.\n", "text/plain")),
            ],
            headers=auth(teacher),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["published"] is False
        assert data["totalPoints"] == 20
        names = sorted(a["fileName"] for a in data["attachments"])
        assert names == ["answers template.txt", "sheet.pdf"]
        pdf = next(a for a in data["attachments"] if a["fileName"] == "sheet.pdf")
        assert pdf["mimeType"] == "application/pdf"
        assert pdf["size"] == len(b"%PDF-1.4 worksheet")
        assert pdf["url"].startswith("http://test/uploads/assignment/")

        key = pdf["url"].removeprefix("http://test/uploads/")
        assert (store.base_dir / key).read_bytes() == b"%PDF-1.4 worksheet"

    async def test_oversize_file_rejects_request(
        self, client, course, teacher, auth, monkeypatch
    ):
        monkeypatch.setattr(settings, "max_assignment_file_bytes", 8)

        response = await client.post(
            "/api/assignments",
            data={
                "courseId": course.id,
                "title": "Too big",
                "dueDate": due_in(3),
                "totalPoints": "10",
            },
            files=[("files", ("big.bin", b"x" * 9, "application/octet-stream"))],
            headers=auth(teacher),
        )

        assert response.status_code == 413
        listing = await client.get(
            f"/api/assignments?courseId={course.id}", headers=auth(teacher)
        )
        assert listing.json()["data"] == []

    async def test_other_teacher_forbidden(self, client, course, make_user, auth):
        stranger = await make_user(UserRole.TEACHER)

        response = await client.post(
            "/api/assignments",
            json={"courseId": course.id, "title": "X", "dueDate": due_in(1), "totalPoints": 5},
            headers=auth(stranger),
        )

        assert response.status_code == 403

    async def test_missing_body(self, client, teacher, auth):
        response = await client.post("/api/assignments", headers=auth(teacher))

        assert response.status_code == 400

    async def test_invalid_field(self, client, course, teacher, auth):
        response = await client.post(
            "/api/assignments",
            json={"courseId": course.id, "title": "X", "dueDate": due_in(1), "totalPoints": -1},
            headers=auth(teacher),
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("totalPoints")


class TestVisibility:
    async def test_students_see_only_published(
        self, client, course, teacher, student, make_assignment, auth
    ):
        published = await make_assignment(course, title="Visible")
        draft = await make_assignment(course, title="Draft", published=False)

        as_student = await client.get(
            f"/api/assignments?courseId={course.id}", headers=auth(student)
        )
        as_teacher = await client.get("/api/assignments", headers=auth(teacher))
        hidden = await client.get(f"/api/assignments/{draft.id}", headers=auth(student))

        assert [a["id"] for a in as_student.json()["data"]] == [published.id]
        assert len(as_teacher.json()["data"]) == 2
        assert hidden.status_code == 404

    async def test_outsider_student_forbidden(
        self, client, course, make_user, make_assignment, auth
    ):
        assignment = await make_assignment(course)
        outsider = await make_user()

        response = await client.get(f"/api/assignments/{assignment.id}", headers=auth(outsider))

        assert response.status_code == 403

    async def test_publishing_a_draft_notifies_roster(
        self, client, course, teacher, student, make_assignment, auth
    ):
        draft = await make_assignment(course, published=False)

        response = await client.put(
            f"/api/assignments/{draft.id}", json={"published": True}, headers=auth(teacher)
        )

        assert response.json()["data"]["published"] is True
        count = await client.get("/api/notifications/unread-count", headers=auth(student))
        assert count.json()["data"]["count"] == 1


class TestUpdateAndDelete:
    async def test_update_appends_files(
        self, client, course, teacher, make_assignment, auth
    ):
        assignment = await make_assignment(course)
        url = f"/api/assignments/{assignment.id}"
        await client.put(
            url, files=[("files", ("a.txt", b"a", "text/plain"))], headers=auth(teacher)
        )

        response = await client.put(
            url,
            data={"title": "Homework 1 (revised)"},
            files=[("files", ("b.txt", b"b", "text/plain"))],
            headers=auth(teacher),
        )

        data = response.json()["data"]
        assert data["title"] == "Homework 1 (revised)"
        assert sorted(a["fileName"] for a in data["attachments"]) == ["a.txt", "b.txt"]

    async def test_null_title_rejected(self, client, course, teacher, make_assignment, auth):
        assignment = await make_assignment(course)

        response = await client.put(
            f"/api/assignments/{assignment.id}", json={"title": None}, headers=auth(teacher)
        )

        assert response.status_code == 400

    async def test_delete_removes_submissions_and_files(
        self, client, course, teacher, student, make_assignment, auth, store
    ):
        assignment = await make_assignment(course)
        submitted = await client.post(
            f"/api/assignments/{assignment.id}/submit",
            files=[("files", ("essay.txt", b"my essay", "text/plain"))],
            headers=auth(student),
        )
        url = submitted.json()["data"]["attachments"][0]["url"]
        key = url.removeprefix("http://test/uploads/")
        assert (store.base_dir / key).exists()

        response = await client.delete(f"/api/assignments/{assignment.id}", headers=auth(teacher))

        assert response.status_code == 200
        assert not (store.base_dir / key).exists()
        mine = await client.get("/api/assignments/my-submissions", headers=auth(student))
        assert mine.json()["data"] == []

    async def test_student_cannot_delete(self, client, course, student, make_assignment, auth):
        assignment = await make_assignment(course)

        response = await client.delete(f"/api/assignments/{assignment.id}", headers=auth(student))

        assert response.status_code == 403
