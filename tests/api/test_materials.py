"""
API tests for course materials.
"""

import pytest

from schoolhub.modules.users.models import UserRole

LINK = {"title": "Khan Academy", "type": "link", "url": "https://www.khanacademy.org/math"}


@pytest.fixture
async def course(make_course, teacher, student):
    return await make_course(teacher, students=[student])


class TestAddMaterial:
    async def test_link_material(self, client, course, teacher, auth):
        response = await client.post(
            f"/api/courses/{course.id}/materials", json=LINK, headers=auth(teacher)
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["url"] == LINK["url"]
        assert data["addedBy"] == teacher.id
        assert data["attachments"] == []

    async def test_needs_url_file_or_text(self, client, course, teacher, auth):
        response = await client.post(
            f"/api/courses/{course.id}/materials",
            json={"title": "Empty", "type": "link"},
            headers=auth(teacher),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    async def test_text_material_with_content(self, client, course, teacher, auth):
        response = await client.post(
            f"/api/courses/{course.id}/materials",
            json={"title": "Reading notes", "type": "text", "content": "Chapter 3 summary"},
            headers=auth(teacher),
        )

        assert response.status_code == 201
        assert response.json()["data"]["url"] is None

    async def test_uploaded_file_becomes_the_url(self, client, course, teacher, auth, store):
        response = await client.post(
            f"/api/courses/{course.id}/materials",
            data={"title": "Syllabus", "type": "file"},
            files=[("files", ("syllabus.pdf", b"%PDF-1.4 syllabus", "application/pdf"))],
            headers=auth(teacher),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        [attachment] = data["attachments"]
        assert data["url"] == attachment["url"]
        key = attachment["url"].removeprefix("http://test/uploads/")
        assert (store.base_dir / key).read_bytes() == b"%PDF-1.4 syllabus"

    async def test_roster_is_notified(self, client, course, teacher, student, auth):
        await client.post(f"/api/courses/{course.id}/materials", json=LINK, headers=auth(teacher))

        notifications = await client.get("/api/notifications", headers=auth(student))

        [notification] = notifications.json()["data"]
        assert notification["kind"] == "material"
        assert "Khan Academy" in notification["message"]

    async def test_student_cannot_add(self, client, course, student, auth):
        response = await client.post(
            f"/api/courses/{course.id}/materials", json=LINK, headers=auth(student)
        )

        assert response.status_code == 403

    async def test_other_teacher_cannot_add(self, client, course, make_user, auth):
        stranger = await make_user(UserRole.TEACHER)

        response = await client.post(
            f"/api/courses/{course.id}/materials", json=LINK, headers=auth(stranger)
        )

        assert response.status_code == 403


class TestListAndRemove:
    async def test_roster_reads_materials(self, client, course, teacher, student, auth):
        await client.post(f"/api/courses/{course.id}/materials", json=LINK, headers=auth(teacher))

        response = await client.get(f"/api/courses/{course.id}/materials", headers=auth(student))

        assert [m["title"] for m in response.json()["data"]] == ["Khan Academy"]

    async def test_outsider_cannot_read(self, client, course, make_user, auth):
        outsider = await make_user()

        response = await client.get(f"/api/courses/{course.id}/materials", headers=auth(outsider))

        assert response.status_code == 403

    async def test_remove_deletes_files(self, client, course, teacher, auth, store):
        created = await client.post(
            f"/api/courses/{course.id}/materials",
            data={"title": "Slides", "type": "file"},
            files=[("files", ("slides.txt", b"slide deck", "text/plain"))],
            headers=auth(teacher),
        )
        material = created.json()["data"]
        key = material["attachments"][0]["url"].removeprefix("http://test/uploads/")

        response = await client.delete(
            f"/api/courses/{course.id}/materials/{material['id']}", headers=auth(teacher)
        )

        assert response.status_code == 200
        assert not (store.base_dir / key).exists()
        listing = await client.get(f"/api/courses/{course.id}/materials", headers=auth(teacher))
        assert listing.json()["data"] == []

    async def test_remove_through_another_course(
        self, client, course, teacher, make_course, auth
    ):
        other = await make_course(teacher)
        created = await client.post(
            f"/api/courses/{course.id}/materials", json=LINK, headers=auth(teacher)
        )
        material_id = created.json()["data"]["id"]

        response = await client.delete(
            f"/api/courses/{other.id}/materials/{material_id}", headers=auth(teacher)
        )

        assert response.status_code == 404
        assert response.json()["error"] == "MATERIAL_NOT_FOUND"
