"""
API tests for user profiles.
"""

from schoolhub.modules.users.models import UserRole


class TestListUsers:
    async def test_teacher_sees_only_students(self, client, teacher, student, admin, auth):
        response = await client.get("/api/users", headers=auth(teacher))

        assert response.status_code == 200
        roles = {u["role"] for u in response.json()["data"]}
        assert roles == {"student"}

    async def test_teacher_cannot_filter_other_roles(self, client, teacher, auth):
        response = await client.get("/api/users?role=admin", headers=auth(teacher))

        assert response.status_code == 403

    async def test_admin_filters_and_searches(self, client, admin, make_user, auth):
        await make_user(UserRole.TEACHER, first_name="Marie", last_name="Curie")
        await make_user(UserRole.TEACHER, first_name="Alan", last_name="Turing")

        response = await client.get("/api/users?role=teacher&search=curie", headers=auth(admin))

        names = [u["lastName"] for u in response.json()["data"]]
        assert names == ["Curie"]

    async def test_student_cannot_list(self, client, student, auth):
        response = await client.get("/api/users", headers=auth(student))

        assert response.status_code == 403


class TestProfile:
    async def test_student_reads_only_self(self, client, student, make_user, auth):
        other = await make_user(UserRole.STUDENT)

        own = await client.get(f"/api/users/{student.id}", headers=auth(student))
        foreign = await client.get(f"/api/users/{other.id}", headers=auth(student))

        assert own.status_code == 200
        assert foreign.status_code == 403

    async def test_update_own_profile(self, client, student, auth):
        response = await client.put(
            f"/api/users/{student.id}",
            json={"phone": "+44 20 7946 0000", "firstName": "Samuel"},
            headers=auth(student),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["firstName"] == "Samuel"
        assert data["phone"] == "+44 20 7946 0000"

    async def test_email_and_role_are_immutable(self, client, student, auth):
        email = await client.put(
            f"/api/users/{student.id}",
            json={"email": "new@schoolhub.io"},
            headers=auth(student),
        )
        role = await client.put(
            f"/api/users/{student.id}", json={"role": "teacher"}, headers=auth(student)
        )

        assert email.status_code == 400
        assert email.json()["error"] == "IMMUTABLE_FIELD"
        assert role.status_code == 400

    async def test_only_admin_toggles_active(self, client, student, auth):
        response = await client.put(
            f"/api/users/{student.id}", json={"isActive": False}, headers=auth(student)
        )

        assert response.status_code == 403

    async def test_unknown_user(self, client, admin, auth):
        response = await client.get("/api/users/missing", headers=auth(admin))

        assert response.status_code == 404
        assert response.json()["error"] == "USER_NOT_FOUND"


class TestDeleteUser:
    async def test_admin_deletes_student_and_memberships(
        self, client, admin, teacher, student, make_course, auth
    ):
        course = await make_course(teacher, students=[student])

        response = await client.delete(f"/api/users/{student.id}", headers=auth(admin))

        assert response.status_code == 200
        detail = await client.get(f"/api/courses/{course.id}", headers=auth(teacher))
        assert detail.json()["data"]["students"] == []

    async def test_teacher_of_record_cannot_be_deleted(
        self, client, admin, teacher, make_course, auth
    ):
        await make_course(teacher)

        response = await client.delete(f"/api/users/{teacher.id}", headers=auth(admin))

        assert response.status_code == 409
        assert response.json()["error"] == "TEACHER_OF_RECORD"

    async def test_non_admin_cannot_delete(self, client, teacher, student, auth):
        response = await client.delete(f"/api/users/{student.id}", headers=auth(teacher))

        assert response.status_code == 403
