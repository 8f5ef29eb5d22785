"""
API tests for registration, login, refresh and the identity gate.
"""

from schoolhub.core.config import settings
from schoolhub.core.security import create_refresh_token
from schoolhub.modules.users.models import UserRole

DEFAULT_PASSWORD = "secret123"


class TestRegister:
    async def test_register_student(self, client):
        response = await client.post(
            "/api/auth/register",
            json={
                "firstName": "Grace",
                "lastName": "Hopper",
                "email": "Grace@SchoolHub.io",
                "password": "cobol1959",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        user = body["data"]["user"]
        assert user["email"] == "grace@schoolhub.io"
        assert user["role"] == "student"
        assert user["isActive"] is True
        assert "passwordHash" not in user

    async def test_duplicate_email_conflicts(self, client, student):
        response = await client.post(
            "/api/auth/register",
            json={
                "firstName": "Again",
                "lastName": "Student",
                "email": student.email,
                "password": "whatever1",
            },
        )

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "message": "A user with this email already exists",
            "error": "EMAIL_TAKEN",
        }

    async def test_admin_role_needs_admin_caller(self, client, admin, auth):
        payload = {
            "firstName": "Root",
            "lastName": "User",
            "email": "root@schoolhub.io",
            "password": "password1",
            "role": "admin",
        }

        anonymous = await client.post("/api/auth/register", json=payload)
        by_admin = await client.post("/api/auth/register", json=payload, headers=auth(admin))

        assert anonymous.status_code == 403
        assert by_admin.status_code == 201
        assert by_admin.json()["data"]["user"]["role"] == "admin"

    async def test_short_password_is_a_validation_error(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"firstName": "A", "lastName": "B", "email": "ab@schoolhub.io", "password": "1"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"


class TestLogin:
    async def test_login_returns_tokens(self, client, teacher):
        response = await client.post(
            "/api/auth/login", json={"email": teacher.email, "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"]
        assert data["refreshToken"]
        assert data["tokenType"] == "bearer"
        assert data["user"]["id"] == teacher.id

        me = await client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"}
        )
        assert me.status_code == 200
        assert me.json()["data"]["user"]["role"] == "teacher"

    async def test_wrong_password(self, client, student):
        response = await client.post(
            "/api/auth/login", json={"email": student.email, "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_CREDENTIALS"

    async def test_inactive_account(self, client, make_user):
        user = await make_user(UserRole.STUDENT, is_active=False)

        response = await client.post(
            "/api/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "ACCOUNT_INACTIVE"

    async def test_repeated_failures_are_throttled(self, client, student):
        payload = {"email": student.email, "password": "wrong"}
        for _ in range(settings.login_rate_limit):
            await client.post("/api/auth/login", json=payload)

        response = await client.post("/api/auth/login", json=payload)

        assert response.status_code == 429
        assert response.json()["error"] == "RATE_LIMIT_EXCEEDED"
        assert response.headers["Retry-After"] == str(settings.login_rate_limit_window_seconds)


class TestRefresh:
    async def test_refresh_issues_access_token(self, client, student):
        response = await client.post(
            "/api/auth/refresh", json={"refreshToken": create_refresh_token(student.id)}
        )

        assert response.status_code == 200
        token = response.json()["data"]["token"]
        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["data"]["user"]["id"] == student.id

    async def test_access_token_is_not_a_refresh_token(self, client, student, auth):
        access = auth(student)["Authorization"].removeprefix("Bearer ")

        response = await client.post("/api/auth/refresh", json={"refreshToken": access})

        assert response.status_code == 401


class TestIdentityGate:
    async def test_missing_token(self, client):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["error"] == "UNAUTHENTICATED"

    async def test_garbage_token(self, client):
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_TOKEN"

    async def test_refresh_token_rejected_as_access(self, client, student):
        token = create_refresh_token(student.id)

        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_TOKEN_TYPE"

    async def test_deactivated_user_is_rejected(self, client, admin, student, auth):
        await client.put(
            f"/api/users/{student.id}", json={"isActive": False}, headers=auth(admin)
        )

        response = await client.get("/api/auth/me", headers=auth(student))

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_TOKEN_USER"

    async def test_logout_without_redis_succeeds(self, client, student, auth):
        response = await client.post("/api/auth/logout", headers=auth(student))

        assert response.status_code == 204
