"""
CrudCamp Backend — API Endpoint Tests
=======================================

What:  End-to-end HTTP tests against a temporary SQLite database.
How:   HTTPX AsyncClient + ASGITransport (no server process); tables are
       created and dropped around every test by the `db_schema` fixture.

What we test:
    ✅ register → login → me
    ✅ duplicate registration (409), bad credentials (401), missing token (401)
    ✅ full task CRUD lifecycle with status codes and headers
    ✅ one user can never see or touch another user's tasks
    ✅ list filters, search, sort, pagination and X-Total-Count
    ✅ error envelope shape and request id propagation
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from jose import jwt

from app.config import settings

TEST_PASSWORD = "correct-horse-42"


async def create_tasks(client, headers, *titles):
    created = []
    for title in titles:
        response = await client.post("/api/tasks", json={"title": title}, headers=headers)
        assert response.status_code == 201, response.text
        created.append(response.json())
    return created


class TestAuthEndpoints:

    @pytest.mark.asyncio
    async def test_register_login_me(self, test_client):
        register = await test_client.post(
            "/api/auth/register",
            json={"email": "Grace@Example.com", "password": TEST_PASSWORD, "display_name": "Grace"},
        )
        assert register.status_code == 201
        body = register.json()
        assert body["email"] == "grace@example.com"
        assert "password" not in body and "password_hash" not in body

        login = await test_client.post(
            "/api/auth/login", json={"email": "GRACE@example.com", "password": TEST_PASSWORD}
        )
        assert login.status_code == 200
        token = login.json()
        assert token["token_type"] == "bearer"
        assert token["expires_in"] > 0

        me = await test_client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["id"] == body["id"]

    @pytest.mark.asyncio
    async def test_duplicate_registration_conflict(self, test_client, register_user):
        user, _ = await register_user(email="dup@example.com")

        response = await test_client.post(
            "/api/auth/register", json={"email": "DUP@example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_wrong_password_unauthorized(self, test_client, register_user):
        await register_user(email="ada@example.com")

        response = await test_client.post(
            "/api/auth/login", json={"email": "ada@example.com", "password": "not-the-password1"}
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_weak_password_is_422(self, test_client):
        response = await test_client.post(
            "/api/auth/register", json={"email": "weak@example.com", "password": "password"}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Authorization": "Basic dXNlcjpwYXNz"},
            {"Authorization": "Bearer "},
            {"Authorization": "Bearer not-a-token"},
        ],
    )
    async def test_protected_routes_need_valid_token(self, test_client, headers):
        response = await test_client.get("/api/tasks", headers=headers)

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthorized"
        assert body["request_id"] == response.headers["X-Request-ID"]


    @pytest.mark.asyncio
    async def test_expired_token_is_401(self, test_client, register_user):
        user, _ = await register_user(email="late@example.com")
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {
                "sub": user["id"],
                "email": user["email"],
                "type": "access",
                "iat": int(issued.timestamp()),
                "exp": int((issued + timedelta(hours=1)).timestamp()),
            },
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )

        response = await test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Token has expired"


class TestTaskEndpoints:

    @pytest.mark.asyncio
    async def test_crud_lifecycle(self, test_client, auth_headers):
        # Create
        created = await test_client.post(
            "/api/tasks",
            json={"title": "Prepare slides", "description": "Lesson 4: JWT"},
            headers=auth_headers,
        )
        assert created.status_code == 201
        task = created.json()
        assert created.headers["Location"] == f"/api/tasks/{task['id']}"
        assert task["completed"] is False

        # Read
        fetched = await test_client.get(f"/api/tasks/{task['id']}", headers=auth_headers)
        assert fetched.status_code == 200
        assert fetched.json()["description"] == "Lesson 4: JWT"

        # Patch
        patched = await test_client.patch(
            f"/api/tasks/{task['id']}", json={"completed": True}, headers=auth_headers
        )
        assert patched.status_code == 200
        assert patched.json()["completed"] is True
        assert patched.json()["title"] == "Prepare slides"

        # Put
        replaced = await test_client.put(
            f"/api/tasks/{task['id']}", json={"title": "Prepare slides v2"}, headers=auth_headers
        )
        assert replaced.status_code == 200
        assert replaced.json()["description"] is None
        assert replaced.json()["completed"] is False

        # Delete
        deleted = await test_client.delete(f"/api/tasks/{task['id']}", headers=auth_headers)
        assert deleted.status_code == 204
        assert deleted.content == b""

        gone = await test_client.get(f"/api/tasks/{task['id']}", headers=auth_headers)
        assert gone.status_code == 404
        assert gone.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_users_cannot_touch_each_others_tasks(self, test_client, register_user):
        _, alice = await register_user(email="alice@example.com")
        _, bob = await register_user(email="bob@example.com")
        [task] = await create_tasks(test_client, alice, "Alice's secret")
        url = f"/api/tasks/{task['id']}"

        assert (await test_client.get(url, headers=bob)).status_code == 404
        assert (await test_client.patch(url, json={"completed": True}, headers=bob)).status_code == 404
        assert (await test_client.put(url, json={"title": "pwned"}, headers=bob)).status_code == 404
        assert (await test_client.delete(url, headers=bob)).status_code == 404

        bob_list = await test_client.get("/api/tasks", headers=bob)
        assert bob_list.json()["tasks"] == []

        still_there = await test_client.get(url, headers=alice)
        assert still_there.json()["title"] == "Alice's secret"

    @pytest.mark.asyncio
    async def test_unknown_task_id_is_404(self, test_client, auth_headers):
        response = await test_client.get(f"/api/tasks/{uuid4()}", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_task_id_is_422(self, test_client, auth_headers):
        response = await test_client.get("/api/tasks/not-a-uuid", headers=auth_headers)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_patch_null_title_is_422(self, test_client, auth_headers):
        [task] = await create_tasks(test_client, auth_headers, "Keep my title")
        response = await test_client.patch(
            f"/api/tasks/{task['id']}", json={"title": None}, headers=auth_headers
        )
        assert response.status_code == 422


class TestTaskListing:

    @pytest.mark.asyncio
    async def test_pagination_and_total_count(self, test_client, auth_headers):
        await create_tasks(test_client, auth_headers, *[f"Task {i}" for i in range(5)])

        first = await test_client.get(
            "/api/tasks", params={"limit": 2, "sort": "title_asc"}, headers=auth_headers
        )
        assert first.status_code == 200
        assert first.headers["X-Total-Count"] == "5"
        page = first.json()
        assert [t["title"] for t in page["tasks"]] == ["Task 0", "Task 1"]
        assert page["has_more"] is True

        last = await test_client.get(
            "/api/tasks", params={"limit": 2, "offset": 4, "sort": "title_asc"}, headers=auth_headers
        )
        assert [t["title"] for t in last.json()["tasks"]] == ["Task 4"]
        assert last.json()["has_more"] is False

    @pytest.mark.asyncio
    async def test_filter_by_completed_and_search(self, test_client, auth_headers):
        tasks = await create_tasks(
            test_client, auth_headers, "Grade essays", "grade quizzes", "Plan lesson"
        )
        await test_client.patch(
            f"/api/tasks/{tasks[0]['id']}", json={"completed": True}, headers=auth_headers
        )

        done = await test_client.get("/api/tasks", params={"completed": "true"}, headers=auth_headers)
        assert [t["title"] for t in done.json()["tasks"]] == ["Grade essays"]

        grading = await test_client.get(
            "/api/tasks", params={"search": "GRADE", "sort": "title_asc"}, headers=auth_headers
        )
        assert grading.json()["total_count"] == 2
        assert [t["title"] for t in grading.json()["tasks"]] == ["Grade essays", "grade quizzes"]

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, test_client, auth_headers):
        await create_tasks(test_client, auth_headers, "100% done", "100 percent")

        response = await test_client.get("/api/tasks", params={"search": "0%"}, headers=auth_headers)

        assert [t["title"] for t in response.json()["tasks"]] == ["100% done"]

    @pytest.mark.asyncio
    async def test_sort_by_creation_time(self, test_client, auth_headers):
        await create_tasks(test_client, auth_headers, "first", "second", "third")

        oldest_first = await test_client.get(
            "/api/tasks", params={"sort": "created_at_asc"}, headers=auth_headers
        )
        newest_first = await test_client.get("/api/tasks", headers=auth_headers)

        assert [t["title"] for t in oldest_first.json()["tasks"]] == ["first", "second", "third"]
        assert [t["title"] for t in newest_first.json()["tasks"]] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_sort_by_due_date_puts_undated_last(self, test_client, auth_headers):
        for title, due_date in [
            ("march", "2026-03-01T09:00:00Z"),
            ("someday", None),
            ("january", "2026-01-15T09:00:00Z"),
        ]:
            response = await test_client.post(
                "/api/tasks", json={"title": title, "due_date": due_date}, headers=auth_headers
            )
            assert response.status_code == 201

        response = await test_client.get(
            "/api/tasks", params={"sort": "due_date_asc"}, headers=auth_headers
        )

        assert [t["title"] for t in response.json()["tasks"]] == ["january", "march", "someday"]

    @pytest.mark.asyncio
    async def test_invalid_sort_is_400(self, test_client, auth_headers):
        response = await test_client.get("/api/tasks", params={"sort": "random"}, headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "sort"

    @pytest.mark.asyncio
    async def test_limit_over_100_is_422(self, test_client, auth_headers):
        response = await test_client.get("/api/tasks", params={"limit": 101}, headers=auth_headers)
        assert response.status_code == 422


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_reports_database(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
