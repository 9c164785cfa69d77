"""
Integration tests for API endpoints.
"""

import uuid

import httpx
from e2c.routes.problems import get_validation_engine
from fastapi.testclient import TestClient

from conftest import build_engine, make_testcases, register


async def _delete_user(email: str) -> None:
    from sqlalchemy import delete

    from e2c.db import base
    from e2c.db.models import User

    async with base.AsyncSessionLocal() as session:
        await session.execute(delete(User).where(User.email == email))
        await session.commit()


class TestAuthAPI:
    """Test the authentication endpoints."""

    def test_register_sets_session(self, client: TestClient):
        data = register(client, "new@example.com")
        assert data["email"] == "new@example.com"
        assert data["role"] == "USER"
        assert "password" not in data
        assert client.cookies.get("token")

        me = client.get("/api/v1/auth/me")
        assert me.status_code == 200
        assert me.json()["id"] == data["id"]

    def test_register_duplicate_email(self, client: TestClient):
        register(client, "dup@example.com")
        response = client.post(
            "/api/v1/auth/register",
            json={"name": "dup", "email": "DUP@example.com", "password": "s3cret-pw"},
        )
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "EMAIL_TAKEN"

    def test_register_validates_payload(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/register",
            json={"name": "x", "email": "not-an-email", "password": "123"},
        )
        assert response.status_code == 422

    def test_login_and_logout(self, client: TestClient):
        register(client, "login@example.com")
        client.post("/api/v1/auth/logout")
        assert client.get("/api/v1/auth/me").status_code == 401

        response = client.post(
            "/api/v1/auth/login",
            json={"email": "login@example.com", "password": "s3cret-pw"},
        )
        assert response.status_code == 200
        assert client.get("/api/v1/auth/me").status_code == 200

    def test_login_with_wrong_password(self, client: TestClient):
        register(client, "login@example.com")
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "login@example.com", "password": "wrong-pw"},
        )
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


class TestProblemsAPI:
    """Test the problem management endpoints."""

    def test_create_problem(self, admin_client: TestClient, fake_judge, sample_problem_data):
        response = admin_client.post("/api/v1/problems", json=sample_problem_data)
        assert response.status_code == 201, response.text

        data = response.json()
        assert data["title"] == sample_problem_data["title"]
        assert data["testcases"] == sample_problem_data["testcases"]
        assert data["user_id"] is not None
        assert fake_judge.submission_count == 3

    def test_create_problem_requires_admin(
        self, auth_client: TestClient, fake_judge, sample_problem_data
    ):
        response = auth_client.post("/api/v1/problems", json=sample_problem_data)
        assert response.status_code == 403
        assert fake_judge.submission_count == 0

    def test_create_problem_requires_auth(self, client: TestClient, sample_problem_data):
        response = client.post("/api/v1/problems", json=sample_problem_data)
        assert response.status_code == 401

    def test_create_problem_with_failing_solution(
        self, admin_client: TestClient, fake_judge, sample_problem_data
    ):
        fake_judge.verdicts["2 2"] = 4

        response = admin_client.post("/api/v1/problems", json=sample_problem_data)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "TESTCASE_FAILED"
        assert error["message"] == "Testcase 2 failed for language PYTHON"
        assert error["details"] == {
            "language": "PYTHON",
            "testcase": 2,
            "status": "WrongAnswer",
        }
        assert admin_client.get("/api/v1/problems").json()["items"] == []

    def test_create_problem_with_unsupported_language(
        self, admin_client: TestClient, fake_judge, sample_problem_data
    ):
        sample_problem_data["reference_solutions"]["brainfuck"] = "+."

        response = admin_client.post("/api/v1/problems", json=sample_problem_data)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "UNSUPPORTED_LANGUAGE"
        assert error["details"] == {"language": "brainfuck"}
        assert fake_judge.submission_count == 0

    def test_create_problem_when_judge_unreachable(
        self, admin_client: TestClient, fake_judge, sample_problem_data
    ):
        fake_judge.submit_error = httpx.ConnectError("connection refused")

        response = admin_client.post("/api/v1/problems", json=sample_problem_data)

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "JUDGE_UNAVAILABLE"

    def test_create_problem_when_judge_never_finishes(
        self, app, admin_client: TestClient, fake_judge, sample_problem_data
    ):
        fake_judge.pending_rounds = 1000
        app.dependency_overrides[get_validation_engine] = lambda: build_engine(
            fake_judge, deadline=0
        )

        response = admin_client.post("/api/v1/problems", json=sample_problem_data)

        assert response.status_code == 504
        error = response.json()["error"]
        assert error["code"] == "JUDGE_TIMEOUT"
        assert error["details"]["reason"] == "deadline exceeded"
        assert len(error["details"]["outstanding"]) == 3
        assert admin_client.get("/api/v1/problems").json()["items"] == []

    def test_create_problem_without_testcases(
        self, admin_client: TestClient, sample_problem_data
    ):
        sample_problem_data["testcases"] = []
        response = admin_client.post("/api/v1/problems", json=sample_problem_data)
        assert response.status_code == 422

    def test_get_and_list_problems(self, admin_client: TestClient, sample_problem_data):
        created = admin_client.post("/api/v1/problems", json=sample_problem_data).json()

        response = admin_client.get(f"/api/v1/problems/{created['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

        listing = admin_client.get("/api/v1/problems").json()
        assert [p["id"] for p in listing["items"]] == [created["id"]]

    def test_get_unknown_problem(self, auth_client: TestClient):
        response = auth_client.get(f"/api/v1/problems/{uuid.uuid4()}")
        assert response.status_code == 404

    def test_update_problem_title_only(
        self, admin_client: TestClient, fake_judge, sample_problem_data
    ):
        created = admin_client.post("/api/v1/problems", json=sample_problem_data).json()
        submitted = fake_judge.submission_count

        response = admin_client.patch(
            f"/api/v1/problems/{created['id']}", json={"title": "Sum"}
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Sum"
        assert response.json()["testcases"] == sample_problem_data["testcases"]
        assert fake_judge.submission_count == submitted

    def test_update_problem_with_failing_testcases(
        self, admin_client: TestClient, fake_judge, sample_problem_data
    ):
        created = admin_client.post("/api/v1/problems", json=sample_problem_data).json()
        fake_judge.verdicts["25 25"] = 5

        response = admin_client.patch(
            f"/api/v1/problems/{created['id']}",
            json={"testcases": make_testcases(25)},
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]["testcase"] == 25
        stored = admin_client.get(f"/api/v1/problems/{created['id']}").json()
        assert len(stored["testcases"]) == 3

    def test_update_unknown_problem(self, admin_client: TestClient):
        response = admin_client.patch(
            f"/api/v1/problems/{uuid.uuid4()}", json={"title": "x"}
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_delete_problem(self, admin_client: TestClient, sample_problem_data):
        created = admin_client.post("/api/v1/problems", json=sample_problem_data).json()

        response = admin_client.delete(f"/api/v1/problems/{created['id']}")
        assert response.status_code == 200

        assert admin_client.get(f"/api/v1/problems/{created['id']}").status_code == 404

    def test_list_solved_problems_empty(self, auth_client: TestClient):
        response = auth_client.get("/api/v1/problems/solved")
        assert response.status_code == 200
        assert response.json() == {"items": []}

    def test_reads_do_not_build_validation_engine(
        self, app, admin_client: TestClient, sample_problem_data
    ):
        created = admin_client.post("/api/v1/problems", json=sample_problem_data).json()

        def no_engine():
            raise AssertionError("validation engine not expected")

        app.dependency_overrides[get_validation_engine] = no_engine

        assert admin_client.get("/api/v1/problems").status_code == 200
        assert admin_client.get("/api/v1/problems/solved").status_code == 200
        url = f"/api/v1/problems/{created['id']}"
        assert admin_client.get(url).status_code == 200
        assert admin_client.delete(url).status_code == 200

    def test_deleted_account_token_is_rejected(self, auth_client: TestClient):
        auth_client.portal.call(_delete_user, "user@example.com")

        response = auth_client.get("/api/v1/problems")
        assert response.status_code == 401
        assert response.json()["detail"] == "Unauthorized: User not found"
        assert auth_client.get("/api/v1/problems/solved").status_code == 401
        assert auth_client.get("/api/v1/auth/me").status_code == 401


class TestLanguagesAPI:
    """Test the languages endpoint."""

    def test_list_languages(self, client: TestClient):
        response = client.get("/api/v1/languages")
        assert response.status_code == 200
        items = response.json()["items"]
        assert {"PYTHON", "JAVASCRIPT", "JAVA"} <= set(items)
