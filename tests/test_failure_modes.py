"""
Failure Mode Tests

Tests error classification and the failure envelope:
- Malformed input
- Unknown routes
- Unique index races
- Unexpected errors never leak internals
"""
import pytest
from httpx import AsyncClient
from unittest.mock import patch, AsyncMock

from tests.conftest import API, create_student
from student_registry.core.errors import (
    ERROR_STATUS_CODES, ErrorKind, ConflictError, NotFoundError, ValidationFailedError
)
from student_registry.db.repositories import StudentRepository, UserRepository


class TestErrorTaxonomy:
    """Each error kind maps to one status code."""

    def test_status_table(self):
        assert ERROR_STATUS_CODES == {
            ErrorKind.VALIDATION: 400,
            ErrorKind.NOT_FOUND: 404,
            ErrorKind.CONFLICT: 409,
            ErrorKind.INTERNAL: 500,
        }

    def test_error_classes_carry_status(self):
        assert ValidationFailedError("bad").status_code == 400
        assert NotFoundError("missing").status_code == 404
        assert ConflictError("dup").status_code == 409


class TestMalformedInput:
    """Tests for malformed input handling."""

    @pytest.mark.asyncio
    async def test_malformed_json_returns_400(self, async_client: AsyncClient):
        resp = await async_client.post(
            f"{API}/students/create-student",
            content="{ invalid json }",
            headers={"Content-Type": "application/json"}
        )

        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["message"] == "Validation Error"

    @pytest.mark.asyncio
    async def test_empty_body_returns_400(self, async_client: AsyncClient):
        resp = await async_client.post(
            f"{API}/users/create-student",
            content="",
            headers={"Content-Type": "application/json"}
        )

        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_every_violation_listed(self, async_client: AsyncClient, student_payload):
        payload = student_payload(email="nope", gender="unknown")
        payload["name"]["firstName"] = "john"

        resp = await create_student(async_client, payload, password="secret123")

        assert resp.status_code == 400
        paths = {source["path"] for source in resp.json()["error"]}
        assert paths == {"student.name.firstName", "student.email", "student.gender"}
        for source in resp.json()["error"]:
            assert source["message"]


class TestUnknownRoutes:

    @pytest.mark.asyncio
    async def test_unmatched_route(self, async_client: AsyncClient):
        resp = await async_client.get(f"{API}/courses")

        assert resp.status_code == 404
        assert resp.json() == {
            "success": False,
            "message": "API Not Found",
            "error": {"path": f"{API}/courses", "message": "API Not Found"},
        }

    @pytest.mark.asyncio
    async def test_wrong_method_keeps_envelope(self, async_client: AsyncClient):
        resp = await async_client.put(f"{API}/students/2030010001", json={})

        assert resp.status_code == 405
        assert resp.json()["success"] is False


class TestStorageFailures:

    @pytest.mark.asyncio
    async def test_duplicate_key_race_returns_409(
        self, async_client: AsyncClient, student_payload
    ):
        await create_student(async_client, student_payload(), password="secret123")

        # Both pre-checks miss, so the unique index is the last line of defense
        with patch.object(StudentRepository, "exists", new=AsyncMock(return_value=False)), \
                patch.object(StudentRepository, "email_taken", new=AsyncMock(return_value=False)), \
                patch.object(UserRepository, "exists", new=AsyncMock(return_value=False)):
            resp = await create_student(async_client, student_payload(), password="secret123")

        assert resp.status_code == 409
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["kind"] == "conflict"

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_500(self, async_client: AsyncClient):
        with patch.object(
            StudentRepository,
            "find",
            new=AsyncMock(side_effect=RuntimeError("connection reset"))
        ):
            resp = await async_client.get(f"{API}/students")

        assert resp.status_code == 500
        assert resp.json() == {
            "success": False,
            "message": "Something went wrong",
            "error": {"kind": "internal"},
        }


class TestHealth:

    @pytest.mark.asyncio
    async def test_root(self, async_client: AsyncClient):
        resp = await async_client.get("/")

        assert resp.status_code == 200
        assert resp.json()["status"] == "running"

    @pytest.mark.asyncio
    async def test_health_without_connection_is_unhealthy(self, async_client: AsyncClient):
        resp = await async_client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "unhealthy"
