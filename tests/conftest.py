"""
Pytest fixtures for Student Registry test suite.
Provides async test client, an in-memory MongoDB and test data setup.
"""
import os
import sys
from typing import AsyncGenerator, Any, Callable, Dict

# Cheap hashing for tests; must be set before settings are imported
os.environ.setdefault("BCRYPT_SALT_ROUNDS", "4")
os.environ.setdefault("DEFAULT_PASSWORD", "default-pass-123")

import pytest
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from student_registry.main import app
from student_registry.core.config import settings
from student_registry.db.mongodb import get_mongodb, create_indexes


API = settings.API_PREFIX


@pytest.fixture
async def mongo_db():
    """Fresh in-memory MongoDB database with production indexes."""
    client = AsyncMongoMockClient()
    db = client["student_registry_test"]
    await create_indexes(db)
    yield db


@pytest.fixture
async def async_client(mongo_db) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for testing FastAPI app."""
    app.dependency_overrides[get_mongodb] = lambda: mongo_db
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ================== Test Data Fixtures ==================

def build_student_payload(
    student_id: str = "2030010001",
    email: str = "john.public@university.edu",
    **overrides: Any
) -> Dict[str, Any]:
    """A student payload that passes every validation rule."""
    payload = {
        "id": student_id,
        "name": {
            "firstName": "John",
            "middleName": "Q",
            "lastName": "Public",
        },
        "gender": "male",
        "dateOfBirth": "2001-04-12",
        "email": email,
        "contactNo": "01710000001",
        "emergencyContactNo": "01710000002",
        "bloodGroup": "O+",
        "presentAddress": "12 College Road, Dhaka",
        "permanentAddress": "45 River Lane, Sylhet",
        "guardian": {
            "fatherName": "Richard Public",
            "fatherOccupation": "Engineer",
            "fatherContactNo": "01710000003",
            "motherName": "Mary Public",
            "motherOccupation": "Teacher",
            "motherContactNo": "01710000004",
        },
        "localGuardian": {
            "name": "Alan Smith",
            "occupation": "Doctor",
            "contactNo": "01710000005",
            "address": "7 Hill Street, Dhaka",
        },
        "profileImg": "https://cdn.university.edu/img/2030010001.png",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def student_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for valid student payloads."""
    return build_student_payload


async def create_student(
    client: AsyncClient,
    payload: Dict[str, Any],
    password: str = None
):
    """Helper to create a student through the user endpoint."""
    body = {"student": payload}
    if password is not None:
        body["password"] = password
    return await client.post(f"{API}/users/create-student", json=body)
