"""
User service.
Creates user accounts together with the profile they own.
"""
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from student_registry.core.security import verify_password
from student_registry.db.repositories import UserRepository
from student_registry.models.mongo_models import StudentBase, StudentDocument
from student_registry.services.student_service import StudentService


class UserService:
    """Service for user account operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.users = UserRepository(db)

    async def create_student(
        self,
        password: Optional[str],
        student: StudentBase
    ) -> StudentDocument:
        """Create a student user with the given password and its student record."""
        return await StudentService(self.db).create(student, password=password)

    async def check_password(self, user_id: str, password: str) -> bool:
        """Compare a plaintext password with the stored hash."""
        user = await self.users.get_by_id(user_id)
        if not user or user.is_deleted:
            return False
        return verify_password(password, user.password)
