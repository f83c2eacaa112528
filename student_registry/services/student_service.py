"""
Student service.
Handles student creation, lookup and soft deletion.
"""
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError

from student_registry.core.config import settings
from student_registry.core.errors import ConflictError, NotFoundError, ValidationFailedError, format_validation_errors
from student_registry.core.logging import audit_log
from student_registry.db.repositories import StudentRepository, UserRepository
from student_registry.models.mongo_models import StudentBase, StudentDocument, UserDocument, UserRole


class StudentService:
    """Service for student management operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.students = StudentRepository(db)
        self.users = UserRepository(db)

    async def create(
        self,
        payload: StudentBase,
        password: Optional[str] = None
    ) -> StudentDocument:
        """
        Create the owning user, then the student that references it.
        If the student insert fails the user is deleted again.
        """
        if await self.students.exists(payload.id) or await self.users.exists(payload.id):
            raise ConflictError(
                f"Student with id {payload.id} already exists",
                details={"id": payload.id}
            )
        if await self.students.email_taken(payload.email):
            raise ConflictError(
                f"Student with email {payload.email} already exists",
                details={"email": payload.email}
            )

        user = await self.users.save(UserDocument(
            id=payload.id,
            password=password or settings.DEFAULT_PASSWORD,
            role=UserRole.STUDENT,
        ))
        audit_log.log_user_created(user.id, user.role)

        try:
            student = StudentDocument(**payload.model_dump(), user=user.mongo_id)
            created = await self.students.insert(student)
        except ValidationError as exc:
            await self._undo_user(user, "invalid student document")
            raise ValidationFailedError(
                "Validation Error", details=format_validation_errors(exc.errors())
            ) from exc
        except Exception as exc:
            await self._undo_user(user, type(exc).__name__)
            raise

        audit_log.log_student_created(created.id, created.user)
        return created

    async def _undo_user(self, user: UserDocument, reason: str) -> None:
        await self.users.delete(user.mongo_id)
        audit_log.log_create_rolled_back(user.id, reason)

    async def list_all(self) -> list[StudentDocument]:
        """All students that are not soft-deleted."""
        return await self.students.find()

    async def get_by_id(self, student_id: str) -> StudentDocument:
        student = await self.students.find_one({"id": student_id})
        if not student:
            raise NotFoundError(
                f"Student {student_id} not found",
                details={"id": student_id}
            )
        return student

    async def delete_by_id(self, student_id: str) -> StudentDocument:
        """
        Soft delete a student and its user account.
        Returns the updated student document.
        """
        student = await self.students.soft_delete(student_id)
        if not student:
            raise NotFoundError(
                f"Student {student_id} not found",
                details={"id": student_id}
            )
        await self.users.soft_delete(student.user)
        audit_log.log_student_deleted(student.id)
        return student
