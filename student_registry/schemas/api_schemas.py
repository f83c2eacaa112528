"""
Pydantic schemas for API request/response validation.
"""
from pydantic import Field
from typing import Any, Optional, List

from student_registry.models.mongo_models import CamelModel, StudentBase, StudentDocument


# ============ Student Schemas ============

class StudentCreate(StudentBase):
    """Student payload accepted on creation."""


class CreateStudentRequest(CamelModel):
    """Body of POST /students/create-student."""
    student: StudentCreate


class CreateUserStudentRequest(CamelModel):
    """Body of POST /users/create-student. Omitted password falls back to the default."""
    password: Optional[str] = Field(default=None, min_length=1)
    student: StudentCreate


# ============ Envelopes ============

class ApiResponse(CamelModel):
    """Uniform success envelope."""
    success: bool = True
    message: str
    data: Any = None


class StudentResponse(ApiResponse):
    data: Optional[StudentDocument] = None


class StudentListResponse(ApiResponse):
    data: List[StudentDocument] = Field(default_factory=list)


# ============ Common Schemas ============

class ErrorResponse(CamelModel):
    """Standard error envelope."""
    success: bool = False
    message: str
    error: Any = None
