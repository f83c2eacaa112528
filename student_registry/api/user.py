"""
User API endpoints.
"""
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from student_registry.db.mongodb import get_mongodb
from student_registry.services.user_service import UserService
from student_registry.schemas.api_schemas import (
    CreateUserStudentRequest, StudentResponse, ErrorResponse
)


router = APIRouter(prefix="/users", tags=["User"])


@router.post(
    "/create-student",
    response_model=StudentResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}
)
async def create_student(
    request: CreateUserStudentRequest,
    db: AsyncIOMotorDatabase = Depends(get_mongodb)
):
    """
    Create a user account and the student record it owns.
    The password is stored hashed and never echoed back.
    """
    result = await UserService(db).create_student(request.password, request.student)
    return StudentResponse(message="Student is created successfully", data=result)
