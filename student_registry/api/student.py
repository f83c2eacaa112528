"""
Student API endpoints.
"""
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from student_registry.db.mongodb import get_mongodb
from student_registry.services.student_service import StudentService
from student_registry.schemas.api_schemas import (
    CreateStudentRequest, StudentResponse, StudentListResponse, ErrorResponse
)


router = APIRouter(prefix="/students", tags=["Student"])


@router.get("", response_model=StudentListResponse)
async def get_all_students(db: AsyncIOMotorDatabase = Depends(get_mongodb)):
    """
    List every student that has not been deleted.
    """
    result = await StudentService(db).list_all()
    return StudentListResponse(
        message="Students are retrieved successfully",
        data=result
    )


@router.post(
    "/create-student",
    response_model=StudentResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}
)
async def create_student(
    request: CreateStudentRequest,
    db: AsyncIOMotorDatabase = Depends(get_mongodb)
):
    """
    Create a student. Its user account gets the default password.
    """
    result = await StudentService(db).create(request.student)
    return StudentResponse(message="Student is created successfully", data=result)


@router.get(
    "/{studentId}",
    response_model=StudentResponse,
    responses={404: {"model": ErrorResponse}}
)
async def get_single_student(
    studentId: str,
    db: AsyncIOMotorDatabase = Depends(get_mongodb)
):
    """
    Get one student by its external id.
    """
    result = await StudentService(db).get_by_id(studentId)
    return StudentResponse(message="Student is retrieved successfully", data=result)


@router.delete(
    "/{studentId}",
    response_model=StudentResponse,
    responses={404: {"model": ErrorResponse}}
)
async def delete_student(
    studentId: str,
    db: AsyncIOMotorDatabase = Depends(get_mongodb)
):
    """
    Soft delete a student. The record stays in storage flagged isDeleted.
    """
    result = await StudentService(db).delete_by_id(studentId)
    return StudentResponse(message="Student is deleted successfully", data=result)
