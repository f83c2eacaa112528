"""
Repositories for the students and users collections.

Student reads exclude soft-deleted documents unless the caller passes
include_deleted=True. User writes hash the password before insert and hand
back a copy with the password blanked.
"""
from typing import Any, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from student_registry.core.security import hash_password
from student_registry.models.mongo_models import StudentDocument, UserDocument, utc_now


NOT_DELETED = {"isDeleted": {"$ne": True}}


def scope_not_deleted(query: Optional[dict], include_deleted: bool = False) -> dict:
    """Add the soft-delete predicate to a query."""
    query = dict(query or {})
    if include_deleted:
        return query
    if not query:
        return dict(NOT_DELETED)
    return {"$and": [query, NOT_DELETED]}


class StudentRepository:
    """Data access for student documents."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.students

    async def find(
        self,
        query: Optional[dict] = None,
        include_deleted: bool = False
    ) -> list[StudentDocument]:
        cursor = self.collection.find(scope_not_deleted(query, include_deleted))
        docs = await cursor.to_list(length=None)
        return [StudentDocument.from_mongo(doc) for doc in docs]

    async def find_one(
        self,
        query: dict,
        include_deleted: bool = False
    ) -> Optional[StudentDocument]:
        doc = await self.collection.find_one(scope_not_deleted(query, include_deleted))
        return StudentDocument.from_mongo(doc)

    async def aggregate(
        self,
        pipeline: list[dict[str, Any]],
        include_deleted: bool = False
    ) -> list[dict]:
        """Run an aggregation whose first stage drops soft-deleted students."""
        stages = list(pipeline)
        if not include_deleted:
            stages.insert(0, {"$match": dict(NOT_DELETED)})
        cursor = self.collection.aggregate(stages)
        return await cursor.to_list(length=None)

    async def exists(self, student_id: str) -> bool:
        """Whether any student, deleted or not, already uses this id."""
        doc = await self.collection.find_one({"id": student_id}, {"_id": 1})
        return doc is not None

    async def email_taken(self, email: str) -> bool:
        doc = await self.collection.find_one({"email": email}, {"_id": 1})
        return doc is not None

    async def insert(self, student: StudentDocument) -> StudentDocument:
        """Insert a new student and return it with its storage id."""
        now = utc_now()
        stored = student.model_copy(update={"created_at": now, "updated_at": now})
        result = await self.collection.insert_one(stored.to_mongo())
        return stored.model_copy(update={"mongo_id": str(result.inserted_id)})

    async def soft_delete(self, student_id: str) -> Optional[StudentDocument]:
        """Flag a live student as deleted; returns None if there is none."""
        doc = await self.collection.find_one_and_update(
            scope_not_deleted({"id": student_id}),
            {"$set": {"isDeleted": True, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        return StudentDocument.from_mongo(doc)


class UserRepository:
    """Data access for user documents."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.users

    async def exists(self, user_id: str) -> bool:
        doc = await self.collection.find_one({"id": user_id}, {"_id": 1})
        return doc is not None

    async def get_by_id(self, user_id: str) -> Optional[UserDocument]:
        """Stored user, password hash included. Not for API responses."""
        doc = await self.collection.find_one({"id": user_id})
        return UserDocument.from_mongo(doc)

    async def save(self, user: UserDocument) -> UserDocument:
        """
        Persist a new user.
        The plaintext password is replaced by its bcrypt hash before the
        insert; the returned copy carries an empty password.
        """
        now = utc_now()
        stored = user.model_copy(update={
            "password": hash_password(user.password),
            "created_at": now,
            "updated_at": now,
        })
        result = await self.collection.insert_one(stored.to_mongo())
        return stored.model_copy(update={
            "mongo_id": str(result.inserted_id),
            "password": "",
        })

    async def delete(self, mongo_id: str) -> None:
        """Hard delete; only used to undo a half-finished creation."""
        await self.collection.delete_one({"_id": ObjectId(mongo_id)})

    async def soft_delete(self, mongo_id: str) -> None:
        await self.collection.update_one(
            {"_id": ObjectId(mongo_id)},
            {"$set": {"isDeleted": True, "updatedAt": utc_now()}},
        )
