"""
MongoDB document models.
These define the structure of documents in the students and users collections
and re-check every field constraint at the storage boundary.

Field names are snake_case in Python and camelCase in MongoDB and on the wire.
"""
from pydantic import BaseModel, Field, EmailStr, StringConstraints, computed_field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Annotated
from datetime import datetime, timezone
from enum import Enum
import re

from bson import ObjectId


FIRST_NAME_MAX_LENGTH = 20
LAST_NAME_PATTERN = re.compile(r"^[A-Za-z]+$")

# Trimmed string that must not be empty afterwards
RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalStr = Annotated[str, StringConstraints(strip_whitespace=True)]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class BloodGroup(str, Enum):
    A_POSITIVE = "A+"
    A_NEGATIVE = "A-"
    B_POSITIVE = "B+"
    B_NEGATIVE = "B-"
    AB_POSITIVE = "AB+"
    AB_NEGATIVE = "AB-"
    O_POSITIVE = "O+"
    O_NEGATIVE = "O-"


class UserRole(str, Enum):
    """User roles in the system."""
    ADMIN = "admin"
    STUDENT = "student"
    FACULTY = "faculty"


class UserStatus(str, Enum):
    """User account status."""
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True


def is_capitalized(value: str) -> bool:
    """True when only the first character needs upper-casing to equal itself."""
    return value == value[:1].upper() + value[1:]


class UserName(CamelModel):
    """Student name, embedded in the student document."""
    first_name: RequiredStr
    middle_name: Optional[OptionalStr] = None
    last_name: RequiredStr

    @field_validator("first_name")
    @classmethod
    def check_first_name(cls, value: str) -> str:
        if len(value) > FIRST_NAME_MAX_LENGTH:
            raise ValueError(
                f"First Name can not be more than {FIRST_NAME_MAX_LENGTH} characters"
            )
        if not is_capitalized(value):
            raise ValueError(
                f"{value} is not valid. First Name should be in capitalize format."
            )
        return value

    @field_validator("middle_name")
    @classmethod
    def drop_blank_middle_name(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator("last_name")
    @classmethod
    def check_last_name(cls, value: str) -> str:
        if not LAST_NAME_PATTERN.match(value):
            raise ValueError(f"{value} is not valid. Last Name must contain letters only.")
        return value


class Guardian(CamelModel):
    """Parents' details, embedded in the student document."""
    father_name: RequiredStr
    father_occupation: RequiredStr
    father_contact_no: RequiredStr
    mother_name: RequiredStr
    mother_occupation: RequiredStr
    mother_contact_no: RequiredStr


class LocalGuardian(CamelModel):
    """Local guardian details, embedded in the student document."""
    name: RequiredStr
    occupation: RequiredStr
    contact_no: RequiredStr
    address: RequiredStr


class StudentBase(CamelModel):
    """Student fields supplied by callers."""
    id: RequiredStr
    name: UserName
    gender: Gender
    date_of_birth: Optional[str] = None
    email: EmailStr
    contact_no: RequiredStr
    emergency_contact_no: RequiredStr
    blood_group: Optional[BloodGroup] = None
    present_address: RequiredStr
    permanent_address: RequiredStr
    guardian: Guardian
    local_guardian: LocalGuardian
    profile_img: Optional[str] = None
    is_deleted: bool = False

    @computed_field(alias="fullName")
    @property
    def full_name(self) -> str:
        """firstName, middleName and lastName joined by spaces."""
        parts = [self.name.first_name, self.name.middle_name, self.name.last_name]
        return " ".join(part for part in parts if part)


class StudentDocument(StudentBase):
    """
    Complete student document for MongoDB.
    `user` holds the ObjectId of the owning user document as a hex string.
    """
    mongo_id: Optional[str] = Field(default=None, alias="_id")
    user: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("mongo_id", "user", mode="before")
    @classmethod
    def object_id_to_str(cls, value):
        if isinstance(value, ObjectId):
            return str(value)
        return value

    def to_mongo(self) -> dict:
        """Storage representation. fullName is derived and never stored."""
        doc = self.model_dump(by_alias=True, exclude={"mongo_id", "full_name"})
        doc["user"] = ObjectId(self.user)
        return doc

    @classmethod
    def from_mongo(cls, doc: Optional[dict]) -> Optional["StudentDocument"]:
        """Create StudentDocument from MongoDB document."""
        if doc is None:
            return None
        return cls.model_validate(doc)


class UserDocument(CamelModel):
    """
    User account document for MongoDB.
    `password` holds plaintext only until the repository hashes it on save.
    """
    mongo_id: Optional[str] = Field(default=None, alias="_id")
    id: RequiredStr
    password: str
    need_password_change: bool = True
    role: UserRole
    status: UserStatus = UserStatus.IN_PROGRESS
    is_deleted: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("mongo_id", mode="before")
    @classmethod
    def object_id_to_str(cls, value):
        if isinstance(value, ObjectId):
            return str(value)
        return value

    def to_mongo(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"mongo_id"})

    @classmethod
    def from_mongo(cls, doc: Optional[dict]) -> Optional["UserDocument"]:
        """Create UserDocument from MongoDB document."""
        if doc is None:
            return None
        return cls.model_validate(doc)
