"""User request/response schemas."""
import re
import uuid
from typing import Optional
from pydantic import Field, field_validator
from efiling.models.user import Role
from efiling.schemas.base import CamelModel, TrashableResponse

_EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.\w{2,}$")


class UserCreate(CamelModel):
    email: str
    password: str = Field(min_length=6)
    surname: str = Field(min_length=1)
    firstname: str = Field(min_length=1)
    post: Optional[str] = None
    avatar: Optional[str] = None
    role: Role = Role.USER
    mda: Optional[str] = None
    department: Optional[str] = None

    @field_validator("email")
    @classmethod
    def valid_email(cls, v):
        v = v.strip().lower()
        if not _EMAIL_RE.match(v):
            raise ValueError("Please fill a valid email address")
        return v


class UserUpdate(CamelModel):
    surname: Optional[str] = None
    firstname: Optional[str] = None
    post: Optional[str] = None
    avatar: Optional[str] = None
    role: Optional[Role] = None
    mda: Optional[str] = None
    department: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=6)


class UserResponse(TrashableResponse):
    email: str
    surname: str
    firstname: str
    post: Optional[str] = None
    avatar: Optional[str] = None
    role: str
    mda: Optional[str] = None
    department: Optional[str] = None
    held_file_ids: list[uuid.UUID] = []
