"""MDA and department request/response schemas."""
import uuid
from typing import Optional
from pydantic import Field
from efiling.schemas.base import CamelModel, RecordResponse


class DepartmentCreate(CamelModel):
    name: str = Field(min_length=1)
    short_name: Optional[str] = None
    mda_id: Optional[uuid.UUID] = None


class DepartmentUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    short_name: Optional[str] = None


class DepartmentResponse(RecordResponse):
    name: str
    short_name: Optional[str] = None
    mda_id: Optional[uuid.UUID] = None


class MdaCreate(CamelModel):
    name: str = Field(min_length=1)
    short_name: str = Field(min_length=1)


class MdaUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    short_name: Optional[str] = Field(default=None, min_length=1)


class MdaResponse(RecordResponse):
    name: str
    short_name: str
    departments: list[DepartmentResponse] = []
