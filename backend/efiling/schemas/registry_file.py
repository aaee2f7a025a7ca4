"""Registry file request/response schemas.

Location and holder are read-only here: only the movement engine changes them.
"""
import uuid
from typing import Optional, Literal
from pydantic import Field
from efiling.schemas.base import CamelModel, CamelORMModel, TrashableResponse


FileType = Literal["general", "personal"]


class RegistryFileCreate(CamelModel):
    file_type: FileType = "general"
    title: str = Field(min_length=1)
    file_number: Optional[str] = None
    paper_file_number: Optional[str] = None
    owning_unit_code: Optional[str] = None


class RegistryFileUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    file_number: Optional[str] = None
    paper_file_number: Optional[str] = None
    owning_unit_code: Optional[str] = None


class LinkedDocument(CamelORMModel):
    mail_id: uuid.UUID
    direction: str
    position: int


class RegistryFileResponse(TrashableResponse):
    file_type: str
    title: str
    file_number: Optional[str] = None
    paper_file_number: Optional[str] = None
    owning_unit_code: Optional[str] = None
    location: str
    current_holder_id: Optional[uuid.UUID] = None
    linked_documents: list[LinkedDocument] = []
    personnel_ids: list[uuid.UUID] = []
