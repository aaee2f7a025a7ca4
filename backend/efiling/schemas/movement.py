"""File movement request/response schemas."""
import uuid
from typing import Optional, Any
from datetime import datetime
from efiling.schemas.base import CamelModel, CamelORMModel


class ChargeRequest(CamelModel):
    user_to_id: uuid.UUID
    remark: Optional[str] = None
    page_index: Optional[int] = None
    document_id: Optional[uuid.UUID] = None
    document_type: Optional[str] = None


class MovementResponse(CamelModel):
    status: str
    message: str
    already_satisfied: bool = False
    data: Optional[dict[str, Any]] = None


class RequestEntry(CamelORMModel):
    user_id: uuid.UUID
    at: datetime


class ReturnEntry(CamelORMModel):
    user_id: uuid.UUID
    at: datetime


class ChargeEntry(CamelORMModel):
    from_user_id: uuid.UUID
    to_user_id: uuid.UUID
    from_label: str
    to_label: str
    remark: Optional[str] = None
    page_index: Optional[int] = None
    document_id: Optional[uuid.UUID] = None
    document_type: Optional[str] = None
    at: datetime


class MovementHistoryResponse(CamelModel):
    file_id: uuid.UUID
    location: str
    current_holder_id: Optional[uuid.UUID] = None
    requests: list[RequestEntry] = []
    charges: list[ChargeEntry] = []
    returns: list[ReturnEntry] = []
