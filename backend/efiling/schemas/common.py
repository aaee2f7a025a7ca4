"""Shared Pydantic schemas."""
from pydantic import BaseModel


class DeleteResponse(BaseModel):
    deleted: bool = True
    id: str = ""


class MessageResponse(BaseModel):
    message: str


class CountResponse(BaseModel):
    total: int


class MonthlyCount(BaseModel):
    month: int
    total: int
