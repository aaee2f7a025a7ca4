"""Mail request/response schemas."""
from typing import Optional, Literal
from datetime import datetime
from efiling.schemas.base import CamelModel, CamelORMModel, TrashableResponse


Direction = Literal["incoming", "outgoing"]
MailType = Literal["memo", "circular", "letter"]


class MailCreate(CamelModel):
    direction: Direction = "incoming"
    mail_type: MailType = "memo"
    ref_no: Optional[str] = None
    sender: Optional[str] = None
    sender_address: Optional[str] = None
    receiver: Optional[str] = None
    receiver_address: Optional[str] = None
    cc: list[str] = []
    subject: str = ""
    body_text: Optional[str] = None
    signature_url: Optional[str] = None
    upload_url: Optional[str] = None
    file_number: Optional[str] = None


class MailUpdate(CamelModel):
    mail_type: Optional[MailType] = None
    ref_no: Optional[str] = None
    sender: Optional[str] = None
    sender_address: Optional[str] = None
    receiver: Optional[str] = None
    receiver_address: Optional[str] = None
    cc: Optional[list[str]] = None
    subject: Optional[str] = None
    body_text: Optional[str] = None
    signature_url: Optional[str] = None
    upload_url: Optional[str] = None
    file_number: Optional[str] = None


class MailReviewCreate(CamelModel):
    body_text: str


class ChargeCommentResponse(CamelORMModel):
    from_label: str
    to_label: str
    comment: Optional[str] = None
    at: datetime


class MailResponse(TrashableResponse):
    direction: str
    mail_type: str
    ref_no: Optional[str] = None
    sender: Optional[str] = None
    sender_address: Optional[str] = None
    receiver: Optional[str] = None
    receiver_address: Optional[str] = None
    cc: list[str] = []
    subject: str = ""
    body_text: Optional[str] = None
    signature_url: Optional[str] = None
    upload_url: Optional[str] = None
    file_number: Optional[str] = None
    reviews: list[dict] = []
    charge_comments: list[ChargeCommentResponse] = []
