"""Mail model - incoming and outgoing correspondence."""
import uuid
from datetime import datetime
from sqlalchemy import String, Text, JSON, Integer, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from efiling.models.base import Base, TimestampMixin, SoftDeleteMixin

DIRECTION_INCOMING = "incoming"
DIRECTION_OUTGOING = "outgoing"
DIRECTIONS = (DIRECTION_INCOMING, DIRECTION_OUTGOING)

MAIL_TYPES = ("memo", "circular", "letter")


class Mail(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "mails"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    direction: Mapped[str] = mapped_column(String(20), default=DIRECTION_INCOMING, index=True)
    mail_type: Mapped[str] = mapped_column(String(20), default="memo")
    ref_no: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    sender: Mapped[str | None] = mapped_column(String(300), nullable=True)
    sender_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    receiver: Mapped[str | None] = mapped_column(String(300), nullable=True)
    receiver_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    cc: Mapped[list] = mapped_column(JSON, default=list)
    subject: Mapped[str] = mapped_column(String(500), default="")
    body_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    signature_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    upload_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    file_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # [{user_id, name, body_text}]
    reviews: Mapped[list] = mapped_column(JSON, default=list)

    charge_comments: Mapped[list["MailChargeComment"]] = relationship(
        cascade="all, delete-orphan", order_by="MailChargeComment.id"
    )
    file_links = relationship("FileDocument", cascade="all, delete-orphan")


class MailChargeComment(Base):
    """Mirror of a file charge for a mail routed along with the file."""
    __tablename__ = "mail_charge_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mail_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("mails.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_label: Mapped[str] = mapped_column(String(500), default="")
    to_label: Mapped[str] = mapped_column(String(500), default="")
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
