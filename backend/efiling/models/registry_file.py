"""Registry file model - general and personal files tracked by location and holder."""
import uuid
from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from efiling.models.base import Base, TimestampMixin, SoftDeleteMixin

FILE_TYPE_GENERAL = "general"
FILE_TYPE_PERSONAL = "personal"
FILE_TYPES = (FILE_TYPE_GENERAL, FILE_TYPE_PERSONAL)

LOCATION_AVAILABLE = "available"
LOCATION_CHECKED_OUT = "checked_out"


class RegistryFile(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "files"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    file_type: Mapped[str] = mapped_column(String(20), default=FILE_TYPE_GENERAL, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    file_number: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    paper_file_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    owning_unit_code: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Movement state. Only the movement engine writes these two columns.
    location: Mapped[str] = mapped_column(String(20), default=LOCATION_AVAILABLE, index=True)
    current_holder_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True
    )

    documents: Mapped[list["FileDocument"]] = relationship(
        cascade="all, delete-orphan", order_by="FileDocument.position"
    )
    personnel_links: Mapped[list["FilePersonnel"]] = relationship(
        cascade="all, delete-orphan", order_by="FilePersonnel.position"
    )
    requests = relationship(
        "FileRequest", cascade="all, delete-orphan", order_by="FileRequest.id"
    )
    charges = relationship(
        "FileCharge", cascade="all, delete-orphan", order_by="FileCharge.id"
    )
    returns = relationship(
        "FileReturn", cascade="all, delete-orphan", order_by="FileReturn.id"
    )
    holder_link = relationship("UserHeldFile", cascade="all, delete-orphan", uselist=False)

    __table_args__ = (
        UniqueConstraint("owning_unit_code", "title", name="uq_files_unit_title"),
    )


class FileDocument(Base):
    """A mail filed into a registry file. position keeps filing order."""
    __tablename__ = "file_documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    file_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("files.id", ondelete="CASCADE"), nullable=False, index=True
    )
    mail_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("mails.id", ondelete="CASCADE"), nullable=False, index=True
    )
    direction: Mapped[str] = mapped_column(String(20), nullable=False)  # 'incoming' | 'outgoing'
    position: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        UniqueConstraint("file_id", "mail_id", "direction", name="uq_file_documents_mail"),
    )


class FilePersonnel(Base):
    """A personnel record kept in a personal file."""
    __tablename__ = "file_personnels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    file_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("files.id", ondelete="CASCADE"), nullable=False, index=True
    )
    personnel_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("personnels.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        Index("uq_file_personnels_link", "file_id", "personnel_id", unique=True),
    )
