"""MDA and Department models - organisational units that own files and users."""
import uuid
from sqlalchemy import String, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from efiling.models.base import Base, TimestampMixin


class Mda(Base, TimestampMixin):
    __tablename__ = "mdas"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    short_name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    departments: Mapped[list["Department"]] = relationship(
        back_populates="mda", cascade="all, delete-orphan", order_by="Department.name"
    )


class Department(Base, TimestampMixin):
    __tablename__ = "departments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    short_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mda_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("mdas.id", ondelete="CASCADE"), nullable=True, index=True
    )

    mda: Mapped["Mda | None"] = relationship(back_populates="departments")
