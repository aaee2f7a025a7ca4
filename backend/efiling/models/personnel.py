"""Personnel model - staff records kept in personal files."""
import uuid
from sqlalchemy import String, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from efiling.models.base import Base, TimestampMixin, SoftDeleteMixin

# Sub-record lists that can be appended to one entry at a time
PERSONNEL_SECTIONS = ("qualifications", "leaves", "promotions", "queries")


class Personnel(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "personnels"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    emp_no: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    surname: Mapped[str] = mapped_column(String(100), default="")
    firstname: Mapped[str] = mapped_column(String(100), default="")
    # {dob, phone_no, address, email}
    personal_info: Mapped[dict] = mapped_column(JSON, default=dict)
    # {name, phone_no, address, email}
    nok_info: Mapped[dict] = mapped_column(JSON, default=dict)
    # {date_of_first_appointment, current_post, current_grade_level, parent_mda, present_mda, department, ...}
    emp_info: Mapped[dict] = mapped_column(JSON, default=dict)
    qualifications: Mapped[list] = mapped_column(JSON, default=list)
    leaves: Mapped[list] = mapped_column(JSON, default=list)
    promotions: Mapped[list] = mapped_column(JSON, default=list)
    queries: Mapped[list] = mapped_column(JSON, default=list)

    file_links = relationship("FilePersonnel", cascade="all, delete-orphan")
