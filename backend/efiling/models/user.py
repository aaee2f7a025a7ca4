"""User model - registry staff accounts and the files they currently hold."""
import enum
import uuid
from sqlalchemy import String, Text, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from efiling.models.base import Base, TimestampMixin, SoftDeleteMixin


class Role(str, enum.Enum):
    SUPER_ADMIN = "Super Admin"
    ADMIN = "Admin"
    PERMANENT_SECRETARY = "Permanent Secretary"
    REGISTRY_OFFICER = "Registry Officer"
    USER = "User"


class User(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    surname: Mapped[str] = mapped_column(String(100), nullable=False)
    firstname: Mapped[str] = mapped_column(String(100), nullable=False)
    post: Mapped[str | None] = mapped_column(String(200), nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    role: Mapped[str] = mapped_column(String(50), default=Role.USER.value)
    mda: Mapped[str | None] = mapped_column(String(50), nullable=True)
    department: Mapped[str | None] = mapped_column(String(200), nullable=True)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    held_files: Mapped[list["UserHeldFile"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def display_name(self) -> str:
        return f"{self.surname} {self.firstname}"

    @property
    def charge_label(self) -> str:
        """How the registry writes a user on the file jacket: 'surname - post, department'."""
        return f"{self.surname} - {self.post or ''}, {self.department or ''}"


class UserHeldFile(Base):
    """One row per file currently checked out to a user.

    file_id is unique, so a file sits in at most one user's held set.
    Written only by the movement engine.
    """
    __tablename__ = "user_held_files"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    file_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("files.id", ondelete="CASCADE"), primary_key=True, unique=True
    )

    user: Mapped["User"] = relationship(back_populates="held_files")
