"""Import all models so SQLAlchemy metadata knows about them."""
from efiling.models.base import Base
from efiling.models.user import Role, User, UserHeldFile
from efiling.models.registry_file import RegistryFile, FileDocument, FilePersonnel
from efiling.models.movement import FileRequest, FileCharge, FileReturn
from efiling.models.mail import Mail, MailChargeComment
from efiling.models.personnel import Personnel
from efiling.models.mda import Mda, Department

__all__ = [
    "Base",
    "Role", "User", "UserHeldFile",
    "RegistryFile", "FileDocument", "FilePersonnel",
    "FileRequest", "FileCharge", "FileReturn",
    "Mail", "MailChargeComment", "Personnel", "Mda", "Department",
]
