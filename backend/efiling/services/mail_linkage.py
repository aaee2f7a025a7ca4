"""Mail linkage - filing mails into registry files and taking them out again.

Independent of movement state: a file can be filed into whether it sits in
the registry or on someone's desk. Personal files link personnel records the
same way.
"""
import logging
import uuid

from sqlalchemy import func, select

from efiling.models.mail import Mail, DIRECTIONS
from efiling.models.personnel import Personnel
from efiling.models.registry_file import RegistryFile, FileDocument, FilePersonnel, FILE_TYPE_PERSONAL
from efiling.services.access_policy import AccessPolicy, Actor
from efiling.services.record_store import RecordStore
from efiling.services.results import (
    NotFoundError,
    OperationResult,
    ValidationFailed,
    run_guarded,
)

logger = logging.getLogger(__name__)


class MailLinkage:

    def __init__(self, store: RecordStore, policy: AccessPolicy):
        self.store = store
        self.policy = policy

    async def _guarded(self, name, body) -> OperationResult:
        return await run_guarded(name, body, self.store.commit, self.store.rollback)

    async def _load_file(self, file_id: uuid.UUID) -> RegistryFile:
        file = await self.store.find_by_id(RegistryFile, file_id)
        if not file or file.soft_deleted:
            raise NotFoundError("File not found")
        return file

    async def _next_position(self, model, file_id: uuid.UUID) -> int:
        result = await self.store.session.execute(
            select(func.max(model.position)).where(model.file_id == file_id)
        )
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def attach_mail(self, actor: Actor, file_id: uuid.UUID, mail_id: uuid.UUID, direction: str) -> OperationResult:
        """File a mail at the end of the file's document list. Attaching twice is a no-op."""

        async def body():
            self.policy.require_movement(actor)
            if direction not in DIRECTIONS:
                raise ValidationFailed(f"Unknown mail direction '{direction}'")
            await self._load_file(file_id)
            mail = await self.store.find_by_id(Mail, mail_id)
            if not mail or mail.soft_deleted:
                raise NotFoundError("Mail not found")
            if mail.direction != direction:
                raise ValidationFailed(f"Mail is {mail.direction}, not {direction}")

            existing = await self.store.find_one(
                FileDocument,
                FileDocument.file_id == file_id,
                FileDocument.mail_id == mail_id,
                FileDocument.direction == direction,
            )
            if existing:
                return OperationResult.already_satisfied(
                    "Mail already filed", file_id=str(file_id), mail_id=str(mail_id)
                )

            position = await self._next_position(FileDocument, file_id)
            await self.store.append(
                FileDocument, file_id=file_id, mail_id=mail_id, direction=direction, position=position
            )
            logger.info(f"Mail {mail_id} filed into {file_id} at position {position}")
            return OperationResult.success(
                "Mail filed successfully", file_id=str(file_id), mail_id=str(mail_id), position=position
            )

        return await self._guarded("attach_mail", body)

    async def detach_mail(self, actor: Actor, file_id: uuid.UUID, mail_id: uuid.UUID) -> OperationResult:
        """Remove a mail from the file, from both the incoming and outgoing lists."""

        async def body():
            self.policy.require_movement(actor)
            await self._load_file(file_id)
            removed = await self.store.remove_where(
                FileDocument, FileDocument.file_id == file_id, FileDocument.mail_id == mail_id
            )
            logger.info(f"Mail {mail_id} removed from {file_id} ({removed} link(s))")
            return OperationResult.success(
                "Document removed from file", file_id=str(file_id), mail_id=str(mail_id), removed=removed
            )

        return await self._guarded("detach_mail", body)

    async def attach_personnel(self, actor: Actor, file_id: uuid.UUID, personnel_id: uuid.UUID) -> OperationResult:

        async def body():
            self.policy.require_movement(actor)
            file = await self._load_file(file_id)
            if file.file_type != FILE_TYPE_PERSONAL:
                raise ValidationFailed("Personnel records can only be kept in personal files")
            personnel = await self.store.find_by_id(Personnel, personnel_id)
            if not personnel or personnel.soft_deleted:
                raise NotFoundError("Personnel not found")

            existing = await self.store.find_one(
                FilePersonnel,
                FilePersonnel.file_id == file_id,
                FilePersonnel.personnel_id == personnel_id,
            )
            if existing:
                return OperationResult.already_satisfied(
                    "Personnel already in file", file_id=str(file_id), personnel_id=str(personnel_id)
                )
            position = await self._next_position(FilePersonnel, file_id)
            await self.store.append(
                FilePersonnel, file_id=file_id, personnel_id=personnel_id, position=position
            )
            return OperationResult.success(
                "Personnel added to file", file_id=str(file_id), personnel_id=str(personnel_id)
            )

        return await self._guarded("attach_personnel", body)

    async def detach_personnel(self, actor: Actor, file_id: uuid.UUID, personnel_id: uuid.UUID) -> OperationResult:

        async def body():
            self.policy.require_movement(actor)
            await self._load_file(file_id)
            removed = await self.store.remove_where(
                FilePersonnel,
                FilePersonnel.file_id == file_id,
                FilePersonnel.personnel_id == personnel_id,
            )
            return OperationResult.success(
                "Personnel removed from file", file_id=str(file_id), personnel_id=str(personnel_id), removed=removed
            )

        return await self._guarded("detach_personnel", body)
