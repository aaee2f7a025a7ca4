"""File movement engine - requests, charges and returns of registry files.

A file is either 'available' (in the registry) or 'checked_out' to one user.
The holder is recorded twice: files.current_holder_id and a row in
user_held_files. This module is the only writer of either, and every
operation keeps them in step inside one transaction:

    request   available   -> checked_out   holder := requester
    charge    checked_out -> checked_out   holder := destination
    return    checked_out -> available     holder := none

The state test and the state change are a single conditional UPDATE, so two
concurrent requests for the same file cannot both succeed. Each transition
also appends to the file's request/charge/return log.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from efiling.models.mail import Mail, MailChargeComment, DIRECTIONS
from efiling.models.movement import FileRequest, FileCharge, FileReturn
from efiling.models.registry_file import RegistryFile, LOCATION_AVAILABLE, LOCATION_CHECKED_OUT
from efiling.models.user import User, UserHeldFile
from efiling.services.access_policy import AccessPolicy, Actor
from efiling.services.mail_linkage import MailLinkage
from efiling.services.record_store import RecordStore
from efiling.services.results import (
    ConflictError,
    NotFoundError,
    OperationResult,
    ValidationFailed,
    run_guarded,
)

logger = logging.getLogger(__name__)

MOVEMENT_LOGS = {
    "requests": FileRequest,
    "charges": FileCharge,
    "returns": FileReturn,
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _state(file: RegistryFile) -> dict:
    return {
        "file_id": str(file.id),
        "location": file.location,
        "current_holder_id": str(file.current_holder_id) if file.current_holder_id else None,
    }


class MovementEngine:
    """Movement operations for one unit of work (one store/session)."""

    def __init__(self, store: RecordStore, policy: AccessPolicy):
        self.store = store
        self.policy = policy
        self.linkage = MailLinkage(store, policy)

    async def _guarded(self, name, body) -> OperationResult:
        return await run_guarded(name, body, self.store.commit, self.store.rollback)

    async def _load_file(self, file_id: uuid.UUID, active: bool = True) -> RegistryFile:
        """Load a file. Trashed files count as missing unless active is False."""
        file = await self.store.find_by_id(RegistryFile, file_id)
        if not file or (active and file.soft_deleted):
            raise NotFoundError("File not found")
        return file

    async def _load_user(
        self, user_id: uuid.UUID, message: str = "User does not exist", active: bool = True
    ) -> User:
        """Load a user. Deactivated users count as missing unless active is False."""
        user = await self.store.find_by_id(User, user_id)
        if not user or (active and user.soft_deleted):
            raise NotFoundError(message)
        return user

    async def _in_use_message(self, file_id: uuid.UUID) -> str:
        """Name the current holder from the last request entry, if there is one."""
        last = await self.store.find(
            FileRequest,
            FileRequest.file_id == file_id,
            order_by=[FileRequest.id.desc()],
            limit=1,
        )
        if not last:
            return "File already in use"
        holder = await self.store.find_by_id(User, last[0].user_id)
        if not holder:
            return "File already in use"
        return f"File already in use by {holder.display_name}"

    # ── Transitions ──────────────────────────────────────────────

    async def request_file(self, actor: Actor, file_id: uuid.UUID, user_id: uuid.UUID) -> OperationResult:
        """Check a file out of the registry to user_id."""

        async def body():
            self.policy.require_movement(actor)
            await self._load_file(file_id)
            user = await self._load_user(user_id)

            updated = await self.store.conditional_update(
                RegistryFile,
                file_id,
                [RegistryFile.location == LOCATION_AVAILABLE, RegistryFile.soft_deleted.is_(False)],
                {"location": LOCATION_CHECKED_OUT, "current_holder_id": user_id},
            )
            if updated is None:
                raise ConflictError(await self._in_use_message(file_id))

            await self.store.append(FileRequest, file_id=file_id, user_id=user_id, at=_now())
            await self.store.append(UserHeldFile, user_id=user_id, file_id=file_id)
            logger.info(f"File {file_id} requested by {user.display_name}")
            return OperationResult.success("File Request Granted", **_state(updated))

        return await self._guarded("request_file", body)

    async def charge_file(
        self,
        actor: Actor,
        file_id: uuid.UUID,
        from_user_id: uuid.UUID,
        to_user_id: uuid.UUID,
        remark: Optional[str] = None,
        page_index: Optional[int] = None,
        document_id: Optional[uuid.UUID] = None,
        document_type: Optional[str] = None,
    ) -> OperationResult:
        """Transfer a checked-out file from its holder to another user.

        Charging to a user who already holds the file changes nothing and
        reports ALREADY_SATISFIED. When a document is named, the charge is
        mirrored into that mail's charge comments.
        """

        async def body():
            self.policy.require_movement(actor)
            # Trashed files and deactivated holders can still be charged on
            file = await self._load_file(file_id, active=False)
            if file.location != LOCATION_CHECKED_OUT:
                raise ConflictError("File is in the registry; request it before charging")
            user_to = await self._load_user(to_user_id, "User to charge file to does not exist")
            user_from = await self._load_user(from_user_id, "Charging user does not exist", active=False)

            already = await self.store.find_one(
                UserHeldFile,
                UserHeldFile.user_id == to_user_id,
                UserHeldFile.file_id == file_id,
            )
            if already:
                return OperationResult.already_satisfied("File already charged to user", **_state(file))

            if file.current_holder_id != from_user_id:
                raise ConflictError(f"File is not held by {user_from.display_name}")

            mail = None
            if document_id is not None:
                if document_type not in DIRECTIONS:
                    raise ValidationFailed("documentType must be 'incoming' or 'outgoing'")
                mail = await self.store.find_by_id(Mail, document_id)
                if not mail or mail.soft_deleted:
                    raise NotFoundError("Document not found")
                if mail.direction != document_type:
                    raise ValidationFailed(f"Document is {mail.direction}, not {document_type}")

            updated = await self.store.conditional_update(
                RegistryFile,
                file_id,
                [
                    RegistryFile.location == LOCATION_CHECKED_OUT,
                    RegistryFile.current_holder_id == from_user_id,
                ],
                {"current_holder_id": to_user_id},
            )
            if updated is None:
                raise ConflictError("File was moved by another request; reload and try again")

            at = _now()
            await self.store.append(
                FileCharge,
                file_id=file_id,
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                from_label=user_from.charge_label,
                to_label=user_to.charge_label,
                remark=remark,
                page_index=page_index,
                document_id=document_id,
                document_type=document_type if mail else None,
                at=at,
            )
            if mail is not None:
                await self.store.append(
                    MailChargeComment,
                    mail_id=mail.id,
                    from_label=user_from.charge_label,
                    to_label=user_to.charge_label,
                    comment=remark,
                    at=at,
                )

            await self.store.remove_where(
                UserHeldFile,
                UserHeldFile.user_id == from_user_id,
                UserHeldFile.file_id == file_id,
            )
            await self.store.append(UserHeldFile, user_id=to_user_id, file_id=file_id)
            logger.info(f"File {file_id} charged from {user_from.display_name} to {user_to.display_name}")
            return OperationResult.success("File charging successful", **_state(updated))

        return await self._guarded("charge_file", body)

    async def return_file(self, actor: Actor, file_id: uuid.UUID, user_id: uuid.UUID) -> OperationResult:
        """Send a checked-out file back to the registry. Only its holder may return it.

        The file may be trashed and the holder deactivated; neither blocks the
        return.
        """

        async def body():
            self.policy.require_movement(actor)
            file = await self._load_file(file_id, active=False)
            user = await self._load_user(user_id, active=False)
            if file.location != LOCATION_CHECKED_OUT:
                raise ConflictError("File is already in the registry")
            if file.current_holder_id != user_id:
                raise ConflictError(f"File is not held by {user.display_name}")

            updated = await self.store.conditional_update(
                RegistryFile,
                file_id,
                [
                    RegistryFile.location == LOCATION_CHECKED_OUT,
                    RegistryFile.current_holder_id == user_id,
                ],
                {"location": LOCATION_AVAILABLE, "current_holder_id": None},
            )
            if updated is None:
                raise ConflictError("File was moved by another request; reload and try again")

            await self.store.append(FileReturn, file_id=file_id, user_id=user_id, at=_now())
            await self.store.remove_where(
                UserHeldFile,
                UserHeldFile.user_id == user_id,
                UserHeldFile.file_id == file_id,
            )
            logger.info(f"File {file_id} returned by {user.display_name}")
            return OperationResult.success("File returned successfully", **_state(updated))

        return await self._guarded("return_file", body)

    async def clear_log(self, actor: Actor, file_id: uuid.UUID, log_name: str) -> OperationResult:
        """Empty one movement log. Location and holder are left alone."""

        async def body():
            self.policy.require_admin(actor)
            model = MOVEMENT_LOGS.get(log_name)
            if model is None:
                raise ValidationFailed(
                    f"Unknown log '{log_name}'; expected one of {', '.join(MOVEMENT_LOGS)}"
                )
            file = await self.store.find_by_id(RegistryFile, file_id)
            if not file:
                raise NotFoundError("File not found")
            removed = await self.store.remove_where(model, model.file_id == file_id)
            logger.info(f"Cleared {removed} {log_name} entries on file {file_id}")
            return OperationResult.success(
                f"{log_name.capitalize()} log cleared", file_id=str(file_id), removed=removed
            )

        return await self._guarded("clear_log", body)

    # ── Mail linkage ─────────────────────────────────────────────

    async def attach_mail(self, actor: Actor, file_id: uuid.UUID, mail_id: uuid.UUID, direction: str) -> OperationResult:
        return await self.linkage.attach_mail(actor, file_id, mail_id, direction)

    async def detach_mail(self, actor: Actor, file_id: uuid.UUID, mail_id: uuid.UUID) -> OperationResult:
        return await self.linkage.detach_mail(actor, file_id, mail_id)

    # ── Reads and maintenance ────────────────────────────────────

    async def history(self, file_id: uuid.UUID) -> OperationResult:
        """The three movement logs of a file, oldest entry first."""

        async def body():
            file = await self.store.find_by_id(RegistryFile, file_id)
            if not file:
                raise NotFoundError("File not found")
            logs = {}
            for name, model in MOVEMENT_LOGS.items():
                logs[name] = await self.store.find(
                    model, model.file_id == file_id, order_by=[model.id]
                )
            return OperationResult.success("ok", file=file, **logs)

        return await self._guarded("history", body)

    async def reconcile(self) -> OperationResult:
        """Rebuild user_held_files from files.current_holder_id.

        The file row is authoritative. Checked-out files whose holder no
        longer exists go back to the registry; held rows that disagree with
        their file are dropped; missing held rows are added.
        """

        async def body():
            repairs = 0

            stray = await self.store.find(
                RegistryFile,
                RegistryFile.location == LOCATION_AVAILABLE,
                RegistryFile.current_holder_id.is_not(None),
            )
            for file in stray:
                await self.store.conditional_update(
                    RegistryFile, file.id, [RegistryFile.location == LOCATION_AVAILABLE],
                    {"current_holder_id": None},
                )
                logger.warning(f"Reconcile: cleared holder on available file {file.id}")
                repairs += 1

            checked_out = await self.store.find(RegistryFile, RegistryFile.location == LOCATION_CHECKED_OUT)
            for file in checked_out:
                holder = None
                if file.current_holder_id is not None:
                    holder = await self.store.find_by_id(User, file.current_holder_id)
                if holder is None:
                    await self.store.conditional_update(
                        RegistryFile, file.id, [RegistryFile.location == LOCATION_CHECKED_OUT],
                        {"location": LOCATION_AVAILABLE, "current_holder_id": None},
                    )
                    logger.warning(f"Reconcile: file {file.id} had no valid holder, returned to registry")
                    repairs += 1

            links = [(l.user_id, l.file_id) for l in await self.store.find(UserHeldFile)]
            for user_id, file_id in links:
                file = await self.store.find_by_id(RegistryFile, file_id)
                if (
                    file is None
                    or file.location != LOCATION_CHECKED_OUT
                    or file.current_holder_id != user_id
                ):
                    await self.store.remove_where(
                        UserHeldFile,
                        UserHeldFile.user_id == user_id,
                        UserHeldFile.file_id == file_id,
                    )
                    logger.warning(f"Reconcile: dropped held link user={user_id} file={file_id}")
                    repairs += 1

            checked_out = await self.store.find(RegistryFile, RegistryFile.location == LOCATION_CHECKED_OUT)
            for file in checked_out:
                link = await self.store.find_one(UserHeldFile, UserHeldFile.file_id == file.id)
                if link is None:
                    await self.store.append(UserHeldFile, user_id=file.current_holder_id, file_id=file.id)
                    logger.warning(f"Reconcile: restored held link user={file.current_holder_id} file={file.id}")
                    repairs += 1

            if repairs:
                logger.info(f"Reconcile repaired {repairs} inconsistency(ies)")
            return OperationResult.success(f"Reconciled {repairs} inconsistency(ies)", repairs=repairs)

        return await self._guarded("reconcile", body)
