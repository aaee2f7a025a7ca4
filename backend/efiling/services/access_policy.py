"""Access policy - who is calling, and may they do this.

authorize() resolves a bearer token to an Actor; require_role() checks the
actor's role against an allowed set. The allowed sets are configuration
(MOVEMENT_ROLES, ADMIN_ROLES), not constants.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, Optional

from efiling.config import settings
from efiling.models.user import User
from efiling.services.record_store import RecordStore
from efiling.services.results import ForbiddenError, UnauthenticatedError
from efiling.services.security import decode_access_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    id: uuid.UUID
    role: str
    display_name: str

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, role=user.role, display_name=user.display_name)


class AccessPolicy:

    def __init__(
        self,
        movement_roles: Optional[Iterable[str]] = None,
        admin_roles: Optional[Iterable[str]] = None,
    ):
        self.movement_roles = frozenset(movement_roles if movement_roles is not None else settings.movement_roles)
        self.admin_roles = frozenset(admin_roles if admin_roles is not None else settings.admin_roles)

    async def authorize(self, token: Optional[str], store: RecordStore) -> Actor:
        """Resolve an access token to an active user, or raise UnauthenticatedError."""
        if not token:
            raise UnauthenticatedError("You are not authorized to view this page")
        payload = decode_access_token(token)
        if not payload:
            raise UnauthenticatedError("You are not authorized to view this page")
        try:
            user_id = uuid.UUID(payload.get("sub", ""))
        except ValueError:
            raise UnauthenticatedError("You are not authorized to view this page")
        user = await store.find_by_id(User, user_id)
        if not user or user.soft_deleted:
            raise UnauthenticatedError("You are not authorized to view this page")
        return Actor.from_user(user)

    def require_role(self, actor: Actor, allowed_roles: Iterable[str]) -> None:
        allowed = set(allowed_roles)
        if actor.role not in allowed:
            logger.warning(f"Denied {actor.display_name} ({actor.role}); needs one of {sorted(allowed)}")
            raise ForbiddenError(f"Access denied. Only for {', '.join(sorted(allowed))}!")

    def require_movement(self, actor: Actor) -> None:
        self.require_role(actor, self.movement_roles)

    def require_admin(self, actor: Actor) -> None:
        self.require_role(actor, self.admin_roles)
