"""FastAPI dependencies that wire a request to its store, policy and actor.

Usage in routes:
    @router.put("/{file_id}")
    async def update_file(
        actor: Actor = Depends(require_movement_actor),
        store: RecordStore = Depends(get_store),
    ): ...
"""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from efiling.database import get_db
from efiling.services.access_policy import AccessPolicy, Actor
from efiling.services.movement_engine import MovementEngine
from efiling.services.record_store import RecordStore
from efiling.services.security import get_bearer_token


def get_policy() -> AccessPolicy:
    return AccessPolicy()


async def get_store(db: AsyncSession = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


async def get_engine(
    store: RecordStore = Depends(get_store),
    policy: AccessPolicy = Depends(get_policy),
) -> MovementEngine:
    return MovementEngine(store, policy)


async def current_actor(
    authorization: Optional[str] = Header(None),
    store: RecordStore = Depends(get_store),
    policy: AccessPolicy = Depends(get_policy),
) -> Actor:
    """Resolve the bearer token. Raises UnauthenticatedError (401)."""
    return await policy.authorize(get_bearer_token(authorization), store)


async def require_movement_actor(
    actor: Actor = Depends(current_actor),
    policy: AccessPolicy = Depends(get_policy),
) -> Actor:
    policy.require_movement(actor)
    return actor


async def require_admin_actor(
    actor: Actor = Depends(current_actor),
    policy: AccessPolicy = Depends(get_policy),
) -> Actor:
    policy.require_admin(actor)
    return actor
