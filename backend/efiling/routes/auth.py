"""Auth API routes - register, login, token refresh, logout."""
import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from efiling.database import get_db
from efiling.dependencies import current_actor
from efiling.models.user import User, Role
from efiling.routes.users import create_account, get_user_or_404, user_to_response
from efiling.schemas.auth import LoginRequest, LoginResponse, RefreshRequest, TokenPair
from efiling.schemas.common import MessageResponse
from efiling.schemas.user import UserCreate, UserResponse
from efiling.services.access_policy import Actor
from efiling.services.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(body: UserCreate, db: AsyncSession = Depends(get_db)):
    """Self-registration. New accounts always start with the User role."""
    body = body.model_copy(update={"role": Role.USER})
    user = await create_account(db, body)
    return user_to_response(await get_user_or_404(db, user.id))


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == body.email.strip().lower()))
    user = result.scalar_one_or_none()
    if not user or user.soft_deleted or not verify_password(body.password, user.password_hash):
        logger.info(f"Failed login for {body.email}")
        raise HTTPException(status_code=401, detail="Username or Password Incorrect")

    access_token = create_access_token(user.id)
    refresh_token = create_refresh_token(user.id)
    user.refresh_token = refresh_token
    await db.commit()
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "user": user_to_response(await get_user_or_404(db, user.id)),
    }


@router.post("/refresh-token", response_model=TokenPair)
async def refresh_token(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Swap a valid refresh token for a new token pair. The old refresh token stops working."""
    payload = decode_refresh_token(body.token)
    if not payload:
        raise HTTPException(status_code=403, detail="Token expired or invalid")
    try:
        user_id = uuid.UUID(payload.get("sub", ""))
    except ValueError:
        raise HTTPException(status_code=403, detail="Token expired or invalid")
    user = await db.get(User, user_id)
    if not user or user.soft_deleted or user.refresh_token != body.token:
        raise HTTPException(status_code=403, detail="Invalid token")

    access_token = create_access_token(user.id)
    new_refresh = create_refresh_token(user.id)
    user.refresh_token = new_refresh
    await db.commit()
    return {"access_token": access_token, "refresh_token": new_refresh}


@router.post("/logout", response_model=MessageResponse)
async def logout(
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    user = await db.get(User, actor.id)
    if user:
        user.refresh_token = None
        await db.commit()
    return {"message": "Logged out successfully"}
