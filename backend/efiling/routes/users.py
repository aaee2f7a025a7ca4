"""Users API routes."""
from uuid import UUID
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, desc, extract, or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from efiling.database import get_db
from efiling.dependencies import current_actor, get_policy, require_admin_actor
from efiling.models.user import User
from efiling.schemas.common import CountResponse, DeleteResponse, MessageResponse, MonthlyCount
from efiling.schemas.user import UserCreate, UserUpdate, UserResponse
from efiling.services.access_policy import AccessPolicy, Actor
from efiling.services.security import hash_password

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users(
    active: Optional[bool] = Query(None, description="true: active only, false: deactivated only"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    """List users, newest first."""
    query = (
        select(User)
        .options(selectinload(User.held_files))
        .order_by(desc(User.created_at))
        .limit(limit)
        .offset(offset)
    )
    if active is not None:
        query = query.where(User.soft_deleted.is_(not active))
    result = await db.execute(query)
    return [user_to_response(u) for u in result.scalars().all()]


@router.get("/search", response_model=list[UserResponse])
async def search_users(
    q: str = Query(""),
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Search users by name or email."""
    pattern = f"%{q}%"
    result = await db.execute(
        select(User)
        .options(selectinload(User.held_files))
        .where(or_(User.surname.ilike(pattern), User.firstname.ilike(pattern), User.email.ilike(pattern)))
        .order_by(User.surname)
    )
    return [user_to_response(u) for u in result.scalars().all()]


@router.get("/report/counts", response_model=CountResponse)
async def count_users(
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(func.count()).select_from(User))
    return {"total": result.scalar_one()}


@router.get("/report/stats", response_model=list[MonthlyCount])
async def user_registration_stats(
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Accounts created per calendar month (1-12), across all years."""
    month = extract("month", User.created_at)
    result = await db.execute(
        select(month.label("month"), func.count().label("total"))
        .group_by(month)
        .order_by(month)
    )
    return [{"month": int(row.month), "total": row.total} for row in result]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    return user_to_response(await get_user_or_404(db, user_id))


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    body: UserCreate,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    """Create a staff account."""
    user = await create_account(db, body)
    return user_to_response(await get_user_or_404(db, user.id))


@router.put("/deactivate/{user_id}", response_model=MessageResponse)
async def deactivate_user(
    user_id: UUID,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_or_404(db, user_id)
    user.soft_deleted = True
    user.refresh_token = None
    await db.commit()
    return {"message": "User account deactivated"}


@router.put("/activate/{user_id}", response_model=MessageResponse)
async def activate_user(
    user_id: UUID,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_or_404(db, user_id)
    user.soft_deleted = False
    await db.commit()
    return {"message": "User account reactivated"}


@router.delete("/delete/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: UUID,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    """Delete a user permanently. Refused while the user still holds files."""
    user = await get_user_or_404(db, user_id)
    if user.held_files:
        raise HTTPException(
            status_code=409,
            detail=f"User still holds {len(user.held_files)} file(s); return or charge them first",
        )
    await db.delete(user)
    await db.commit()
    return {"deleted": True, "id": str(user_id)}


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    body: UserUpdate,
    actor: Actor = Depends(current_actor),
    policy: AccessPolicy = Depends(get_policy),
    db: AsyncSession = Depends(get_db),
):
    """Update a profile. Users may edit themselves; admins may edit anyone, and only admins change roles."""
    update_data = body.model_dump(exclude_unset=True)
    if actor.id != user_id or "role" in update_data:
        policy.require_admin(actor)
    user = await get_user_or_404(db, user_id)

    password = update_data.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    if update_data.get("role") is not None:
        update_data["role"] = update_data["role"].value
    for key, value in update_data.items():
        setattr(user, key, value)

    await db.commit()
    return user_to_response(await get_user_or_404(db, user_id))


async def create_account(db: AsyncSession, body: UserCreate) -> User:
    """Insert a new user, or 400 if the email is taken."""
    data = body.model_dump(exclude={"password"})
    data["role"] = body.role.value
    user = User(**data, password_hash=hash_password(body.password))
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Email is already in use")
    return user


async def get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(
        select(User)
        .options(selectinload(User.held_files))
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def user_to_response(user: User) -> dict:
    """Convert SQLAlchemy model to response dict."""
    return {
        "id": user.id,
        "email": user.email,
        "surname": user.surname,
        "firstname": user.firstname,
        "post": user.post,
        "avatar": user.avatar,
        "role": user.role,
        "mda": user.mda,
        "department": user.department,
        "soft_deleted": user.soft_deleted,
        "held_file_ids": [h.file_id for h in user.held_files],
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }
