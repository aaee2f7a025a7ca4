"""MDA API routes - ministries, departments and agencies, and their departments."""
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from efiling.database import get_db
from efiling.dependencies import current_actor, require_admin_actor
from efiling.models.mda import Mda, Department
from efiling.schemas.common import CountResponse, DeleteResponse
from efiling.schemas.mda import (
    DepartmentCreate,
    DepartmentResponse,
    MdaCreate,
    MdaUpdate,
    MdaResponse,
)
from efiling.services.access_policy import Actor

router = APIRouter(prefix="/api/mdas", tags=["mdas"])


@router.get("", response_model=list[MdaResponse])
async def list_mdas(
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Mda).options(selectinload(Mda.departments)).order_by(Mda.name)
    )
    return result.scalars().all()


@router.get("/report/counts", response_model=CountResponse)
async def count_mdas(
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(func.count()).select_from(Mda))
    return {"total": result.scalar_one()}


@router.get("/{mda_id}", response_model=MdaResponse)
async def get_mda(
    mda_id: UUID,
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await _get_or_404(db, mda_id)


@router.post("", response_model=MdaResponse, status_code=201)
async def create_mda(
    body: MdaCreate,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    mda = Mda(**body.model_dump())
    db.add(mda)
    await _commit_unique(db)
    return await _get_or_404(db, mda.id)


@router.put("/{mda_id}", response_model=MdaResponse)
async def update_mda(
    mda_id: UUID,
    body: MdaUpdate,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    mda = await _get_or_404(db, mda_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        setattr(mda, key, value)
    await _commit_unique(db)
    return await _get_or_404(db, mda_id)


@router.delete("/{mda_id}", response_model=DeleteResponse)
async def delete_mda(
    mda_id: UUID,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    """Delete an MDA and all of its departments."""
    mda = await _get_or_404(db, mda_id)
    await db.delete(mda)
    await db.commit()
    return {"deleted": True, "id": str(mda_id)}


@router.get("/{mda_id}/departments", response_model=list[DepartmentResponse])
async def list_mda_departments(
    mda_id: UUID,
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    mda = await _get_or_404(db, mda_id)
    return mda.departments


@router.post("/{mda_id}/departments", response_model=DepartmentResponse, status_code=201)
async def create_mda_department(
    mda_id: UUID,
    body: DepartmentCreate,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    """Add a department under this MDA. Any mdaId in the body is ignored."""
    await _get_or_404(db, mda_id)
    department = Department(**body.model_dump(exclude={"mda_id"}), mda_id=mda_id)
    db.add(department)
    await db.commit()
    await db.refresh(department)
    return department


async def _commit_unique(db: AsyncSession):
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="MDA short name already exist")


async def _get_or_404(db: AsyncSession, mda_id: UUID) -> Mda:
    result = await db.execute(
        select(Mda)
        .options(selectinload(Mda.departments))
        .where(Mda.id == mda_id)
        .execution_options(populate_existing=True)
    )
    mda = result.scalar_one_or_none()
    if not mda:
        raise HTTPException(status_code=404, detail="MDA not found")
    return mda
