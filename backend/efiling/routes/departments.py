"""Department API routes."""
from uuid import UUID
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from efiling.database import get_db
from efiling.dependencies import current_actor, require_admin_actor
from efiling.models.mda import Mda, Department
from efiling.schemas.common import DeleteResponse
from efiling.schemas.mda import DepartmentCreate, DepartmentUpdate, DepartmentResponse
from efiling.services.access_policy import Actor

router = APIRouter(prefix="/api/departments", tags=["departments"])


@router.get("", response_model=list[DepartmentResponse])
async def list_departments(
    mda_id: Optional[UUID] = Query(None, alias="mdaId"),
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    query = select(Department).order_by(Department.name)
    if mda_id:
        query = query.where(Department.mda_id == mda_id)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{department_id}", response_model=DepartmentResponse)
async def get_department(
    department_id: UUID,
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await _get_or_404(db, department_id)


@router.post("", response_model=DepartmentResponse, status_code=201)
async def create_department(
    body: DepartmentCreate,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    if body.mda_id is not None and not await db.get(Mda, body.mda_id):
        raise HTTPException(status_code=404, detail="MDA not found")
    department = Department(**body.model_dump())
    db.add(department)
    await db.commit()
    await db.refresh(department)
    return department


@router.put("/{department_id}", response_model=DepartmentResponse)
async def update_department(
    department_id: UUID,
    body: DepartmentUpdate,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    department = await _get_or_404(db, department_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        setattr(department, key, value)
    await db.commit()
    await db.refresh(department)
    return department


@router.delete("/{department_id}", response_model=DeleteResponse)
async def delete_department(
    department_id: UUID,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    department = await _get_or_404(db, department_id)
    await db.delete(department)
    await db.commit()
    return {"deleted": True, "id": str(department_id)}


async def _get_or_404(db: AsyncSession, department_id: UUID) -> Department:
    department = await db.get(Department, department_id)
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")
    return department
