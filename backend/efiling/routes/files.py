"""Registry files API routes - CRUD, trash, search, and filing mails into files."""
from uuid import UUID
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, desc, or_, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from efiling.database import get_db
from efiling.dependencies import (
    current_actor,
    get_engine,
    get_store,
    require_admin_actor,
    require_movement_actor,
)
from efiling.models.registry_file import RegistryFile
from efiling.routes.file_movement import to_http_response
from efiling.schemas.common import CountResponse, DeleteResponse, MessageResponse
from efiling.schemas.mail import Direction
from efiling.schemas.movement import MovementResponse
from efiling.schemas.registry_file import RegistryFileCreate, RegistryFileUpdate, RegistryFileResponse
from efiling.services.access_policy import Actor
from efiling.services.movement_engine import MovementEngine
from efiling.services.record_store import RecordStore

router = APIRouter(prefix="/api/files", tags=["files"])


def _with_links(query):
    return query.options(
        selectinload(RegistryFile.documents),
        selectinload(RegistryFile.personnel_links),
    )


@router.get("", response_model=list[RegistryFileResponse])
async def list_files(
    file_type: Optional[str] = Query(None, alias="fileType"),
    trashed: bool = Query(False),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    """List files, newest first. Trashed files only when trashed=true."""
    query = (
        select(RegistryFile)
        .where(RegistryFile.soft_deleted.is_(trashed))
        .order_by(desc(RegistryFile.updated_at))
        .limit(limit)
        .offset(offset)
    )
    if file_type:
        query = query.where(RegistryFile.file_type == file_type)
    result = await db.execute(_with_links(query))
    return [_to_response(f) for f in result.scalars().all()]


@router.get("/search", response_model=list[RegistryFileResponse])
async def search_files(
    q: str = Query("", description="Matches title or file number"),
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Case-insensitive search over title and file number."""
    pattern = f"%{q}%"
    result = await db.execute(
        _with_links(
            select(RegistryFile)
            .where(RegistryFile.soft_deleted.is_(False))
            .where(or_(RegistryFile.title.ilike(pattern), RegistryFile.file_number.ilike(pattern)))
            .order_by(RegistryFile.title)
        )
    )
    return [_to_response(f) for f in result.scalars().all()]


@router.get("/report/counts", response_model=CountResponse)
async def count_files(
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Total number of files, trashed included."""
    result = await db.execute(select(func.count()).select_from(RegistryFile))
    return {"total": result.scalar_one()}


@router.get("/{file_id}", response_model=RegistryFileResponse)
async def get_file(
    file_id: UUID,
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Get a single file with its linked documents."""
    file = await _get_or_404(db, file_id)
    return _to_response(file)


@router.post("", response_model=RegistryFileResponse, status_code=201)
async def create_file(
    body: RegistryFileCreate,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    """Open a new file. Titles are unique within an MDA."""
    await _ensure_title_free(db, body.title, body.owning_unit_code)
    file = RegistryFile(**body.model_dump())
    db.add(file)
    await db.commit()
    return _to_response(await _get_or_404(db, file.id))


@router.put("/trash/{file_id}", response_model=MessageResponse)
async def trash_file(
    file_id: UUID,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    file = await _get_or_404(db, file_id)
    file.soft_deleted = True
    await db.commit()
    return {"message": "File trashed"}


@router.put("/restore/{file_id}", response_model=MessageResponse)
async def restore_file(
    file_id: UUID,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    file = await _get_or_404(db, file_id)
    file.soft_deleted = False
    await db.commit()
    return {"message": "File Recovered from trash"}


@router.delete("/delete/{file_id}", response_model=DeleteResponse)
async def delete_file(
    file_id: UUID,
    actor: Actor = Depends(require_admin_actor),
    store: RecordStore = Depends(get_store),
):
    """Delete a file permanently, with its links and movement logs."""
    if not await store.delete(RegistryFile, file_id):
        raise HTTPException(status_code=404, detail="File not found")
    await store.commit()
    return {"deleted": True, "id": str(file_id)}


@router.put("/{file_id}", response_model=RegistryFileResponse)
async def update_file(
    file_id: UUID,
    body: RegistryFileUpdate,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    """Update descriptive fields. Only provided fields are updated."""
    file = await _get_or_404(db, file_id)
    update_data = body.model_dump(exclude_unset=True)
    if "title" in update_data or "owning_unit_code" in update_data:
        await _ensure_title_free(
            db,
            update_data.get("title", file.title),
            update_data.get("owning_unit_code", file.owning_unit_code),
            exclude_id=file.id,
        )
    for key, value in update_data.items():
        setattr(file, key, value)

    await db.commit()
    return _to_response(await _get_or_404(db, file_id))


@router.put("/{file_id}/fileup/{mail_id}", response_model=MovementResponse)
async def file_up_mail(
    file_id: UUID,
    mail_id: UUID,
    direction: Direction = Query(...),
    actor: Actor = Depends(current_actor),
    engine: MovementEngine = Depends(get_engine),
):
    """File a mail into this file."""
    return to_http_response(await engine.attach_mail(actor, file_id, mail_id, direction))


@router.delete("/{file_id}/remove/{mail_id}", response_model=MovementResponse)
async def remove_mail(
    file_id: UUID,
    mail_id: UUID,
    actor: Actor = Depends(current_actor),
    engine: MovementEngine = Depends(get_engine),
):
    """Take a mail out of this file."""
    return to_http_response(await engine.detach_mail(actor, file_id, mail_id))


@router.put("/{file_id}/personnels/{personnel_id}", response_model=MovementResponse)
async def add_personnel(
    file_id: UUID,
    personnel_id: UUID,
    actor: Actor = Depends(current_actor),
    engine: MovementEngine = Depends(get_engine),
):
    """Keep a personnel record in this personal file."""
    return to_http_response(await engine.linkage.attach_personnel(actor, file_id, personnel_id))


@router.delete("/{file_id}/personnels/{personnel_id}", response_model=MovementResponse)
async def remove_personnel(
    file_id: UUID,
    personnel_id: UUID,
    actor: Actor = Depends(current_actor),
    engine: MovementEngine = Depends(get_engine),
):
    return to_http_response(await engine.linkage.detach_personnel(actor, file_id, personnel_id))


async def _get_or_404(db: AsyncSession, file_id: UUID) -> RegistryFile:
    result = await db.execute(
        _with_links(select(RegistryFile).where(RegistryFile.id == file_id))
        .execution_options(populate_existing=True)
    )
    file = result.scalar_one_or_none()
    if not file:
        raise HTTPException(status_code=404, detail="File not found")
    return file


async def _ensure_title_free(db: AsyncSession, title: str, unit_code: Optional[str], exclude_id=None):
    query = select(RegistryFile.id).where(
        RegistryFile.title == title,
        RegistryFile.owning_unit_code == unit_code if unit_code is not None else RegistryFile.owning_unit_code.is_(None),
    )
    if exclude_id is not None:
        query = query.where(RegistryFile.id != exclude_id)
    result = await db.execute(query)
    if result.first():
        raise HTTPException(status_code=400, detail="File Title already exist")


def _to_response(file: RegistryFile) -> dict:
    """Convert SQLAlchemy model to response dict."""
    return {
        "id": file.id,
        "file_type": file.file_type,
        "title": file.title,
        "file_number": file.file_number,
        "paper_file_number": file.paper_file_number,
        "owning_unit_code": file.owning_unit_code,
        "location": file.location,
        "current_holder_id": file.current_holder_id,
        "soft_deleted": file.soft_deleted,
        "linked_documents": [
            {"mail_id": d.mail_id, "direction": d.direction, "position": d.position}
            for d in file.documents
        ],
        "personnel_ids": [p.personnel_id for p in file.personnel_links],
        "created_at": file.created_at,
        "updated_at": file.updated_at,
    }
