"""Personnel API routes - staff records and their sub-record lists."""
import uuid
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, desc, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from efiling.database import get_db
from efiling.dependencies import current_actor, require_admin_actor, require_movement_actor
from efiling.models.personnel import Personnel, PERSONNEL_SECTIONS
from efiling.schemas.common import CountResponse, DeleteResponse, MessageResponse
from efiling.schemas.personnel import PersonnelCreate, PersonnelEntry, PersonnelUpdate, PersonnelResponse
from efiling.services.access_policy import Actor

router = APIRouter(prefix="/api/personnels", tags=["personnels"])


@router.get("", response_model=list[PersonnelResponse])
async def list_personnels(
    trashed: bool = Query(False),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Personnel)
        .where(Personnel.soft_deleted.is_(trashed))
        .order_by(desc(Personnel.created_at))
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all()


@router.get("/search", response_model=list[PersonnelResponse])
async def search_personnels(
    q: str = Query("", description="Matches name or employee number"),
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    pattern = f"%{q}%"
    result = await db.execute(
        select(Personnel)
        .where(Personnel.soft_deleted.is_(False))
        .where(or_(
            Personnel.surname.ilike(pattern),
            Personnel.firstname.ilike(pattern),
            Personnel.emp_no.ilike(pattern),
        ))
        .order_by(Personnel.surname)
    )
    return result.scalars().all()


@router.get("/report/counts", response_model=CountResponse)
async def count_personnels(
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(func.count()).select_from(Personnel))
    return {"total": result.scalar_one()}


@router.get("/{personnel_id}", response_model=PersonnelResponse)
async def get_personnel(
    personnel_id: UUID,
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await _get_or_404(db, personnel_id)


@router.post("", response_model=PersonnelResponse, status_code=201)
async def create_personnel(
    body: PersonnelCreate,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    data = body.model_dump()
    for section in PERSONNEL_SECTIONS:
        data[section] = _with_ids(data[section])
    personnel = Personnel(**data)
    db.add(personnel)
    await db.commit()
    await db.refresh(personnel)
    return personnel


@router.put("/trash/{personnel_id}", response_model=MessageResponse)
async def trash_personnel(
    personnel_id: UUID,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    personnel = await _get_or_404(db, personnel_id)
    personnel.soft_deleted = True
    await db.commit()
    return {"message": "Personnel trashed"}


@router.put("/restore/{personnel_id}", response_model=MessageResponse)
async def restore_personnel(
    personnel_id: UUID,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    personnel = await _get_or_404(db, personnel_id)
    personnel.soft_deleted = False
    await db.commit()
    return {"message": "Personnel Recovered from trash"}


@router.delete("/delete/{personnel_id}", response_model=DeleteResponse)
async def delete_personnel(
    personnel_id: UUID,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    personnel = await _get_or_404(db, personnel_id)
    await db.delete(personnel)
    await db.commit()
    return {"deleted": True, "id": str(personnel_id)}


@router.put("/{personnel_id}", response_model=PersonnelResponse)
async def update_personnel(
    personnel_id: UUID,
    body: PersonnelUpdate,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    """Update a record. Only provided fields are updated; lists are replaced whole."""
    personnel = await _get_or_404(db, personnel_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        if key in PERSONNEL_SECTIONS and value is not None:
            value = _with_ids(value)
        setattr(personnel, key, value)
    await db.commit()
    await db.refresh(personnel)
    return personnel


# ── Section entries (qualifications, leaves, promotions, queries) ─

@router.get("/{personnel_id}/{section}", response_model=list[dict])
async def list_section_entries(
    personnel_id: UUID,
    section: str,
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    _check_section(section)
    personnel = await _get_or_404(db, personnel_id)
    return getattr(personnel, section) or []


@router.post("/{personnel_id}/{section}", response_model=PersonnelResponse, status_code=201)
async def add_section_entry(
    personnel_id: UUID,
    section: str,
    entry: PersonnelEntry,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    """Append one entry to a section. The entry gets a server-assigned id."""
    _check_section(section)
    personnel = await _get_or_404(db, personnel_id)
    data = entry.model_dump(by_alias=True, exclude_unset=True)
    data.pop("id", None)
    new_entry = {"id": uuid.uuid4().hex, **data}
    # JSON columns are not change-tracked in place; assign a new list
    setattr(personnel, section, [*(getattr(personnel, section) or []), new_entry])
    await db.commit()
    await db.refresh(personnel)
    return personnel


@router.get("/{personnel_id}/{section}/{entry_id}", response_model=dict)
async def get_section_entry(
    personnel_id: UUID,
    section: str,
    entry_id: str,
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    _check_section(section)
    personnel = await _get_or_404(db, personnel_id)
    entries = getattr(personnel, section) or []
    return entries[_entry_index(entries, entry_id)]


@router.put("/{personnel_id}/{section}/{entry_id}", response_model=PersonnelResponse)
async def update_section_entry(
    personnel_id: UUID,
    section: str,
    entry_id: str,
    entry: PersonnelEntry,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    """Merge the given fields into one entry. Fields not sent are kept."""
    _check_section(section)
    personnel = await _get_or_404(db, personnel_id)
    entries = list(getattr(personnel, section) or [])
    index = _entry_index(entries, entry_id)
    changes = entry.model_dump(by_alias=True, exclude_unset=True)
    changes.pop("id", None)
    entries[index] = {**entries[index], **changes}
    setattr(personnel, section, entries)
    await db.commit()
    await db.refresh(personnel)
    return personnel


@router.delete("/{personnel_id}/{section}/{entry_id}", response_model=PersonnelResponse)
async def delete_section_entry(
    personnel_id: UUID,
    section: str,
    entry_id: str,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    _check_section(section)
    personnel = await _get_or_404(db, personnel_id)
    entries = list(getattr(personnel, section) or [])
    del entries[_entry_index(entries, entry_id)]
    setattr(personnel, section, entries)
    await db.commit()
    await db.refresh(personnel)
    return personnel


def _check_section(section: str):
    if section not in PERSONNEL_SECTIONS:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown section '{section}'. Expected one of: {', '.join(PERSONNEL_SECTIONS)}",
        )


def _with_ids(entries: list[dict]) -> list[dict]:
    """Give every entry an id so it can be addressed on its own later."""
    return [entry if entry.get("id") else {"id": uuid.uuid4().hex, **entry} for entry in entries]


def _entry_index(entries: list[dict], entry_id: str) -> int:
    for index, entry in enumerate(entries):
        if entry.get("id") == entry_id:
            return index
    raise HTTPException(status_code=404, detail="Entry not found")


async def _get_or_404(db: AsyncSession, personnel_id: UUID) -> Personnel:
    personnel = await db.get(Personnel, personnel_id)
    if not personnel:
        raise HTTPException(status_code=404, detail="Personnel not found")
    return personnel
