"""Mails API routes - incoming/outgoing correspondence, trash, and reviews."""
from uuid import UUID
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, desc, or_, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from efiling.database import get_db
from efiling.dependencies import current_actor, require_admin_actor, require_movement_actor
from efiling.models.mail import Mail
from efiling.schemas.common import CountResponse, DeleteResponse, MessageResponse
from efiling.schemas.mail import Direction, MailCreate, MailUpdate, MailReviewCreate, MailResponse
from efiling.services.access_policy import Actor

router = APIRouter(prefix="/api/mails", tags=["mails"])


@router.get("", response_model=list[MailResponse])
async def list_mails(
    direction: Optional[Direction] = Query(None),
    trashed: bool = Query(False),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    """List mails, newest first."""
    query = (
        select(Mail)
        .options(selectinload(Mail.charge_comments))
        .where(Mail.soft_deleted.is_(trashed))
        .order_by(desc(Mail.created_at))
        .limit(limit)
        .offset(offset)
    )
    if direction:
        query = query.where(Mail.direction == direction)
    result = await db.execute(query)
    return [_to_response(m) for m in result.scalars().all()]


@router.get("/search", response_model=list[MailResponse])
async def search_mails(
    q: str = Query("", description="Matches subject, reference number or sender"),
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    pattern = f"%{q}%"
    result = await db.execute(
        select(Mail)
        .options(selectinload(Mail.charge_comments))
        .where(Mail.soft_deleted.is_(False))
        .where(or_(Mail.subject.ilike(pattern), Mail.ref_no.ilike(pattern), Mail.sender.ilike(pattern)))
        .order_by(desc(Mail.created_at))
    )
    return [_to_response(m) for m in result.scalars().all()]


@router.get("/report/counts", response_model=CountResponse)
async def count_mails(
    direction: Optional[Direction] = Query(None),
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    query = select(func.count()).select_from(Mail)
    if direction:
        query = query.where(Mail.direction == direction)
    result = await db.execute(query)
    return {"total": result.scalar_one()}


@router.get("/{mail_id}", response_model=MailResponse)
async def get_mail(
    mail_id: UUID,
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    return _to_response(await _get_or_404(db, mail_id))


@router.post("", response_model=MailResponse, status_code=201)
async def create_mail(
    body: MailCreate,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    mail = Mail(**body.model_dump())
    db.add(mail)
    await db.commit()
    return _to_response(await _get_or_404(db, mail.id))


@router.put("/trash/{mail_id}", response_model=MessageResponse)
async def trash_mail(
    mail_id: UUID,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    mail = await _get_or_404(db, mail_id)
    mail.soft_deleted = True
    await db.commit()
    return {"message": "Mail trashed"}


@router.put("/restore/{mail_id}", response_model=MessageResponse)
async def restore_mail(
    mail_id: UUID,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    mail = await _get_or_404(db, mail_id)
    mail.soft_deleted = False
    await db.commit()
    return {"message": "Mail Recovered from trash"}


@router.delete("/delete/{mail_id}", response_model=DeleteResponse)
async def delete_mail(
    mail_id: UUID,
    actor: Actor = Depends(require_admin_actor),
    db: AsyncSession = Depends(get_db),
):
    """Delete a mail permanently. It is also removed from any file it was filed into."""
    mail = await _get_or_404(db, mail_id)
    await db.delete(mail)
    await db.commit()
    return {"deleted": True, "id": str(mail_id)}


@router.put("/{mail_id}", response_model=MailResponse)
async def update_mail(
    mail_id: UUID,
    body: MailUpdate,
    actor: Actor = Depends(require_movement_actor),
    db: AsyncSession = Depends(get_db),
):
    """Update a mail. Only provided fields are updated; direction is fixed at creation."""
    mail = await _get_or_404(db, mail_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        setattr(mail, key, value)
    await db.commit()
    return _to_response(await _get_or_404(db, mail_id))


@router.post("/{mail_id}/reviews", response_model=MailResponse)
async def add_review(
    mail_id: UUID,
    body: MailReviewCreate,
    actor: Actor = Depends(current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Append a minute to the mail. Any signed-in user may review."""
    mail = await _get_or_404(db, mail_id)
    review = {"user_id": str(actor.id), "name": actor.display_name, "body_text": body.body_text}
    # Reassign so the JSON column is flagged dirty
    mail.reviews = [*(mail.reviews or []), review]
    await db.commit()
    return _to_response(await _get_or_404(db, mail_id))


async def _get_or_404(db: AsyncSession, mail_id: UUID) -> Mail:
    result = await db.execute(
        select(Mail)
        .options(selectinload(Mail.charge_comments))
        .where(Mail.id == mail_id)
        .execution_options(populate_existing=True)
    )
    mail = result.scalar_one_or_none()
    if not mail:
        raise HTTPException(status_code=404, detail="Mail not found")
    return mail


def _to_response(mail: Mail) -> dict:
    """Convert SQLAlchemy model to response dict."""
    return {
        "id": mail.id,
        "direction": mail.direction,
        "mail_type": mail.mail_type,
        "ref_no": mail.ref_no,
        "sender": mail.sender,
        "sender_address": mail.sender_address,
        "receiver": mail.receiver,
        "receiver_address": mail.receiver_address,
        "cc": mail.cc or [],
        "subject": mail.subject,
        "body_text": mail.body_text,
        "signature_url": mail.signature_url,
        "upload_url": mail.upload_url,
        "file_number": mail.file_number,
        "reviews": mail.reviews or [],
        "charge_comments": [
            {"from_label": c.from_label, "to_label": c.to_label, "comment": c.comment, "at": c.at}
            for c in mail.charge_comments
        ],
        "soft_deleted": mail.soft_deleted,
        "created_at": mail.created_at,
        "updated_at": mail.updated_at,
    }
