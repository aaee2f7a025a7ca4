"""Record store - the persistence primitives the registry services build on.

Wraps one AsyncSession. Every write joins the session's current transaction;
nothing is visible to other sessions until commit().
"""
from typing import Any, Optional, Sequence, TypeVar

from sqlalchemy import select, update, delete as sql_delete, func
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class RecordStore:
    """Thin repository over an async session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(
        self,
        model: type[T],
        *criteria,
        order_by: Optional[Sequence[Any]] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[T]:
        query = select(model).where(*criteria)
        if order_by is not None:
            query = query.order_by(*order_by)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def find_one(self, model: type[T], *criteria) -> Optional[T]:
        rows = await self.find(model, *criteria, limit=1)
        return rows[0] if rows else None

    async def find_by_id(self, model: type[T], record_id) -> Optional[T]:
        """Fetch by primary key, always reloading from the database."""
        return await self.session.get(model, record_id, populate_existing=True)

    async def count(self, model, *criteria) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(model).where(*criteria)
        )
        return result.scalar_one()

    async def conditional_update(self, model: type[T], record_id, predicate: Sequence[Any], patch: dict) -> Optional[T]:
        """Apply patch only if the row still matches predicate.

        A single UPDATE ... WHERE id = :id AND <predicate>, so two callers
        racing on the same row cannot both match. Returns the updated record,
        or None when nothing matched.
        """
        result = await self.session.execute(
            update(model)
            .where(model.id == record_id, *predicate)
            .values(**patch)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await self.find_by_id(model, record_id)

    async def append(self, model: type[T], **entry) -> T:
        """Insert one row (a log entry or a membership link) and flush it."""
        row = model(**entry)
        self.session.add(row)
        await self.session.flush()
        return row

    async def remove_where(self, model, *criteria) -> int:
        """Delete every row matching criteria. Returns the number removed."""
        result = await self.session.execute(
            sql_delete(model).where(*criteria)
        )
        return result.rowcount

    async def delete(self, model, record_id) -> bool:
        """Hard delete one record together with its owned child rows."""
        record = await self.find_by_id(model, record_id)
        if record is None:
            return False
        await self.session.delete(record)
        await self.session.flush()
        return True

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
