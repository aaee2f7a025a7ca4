"""Shared fixtures: a throwaway SQLite database per test, seeded users and a file."""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("RECONCILE_ON_STARTUP", "false")

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from efiling.models import Base, Role, User, UserHeldFile, RegistryFile, Mail
from efiling.services.access_policy import AccessPolicy, Actor
from efiling.services.movement_engine import MovementEngine
from efiling.services.record_store import RecordStore


@pytest.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'efiling.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def store(session):
    return RecordStore(session)


@pytest.fixture
def movement(store):
    return MovementEngine(store, AccessPolicy())


@pytest.fixture
def add_user(session):
    async def _add(surname, role=Role.USER, **fields):
        fields.setdefault("email", f"{surname.lower()}@registry.gov.ng")
        fields.setdefault("firstname", "Test")
        fields.setdefault("password_hash", "not-a-bcrypt-hash")
        user = User(surname=surname, role=role.value, **fields)
        session.add(user)
        await session.commit()
        return user
    return _add


@pytest.fixture
async def admin(add_user):
    return await add_user("Okafor", role=Role.ADMIN, post="Registry Head", department="Registry")


@pytest.fixture
def admin_actor(admin):
    return Actor.from_user(admin)


@pytest.fixture
async def u1(add_user):
    return await add_user("Adeyemi", post="Director", department="Finance")


@pytest.fixture
async def u2(add_user):
    return await add_user("Bello", post="Deputy Director", department="Admin")


@pytest.fixture
async def registry_file(session):
    file = RegistryFile(title="Staff Welfare", file_number="MOH/ADM/001", owning_unit_code="MOH")
    session.add(file)
    await session.commit()
    return file


@pytest.fixture
def add_mail(session):
    async def _add(direction="incoming", subject="Budget circular"):
        mail = Mail(direction=direction, subject=subject, ref_no="REF/1")
        session.add(mail)
        await session.commit()
        return mail
    return _add


@pytest.fixture
def snapshot(session_factory):
    """Read files and held links from a fresh session: {file_id: (location, holder, held_by)}."""
    async def _read():
        async with session_factory() as s:
            files = (await s.execute(select(RegistryFile))).scalars().all()
            links = (await s.execute(select(UserHeldFile))).scalars().all()
            held_by = {}
            for link in links:
                held_by.setdefault(link.file_id, []).append(link.user_id)
            return {
                f.id: (f.location, f.current_holder_id, held_by.get(f.id, []))
                for f in files
            }
    return _read


@pytest.fixture
def assert_consistent(snapshot):
    """Holder on the file row and the held-file sets must agree."""
    async def _check():
        state = await snapshot()
        for file_id, (location, holder, held_by) in state.items():
            if location == "checked_out":
                assert holder is not None, f"{file_id} checked out without holder"
                assert held_by == [holder], f"{file_id} holder {holder} but held by {held_by}"
            else:
                assert location == "available"
                assert holder is None, f"{file_id} available but holder {holder}"
                assert held_by == [], f"{file_id} available but held by {held_by}"
        return state
    return _check
