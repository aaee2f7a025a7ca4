"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from efiling.config import settings
from efiling.database import engine, async_session, get_db
from efiling.models import Base
from efiling.services.access_policy import AccessPolicy
from efiling.services.movement_engine import MovementEngine
from efiling.services.record_store import RecordStore
from efiling.services.results import EfilingError

logger = logging.getLogger(__name__)


async def reconcile_held_files():
    """Repair held-file sets left inconsistent by a previous crash."""
    async with async_session() as session:
        result = await MovementEngine(RecordStore(session), AccessPolicy()).reconcile()
    if not result.ok:
        logger.error(f"Startup reconcile failed: {result.message}")
    return result


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup, then reconcile held files."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.RECONCILE_ON_STARTUP:
        await reconcile_held_files()

    yield

    await engine.dispose()


app = FastAPI(
    title="E-Filing Registry API",
    version="1.0.0",
    description="Backend API for registry files, mails and file movement.",
    lifespan=lifespan,
)

# CORS
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EfilingError)
async def efiling_error_handler(request: Request, exc: EfilingError):
    return JSONResponse(status_code=exc.http_status, content={"detail": exc.message})


@app.get("/api/health")
async def health_check():
    """Verify API and database connectivity."""
    try:
        async for db in get_db():
            await db.execute(text("SELECT 1"))
            return {"status": "ok", "database": "connected"}
    except Exception as e:
        return {"status": "error", "database": str(e)}


# Register routers
from efiling.routes.auth import router as auth_router
from efiling.routes.users import router as users_router
from efiling.routes.files import router as files_router
from efiling.routes.file_movement import router as file_movement_router
from efiling.routes.mails import router as mails_router
from efiling.routes.personnels import router as personnels_router
from efiling.routes.mdas import router as mdas_router
from efiling.routes.departments import router as departments_router
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(files_router)
app.include_router(file_movement_router)
app.include_router(mails_router)
app.include_router(personnels_router)
app.include_router(mdas_router)
app.include_router(departments_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("efiling.main:app", host="0.0.0.0", port=settings.API_PORT)
