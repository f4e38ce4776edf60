"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.collaboration.protocol import SessionProtocol
from app.collaboration.registry import SessionRegistry
from app.config import get_settings
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.routers import collaborators, proposals, realtime

logger = logging.getLogger(__name__)

settings = get_settings()


def _prepare_database() -> None:
    """Create missing tables for local SQLite setups that skip Alembic."""

    if not settings.create_schema_on_startup:
        return
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Schema bootstrap failed; continuing and relying on migrations.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    _prepare_database()
    registry = SessionRegistry()
    app.state.session_registry = registry
    app.state.session_protocol = SessionProtocol(registry, SessionLocal)
    logger.info("realtime.registry_started")
    yield
    registry.clear()
    logger.info("realtime.registry_stopped open_sessions=%d", len(registry))


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(proposals.router, tags=["proposals"])
app.include_router(collaborators.router, tags=["collaborators"])
app.include_router(realtime.router, tags=["realtime"])


@app.get("/health")
def health() -> dict[str, str]:
    """Simple health check endpoint."""

    return {"status": "ok"}
