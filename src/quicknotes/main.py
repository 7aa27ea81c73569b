"""
Quicknotes Application

FastAPI application entrypoint with async lifespan management.
Loads the persisted state on startup and serves the intent API the
rendering layer talks to.

Start locally:
    uvicorn quicknotes.main:app --port 8000 --reload
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.orm import Session, sessionmaker

from quicknotes.api.v1.notes import router as notes_router
from quicknotes.core.config import settings
from quicknotes.core.database import dispose_engine, get_session_factory, init_db
from quicknotes.core.logging import setup_logging
from quicknotes.repositories.state import StateRepository
from quicknotes.services.assist import AssistPipeline
from quicknotes.services.llm import GeminiClient
from quicknotes.services.seed import load_or_seed
from quicknotes.services.store import NoteStore
from quicknotes.services.workspace import NotesWorkspace

# Initialize logging before any log statements
setup_logging()
logger = logging.getLogger(__name__)


def build_workspace(session_factory: sessionmaker[Session]) -> NotesWorkspace:
    """
    Wire repository, store, AI pipeline and workspace together.

    The store is hydrated before it gets its first subscriber, and it
    only starts persisting once hydrated, so an empty initial state can
    never overwrite stored data.
    """
    repository = StateRepository(session_factory, settings.STORAGE_KEY)
    store = NoteStore(persist=repository.save, default_folder=settings.DEFAULT_FOLDER)
    store.hydrate(load_or_seed(repository, settings.DEFAULT_FOLDER))

    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set - AI actions will fail")
    pipeline = AssistPipeline(store, GeminiClient())
    return NotesWorkspace(store, pipeline)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
        - Creates the storage table if missing
        - Loads stored state (or seeds defaults) into the workspace

    Shutdown:
        - Detaches the workspace and disposes the engine
    """
    logger.info("Starting %s...", settings.PROJECT_NAME)
    logger.info("Log Level: %s", settings.LOG_LEVEL)

    init_db()
    app.state.workspace = build_workspace(get_session_factory())

    yield  # Application runs here

    app.state.workspace.close()
    dispose_engine()
    logger.info("Shutting down %s...", settings.PROJECT_NAME)


app = FastAPI(title=settings.PROJECT_NAME, version="0.1.0", lifespan=lifespan)

app.include_router(notes_router, prefix="/api/v1", tags=["Notes"])


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check for process supervisors."""
    return {
        "status": "ok",
        "service": "quicknotes",
        "environment": os.getenv("ENVIRONMENT", "local"),
    }
