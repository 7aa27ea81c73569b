"""Default state used on first start or when stored data is unreadable."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from quicknotes.repositories.state import StateRepository
from quicknotes.schemas.notes import AppState, Note

logger = logging.getLogger(__name__)

DEFAULT_FOLDERS: tuple[str, ...] = ("Personal", "Work", "Ideas")

WELCOME_NOTE_ID = "welcome"

WELCOME_CONTENT = """Quicknotes AI Assistant

Try the ✨ actions on any note:
1. Summarize long text into bullet points
2. Continue your writing in the same tone
3. Polish grammar and wording
4. Extract a to-do checklist"""


def default_state(now: datetime | None = None, default_folder: str = "Personal") -> AppState:
    """Default folder set plus one pinned welcome note."""
    folders = list(DEFAULT_FOLDERS)
    if default_folder not in folders:
        folders.insert(0, default_folder)
    welcome = Note(
        id=WELCOME_NOTE_ID,
        content=WELCOME_CONTENT,
        folder=default_folder,
        updated_at=now or datetime.now(UTC),
        pinned=True,
    )
    return AppState(notes=[welcome], folders=folders)


def load_or_seed(
    repository: StateRepository,
    default_folder: str = "Personal",
    clock: Callable[[], datetime] | None = None,
) -> AppState:
    """Load the stored state, falling back to the default seed."""
    state = repository.load()
    if state is None:
        logger.info("Seeding default state")
        state = default_state(clock() if clock else None, default_folder)
    return state
