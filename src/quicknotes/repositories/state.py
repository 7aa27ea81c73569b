"""
State Repository

Persistence adapter for the whole application state. Reads and writes a
single JSON blob under a fixed key in the ``storage_slots`` table.

The blob shape is::

    {"notes": [{"id", "title", "content", "updatedAt", "folder", "pinned"}],
     "folders": ["Personal", ...]}
"""

from __future__ import annotations

import logging

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from quicknotes.models import StorageSlot
from quicknotes.schemas.notes import AppState

logger = logging.getLogger(__name__)


class StateRepository:
    """
    Load/save the serialized AppState in one key-value slot.

    Usage::

        repo = StateRepository(get_session_factory(), key="quicknotes_state_v1")
        state = repo.load()          # None when absent or malformed
        repo.save(state)

    Args:
        session_factory: SQLAlchemy session maker bound to the local DB.
        key: Storage key of the slot.
    """

    def __init__(self, session_factory: sessionmaker[Session], key: str) -> None:
        self._session_factory = session_factory
        self._key = key

    @property
    def key(self) -> str:
        """Storage key of the slot."""
        return self._key

    def load(self) -> AppState | None:
        """
        Read and parse the stored state.

        Returns:
            The parsed AppState, or None if the slot is empty or the blob
            cannot be parsed (the caller seeds a default state).
        """
        with self._session_factory() as session:
            raw = session.scalar(
                select(StorageSlot.value).where(StorageSlot.key == self._key)
            )

        if raw is None:
            logger.info("No stored state under '%s'", self._key)
            return None

        try:
            state = AppState.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Stored state under '%s' is malformed (%d errors), ignoring it",
                self._key,
                e.error_count(),
            )
            return None

        logger.info(
            "Loaded state: %d notes, %d folders",
            len(state.notes),
            len(state.folders),
        )
        return state

    def save(self, state: AppState) -> None:
        """Serialize ``state`` and upsert it in a single transaction."""
        blob = state.model_dump_json(by_alias=True)
        with self._session_factory() as session, session.begin():
            slot = session.get(StorageSlot, self._key)
            if slot is None:
                session.add(StorageSlot(key=self._key, value=blob))
            else:
                slot.value = blob
        logger.debug("Saved state under '%s' (%d bytes)", self._key, len(blob))

    def clear(self) -> None:
        """Remove the slot (next load seeds defaults)."""
        with self._session_factory() as session, session.begin():
            slot = session.get(StorageSlot, self._key)
            if slot is not None:
                session.delete(slot)
