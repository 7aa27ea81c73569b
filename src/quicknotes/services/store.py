"""
Note Store

Owned state container for notes and folders. All mutations go through
the methods below; each committed mutation is persisted (once the store
has been hydrated) and then broadcast to subscribers.

Callers always receive copies. A note is re-fetched by id whenever the
current version matters, never read through a stale reference.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from quicknotes.schemas.notes import ALL_NOTES, AppState, Note

logger = logging.getLogger(__name__)


class StoreEventKind(StrEnum):
    """Kinds of state change broadcast to subscribers."""

    LOADED = "loaded"
    CREATED = "created"
    UPDATED = "updated"
    PINNED = "pinned"
    DELETED = "deleted"
    FOLDER_ADDED = "folder_added"
    FOLDER_DELETED = "folder_deleted"


@dataclass(frozen=True)
class StoreEvent:
    """
    One committed state change.

    Attributes:
        kind: What happened.
        note_id: Affected note (note events only).
        folder: Affected folder (folder events only).
    """

    kind: StoreEventKind
    note_id: str | None = None
    folder: str | None = None


Subscriber = Callable[[StoreEvent], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return uuid.uuid4().hex


class NoteStore:
    """
    Authoritative collection of notes and folders.

    Usage::

        store = NoteStore(persist=repository.save, default_folder="Personal")
        store.hydrate(repository.load() or default_state())
        note = store.create_note(ALL_NOTES)
        store.update_content(note.id, "Groceries\\nmilk")
        visible = store.query(ALL_NOTES, "milk")

    Args:
        persist: Called with a full AppState snapshot after every mutation.
        default_folder: Real folder used when a note is created while the
            virtual folder is active, and when a folder is deleted.
        clock: Returns the current (timezone-aware) time.
        id_factory: Returns a fresh unique note id.
    """

    def __init__(
        self,
        persist: Callable[[AppState], None] | None = None,
        default_folder: str = "Personal",
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._persist = persist
        self._default_folder = default_folder
        self._clock = clock
        self._id_factory = id_factory

        self._notes: list[Note] = []
        self._folders: list[str] = []
        self._subscribers: list[Subscriber] = []
        # Writes are suppressed until the persisted state has been loaded
        self._loaded = False

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        """True once hydrate() has run."""
        return self._loaded

    @property
    def default_folder(self) -> str:
        return self._default_folder

    @property
    def notes(self) -> list[Note]:
        """Copies of all notes in stored order (newest-created first)."""
        return [n.model_copy() for n in self._notes]

    @property
    def folders(self) -> list[str]:
        """Real folder names in stored order."""
        return list(self._folders)

    def get(self, note_id: str) -> Note | None:
        """Return a copy of the current version of a note, or None."""
        note = self._find(note_id)
        return note.model_copy() if note is not None else None

    def snapshot(self) -> AppState:
        """Deep copy of the whole state."""
        return AppState(notes=self.notes, folders=self.folders)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def hydrate(self, state: AppState) -> None:
        """
        Replace the whole state with ``state`` and enable persistence.

        Does not write back: the loaded state is already what is stored.
        """
        self._notes = [n.model_copy() for n in state.notes]
        self._folders = list(state.folders)
        self._loaded = True
        logger.info(
            "Store hydrated: %d notes, %d folders",
            len(self._notes),
            len(self._folders),
        )
        self._notify(StoreEvent(StoreEventKind.LOADED))

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            A callable that removes the listener.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Note mutations
    # ------------------------------------------------------------------

    def create_note(self, active_folder: str) -> Note:
        """
        Insert an empty note at the head of the collection.

        Args:
            active_folder: Folder the user is viewing. The virtual
                folder falls back to the default real folder.

        Returns:
            Copy of the new note, so the caller can select it.
        """
        folder = self._default_folder if active_folder == ALL_NOTES else active_folder
        note = Note(
            id=self._id_factory(),
            content="",
            folder=folder,
            updated_at=self._clock(),
            pinned=False,
        )
        self._notes.insert(0, note)
        logger.debug("Created note %s in '%s'", note.id, folder)
        self._commit(StoreEvent(StoreEventKind.CREATED, note_id=note.id))
        return note.model_copy()

    def update_content(self, note_id: str, content: str) -> bool:
        """
        Replace a note's content; title and updated_at follow.

        Returns:
            False if no note has this id (nothing changes).
        """
        note = self._find(note_id)
        if note is None:
            logger.debug("update_content: unknown note %s", note_id)
            return False
        note.content = content
        note.updated_at = self._clock()
        self._commit(StoreEvent(StoreEventKind.UPDATED, note_id=note_id))
        return True

    def toggle_pinned(self, note_id: str) -> bool:
        """
        Flip the pinned flag.

        updated_at is left untouched: pinning reorders without making the
        note look recently edited.
        """
        note = self._find(note_id)
        if note is None:
            return False
        note.pinned = not note.pinned
        self._commit(StoreEvent(StoreEventKind.PINNED, note_id=note_id))
        return True

    def delete_note(self, note_id: str) -> bool:
        """Remove a note immediately. Subscribers get a DELETED event."""
        note = self._find(note_id)
        if note is None:
            return False
        self._notes.remove(note)
        logger.debug("Deleted note %s", note_id)
        self._commit(StoreEvent(StoreEventKind.DELETED, note_id=note_id))
        return True

    # ------------------------------------------------------------------
    # Folder mutations
    # ------------------------------------------------------------------

    def add_folder(self, name: str) -> bool:
        """
        Append a folder.

        Returns:
            False if the trimmed name is empty, is the virtual folder,
            or already exists.
        """
        name = name.strip()
        if not name or name == ALL_NOTES or name in self._folders:
            logger.info("Rejected folder name %r", name)
            return False
        self._folders.append(name)
        self._commit(StoreEvent(StoreEventKind.FOLDER_ADDED, folder=name))
        return True

    def delete_folder(self, name: str) -> bool:
        """
        Remove a real folder and move its notes to the default folder.

        The virtual folder and the default folder cannot be deleted.
        Moved notes keep their updated_at.
        """
        if name in (ALL_NOTES, self._default_folder) or name not in self._folders:
            return False
        self._folders.remove(name)
        moved = 0
        for note in self._notes:
            if note.folder == name:
                note.folder = self._default_folder
                moved += 1
        logger.info(
            "Deleted folder '%s', moved %d notes to '%s'",
            name,
            moved,
            self._default_folder,
        )
        self._commit(StoreEvent(StoreEventKind.FOLDER_DELETED, folder=name))
        return True

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def query(self, folder_filter: str = ALL_NOTES, search_text: str = "") -> list[Note]:
        """
        Filter and sort notes for the list view.

        A note matches when the folder matches (or the filter is the
        virtual folder) and the search text is empty or occurs,
        case-insensitively, in the title or the content.

        Order: pinned first, then updated_at descending. Both sorts are
        stable, so equal timestamps keep their stored order.
        """
        needle = search_text.lower()
        matches = [
            n
            for n in self._notes
            if (folder_filter == ALL_NOTES or n.folder == folder_filter)
            and (
                not needle
                or needle in n.title.lower()
                or needle in n.content.lower()
            )
        ]
        matches.sort(key=lambda n: n.updated_at, reverse=True)
        matches.sort(key=lambda n: not n.pinned)
        return [n.model_copy() for n in matches]

    def folder_counts(self) -> dict[str, int]:
        """Note count per folder, virtual folder first."""
        counts = {ALL_NOTES: len(self._notes)}
        for folder in self._folders:
            counts[folder] = sum(1 for n in self._notes if n.folder == folder)
        return counts

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find(self, note_id: str) -> Note | None:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def _commit(self, event: StoreEvent) -> None:
        if self._loaded and self._persist is not None:
            try:
                self._persist(self.snapshot())
            except Exception:
                logger.exception("Persisting state failed after %s", event.kind)
        self._notify(event)

    def _notify(self, event: StoreEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Store subscriber failed on %s", event.kind)
