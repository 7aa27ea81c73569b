"""
Notes Workspace

View-facing session over the store and the AI pipeline: which folder is
active, what is being searched, which note is open. The rendering layer
reads these properties and dispatches intents through the methods.
"""

from __future__ import annotations

import logging

from quicknotes.schemas.notes import Note
from quicknotes.services.assist import AssistAction, AssistPipeline, AssistResult, AssistStatus
from quicknotes.services.store import ALL_NOTES, NoteStore, StoreEvent, StoreEventKind

logger = logging.getLogger(__name__)

# Inserted by the checkbox button in the editor toolbar
CHECKBOX_SNIPPET = "\n- [ ] "


class NotesWorkspace:
    """
    Selection, filter and search state for one editing session.

    Selection is cleared whenever the store reports that the selected
    note was deleted, regardless of who deleted it.
    """

    def __init__(self, store: NoteStore, pipeline: AssistPipeline) -> None:
        self._store = store
        self._pipeline = pipeline
        self.active_folder: str = ALL_NOTES
        self.search_query: str = ""
        self.selected_note_id: str | None = None
        self._unsubscribe = store.subscribe(self._on_store_event)

    @property
    def store(self) -> NoteStore:
        return self._store

    @property
    def pipeline(self) -> AssistPipeline:
        return self._pipeline

    # --- derived state ---

    @property
    def visible_notes(self) -> list[Note]:
        return self._store.query(self.active_folder, self.search_query)

    @property
    def current_note(self) -> Note | None:
        if self.selected_note_id is None:
            return None
        return self._store.get(self.selected_note_id)

    @property
    def folders(self) -> list[str]:
        """Virtual folder followed by the real ones, as shown in the sidebar."""
        return [ALL_NOTES, *self._store.folders]

    @property
    def folder_counts(self) -> dict[str, int]:
        return self._store.folder_counts()

    @property
    def is_ai_loading(self) -> bool:
        return self._pipeline.is_loading

    # --- intents ---

    def select(self, note_id: str | None) -> bool:
        """Open a note (None closes the editor). Unknown ids are refused."""
        if note_id is not None and self._store.get(note_id) is None:
            return False
        self.selected_note_id = note_id
        return True

    def set_active_folder(self, folder: str) -> bool:
        if folder != ALL_NOTES and folder not in self._store.folders:
            return False
        self.active_folder = folder
        return True

    def create_note(self) -> Note:
        note = self._store.create_note(self.active_folder)
        self.selected_note_id = note.id
        return note

    def edit(self, content: str) -> bool:
        """Replace the open note's content."""
        if self.selected_note_id is None:
            return False
        return self._store.update_content(self.selected_note_id, content)

    def insert_text(self, text: str, start: int, end: int | None = None) -> bool:
        """
        Replace the ``start:end`` range of the open note with ``text``.

        With ``end`` omitted the text is inserted at ``start``. Offsets are
        clamped to the content bounds and swapped when reversed.
        """
        note = self.current_note
        if note is None:
            return False
        size = len(note.content)
        start = min(max(start, 0), size)
        end = start if end is None else min(max(end, 0), size)
        if end < start:
            start, end = end, start
        content = note.content[:start] + text + note.content[end:]
        return self._store.update_content(note.id, content)

    def insert_checkbox(self, position: int) -> bool:
        return self.insert_text(CHECKBOX_SNIPPET, position)

    def toggle_pin(self) -> bool:
        if self.selected_note_id is None:
            return False
        return self._store.toggle_pinned(self.selected_note_id)

    def delete_note(self, note_id: str | None = None) -> bool:
        """Delete a note (the open one by default)."""
        target = note_id or self.selected_note_id
        if target is None:
            return False
        return self._store.delete_note(target)

    def add_folder(self, name: str) -> bool:
        return self._store.add_folder(name)

    def delete_folder(self, name: str) -> bool:
        deleted = self._store.delete_folder(name)
        if deleted and self.active_folder == name:
            self.active_folder = ALL_NOTES
        return deleted

    async def run_ai_action(self, action: AssistAction | str) -> AssistResult:
        """Run an AI action on the open note."""
        if self.selected_note_id is None:
            return AssistResult(AssistStatus.SKIPPED, error="no note selected")
        return await self._pipeline.run_action(self.selected_note_id, action)

    def close(self) -> None:
        """Detach from the store."""
        self._unsubscribe()

    def _on_store_event(self, event: StoreEvent) -> None:
        if event.kind is StoreEventKind.DELETED and event.note_id == self.selected_note_id:
            logger.debug("Selected note %s deleted, clearing selection", event.note_id)
            self.selected_note_id = None
        elif event.kind is StoreEventKind.LOADED:
            self.selected_note_id = None
