"""
Workspace Unit Tests

Verifies the view-facing session: selection lifecycle, active folder,
cursor-range edits and AI actions on the open note.
"""

from __future__ import annotations

import pytest

from quicknotes.services.assist import AssistPipeline, AssistStatus
from quicknotes.services.llm import TransportError
from quicknotes.services.store import ALL_NOTES, NoteStore
from quicknotes.services.workspace import CHECKBOX_SNIPPET, NotesWorkspace


@pytest.fixture
def workspace(store: NoteStore, make_generator, sleeper) -> NotesWorkspace:
    pipeline = AssistPipeline(store, make_generator("AI text"), sleep=sleeper)
    return NotesWorkspace(store, pipeline)


class TestSelection:
    """Selection is owned by the workspace but follows store deletions."""

    def test_create_selects_new_note(self, workspace: NotesWorkspace) -> None:
        note = workspace.create_note()

        assert workspace.selected_note_id == note.id
        assert workspace.current_note == note

    def test_create_uses_active_folder(self, workspace: NotesWorkspace) -> None:
        assert workspace.set_active_folder("Ideas") is True
        assert workspace.create_note().folder == "Ideas"

    def test_delete_selected_clears_selection(self, workspace: NotesWorkspace) -> None:
        workspace.create_note()

        assert workspace.delete_note() is True
        assert workspace.selected_note_id is None
        assert workspace.current_note is None

    def test_store_side_delete_clears_selection(self, workspace: NotesWorkspace) -> None:
        note = workspace.create_note()
        workspace.store.delete_note(note.id)

        assert workspace.selected_note_id is None

    def test_deleting_other_note_keeps_selection(self, workspace: NotesWorkspace) -> None:
        other = workspace.create_note()
        selected = workspace.create_note()

        workspace.delete_note(other.id)
        assert workspace.selected_note_id == selected.id

    def test_select_unknown_note_refused(self, workspace: NotesWorkspace) -> None:
        assert workspace.select("missing") is False
        assert workspace.selected_note_id is None

    def test_select_none_closes_editor(self, workspace: NotesWorkspace) -> None:
        workspace.create_note()
        assert workspace.select(None) is True
        assert workspace.current_note is None


class TestEditing:
    """Edits go through the store's update path."""

    def test_edit_current_note(self, workspace: NotesWorkspace) -> None:
        workspace.create_note()
        workspace.edit("Title\nbody")

        assert workspace.current_note.title == "Title"

    def test_edit_without_selection(self, workspace: NotesWorkspace) -> None:
        assert workspace.edit("x") is False

    def test_insert_text_at_cursor(self, workspace: NotesWorkspace) -> None:
        workspace.create_note()
        workspace.edit("Hello world")

        workspace.insert_text(" big", 5)
        assert workspace.current_note.content == "Hello big world"

    def test_insert_text_replaces_range(self, workspace: NotesWorkspace) -> None:
        workspace.create_note()
        workspace.edit("Hello world")

        workspace.insert_text("there", 6, 11)
        assert workspace.current_note.content == "Hello there"

    @pytest.mark.parametrize(
        ("start", "end", "expected"),
        [
            (-3, None, "!Hello"),
            (99, None, "Hello!"),
            (-1, 2, "!llo"),
            (4, 1, "H!o"),
            (2, 99, "He!"),
        ],
    )
    def test_insert_text_clamps_offsets(
        self, workspace: NotesWorkspace, start: int, end: int | None, expected: str
    ) -> None:
        workspace.create_note()
        workspace.edit("Hello")

        workspace.insert_text("!", start, end)
        assert workspace.current_note.content == expected

    def test_insert_checkbox(self, workspace: NotesWorkspace) -> None:
        workspace.create_note()
        workspace.edit("Todo")

        workspace.insert_checkbox(4)
        assert workspace.current_note.content == "Todo" + CHECKBOX_SNIPPET

    def test_toggle_pin(self, workspace: NotesWorkspace) -> None:
        workspace.create_note()
        assert workspace.toggle_pin() is True
        assert workspace.current_note.pinned is True


class TestFolders:
    """Folder list and active-folder handling."""

    def test_folders_start_with_virtual(self, workspace: NotesWorkspace) -> None:
        assert workspace.folders == [ALL_NOTES, "Personal", "Work", "Ideas"]

    def test_unknown_active_folder_refused(self, workspace: NotesWorkspace) -> None:
        assert workspace.set_active_folder("Nope") is False
        assert workspace.active_folder == ALL_NOTES

    def test_deleting_active_folder_resets_filter(self, workspace: NotesWorkspace) -> None:
        workspace.add_folder("Travel")
        workspace.set_active_folder("Travel")

        assert workspace.delete_folder("Travel") is True
        assert workspace.active_folder == ALL_NOTES

    def test_visible_notes_follow_filter_and_search(self, workspace: NotesWorkspace) -> None:
        workspace.set_active_folder("Work")
        workspace.create_note()
        workspace.edit("Quarterly report")
        workspace.set_active_folder("Ideas")
        workspace.create_note()
        workspace.edit("Quarterly garden idea")

        workspace.set_active_folder(ALL_NOTES)
        workspace.search_query = "quarterly"
        assert len(workspace.visible_notes) == 2

        workspace.set_active_folder("Work")
        assert [n.title for n in workspace.visible_notes] == ["Quarterly report"]


class TestAiActions:
    """AI actions target the open note."""

    @pytest.mark.asyncio
    async def test_runs_on_selected_note(self, workspace: NotesWorkspace) -> None:
        workspace.create_note()
        workspace.edit("Meeting notes")

        result = await workspace.run_ai_action("summary")

        assert result.status is AssistStatus.APPLIED
        assert workspace.current_note.content == (
            "Meeting notes\n\n--- ✨ AI Summary ---\nAI text"
        )
        assert workspace.is_ai_loading is False

    @pytest.mark.asyncio
    async def test_without_selection(self, workspace: NotesWorkspace) -> None:
        result = await workspace.run_ai_action("summary")
        assert result.status is AssistStatus.SKIPPED

    @pytest.mark.asyncio
    async def test_failure_leaves_content(self, store: NoteStore, make_generator, sleeper) -> None:
        pipeline = AssistPipeline(store, make_generator(TransportError("down")), sleep=sleeper)
        workspace = NotesWorkspace(store, pipeline)
        workspace.create_note()
        workspace.edit("Unchanged")

        result = await workspace.run_ai_action("optimize")

        assert result.status is AssistStatus.FAILED
        assert workspace.current_note.content == "Unchanged"
        assert workspace.is_ai_loading is False
