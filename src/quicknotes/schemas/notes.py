"""
Note Schemas

Pydantic models for the note domain, the persisted state blob, and the
intent API request/response bodies.

The persisted blob keeps the field names the state has always been stored
with (``updatedAt``, ``title``), so aliases are used on the wire while the
Python side stays snake_case.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)

from quicknotes.services.formatting import derive_title

# Virtual folder: matches every note, never stored
ALL_NOTES: str = "All Notes"


class Note(BaseModel):
    """
    A single note.

    ``title`` is a computed field: it is serialized with the note but any
    ``title`` key in input data is ignored and recomputed from ``content``.

    Attributes:
        id: Stable identifier assigned at creation (frozen).
        content: Full text body; first line doubles as the title.
        folder: Name of the containing real folder.
        updated_at: Last content mutation (wire name ``updatedAt``).
            Must be timezone-aware.
        pinned: Pinned notes sort before unpinned ones.
    """

    id: str = Field(min_length=1, frozen=True)
    content: str = ""
    folder: str
    updated_at: AwareDatetime = Field(alias="updatedAt")
    pinned: bool = False

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def title(self) -> str:
        """First line of content, or the placeholder when empty."""
        return derive_title(self.content)


class AppState(BaseModel):
    """Whole application state, persisted as one blob."""

    notes: list[Note] = Field(default_factory=list)
    folders: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_invariants(self) -> AppState:
        if len(set(self.folders)) != len(self.folders):
            raise ValueError("duplicate folder name")
        if ALL_NOTES in self.folders:
            raise ValueError(f"{ALL_NOTES!r} cannot be stored as a folder")

        seen: set[str] = set()
        for note in self.notes:
            if note.id in seen:
                raise ValueError(f"duplicate note id: {note.id}")
            if note.folder == ALL_NOTES:
                raise ValueError(f"note {note.id} is filed under {ALL_NOTES!r}")
            seen.add(note.id)
        return self


# ---------------------------------------------------------------------------
# Intent API bodies
# ---------------------------------------------------------------------------


class NoteCreate(BaseModel):
    """Request body for POST /notes. Defaults to the session's active folder."""

    folder: str | None = None


class NoteContentUpdate(BaseModel):
    """Request body for PATCH /notes/{id}."""

    content: str


class NoteListItem(BaseModel):
    """One row of the note list."""

    id: str
    title: str
    preview: str
    folder: str
    pinned: bool
    updated_at: datetime = Field(alias="updatedAt")
    display_date: str

    model_config = ConfigDict(populate_by_name=True)


class NoteRead(Note):
    """Full note for the editor pane, with the long-form date header."""

    display_date: str


class FolderCreate(BaseModel):
    """Request body for POST /folders."""

    name: str = Field(..., description="Folder name, trimmed before use")


class FolderRead(BaseModel):
    """Folder name with its note count."""

    name: str
    count: int
    virtual: bool = False


class SessionRead(BaseModel):
    """View session state."""

    active_folder: str
    search_query: str
    selected_note_id: str | None
    ai_loading: bool


class SessionUpdate(BaseModel):
    """
    Request body for PUT /session.

    All fields optional to support partial updates. ``selected_note_id``
    set explicitly to null clears the selection.
    """

    active_folder: str | None = None
    search_query: str | None = None
    selected_note_id: str | None = None


class AssistRequest(BaseModel):
    """Request body for POST /notes/{id}/ai."""

    action: str = Field(..., description="summary, continue, optimize or checklist")


class AssistResponse(BaseModel):
    """Outcome of one AI assist invocation."""

    status: str
    action: str | None = None
    text: str | None = None
    error: str | None = None
    attempts: int = 0


class AssistLoading(BaseModel):
    """Loading flag for UI feedback."""

    loading: bool
