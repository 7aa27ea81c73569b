"""
Notes API Router

Intent endpoints for the rendering layer: note CRUD, folders, view
session state and AI actions. All handlers operate on the single
NotesWorkspace created at startup.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from quicknotes.schemas.notes import (
    AssistLoading,
    AssistRequest,
    AssistResponse,
    FolderCreate,
    FolderRead,
    Note,
    NoteContentUpdate,
    NoteCreate,
    NoteListItem,
    NoteRead,
    SessionRead,
    SessionUpdate,
)
from quicknotes.services.formatting import format_full_date, format_note_date, preview_line
from quicknotes.services.store import ALL_NOTES
from quicknotes.services.workspace import NotesWorkspace

router = APIRouter()


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_workspace(request: Request) -> NotesWorkspace:
    """FastAPI dependency: the workspace built in the lifespan handler."""
    return request.app.state.workspace


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")


def _list_item(note: Note, now: datetime) -> NoteListItem:
    return NoteListItem(
        id=note.id,
        title=note.title,
        preview=preview_line(note.content),
        folder=note.folder,
        pinned=note.pinned,
        updated_at=note.updated_at,
        display_date=format_note_date(note.updated_at, now),
    )


def _read(note: Note) -> NoteRead:
    return NoteRead(
        id=note.id,
        content=note.content,
        folder=note.folder,
        updated_at=note.updated_at,
        pinned=note.pinned,
        display_date=format_full_date(note.updated_at),
    )


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


@router.get("/notes", response_model=list[NoteListItem])
async def list_notes(
    folder: str | None = None,
    q: str | None = None,
    ws: NotesWorkspace = Depends(get_workspace),
):
    """
    Filtered, sorted note list.

    Query parameters override the session's active folder and search text
    for this request only.
    """
    folder_filter = folder if folder is not None else ws.active_folder
    search = q if q is not None else ws.search_query
    now = datetime.now(UTC)
    return [_list_item(n, now) for n in ws.store.query(folder_filter, search)]


@router.post("/notes", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def create_note(body: NoteCreate, ws: NotesWorkspace = Depends(get_workspace)):
    """Create an empty note in the given (or active) folder and select it."""
    if body.folder is None:
        return _read(ws.create_note())
    if body.folder != ALL_NOTES and body.folder not in ws.store.folders:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Folder not found")
    note = ws.store.create_note(body.folder)
    ws.select(note.id)
    return _read(note)


@router.get("/notes/{note_id}", response_model=NoteRead)
async def read_note(note_id: str, ws: NotesWorkspace = Depends(get_workspace)):
    note = ws.store.get(note_id)
    if note is None:
        raise _not_found()
    return _read(note)


@router.patch("/notes/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: str,
    body: NoteContentUpdate,
    ws: NotesWorkspace = Depends(get_workspace),
):
    """Replace a note's content (title follows the first line)."""
    if not ws.store.update_content(note_id, body.content):
        raise _not_found()
    return _read(ws.store.get(note_id))


@router.post("/notes/{note_id}/pin", response_model=NoteRead)
async def toggle_pin(note_id: str, ws: NotesWorkspace = Depends(get_workspace)):
    if not ws.store.toggle_pinned(note_id):
        raise _not_found()
    return _read(ws.store.get(note_id))


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(note_id: str, ws: NotesWorkspace = Depends(get_workspace)):
    if not ws.delete_note(note_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# AI actions
# ---------------------------------------------------------------------------


@router.post("/notes/{note_id}/ai", response_model=AssistResponse)
async def run_ai_action(
    note_id: str,
    body: AssistRequest,
    ws: NotesWorkspace = Depends(get_workspace),
):
    """
    Run an AI action on a note and wait for the outcome.

    Returns 200 for every outcome; ``status`` tells applied, failed,
    skipped, no_result or discarded apart. Other endpoints keep serving
    while the request is outstanding.
    """
    if ws.store.get(note_id) is None:
        raise _not_found()
    result = await ws.pipeline.run_action(note_id, body.action)
    return AssistResponse(
        status=result.status,
        action=result.action,
        text=result.text,
        error=result.error,
        attempts=result.attempts,
    )


@router.get("/ai/status", response_model=AssistLoading)
async def ai_status(ws: NotesWorkspace = Depends(get_workspace)):
    return AssistLoading(loading=ws.is_ai_loading)


# ---------------------------------------------------------------------------
# Folders
# ---------------------------------------------------------------------------


@router.get("/folders", response_model=list[FolderRead])
async def list_folders(ws: NotesWorkspace = Depends(get_workspace)):
    """Virtual folder first, then real folders, each with its note count."""
    counts = ws.folder_counts
    return [
        FolderRead(name=name, count=counts.get(name, 0), virtual=name == ALL_NOTES)
        for name in ws.folders
    ]


@router.post("/folders", response_model=FolderRead, status_code=status.HTTP_201_CREATED)
async def add_folder(body: FolderCreate, ws: NotesWorkspace = Depends(get_workspace)):
    if not ws.add_folder(body.name):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Folder name is empty, reserved or already exists",
        )
    return FolderRead(name=body.name.strip(), count=0)


@router.delete("/folders/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_folder(name: str, ws: NotesWorkspace = Depends(get_workspace)):
    """Delete a folder; its notes move to the default folder."""
    if not ws.delete_folder(name):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Folder cannot be deleted",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


def _session(ws: NotesWorkspace) -> SessionRead:
    return SessionRead(
        active_folder=ws.active_folder,
        search_query=ws.search_query,
        selected_note_id=ws.selected_note_id,
        ai_loading=ws.is_ai_loading,
    )


@router.get("/session", response_model=SessionRead)
async def read_session(ws: NotesWorkspace = Depends(get_workspace)):
    return _session(ws)


@router.put("/session", response_model=SessionRead)
async def update_session(body: SessionUpdate, ws: NotesWorkspace = Depends(get_workspace)):
    """
    Partial update of the view session.

    Unknown folder or note → 404, and nothing is applied.
    """
    select = "selected_note_id" in body.model_fields_set
    if (
        body.active_folder is not None
        and body.active_folder != ALL_NOTES
        and body.active_folder not in ws.store.folders
    ):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Folder not found")
    note_id = body.selected_note_id
    if select and note_id is not None and ws.store.get(note_id) is None:
        raise _not_found()

    if body.active_folder is not None:
        ws.set_active_folder(body.active_folder)
    if body.search_query is not None:
        ws.search_query = body.search_query
    if select:
        ws.select(note_id)
    return _session(ws)
