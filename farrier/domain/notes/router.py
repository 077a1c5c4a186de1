"""Note router"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import NoteCreate, NoteListResponse, NoteResponse
from .service import NoteService, note_payload

router = APIRouter(prefix="/notes", tags=["Notes"])


def get_note_service(db: Session = Depends(get_db)) -> NoteService:
    return NoteService(db)


@router.get("", response_model=NoteListResponse)
async def list_notes(
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return service.list_notes(page)


@router.post("", response_model=NoteResponse)
async def create_note(
    data: NoteCreate,
    current_user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    """Save a note; mentioned users are notified"""
    return note_payload(service.create_note(data, current_user))


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: int,
    current_user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return note_payload(service.get_note(note_id))


@router.delete("/{note_id}")
async def delete_note(
    note_id: int,
    current_user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return service.delete_note(note_id, current_user)
