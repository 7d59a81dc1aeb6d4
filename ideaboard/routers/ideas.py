"""Ideas router — submit, list, vote, and attach notes and files."""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from starlette.datastructures import UploadFile

from ideaboard.config import Settings
from ideaboard.dependencies import get_settings, get_store
from ideaboard.errors import IdeaNotFoundError
from ideaboard.schemas.idea import FileOut, IdeaCreate, IdeaDetail, IdeaOut, NoteCreate, NoteOut
from ideaboard.services import uploads
from ideaboard.storage import IdeaStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ideas", tags=["ideas"])

# Anything the store can throw that is not a caller mistake.
STORAGE_ERRORS = (SQLAlchemyError, OSError)

# Caps on the non-file parts of an upload form; files are capped by size.
MAX_FORM_FILES = 8
MAX_FORM_FIELDS = 16
MAX_FORM_FIELD_BYTES = 64 * 1024


def _storage_failure(action: str) -> HTTPException:
    logger.exception(f"Storage error while {action}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


def _idea_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Idea not found")


# ═══════════════════════════════════════════════════════════════
#  GET /api/ideas → every idea, most votes first
# ═══════════════════════════════════════════════════════════════

@router.get("", response_model=List[IdeaOut])
async def list_ideas(store: IdeaStore = Depends(get_store)):
    try:
        return await store.get_all_ideas()
    except STORAGE_ERRORS:
        raise _storage_failure("listing ideas")


# ═══════════════════════════════════════════════════════════════
#  POST /api/ideas → submit an idea
# ═══════════════════════════════════════════════════════════════

@router.post("", response_model=IdeaOut, status_code=status.HTTP_201_CREATED)
async def create_idea(
    payload: Optional[IdeaCreate] = None,
    store: IdeaStore = Depends(get_store),
):
    title = ((payload.title if payload else None) or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")
    description = ((payload.description if payload else None) or "").strip()

    try:
        idea = await store.create_idea(str(uuid.uuid4()), title, description)
    except STORAGE_ERRORS:
        raise _storage_failure("creating an idea")

    logger.info(f"Created idea {idea.id}")
    return idea


# ═══════════════════════════════════════════════════════════════
#  GET /api/ideas/{idea_id} → idea with its notes and files
# ═══════════════════════════════════════════════════════════════

@router.get("/{idea_id}", response_model=IdeaDetail)
async def get_idea(idea_id: str, store: IdeaStore = Depends(get_store)):
    try:
        idea = await store.get_idea_by_id(idea_id)
        if idea is None:
            raise _idea_not_found()
        notes = await store.get_notes_by_idea_id(idea_id)
        files = await store.get_files_by_idea_id(idea_id)
    except STORAGE_ERRORS:
        raise _storage_failure(f"loading idea {idea_id}")

    detail = IdeaDetail.model_validate(idea)
    detail.notes = [NoteOut.model_validate(n) for n in notes]
    detail.files = [FileOut.model_validate(f) for f in files]
    return detail


# ═══════════════════════════════════════════════════════════════
#  POST /api/ideas/{idea_id}/vote → upvote
# ═══════════════════════════════════════════════════════════════

@router.post("/{idea_id}/vote", response_model=IdeaOut)
async def vote_idea(idea_id: str, store: IdeaStore = Depends(get_store)):
    try:
        await store.vote_for_idea(idea_id)
        idea = await store.get_idea_by_id(idea_id)
    except IdeaNotFoundError:
        raise _idea_not_found()
    except STORAGE_ERRORS:
        raise _storage_failure(f"voting for idea {idea_id}")

    if idea is None:
        raise _idea_not_found()

    logger.info(f"Vote recorded for idea {idea_id} (now {idea.votes})")
    return idea


# ═══════════════════════════════════════════════════════════════
#  POST /api/ideas/{idea_id}/notes → attach a note
# ═══════════════════════════════════════════════════════════════

@router.post("/{idea_id}/notes", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
async def add_note(
    idea_id: str,
    payload: Optional[NoteCreate] = None,
    store: IdeaStore = Depends(get_store),
):
    content = ((payload.content if payload else None) or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="Note content is required")

    try:
        # Check first so an orphan attempt is a 404, not an FK error.
        if await store.get_idea_by_id(idea_id) is None:
            raise _idea_not_found()
        note = await store.add_note(str(uuid.uuid4()), idea_id, content)
    except STORAGE_ERRORS:
        raise _storage_failure(f"adding a note to idea {idea_id}")

    return note


# ═══════════════════════════════════════════════════════════════
#  POST /api/ideas/{idea_id}/files → attach an uploaded file
# ═══════════════════════════════════════════════════════════════

@router.post("/{idea_id}/files", response_model=FileOut, status_code=status.HTTP_201_CREATED)
async def add_file(
    idea_id: str,
    request: Request,
    store: IdeaStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    form = await request.form(
        max_files=MAX_FORM_FILES,
        max_fields=MAX_FORM_FIELDS,
        max_part_size=MAX_FORM_FIELD_BYTES,
    )
    try:
        candidates = [v for v in form.getlist("file") if isinstance(v, UploadFile)]
        if not candidates:
            raise HTTPException(status_code=400, detail="File is required")
        if len(candidates) > 1:
            raise HTTPException(status_code=400, detail="Only one file may be uploaded")
        upload = candidates[0]

        if not uploads.is_allowed_file(upload.filename, upload.content_type):
            logger.warning(
                f"Rejected upload {upload.filename!r} ({upload.content_type}) for idea {idea_id}"
            )
            raise HTTPException(status_code=400, detail="Invalid file type")

        try:
            if await store.get_idea_by_id(idea_id) is None:
                raise _idea_not_found()
        except STORAGE_ERRORS:
            raise _storage_failure(f"looking up idea {idea_id}")

        try:
            stored = await uploads.save_upload(
                upload.file,
                upload.filename,
                settings.UPLOAD_DIR,
                settings.MAX_UPLOAD_BYTES,
            )
        except uploads.UploadTooLarge:
            logger.warning(f"Rejected oversize upload {upload.filename!r} for idea {idea_id}")
            raise HTTPException(status_code=400, detail="File too large")
        except OSError:
            raise _storage_failure(f"writing an upload for idea {idea_id}")

        try:
            record = await store.add_file(
                str(uuid.uuid4()),
                idea_id,
                stored.filename,
                upload.filename or stored.filename,
                stored.file_path,
                upload.content_type,
                stored.size,
            )
        except STORAGE_ERRORS:
            uploads.discard_upload(stored.file_path)
            raise _storage_failure(f"recording an upload for idea {idea_id}")
    finally:
        await form.close()

    return record
