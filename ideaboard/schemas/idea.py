"""Idea, note and file Pydantic schemas."""

from datetime import datetime, timezone
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel


def _as_utc(value: datetime) -> datetime:
    # Stored timestamps are naive UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class IdeaCreate(BaseModel):
    """Body of POST /api/ideas. Blank checks happen in the router."""
    title: Optional[str] = None
    description: Optional[str] = None


class NoteCreate(BaseModel):
    content: Optional[str] = None


class IdeaOut(BaseModel):
    id: str
    title: str
    description: str = ""
    votes: int
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = {"from_attributes": True}


class NoteOut(BaseModel):
    id: str
    idea_id: str
    content: str
    created_at: UtcDatetime

    model_config = {"from_attributes": True}


class FileOut(BaseModel):
    """Public file record; the on-disk path stays server-side."""
    id: str
    idea_id: str
    filename: str
    original_name: str
    mime_type: Optional[str] = None
    size: Optional[int] = None
    created_at: UtcDatetime

    model_config = {"from_attributes": True}


class IdeaDetail(IdeaOut):
    notes: List[NoteOut] = []
    files: List[FileOut] = []
