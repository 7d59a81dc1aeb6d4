"""Files router — serve previously uploaded attachments by stored name."""

import mimetypes

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from ideaboard.config import Settings
from ideaboard.dependencies import get_settings
from ideaboard.services.uploads import resolve_stored_file

router = APIRouter(prefix="/api/files", tags=["files"])

# Types a browser may render in place; anything else is sent as a download.
INLINE_TYPES = {"image/jpeg", "image/png", "image/gif", "application/pdf", "text/plain"}


@router.get("/{filename}")
async def download_file(filename: str, settings: Settings = Depends(get_settings)):
    path = resolve_stored_file(settings.UPLOAD_DIR, filename)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")

    media_type, _ = mimetypes.guess_type(path.name)
    disposition = "inline" if media_type in INLINE_TYPES else "attachment"
    return FileResponse(
        path,
        media_type=media_type or "application/octet-stream",
        filename=path.name,
        content_disposition_type=disposition,
    )
