"""
Upload handling for idea attachments.

Kept independent of the routing layer:
- Decide whether an upload is an allowed type
- Generate the stored filename
- Copy the bytes to the uploads directory with a size limit
- Resolve a stored filename back to a path for downloads
"""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {
    ".jpeg", ".jpg", ".png", ".gif",
    ".pdf", ".doc", ".docx", ".txt", ".md",
}

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "text/markdown",
}

COPY_CHUNK_BYTES = 1024 * 1024  # 1 MiB

_SAFE_SUFFIX = re.compile(r"^\.[A-Za-z0-9]{1,16}$")


class UploadTooLarge(Exception):
    """Raised when an upload exceeds the configured byte limit."""

    def __init__(self, max_bytes: int):
        super().__init__(f"Upload exceeds {max_bytes} bytes")
        self.max_bytes = max_bytes


@dataclass(frozen=True)
class StoredUpload:
    filename: str
    file_path: str
    size: int


def _file_ext(filename: str) -> str:
    return Path(filename).suffix.lower()


def _base_mime(content_type: Optional[str]) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_allowed_file(filename: Optional[str], content_type: Optional[str]) -> bool:
    """
    Accept the upload if EITHER the extension OR the declared content type
    is on the allow-list.

    Browsers report content types inconsistently, so a known extension is
    enough on its own, and so is a known content type.
    """
    ext_ok = _file_ext(filename or "") in ALLOWED_EXTENSIONS
    mime_ok = _base_mime(content_type) in ALLOWED_MIME_TYPES
    return ext_ok or mime_ok


def stored_filename(original_name: Optional[str]) -> str:
    """
    Random name for the on-disk copy, keeping the original extension.

    Nothing but the suffix of the user's filename is used, and only when it
    is a plain alphanumeric extension.
    """
    suffix = Path(original_name or "").suffix
    if not _SAFE_SUFFIX.match(suffix):
        suffix = ""
    return uuid.uuid4().hex + suffix


def _copy_with_limit(src: BinaryIO, dest: Path, max_bytes: int) -> int:
    written = 0
    try:
        with dest.open("xb") as out:
            while True:
                chunk = src.read(COPY_CHUNK_BYTES)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLarge(max_bytes)
                out.write(chunk)
    except BaseException:
        dest.unlink(missing_ok=True)
        raise
    return written


async def save_upload(
    src: BinaryIO,
    original_name: Optional[str],
    upload_dir: str,
    max_bytes: int,
) -> StoredUpload:
    """
    Write an upload stream into ``upload_dir`` under a generated name.

    Raises ``UploadTooLarge`` (after removing the partial file) when the
    stream is longer than ``max_bytes``.
    """
    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)

    name = stored_filename(original_name)
    dest = directory / name
    src.seek(0)
    size = await asyncio.to_thread(_copy_with_limit, src, dest, max_bytes)

    logger.info(f"Stored upload {original_name!r} as {name} ({size} bytes)")
    return StoredUpload(filename=name, file_path=str(dest), size=size)


def resolve_stored_file(upload_dir: str, filename: str) -> Optional[Path]:
    """
    Map a stored filename to its path, or None if there is no such file
    directly inside ``upload_dir``.
    """
    if not filename or filename in (".", "..") or "/" in filename or "\\" in filename:
        return None

    directory = Path(upload_dir).resolve()
    path = (directory / filename).resolve()
    if path.parent != directory or not path.is_file():
        return None
    return path


def discard_upload(file_path: str) -> None:
    """Best-effort removal of a stored file whose metadata insert failed."""
    try:
        Path(file_path).unlink(missing_ok=True)
    except OSError:
        logger.exception(f"Could not remove orphaned upload {file_path}")
