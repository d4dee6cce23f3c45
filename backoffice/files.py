"""
Stored asset helpers.

Thin wrappers around the object storage client. Saved assets get a random
12-hex-character name under ``/uploads/<folder>/`` and are referenced by
that public path from entity rows.
"""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from typing import Optional

import structlog

from backoffice.config import get_settings
from backoffice.errors import StorageError
from backoffice.gateway.base import ObjectStorage

logger = structlog.get_logger(__name__)

ICON_CLASS_PATTERN = re.compile(r"^(fa|bi|material-icons|icon-)")
_FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9_\-/]+$")


@dataclass
class UploadedFile:
    """File payload received from a form upload."""
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        if "." not in self.filename:
            return "bin"
        return self.filename.rsplit(".", 1)[-1].lower() or "bin"


def _storage_key(public_path: str) -> str:
    return public_path.lstrip("/")


def _build_path(folder: str, file: UploadedFile) -> str:
    folder = folder.strip("/")
    if not folder or not _FOLDER_PATTERN.match(folder) or ".." in folder:
        raise StorageError(f"Invalid upload folder: {folder!r}")
    prefix = get_settings().storage.upload_prefix.strip("/")
    return f"/{prefix}/{folder}/{secrets.token_hex(6)}.{file.extension}"


async def _delete_previous(storage: ObjectStorage, delete_prev: Optional[str]) -> None:
    if not delete_prev or is_icon_class(delete_prev) or is_external_url(delete_prev):
        return
    try:
        await storage.remove([_storage_key(delete_prev)])
    except StorageError as e:
        logger.warning("Failed to delete previous asset", path=delete_prev, error=str(e))


async def save_file(
    storage: ObjectStorage,
    file: UploadedFile,
    folder: str,
    delete_prev: Optional[str] = None,
) -> str:
    """
    Upload any file and return its public path.

    Args:
        storage: Object storage client
        file: Uploaded file
        folder: Sub-folder under the upload prefix, e.g. ``web-setting``
        delete_prev: Public path of an asset to remove first (best-effort)

    Returns:
        str: Public path such as ``/uploads/web-setting/a1b2c3d4e5f6.pdf``
    """
    max_size = get_settings().storage.max_file_size
    if file.size > max_size:
        raise StorageError(f"File size exceeds {max_size // (1024 * 1024)} MB limit")

    path = _build_path(folder, file)
    await _delete_previous(storage, delete_prev)
    await storage.upload(_storage_key(path), file.content, file.content_type)
    logger.info("Saved file", path=path, size=file.size)
    return path


async def save_image(
    storage: ObjectStorage,
    file: UploadedFile,
    folder: str,
    delete_prev: Optional[str] = None,
) -> str:
    """Upload an image after checking its MIME type; see ``save_file``."""
    allowed = get_settings().storage.allowed_image_types
    if file.content_type not in allowed:
        raise StorageError(f"File type not allowed: {file.content_type}")
    return await save_file(storage, file, folder, delete_prev)


async def delete_file(storage: ObjectStorage, path: str) -> None:
    """Remove one stored asset by public path. Icon classes and URLs are ignored."""
    if not path or is_icon_class(path) or is_external_url(path):
        return
    await storage.remove([_storage_key(path)])
    logger.info("Deleted file", path=path)


delete_image = delete_file


def is_icon_class(value: Optional[str]) -> bool:
    """True for icon font classes (``fa``, ``bi``, ``material-icons``, ``icon-``)."""
    return bool(value) and bool(ICON_CLASS_PATTERN.match(value))


def is_external_url(value: Optional[str]) -> bool:
    return bool(value) and bool(re.match(r"^https?://", value, re.IGNORECASE))


def resolve_asset_url(path: Optional[str]) -> str:
    """Normalize a stored asset reference into something an ``<img>`` can use."""
    if not path:
        return ""
    if is_external_url(path):
        return path
    return path if path.startswith("/") else f"/{path}"
