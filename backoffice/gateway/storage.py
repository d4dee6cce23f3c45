"""
Local filesystem object storage.

Assets are written under ``root_dir`` (the publicly served directory) and
addressed by their relative path, e.g. ``uploads/projects/3f2a9c1b7d4e.png``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Sequence

import structlog

from backoffice.errors import StorageError

logger = structlog.get_logger(__name__)


def _safe_relative(path: str) -> Path:
    relative = Path(str(path).lstrip("/"))
    if not relative.parts or ".." in relative.parts:
        raise StorageError(f"Invalid storage path: {path}")
    return relative


class LocalObjectStorage:
    """Filesystem-backed implementation of the ``ObjectStorage`` contract."""

    def __init__(self, root_dir: str | Path = "./public", public_base_url: str = "") -> None:
        self._root_dir = Path(root_dir)
        self._public_base_url = public_base_url.rstrip("/")

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def _write(self, target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = target.with_suffix(f"{target.suffix}.tmp")
        try:
            with tmp_path.open("wb") as handle:
                handle.write(content)
            tmp_path.replace(target)
        except OSError as exc:
            raise StorageError(f"Failed to write {target.name} to storage") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    logger.warning("Temporary upload not removed", path=str(tmp_path))

    def _unlink(self, target: Path) -> None:
        if not target.exists():
            return
        try:
            target.unlink()
        except OSError as exc:
            raise StorageError(f"Failed to delete {target.name} from storage") from exc

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        relative = _safe_relative(path)
        await asyncio.to_thread(self._write, self._root_dir / relative, content)
        logger.debug("Stored asset", path=relative.as_posix(), size=len(content), content_type=content_type)
        return relative.as_posix()

    async def remove(self, paths: Sequence[str]) -> None:
        for path in paths:
            relative = _safe_relative(path)
            await asyncio.to_thread(self._unlink, self._root_dir / relative)
            logger.debug("Removed asset", path=relative.as_posix())

    def get_public_url(self, path: str) -> str:
        return f"{self._public_base_url}/{str(path).lstrip('/')}"
