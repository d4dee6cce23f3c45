"""
Unit Tests - Stored Assets
"""
import pytest

from backoffice.errors import StorageError
from backoffice.files import (
    UploadedFile,
    delete_file,
    is_icon_class,
    resolve_asset_url,
    save_file,
    save_image,
)
from backoffice.gateway.storage import LocalObjectStorage


class TestSaveFile:
    """Tests for uploads through the storage client"""

    async def test_save_image_returns_public_path(self, storage, png_file):
        path = await save_image(storage, png_file, "projects")

        assert path.startswith("/uploads/projects/")
        assert path.endswith(".png")
        assert len(path.rsplit("/", 1)[-1]) == len("a1b2c3d4e5f6.png")
        assert path.lstrip("/") in storage.objects

    async def test_save_image_rejects_mime_type(self, storage):
        pdf = UploadedFile(filename="cv.pdf", content=b"%PDF", content_type="application/pdf")
        with pytest.raises(StorageError):
            await save_image(storage, pdf, "projects")
        assert storage.objects == {}

    async def test_save_file_accepts_any_type(self, storage):
        pdf = UploadedFile(filename="cv.pdf", content=b"%PDF", content_type="application/pdf")
        path = await save_file(storage, pdf, "web-setting")
        assert path.endswith(".pdf")

    async def test_size_limit(self, storage, monkeypatch):
        from backoffice.config import get_settings

        monkeypatch.setattr(get_settings().storage, "max_file_size", 4)
        with pytest.raises(StorageError):
            await save_file(storage, UploadedFile("big.bin", b"12345"), "misc")

    async def test_previous_asset_removed(self, storage, png_file):
        first = await save_image(storage, png_file, "brand")
        second = await save_image(storage, png_file, "brand", delete_prev=first)

        assert first.lstrip("/") in storage.removed
        assert second.lstrip("/") in storage.objects

    async def test_previous_asset_failure_does_not_block(self, storage, png_file):
        storage.fail_removals = True
        path = await save_image(storage, png_file, "brand", delete_prev="/uploads/brand/old.png")
        assert path.lstrip("/") in storage.objects

    async def test_invalid_folder(self, storage, png_file):
        with pytest.raises(StorageError):
            await save_image(storage, png_file, "../etc")


class TestDeleteFile:
    """Tests for asset removal"""

    async def test_icon_classes_and_urls_ignored(self, storage):
        await delete_file(storage, "fa fa-star")
        await delete_file(storage, "https://example.com/a.png")
        assert storage.removed == []

    async def test_failure_raises(self, storage):
        storage.fail_removals = True
        with pytest.raises(StorageError):
            await delete_file(storage, "/uploads/brand/a.png")

    def test_icon_detection(self):
        assert is_icon_class("fa-solid fa-code")
        assert is_icon_class("bi bi-github")
        assert is_icon_class("material-icons")
        assert not is_icon_class("/uploads/skill/a.png")

    def test_resolve_asset_url(self):
        assert resolve_asset_url("uploads/a.png") == "/uploads/a.png"
        assert resolve_asset_url("https://cdn.test/a.png") == "https://cdn.test/a.png"
        assert resolve_asset_url(None) == ""


class TestLocalObjectStorage:
    """Tests for the filesystem storage"""

    async def test_upload_and_remove(self, tmp_path):
        local = LocalObjectStorage(root_dir=tmp_path, public_base_url="https://site.test/")

        await local.upload("uploads/brand/logo.png", b"data", "image/png")
        target = tmp_path / "uploads" / "brand" / "logo.png"
        assert target.read_bytes() == b"data"
        assert local.get_public_url("uploads/brand/logo.png") == "https://site.test/uploads/brand/logo.png"

        await local.remove(["uploads/brand/logo.png", "uploads/brand/missing.png"])
        assert not target.exists()

    async def test_rejects_parent_traversal(self, tmp_path):
        local = LocalObjectStorage(root_dir=tmp_path)
        with pytest.raises(StorageError):
            await local.upload("../outside.png", b"data")
