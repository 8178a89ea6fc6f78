"""
LawDesk Backend — Image Storage Unit Tests
============================================

What:  Validation (extension, content type, size), storage, removal and
       path resolution for post images.
"""

import pytest
from unittest.mock import MagicMock, patch

from lawdesk.exceptions import FileStorageError, ValidationError
from lawdesk.services.image_storage import ImageStorage


class TestImageValidation:
    """Tests for the validation helpers."""

    def setup_method(self):
        self.storage = ImageStorage(upload_dir="./unused-uploads", max_size=1000)

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("filename", ["cover.png", "cover.jpg", "cover.JPEG", "cover.webp", "c.gif"])
    def test_allowed_extensions(self, filename):
        assert self.storage.validate_extension(filename).startswith(".")

    @pytest.mark.parametrize("filename", ["brief.pdf", "malware.exe", "noextension"])
    def test_rejected_extensions(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.storage.validate_extension(filename)

    # ── Content Type Validation ───────────────────────────────────────────

    def test_image_content_type_accepted(self):
        self.storage.validate_content_type("image/png")
        self.storage.validate_content_type("IMAGE/JPEG")

    def test_missing_content_type_accepted(self):
        self.storage.validate_content_type(None)

    def test_non_image_content_type_rejected(self):
        with pytest.raises(ValidationError, match="not supported"):
            self.storage.validate_content_type("application/pdf")

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_within_limit(self):
        self.storage.validate_size(1000)

    def test_size_over_limit(self):
        with pytest.raises(ValidationError, match="too large"):
            self.storage.validate_size(1001)

    def test_empty_file(self):
        with pytest.raises(ValidationError, match="empty"):
            self.storage.validate_size(0)


class TestImageStore:
    """Tests for writing, resolving and removing stored images."""

    @pytest.mark.asyncio
    async def test_store_writes_file_and_returns_reference(self, image_storage, upload_dir, sample_image_bytes):
        reference = await image_storage.store("cover.PNG", sample_image_bytes, "image/png")

        assert reference.startswith("uploads/image-")
        assert reference.endswith(".png")
        stored = upload_dir / reference.split("/", 1)[1]
        assert stored.read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_store_does_not_use_client_filename(self, image_storage, sample_image_bytes):
        reference = await image_storage.store("../../etc/passwd.png", sample_image_bytes)
        assert "passwd" not in reference
        assert ".." not in reference

    @pytest.mark.asyncio
    async def test_store_rejects_before_writing(self, image_storage, upload_dir):
        with pytest.raises(ValidationError):
            await image_storage.store("cover.png", b"")
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_store_os_error_becomes_file_storage_error(self, image_storage, sample_image_bytes):
        with patch("lawdesk.services.image_storage.aiofiles.open", new=MagicMock(side_effect=OSError("disk full"))):
            with pytest.raises(FileStorageError):
                await image_storage.store("cover.png", sample_image_bytes)

    @pytest.mark.asyncio
    async def test_remove_deletes_stored_file(self, image_storage, upload_dir, sample_image_bytes):
        reference = await image_storage.store("cover.png", sample_image_bytes)
        await image_storage.remove(reference)
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_remove_missing_file_is_silent(self, image_storage):
        await image_storage.remove("uploads/image-does-not-exist.png")

    def test_resolve_inside_upload_dir(self, image_storage, upload_dir):
        assert image_storage.resolve("image-1.png") == (upload_dir / "image-1.png").resolve()

    def test_resolve_rejects_traversal(self, image_storage):
        with pytest.raises(ValidationError, match="Invalid file path"):
            image_storage.resolve("../secrets.txt")
