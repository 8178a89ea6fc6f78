"""
LawDesk Backend — Image Storage Service
=========================================

What:  Validates and stores the optional image attached to a new post.
How:   Checks extension, declared content type and size, then writes the bytes
       to UPLOAD_DIR with a generated filename (async I/O via aiofiles).
Who:   Called by PostStore.create() before the post row is inserted; the
       returned reference ("uploads/<filename>") is what the post persists.
Why:   Only generated names touch the filesystem: a client filename can neither
       collide with another upload nor point outside UPLOAD_DIR.

Stored files are served back by GET /uploads/{path} (routes/uploads.py).

Filename format:
    image-<epoch millis>-<8 hex chars><ext>     e.g. image-1700000000000-1f2e3d4c.png
    No part of the client's filename is used except its extension.
"""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles

from lawdesk.exceptions import FileStorageError, ValidationError
from lawdesk.services.slug import now_millis

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/gif",
    "image/webp",
}

# Prefix of every reference returned by store(); matches the static route
REFERENCE_PREFIX = "uploads"


@dataclass
class ImageUpload:
    """An uploaded image already read into memory by the route."""
    filename: str
    content: bytes
    content_type: Optional[str] = None


class ImageStorage:
    """
    Manages validation, storage and removal of post images.

    Lifecycle of an uploaded image:
        1. Route reads the multipart `image` field
        2. store() validates extension → content type → size
        3. Bytes are written to UPLOAD_DIR/<generated name>
        4. Reference "uploads/<generated name>" is returned and persisted
        5. If the post insert fails afterwards, remove() deletes the file
    """

    def __init__(self, upload_dir: str, max_size: int):
        self.upload_dir = Path(upload_dir).resolve()
        self.max_size = max_size

    def validate_extension(self, filename: str) -> str:
        """
        Returns the normalized extension (lowercase with dot).
        Raises ValidationError if the extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_content_type(self, content_type: Optional[str]) -> None:
        """Rejects uploads whose declared content type is not an allowed image type."""
        if content_type is None:
            return
        if content_type.lower() not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                message=f"Content type '{content_type}' is not supported. The file must be an image.",
                field="image",
                context={"content_type": content_type},
            )

    def validate_size(self, actual_size: int) -> None:
        """Rejects empty files and files above the configured maximum."""
        if actual_size == 0:
            raise ValidationError(
                message="Uploaded image is empty.",
                field="image",
            )
        if actual_size > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise ValidationError(
                message=(
                    f"Image size ({actual_size / (1024 * 1024):.1f}MB) "
                    f"is too large; maximum is {max_mb:.0f}MB."
                ),
                field="image",
                context={"max_size": self.max_size, "actual_size": actual_size},
            )

    def _generate_filename(self, extension: str) -> str:
        return f"image-{now_millis()}-{uuid.uuid4().hex[:8]}{extension}"

    async def store(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Validate and write an uploaded image.

        Returns:
            Reference to persist on the post, e.g. "uploads/image-1700000000000-1f2e3d4c.png"

        Raises:
            ValidationError: unsupported type, empty or oversized file
            FileStorageError: the file could not be written
        """
        ext = self.validate_extension(filename)
        self.validate_content_type(content_type)
        self.validate_size(len(content))

        stored_name = self._generate_filename(ext)
        absolute_path = self.upload_dir / stored_name

        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes)", stored_name, len(content))
        return f"{REFERENCE_PREFIX}/{stored_name}"

    def resolve(self, relative_path: str) -> Path:
        """
        Map a path below /uploads to a file inside UPLOAD_DIR.

        Raises ValidationError for paths escaping UPLOAD_DIR (../ traversal).
        """
        full_path = (self.upload_dir / relative_path).resolve()
        if full_path != self.upload_dir and self.upload_dir not in full_path.parents:
            raise ValidationError(message="Invalid file path", field="path")
        return full_path

    async def remove(self, reference: str) -> None:
        """
        Delete a stored image by its reference (best effort).

        Used when the post insert fails after the image was written. Failures
        are logged and not raised; the original error is what the caller sees.
        """
        relative = reference
        prefix = f"{REFERENCE_PREFIX}/"
        if relative.startswith(prefix):
            relative = relative[len(prefix):]
        try:
            path = self.resolve(relative)
            if path.is_file():
                os.remove(path)
                logger.info("Removed orphaned image: %s", path.name)
        except (OSError, ValidationError) as e:
            logger.warning("Failed to remove image %s: %s", reference, str(e))
