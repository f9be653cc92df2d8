"""
CatHealth Backend — File Storage Service
==========================================

What:  Upload validation, storage, cleanup and lookup for served files.
Why:   Cat photos and health record documents go through the same checks
       and land in the same storage tree.
How:   Validates extension, size, declared content type and the file
       header (python-magic), writes the bytes with aiofiles under a
       date-organized directory with a UUID filename, and returns the
       relative path stored in the database.

Upload kinds:
    IMAGE_TYPES     → cat photos (png, jpg, jpeg, webp)
    DOCUMENT_TYPES  → health record attachments (images + pdf)

Directory Structure:
    storage/
    └── 2024/
        └── 01/
            └── 15/
                ├── a1b2c3d4-5678-....jpg
                └── e5f6g7h8-9012-....pdf

Served back at GET /api/files/<relative path>; resolve() refuses any
path that escapes storage_root.
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Tuple

import aiofiles

from cathealth.config import Settings, settings
from cathealth.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Extension → content types declared by browsers or detected from the header
IMAGE_TYPES: Dict[str, FrozenSet[str]] = {
    ".png": frozenset({"image/png"}),
    ".jpg": frozenset({"image/jpeg", "image/jpg", "image/pjpeg"}),
    ".jpeg": frozenset({"image/jpeg", "image/jpg", "image/pjpeg"}),
    ".webp": frozenset({"image/webp", "image/x-webp"}),
}

DOCUMENT_TYPES: Dict[str, FrozenSet[str]] = {
    **IMAGE_TYPES,
    ".pdf": frozenset({"application/pdf"}),
}

# Declared by some clients for any binary part; the extension check still applies
GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}

# Enough of the header for every signature above
SNIFF_BYTES = 2048


class FileService:
    """
    Manages the upload lifecycle.

        1. validate_extension()     reject unsupported file types
        2. validate_size()          Content-Length first, then actual bytes
        3. validate_content_type()  declared type must match the extension
        4. validate_file_content()  leading bytes must match the extension
        5. store_file()             YYYY/MM/DD/<uuid><ext>
        6. cleanup_file()           best-effort removal of replaced/orphaned files
    """

    def __init__(self, storage_root: Optional[str] = None, max_file_size: Optional[int] = None):
        """
        Args:
            storage_root:  Override settings.storage_root (used in tests)
            max_file_size: Override settings.max_file_size, in bytes
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.max_file_size = max_file_size or settings.max_file_size
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    @classmethod
    def from_settings(cls, config: Settings) -> "FileService":
        return cls(storage_root=config.storage_root, max_file_size=config.max_file_size)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: Optional[str], allowed: Dict[str, FrozenSet[str]]) -> str:
        """Returns the lower-cased extension (with dot) or raises ValidationError."""
        ext = Path(filename or "").suffix.lower()
        if ext not in allowed:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(allowed))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(allowed)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Checks the declared Content-Length (before trusting the body) and the
        actual byte count. Empty uploads are rejected too.
        """
        max_mb = self.max_file_size / (1024 * 1024)

        if content_length and content_length > self.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > self.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty", field="file")

    def validate_content_type(
        self,
        content_type: Optional[str],
        extension: str,
        allowed: Dict[str, FrozenSet[str]],
    ) -> None:
        """Rejects a declared content type that contradicts the extension."""
        declared = (content_type or "").split(";")[0].strip().lower()
        if declared in GENERIC_CONTENT_TYPES:
            return
        if declared not in allowed[extension]:
            raise ValidationError(
                message=f"Content type '{declared}' does not match a '{extension}' file.",
                field="file",
                context={"content_type": declared, "extension": extension},
            )

    def validate_file_content(
        self,
        content: bytes,
        extension: str,
        allowed: Dict[str, FrozenSet[str]],
    ) -> str:
        """
        Checks the leading bytes against the extension.

        python-magic matches the file header against known signatures
        (JPEG starts with FF D8 FF, PDF with %PDF), so a renamed file is
        refused even when the client declares a matching content type.

        Returns:
            Detected content type, e.g. "image/jpeg"
        """
        import magic

        try:
            detected = magic.from_buffer(content[:SNIFF_BYTES], mime=True)
        except magic.MagicException as e:
            logger.error("Content type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if detected not in allowed[extension]:
            raise ValidationError(
                message=f"File content ({detected}) does not match a '{extension}' file.",
                field="file",
                context={"detected": detected, "extension": extension},
            )
        return detected

    # ── Storage ───────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new YYYY/MM/DD/<uuid><ext> file."""
        now = datetime.now(timezone.utc)
        relative_path = f"{now.strftime('%Y/%m/%d')}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Writes validated bytes to disk.

        Raises:
            FileStorageError if the directory or file can't be written
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded file. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return str(absolute_path), relative_path

    async def validate_and_store(
        self,
        filename: Optional[str],
        content: bytes,
        allowed: Dict[str, FrozenSet[str]],
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """Runs every check, cheapest first, then stores. Returns (absolute, relative)."""
        ext = self.validate_extension(filename, allowed)
        self.validate_size(content_length, len(content))
        self.validate_content_type(content_type, ext, allowed)
        self.validate_file_content(content, ext, allowed)
        return await self.store_file(content, ext)

    # ── Lookup & Cleanup ──────────────────────────────────────────────────

    def absolute_path(self, relative_path: str) -> Path:
        return self.storage_root / relative_path

    def resolve(self, relative_path: str) -> Path:
        """
        Maps a /api/files/<path> request to a stored file.

        Raises:
            ValidationError for paths outside storage_root ("../../etc/passwd")
            NotFoundError for missing files
        """
        candidate = (self.storage_root / relative_path).resolve()
        if candidate != self.storage_root and self.storage_root not in candidate.parents:
            logger.warning("Rejected file path outside storage root: %s", relative_path)
            raise ValidationError(message="Invalid file path", field="path")
        if not candidate.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return candidate

    async def cleanup_file(self, file_path: str) -> None:
        """
        Removes a file if it exists. Accepts an absolute path or a path
        relative to storage_root.

        Runs as a background task after the response is sent, so failures
        are logged and not raised.
        """
        path = Path(file_path)
        if not path.is_absolute():
            path = self.absolute_path(file_path)
        try:
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))
