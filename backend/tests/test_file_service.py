"""
CatHealth Backend — File Service Unit Tests
=============================================

What:  Upload validation (extension, content type, size), storage layout,
       path resolution for served files and cleanup.

Test Strategy:
    ✅ Image extensions accepted for photos, pdf only for documents
    ✅ Declared content type and file header must match the extension
    ✅ Size limit boundary and empty uploads
    ✅ YYYY/MM/DD/<uuid><ext> layout
    ✅ Path traversal refused when serving
"""

import re
from pathlib import Path

import pytest

from cathealth.exceptions import NotFoundError, ValidationError
from cathealth.services.file_service import DOCUMENT_TYPES, IMAGE_TYPES, FileService

MAX_SIZE = 1024 * 1024


class TestFileValidation:
    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.service = FileService(storage_root=temp_storage, max_file_size=MAX_SIZE)

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("filename", ["photo.jpg", "photo.jpeg", "photo.png", "photo.webp", "PHOTO.JPG"])
    def test_image_extensions_accepted(self, filename):
        assert self.service.validate_extension(filename, IMAGE_TYPES) == Path(filename).suffix.lower()

    @pytest.mark.parametrize("filename", ["animation.gif", "malware.exe", "noextension", "", None])
    def test_other_extensions_rejected(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(filename, IMAGE_TYPES)

    def test_pdf_only_allowed_for_documents(self):
        with pytest.raises(ValidationError):
            self.service.validate_extension("invoice.pdf", IMAGE_TYPES)
        assert self.service.validate_extension("invoice.pdf", DOCUMENT_TYPES) == ".pdf"

    # ── Content Type Validation ───────────────────────────────────────────

    def test_matching_content_type_accepted(self):
        self.service.validate_content_type("image/jpeg", ".jpg", IMAGE_TYPES)
        self.service.validate_content_type("application/pdf; charset=binary", ".pdf", DOCUMENT_TYPES)

    def test_generic_or_missing_content_type_accepted(self):
        self.service.validate_content_type(None, ".png", IMAGE_TYPES)
        self.service.validate_content_type("application/octet-stream", ".png", IMAGE_TYPES)

    def test_mismatched_content_type_rejected(self):
        with pytest.raises(ValidationError, match="does not match"):
            self.service.validate_content_type("text/html", ".png", IMAGE_TYPES)

    # ── File Header Validation ────────────────────────────────────────────

    def test_header_matching_extension_accepted(self, sample_image_bytes, sample_png_bytes, sample_pdf_bytes):
        assert self.service.validate_file_content(sample_image_bytes, ".jpg", IMAGE_TYPES) == "image/jpeg"
        assert self.service.validate_file_content(sample_png_bytes, ".png", IMAGE_TYPES) == "image/png"
        assert self.service.validate_file_content(sample_pdf_bytes, ".pdf", DOCUMENT_TYPES) == "application/pdf"

    def test_renamed_file_rejected(self, sample_pdf_bytes):
        with pytest.raises(ValidationError, match="does not match"):
            self.service.validate_file_content(sample_pdf_bytes, ".png", IMAGE_TYPES)

    @pytest.mark.asyncio
    async def test_declared_type_cannot_vouch_for_content(self, temp_storage, sample_image_bytes):
        with pytest.raises(ValidationError, match="does not match"):
            await self.service.validate_and_store(
                filename="milo.png",
                content=sample_image_bytes,
                allowed=IMAGE_TYPES,
                content_type="image/png",
            )
        assert list(Path(temp_storage).rglob("*")) == []

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_at_limit_passes(self):
        self.service.validate_size(MAX_SIZE, MAX_SIZE)

    def test_size_over_limit_rejected(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(None, MAX_SIZE + 1)

    def test_declared_size_over_limit_rejected(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(MAX_SIZE * 5, 10)

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(0, 0)

    # ── Storage ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_validate_and_store_uses_date_directories(self, temp_storage, sample_image_bytes):
        abs_path, rel_path = await self.service.validate_and_store(
            filename="milo.JPG",
            content=sample_image_bytes,
            allowed=IMAGE_TYPES,
            content_type="image/jpeg",
            content_length=len(sample_image_bytes),
        )

        assert re.fullmatch(r"\d{4}/\d{2}/\d{2}/[0-9a-f-]{36}\.jpg", rel_path)
        assert Path(abs_path).read_bytes() == sample_image_bytes
        assert Path(abs_path) == Path(temp_storage).resolve() / rel_path

    @pytest.mark.asyncio
    async def test_invalid_upload_writes_nothing(self, temp_storage):
        with pytest.raises(ValidationError):
            await self.service.validate_and_store(
                filename="script.sh", content=b"rm -rf /", allowed=DOCUMENT_TYPES
            )
        assert list(Path(temp_storage).rglob("*")) == []

    # ── Serving ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_resolve_stored_file(self, sample_image_bytes):
        _, rel_path = await self.service.store_file(sample_image_bytes, ".png")
        assert self.service.resolve(rel_path).read_bytes() == sample_image_bytes

    def test_resolve_missing_file(self):
        with pytest.raises(NotFoundError):
            self.service.resolve("2024/01/01/missing.png")

    def test_resolve_refuses_traversal(self, tmp_path):
        (tmp_path / "secret.txt").write_text("top secret")
        with pytest.raises(ValidationError):
            self.service.resolve("../secret.txt")

    # ── Cleanup ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_cleanup_relative_path(self, sample_image_bytes):
        abs_path, rel_path = await self.service.store_file(sample_image_bytes, ".png")

        await self.service.cleanup_file(rel_path)
        assert not Path(abs_path).exists()

    @pytest.mark.asyncio
    async def test_cleanup_nonexistent_file_is_quiet(self, tmp_path):
        await self.service.cleanup_file(str(tmp_path / "nonexistent.jpg"))
