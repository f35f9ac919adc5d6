"""
RoomStager Backend — File Storage Service
===========================================

What:  Validates image uploads and writes them to the storage volume.
Why:   Areas, hotspots, library items and the project's direct image all carry
       a URL and a storage id produced here; nothing else touches the disk.
How:   Extension + declared content type + size checks, then libmagic sniffs
       the header bytes, which must match the extension. An async write puts
       the file in a date-organized directory under a generated `img_...` name.
Who:   Called by ProjectService before the graph mutation that records the file.

Storage layout:
    <storage_root>/
    └── staging/
        └── 2024/
            └── 06/
                └── 10/
                    ├── img_1718000000000_k3j9x0q2a.png
                    └── img_1718000000123_0z8y7x6w5.jpg

    The relative path (`staging/2024/06/10/img_....png`) is the storage id; the
    public URL is `<files_url_prefix>/<storage id>` and is served by the files
    route.

Lifetime:
    Files are never deleted. Removing an area, hotspot, library item or a whole
    project leaves its files in place, and a file written for a request whose
    document save later fails stays orphaned.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import magic

from app.config import settings
from app.exceptions import FileStorageError, NotFoundError, ValidationError
from app.schemas.document import StoredFile
from app.services import identifiers

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
EXTENSION_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}

ALLOWED_EXTENSIONS = set(EXTENSION_MIME_TYPES)
ALLOWED_MIME_TYPES = set(EXTENSION_MIME_TYPES.values())

STORAGE_FOLDER = "staging"


@dataclass
class IncomingFile:
    """An upload as read from the multipart request, before validation."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


class FileService:
    """
    Manages validation and storage of uploaded images.

    Validation order:
        1. Extension check (no content needed)
        2. Declared content type, when given, must be image/*
        3. Size: non-empty and under the configured maximum
        4. Sniffed MIME type must be allowed and agree with the extension
        5. Write to disk
    """

    def __init__(
        self,
        storage_root: Optional[str] = None,
        url_prefix: Optional[str] = None,
        max_file_size: Optional[int] = None,
    ):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
            url_prefix: Override the public URL prefix.
            max_file_size: Override the size limit in bytes.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.url_prefix = (url_prefix or settings.files_url_prefix).rstrip("/")
        self.max_file_size = max_file_size or settings.max_file_size
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────
    def validate_extension(self, filename: str) -> str:
        """Returns the normalized (lowercase, dotted) extension."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_content_type(self, content_type: Optional[str]) -> None:
        """A declared type, when the client sends one, must be image/*."""
        declared = (content_type or "").split(";", 1)[0].strip().lower()
        if declared and not declared.startswith("image/"):
            raise ValidationError(
                message=f"Content type '{declared}' is not an image.",
                field="image",
                context={"content_type": declared},
            )

    def validate_mime_type(self, content: bytes, extension: str) -> str:
        """
        Detect the real type from the file's header bytes.

        The declared content type is never recorded; the sniffed type must be
        an allowed image type and the one the extension names (.jpg and .jpeg
        are both image/jpeg).

        Returns:
            Detected MIME type string (e.g., "image/png")
        """
        try:
            mime_type = magic.from_buffer(content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_MIME_TYPES))}"
                ),
                field="image",
                context={"detected_mime": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )

        expected = EXTENSION_MIME_TYPES[extension]
        if mime_type != expected:
            raise ValidationError(
                message=f"File content ({mime_type}) does not match its '{extension}' extension.",
                field="image",
                context={"detected_mime": mime_type, "extension": extension},
            )
        return mime_type

    def validate_size(self, size: int) -> None:
        if size <= 0:
            raise ValidationError(message="Uploaded file is empty.", field="image")
        if size > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": size},
            )

    # ── Storage ───────────────────────────────────────────────────────────
    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new upload."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        name = f"{identifiers.generate_id(identifiers.UPLOAD, 9)}{extension}"
        relative_path = f"{STORAGE_FOLDER}/{date_dir}/{name}"
        return self.storage_root / relative_path, relative_path

    async def write_file(self, content: bytes, extension: str) -> str:
        """Write already-validated bytes; returns the relative path (storage id)."""
        absolute_path, relative_path = self._generate_storage_path(extension)
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": relative_path, "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return relative_path

    def public_url(self, relative_path: str) -> str:
        return f"{self.url_prefix}/{relative_path}"

    async def store_upload(self, upload: IncomingFile) -> StoredFile:
        """
        Validate and persist one upload.

        Returns the StoredFile the graph layer copies onto the document.
        """
        ext = self.validate_extension(upload.filename)
        self.validate_content_type(upload.content_type)
        self.validate_size(upload.size)
        mime_type = self.validate_mime_type(upload.content, ext)

        relative_path = await self.write_file(upload.content, ext)
        return StoredFile(
            url=self.public_url(relative_path),
            storage_id=relative_path,
            original_name=upload.filename,
            mime_type=mime_type,
            size=upload.size,
        )

    # ── Serving ───────────────────────────────────────────────────────────
    def resolve_path(self, relative_path: str) -> Path:
        """
        Map a storage id back to a file on disk.

        Anything resolving outside the storage root, or not an existing file,
        is reported as not found.
        """
        candidate = (self.storage_root / relative_path).resolve()
        if not candidate.is_relative_to(self.storage_root) or not candidate.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return candidate

    def is_writable(self) -> bool:
        """Cheap probe used by the health check."""
        probe = self.storage_root / ".health"
        try:
            probe.write_bytes(b"ok")
            probe.unlink()
        except OSError as e:
            logger.warning("Storage root not writable: %s", str(e))
            return False
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
