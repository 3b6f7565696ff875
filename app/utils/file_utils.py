"""
File upload utilities for handling image validation and storage.
Provides common file operations and validation functions.
"""

import io
import re
import time
import uuid
from pathlib import Path
from typing import Optional
from PIL import Image, UnidentifiedImageError
import aiofiles

from app.config import get_settings
from app.utils.exceptions import ValidationError, UnsupportedFileTypeError, FileSizeExceededError

settings = get_settings()

_ALLOWED_NAME = re.compile(r"\.(jpg|jpeg|png|gif)$", re.IGNORECASE)
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileValidator:
    """Utility class for file validation operations."""

    SUPPORTED_EXTENSIONS = ['.jpg', '.jpeg', '.png', '.gif']

    # Pillow format names accepted for the extensions above
    SUPPORTED_FORMATS = {'JPEG', 'PNG', 'GIF', 'MPO'}

    @classmethod
    def validate_file_extension(cls, filename: Optional[str]) -> str:
        """
        Validate file extension.

        Args:
            filename: Name of the file

        Returns:
            Lowercase file extension

        Raises:
            ValidationError: If extension is not supported
        """
        if not filename:
            raise ValidationError("Filename is required")

        if not _ALLOWED_NAME.search(filename):
            raise UnsupportedFileTypeError(filename, cls.SUPPORTED_EXTENSIONS)

        return Path(filename).suffix.lower()

    @classmethod
    def validate_file_size(cls, filename: str, file_size: int, max_size: Optional[int] = None) -> int:
        """
        Validate file size.

        Raises:
            ValidationError: If the file is empty or exceeds the limit
        """
        if file_size <= 0:
            raise ValidationError(f"File '{filename}' is empty")

        max_allowed = max_size or settings.max_file_size
        if file_size > max_allowed:
            raise FileSizeExceededError(filename, max_allowed)

        return file_size

    @classmethod
    def validate_image_content(cls, filename: str, content: bytes) -> None:
        """
        Check that the payload decodes as an image Pillow recognises.

        Raises:
            ValidationError: If the content is not a supported image
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
                image_format = img.format
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ValidationError(f"File '{filename}' is not a valid image: {e}")

        if image_format not in cls.SUPPORTED_FORMATS:
            raise ValidationError(f"Image format '{image_format}' of '{filename}' is not supported")


class FileStorage:
    """Utility class for file storage operations."""

    def __init__(self, base_dir: Optional[Path] = None, url_prefix: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.upload_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")

    def generate_unique_filename(self, original_filename: str) -> str:
        """
        Generate a collision-resistant name that keeps the original filename.

        A nanosecond timestamp keeps names roughly ordered; the random part
        separates uploads landing in the same instant.
        """
        safe_name = _UNSAFE_CHARS.sub("_", Path(original_filename).name) or "image"
        return f"{time.time_ns()}-{uuid.uuid4().hex[:8]}-{safe_name}"

    def public_path(self, stored_name: str) -> str:
        """Reference path under which a stored file is served."""
        return f"{self.url_prefix}/{stored_name}"

    def resolve(self, public_path: str) -> Optional[Path]:
        """Map a reference path back to its file, or None if it is not one of ours."""
        prefix = f"{self.url_prefix}/"
        if not public_path.startswith(prefix):
            return None
        name = Path(public_path[len(prefix):]).name
        return self.base_dir / name if name else None

    async def save_bytes(self, content: bytes, stored_name: str) -> Path:
        """
        Write content under the given stored name.

        Raises:
            OSError: If the file cannot be written; a partial file is removed
        """
        file_path = self.base_dir / stored_name
        try:
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(content)
        except OSError:
            self.delete_file(file_path)
            raise
        return file_path

    def delete_file(self, file_path: Path) -> bool:
        """
        Delete a file from disk.

        Returns:
            True if file was deleted, False otherwise
        """
        try:
            if file_path.exists():
                file_path.unlink()
                return True
            return False
        except OSError:
            return False
