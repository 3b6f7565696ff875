"""
Image service for storing listing image uploads.
Validates a whole batch before writing anything and returns ordered reference paths.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple
from fastapi import UploadFile
import logging

from app.config import get_settings
from app.utils.file_utils import FileValidator, FileStorage
from app.utils.exceptions import ValidationError, StorageError

settings = get_settings()
logger = logging.getLogger(__name__)


class ImageService:
    """Service for validating and storing listing images on disk."""

    def __init__(self, upload_dir: Optional[Path] = None, max_files: Optional[int] = None):
        self.storage = FileStorage(upload_dir)
        self.max_files = max_files or settings.max_images_per_listing

    async def _read_and_validate(self, files: Sequence[UploadFile]) -> List[Tuple[str, bytes]]:
        """
        Validate every file of the batch and return (filename, content) pairs.

        Raises:
            ValidationError: On the first file that fails; nothing has been written yet
        """
        if len(files) > self.max_files:
            raise ValidationError(f"A listing can have at most {self.max_files} images")

        batch = []
        for file in files:
            FileValidator.validate_file_extension(file.filename)

            await file.seek(0)
            content = await file.read()

            FileValidator.validate_file_size(file.filename, len(content))
            FileValidator.validate_image_content(file.filename, content)
            batch.append((file.filename, content))

        return batch

    async def store(self, files: Sequence[UploadFile]) -> List[str]:
        """
        Persist uploaded images and return their reference paths in input order.

        The first returned path is the listing's cover image.

        Args:
            files: Uploaded image files

        Returns:
            Reference paths such as "/uploads/<stored name>"

        Raises:
            ValidationError: If any file is not an allowed image; no file is written
            StorageError: If writing fails; files already written are removed
        """
        batch = await self._read_and_validate(files)

        written: List[Path] = []
        paths: List[str] = []
        try:
            for filename, content in batch:
                stored_name = self.storage.generate_unique_filename(filename)
                written.append(await self.storage.save_bytes(content, stored_name))
                paths.append(self.storage.public_path(stored_name))
        except OSError as e:
            logger.error(f"Failed to store image batch: {e}", exc_info=True)
            for file_path in written:
                self.storage.delete_file(file_path)
            raise StorageError("Failed to store uploaded images")

        logger.info(f"Stored {len(paths)} images")
        return paths

    def discard(self, paths: Sequence[str]) -> int:
        """
        Remove stored files for the given reference paths.

        Missing files and foreign paths are skipped.

        Returns:
            Number of files deleted
        """
        deleted = 0
        for public_path in paths:
            file_path = self.storage.resolve(public_path)
            if file_path is not None and self.storage.delete_file(file_path):
                deleted += 1
        if deleted != len(paths):
            logger.warning(f"Discarded {deleted} of {len(paths)} stored images")
        return deleted
