"""
Local disk storage for template thumbnails and asset files.
"""

import hashlib
import logging
import os
import re
import secrets
from typing import Optional

from fastapi import UploadFile

from statusmaker.core.config import settings
from statusmaker.core.exceptions import FileUploadError

logger = logging.getLogger(__name__)

THUMBNAIL_FOLDER = "templates/thumbnails"
ASSET_FOLDER = "assets"


def _safe_filename(filename: str) -> str:
    name = os.path.basename(filename or "upload")
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._")
    return name or "upload"


class StorageService:
    """
    Stores uploaded files under UPLOAD_DIR and hands back paths relative to it.

    Relative paths are what gets persisted (Template.thumbnail_url,
    Asset.file_path), so the upload root can move without a data migration.
    """

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = upload_dir or settings.UPLOAD_DIR

    def read_upload(self, file: UploadFile, max_size_mb: int) -> bytes:
        """
        Read an uploaded file fully, enforcing a size cap.

        Raises:
            FileUploadError: If the file is empty or too large
        """
        content = file.file.read()
        if not content:
            raise FileUploadError("Empty file uploaded")

        max_bytes = max_size_mb * 1024 * 1024
        if len(content) > max_bytes:
            raise FileUploadError(
                f"File '{file.filename}' is {len(content)} bytes; the limit is {max_size_mb} MB"
            )
        return content

    def save(self, content: bytes, filename: str, folder: str) -> str:
        """
        Write content to disk.

        Every call gets its own path (content hash plus a random token), so
        records never share a file and deleting one cannot remove another.

        Returns:
            Path relative to the upload directory
        """
        file_hash = hashlib.sha256(content).hexdigest()
        relative_path = f"{folder}/{file_hash[:8]}_{secrets.token_hex(4)}_{_safe_filename(filename)}"
        absolute_path = self.absolute_path(relative_path)

        try:
            os.makedirs(os.path.dirname(absolute_path), exist_ok=True)
            with open(absolute_path, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"File write failed for {relative_path}: {e}")
            raise FileUploadError(f"Failed to store file: {str(e)}")

        logger.info(f"Stored file: {filename} → {relative_path} (size: {len(content)} bytes)")
        return relative_path

    def absolute_path(self, relative_path: str) -> str:
        root = os.path.abspath(self.upload_dir)
        path = os.path.abspath(os.path.join(root, relative_path))
        if os.path.commonpath([root, path]) != root:
            raise FileUploadError(f"Path escapes the upload directory: {relative_path}")
        return path

    def exists(self, relative_path: Optional[str]) -> bool:
        if not relative_path:
            return False
        return os.path.isfile(self.absolute_path(relative_path))

    def delete(self, relative_path: Optional[str]) -> bool:
        """
        Best-effort delete. Failures are logged, never raised.

        Returns:
            True if a file was removed
        """
        if not relative_path:
            return False

        try:
            path = self.absolute_path(relative_path)
            if os.path.exists(path):
                os.remove(path)
                logger.info(f"Deleted stored file: {relative_path}")
                return True
        except (OSError, FileUploadError) as e:
            logger.warning(f"Failed to delete stored file {relative_path}: {e}")
        return False
