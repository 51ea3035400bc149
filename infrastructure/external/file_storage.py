# infrastructure/external/file_storage.py
import logging
import os
from typing import Optional
from uuid import uuid4

from app.config.settings import settings
from core.errors import InternalServerError

logger = logging.getLogger(__name__)


class FileStorage:
    """Local disk storage for uploaded images, served under ``/uploads``."""

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = upload_dir or settings.UPLOAD_DIR

    def _ensure_dir(self) -> None:
        if not os.path.exists(self.upload_dir):
            os.makedirs(self.upload_dir, exist_ok=True)
            logger.info(f"Created upload directory: {self.upload_dir}")

    def save_bytes(self, content: bytes, extension: str) -> str:
        """Write content under a random name and return the stored file name."""
        try:
            self._ensure_dir()
            filename = f"{uuid4().hex}{extension}"
            file_path = os.path.join(self.upload_dir, filename)
            with open(file_path, "wb") as buffer:
                buffer.write(content)
            logger.info(f"File saved: {file_path}, size: {len(content)} bytes")
            return filename
        except OSError as oe:
            logger.error(f"Failed to save file: {str(oe)}", exc_info=True)
            raise InternalServerError(f"Failed to save file: {str(oe)}")

    @staticmethod
    def public_url(filename: str) -> str:
        return f"/uploads/{filename}"
