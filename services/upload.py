# services/upload.py
import logging
from typing import Dict, Optional

from fastapi import UploadFile

from app.config.settings import settings
from core.errors import InternalServerError, ValidationError
from infrastructure.external.file_storage import FileStorage

logger = logging.getLogger(__name__)

ALLOWED_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


class UploadService:
    def __init__(self, storage: Optional[FileStorage] = None):
        self.storage = storage or FileStorage()
        self.max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    async def upload_image(self, file: UploadFile, uploaded_by: str) -> Dict[str, str]:
        """Store an admin-uploaded image and return its public URL.

        Args:
            file (UploadFile): The multipart file.
            uploaded_by (str): ID of the admin uploading it, for the log.

        Returns:
            Dict[str, str]: ``{"url": "/uploads/<name>"}``.

        Raises:
            ValidationError: If the type is not an allowed image or the file is empty or too large.
            InternalServerError: For unexpected errors or file system failures.
        """
        try:
            extension = ALLOWED_TYPES.get(file.content_type or "")
            if extension is None:
                raise ValidationError(f"File type {file.content_type} not allowed. "
                                      f"Allowed types: {sorted(ALLOWED_TYPES)}")

            content = await file.read()
            if not content:
                raise ValidationError("Uploaded file is empty")
            if len(content) > self.max_bytes:
                raise ValidationError(f"File size exceeds maximum limit of {settings.MAX_UPLOAD_SIZE_MB} MB")

            filename = self.storage.save_bytes(content, extension)
            url = self.storage.public_url(filename)
            logger.info(f"Image uploaded: {url} by user {uploaded_by}, size: {len(content)} bytes")
            return {"url": url}
        except (ValidationError, InternalServerError) as e:
            logger.error(f"Error in upload_image: {e.detail}, filename: {file.filename}")
            raise e
        except Exception as e:
            logger.error(f"Unexpected error in upload_image: {str(e)}, filename: {file.filename}", exc_info=True)
            raise InternalServerError(f"Failed to upload file: {str(e)}")
