# routes/v1/upload.py
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from app.middleware.rate_limit import limiter
from core.auth.auth import require_admin
from core.errors import BaseError
from services.upload import UploadService

router = APIRouter()
logger = logging.getLogger(__name__)


def get_upload_service() -> UploadService:
    return UploadService()


@router.post("/image", response_model=dict, status_code=201, summary="Upload an image")
@limiter.limit("10/minute")
async def upload_image_route(
    request: Request,
    file: UploadFile = File(...),
    current_user: dict = Depends(require_admin),
    upload_service: UploadService = Depends(get_upload_service)
):
    """Upload a product or category image (admin only)."""
    try:
        return await upload_service.upload_image(file, str(current_user["_id"]))
    except BaseError as be:
        logger.error(f"Failed to upload image: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to upload image: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
