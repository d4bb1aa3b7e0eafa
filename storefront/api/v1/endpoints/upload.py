"""
Загрузка изображений товаров и категорий в хранилище.
"""

import logging
from io import BytesIO

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from storefront.core.auth import require_admin
from storefront.core.config import settings
from storefront.services.image_service import image_service
from storefront.services.storage_service import storage_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@router.post("")
async def upload_image(
    file: UploadFile = File(...),
    folder: str = Form(settings.UPLOAD_FOLDER),
    admin: str = Depends(require_admin),
):
    """
    Загрузить изображение.

    Args:
        file: Файл изображения (multipart)
        folder: Папка в хранилище (products или categories)

    Returns:
        dict: {"success": true, "imageUrl": ..., "publicId": ...}
    """
    if folder not in ("products", "categories", settings.UPLOAD_FOLDER):
        return _error(status.HTTP_400_BAD_REQUEST, f"Unsupported folder: {folder}")

    is_valid, error_message = image_service.validate_file(file.filename, file.size)
    if not is_valid:
        return _error(status.HTTP_400_BAD_REQUEST, error_message)

    content = await file.read()
    if len(content) > image_service.max_file_size:
        return _error(status.HTTP_400_BAD_REQUEST, "File is too large")

    metadata = image_service.extract_metadata(content)
    if metadata is None:
        return _error(status.HTTP_400_BAD_REQUEST, "File is not a valid image")

    path = image_service.generate_path(folder, file.filename)
    content_type = metadata["mime_type"] or file.content_type
    if not storage_service.save_file(path, BytesIO(content), content_type=content_type):
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload image")

    url = storage_service.get_file_url(path)
    public_id = path.rsplit(".", 1)[0]
    logger.info(
        f"Image uploaded by {admin}: {path} "
        f"({metadata['width']}x{metadata['height']}, {len(content)} bytes)"
    )
    return {
        "success": True,
        "imageUrl": url,
        "publicId": public_id,
        "width": metadata["width"],
        "height": metadata["height"],
    }
