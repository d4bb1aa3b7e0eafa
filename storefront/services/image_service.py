"""
Сервис для работы с изображениями каталога.

Валидация загружаемых файлов, чтение размеров через Pillow и
генерация путей (public id) в хранилище.
"""

import mimetypes
import re
import uuid
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from storefront.core.config import settings


class ImageService:
    """
    Сервис для работы с изображениями товаров и категорий.

    Обеспечивает:
    - Валидацию загружаемых файлов
    - Извлечение метаданных (размеры, формат)
    - Генерацию путей в хранилище и обратное преобразование URL -> путь
    """

    SUPPORTED_MIME_TYPES = {
        'image/jpeg', 'image/jpg', 'image/png',
        'image/webp', 'image/gif'
    }

    def __init__(self):
        self.max_file_size = settings.MAX_IMAGE_SIZE
        self.supported_formats = {
            f".{ext.strip().lower()}"
            for ext in settings.ALLOWED_IMAGE_TYPES.split(",")
            if ext.strip()
        }

    def validate_file(self, filename: str, file_size: Optional[int]) -> Tuple[bool, Optional[str]]:
        """
        Валидация загруженного файла.

        Args:
            filename: Имя файла
            file_size: Размер файла в байтах

        Returns:
            Tuple[bool, Optional[str]]: (валиден, сообщение об ошибке)
        """
        if not filename:
            return False, "No file uploaded"

        # Проверка размера файла
        if file_size is not None and file_size > self.max_file_size:
            return False, f"File size exceeds maximum allowed size of {self.max_file_size} bytes"

        # Проверка расширения файла
        file_ext = Path(filename).suffix.lower()
        if file_ext not in self.supported_formats:
            supported = ", ".join(sorted(self.supported_formats))
            return False, f"Unsupported file format: {file_ext}. Supported: {supported}"

        # Проверка MIME типа
        mime_type, _ = mimetypes.guess_type(filename)
        if mime_type not in self.SUPPORTED_MIME_TYPES:
            return False, f"Unsupported MIME type: {mime_type}"

        return True, None

    def extract_metadata(self, content: bytes) -> Optional[Dict[str, Any]]:
        """
        Прочитать размеры и формат изображения.

        Returns:
            Метаданные или None, если содержимое не является изображением
        """
        try:
            with Image.open(BytesIO(content)) as img:
                width, height = img.size
                format_name = img.format
        except (UnidentifiedImageError, OSError):
            return None
        return {
            "width": width,
            "height": height,
            "format": format_name,
            "mime_type": f"image/{format_name.lower()}" if format_name else None,
        }

    def generate_path(self, folder: str, filename: str) -> str:
        """
        Путь для сохранения: {folder}/{uuid}{ext}.

        Часть без расширения используется как public id изображения.
        """
        ext = Path(filename).suffix.lower()
        folder = folder.strip("/") or settings.UPLOAD_FOLDER
        return f"{folder}/{uuid.uuid4().hex}{ext}"

    def path_from_url(self, url: Optional[str], folder: Optional[str] = None) -> Optional[str]:
        """
        Восстановить путь в хранилище из публичного URL изображения.

        Используется при удалении категории/товара вместе с картинкой.
        Внешние URL (не из нашего хранилища) дают None.
        """
        if not url:
            return None
        folders = [folder] if folder else ["categories", "products", settings.UPLOAD_FOLDER]
        for name in folders:
            match = re.search(rf"(?:^|/)({re.escape(name)}/[^/?#]+)", url)
            if match:
                return match.group(1)
        return None


# Глобальный экземпляр сервиса
image_service = ImageService()
