"""
Сервис для работы с хранилищами файлов.

Поддерживает локальное хранилище и Amazon S3 (или совместимые сервисы).
Обеспечивает единый интерфейс для загрузки изображений каталога
независимо от типа хранилища.
"""

import logging
import shutil
from abc import ABC, abstractmethod
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, NoCredentialsError

from storefront.core.config import settings

logger = logging.getLogger(__name__)


def _cdn_url(file_path: str) -> Optional[str]:
    if not settings.CDN_BASE_URL:
        return None
    return f"{settings.CDN_BASE_URL.rstrip('/')}/{file_path.lstrip('/')}"


class StorageProvider(ABC):
    """
    Абстрактный базовый класс для провайдеров хранилища.
    """

    @abstractmethod
    def save_file(
        self, file_path: str, file_data: BinaryIO, content_type: str = None
    ) -> bool:
        pass

    @abstractmethod
    def get_file_url(self, file_path: str) -> Optional[str]:
        pass

    @abstractmethod
    def delete_file(self, file_path: str) -> bool:
        pass

    @abstractmethod
    def file_exists(self, file_path: str) -> bool:
        pass


class LocalStorageProvider(StorageProvider):
    """
    Локальное хранилище файлов. Файлы раздаются через /static.
    """

    def __init__(self, base_path: str = None):
        self.base_path = Path(base_path or settings.STORAGE_PATH)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _resolve(self, file_path: str) -> Path:
        full_path = (self.base_path / file_path).resolve()
        # путь не должен выходить за пределы хранилища
        if self.base_path.resolve() not in full_path.parents:
            raise ValueError(f"Invalid storage path: {file_path}")
        return full_path

    def save_file(
        self, file_path: str, file_data: BinaryIO, content_type: str = None
    ) -> bool:
        try:
            full_path = self._resolve(file_path)
            full_path.parent.mkdir(parents=True, exist_ok=True)

            with open(full_path, "wb") as f:
                shutil.copyfileobj(file_data, f)

            logger.info(f"LOCAL STORAGE: File saved to {full_path}")
            return True
        except (OSError, ValueError) as e:
            logger.error(f"LOCAL STORAGE: Error saving file {file_path}: {e}")
            return False

    def get_file_url(self, file_path: str) -> Optional[str]:
        return _cdn_url(file_path) or f"/static/{file_path.lstrip('/')}"

    def delete_file(self, file_path: str) -> bool:
        try:
            full_path = self._resolve(file_path)
            if full_path.exists():
                full_path.unlink()
                return True
            return False
        except (OSError, ValueError) as e:
            logger.error(f"LOCAL STORAGE: Error deleting file {file_path}: {e}")
            return False

    def file_exists(self, file_path: str) -> bool:
        try:
            return self._resolve(file_path).exists()
        except ValueError:
            return False


class S3StorageProvider(StorageProvider):
    """
    Amazon S3 хранилище (или совместимые сервисы).
    """

    def __init__(self, bucket_name: str, region: str = None, endpoint_url: str = None):
        self.bucket_name = bucket_name
        self.region = region or "us-east-1"
        self.endpoint_url = endpoint_url or None

        config = Config(
            retries={"max_attempts": 3, "mode": "adaptive"},
            connect_timeout=10,
            read_timeout=30,
            s3={"addressing_style": "path"},
            signature_version="s3v4",
        )

        self.s3_client = boto3.client(
            "s3",
            region_name=self.region,
            endpoint_url=self.endpoint_url,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
            config=config,
        )

    def save_file(
        self, file_path: str, file_data: BinaryIO, content_type: str = None
    ) -> bool:
        try:
            extra_args = {}
            if content_type:
                extra_args["ContentType"] = content_type

            # ContentLength обязателен для MinIO
            file_data.seek(0)
            file_content = file_data.read()
            extra_args["ContentLength"] = len(file_content)

            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=file_path,
                Body=BytesIO(file_content),
                **extra_args,
            )
            logger.info(f"S3 STORAGE: Uploaded {file_path} to {self.bucket_name}")
            return True
        except (ClientError, NoCredentialsError) as e:
            logger.error(f"S3 STORAGE: Error saving file {file_path}: {e}")
            return False

    def get_file_url(self, file_path: str) -> Optional[str]:
        """Постоянный публичный URL объекта, без подписи и срока жизни."""
        cdn_url = _cdn_url(file_path)
        if cdn_url:
            return cdn_url
        key = file_path.lstrip("/")
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    def delete_file(self, file_path: str) -> bool:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=file_path)
            logger.info(f"S3 STORAGE: Deleted {file_path}")
            return True
        except (ClientError, NoCredentialsError) as e:
            logger.error(f"S3 STORAGE: Error deleting file {file_path}: {e}")
            return False

    def file_exists(self, file_path: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=file_path)
            return True
        except ClientError:
            return False


def create_storage_service() -> StorageProvider:
    """Создать провайдер по settings.STORAGE_TYPE."""
    if settings.STORAGE_TYPE == "s3":
        logger.info(f"Using S3 storage, bucket {settings.S3_BUCKET_NAME}")
        return S3StorageProvider(
            bucket_name=settings.S3_BUCKET_NAME,
            region=settings.AWS_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
        )
    logger.info(f"Using local storage at {settings.STORAGE_PATH}")
    return LocalStorageProvider()


# Глобальный экземпляр провайдера
storage_service = create_storage_service()
