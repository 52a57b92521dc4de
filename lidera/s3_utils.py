# lidera/s3_utils.py
"""
S3 storage for employee photos.

One object per employee at employees/{companyId}/{employeeId}/photo.jpg
(under the configured app prefix). Uploading again overwrites the photo.
"""

import boto3
from botocore.exceptions import ClientError, NoCredentialsError
import logging
from functools import wraps
from io import BytesIO
from typing import Optional, Union
import threading
import time

from .config import config

logger = logging.getLogger(__name__)

PHOTO_FILENAME = "photo.jpg"
MAX_PHOTO_BYTES = 5 * 1024 * 1024
ALLOWED_PHOTO_TYPES = {"image/jpeg", "image/png", "image/webp"}


def photo_key(company_id: str, employee_id: str) -> str:
    if not company_id or not employee_id:
        raise ValueError("Empresa e colaborador são obrigatórios para a foto.")
    return f"employees/{company_id}/{employee_id}/{PHOTO_FILENAME}"


def validate_photo(content: bytes, content_type: str) -> Optional[str]:
    """Error message for an unacceptable upload, None when it is fine."""
    if content_type not in ALLOWED_PHOTO_TYPES:
        return "Formato de imagem não suportado. Use JPG, PNG ou WEBP."
    if len(content) > MAX_PHOTO_BYTES:
        return "A foto deve ter no máximo 5 MB."
    return None


# ==================== RETRY DECORATOR ====================

def with_retry(max_retries: int = 3, delay: float = 1.0, backoff: float = 2.0):
    """
    Retry S3 client errors with exponential backoff

    Args:
        max_retries: Maximum number of attempts
        delay: Initial delay between retries (seconds)
        backoff: Multiplier for delay after each retry
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None
            current_delay = delay

            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except ClientError as e:
                    last_exception = e
                    if attempt < max_retries - 1:
                        logger.warning(f"{func.__name__} attempt {attempt + 1} failed, retrying in {current_delay}s...")
                        time.sleep(current_delay)
                        current_delay *= backoff
                    else:
                        logger.error(f"{func.__name__} failed after {max_retries} attempts: {e}")

            raise last_exception
        return wrapper
    return decorator


# ==================== PHOTO STORAGE ====================

class PhotoStorage:
    """
    Employee photo storage with thread-safe singleton

    Usage:
        photos = get_photo_storage()
        url = photos.upload_photo(company_id, employee_id, uploaded.getvalue())
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        aws_config = config.get_aws_config()

        self.bucket_name = aws_config.get('bucket_name', 'lidera-skills')
        self.app_prefix = aws_config.get('app_prefix', 'lidera')
        self.region = aws_config.get('region', 'sa-east-1')

        try:
            self.s3_client = boto3.client(
                's3',
                region_name=self.region,
                aws_access_key_id=aws_config.get('access_key_id'),
                aws_secret_access_key=aws_config.get('secret_access_key')
            )
            logger.info(f"✅ S3 client initialized: {self.bucket_name}")
            self._initialized = True

        except NoCredentialsError:
            logger.error("❌ AWS credentials not found")
            raise ValueError("AWS credentials not configured")

    def _full_key(self, company_id: str, employee_id: str) -> str:
        return f"{self.app_prefix}/{photo_key(company_id, employee_id)}"

    @with_retry(max_retries=3)
    def upload_photo(
        self,
        company_id: str,
        employee_id: str,
        content: Union[bytes, BytesIO],
        content_type: str = "image/jpeg"
    ) -> Optional[str]:
        """
        Store (or replace) an employee photo.

        Returns:
            Presigned URL of the stored photo
        """
        if isinstance(content, BytesIO):
            content = content.getvalue()

        s3_key = self._full_key(company_id, employee_id)
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=s3_key,
            Body=content,
            ContentType=content_type,
            ServerSideEncryption='AES256'
        )

        logger.info(f"✅ Photo uploaded: {s3_key} ({len(content)} bytes)")
        return self.photo_url(company_id, employee_id)

    def photo_url(self, company_id: str, employee_id: str, expiry_days: int = 7) -> Optional[str]:
        try:
            return self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket_name, 'Key': self._full_key(company_id, employee_id)},
                ExpiresIn=expiry_days * 24 * 60 * 60
            )
        except ClientError as e:
            logger.error(f"Failed to generate presigned URL: {e}")
            return None

    def delete_photo(self, company_id: str, employee_id: str) -> bool:
        s3_key = self._full_key(company_id, employee_id)
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=s3_key)
            logger.info(f"✅ Photo deleted: {s3_key}")
            return True
        except ClientError as e:
            logger.error(f"Failed to delete {s3_key}: {e}")
            return False


# ==================== SINGLETON ACCESS ====================

_photo_storage = None
_photo_lock = threading.Lock()


def get_photo_storage() -> PhotoStorage:
    """Get PhotoStorage singleton instance (thread-safe)"""
    global _photo_storage

    if _photo_storage is None:
        with _photo_lock:
            if _photo_storage is None:
                _photo_storage = PhotoStorage()

    return _photo_storage


def is_photo_storage_enabled() -> bool:
    aws = config.get_aws_config()
    return bool(aws.get('access_key_id') and aws.get('bucket_name')) and config.is_feature_enabled('photo_upload')


__all__ = [
    'PhotoStorage',
    'get_photo_storage',
    'is_photo_storage_enabled',
    'photo_key',
    'validate_photo',
    'with_retry',
]
