import logging
from functools import lru_cache

import urllib3
from minio import Minio
from minio.error import S3Error

from .config import settings

logger = logging.getLogger("photobox")


class StorageError(Exception):
    """Raised when the object store rejects or fails a request."""


class ObjectStore:
    def __init__(self, client: Minio, bucket: str):
        self.client = client
        self.bucket = bucket

    def ensure_bucket(self) -> None:
        try:
            if not self.client.bucket_exists(bucket_name=self.bucket):
                self.client.make_bucket(bucket_name=self.bucket)
                logger.info(f"Bucket '{self.bucket}' created successfully")
            else:
                logger.info(f"Bucket '{self.bucket}' already exists")
        except S3Error as e:
            logger.error(f"MinIO error: {e}")
            raise StorageError(f"Failed to initialize MinIO bucket: {e}") from e

    def put_file(self, key: str, path: str, content_type: str = "application/octet-stream") -> str:
        try:
            self.client.fput_object(
                bucket_name=self.bucket,
                object_name=key,
                file_path=path,
                content_type=content_type,
            )
        except Exception as e:
            logger.error("MinIO upload failed key=%s err=%s", key, e)
            raise StorageError(f"Failed to store object {key}") from e
        logger.info("MinIO upload ok key=%s", key)
        return key

    def get(self, key: str):
        """Open the object for streaming. Caller must close() and release_conn()."""
        try:
            return self.client.get_object(bucket_name=self.bucket, object_name=key)
        except Exception as e:
            logger.error("MinIO read failed key=%s err=%s", key, e)
            raise StorageError(f"Failed to read object {key}") from e

    def ping(self) -> None:
        try:
            self.client.list_buckets()
        except Exception as e:
            raise StorageError(str(e)) from e


@lru_cache
def get_object_store() -> ObjectStore:
    http_client = urllib3.PoolManager(
        timeout=urllib3.Timeout(
            connect=settings.MINIO_TIMEOUT_SECONDS,
            read=settings.MINIO_TIMEOUT_SECONDS,
        ),
        retries=urllib3.Retry(total=0),
    )
    client = Minio(
        settings.MINIO_ENDPOINT,
        access_key=settings.MINIO_ACCESS_KEY,
        secret_key=settings.MINIO_SECRET_KEY,
        secure=settings.MINIO_SECURE,
        region=settings.MINIO_REGION,
        http_client=http_client,
    )
    return ObjectStore(client, settings.MINIO_BUCKET)
