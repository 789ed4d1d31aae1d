"""Blob storage service with S3/local backend support.

Uploaded media bytes live outside the database. The rest of the app only
sees an opaque object path: "store bytes under a path" and "read bytes by
path". Paths are built as projects/{project_id}/files/{file_id}/{filename}.

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log all exceptions with full stack trace and context
- Include the object path in all storage logs
- Add timing logs for operations >1 second
"""

import asyncio
import hashlib
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from proofpin.core.config import get_settings
from proofpin.core.logging import get_logger, storage_logger

logger = get_logger(__name__)

SLOW_OPERATION_THRESHOLD_MS = 1000


class StorageError(Exception):
    """Base exception for storage errors."""

    def __init__(self, message: str, object_path: str | None = None) -> None:
        super().__init__(message)
        self.object_path = object_path


class FileTooLargeError(StorageError):
    """Raised when an upload exceeds the maximum size."""

    def __init__(self, size: int, max_size: int) -> None:
        super().__init__(
            f"File size ({size:,} bytes) exceeds maximum allowed ({max_size:,} bytes)"
        )
        self.size = size
        self.max_size = max_size


class ObjectNotFoundError(StorageError):
    """Raised when no object is stored under the requested path."""

    def __init__(self, object_path: str) -> None:
        super().__init__(f"Object not found: {object_path}", object_path=object_path)


@dataclass
class StoredObject:
    """Result of a successful upload."""

    object_path: str
    size_bytes: int
    content_type: str
    backend: str
    checksum: str


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Short backend identifier used in logs."""

    @abstractmethod
    async def put(self, object_path: str, content: bytes, content_type: str) -> None:
        """Store content under object_path, replacing anything there."""

    @abstractmethod
    async def get(self, object_path: str) -> bytes:
        """Return the bytes at object_path.

        Raises:
            ObjectNotFoundError: If nothing is stored there
        """

    @abstractmethod
    async def delete(self, object_path: str) -> bool:
        """Remove the object. Returns False if it did not exist."""

    @abstractmethod
    async def exists(self, object_path: str) -> bool:
        """Check whether an object is stored under object_path."""


class LocalStorageBackend(StorageBackend):
    """Local filesystem storage backend."""

    def __init__(self, base_path: str) -> None:
        self._base_path = Path(base_path).resolve()
        self._base_path.mkdir(parents=True, exist_ok=True)
        logger.debug(
            "LocalStorageBackend initialized",
            extra={"base_path": str(self._base_path)},
        )

    @property
    def backend_name(self) -> str:
        return "local"

    def _resolve(self, object_path: str) -> Path:
        path = (self._base_path / object_path).resolve()
        if not path.is_relative_to(self._base_path):
            raise StorageError(
                "Object path escapes the storage directory", object_path=object_path
            )
        return path

    async def put(self, object_path: str, content: bytes, content_type: str) -> None:
        path = self._resolve(object_path)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        await asyncio.to_thread(_write)

    async def get(self, object_path: str) -> bytes:
        path = self._resolve(object_path)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            raise ObjectNotFoundError(object_path) from e

    async def delete(self, object_path: str) -> bool:
        path = self._resolve(object_path)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        return True

    async def exists(self, object_path: str) -> bool:
        return await asyncio.to_thread(self._resolve(object_path).is_file)


class S3StorageBackend(StorageBackend):
    """AWS S3 (or S3-compatible) storage backend."""

    def __init__(
        self,
        bucket_name: str,
        region: str = "us-east-1",
        prefix: str = "",
        endpoint_url: str | None = None,
    ) -> None:
        self._bucket_name = bucket_name
        self._region = region
        self._prefix = prefix.strip("/")
        self._endpoint_url = endpoint_url
        self._client: Any = None

        logger.debug(
            "S3StorageBackend initialized",
            extra={
                "bucket_name": self._bucket_name,
                "region": self._region,
                "prefix": self._prefix,
            },
        )

    @property
    def backend_name(self) -> str:
        return "s3"

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = boto3.client(
                "s3", region_name=self._region, endpoint_url=self._endpoint_url
            )
        return self._client

    def _key(self, object_path: str) -> str:
        return f"{self._prefix}/{object_path}" if self._prefix else object_path

    @staticmethod
    def _is_missing(error: ClientError) -> bool:
        code = error.response.get("Error", {}).get("Code", "")
        return code in {"NoSuchKey", "404", "NotFound"}

    async def put(self, object_path: str, content: bytes, content_type: str) -> None:
        client = self._get_client()
        try:
            await asyncio.to_thread(
                client.put_object,
                Bucket=self._bucket_name,
                Key=self._key(object_path),
                Body=content,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(
                f"Failed to store object in S3: {e}", object_path=object_path
            ) from e

    async def get(self, object_path: str) -> bytes:
        client = self._get_client()
        try:
            response = await asyncio.to_thread(
                client.get_object,
                Bucket=self._bucket_name,
                Key=self._key(object_path),
            )
            return await asyncio.to_thread(response["Body"].read)
        except ClientError as e:
            if self._is_missing(e):
                raise ObjectNotFoundError(object_path) from e
            raise StorageError(
                f"Failed to read object from S3: {e}", object_path=object_path
            ) from e
        except BotoCoreError as e:
            raise StorageError(
                f"Failed to read object from S3: {e}", object_path=object_path
            ) from e

    async def delete(self, object_path: str) -> bool:
        if not await self.exists(object_path):
            return False
        client = self._get_client()
        try:
            await asyncio.to_thread(
                client.delete_object,
                Bucket=self._bucket_name,
                Key=self._key(object_path),
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(
                f"Failed to delete object from S3: {e}", object_path=object_path
            ) from e
        return True

    async def exists(self, object_path: str) -> bool:
        client = self._get_client()
        try:
            await asyncio.to_thread(
                client.head_object,
                Bucket=self._bucket_name,
                Key=self._key(object_path),
            )
        except ClientError as e:
            if self._is_missing(e):
                return False
            raise StorageError(
                f"Failed to check object in S3: {e}", object_path=object_path
            ) from e
        return True


class StorageService:
    """Validates uploads and delegates byte storage to a backend."""

    def __init__(self, backend: StorageBackend, max_file_size: int) -> None:
        self._backend = backend
        self._max_file_size = max_file_size

        logger.info(
            "StorageService initialized",
            extra={
                "backend": self._backend.backend_name,
                "max_file_size_bytes": self._max_file_size,
            },
        )

    @property
    def backend_name(self) -> str:
        return self._backend.backend_name

    @property
    def max_file_size(self) -> int:
        return self._max_file_size

    @staticmethod
    def build_object_path(project_id: str, file_id: str, filename: str) -> str:
        """Key format: projects/{project_id}/files/{file_id}/{filename}."""
        return f"projects/{project_id}/files/{file_id}/{filename}"

    async def upload(
        self, object_path: str, content: bytes, content_type: str
    ) -> StoredObject:
        """Store an upload after checking its size.

        Raises:
            FileTooLargeError: If content exceeds the configured maximum
            StorageError: If the backend fails
        """
        size = len(content)
        if size > self._max_file_size:
            logger.warning(
                "File size validation failed",
                extra={
                    "object_path": object_path,
                    "size_bytes": size,
                    "max_size_bytes": self._max_file_size,
                },
            )
            raise FileTooLargeError(size, self._max_file_size)

        start_time = time.monotonic()
        try:
            await self._backend.put(object_path, content, content_type)
        except StorageError as e:
            storage_logger.failure("put", object_path, self.backend_name, e)
            raise
        except OSError as e:
            storage_logger.failure("put", object_path, self.backend_name, e)
            raise StorageError(
                f"Failed to store object: {e}", object_path=object_path
            ) from e

        self._log_timing("put", object_path, start_time, size)
        return StoredObject(
            object_path=object_path,
            size_bytes=size,
            content_type=content_type,
            backend=self.backend_name,
            checksum=hashlib.md5(content).hexdigest(),
        )

    async def download(self, object_path: str) -> bytes:
        """Read an object's bytes.

        Raises:
            ObjectNotFoundError: If nothing is stored there
            StorageError: If the backend fails
        """
        start_time = time.monotonic()
        try:
            content = await self._backend.get(object_path)
        except ObjectNotFoundError:
            raise
        except StorageError as e:
            storage_logger.failure("get", object_path, self.backend_name, e)
            raise
        except OSError as e:
            storage_logger.failure("get", object_path, self.backend_name, e)
            raise StorageError(
                f"Failed to read object: {e}", object_path=object_path
            ) from e

        self._log_timing("get", object_path, start_time, len(content))
        return content

    async def delete(self, object_path: str) -> bool:
        """Remove an object. Returns False if it was already gone."""
        start_time = time.monotonic()
        try:
            deleted = await self._backend.delete(object_path)
        except StorageError as e:
            storage_logger.failure("delete", object_path, self.backend_name, e)
            raise
        except OSError as e:
            storage_logger.failure("delete", object_path, self.backend_name, e)
            raise StorageError(
                f"Failed to delete object: {e}", object_path=object_path
            ) from e

        self._log_timing("delete", object_path, start_time)
        return deleted

    async def exists(self, object_path: str) -> bool:
        return await self._backend.exists(object_path)

    def _log_timing(
        self,
        operation: str,
        object_path: str,
        start_time: float,
        size_bytes: int | None = None,
    ) -> None:
        duration_ms = (time.monotonic() - start_time) * 1000
        storage_logger.operation(
            operation, object_path, duration_ms, self.backend_name, size_bytes
        )
        if duration_ms > SLOW_OPERATION_THRESHOLD_MS:
            logger.warning(
                f"Slow storage {operation}",
                extra={
                    "object_path": object_path,
                    "backend": self.backend_name,
                    "duration_ms": round(duration_ms, 2),
                    "threshold_ms": SLOW_OPERATION_THRESHOLD_MS,
                },
            )


def _backend_from_settings() -> StorageBackend:
    settings = get_settings()
    if settings.storage_backend == "s3":
        if not settings.storage_s3_bucket:
            raise StorageError("STORAGE_BACKEND=s3 requires STORAGE_S3_BUCKET")
        logger.info(
            "Using S3 storage backend",
            extra={"bucket": settings.storage_s3_bucket},
        )
        return S3StorageBackend(
            bucket_name=settings.storage_s3_bucket,
            region=settings.storage_s3_region,
            prefix=settings.storage_s3_prefix,
            endpoint_url=settings.storage_s3_endpoint_url,
        )

    logger.info(
        "Using local storage backend",
        extra={"base_path": settings.storage_local_path},
    )
    return LocalStorageBackend(settings.storage_local_path)


# Global singleton instance
_storage_service: StorageService | None = None


def get_storage_service() -> StorageService:
    """Get the global storage service instance (FastAPI dependency)."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService(
            backend=_backend_from_settings(),
            max_file_size=get_settings().max_upload_size_bytes,
        )
        logger.info("StorageService singleton created")
    return _storage_service
