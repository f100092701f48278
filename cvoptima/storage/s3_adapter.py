from typing import Any

import boto3
from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from cvoptima.logging.logger import Log
from cvoptima.storage.base import BaseBlobStore, StoredBlob
from cvoptima.storage.exceptions import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    BlobStoreConfigurationError,
    BlobStoreError,
    BlobStorePermissionError,
    BlobStoreUnavailableError,
)

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}
_PERMISSION_CODES = {"AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch"}
_UNAVAILABLE_CODES = {"SlowDown", "RequestTimeout", "ServiceUnavailable", "503"}


class S3BlobStore(BaseBlobStore):
    """Stores blobs in an S3-compatible bucket (AWS S3, MinIO).

    botocore errors are mapped to BlobStoreError subclasses and never leak
    to callers.
    """

    def __init__(
        self,
        bucket: str,
        client: Any | None = None,
        *,
        access_key: str = "",
        secret_key: str = "",
        region: str = "",
        endpoint_url: str = "",
        public_base_url: str = "",
    ) -> None:
        self._bucket = bucket.strip()
        if not self._bucket:
            raise BlobStoreConfigurationError("S3 bucket is required")
        self._public_base_url = public_base_url.rstrip("/")

        if client is not None:
            self._client = client
            return
        if not access_key.strip() or not secret_key.strip():
            raise BlobStoreConfigurationError("S3 credentials are required")
        self._client = boto3.client(
            "s3",
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region or None,
            endpoint_url=endpoint_url or None,
        )

    def put(self, path: str, content: bytes, content_type: str | None = None) -> StoredBlob:
        if self.exists(path):
            raise BlobAlreadyExistsError(path)
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=path,
                Body=content,
                ContentType=content_type or "application/octet-stream",
            )
        except Exception as exc:
            raise self._map_error(exc, path, "upload") from exc
        return StoredBlob(path=path, locator=self._locator(path))

    def get(self, path: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=path)
            return response["Body"].read()
        except Exception as exc:
            raise self._map_error(exc, path, "download") from exc

    def delete(self, path: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=path)
        except Exception as exc:
            raise self._map_error(exc, path, "delete") from exc

    def exists(self, path: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=path)
        except Exception as exc:
            error = self._map_error(exc, path, "head")
            if isinstance(error, BlobNotFoundError):
                return False
            raise error from exc
        return True

    def list_paths(self, prefix: str = "") -> list[str]:
        paths: list[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                paths.extend(item["Key"] for item in page.get("Contents", []))
        except Exception as exc:
            raise self._map_error(exc, prefix, "list") from exc
        return sorted(paths)

    def _locator(self, path: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url}/{path}"
        return f"s3://{self._bucket}/{path}"

    def _map_error(self, exc: Exception, path: str, action: str) -> BlobStoreError:
        if isinstance(exc, (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError)):
            Log.warning(f"S3 unavailable during {action} of {path}: {exc}")
            return BlobStoreUnavailableError(f"Storage unavailable ({action})")

        if isinstance(exc, ClientError):
            code = str((exc.response.get("Error") or {}).get("Code") or "")
            if code in _NOT_FOUND_CODES:
                return BlobNotFoundError(path)
            if code in _PERMISSION_CODES:
                return BlobStorePermissionError(f"Storage permission denied ({action})")
            if code in _UNAVAILABLE_CODES:
                return BlobStoreUnavailableError(f"Storage temporarily unavailable ({action})")
            Log.error(f"S3 {action} of {path} failed with code {code}: {exc}")
            return BlobStoreError(f"Storage {action} failed (code={code})")

        Log.error(f"S3 {action} of {path} failed: {exc}")
        return BlobStoreError(f"Storage {action} failed")
