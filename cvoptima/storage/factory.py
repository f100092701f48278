from pathlib import Path

from cvoptima.config.settings import Settings
from cvoptima.storage.base import BaseBlobStore
from cvoptima.storage.local_adapter import LocalBlobStore
from cvoptima.storage.s3_adapter import S3BlobStore


class BlobStoreFactory:
    """Creates the blob store adapter selected by settings."""

    BACKENDS = ("local", "s3")

    @classmethod
    def create(cls, settings: Settings) -> BaseBlobStore:
        backend = settings.storage_backend.lower()
        if backend == "local":
            return LocalBlobStore(
                root=Path(settings.storage_root),
                public_base_url=settings.storage_public_base_url,
            )
        if backend == "s3":
            return S3BlobStore(
                settings.storage_bucket,
                access_key=settings.s3_access_key,
                secret_key=settings.s3_secret_key,
                region=settings.s3_region,
                endpoint_url=settings.s3_endpoint_url,
                public_base_url=settings.storage_public_base_url,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
