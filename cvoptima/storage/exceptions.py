class BlobStoreError(Exception):
    """Base exception for all blob store errors."""


class BlobStoreConfigurationError(BlobStoreError):
    """Raised when a blob store adapter is missing required configuration."""


class BlobNotFoundError(BlobStoreError):
    """Raised when no object exists at the requested path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Blob not found: {path}")
        self.path = path


class BlobAlreadyExistsError(BlobStoreError):
    """Raised when a write would overwrite an existing object."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Blob already exists: {path}")
        self.path = path


class BlobStorePermissionError(BlobStoreError):
    """Raised when the store rejects the credentials or the operation."""


class BlobStoreUnavailableError(BlobStoreError):
    """Raised when the store cannot be reached or is temporarily down."""
