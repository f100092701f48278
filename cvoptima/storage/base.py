from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredBlob:
    """Where an uploaded object lives: its key in the store and a locator URL."""

    path: str
    locator: str


class BaseBlobStore(ABC):
    """Contract for all blob storage adapters.

    Paths are opaque, slash-separated keys chosen by the caller.
    All methods raise BlobStoreError subclasses on failure.
    """

    @abstractmethod
    def put(self, path: str, content: bytes, content_type: str | None = None) -> StoredBlob:
        """Store content at path. Never overwrites an existing object.

        Raises:
            BlobAlreadyExistsError: if an object already exists at path.
            BlobStoreError: on any other failure.
        """

    @abstractmethod
    def get(self, path: str) -> bytes:
        """Read the object at path.

        Raises:
            BlobNotFoundError: if nothing is stored at path.
        """

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete the object at path. Deleting a missing object is not an error."""

    @abstractmethod
    def exists(self, path: str) -> bool: ...

    @abstractmethod
    def list_paths(self, prefix: str = "") -> list[str]:
        """Return every stored key starting with prefix, sorted."""
