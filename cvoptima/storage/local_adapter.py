from pathlib import Path, PurePosixPath

from cvoptima.storage.base import BaseBlobStore, StoredBlob
from cvoptima.storage.exceptions import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    BlobStoreError,
)


class LocalBlobStore(BaseBlobStore):
    """Stores blobs as files below a root directory: {root}/{path}."""

    def __init__(self, root: Path, public_base_url: str = "") -> None:
        self._root = root
        self._public_base_url = public_base_url.rstrip("/")

    def put(self, path: str, content: bytes, content_type: str | None = None) -> StoredBlob:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as fh:
                fh.write(content)
        except FileExistsError as exc:
            raise BlobAlreadyExistsError(path) from exc
        except OSError as exc:
            raise BlobStoreError(f"Failed to write {path}: {exc}") from exc
        return StoredBlob(path=path, locator=self._locator(path, target))

    def get(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return target.read_bytes()
        except FileNotFoundError as exc:
            raise BlobNotFoundError(path) from exc
        except OSError as exc:
            raise BlobStoreError(f"Failed to read {path}: {exc}") from exc

    def delete(self, path: str) -> None:
        target = self._resolve(path)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            raise BlobStoreError(f"Failed to delete {path}: {exc}") from exc

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def list_paths(self, prefix: str = "") -> list[str]:
        if not self._root.exists():
            return []
        paths = (
            p.relative_to(self._root).as_posix()
            for p in self._root.rglob("*")
            if p.is_file()
        )
        return sorted(p for p in paths if p.startswith(prefix))

    def _resolve(self, path: str) -> Path:
        """Map a key to a file below root, rejecting keys that escape it."""
        key = PurePosixPath(path)
        if not path.strip() or key.is_absolute() or ".." in key.parts:
            raise BlobStoreError(f"Invalid blob path: {path!r}")
        return self._root.joinpath(*key.parts)

    def _locator(self, path: str, target: Path) -> str:
        if self._public_base_url:
            return f"{self._public_base_url}/{path}"
        return target.resolve().as_uri()
