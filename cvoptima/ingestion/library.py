import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from cvoptima.database.connection import DATABASE_ERRORS
from cvoptima.database.repositories.resumes_repository import ResumesRepository
from cvoptima.identity.base import BaseIdentityProvider, CurrentUser
from cvoptima.ingestion.exceptions import IngestionError, RedirectSignal
from cvoptima.ingestion.ingestor import (
    NOT_FOUND_MESSAGE,
    UNAUTHORIZED_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    is_valid_resume_id,
)
from cvoptima.ingestion.models import IngestionErrorKind
from cvoptima.ingestion.validation import BYTES_PER_MIB
from cvoptima.logging.logger import Log
from cvoptima.storage.base import BaseBlobStore
from cvoptima.storage.exceptions import BlobStoreError

_PATH_TIMESTAMP = re.compile(r"/(\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{6}Z)_")


@dataclass(frozen=True)
class StorageUsage:
    bytes_used: int

    @property
    def mb_used(self) -> str:
        return f"{self.bytes_used / BYTES_PER_MIB:.2f}"


@dataclass(frozen=True)
class LibraryResult:
    success: bool
    error: str | None = None
    error_kind: IngestionErrorKind | None = None
    data: Any = None


class ResumeLibrary:
    """Read access to the current user's stored resumes."""

    def __init__(
        self,
        identity: BaseIdentityProvider,
        resumes_repo: ResumesRepository,
        blob_store: BaseBlobStore,
    ) -> None:
        self._identity = identity
        self._resumes_repo = resumes_repo
        self._blob_store = blob_store

    def list_resumes(self) -> LibraryResult:
        """Newest first. data is a list of ResumeRecord."""
        return self._run("list resumes", lambda user: self._resumes_repo.list_by_user(user.id))

    def storage_usage(self) -> LibraryResult:
        """data is a StorageUsage for the current user."""
        return self._run(
            "compute storage usage",
            lambda user: StorageUsage(self._resumes_repo.total_file_size(user.id)),
        )

    def download(self, resume_id: str) -> LibraryResult:
        """data is the original file content."""
        return self._run("download resume", lambda user: self._download(user, resume_id))

    def _download(self, user: CurrentUser, resume_id: str) -> bytes:
        if not is_valid_resume_id(resume_id):
            raise IngestionError(IngestionErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        record = self._resumes_repo.find_by_id(resume_id)
        if record is None:
            raise IngestionError(IngestionErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        if record.user_id != user.id:
            raise IngestionError(IngestionErrorKind.UNAUTHORIZED, UNAUTHORIZED_MESSAGE)
        return self._blob_store.get(record.file_path)

    def _run(self, action: str, operation: Callable[[CurrentUser], Any]) -> LibraryResult:
        user = self._identity.get_current_user()
        if user is None:
            return LibraryResult(
                success=False,
                error=UNAUTHORIZED_MESSAGE,
                error_kind=IngestionErrorKind.UNAUTHORIZED,
            )
        try:
            data = operation(user)
        except RedirectSignal:
            raise
        except IngestionError as exc:
            return LibraryResult(success=False, error=exc.message, error_kind=exc.kind)
        except (*DATABASE_ERRORS, BlobStoreError) as exc:
            Log.error(f"Failed to {action} for user {user.id}: {exc}")
            return LibraryResult(
                success=False,
                error=f"Failed to {action}",
                error_kind=IngestionErrorKind.INTERNAL_ERROR,
            )
        except Exception:
            Log.exception(f"Unexpected error while trying to {action}")
            return LibraryResult(
                success=False,
                error=UNEXPECTED_ERROR_MESSAGE,
                error_kind=IngestionErrorKind.INTERNAL_ERROR,
            )
        return LibraryResult(success=True, data=data)


def blob_uploaded_at(path: str) -> datetime | None:
    """Recover the upload time encoded in a blob key, if the key has one."""
    match = _PATH_TIMESTAMP.search(path)
    if match is None:
        return None
    return datetime.strptime(match.group(1), "%Y-%m-%dT%H-%M-%S-%fZ").replace(tzinfo=timezone.utc)


class OrphanBlobSweeper:
    """Deletes blobs that no resumes row references.

    Keys are compared exactly against resumes.file_path. Blobs younger than
    the grace period are kept so in-flight ingestions are not swept.
    """

    def __init__(
        self,
        resumes_repo: ResumesRepository,
        blob_store: BaseBlobStore,
        grace_period: timedelta = timedelta(hours=1),
    ) -> None:
        self._resumes_repo = resumes_repo
        self._blob_store = blob_store
        self._grace_period = grace_period

    def find_orphans(self, now: datetime) -> list[str]:
        referenced = self._resumes_repo.list_file_paths()
        cutoff = now - self._grace_period
        orphans = []
        for path in self._blob_store.list_paths():
            if path in referenced:
                continue
            uploaded_at = blob_uploaded_at(path)
            if uploaded_at is not None and uploaded_at > cutoff:
                continue
            orphans.append(path)
        return orphans

    def sweep(self, now: datetime) -> int:
        """Delete orphaned blobs and return how many were removed."""
        deleted = 0
        for path in self.find_orphans(now):
            try:
                self._blob_store.delete(path)
            except BlobStoreError as exc:
                Log.warning(f"Could not delete orphaned blob {path}: {exc}")
                continue
            deleted += 1
        Log.info("Orphan sweep finished", deleted=deleted)
        return deleted
