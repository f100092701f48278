import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from cvoptima.config.settings import Settings
from cvoptima.database.connection import DATABASE_ERRORS
from cvoptima.database.repositories.resumes_repository import ResumesRepository
from cvoptima.extraction.text_extractor import TextExtractor, build_text_extractor
from cvoptima.identity.base import BaseIdentityProvider
from cvoptima.ingestion.exceptions import IngestionError, RedirectSignal
from cvoptima.ingestion.models import (
    DeletionResult,
    IngestionData,
    IngestionErrorKind,
    IngestionResult,
    UploadCandidate,
)
from cvoptima.ingestion.naming import text_preview
from cvoptima.ingestion.pipeline import PipelineContext
from cvoptima.ingestion.processor import IngestionProcessor
from cvoptima.ingestion.steps import (
    AuthenticateStep,
    ExtractTextStep,
    PersistResumeStep,
    RollbackUploadStep,
    UploadStep,
    ValidateStep,
)
from cvoptima.logging.logger import Log
from cvoptima.storage.base import BaseBlobStore
from cvoptima.storage.exceptions import BlobStoreError
from cvoptima.storage.factory import BlobStoreFactory

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."
NOT_FOUND_MESSAGE = "Resume not found"
UNAUTHORIZED_MESSAGE = "Unauthorized"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_resume_id(resume_id: str) -> bool:
    try:
        uuid.UUID(resume_id)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


class ResumeIngestor:
    """Entry point for uploading and deleting resumes.

    Every failure comes back as a result value. Only RedirectSignal propagates.
    """

    def __init__(
        self,
        processor: IngestionProcessor,
        identity: BaseIdentityProvider,
        resumes_repo: ResumesRepository,
        blob_store: BaseBlobStore,
        preview_chars: int = 500,
    ) -> None:
        self._processor = processor
        self._identity = identity
        self._resumes_repo = resumes_repo
        self._blob_store = blob_store
        self._preview_chars = preview_chars

    def ingest(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        title: str | None = None,
    ) -> IngestionResult:
        """Validate, upload, extract and persist one resume file."""
        context = PipelineContext(
            candidate=UploadCandidate(content=content, filename=filename, content_type=content_type),
            title=title.strip() if title and title.strip() else None,
        )
        Log.info(
            "Ingesting resume", filename=filename, size=len(content), content_type=content_type
        )
        try:
            self._processor.process(context)
        except RedirectSignal:
            raise
        except IngestionError as exc:
            stage = context.failed_state.value if context.failed_state else "unknown"
            Log.warning(
                "Ingestion failed", filename=filename, state=stage, kind=exc.kind.value
            )
            return IngestionResult(success=False, error=exc.message, error_kind=exc.kind)
        except Exception:
            Log.exception(f"Unexpected error while ingesting '{filename}'")
            return IngestionResult(
                success=False,
                error=UNEXPECTED_ERROR_MESSAGE,
                error_kind=IngestionErrorKind.INTERNAL_ERROR,
            )

        if context.record is None or context.extraction is None:
            raise RuntimeError("Ingestion finished without a stored record")
        record = context.record
        return IngestionResult(
            success=True,
            data=IngestionData(
                id=record.id,
                title=record.title,
                file_url=record.file_url,
                text_preview=text_preview(context.extraction.text, self._preview_chars),
            ),
        )

    def delete(self, resume_id: str) -> DeletionResult:
        """Delete a resume owned by the current user, then its blob (best effort)."""
        try:
            self._delete(resume_id)
        except RedirectSignal:
            raise
        except IngestionError as exc:
            Log.warning(f"Deletion of resume {resume_id} refused: {exc.kind.value}")
            return DeletionResult(success=False, error=exc.message, error_kind=exc.kind)
        except Exception:
            Log.exception(f"Unexpected error while deleting resume {resume_id}")
            return DeletionResult(
                success=False,
                error=UNEXPECTED_ERROR_MESSAGE,
                error_kind=IngestionErrorKind.INTERNAL_ERROR,
            )
        return DeletionResult(success=True)

    def _delete(self, resume_id: str) -> None:
        user = self._identity.get_current_user()
        if user is None:
            raise IngestionError(IngestionErrorKind.UNAUTHORIZED, UNAUTHORIZED_MESSAGE)
        if not is_valid_resume_id(resume_id):
            raise IngestionError(IngestionErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)

        try:
            record = self._resumes_repo.find_by_id(resume_id)
        except DATABASE_ERRORS as exc:
            Log.error(f"Lookup of resume {resume_id} failed: {exc}")
            raise IngestionError(IngestionErrorKind.DELETE_FAILED, "Failed to delete resume") from exc
        if record is None:
            raise IngestionError(IngestionErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        if record.user_id != user.id:
            Log.warning(f"User {user.id} attempted to delete resume {resume_id} they do not own")
            raise IngestionError(IngestionErrorKind.UNAUTHORIZED, UNAUTHORIZED_MESSAGE)

        try:
            deleted = self._resumes_repo.delete_by_id(resume_id)
        except DATABASE_ERRORS as exc:
            Log.error(f"Database delete of resume {resume_id} failed: {exc}")
            raise IngestionError(IngestionErrorKind.DELETE_FAILED, "Failed to delete resume") from exc
        if not deleted:
            raise IngestionError(IngestionErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        Log.info("Deleted resume", resume_id=resume_id, user_id=user.id)

        # The row is gone, so a leftover blob is only an orphan for the sweeper.
        try:
            self._blob_store.delete(record.file_path)
        except BlobStoreError as exc:
            Log.warning(f"Blob {record.file_path} of deleted resume {resume_id} not removed: {exc}")


def build_ingestor(
    settings: Settings,
    identity: BaseIdentityProvider,
    blob_store: BaseBlobStore | None = None,
    text_extractor: TextExtractor | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> ResumeIngestor:
    """Build a ResumeIngestor with all required adapters."""
    blob_store = blob_store if blob_store is not None else BlobStoreFactory.create(settings)
    text_extractor = text_extractor if text_extractor is not None else build_text_extractor(settings)
    resumes_repo = ResumesRepository()
    processor = IngestionProcessor(
        steps=[
            ValidateStep(max_bytes=settings.max_upload_bytes),
            AuthenticateStep(identity),
            UploadStep(blob_store, clock),
            ExtractTextStep(text_extractor),
            PersistResumeStep(resumes_repo),
        ],
        rollback_step=RollbackUploadStep(blob_store),
    )
    return ResumeIngestor(
        processor=processor,
        identity=identity,
        resumes_repo=resumes_repo,
        blob_store=blob_store,
        preview_chars=settings.preview_chars,
    )
