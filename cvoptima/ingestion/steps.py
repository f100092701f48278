from collections.abc import Callable
from datetime import datetime

from cvoptima.database.connection import DATABASE_ERRORS
from cvoptima.database.models import ResumeInsert
from cvoptima.database.repositories.resumes_repository import ResumesRepository
from cvoptima.extraction.models import ExtractionErrorKind, ExtractionFailure
from cvoptima.extraction.text_extractor import TextExtractor
from cvoptima.identity.base import BaseIdentityProvider
from cvoptima.ingestion.exceptions import IngestionError
from cvoptima.ingestion.models import IngestionErrorKind, IngestionState
from cvoptima.ingestion.naming import blob_path, derive_title
from cvoptima.ingestion.pipeline import PipelineContext, PipelineStep
from cvoptima.ingestion.validation import MAX_FILE_SIZE, validate_upload_candidate
from cvoptima.logging.logger import Log
from cvoptima.storage.base import BaseBlobStore
from cvoptima.storage.exceptions import BlobStoreError

EXTRACTION_ERROR_KINDS: dict[ExtractionErrorKind, IngestionErrorKind] = {
    ExtractionErrorKind.EMPTY_INPUT: IngestionErrorKind.EXTRACTION_EMPTY_INPUT,
    ExtractionErrorKind.ENCRYPTED: IngestionErrorKind.EXTRACTION_ENCRYPTED,
    ExtractionErrorKind.MALFORMED: IngestionErrorKind.EXTRACTION_MALFORMED,
    ExtractionErrorKind.NO_TEXT: IngestionErrorKind.EXTRACTION_NO_TEXT,
    ExtractionErrorKind.CONVERSION_ERROR: IngestionErrorKind.EXTRACTION_CONVERSION_ERROR,
    ExtractionErrorKind.EXTRACTION_FAILED: IngestionErrorKind.EXTRACTION_FAILED,
}


class ValidateStep(PipelineStep):
    state = IngestionState.VALIDATING

    def __init__(self, max_bytes: int = MAX_FILE_SIZE) -> None:
        self._max_bytes = max_bytes

    def run(self, context: PipelineContext) -> PipelineContext:
        result = validate_upload_candidate(context.candidate, self._max_bytes)
        if not result.valid:
            raise IngestionError(
                result.kind or IngestionErrorKind.VALIDATION_TYPE, result.error or "Invalid file"
            )
        context.document_kind = result.document_kind
        return context


class AuthenticateStep(PipelineStep):
    state = IngestionState.VALIDATING

    def __init__(self, identity: BaseIdentityProvider) -> None:
        self._identity = identity

    def run(self, context: PipelineContext) -> PipelineContext:
        user = self._identity.get_current_user()
        if user is None:
            raise IngestionError(
                IngestionErrorKind.UNAUTHORIZED, "You must be logged in to upload a resume"
            )
        context.user = user
        return context


class UploadStep(PipelineStep):
    state = IngestionState.UPLOADING

    def __init__(self, blob_store: BaseBlobStore, clock: Callable[[], datetime]) -> None:
        self._blob_store = blob_store
        self._clock = clock

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.user is None:
            raise ValueError("PipelineContext.user must be set before upload")
        candidate = context.candidate
        path = blob_path(context.user.id, candidate.filename, self._clock())
        try:
            context.stored_blob = self._blob_store.put(path, candidate.content, candidate.content_type)
        except BlobStoreError as exc:
            Log.error(f"Storage upload of {path} failed: {exc}")
            raise IngestionError(
                IngestionErrorKind.UPLOAD_FAILED, f"Failed to upload file: {exc}"
            ) from exc
        Log.info("Uploaded blob", path=path, size=candidate.size)
        return context


class ExtractTextStep(PipelineStep):
    state = IngestionState.EXTRACTING

    def __init__(self, text_extractor: TextExtractor) -> None:
        self._text_extractor = text_extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.document_kind is None:
            raise ValueError("PipelineContext.document_kind must be set before extraction")
        outcome = self._text_extractor.extract(context.document_kind, context.candidate.content)
        if isinstance(outcome, ExtractionFailure):
            raise IngestionError(EXTRACTION_ERROR_KINDS[outcome.kind], outcome.message)
        context.extraction = outcome
        return context


class PersistResumeStep(PipelineStep):
    state = IngestionState.PERSISTING

    def __init__(self, resumes_repo: ResumesRepository) -> None:
        self._resumes_repo = resumes_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.user is None or context.stored_blob is None or context.extraction is None:
            raise ValueError("PipelineContext must be uploaded and extracted before persist")
        if context.document_kind is None:
            raise ValueError("PipelineContext.document_kind must be set before persist")
        candidate = context.candidate
        resume = ResumeInsert(
            user_id=context.user.id,
            title=context.title or derive_title(candidate.filename),
            file_path=context.stored_blob.path,
            file_url=context.stored_blob.locator,
            raw_text=context.extraction.text,
            file_size=candidate.size,
            file_type=context.document_kind.value,
        )
        try:
            context.record = self._resumes_repo.insert(resume)
        except DATABASE_ERRORS as exc:
            Log.error(f"Database insert for {resume.file_path} failed: {exc}")
            raise IngestionError(
                IngestionErrorKind.PERSIST_FAILED, "Failed to save resume to database"
            ) from exc
        Log.info("Stored resume", resume_id=context.record.id, user_id=context.user.id)
        return context


class RollbackUploadStep(PipelineStep):
    """Compensating delete of the blob stored by UploadStep. Best effort."""

    state = IngestionState.ROLLING_BACK

    def __init__(self, blob_store: BaseBlobStore) -> None:
        self._blob_store = blob_store

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.stored_blob is None:
            return context
        path = context.stored_blob.path
        try:
            self._blob_store.delete(path)
        except BlobStoreError as exc:
            Log.error(f"Rollback could not delete {path}, blob is orphaned: {exc}")
            return context
        Log.info(f"Rolled back upload {path}")
        context.stored_blob = None
        return context
