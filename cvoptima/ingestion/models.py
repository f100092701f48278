from dataclasses import dataclass
from enum import Enum


class IngestionErrorKind(str, Enum):
    VALIDATION_EMPTY = "VALIDATION_EMPTY"
    VALIDATION_TYPE = "VALIDATION_TYPE"
    VALIDATION_SIZE = "VALIDATION_SIZE"
    UNAUTHORIZED = "UNAUTHORIZED"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    EXTRACTION_EMPTY_INPUT = "EXTRACTION_EMPTY_INPUT"
    EXTRACTION_ENCRYPTED = "EXTRACTION_ENCRYPTED"
    EXTRACTION_MALFORMED = "EXTRACTION_MALFORMED"
    EXTRACTION_NO_TEXT = "EXTRACTION_NO_TEXT"
    EXTRACTION_CONVERSION_ERROR = "EXTRACTION_CONVERSION_ERROR"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    PERSIST_FAILED = "PERSIST_FAILED"
    NOT_FOUND = "NOT_FOUND"
    DELETE_FAILED = "DELETE_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class IngestionState(str, Enum):
    VALIDATING = "VALIDATING"
    UPLOADING = "UPLOADING"
    EXTRACTING = "EXTRACTING"
    PERSISTING = "PERSISTING"
    ROLLING_BACK = "ROLLING_BACK"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class UploadCandidate:
    """An uploaded file as declared by the client. Not persisted."""

    content: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class IngestionData:
    id: str
    title: str
    file_url: str
    text_preview: str


@dataclass(frozen=True)
class IngestionResult:
    success: bool
    error: str | None = None
    error_kind: IngestionErrorKind | None = None
    data: IngestionData | None = None


@dataclass(frozen=True)
class DeletionResult:
    success: bool
    error: str | None = None
    error_kind: IngestionErrorKind | None = None
