from dataclasses import dataclass
from pathlib import PurePath

from cvoptima.extraction.models import DocumentKind
from cvoptima.ingestion.models import IngestionErrorKind, UploadCandidate

BYTES_PER_MIB = 1024 * 1024
MAX_FILE_SIZE = 10 * BYTES_PER_MIB

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# MIME type -> (extension, kind). A file passes only if both halves of one pair match.
ALLOWED_FILE_TYPES: dict[str, tuple[str, DocumentKind]] = {
    "application/pdf": (".pdf", DocumentKind.PDF),
    DOCX_MIME_TYPE: (".docx", DocumentKind.DOCX),
}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None
    kind: IngestionErrorKind | None = None
    document_kind: DocumentKind | None = None

    @classmethod
    def ok(cls, document_kind: DocumentKind | None = None) -> "ValidationResult":
        return cls(valid=True, document_kind=document_kind)

    @classmethod
    def fail(cls, kind: IngestionErrorKind, error: str) -> "ValidationResult":
        return cls(valid=False, error=error, kind=kind)


def file_extension(filename: str) -> str:
    """Return the lowercased text from the last dot, or '' when there is none.

    A name that is only an extension (".pdf") keeps it, unlike PurePath.suffix.
    """
    name = PurePath(filename).name.lower()
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def validate_not_empty(candidate: UploadCandidate) -> ValidationResult:
    if candidate.size == 0:
        return ValidationResult.fail(
            IngestionErrorKind.VALIDATION_EMPTY,
            "File is empty. Please upload a valid resume file.",
        )
    return ValidationResult.ok()


def validate_declared_type(
    candidate: UploadCandidate,
    allowlist: dict[str, tuple[str, DocumentKind]] = ALLOWED_FILE_TYPES,
) -> ValidationResult:
    """Check the declared MIME type and the filename extension against the allowlist.

    Both are client-controlled, so this only narrows the input; extractors
    still sniff the magic number.
    """
    allowed = allowlist.get(candidate.content_type.strip().lower())
    if allowed is not None:
        extension, document_kind = allowed
        if file_extension(candidate.filename) == extension:
            return ValidationResult.ok(document_kind)

    formats = " and ".join(ext.lstrip(".").upper() for ext, _kind in allowlist.values())
    return ValidationResult.fail(
        IngestionErrorKind.VALIDATION_TYPE,
        f"Invalid file type. Only {formats} files are allowed.",
    )


def validate_size(candidate: UploadCandidate, max_bytes: int = MAX_FILE_SIZE) -> ValidationResult:
    if candidate.size > max_bytes:
        size_mb = candidate.size / BYTES_PER_MIB
        max_mb = max_bytes / BYTES_PER_MIB
        return ValidationResult.fail(
            IngestionErrorKind.VALIDATION_SIZE,
            f"File size ({size_mb:.2f}MB) exceeds the maximum allowed size of {max_mb:.0f}MB.",
        )
    return ValidationResult.ok()


def validate_upload_candidate(
    candidate: UploadCandidate,
    max_bytes: int = MAX_FILE_SIZE,
    allowlist: dict[str, tuple[str, DocumentKind]] = ALLOWED_FILE_TYPES,
) -> ValidationResult:
    """Run emptiness, declared type and size checks in that order.

    Returns the first failure, or a passing result carrying the resolved DocumentKind.
    """
    empty_check = validate_not_empty(candidate)
    if not empty_check.valid:
        return empty_check

    type_check = validate_declared_type(candidate, allowlist)
    if not type_check.valid:
        return type_check

    size_check = validate_size(candidate, max_bytes)
    if not size_check.valid:
        return size_check

    return type_check


def format_file_size(size_bytes: int) -> str:
    """Human readable size: '0 Bytes', '512 Bytes', '1.5 KB', '10 MB'."""
    if size_bytes == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size_bytes)
    exponent = 0
    while value >= 1024 and exponent < len(units) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {units[exponent]}"
