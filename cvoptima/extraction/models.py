from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DocumentKind(str, Enum):
    """Accepted resume formats. The value is the stored file_type tag."""

    PDF = "pdf"
    DOCX = "docx"


class ExtractionErrorKind(str, Enum):
    EMPTY_INPUT = "EMPTY_INPUT"
    ENCRYPTED = "ENCRYPTED"
    MALFORMED = "MALFORMED"
    NO_TEXT = "NO_TEXT"
    CONVERSION_ERROR = "CONVERSION_ERROR"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"


@dataclass(frozen=True)
class ExtractionSuccess:
    """Normalized text plus what the extractor learned about the document.

    unit_count is the page count for PDF and the paragraph count for DOCX.
    """

    text: str
    unit_count: int
    metadata: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("ExtractionSuccess requires non-empty text")

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class ExtractionFailure:
    kind: ExtractionErrorKind
    message: str

    @property
    def success(self) -> bool:
        return False


ExtractionOutcome = ExtractionSuccess | ExtractionFailure
