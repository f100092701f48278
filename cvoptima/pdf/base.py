from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ParsedPdf:
    """Raw per-page text and document info as reported by a parser engine."""

    pages: list[str]
    info: dict[str, Any] = field(default_factory=dict)

    @property
    def page_count(self) -> int:
        return len(self.pages)


class BasePdfParser(ABC):
    """Contract for all PDF parsing adapters."""

    @abstractmethod
    def parse(self, pdf_bytes: bytes) -> ParsedPdf:
        """Parse PDF bytes into page texts and metadata.

        The parser handle is released before returning, on success or failure.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            ParsedPdf with one text entry per page of the parser's page collection.

        Raises:
            PdfEncryptedError: if the document is password-protected.
            PdfMalformedError: if the document structure is invalid.
            PdfExtractionError: if parsing fails for any other reason.
        """
