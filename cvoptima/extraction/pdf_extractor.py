from cvoptima.extraction.models import (
    ExtractionErrorKind,
    ExtractionFailure,
    ExtractionOutcome,
    ExtractionSuccess,
)
from cvoptima.extraction.normalizer import normalize_text
from cvoptima.extraction.sniffer import DocumentFormat, sniff_format
from cvoptima.logging.logger import Log
from cvoptima.pdf.base import BasePdfParser
from cvoptima.pdf.exceptions import PdfEncryptedError, PdfExtractionError, PdfMalformedError

EMPTY_INPUT_MESSAGE = "PDF buffer is empty"
ENCRYPTED_MESSAGE = "PDF is password-protected. Please upload an unprotected file."
MALFORMED_MESSAGE = "Invalid PDF file. The file may be corrupted or not a valid PDF."
NO_TEXT_MESSAGE = "No text content found in PDF. The file might be image-based or corrupted."


class PdfExtractor:
    """Turns PDF bytes into an ExtractionOutcome using a configured parser engine."""

    def __init__(self, parser: BasePdfParser) -> None:
        self._parser = parser

    def extract(self, content: bytes) -> ExtractionOutcome:
        if not content:
            return ExtractionFailure(ExtractionErrorKind.EMPTY_INPUT, EMPTY_INPUT_MESSAGE)
        if sniff_format(content) is not DocumentFormat.PDF:
            Log.warning("Rejected PDF upload: missing %PDF- header")
            return ExtractionFailure(ExtractionErrorKind.MALFORMED, MALFORMED_MESSAGE)

        try:
            parsed = self._parser.parse(content)
        except PdfEncryptedError as exc:
            Log.warning(f"PDF parsing refused: {exc}")
            return ExtractionFailure(ExtractionErrorKind.ENCRYPTED, ENCRYPTED_MESSAGE)
        except PdfMalformedError as exc:
            Log.warning(f"PDF parsing failed: {exc}")
            return ExtractionFailure(ExtractionErrorKind.MALFORMED, MALFORMED_MESSAGE)
        except PdfExtractionError as exc:
            Log.error(f"PDF parsing failed: {exc}")
            return ExtractionFailure(
                ExtractionErrorKind.EXTRACTION_FAILED, f"PDF parsing failed: {exc}"
            )

        text = normalize_text("\n".join(parsed.pages))
        if not text:
            return ExtractionFailure(ExtractionErrorKind.NO_TEXT, NO_TEXT_MESSAGE)

        Log.info(f"Extracted {len(text)} chars from {parsed.page_count} PDF page(s)")
        return ExtractionSuccess(
            text=text,
            unit_count=parsed.page_count,
            metadata={"pages": parsed.page_count, "info": parsed.info},
        )
