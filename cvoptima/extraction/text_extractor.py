from collections.abc import Callable

from cvoptima.config.settings import Settings
from cvoptima.extraction.docx_extractor import DocxExtractor
from cvoptima.extraction.models import DocumentKind, ExtractionOutcome
from cvoptima.extraction.pdf_extractor import PdfExtractor
from cvoptima.pdf.factory import PdfParserFactory


class TextExtractor:
    """Single extraction entry point dispatching on the validated document kind."""

    def __init__(self, pdf_extractor: PdfExtractor, docx_extractor: DocxExtractor) -> None:
        self._handlers: dict[DocumentKind, Callable[[bytes], ExtractionOutcome]] = {
            DocumentKind.PDF: pdf_extractor.extract,
            DocumentKind.DOCX: docx_extractor.extract,
        }

    def extract(self, kind: DocumentKind, content: bytes) -> ExtractionOutcome:
        return self._handlers[kind](content)


def build_text_extractor(settings: Settings) -> TextExtractor:
    """Build a TextExtractor using the configured PDF engine."""
    return TextExtractor(
        pdf_extractor=PdfExtractor(PdfParserFactory.create(settings)),
        docx_extractor=DocxExtractor(),
    )
