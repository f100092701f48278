from unittest.mock import MagicMock

import pytest

from cvoptima.extraction.models import ExtractionErrorKind, ExtractionFailure, ExtractionSuccess
from cvoptima.extraction.pdf_extractor import PdfExtractor
from cvoptima.pdf.base import ParsedPdf
from cvoptima.pdf.exceptions import PdfExtractionError
from cvoptima.pdf.pdfplumber_adapter import PdfPlumberAdapter
from cvoptima.pdf.pymupdf_adapter import PyMuPdfAdapter


@pytest.fixture(params=[PdfPlumberAdapter, PyMuPdfAdapter], ids=["pdfplumber", "pymupdf"])
def extractor(request: pytest.FixtureRequest) -> PdfExtractor:
    return PdfExtractor(request.param())


class TestPdfExtractor:
    def test_extracts_hello_world(self, extractor: PdfExtractor, sample_pdf_bytes: bytes) -> None:
        outcome = extractor.extract(sample_pdf_bytes)
        assert isinstance(outcome, ExtractionSuccess)
        assert outcome.success
        assert outcome.text == "Hello World"
        assert outcome.unit_count == 1
        assert outcome.metadata["pages"] == 1

    def test_multi_page(self, extractor: PdfExtractor, multi_page_pdf_bytes: bytes) -> None:
        outcome = extractor.extract(multi_page_pdf_bytes)
        assert isinstance(outcome, ExtractionSuccess)
        assert outcome.unit_count == 3
        assert "John Doe" in outcome.text
        assert outcome.text.index("John Doe") < outcome.text.index("Skills")

    def test_empty_buffer(self, extractor: PdfExtractor) -> None:
        outcome = extractor.extract(b"")
        assert isinstance(outcome, ExtractionFailure)
        assert outcome.kind is ExtractionErrorKind.EMPTY_INPUT

    def test_missing_header_is_malformed(self, extractor: PdfExtractor) -> None:
        outcome = extractor.extract(b"PK\x03\x04 this is a zip")
        assert isinstance(outcome, ExtractionFailure)
        assert outcome.kind is ExtractionErrorKind.MALFORMED
        assert outcome.message == "Invalid PDF file. The file may be corrupted or not a valid PDF."

    def test_header_followed_by_garbage_is_malformed(self, extractor: PdfExtractor) -> None:
        outcome = extractor.extract(b"%PDF-1.4\nthis is not really a pdf")
        assert isinstance(outcome, ExtractionFailure)
        assert outcome.kind is ExtractionErrorKind.MALFORMED

    def test_encrypted(self, extractor: PdfExtractor, encrypted_pdf_bytes: bytes) -> None:
        outcome = extractor.extract(encrypted_pdf_bytes)
        assert isinstance(outcome, ExtractionFailure)
        assert outcome.kind is ExtractionErrorKind.ENCRYPTED
        assert "password-protected" in outcome.message

    def test_blank_page_has_no_text(self, extractor: PdfExtractor, empty_pdf_bytes: bytes) -> None:
        outcome = extractor.extract(empty_pdf_bytes)
        assert isinstance(outcome, ExtractionFailure)
        assert outcome.kind is ExtractionErrorKind.NO_TEXT


class TestPdfExtractorWithMockParser:
    def test_text_is_normalized(self) -> None:
        parser = MagicMock()
        parser.parse.return_value = ParsedPdf(
            pages=["  Jane\tDoe  \r\n", "\n\n\n\nEngineer  "], info={"Title": "CV"}
        )
        outcome = PdfExtractor(parser).extract(b"%PDF-1.7 ...")
        assert isinstance(outcome, ExtractionSuccess)
        assert outcome.text == "Jane Doe\n\nEngineer"
        assert outcome.metadata == {"pages": 2, "info": {"Title": "CV"}}

    def test_generic_parser_failure(self) -> None:
        parser = MagicMock()
        parser.parse.side_effect = PdfExtractionError("engine crashed")
        outcome = PdfExtractor(parser).extract(b"%PDF-1.7 ...")
        assert isinstance(outcome, ExtractionFailure)
        assert outcome.kind is ExtractionErrorKind.EXTRACTION_FAILED
        assert outcome.message == "PDF parsing failed: engine crashed"

    def test_parser_not_called_without_header(self) -> None:
        parser = MagicMock()
        PdfExtractor(parser).extract(b"hello")
        parser.parse.assert_not_called()
