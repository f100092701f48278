import pymupdf

from cvoptima.pdf.base import BasePdfParser, ParsedPdf
from cvoptima.pdf.exceptions import PdfEncryptedError, PdfExtractionError, PdfMalformedError


class PyMuPdfAdapter(BasePdfParser):
    """Parses PDF using PyMuPDF."""

    def parse(self, pdf_bytes: bytes) -> ParsedPdf:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                if doc.needs_pass:
                    raise PdfEncryptedError("PDF is password-protected")
                if doc.page_count == 0:
                    raise PdfMalformedError("PDF has no readable pages")
                pages = [page.get_text() for page in doc]
                info = dict(doc.metadata or {})
        except PdfExtractionError:
            raise
        except pymupdf.FileDataError as exc:
            raise PdfMalformedError(f"Invalid PDF structure: {exc}") from exc
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc
        return ParsedPdf(pages=pages, info=info)
