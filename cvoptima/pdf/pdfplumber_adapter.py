import io
from collections.abc import Iterator

import pdfplumber
from pdfminer.pdfdocument import PDFEncryptionError
from pdfminer.psparser import PSException

from cvoptima.pdf.base import BasePdfParser, ParsedPdf
from cvoptima.pdf.exceptions import PdfEncryptedError, PdfExtractionError, PdfMalformedError


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield exc and every exception it wraps (args, __cause__, __context__)."""
    seen: set[int] = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))
        if current.__cause__ is not None:
            pending.append(current.__cause__)
        if current.__context__ is not None:
            pending.append(current.__context__)


def translate_pdfminer_error(exc: Exception) -> PdfExtractionError:
    """Map a pdfminer/pdfplumber failure onto the PdfExtractionError family."""
    chain = list(_exception_chain(exc))
    # PDFEncryptionError is itself a PSException, so it is checked first.
    if any(isinstance(e, PDFEncryptionError) for e in chain):
        return PdfEncryptedError(f"PDF is password-protected: {exc}")
    if any(isinstance(e, PSException) for e in chain):
        return PdfMalformedError(f"Invalid PDF structure: {exc}")
    return PdfExtractionError(f"pdfplumber extraction failed: {exc}")


class PdfPlumberAdapter(BasePdfParser):
    """Parses PDF using pdfplumber."""

    def parse(self, pdf_bytes: bytes) -> ParsedPdf:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
                info = dict(pdf.metadata or {})
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise translate_pdfminer_error(exc) from exc
        return ParsedPdf(pages=pages, info=info)
