class PdfExtractionError(Exception):
    """Base exception for PDF parsing failures."""


class PdfEncryptedError(PdfExtractionError):
    """Raised when the PDF requires a password to be decrypted."""


class PdfMalformedError(PdfExtractionError):
    """Raised when the PDF structure is invalid or unreadable."""
