from enum import Enum

PDF_MAGIC = b"%PDF-"
ZIP_MAGIC = b"PK"
MIN_SNIFF_BYTES = len(PDF_MAGIC)


class DocumentFormat(str, Enum):
    PDF = "PDF"
    OWPML_ZIP = "OWPML_ZIP"
    UNKNOWN = "UNKNOWN"


def sniff_format(buffer: bytes) -> DocumentFormat:
    """Classify a buffer by its leading bytes, ignoring any declared content type.

    Buffers shorter than five bytes are always UNKNOWN.
    """
    head = bytes(buffer[:MIN_SNIFF_BYTES])
    if len(head) < MIN_SNIFF_BYTES:
        return DocumentFormat.UNKNOWN
    if head == PDF_MAGIC:
        return DocumentFormat.PDF
    if head.startswith(ZIP_MAGIC):
        return DocumentFormat.OWPML_ZIP
    return DocumentFormat.UNKNOWN
