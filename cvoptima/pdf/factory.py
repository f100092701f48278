from cvoptima.config.settings import Settings
from cvoptima.logging.logger import Log
from cvoptima.pdf.base import BasePdfParser
from cvoptima.pdf.pdfplumber_adapter import PdfPlumberAdapter
from cvoptima.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfParserFactory:
    """Maps Settings.pdf_engine to a parser adapter."""

    ENGINES: dict[str, type[BasePdfParser]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfParser:
        return cls.for_engine(settings.pdf_engine)

    @classmethod
    def for_engine(cls, engine: str) -> BasePdfParser:
        """Build the parser for an engine name (case-insensitive)."""
        name = engine.strip().lower()
        parser_cls = cls.ENGINES.get(name)
        if parser_cls is None:
            raise ValueError(f"Unknown PDF engine '{name}'. Choose from: {sorted(cls.ENGINES)}")
        Log.debug("PDF engine selected", engine=name)
        return parser_cls()
