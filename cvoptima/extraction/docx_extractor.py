import html
import io
import re
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import docx
from docx.document import Document as DocxDocument
from docx.opc.exceptions import PackageNotFoundError
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.hyperlink import Hyperlink
from docx.text.paragraph import Paragraph
from docx.text.run import Run

from cvoptima.extraction.models import (
    ExtractionErrorKind,
    ExtractionFailure,
    ExtractionOutcome,
    ExtractionSuccess,
)
from cvoptima.extraction.normalizer import normalize_text
from cvoptima.extraction.sniffer import DocumentFormat, sniff_format
from cvoptima.logging.logger import Log

EMPTY_INPUT_MESSAGE = "DOCX buffer is empty"
INVALID_ZIP_MESSAGE = "DOCX file structure is invalid. The file may be corrupted."
NOT_A_DOCX_MESSAGE = "Invalid DOCX file. The file may be corrupted or not a valid DOCX format."
NO_TEXT_MESSAGE = "No text content found in DOCX. The file might be empty or corrupted."
NO_CONTENT_MESSAGE = "No content found in DOCX file."

_HEADING_STYLE = re.compile(r"^Heading (\d)$")
_PARAGRAPH_STYLES = {"Normal", "Body Text", "No Spacing", "Quote", "Intense Quote", "Subtitle"}
_LIST_STYLE_PREFIXES = ("List Paragraph", "List Bullet", "List Number")
_MARKUP_TAG = re.compile(r"<[^>]+>")

_P = qn("w:p")
_TBL = qn("w:tbl")
_SDT = qn("w:sdt")
_SDT_CONTENT = qn("w:sdtContent")
_ALT_CHUNK = qn("w:altChunk")
_R_ID = qn("r:id")

# Runs of a paragraph in document order, including runs wrapped in hyperlinks
# and inline content controls.
_PARAGRAPH_RUNS = "./w:r | ./w:hyperlink/w:r | ./w:sdt/w:sdtContent//w:r"

_TEXT_CHUNK_TYPES = {"text/plain", "text/html", "application/xhtml+xml"}

Block = Paragraph | Table | str


@dataclass(frozen=True)
class Diagnostic:
    """A message produced while converting a DOCX package."""

    level: str
    message: str

    @classmethod
    def error(cls, message: str) -> "Diagnostic":
        return cls("error", message)

    @classmethod
    def warning(cls, message: str) -> "Diagnostic":
        return cls("warning", message)


class DocxExtractor:
    """Extracts text (or lightweight HTML) from OWPML .docx packages with python-docx.

    Block content is read from the body XML directly so that paragraphs and
    tables wrapped in content controls (w:sdt) are not skipped. Text altChunks
    are read from their target part.
    """

    def extract(self, content: bytes) -> ExtractionOutcome:
        opened = self._open(content)
        if isinstance(opened, ExtractionFailure):
            return opened

        diagnostics = self._embedded_part_diagnostics(opened)
        parts = self._block_texts(opened.element.body, opened._body, diagnostics)

        failure = self._conversion_failure(diagnostics)
        if failure is not None:
            return failure

        raw_text = "\n\n".join(parts)
        if not raw_text.strip():
            return ExtractionFailure(ExtractionErrorKind.NO_TEXT, NO_TEXT_MESSAGE)

        warnings = self._warnings(diagnostics)
        text = normalize_text(raw_text, drop_blank_lines=True)
        paragraphs = sum(1 for part in parts if part.strip())
        Log.info(f"Extracted {len(text)} chars from {paragraphs} DOCX paragraph(s)")
        return ExtractionSuccess(
            text=text,
            unit_count=paragraphs,
            metadata={"paragraphs": paragraphs, "messages": warnings},
            warnings=warnings,
        )

    def extract_html(self, content: bytes) -> ExtractionOutcome:
        """Convert the package to HTML, keeping headings, lists, emphasis and tables.

        Unknown paragraph styles fall back to <p> and are reported as warnings.
        """
        opened = self._open(content)
        if isinstance(opened, ExtractionFailure):
            return opened

        diagnostics = self._embedded_part_diagnostics(opened)
        chunks: list[str] = []
        style_warnings: list[str] = []
        in_list = False
        paragraphs = 0
        for block in self._iter_blocks(opened.element.body, opened._body, diagnostics):
            if isinstance(block, Table):
                if in_list:
                    chunks.append("</ul>")
                    in_list = False
                chunks.append(self._table_html(block))
                continue

            if isinstance(block, str):
                inner, tag = html.escape(block.strip()), "p"
            else:
                inner = self._runs_html(block)
                style = block.style.name if block.style is not None else "Normal"
                tag = self._tag_for_style(style)
                if tag is None and inner.strip():
                    message = f"Unrecognised paragraph style: '{style}'"
                    if message not in style_warnings:
                        style_warnings.append(message)
                    tag = "p"
            if not inner.strip():
                continue
            paragraphs += 1

            if tag == "li" and not in_list:
                chunks.append("<ul>")
                in_list = True
            elif tag != "li" and in_list:
                chunks.append("</ul>")
                in_list = False
            chunks.append(f"<{tag}>{inner}</{tag}>")

        if in_list:
            chunks.append("</ul>")

        failure = self._conversion_failure(diagnostics)
        if failure is not None:
            return failure

        markup = "".join(chunks)
        if not markup.strip():
            return ExtractionFailure(ExtractionErrorKind.NO_TEXT, NO_CONTENT_MESSAGE)
        warnings = self._warnings(diagnostics) + style_warnings
        return ExtractionSuccess(
            text=markup,
            unit_count=paragraphs,
            metadata={"paragraphs": paragraphs, "messages": warnings},
            warnings=warnings,
        )

    def _open(self, content: bytes) -> DocxDocument | ExtractionFailure:
        """Open the package, translating python-docx/zipfile failures exactly once."""
        if not content:
            return ExtractionFailure(ExtractionErrorKind.EMPTY_INPUT, EMPTY_INPUT_MESSAGE)
        if sniff_format(content) is not DocumentFormat.OWPML_ZIP:
            Log.warning("DOCX upload does not start with a ZIP header, trying anyway")

        try:
            return docx.Document(io.BytesIO(content))
        except (zipfile.BadZipFile, KeyError) as exc:
            Log.warning(f"DOCX package structure invalid: {exc}")
            return ExtractionFailure(ExtractionErrorKind.MALFORMED, INVALID_ZIP_MESSAGE)
        except (PackageNotFoundError, ValueError) as exc:
            Log.warning(f"DOCX package rejected: {exc}")
            return ExtractionFailure(ExtractionErrorKind.MALFORMED, NOT_A_DOCX_MESSAGE)
        except Exception as exc:
            Log.error(f"DOCX parsing failed: {exc}")
            return ExtractionFailure(
                ExtractionErrorKind.EXTRACTION_FAILED, f"DOCX parsing failed: {exc}"
            )

    def _iter_blocks(
        self, element: Any, parent: Any, diagnostics: list[Diagnostic]
    ) -> Iterator[Block]:
        """Yield paragraphs, tables and altChunk text below element in document order.

        Content controls are transparent: their sdtContent children are yielded
        as if they sat directly in element.
        """
        for child in element.iterchildren():
            if child.tag == _P:
                yield Paragraph(child, parent)
            elif child.tag == _TBL:
                yield Table(child, parent)
            elif child.tag == _SDT:
                sdt_content = child.find(_SDT_CONTENT)
                if sdt_content is not None:
                    yield from self._iter_blocks(sdt_content, parent, diagnostics)
            elif child.tag == _ALT_CHUNK:
                text = self._alt_chunk_text(child, parent, diagnostics)
                if text is not None:
                    yield text

    def _block_texts(
        self, element: Any, parent: Any, diagnostics: list[Diagnostic]
    ) -> list[str]:
        texts: list[str] = []
        for index, block in enumerate(self._iter_blocks(element, parent, diagnostics), start=1):
            if isinstance(block, str):
                texts.append(block)
            elif isinstance(block, Paragraph):
                texts.append(self._paragraph_text(block))
            else:
                texts.extend(self._table_text(block, index, diagnostics))
        return texts

    def _table_text(self, table: Table, index: int, diagnostics: list[Diagnostic]) -> list[str]:
        texts: list[str] = []
        seen: set[Any] = set()
        try:
            for row in table.rows:
                for cell in row.cells:
                    # Merged cells are reported once per spanned grid column.
                    if cell._tc in seen:
                        continue
                    seen.add(cell._tc)
                    texts.extend(self._block_texts(cell._tc, cell, diagnostics))
        except Exception as exc:
            diagnostics.append(
                Diagnostic.warning(f"Table {index} could only be partially read: {exc}")
            )
        return texts

    @staticmethod
    def _paragraph_text(paragraph: Paragraph) -> str:
        runs = paragraph._p.xpath(_PARAGRAPH_RUNS)
        return "".join(Run(r, paragraph).text for r in runs)

    @staticmethod
    def _alt_chunk_text(chunk: Any, parent: Any, diagnostics: list[Diagnostic]) -> str | None:
        """Read an altChunk (an embedded foreign document) when it holds text."""
        rel_id = chunk.get(_R_ID)
        try:
            part = parent.part.related_parts[rel_id]
        except KeyError:
            diagnostics.append(
                Diagnostic.error(f"Embedded document {rel_id} could not be read: missing relationship")
            )
            return None

        content_type = part.content_type
        if content_type not in _TEXT_CHUNK_TYPES:
            diagnostics.append(
                Diagnostic.warning(f"Skipped embedded document {part.partname} ({content_type})")
            )
            return None
        try:
            text = part.blob.decode("utf-8")
        except UnicodeDecodeError as exc:
            diagnostics.append(
                Diagnostic.error(f"Embedded document {part.partname} could not be decoded: {exc}")
            )
            return None
        if content_type != "text/plain":
            text = html.unescape(_MARKUP_TAG.sub(" ", text))
        return text

    @staticmethod
    def _embedded_part_diagnostics(document: DocxDocument) -> list[Diagnostic]:
        """Warn about skipped images; error on images whose part is missing."""
        body = document.element.body
        diagnostics: list[Diagnostic] = []
        related_parts = document.part.related_parts
        for rel_id in body.xpath(".//a:blip/@r:embed"):
            if rel_id not in related_parts:
                diagnostics.append(
                    Diagnostic.error(f"Image {rel_id} could not be read: missing relationship")
                )

        images = body.xpath(".//w:drawing | .//w:pict")
        if images:
            diagnostics.append(
                Diagnostic.warning(
                    f"Skipped {len(images)} embedded image(s); text inside images is not extracted"
                )
            )
        return diagnostics

    @staticmethod
    def _conversion_failure(diagnostics: list[Diagnostic]) -> ExtractionFailure | None:
        errors = [d.message for d in diagnostics if d.level == "error"]
        if not errors:
            return None
        return ExtractionFailure(
            ExtractionErrorKind.CONVERSION_ERROR,
            f"DOCX parsing errors: {'; '.join(errors)}",
        )

    @staticmethod
    def _warnings(diagnostics: list[Diagnostic]) -> list[str]:
        warnings = [d.message for d in diagnostics if d.level == "warning"]
        for warning in warnings:
            Log.warning(f"DOCX conversion warning: {warning}")
        return warnings

    @staticmethod
    def _tag_for_style(style: str) -> str | None:
        if style == "Title":
            return "h1"
        heading = _HEADING_STYLE.match(style)
        if heading:
            return f"h{min(int(heading.group(1)), 6)}"
        if style.startswith(_LIST_STYLE_PREFIXES):
            return "li"
        if style in _PARAGRAPH_STYLES:
            return "p"
        return None

    @staticmethod
    def _runs_html(paragraph: Paragraph) -> str:
        out: list[str] = []
        for item in paragraph.iter_inner_content():
            if isinstance(item, Hyperlink):
                href = html.escape(item.address, quote=True)
                out.append(f'<a href="{href}">{html.escape(item.text)}</a>')
                continue
            text = html.escape(item.text)
            if not text:
                continue
            if item.italic:
                text = f"<em>{text}</em>"
            if item.bold:
                text = f"<strong>{text}</strong>"
            out.append(text)
        return "".join(out)

    def _table_html(self, table: Table) -> str:
        rows = []
        for row in table.rows:
            cells = "".join(
                "<td>" + "<br>".join(self._runs_html(p) for p in cell.paragraphs) + "</td>"
                for cell in row.cells
            )
            rows.append(f"<tr>{cells}</tr>")
        return f"<table>{''.join(rows)}</table>"
