import base64
import io

import docx
import pytest
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.packuri import PackURI
from docx.opc.part import Part
from docx.oxml import parse_xml
from docx.oxml.ns import nsdecls, qn
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF whose only text is 'Hello World'."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a three-page resume PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "John Doe - Software Engineer")
    c.showPage()
    c.drawString(72, 720, "Experience: Acme Corp 2019-2024")
    c.showPage()
    c.drawString(72, 720, "Skills: Python, PostgreSQL")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def encrypted_pdf_bytes() -> bytes:
    """Generate a PDF that needs the user password 'secret' to open."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter, encrypt="secret")
    c.drawString(72, 720, "Confidential resume")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_docx_bytes() -> bytes:
    """Generate a DOCX with a title, body paragraphs, a bullet and a table."""
    document = docx.Document()
    document.add_heading("Jane Smith", level=0)
    document.add_paragraph("Senior   Engineer\twith Python")
    document.add_paragraph("")
    document.add_paragraph("Led the payments team", style="List Bullet")
    table = document.add_table(rows=1, cols=2)
    table.cell(0, 0).text = "Skills"
    table.cell(0, 1).text = "Go, SQL"
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


@pytest.fixture()
def empty_docx_bytes() -> bytes:
    """Generate a valid DOCX without any text."""
    buf = io.BytesIO()
    docx.Document().save(buf)
    return buf.getvalue()


PIXEL_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


def _save(document) -> bytes:
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


def _append_body_xml(document, xml: str) -> None:
    """Insert raw WordprocessingML at the end of the body, before the section properties."""
    document.element.body.sectPr.addprevious(parse_xml(xml))


def _content_control(text: str) -> str:
    return (
        f'<w:sdt {nsdecls("w")}><w:sdtPr/><w:sdtContent>'
        f"<w:p><w:r><w:t>{text}</w:t></w:r></w:p>"
        "</w:sdtContent></w:sdt>"
    )


@pytest.fixture()
def sdt_docx_bytes() -> bytes:
    """Generate a DOCX whose second paragraph sits inside a body-level content control."""
    document = docx.Document()
    document.add_paragraph("Visible line")
    _append_body_xml(document, _content_control("Jane Smith Experience In Content Control"))
    return _save(document)


@pytest.fixture()
def sdt_only_docx_bytes() -> bytes:
    """Generate a DOCX (template style) whose only text is inside a content control."""
    document = docx.Document()
    _append_body_xml(document, _content_control("Senior Engineer"))
    return _save(document)


@pytest.fixture()
def alt_chunk_docx_bytes() -> bytes:
    """Generate a DOCX that embeds a plain-text altChunk part."""
    document = docx.Document()
    document.add_paragraph("Summary")
    chunk = Part(
        PackURI("/word/afchunk1.txt"),
        "text/plain",
        b"Imported from an older resume",
        document.part.package,
    )
    rel_id = document.part.relate_to(chunk, RT.A_F_CHUNK)
    _append_body_xml(document, f'<w:altChunk {nsdecls("w", "r")} r:id="{rel_id}"/>')
    return _save(document)


@pytest.fixture()
def dangling_alt_chunk_docx_bytes() -> bytes:
    """Generate a DOCX whose altChunk points at a relationship that does not exist."""
    document = docx.Document()
    document.add_paragraph("Jane Smith")
    _append_body_xml(document, f'<w:altChunk {nsdecls("w", "r")} r:id="rId999"/>')
    return _save(document)


@pytest.fixture()
def docx_with_image_bytes() -> bytes:
    """Generate a DOCX with one paragraph of text and one inline picture."""
    document = docx.Document()
    document.add_paragraph("Jane Smith")
    document.add_picture(io.BytesIO(PIXEL_PNG))
    return _save(document)


@pytest.fixture()
def dangling_image_docx_bytes() -> bytes:
    """Generate a DOCX whose picture references an image relationship that does not exist."""
    document = docx.Document()
    document.add_paragraph("Jane Smith")
    document.add_picture(io.BytesIO(PIXEL_PNG))
    blip = document.element.body.xpath(".//a:blip")[0]
    blip.set(qn("r:embed"), "rId998")
    return _save(document)
