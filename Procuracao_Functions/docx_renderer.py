"""
DOCX Renderers - plain and ABNT layouts of a ComposedDocument

Both layouts consume the composer's spans as-is; they differ only in page
setup, fonts, spacing and the ABNT signature blocks.

Usage:
    doc = render_plain_docx(record)
    doc = render_abnt_docx(record)
    st.download_button(data=doc.content, file_name=doc.filename, mime=doc.mime_type)
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Iterable, Optional

try:
    from docx import Document
    from docx.enum.text import WD_ALIGN_PARAGRAPH
    from docx.oxml.ns import qn
    from docx.shared import Cm, Pt, Twips
except ImportError:
    Document = None

from Procuracao_Functions.document_composer import (
    SIGNATURE_LINE,
    ComposedDocument,
    TextSpan,
    compose_document,
)
from Procuracao_Functions.errors import RenderError
from Procuracao_Functions.naming import build_filename

logger = logging.getLogger(__name__)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

MISSING_LIBRARY_MESSAGE = (
    "A biblioteca de geração de DOCX (python-docx) não está instalada. "
    "Instale as dependências e tente novamente."
)


@dataclass
class RenderedDocument:
    filename: str
    content: bytes
    mime_type: str
    output_format: str


def docx_available() -> bool:
    return Document is not None


# ============================================================================
# Shared helpers
# ============================================================================

def add_spans(paragraph, spans: Iterable[TextSpan]):
    for span in spans:
        run = paragraph.add_run(span.text)
        if span.bold:
            run.bold = True


def add_centered(doc, text: str, bold: bool = False, space_after=None):
    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run(text)
    if bold:
        run.bold = True
    if space_after is not None:
        p.paragraph_format.space_after = space_after
    return p


def add_body_paragraph(doc, composed: ComposedDocument, line_spacing: float, space_after=None):
    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY
    fmt = p.paragraph_format
    fmt.first_line_indent = Twips(720)
    fmt.line_spacing = line_spacing
    if space_after is not None:
        fmt.space_after = space_after
    add_spans(p, composed.paragraph_spans)
    return p


def set_margins(doc, top, right, bottom, left):
    for section in doc.sections:
        section.top_margin = top
        section.right_margin = right
        section.bottom_margin = bottom
        section.left_margin = left


def set_default_font(doc, name: str, size):
    style = doc.styles["Normal"]
    style.font.name = name
    style.font.size = size
    rpr = style.element.get_or_add_rPr()
    rpr.get_or_add_rFonts().set(qn("w:eastAsia"), name)


def _to_bytes(doc) -> bytes:
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def _ensure_library(output_format: str):
    if not docx_available():
        logger.error("python-docx is not available; cannot render DOCX")
        raise RenderError(MISSING_LIBRARY_MESSAGE, output_format=output_format)


# ============================================================================
# Layouts
# ============================================================================

def build_plain_docx(composed: ComposedDocument):
    """Single-spaced, 1-inch margins, centered bold title, justified body"""
    doc = Document()
    set_margins(doc, Twips(1440), Twips(1440), Twips(1440), Twips(1440))

    title = doc.add_paragraph()
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    title.paragraph_format.space_after = Twips(400)
    run = title.add_run(composed.title)
    run.bold = True
    run.font.size = Pt(12)

    add_body_paragraph(doc, composed, line_spacing=1.0, space_after=Twips(600))
    add_centered(doc, composed.closing)
    return doc


def build_abnt_docx(composed: ComposedDocument):
    """Times New Roman 12pt, 3/2 cm margins, 1.5 spacing, signature blocks"""
    doc = Document()
    set_default_font(doc, "Times New Roman", Pt(12))
    set_margins(doc, top=Cm(3), right=Cm(2), bottom=Cm(2), left=Cm(3))

    title = doc.add_paragraph()
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    title.paragraph_format.space_after = Twips(800)
    run = title.add_run(composed.title.upper())
    run.bold = True
    run.font.all_caps = True
    run.font.size = Pt(14)

    add_body_paragraph(doc, composed, line_spacing=1.5)
    spacer = doc.add_paragraph()
    spacer.paragraph_format.space_after = Twips(400)
    add_centered(doc, composed.closing, space_after=Twips(800))

    for block in composed.signature_blocks:
        add_centered(doc, SIGNATURE_LINE)
        if block.representative:
            add_centered(doc, block.name, bold=True)
            add_centered(doc, block.representative, space_after=Twips(400))
        else:
            add_centered(doc, block.name, bold=True, space_after=Twips(400))
    return doc


def _render(record, builder, prefix: str, output_format: str,
            composed: Optional[ComposedDocument] = None) -> RenderedDocument:
    _ensure_library(output_format)
    try:
        composed = composed or compose_document(record)
        content = _to_bytes(builder(composed))
    except RenderError:
        raise
    except Exception as e:
        logger.error(f"Erro ao gerar DOCX ({output_format}): {e}")
        raise RenderError(
            "Ocorreu um erro inesperado ao gerar o arquivo .docx. Verifique os dados e tente novamente.",
            output_format=output_format,
        ) from e
    return RenderedDocument(
        filename=f"{build_filename(record, prefix)}.docx",
        content=content,
        mime_type=DOCX_MIME,
        output_format=output_format,
    )


def render_plain_docx(record, composed: Optional[ComposedDocument] = None) -> RenderedDocument:
    return _render(record, build_plain_docx, "procuracao", "docx", composed)


def render_abnt_docx(record, composed: Optional[ComposedDocument] = None) -> RenderedDocument:
    return _render(record, build_abnt_docx, "procuracao_ABNT", "docx_abnt", composed)
