"""
PDF Renderer - flat Helvetica layout of a ComposedDocument

A4 page, 20 mm side margins: bold centered title, the paragraph wrapped to the
page width and justified (word spacing stretched on every line but the last),
then the centered closing line below the paragraph.
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional

try:
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.units import mm
    from reportlab.lib.utils import simpleSplit
    from reportlab.pdfbase.pdfmetrics import stringWidth
    from reportlab.pdfgen import canvas
except ImportError:
    canvas = None

from Procuracao_Functions.docx_renderer import RenderedDocument
from Procuracao_Functions.document_composer import ComposedDocument, compose_document
from Procuracao_Functions.errors import RenderError
from Procuracao_Functions.naming import build_filename

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
TITLE_SIZE = 14
BODY_SIZE = 11
LINE_HEIGHT_FACTOR = 1.15

MISSING_LIBRARY_MESSAGE = (
    "A biblioteca de geração de PDF (reportlab) não está instalada. "
    "Instale as dependências e tente novamente."
)


@dataclass
class PdfLayout:
    """Wrapped body lines and vertical positions (points, from the page bottom)"""
    lines: List[str]
    title_y: float
    body_top: float
    leading: float
    closing_y: float


def pdf_available() -> bool:
    return canvas is not None


def body_text(composed: ComposedDocument) -> str:
    return composed.paragraph_text


def layout_page(composed: ComposedDocument) -> PdfLayout:
    page_width, page_height = A4
    margin = 20 * mm
    max_width = page_width - 2 * margin

    lines = simpleSplit(body_text(composed), FONT, BODY_SIZE, max_width)
    leading = BODY_SIZE * LINE_HEIGHT_FACTOR
    title_y = page_height - 30 * mm
    body_top = title_y - 15 * mm
    closing_y = body_top - len(lines) * leading - 15 * mm
    return PdfLayout(lines=lines, title_y=title_y, body_top=body_top,
                     leading=leading, closing_y=closing_y)


def _draw_justified(c, line: str, x: float, y: float, width: float, last: bool):
    text = c.beginText(x, y)
    text.setFont(FONT, BODY_SIZE)
    gaps = line.count(" ")
    if not last and gaps:
        extra = (width - stringWidth(line, FONT, BODY_SIZE)) / gaps
        text.setWordSpace(max(extra, 0))
    text.textLine(line)
    c.drawText(text)


def build_pdf(composed: ComposedDocument) -> bytes:
    page_width, page_height = A4
    margin = 20 * mm
    max_width = page_width - 2 * margin
    layout = layout_page(composed)

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(composed.title)

    c.setFont(FONT_BOLD, TITLE_SIZE)
    c.drawCentredString(page_width / 2.0, layout.title_y, composed.title)

    y = layout.body_top
    for index, line in enumerate(layout.lines):
        if y < margin:
            c.showPage()
            y = page_height - margin
        _draw_justified(c, line, margin, y, max_width, last=index == len(layout.lines) - 1)
        y -= layout.leading

    closing_y = layout.closing_y if layout.closing_y >= margin else y - 15 * mm
    if closing_y < margin:
        c.showPage()
        closing_y = page_height - margin
    c.setFont(FONT, BODY_SIZE)
    c.drawCentredString(page_width / 2.0, closing_y, composed.closing)

    c.save()
    return buffer.getvalue()


def render_pdf(record, composed: Optional[ComposedDocument] = None) -> RenderedDocument:
    if not pdf_available():
        logger.error("reportlab is not available; cannot render PDF")
        raise RenderError(MISSING_LIBRARY_MESSAGE, output_format="pdf")
    try:
        composed = composed or compose_document(record)
        content = build_pdf(composed)
    except Exception as e:
        logger.error(f"Erro ao gerar PDF: {e}")
        raise RenderError(
            "Ocorreu um erro inesperado ao gerar o arquivo .pdf. Verifique os dados e tente novamente.",
            output_format="pdf",
        ) from e
    return RenderedDocument(
        filename=f"{build_filename(record, 'procuracao')}.pdf",
        content=content,
        mime_type=PDF_MIME,
        output_format="pdf",
    )
