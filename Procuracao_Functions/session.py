"""
ProcuracaoSession - application context for one user session

Holds the state the pipeline needs between steps (parsed records, the selected
record and its AI-corrected variant, the history ledger) and runs the
generation pipeline:

    spreadsheet / form -> record -> (AI correction) -> validation -> render -> history

Corrections are sequenced with a monotonically increasing token: a result is
applied only if no newer selection happened since the request started, so the
last request wins, not the last response.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from Procuracao_Functions.ai_assistant import CorrectionResult, GroqAnalyzer, GroqTextCorrector
from Procuracao_Functions.docx_renderer import RenderedDocument, render_abnt_docx, render_plain_docx
from Procuracao_Functions.document_composer import ComposedDocument, compose_document
from Procuracao_Functions.errors import ValidationWarning
from Procuracao_Functions.history import HistoryItem, HistoryLedger, make_history_item
from Procuracao_Functions.naming import build_filename, build_mailto_link
from Procuracao_Functions.pdf_renderer import render_pdf
from Procuracao_Functions.procuracao_record import ProcuracaoRecord, record_from_form
from Procuracao_Functions.spreadsheet_extractor import SpreadsheetSource, parse_spreadsheet
from Procuracao_Functions.validator import ValidationResult, validate

logger = logging.getLogger(__name__)

RENDERERS: Dict[str, Callable[..., RenderedDocument]] = {
    "docx": render_plain_docx,
    "docx_abnt": render_abnt_docx,
    "pdf": render_pdf,
}


class ProcuracaoSession:
    def __init__(self, history: Optional[HistoryLedger] = None,
                 corrector: Optional[GroqTextCorrector] = None,
                 analyzer: Optional[GroqAnalyzer] = None):
        self.history = history if history is not None else HistoryLedger()
        self.corrector = corrector
        self.analyzer = analyzer

        self.parsed_records: List[ProcuracaoRecord] = []
        self.raw_record: Optional[ProcuracaoRecord] = None
        self.corrected_record: Optional[ProcuracaoRecord] = None
        self.source_name: str = ""
        self.ai_analysis: str = ""
        self.selected_index: Optional[int] = None
        self.upload_key: Optional[Tuple[str, int]] = None
        self._correction_token = 0

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @property
    def selected(self) -> Optional[ProcuracaoRecord]:
        """Corrected variant when present, else the raw record"""
        return self.corrected_record or self.raw_record

    def select(self, record: Optional[ProcuracaoRecord]):
        self.raw_record = record
        self.selected_index = None
        self.corrected_record = None
        self.ai_analysis = ""
        self._correction_token += 1

    def select_index(self, index: int):
        """Select a parsed row by position and remember the position"""
        self.select(self.parsed_records[index])
        self.selected_index = index

    def reset(self):
        self.parsed_records = []
        self.source_name = ""
        self.upload_key = None
        self.select(None)

    def accept_upload(self, key: Optional[Tuple[str, int]]) -> bool:
        """
        Track the uploader's (name, size); True only when a new file arrived.

        None means the uploader was emptied and forgets the last file.
        """
        if key is None or key == self.upload_key:
            self.upload_key = key
            return False
        self.upload_key = key
        return True

    def load_spreadsheet(self, source: SpreadsheetSource, name: str = "") -> List[ProcuracaoRecord]:
        """
        Parse an upload and select its first record.

        Raises:
            ParseError: the previous records and selection are left untouched
        """
        records = parse_spreadsheet(source)
        self.parsed_records = records
        self.source_name = name
        self.select_index(0)
        return records

    def load_form(self, values, now: Optional[datetime] = None) -> ProcuracaoRecord:
        now = now or datetime.now()
        record = values if isinstance(values, ProcuracaoRecord) else record_from_form(values)
        self.reset()
        self.source_name = f"Formulário Preenchido - {now.strftime('%H:%M:%S')}"
        self.select(record)
        return record

    # ------------------------------------------------------------------
    # AI correction / analysis
    # ------------------------------------------------------------------
    def begin_correction(self) -> int:
        return self._correction_token

    def apply_correction(self, token: int, result: CorrectionResult) -> bool:
        """Store a correction result unless the selection changed meanwhile"""
        if token != self._correction_token:
            logger.warning("Discarding stale correction result")
            return False
        self.corrected_record = result.record
        return True

    def run_correction(self) -> Optional[CorrectionResult]:
        if self.raw_record is None or self.corrector is None:
            return None
        token = self.begin_correction()
        result = self.corrector.correct(self.raw_record)
        self.apply_correction(token, result)
        return result

    def run_analysis(self) -> str:
        if self.selected is None or self.analyzer is None:
            return ""
        self.ai_analysis = self.analyzer.analyze(self.selected)
        return self.ai_analysis

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def validation(self) -> ValidationResult:
        return validate(self.selected)

    def compose(self) -> Optional[ComposedDocument]:
        return compose_document(self.selected) if self.selected is not None else None

    def preview_text(self) -> str:
        composed = self.compose()
        return composed.plain_text() if composed else ""

    def generate(self, kind: str, confirm_override: bool = False,
                 now: Optional[datetime] = None) -> RenderedDocument:
        """
        Render the selected record and record the run in the history.

        Raises:
            ValidationWarning: required fields missing and no override confirmed
            RenderError: the renderer failed (history is left unchanged)
        """
        if kind not in RENDERERS:
            raise ValueError(f"Unknown document kind: {kind}")
        record = self.selected
        result = validate(record)
        if record is None:
            raise ValidationWarning(result.message)
        if not result.valid and not confirm_override:
            raise ValidationWarning(result.message, missing_fields=result.missing_fields)

        document = RENDERERS[kind](record)
        self.add_to_history(record, kind, now=now)
        logger.info(f"Generated {document.filename}")
        return document

    def add_to_history(self, record: ProcuracaoRecord, kind: str,
                       now: Optional[datetime] = None) -> HistoryItem:
        file_name = self.source_name or build_filename(record, f"procuracao_{kind}")
        item = make_history_item(record, file_name, now=now)
        self.history.add(item)
        return item

    def mailto_link(self) -> str:
        return build_mailto_link(self.selected) if self.selected is not None else ""
