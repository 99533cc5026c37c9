"""
Spreadsheet Extractor - request spreadsheet rows -> ProcuracaoRecord

The request spreadsheet is a form export with a fixed 28-column layout
(header in the first row, one request per following row). Columns are read by
position, never by header text.

Usage:
    records = parse_spreadsheet("solicitacoes.xlsx")
    records = extract_records(rows)  # rows already loaded as a grid
"""

import io
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterable, List, Optional, Sequence, Union

import openpyxl

from Procuracao_Functions.errors import ParseError
from Procuracao_Functions.field_accessor import format_scalar
from Procuracao_Functions.procuracao_record import ProcuracaoRecord

logger = logging.getLogger(__name__)

EXPECTED_COLUMNS = 28

# Column index -> record key (plain text cells)
TEXT_COLUMNS: Dict[int, str] = {
    1: "solicitante",
    3: "obra",
    4: "procurador1_nome",
    5: "procurador2_nome",
    6: "procurador1_email",
    7: "procurador2_email",
    8: "procurador1_nacionalidade",
    9: "procurador2_nacionalidade",
    10: "procurador1_profissao",
    11: "procurador2_profissao",
    12: "procurador1_estado_civil",
    13: "procurador2_estado_civil",
    22: "procurador1_rg",
    23: "procurador2_rg",
    24: "procurador1_cpf",
    25: "procurador2_cpf",
    27: "conta_corrente",
}

# Column index -> record key (date cells, normalized to YYYY-MM-DD)
DATE_COLUMNS: Dict[int, str] = {
    0: "carimbo_data_hora",
    2: "data_solicitacao",
    26: "data_ultima_procuracao",
}

# Address fragments (street, number/complement, district, city) per procurator
ADDRESS_COLUMNS: Dict[str, Sequence[int]] = {
    "procurador1_endereco": (14, 16, 18, 20),
    "procurador2_endereco": (15, 17, 19, 21),
}

EMPTY_SHEET_MESSAGE = (
    "A planilha parece estar vazia ou não contém dados nas linhas após o cabeçalho."
)

SpreadsheetSource = Union[str, Path, bytes, bytearray, BinaryIO]


def _cell(row: Sequence[Any], col: int) -> Any:
    return row[col] if col < len(row) else None


def is_blank_cell(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def cell_text(row: Sequence[Any], col: int) -> str:
    """Trimmed text of a cell ('' when blank; numeric 0 is kept)"""
    value = _cell(row, col)
    if is_blank_cell(value):
        return ""
    if isinstance(value, (datetime, date)):
        return cell_date(row, col)
    return format_scalar(value).strip()


def cell_date(row: Sequence[Any], col: int) -> str:
    """
    Calendar day of a date cell as YYYY-MM-DD.

    The day is taken in local time: naive values (what openpyxl returns) are
    already local, aware values are converted to local time first. Non-date
    cells fall back to their trimmed text.
    """
    value = _cell(row, col)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if is_blank_cell(value):
        return ""
    return format_scalar(value).strip()


def compose_address(row: Sequence[Any], columns: Iterable[int]) -> str:
    """Join the non-blank address fragments with ', '"""
    parts = [cell_text(row, col) for col in columns]
    return ", ".join(part for part in parts if part)


def extract_row(row: Sequence[Any]) -> Optional[ProcuracaoRecord]:
    """One grid row -> record, or None for an all-blank row"""
    if not row or all(is_blank_cell(cell) for cell in row):
        return None

    values: Dict[str, Any] = {}
    for col, key in DATE_COLUMNS.items():
        values[key] = cell_date(row, col)
    for col, key in TEXT_COLUMNS.items():
        values[key] = cell_text(row, col)
    for key, columns in ADDRESS_COLUMNS.items():
        values[key] = compose_address(row, columns)

    return ProcuracaoRecord.from_dict(values)


def extract_records(rows: Iterable[Sequence[Any]], skip_header: bool = True) -> List[ProcuracaoRecord]:
    """
    Map grid rows to records, in row order.

    Args:
        rows: Full grid, header row included
        skip_header: Drop the first row before extracting

    Raises:
        ParseError: No data row survives blank-row filtering
    """
    records: List[ProcuracaoRecord] = []
    discarded = 0
    for index, row in enumerate(rows):
        if skip_header and index == 0:
            continue
        record = extract_row(list(row) if row is not None else [])
        if record is None:
            discarded += 1
            continue
        records.append(record)

    if discarded:
        logger.debug(f"Discarded {discarded} blank spreadsheet row(s)")
    if not records:
        raise ParseError(EMPTY_SHEET_MESSAGE)

    logger.info(f"Extracted {len(records)} record(s) from spreadsheet")
    return records


def _open_workbook(source: SpreadsheetSource):
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    elif hasattr(source, "seek"):
        source.seek(0)
    return openpyxl.load_workbook(source, data_only=True, read_only=True)


def read_grid(source: SpreadsheetSource) -> List[List[Any]]:
    """All rows of the first worksheet as lists of cell values"""
    wb = _open_workbook(source)
    try:
        ws = wb.worksheets[0]
        return [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def parse_spreadsheet(source: SpreadsheetSource) -> List[ProcuracaoRecord]:
    """
    Read the first worksheet of an .xlsx workbook and extract its records.

    Args:
        source: Path, raw bytes or binary file-like object (e.g. an upload)

    Raises:
        ParseError: Unreadable workbook, or no data rows after the header
    """
    try:
        grid = read_grid(source)
    except Exception as e:
        logger.error(f"Failed to read spreadsheet: {e}")
        raise ParseError() from e
    return extract_records(grid)
