"""
Tests for positional spreadsheet extraction.
Run with: pytest tests/test_spreadsheet_extractor.py -v
"""
import io
import time
from datetime import date, datetime, timezone

import openpyxl
import pytest

from Procuracao_Functions.errors import ParseError
from Procuracao_Functions.spreadsheet_extractor import (
    EMPTY_SHEET_MESSAGE,
    cell_date,
    compose_address,
    extract_records,
    parse_spreadsheet,
)

from conftest import HEADER, full_row, make_row


class TestGridExtraction:
    def test_header_is_skipped_and_fields_mapped(self):
        records = extract_records([HEADER, full_row()])
        assert len(records) == 1
        r = records[0]
        assert r.carimbo_data_hora == "2024-01-09"
        assert r.solicitante == "Ana Souza"
        assert r.data_solicitacao == "2024-01-10"
        assert r.obra == "Edifício X"
        assert r.procurador1_nome == "Maria Silva"
        assert r.procurador2_email == "joao@example.com"
        assert r.procurador1_estado_civil == "casada"
        assert r.procurador2_rg == "MG-7.654.321"
        assert r.procurador1_cpf == "123.456.789-00"
        assert r.data_ultima_procuracao == "2023-01-05"
        assert r.conta_corrente == "1000-5"

    def test_addresses_are_composed_without_stray_separators(self):
        r = extract_records([HEADER, full_row()])[0]
        assert r.procurador1_endereco == "Rua A, 10, Bairro B, Cidade C"
        assert r.procurador2_endereco == "Av. B, 20, apto 301, Centro, Contagem/MG"

    def test_address_fragments_example(self):
        row = make_row(c14="Rua A", c16="", c18="Bairro B", c20="Cidade C")
        assert compose_address(row, (14, 16, 18, 20)) == "Rua A, Bairro B, Cidade C"
        assert compose_address(make_row(), (14, 16, 18, 20)) == ""

    def test_blank_rows_are_discarded(self):
        rows = [HEADER, [None] * 28, ["", "  ", None], make_row(c3="Obra Y"), []]
        records = extract_records(rows)
        assert [r.obra for r in records] == ["Obra Y"]

    def test_short_rows_are_padded(self):
        records = extract_records([HEADER, ["2024-02-01", "Ana", "2024-02-02", "Obra Curta"]])
        assert records[0].obra == "Obra Curta"
        assert records[0].conta_corrente == ""
        assert records[0].procurador1_endereco == ""

    def test_zero_account_number_is_kept(self):
        records = extract_records([HEADER, make_row(c3="Obra Y", c27=0)])
        assert records[0].conta_corrente == "0"

    def test_non_date_cells_fall_back_to_text(self):
        records = extract_records([HEADER, make_row(c2=" 10/01/2024 ", c3="Obra Y")])
        assert records[0].data_solicitacao == "10/01/2024"

    def test_empty_sheet_raises_parse_error(self):
        with pytest.raises(ParseError) as exc:
            extract_records([HEADER, [None] * 28])
        assert exc.value.message == EMPTY_SHEET_MESSAGE
        with pytest.raises(ParseError):
            extract_records([HEADER])

    def test_extraction_is_deterministic(self):
        rows = [HEADER, full_row(), make_row(c3="Obra Y")]
        assert extract_records(rows) == extract_records(rows)


class TestDateCells:
    def test_naive_local_midnight_keeps_calendar_day(self):
        assert cell_date([datetime(2024, 3, 15, 0, 0)], 0) == "2024-03-15"
        assert cell_date([date(2024, 3, 15)], 0) == "2024-03-15"

    def test_aware_local_midnight_keeps_calendar_day(self):
        local_midnight = datetime(2024, 3, 15).astimezone()
        assert cell_date([local_midnight.astimezone(timezone.utc)], 0) == "2024-03-15"


HOST_TIMEZONES = ["America/Sao_Paulo", "Asia/Tokyo", "UTC", "Pacific/Kiritimati"]


@pytest.fixture(params=HOST_TIMEZONES)
def host_timezone(request, monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", request.param)
    time.tzset()
    yield request.param
    monkeypatch.undo()
    time.tzset()


class TestDateCellsAcrossTimezones:
    def test_workbook_dates_keep_calendar_day(self, host_timezone, xlsx_path):
        record = parse_spreadsheet(xlsx_path)[0]
        assert record.carimbo_data_hora == "2024-01-09"
        assert record.data_solicitacao == "2024-01-10"
        assert record.data_ultima_procuracao == "2023-01-05"

    def test_late_evening_timestamp_keeps_calendar_day(self, host_timezone, tmp_path):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(HEADER)
        ws.append(make_row(c0=datetime(2024, 12, 31, 23, 30), c2=datetime(2024, 3, 1, 0, 0), c3="Obra Y"))
        path = tmp_path / "horarios.xlsx"
        wb.save(path)

        record = parse_spreadsheet(path)[0]
        assert record.carimbo_data_hora == "2024-12-31"
        assert record.data_solicitacao == "2024-03-01"

    def test_aware_local_midnight(self, host_timezone):
        local_midnight = datetime(2024, 3, 15).astimezone()
        assert cell_date([local_midnight.astimezone(timezone.utc)], 0) == "2024-03-15"


class TestWorkbookParsing:
    def test_parse_xlsx_file(self, xlsx_path):
        records = parse_spreadsheet(xlsx_path)
        assert len(records) == 2
        assert records[0].data_solicitacao == "2024-01-10"
        assert records[0].procurador1_endereco == "Rua A, 10, Bairro B, Cidade C"
        assert records[1].obra == "Obra Y"
        assert records[1].conta_corrente == "0"

    def test_parse_bytes_and_file_objects(self, xlsx_path):
        data = xlsx_path.read_bytes()
        assert parse_spreadsheet(data) == parse_spreadsheet(io.BytesIO(data))

    def test_reparsing_is_idempotent(self, xlsx_path):
        assert parse_spreadsheet(xlsx_path) == parse_spreadsheet(xlsx_path)

    def test_malformed_file_raises_parse_error(self):
        with pytest.raises(ParseError) as exc:
            parse_spreadsheet(b"this is not a workbook")
        assert "Falha ao ler o arquivo" in exc.value.message
        assert exc.value.__cause__ is not None

    def test_header_only_workbook_raises_parse_error(self, tmp_path):
        wb = openpyxl.Workbook()
        wb.active.append(HEADER)
        path = tmp_path / "vazia.xlsx"
        wb.save(path)
        with pytest.raises(ParseError, match="vazia"):
            parse_spreadsheet(path)
