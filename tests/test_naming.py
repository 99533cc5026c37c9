"""
Tests for output filenames and the mail-compose link.
Run with: pytest tests/test_naming.py -v
"""
import re
from datetime import datetime
from urllib.parse import unquote

from Procuracao_Functions.naming import (
    MAIL_BODY,
    build_filename,
    build_mailto_link,
    mail_subject,
    resolve_recipient,
    sanitize_obra,
)
from Procuracao_Functions.procuracao_record import ProcuracaoRecord


class TestFilename:
    def test_end_to_end_filename(self, sample_record):
        assert build_filename(sample_record, "procuracao", datetime(2024, 5, 2)) == \
            "procuracao_edificio_x_2024-05-02"

    def test_defaults_to_current_date(self, sample_record):
        name = build_filename(sample_record, "procuracao")
        assert re.fullmatch(r"procuracao_edificio_x_\d{4}-\d{2}-\d{2}", name)

    def test_missing_obra_falls_back(self):
        assert sanitize_obra(ProcuracaoRecord()) == "obra"
        assert build_filename(ProcuracaoRecord(), "procuracao_ABNT", datetime(2024, 1, 1)) == \
            "procuracao_ABNT_obra_2024-01-01"

    def test_special_characters_become_underscores(self):
        assert sanitize_obra(ProcuracaoRecord(obra="Res. Ação/Norte 2")) == "res__acao_norte_2"


class TestMailLink:
    def test_recipient_prefers_first_procurador(self, two_procuradores_record):
        record = two_procuradores_record.with_values(procurador2_email="joao@example.com")
        assert resolve_recipient(record) == "maria@example.com"
        assert resolve_recipient(record.with_values(procurador1_email=" ")) == "joao@example.com"
        assert resolve_recipient(ProcuracaoRecord()) == ""

    def test_subject(self, sample_record):
        assert mail_subject(sample_record) == "Procuração - Obra Edifício X"
        assert mail_subject(ProcuracaoRecord()) == "Procuração - Obra Documento"

    def test_mailto_link(self, sample_record):
        link = build_mailto_link(sample_record)
        assert link.startswith("mailto:maria@example.com?subject=")
        subject = link.split("subject=")[1].split("&body=")[0]
        body = link.split("&body=")[1]
        assert unquote(subject) == "Procuração - Obra Edifício X"
        assert unquote(body) == MAIL_BODY
