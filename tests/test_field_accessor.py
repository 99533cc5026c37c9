"""
Tests for the shared value-or-fallback accessor.
Run with: pytest tests/test_field_accessor.py -v
"""
import pytest

from Procuracao_Functions.field_accessor import NOT_INFORMED, get_value, is_informed
from Procuracao_Functions.procuracao_record import ProcuracaoRecord


class TestGetValue:
    @pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
    def test_blank_values_return_fallback(self, value):
        assert get_value({"obra": value}, "obra") == NOT_INFORMED
        assert get_value({"obra": value}, "obra", "Obra") == "Obra"

    def test_missing_key_returns_fallback(self):
        assert get_value({}, "agencia") == NOT_INFORMED
        assert get_value(None, "agencia", "x") == "x"

    def test_value_is_trimmed(self):
        assert get_value({"obra": "  Edifício X  "}, "obra") == "Edifício X"

    def test_numbers_are_stringified(self):
        assert get_value({"conta_corrente": 0}, "conta_corrente") == "0"
        assert get_value({"conta_corrente": 1000.0}, "conta_corrente") == "1000"
        assert get_value({"agencia": 12.5}, "agencia") == "12.5"

    def test_idempotent(self):
        data = {"obra": " Edifício X "}
        first = get_value(data, "obra")
        assert get_value({"obra": first}, "obra") == first

    def test_works_on_records_and_extras(self):
        record = ProcuracaoRecord(obra="Obra Y", extras={"observacao": " urgente "})
        assert get_value(record, "obra") == "Obra Y"
        assert get_value(record, "observacao") == "urgente"
        assert get_value(record, "inexistente") == NOT_INFORMED

    def test_is_informed(self):
        assert is_informed({"conta_corrente": 0}, "conta_corrente")
        assert not is_informed({"conta_corrente": " "}, "conta_corrente")
