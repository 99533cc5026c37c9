"""
UI tests for the Streamlit entry script, driven through streamlit.testing.
Run with: pytest tests/test_app.py -v
"""
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from Procuracao_Functions.session import ProcuracaoSession

APP_PATH = str(Path(__file__).resolve().parent.parent / "app.py")


class CountingSession(ProcuracaoSession):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.select_index_calls = 0

    def select_index(self, index: int):
        self.select_index_calls += 1
        super().select_index(index)


def seeded_app(session):
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.session_state["procuracao_session"] = session
    at.session_state["uploader_nonce"] = 0
    at.session_state["generated"] = {}
    at.session_state["error"] = ""
    return at


class TestRecordSelector:
    @pytest.mark.parametrize("duplicate", [True, False])
    def test_choosing_second_row_settles(self, sample_record, two_procuradores_record, duplicate):
        session = CountingSession()
        second = sample_record.with_values() if duplicate else two_procuradores_record
        session.parsed_records = [sample_record, second]
        session.select_index(0)
        session.select_index_calls = 0

        at = seeded_app(session).run()
        assert not at.exception
        at.radio[0].set_value(1).run()

        assert not at.exception
        assert session.select_index_calls == 1
        assert session.selected_index == 1
        assert at.radio[0].value == 1
