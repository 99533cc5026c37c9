"""Shared fixtures: sample records, spreadsheet rows and a fake Groq client."""
import json
from datetime import date
from types import SimpleNamespace

import openpyxl
import pytest

from Procuracao_Functions.procuracao_record import ProcuracaoRecord

HEADER = [f"Coluna {i}" for i in range(28)]


def make_row(**cells):
    """28-cell spreadsheet row; keyword 'c<index>' sets that column"""
    row = [""] * 28
    for key, value in cells.items():
        row[int(key[1:])] = value
    return row


def full_row():
    return make_row(
        c0=date(2024, 1, 9),
        c1="Ana Souza",
        c2=date(2024, 1, 10),
        c3="Edifício X",
        c4="  Maria Silva ",
        c5="João Pereira",
        c6="maria@example.com",
        c7="joao@example.com",
        c8="brasileira",
        c9="brasileiro",
        c10="engenheira civil",
        c11="administrador",
        c12="casada",
        c13="solteiro",
        c14="Rua A, 10",
        c15="Av. B, 20",
        c16="",
        c17="apto 301",
        c18="Bairro B",
        c19="Centro",
        c20="Cidade C",
        c21="Contagem/MG",
        c22="MG-1.234.567",
        c23="MG-7.654.321",
        c24="123.456.789-00",
        c25="987.654.321-00",
        c26=date(2023, 1, 5),
        c27="1000-5",
    )


@pytest.fixture
def sample_record():
    return ProcuracaoRecord(
        obra="Edifício X",
        data_solicitacao="2024-01-10",
        procurador1_nome="Maria Silva",
        procurador1_nacionalidade="brasileira",
        procurador1_estado_civil="casada",
        procurador1_profissao="engenheira civil",
        procurador1_cpf="123.456.789-00",
        procurador1_rg="MG-1.234.567",
        procurador1_endereco="Rua A, 10, Bairro B, Cidade C",
        procurador1_email="maria@example.com",
        agencia="1234",
        operacao="003",
        conta_corrente="1000-5",
    )


@pytest.fixture
def two_procuradores_record(sample_record):
    return sample_record.with_values(
        procurador2_nome="João Pereira",
        procurador2_nacionalidade="brasileiro",
        procurador2_estado_civil="solteiro",
        procurador2_profissao="administrador",
        procurador2_cpf="987.654.321-00",
        procurador2_rg="MG-7.654.321",
        procurador2_endereco="Av. B, 20, apto 301, Centro, Contagem/MG",
    )


@pytest.fixture
def xlsx_path(tmp_path):
    """Workbook with a header, one full row, one blank row and one minimal row"""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(HEADER)
    ws.append(full_row())
    ws.append([None] * 28)
    ws.append(make_row(c3="Obra Y", c4="Carlos Lima", c27=0))
    path = tmp_path / "solicitacoes.xlsx"
    wb.save(path)
    return path


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeGroqClient:
    def __init__(self, content=None, error=None):
        if isinstance(content, dict):
            content = json.dumps(content, ensure_ascii=False)
        self.completions = FakeCompletions(content, error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def fake_groq():
    return FakeGroqClient
