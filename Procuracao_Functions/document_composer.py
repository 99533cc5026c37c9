"""
Document Composer - single source of truth for the procuração text

Builds the legal paragraph once, as a sequence of styled spans, and hands the
same ComposedDocument to every renderer (plain DOCX, ABNT DOCX, PDF) and to the
text preview. Renderers only lay the spans out; they never rebuild text.

Key principles:
1. Every record value goes through get_value() with the shared placeholder
2. Bold is applied to exactly: grantor, director, procurator names,
   "SEMPRE EM CONJUNTO" and "NÃO PODENDO SUBSTABELECER"
3. The request date is built from its Y/M/D parts only (no timezone shifts)
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import List, Optional

from Procuracao_Functions.field_accessor import get_value
from Procuracao_Functions.procuracao_record import named_procurador_indexes, procurador_key

logger = logging.getLogger(__name__)

TITLE = "PROCURAÇÃO"
NO_PROCURADORES = "[PROCURADORES NÃO INFORMADOS]"
PROCURADOR_SEPARATOR = "; "

DEFAULT_INSTITUTION = "CAIXA ECONÔMICA FEDERAL"
DEFAULT_CITY = "Belo Horizonte"

# Fixed legal wording. Normalized on purpose from the source template: the grantor name
# carries its accents (COMÉRCIO) and no clause has a space before a comma
# ("Rua Polos, nº", " abrir, fechar"). Every output uses these constants verbatim.
GRANTOR_NAME = "LCM CONSTRUÇÃO E COMÉRCIO S/A"
DIRECTOR_NAME = "LUIZ OTÁVIO FONTES JUNQUEIRA"
JOINT_CLAUSE = "SEMPRE EM CONJUNTO"
NO_SUBSTITUTION_CLAUSE = "NÃO PODENDO SUBSTABELECER"

SIGNATURE_LINE = "________________________________________"

MONTHS_PT = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)

_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_BR_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

# Boilerplate pieces, in paragraph order (normalized wording, see GRANTOR_NAME)
_OPENING = (
    "Pelo presente instrumento particular de procuração, firmado em {date}, "
    "subscreve este documento a outorgante "
)
_GRANTOR_DETAILS = (
    ", CNPJ 19.758.842/0001-35, com sede nesta capital, na Rua Polos, nº 150 – sala 201, "
    "representada por seu diretor "
)
_DIRECTOR_DETAILS = (
    ", brasileiro, separado judicialmente, engenheiro civil, CPF 303.269.316-00, "
    "CI M-738.694 (SSP/MG), residente em Nova Lima/MG, à rua cinco, 445, Condomínio Riviera; "
    "parte(s) que se identificou(ram) ser(em) a(s) própria(s), conforme documentação "
    "apresentada do que dou fé. E, pelo(a-s) outorgante(s) me foi dito que nomeia(m) e "
    "constitui(em) seu(a-s) bastante(s) procurador(a-es): "
)
_POWERS = (
    " abrir, fechar, movimentá-la, emitir e endossar cheques, desde que tenham o necessário "
    "saldo, fazer retiradas mediante recibos, autorizar débitos e pagamentos por qualquer "
    "meio, inclusive eletrônico, requisitar talões de cheques, fazer movimentações "
    "eletrônicas, cadastrar, alterar, desbloquear e utilizar senhas eletrônicas no internet "
    "banking e, enfim, praticar todos os demais atos necessários ao bom, fiel e completo "
    "desempenho deste mandato, "
)
_VALIDITY = ". O qual terá prazo de validade de 01 (um) ano, a contar da presente data."


@dataclass(frozen=True)
class TextSpan:
    text: str
    bold: bool = False


@dataclass
class SignatureBlock:
    """Signature line + bold name (+ optional representative line)"""
    name: str
    representative: Optional[str] = None


@dataclass
class ComposedDocument:
    title: str
    formatted_date: str
    procuradores_spans: List[TextSpan]
    paragraph_spans: List[TextSpan]
    closing: str
    signature_blocks: List[SignatureBlock] = field(default_factory=list)

    @property
    def procuradores_text(self) -> str:
        return "".join(span.text for span in self.procuradores_spans)

    @property
    def paragraph_text(self) -> str:
        return "".join(span.text for span in self.paragraph_spans)

    def bold_texts(self) -> List[str]:
        return [span.text for span in self.paragraph_spans if span.bold]

    def plain_text(self) -> str:
        """Flat preview: title, paragraph and closing line separated by blank lines"""
        return f"{self.title}\n\n{self.paragraph_text}\n\n{self.closing}"


# ============================================================================
# Dates
# ============================================================================

def _today_utc() -> date:
    return datetime.now(timezone.utc).date()


def parse_request_date(raw: str) -> Optional[date]:
    """YYYY-MM-DD (optionally followed by a time part) or DD/MM/YYYY; None if unparseable"""
    text = raw.split("T")[0].strip().split(" ")[0]
    try:
        m = _ISO_DATE.match(text)
        if m:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        m = _BR_DATE.match(text)
        if m:
            return date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
    except ValueError:
        return None
    return None


def resolve_request_date(record, today: Optional[date] = None) -> date:
    today = today or _today_utc()
    raw = get_value(record, "data_solicitacao", today.isoformat())
    parsed = parse_request_date(raw)
    if parsed is None:
        logger.warning(f"Unparseable request date {raw!r}; using {today.isoformat()}")
        return today
    return parsed


def format_date_pt(value: date) -> str:
    """15 de março de 2024"""
    return f"{value.day} de {MONTHS_PT[value.month - 1]} de {value.year}"


# ============================================================================
# Clauses
# ============================================================================

def procurador_details(record, index: int) -> str:
    def val(attribute: str) -> str:
        return get_value(record, procurador_key(index, attribute))

    return (
        f", {val('nacionalidade')}, maior, {val('estado_civil')}, {val('profissao')}, "
        f"CPF nº {val('cpf')} e carteira de identidade nº {val('rg')}, "
        f"residente e domiciliado a {val('endereco')}"
    )


def build_procuradores_spans(record) -> List[TextSpan]:
    indexes = named_procurador_indexes(record)
    if not indexes:
        return [TextSpan(NO_PROCURADORES)]

    spans: List[TextSpan] = []
    for position, n in enumerate(indexes):
        if position > 0:
            spans.append(TextSpan(PROCURADOR_SEPARATOR))
        spans.append(TextSpan(get_value(record, procurador_key(n, "nome")).upper(), bold=True))
        spans.append(TextSpan(procurador_details(record, n)))
    return spans


def build_procuradores_text(record) -> str:
    return "".join(span.text for span in build_procuradores_spans(record))


def banking_clause(record) -> str:
    institution = get_value(record, "instituicao_financeira", DEFAULT_INSTITUTION)
    return (
        f"perante a {institution}, Agência: {get_value(record, 'agencia')} - "
        f"Operação: {get_value(record, 'operacao')} - Conta {get_value(record, 'conta_corrente')}"
    )


def closing_line(record, formatted_date: str) -> str:
    return f"{get_value(record, 'cidade_emissao', DEFAULT_CITY)}, {formatted_date}."


def build_paragraph_spans(record, formatted_date: str) -> List[TextSpan]:
    return [
        TextSpan(_OPENING.format(date=formatted_date)),
        TextSpan(GRANTOR_NAME, bold=True),
        TextSpan(_GRANTOR_DETAILS),
        TextSpan(DIRECTOR_NAME, bold=True),
        TextSpan(_DIRECTOR_DETAILS),
        *build_procuradores_spans(record),
        TextSpan(f", a quem confere poderes especiais para representar a outorgante {banking_clause(record)}, podendo "),
        TextSpan(JOINT_CLAUSE, bold=True),
        TextSpan(_POWERS),
        TextSpan(NO_SUBSTITUTION_CLAUSE, bold=True),
        TextSpan(_VALIDITY),
    ]


def build_signature_blocks(record) -> List[SignatureBlock]:
    blocks = [SignatureBlock(GRANTOR_NAME, representative=f"p.p. {DIRECTOR_NAME}")]
    for n in named_procurador_indexes(record):
        blocks.append(SignatureBlock(get_value(record, procurador_key(n, "nome")).upper()))
    return blocks


def compose_document(record, today: Optional[date] = None) -> ComposedDocument:
    """
    Compose the full procuração for a record.

    Args:
        record: ProcuracaoRecord or plain mapping
        today: Date used when the record has no request date (defaults to UTC today)
    """
    formatted_date = format_date_pt(resolve_request_date(record, today))
    return ComposedDocument(
        title=TITLE,
        formatted_date=formatted_date,
        procuradores_spans=build_procuradores_spans(record),
        paragraph_spans=build_paragraph_spans(record, formatted_date),
        closing=closing_line(record, formatted_date),
        signature_blocks=build_signature_blocks(record),
    )
