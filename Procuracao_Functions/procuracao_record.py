"""
ProcuracaoRecord - canonical shape of one power-of-attorney request

A record is open-ended (any field may be absent, unknown keys are kept in
``extras``) but the well-known keys are explicit attributes so that typos in
field names fail loudly instead of rendering a placeholder.

Key principles:
1. Blank, whitespace-only and missing values all mean "not informed"
2. Records are immutable; corrections and form edits produce new records
3. Addresses are composed once at extraction time and never re-derived
"""

import json
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from Procuracao_Functions.field_accessor import NOT_INFORMED, Scalar, get_value, is_blank, is_informed


# ============================================================================
# Field catalogue
# ============================================================================

PROCURADOR_INDEXES = (1, 2)

PROCURADOR_ATTRIBUTES = (
    "nome",
    "email",
    "nacionalidade",
    "profissao",
    "estado_civil",
    "endereco",
    "rg",
    "cpf",
)

# Free-text fields sent to the AI corrector (numbers and documents are never touched)
CORRECTABLE_FIELDS: Tuple[str, ...] = (
    "procurador1_nome",
    "procurador1_nacionalidade",
    "procurador1_profissao",
    "procurador1_estado_civil",
    "procurador1_endereco",
    "procurador2_nome",
    "procurador2_nacionalidade",
    "procurador2_profissao",
    "procurador2_estado_civil",
    "procurador2_endereco",
    "obra",
    "cidade_emissao",
)

FIELD_LABELS: Dict[str, str] = {
    "carimbo_data_hora": "Carimbo de Data/Hora",
    "solicitante": "Solicitante",
    "data_solicitacao": "Data da Solicitação",
    "obra": "Obra",
    "instituicao_financeira": "Instituição Financeira",
    "agencia": "Agência",
    "operacao": "Operação",
    "conta_corrente": "Conta Corrente",
    "cidade_emissao": "Cidade de Emissão",
    "data_ultima_procuracao": "Data da Última Procuração",
}
for _n in PROCURADOR_INDEXES:
    FIELD_LABELS.update({
        f"procurador{_n}_nome": f"Nome do Procurador {_n}",
        f"procurador{_n}_email": f"E-mail do Procurador {_n}",
        f"procurador{_n}_nacionalidade": f"Nacionalidade do Procurador {_n}",
        f"procurador{_n}_profissao": f"Profissão do Procurador {_n}",
        f"procurador{_n}_estado_civil": f"Estado Civil do Procurador {_n}",
        f"procurador{_n}_endereco": f"Endereço do Procurador {_n}",
        f"procurador{_n}_rg": f"RG do Procurador {_n}",
        f"procurador{_n}_cpf": f"CPF do Procurador {_n}",
    })


def procurador_key(index: int, attribute: str) -> str:
    return f"procurador{index}_{attribute}"


def named_procurador_indexes(record) -> List[int]:
    """Indexes (1, 2) of procurators that have a name; accepts records or plain mappings"""
    return [n for n in PROCURADOR_INDEXES if is_informed(record, procurador_key(n, "nome"))]


@dataclass(frozen=True)
class ProcuracaoRecord:
    """One request row (spreadsheet) or one manual form submission"""

    # Request metadata
    carimbo_data_hora: Optional[Scalar] = None
    solicitante: Optional[Scalar] = None
    data_solicitacao: Optional[Scalar] = None
    obra: Optional[Scalar] = None

    # Banking details
    instituicao_financeira: Optional[Scalar] = None
    agencia: Optional[Scalar] = None
    operacao: Optional[Scalar] = None
    conta_corrente: Optional[Scalar] = None

    # Procurador 1
    procurador1_nome: Optional[Scalar] = None
    procurador1_email: Optional[Scalar] = None
    procurador1_nacionalidade: Optional[Scalar] = None
    procurador1_profissao: Optional[Scalar] = None
    procurador1_estado_civil: Optional[Scalar] = None
    procurador1_endereco: Optional[Scalar] = None
    procurador1_rg: Optional[Scalar] = None
    procurador1_cpf: Optional[Scalar] = None

    # Procurador 2
    procurador2_nome: Optional[Scalar] = None
    procurador2_email: Optional[Scalar] = None
    procurador2_nacionalidade: Optional[Scalar] = None
    procurador2_profissao: Optional[Scalar] = None
    procurador2_estado_civil: Optional[Scalar] = None
    procurador2_endereco: Optional[Scalar] = None
    procurador2_rg: Optional[Scalar] = None
    procurador2_cpf: Optional[Scalar] = None

    # Issuance metadata
    cidade_emissao: Optional[Scalar] = None
    data_ultima_procuracao: Optional[Scalar] = None

    # Anything else the source carried
    extras: Dict[str, Scalar] = field(default_factory=dict)

    @classmethod
    def known_keys(cls) -> List[str]:
        return [f.name for f in fields(cls) if f.name != "extras"]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProcuracaoRecord":
        known = set(cls.known_keys())
        kwargs = {k: v for k, v in data.items() if k in known}
        extras = {k: v for k, v in data.items() if k not in known and k != "extras"}
        extras.update(data.get("extras") or {})
        return cls(extras=extras, **kwargs)

    def raw(self, key: str) -> Optional[Scalar]:
        """Stored value for any key, known or extra (None when absent)"""
        if key != "extras" and key in self.__dataclass_fields__:
            return getattr(self, key)
        return self.extras.get(key)

    def get(self, key: str, fallback: str = NOT_INFORMED) -> str:
        return get_value(self, key, fallback)

    def has(self, key: str) -> bool:
        return not is_blank(self.raw(key))

    def with_values(self, **changes: Any) -> "ProcuracaoRecord":
        """New record with the given keys replaced (unknown keys land in extras)"""
        known = set(self.known_keys())
        direct = {k: v for k, v in changes.items() if k in known}
        extra = {k: v for k, v in changes.items() if k not in known}
        updated = replace(self, **direct)
        if extra:
            merged = dict(self.extras)
            merged.update(extra)
            updated = replace(updated, extras=merged)
        return updated

    def to_dict(self, include_blank: bool = True) -> Dict[str, Any]:
        """Flat dict (extras merged in), used for history snapshots and AI payloads"""
        result: Dict[str, Any] = {}
        for key in self.known_keys():
            value = getattr(self, key)
            if value is None:
                if not include_blank:
                    continue
                value = ""
            elif not include_blank and is_blank(value):
                continue
            result[key] = value
        for key, value in self.extras.items():
            if include_blank or not is_blank(value):
                result[key] = value
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2, default=str)

    def display_items(self) -> List[Tuple[str, str]]:
        """(label, value) pairs of informed fields, for data previews"""
        return [
            (FIELD_LABELS.get(key, key), get_value(self, key))
            for key, _ in self.to_dict(include_blank=False).items()
        ]


# ============================================================================
# Helper Functions for Creating Records
# ============================================================================

def default_form_record(today: Optional[datetime] = None) -> ProcuracaoRecord:
    """Starting values of the manual form"""
    today = today or datetime.now(timezone.utc)
    return ProcuracaoRecord(
        data_solicitacao=today.strftime("%Y-%m-%d"),
        instituicao_financeira="Caixa Econômica Federal",
        cidade_emissao="Belo Horizonte",
        procurador1_nacionalidade="brasileiro",
        procurador2_nacionalidade="brasileiro",
    )


def record_from_form(values: Mapping[str, Any]) -> ProcuracaoRecord:
    """Record from submitted form values (strings are trimmed, empty ones dropped)"""
    cleaned: Dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        if value is None:
            continue
        cleaned[key] = value
    return ProcuracaoRecord.from_dict(cleaned)
