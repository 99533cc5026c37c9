"""
Record Validator - advisory completeness check before generation.

The result never blocks generation by itself: the caller shows the message and
may proceed after an explicit override confirmation.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from Procuracao_Functions.field_accessor import is_informed
from Procuracao_Functions.procuracao_record import ProcuracaoRecord

logger = logging.getLogger(__name__)

# Declaration order is the order of the missing-fields message
REQUIRED_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("obra", "Obra"),
    ("procurador1_nome", "Nome do Procurador 1"),
    ("procurador1_cpf", "CPF do Procurador 1"),
    ("conta_corrente", "Conta Corrente"),
)

AWAITING_DATA_MESSAGE = "Aguardando dados para validação."
VALID_MESSAGE = "Dados essenciais preenchidos."


@dataclass
class ValidationResult:
    valid: bool
    message: str
    missing_fields: List[str] = field(default_factory=list)

    @property
    def missing_labels(self) -> List[str]:
        labels = dict(REQUIRED_FIELDS)
        return [labels[key] for key in self.missing_fields]


def validate(record: Optional[ProcuracaoRecord]) -> ValidationResult:
    if record is None:
        return ValidationResult(False, AWAITING_DATA_MESSAGE)

    missing = [key for key, _ in REQUIRED_FIELDS if not is_informed(record, key)]
    if missing:
        labels = dict(REQUIRED_FIELDS)
        message = f"Campos obrigatórios faltando: {', '.join(labels[k] for k in missing)}."
        logger.info(f"Validation warning: {message}")
        return ValidationResult(False, message, missing)

    return ValidationResult(True, VALID_MESSAGE)


def override_prompt(result: ValidationResult) -> str:
    """Confirmation text shown before generating from an invalid record"""
    return f"Atenção: {result.message}\n\nDeseja gerar o documento mesmo assim?"
