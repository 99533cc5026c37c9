"""
Error taxonomy for the procuração pipeline.

Every error carries a user-facing ``message`` (Portuguese, shown as-is by the
app) so callers never have to format low-level exceptions themselves.

- ParseError: malformed or empty spreadsheet, user must fix and re-upload
- ValidationWarning: required fields missing, overridable by the caller
- CorrectionFailure: AI correction unavailable or malformed, absorbed internally
- AnalysisFailure: AI analysis unavailable, surfaced as advisory text
- RenderError: document library missing or failing, aborts one action only
"""

from typing import List, Optional


class ProcuracaoError(Exception):
    """Base class for every error raised by the core package"""

    default_message = "Ocorreu um erro inesperado."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ParseError(ProcuracaoError):
    default_message = (
        "Falha ao ler o arquivo. Verifique se o formato está correto "
        "e corresponde ao modelo esperado."
    )


class ValidationWarning(ProcuracaoError):
    """Raised by the session when generating from an invalid record without override"""

    default_message = "Campos obrigatórios faltando."

    def __init__(self, message: Optional[str] = None, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = list(missing_fields or [])


class CorrectionFailure(ProcuracaoError):
    default_message = "Correção automática indisponível."


class AnalysisFailure(ProcuracaoError):
    default_message = "Ocorreu um erro desconhecido durante a análise da IA."


class RenderError(ProcuracaoError):
    default_message = "Ocorreu um erro inesperado ao gerar o documento."

    def __init__(self, message: Optional[str] = None, output_format: str = ""):
        super().__init__(message)
        self.output_format = output_format
