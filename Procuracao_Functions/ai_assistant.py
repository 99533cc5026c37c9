"""
AI Assistant - Groq-backed text correction and advisory analysis

Both collaborators are fail-open:
- GroqTextCorrector.correct() always returns a CorrectionResult; on any failure
  its record is the original, unmodified one.
- GroqAnalyzer.analyze() always returns text; failures become advisory text.

A corrected value is merged back only when the source field already had a
value (and, for procurator fields, the procurator had a name), so the model
can fix spelling but never invent data.
"""

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from groq import Groq

from Procuracao_Functions.config import GROQ_API_KEY, GROQ_MAX_RETRIES, GROQ_MODEL
from Procuracao_Functions.errors import AnalysisFailure, CorrectionFailure
from Procuracao_Functions.field_accessor import format_scalar, is_blank
from Procuracao_Functions.procuracao_record import CORRECTABLE_FIELDS, ProcuracaoRecord

logger = logging.getLogger(__name__)

_PROCURADOR_FIELD = re.compile(r"^procurador(\d)_")

CORRECTION_PROMPT = """
Você é um assistente de revisão jurídica especializado em corrigir erros de digitação e gramática em dados cadastrais.

Sua tarefa:
1. Analise os campos do JSON fornecido (nomes, nacionalidades, profissões, endereços, obra, cidade).
2. Corrija erros de ortografia (ex: "Engenhero" -> "Engenheiro", "Rau" -> "Rua").
3. Corrija acentuação (ex: "Jao" -> "João", "Sao Paulo" -> "São Paulo").
4. Ajuste a capitalização (ex: "maria da silva" -> "Maria da Silva").
5. Ajuste a concordância de gênero da nacionalidade e estado civil com base no nome do procurador (ex: "Maria", "Brasileiro" -> "Brasileira").
6. Se o endereço estiver desformatado mas legível, corrija a escrita dos logradouros, com preferência para a norma culta.

REGRAS CRÍTICAS:
- NÃO altere números (números de casa, apto, CEP, etc).
- NÃO invente dados. Se um campo estiver vazio ou "N/A", mantenha vazio.
- NÃO altere o sentido da informação (ex: não mude o nome da rua, apenas corrija a grafia se estiver errada).
- Responda SOMENTE com um objeto JSON com exatamente as mesmas chaves da entrada.

Dados de Entrada:
{payload}
"""

ANALYSIS_PROMPT = """
Analise os seguintes dados para uma procuração bancária da empresa "LCM CONSTRUÇÃO E COMÉRCIO S/A".
Aja como um assistente jurídico sênior e revise as informações.
Seu objetivo é identificar possíveis inconsistências, erros de digitação óbvios, informações que parecem incompletas (ex: CPF com número de dígitos incorreto, RG sem órgão emissor, etc.) ou quaisquer outros pontos que mereçam uma segunda verificação antes de gerar o documento oficial.
Verifique especificamente a consistência entre os dados dos procuradores e os dados bancários.
Forneça sua análise em português, em formato de lista (bullet points). Seja conciso e direto. Se tudo parecer correto, simplesmente afirme que os dados parecem consistentes e prontos para geração.

Dados para análise:
{payload}
"""

NOT_CONFIGURED_ANALYSIS = (
    "A chave da API do Groq não está configurada. A análise não pode ser realizada."
)


@dataclass
class CorrectionResult:
    """Corrected-or-original outcome of a correction attempt"""
    record: ProcuracaoRecord
    corrected: bool
    error: Optional[str] = None


# ============================================================================
# Groq plumbing
# ============================================================================

def call_groq_with_retry(api_call_func: Callable[[], Any], max_retries: int = GROQ_MAX_RETRIES,
                         initial_delay: float = 2, sleep: Callable[[float], None] = time.sleep):
    """Retry GROQ API calls with exponential backoff on rate limits."""
    for attempt in range(max_retries):
        try:
            return api_call_func()
        except Exception as e:
            error_str = str(e)
            if "429" in error_str or "rate_limit_exceeded" in error_str.lower():
                if attempt < max_retries - 1:
                    wait_match = re.search(r"try again in ([0-9.]+)s", error_str)
                    if wait_match:
                        wait_time = float(wait_match.group(1)) + 1
                    else:
                        wait_time = initial_delay * (2 ** attempt)
                    logger.warning(f"Rate limit hit. Waiting {wait_time:.1f}s before retry {attempt + 1}/{max_retries}...")
                    sleep(wait_time)
                else:
                    raise
            else:
                raise

    raise RuntimeError(f"Failed after {max_retries} retries")


def strip_code_fences(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```json"):
        raw = raw[7:]
    if raw.startswith("```"):
        raw = raw[3:]
    if raw.endswith("```"):
        raw = raw[:-3]
    return raw.strip()


def _make_client(api_key: str, client=None):
    if client is not None:
        return client
    if not api_key:
        return None
    return Groq(api_key=api_key)


# ============================================================================
# Correction
# ============================================================================

def correction_payload(record: ProcuracaoRecord) -> Dict[str, str]:
    payload = {}
    for key in CORRECTABLE_FIELDS:
        value = record.raw(key)
        payload[key] = "" if is_blank(value) else format_scalar(value).strip()
    if not payload["cidade_emissao"]:
        payload["cidade_emissao"] = "Belo Horizonte"
    return payload


def merge_corrections(record: ProcuracaoRecord, corrected: Dict[str, Any]) -> ProcuracaoRecord:
    """Apply corrected values only where the source already had data"""
    changes: Dict[str, Any] = {}
    for key in CORRECTABLE_FIELDS:
        value = corrected.get(key)
        if not isinstance(value, str) or not value.strip():
            continue
        if not record.has(key):
            continue
        m = _PROCURADOR_FIELD.match(key)
        if m and not record.has(f"procurador{m.group(1)}_nome"):
            continue
        changes[key] = value.strip()
    return record.with_values(**changes) if changes else record


class GroqTextCorrector:
    def __init__(self, api_key: str = GROQ_API_KEY, model: str = GROQ_MODEL, client=None,
                 max_retries: int = GROQ_MAX_RETRIES):
        self.model = model
        self.max_retries = max_retries
        self.client = _make_client(api_key, client)

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _request(self, payload: Dict[str, str]) -> Dict[str, Any]:
        def api_call():
            return self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": "You are a precise JSON data corrector. Always follow the schema exactly."},
                    {"role": "user", "content": CORRECTION_PROMPT.format(payload=json.dumps(payload, ensure_ascii=False))},
                ],
                response_format={"type": "json_object"},
                temperature=0.0,
            )

        try:
            completion = call_groq_with_retry(api_call, max_retries=self.max_retries)
            raw = completion.choices[0].message.content
        except Exception as e:
            raise CorrectionFailure(f"Groq correction call failed: {e}") from e

        if not raw or not raw.strip():
            raise CorrectionFailure("Groq API returned empty response for correction")
        try:
            data = json.loads(strip_code_fences(raw))
        except json.JSONDecodeError as e:
            raise CorrectionFailure(f"Failed to parse Groq response as JSON: {e}") from e
        if not isinstance(data, dict):
            raise CorrectionFailure("Groq correction response is not a JSON object")
        return data

    def correct(self, record: ProcuracaoRecord) -> CorrectionResult:
        if not self.enabled:
            logger.info("GROQ_API_KEY not set; data correction skipped")
            return CorrectionResult(record, corrected=False)

        payload = correction_payload(record)
        if not (payload["procurador1_nome"] or payload["procurador2_nome"] or payload["obra"]):
            return CorrectionResult(record, corrected=False)

        try:
            corrected = self._request(payload)
        except CorrectionFailure as e:
            logger.warning(f"Data correction failed, keeping original data: {e.message}")
            return CorrectionResult(record, corrected=False, error=e.message)

        return CorrectionResult(merge_corrections(record, corrected), corrected=True)


# ============================================================================
# Analysis
# ============================================================================

class GroqAnalyzer:
    def __init__(self, api_key: str = GROQ_API_KEY, model: str = GROQ_MODEL, client=None,
                 max_retries: int = GROQ_MAX_RETRIES):
        self.model = model
        self.max_retries = max_retries
        self.client = _make_client(api_key, client)

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _request(self, record: ProcuracaoRecord) -> str:
        def api_call():
            return self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": ANALYSIS_PROMPT.format(payload=record.to_json())}],
                temperature=0.2,
            )

        try:
            completion = call_groq_with_retry(api_call, max_retries=self.max_retries)
        except Exception as e:
            raise AnalysisFailure(f"Erro ao contatar a API de IA: {e}") from e
        text = (completion.choices[0].message.content or "").strip()
        if not text:
            raise AnalysisFailure()
        return text

    def analyze(self, record: ProcuracaoRecord) -> str:
        if not self.enabled:
            return NOT_CONFIGURED_ANALYSIS
        try:
            return self._request(record)
        except AnalysisFailure as e:
            logger.warning(f"AI analysis failed: {e.message}")
            return e.message
