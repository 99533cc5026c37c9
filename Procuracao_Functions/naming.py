"""Derived names: output filenames and the mail-compose link."""

import re
import unicodedata
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

from Procuracao_Functions.field_accessor import get_value, raw_value, is_blank, format_scalar

MAIL_BODY = "Prezados, \n\nSegue em anexo a procuração gerada pelo sistema. \n\nAtenciosamente."


def _strip_accents(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def sanitize_obra(record) -> str:
    """'Edifício X' -> 'edificio_x' (non-alphanumerics become underscores)"""
    obra = _strip_accents(get_value(record, "obra", "Obra"))
    return re.sub(r"[^a-z0-9]", "_", obra, flags=re.IGNORECASE).lower()


def build_filename(record, prefix: str, today: Optional[datetime] = None) -> str:
    """{prefix}_{obra}_{YYYY-MM-DD} (no extension)"""
    today = today or datetime.now(timezone.utc)
    return f"{prefix}_{sanitize_obra(record)}_{today.strftime('%Y-%m-%d')}"


def resolve_recipient(record) -> str:
    """First procurator's e-mail, else the second's, else ''"""
    for key in ("procurador1_email", "procurador2_email"):
        value = raw_value(record, key)
        if not is_blank(value):
            return format_scalar(value).strip()
    return ""


def mail_subject(record) -> str:
    return f"Procuração - Obra {get_value(record, 'obra', 'Documento')}"


def build_mailto_link(record) -> str:
    return (
        f"mailto:{resolve_recipient(record)}"
        f"?subject={quote(mail_subject(record), safe='')}&body={quote(MAIL_BODY, safe='')}"
    )
