"""
Field Accessor - uniform "value or fallback" lookup over a record

Every human-facing string in the documents goes through get_value(), which is
what keeps the three renderers textually identical: missing keys, None and
blank-after-trim values all collapse to the same placeholder.
"""

from typing import Any, Mapping, Optional, Union

NOT_INFORMED = "[NÃO INFORMADO]"

Scalar = Union[str, int, float]


def format_scalar(value: Any) -> str:
    """Textual form of a stored value (integral floats lose their '.0')"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def raw_value(record: Any, key: str) -> Optional[Any]:
    """Stored value for key, or None. Accepts plain mappings or ProcuracaoRecord."""
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(key)
    return record.raw(key)


def is_blank(value: Any) -> bool:
    return value is None or format_scalar(value).strip() == ""


def get_value(record: Any, key: str, fallback: str = NOT_INFORMED) -> str:
    """
    Trimmed string form of record[key], or fallback when the key is missing,
    the value is None, or the value is blank after trimming.
    """
    value = raw_value(record, key)
    if is_blank(value):
        return fallback
    return format_scalar(value).strip()


def is_informed(record: Any, key: str) -> bool:
    return not is_blank(raw_value(record, key))
