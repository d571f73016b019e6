"""Validadores y formateadores puros."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

_NON_DIGITS_RE = re.compile(r"\D+")

# Física (9), jurídica (10) y DIMEX (11).
IDENTIFICATION_LENGTHS = frozenset({9, 10, 11})

_MESES = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)


def extract_digits(value: str | None) -> str:
    """Quita todo lo que no sea dígito. `None` -> ``""``."""

    return _NON_DIGITS_RE.sub("", value or "")


def is_valid_identification_number(value: str | None) -> bool:
    return len(extract_digits(value)) in IDENTIFICATION_LENGTHS


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    # fromisoformat de versiones viejas no acepta el sufijo "Z".
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in ("%d/%m/%Y", "%d-%m-%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_local_date(value: Any) -> Any:
    """Formatea una fecha como en es-CR: ``"15 de enero de 2024"``.

    Nunca lanza: si el valor no se puede interpretar se devuelve tal cual.
    """

    if value is None or value == "":
        return ""

    parsed = _parse_date(value)
    if parsed is None:
        return value
    return f"{parsed.day} de {_MESES[parsed.month - 1]} de {parsed.year}"
