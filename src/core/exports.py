"""Tablas exportables por dominio.

El orden de columnas es fijo por dominio; quien codifica (JSON, CSV, planilla,
portapapeles) recibe filas ya armadas y no decide nada del contenido.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from core.domain.models import CabysEntry, IdentityRecord, TaxpayerRecord

CABYS_COLUMNS = ("codigo", "descripcion", "impuesto")
ACTIVITY_COLUMNS = ("codigo", "descripcion", "tipo", "estado")
CEDULA_COLUMNS = ("cedula", "nombre", "tipo")


@dataclass
class TableExport:
    name: str
    headers: tuple[str, ...]
    rows: list[tuple[str, ...]] = field(default_factory=list)

    def as_records(self) -> list[dict[str, str]]:
        return [dict(zip(self.headers, row)) for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)


def format_tax_rate(rate: float) -> str:
    # 13.0 -> "13%", 0.5 -> "0.5%"
    text = f"{rate:g}"
    return f"{text}%"


def cabys_table(entries: Iterable[CabysEntry]) -> TableExport:
    rows = [(e.code, e.description, format_tax_rate(e.tax_rate)) for e in entries]
    return TableExport(name="CABYS", headers=CABYS_COLUMNS, rows=rows)


def activities_table(record: TaxpayerRecord) -> TableExport:
    rows = [(a.code, a.description, a.kind.value, a.state.value) for a in record.activities]
    return TableExport(name="Actividades", headers=ACTIVITY_COLUMNS, rows=rows)


def cedulas_table(items: Iterable[IdentityRecord]) -> TableExport:
    rows = [(x.cedula, x.nombre, x.tipo) for x in items]
    return TableExport(name="Cedulas", headers=CEDULA_COLUMNS, rows=rows)


def taxpayer_summary_lines(record: TaxpayerRecord) -> list[str]:
    s = record.situation
    return [
        "Contribuyente (AE)",
        f"Nombre: {record.name or '-'}",
        f"Identificación: {record.identification or '-'}",
        f"Régimen: {record.regime or '-'}",
        f"Estado: {s.estado or '-'}",
        f"Moroso: {s.moroso or '-'}",
        f"Omiso: {s.omiso or '-'}",
        f"Administración Tributaria: {s.administracion_tributaria or '-'}",
    ]
