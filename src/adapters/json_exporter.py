"""Exportación JSON de las tablas.

Por qué JSON:
- Interoperabilidad con otras herramientas y pipelines.
- Conserva el orden de columnas de cada dominio sin depender de una planilla.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.exports import TableExport


def export_table_json(*, table: TableExport, output_path: Path) -> Path:
    """Exporta `TableExport` a JSON UTF-8: nombre, columnas y filas como objetos en orden de columnas."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "name": table.name,
        "columns": list(table.headers),
        "rows": table.as_records(),
    }
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
    return output_path
