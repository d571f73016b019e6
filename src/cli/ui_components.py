"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import ApiHealth, ExchangeRate, TaxpayerRecord
from core.exports import TableExport
from core.services.cabys_pager import CabysPager
from core.validators import format_local_date


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida (se omite en modos no interactivos)."""

    title = Text("Herramienta de consulta", style="bold cyan")
    subtitle = Text("CABYS • Contribuyentes (AE) • Cédulas • Tipo de cambio", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_table(export: TableExport, *, title: str | None = None, mono_columns: tuple[int, ...] = (0,)) -> Table:
    """Tabla Rich genérica a partir de un `TableExport`."""

    table = Table(title=title or export.name)
    for idx, header in enumerate(export.headers):
        style = "cyan" if idx in mono_columns else "white"
        table.add_column(header.capitalize(), style=style, no_wrap=idx in mono_columns)
    for row in export.rows:
        # Texto del upstream: sin interpretar markup.
        table.add_row(*(Text(cell) for cell in row))
    return table


def build_pager_footer(pager: CabysPager) -> Text:
    total = len(pager.entries)
    text = Text(f"Página {pager.page_index + 1} · Mostrando {pager.shown_until} de {total}", style="dim")
    hints = []
    if pager.has_prev:
        hints.append("[p] anterior")
    if pager.has_next:
        hints.append("[n] siguiente")
    hints.append("[q] salir")
    text.append("   " + "  ".join(hints), style="bright_black")
    return text


def build_taxpayer_panel(record: TaxpayerRecord) -> Panel:
    s = record.situation
    body = Text()
    body.append("Nombre: ", style="bold")
    body.append(f"{record.name}\n")
    body.append("Identificación: ", style="bold")
    body.append(f"{record.identification}\n", style="cyan")
    body.append("Régimen: ", style="bold")
    body.append(f"{record.regime}\n\n")
    body.append(f"Estado: {s.estado}  •  Moroso: {s.moroso}  •  Omiso: {s.omiso}  •  AT: {s.administracion_tributaria}")
    return Panel(body, title=Text("Contribuyente (AE)", style="bold yellow"), border_style="yellow")


def build_exchange_rate_panel(rate: ExchangeRate) -> Panel:
    body = Text()
    body.append("Compra  ", style="bold")
    body.append(f"₡{rate.buy}\n")
    body.append("Venta   ", style="bold")
    body.append(f"₡{rate.sell}\n")
    body.append(f"Actualizado al: {format_local_date(rate.date)}", style="dim")
    return Panel(body, title="Tipo de cambio (USD)", border_style="green")


def build_health_text(health: ApiHealth | None) -> Text:
    if health is not None and health.ok:
        text = Text("● ", style="green")
        text.append("Operacional · respuesta en ")
        text.append(f"{health.latency_ms} ms", style="bold")
    else:
        text = Text("● ", style="red")
        text.append("Sin respuesta")
    if health is not None:
        checked = health.checked_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        text.append(f"\nÚltima revisión: {checked}", style="dim")
    return text
