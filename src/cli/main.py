"""CLI de la herramienta de consulta (Typer + Rich).

La CLI es solo presentación: arma los adaptadores, llama a los controladores
del Core y pinta el estado que estos dejan.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from adapters.gometa import GometaClient
from adapters.hacienda import HaciendaClient
from adapters.json_exporter import export_table_json
from cli import doctor
from cli.ui_components import (
    build_exchange_rate_panel,
    build_health_text,
    build_pager_footer,
    build_table,
    build_taxpayer_panel,
    print_banner,
)
from core.config import AppSettings
from core.exports import (
    TableExport,
    activities_table,
    cabys_table,
    cedulas_table,
    taxpayer_summary_lines,
)
from core.logging_config import setup_logging
from core.services.cabys_pager import CabysPager
from core.services.lookups import ExchangeRateLookup, IdentityLookup, TaxpayerLookup
from core.services.status_poller import StatusPoller
from core.services.suggestions import CabysSuggester

app = typer.Typer(no_args_is_help=True, help="Costa Rican fiscal and identity lookups (Hacienda, Gometa).")
app.add_typer(doctor.app, name="doctor")

_console = Console()


def _fail(message: str) -> NoReturn:
    _console.print(f"[red]⚠️  {escape(message)}[/red]")
    raise typer.Exit(code=1)


def _maybe_export(table: TableExport, export: Path | None) -> None:
    if export is None:
        return
    if not table.rows:
        _console.print("[yellow]Nothing to export.[/yellow]")
        return
    path = export_table_json(table=table, output_path=export)
    _console.print(f"[green]Exported {len(table)} rows to:[/green] {escape(str(path))}")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
    banner: bool = typer.Option(False, "--banner", help="Show the welcome banner."),
) -> None:
    settings = AppSettings()
    setup_logging(logging.DEBUG if verbose else settings.log_level)
    if banner:
        print_banner(_console)


@app.command()
def tc() -> None:
    """Show the USD exchange rate (buy/sell)."""

    lookup = ExchangeRateLookup(HaciendaClient(AppSettings()))
    rate = asyncio.run(lookup.refresh())
    if rate is None:
        _fail(lookup.state.error)
    _console.print(build_exchange_rate_panel(rate))


def _print_cabys_page(pager: CabysPager) -> None:
    if pager.error:
        _console.print(f"[red]⚠️  {escape(pager.error)}[/red]")
        return
    if not pager.entries:
        _console.print("[yellow]Sin resultados.[/yellow]")
        return
    _console.print(build_table(cabys_table(pager.page_rows), title=f"CABYS: {escape(pager.query)}"))
    _console.print(build_pager_footer(pager))


async def _cabys_session(pager: CabysPager, query: str, *, interactive: bool) -> None:
    await pager.search(query, reset_page=True)
    _print_cabys_page(pager)
    if not interactive:
        return

    while pager.entries or pager.has_prev:
        choice = typer.prompt("n/p/q", default="q", show_default=False).strip().lower()
        if choice == "n" and pager.has_next:
            await pager.next_page()
        elif choice == "p" and pager.has_prev:
            pager.prev_page()
        elif choice == "q":
            break
        else:
            continue
        _print_cabys_page(pager)


@app.command()
def cabys(
    query: str = typer.Argument(..., help="Product/service name, e.g. 'arroz'."),
    rows: int | None = typer.Option(None, "--rows", "-r", help="Rows per page (5-50)."),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Page through results."),
    export: Path | None = typer.Option(None, "--export", help="Write the visible page as JSON."),
) -> None:
    """Search CABYS codes and their VAT rate."""

    settings = AppSettings()
    pager = CabysPager(HaciendaClient(settings), page_size=rows or settings.cabys_default_page_size)
    asyncio.run(_cabys_session(pager, query, interactive=interactive))
    if pager.error:
        raise typer.Exit(code=1)
    _maybe_export(cabys_table(pager.page_rows), export)


@app.command()
def suggest(query: str = typer.Argument(..., help="At least 2 characters.")) -> None:
    """Quick CABYS suggestions (top 10)."""

    settings = AppSettings()
    suggester = CabysSuggester(HaciendaClient(settings), delay_seconds=settings.suggest_debounce_seconds)

    async def _run() -> None:
        suggester.schedule(query)
        await suggester.wait()

    asyncio.run(_run())
    if not suggester.suggestions:
        _console.print("[yellow]Sin sugerencias.[/yellow]")
        return
    _console.print(build_table(cabys_table(suggester.suggestions), title="Sugerencias"))


@app.command()
def ae(
    identificacion: str = typer.Argument(..., help="9, 10 or 11 digits (physical, legal, DIMEX)."),
    export: Path | None = typer.Option(None, "--export", help="Write the activities as JSON."),
    summary: bool = typer.Option(False, "--summary", help="Print a plain-text summary instead of tables."),
) -> None:
    """Taxpayer status (AE) and registered economic activities."""

    lookup = TaxpayerLookup(HaciendaClient(AppSettings()))
    record = asyncio.run(lookup.lookup(identificacion))
    if record is None:
        _fail(lookup.state.error)

    if summary:
        _console.print("\n".join(taxpayer_summary_lines(record)), markup=False)
    else:
        _console.print(build_taxpayer_panel(record))
        if record.activities:
            _console.print(build_table(activities_table(record)))
    _maybe_export(activities_table(record), export)


@app.command()
def cedula(
    query: str = typer.Argument(..., help="Physical/legal ID or name words."),
    export: Path | None = typer.Option(None, "--export", help="Write the results as JSON."),
) -> None:
    """Civil-registry lookup (TSE data via Gometa)."""

    lookup = IdentityLookup(GometaClient(AppSettings()))
    items = asyncio.run(lookup.lookup(query))
    if lookup.state.error:
        _fail(lookup.state.error)
    if not items:
        _console.print("[yellow]Sin resultados.[/yellow]")
        return
    table = cedulas_table(items)
    _console.print(build_table(table, title="Cédulas", mono_columns=(0, 2)))
    _maybe_export(table, export)


@app.command()
def status(
    watch: bool = typer.Option(False, "--watch", "-w", help="Keep probing on the configured interval."),
) -> None:
    """Hacienda API health (latency of a known-stable AE query)."""

    settings = AppSettings()
    poller = StatusPoller(
        HaciendaClient(settings),
        interval_seconds=settings.status_interval_seconds,
        on_update=lambda health: _console.print(build_health_text(health)),
    )

    if not watch:
        health = asyncio.run(poller.check_now())
        if not health.ok:
            raise typer.Exit(code=1)
        return

    async def _watch() -> None:
        async with poller:
            await asyncio.Event().wait()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        _console.print("[dim]Stopped.[/dim]")


def run() -> None:
    app()
