"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, get_user_env_file, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or exc.__class__.__name__


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="cr-consulta Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("Hacienda base_url", "OK", settings.hacienda_base_url)
    table.add_row("Gometa base_url", "OK", settings.gometa_base_url)
    table.add_row("HTTP timeout", "OK", f"{settings.http_timeout_seconds:g} s")
    env_file = get_user_env_file()
    table.add_row("User .env", "OK" if env_file.exists() else "OPTIONAL", str(env_file))

    # Connectivity (best-effort)
    hacienda_url = (
        f"{settings.hacienda_base_url.rstrip('/')}/fe/ae"
        f"?identificacion={settings.status_probe_identification}"
    )
    ok_hacienda, detail_hacienda = asyncio.run(_check_http(hacienda_url, settings))
    table.add_row("Hacienda", "OK" if ok_hacienda else "FAIL", escape(detail_hacienda))

    gometa_url = f"{settings.gometa_base_url.rstrip('/')}/cedulas/{settings.status_probe_identification}"
    ok_gometa, detail_gometa = asyncio.run(_check_http(gometa_url, settings))
    table.add_row("Gometa", "OK" if ok_gometa else "FAIL", escape(detail_gometa))

    _console.print(table)

    if not (ok_hacienda and ok_gometa):
        _console.print(
            "\n[yellow]Note:[/yellow] behind a proxy, point the base URLs at it with "
            "`cr-consulta doctor set-upstreams`."
        )


@app.command(name="set-upstreams")
def set_upstreams() -> None:
    """Interactive upstream setup (stores config in the user config .env).

    Useful when the APIs are reached through a local reverse proxy.
    """

    settings = AppSettings()
    hacienda = typer.prompt("Hacienda base URL", default=settings.hacienda_base_url, show_default=True).strip()
    gometa = typer.prompt("Gometa base URL", default=settings.gometa_base_url, show_default=True).strip()

    for value in (hacienda, gometa):
        if not value.startswith(("http://", "https://")):
            raise typer.BadParameter(f"not an http(s) URL: {value}")

    env_path = write_user_env_vars(
        {
            "CR_CONSULTA_HACIENDA_BASE_URL": hacienda,
            "CR_CONSULTA_GOMETA_BASE_URL": gometa,
        }
    )

    _console.print(f"[green]Saved upstream config to:[/green] {escape(str(env_path))}")
