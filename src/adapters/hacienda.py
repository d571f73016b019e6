"""Adaptador: API pública de Hacienda (api.hacienda.go.cr).

Endpoints usados:
- `/fe/ae?identificacion=<digits>`: situación tributaria (AE), también sonda de salud.
- `/fe/cabys?q=<texto>&top=<n>`: búsqueda CABYS por relevancia (top <= 50).
- `/indicadores/tc`: tipo de cambio del dólar.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx

from adapters.http_client import build_async_client, fetch_json, fetch_json_safe, probe
from core.config import AppSettings
from core.domain.models import CabysEntry
from core.logging_config import get_logger
from core.normalizers import normalize_cabys

logger = get_logger("hacienda")

CABYS_MAX_TOP = 50


class HaciendaClient:
    """Cliente de Hacienda.

    Sin `client` explícito abre un `AsyncClient` por consulta, igual que el
    resto de adaptadores; con `client` reutiliza la conexión (y en tests el
    transporte simulado).
    """

    def __init__(self, settings: AppSettings | None = None, *, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings or AppSettings()
        self._client = client
        self._base_url = self._settings.hacienda_base_url.rstrip("/")

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with build_async_client(self._settings) as client:
            yield client

    async def search_cabys(self, query: str, top: int) -> list[CabysEntry]:
        top = max(1, min(CABYS_MAX_TOP, int(top)))
        async with self._session() as client:
            payload = await fetch_json(client, f"{self._base_url}/fe/cabys", params={"q": query, "top": top})
        entries = normalize_cabys(payload)
        logger.debug("CABYS q=%r top=%s -> %s resultados", query, top, len(entries))
        return entries

    async def fetch_taxpayer(self, identification: str) -> Any:
        async with self._session() as client:
            return await fetch_json(
                client,
                f"{self._base_url}/fe/ae",
                params={"identificacion": identification},
            )

    async def fetch_exchange_rate(self) -> Any:
        async with self._session() as client:
            return await fetch_json_safe(client, f"{self._base_url}/indicadores/tc")

    async def probe(self) -> None:
        async with self._session() as client:
            await probe(
                client,
                f"{self._base_url}/fe/ae",
                params={"identificacion": self._settings.status_probe_identification},
            )
