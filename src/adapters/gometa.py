"""Adaptador: buscador de cédulas de Gometa (apis.gometa.org).

`/cedulas/<query>` acepta una cédula física/jurídica o palabras del nombre y
responde con `{"results": [...]}`, un array suelto o un único objeto según el
tipo de búsqueda. Aquí solo se trae el JSON; la forma se resuelve en
`core.normalizers`.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import quote

import httpx

from adapters.http_client import build_async_client, fetch_json_safe
from core.config import AppSettings


class GometaClient:
    def __init__(self, settings: AppSettings | None = None, *, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings or AppSettings()
        self._client = client
        self._base_url = self._settings.gometa_base_url.rstrip("/")

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with build_async_client(self._settings) as client:
            yield client

    def cedulas_url(self, query: str) -> str:
        return f"{self._base_url}/cedulas/{quote(query, safe='')}"

    async def search_cedulas(self, query: str) -> Any:
        async with self._session() as client:
            return await fetch_json_safe(client, self.cedulas_url(query))
