"""Sugerencias CABYS mientras se escribe (debounce).

Cada tecla cancela la búsqueda demorada pendiente antes de agendar otra; solo
la tarea más reciente puede publicar su resultado.
"""

from __future__ import annotations

import asyncio

from core.domain.models import CabysEntry
from core.errors import ConsultaError
from core.interfaces.upstreams import CabysSource
from core.logging_config import get_logger

logger = get_logger("suggest")

MIN_QUERY_CHARS = 2
SUGGEST_TOP = 10


class CabysSuggester:
    def __init__(self, source: CabysSource, *, delay_seconds: float = 0.4) -> None:
        self._source = source
        self.delay_seconds = delay_seconds
        self.suggestions: list[CabysEntry] = []
        self.loading = False
        self._pending: asyncio.Task[None] | None = None
        self._latest = 0

    @property
    def is_open(self) -> bool:
        return bool(self.suggestions)

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        self.loading = False

    def schedule(self, query: str) -> asyncio.Task[None] | None:
        self.cancel()
        self._latest += 1

        query = (query or "").strip()
        if len(query) < MIN_QUERY_CHARS:
            self.suggestions = []
            self.loading = False
            return None

        self._pending = asyncio.get_running_loop().create_task(self._run(query, self._latest))
        return self._pending

    async def _run(self, query: str, token: int) -> None:
        await asyncio.sleep(self.delay_seconds)
        if token != self._latest:
            return

        self.loading = True
        try:
            found = await self._source.search_cabys(query, SUGGEST_TOP)
        except ConsultaError as exc:
            logger.debug("Sugerencias %r fallaron: %s", query, exc)
            found = []
        finally:
            if token == self._latest:
                self.loading = False

        if token == self._latest:
            self.suggestions = list(found)

    async def wait(self) -> None:
        """Espera a que termine la búsqueda pendiente (si la hay)."""

        task = self._pending
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass
