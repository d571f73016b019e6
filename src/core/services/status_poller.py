"""Sonda periódica del estado de la API de Hacienda.

Corre como una `asyncio.Task` independiente de las consultas del usuario.
`check_now()` produce exactamente la misma transición que el timer, y `stop()`
(o salir del `async with`) cancela el ciclo.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from typing import Callable

from core.domain.models import ApiHealth
from core.interfaces.upstreams import HealthProbe
from core.logging_config import get_logger

logger = get_logger("status")


class StatusPoller:
    def __init__(
        self,
        probe: HealthProbe,
        *,
        interval_seconds: float = 60.0,
        on_update: Callable[[ApiHealth], None] | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._probe = probe
        self.interval_seconds = interval_seconds
        self._on_update = on_update
        self._clock = clock
        self._task: asyncio.Task[None] | None = None
        self.health: ApiHealth | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check_now(self) -> ApiHealth:
        start = self._clock()
        try:
            await self._probe.probe()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            # Cualquier fallo cuenta como caída; la latencia se descarta.
            logger.info("Sonda de estado falló: %s", exc)
            health = ApiHealth(ok=False, checked_at=datetime.now(timezone.utc))
        else:
            latency_ms = round((self._clock() - start) * 1000)
            health = ApiHealth(ok=True, latency_ms=max(0, latency_ms), checked_at=datetime.now(timezone.utc))

        self.health = health
        if self._on_update is not None:
            self._on_update(health)
        return health

    async def _run(self) -> None:
        while True:
            await self.check_now()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> asyncio.Task[None]:
        """Agenda el chequeo inmediato y los siguientes cada `interval_seconds`."""

        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def __aenter__(self) -> "StatusPoller":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
