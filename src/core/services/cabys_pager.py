"""Paginador incremental de la búsqueda CABYS.

El upstream devuelve los primeros N resultados por relevancia y no tiene
cursor ni offset: una ventana solo puede crecer desde el inicio. Por eso el
tamaño a pedir es función no decreciente de cuánto avanzó el usuario, se
reutiliza el prefijo ya traído y la ventana se topa en 50.

Ejemplo (page_size=10):
- search("arroz")  -> pide top=10
- next_page()      -> con 10 en caché pide top=20
- prev_page()      -> nunca toca la red
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from core.domain.models import CabysEntry, CabysResultSet
from core.errors import ConsultaError
from core.interfaces.upstreams import CabysSource
from core.logging_config import get_logger

logger = get_logger("cabys")

MAX_WINDOW = 50
MIN_PAGE_SIZE = 5
DEFAULT_PAGE_SIZE = 10


class WindowState(str, Enum):
    """Qué se sabe de lo que queda en el upstream más allá de la caché."""

    EMPTY = "empty"
    # La última ventana se llenó completa y no llegó al tope: puede haber más.
    MAY_HAVE_MORE = "may_have_more"
    # El upstream devolvió menos de lo pedido: no hay más resultados.
    EXHAUSTED = "exhausted"
    # La ventana llegó a 50: no se puede pedir más.
    CAPPED = "capped"


def clamp_page_size(value: Any) -> int:
    """Resultados por página en [5, 50]; 10 si el valor no es un número positivo."""

    try:
        n = float(value)
    except (TypeError, ValueError):
        return DEFAULT_PAGE_SIZE
    if n != n or n <= 0 or n == float("inf"):
        return DEFAULT_PAGE_SIZE
    return int(min(MAX_WINDOW, max(MIN_PAGE_SIZE, n)))


class CabysPager:
    def __init__(self, source: CabysSource, *, page_size: Any = DEFAULT_PAGE_SIZE) -> None:
        self._source = source
        self.page_size = clamp_page_size(page_size)
        self.query = ""
        self.entries: list[CabysEntry] = []
        self.page_index = 0
        self.last_requested_window_size = 0
        self.error = ""
        self.loading = False
        self._generation = 0

    # -- estado derivado -------------------------------------------------

    @property
    def page_start(self) -> int:
        return self.page_index * self.page_size

    @property
    def page_end(self) -> int:
        return self.page_start + self.page_size

    @property
    def page_rows(self) -> list[CabysEntry]:
        return self.entries[self.page_start : self.page_end]

    @property
    def shown_until(self) -> int:
        return min(self.page_end, len(self.entries))

    @property
    def window_state(self) -> WindowState:
        requested = self.last_requested_window_size
        if requested <= 0:
            return WindowState.EMPTY
        if len(self.entries) < requested:
            return WindowState.EXHAUSTED
        if requested >= MAX_WINDOW:
            return WindowState.CAPPED
        return WindowState.MAY_HAVE_MORE

    @property
    def has_prev(self) -> bool:
        return self.page_index > 0

    @property
    def has_next(self) -> bool:
        if self.page_end < len(self.entries):
            return True
        return self.window_state is WindowState.MAY_HAVE_MORE

    def snapshot(self) -> CabysResultSet:
        return CabysResultSet(
            query=self.query,
            entries=list(self.entries),
            requested_window_size=self.last_requested_window_size,
            page_index=self.page_index,
            page_size=self.page_size,
        )

    # -- operaciones -----------------------------------------------------

    def set_page_size(self, value: Any) -> int:
        """Cambia resultados por página y vuelve a la primera página."""

        self.page_size = clamp_page_size(value)
        self.page_index = 0
        return self.page_size

    def window_for_page(self, page_index: int) -> int:
        return min(MAX_WINDOW, self.page_size * (page_index + 1))

    async def _fetch_window(self, query: str, window: int) -> bool:
        """Pide `window` resultados; reemplaza la caché o la limpia si falla.

        Devuelve False si falló o si llegó una respuesta más nueva mientras
        esta estaba en vuelo (gana la última).
        """

        self._generation += 1
        generation = self._generation
        self.loading = True
        self.error = ""
        try:
            entries = await self._source.search_cabys(query, window)
        except ConsultaError as exc:
            if generation != self._generation:
                return False
            logger.warning("CABYS q=%r top=%s falló: %s", query, window, exc)
            self.entries = []
            self.error = str(exc) or "Error consultando CABYS"
            return False
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            logger.debug("CABYS q=%r top=%s descartada (respuesta vieja)", query, window)
            return False

        self.entries = list(entries)
        self.last_requested_window_size = window
        return True

    async def search(self, query: str, *, reset_page: bool = False) -> bool:
        query = (query or "").strip()
        if not query:
            return False

        # Una consulta nueva siempre arranca en la primera página.
        if reset_page or query != self.query:
            self.page_index = 0
        self.query = query

        return await self._fetch_window(query, self.window_for_page(self.page_index))

    async def next_page(self) -> bool:
        if not self.query or not self.has_next:
            return False

        needed = self.window_for_page(self.page_index + 1)
        if len(self.entries) < needed:
            if not await self._fetch_window(self.query, needed):
                return False
        else:
            self.last_requested_window_size = needed

        self.page_index += 1
        return True

    def prev_page(self) -> bool:
        if self.page_index <= 0:
            self.page_index = 0
            return False
        self.page_index -= 1
        return True
