"""Contratos de los upstreams.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite que el cliente real de Hacienda/Gometa y los fakes de tests sean
  intercambiables sin acoplar los controladores a httpx.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from core.domain.models import CabysEntry


@runtime_checkable
class CabysSource(Protocol):
    """Búsqueda CABYS por relevancia: devuelve los primeros `top` resultados.

    No hay cursor ni offset; una ventana solo puede crecer desde el inicio.
    """

    async def search_cabys(self, query: str, top: int) -> list[CabysEntry]:
        ...


@runtime_checkable
class TaxpayerSource(Protocol):
    async def fetch_taxpayer(self, identification: str) -> Any:
        """Devuelve el JSON crudo de `/fe/ae` para una identificación (solo dígitos)."""

        ...


@runtime_checkable
class ExchangeRateSource(Protocol):
    async def fetch_exchange_rate(self) -> Any:
        ...


@runtime_checkable
class IdentitySource(Protocol):
    async def search_cedulas(self, query: str) -> Any:
        """Devuelve el JSON crudo del buscador de cédulas, en cualquiera de sus formas."""

        ...


@runtime_checkable
class HealthProbe(Protocol):
    async def probe(self) -> None:
        """Termina sin error si el upstream responde 2xx; lanza en otro caso."""

        ...
