"""Controladores de consulta por dominio (AE, cédulas, tipo de cambio).

Cada controlador es dueño exclusivo de su `LookupState`: valida, consulta,
normaliza y guarda el resultado. Un fallo limpia solo el estado de su dominio
y deja un mensaje legible; nunca toca el de otro controlador.

Si se solapan consultas (doble click, etc.) gana la última respuesta: cada
consulta toma un número de generación y las respuestas viejas se descartan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from core.domain.models import ExchangeRate, IdentityRecord, TaxpayerRecord
from core.errors import ConsultaError, ValidationError
from core.interfaces.upstreams import ExchangeRateSource, IdentitySource, TaxpayerSource
from core.logging_config import get_logger
from core.normalizers import (
    normalize_exchange_rate,
    normalize_identity_response,
    normalize_taxpayer,
)
from core.validators import extract_digits, is_valid_identification_number

logger = get_logger("lookups")

T = TypeVar("T")


@dataclass
class LookupState(Generic[T]):
    """Estado de un dominio: último resultado, último error y si hay consulta en vuelo."""

    result: T | None = None
    error: str = ""
    loading: bool = False
    generation: int = field(default=0, repr=False)

    def begin(self) -> int:
        self.generation += 1
        self.loading = True
        self.error = ""
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def succeed(self, generation: int, result: T) -> bool:
        if not self.is_current(generation):
            return False
        self.result = result
        self.loading = False
        return True

    def fail(self, generation: int, message: str) -> bool:
        if not self.is_current(generation):
            return False
        self.result = None
        self.error = message
        self.loading = False
        return True


class TaxpayerLookup:
    """Consulta de situación tributaria (AE) por identificación."""

    def __init__(self, source: TaxpayerSource) -> None:
        self._source = source
        self.state: LookupState[TaxpayerRecord] = LookupState()

    async def lookup(self, raw_identification: str) -> TaxpayerRecord | None:
        digits = extract_digits(raw_identification)
        generation = self.state.begin()

        if not is_valid_identification_number(digits):
            exc = ValidationError(
                "La identificación debe tener 9, 10 u 11 dígitos.",
                field="identificacion",
            )
            self.state.fail(generation, str(exc))
            return None

        try:
            payload = await self._source.fetch_taxpayer(digits)
            record = normalize_taxpayer(payload, fallback_identification=digits)
        except ConsultaError as exc:
            logger.warning("AE %s falló: %s", digits, exc)
            self.state.fail(generation, str(exc) or "Error consultando AE")
            return None

        return record if self.state.succeed(generation, record) else None


class IdentityLookup:
    """Búsqueda de cédulas (Gometa) por número o palabras del nombre."""

    def __init__(self, source: IdentitySource) -> None:
        self._source = source
        self.state: LookupState[list[IdentityRecord]] = LookupState(result=[])

    @property
    def items(self) -> list[IdentityRecord]:
        return self.state.result or []

    async def lookup(self, query: str) -> list[IdentityRecord]:
        query = (query or "").strip()
        if not query:
            return []

        generation = self.state.begin()
        self.state.result = []
        try:
            payload = await self._source.search_cedulas(query)
        except ConsultaError as exc:
            logger.warning("Cédulas %r falló: %s", query, exc)
            self.state.fail(generation, str(exc) or "Error consultando Cédulas (gometa)")
            if self.state.is_current(generation):
                self.state.result = []
            return []

        items = normalize_identity_response(payload).items
        return items if self.state.succeed(generation, items) else []


class ExchangeRateLookup:
    """Tipo de cambio del dólar; se refresca de forma independiente."""

    UNAVAILABLE = "Tipo de cambio no disponible"

    def __init__(self, source: ExchangeRateSource) -> None:
        self._source = source
        self.state: LookupState[ExchangeRate] = LookupState()

    async def refresh(self) -> ExchangeRate | None:
        generation = self.state.begin()
        try:
            payload = await self._source.fetch_exchange_rate()
            rate = normalize_exchange_rate(payload)
        except ConsultaError as exc:
            logger.warning("Tipo de cambio falló: %s", exc)
            self.state.fail(generation, self.UNAVAILABLE)
            return None

        return rate if self.state.succeed(generation, rate) else None
