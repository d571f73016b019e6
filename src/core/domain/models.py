"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los upstreams devuelven JSON con formas variables; estos modelos son la
  forma fija que ve la presentación y la exportación.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class CabysEntry(BaseModel):
    """Un código CABYS con su tarifa de impuesto."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(
        ...,
        description="Código CABYS (13 dígitos en el catálogo oficial).",
    )
    description: str = Field(
        default="",
        description="Descripción del bien o servicio.",
    )
    tax_rate: float = Field(
        default=0.0,
        ge=0.0,
        description="Tarifa de IVA en porcentaje (p.ej. 13).",
    )


class CabysResultSet(BaseModel):
    """Foto del paginador CABYS.

    `entries` es la caché completa de la ventana pedida; las filas visibles son
    el rebanado `[page_index * page_size, page_index * page_size + page_size)`.
    """

    query: str = Field(default="", description="Texto buscado.")
    entries: list[CabysEntry] = Field(default_factory=list)
    requested_window_size: int = Field(
        default=0,
        ge=0,
        description="Último `top` pedido al upstream.",
    )
    page_index: int = Field(default=0, ge=0, description="Página actual (base 0).")
    page_size: int = Field(default=10, ge=5, le=50)


class ActivityKind(str, Enum):
    PRINCIPAL = "Principal"
    SECONDARY = "Secundaria"


class ActivityState(str, Enum):
    ACTIVE = "Activa"
    INACTIVE = "Inactiva"


class ActivityRecord(BaseModel):
    """Actividad económica inscrita ante Hacienda."""

    code: str = Field(default="")
    description: str = Field(default="")
    kind: ActivityKind = Field(default=ActivityKind.SECONDARY)
    state: ActivityState = Field(default=ActivityState.INACTIVE)


class TaxpayerSituation(BaseModel):
    estado: str = Field(default="", description="Estado del contribuyente (p.ej. 'Inscrito').")
    moroso: str = Field(default="", description="'SI'/'NO' según Hacienda.")
    omiso: str = Field(default="", description="'SI'/'NO' según Hacienda.")
    administracion_tributaria: str = Field(default="", description="Administración tributaria asignada.")


class TaxpayerRecord(BaseModel):
    """Situación tributaria (AE) de un contribuyente.

    `identification` sale siempre del JSON; solo cae al input del usuario si
    el cuerpo no trae ninguna identificación.
    """

    identification: str = Field(..., description="Identificación, solo dígitos.")
    name: str = Field(default="")
    regime: str = Field(default="", description="Descripción del régimen tributario.")
    situation: TaxpayerSituation = Field(default_factory=TaxpayerSituation)
    activities: list[ActivityRecord] = Field(default_factory=list)
    raw: dict[str, Any] = Field(
        default_factory=dict,
        description="Carga útil cruda para auditoría/trazabilidad.",
    )


class IdentityShape(str, Enum):
    """Formas conocidas de respuesta del buscador de cédulas."""

    RESULTS_WRAPPER = "results_wrapper"
    BARE_ARRAY = "bare_array"
    SINGLE_OBJECT = "single_object"


class IdentityRecord(BaseModel):
    """Persona física o jurídica encontrada en el registro."""

    id: str = Field(..., description="Clave de fila (cédula si existe, si no posición).")
    cedula: str = Field(default="")
    nombre: str = Field(default="")
    tipo: str = Field(default="")
    extra: Any = Field(default=None, description="Elemento original sin tocar.")


class IdentitySearchResult(BaseModel):
    shape: IdentityShape | None = Field(
        default=None,
        description="Forma detectada (None si el payload venía vacío).",
    )
    items: list[IdentityRecord] = Field(default_factory=list)
    raw: Any = Field(default=None)


class ExchangeRate(BaseModel):
    """Tipo de cambio del dólar (solo lectura)."""

    buy: str = Field(default="", description="Tipo de cambio de compra.")
    sell: str = Field(default="", description="Tipo de cambio de venta.")
    date: str = Field(default="", description="Fecha tal como la reporta el upstream.")


class ApiHealth(BaseModel):
    ok: bool = Field(..., description="True si la sonda respondió 2xx.")
    latency_ms: int | None = Field(default=None, ge=0)
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
