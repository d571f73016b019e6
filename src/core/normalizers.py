"""Normalización de respuestas de los upstreams.

Hacienda y Gometa devuelven JSON con formas que cambian según el tipo de
consulta. Aquí se resuelve esa variabilidad una sola vez, con tablas de alias
explícitas, para que el resto del sistema trabaje con modelos fijos.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from core.domain.models import (
    ActivityKind,
    ActivityRecord,
    ActivityState,
    CabysEntry,
    ExchangeRate,
    IdentityRecord,
    IdentitySearchResult,
    IdentityShape,
    TaxpayerRecord,
    TaxpayerSituation,
)
from core.errors import MissingDataError
from core.validators import extract_digits

# Alias por atributo destino, en orden de preferencia.
_WRAPPED_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("cedula", "rawcedula", "id"),
    "cedula": ("cedula", "rawcedula"),
    "nombre": ("fullname", "nombre", "name"),
    "tipo": ("guess_type", "tipo", "type"),
}

# Los arrays sueltos nunca traen `rawcedula`.
_BARE_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("cedula", "id"),
    "cedula": ("cedula",),
    "nombre": ("fullname", "nombre", "name"),
    "tipo": ("guess_type", "tipo", "type"),
}

IDENTITY_ALIASES: dict[IdentityShape, dict[str, tuple[str, ...]]] = {
    IdentityShape.RESULTS_WRAPPER: _WRAPPED_ALIASES,
    IdentityShape.BARE_ARRAY: _BARE_ALIASES,
    IdentityShape.SINGLE_OBJECT: _WRAPPED_ALIASES,
}


def _first_truthy(data: Any, keys: tuple[str, ...]) -> Any:
    if not isinstance(data, Mapping):
        return None
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def detect_identity_shape(payload: Any) -> IdentityShape:
    if isinstance(payload, Mapping) and isinstance(payload.get("results"), list):
        return IdentityShape.RESULTS_WRAPPER
    if isinstance(payload, list):
        return IdentityShape.BARE_ARRAY
    return IdentityShape.SINGLE_OBJECT


def _identity_record(element: Any, aliases: dict[str, tuple[str, ...]], fallback_id: str) -> IdentityRecord:
    return IdentityRecord(
        id=_as_text(_first_truthy(element, aliases["id"])) or fallback_id,
        cedula=_as_text(_first_truthy(element, aliases["cedula"])),
        nombre=_as_text(_first_truthy(element, aliases["nombre"])),
        tipo=_as_text(_first_truthy(element, aliases["tipo"])),
        extra=element,
    )


def normalize_identity_response(payload: Any) -> IdentitySearchResult:
    """Lleva cualquiera de las tres formas de Gometa a una lista uniforme.

    - ``{"results": [...]}``: un registro por elemento.
    - ``[...]``: igual, con menos alias.
    - ``{...}``: un único registro, descartado si no trae cédula, nombre ni tipo.
    """

    if not payload:
        return IdentitySearchResult(shape=None, items=[], raw=payload)

    shape = detect_identity_shape(payload)
    aliases = IDENTITY_ALIASES[shape]

    if shape is IdentityShape.RESULTS_WRAPPER:
        elements = payload["results"]
    elif shape is IdentityShape.BARE_ARRAY:
        elements = payload
    else:
        one = _identity_record(payload, aliases, "1")
        items = [one] if (one.cedula or one.nombre or one.tipo) else []
        return IdentitySearchResult(shape=shape, items=items, raw=payload)

    items = [_identity_record(x, aliases, str(i)) for i, x in enumerate(elements)]
    return IdentitySearchResult(shape=shape, items=items, raw=payload)


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def normalize_cabys(payload: Any) -> list[CabysEntry]:
    raw_items = payload.get("cabys") if isinstance(payload, Mapping) else None
    if not isinstance(raw_items, list):
        return []

    entries: list[CabysEntry] = []
    for item in raw_items:
        if not isinstance(item, Mapping):
            continue
        entries.append(
            CabysEntry(
                code=_as_text(item.get("codigo")),
                description=_as_text(item.get("descripcion")),
                tax_rate=max(0.0, _to_float(item.get("impuesto"))),
            )
        )
    return entries


def _taxpayer_identification(payload: Mapping[str, Any], fallback: str) -> str:
    for key in ("identificacion", "identificacionTributaria", "cedula", "id"):
        value = payload.get(key)
        if value is not None:
            digits = extract_digits(str(value))
            return digits or extract_digits(fallback)
    return extract_digits(fallback)


def _activity(item: Mapping[str, Any]) -> ActivityRecord:
    return ActivityRecord(
        code=_as_text(item.get("codigo")),
        description=_as_text(item.get("descripcion")),
        kind=ActivityKind.PRINCIPAL if item.get("tipo") == "P" else ActivityKind.SECONDARY,
        state=ActivityState.ACTIVE if item.get("estado") == "A" else ActivityState.INACTIVE,
    )


def normalize_taxpayer(payload: Any, fallback_identification: str = "") -> TaxpayerRecord:
    if not isinstance(payload, Mapping):
        raise MissingDataError("Respuesta AE sin datos del contribuyente")

    regimen = payload.get("regimen")
    situacion = payload.get("situacion")
    situacion = situacion if isinstance(situacion, Mapping) else {}
    actividades = payload.get("actividades")

    return TaxpayerRecord(
        identification=_taxpayer_identification(payload, fallback_identification),
        name=_as_text(payload.get("nombre")),
        regime=_as_text(regimen.get("descripcion")) if isinstance(regimen, Mapping) else "",
        situation=TaxpayerSituation(
            estado=_as_text(situacion.get("estado")),
            moroso=_as_text(situacion.get("moroso")),
            omiso=_as_text(situacion.get("omiso")),
            administracion_tributaria=_as_text(situacion.get("administracionTributaria")),
        ),
        activities=[
            _activity(a) for a in (actividades if isinstance(actividades, list) else []) if isinstance(a, Mapping)
        ],
        raw=dict(payload),
    )


def _lookup_path(payload: Any, path: str) -> Any:
    current = payload
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def _first_present(payload: Any, paths: tuple[str, ...]) -> Any:
    for path in paths:
        value = _lookup_path(payload, path)
        if value is not None:
            return value
    return None


def _rate_value(raw: Any) -> str:
    # {fecha, valor} -> valor; número/string -> tal cual.
    if isinstance(raw, Mapping):
        return _as_text(raw.get("valor"))
    return _as_text(raw)


def _rate_date(raw: Any) -> Any:
    if isinstance(raw, Mapping):
        return raw.get("fecha")
    return None


_BUY_PATHS = ("compra", "tipoCambioCompra", "dolar.compra", "data.tipoCambioCompra")
_SELL_PATHS = ("venta", "tipoCambioVenta", "dolar.venta", "data.tipoCambioVenta")
_DATE_PATHS = ("fecha", "data.fecha")


def normalize_exchange_rate(payload: Any) -> ExchangeRate:
    buy_raw = _first_present(payload, _BUY_PATHS)
    sell_raw = _first_present(payload, _SELL_PATHS)

    buy = _rate_value(buy_raw)
    sell = _rate_value(sell_raw)
    if not buy and not sell:
        raise MissingDataError("Sin datos de tipo de cambio")

    # La fecha puede venir aparte o dentro del mismo objeto de compra/venta.
    fecha = _first_present(payload, _DATE_PATHS)
    if fecha is None:
        fecha = _rate_date(buy_raw)
    if fecha is None:
        fecha = _rate_date(sell_raw)

    return ExchangeRate(buy=buy, sell=sell, date=_as_text(fecha))
