"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y la política sin caché para todos los upstreams.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
- Concentra la clasificación de fallos (status, content-type, parseo, red).
"""

from __future__ import annotations

import json
import re
from typing import Any

import httpx

from core.config import AppSettings
from core.errors import ContentTypeError, HttpError, NetworkError, ParseError
from core.logging_config import get_logger

logger = get_logger("http")

PREVIEW_CHARS = 120

_WHITESPACE_RE = re.compile(r"\s+")

# Equivalente a `cache: "no-store"` del navegador.
_NO_STORE_HEADERS = {
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las fuentes se comporten igual.
    - `transport` permite sustituir la red en tests.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json, text/plain;q=0.9, */*;q=0.8",
        **_NO_STORE_HEADERS,
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def body_preview(text: str) -> str:
    """Primeros 120 caracteres del cuerpo con los espacios colapsados."""

    return _WHITESPACE_RE.sub(" ", text[:PREVIEW_CHARS])


async def _get(client: httpx.AsyncClient, url: str, params: dict[str, Any] | None) -> httpx.Response:
    logger.debug("GET %s params=%s", url, params)
    try:
        return await client.get(url, params=params)
    except httpx.RequestError as exc:
        # Transporte, redirecciones en bucle o cuerpo mal comprimido.
        logger.debug("GET %s failed: %r", url, exc)
        raise NetworkError(str(exc) or exc.__class__.__name__) from exc


async def fetch_json_safe(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any] | None = None,
) -> Any:
    """GET que verifica status, content-type y parseo antes de devolver JSON.

    Los proxies a veces devuelven páginas HTML de error con status 200, así
    que el status solo no alcanza.

    Raises:
        HttpError: status fuera de 2xx.
        ContentTypeError: el content-type declarado no es JSON.
        ParseError: el cuerpo no se puede parsear.
        NetworkError: fallo de transporte, redirecciones o lectura del cuerpo.
    """

    response = await _get(client, url, params)
    content_type = (response.headers.get("content-type") or "").lower()
    text = response.text

    if not response.is_success:
        raise HttpError(response.status_code)

    if "application/json" not in content_type:
        raise ContentTypeError(content_type, body_preview(text))

    try:
        return json.loads(text)
    except ValueError as exc:
        raise ParseError(body_preview(text)) from exc


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any] | None = None,
) -> Any:
    """GET simple: valida status y parsea, sin exigir content-type."""

    response = await _get(client, url, params)
    if not response.is_success:
        raise HttpError(response.status_code)
    try:
        return response.json()
    except ValueError as exc:
        raise ParseError(body_preview(response.text)) from exc


async def probe(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any] | None = None,
) -> None:
    """GET que solo exige status 2xx; el cuerpo se descarta."""

    response = await _get(client, url, params)
    if not response.is_success:
        raise HttpError(response.status_code)
