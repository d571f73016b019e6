"""Jerarquía de errores de las consultas.

Cada excepción define:
- message: texto legible que la CLI muestra tal cual.
- code: identificador estable para uso programático (p.ej. "HTTP_ERROR").

Los adaptadores lanzan; los controladores de consulta atrapan `ConsultaError`
en su borde y guardan el mensaje en su propio estado.
"""

from __future__ import annotations


class ConsultaError(Exception):
    """Base de todos los errores de consulta."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or "CONSULTA_ERROR"
        super().__init__(self.message)


class HttpError(ConsultaError):
    """El upstream respondió con un status fuera del rango 2xx."""

    def __init__(self, status: int) -> None:
        super().__init__(f"HTTP {status}", "HTTP_ERROR")
        self.status = status


class ContentTypeError(ConsultaError):
    """La respuesta declara un content-type que no es JSON."""

    def __init__(self, content_type: str, preview: str) -> None:
        shown = content_type or "sin content-type"
        super().__init__(f"Respuesta no es JSON ({shown}): {preview}", "CONTENT_TYPE_ERROR")
        self.content_type = content_type
        self.preview = preview


class ParseError(ConsultaError):
    """El cuerpo no es JSON válido."""

    def __init__(self, preview: str) -> None:
        super().__init__(f"JSON inválido: {preview}", "PARSE_ERROR")
        self.preview = preview


class ValidationError(ConsultaError):
    """Input rechazado localmente; nunca llega a la red."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class NetworkError(ConsultaError):
    """Fallo de transporte (DNS, conexión, timeout)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "NETWORK_ERROR")


class MissingDataError(ConsultaError):
    """El JSON es válido pero no trae los campos necesarios."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "MISSING_DATA")
