"""Configuración de logging de cr-consulta.

Todos los loggers cuelgan de `cr_consulta`, así la CLI puede subir o bajar el
nivel de todo el árbol con una sola llamada.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "cr_consulta"


def setup_logging(level: int | str = logging.WARNING, *, console: Console | None = None) -> logging.Logger:
    """Configura el logger raíz de la aplicación.

    Es idempotente: llamadas repetidas solo ajustan el nivel.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in root_logger.handlers):
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
            log_time_format="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))
        root_logger.addHandler(handler)
        root_logger.propagate = False

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Retorna el logger `cr_consulta.<name>`.

    Example:
        >>> logger = get_logger("hacienda")
        >>> logger.debug("GET /fe/cabys")
    """

    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
