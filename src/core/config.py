"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (Hacienda/Gometa) y controladores lean config de
  forma consistente.

Las URLs base reemplazan el proxy de desarrollo del frontend: si se corre
detrás de un proxy propio basta con apuntar `CR_CONSULTA_HACIENDA_BASE_URL`
y `CR_CONSULTA_GOMETA_BASE_URL` hacia él.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "cr-consulta"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "cr-consulta"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "cr-consulta"
    return Path.home() / ".config" / "cr-consulta"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# cr-consulta user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="CR_CONSULTA_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    hacienda_base_url: str = Field(
        default="https://api.hacienda.go.cr",
        min_length=8,
        description="Base URL de la API de Hacienda (AE, CABYS, tipo de cambio).",
    )
    gometa_base_url: str = Field(
        default="https://apis.gometa.org",
        min_length=8,
        description="Base URL de la API de cédulas de Gometa.",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="cr-consulta/0.1 (+https://local)",
        min_length=1,
        description="User-Agent para las consultas.",
    )

    status_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Intervalo entre chequeos automáticos del estado de la API.",
    )
    status_probe_identification: str = Field(
        default="110220294",
        min_length=9,
        max_length=11,
        description="Identificación estable usada para la sonda de salud (AE).",
    )

    cabys_default_page_size: int = Field(
        default=10,
        ge=5,
        le=50,
        description="Resultados por página por defecto en la búsqueda CABYS.",
    )
    suggest_debounce_seconds: float = Field(
        default=0.4,
        ge=0,
        description="Retardo antes de pedir sugerencias CABYS mientras se escribe.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR).",
    )
