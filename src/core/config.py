"""Configuración del cliente del panel.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que el adaptador HTTP y la fachada lean la config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMEOUT_SECONDS = 5.0


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "sakura-panel"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "sakura-panel"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "sakura-panel"
    return Path.home() / ".config" / "sakura-panel"


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
        try:
            existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))
        except OSError:
            existing = {}

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# sakura-panel user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class PanelSettings(BaseSettings):
    """Configuración de la sesión con el panel.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="SAKURA_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_host: str = Field(
        default="http://127.0.0.1:8000",
        min_length=1,
        description="URL base del panel (sin la ruta /api/...).",
    )
    key: str = Field(
        default="",
        description="Secreto compartido; se envía en la cabecera `key`.",
    )
    node_id: int = Field(
        default=1,
        ge=0,
        description="Identificador del nodo en el panel.",
    )
    node_type: str = Field(
        default="V2ray",
        min_length=1,
        description="Tipo de nodo (V2ray, Trojan, Shadowsocks).",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        description="Timeout por request (segundos); <= 0 usa el valor por defecto.",
    )
    retry_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Reintentos de conexión del transporte.",
    )
    speed_limit: float = Field(
        default=0.0,
        ge=0,
        description="Límite de velocidad por usuario (Mbps).",
    )
    device_limit: int = Field(
        default=0,
        ge=0,
        description="Dispositivos simultáneos por usuario (0 = sin límite).",
    )
    rule_list_path: Path | None = Field(
        default=None,
        description="Ruta al fichero local de reglas de detección (un patrón por línea).",
    )
    enable_vless: bool = Field(default=False, description="Habilitar VLESS en el nodo.")
    enable_xtls: bool = Field(default=False, description="Habilitar XTLS en el nodo.")

    @field_validator("timeout_seconds")
    @classmethod
    def _default_timeout(cls, value: float) -> float:
        return value if value > 0 else DEFAULT_TIMEOUT_SECONDS

    @field_validator("api_host")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("rule_list_path", mode="before")
    @classmethod
    def _empty_path_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value
