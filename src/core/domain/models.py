"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación y documentación autocontenida (Field) sin acoplar el Core
  a librerías de I/O.
- Los alias de los modelos salientes describen la forma exacta en el cable
  (claves `CPU`, `UID`, ... que espera el panel).

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
- Son inmutables (`frozen`): cada llamada al panel construye valores nuevos.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class NodeInfo(BaseModel):
    """Configuración de un nodo tal y como la devuelve el panel.

    Por qué existe:
    - El agente la usa para levantar el inbound (puerto, transporte, TLS).
    - `node_type`/`node_id`/`enable_vless` vienen de la sesión, no del panel.
    """

    model_config = ConfigDict(frozen=True)

    node_type: str = Field(..., description="Tipo de nodo configurado localmente (p.ej. 'V2ray').")
    node_id: int = Field(..., description="Identificador del nodo en el panel.")
    port: int = Field(default=0, description="Puerto de escucha.")
    alter_id: int = Field(default=0, description="Alter-ID legado del protocolo VMess.")
    transport_protocol: str = Field(default="", description="Transporte (tcp, ws, grpc, ...).")
    enable_tls: bool = Field(default=False, description="TLS habilitado.")
    tls_type: str = Field(default="", description="Variante TLS (tls, xtls, ...).")
    path: str = Field(default="", description="Path (ws/h2).")
    host: str = Field(default="", description="Host (ws/h2).")
    service_name: str = Field(default="", description="Service name (grpc).")
    header: str | None = Field(
        default=None,
        description="Bloque `header` como JSON crudo; su forma depende del transporte.",
    )
    speed_limit: int = Field(default=0, ge=0, description="Límite de velocidad del nodo (bytes/s).")
    enable_vless: bool = Field(default=False, description="VLESS habilitado en la sesión.")


class UserInfo(BaseModel):
    """Credenciales de un usuario del nodo."""

    model_config = ConfigDict(frozen=True)

    uid: int = Field(..., description="Identificador numérico (el panel lo llama 'port').")
    email: str = Field(..., description="Alias de visualización: el uid en forma de texto.")
    uuid: str = Field(default="", description="UUID/contraseña del usuario.")
    alter_id: int = Field(default=0, description="Alter-ID (viene del nivel de lista).")
    speed_limit: int = Field(default=0, ge=0, description="Límite por usuario (bytes/s).")
    device_limit: int = Field(default=0, description="Dispositivos simultáneos permitidos.")


class DetectRule(BaseModel):
    """Regla de detección (regex o literal).

    `id == -1` marca las reglas locales, que no tienen identidad en el panel.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    pattern: str


class DetectResult(BaseModel):
    """Coincidencia de una regla para un usuario (entrada de `report_illegal`)."""

    model_config = ConfigDict(frozen=True)

    uid: int
    rule_id: int


# --- Modelos salientes (se serializan con alias: forma del cable) ---


class NodeStatus(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cpu: float = Field(default=0.0, alias="CPU")
    mem: float = Field(default=0.0, alias="Mem")
    disk: float = Field(default=0.0, alias="Disk")
    uptime: int = Field(default=0, ge=0, alias="Uptime")


class OnlineUser(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uid: int = Field(..., alias="UID")
    ip: str = Field(..., alias="IP")


class UserTraffic(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uid: int = Field(..., alias="UID")
    email: str = Field(default="", alias="Email")
    upload: int = Field(default=0, alias="Upload")
    download: int = Field(default=0, alias="Download")


class IllegalItem(BaseModel):
    """Forma reducida que acepta el panel para un `DetectResult`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rule_id: int = Field(..., alias="id")
    uid: int = Field(..., alias="uid")

    @classmethod
    def from_result(cls, result: DetectResult) -> "IllegalItem":
        return cls(rule_id=result.rule_id, uid=result.uid)


class ClientInfo(BaseModel):
    """Descripción de la sesión (sin llamadas de red)."""

    model_config = ConfigDict(frozen=True)

    api_host: str
    node_id: int
    key: str
    node_type: str
