"""Mappers de proyección: `datas` -> modelos del dominio.

Por qué esquemas intermedios:
- Cada endpoint declara una vez qué campos lee y con qué tipo, en lugar de
  lookups dispersos sobre un árbol JSON dinámico.
- Los campos opcionales son "lenient": ausencia o tipo incorrecto resuelven al
  valor cero del tipo, nunca a un error. Solo el envelope puede fallar.

Los mappers son puros: sin I/O, solo `(datas, sesión) -> valor`.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Sequence

from pydantic import BaseModel, BeforeValidator, Field
from pydantic.config import ConfigDict

from core.domain.models import DetectRule, NodeInfo, UserInfo


def _int_or_zero(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _uint_or_zero(value: object) -> int:
    return max(0, _int_or_zero(value))


def _str_or_empty(value: object) -> str:
    return value if isinstance(value, str) else ""


def _bool_or_false(value: object) -> bool:
    return value if isinstance(value, bool) else False


def _list_or_empty(value: object) -> list[Any]:
    return value if isinstance(value, list) else []


def _object_or_empty(value: object) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


LenientInt = Annotated[int, BeforeValidator(_int_or_zero)]
LenientUInt = Annotated[int, BeforeValidator(_uint_or_zero)]
LenientStr = Annotated[str, BeforeValidator(_str_or_empty)]
LenientBool = Annotated[bool, BeforeValidator(_bool_or_false)]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class NodeInfoPayload(_Payload):
    port: LenientInt = 0
    alter_id: LenientInt = 0
    transport_protocol: LenientStr = ""
    enable_tls: LenientBool = False
    tls_type: LenientStr = ""
    path: LenientStr = ""
    host: LenientStr = ""
    speed_limit: LenientUInt = 0
    service_name: LenientStr = ""


class UserEntry(_Payload):
    port: LenientInt = 0
    passwd: LenientStr = Field(default="", alias="pass")


class UserListPayload(_Payload):
    user_list: Annotated[
        list[Annotated[UserEntry, BeforeValidator(_object_or_empty)]],
        BeforeValidator(_list_or_empty),
    ] = Field(default_factory=list)
    alter_id: LenientInt = 0


def _string_array(value: object) -> list[str]:
    # Lectura todo-o-nada: un solo elemento no-string anula la lista.
    items = _list_or_empty(value)
    if not all(isinstance(item, str) for item in items):
        return []
    return list(items)


class NodeRulePayload(_Payload):
    rules: Annotated[list[str], BeforeValidator(_string_array)] = Field(default_factory=list)


def _raw_header(datas: dict[str, Any]) -> str | None:
    if "header" not in datas:
        return None
    return json.dumps(datas["header"], ensure_ascii=False, separators=(",", ":"))


def map_node_info(
    datas: object,
    *,
    node_type: str,
    node_id: int,
    enable_vless: bool = False,
) -> NodeInfo:
    """Proyecta `datas` de `/node_info` en `NodeInfo`.

    El bloque `header` (si existe) se conserva como JSON crudo: su forma
    depende del transporte y se interpreta fuera de esta capa.
    """

    obj = _object_or_empty(datas)
    payload = NodeInfoPayload.model_validate(obj)
    return NodeInfo(
        node_type=node_type,
        node_id=node_id,
        port=payload.port,
        alter_id=payload.alter_id,
        transport_protocol=payload.transport_protocol,
        enable_tls=payload.enable_tls,
        tls_type=payload.tls_type,
        path=payload.path,
        host=payload.host,
        service_name=payload.service_name,
        header=_raw_header(obj),
        speed_limit=payload.speed_limit,
        enable_vless=enable_vless,
    )


def speed_limit_bytes(speed_limit_mbps: float) -> int:
    """Mbps -> bytes/s (`mbps * 1_000_000 / 8`), truncado como entero sin signo."""

    return max(0, int(speed_limit_mbps * 1_000_000 / 8))


def map_user_list(
    datas: object,
    *,
    speed_limit_mbps: float,
    device_limit: int,
) -> list[UserInfo]:
    """Proyecta `datas` de `/user_list` en una lista de `UserInfo`.

    Límites de velocidad/dispositivos vienen de la sesión, no del panel.
    El alter-ID se lee de la clave de nivel de lista y se replica en todos los
    usuarios (así lo publica el panel).
    """

    payload = UserListPayload.model_validate(_object_or_empty(datas))
    speed_limit = speed_limit_bytes(speed_limit_mbps)
    return [
        UserInfo(
            uid=entry.port,
            email=str(entry.port),
            uuid=entry.passwd,
            alter_id=payload.alter_id,
            speed_limit=speed_limit,
            device_limit=device_limit,
        )
        for entry in payload.user_list
    ]


def map_node_rules(datas: object, *, local_rules: Sequence[DetectRule]) -> list[DetectRule]:
    """Reglas locales (primero, IDs originales) + reglas del panel (IDs 0..n-1)."""

    payload = NodeRulePayload.model_validate(_object_or_empty(datas))
    rules = list(local_rules)
    rules.extend(DetectRule(id=index, pattern=pattern) for index, pattern in enumerate(payload.rules))
    return rules
