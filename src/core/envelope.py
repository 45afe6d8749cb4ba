"""Parser del envelope del panel.

Todas las respuestas del panel tienen la forma:

    {"response": {"code": 200, "message": ""}, "datas": <según endpoint>}

Responsabilidad:
- Validar status HTTP, parsear el cuerpo y desenvolver `datas`.
- Clasificar cada fallo en un único error tipado (ver `core.domain.errors`).

El `Envelope` es un artefacto transitorio: fuera de este módulo solo se ve
`datas` o la excepción.
"""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field
from pydantic.config import ConfigDict

from core.domain.errors import ApplicationError, HTTPError, MalformedBodyError, TransportError
from core.domain.wire import PanelResponse

SUCCESS_CODE = 200


def _coerce_code(value: object) -> int | None:
    # bool es subclase de int: `true` no es un código.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _coerce_message(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _as_object(value: object) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


class EnvelopeStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: Annotated[int | None, BeforeValidator(_coerce_code)] = None
    message: Annotated[str, BeforeValidator(_coerce_message)] = ""


class Envelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    response: Annotated[EnvelopeStatus, BeforeValidator(_as_object)] = Field(
        default_factory=EnvelopeStatus
    )
    datas: Any = None


def parse_envelope(
    response: PanelResponse | None,
    *,
    path: str,
    url: str,
    error: BaseException | None = None,
) -> Any:
    """Valida y desenvuelve una respuesta del panel.

    Orden (cada paso corta en el primer fallo):
    1) error de transporte -> `TransportError`
    2) status >= 400 -> `HTTPError` (el cuerpo no se parsea)
    3) cuerpo no JSON -> `MalformedBodyError`
    4) `response.code` != 200 o ausente -> `ApplicationError`
    5) devuelve `datas` tal cual (puede ser None; los mappers aplican defaults)
    """

    if error is not None or response is None:
        cause = error if error is not None else RuntimeError("no response")
        raise TransportError(path=path, url=url, cause=cause) from error

    if response.status_code >= 400:
        raise HTTPError(path=path, url=url, status_code=response.status_code, body=response.body)

    try:
        tree = json.loads(response.body)
    except (ValueError, RecursionError) as exc:
        raise MalformedBodyError(path=path, url=url, raw_body=response.body) from exc

    envelope = Envelope.model_validate(_as_object(tree))
    if envelope.response.code != SUCCESS_CODE:
        raise ApplicationError(
            path=path,
            url=url,
            code=envelope.response.code,
            message=envelope.response.message,
            raw_body=response.body,
        )
    return envelope.datas
