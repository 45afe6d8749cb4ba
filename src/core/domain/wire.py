"""Tipos de cable: petición saliente y respuesta cruda.

Son la frontera entre el Core (builders/parser) y el transporte. No conocen
httpx: cualquier implementación de `PanelTransport` los entiende.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class PanelRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: str = Field(..., pattern="^(GET|POST)$")
    path: str = Field(..., min_length=1)
    query: dict[str, str] = Field(default_factory=dict)
    body: Any = Field(
        default=None,
        description="Cuerpo JSON ya serializable (dicts/listas); None para GET.",
    )


class PanelResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status_code: int
    body: bytes = b""
    url: str = ""
