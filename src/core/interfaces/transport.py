"""Contrato del transporte HTTP hacia el panel.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- El transporte real (httpx, con reintentos y timeout) y uno falso para tests
  son intercambiables sin acoplar el Core a implementaciones concretas.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.wire import PanelRequest, PanelResponse


@runtime_checkable
class PanelTransport(Protocol):
    """Contrato mínimo de transporte.

    Reglas de diseño:
    - `send` es síncrono: las operaciones del cliente son bloqueantes.
    - Cualquier fallo de envío/recepción se señala lanzando una excepción;
      una respuesta HTTP (aunque sea 500) se devuelve, nunca se lanza.
    - Reintentos y timeouts son asunto del transporte, no del Core.
    """

    def send(self, request: PanelRequest) -> PanelResponse:
        """Envía la petición y devuelve la respuesta cruda."""

        ...

    def set_debug(self, enabled: bool) -> None:
        """Activa/desactiva el logging detallado de peticiones."""

        ...
