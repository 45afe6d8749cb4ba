"""Wrapper de httpx para hablar con el panel.

Por qué un wrapper:
- Estandariza timeouts, cabecera `key`, reintentos y logging.
- Implementa `core.interfaces.transport.PanelTransport`: el Core no ve httpx y
  los tests pueden sustituirlo por un transporte falso.
"""

from __future__ import annotations

import logging

import httpx

from core.config import PanelSettings
from core.domain.wire import PanelRequest, PanelResponse

logger = logging.getLogger(__name__)


def build_sync_client(
    settings: PanelSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` con defaults del panel.

    - `base_url` = host del panel; las rutas de los endpoints son relativas.
    - Cabecera estática `key` con el secreto compartido en cada petición.
    - Reintentos de conexión en el transporte (`retry_count`).
    """

    settings = settings or PanelSettings()
    headers: dict[str, str] = {
        "key": settings.key,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        base_url=settings.api_host,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers=headers,
        transport=transport or httpx.HTTPTransport(retries=settings.retry_count),
    )


def _log_request(request: httpx.Request) -> None:
    logger.debug("--> %s %s", request.method, request.url)
    if request.content:
        logger.debug("--> body %s", request.content.decode("utf-8", errors="replace"))


def _log_response(response: httpx.Response) -> None:
    response.read()
    logger.debug(
        "<-- %s %s %s",
        response.status_code,
        response.request.method,
        response.request.url,
    )
    logger.debug("<-- body %s", response.text)


class HttpxPanelTransport:
    """Transporte síncrono basado en `httpx.Client`.

    Una respuesta HTTP (incluida 4xx/5xx) siempre se devuelve; solo los
    fallos de envío/recepción (`httpx.HTTPError`) se propagan.
    """

    def __init__(
        self,
        settings: PanelSettings | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or PanelSettings()
        self._client = client or build_sync_client(self._settings)
        self._debug = False

    @property
    def base_url(self) -> str:
        return str(self._client.base_url).rstrip("/")

    @property
    def debug_enabled(self) -> bool:
        return self._debug

    def set_debug(self, enabled: bool) -> None:
        self._debug = enabled
        if enabled:
            self._client.event_hooks = {"request": [_log_request], "response": [_log_response]}
        else:
            self._client.event_hooks = {"request": [], "response": []}

    def send(self, request: PanelRequest) -> PanelResponse:
        try:
            response = self._client.request(
                request.method,
                request.path,
                params=request.query or None,
                json=request.body,
            )
        except httpx.HTTPError as exc:
            logger.warning("Request %s %s failed: %s", request.method, request.path, exc)
            raise

        return PanelResponse(
            status_code=response.status_code,
            body=response.content,
            url=str(response.url),
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpxPanelTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
