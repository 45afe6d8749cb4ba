"""Taxonomía de errores del cliente del panel.

Por qué una jerarquía propia:
- El llamador distingue *dónde* falló la llamada (red, HTTP, cuerpo, panel)
  sin inspeccionar excepciones de httpx.
- Todas son terminales para la llamada que las produjo: el Core no reintenta.
"""

from __future__ import annotations


def _clip(body: bytes | str, limit: int = 240) -> str:
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    text = text.strip()
    if len(text) > limit:
        return text[:limit] + "…"
    return text


class PanelError(Exception):
    """Base de los errores de comunicación con el panel."""

    def __init__(self, message: str, *, path: str, url: str) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.url = url


class TransportError(PanelError):
    """La petición no llegó al servidor o no volvió (envío/recepción)."""

    def __init__(self, *, path: str, url: str, cause: BaseException) -> None:
        super().__init__(f"request {url} failed: {cause}", path=path, url=url)
        self.cause = cause


class HTTPError(PanelError):
    """El servidor respondió con un status >= 400."""

    def __init__(self, *, path: str, url: str, status_code: int, body: bytes) -> None:
        super().__init__(
            f"request {url} failed: HTTP {status_code}, {_clip(body)}",
            path=path,
            url=url,
        )
        self.status_code = status_code
        self.body = body


class MalformedBodyError(PanelError):
    """El cuerpo de la respuesta no es JSON válido."""

    def __init__(self, *, path: str, url: str, raw_body: bytes) -> None:
        super().__init__(f"request {url} failed: invalid body {_clip(raw_body)!r}", path=path, url=url)
        self.raw_body = raw_body


class ApplicationError(PanelError):
    """Envelope válido con `response.code` distinto de 200 (o ausente)."""

    def __init__(
        self,
        *,
        path: str,
        url: str,
        code: int | None,
        message: str,
        raw_body: bytes,
    ) -> None:
        super().__init__(
            f"request {url} failed: code={code}, message={message!r}",
            path=path,
            url=url,
        )
        self.code = code
        self.panel_message = message
        self.raw_body = raw_body
