"""Fachada del cliente del panel Sakura.

Cada operación compone los mismos pasos:

    builder -> transporte.send -> parse_envelope -> mapper

La fachada solo guarda configuración de sesión (inmutable tras construirse) y
la lista local de reglas leída una vez; no cachea nada del panel, así que es
segura para llamadas concurrentes.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from core import request_builders as builders
from core.config import PanelSettings
from core.domain.models import (
    ClientInfo,
    DetectResult,
    DetectRule,
    NodeInfo,
    NodeStatus,
    OnlineUser,
    UserInfo,
    UserTraffic,
)
from core.domain.wire import PanelRequest, PanelResponse
from core.envelope import parse_envelope
from core.interfaces.transport import PanelTransport
from core.mappers import map_node_info, map_node_rules, map_user_list
from core.rules_loader import RuleListLoad, load_local_rules

logger = logging.getLogger(__name__)


class PanelClient:
    """Una operación por endpoint del panel.

    Errores: cualquier fallo se lanza como subclase de
    `core.domain.errors.PanelError` (la más específica); nunca se reintenta aquí.
    """

    def __init__(
        self,
        settings: PanelSettings | None = None,
        *,
        transport: PanelTransport | None = None,
    ) -> None:
        self._settings = settings or PanelSettings()
        self._owned_transport = None
        if transport is None:
            from adapters.http_client import HttpxPanelTransport  # noqa: PLC0415

            transport = self._owned_transport = HttpxPanelTransport(self._settings)
        self._transport = transport

        self.api_host = self._settings.api_host
        self.node_id = self._settings.node_id
        self.node_type = self._settings.node_type
        self.key = self._settings.key
        self.speed_limit = self._settings.speed_limit
        self.device_limit = self._settings.device_limit
        self.enable_vless = self._settings.enable_vless
        self.enable_xtls = self._settings.enable_xtls

        self.rule_load: RuleListLoad = load_local_rules(self._settings.rule_list_path)

    @property
    def local_rules(self) -> tuple[DetectRule, ...]:
        return self.rule_load.rules

    def _url(self, path: str) -> str:
        return self.api_host + path

    def _call(self, request: PanelRequest) -> Any:
        response: PanelResponse | None = None
        error: Exception | None = None
        try:
            response = self._transport.send(request)
        except Exception as exc:
            error = exc
        url = response.url if response is not None and response.url else self._url(request.path)
        return parse_envelope(response, path=request.path, url=url, error=error)

    # --- Lecturas ---

    def get_node_info(self) -> NodeInfo:
        datas = self._call(builders.build_node_info_request())
        return map_node_info(
            datas,
            node_type=self.node_type,
            node_id=self.node_id,
            enable_vless=self.enable_vless,
        )

    def get_user_list(self) -> list[UserInfo]:
        datas = self._call(builders.build_user_list_request(node_id=self.node_id))
        users = map_user_list(datas, speed_limit_mbps=self.speed_limit, device_limit=self.device_limit)
        logger.debug("Panel returned %d users for node %s", len(users), self.node_id)
        return users

    def get_node_rule(self) -> list[DetectRule]:
        datas = self._call(builders.build_node_rule_request())
        return map_node_rules(datas, local_rules=self.local_rules)

    # --- Reportes ---

    def report_node_status(self, status: NodeStatus) -> None:
        self._call(builders.build_node_status_report(status, node_id=self.node_id))

    def report_node_online_users(self, users: Iterable[OnlineUser]) -> None:
        self._call(builders.build_online_users_report(users, node_id=self.node_id))

    def report_user_traffic(self, traffic: Iterable[UserTraffic]) -> None:
        self._call(builders.build_user_traffic_report(traffic, node_id=self.node_id))

    def report_illegal(self, results: Iterable[DetectResult]) -> None:
        self._call(builders.build_illegal_report(results, node_id=self.node_id))

    # --- Sesión ---

    def describe(self) -> ClientInfo:
        return ClientInfo(
            api_host=self.api_host,
            node_id=self.node_id,
            key=self.key,
            node_type=self.node_type,
        )

    def debug(self, enabled: bool = True) -> None:
        """Activa el logging detallado del transporte (sin efecto en el protocolo)."""

        self._transport.set_debug(enabled)

    def close(self) -> None:
        """Cierra el transporte solo si lo creó la fachada."""

        if self._owned_transport is not None:
            self._owned_transport.close()

    def __enter__(self) -> "PanelClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
