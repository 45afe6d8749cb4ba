"""Builders de peticiones: modelos del dominio -> `PanelRequest`.

Puros: no hacen I/O. Las rutas son fijas por endpoint; las operaciones con
alcance de nodo añaden `node_id` como query parameter.
"""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel

from core.domain.models import DetectResult, IllegalItem, NodeStatus, OnlineUser, UserTraffic
from core.domain.wire import PanelRequest

NODE_INFO_PATH = "/api/xray_r/node_info"
USER_LIST_PATH = "/api/xray_r/user_list"
REPORT_NODE_STATUS_PATH = "/api/xray_r/report_node_status"
REPORT_ONLINE_USER_PATH = "/api/xray_r/report_online_user"
REPORT_USER_TRAFFIC_PATH = "/api/xray_r/report_user_traffic"
NODE_RULE_PATH = "/api/xray_r/node_rule"
REPORT_ILLEGAL_PATH = "/api/xray_r/report_illegal"


def _node_query(node_id: int) -> dict[str, str]:
    return {"node_id": str(node_id)}


def _wire(model: BaseModel) -> dict[str, object]:
    return model.model_dump(mode="json", by_alias=True)


def build_node_info_request() -> PanelRequest:
    return PanelRequest(method="GET", path=NODE_INFO_PATH)


def build_user_list_request(*, node_id: int) -> PanelRequest:
    return PanelRequest(method="GET", path=USER_LIST_PATH, query=_node_query(node_id))


def build_node_rule_request() -> PanelRequest:
    return PanelRequest(method="GET", path=NODE_RULE_PATH)


def build_node_status_report(status: NodeStatus, *, node_id: int) -> PanelRequest:
    return PanelRequest(
        method="POST",
        path=REPORT_NODE_STATUS_PATH,
        query=_node_query(node_id),
        body=_wire(status),
    )


def build_online_users_report(users: Iterable[OnlineUser], *, node_id: int) -> PanelRequest:
    return PanelRequest(
        method="POST",
        path=REPORT_ONLINE_USER_PATH,
        query=_node_query(node_id),
        body=[_wire(user) for user in users],
    )


def build_user_traffic_report(traffic: Iterable[UserTraffic], *, node_id: int) -> PanelRequest:
    return PanelRequest(
        method="POST",
        path=REPORT_USER_TRAFFIC_PATH,
        query=_node_query(node_id),
        body=[_wire(item) for item in traffic],
    )


def build_illegal_report(results: Iterable[DetectResult], *, node_id: int) -> PanelRequest:
    """Proyecta cada `DetectResult` a `{"id": rule_id, "uid": uid}`.

    El esquema del cable es más estrecho que el tipo del dominio.
    """

    return PanelRequest(
        method="POST",
        path=REPORT_ILLEGAL_PATH,
        query=_node_query(node_id),
        body=[_wire(IllegalItem.from_result(result)) for result in results],
    )
