"""
Pytest fixtures for panel client tests
Shared settings, fake transport and envelope helpers
"""

import json
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

import pytest

from core.config import PanelSettings
from core.domain.wire import PanelRequest, PanelResponse
from core.services.panel_client import PanelClient


def envelope(datas: Any = None, code: Any = 200, message: str = "") -> bytes:
    """Build a panel envelope body"""
    return json.dumps({"response": {"code": code, "message": message}, "datas": datas}).encode()


class FakeTransport:
    """In-memory PanelTransport: records requests, replays queued outcomes"""

    def __init__(self, outcomes: Optional[List[Union[PanelResponse, Exception]]] = None):
        self.outcomes = list(outcomes or [])
        self.requests: List[PanelRequest] = []
        self.debug_enabled = False
        self.closed = False

    def queue(self, status_code: int = 200, body: bytes = b"") -> "FakeTransport":
        self.outcomes.append(PanelResponse(status_code=status_code, body=body))
        return self

    def queue_datas(self, datas: Any) -> "FakeTransport":
        return self.queue(body=envelope(datas))

    def fail_with(self, exc: Exception) -> "FakeTransport":
        self.outcomes.append(exc)
        return self

    def send(self, request: PanelRequest) -> PanelResponse:
        self.requests.append(request)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def set_debug(self, enabled: bool) -> None:
        self.debug_enabled = enabled

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings_factory() -> Callable[..., PanelSettings]:
    """Settings isolated from .env files"""

    def factory(**overrides: Any) -> PanelSettings:
        values = {
            "api_host": "http://panel.test",
            "key": "qwertyuiopasdfghjkl",
            "node_id": 1,
            "node_type": "V2ray",
            "speed_limit": 8.0,
            "device_limit": 3,
        }
        values.update(overrides)
        return PanelSettings(_env_file=None, **values)

    return factory


@pytest.fixture
def settings(settings_factory) -> PanelSettings:
    return settings_factory()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(settings, transport) -> PanelClient:
    return PanelClient(settings, transport=transport)


@pytest.fixture
def rule_file(tmp_path) -> Path:
    path = tmp_path / "rules.txt"
    path.write_text("(.*.|)(qq|bilibili).com\nBitTorrent protocol\n", encoding="utf-8")
    return path
