"""
Unit Tests for the PanelClient facade
Builder -> transport -> envelope -> mapper, with a fake transport

Run with:
    pytest tests/test_panel_client.py -v
"""

import httpx
import pytest

from conftest import FakeTransport, envelope
from core.domain.errors import ApplicationError, HTTPError, MalformedBodyError, TransportError
from core.domain.models import (
    ClientInfo,
    DetectResult,
    DetectRule,
    NodeStatus,
    OnlineUser,
    UserTraffic,
)
from core.interfaces.transport import PanelTransport
from core.services.panel_client import PanelClient


class TestConstruction:
    """Tests for client construction and session accessors"""

    def test_fake_transport_satisfies_protocol(self, transport):
        """Test that the fake transport is a PanelTransport"""
        assert isinstance(transport, PanelTransport)

    def test_describe_makes_no_request(self, client, transport):
        """Test that describe only reports session identity"""
        info = client.describe()

        assert info == ClientInfo(
            api_host="http://panel.test",
            node_id=1,
            key="qwertyuiopasdfghjkl",
            node_type="V2ray",
        )
        assert transport.requests == []

    def test_debug_toggles_transport(self, client, transport):
        """Test that debug mode is forwarded to the transport"""
        client.debug()
        assert transport.debug_enabled is True

        client.debug(False)
        assert transport.debug_enabled is False

    def test_context_manager_closes_owned_transport(self, settings):
        """Test that a client-built httpx transport is closed on exit"""
        with PanelClient(settings) as client:
            http_client = client._owned_transport._client
            assert http_client.is_closed is False

        assert http_client.is_closed is True

    def test_close_leaves_injected_transport_open(self, client, transport):
        """Test that an injected transport belongs to the caller"""
        with client:
            pass

        assert transport.closed is False

    def test_local_rules_loaded_once(self, settings_factory, rule_file):
        """Test that the local rule file is read at construction"""
        client = PanelClient(settings_factory(rule_list_path=rule_file), transport=FakeTransport())
        rule_file.write_text("changed\n", encoding="utf-8")

        assert [r.pattern for r in client.local_rules] == [
            "(.*.|)(qq|bilibili).com",
            "BitTorrent protocol",
        ]

    def test_missing_rule_file_is_observable(self, settings_factory, tmp_path):
        """Test that a bad rule file degrades without raising"""
        client = PanelClient(
            settings_factory(rule_list_path=tmp_path / "missing.txt"),
            transport=FakeTransport(),
        )

        assert client.local_rules == ()
        assert client.rule_load.degraded


class TestGetNodeInfo:
    """Tests for get_node_info"""

    def test_maps_node_info(self, client, transport):
        """Test a successful node_info call"""
        transport.queue_datas({"port": 443, "transport_protocol": "grpc", "service_name": "svc"})

        node = client.get_node_info()

        assert node.node_id == 1
        assert node.node_type == "V2ray"
        assert node.port == 443
        assert node.service_name == "svc"
        assert transport.requests[0].path == "/api/xray_r/node_info"
        assert transport.requests[0].query == {}

    def test_enable_vless_from_session(self, settings_factory):
        """Test that VLESS comes from config, not the panel"""
        transport = FakeTransport().queue_datas({"enable_vless": False})
        client = PanelClient(settings_factory(enable_vless=True), transport=transport)

        assert client.get_node_info().enable_vless is True


class TestGetUserList:
    """Tests for get_user_list"""

    def test_documented_scenario(self, client, transport):
        """Test the single-user envelope end to end"""
        transport.queue(
            body=b'{"response":{"code":200,"message":""},'
            b'"datas":{"user_list":[{"port":7,"pass":"uuid-a"}],"alter_id":4}}'
        )

        users = client.get_user_list()

        assert len(users) == 1
        assert (users[0].uid, users[0].uuid, users[0].alter_id, users[0].email) == (7, "uuid-a", 4, "7")
        assert users[0].speed_limit == 8 * 1_000_000 // 8
        assert users[0].device_limit == 3
        assert transport.requests[0].query == {"node_id": "1"}


class TestGetNodeRule:
    """Tests for get_node_rule"""

    def test_panel_only(self, client, transport):
        """Test the empty-local-list scenario"""
        transport.queue(body=b'{"response":{"code":200},"datas":{"rules":["a.com","b.com"]}}')

        rules = client.get_node_rule()

        assert rules == [DetectRule(id=0, pattern="a.com"), DetectRule(id=1, pattern="b.com")]

    def test_local_rules_first_and_not_accumulated(self, settings_factory, rule_file):
        """Test that repeated calls do not grow the local list"""
        transport = FakeTransport().queue_datas({"rules": ["x"]}).queue_datas({"rules": ["y", "z"]})
        client = PanelClient(settings_factory(rule_list_path=rule_file), transport=transport)

        first = client.get_node_rule()
        second = client.get_node_rule()

        assert [r.id for r in first] == [-1, -1, 0]
        assert [r.id for r in second] == [-1, -1, 0, 1]
        assert [r.pattern for r in second[2:]] == ["y", "z"]
        assert len(client.local_rules) == 2


class TestReports:
    """Tests for the report_* operations"""

    def test_report_node_status(self, client, transport):
        """Test that node status is posted with node_id"""
        transport.queue_datas(None)

        client.report_node_status(NodeStatus(cpu=1, mem=1, disk=1, uptime=256))

        request = transport.requests[0]
        assert request.method == "POST"
        assert request.path == "/api/xray_r/report_node_status"
        assert request.query == {"node_id": "1"}
        assert request.body["Uptime"] == 256

    def test_report_online_users(self, client, transport):
        """Test that online users are posted as a list"""
        transport.queue_datas(None)

        client.report_node_online_users([OnlineUser(uid=1, ip="1.1.1.1")])

        assert transport.requests[0].body == [{"UID": 1, "IP": "1.1.1.1"}]

    def test_report_user_traffic(self, client, transport):
        """Test that traffic is posted as a list"""
        transport.queue_datas(None)

        client.report_user_traffic([UserTraffic(uid=1, upload=114514, download=114514)])

        assert transport.requests[0].path == "/api/xray_r/report_user_traffic"
        assert transport.requests[0].body[0]["Upload"] == 114514

    def test_report_illegal(self, client, transport):
        """Test that detect results go out as {id, uid}"""
        transport.queue_datas(None)

        client.report_illegal([DetectResult(uid=1, rule_id=2), DetectResult(uid=1, rule_id=3)])

        assert transport.requests[0].body == [{"id": 2, "uid": 1}, {"id": 3, "uid": 1}]

    def test_report_rejected_by_panel(self, client, transport):
        """Test that a report with a non-200 code raises"""
        transport.queue(body=envelope(None, code=500, message="db error"))

        with pytest.raises(ApplicationError) as exc_info:
            client.report_node_status(NodeStatus())

        assert exc_info.value.panel_message == "db error"


class TestErrorClassification:
    """Tests for errors surfaced by the facade"""

    def test_transport_failure(self, client, transport):
        """Test that a send failure becomes TransportError"""
        cause = httpx.ConnectError("connection refused")
        transport.fail_with(cause)

        with pytest.raises(TransportError) as exc_info:
            client.get_node_info()

        assert exc_info.value.cause is cause
        assert exc_info.value.url == "http://panel.test/api/xray_r/node_info"

    def test_http_500(self, client, transport):
        """Test the HTTP 500 scenario"""
        transport.queue(status_code=500, body=b"<html>Server Error</html>")

        with pytest.raises(HTTPError) as exc_info:
            client.get_user_list()

        assert exc_info.value.status_code == 500

    def test_malformed_body(self, client, transport):
        """Test that a non-JSON body is classified"""
        transport.queue(body=b"not json")

        with pytest.raises(MalformedBodyError):
            client.get_node_rule()

    def test_failure_does_not_poison_client(self, client, transport):
        """Test that the next call works after a failure"""
        transport.queue(status_code=502, body=b"")
        transport.queue_datas({"port": 80})

        with pytest.raises(HTTPError):
            client.get_node_info()
        assert client.get_node_info().port == 80
