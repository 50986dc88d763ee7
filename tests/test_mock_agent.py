#!/usr/bin/env python3
"""
End-to-end tests against the mock A2A agent, served in-process by FastAPI's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from a2a_bridge.agent_client import A2AClient
from a2a_bridge.agent_registry import A2ARegistry
from a2a_bridge.bridge_tools import BridgeTools
from a2a_bridge.errors import A2ARemoteError, A2ATransportError
from a2a_bridge.mock_agent import create_app
from a2a_bridge.skill_tools import SkillToolGateway

BASE_URL = "http://testserver"


class AppSession:
    """requests-style session over a TestClient (TestClient warns on per-request timeouts)."""

    def __init__(self, app):
        self.http = TestClient(app)

    def get(self, url, timeout=None):
        return self.http.get(url)

    def post(self, url, json=None, timeout=None):
        return self.http.post(url, json=json)


def _bridge(registry_dir, mode):
    app = create_app(mode=mode, base_url=BASE_URL)
    client = A2AClient(session=AppSession(app))
    registry = A2ARegistry(registry_dir, client=client)
    registry.init()
    gateway = SkillToolGateway(registry, client)
    tools = BridgeTools(registry, client, on_registry_change=gateway.sync)
    return app, client, registry, gateway, tools


def test_card_and_health():
    """Test the mock agent serves its card and health endpoints."""
    http = TestClient(create_app(base_url=BASE_URL))
    card = http.get("/.well-known/agent.json").json()
    assert card["id"] == "Bella"
    assert card["url"] == "http://testserver/"
    assert card["skills"][0]["id"] == "special-of-day"
    assert http.get("/health").json() == {"status": "ok", "mode": "success"}


def test_unknown_mode():
    """Test create_app rejects unknown modes."""
    with pytest.raises(ValueError):
        create_app(mode="sometimes")


def test_non_json_body_rejected():
    """Test a non-JSON request body gets HTTP 400."""
    http = TestClient(create_app())
    response = http.post("/", content=b"not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == -32700


def test_unknown_method():
    """Test methods other than tasks/send get a JSON-RPC method-not-found error."""
    http = TestClient(create_app())
    body = http.post("/", json={"jsonrpc": "2.0", "id": 1, "method": "tasks/get", "params": {}}).json()
    assert body["error"]["code"] == -32601


def test_register_and_invoke_end_to_end(registry_dir):
    """Test register, skill tool sync and invocation against a live mock agent."""
    print("=" * 60)
    print("Testing: End-to-end (success mode)")
    print("=" * 60)

    app, _, registry, gateway, tools = _bridge(registry_dir, "success")
    registered = tools.register_server(BASE_URL)
    print(f"Register: {registered.content}")
    assert registered.content == ["Registered A2A server Bella (id: bella)"]
    assert [t.name for t in gateway.list_tools()] == ["bella_special-of-day"]

    result = gateway.run("bella_special-of-day", "What's today's special?")
    print(f"Invoke: {result.content}")
    assert not result.is_error
    assert result.content[0].startswith("A2A server processed: ")

    sent = app.state.received[-1]
    assert sent["method"] == "tasks/send"
    assert sent["params"]["metadata"] == {"skillId": "special-of-day"}
    assert result.content[0] == f"A2A server processed: {sent['params']['id']}"

    raw = tools.send_task("bella", "task-7", {"role": "user", "parts": [{"type": "text", "text": "hi"}]})
    assert raw.content == ["A2A server processed: task-7"]


def test_remote_error_end_to_end(registry_dir):
    """Test an agent error reply surfaces as an error result with its exact message."""
    _, client, registry, gateway, tools = _bridge(registry_dir, "a2a_error")
    tools.register_server(BASE_URL)

    result = gateway.run("bella_special-of-day", "hello")
    assert result.is_error
    assert result.content == ["Task Not Found"]

    with pytest.raises(A2ARemoteError) as exc:
        client.send_task(registry.get("bella").card.url, "task-1")
    assert exc.value.code == -32001


def test_malformed_reply(registry_dir):
    """Test a plain-text reply becomes a transport error."""
    _, client, registry, gateway, tools = _bridge(registry_dir, "malformed")
    tools.register_server(BASE_URL)
    with pytest.raises(A2ATransportError):
        client.send_task(registry.get("bella").card.url, "task-1")
    assert gateway.run("bella_special-of-day", "hello").is_error


def test_http_error_reply(registry_dir):
    """Test an HTTP 500 reply becomes "A2A HTTP error: 500"."""
    _, _, _, gateway, tools = _bridge(registry_dir, "http_error")
    tools.register_server(BASE_URL)
    result = gateway.run("bella_special-of-day", "hello")
    assert result.is_error
    assert result.content == ["A2A HTTP error: 500"]


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
