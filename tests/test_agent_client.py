#!/usr/bin/env python3
"""
Tests for the A2A client (agent card fetch, tasks/send, mock mode, error mapping).
"""

import errno

import pytest
import requests

from conftest import FakeResponse, FakeSession
from a2a_bridge.agent_client import A2AClient, agent_card_url, transport_error_code
from a2a_bridge.errors import A2ARemoteError, A2ATransportError, AgentCardFetchError

AGENT_RPC = "https://example.test/agent/rpc"


def test_agent_card_url():
    """Test the well-known card path is appended to the registration URL."""
    assert agent_card_url("https://example.test/agent") == "https://example.test/agent/.well-known/agent.json"
    assert agent_card_url("https://example.test/agent/") == "https://example.test/agent/.well-known/agent.json"
    assert agent_card_url("http://localhost:8080") == "http://localhost:8080/.well-known/agent.json"


def test_fetch_card_invalid_json():
    """Test a non-JSON card body raises AgentCardFetchError."""
    session = FakeSession(cards={"https://x.test/.well-known/agent.json": FakeResponse(200, None, text="<html>")})
    client = A2AClient(session=session)
    with pytest.raises(AgentCardFetchError) as exc:
        client.fetch_agent_card("https://x.test")
    assert "not valid JSON" in str(exc.value)


def test_send_task_request_shape():
    """Test the JSON-RPC envelope sent for tasks/send."""
    print("=" * 60)
    print("Testing: tasks/send request")
    print("=" * 60)

    result = {"id": "t-1", "status": {"state": "completed"}}
    session = FakeSession(post_response=FakeResponse(200, {"jsonrpc": "2.0", "id": "x", "result": result}))
    client = A2AClient(session=session)
    message = {"role": "user", "parts": [{"type": "text", "text": "hi"}]}

    assert client.send_task(AGENT_RPC, "t-1", message, skill_id="special-of-day") == result

    sent = session.posts[0]
    print(f"Sent: {sent}")
    assert sent["url"] == AGENT_RPC
    body = sent["json"]
    assert body["jsonrpc"] == "2.0"
    assert body["method"] == "tasks/send"
    assert body["id"]
    assert body["params"] == {"id": "t-1", "message": message, "metadata": {"skillId": "special-of-day"}}


def test_send_task_omits_missing_message():
    """Test params carries no message key when none is given."""
    session = FakeSession()
    A2AClient(session=session).send_task(AGENT_RPC, "t-2")
    assert session.posts[0]["json"]["params"] == {"id": "t-2"}


def test_send_task_mock_mode():
    """Test mock mode answers without any network call."""
    session = FakeSession()
    client = A2AClient(mock=True, session=session)
    message = {"role": "user", "parts": [{"type": "text", "text": "hello"}]}

    result = client.send_task(AGENT_RPC, "t-3", message)
    assert session.posts == []
    assert result["id"] == "t-3"
    assert result["status"]["state"] == "completed"
    assert result["status"]["message"]["parts"][0]["text"] == "Mock agent acknowledges task: t-3"
    assert result["history"] == [message]


def test_send_task_remote_error():
    """Test a JSON-RPC error object becomes A2ARemoteError with the agent's message."""
    session = FakeSession(post_response=FakeResponse(200, {
        "jsonrpc": "2.0", "id": "x", "error": {"code": -32001, "message": "Task Not Found"},
    }))
    with pytest.raises(A2ARemoteError) as exc:
        A2AClient(session=session).send_task(AGENT_RPC, "t-4")
    assert str(exc.value) == "Task Not Found"
    assert exc.value.code == -32001


def test_send_task_http_error():
    """Test non-2xx responses become A2ATransportError."""
    session = FakeSession(post_response=FakeResponse(503, {"detail": "unavailable"}))
    with pytest.raises(A2ATransportError) as exc:
        A2AClient(session=session).send_task(AGENT_RPC, "t-5")
    assert str(exc.value) == "A2A HTTP error: 503"
    assert exc.value.status_code == 503


def test_send_task_malformed_body():
    """Test non-JSON and non-JSON-RPC bodies become A2ATransportError."""
    session = FakeSession(post_response=FakeResponse(200, None, text="plain text"))
    with pytest.raises(A2ATransportError):
        A2AClient(session=session).send_task(AGENT_RPC, "t-6")

    session = FakeSession(post_response=FakeResponse(200, ["not", "an", "object"]))
    with pytest.raises(A2ATransportError):
        A2AClient(session=session).send_task(AGENT_RPC, "t-7")


def test_send_task_connection_refused():
    """Test the errno name is extracted from a wrapped connection error."""
    refused = ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused")
    wrapped = requests.exceptions.ConnectionError(refused)
    session = FakeSession(post_response=wrapped)
    with pytest.raises(A2ATransportError) as exc:
        A2AClient(session=session).send_task(AGENT_RPC, "t-8")
    assert str(exc.value) == "A2A fetch failed. Code: ECONNREFUSED"
    assert exc.value.code == "ECONNREFUSED"


def test_send_task_timeout_without_errno():
    """Test transport failures without an errno keep the exception text."""
    session = FakeSession(post_response=requests.exceptions.Timeout("read timed out"))
    with pytest.raises(A2ATransportError) as exc:
        A2AClient(session=session).send_task(AGENT_RPC, "t-9")
    assert str(exc.value).startswith("A2A fetch failed: ")
    assert exc.value.code is None


def test_transport_error_code_walks_cause_chain():
    """Test errno discovery through __cause__."""
    try:
        try:
            raise OSError(errno.ETIMEDOUT, "timed out")
        except OSError as inner:
            raise RuntimeError("outer") from inner
    except RuntimeError as outer:
        assert transport_error_code(outer) == "ETIMEDOUT"
    assert transport_error_code(ValueError("nothing here")) is None


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
