"""
A2A client - fetches agent cards and sends JSON-RPC tasks/send requests.

In mock mode (selected at process start, e.g. MOCK_A2A=true) no network call
is made for tasks/send; a completed Task with a canned reply is returned.
"""

import errno
import logging
import uuid
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urljoin

import requests
from pydantic import ValidationError

from .errors import A2ARemoteError, A2ATransportError, AgentCardFetchError
from .models import SEND_TASK_METHOD, JsonRpcRequest, JsonRpcResponse

logger = logging.getLogger(__name__)

WELL_KNOWN_CARD_PATH = ".well-known/agent.json"


def agent_card_url(registration_url: str) -> str:
    """Resolve <registration_url>/.well-known/agent.json (a trailing slash is added first)."""
    base = registration_url if registration_url.endswith("/") else f"{registration_url}/"
    return urljoin(base, WELL_KNOWN_CARD_PATH)


def transport_error_code(exc: BaseException) -> str | None:
    """
    Find the OS-level error name (e.g. "ECONNREFUSED") behind a transport exception.

    requests wraps the socket error several layers deep (ConnectionError ->
    MaxRetryError.reason -> NewConnectionError.__cause__), so walk the chain.
    """
    seen: set[int] = set()
    pending: list[BaseException] = [exc]
    while pending:
        current = pending.pop(0)
        if id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, OSError) and current.errno in errno.errorcode:
            return errno.errorcode[current.errno]
        for nested in (getattr(current, "reason", None), current.__cause__, current.__context__, *current.args):
            if isinstance(nested, BaseException):
                pending.append(nested)
    return None


def mock_task_result(task_id: str, message: Any = None) -> dict[str, Any]:
    """Completed A2A Task returned in mock mode."""
    return {
        "id": task_id,
        "sessionId": "mock-session-id",
        "status": {
            "state": "completed",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "message": {
                "role": "agent",
                "parts": [{"type": "text", "text": f"Mock agent acknowledges task: {task_id}"}],
            },
        },
        "history": [message],
        "artifacts": [],
    }


class A2AClient:
    """
    Client for talking to remote A2A agents over HTTP.

    The session is injectable so tests can pass a fake or a FastAPI TestClient.
    """

    def __init__(self, mock: bool = False, timeout: float = 30.0, session: Any = None):
        """
        Initialize A2A client.

        Args:
            mock: Return canned tasks/send results without any network call
            timeout: Per-request timeout in seconds
            session: requests.Session-compatible object (defaults to a new Session)
        """
        self.mock = mock
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_agent_card(self, registration_url: str) -> Any:
        """
        Fetch the raw agent card JSON for a registration URL.

        Args:
            registration_url: Base URL the agent was registered with

        Returns:
            Decoded JSON document (validated later by the registry)

        Raises:
            AgentCardFetchError: On connection failure, non-2xx status or invalid JSON
        """
        card_endpoint = agent_card_url(registration_url)
        try:
            response = self.session.get(card_endpoint, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise self._card_error(card_endpoint, str(e)) from e
        if not 200 <= response.status_code < 300:
            raise self._card_error(
                card_endpoint, f"Failed to fetch agent card from {card_endpoint}: HTTP {response.status_code}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise self._card_error(card_endpoint, f"Response from {card_endpoint} is not valid JSON: {e}") from e

    def _card_error(self, card_endpoint: str, detail: str) -> AgentCardFetchError:
        logger.error("Error fetching/parsing agent card from %s: %s", card_endpoint, detail)
        return AgentCardFetchError(f"Could not retrieve/parse agent card. Details: {detail}")

    def send_task(
        self,
        agent_url: str,
        task_id: str,
        message: Any = None,
        skill_id: str | None = None,
    ) -> Any:
        """
        Send an A2A tasks/send request and return the JSON-RPC result (a Task).

        Args:
            agent_url: The agent's own endpoint (card.url)
            task_id: Task id placed in params.id
            message: Opaque A2A message object
            skill_id: Optional targeted skill, sent as params.metadata.skillId

        Returns:
            The "result" member of the JSON-RPC response

        Raises:
            A2ATransportError: Connection failure, non-2xx status, or a body that is not JSON-RPC
            A2ARemoteError: The agent answered with a JSON-RPC error object
        """
        if self.mock:
            logger.info("[MOCK] Returning mock success for tasks/send (task %s)", task_id)
            return mock_task_result(task_id, message)

        params: dict[str, Any] = {"id": task_id}
        if message is not None:
            params["message"] = message
        if skill_id:
            params["metadata"] = {"skillId": skill_id}
        request = JsonRpcRequest(id=str(uuid.uuid4()), method=SEND_TASK_METHOD, params=params)

        try:
            response = self.session.post(agent_url, json=request.model_dump(), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            code = transport_error_code(e)
            text = f"A2A fetch failed. Code: {code}" if code else f"A2A fetch failed: {e}"
            logger.error("tasks/send to %s failed: %s", agent_url, e)
            raise A2ATransportError(text, code=code) from e

        if not 200 <= response.status_code < 300:
            logger.error("tasks/send to %s returned HTTP %s", agent_url, response.status_code)
            raise A2ATransportError(f"A2A HTTP error: {response.status_code}", status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise A2ATransportError(f"A2A response from {agent_url} is not valid JSON") from e
        try:
            rpc = JsonRpcResponse.model_validate(body)
        except ValidationError as e:
            raise A2ATransportError(f"A2A response from {agent_url} is not a JSON-RPC response: {e}") from e

        if rpc.error is not None:
            logger.info("Agent at %s returned error %s: %s", agent_url, rpc.error.code, rpc.error.message)
            raise A2ARemoteError(rpc.error.message, code=rpc.error.code, data=rpc.error.data)
        return rpc.result
