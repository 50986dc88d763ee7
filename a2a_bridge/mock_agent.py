"""
Mock A2A agent (FastAPI) for local runs and tests.

Serves an agent card at /.well-known/agent.json and answers JSON-RPC
tasks/send on POST /. The mode picks how it answers:

  success     completed Task echoing "A2A server processed: <task id>"
  a2a_error   JSON-RPC error {"code": -32001, "message": "Task Not Found"}
  malformed   plain-text body (not JSON)
  http_error  HTTP 500
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

logger = logging.getLogger(__name__)

MODES = ("success", "a2a_error", "malformed", "http_error")

TASK_NOT_FOUND = {"code": -32001, "message": "Task Not Found"}


def default_card(base_url: str) -> dict[str, Any]:
    """Agent card for the mock "Bella" agent."""
    return {
        "id": "Bella",
        "name": "Bella",
        "description": "Mock restaurant agent that announces the special of the day.",
        "url": f"{base_url.rstrip('/')}/",
        "version": "1.0.0",
        "capabilities": {"streaming": False, "pushNotifications": False},
        "defaultInputModes": ["text"],
        "defaultOutputModes": ["text"],
        "skills": [
            {
                "id": "special-of-day",
                "name": "Special of the day",
                "description": "Tell the caller today's special.",
            }
        ],
    }


def _rpc_error(request_id: Any, code: int, message: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}},
        status_code=status_code,
    )


def create_app(
    mode: str = "success",
    card: dict[str, Any] | None = None,
    base_url: str = "http://localhost:8080",
) -> FastAPI:
    """
    Build the mock agent app.

    Args:
        mode: One of MODES
        card: Agent card to serve (defaults to default_card(base_url))
        base_url: Public base URL, used for the default card's url

    Raises:
        ValueError: If mode is unknown
    """
    if mode not in MODES:
        raise ValueError(f"Unknown mock agent mode: {mode}. Expected one of {', '.join(MODES)}")
    agent_card = card if card is not None else default_card(base_url)
    app = FastAPI(title=f"Mock A2A agent ({mode})")
    app.state.mode = mode
    app.state.received = []

    @app.get("/.well-known/agent.json")
    def get_agent_card():
        return agent_card

    @app.get("/health")
    def health():
        return {"status": "ok", "mode": mode}

    @app.post("/")
    async def handle_rpc(request: Request):
        try:
            body = json.loads(await request.body())
        except ValueError:
            return _rpc_error(None, -32700, "Parse error", status_code=400)
        if not isinstance(body, dict):
            return _rpc_error(None, -32600, "Invalid Request", status_code=400)
        app.state.received.append(body)

        request_id = body.get("id")
        if body.get("method") != "tasks/send":
            return _rpc_error(request_id, -32601, "Method not found")
        params = body.get("params") or {}
        task_id = params.get("id")
        logger.info("tasks/send %s (mode %s)", task_id, mode)

        if mode == "http_error":
            return PlainTextResponse("Internal Server Error", status_code=500)
        if mode == "malformed":
            return PlainTextResponse("this is not json-rpc")
        if mode == "a2a_error":
            return _rpc_error(request_id, TASK_NOT_FOUND["code"], TASK_NOT_FOUND["message"])

        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "result": {
                "id": task_id,
                "sessionId": params.get("sessionId"),
                "status": {
                    "state": "completed",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "message": {
                        "role": "agent",
                        "parts": [{"type": "text", "text": f"A2A server processed: {task_id}"}],
                    },
                },
                "metadata": params.get("metadata"),
            },
        }

    return app
