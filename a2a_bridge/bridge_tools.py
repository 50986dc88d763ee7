"""
BridgeTools - administrative bridge operations (register, reload, list, details, remove, send task).

Every operation returns a ToolResult and never raises: registry, transport
and remote failures are turned into error results here, at the boundary.
"""

import json
import logging
from typing import Any, Callable
from urllib.parse import urlparse

from .agent_client import A2AClient
from .agent_registry import A2ARegistry
from .errors import AgentNotFoundError, BridgeError
from .models import ToolResult, extract_reply_texts

logger = logging.getLogger(__name__)

NO_AGENT_REPLY_TEXT = "Mock task completed (no specific agent reply)"


class BridgeTools:
    """
    Administrative operations exposed as MCP tools.

    on_registry_change is called after every successful register, reload or
    remove so the caller can resync skill tools.
    """

    def __init__(
        self,
        registry: A2ARegistry,
        client: A2AClient,
        on_registry_change: Callable[[], Any] | None = None,
    ):
        self.registry = registry
        self.client = client
        self.on_registry_change = on_registry_change

    def _registry_changed(self) -> None:
        if self.on_registry_change is None:
            return
        try:
            self.on_registry_change()
        except Exception:
            logger.exception("Registry change hook failed")

    def register_server(self, url: str) -> ToolResult:
        """Register a new A2A server by URL (its agent card is fetched from /.well-known/agent.json)."""
        parsed = urlparse(url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return ToolResult.error(f"Invalid URL: {url!r}. Expected an http(s) URL.")
        try:
            entry = self.registry.register(url)
        except BridgeError as e:
            return ToolResult.error(str(e))
        except Exception as e:
            logger.exception("Unexpected error registering %s", url)
            return ToolResult.error(f"Failed to register A2A server: {e}")
        self._registry_changed()
        return ToolResult.ok(f"Registered A2A server {entry.card.name or entry.id} (id: {entry.id})")

    def reload_servers(self) -> ToolResult:
        """Rescan the registry directory and reload every server into memory."""
        try:
            count = self.registry.reload_servers()["count"]
        except Exception as e:
            logger.exception("Error reloading A2A server configurations")
            return ToolResult.error(f"Failed to reload A2A servers: {e}")
        self._registry_changed()
        return ToolResult.ok(f"Successfully reloaded A2A server configurations. Found {count} servers.")

    def list_servers(self) -> ToolResult:
        """List registered servers with their ids, names and registration URLs."""
        try:
            summaries = [server.summary() for server in self.registry.list()]
        except Exception as e:
            logger.exception("Error listing A2A servers")
            return ToolResult.error(f"Failed to list A2A servers: {e}")
        return ToolResult.ok(
            f"Found {len(summaries)} registered A2A servers:\n{json.dumps(summaries, indent=2)}"
        )

    def get_server_details(self, server_id: str) -> ToolResult:
        """Full registration record for one server."""
        try:
            server = self.registry.get(server_id)
        except Exception as e:
            logger.exception('Error getting A2A server details for ID "%s"', server_id)
            return ToolResult.error(f"Failed to get A2A server details: {e}")
        if server is None:
            return ToolResult.error(f'A2A server with ID "{server_id}" not found.')
        return ToolResult.ok(
            f'Details for A2A server "{server_id}":\n{json.dumps(server.to_json_dict(), indent=2)}'
        )

    def remove_server(self, server_id: str) -> ToolResult:
        """Remove a server registration (disk and cache)."""
        try:
            removed = self.registry.remove(server_id)
        except Exception as e:
            logger.exception('Error removing A2A server ID "%s"', server_id)
            return ToolResult.error(f"Error processing removal of A2A server: {e}")
        if not removed:
            return ToolResult.error(
                f'Failed to remove A2A server with ID "{server_id}". It might not exist or an error occurred.'
            )
        self._registry_changed()
        return ToolResult.ok(f'A2A server with ID "{server_id}" successfully removed.')

    def send_task(self, server_id: str, task_id: str, message: Any = None) -> ToolResult:
        """
        Send a raw tasks/send to a registered server.

        Args:
            server_id: Registration id of the target server
            task_id: A2A task id
            message: Optional A2A message object, passed through unchanged

        Returns:
            The agent's reply text parts, or an error result
        """
        try:
            server = self.registry.get(server_id)
            if server is None:
                raise AgentNotFoundError(server_id)
            result = self.client.send_task(server.card.url, task_id, message)
        except BridgeError as e:
            return ToolResult.error(str(e))
        except Exception as e:
            logger.exception("Unexpected error sending task %s to %s", task_id, server_id)
            return ToolResult.error(f"An unknown error occurred during A2A call: {e}")
        return ToolResult.ok(*(extract_reply_texts(result) or [NO_AGENT_REPLY_TEXT]))
