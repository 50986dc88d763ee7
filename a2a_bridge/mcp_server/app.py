"""
MCP (Model Context Protocol) server for the A2A bridge.

Exposes registry administration tools plus one tool per skill of every
registered A2A agent, so any MCP client can discover and call remote agents.
Run:

  python -m a2a_bridge.mcp_server.app --a2a-server-config-location ./a2a-servers

Or with streamable HTTP (for remote clients):

  mcp-a2a-bridge --transport streamable-http --port 8020

Set MOCK_A2A=true (or pass --mock) to answer tasks/send without contacting agents.
"""

import argparse
import logging
import sys
from typing import Any

from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

from ..agent_client import A2AClient
from ..agent_registry import A2ARegistry
from ..bridge_tools import BridgeTools
from ..config import configure_logging, load_config
from ..errors import ConfigError, RegistryStorageError
from ..models import ToolResult
from ..skill_tools import SkillToolGateway

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-a2a-bridge"

ADMIN_TOOL_NAMES = frozenset({
    "a2a_send_task",
    "a2a_register_server",
    "a2a_reload_servers",
    "a2a_list_servers",
    "a2a_get_server_details",
    "a2a_remove_server",
})


def to_call_tool_result(result: ToolResult) -> CallToolResult:
    """Render a bridge ToolResult as an MCP tool result (text content + isError)."""
    return CallToolResult(
        content=[TextContent(type="text", text=text) for text in result.content],
        isError=result.is_error,
    )


class BridgeServer:
    """
    FastMCP server wired to the registry.

    Skill tools are published from SkillToolGateway's mapping. FastMCP has
    no way to withdraw a tool, so a removed agent's tools stay listed but
    fail when called (the gateway no longer maps them).
    """

    def __init__(self, registry: A2ARegistry, client: A2AClient):
        self.registry = registry
        self.client = client
        self.gateway = SkillToolGateway(registry, client)
        self.tools = BridgeTools(registry, client, on_registry_change=self.sync_skill_tools)
        self.mcp = FastMCP(
            SERVER_NAME,
            instructions=(
                "Bridge to Agent-to-Agent (A2A) agents. Register agents with a2a_register_server; "
                "each agent skill then becomes a tool named <agent-id>_<skill-id>."
            ),
        )
        self._published: set[str] = set()
        self._register_admin_tools()
        self.sync_skill_tools()

    def sync_skill_tools(self) -> list[str]:
        """
        Sync the gateway with the registry and publish any skill tools not yet on the server.

        Returns:
            Names of newly published tools
        """
        self.gateway.sync()
        published = []
        for tool in self.gateway.list_tools():
            if tool.name in self._published:
                continue
            if tool.name in ADMIN_TOOL_NAMES:
                logger.warning('Skill tool "%s" clashes with an admin tool; not published', tool.name)
                continue
            self.mcp.add_tool(self._skill_handler(tool.name), name=tool.name, description=tool.description)
            self._published.add(tool.name)
            published.append(tool.name)
        return published

    def _skill_handler(self, tool_name: str):
        gateway = self.gateway

        def invoke_skill(message: str) -> CallToolResult:
            return to_call_tool_result(gateway.run(tool_name, message))

        return invoke_skill

    async def _notify_tools_changed(self, ctx: Context, before: set[str]) -> None:
        if self._published == before:
            return
        try:
            await ctx.session.send_tool_list_changed()
        except Exception as e:
            logger.warning("Could not send tools/list_changed notification: %s", e)

    def _register_admin_tools(self) -> None:
        mcp = self.mcp
        tools = self.tools

        @mcp.tool(
            name="a2a_send_task",
            description="Send an A2A tasks/send request to a registered server and return the agent's reply.",
        )
        def a2a_send_task(server_id: str, task_id: str, message: Any = None) -> CallToolResult:
            return to_call_tool_result(tools.send_task(server_id, task_id, message))

        @mcp.tool(
            name="a2a_register_server",
            description="Register an A2A server by URL; its agent card is read from /.well-known/agent.json.",
        )
        async def a2a_register_server(url: str, ctx: Context) -> CallToolResult:
            before = set(self._published)
            result = tools.register_server(url)
            await self._notify_tools_changed(ctx, before)
            return to_call_tool_result(result)

        @mcp.tool(
            name="a2a_reload_servers",
            description="Rescans the configuration directory and reloads all A2A server definitions into memory.",
        )
        async def a2a_reload_servers(ctx: Context) -> CallToolResult:
            before = set(self._published)
            result = tools.reload_servers()
            await self._notify_tools_changed(ctx, before)
            return to_call_tool_result(result)

        @mcp.tool(
            name="a2a_list_servers",
            description="Lists all registered A2A servers with their IDs and names.",
        )
        def a2a_list_servers() -> CallToolResult:
            return to_call_tool_result(tools.list_servers())

        @mcp.tool(
            name="a2a_get_server_details",
            description="Retrieves the full registration details for a specific A2A server by its ID.",
        )
        def a2a_get_server_details(server_id: str) -> CallToolResult:
            return to_call_tool_result(tools.get_server_details(server_id))

        @mcp.tool(
            name="a2a_remove_server",
            description="Removes an A2A server registration by its ID.",
        )
        def a2a_remove_server(server_id: str) -> CallToolResult:
            return to_call_tool_result(tools.remove_server(server_id))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Run the MCP-A2A bridge server")
    p.add_argument("--transport", default="stdio", choices=["stdio", "streamable-http"], help="MCP transport")
    p.add_argument("--port", type=int, default=8020, help="Port for streamable-http")
    p.add_argument("--host", default="127.0.0.1", help="Host for streamable-http")
    p.add_argument(
        "--a2a-server-config-location",
        help="Directory path where A2A server registrations are stored (default ./a2a-servers)",
    )
    p.add_argument("--config", help="Optional YAML config file")
    p.add_argument("--mock", action="store_true", help="Mock tasks/send calls instead of contacting agents")
    p.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ...)")
    return p


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(
            registry_dir=args.a2a_server_config_location,
            config_file=args.config,
            mock=args.mock,
            log_level=args.log_level,
        )
    except ConfigError as e:
        parser.error(str(e))

    configure_logging(config.log_level)
    client = A2AClient(mock=config.mock_a2a, timeout=config.request_timeout)
    registry = A2ARegistry(config.registry_dir, client=client)
    try:
        registry.init()
    except RegistryStorageError as e:
        logger.error("Cannot initialize A2A server registry: %s", e)
        sys.exit(1)
    if config.mock_a2a:
        logger.warning("MOCK_A2A is on: tasks/send calls will not reach remote agents")

    server = BridgeServer(registry, client)
    logger.info("Starting %s on %s with %d skill tool(s)", SERVER_NAME, args.transport, len(server.gateway.list_tools()))
    if args.transport == "streamable-http":
        server.mcp.settings.host = args.host
        server.mcp.settings.port = args.port
        server.mcp.run(transport="streamable-http")
    else:
        server.mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
