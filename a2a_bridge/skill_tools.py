"""
SkillToolGateway - turns each registered agent skill into a callable tool.

The gateway keeps an explicit mapping of tool name -> SkillTool. That
mapping is the only record of what can be invoked: the MCP server publishes
tools from it and every invocation resolves through it, so a tool whose
agent has been removed fails instead of reaching the network.
"""

import logging
import uuid
from dataclasses import dataclass

from .agent_client import A2AClient
from .agent_registry import A2ARegistry
from .errors import AgentNotFoundError, BridgeError, SkillToolNotFoundError
from .models import ToolResult, extract_reply_texts
from .slug import slugify

logger = logging.getLogger(__name__)

TOOL_NAME_SEPARATOR = "_"
NO_REPLY_TEXT = "No reply received."


def make_skill_tool_name(server_id: str, skill_id: str) -> str:
    """Tool name for one (server, skill) pair, e.g. "bella_special-of-day"."""
    return f"{slugify(server_id)}{TOOL_NAME_SEPARATOR}{slugify(skill_id)}"


@dataclass(frozen=True)
class SkillTool:
    """One materialized skill tool. Derived from the registry, never persisted."""

    name: str
    server_id: str
    skill_id: str
    server_name: str
    description: str


def user_text_message(text: str) -> dict:
    """A2A user message carrying a single text part."""
    return {"role": "user", "parts": [{"type": "text", "text": text}]}


class SkillToolGateway:
    """
    Resolves skill tools from the registry and runs them through the A2A client.

    sync() is safe to call any number of times; it only reports tools that
    were not mapped before.
    """

    def __init__(self, registry: A2ARegistry, client: A2AClient):
        """
        Initialize skill tool gateway.

        Args:
            registry: Registry whose servers' skills become tools
            client: Client used to send tasks to the agents
        """
        self.registry = registry
        self.client = client
        self._tools: dict[str, SkillTool] = {}

    def sync(self) -> list[SkillTool]:
        """
        Rebuild the tool mapping from the registry's current servers.

        Tools for servers or skills that are gone are dropped from the mapping.

        Returns:
            Tools whose names were not in the mapping before this call
        """
        current: dict[str, SkillTool] = {}
        added: list[SkillTool] = []
        for server_id, server in self.registry.entries():
            for skill in server.card.skills:
                if not slugify(skill.id):
                    logger.warning('Skipping skill "%s" of server "%s": id slugs to nothing', skill.id, server_id)
                    continue
                name = make_skill_tool_name(server_id, skill.id)
                if name in current:
                    logger.warning('Skill tool name "%s" is already taken; skipping skill "%s" of "%s"', name, skill.id, server_id)
                    continue
                current[name] = SkillTool(
                    name=name,
                    server_id=server_id,
                    skill_id=skill.id,
                    server_name=server.card.name,
                    description=skill.description or f"Invoke skill {skill.id} on agent {server.card.name}",
                )
                if name not in self._tools:
                    added.append(current[name])

        for name in sorted(self._tools.keys() - current.keys()):
            logger.info('Retracted skill tool "%s"', name)
        self._tools = current
        if added:
            logger.info("Added %d skill tool(s): %s", len(added), ", ".join(t.name for t in added))
        return added

    def list_tools(self) -> list[SkillTool]:
        return list(self._tools.values())

    def get(self, tool_name: str) -> SkillTool:
        """
        Get a skill tool by name.

        Raises:
            SkillToolNotFoundError: If the name is not in the mapping
        """
        tool = self._tools.get(tool_name)
        if tool is None:
            raise SkillToolNotFoundError(tool_name)
        return tool

    def run(self, tool_name: str, message: str) -> ToolResult:
        """
        Invoke a skill tool with a free-text message.

        Returns:
            The agent's reply text parts (or NO_REPLY_TEXT), or an error result
        """
        try:
            tool = self.get(tool_name)
            server = self.registry.get(tool.server_id)
            if server is None:
                raise AgentNotFoundError(tool.server_id)
            result = self.client.send_task(
                server.card.url,
                str(uuid.uuid4()),
                user_text_message(message),
                skill_id=tool.skill_id,
            )
        except BridgeError as e:
            return ToolResult.error(str(e))
        except Exception as e:
            logger.exception('Unexpected error running skill tool "%s"', tool_name)
            return ToolResult.error(f"Unexpected error invoking {tool_name}: {e}")

        return ToolResult.ok(*(extract_reply_texts(result) or [NO_REPLY_TEXT]))
