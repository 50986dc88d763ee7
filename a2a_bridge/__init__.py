"""
MCP-A2A bridge - exposes Agent-to-Agent (A2A) agents to MCP clients.

Provides:
- A2ARegistry - Durable registry of A2A servers (one JSON file each)
- A2AClient - Agent card fetch and JSON-RPC tasks/send client
- SkillToolGateway - One callable tool per registered agent skill
- BridgeTools - Administrative operations returning ToolResult envelopes
"""

from .agent_client import A2AClient
from .agent_registry import A2ARegistry
from .bridge_tools import BridgeTools
from .config import BridgeConfig, configure_logging, load_config
from .errors import (
    A2ARemoteError,
    A2ATransportError,
    AgentCardFetchError,
    AgentCardValidationError,
    AgentNotFoundError,
    BridgeError,
    ConfigError,
    RegistryStorageError,
    SkillToolNotFoundError,
)
from .models import AgentCard, AgentSkill, RegisteredServer, ToolResult
from .skill_tools import SkillTool, SkillToolGateway
from .slug import slugify

__all__ = [
    "A2ARegistry",
    "A2AClient",
    "SkillToolGateway",
    "SkillTool",
    "BridgeTools",
    "BridgeConfig",
    "load_config",
    "configure_logging",
    "AgentCard",
    "AgentSkill",
    "RegisteredServer",
    "ToolResult",
    "slugify",
    "BridgeError",
    "ConfigError",
    "AgentNotFoundError",
    "AgentCardFetchError",
    "AgentCardValidationError",
    "RegistryStorageError",
    "A2ATransportError",
    "A2ARemoteError",
    "SkillToolNotFoundError",
]
