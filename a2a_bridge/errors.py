"""Bridge exceptions. Raised by the registry and clients, mapped to tool results by BridgeTools."""


class BridgeError(Exception):
    """Base for all MCP-A2A bridge errors."""
    pass


class ConfigError(BridgeError):
    """Bridge configuration could not be loaded or is invalid."""
    pass


class AgentNotFoundError(BridgeError):
    """A2A server id is not in the registry."""

    def __init__(self, server_id: str):
        self.server_id = server_id
        super().__init__(f"Unknown A2A server id: {server_id}. Register it first.")


class AgentCardFetchError(BridgeError):
    """Agent card could not be fetched or parsed."""
    pass


class AgentCardValidationError(BridgeError):
    """Agent card is missing a required field or has a malformed one."""

    def __init__(self, card_url: str, reason: str):
        self.card_url = card_url
        self.reason = reason
        super().__init__(f"Agent card from {card_url} {reason}")


class RegistryStorageError(BridgeError):
    """Registry directory or record file could not be read or written."""
    pass


class A2ATransportError(BridgeError):
    """A2A endpoint unreachable or returned a non-2xx / non-JSON-RPC response."""

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None):
        self.code = code  # errno name, e.g. "ECONNREFUSED"
        self.status_code = status_code
        super().__init__(message)


class A2ARemoteError(BridgeError):
    """Well-formed JSON-RPC response carrying an error object."""

    def __init__(self, message: str, code: int | None = None, data=None):
        self.code = code
        self.data = data
        super().__init__(message)


class SkillToolNotFoundError(BridgeError):
    """Skill tool name is not (or no longer) in the gateway mapping."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Unknown skill tool: {tool_name}. Its agent may have been removed.")
