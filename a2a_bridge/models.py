"""Pydantic models for agent cards, registry records, JSON-RPC envelopes and tool results."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Fields an agent card must carry (per the A2A agent card schema)
REQUIRED_CARD_FIELDS = ("name", "url", "version", "capabilities", "skills")

SEND_TASK_METHOD = "tasks/send"


class AgentSkill(BaseModel):
    """One invocable skill advertised by an agent. Unknown keys are kept as-is; a numeric id becomes a string."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str
    name: str | None = None
    description: str | None = None


class AgentCard(BaseModel):
    """
    A2A agent card served at /.well-known/agent.json.

    Required fields are typed; everything else the agent advertises
    (provider, authentication, defaultInputModes, ...) is preserved verbatim.
    Numeric name or version values (e.g. "version": 1) are kept as strings.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Any = None
    name: str
    url: str = Field(..., description="The agent's own JSON-RPC endpoint")
    version: str
    description: str | None = None
    capabilities: Any
    skills: list[AgentSkill]


class RegisteredServer(BaseModel):
    """A registered A2A server, stored as <registry_dir>/<id>.json."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    registration_url: str = Field(..., alias="registrationUrl")
    card: AgentCard
    added_at: str = Field(..., alias="addedAt")

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, leaving out card fields the agent never sent."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    def summary(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.card.name, "registrationUrl": self.registration_url}


class JsonRpcError(BaseModel):
    code: int | None = None
    message: str
    data: Any = None


class JsonRpcRequest(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: str | int | None
    method: str
    params: dict[str, Any] | None = None


class JsonRpcResponse(BaseModel):
    jsonrpc: str = "2.0"
    id: str | int | None = None
    result: Any = None
    error: JsonRpcError | None = None


class ToolResult(BaseModel):
    """Uniform envelope returned by every bridge operation: text segments plus an error flag."""

    content: list[str] = Field(default_factory=list)
    is_error: bool = False

    @classmethod
    def ok(cls, *texts: str) -> "ToolResult":
        return cls(content=list(texts), is_error=False)

    @classmethod
    def error(cls, text: str) -> "ToolResult":
        return cls(content=[text], is_error=True)


def extract_reply_texts(result: Any) -> list[str]:
    """
    Pull the agent's reply out of a tasks/send result (a Task object).

    Returns the text of each part in result.status.message.parts, or an empty
    list when the result does not have that shape.
    """
    if not isinstance(result, dict):
        return []
    status = result.get("status")
    message = status.get("message") if isinstance(status, dict) else None
    parts = message.get("parts") if isinstance(message, dict) else None
    if not isinstance(parts, list):
        return []
    return [part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
