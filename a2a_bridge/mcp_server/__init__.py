from .app import BridgeServer, main, to_call_tool_result

__all__ = ["BridgeServer", "main", "to_call_tool_result"]
