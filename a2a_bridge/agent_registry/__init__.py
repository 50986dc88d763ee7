"""
A2A server registry - single source of truth for registered remote agents.

Provides:
- A2ARegistry - cached, file-backed registry (register/get/list/remove/reload_servers)
- validate_card() - required-field check for fetched agent cards
"""

from .registry import MAX_ID_LENGTH, A2ARegistry, card_server_id, random_server_id, validate_card

__all__ = ["A2ARegistry", "MAX_ID_LENGTH", "card_server_id", "random_server_id", "validate_card"]
