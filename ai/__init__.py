"""
AI module: the Quest Master LLM proxy and its client.
"""

from .quest_master import (
    QuestMasterEngine,
    TOOL_DECLARATIONS,
    build_system_instruction,
    handle_generate_request,
    parse_model_response,
)
from .proxy_client import QuestMasterClient, ProxyError

__all__ = [
    "QuestMasterEngine",
    "TOOL_DECLARATIONS",
    "build_system_instruction",
    "handle_generate_request",
    "parse_model_response",
    "QuestMasterClient",
    "ProxyError",
]
