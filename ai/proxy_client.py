"""
Client for the Quest Master proxy endpoint.

Requests are stateless on the server, so the client keeps the conversation
history and sends it with every message.
"""

import json
import logging
import os
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from models.enums import UserTier
from engine.plan_updates import UPDATE_RACE_PLAN, PROVIDE_RACE_ANALYSIS

logger = logging.getLogger(__name__)

DEFAULT_PROXY_URL = "http://localhost:8000/generateAdventure"
UPDATED_FALLBACK_TEXT = "Jag har uppdaterat kartan enligt önskemål."
ACTION_EXECUTED_TEXT = "Action executed."


class ProxyError(Exception):
    """The proxy answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Proxy error ({status_code}): {body}")
        self.status_code = status_code
        self.body = body


class QuestMasterClient:
    """Chat session against the proxy with tool-call dispatch."""

    def __init__(
        self,
        on_race_update: Callable[[Dict[str, Any]], None],
        on_analysis: Callable[[Dict[str, Any]], None],
        url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 60,
    ):
        self.on_race_update = on_race_update
        self.on_analysis = on_analysis
        self.url = url or os.getenv("QUEST_MASTER_URL", DEFAULT_PROXY_URL)
        self._transport = transport
        self._timeout = timeout
        self.tier: str = UserTier.SCOUT.value
        self.history: List[Dict[str, Any]] = []

    def start_new_session(self, tier: UserTier = UserTier.SCOUT) -> None:
        self.tier = UserTier(tier).value
        self.history = []
        logger.info("Quest Master session started (tier %s) against %s", self.tier, self.url)

    def send_message(self, message: Any, force_tool: bool = False) -> Tuple[str, bool]:
        """
        Send one message and dispatch any returned tool calls.

        Returns:
            (reply text, whether a known tool was called)

        Raises:
            ProxyError: On a non-2xx response
            httpx.HTTPError: On transport failure
        """
        payload: Dict[str, Any] = {
            "message": message,
            "tier": self.tier,
            "history": self.history,
        }
        if force_tool:
            payload["forceTool"] = True

        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            resp = client.post(self.url, json=payload)
        if resp.status_code >= 400:
            logger.error("Quest Master proxy returned %s", resp.status_code)
            raise ProxyError(resp.status_code, resp.text)
        data = resp.json()

        text = data.get("textResponse")
        self.history.append({
            "role": "user",
            "parts": [{"text": message if isinstance(message, str) else json.dumps(message)}],
        })
        self.history.append({"role": "model", "parts": [{"text": text or ACTION_EXECUTED_TEXT}]})

        tool_called = False
        for call in data.get("toolCalls") or []:
            name = call.get("name")
            args = call.get("args") or {}
            if name == UPDATE_RACE_PLAN:
                self.on_race_update(args)
                tool_called = True
            elif name == PROVIDE_RACE_ANALYSIS:
                self.on_analysis(args)
                tool_called = True
            else:
                logger.warning("Ignoring unknown tool call %s", name)

        return text or UPDATED_FALLBACK_TEXT, tool_called
