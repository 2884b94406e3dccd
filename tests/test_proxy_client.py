"""
Tests for the Quest Master proxy client.
"""

import json

import httpx
import pytest

from models.enums import UserTier
from ai.proxy_client import ProxyError, QuestMasterClient, UPDATED_FALLBACK_TEXT


def _make_client(reply, status=200):
    requests = []
    updates = []
    analyses = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        return httpx.Response(status, json=reply)

    client = QuestMasterClient(
        on_race_update=updates.append,
        on_analysis=analyses.append,
        url="http://proxy.test/generateAdventure",
        transport=httpx.MockTransport(handler),
    )
    return client, requests, updates, analyses


def test_send_message_dispatches_plan_update():
    reply = {"textResponse": "Klart", "toolCalls": [{"name": "update_race_plan", "args": {"name": "Jakten"}}]}
    client, requests, updates, analyses = _make_client(reply)
    client.start_new_session(UserTier.CREATOR)
    text, tool_called = client.send_message("Döp om loppet", force_tool=True)
    assert (text, tool_called) == ("Klart", True)
    assert updates == [{"name": "Jakten"}]
    assert analyses == []
    assert requests[0] == {
        "message": "Döp om loppet",
        "tier": "CREATOR",
        "history": [],
        "forceTool": True,
    }


def test_history_grows_and_is_sent():
    client, requests, _, _ = _make_client({"textResponse": "Svar", "toolCalls": []})
    client.send_message("Första")
    client.send_message({"question": "Andra"})
    assert requests[1]["history"] == [
        {"role": "user", "parts": [{"text": "Första"}]},
        {"role": "model", "parts": [{"text": "Svar"}]},
    ]
    assert client.history[2]["parts"][0]["text"] == json.dumps({"question": "Andra"})
    assert "forceTool" not in requests[0]


def test_analysis_and_unknown_tools():
    reply = {"toolCalls": [
        {"name": "provide_race_analysis", "args": {"overallScore": 70}},
        {"name": "delete_everything", "args": {}},
    ]}
    client, _, updates, analyses = _make_client(reply)
    text, tool_called = client.send_message("Analysera")
    assert text == UPDATED_FALLBACK_TEXT
    assert tool_called
    assert analyses == [{"overallScore": 70}]
    assert updates == []
    assert client.history[1]["parts"][0]["text"] == "Action executed."


def test_new_session_clears_history():
    client, _, _, _ = _make_client({"textResponse": "Svar"})
    client.send_message("Hej")
    client.start_new_session(UserTier.MASTER)
    assert client.history == []
    assert client.tier == "MASTER"


def test_error_status_raises():
    client, _, _, _ = _make_client({"error": "Server API Key missing."}, status=500)
    with pytest.raises(ProxyError) as exc:
        client.send_message("Hej")
    assert exc.value.status_code == 500
    assert "Server API Key missing." in exc.value.body
    assert client.history == []
