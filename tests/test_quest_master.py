"""
Tests for the Quest Master engine and the proxy endpoint.
"""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from ai.quest_master import (
    MISSING_KEY_MESSAGE,
    NO_UNDERSTANDING_TEXT,
    TOOL_CALL_FALLBACK_TEXT,
    TOOL_DECLARATIONS,
    QuestMasterEngine,
    build_contents,
    build_system_instruction,
    handle_generate_request,
    parse_model_response,
)


def _text_part(text):
    return SimpleNamespace(text=text, function_call=None)


def _call_part(name, args):
    return SimpleNamespace(text="", function_call=SimpleNamespace(name=name, args=args))


def _make_response(*parts):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


class FakeEngine(QuestMasterEngine):
    """Engine that answers with a canned response instead of calling Gemini."""

    def __init__(self, response=None, error=None):
        self.model_name = "fake"
        self.response = response
        self.error = error
        self.calls = []

    def _call_model(self, contents, system_instruction, force_tool):
        self.calls.append((contents, system_instruction, force_tool))
        if self.error:
            raise self.error
        return self.response


class TestParseModelResponse:

    def test_text_only(self):
        payload = parse_model_response(_make_response(_text_part("Hej "), _text_part("där")))
        assert payload == {"textResponse": "Hej där", "toolCalls": []}

    def test_tool_call_without_text(self):
        args = {"name": "Jakten", "checkpoints": [{"name": "Kyrkan", "type": "mandatory"}]}
        payload = parse_model_response(_make_response(_call_part("update_race_plan", args)))
        assert payload["textResponse"] == TOOL_CALL_FALLBACK_TEXT
        assert payload["toolCalls"] == [{"name": "update_race_plan", "args": args}]

    def test_empty_response(self):
        assert parse_model_response(SimpleNamespace(candidates=[]))["textResponse"] == NO_UNDERSTANDING_TEXT

    def test_only_first_candidate(self):
        response = SimpleNamespace(candidates=[
            SimpleNamespace(content=SimpleNamespace(parts=[_text_part("A")])),
            SimpleNamespace(content=SimpleNamespace(parts=[_text_part("B")])),
        ])
        assert parse_model_response(response)["textResponse"] == "A"


def test_system_instruction_includes_tier():
    instruction = build_system_instruction("SCOUT")
    assert "USER_TIER: SCOUT." in instruction
    assert "Keep descriptions short." in instruction
    assert build_system_instruction("UNKNOWN").endswith("USER_TIER: UNKNOWN.")


def test_build_contents_keeps_first_text_part():
    history = [
        {"role": "user", "parts": [{"text": "Hej"}, {"text": "ignored"}]},
        {"role": "model", "parts": [{"text": "Hallå"}]},
    ]
    contents = build_contents("Ny fråga", history)
    assert [c["role"] for c in contents] == ["user", "model", "user"]
    assert contents[0]["parts"] == [{"text": "Hej"}]
    assert contents[-1]["parts"] == [{"text": "Ny fråga"}]


def test_tool_declarations():
    names = [tool["name"] for tool in TOOL_DECLARATIONS]
    assert names == ["update_race_plan", "provide_race_analysis"]


class TestHandleGenerateRequest:

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert handle_generate_request({"message": "Hej"}) == (500, {"error": MISSING_KEY_MESSAGE})

    def test_engine_error(self):
        engine = FakeEngine(error=RuntimeError("quota exceeded"))
        status, body = handle_generate_request({"message": "Hej"}, engine)
        assert status == 500
        assert body == {"error": "quota exceeded"}

    def test_success_passes_options(self):
        engine = FakeEngine(response=_make_response(_text_part("Klart")))
        status, body = handle_generate_request(
            {"message": "Hej", "tier": "MASTER", "history": "not-a-list", "forceTool": True},
            engine,
        )
        assert status == 200
        assert body["textResponse"] == "Klart"
        contents, instruction, force_tool = engine.calls[0]
        assert len(contents) == 1
        assert "USER_TIER: MASTER." in instruction
        assert force_tool is True

    def test_tier_defaults_to_scout(self):
        engine = FakeEngine(response=_make_response(_text_part("Klart")))
        handle_generate_request({"message": "Hej"}, engine)
        assert "USER_TIER: SCOUT." in engine.calls[0][1]
        assert engine.calls[0][2] is False


@pytest.fixture
def client():
    from app import app, get_engine

    engine = FakeEngine(response=_make_response(
        _text_part("Uppdaterat"),
        _call_part("update_race_plan", {"name": "Jakten"}),
    ))
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestProxyEndpoint:

    def test_generate_adventure(self, client):
        response = client.post("/generateAdventure", json={"message": "Hej", "tier": "CREATOR", "history": []})
        assert response.status_code == 200
        assert response.json() == {
            "textResponse": "Uppdaterat",
            "toolCalls": [{"name": "update_race_plan", "args": {"name": "Jakten"}}],
        }

    def test_only_post_allowed(self, client):
        assert client.get("/generateAdventure").status_code == 405

    def test_missing_key_is_500(self, monkeypatch):
        from app import app

        monkeypatch.delenv("API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        response = TestClient(app).post("/generateAdventure", json={"message": "Hej"})
        assert response.status_code == 500
        assert response.json() == {"error": MISSING_KEY_MESSAGE}
