"""
Quest Master: the LLM proxy that turns organiser chat into race-plan patches
using Google Gemini function calling.

Wire contract (JSON, camelCase):
    request  {message, tier, history, forceTool}
    response {textResponse, toolCalls: [{name, args}]}
"""

import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any, Dict, List, Optional, Tuple

from models.enums import UserTier
from models.defaults import EVENT_TYPES
from engine.access import ai_instruction_extension

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-pro"
MISSING_KEY_MESSAGE = "Server API Key missing."
TOOL_CALL_FALLBACK_TEXT = "Jag har uppdaterat kartan."
NO_UNDERSTANDING_TEXT = "Jag förstod inte riktigt, kan du precisera?"

_LAT_LNG = {"lat": {"type": "NUMBER"}, "lng": {"type": "NUMBER"}}

UPDATE_RACE_PLAN_TOOL: Dict[str, Any] = {
    "name": "update_race_plan",
    "description": (
        "Uppdaterar den aktuella banplanen med nya detaljer, checkpoints, quiz, "
        "utmaningar eller platser. SKA användas för alla ändringar av banans data."
    ),
    "parameters": {
        "type": "OBJECT",
        "properties": {
            "name": {"type": "STRING", "description": "Namnet på eventet"},
            "eventType": {
                "type": "STRING",
                "description": "Typ av aktivitet",
                "enum": list(EVENT_TYPES),
            },
            "language": {"type": "STRING", "enum": ["sv", "en"], "description": "Språket för innehållet."},
            "description": {"type": "STRING", "description": "Allmänna instruktioner eller beskrivning"},
            "category": {"type": "STRING", "description": "Kategori för loppet"},
            "startDateTime": {"type": "STRING", "description": "ISO-sträng för starttid"},
            "startMode": {"type": "STRING", "enum": ["mass_start", "self_start"]},
            "manualStartEnabled": {"type": "BOOLEAN"},
            "startLocation": {
                "type": "OBJECT",
                "properties": dict(_LAT_LNG),
                "required": ["lat", "lng"],
            },
            "finishLocation": {
                "type": "OBJECT",
                "properties": {**_LAT_LNG, "radiusMeters": {"type": "NUMBER"}},
                "required": ["lat", "lng", "radiusMeters"],
            },
            "checkpoints": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "id": {"type": "STRING"},
                        "name": {"type": "STRING"},
                        "location": {
                            "type": "OBJECT",
                            "properties": dict(_LAT_LNG),
                            "required": ["lat", "lng"],
                        },
                        "radiusMeters": {"type": "NUMBER"},
                        "type": {"type": "STRING", "enum": ["mandatory", "optional"]},
                        "description": {"type": "STRING"},
                        "points": {"type": "NUMBER"},
                        "color": {"type": "STRING"},
                        "challenge": {"type": "STRING"},
                        "timeModifierSeconds": {"type": "NUMBER"},
                        "requiresPhoto": {"type": "BOOLEAN"},
                        "quiz": {
                            "type": "OBJECT",
                            "properties": {
                                "question": {"type": "STRING"},
                                "options": {"type": "ARRAY", "items": {"type": "STRING"}},
                                "correctOptionIndex": {"type": "NUMBER"},
                            },
                        },
                    },
                    "required": ["name", "type"],
                },
            },
        },
    },
}

PROVIDE_RACE_ANALYSIS_TOOL: Dict[str, Any] = {
    "name": "provide_race_analysis",
    "description": "Ger en strukturerad kvalitetsanalys och feedback på den aktuella banplanen.",
    "parameters": {
        "type": "OBJECT",
        "properties": {
            "overallScore": {"type": "INTEGER"},
            "safetyScore": {"type": "INTEGER"},
            "funFactorScore": {"type": "INTEGER"},
            "summary": {"type": "STRING"},
            "strengths": {"type": "ARRAY", "items": {"type": "STRING"}},
            "weaknesses": {"type": "ARRAY", "items": {"type": "STRING"}},
            "suggestions": {"type": "ARRAY", "items": {"type": "STRING"}},
        },
        "required": ["overallScore", "summary"],
    },
}

TOOL_DECLARATIONS = [UPDATE_RACE_PLAN_TOOL, PROVIDE_RACE_ANALYSIS_TOOL]

AI_INSTRUCTION_BASE = """
Roll: Du är Quest Master (QM), den kreativa hjärnan bakom "Quester".
Ditt uppdrag är att hjälpa arrangörer att bygga banor.

**KRITISKT:**
1. För att ändra eller skapa banans innehåll (namn, beskrivning, checkpoints, quiz), MÅSTE du anropa verktyget 'update_race_plan'.
2. Bekräfta ALDRIG en ändring enbart med text. Om du inte anropar verktyget har ingen ändring skett.
3. Om du skapar checkpoints utan plats (Draft Mode), utelämna helt fältet 'location'.
4. Ändra ALDRIG 'location' eller 'radiusMeters' för en checkpoint som redan har ett 'id'.
5. Sätt 'requiresPhoto' endast när arrangören uttryckligen ber om det.
6. Svara alltid på svenska.
"""


def resolve_api_key() -> Optional[str]:
    return os.getenv("API_KEY") or os.getenv("GEMINI_API_KEY")


def build_system_instruction(tier: str) -> str:
    instruction = AI_INSTRUCTION_BASE + f"\nUSER_TIER: {tier}."
    try:
        extension = ai_instruction_extension(UserTier(tier))
    except ValueError:
        extension = ""
    if extension:
        instruction += f"\n{extension}"
    return instruction


def build_contents(message: str, history: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """History items are ``{role, parts: [{text}]}``; only the first part is kept."""
    contents = []
    for item in history or []:
        parts = item.get("parts") or [{}]
        contents.append({"role": item.get("role", "user"), "parts": [{"text": parts[0].get("text", "")}]})
    contents.append({"role": "user", "parts": [{"text": message}]})
    return contents


def _to_plain(value: Any) -> Any:
    """Convert proto map/repeated composites from the SDK into dicts and lists."""
    if isinstance(value, Mapping):
        return {key: _to_plain(item) for key, item in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return [_to_plain(item) for item in value]
    return value


def parse_model_response(response: Any) -> Dict[str, Any]:
    """Extract text and function calls from a generate_content response."""
    texts: List[str] = []
    tool_calls: List[Dict[str, Any]] = []
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            function_call = getattr(part, "function_call", None)
            if function_call is not None and getattr(function_call, "name", ""):
                tool_calls.append({
                    "name": function_call.name,
                    "args": _to_plain(function_call.args) or {},
                })
            elif getattr(part, "text", ""):
                texts.append(part.text)
        # Only the first candidate is used
        break

    text = "".join(texts).strip()
    if not text:
        text = TOOL_CALL_FALLBACK_TEXT if tool_calls else NO_UNDERSTANDING_TEXT
    return {"textResponse": text, "toolCalls": tool_calls}


class QuestMasterEngine:
    """Gemini-backed race planning assistant with function calling."""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        """Initialize with Gemini API configuration."""
        self.api_key = api_key or resolve_api_key()
        if not self.api_key:
            raise ValueError(
                "API_KEY or GEMINI_API_KEY environment variable not set. "
                "Please add it to your .env file."
            )
        self.model_name = model_name or os.getenv("QUEST_MASTER_MODEL", DEFAULT_MODEL)

        try:
            import google.generativeai as genai
            self.genai = genai
            self.genai.configure(api_key=self.api_key)
        except ImportError:
            raise ImportError(
                "google-generativeai not installed. "
                "Run: pip install google-generativeai"
            )

    def _call_model(
        self, contents: List[Dict[str, Any]], system_instruction: str, force_tool: bool
    ) -> Any:
        model = self.genai.GenerativeModel(
            self.model_name,
            system_instruction=system_instruction,
            tools=[{"function_declarations": TOOL_DECLARATIONS}],
        )
        kwargs: Dict[str, Any] = {"generation_config": {"temperature": 0.7}}
        if force_tool:
            kwargs["tool_config"] = {"function_calling_config": {"mode": "ANY"}}
        return model.generate_content(contents, **kwargs)

    def generate(
        self,
        message: str,
        tier: str = UserTier.SCOUT.value,
        history: Optional[List[Dict[str, Any]]] = None,
        force_tool: bool = False,
    ) -> Dict[str, Any]:
        """
        Run one chat turn.

        Args:
            message: Organiser message (usually a context prompt)
            tier: Subscription tier of the organiser
            history: Previous turns as ``{role, parts: [{text}]}``
            force_tool: Require the model to answer with a function call

        Returns:
            ``{"textResponse": str, "toolCalls": [{"name", "args"}]}``
        """
        response = self._call_model(
            build_contents(message, history),
            build_system_instruction(tier),
            force_tool,
        )
        payload = parse_model_response(response)
        logger.info(
            "Quest Master answered with %d tool call(s)", len(payload["toolCalls"])
        )
        return payload


def handle_generate_request(
    body: Mapping[str, Any], engine: Optional[QuestMasterEngine] = None
) -> Tuple[int, Dict[str, Any]]:
    """
    Serve one proxy request.

    Returns:
        (HTTP status, JSON body). Failures are 500 with ``{"error": ...}``.
    """
    if engine is None:
        if not resolve_api_key():
            return 500, {"error": MISSING_KEY_MESSAGE}
        engine = QuestMasterEngine()

    history = body.get("history")
    try:
        payload = engine.generate(
            message=body.get("message", ""),
            tier=body.get("tier") or UserTier.SCOUT.value,
            history=history if isinstance(history, list) else None,
            force_tool=bool(body.get("forceTool")),
        )
    except Exception as e:
        logger.error("Quest Master engine error: %s", e)
        return 500, {"error": str(e)}
    return 200, payload
