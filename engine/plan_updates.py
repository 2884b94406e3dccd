"""
Applying AI proxy tool calls to an event.

``update_race_plan`` arguments are partial, camelCase EventConfiguration
documents. Checkpoints the organiser already placed keep their position.
"""

import json
import logging
import uuid
from typing import Any, Dict, List, Mapping

from models.schema import EventConfiguration, RaceAnalysis
from models.defaults import DEFAULT_COORDINATES

logger = logging.getLogger(__name__)

UPDATE_RACE_PLAN = "update_race_plan"
PROVIDE_RACE_ANALYSIS = "provide_race_analysis"


def is_location_set(event: EventConfiguration) -> bool:
    """The organiser has moved the start away from the default coordinate."""
    return (
        event.start_location.lat != DEFAULT_COORDINATES.lat
        or event.start_location.lng != DEFAULT_COORDINATES.lng
    )


def _merge_zone(current: Dict[str, Any], patch: Any) -> Any:
    if not isinstance(patch, Mapping):
        return patch
    merged = dict(current)
    merged.update(patch)
    if "radiusMeters" in patch:
        merged.pop("radius_meters", None)
    return merged


def _merge_checkpoints(
    event: EventConfiguration, proposed: List[Mapping[str, Any]]
) -> List[Dict[str, Any]]:
    existing = {cp.id: cp for cp in event.checkpoints}
    merged = []
    for raw in proposed:
        cp = dict(raw)
        cp_id = cp.get("id")
        if not cp_id:
            cp["id"] = f"cp-{uuid.uuid4().hex[:8]}"
        elif cp_id in existing:
            current = existing[cp_id]
            cp.pop("radius_meters", None)
            cp["location"] = current.location.model_dump() if current.location else None
            cp["radiusMeters"] = current.radius_meters
        merged.append(cp)
    return merged


def merge_plan_update(event: EventConfiguration, args: Mapping[str, Any]) -> EventConfiguration:
    """
    Apply an ``update_race_plan`` patch.

    Args:
        event: Current event
        args: Tool-call arguments (camelCase keys)

    Returns:
        A new EventConfiguration; ``event`` is not modified
    """
    patch = dict(args)

    if "checkpoints" in patch and patch["checkpoints"] is not None:
        patch["checkpoints"] = _merge_checkpoints(event, patch["checkpoints"])

    for key, attr in (("startLocation", "start_location"), ("finishLocation", "finish_location")):
        if key in patch:
            patch[key] = _merge_zone(getattr(event, attr).model_dump(), patch[key])

    updated = event.merge(patch)
    logger.debug("Applied plan update to %s: %s", event.id, sorted(args))
    return updated


def parse_analysis(args: Mapping[str, Any]) -> RaceAnalysis:
    """Read ``provide_race_analysis`` arguments."""
    return RaceAnalysis.model_validate(dict(args))


def build_context_prompt(event: EventConfiguration, request: str) -> str:
    """Wrap an organiser request with the current event state for the model."""
    checkpoint_context = json.dumps(
        [
            {
                "id": cp.id,
                "name": cp.name,
                "desc": cp.description,
                "hasQuiz": cp.quiz is not None,
                "hasChallenge": bool(cp.challenge),
            }
            for cp in event.checkpoints
        ],
        ensure_ascii=False,
    )
    start, finish = event.start_location, event.finish_location
    return (
        "CURRENT STATE:\n"
        f"Event Type: {event.event_type}\n"
        f"Status: {event.status.value}\n"
        f"Language: {event.language or 'sv'}\n"
        f"Checkpoints List: {checkpoint_context}\n"
        f"Start Coordinates: {start.lat}, {start.lng}\n"
        f"Finish Coordinates: {finish.lat}, {finish.lng}\n"
        f'USER REQUEST: "{request}"'
    )
