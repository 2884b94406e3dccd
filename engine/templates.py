"""
Template instantiation: derive reusable templates from existing events.

Two modes:
  fixed     exact copy, geography kept
  flexible  blueprint, all coordinates wiped for reuse anywhere
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from models.schema import EventConfiguration, UserProfile, GeoZone, utc_now
from models.enums import TemplateMode, EventStatus

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (Kopia)"
BLUEPRINT_SUFFIX = " (Mall)"

# Name fragment meaning "forest" in the source locale (Swedish)
FOREST_MARKER = "skog"
FOREST_HINT = "Forest"
OPEN_AREA_HINT = "Open area"


def infer_terrain_hint(checkpoint_name: str) -> str:
    """Single fixed heuristic: forest if the name mentions it, else open area."""
    if FOREST_MARKER in checkpoint_name.lower():
        return FOREST_HINT
    return OPEN_AREA_HINT


def _zeroed(zone: GeoZone) -> dict:
    return {"lat": 0.0, "lng": 0.0, "radius_meters": zone.radius_meters}


def derive_template(
    source: EventConfiguration,
    mode: TemplateMode,
    now: Optional[datetime] = None,
) -> EventConfiguration:
    """
    Build a template record from any event. Pure: ``source`` is untouched.

    Args:
        source: Live or draft event
        mode: FIXED (exact copy) or FLEXIBLE (blueprint)
        now: Start time for the template, defaults to the current time

    Returns:
        New EventConfiguration with is_template=True and a fresh id
    """
    mode = TemplateMode(mode)
    changes = {
        "id": f"tpl-{uuid4()}",
        "is_template": True,
        "status": EventStatus.DRAFT,
        "results": [],
        "ratings": [],
        "participant_ids": [],
        "start_date_time": now or utc_now(),
    }

    if mode == TemplateMode.FIXED:
        changes["name"] = source.name + COPY_SUFFIX
        return source.evolve(**changes)

    checkpoints = []
    for cp in source.checkpoints:
        cp_data = cp.model_dump()
        cp_data["location"] = None
        if not cp.terrain_hint:
            cp_data["terrain_hint"] = infer_terrain_hint(cp.name)
        checkpoints.append(cp_data)

    changes.update(
        name=source.name + BLUEPRINT_SUFFIX,
        start_city="",
        finish_city="",
        start_location=_zeroed(source.start_location),
        finish_location=_zeroed(source.finish_location),
        checkpoints=checkpoints,
    )
    return source.evolve(**changes)


def create_template(
    source: EventConfiguration,
    mode: TemplateMode,
    on_create: Optional[Callable[[EventConfiguration], None]] = None,
    now: Optional[datetime] = None,
) -> Optional[EventConfiguration]:
    """
    Derive a template and hand it to the registered collaborator.

    Without a collaborator this is a no-op and returns None.
    """
    if on_create is None:
        return None

    template = derive_template(source, mode, now=now)
    logger.info(
        "Created %s template %s from event %s", TemplateMode(mode).value, template.id, source.id
    )
    on_create(template)
    return template


def instantiate_from_template(
    template: EventConfiguration,
    owner: UserProfile,
    now: Optional[datetime] = None,
) -> EventConfiguration:
    """Start a new draft event from a template, owned by ``owner``."""
    return template.evolve(
        id=f"race-{uuid4()}",
        is_template=False,
        status=EventStatus.DRAFT,
        owner_id=owner.id,
        owner_name=owner.name,
        owner_photo_url=owner.photo_url,
        creator_tier=owner.tier,
        results=[],
        ratings=[],
        participant_ids=[],
        start_date_time=now or utc_now(),
    )
