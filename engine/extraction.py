"""
Procedural checkpoint generator for the instant "Operation: Extraction" game.

No network or AI call is made; the layout is synthesised around the
player's position, which is faster than an LLM round trip.
"""

import logging
import math
import random
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from models.schema import Checkpoint, Coordinate, EventConfiguration, utc_now
from models.enums import (
    CheckpointType,
    EventStatus,
    MapStyle,
    StartMode,
    WinCondition,
)
from models.defaults import initial_event_state

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6378137

RADIO_PART_NAMES = ["Alpha", "Beta", "Gamma", "Delta"]
RADIO_PART_DISTANCE_M = (100, 300)
RADIO_PART_RADIUS_M = 25
RADIO_PART_POINTS = 50
RADIO_PART_COLOR = "#3b82f6"

SUPPLY_CRATE_COUNT = 3
SUPPLY_CRATE_DISTANCE_M = (50, 150)
SUPPLY_CRATE_RADIUS_M = 20
SUPPLY_CRATE_POINTS = 10
SUPPLY_CRATE_COLOR = "#F59E0B"

FINISH_RADIUS_M = 50
GEOLOCATION_TIMEOUT_S = 6.0
GEOLOCATION_ERROR_MESSAGE = "Kunde inte hitta din plats (GPS Timeout)."


class GeolocationError(Exception):
    """Position could not be obtained. The message is user-facing."""


def offset_coordinate(
    lat: float, lng: float, lat_offset_m: float, lng_offset_m: float
) -> Coordinate:
    """
    Move a point by a metric offset (small-angle approximation).

    Only accurate for offsets of a few hundred meters.
    """
    d_lat = lat_offset_m / EARTH_RADIUS_M
    d_lng = lng_offset_m / (EARTH_RADIUS_M * math.cos(math.pi * lat / 180))
    new_lat = lat + (d_lat * 180 / math.pi)
    new_lng = lng + (d_lng * 180 / math.pi)
    # Stay on the globe near the poles and the antimeridian
    if not -180.0 <= new_lng <= 180.0:
        new_lng = (new_lng + 180) % 360 - 180
    return Coordinate(lat=min(90.0, max(-90.0, new_lat)), lng=new_lng)


def _scatter(center: Coordinate, low: float, high: float, rng: random.Random) -> Coordinate:
    r = low + rng.random() * (high - low)
    theta = rng.random() * 2 * math.pi
    return offset_coordinate(center.lat, center.lng, r * math.cos(theta), r * math.sin(theta))


def generate_extraction_checkpoints(
    center: Coordinate, rng: Optional[random.Random] = None
) -> List[Checkpoint]:
    """4 mandatory radio parts followed by 3 optional supply crates."""
    rng = rng or random.Random()
    checkpoints: List[Checkpoint] = []

    for i, label in enumerate(RADIO_PART_NAMES):
        checkpoints.append(Checkpoint(
            id=f"radio-{i}",
            name=f"Radio Part {label}",
            location=_scatter(center, *RADIO_PART_DISTANCE_M, rng),
            radius_meters=RADIO_PART_RADIUS_M,
            type=CheckpointType.MANDATORY,
            points=RADIO_PART_POINTS,
            color=RADIO_PART_COLOR,
            description="Collect this part to enable extraction.",
        ))

    for i in range(SUPPLY_CRATE_COUNT):
        checkpoints.append(Checkpoint(
            id=f"supply-{i}",
            name="Supply Crate",
            location=_scatter(center, *SUPPLY_CRATE_DISTANCE_M, rng),
            radius_meters=SUPPLY_CRATE_RADIUS_M,
            type=CheckpointType.OPTIONAL,
            points=SUPPLY_CRATE_POINTS,
            color=SUPPLY_CRATE_COLOR,
            description="Contains Survival Gear (Medkit or Flare).",
        ))

    return checkpoints


def generate_extraction_game(
    center: Coordinate,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> EventConfiguration:
    """
    Build a ready-to-play extraction event around ``center``.

    The finish is a placeholder on the center point; it is moved once all
    radio parts are collected, which happens outside this module.
    """
    now = now or utc_now()
    return initial_event_state(
        f"extraction-{int(now.timestamp() * 1000)}",
        name="Operation: Extraction",
        description=(
            "Hitta 4 radiodelar för att kalla på helikoptern. Akta dig för "
            "giftmoln och bakhåll. Använd Flares för att överleva."
        ),
        category="Extraction",
        map_style=MapStyle.DARK,
        checkpoints=generate_extraction_checkpoints(center, rng),
        status=EventStatus.ACTIVE,
        start_date_time=now,
        start_mode=StartMode.SELF_START,
        win_condition=WinCondition.MOST_POINTS,
        start_location={"lat": center.lat, "lng": center.lng},
        finish_location={"lat": center.lat, "lng": center.lng, "radius_meters": FINISH_RADIUS_M},
    )


def locate_with_timeout(
    locate: Callable[[], Coordinate], timeout: float = GEOLOCATION_TIMEOUT_S
) -> Coordinate:
    """
    Ask the position provider for a fix, giving up after ``timeout`` seconds.

    Raises:
        GeolocationError: On timeout or provider failure (no retry)
    """
    outcome: Dict[str, Any] = {}

    def run() -> None:
        try:
            outcome["position"] = locate()
        except Exception as e:
            outcome["error"] = e

    # A timed-out provider is abandoned and must not block interpreter exit
    worker = threading.Thread(target=run, name="geolocation", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        logger.warning("Geolocation timed out after %.1fs", timeout)
        raise GeolocationError(GEOLOCATION_ERROR_MESSAGE)
    if "error" in outcome:
        logger.warning("Geolocation failed: %s", outcome["error"])
        raise GeolocationError(GEOLOCATION_ERROR_MESSAGE) from outcome["error"]
    return outcome["position"]


def start_extraction_game(
    locate: Callable[[], Coordinate],
    timeout: float = GEOLOCATION_TIMEOUT_S,
    rng: Optional[random.Random] = None,
) -> EventConfiguration:
    """Locate the player, then generate the game at that position."""
    center = locate_with_timeout(locate, timeout)
    return generate_extraction_game(center, rng=rng)
