"""
Tests for the procedural extraction game.
"""

import math
import random
import threading
import time

import pytest

from models.schema import Coordinate
from models.enums import CheckpointType, EventStatus, StartMode, WinCondition, MapStyle
from engine.extraction import (
    EARTH_RADIUS_M,
    GEOLOCATION_ERROR_MESSAGE,
    GeolocationError,
    generate_extraction_checkpoints,
    generate_extraction_game,
    locate_with_timeout,
    offset_coordinate,
    start_extraction_game,
)

CENTER = Coordinate(lat=59.3293, lng=18.0686)


def _distance_m(center: Coordinate, point: Coordinate) -> float:
    """Inverse of the small-angle offset used by the generator."""
    north = (point.lat - center.lat) * math.pi / 180 * EARTH_RADIUS_M
    east = (point.lng - center.lng) * math.pi / 180 * EARTH_RADIUS_M * math.cos(math.pi * center.lat / 180)
    return math.hypot(north, east)


def test_offset_coordinate_north():
    moved = offset_coordinate(0.0, 0.0, 1000, 0)
    assert moved.lng == 0.0
    assert moved.lat == pytest.approx(1000 / EARTH_RADIUS_M * 180 / math.pi)


@pytest.mark.parametrize("seed", range(20))
def test_checkpoint_counts_and_distances(seed):
    checkpoints = generate_extraction_checkpoints(CENTER, random.Random(seed))
    mandatory = [cp for cp in checkpoints if cp.type == CheckpointType.MANDATORY]
    optional = [cp for cp in checkpoints if cp.type == CheckpointType.OPTIONAL]
    assert len(mandatory) == 4
    assert len(optional) == 3
    for cp in mandatory:
        assert 100 - 1e-6 <= _distance_m(CENTER, cp.location) < 300 + 1e-6
        assert cp.points == 50
    for cp in optional:
        assert 50 - 1e-6 <= _distance_m(CENTER, cp.location) < 150 + 1e-6
        assert cp.points == 10


@pytest.mark.parametrize("center", [
    Coordinate(lat=-16.5, lng=179.9995),
    Coordinate(lat=-16.5, lng=-179.9995),
    Coordinate(lat=89.9999, lng=0.0),
    Coordinate(lat=-89.9999, lng=0.0),
])
def test_game_near_antimeridian_and_poles(center):
    game = generate_extraction_game(center, random.Random(0))
    assert len(game.checkpoints) == 7
    for cp in game.checkpoints:
        assert -90 <= cp.location.lat <= 90
        assert -180 <= cp.location.lng <= 180


def test_offset_wraps_across_antimeridian():
    moved = offset_coordinate(0.0, 179.9999, 0, 1000)
    assert moved.lng < 0
    assert moved.lng == pytest.approx(179.9999 + 1000 / EARTH_RADIUS_M * 180 / math.pi - 360)


def test_game_shape():
    game = generate_extraction_game(CENTER, random.Random(1))
    assert game.id.startswith("extraction-")
    assert game.status == EventStatus.ACTIVE
    assert game.start_mode == StartMode.SELF_START
    assert game.win_condition == WinCondition.MOST_POINTS
    assert game.map_style == MapStyle.DARK
    assert (game.finish_location.lat, game.finish_location.lng) == (CENTER.lat, CENTER.lng)
    assert game.finish_location.radius_meters == 50
    assert game.is_playable


def test_locate_failure_is_user_facing():
    def broken():
        raise OSError("no gps")

    with pytest.raises(GeolocationError) as exc:
        locate_with_timeout(broken, timeout=1)
    assert str(exc.value) == GEOLOCATION_ERROR_MESSAGE


def test_locate_timeout():
    def slow():
        time.sleep(0.5)
        return CENTER

    with pytest.raises(GeolocationError):
        locate_with_timeout(slow, timeout=0.05)


def test_timed_out_locator_does_not_block_exit():
    release = threading.Event()

    def hung():
        release.wait(5)
        return CENTER

    try:
        with pytest.raises(GeolocationError):
            locate_with_timeout(hung, timeout=0.05)
        workers = [t for t in threading.enumerate() if t.name == "geolocation" and t.is_alive()]
        assert workers
        assert all(t.daemon for t in workers)
    finally:
        release.set()


def test_start_extraction_game_uses_position():
    game = start_extraction_game(lambda: CENTER, rng=random.Random(3))
    assert game.start_location.lat == CENTER.lat
    assert len(game.checkpoints) == 7
