"""
Tests for the event data model and seed data.
"""

import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from models.schema import (
    EventConfiguration,
    Checkpoint,
    QuizData,
    ParticipantResult,
    RaceAnalysis,
    SystemConfig,
    UserProfile,
)
from models.enums import EventStatus, FeaturedMode, UserRole, UserTier
from models.defaults import (
    DEFAULT_COORDINATES,
    INITIAL_TIER_CONFIGS,
    default_system_config,
    initial_event_state,
    official_templates,
)


def _make_result(pid: str, points: int = 10) -> ParticipantResult:
    return ParticipantResult(id=pid, name=f"Runner {pid}", total_points=points)


class TestEventConfiguration:

    def test_initial_state_defaults(self):
        event = initial_event_state("race-1")
        assert event.id == "race-1"
        assert event.status == EventStatus.DRAFT
        assert event.start_location.lat == DEFAULT_COORDINATES.lat
        assert event.start_location.radius_meters == 50
        assert event.access_code == "QUEST123"
        assert event.checkpoints == []

    def test_start_time_normalised_to_utc(self):
        event = initial_event_state(start_date_time="2026-05-25T12:00:00+02:00")
        assert event.start_date_time == datetime(2026, 5, 25, 10, 0, tzinfo=timezone.utc)
        assert event.start_date_time.utcoffset().total_seconds() == 0

    def test_invalid_start_time_rejected(self):
        with pytest.raises(ValidationError):
            initial_event_state(start_date_time="not a date")

    def test_lock_forces_private(self):
        event = initial_event_state(is_public=True, is_locked_by_admin=True)
        assert event.is_public is False

    def test_results_are_participants(self):
        event = initial_event_state(
            participant_ids=["p1"],
            results=[_make_result("p2"), _make_result("p1")],
        )
        assert event.participant_ids == ["p1", "p2"]

    def test_effective_access_code(self):
        assert initial_event_state(is_public=True).effective_access_code is None
        assert initial_event_state(is_public=False).effective_access_code == "QUEST123"

    def test_template_never_playable(self):
        placed = initial_event_state(is_template=True)
        assert placed.is_playable is False

    def test_unplaced_checkpoint_blocks_play(self):
        event = initial_event_state(checkpoints=[{"id": "1", "name": "Utkik"}])
        assert event.unplaced_checkpoints[0].id == "1"
        assert event.is_playable is False

    def test_camel_case_document(self):
        event = initial_event_state("race-1", owner_photo_url="https://img/x.png")
        doc = event.to_dict()
        assert doc["startLocation"]["radiusMeters"] == 50
        assert doc["ownerPhotoURL"] == "https://img/x.png"
        assert doc["isPublic"] is False
        restored = EventConfiguration.from_dict(doc)
        assert restored == event

    def test_merge_accepts_camel_case_keys(self):
        event = initial_event_state()
        merged = event.merge({"isPublic": True, "timeLimitMinutes": 90})
        assert merged.is_public is True
        assert merged.time_limit_minutes == 90
        assert event.is_public is False


class TestCheckpoint:

    def test_quiz_index_out_of_range(self):
        with pytest.raises(ValidationError):
            QuizData(question="?", options=["a", "b"], correct_option_index=2)

    def test_unplaced(self):
        cp = Checkpoint(id="1", name="Skogsgläntan")
        assert cp.is_placed is False
        assert cp.radius_meters == 25


class TestOtherModels:

    def test_analysis_scores_clamped(self):
        analysis = RaceAnalysis(overall_score=130, safety_score=-5, summary="ok")
        assert analysis.overall_score == 100
        assert analysis.safety_score == 0

    def test_user_profile_defaults(self):
        user = UserProfile(id="u1", name="Ada")
        assert user.tier == UserTier.SCOUT
        assert user.role == UserRole.USER
        assert not user.is_admin

    def test_system_config_modes(self):
        config = default_system_config()
        assert not config.is_mode_active(FeaturedMode.ZOMBIE_SURVIVAL)
        enabled = SystemConfig.from_dict({
            "featuredModes": {"christmas_hunt": {"isActive": True, "title": "Christmas Hunt"}}
        })
        assert enabled.is_mode_active(FeaturedMode.CHRISTMAS_HUNT)
        assert not enabled.is_mode_active(FeaturedMode.ZOMBIE_SURVIVAL)


class TestSeedData:

    def test_tier_quotas(self):
        scout = INITIAL_TIER_CONFIGS[UserTier.SCOUT]
        assert (scout.max_active_races, scout.max_checkpoints_per_race, scout.max_participants_per_race) == (1, 5, 6)
        master = INITIAL_TIER_CONFIGS[UserTier.MASTER]
        assert master.max_active_races == 9999
        assert master.allow_live_monitoring is True

    def test_official_templates_are_blueprints(self):
        templates = official_templates()
        assert [t.id for t in templates] == ["tpl-spooky-walk", "tpl-city-pulse", "tpl-family-fun"]
        for template in templates:
            assert template.is_template
            assert all(not cp.is_placed for cp in template.checkpoints)
            assert all(cp.terrain_hint for cp in template.checkpoints)
