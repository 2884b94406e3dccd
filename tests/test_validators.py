"""
Tests for validation rules.
"""

import pytest

from models.enums import Archetype, UserTier
from models.defaults import INITIAL_TIER_CONFIGS, initial_event_state
from engine.archetypes import apply_archetype
from validators.rules import EventValidator, Severity, ValidationResult


def _placed(cp_id, name="CP", **extra):
    return {"id": cp_id, "name": name, "location": {"lat": 59.0, "lng": 18.0}, **extra}


@pytest.fixture
def valid_event():
    event = initial_event_state(
        "race-1",
        is_public=False,
        checkpoints=[_placed("1"), _placed("2", quiz={"question": "?", "options": ["a", "b"], "correct_option_index": 1})],
    )
    return apply_archetype(event, Archetype.CLASSIC)


def test_validate_valid_event(valid_event):
    result = EventValidator().validate_event(valid_event)
    assert result.is_valid
    assert result.total_issues == 0


def test_unplaced_checkpoint_is_error_on_live_event():
    event = initial_event_state(checkpoints=[{"id": "1", "name": "Utkik"}])
    result = EventValidator().validate_event(event)
    assert not result.is_valid
    assert result.errors[0].checkpoint_id == "1"
    assert result.errors[0].field == "location"


def test_unplaced_checkpoint_allowed_on_template():
    event = apply_archetype(
        initial_event_state(is_template=True, checkpoints=[{"id": "1", "name": "Utkik"}]),
        Archetype.ADVENTURE,
    )
    assert EventValidator().validate_event(event).is_valid


def test_duplicate_checkpoint_ids(valid_event):
    event = valid_event.evolve(checkpoints=[_placed("1"), _placed("1")])
    result = EventValidator().validate_event(event)
    assert any("Duplicate" in e.message for e in result.errors)


def test_quiz_without_options_is_error(valid_event):
    event = valid_event.evolve(checkpoints=[_placed("1", quiz={"question": "?"})])
    result = EventValidator().validate_event(event)
    assert any(e.field == "quiz.correct_option_index" for e in result.errors)


def test_access_code_on_public_event_warns(valid_event):
    result = EventValidator().validate_event(valid_event.evolve(is_public=True))
    assert result.is_valid
    assert [w.field for w in result.warnings] == ["access_code"]


def test_uncorrelated_rules_warn():
    # Default state is fastest_time + free + basic, which no archetype produces
    result = EventValidator().validate_event(initial_event_state(access_code=None))
    assert any(w.field == "win_condition" for w in result.warnings)


def test_tier_quota_warnings(valid_event):
    event = valid_event.evolve(
        checkpoints=[_placed(str(i)) for i in range(6)],
        participant_ids=[f"p{i}" for i in range(7)],
    )
    result = EventValidator().validate_event(event, INITIAL_TIER_CONFIGS[UserTier.SCOUT])
    assert result.is_valid
    assert {w.field for w in result.warnings} == {"checkpoints", "participant_ids"}


def test_result_to_dict(valid_event):
    event = valid_event.evolve(checkpoints=[_placed("1"), _placed("1")])
    data = EventValidator().validate_event(event).to_dict()
    assert data["is_valid"] is False
    assert data["error_count"] == 1
    assert data["errors"][0]["severity"] == "error"
    assert "checkpoint_id" not in data["errors"][0]
    assert ValidationResult().to_dict()["is_valid"] is True


def test_issues_for_checkpoint():
    event = initial_event_state(checkpoints=[{"id": "1", "name": " "}, _placed("2")])
    result = EventValidator().validate_event(event)
    issues = result.for_checkpoint("1")
    assert {i.field for i in issues} == {"location", "name"}
    assert all(i.severity == Severity.ERROR for i in issues)
    assert result.for_checkpoint("2") == []
