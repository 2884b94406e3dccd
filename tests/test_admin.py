"""
Tests for admin lock toggling and the back office console.
"""

import pytest

from models.schema import ContactRequest, UserProfile
from models.enums import UserRole, UserTier
from models.defaults import initial_event_state
from database import BackendMode, LocalStore, create_data_service
from engine.admin import AdminConsole, toggle_lock
from engine.tiers import TierConfigTable


@pytest.fixture
def data():
    return create_data_service(BackendMode.MOCK, store=LocalStore())


@pytest.fixture
def admin():
    return UserProfile(id="admin-1", name="Admin", role=UserRole.ADMIN)


@pytest.fixture
def console(data, admin):
    return AdminConsole(data, TierConfigTable.seeded(), admin)


class TestToggleLock:

    def test_locking_public_event_unpublishes(self):
        event = initial_event_state(is_public=True)
        locked = toggle_lock(event)
        assert locked.is_locked_by_admin is True
        assert locked.is_public is False

    def test_unlock_keeps_current_visibility(self):
        locked = toggle_lock(initial_event_state(is_public=True))
        unlocked = toggle_lock(locked)
        assert unlocked.is_locked_by_admin is False
        assert unlocked.is_public is False

    def test_unlock_after_republish_attempt(self):
        # Publishing while locked is normalised away
        locked = toggle_lock(initial_event_state()).evolve(is_public=True)
        assert locked.is_public is False
        assert toggle_lock(locked).is_public is False

    def test_source_not_mutated(self):
        event = initial_event_state(is_public=True)
        toggle_lock(event)
        assert event.is_public is True


def test_non_admin_cannot_open_console(data):
    with pytest.raises(PermissionError):
        AdminConsole(data, TierConfigTable.seeded(), UserProfile(id="u1", name="Bo"))


class TestConsole:

    def test_search_events(self, console, data):
        data.events.save_event(initial_event_state("race-42", name="Midnattsloppet"))
        assert [e.id for e in console.list_events("midnatt")] == ["race-42"]
        assert [e.id for e in console.list_events("RACE-42")] == ["race-42"]
        assert len(console.list_events()) == 2  # plus the demo event

    def test_toggle_lock_persists(self, console, data):
        data.events.save_event(initial_event_state("race-1", is_public=True))
        console.toggle_event_lock(data.events.get_event("race-1"))
        stored = data.events.get_event("race-1")
        assert stored.is_locked_by_admin
        assert not stored.is_public

    def test_delete_event(self, console, data):
        data.events.save_event(initial_event_state("race-1"))
        console.delete_event("race-1")
        assert data.events.get_event("race-1") is None

    def test_search_users(self, console):
        assert [u.id for u in console.list_users("beata")] == ["user-2"]
        assert [u.id for u in console.list_users("skolan")] == ["user-3"]
        assert [u.id for u in console.list_users("user-1")] == ["user-1"]

    def test_update_user_tier(self, console, data):
        user = data.auth.login_with_email("kim@example.com")
        console.update_user_tier(user.id, UserTier.MASTER)
        current = [u for u in data.users.get_all_users() if u.id == user.id][0]
        assert current.tier == UserTier.MASTER

    def test_leads(self, console, data):
        data.leads.save_request(ContactRequest(
            id="lead-1", name="Eva", email="eva@firma.se", organization="Firma AB",
            timestamp="2026-01-01T00:00:00Z",
        ))
        assert [l.id for l in console.list_leads("firma")] == ["lead-1"]
        console.delete_lead("lead-1")
        assert console.list_leads() == []

    def test_update_tier_saved_to_backend(self, console, data):
        console.update_tier(UserTier.SCOUT, {"maxParticipantsPerRace": 10})
        assert data.config.get_tier_configs()[UserTier.SCOUT].max_participants_per_race == 10

    def test_stats(self, console, data):
        data.events.save_event(initial_event_state("race-1", is_public=True))
        data.events.save_event(initial_event_state("race-2", is_locked_by_admin=True))
        stats = console.stats()
        assert stats["events"] == 3
        assert stats["public_events"] == 1
        assert stats["locked_events"] == 1
        assert stats["users_per_tier"] == {"SCOUT": 1, "CREATOR": 1, "MASTER": 1}
