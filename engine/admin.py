"""
System-admin back office operations.

Destructive calls (delete event/user/lead) assume the caller has already
asked for confirmation.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Mapping, TYPE_CHECKING

from models.schema import (
    EventConfiguration,
    UserProfile,
    ContactRequest,
    SystemConfig,
    TierConfig,
)
from models.enums import UserTier
from .tiers import TierConfigTable

if TYPE_CHECKING:
    from database.factory import DataService

logger = logging.getLogger(__name__)


def toggle_lock(event: EventConfiguration) -> EventConfiguration:
    """
    Lock or unlock an event.

    Locking also unpublishes. Unlocking keeps whatever ``is_public`` value
    the event has at that moment.
    """
    if event.is_locked_by_admin:
        return event.evolve(is_locked_by_admin=False)
    return event.evolve(is_locked_by_admin=True, is_public=False)


def _matches(term: str, *values: str) -> bool:
    term = term.lower()
    return any(term in (value or "").lower() for value in values)


class AdminConsole:
    """Back office bound to an authenticated administrator."""

    def __init__(self, data: "DataService", tiers: TierConfigTable, actor: UserProfile):
        if not actor.is_admin:
            raise PermissionError(f"User {actor.id} is not an administrator")
        self.data = data
        self.tiers = tiers
        self.actor = actor

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def list_events(self, search: str = "") -> List[EventConfiguration]:
        events = self.data.events.get_all_events(include_private=True)
        if not search:
            return events
        return [e for e in events if _matches(search, e.name, e.id)]

    def toggle_event_lock(self, event: EventConfiguration) -> EventConfiguration:
        updated = toggle_lock(event)
        self.data.events.save_event(updated)
        logger.info(
            "Admin %s %s event %s",
            self.actor.id,
            "locked" if updated.is_locked_by_admin else "unlocked",
            event.id,
        )
        return updated

    def delete_event(self, event_id: str) -> None:
        self.data.events.delete_event(event_id)
        logger.info("Admin %s deleted event %s", self.actor.id, event_id)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def list_users(self, search: str = "") -> List[UserProfile]:
        users = self.data.users.get_all_users()
        if not search:
            return users
        return [u for u in users if _matches(search, u.name, u.email) or search in u.id]

    def update_user_tier(self, user_id: str, tier: UserTier) -> None:
        self.data.users.update_user_tier(user_id, UserTier(tier))

    def delete_user(self, user_id: str) -> None:
        self.data.users.delete_user(user_id)
        logger.info("Admin %s deleted user %s", self.actor.id, user_id)

    # ------------------------------------------------------------------
    # Leads
    # ------------------------------------------------------------------

    def list_leads(self, search: str = "") -> List[ContactRequest]:
        leads = self.data.leads.get_all_requests()
        if not search:
            return leads
        return [l for l in leads if _matches(search, l.name, l.organization, l.email)]

    def delete_lead(self, lead_id: str) -> None:
        self.data.leads.delete_request(lead_id)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def update_tier(self, tier: UserTier, changes: Mapping[str, Any]) -> TierConfig:
        updated = self.tiers.update(tier, changes, self.actor)
        self.tiers.save(self.data.config)
        return updated

    def get_system_config(self) -> SystemConfig:
        return self.data.config.get_config()

    def update_system_config(self, config: SystemConfig) -> None:
        self.data.config.update_config(config)

    def stats(self) -> Dict[str, Any]:
        """Headline numbers for the dashboard."""
        events = self.data.events.get_all_events(include_private=True)
        users = self.data.users.get_all_users()
        per_tier = Counter(u.tier.value for u in users)
        return {
            "events": len(events),
            "locked_events": sum(1 for e in events if e.is_locked_by_admin),
            "public_events": sum(1 for e in events if e.is_public),
            "templates": sum(1 for e in events if e.is_template),
            "users": len(users),
            "users_per_tier": {tier.value: per_tier.get(tier.value, 0) for tier in UserTier},
        }
