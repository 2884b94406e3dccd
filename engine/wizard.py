"""
Event creation wizard and settings persistence.

The wizard collects a draft in steps; each step is gated by a boolean check.
Finalising geocodes the optional start/finish cities and then persists.
"""

import logging
import random
import string
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

from pydantic import Field

from models.schema import (
    Coordinate,
    EventConfiguration,
    QuesterModel,
    UserProfile,
    utc_now,
)
from models.enums import (
    CheckpointOrder,
    EventStatus,
    MapStyle,
    StartMode,
    TerrainType,
    WinCondition,
)
from models.defaults import (
    DEFAULT_COORDINATES,
    SYSTEM_OWNER_ID,
    SYSTEM_OWNER_NAME,
    initial_event_state,
)
from search.geocoder import Geocoder, resolve_city
from .access import AccessDecision, can_create_race, count_active_races
from .tiers import TierConfigTable

if TYPE_CHECKING:
    from database.factory import DataService

logger = logging.getLogger(__name__)


def generate_access_code(length: int = 6) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(random.choices(alphabet, k=length))


def _default_wizard_start() -> datetime:
    # Planning mode: a day ahead until the organiser picks a time
    return utc_now() + timedelta(days=1)


class WizardDraft(QuesterModel):
    """Everything the creation wizard collects before an event exists."""
    name: str = ""
    description: str = ""
    category: str = ""
    event_type: str = "Lopp"
    language: str = "sv"
    win_condition: WinCondition = WinCondition.FASTEST_TIME
    checkpoint_order: CheckpointOrder = CheckpointOrder.FREE
    terrain_type: TerrainType = TerrainType.TRAIL
    start_mode: StartMode = StartMode.MASS_START
    manual_start_enabled: bool = True
    start_date_time: datetime = Field(default_factory=_default_wizard_start)
    access_code: str = Field(default_factory=generate_access_code)
    is_public: bool = False
    start_city: str = ""
    finish_city: str = ""
    create_as_official: bool = False


def is_identity_step_valid(draft: WizardDraft) -> bool:
    return len(draft.name) > 0 and len(draft.description) > 0


def is_category_step_valid(draft: WizardDraft) -> bool:
    return len(draft.category) > 0


def is_draft_complete(draft: WizardDraft) -> bool:
    return is_identity_step_valid(draft) and is_category_step_valid(draft)


def _zone(point: Coordinate, radius: float = 50) -> Dict[str, float]:
    return {"lat": point.lat, "lng": point.lng, "radius_meters": radius}


def build_event(
    draft: WizardDraft,
    user: UserProfile,
    location: Optional[Coordinate] = None,
    finish: Optional[Coordinate] = None,
    now: Optional[datetime] = None,
) -> EventConfiguration:
    """
    Turn a completed draft into a new draft event owned by ``user``.

    Admins may create official events; those are owned by the system
    account and published.
    """
    now = now or utc_now()
    start = location or DEFAULT_COORDINATES
    finish = finish or start

    fields = draft.model_dump(exclude={"create_as_official"})
    event_id = f"race-{int(now.timestamp() * 1000)}"
    overrides: Dict[str, Any] = dict(
        fields,
        status=EventStatus.DRAFT,
        start_location=_zone(start),
        finish_location=_zone(finish),
        checkpoints=[],
        results=[],
        rules=[],
        safety_instructions=[],
        map_style=MapStyle.GOOGLE_STANDARD,
        leaderboard_metric=(
            "Snabbast tid" if draft.win_condition == WinCondition.FASTEST_TIME else "Flest poäng"
        ),
        owner_id=user.id,
        owner_name=user.name,
        owner_photo_url=user.photo_url,
        creator_tier=user.tier,
    )

    if draft.create_as_official and user.is_admin:
        overrides.update(
            owner_id=SYSTEM_OWNER_ID,
            owner_name=SYSTEM_OWNER_NAME,
            owner_photo_url="",
            is_public=True,
        )

    return initial_event_state(event_id, **overrides)


class EventCreationFlow:
    """Wizard completion, instant games and settings saves against a backend."""

    def __init__(
        self,
        data: "DataService",
        tiers: Optional[TierConfigTable] = None,
        geocoder: Optional[Geocoder] = None,
    ):
        self.data = data
        self.tiers = tiers or TierConfigTable.seeded()
        self.geocoder = geocoder

    def check_quota(self, user: UserProfile) -> AccessDecision:
        """Advisory: may the user start another event?"""
        owned = self.data.events.get_all_events(owner_id=user.id)
        return can_create_race(user, count_active_races(owned), self.tiers)

    def _locate(self, city: str, fallback: Coordinate) -> Coordinate:
        if not city or self.geocoder is None:
            return fallback
        return resolve_city(self.geocoder, city, fallback)

    def finalize(
        self,
        draft: WizardDraft,
        user: UserProfile,
        location: Optional[Coordinate] = None,
    ) -> Optional[EventConfiguration]:
        """
        Geocode, build and persist the event.

        Returns None, persisting nothing, when the draft is incomplete.
        """
        if not is_draft_complete(draft):
            return None

        start = self._locate(draft.start_city, location or DEFAULT_COORDINATES)
        finish = self._locate(draft.finish_city, start)

        event = build_event(draft, user, location=start, finish=finish)
        self.data.events.save_event(event)
        logger.info("Created event %s for %s", event.id, event.owner_id)
        return event

    def save_instant_game(
        self, event: EventConfiguration, user: Optional[UserProfile]
    ) -> EventConfiguration:
        """Persist a procedurally generated game, hidden from the organiser dashboard."""
        if user is not None:
            event = event.evolve(
                owner_id=user.id,
                owner_name=user.name,
                owner_photo_url=user.photo_url,
                creator_tier=user.tier,
                is_instant_game=True,
            )
        self.data.events.save_event(event)
        return event

    def save_settings(
        self, event: EventConfiguration, patch: Mapping[str, Any]
    ) -> EventConfiguration:
        """Merge a settings-dialog patch into the event and persist it."""
        updated = event.merge(dict(patch))
        self.data.events.save_event(updated)
        return updated

    def save_event(self, event: EventConfiguration, user: Optional[UserProfile]) -> EventConfiguration:
        """
        Manual save from the organiser view.

        Fills in the owner when missing; never replaces the system owner.
        """
        if user is not None:
            if not event.owner_id:
                event = event.evolve(owner_id=user.id, owner_name=user.name)
            elif event.owner_id != SYSTEM_OWNER_ID and event.owner_id == user.id and not event.owner_name:
                event = event.evolve(owner_name=user.name)
        self.data.events.save_event(event)
        return event
