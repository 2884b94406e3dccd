"""
Advisory access checks against the tier quota table.

These return decisions; they do not block anything by themselves.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from models.schema import EventConfiguration, UserProfile
from models.enums import UserTier, EventStatus
from .tiers import TierConfigTable


@dataclass
class AccessDecision:
    """Outcome of an access check."""
    allowed: bool
    message: Optional[str] = None


@dataclass
class PlanCheck:
    """Outcome of checking a full race plan against the owner's tier."""
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return len(self.warnings) == 0


def count_active_races(events: List[EventConfiguration]) -> int:
    """Quota counts every non-archived event."""
    return sum(1 for e in events if e.status != EventStatus.ARCHIVED)


def can_create_race(
    user: UserProfile, active_race_count: int, tiers: TierConfigTable
) -> AccessDecision:
    limits = tiers[user.tier]
    if active_race_count >= limits.max_active_races:
        return AccessDecision(
            allowed=False,
            message=(
                f"Din {limits.display_name}-plan tillåter max {limits.max_active_races} "
                "aktivt event åt gången. Du måste arkivera ett gammalt event (via "
                "inställningar) för att skapa ett nytt, eller uppgradera."
            ),
        )
    return AccessDecision(allowed=True)


def can_add_checkpoint(
    user: UserProfile, current_checkpoint_count: int, tiers: TierConfigTable
) -> AccessDecision:
    limits = tiers[user.tier]
    if current_checkpoint_count >= limits.max_checkpoints_per_race:
        return AccessDecision(
            allowed=False,
            message=(
                f"Max {limits.max_checkpoints_per_race} checkpoints tillåtna i "
                f"{limits.display_name}-planen. Uppgradera för obegränsat."
            ),
        )
    return AccessDecision(allowed=True)


def can_admit_participant(
    event: EventConfiguration, tier: UserTier, tiers: TierConfigTable
) -> AccessDecision:
    limits = tiers[tier]
    if len(event.participant_ids) >= limits.max_participants_per_race:
        return AccessDecision(
            allowed=False,
            message=(
                f"Eventet har nått max {limits.max_participants_per_race} deltagare "
                f"för {limits.display_name}-planen."
            ),
        )
    return AccessDecision(allowed=True)


def validate_race_plan(
    user: UserProfile, race: EventConfiguration, tiers: TierConfigTable
) -> PlanCheck:
    limits = tiers[user.tier]
    check = PlanCheck()
    count = len(race.checkpoints)
    if count > limits.max_checkpoints_per_race:
        check.warnings.append(
            f"Du har {count} checkpoints, men din plan tillåter bara "
            f"{limits.max_checkpoints_per_race}. Endast de första "
            f"{limits.max_checkpoints_per_race} kommer vara aktiva."
        )
    return check


def ai_instruction_extension(tier: UserTier) -> str:
    """Extra system-instruction text for the AI, per tier."""
    return {
        UserTier.SCOUT: "Limit output complexity. Keep descriptions short.",
        UserTier.CREATOR: "Use creative storytelling and advanced terrain adaptation.",
        UserTier.MASTER: "Use professional corporate language and advanced team building logic.",
    }.get(UserTier(tier), "")
