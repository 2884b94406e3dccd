"""
Tier quota table: tier -> TierConfig lookup with admin-only merge updates.

The table is advisory data. Enforcing a quota is up to the caller.
"""

import logging
from typing import Any, Dict, Iterator, Mapping, Optional, TYPE_CHECKING

from pydantic.alias_generators import to_snake

from models.schema import TierConfig, UserProfile
from models.enums import UserTier
from models.defaults import INITIAL_TIER_CONFIGS

if TYPE_CHECKING:
    from database.interfaces import SystemConfigService

logger = logging.getLogger(__name__)


def _require_admin(actor: Optional[UserProfile]) -> None:
    if actor is None or not actor.is_admin:
        raise PermissionError("Only administrators may change tier configuration")


class TierConfigTable:
    """Mapping of subscription tier to its quotas and feature flags."""

    def __init__(self, configs: Optional[Mapping[UserTier, TierConfig]] = None):
        source = configs if configs is not None else INITIAL_TIER_CONFIGS
        self._configs: Dict[UserTier, TierConfig] = {
            UserTier(tier): config.model_copy(deep=True) for tier, config in source.items()
        }

    @classmethod
    def seeded(cls) -> "TierConfigTable":
        """Table with the default configuration for every tier."""
        return cls(INITIAL_TIER_CONFIGS)

    @classmethod
    def load(cls, service: "SystemConfigService") -> "TierConfigTable":
        """Read the stored configuration, filling in missing tiers with defaults."""
        stored = service.get_tier_configs()
        configs = dict(INITIAL_TIER_CONFIGS)
        configs.update(stored)
        return cls(configs)

    def save(self, service: "SystemConfigService") -> None:
        service.update_tier_configs(self.all())

    def get(self, tier: UserTier) -> TierConfig:
        return self._configs[UserTier(tier)]

    def __getitem__(self, tier: UserTier) -> TierConfig:
        return self.get(tier)

    def __iter__(self) -> Iterator[UserTier]:
        return iter(self._configs)

    def __len__(self) -> int:
        return len(self._configs)

    def all(self) -> Dict[UserTier, TierConfig]:
        return dict(self._configs)

    def update(
        self, tier: UserTier, changes: Mapping[str, Any], actor: Optional[UserProfile]
    ) -> TierConfig:
        """
        Merge ``changes`` into one tier's configuration.

        Args:
            tier: Tier to change
            changes: Field values (snake_case or camelCase)
            actor: User performing the change, must be an admin

        Returns:
            The updated TierConfig

        Raises:
            PermissionError: If actor is not an admin
            pydantic.ValidationError: If the merged config is invalid
        """
        _require_admin(actor)
        tier = UserTier(tier)
        merged = self._configs[tier].model_dump()
        merged.update({to_snake(key): value for key, value in changes.items()})
        merged["id"] = tier
        updated = TierConfig.model_validate(merged)
        self._configs[tier] = updated
        logger.info("Tier %s updated by %s: %s", tier.value, actor.id, sorted(changes))
        return updated

    def replace_all(
        self, configs: Mapping[UserTier, TierConfig], actor: Optional[UserProfile]
    ) -> None:
        """Swap in a full set of configs (the back office "save all")."""
        _require_admin(actor)
        for tier, config in configs.items():
            self._configs[UserTier(tier)] = config.model_copy(deep=True)
