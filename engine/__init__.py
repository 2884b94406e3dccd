"""
Event configuration engine: rule archetypes, templates, instant games,
tier quotas, admin actions, creation wizard and AI plan updates.
"""

from .archetypes import (
    ARCHETYPE_RULES,
    RuleSet,
    apply_archetype,
    resolve_archetype,
    shows_penalty_editor,
    matches_archetype,
)
from .templates import (
    derive_template,
    create_template,
    instantiate_from_template,
    infer_terrain_hint,
)
from .extraction import (
    GeolocationError,
    offset_coordinate,
    generate_extraction_checkpoints,
    generate_extraction_game,
    locate_with_timeout,
    start_extraction_game,
)
from .tiers import TierConfigTable
from .access import (
    AccessDecision,
    PlanCheck,
    count_active_races,
    can_create_race,
    can_add_checkpoint,
    can_admit_participant,
    validate_race_plan,
    ai_instruction_extension,
)
from .admin import AdminConsole, toggle_lock
from .wizard import (
    WizardDraft,
    EventCreationFlow,
    build_event,
    generate_access_code,
    is_identity_step_valid,
    is_category_step_valid,
    is_draft_complete,
)
from .plan_updates import (
    UPDATE_RACE_PLAN,
    PROVIDE_RACE_ANALYSIS,
    merge_plan_update,
    parse_analysis,
    build_context_prompt,
    is_location_set,
)

__all__ = [
    "ARCHETYPE_RULES",
    "RuleSet",
    "apply_archetype",
    "resolve_archetype",
    "shows_penalty_editor",
    "matches_archetype",
    "derive_template",
    "create_template",
    "instantiate_from_template",
    "infer_terrain_hint",
    "GeolocationError",
    "offset_coordinate",
    "generate_extraction_checkpoints",
    "generate_extraction_game",
    "locate_with_timeout",
    "start_extraction_game",
    "TierConfigTable",
    "AccessDecision",
    "PlanCheck",
    "count_active_races",
    "can_create_race",
    "can_add_checkpoint",
    "can_admit_participant",
    "validate_race_plan",
    "ai_instruction_extension",
    "AdminConsole",
    "toggle_lock",
    "WizardDraft",
    "EventCreationFlow",
    "build_event",
    "generate_access_code",
    "is_identity_step_valid",
    "is_category_step_valid",
    "is_draft_complete",
    "UPDATE_RACE_PLAN",
    "PROVIDE_RACE_ANALYSIS",
    "merge_plan_update",
    "parse_analysis",
    "build_context_prompt",
    "is_location_set",
]
