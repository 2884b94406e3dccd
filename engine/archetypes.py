"""
Archetype resolution: one user-facing choice mapped onto the correlated
win condition / checkpoint order / score model triple, and back.
"""

from typing import Dict, NamedTuple
from models.schema import EventConfiguration
from models.enums import Archetype, WinCondition, CheckpointOrder, ScoreModel


class RuleSet(NamedTuple):
    win_condition: WinCondition
    checkpoint_order: CheckpointOrder
    score_model: ScoreModel


ARCHETYPE_RULES: Dict[Archetype, RuleSet] = {
    Archetype.CLASSIC: RuleSet(
        WinCondition.FASTEST_TIME, CheckpointOrder.SEQUENTIAL, ScoreModel.BASIC
    ),
    Archetype.ROGAINING: RuleSet(
        WinCondition.MOST_POINTS, CheckpointOrder.FREE, ScoreModel.ROGAINING
    ),
    Archetype.ADVENTURE: RuleSet(
        WinCondition.MOST_POINTS, CheckpointOrder.FREE, ScoreModel.BASIC
    ),
}


def apply_archetype(event: EventConfiguration, archetype: Archetype) -> EventConfiguration:
    """
    Set the rule triple for an archetype, whatever the previous values were.

    ``time_limit_minutes`` and ``points_per_minute`` are left as they are,
    also when switching away from rogaining.

    Args:
        event: Source event (not modified)
        archetype: Selected archetype

    Returns:
        A new EventConfiguration with the archetype's rules
    """
    rules = ARCHETYPE_RULES[Archetype(archetype)]
    return event.evolve(**rules._asdict())


def resolve_archetype(event: EventConfiguration) -> Archetype:
    """
    Infer the archetype to highlight from the current rule fields.

    Precedence: a rogaining score model wins over everything, then a
    most-points win condition means adventure, anything else is classic.
    Hand-edited combinations such as rogaining + fastest_time therefore
    resolve to rogaining.
    """
    if event.score_model == ScoreModel.ROGAINING:
        return Archetype.ROGAINING
    if event.win_condition == WinCondition.MOST_POINTS:
        return Archetype.ADVENTURE
    return Archetype.CLASSIC


def shows_penalty_editor(event: EventConfiguration) -> bool:
    """Time limit and penalty rate are edited only for rogaining events."""
    return resolve_archetype(event) == Archetype.ROGAINING


def matches_archetype(event: EventConfiguration) -> bool:
    """True when the rule triple equals one of the archetype rows exactly."""
    current = RuleSet(event.win_condition, event.checkpoint_order, event.score_model)
    return current in ARCHETYPE_RULES.values()
