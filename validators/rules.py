"""
Playability checks for quest events.

Errors block publishing; warnings are shown to the organiser but an event
with only warnings is still valid.
"""

from collections import Counter
from dataclasses import dataclass, field as dc_field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from models.schema import EventConfiguration, Checkpoint, TierConfig
from engine.archetypes import matches_archetype, resolve_archetype


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    severity: Severity
    message: str
    event_id: Optional[str] = None
    checkpoint_id: Optional[str] = None
    field: Optional[str] = None
    suggested_fix: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"severity": self.severity.value, "message": self.message}
        for key in ("event_id", "checkpoint_id", "field", "suggested_fix"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class ValidationResult:
    """Issues found for one event, in the order they were detected."""
    issues: List[ValidationIssue] = dc_field(default_factory=list)

    def add(self, severity: Severity, message: str, **details: Any) -> None:
        self.issues.append(ValidationIssue(severity=severity, message=message, **details))

    def extend(self, other: "ValidationResult") -> None:
        self.issues.extend(other.issues)

    def __iter__(self) -> Iterator[ValidationIssue]:
        return iter(self.issues)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def total_issues(self) -> int:
        return len(self.issues)

    def for_checkpoint(self, checkpoint_id: str) -> List[ValidationIssue]:
        return [i for i in self.issues if i.checkpoint_id == checkpoint_id]

    def to_dict(self) -> Dict[str, Any]:
        errors, warnings = self.errors, self.warnings
        return {
            "is_valid": not errors,
            "error_count": len(errors),
            "warning_count": len(warnings),
            "errors": [e.to_dict() for e in errors],
            "warnings": [w.to_dict() for w in warnings],
        }


class EventValidator:
    """Playability and consistency checks for an event."""

    def validate_event(
        self, event: EventConfiguration, tier_config: Optional[TierConfig] = None
    ) -> ValidationResult:
        """
        Check an event before it is published or started.

        Args:
            event: Event to check
            tier_config: Owner's tier; quota overruns become warnings when given

        Returns:
            ValidationResult with every error and warning found
        """
        result = ValidationResult()

        # Templates may legitimately carry unplaced checkpoints
        if not event.is_template:
            for cp in event.unplaced_checkpoints:
                result.add(
                    Severity.ERROR,
                    f"Checkpoint '{cp.name}' has no coordinates",
                    event_id=event.id,
                    checkpoint_id=cp.id,
                    field="location",
                    suggested_fix="Place the checkpoint on the map before publishing",
                )

        counts = Counter(cp.id for cp in event.checkpoints)
        duplicates = sorted(cid for cid, n in counts.items() if n > 1)
        if duplicates:
            result.add(
                Severity.ERROR,
                f"Duplicate checkpoint IDs found: {', '.join(duplicates)}",
                event_id=event.id,
                field="checkpoints",
            )

        for cp in event.checkpoints:
            result.extend(self.validate_checkpoint(cp, event.id))

        if event.is_public and event.access_code:
            result.add(
                Severity.WARNING,
                "Access code is ignored for public events",
                event_id=event.id,
                field="access_code",
                suggested_fix="Clear the access code or make the event private",
            )

        if not matches_archetype(event):
            result.add(
                Severity.WARNING,
                "Win condition, checkpoint order and score model do not match "
                f"a single archetype; shown as '{resolve_archetype(event).value}'",
                event_id=event.id,
                field="win_condition",
            )

        if tier_config is not None:
            result.extend(self._check_quota(event, tier_config))

        return result

    def validate_checkpoint(self, checkpoint: Checkpoint, event_id: str) -> ValidationResult:
        result = ValidationResult()
        if not (checkpoint.name or "").strip():
            result.add(
                Severity.ERROR, "Checkpoint missing name",
                event_id=event_id, checkpoint_id=checkpoint.id, field="name",
            )

        quiz = checkpoint.quiz
        if quiz is not None and not 0 <= quiz.correct_option_index < len(quiz.options):
            result.add(
                Severity.ERROR,
                f"Quiz on '{checkpoint.name}' has no valid correct option",
                event_id=event_id,
                checkpoint_id=checkpoint.id,
                field="quiz.correct_option_index",
            )
        return result

    def _check_quota(self, event: EventConfiguration, tier: TierConfig) -> ValidationResult:
        result = ValidationResult()
        limits = (
            ("checkpoints", len(event.checkpoints), tier.max_checkpoints_per_race),
            ("participant_ids", len(event.participant_ids), tier.max_participants_per_race),
        )
        for field_name, used, limit in limits:
            if used > limit:
                result.add(
                    Severity.WARNING,
                    f"{used} {field_name.replace('_ids', 's')} exceed the "
                    f"{tier.display_name} limit of {limit}",
                    event_id=event.id,
                    field=field_name,
                )
        return result
