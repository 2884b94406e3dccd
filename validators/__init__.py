"""
Validators package initialization.
"""

from .rules import EventValidator, Severity, ValidationResult, ValidationIssue

__all__ = [
    "EventValidator",
    "Severity",
    "ValidationResult",
    "ValidationIssue",
]
