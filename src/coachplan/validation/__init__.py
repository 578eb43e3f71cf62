"""Validation module for verifying schedule correctness."""

from coachplan.validation.validator import (
    ScheduleValidator,
    ValidationIssue,
    ValidationIssueType,
    ValidationResult,
)

__all__ = [
    "ScheduleValidator",
    "ValidationIssue",
    "ValidationIssueType",
    "ValidationResult",
]
