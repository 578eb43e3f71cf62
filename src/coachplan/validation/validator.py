"""Validation module for verifying schedule correctness.

This module re-checks every scheduling invariant over a finished week,
independently of how the schedule was produced. Validation is advisory:
errors flag a schedule for manual correction but never stop it from
being returned or saved.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from coachplan.domain.models import Location, Tier, WeeklySchedule
from coachplan.domain.policies import DefaultSessionPolicy, SessionPolicy


class ValidationIssueType(Enum):
    """Types of validation issues."""

    DUPLICATE_SESSION = "duplicate_session"
    LOCATION_CONFLICT = "location_conflict"
    COHORT_BELOW_MINIMUM = "cohort_below_minimum"
    COHORT_ABOVE_MAXIMUM = "cohort_above_maximum"
    LUNCH_HOUR_SESSION = "lunch_hour_session"
    LOCATION_IMBALANCE = "location_imbalance"
    AGENT_SESSION_LIMIT = "agent_session_limit"
    MANAGER_SLOT_LIMIT = "manager_slot_limit"


@dataclass
class ValidationIssue:
    """A single validation finding."""

    issue_type: ValidationIssueType
    message: str
    day: Optional[str] = None
    agent: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.issue_type.value}]"]
        if self.agent:
            parts.append(f"Agent {self.agent}:")
        parts.append(self.message)
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a schedule."""

    is_valid: bool = True
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def add_error(self, issue: ValidationIssue) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(issue)
        self.is_valid = False

    def add_warning(self, issue: ValidationIssue) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(issue)

    def has(self, issue_type: ValidationIssueType) -> bool:
        return any(i.issue_type == issue_type for i in self.errors + self.warnings)


class ScheduleValidator:
    """Validates a weekly schedule against all scheduling invariants.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate(schedule)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(
        self,
        session_policy: Optional[SessionPolicy] = None,
        balance_tolerance_pct: float = 30.0,
    ):
        self.session_policy = session_policy or DefaultSessionPolicy()
        self.balance_tolerance_pct = balance_tolerance_pct

    def validate(self, schedule: WeeklySchedule) -> ValidationResult:
        """Validate a complete week.

        Args:
            schedule: The schedule to validate.

        Returns:
            ValidationResult with is_valid flag, errors and warnings.
        """
        result = ValidationResult()

        for day_schedule in schedule.days:
            self._validate_day(day_schedule, result)

        self._validate_location_balance(schedule, result)
        self._validate_agent_limits(schedule, result)
        self._validate_manager_slots(schedule, result)

        return result

    def _validate_day(self, day_schedule, result: ValidationResult) -> None:
        """Per-day checks: duplicates, conflicts, cohort size, lunch hour."""
        day = day_schedule.day
        locations_by_slot = defaultdict(set)
        labels = {}

        for session in day_schedule.sessions:
            key = (session.slot.start, session.slot.end)
            labels.setdefault(key, session.slot.label)
            seen = locations_by_slot[key]
            if session.location in seen:
                result.add_error(
                    ValidationIssue(
                        issue_type=ValidationIssueType.DUPLICATE_SESSION,
                        message=(
                            f"{session.location.value} scheduled twice at "
                            f"{session.time} on {day}"
                        ),
                        day=day,
                    )
                )
            seen.add(session.location)

            size = session.size
            if size < self.session_policy.min_cohort_size() and session.tier is not Tier.REMEDIATION:
                result.add_warning(
                    ValidationIssue(
                        issue_type=ValidationIssueType.COHORT_BELOW_MINIMUM,
                        message=(
                            f"Cohort below minimum size ({size} agents) in "
                            f"{session.location.value} on {day} at {session.time}"
                        ),
                        day=day,
                        details={"size": size},
                    )
                )
            if size > self.session_policy.max_cohort_size():
                result.add_error(
                    ValidationIssue(
                        issue_type=ValidationIssueType.COHORT_ABOVE_MAXIMUM,
                        message=(
                            f"Cohort exceeds maximum size ({size} agents) in "
                            f"{session.location.value} on {day} at {session.time}"
                        ),
                        day=day,
                        details={"size": size},
                    )
                )

            if any(session.slot.starts_in_lunch_hour(loc) for loc in Location):
                result.add_error(
                    ValidationIssue(
                        issue_type=ValidationIssueType.LUNCH_HOUR_SESSION,
                        message=f"Training scheduled during lunch hour: {day} {session.time}",
                        day=day,
                    )
                )

        for key, locations in locations_by_slot.items():
            if len(locations) > 1:
                result.add_error(
                    ValidationIssue(
                        issue_type=ValidationIssueType.LOCATION_CONFLICT,
                        message=f"Both CLT and ATX scheduled on {day} at {labels[key]}",
                        day=day,
                    )
                )

    def _validate_location_balance(
        self,
        schedule: WeeklySchedule,
        result: ValidationResult,
    ) -> None:
        """Warn when one location carries far more sessions than the other."""
        sessions = schedule.sessions
        if not sessions:
            return

        shares = {
            loc: 100.0 * sum(1 for s in sessions if s.location == loc) / len(sessions)
            for loc in Location
        }
        gap = abs(shares[Location.CLT] - shares[Location.ATX])
        if gap > self.balance_tolerance_pct:
            result.add_warning(
                ValidationIssue(
                    issue_type=ValidationIssueType.LOCATION_IMBALANCE,
                    message=(
                        f"Location imbalance: CLT {shares[Location.CLT]:.0f}% vs "
                        f"ATX {shares[Location.ATX]:.0f}% of sessions"
                    ),
                    details={"clt_pct": shares[Location.CLT], "atx_pct": shares[Location.ATX]},
                )
            )

    def _validate_agent_limits(
        self,
        schedule: WeeklySchedule,
        result: ValidationResult,
    ) -> None:
        """Validate weekly session limits per agent."""
        counts: dict[str, int] = defaultdict(int)
        for session in schedule.sessions:
            for agent in session.agents:
                counts[agent.name] += 1

        limit = self.session_policy.max_sessions_per_agent()
        for name, count in counts.items():
            if count > limit:
                result.add_error(
                    ValidationIssue(
                        issue_type=ValidationIssueType.AGENT_SESSION_LIMIT,
                        message=f"Scheduled for {count} sessions (max allowed: {limit})",
                        agent=name,
                        details={"count": count, "limit": limit},
                    )
                )

    def _validate_manager_slots(
        self,
        schedule: WeeklySchedule,
        result: ValidationResult,
    ) -> None:
        """Warn when a manager loses too many agents to one slot."""
        limit = self.session_policy.max_agents_per_manager_per_slot()

        for day_schedule in schedule.days:
            counts: dict[tuple, int] = defaultdict(int)
            labels = {}
            for session in day_schedule.sessions:
                key = (session.slot.start, session.slot.end)
                labels.setdefault(key, session.slot.label)
                for agent in session.agents:
                    counts[(agent.manager, key)] += 1

            for (manager, key), count in counts.items():
                if count > limit:
                    result.add_warning(
                        ValidationIssue(
                            issue_type=ValidationIssueType.MANAGER_SLOT_LIMIT,
                            message=(
                                f"Manager {manager} has {count} agents scheduled on "
                                f"{day_schedule.day} at {labels[key]} (recommended max: {limit})"
                            ),
                            day=day_schedule.day,
                            details={"manager": manager, "count": count},
                        )
                    )
