"""Tests for schedule validation."""

from dataclasses import replace
from datetime import time

import pytest

from coachplan.domain.models import (
    TIME_SLOTS,
    Agent,
    DaySchedule,
    Location,
    Priority,
    Tier,
    TimeSlot,
    TrainingSession,
    WeeklySchedule,
)
from coachplan.validation.validator import (
    ScheduleValidator,
    ValidationIssue,
    ValidationIssueType,
    ValidationResult,
)

SLOT_A = TIME_SLOTS[0]
SLOT_B = TIME_SLOTS[3]


def make_agent(name: str, manager: str = "M1", location: Location = Location.CLT) -> Agent:
    return Agent(
        name=name,
        tenure=3.0,
        tier=Tier.STANDARD,
        location=location,
        manager=manager,
        raw_score=40,
        leads_per_day=8.0,
    )


def make_session(
    slot: TimeSlot,
    location: Location,
    agents: list[Agent],
    tier: Tier = Tier.STANDARD,
) -> TrainingSession:
    return TrainingSession(slot=slot, location=location, tier=tier, agents=agents)


def week(**days: list[TrainingSession]) -> WeeklySchedule:
    return WeeklySchedule(days=[DaySchedule(day=d, sessions=s) for d, s in days.items()])


@pytest.fixture
def validator():
    return ScheduleValidator()


class TestValidationResult:
    def test_error_marks_invalid(self):
        result = ValidationResult()
        result.add_error(ValidationIssue(ValidationIssueType.LOCATION_CONFLICT, "x"))
        assert not result.is_valid
        assert result.has(ValidationIssueType.LOCATION_CONFLICT)

    def test_warning_keeps_valid(self):
        result = ValidationResult()
        result.add_warning(ValidationIssue(ValidationIssueType.LOCATION_IMBALANCE, "x"))
        assert result.is_valid
        assert result.has(ValidationIssueType.LOCATION_IMBALANCE)

    def test_issue_str(self):
        issue = ValidationIssue(
            ValidationIssueType.AGENT_SESSION_LIMIT, "Scheduled for 3 sessions", agent="Ann"
        )
        assert str(issue) == "[agent_session_limit] Agent Ann: Scheduled for 3 sessions"


class TestScheduleValidator:
    """Tests for ScheduleValidator."""

    def test_empty_schedule_valid(self, validator):
        result = validator.validate(WeeklySchedule.empty())
        assert result.is_valid
        assert result.warnings == []

    def test_balanced_schedule_valid(self, validator):
        schedule = week(
            Tuesday=[
                make_session(SLOT_A, Location.CLT, [make_agent("A", "M1"), make_agent("B", "M2")]),
                make_session(
                    SLOT_B,
                    Location.ATX,
                    [make_agent("X", "M3", Location.ATX), make_agent("Y", "M4", Location.ATX)],
                ),
            ]
        )
        result = validator.validate(schedule)
        assert result.is_valid
        assert result.warnings == []

    def test_location_conflict(self, validator):
        schedule = week(
            Tuesday=[
                make_session(SLOT_A, Location.CLT, [make_agent("A", "M1"), make_agent("B", "M2")]),
                make_session(
                    SLOT_A,
                    Location.ATX,
                    [make_agent("X", "M3", Location.ATX), make_agent("Y", "M4", Location.ATX)],
                ),
            ]
        )
        result = validator.validate(schedule)
        assert not result.is_valid
        assert result.has(ValidationIssueType.LOCATION_CONFLICT)

    def test_duplicate_session(self, validator):
        schedule = week(
            Tuesday=[
                make_session(SLOT_A, Location.CLT, [make_agent("A", "M1"), make_agent("B", "M2")]),
                make_session(SLOT_A, Location.CLT, [make_agent("C", "M3"), make_agent("D", "M4")]),
            ]
        )
        result = validator.validate(schedule)
        assert result.has(ValidationIssueType.DUPLICATE_SESSION)

    def test_cohort_below_minimum_is_warning(self, validator):
        schedule = week(Tuesday=[make_session(SLOT_A, Location.CLT, [make_agent("A")])])
        result = validator.validate(schedule)
        assert result.is_valid
        assert result.has(ValidationIssueType.COHORT_BELOW_MINIMUM)

    def test_remediation_exempt_from_minimum(self, validator):
        schedule = week(
            Tuesday=[make_session(SLOT_A, Location.CLT, [make_agent("A")], tier=Tier.REMEDIATION)]
        )
        result = validator.validate(schedule)
        assert not result.has(ValidationIssueType.COHORT_BELOW_MINIMUM)

    def test_cohort_above_maximum(self, validator):
        agents = [make_agent(f"A{i}", f"M{i}") for i in range(6)]
        schedule = week(Tuesday=[make_session(SLOT_A, Location.CLT, agents)])
        result = validator.validate(schedule)
        assert not result.is_valid
        assert result.has(ValidationIssueType.COHORT_ABOVE_MAXIMUM)

    def test_lunch_hour_session(self, validator):
        lunch_slot = TimeSlot(time(11, 0), time(12, 0), Priority.LOW, "Late morning")
        schedule = week(
            Tuesday=[
                make_session(lunch_slot, Location.ATX, [
                    make_agent("X", "M1", Location.ATX),
                    make_agent("Y", "M2", Location.ATX),
                ])
            ]
        )
        result = validator.validate(schedule)
        assert not result.is_valid
        assert result.has(ValidationIssueType.LUNCH_HOUR_SESSION)

    def test_location_imbalance_warning(self, validator):
        sessions = [
            make_session(slot, Location.CLT, [make_agent(f"A{i}", "M1"), make_agent(f"B{i}", "M2")])
            for i, slot in enumerate(TIME_SLOTS[:3])
        ]
        result = validator.validate(week(Tuesday=sessions))
        assert result.is_valid
        assert result.has(ValidationIssueType.LOCATION_IMBALANCE)

    def test_custom_balance_tolerance(self):
        sessions = [
            make_session(slot, Location.CLT, [make_agent(f"A{i}", "M1"), make_agent(f"B{i}", "M2")])
            for i, slot in enumerate(TIME_SLOTS[:3])
        ]
        result = ScheduleValidator(balance_tolerance_pct=100.0).validate(week(Tuesday=sessions))
        assert not result.has(ValidationIssueType.LOCATION_IMBALANCE)

    def test_agent_session_limit(self, validator):
        ann = make_agent("Ann", "M1")
        schedule = week(
            Tuesday=[make_session(SLOT_A, Location.CLT, [ann, make_agent("B", "M2")])],
            Wednesday=[make_session(SLOT_A, Location.CLT, [ann, make_agent("C", "M3")])],
            Thursday=[make_session(SLOT_A, Location.CLT, [ann, make_agent("D", "M4")])],
        )
        result = validator.validate(schedule)
        assert not result.is_valid
        errors = [e for e in result.errors if e.issue_type == ValidationIssueType.AGENT_SESSION_LIMIT]
        assert len(errors) == 1
        assert errors[0].agent == "Ann"

    def test_manager_slot_limit_is_warning(self, validator):
        agents = [make_agent(f"A{i}", "M1") for i in range(3)]
        schedule = week(Tuesday=[make_session(SLOT_A, Location.CLT, agents)])
        result = validator.validate(schedule)
        assert result.is_valid
        assert result.has(ValidationIssueType.MANAGER_SLOT_LIMIT)

    def test_same_slot_different_days_ok(self, validator):
        schedule = week(
            Tuesday=[make_session(SLOT_A, Location.CLT, [make_agent("A", "M1"), make_agent("B", "M2")])],
            Wednesday=[
                make_session(
                    SLOT_A,
                    Location.ATX,
                    [make_agent("X", "M1", Location.ATX), make_agent("Y", "M2", Location.ATX)],
                )
            ],
        )
        result = validator.validate(schedule)
        assert result.is_valid
        assert not result.has(ValidationIssueType.MANAGER_SLOT_LIMIT)


class TestSlotIdentity:
    """Slots are compared by their start and end times only."""

    RELABELED = replace(SLOT_A, description="Relabeled window", priority=Priority.LOW)

    def test_conflict_across_descriptions(self, validator):
        schedule = week(
            Tuesday=[
                make_session(SLOT_A, Location.CLT, [make_agent("A", "M1"), make_agent("B", "M2")]),
                make_session(
                    self.RELABELED,
                    Location.ATX,
                    [make_agent("X", "M3", Location.ATX), make_agent("Y", "M4", Location.ATX)],
                ),
            ]
        )
        result = validator.validate(schedule)
        assert not result.is_valid
        assert result.has(ValidationIssueType.LOCATION_CONFLICT)

    def test_duplicate_across_descriptions(self, validator):
        schedule = week(
            Tuesday=[
                make_session(SLOT_A, Location.CLT, [make_agent("A", "M1"), make_agent("B", "M2")]),
                make_session(self.RELABELED, Location.CLT, [make_agent("C", "M3"), make_agent("D", "M4")]),
            ]
        )
        assert validator.validate(schedule).has(ValidationIssueType.DUPLICATE_SESSION)

    def test_manager_count_across_descriptions(self, validator):
        schedule = week(
            Tuesday=[
                make_session(SLOT_A, Location.CLT, [make_agent("A", "M1"), make_agent("B", "M1")]),
                make_session(
                    self.RELABELED,
                    Location.ATX,
                    [make_agent("X", "M1", Location.ATX), make_agent("Y", "M2", Location.ATX)],
                ),
            ]
        )
        result = validator.validate(schedule)
        warnings = [w for w in result.warnings if w.issue_type == ValidationIssueType.MANAGER_SLOT_LIMIT]
        assert len(warnings) == 1
        assert warnings[0].details == {"manager": "M1", "count": 3}
