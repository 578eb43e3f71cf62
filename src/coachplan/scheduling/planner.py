"""Main planning interface.

This module provides the high-level TrainingPlanner class that orchestrates
eligibility, cohort building, weekly scheduling, and validation for one
agent snapshot.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from coachplan.domain.metrics import (
    assign_recommendations,
    compute_stats,
    compute_tier_percentiles,
)
from coachplan.domain.models import Agent, Stats, TierPercentiles, WeeklySchedule
from coachplan.domain.policies import (
    DefaultPriorityPolicy,
    DefaultSessionPolicy,
    PriorityPolicy,
    SessionPolicy,
)
from coachplan.scheduling.cohort_builder import DEFAULT_CHUNK_SIZE, CohortBuilder, Cohorts
from coachplan.scheduling.weekly_scheduler import SchedulingResult, WeeklyScheduler
from coachplan.validation.validator import ScheduleValidator, ValidationResult


@dataclass
class TrainingPlan:
    """Everything produced for one weekly run.

    Attributes:
        agents: Input agents with recommendations assigned.
        stats: Aggregate figures, with tenure exclusions overlaid.
        percentiles: Per-tier metric thresholds.
        cohorts: Ranked cohorts the scheduler drew from.
        result: Scheduling outcome (schedule, leftovers, trackers).
        validation: Advisory validation of the schedule.
    """

    agents: list[Agent]
    stats: Stats
    percentiles: TierPercentiles
    cohorts: Cohorts
    result: SchedulingResult
    validation: ValidationResult

    @property
    def schedule(self) -> WeeklySchedule:
        return self.result.schedule


class TrainingPlanner:
    """High-level planner for generating a week of coaching sessions.

    Example:
        >>> planner = TrainingPlanner()
        >>> plan = planner.plan(agents, excluded_by_tenure=4)
        >>> plan.schedule.get_weekly_summary()
    """

    def __init__(
        self,
        session_policy: Optional[SessionPolicy] = None,
        priority_policy: Optional[PriorityPolicy] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        logger: Optional[Any] = None,
    ):
        """Initialize planner with policies.

        Args:
            session_policy: Session size and fairness limits.
            priority_policy: Urgency thresholds.
            chunk_size: Cohort builder grouping size.
            logger: structlog-style logger; defaults to this module's logger.
        """
        self.session_policy = session_policy or DefaultSessionPolicy()
        self.priority_policy = priority_policy or DefaultPriorityPolicy()
        self.log = logger or structlog.get_logger(__name__)

        self.cohort_builder = CohortBuilder(chunk_size=chunk_size)
        self.scheduler = WeeklyScheduler(
            session_policy=self.session_policy,
            priority_policy=self.priority_policy,
            logger=logger,
        )
        self.validator = ScheduleValidator(session_policy=self.session_policy)

    def plan(self, agents: list[Agent], excluded_by_tenure: int = 0) -> TrainingPlan:
        """Run the full pipeline for one agent snapshot.

        Args:
            agents: Agents that passed the intake tenure filter.
            excluded_by_tenure: Agents the intake dropped for low tenure.

        Returns:
            TrainingPlan. The schedule is returned even if validation fails.
        """
        percentiles = compute_tier_percentiles(agents)
        recommended = assign_recommendations(agents, percentiles)
        stats = compute_stats(recommended).with_excluded(excluded_by_tenure)

        cohorts = self.cohort_builder.build(recommended)
        result = self.scheduler.schedule(cohorts)
        validation = self.validator.validate(result.schedule)

        for error in validation.errors:
            self.log.error("validation_error", issue=error.issue_type.value, message=str(error))
        for warning in validation.warnings:
            self.log.warning(
                "validation_warning", issue=warning.issue_type.value, message=str(warning)
            )

        summary = result.schedule.get_weekly_summary()
        self.log.info(
            "plan_generated",
            sessions=summary["total_sessions"],
            agents_scheduled=summary["total_agents_scheduled"],
            unscheduled=result.unscheduled_count,
            valid=validation.is_valid,
        )

        return TrainingPlan(
            agents=recommended,
            stats=stats,
            percentiles=percentiles,
            cohorts=cohorts,
            result=result,
            validation=validation,
        )
