"""Weekly scheduler for placing cohorts into the training grid.

This module provides the WeeklyScheduler class that walks the fixed
week of training days and fills each day's time slots with cohorts,
with support for:
- One metric-specific training focus per weekday
- An overflow day for agents recommended more than one training
- Weekly per-agent limits, per-manager slot limits, and
  single-location slot occupancy
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from coachplan.domain.metrics import priority_level
from coachplan.domain.models import (
    TIME_SLOTS,
    TRAINING_WEEK,
    Agent,
    DaySchedule,
    Location,
    TimeSlot,
    TrainingSession,
    TrainingType,
    WeeklySchedule,
)
from coachplan.domain.policies import (
    DefaultPriorityPolicy,
    DefaultSessionPolicy,
    PriorityPolicy,
    SessionPolicy,
)
from coachplan.scheduling.cohort_builder import Cohorts
from coachplan.scheduling.slot_filler import (
    Candidate,
    SchedulingContext,
    commit_slot,
    fill_slot,
    location_order,
    majority_tier,
)


@dataclass
class SchedulingResult:
    """Outcome of one weekly scheduling run.

    Attributes:
        schedule: The generated week.
        unscheduled: Day -> names of candidates left unplaced that day.
        context: Trackers as they stood at the end of the run.
    """

    schedule: WeeklySchedule
    unscheduled: dict[str, list[str]] = field(default_factory=dict)
    context: SchedulingContext = field(default_factory=SchedulingContext)

    @property
    def unscheduled_count(self) -> int:
        return sum(len(names) for names in self.unscheduled.values())


def sorted_slots(slots: tuple[TimeSlot, ...]) -> list[TimeSlot]:
    """Slots by priority, HIGH first; table order within a priority."""
    return sorted(slots, key=lambda s: s.priority.rank)


class WeeklyScheduler:
    """Greedy, deterministic weekly training scheduler.

    The scheduler follows this approach:
    1. For each focus day, collect agents recommended that training
    2. Order them by urgency, then by lowest adjusted score
    3. Walk the day's slots by slot priority, alternating locations
    4. Commit a cohort only when it reaches the minimum size
    5. Fill the overflow day's morning slots with multi-need agents

    Commitments are final; there is no backtracking across slots or days.
    Agents that cannot be placed are reported, never raised.

    Example:
        >>> scheduler = WeeklyScheduler()
        >>> result = scheduler.schedule(cohorts)
        >>> result.schedule.get_day("Tuesday").sessions
    """

    def __init__(
        self,
        session_policy: Optional[SessionPolicy] = None,
        priority_policy: Optional[PriorityPolicy] = None,
        logger: Optional[Any] = None,
    ):
        self.session_policy = session_policy or DefaultSessionPolicy()
        self.priority_policy = priority_policy or DefaultPriorityPolicy()
        self.log = logger or structlog.get_logger(__name__)

    def schedule(
        self,
        cohorts: Cohorts,
        average_score: Optional[float] = None,
        context: Optional[SchedulingContext] = None,
    ) -> SchedulingResult:
        """Generate the week's sessions.

        Args:
            cohorts: Ranked cohorts from the cohort builder.
            average_score: Average adjusted score used for urgency. Defaults
                to the average the cohorts were built with.
            context: Starting trackers. A fresh context is used if omitted.

        Returns:
            SchedulingResult with the schedule and leftover agents.
        """
        if average_score is None:
            average_score = cohorts.average_adjusted_score
        context = context.copy() if context is not None else SchedulingContext()

        schedule = WeeklySchedule.empty()
        unscheduled: dict[str, list[str]] = {}

        for day, focus in TRAINING_WEEK:
            day_schedule = schedule.get_day(day)
            if focus is None:
                candidates = self._collect_overflow(cohorts, average_score, context)
                slots = [s for s in sorted_slots(TIME_SLOTS) if s.is_morning]
                label = f"{day} Overflow Training"
            else:
                candidates = self._collect_for(focus, cohorts, average_score, context)
                slots = sorted_slots(TIME_SLOTS)
                label = focus.value

            self.log.info(
                "day_scheduling_started",
                day=day,
                focus=label,
                candidates=len(candidates),
            )

            context, remaining = self._schedule_day(
                day_schedule, candidates, slots, label, context
            )

            if remaining:
                names = [c.agent.name for c in remaining]
                unscheduled[day] = names
                self.log.warning(
                    "agents_unscheduled",
                    day=day,
                    focus=label,
                    count=len(names),
                    agents=names,
                )

        return SchedulingResult(schedule=schedule, unscheduled=unscheduled, context=context)

    def _candidate(self, agent: Agent, average_score: float) -> Candidate:
        return Candidate(
            agent=agent,
            priority=priority_level(agent.adjusted_score, average_score, self.priority_policy),
        )

    def _under_limit(self, agent: Agent, context: SchedulingContext) -> bool:
        return context.session_count(agent.name) < self.session_policy.max_sessions_per_agent()

    def _collect_for(
        self,
        focus: TrainingType,
        cohorts: Cohorts,
        average_score: float,
        context: SchedulingContext,
    ) -> tuple[Candidate, ...]:
        """Agents recommended the focus training who still have capacity."""
        candidates = [
            self._candidate(agent, average_score)
            for agent in cohorts.iter_agents()
            if agent.needs(focus) and self._under_limit(agent, context)
        ]
        return tuple(sorted(candidates, key=lambda c: c.sort_key))

    def _collect_overflow(
        self,
        cohorts: Cohorts,
        average_score: float,
        context: SchedulingContext,
    ) -> tuple[Candidate, ...]:
        """Agents recommended more than one training who still have capacity."""
        candidates = [
            self._candidate(agent, average_score)
            for agent in cohorts.iter_agents()
            if len(agent.recommendations) > 1 and self._under_limit(agent, context)
        ]
        return tuple(sorted(candidates, key=lambda c: c.sort_key))

    def _schedule_day(
        self,
        day_schedule: DaySchedule,
        candidates: tuple[Candidate, ...],
        slots: list[TimeSlot],
        label: str,
        context: SchedulingContext,
    ) -> tuple[SchedulingContext, tuple[Candidate, ...]]:
        """Fill one day's slots. Returns the updated context and leftovers."""
        day = day_schedule.day
        last_location: Optional[Location] = None

        for slot in slots:
            if not candidates:
                break

            occupant = context.occupant(day, slot)
            if occupant is not None:
                self.log.debug(
                    "slot_skipped", day=day, slot=slot.label, occupied_by=occupant.value
                )
                continue

            for location in location_order(last_location):
                fill = fill_slot(
                    context, candidates, day, slot, location, self.session_policy
                )
                if not fill.committed:
                    self.log.debug(
                        "cohort_below_minimum",
                        day=day,
                        slot=slot.label,
                        location=location.value,
                        admitted=len(fill.admitted),
                    )
                    continue

                context = commit_slot(fill.context, day, slot, location)
                candidates = fill.remaining
                session = TrainingSession(
                    slot=slot,
                    location=location,
                    tier=majority_tier(fill.admitted),
                    agents=list(fill.admitted),
                    priority=f"{slot.description} - {label}",
                    cohort_number=len(day_schedule.sessions_at(location)) + 1,
                )
                day_schedule.sessions.append(session)
                last_location = location

                self.log.info(
                    "session_committed",
                    day=day,
                    slot=session.local_time,
                    location=location.value,
                    tier=session.tier.value,
                    agents=[a.name for a in fill.admitted],
                )
                break

        return context, candidates

