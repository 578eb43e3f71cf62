"""Scheduling engine for generating weekly coaching sessions."""

from coachplan.scheduling.cohort_builder import CohortBuilder, Cohorts
from coachplan.scheduling.planner import TrainingPlan, TrainingPlanner
from coachplan.scheduling.slot_filler import SchedulingContext, SlotFill, fill_slot
from coachplan.scheduling.weekly_scheduler import SchedulingResult, WeeklyScheduler

__all__ = [
    # Planner
    "TrainingPlanner",
    "TrainingPlan",
    # Building blocks
    "CohortBuilder",
    "Cohorts",
    "WeeklyScheduler",
    "SchedulingResult",
    "SchedulingContext",
    "SlotFill",
    "fill_slot",
]
