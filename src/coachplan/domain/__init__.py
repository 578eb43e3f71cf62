"""Domain models, metrics and business rules for coaching."""

from coachplan.domain.metrics import (
    assign_recommendations,
    average_adjusted_score,
    compute_stats,
    compute_tier_percentiles,
    lower_percentile,
    priority_level,
    recommendations_for,
)
from coachplan.domain.models import (
    Agent,
    DaySchedule,
    Location,
    LocationBreakdown,
    MetricThresholds,
    Priority,
    Stats,
    Tier,
    TierPercentiles,
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

__all__ = [
    # Models
    "Agent",
    "DaySchedule",
    "Location",
    "LocationBreakdown",
    "MetricThresholds",
    "Priority",
    "Stats",
    "Tier",
    "TierPercentiles",
    "TimeSlot",
    "TrainingSession",
    "TrainingType",
    "WeeklySchedule",
    # Metrics
    "assign_recommendations",
    "average_adjusted_score",
    "compute_stats",
    "compute_tier_percentiles",
    "lower_percentile",
    "priority_level",
    "recommendations_for",
    # Policies
    "DefaultPriorityPolicy",
    "DefaultSessionPolicy",
    "PriorityPolicy",
    "SessionPolicy",
]
