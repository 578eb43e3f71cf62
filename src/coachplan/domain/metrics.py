"""Company metrics and training eligibility.

Computes company averages, per-tier metric thresholds, and which
metric-specific trainings each agent should receive. Every function here
is pure and returns zero/empty results on empty input.
"""

from dataclasses import replace
from math import floor
from typing import Iterable, Optional

import structlog

from coachplan.domain.models import (
    AGENT_TIERS,
    Agent,
    Location,
    LocationBreakdown,
    MetricThresholds,
    Priority,
    Stats,
    Tier,
    TierPercentiles,
    TrainingType,
)
from coachplan.domain.policies import DefaultPriorityPolicy, PriorityPolicy

log = structlog.get_logger(__name__)

RECOMMENDATION_PERCENTILE = 0.25


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def average_adjusted_score(agents: Iterable[Agent]) -> float:
    """Mean adjusted score over training-eligible agents that received leads.

    Zero-score agents and agents whose adjusted score is 0 are left out
    so they do not drag the bar down.
    """
    return _mean(
        [
            a.adjusted_score
            for a in agents
            if a.raw_score > 0 and a.adjusted_score > 0 and a.leads_per_day > 0
        ]
    )


def compute_stats(agents: list[Agent]) -> Stats:
    """Compute counts and company averages for an agent snapshot.

    The excluded-by-tenure count is not known here; callers overlay it
    with ``Stats.with_excluded``.
    """
    eligible = [a for a in agents if a.raw_score > 0]

    avg_raw = _mean([a.raw_score for a in eligible])
    avg_adjusted = average_adjusted_score(eligible)
    needs_training = sum(1 for a in eligible if a.adjusted_score < avg_adjusted)

    locations = {}
    for location in Location:
        at_location = [a for a in agents if a.location == location]
        locations[location] = LocationBreakdown(
            performance=sum(1 for a in at_location if a.tier is Tier.PERFORMANCE),
            standard=sum(1 for a in at_location if a.tier is Tier.STANDARD),
        )

    log.debug(
        "company_averages",
        agents=len(agents),
        avg_raw_score=round(avg_raw, 1),
        avg_adjusted_score=round(avg_adjusted, 1),
        needs_training=needs_training,
    )

    return Stats(
        total_agents=len(agents),
        eligible_count=len(agents),
        avg_raw_score=avg_raw,
        avg_adjusted_score=avg_adjusted,
        needs_training=needs_training,
        locations=locations,
    )


def lower_percentile(values: Iterable[float], fraction: float) -> float:
    """Percentile by lower index: ``sorted(values)[floor(n * fraction)]``.

    Not interpolated; ties resolve toward the lower value. Returns 0 for
    an empty population.
    """
    ordered = sorted(values)
    if not ordered:
        return 0.0
    index = min(floor(len(ordered) * fraction), len(ordered) - 1)
    return ordered[index]


def _positive_values(agents: list[Agent], training: TrainingType) -> list[float]:
    values = []
    for agent in agents:
        value = agent.metric_value(training)
        if value is not None and value > 0:
            values.append(value)
    return values


def compute_tier_percentiles(agents: list[Agent]) -> TierPercentiles:
    """Compute 25th-percentile thresholds per tier and metric.

    Only strictly positive values of a metric are considered, so agents
    with a missing or zero metric never lower the bar.
    """
    thresholds = {}
    for tier in AGENT_TIERS:
        tier_agents = [a for a in agents if a.tier is tier]
        thresholds[tier] = MetricThresholds(
            **{
                training.metric: lower_percentile(
                    _positive_values(tier_agents, training), RECOMMENDATION_PERCENTILE
                )
                for training in TrainingType
            }
        )

    return TierPercentiles(
        performance=thresholds[Tier.PERFORMANCE],
        standard=thresholds[Tier.STANDARD],
    )


def recommendations_for(agent: Agent, percentiles: TierPercentiles) -> list[TrainingType]:
    """Training types for which the agent sits below its tier's threshold."""
    if agent.raw_score == 0:
        return []

    thresholds = percentiles.for_tier(agent.tier)
    recommendations = []
    for training in TrainingType:
        value = agent.metric_value(training)
        if value is not None and value < thresholds.for_training(training):
            recommendations.append(training)
    return recommendations


def assign_recommendations(
    agents: list[Agent],
    percentiles: TierPercentiles,
) -> list[Agent]:
    """Return copies of the agents with their recommendations filled in.

    Zero-score agents always receive an empty list, whatever their metrics.
    """
    return [
        replace(agent, recommendations=recommendations_for(agent, percentiles))
        for agent in agents
    ]


_default_priority_policy = DefaultPriorityPolicy()


def priority_level(
    score: float,
    average: float,
    policy: Optional[PriorityPolicy] = None,
) -> Priority:
    """HIGH if ``average - score >= 20``, MEDIUM if ``>= 10``, else LOW."""
    return (policy or _default_priority_policy).priority_for(score, average)
