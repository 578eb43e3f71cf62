"""Cohort builder for grouping training-eligible agents.

This module partitions agents who need training into per-location,
per-tier batches of bounded size, most in need first.
"""

from dataclasses import dataclass, field
from typing import Iterator

import structlog

from coachplan.domain.metrics import average_adjusted_score
from coachplan.domain.models import AGENT_TIERS, Agent, Location, Tier

log = structlog.get_logger(__name__)

DEFAULT_CHUNK_SIZE = 3

# Fixed group order: CLT Performance, CLT Standard, ATX Performance, ATX Standard
GROUP_ORDER: tuple[tuple[Location, Tier], ...] = tuple(
    (location, tier) for location in (Location.CLT, Location.ATX) for tier in AGENT_TIERS
)


@dataclass
class Cohorts:
    """Cohorts for one scheduling run.

    Attributes:
        groups: (location, tier) -> ordered list of cohorts.
        average_adjusted_score: Company average the eligibility cut used.
    """

    groups: dict[tuple[Location, Tier], list[list[Agent]]] = field(
        default_factory=lambda: {key: [] for key in GROUP_ORDER}
    )
    average_adjusted_score: float = 0.0

    def get(self, location: Location, tier: Tier) -> list[list[Agent]]:
        return self.groups.get((location, tier), [])

    def iter_agents(self) -> Iterator[Agent]:
        """Yield every agent, in fixed group order then cohort order."""
        for key in GROUP_ORDER:
            for cohort in self.groups.get(key, []):
                yield from cohort

    @property
    def agent_count(self) -> int:
        return sum(1 for _ in self.iter_agents())

    @property
    def cohort_count(self) -> int:
        return sum(len(self.groups.get(key, [])) for key in GROUP_ORDER)


def training_candidates(agents: list[Agent], average: float) -> list[Agent]:
    """Agents that need training: positive raw score, 0 < adjusted < average."""
    return [
        a
        for a in agents
        if a.raw_score > 0 and 0 < a.adjusted_score < average
    ]


def chunk(agents: list[Agent], size: int) -> list[list[Agent]]:
    """Split a ranked list into consecutive groups of at most ``size``."""
    return [agents[i : i + size] for i in range(0, len(agents), size)]


class CohortBuilder:
    """Builds ranked cohorts from an agent snapshot.

    The chunk size is a pre-grouping hint; the scheduler re-forms groups
    per training type and enforces the real session bounds.

    Example:
        >>> cohorts = CohortBuilder().build(agents)
        >>> cohorts.get(Location.CLT, Tier.PERFORMANCE)[0]
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.chunk_size = chunk_size

    def build(self, agents: list[Agent]) -> Cohorts:
        """Partition, rank, and chunk the agents who need training.

        Args:
            agents: Agent snapshot, with recommendations already assigned.

        Returns:
            Cohorts keyed by (location, tier). Empty buckets map to no cohorts.
        """
        eligible = [a for a in agents if a.raw_score > 0]
        average = average_adjusted_score(eligible)
        needing = training_candidates(eligible, average)

        groups = {}
        for location, tier in GROUP_ORDER:
            bucket = [a for a in needing if a.location == location and a.tier is tier]
            bucket.sort(key=lambda a: a.adjusted_score)
            groups[(location, tier)] = chunk(bucket, self.chunk_size)

        log.info(
            "cohorts_built",
            training_agents=len(needing),
            average_adjusted_score=round(average, 1),
            **{
                f"{location.value.lower()}_{tier.name.lower()}": len(
                    [a for c in groups[(location, tier)] for a in c]
                )
                for location, tier in GROUP_ORDER
            },
        )

        return Cohorts(groups=groups, average_adjusted_score=average)
