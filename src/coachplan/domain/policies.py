"""Policy definitions for coaching rules.

This module contains configurable policies that define business rules
for training urgency and session capacity. Policies are kept separate from
the scheduling engine to allow independent testing and easy modification.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from coachplan.domain.models import Priority


class PriorityPolicy(ABC):
    """Abstract base class for training urgency policies."""

    @abstractmethod
    def priority_for(self, score: float, average: float) -> Priority:
        """Classify how urgently an agent needs training.

        Args:
            score: The agent's adjusted score.
            average: Company average adjusted score.

        Returns:
            Priority level. Used only to order scheduling attempts.
        """
        pass


class SessionPolicy(ABC):
    """Abstract base class for session capacity and fairness limits."""

    @abstractmethod
    def min_cohort_size(self) -> int:
        """Fewest agents a committed session may have."""
        pass

    @abstractmethod
    def max_cohort_size(self) -> int:
        """Most agents a session may have."""
        pass

    @abstractmethod
    def max_sessions_per_agent(self) -> int:
        """Most sessions one agent may attend per week."""
        pass

    @abstractmethod
    def max_agents_per_manager_per_slot(self) -> int:
        """Most agents one manager may lose to training in a single slot."""
        pass


@dataclass
class DefaultPriorityPolicy(PriorityPolicy):
    """Default urgency policy.

    Thresholds are score differences, not ratios:
    - average - score >= 20: HIGH
    - average - score >= 10: MEDIUM
    - otherwise: LOW
    """

    high_gap: float = 20.0
    medium_gap: float = 10.0

    def priority_for(self, score: float, average: float) -> Priority:
        difference = average - score
        if difference >= self.high_gap:
            return Priority.HIGH
        if difference >= self.medium_gap:
            return Priority.MEDIUM
        return Priority.LOW


@dataclass
class DefaultSessionPolicy(SessionPolicy):
    """Default session limits.

    - Sessions run with 2 to 5 agents
    - An agent attends at most 2 sessions per week
    - At most 2 agents from one manager share a slot

    Note: the cohort builder chunks at 3 as a grouping hint only;
    ``max_cohort`` is the authoritative cap.
    """

    min_cohort: int = 2
    max_cohort: int = 5
    max_sessions: int = 2
    max_per_manager_slot: int = 2

    def min_cohort_size(self) -> int:
        return self.min_cohort

    def max_cohort_size(self) -> int:
        return self.max_cohort

    def max_sessions_per_agent(self) -> int:
        return self.max_sessions

    def max_agents_per_manager_per_slot(self) -> int:
        return self.max_per_manager_slot
