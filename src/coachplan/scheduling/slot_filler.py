"""Greedy slot filling under per-agent, per-manager and per-slot limits.

This module holds the scheduling context (the three trackers owned by a
single run) and the step that tries to form one cohort for one
(day, slot, location) cell. Each step works on a trial copy of the
context, so an attempt that cannot reach the minimum cohort size is
rolled back simply by discarding the copy.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from coachplan.domain.models import Agent, Location, Priority, Tier, TimeSlot
from coachplan.domain.policies import DefaultSessionPolicy, SessionPolicy


@dataclass
class AgentSessionState:
    """Sessions an agent has been given so far this week."""

    session_count: int = 0
    scheduled_days: list[str] = field(default_factory=list)

    def add_session(self, day: str) -> None:
        self.session_count += 1
        self.scheduled_days.append(day)


@dataclass
class SchedulingContext:
    """Trackers for one weekly scheduling run.

    Attributes:
        agent_sessions: Agent name -> sessions assigned this week.
        manager_slots: (manager, day, slot) -> agents of that manager in the slot.
        slot_occupancy: (day, slot) -> the one location using that slot.
    """

    agent_sessions: dict[str, AgentSessionState] = field(default_factory=dict)
    manager_slots: dict[tuple[str, str, TimeSlot], int] = field(default_factory=dict)
    slot_occupancy: dict[tuple[str, TimeSlot], Location] = field(default_factory=dict)

    def copy(self) -> "SchedulingContext":
        """Independent copy, safe to mutate for a trial."""
        return SchedulingContext(
            agent_sessions={
                name: AgentSessionState(state.session_count, list(state.scheduled_days))
                for name, state in self.agent_sessions.items()
            },
            manager_slots=dict(self.manager_slots),
            slot_occupancy=dict(self.slot_occupancy),
        )

    def session_count(self, name: str) -> int:
        state = self.agent_sessions.get(name)
        return state.session_count if state else 0

    def manager_count(self, manager: str, day: str, slot: TimeSlot) -> int:
        return self.manager_slots.get((manager, day, slot), 0)

    def occupant(self, day: str, slot: TimeSlot) -> Optional[Location]:
        return self.slot_occupancy.get((day, slot))

    def record_agent(self, agent: Agent, day: str, slot: TimeSlot) -> None:
        """Count a session for the agent and for its manager in this slot."""
        self.agent_sessions.setdefault(agent.name, AgentSessionState()).add_session(day)
        key = (agent.manager, day, slot)
        self.manager_slots[key] = self.manager_slots.get(key, 0) + 1

    def occupy(self, day: str, slot: TimeSlot, location: Location) -> None:
        """Claim (day, slot) for a location.

        Raises:
            ValueError: If the slot is already claimed. Callers check
                ``occupant`` first, so this indicates a scheduler bug.
        """
        current = self.slot_occupancy.get((day, slot))
        if current is not None:
            raise ValueError(
                f"{day} {slot.label} already used by {current.value}, "
                f"cannot assign {location.value}"
            )
        self.slot_occupancy[(day, slot)] = location


@dataclass(frozen=True)
class Candidate:
    """An agent waiting to be placed, with its scheduling priority."""

    agent: Agent
    priority: Priority

    @property
    def location(self) -> Location:
        return self.agent.location

    @property
    def sort_key(self) -> tuple[int, float]:
        """Priority first, then lowest adjusted score."""
        return (self.priority.rank, self.agent.adjusted_score)


@dataclass
class SlotFill:
    """Outcome of one attempt to fill a (day, slot, location) cell.

    Attributes:
        context: Context to continue with. The updated trial when
            committed, otherwise the untouched original.
        admitted: Agents admitted in the attempt, in admission order.
        remaining: Candidate pool for the next step.
        committed: True if the cohort reached the minimum size.
    """

    context: SchedulingContext
    admitted: tuple[Agent, ...]
    remaining: tuple[Candidate, ...]
    committed: bool


def can_admit(
    context: SchedulingContext,
    agent: Agent,
    day: str,
    slot: TimeSlot,
    policy: SessionPolicy,
) -> bool:
    """Check the agent's weekly limit and its manager's per-slot limit."""
    if context.session_count(agent.name) >= policy.max_sessions_per_agent():
        return False
    if context.manager_count(agent.manager, day, slot) >= policy.max_agents_per_manager_per_slot():
        return False
    return True


def fill_slot(
    context: SchedulingContext,
    candidates: tuple[Candidate, ...],
    day: str,
    slot: TimeSlot,
    location: Location,
    policy: Optional[SessionPolicy] = None,
) -> SlotFill:
    """Greedily form a cohort for one location in one slot.

    Candidates are scanned in order. Each admission immediately updates
    the trial context, so later checks in the same cohort see it. The
    slot itself is not marked occupied here; see ``commit_slot``.

    Args:
        context: Current scheduling context (not modified).
        candidates: Sorted candidate pool.
        day: Weekday label.
        slot: Time slot being filled.
        location: Location to form the cohort for.
        policy: Session limits.

    Returns:
        SlotFill with either the committed trial context or the original.
    """
    policy = policy or DefaultSessionPolicy()
    trial = context.copy()
    admitted: list[Agent] = []

    for candidate in candidates:
        if len(admitted) >= policy.max_cohort_size():
            break
        if candidate.location != location:
            continue
        if not can_admit(trial, candidate.agent, day, slot, policy):
            continue
        trial.record_agent(candidate.agent, day, slot)
        admitted.append(candidate.agent)

    if len(admitted) < policy.min_cohort_size():
        return SlotFill(
            context=context,
            admitted=tuple(admitted),
            remaining=candidates,
            committed=False,
        )

    admitted_names = {a.name for a in admitted}
    return SlotFill(
        context=trial,
        admitted=tuple(admitted),
        remaining=tuple(c for c in candidates if c.agent.name not in admitted_names),
        committed=True,
    )


def commit_slot(
    context: SchedulingContext,
    day: str,
    slot: TimeSlot,
    location: Location,
) -> SchedulingContext:
    """Return a context with (day, slot) claimed by the location."""
    updated = context.copy()
    updated.occupy(day, slot, location)
    return updated


def majority_tier(agents: tuple[Agent, ...]) -> Tier:
    """Most common tier; ties go to the tier seen first."""
    return Counter(a.tier for a in agents).most_common(1)[0][0]


def location_order(last_location: Optional[Location]) -> tuple[Location, Location]:
    """Alternate away from the last location scheduled on the day (CLT first)."""
    if last_location is Location.CLT:
        return (Location.ATX, Location.CLT)
    return (Location.CLT, Location.ATX)
