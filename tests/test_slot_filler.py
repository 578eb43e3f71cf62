"""Tests for greedy slot filling and the scheduling context."""

import pytest

from coachplan.domain.models import TIME_SLOTS, Agent, Location, Priority, Tier
from coachplan.domain.policies import DefaultSessionPolicy
from coachplan.scheduling.slot_filler import (
    Candidate,
    SchedulingContext,
    can_admit,
    commit_slot,
    fill_slot,
    location_order,
    majority_tier,
)

SLOT = TIME_SLOTS[0]
DAY = "Tuesday"


def make_agent(
    name: str,
    manager: str = "M1",
    location: Location = Location.CLT,
    tier: Tier = Tier.STANDARD,
    raw_score: int = 40,
) -> Agent:
    return Agent(
        name=name,
        tenure=3.0,
        tier=tier,
        location=location,
        manager=manager,
        raw_score=raw_score,
        leads_per_day=8.0,
    )


def candidates_for(*agents: Agent) -> tuple[Candidate, ...]:
    return tuple(Candidate(agent=a, priority=Priority.HIGH) for a in agents)


class TestSchedulingContext:
    """Tests for the per-run trackers."""

    def test_record_agent(self):
        context = SchedulingContext()
        agent = make_agent("A")
        context.record_agent(agent, DAY, SLOT)
        assert context.session_count("A") == 1
        assert context.manager_count("M1", DAY, SLOT) == 1
        assert context.agent_sessions["A"].scheduled_days == [DAY]

    def test_copy_is_independent(self):
        context = SchedulingContext()
        context.record_agent(make_agent("A"), DAY, SLOT)
        trial = context.copy()
        trial.record_agent(make_agent("A"), "Wednesday", SLOT)
        trial.occupy(DAY, SLOT, Location.CLT)

        assert context.session_count("A") == 1
        assert context.agent_sessions["A"].scheduled_days == [DAY]
        assert context.occupant(DAY, SLOT) is None

    def test_occupy_twice_raises(self):
        context = SchedulingContext()
        context.occupy(DAY, SLOT, Location.CLT)
        with pytest.raises(ValueError):
            context.occupy(DAY, SLOT, Location.ATX)

    def test_commit_slot_returns_new_context(self):
        context = SchedulingContext()
        updated = commit_slot(context, DAY, SLOT, Location.ATX)
        assert updated.occupant(DAY, SLOT) is Location.ATX
        assert context.occupant(DAY, SLOT) is None


class TestCanAdmit:
    def test_weekly_limit(self):
        policy = DefaultSessionPolicy()
        context = SchedulingContext()
        agent = make_agent("A")
        context.record_agent(agent, "Tuesday", TIME_SLOTS[1])
        context.record_agent(agent, "Wednesday", TIME_SLOTS[1])
        assert not can_admit(context, agent, "Thursday", SLOT, policy)

    def test_manager_limit_is_per_slot(self):
        policy = DefaultSessionPolicy()
        context = SchedulingContext()
        context.record_agent(make_agent("A"), DAY, SLOT)
        context.record_agent(make_agent("B"), DAY, SLOT)
        newcomer = make_agent("C")
        assert not can_admit(context, newcomer, DAY, SLOT, policy)
        assert can_admit(context, newcomer, DAY, TIME_SLOTS[1], policy)
        assert can_admit(context, newcomer, "Wednesday", SLOT, policy)


class TestFillSlot:
    """Tests for forming one cohort."""

    def test_commits_at_minimum(self):
        pool = candidates_for(make_agent("A", "M1"), make_agent("B", "M2"))
        fill = fill_slot(SchedulingContext(), pool, DAY, SLOT, Location.CLT)
        assert fill.committed
        assert [a.name for a in fill.admitted] == ["A", "B"]
        assert fill.remaining == ()
        assert fill.context.session_count("A") == 1

    def test_below_minimum_rolls_back(self):
        context = SchedulingContext()
        pool = candidates_for(make_agent("A"), make_agent("X", location=Location.ATX))
        fill = fill_slot(context, pool, DAY, SLOT, Location.CLT)

        assert not fill.committed
        assert fill.context is context
        assert fill.remaining == pool
        assert context.session_count("A") == 0
        assert context.manager_count("M1", DAY, SLOT) == 0

    def test_other_location_skipped(self):
        pool = candidates_for(
            make_agent("X", "M1", location=Location.ATX),
            make_agent("A", "M2"),
            make_agent("B", "M3"),
        )
        fill = fill_slot(SchedulingContext(), pool, DAY, SLOT, Location.CLT)
        assert [a.name for a in fill.admitted] == ["A", "B"]
        assert [c.agent.name for c in fill.remaining] == ["X"]

    def test_max_five_agents(self):
        pool = candidates_for(*[make_agent(f"A{i}", f"M{i}") for i in range(8)])
        fill = fill_slot(SchedulingContext(), pool, DAY, SLOT, Location.CLT)
        assert len(fill.admitted) == 5
        assert [c.agent.name for c in fill.remaining] == ["A5", "A6", "A7"]

    def test_manager_limit_within_cohort(self):
        pool = candidates_for(
            make_agent("A1", "A"),
            make_agent("A2", "A"),
            make_agent("A3", "A"),
            make_agent("B1", "B"),
        )
        fill = fill_slot(SchedulingContext(), pool, DAY, SLOT, Location.CLT)
        assert [a.name for a in fill.admitted] == ["A1", "A2", "B1"]
        assert [c.agent.name for c in fill.remaining] == ["A3"]

    def test_agent_at_weekly_limit_skipped(self):
        context = SchedulingContext()
        busy = make_agent("BUSY", "M9")
        context.record_agent(busy, "Monday", SLOT)
        context.record_agent(busy, "Monday", TIME_SLOTS[1])
        pool = candidates_for(busy, make_agent("A", "M1"), make_agent("B", "M2"))

        fill = fill_slot(context, pool, DAY, SLOT, Location.CLT)
        assert [a.name for a in fill.admitted] == ["A", "B"]

    def test_custom_policy(self):
        policy = DefaultSessionPolicy(min_cohort=3)
        pool = candidates_for(make_agent("A", "M1"), make_agent("B", "M2"))
        fill = fill_slot(SchedulingContext(), pool, DAY, SLOT, Location.CLT, policy)
        assert not fill.committed


class TestHelpers:
    def test_majority_tier(self):
        agents = (
            make_agent("A", tier=Tier.STANDARD),
            make_agent("B", tier=Tier.PERFORMANCE),
            make_agent("C", tier=Tier.PERFORMANCE),
        )
        assert majority_tier(agents) is Tier.PERFORMANCE

    def test_majority_tier_tie_goes_to_first_seen(self):
        agents = (make_agent("A", tier=Tier.STANDARD), make_agent("B", tier=Tier.PERFORMANCE))
        assert majority_tier(agents) is Tier.STANDARD

    def test_location_order(self):
        assert location_order(None) == (Location.CLT, Location.ATX)
        assert location_order(Location.CLT) == (Location.ATX, Location.CLT)
        assert location_order(Location.ATX) == (Location.CLT, Location.ATX)

    def test_candidate_sort_key(self):
        low = Candidate(agent=make_agent("L", raw_score=10), priority=Priority.LOW)
        high = Candidate(agent=make_agent("H", raw_score=50), priority=Priority.HIGH)
        high_worse = Candidate(agent=make_agent("W", raw_score=20), priority=Priority.HIGH)
        ordered = sorted([low, high, high_worse], key=lambda c: c.sort_key)
        assert [c.agent.name for c in ordered] == ["W", "H", "L"]
