"""Tests for cohort building."""

import pytest
from structlog.testing import capture_logs

from coachplan.domain.models import Agent, Location, Tier
from coachplan.scheduling.cohort_builder import (
    GROUP_ORDER,
    CohortBuilder,
    chunk,
    training_candidates,
)


def make_agent(
    name: str,
    raw_score: int,
    location: Location = Location.CLT,
    tier: Tier = Tier.STANDARD,
    leads_per_day: float = 8.0,
) -> Agent:
    return Agent(
        name=name,
        tenure=3.0,
        tier=tier,
        location=location,
        manager="M1",
        raw_score=raw_score,
        leads_per_day=leads_per_day,
    )


class TestChunk:
    def test_even_split(self):
        assert chunk([1, 2, 3, 4, 5, 6], 3) == [[1, 2, 3], [4, 5, 6]]

    def test_remainder(self):
        assert chunk([1, 2, 3, 4], 3) == [[1, 2, 3], [4]]

    def test_empty(self):
        assert chunk([], 3) == []


class TestTrainingCandidates:
    def test_below_average_only(self):
        agents = [make_agent("A", 40), make_agent("B", 60), make_agent("C", 80)]
        names = [a.name for a in training_candidates(agents, 60.0)]
        assert names == ["A"]

    def test_zero_adjusted_excluded(self):
        agents = [make_agent("A", 40, leads_per_day=0.0), make_agent("Z", 0)]
        assert training_candidates(agents, 60.0) == []


class TestCohortBuilder:
    """Tests for CohortBuilder."""

    @pytest.fixture
    def agents(self):
        return [
            make_agent("C1", 50),
            make_agent("C2", 20),
            make_agent("C3", 30),
            make_agent("C4", 10),
            make_agent("CP", 15, tier=Tier.PERFORMANCE),
            make_agent("A1", 35, location=Location.ATX),
            make_agent("TOP1", 100),
            make_agent("TOP2", 100, location=Location.ATX),
            make_agent("TOP3", 100, location=Location.ATX),
            make_agent("ZERO", 0),
        ]

    def test_average_excludes_zero_scores(self, agents):
        cohorts = CohortBuilder().build(agents)
        expected = (50 + 20 + 30 + 10 + 15 + 35 + 100 * 3) / 9
        assert cohorts.average_adjusted_score == pytest.approx(expected)

    def test_sorted_and_chunked(self, agents):
        cohorts = CohortBuilder().build(agents)
        groups = cohorts.get(Location.CLT, Tier.STANDARD)
        assert [[a.name for a in g] for g in groups] == [["C4", "C2", "C3"], ["C1"]]

    def test_groups_by_location_and_tier(self, agents):
        cohorts = CohortBuilder().build(agents)
        assert [a.name for g in cohorts.get(Location.CLT, Tier.PERFORMANCE) for a in g] == ["CP"]
        assert [a.name for g in cohorts.get(Location.ATX, Tier.STANDARD) for a in g] == ["A1"]
        assert cohorts.get(Location.ATX, Tier.PERFORMANCE) == []

    def test_above_average_and_zero_excluded(self, agents):
        cohorts = CohortBuilder().build(agents)
        names = {a.name for a in cohorts.iter_agents()}
        assert "TOP1" not in names
        assert "ZERO" not in names
        assert cohorts.agent_count == 6

    def test_iteration_in_group_order(self, agents):
        cohorts = CohortBuilder().build(agents)
        order = [a.name for a in cohorts.iter_agents()]
        assert order == ["CP", "C4", "C2", "C3", "C1", "A1"]

    def test_cohort_count(self, agents):
        cohorts = CohortBuilder().build(agents)
        assert cohorts.cohort_count == 4

    def test_custom_chunk_size(self, agents):
        cohorts = CohortBuilder(chunk_size=5).build(agents)
        assert len(cohorts.get(Location.CLT, Tier.STANDARD)) == 1

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            CohortBuilder(chunk_size=0)

    def test_empty_input(self):
        cohorts = CohortBuilder().build([])
        assert cohorts.average_adjusted_score == 0.0
        assert all(cohorts.get(*key) == [] for key in GROUP_ORDER)

    def test_logs_group_sizes(self, agents):
        with capture_logs() as logs:
            CohortBuilder().build(agents)
        event = next(e for e in logs if e["event"] == "cohorts_built")
        assert event["training_agents"] == 6
        assert event["clt_standard"] == 4
