"""Tests for performance report intake."""

import io

import pytest
from structlog.testing import capture_logs

from coachplan.domain.metrics import assign_recommendations, compute_tier_percentiles
from coachplan.domain.models import Location, Tier, TrainingType
from coachplan.exceptions import ReportFormatError
from coachplan.intake.report_parser import REPORT_MAX_COLUMNS, parse_agent_row, parse_report

BANNER = "Weekly Performance Report\tWeek 3"
HEADER = "\t".join(f"Col{i}" for i in range(40))


def make_row(
    name: str = "Alice Smith",
    tenure: str = "3.2",
    tier: str = "P",
    site: str = "CHA",
    manager: str = "Pat Lee",
    score: str = "72",
    leads: str = "6.5",
    close_rate: str = "18.5%",
    annual_premium: str = "$1,250.00",
    place_rate: str = "64%",
    email: str = "alice@example.com",
) -> list[str]:
    row = [""] * 40
    row[0] = tenure
    row[1] = tier
    row[2] = site
    row[3] = manager
    row[5] = "2"
    row[6] = "14"
    row[7] = "12"
    row[8] = name
    row[9] = score
    row[10] = leads
    row[11] = close_rate
    row[12] = annual_premium
    row[13] = place_rate
    row[39] = email
    return row


def report(*rows: list[str]) -> io.StringIO:
    lines = [BANNER, HEADER] + ["\t".join(r) for r in rows]
    return io.StringIO("\n".join(lines) + "\n")


class TestParseAgentRow:
    """Tests for single-row parsing."""

    def test_full_row(self):
        agent = parse_agent_row(make_row(), 3)
        assert agent.name == "Alice Smith"
        assert agent.tenure == 3.2
        assert agent.tier is Tier.PERFORMANCE
        assert agent.location is Location.CLT
        assert agent.manager == "Pat Lee"
        assert agent.raw_score == 72
        assert agent.leads_per_day == 6.5
        assert agent.close_rate == 18.5
        assert agent.annual_premium == 1250.0
        assert agent.place_rate == 64.0
        assert agent.email == "alice@example.com"
        assert agent.wow_delta == 2
        assert agent.prior_rank == 14
        assert agent.current_rank == 12
        assert agent.recommendations == []

    def test_empty_metrics_are_zero(self):
        agent = parse_agent_row(make_row(close_rate="", place_rate="n/a"), 3)
        assert agent.close_rate == 0.0
        assert agent.place_rate == 0.0
        assert agent.annual_premium == 1250.0

    def test_austin_site(self):
        agent = parse_agent_row(make_row(site="AUS", tier="S"), 3)
        assert agent.location is Location.ATX
        assert agent.tier is Tier.STANDARD

    def test_missing_email(self):
        row = make_row(email="")
        assert parse_agent_row(row, 3).email is None
        assert parse_agent_row(row[:20], 3).email is None

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"tenure": "n/a"}, "Invalid tenure"),
            ({"tier": "X"}, "Invalid tier"),
            ({"site": "NYC"}, "Unknown site"),
            ({"name": ""}, "Missing agent name"),
        ],
    )
    def test_invalid_rows(self, overrides, message):
        with pytest.raises(ValueError, match=message):
            parse_agent_row(make_row(**overrides), 7)

    def test_short_row(self):
        with pytest.raises(ValueError, match="Insufficient columns"):
            parse_agent_row(["3.0", "P", "CHA", "Pat"] + [""] * 36, 4)


class TestParseReport:
    """Tests for whole-report parsing."""

    def test_counts(self):
        result = parse_report(
            report(
                make_row(name="Alice"),
                make_row(name="Bob", site="AUS"),
                make_row(name="Newbie", tenure="1.5"),
                make_row(name="Bad", tier="Q"),
            )
        )
        assert result.total_rows == 4
        assert result.valid_rows == 2
        assert result.invalid_rows == 1
        assert result.excluded_by_tenure == 1
        assert [a.name for a in result.agents] == ["Alice", "Bob"]
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Row 6:")

    def test_tenure_boundary_excluded(self):
        result = parse_report(report(make_row(name="Edge", tenure="1.9"), make_row(name="Ok", tenure="1.91")))
        assert [a.name for a in result.agents] == ["Ok"]
        assert result.excluded_by_tenure == 1

    def test_too_few_rows(self):
        with pytest.raises(ReportFormatError):
            parse_report(io.StringIO(f"{BANNER}\n{HEADER}\n"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ReportFormatError):
            parse_report(tmp_path / "missing.tsv")

    def test_reads_from_path(self, tmp_path):
        path = tmp_path / "report.tsv"
        path.write_text(report(make_row(name="Alice"), make_row(name="Bob")).getvalue())
        result = parse_report(path)
        assert [a.name for a in result.agents] == ["Alice", "Bob"]

    def test_rejected_rows_logged(self):
        with capture_logs() as logs:
            parse_report(report(make_row(name="Alice"), make_row(name="")))
        rejected = [e for e in logs if e["event"] == "report_row_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["row"] == 4
        summary = next(e for e in logs if e["event"] == "report_parsed")
        assert summary["valid_rows"] == 1

    def test_wide_row_keeps_leading_fields(self):
        wide = make_row(name="Wide") + ["extra"] * (REPORT_MAX_COLUMNS + 6 - 40)
        with capture_logs() as logs:
            result = parse_report(report(make_row(name="Alice"), wide, make_row(name="Bob")))

        assert result.total_rows == 3
        assert [a.name for a in result.agents] == ["Alice", "Wide", "Bob"]
        assert result.agents[1].email == "alice@example.com"
        truncated = next(e for e in logs if e["event"] == "report_rows_truncated")
        assert truncated["rows"] == 1
        assert truncated["max_fields"] == REPORT_MAX_COLUMNS + 6


class TestBlankMetrics:
    """Blank metric cells count as zero and are flagged like any low value."""

    def test_blank_close_rate_flagged(self):
        rows = [make_row(name=f"Agent {i}", close_rate=f"{20 + i}%") for i in range(8)]
        rows.append(make_row(name="Blank", close_rate=""))

        agents = parse_report(report(*rows)).agents
        percentiles = compute_tier_percentiles(agents)
        blank = next(a for a in assign_recommendations(agents, percentiles) if a.name == "Blank")

        assert percentiles.for_tier(Tier.PERFORMANCE).close_rate == 22.0
        assert blank.close_rate == 0.0
        assert blank.recommendations == [TrainingType.CLOSE_RATE]
