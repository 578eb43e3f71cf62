"""Phone-coverage forecast and planning notices.

Every agent in a session is off the phones for that hour. The forecast
totals those agents per day and Central-time hour, split by office and
tier, so floor managers can see the week's coverage cost at a glance.
"""

from dataclasses import dataclass, field
from datetime import time

from coachplan.domain.models import Location, Stats, Tier, WeeklySchedule

# Five days of six slots, as planned by the floor before the overflow day.
WEEKLY_SESSION_CAPACITY = 30


@dataclass
class HourlyOutage:
    """Agents off the phones during one Central-time hour of one day."""

    day: str
    hour: str
    start: time
    atx_performance: int = 0
    atx_standard: int = 0
    clt_performance: int = 0
    clt_standard: int = 0
    total_agents: int = 0

    def add(self, location: Location, tier: Tier, count: int) -> None:
        # Remediation agents only show up in the total.
        if tier is Tier.PERFORMANCE:
            attr = f"{location.value.lower()}_performance"
            setattr(self, attr, getattr(self, attr) + count)
        elif tier is Tier.STANDARD:
            attr = f"{location.value.lower()}_standard"
            setattr(self, attr, getattr(self, attr) + count)
        self.total_agents += count


@dataclass
class OutageForecast:
    """Hourly outage rows plus weekly totals."""

    rows: list[HourlyOutage] = field(default_factory=list)

    @property
    def total_hours(self) -> int:
        return len(self.rows)

    @property
    def total_agent_hours(self) -> int:
        return sum(r.total_agents for r in self.rows)

    @property
    def peak_outage(self) -> int:
        return max((r.total_agents for r in self.rows), default=0)

    @property
    def peak_hours(self) -> list[HourlyOutage]:
        if not self.rows:
            return []
        return [r for r in self.rows if r.total_agents == self.peak_outage]

    @property
    def avg_per_hour(self) -> float:
        if not self.rows:
            return 0.0
        return round(self.total_agent_hours / self.total_hours, 1)

    def summary_lines(self) -> list[str]:
        lines = [
            f"Training Hours: {self.total_hours}",
            f"Total Agent Hours: {self.total_agent_hours}",
            f"Avg Per Hour: {self.avg_per_hour}",
            f"Peak Outage: {self.peak_outage}",
        ]
        for row in self.peak_hours:
            lines.append(f"Peak: {row.day} at {row.hour} ({row.total_agents} agents)")
        return lines


def outage_forecast(schedule: WeeklySchedule) -> OutageForecast:
    """Count agents off the phones per day and Central-time slot.

    Sessions sharing a start and end time on the same day fold into one
    row. Rows follow the schedule's day order, then start time.
    """
    day_order = {day.day: i for i, day in enumerate(schedule.days)}
    by_hour: dict[tuple, HourlyOutage] = {}

    for day in schedule.days:
        for session in day.sessions:
            key = (day.day, session.slot.start, session.slot.end)
            outage = by_hour.get(key)
            if outage is None:
                outage = HourlyOutage(
                    day=day.day,
                    hour=session.slot.location_label(Location.ATX),
                    start=session.slot.start,
                )
                by_hour[key] = outage
            outage.add(session.location, session.tier, session.size)

    rows = sorted(by_hour.values(), key=lambda r: (day_order[r.day], r.start))
    return OutageForecast(rows=rows)


def plan_notices(
    stats: Stats,
    schedule: WeeklySchedule,
    weekly_capacity: int = WEEKLY_SESSION_CAPACITY,
) -> list[str]:
    """Plain-language notes on unusual weeks.

    Covers a week where nobody needs training, a week with more sessions
    than the floor can absorb, and cohorts drawn from a single manager.
    Location imbalance is reported by the validator instead.
    """
    notices = []

    if stats.needs_training == 0 and stats.total_agents > 0:
        notices.append(
            "All agents are performing above the company average adjusted score "
            f"of {stats.avg_adjusted_score:.1f}. No training sessions needed this week."
        )

    total_sessions = len(schedule.sessions)
    if total_sessions > weekly_capacity:
        notices.append(
            f"Multi-week schedule required: Week 1 has {min(total_sessions, weekly_capacity)} "
            f"sessions, {max(0, total_sessions - weekly_capacity)} remain for Week 2+."
        )

    single_manager = [s for s in schedule.sessions if len(s.managers) == 1]
    if single_manager:
        notices.append(
            f"Manager diversity: {len(single_manager)} sessions have single-manager "
            "cohorts. Mixing managers spreads the phone coverage impact."
        )

    return notices


def format_outage_table(forecast: OutageForecast) -> list[str]:
    """Fixed-width table: a header line, then one line per hour."""
    lines = [
        f"{'Day':<10} {'Hour (CST)':<22} {'ATX P':>5} {'ATX S':>5} "
        f"{'CLT P':>5} {'CLT S':>5} {'Total':>5}"
    ]
    for row in forecast.rows:
        lines.append(
            f"{row.day:<10} {row.hour:<22} {row.atx_performance:>5} {row.atx_standard:>5} "
            f"{row.clt_performance:>5} {row.clt_standard:>5} {row.total_agents:>5}"
        )
    return lines
