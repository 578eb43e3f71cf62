"""Domain models for the coaching scheduler.

This module contains all core data structures used throughout the system,
including agents, time slots, training sessions, and schedule outputs.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Optional

# Leads per day that count as full (100%) lead attainment
TARGET_LEADS_PER_DAY = 8.0

# Agents at or below this tenure (years) are filtered out at intake
MIN_TENURE_YEARS = 1.9


class Location(Enum):
    """Office locations that run training sessions.

    Slot times are defined on Central time; ``hour_offset`` shifts them
    to the location's local wall clock.
    """

    CLT = "CLT"
    ATX = "ATX"

    @property
    def site_code(self) -> str:
        """Site code used in the performance report."""
        return {Location.CLT: "CHA", Location.ATX: "AUS"}[self]

    @property
    def zone_label(self) -> str:
        return {Location.CLT: "EST", Location.ATX: "CST"}[self]

    @property
    def hour_offset(self) -> int:
        return {Location.CLT: 1, Location.ATX: 0}[self]

    @property
    def other(self) -> "Location":
        return Location.ATX if self is Location.CLT else Location.CLT

    @classmethod
    def from_site(cls, raw: str) -> "Location":
        """Resolve a site code or city name (e.g. "CHA", "Austin").

        Raises:
            ValueError: If the site is not recognised.
        """
        key = raw.strip().upper()
        if key in ("CHA", "CHARLOTTE", "CLT"):
            return cls.CLT
        if key in ("AUS", "AUSTIN", "ATX"):
            return cls.ATX
        raise ValueError(f"Unknown site {raw!r} (must be CHA/Charlotte or AUS/Austin)")


class Tier(Enum):
    """Performance band of an agent or a session.

    REMEDIATION is never assigned to agents; it only labels
    remediation sessions.
    """

    PERFORMANCE = "Performance"
    STANDARD = "Standard"
    REMEDIATION = "Zero-Need Remediation"

    @classmethod
    def from_code(cls, code: str) -> "Tier":
        """Resolve a report tier code ("P" or "S")."""
        code = code.strip().upper()
        if code == "P":
            return cls.PERFORMANCE
        if code == "S":
            return cls.STANDARD
        raise ValueError(f"Invalid tier {code!r} (must be P or S)")

    @property
    def code(self) -> str:
        return {Tier.PERFORMANCE: "P", Tier.STANDARD: "S", Tier.REMEDIATION: "R"}[self]


AGENT_TIERS = (Tier.PERFORMANCE, Tier.STANDARD)


class TrainingType(Enum):
    """Metric-specific training types."""

    CLOSE_RATE = "Close Rate Training"
    ANNUAL_PREMIUM = "Annual Premium Training"
    PLACE_RATE = "Place Rate Training"

    @property
    def metric(self) -> str:
        """Name of the Agent attribute this training targets."""
        return {
            TrainingType.CLOSE_RATE: "close_rate",
            TrainingType.ANNUAL_PREMIUM: "annual_premium",
            TrainingType.PLACE_RATE: "place_rate",
        }[self]


class Priority(Enum):
    """Urgency level, used to order scheduling attempts."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """Sort key: HIGH first."""
        return {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}[self]


@dataclass
class Agent:
    """A sales agent who may be scheduled for coaching.

    Attributes:
        name: Display name, also the agent's identity within a run.
        tenure: Tenure in years.
        tier: Performance or Standard.
        location: Office the agent works from.
        manager: Manager identity.
        raw_score: Unadjusted performance score. 0 excludes the agent from training.
        leads_per_day: Average leads received per day.
        close_rate: Close rate percentage, if reported.
        annual_premium: Annual premium per sale in dollars, if reported.
        place_rate: Place rate percentage, if reported.
        email: Contact e-mail, if reported.
        wow_delta: Week-over-week rank change.
        prior_rank: Rank last week.
        current_rank: Rank this week.
        recommendations: Training types the agent qualifies for.
    """

    name: str
    tenure: float
    tier: Tier
    location: Location
    manager: str
    raw_score: int
    leads_per_day: float = 0.0
    close_rate: Optional[float] = None
    annual_premium: Optional[float] = None
    place_rate: Optional[float] = None
    email: Optional[str] = None
    wow_delta: int = 0
    prior_rank: int = 0
    current_rank: int = 0
    recommendations: list[TrainingType] = field(default_factory=list)

    @property
    def lead_attainment(self) -> float:
        """Percentage of target lead volume received, capped at 100."""
        return min(self.leads_per_day / TARGET_LEADS_PER_DAY * 100.0, 100.0)

    @property
    def adjusted_score(self) -> float:
        """Raw score scaled by lead attainment."""
        return self.raw_score * self.lead_attainment / 100.0

    @property
    def is_training_eligible(self) -> bool:
        """Zero-score agents are excluded from all training."""
        return self.raw_score > 0

    def metric_value(self, training: TrainingType) -> Optional[float]:
        """Get the raw metric a training type targets."""
        return getattr(self, training.metric)

    def needs(self, training: TrainingType) -> bool:
        return training in self.recommendations


def _shift(t: time, hours: int) -> time:
    return (datetime.combine(datetime.min, t) + timedelta(hours=hours)).time()


def _format_clock(t: time) -> tuple[str, str]:
    hour = t.hour % 12 or 12
    meridiem = "AM" if t.hour < 12 else "PM"
    return f"{hour}:{t.minute:02d}", meridiem


LUNCH_START = time(12, 0)
LUNCH_END = time(13, 0)


@dataclass(frozen=True)
class TimeSlot:
    """A one-hour training window in the weekly grid.

    Times are Central wall-clock; the Eastern office runs the same
    window one hour later on its own clock.

    Attributes:
        start: Start time (Central).
        end: End time (Central).
        priority: How attractive the window is for pulling agents off phones.
        description: Short operational label (e.g. "Pre-peak ramp up").
    """

    start: time
    end: time
    priority: Priority
    description: str

    def local_start(self, location: Location) -> time:
        return _shift(self.start, location.hour_offset)

    def local_end(self, location: Location) -> time:
        return _shift(self.end, location.hour_offset)

    @property
    def is_morning(self) -> bool:
        """True if the slot starts before noon Central."""
        return self.start.hour < 12

    def starts_in_lunch_hour(self, location: Location) -> bool:
        """True if the slot starts inside the 12:00-1:00 local window."""
        return LUNCH_START <= self.local_start(location) < LUNCH_END

    def location_label(self, location: Location) -> str:
        """Render the slot on a location's clock, e.g. "11:30 AM-12:30 PM EST"."""
        start, start_meridiem = _format_clock(self.local_start(location))
        end, end_meridiem = _format_clock(self.local_end(location))
        if start_meridiem == end_meridiem:
            return f"{start}-{end} {end_meridiem} {location.zone_label}"
        return f"{start} {start_meridiem}-{end} {end_meridiem} {location.zone_label}"

    @property
    def label(self) -> str:
        """Combined label, Central first: "8:30-9:30 AM CST / 9:30-10:30 AM EST"."""
        return (
            f"{self.location_label(Location.ATX)} / "
            f"{self.location_label(Location.CLT)}"
        )

    def __repr__(self) -> str:
        return f"TimeSlot({self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')} CST)"


# Lunch (12:00-1:00 local) is deliberately absent from this table.
TIME_SLOTS: tuple[TimeSlot, ...] = (
    TimeSlot(time(8, 30), time(9, 30), Priority.HIGH, "Pre-peak ramp up"),
    TimeSlot(time(9, 30), time(10, 30), Priority.MEDIUM, "Early morning"),
    TimeSlot(time(10, 30), time(11, 30), Priority.LOW, "Approaching peak"),
    TimeSlot(time(14, 0), time(15, 0), Priority.HIGH, "Post-lunch lull"),
    TimeSlot(time(15, 0), time(16, 0), Priority.MEDIUM, "Afternoon dip"),
    TimeSlot(time(16, 0), time(17, 0), Priority.LOW, "Before evening peak"),
)


def find_time_slot(start: time) -> Optional[TimeSlot]:
    """Look up a fixed slot by its Central start time."""
    for slot in TIME_SLOTS:
        if slot.start == start:
            return slot
    return None


OVERFLOW_DAY = "Friday"

# Weekday -> focus training. The overflow day has no single focus.
TRAINING_WEEK: tuple[tuple[str, Optional[TrainingType]], ...] = (
    ("Tuesday", TrainingType.CLOSE_RATE),
    ("Wednesday", TrainingType.ANNUAL_PREMIUM),
    ("Thursday", TrainingType.PLACE_RATE),
    (OVERFLOW_DAY, None),
)


@dataclass
class TrainingSession:
    """One scheduled training hour at one location.

    Attributes:
        slot: Time slot the session occupies.
        location: Location running the session.
        tier: Majority tier of attendees (or REMEDIATION).
        agents: Attending agents, most in need first.
        priority: Human-readable rationale, e.g. "Pre-peak ramp up - Close Rate Training".
        cohort_number: 1-based count of this location's sessions that day (display only).
    """

    slot: TimeSlot
    location: Location
    tier: Tier
    agents: list[Agent] = field(default_factory=list)
    priority: str = ""
    cohort_number: int = 1

    @property
    def time(self) -> str:
        """Combined two-zone label for display."""
        return self.slot.label

    @property
    def local_time(self) -> str:
        """Label on the running location's clock."""
        return self.slot.location_label(self.location)

    @property
    def size(self) -> int:
        return len(self.agents)

    @property
    def managers(self) -> list[str]:
        """Distinct managers, in attendee order."""
        return list(dict.fromkeys(a.manager for a in self.agents))


@dataclass
class DaySchedule:
    """Sessions scheduled on one weekday.

    Attributes:
        day: Weekday label (e.g. "Tuesday").
        focus: Training type for the day, None on the overflow day.
        sessions: Sessions in the order they were committed.
    """

    day: str
    focus: Optional[TrainingType] = None
    sessions: list[TrainingSession] = field(default_factory=list)

    def sessions_at(self, location: Location) -> list[TrainingSession]:
        return [s for s in self.sessions if s.location == location]

    def session_for_slot(self, slot: TimeSlot) -> Optional[TrainingSession]:
        for session in self.sessions:
            if session.slot == slot:
                return session
        return None


@dataclass
class WeeklySchedule:
    """Complete schedule output for a training week."""

    days: list[DaySchedule] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "WeeklySchedule":
        """Create a schedule with every training day and no sessions."""
        return cls(days=[DaySchedule(day=day, focus=focus) for day, focus in TRAINING_WEEK])

    def get_day(self, day: str) -> DaySchedule:
        for day_schedule in self.days:
            if day_schedule.day == day:
                return day_schedule
        raise KeyError(day)

    @property
    def sessions(self) -> list[TrainingSession]:
        """All sessions across the week, in day order."""
        return [s for d in self.days for s in d.sessions]

    def get_agent_session_count(self, name: str) -> int:
        """Get the number of sessions an agent attends this week."""
        return sum(1 for s in self.sessions if any(a.name == name for a in s.agents))

    def get_weekly_summary(self) -> dict:
        """Get summary statistics for the weekly schedule."""
        sessions = self.sessions
        by_location = {
            loc: sum(1 for s in sessions if s.location == loc) for loc in Location
        }
        unique_agents = {a.name for s in sessions for a in s.agents}

        return {
            "total_sessions": len(sessions),
            "clt_sessions": by_location[Location.CLT],
            "atx_sessions": by_location[Location.ATX],
            "total_agents_scheduled": len(unique_agents),
            "weekly_capacity": len(sessions) * 5,
        }


@dataclass
class LocationBreakdown:
    """Agent counts for one location."""

    performance: int = 0
    standard: int = 0

    @property
    def total(self) -> int:
        return self.performance + self.standard


@dataclass
class Stats:
    """Aggregate figures for one uploaded agent snapshot.

    Attributes:
        total_agents: Agents in the snapshot.
        eligible_count: Agents that passed the intake tenure filter.
        excluded_count: Agents removed by the tenure filter (overlaid by the caller).
        avg_raw_score: Mean raw score over agents with a positive raw score.
        avg_adjusted_score: Mean adjusted score over eligible agents with leads.
        needs_training: Eligible agents below the average adjusted score.
        locations: Per-location tier breakdown.
    """

    total_agents: int = 0
    eligible_count: int = 0
    excluded_count: int = 0
    avg_raw_score: float = 0.0
    avg_adjusted_score: float = 0.0
    needs_training: int = 0
    locations: dict[Location, LocationBreakdown] = field(
        default_factory=lambda: {loc: LocationBreakdown() for loc in Location}
    )

    def with_excluded(self, excluded_count: int) -> "Stats":
        """Return a copy with the tenure-exclusion count overlaid."""
        return replace(self, excluded_count=excluded_count)


@dataclass(frozen=True)
class MetricThresholds:
    """25th-percentile thresholds for one tier."""

    close_rate: float = 0.0
    annual_premium: float = 0.0
    place_rate: float = 0.0

    def for_training(self, training: TrainingType) -> float:
        return getattr(self, training.metric)


@dataclass(frozen=True)
class TierPercentiles:
    """Per-tier metric thresholds used for training recommendations."""

    performance: MetricThresholds = MetricThresholds()
    standard: MetricThresholds = MetricThresholds()

    def for_tier(self, tier: Tier) -> MetricThresholds:
        if tier is Tier.PERFORMANCE:
            return self.performance
        return self.standard
