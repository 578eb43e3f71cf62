"""Tabular and plain-text schedule exports.

Flattens a WeeklySchedule into one row per attending agent, writes it as
CSV, and renders the weekly team e-mail. Location-specific times are
rendered here from the structured slot, never parsed back out of labels.
"""

from datetime import date
from pathlib import Path
from typing import IO, Optional, Union

import pandas as pd

from coachplan.domain.models import DaySchedule, Location, Tier, WeeklySchedule

CSV_COLUMNS = [
    "Day",
    "Time",
    "Local Time",
    "Location",
    "Tier",
    "Priority",
    "Cohort Number",
    "Agent Name",
    "Manager",
    "Adjusted Score",
    "Original Score",
    "Lead Attainment %",
    "Leads Per Day",
    "Tenure",
    "Site",
    "Tier Code",
]


def filter_schedule(
    schedule: WeeklySchedule,
    location: Optional[Location] = None,
    tier: Optional[Tier] = None,
) -> WeeklySchedule:
    """Keep only sessions matching the filters; days left empty are dropped."""
    days = []
    for day in schedule.days:
        sessions = [
            s
            for s in day.sessions
            if (location is None or s.location == location)
            and (tier is None or s.tier == tier)
        ]
        if sessions:
            days.append(DaySchedule(day=day.day, focus=day.focus, sessions=sessions))
    return WeeklySchedule(days=days)


def manager_schedule(schedule: WeeklySchedule, manager: str) -> WeeklySchedule:
    """Sessions that include at least one of the manager's agents."""
    days = []
    for day in schedule.days:
        sessions = [s for s in day.sessions if manager in s.managers]
        if sessions:
            days.append(DaySchedule(day=day.day, focus=day.focus, sessions=sessions))
    return WeeklySchedule(days=days)


def schedule_rows(
    schedule: WeeklySchedule,
    location: Optional[Location] = None,
    tier: Optional[Tier] = None,
) -> list[dict]:
    """One row per agent per session, in schedule order."""
    rows = []
    for day in filter_schedule(schedule, location, tier).days:
        for session in day.sessions:
            for agent in session.agents:
                rows.append(
                    {
                        "Day": day.day,
                        "Time": session.time,
                        "Local Time": session.local_time,
                        "Location": session.location.value,
                        "Tier": session.tier.value,
                        "Priority": session.priority,
                        "Cohort Number": session.cohort_number,
                        "Agent Name": agent.name,
                        "Manager": agent.manager,
                        "Adjusted Score": round(agent.adjusted_score, 1),
                        "Original Score": agent.raw_score,
                        "Lead Attainment %": round(agent.lead_attainment, 1),
                        "Leads Per Day": agent.leads_per_day,
                        "Tenure": agent.tenure,
                        "Site": agent.location.site_code,
                        "Tier Code": agent.tier.code,
                    }
                )
    return rows


def export_csv(
    schedule: WeeklySchedule,
    output: Union[str, Path, IO[str]],
    location: Optional[Location] = None,
    tier: Optional[Tier] = None,
) -> pd.DataFrame:
    """Write the flattened schedule as CSV and return the frame written."""
    df = pd.DataFrame(schedule_rows(schedule, location, tier), columns=CSV_COLUMNS)
    df.to_csv(output, index=False)
    return df


def csv_filename(
    week_of: Optional[str] = None,
    location: Optional[Location] = None,
    tier: Optional[Tier] = None,
) -> str:
    """Default export file name, e.g. "training-schedule-2024-01-15-CLT.csv"."""
    parts = ["training-schedule"]
    if week_of:
        parts.append(week_of)
    if location:
        parts.append(location.value)
    if tier:
        parts.append(tier.value.lower())
    return "-".join(parts) + ".csv"


def email_text(schedule: WeeklySchedule, week_of: Optional[date] = None) -> str:
    """Render the weekly schedule as a plain-text team e-mail."""
    week_of = week_of or date.today()
    lines = [
        f"Coaching Schedule - Week of {week_of.strftime('%m/%d/%Y')}",
        "",
        "Dear Team,",
        "",
        "Please find below the coaching schedule for this week. Sessions should "
        'be referred to as "coaching sessions" or "skill development" time.',
        "",
    ]

    for day in schedule.days:
        if not day.sessions:
            continue
        lines.append(f"{day.day}:")
        for session in day.sessions:
            lines.append(
                f"  {session.local_time} - {session.location.value} "
                f"{session.tier.value} Tier"
            )
            lines.append(f"    Priority: {session.priority}")
            lines.append(f"    Agents: {', '.join(a.name for a in session.agents)}")
            lines.append(f"    Managers: {', '.join(session.managers)}")
            lines.append("")

    lines.extend(
        [
            "Important Notes:",
            "- Please coordinate with managers 48 hours before scheduled sessions",
            '- Keep training discrete (refer to it as "coaching")',
            "- Track attendance and reschedule no-shows",
            "",
            "Best regards,",
            "Training Team",
        ]
    )
    return "\n".join(lines)
