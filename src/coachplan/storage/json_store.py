"""JSON persistence for generated plans.

The saved document mirrors the in-memory WeeklySchedule: sessions refer
to agents by name, and time slots are stored as structured Central
times rather than display labels. Loading rebuilds the same shapes a
fresh run produces.
"""

import json
from datetime import datetime, time, timezone
from pathlib import Path
from typing import Optional, Union

from coachplan.domain.models import (
    Agent,
    DaySchedule,
    Location,
    Priority,
    Stats,
    Tier,
    TimeSlot,
    TrainingSession,
    TrainingType,
    WeeklySchedule,
)
from coachplan.exceptions import ScheduleStoreError

FORMAT_VERSION = 1


def agent_to_dict(agent: Agent) -> dict:
    return {
        "name": agent.name,
        "tenure": agent.tenure,
        "tier": agent.tier.code,
        "location": agent.location.value,
        "manager": agent.manager,
        "raw_score": agent.raw_score,
        "leads_per_day": agent.leads_per_day,
        "close_rate": agent.close_rate,
        "annual_premium": agent.annual_premium,
        "place_rate": agent.place_rate,
        "email": agent.email,
        "wow_delta": agent.wow_delta,
        "prior_rank": agent.prior_rank,
        "current_rank": agent.current_rank,
        "recommendations": [t.value for t in agent.recommendations],
    }


def agent_from_dict(data: dict) -> Agent:
    return Agent(
        name=data["name"],
        tenure=data["tenure"],
        tier=Tier.from_code(data["tier"]),
        location=Location(data["location"]),
        manager=data["manager"],
        raw_score=data["raw_score"],
        leads_per_day=data.get("leads_per_day", 0.0),
        close_rate=data.get("close_rate"),
        annual_premium=data.get("annual_premium"),
        place_rate=data.get("place_rate"),
        email=data.get("email"),
        wow_delta=data.get("wow_delta", 0),
        prior_rank=data.get("prior_rank", 0),
        current_rank=data.get("current_rank", 0),
        recommendations=[TrainingType(v) for v in data.get("recommendations", [])],
    )


def _slot_to_dict(slot: TimeSlot) -> dict:
    return {
        "start": slot.start.strftime("%H:%M"),
        "end": slot.end.strftime("%H:%M"),
        "priority": slot.priority.value,
        "description": slot.description,
    }


def _slot_from_dict(data: dict) -> TimeSlot:
    return TimeSlot(
        start=time.fromisoformat(data["start"]),
        end=time.fromisoformat(data["end"]),
        priority=Priority(data["priority"]),
        description=data["description"],
    )


def schedule_to_dict(schedule: WeeklySchedule) -> dict:
    """Serialize a schedule; agents are referenced by name."""
    return {
        "days": [
            {
                "day": day.day,
                "focus": day.focus.value if day.focus else None,
                "sessions": [
                    {
                        "slot": _slot_to_dict(s.slot),
                        "location": s.location.value,
                        "tier": s.tier.value,
                        "agents": [a.name for a in s.agents],
                        "priority": s.priority,
                        "cohort_number": s.cohort_number,
                    }
                    for s in day.sessions
                ],
            }
            for day in schedule.days
        ]
    }


def schedule_from_dict(data: dict, agents_by_name: dict[str, Agent]) -> WeeklySchedule:
    """Rebuild a schedule, resolving attendee names against the agent list.

    Raises:
        ScheduleStoreError: If a session names an unknown agent.
    """
    days = []
    for day_data in data["days"]:
        sessions = []
        for s in day_data["sessions"]:
            try:
                attendees = [agents_by_name[name] for name in s["agents"]]
            except KeyError as e:
                raise ScheduleStoreError(
                    f"Session on {day_data['day']} references unknown agent {e.args[0]!r}"
                ) from e
            sessions.append(
                TrainingSession(
                    slot=_slot_from_dict(s["slot"]),
                    location=Location(s["location"]),
                    tier=Tier(s["tier"]),
                    agents=attendees,
                    priority=s.get("priority", ""),
                    cohort_number=s.get("cohort_number", 1),
                )
            )
        focus = day_data.get("focus")
        days.append(
            DaySchedule(
                day=day_data["day"],
                focus=TrainingType(focus) if focus else None,
                sessions=sessions,
            )
        )
    return WeeklySchedule(days=days)


def _metadata(stats: Optional[Stats]) -> dict:
    if stats is None:
        return {}
    return {
        "total_agents": stats.total_agents,
        "eligible_count": stats.eligible_count,
        "excluded_count": stats.excluded_count,
        "avg_raw_score": stats.avg_raw_score,
        "avg_adjusted_score": stats.avg_adjusted_score,
        "needs_training": stats.needs_training,
    }


def save_plan(
    path: Union[str, Path],
    schedule: WeeklySchedule,
    agents: list[Agent],
    stats: Optional[Stats] = None,
    week_of: Optional[str] = None,
) -> None:
    """Write a plan to a JSON file.

    Args:
        path: Destination file.
        schedule: Generated schedule.
        agents: Agent list the schedule was generated from.
        stats: Aggregate figures saved as metadata.
        week_of: Optional week label (e.g. "2024-01-15").
    """
    document = {
        "version": FORMAT_VERSION,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        "week_of": week_of,
        "metadata": _metadata(stats),
        "agents": [agent_to_dict(a) for a in agents],
        "schedule": schedule_to_dict(schedule),
    }
    Path(path).write_text(json.dumps(document, indent=2))


def load_plan(path: Union[str, Path]) -> tuple[WeeklySchedule, list[Agent]]:
    """Load a plan saved with ``save_plan``.

    Returns:
        Tuple of (schedule, agents).

    Raises:
        ScheduleStoreError: If the file is missing, not JSON, or inconsistent.
    """
    try:
        document = json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ScheduleStoreError(f"Unable to read saved plan {path}: {e}") from e

    if document.get("version") != FORMAT_VERSION:
        raise ScheduleStoreError(f"Unsupported plan version: {document.get('version')!r}")

    try:
        agents = [agent_from_dict(a) for a in document["agents"]]
        schedule = schedule_from_dict(
            document["schedule"], {a.name: a for a in agents}
        )
    except (KeyError, ValueError, TypeError) as e:
        raise ScheduleStoreError(f"Malformed saved plan {path}: {e}") from e

    return schedule, agents
