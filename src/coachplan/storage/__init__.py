"""Saved plan persistence."""

from coachplan.storage.json_store import load_plan, save_plan

__all__ = [
    "load_plan",
    "save_plan",
]
