"""Exceptions raised at the edges of the planner (intake and storage).

The scheduling core never raises for business data; infeasible weeks
are reported through results and log events instead.
"""


class CoachPlanError(Exception):
    """Base class for planner errors."""


class ReportFormatError(CoachPlanError):
    """The performance report cannot be read as a whole."""


class ScheduleStoreError(CoachPlanError):
    """A saved plan is missing, unreadable, or inconsistent."""
