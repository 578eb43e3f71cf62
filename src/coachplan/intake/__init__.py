"""Performance report intake."""

from coachplan.intake.report_parser import ParseResult, parse_agent_row, parse_report

__all__ = [
    "ParseResult",
    "parse_agent_row",
    "parse_report",
]
