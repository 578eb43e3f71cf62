"""Command-line interface for the coaching planner."""

import argparse
import sys
from datetime import date
from typing import Optional

from coachplan.domain.models import Agent, Location, Tier, WeeklySchedule
from coachplan.exceptions import CoachPlanError
from coachplan.intake.report_parser import parse_report
from coachplan.logging_setup import configure_logging, get_logger
from coachplan.output.forecast import format_outage_table, outage_forecast, plan_notices
from coachplan.output.pdf_generator import PDFGenerator
from coachplan.output.text_export import (
    email_text,
    export_csv,
    filter_schedule,
    manager_schedule,
)
from coachplan.scheduling.planner import TrainingPlan, TrainingPlanner
from coachplan.storage.json_store import load_plan, save_plan
from coachplan.validation.validator import ScheduleValidator, ValidationResult

log = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_SCHEDULE = 2


def create_sample_agents(count: int = 24) -> list[Agent]:
    """Create deterministic sample agents for demos and testing.

    Agents alternate between locations, roughly a third are Performance
    tier, and four managers share each location.

    Args:
        count: Number of agents to create.
    """
    names = [
        "Alice", "Bob", "Carol", "David", "Eve", "Frank", "Grace", "Henry",
        "Ivy", "Jack", "Kate", "Leo", "Mia", "Noah", "Olivia", "Paul",
        "Quinn", "Rose", "Sam", "Tina", "Uma", "Victor", "Wendy", "Xavier",
        "Yara", "Zach", "Amy", "Ben", "Chloe", "Dan", "Emma", "Finn",
    ]

    agents = []
    for i in range(count):
        name = names[i % len(names)]
        if i >= len(names):
            name = f"{name}{i // len(names) + 1}"

        location = Location.CLT if i % 2 == 0 else Location.ATX
        agents.append(
            Agent(
                name=name,
                tenure=2.0 + (i % 5) * 0.8,
                tier=Tier.PERFORMANCE if i % 3 == 0 else Tier.STANDARD,
                location=location,
                manager=f"{location.value} Manager {'ABCD'[(i // 2) % 4]}",
                raw_score=40 + (i * 37) % 60,
                leads_per_day=4.0 + (i * 3) % 5,
                close_rate=15.0 + (i * 7) % 20,
                annual_premium=800.0 + (i * 131) % 900,
                place_rate=50.0 + (i * 11) % 40,
                current_rank=i + 1,
                prior_rank=i + 1,
            )
        )

    return agents


def print_plan(plan: TrainingPlan, schedule: Optional[WeeklySchedule] = None) -> None:
    """Print stats, the week's sessions, and validation to stdout."""
    schedule = schedule or plan.schedule
    stats = plan.stats

    print(f"\n{'=' * 60}")
    print("Coaching Plan")
    print(f"{'=' * 60}")
    print(f"  Agents: {stats.total_agents} eligible, {stats.excluded_count} excluded by tenure")
    print(f"  Avg Raw Score: {stats.avg_raw_score:.1f}")
    print(f"  Avg Adjusted Score: {stats.avg_adjusted_score:.1f}")
    print(f"  Below Average: {stats.needs_training}")

    summary = schedule.get_weekly_summary()
    print(
        f"  Sessions: {summary['total_sessions']} "
        f"(CLT {summary['clt_sessions']}, ATX {summary['atx_sessions']})"
    )
    print(f"  Agents Scheduled: {summary['total_agents_scheduled']}")

    for notice in plan_notices(stats, schedule):
        print(f"  Note: {notice}")

    for day in schedule.days:
        focus = day.focus.value if day.focus else "Overflow"
        print(f"\n{day.day} ({focus}):")
        if not day.sessions:
            print("  (no sessions)")
        for session in day.sessions:
            names = ", ".join(a.name for a in session.agents)
            print(
                f"  {session.local_time:<24} {session.location.value} "
                f"{session.tier.value:<12} {names}"
            )

    if plan.result.unscheduled:
        print("\nUnscheduled:")
        for day, names in plan.result.unscheduled.items():
            print(f"  {day}: {', '.join(names)}")

    print_outage_forecast(schedule)
    print_validation(plan.validation)


def print_outage_forecast(schedule: WeeklySchedule) -> None:
    forecast = outage_forecast(schedule)
    if not forecast.rows:
        return

    print("\nPhone Outage Forecast:")
    for line in forecast.summary_lines():
        print(f"  {line}")
    print()
    for line in format_outage_table(forecast):
        print(f"  {line}")


def print_validation(result: ValidationResult) -> None:
    if result.is_valid:
        print("\nValidation: PASSED")
    else:
        print(f"\nValidation: FAILED ({len(result.errors)} errors)")
        for error in result.errors[:5]:
            print(f"    - {error}")
        if len(result.errors) > 5:
            print(f"    ... and {len(result.errors) - 5} more errors")

    if result.warnings:
        print(f"\nWarnings ({len(result.warnings)}):")
        for warning in result.warnings[:3]:
            print(f"    - {warning}")
        if len(result.warnings) > 3:
            print(f"    ... and {len(result.warnings) - 3} more warnings")


def run_plan(args: argparse.Namespace) -> int:
    """Plan a week from a performance report and write the requested outputs."""
    parsed = parse_report(args.report)
    print(
        f"Read {parsed.total_rows} rows: {parsed.valid_rows} agents, "
        f"{parsed.invalid_rows} invalid, {parsed.excluded_by_tenure} excluded by tenure"
    )
    for error in parsed.errors[:5]:
        print(f"    - {error}")

    plan = TrainingPlanner().plan(parsed.agents, excluded_by_tenure=parsed.excluded_by_tenure)

    location = Location(args.location) if args.location else None
    tier = Tier(args.tier) if args.tier else None
    schedule = filter_schedule(plan.schedule, location, tier)
    if args.manager:
        schedule = manager_schedule(schedule, args.manager)

    print_plan(plan, schedule)
    _write_outputs(args, plan, schedule)

    return EXIT_OK if plan.validation.is_valid else EXIT_INVALID_SCHEDULE


def run_demo(args: argparse.Namespace) -> int:
    """Plan a week for generated sample agents."""
    print(f"Generating demo coaching plan for {args.count} agents...")
    plan = TrainingPlanner().plan(create_sample_agents(args.count))
    print_plan(plan)
    _write_outputs(args, plan, plan.schedule)
    return EXIT_OK if plan.validation.is_valid else EXIT_INVALID_SCHEDULE


def run_validate(args: argparse.Namespace) -> int:
    """Re-validate a saved plan."""
    schedule, agents = load_plan(args.saved)
    summary = schedule.get_weekly_summary()
    print(f"Loaded {summary['total_sessions']} sessions for {len(agents)} agents")

    result = ScheduleValidator().validate(schedule)
    print_validation(result)
    return EXIT_OK if result.is_valid else EXIT_INVALID_SCHEDULE


def _write_outputs(
    args: argparse.Namespace,
    plan: TrainingPlan,
    schedule: WeeklySchedule,
) -> None:
    week_of = getattr(args, "week_of", None) or date.today()

    if getattr(args, "csv", None):
        df = export_csv(schedule, args.csv)
        print(f"\nCSV written: {args.csv} ({len(df)} rows)")

    if getattr(args, "pdf", None):
        print(f"\nGenerating PDF: {args.pdf}")
        PDFGenerator().generate(schedule, args.pdf, week_of=week_of)
        print("  PDF created successfully!")

    if getattr(args, "save", None):
        save_plan(
            args.save,
            plan.schedule,
            plan.agents,
            stats=plan.stats,
            week_of=week_of.isoformat(),
        )
        print(f"\nPlan saved: {args.save}")

    if getattr(args, "email", False):
        print()
        print(email_text(schedule, week_of))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coachplan",
        description="Coaching Planner - Weekly Training Session Scheduler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s plan report.tsv                     Plan a week from a report
  %(prog)s plan report.tsv --pdf week.pdf      Also write a printable PDF
  %(prog)s plan report.tsv --location CLT --csv clt.csv
  %(prog)s plan report.tsv --save plan.json    Save the plan for later

  %(prog)s demo                                Run demo with 24 sample agents
  %(prog)s demo --count 40 --pdf demo.pdf      Larger demo with PDF output

  %(prog)s validate plan.json                  Re-check a saved plan
        """,
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON lines on stderr",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Minimum log level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Plan command
    plan_parser = subparsers.add_parser("plan", help="Plan a week from a performance report")
    plan_parser.add_argument("report", type=str, help="Tab-separated performance report")
    plan_parser.add_argument(
        "--location", "-l",
        type=str,
        choices=[loc.value for loc in Location],
        help="Only show and export sessions at this location",
    )
    plan_parser.add_argument(
        "--tier", "-t",
        type=str,
        choices=[Tier.PERFORMANCE.value, Tier.STANDARD.value],
        help="Only show and export sessions of this tier",
    )
    plan_parser.add_argument(
        "--manager", "-m",
        type=str,
        help="Only show and export sessions with this manager's agents",
    )
    _add_output_arguments(plan_parser)
    plan_parser.add_argument("--csv", type=str, help="Output CSV file path")
    plan_parser.add_argument("--save", type=str, help="Save the plan as JSON")
    plan_parser.add_argument(
        "--email",
        action="store_true",
        help="Print the team e-mail after the schedule",
    )

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Run demo with sample agents")
    demo_parser.add_argument(
        "--count", "-c",
        type=int,
        default=24,
        help="Number of agents to generate (default: 24)",
    )
    _add_output_arguments(demo_parser)

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a saved plan")
    validate_parser.add_argument("saved", type=str, help="Plan JSON written by --save")

    return parser


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--pdf", "-o", type=str, help="Output PDF file path")
    parser.add_argument(
        "--week-of",
        type=date.fromisoformat,
        help="Week start shown on outputs, YYYY-MM-DD (default: today)",
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(json_output=args.log_json, level=args.log_level)

    commands = {
        "plan": run_plan,
        "demo": run_demo,
        "validate": run_validate,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return EXIT_ERROR

    try:
        return command(args)
    except CoachPlanError as e:
        log.error("command_failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
