"""Performance report loading.

Reads the weekly tab-separated performance report into Agent records.
The first row is a banner and the second holds column headers; agent
rows start on the third line.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Optional, Union

import pandas as pd
import structlog

from coachplan.domain.models import MIN_TENURE_YEARS, Agent, Location, Tier
from coachplan.exceptions import ReportFormatError

log = structlog.get_logger(__name__)

# Wide enough for the report's ~40 columns; longer rows keep their leading fields.
REPORT_MAX_COLUMNS = 64
MIN_ROW_COLUMNS = 10

COL_TENURE = 0
COL_TIER = 1
COL_SITE = 2
COL_MANAGER = 3
COL_WOW_DELTA = 5
COL_PRIOR_RANK = 6
COL_CURRENT_RANK = 7
COL_NAME = 8
COL_SCORE = 9
COL_LEADS_PER_DAY = 10
COL_CLOSE_RATE = 11
COL_ANNUAL_PREMIUM = 12
COL_PLACE_RATE = 13
COL_EMAIL = 39

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


@dataclass
class ParseResult:
    """Outcome of reading a performance report.

    Attributes:
        agents: Agents that passed validation and the tenure filter.
        total_rows: Agent rows in the file.
        valid_rows: Rows turned into agents.
        invalid_rows: Rows rejected as malformed.
        excluded_by_tenure: Valid rows dropped for tenure <= 1.9 years.
        errors: One message per rejected row.
    """

    agents: list[Agent] = field(default_factory=list)
    total_rows: int = 0
    valid_rows: int = 0
    invalid_rows: int = 0
    excluded_by_tenure: int = 0
    errors: list[str] = field(default_factory=list)


def _clean_number(raw: str) -> Optional[float]:
    """Strip %, $ and separators; None for empty or unparseable cells."""
    cleaned = _NON_NUMERIC.sub("", raw)
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def _safe_int(raw: str, default: int = 0) -> int:
    value = _clean_number(raw)
    return int(value) if value is not None else default


def _row_width(row: list[str]) -> int:
    """Number of fields up to the last non-empty cell."""
    width = len(row)
    while width and not row[width - 1]:
        width -= 1
    return width


def parse_agent_row(row: list[str], row_number: int) -> Agent:
    """Build an Agent from one report row.

    Raises:
        ValueError: If the row is malformed.
    """
    if _row_width(row) < MIN_ROW_COLUMNS:
        raise ValueError(
            f"Row {row_number}: Insufficient columns "
            f"(expected at least {MIN_ROW_COLUMNS}, got {_row_width(row)})"
        )

    tenure = _clean_number(row[COL_TENURE])
    if tenure is None:
        raise ValueError(f"Row {row_number}: Invalid tenure value")

    try:
        tier = Tier.from_code(row[COL_TIER])
        location = Location.from_site(row[COL_SITE])
    except ValueError as e:
        raise ValueError(f"Row {row_number}: {e}") from e

    name = row[COL_NAME]
    if not name:
        raise ValueError(f"Row {row_number}: Missing agent name")

    email = row[COL_EMAIL] if len(row) > COL_EMAIL else ""

    return Agent(
        name=name,
        tenure=tenure,
        tier=tier,
        location=location,
        manager=row[COL_MANAGER],
        raw_score=_safe_int(row[COL_SCORE]),
        leads_per_day=_clean_number(row[COL_LEADS_PER_DAY]) or 0.0,
        close_rate=_clean_number(row[COL_CLOSE_RATE]) or 0.0,
        annual_premium=_clean_number(row[COL_ANNUAL_PREMIUM]) or 0.0,
        place_rate=_clean_number(row[COL_PLACE_RATE]) or 0.0,
        email=email or None,
        wow_delta=_safe_int(row[COL_WOW_DELTA]),
        prior_rank=_safe_int(row[COL_PRIOR_RANK]),
        current_rank=_safe_int(row[COL_CURRENT_RANK]),
    )


def read_report_frame(source: Union[str, Path, IO[str]]) -> pd.DataFrame:
    """Read the raw report as a frame of stripped strings.

    Raises:
        ReportFormatError: If the file is missing or not tab-separated text.
    """
    truncated: list[int] = []

    def keep_leading_fields(bad_line: list[str]) -> list[str]:
        truncated.append(len(bad_line))
        return bad_line[:REPORT_MAX_COLUMNS]

    try:
        df = pd.read_csv(
            source,
            sep="\t",
            header=None,
            names=list(range(REPORT_MAX_COLUMNS)),
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=keep_leading_fields,
        )
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ReportFormatError(f"Unable to read report: {e}") from e
    if truncated:
        log.warning(
            "report_rows_truncated",
            rows=len(truncated),
            max_fields=max(truncated),
            kept_fields=REPORT_MAX_COLUMNS,
        )
    df = df.fillna("")
    return df.apply(lambda col: col.str.strip())


def parse_report(source: Union[str, Path, IO[str], pd.DataFrame]) -> ParseResult:
    """Load agents from a performance report.

    Args:
        source: Path or text buffer of the tab-separated report, or a
            frame already read with ``read_report_frame``.

    Returns:
        ParseResult with agents and row counts.

    Raises:
        ReportFormatError: If the file has fewer than three rows.
    """
    if isinstance(source, pd.DataFrame):
        df = source
    else:
        df = read_report_frame(source)

    if len(df) < 3:
        raise ReportFormatError("File must contain at least 3 rows (header + 2 data rows)")

    result = ParseResult()
    data = df.iloc[2:]
    result.total_rows = len(data)

    for offset, values in enumerate(data.itertuples(index=False, name=None)):
        row_number = offset + 3
        try:
            agent = parse_agent_row(list(values), row_number)
        except ValueError as e:
            result.invalid_rows += 1
            result.errors.append(str(e))
            log.warning("report_row_rejected", row=row_number, reason=str(e))
            continue

        if agent.tenure <= MIN_TENURE_YEARS:
            result.excluded_by_tenure += 1
            continue

        result.agents.append(agent)
        result.valid_rows += 1

    log.info(
        "report_parsed",
        total_rows=result.total_rows,
        valid_rows=result.valid_rows,
        invalid_rows=result.invalid_rows,
        excluded_by_tenure=result.excluded_by_tenure,
    )
    return result
