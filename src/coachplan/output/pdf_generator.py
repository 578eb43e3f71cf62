"""PDF generation for schedule output.

This module creates printable PDF schedules showing:
- One section per training day with each session's local time and attendees
- Location-coloured session headers
- A weekly summary page with the phone outage forecast
"""

from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from coachplan.domain.models import Location, TrainingSession, WeeklySchedule
from coachplan.output.forecast import OutageForecast, format_outage_table, outage_forecast

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    Location.CLT: (0.4, 0.4, 0.8),  # Blue
    Location.ATX: (0.8, 0.6, 0.2),  # Orange
    "row_alt": (0.95, 0.95, 0.95),  # Light gray
}


class PDFGenerator:
    """Generates printable PDF coaching schedules.

    Each page lists sessions for one training day; long days continue on
    the next page. A summary page closes the document.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(schedule, "schedule.pdf", week_of=date(2024, 1, 15))
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
        line_height: float = 14,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.line_height = line_height

    def generate(
        self,
        schedule: WeeklySchedule,
        output_path: Union[str, Path],
        week_of: Optional[date] = None,
        include_summary: bool = True,
    ) -> None:
        """Generate PDF schedule and save to file.

        Args:
            schedule: The weekly schedule to render.
            output_path: Path to save the PDF.
            week_of: Week shown in page headers; defaults to today.
            include_summary: Whether to include the summary page.
        """
        try:
            from reportlab.lib.pagesizes import letter, landscape
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        self._draw_document(c, schedule, week_of or date.today(), include_summary)
        c.save()

    def generate_to_buffer(
        self,
        schedule: WeeklySchedule,
        week_of: Optional[date] = None,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate PDF and return as bytes buffer.

        Args:
            schedule: The weekly schedule to render.
            week_of: Week shown in page headers; defaults to today.
            include_summary: Whether to include the summary page.

        Returns:
            BytesIO buffer containing PDF data.
        """
        try:
            from reportlab.lib.pagesizes import letter, landscape
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        self._draw_document(c, schedule, week_of or date.today(), include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw_document(
        self,
        c,
        schedule: WeeklySchedule,
        week_of: date,
        include_summary: bool,
    ) -> None:
        pages = self._paginate(schedule)
        total_pages = len(pages) + (1 if include_summary else 0)

        for page_num, (day_label, sessions) in enumerate(pages, start=1):
            self._draw_header(c, day_label, week_of)
            y = self.page_height - self.margin - 60
            if not sessions:
                c.setFont("Helvetica-Oblique", 10)
                c.drawString(self.margin, y, "No sessions scheduled.")
            for session in sessions:
                y = self._draw_session(c, session, y)
            self._draw_page_number(c, page_num, total_pages)
            c.showPage()

        if include_summary:
            self._draw_summary_page(c, schedule, week_of)
            self._draw_page_number(c, total_pages, total_pages)
            c.showPage()

    def _session_height(self, session: TrainingSession) -> float:
        # Header line, priority line, one line per agent, spacing.
        return (3 + session.size) * self.line_height

    def _paginate(
        self, schedule: WeeklySchedule
    ) -> list[tuple[str, list[TrainingSession]]]:
        """Split each day's sessions into pages that fit vertically."""
        usable = self.page_height - 2 * self.margin - 60 - 20
        pages: list[tuple[str, list[TrainingSession]]] = []

        for day in schedule.days:
            title = day.day if day.focus is None else f"{day.day} - {day.focus.value}"
            current: list[TrainingSession] = []
            used = 0.0
            for session in day.sessions:
                height = self._session_height(session)
                if current and used + height > usable:
                    pages.append((title, current))
                    current, used = [], 0.0
                    title = f"{day.day} (continued)"
                current.append(session)
                used += height
            pages.append((title, current))

        return pages

    def _draw_header(self, c, day_label: str, week_of: date) -> None:
        """Draw page header with week and day."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Coaching Schedule - Week of {week_of.strftime('%B %d, %Y')}",
        )

        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, self.page_height - self.margin - 38, day_label)

    def _draw_session(self, c, session: TrainingSession, y: float) -> float:
        """Draw one session block and return the next free y position."""
        width = self.page_width - 2 * self.margin

        c.setFillColorRGB(*COLORS[session.location])
        c.rect(self.margin, y - 4, width, self.line_height, fill=1, stroke=0)
        c.setFillColorRGB(1, 1, 1)
        c.setFont("Helvetica-Bold", 10)
        c.drawString(
            self.margin + 6,
            y,
            f"{session.local_time}  |  {session.location.value}  |  "
            f"{session.tier.value} Tier  |  Cohort {session.cohort_number}",
        )
        c.drawRightString(self.margin + width - 6, y, session.time)
        y -= self.line_height

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Oblique", 9)
        c.drawString(self.margin + 12, y, session.priority)
        y -= self.line_height

        c.setFont("Helvetica", 9)
        for i, agent in enumerate(session.agents):
            if i % 2:
                c.setFillColorRGB(*COLORS["row_alt"])
                c.rect(self.margin, y - 4, width, self.line_height, fill=1, stroke=0)
                c.setFillColorRGB(0, 0, 0)
            c.drawString(self.margin + 12, y, agent.name[:40])
            c.drawString(self.margin + 260, y, f"Manager: {agent.manager}"[:40])
            c.drawString(self.margin + 480, y, f"Adjusted score: {agent.adjusted_score:.1f}")
            y -= self.line_height

        return y - self.line_height

    def _draw_page_number(self, c, page_num: int, total_pages: int) -> None:
        c.setFont("Helvetica", 9)
        c.drawCentredString(
            self.page_width / 2,
            self.margin - 10,
            f"Page {page_num} of {total_pages}",
        )

    def _draw_summary_page(self, c, schedule: WeeklySchedule, week_of: date) -> None:
        """Draw summary page with weekly totals."""
        self._draw_header(c, "Weekly Summary", week_of)
        summary = schedule.get_weekly_summary()

        y = self.page_height - self.margin - 70
        c.setFont("Helvetica", 10)
        stats = [
            f"Total Sessions: {summary['total_sessions']}",
            f"CLT Sessions: {summary['clt_sessions']}",
            f"ATX Sessions: {summary['atx_sessions']}",
            f"Agents Scheduled: {summary['total_agents_scheduled']}",
            f"Weekly Capacity: {summary['weekly_capacity']}",
        ]
        for stat in stats:
            c.drawString(self.margin + 20, y, stat)
            y -= 15

        y -= 15
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Sessions by Day")
        y -= 18

        c.setFont("Helvetica", 10)
        for day in schedule.days:
            counts = {loc: len(day.sessions_at(loc)) for loc in Location}
            attendees = sum(s.size for s in day.sessions)
            c.drawString(
                self.margin + 20,
                y,
                f"{day.day}: {len(day.sessions)} sessions "
                f"(CLT {counts[Location.CLT]}, ATX {counts[Location.ATX]}), "
                f"{attendees} attendees",
            )
            y -= 15

        self._draw_outage_forecast(c, outage_forecast(schedule))

    def _draw_outage_forecast(self, c, forecast: OutageForecast) -> None:
        """Draw phone outage totals and hourly rows in the right column."""
        x = self.page_width / 2
        y = self.page_height - self.margin - 70

        c.setFont("Helvetica-Bold", 12)
        c.drawString(x, y, "Phone Outage Forecast")
        y -= 18

        c.setFont("Helvetica", 10)
        for line in forecast.summary_lines():
            c.drawString(x + 20, y, line)
            y -= 15

        y -= 6
        c.setFont("Courier", 7)
        for i, line in enumerate(format_outage_table(forecast)):
            if y < self.margin + 20:
                c.drawString(x + 20, y, "...")
                break
            if i % 2 == 1:
                c.setFillColorRGB(*COLORS["row_alt"])
                c.rect(x + 18, y - 2, self.page_width / 2 - self.margin - 18, 9, fill=1, stroke=0)
                c.setFillColorRGB(0, 0, 0)
            c.drawString(x + 20, y, line)
            y -= 10
