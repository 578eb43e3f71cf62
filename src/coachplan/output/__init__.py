"""Output generation for schedules (PDF, CSV, e-mail, outage forecast)."""

from coachplan.output.forecast import outage_forecast, plan_notices
from coachplan.output.pdf_generator import PDFGenerator
from coachplan.output.text_export import email_text, export_csv, manager_schedule

__all__ = [
    "PDFGenerator",
    "email_text",
    "export_csv",
    "manager_schedule",
    "outage_forecast",
    "plan_notices",
]
