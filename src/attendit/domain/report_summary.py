"""
Report Summary Module

Builds the structured summary of a monthly report that presentation
layers (PDF, print) render.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from .date_range import month_name, validate_month
from .entities import MonthlyAttendance

REPORT_TYPE = "Monthly Attendance Report"
GENERATED_BY = "AttendIt System"

SUMMARY_HEADERS = [
    'Employee Name', 'Department', 'Total Days', 'Present Days', 'Absent Days', 'Attendance Rate'
]


def format_percentage(value: float) -> str:
    """Format a percentage with one decimal and a percent sign."""
    return f"{value:.1f}%"


@dataclass
class SummaryCounters:
    """
    Roll-up counters for a report.

    Attributes:
        total_employees: Number of rows in the report
        average_attendance: Mean attendance percentage, 0.0 when empty
        high_performers: Employees at or above the high threshold
        low_performers: Employees below the low threshold
    """
    total_employees: int = 0
    average_attendance: float = 0.0
    high_performers: int = 0
    low_performers: int = 0

    @property
    def average_attendance_text(self) -> str:
        return format_percentage(self.average_attendance)


@dataclass
class ReportMetadata:
    report_type: str
    period: str
    generated_by: str
    timestamp: str


@dataclass
class ReportSummary:
    """Structured report payload without the daily breakdown."""
    title: str
    subtitle: str
    headers: List[str]
    rows: List[List[str]]
    summary: SummaryCounters
    metadata: ReportMetadata
    records: List[MonthlyAttendance] = field(default_factory=list)
    high_threshold: float = 90
    low_threshold: float = 70


def build_report_summary(
    monthly_data: Sequence[MonthlyAttendance],
    year: int,
    month: int,
    generated_at: Optional[datetime] = None,
    high_threshold: float = 90,
    low_threshold: float = 70
) -> ReportSummary:
    """
    Build the structured summary for a month.

    Args:
        monthly_data: Aggregation output, already ordered
        year: Report year
        month: Report month (1-12)
        generated_at: Generation time; defaults to now
        high_threshold: Percentage counted as a high performer
        low_threshold: Percentage below which an employee is a low performer

    Returns:
        ReportSummary with rows in input order
    """
    validate_month(year, month)
    generated_at = generated_at or datetime.now()
    period = f"{month_name(month)} {year}"

    rows = [
        [
            m.employee_name,
            m.department,
            str(m.total_days),
            str(m.present_days),
            str(m.absent_days),
            format_percentage(m.attendance_percentage),
        ]
        for m in monthly_data
    ]

    count = len(monthly_data)
    average = (
        sum(m.attendance_percentage for m in monthly_data) / count
        if count else 0.0
    )

    counters = SummaryCounters(
        total_employees=count,
        average_attendance=average,
        high_performers=sum(1 for m in monthly_data if m.attendance_percentage >= high_threshold),
        low_performers=sum(1 for m in monthly_data if m.attendance_percentage < low_threshold),
    )

    return ReportSummary(
        title=f"Attendance Report - {period}",
        subtitle=f"Generated on {generated_at:%Y-%m-%d}",
        headers=list(SUMMARY_HEADERS),
        rows=rows,
        summary=counters,
        metadata=ReportMetadata(
            report_type=REPORT_TYPE,
            period=period,
            generated_by=GENERATED_BY,
            timestamp=generated_at.isoformat(),
        ),
        records=list(monthly_data),
        high_threshold=high_threshold,
        low_threshold=low_threshold,
    )
