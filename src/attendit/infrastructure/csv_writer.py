"""
CSV Writer Module

Serializes monthly attendance into the CSV export format.

Format:
- Header: summary columns followed by one "Day N" column per day
- One row per employee, in input order
- Comma separated, "\\n" line endings, trailing newline
"""

from pathlib import Path
from typing import List, Sequence

from attendit.domain.date_range import days_in_month, month_dates
from attendit.domain.entities import MonthlyAttendance
from attendit.domain.report_summary import format_percentage
from attendit.infrastructure.logger import get_logger

logger = get_logger("CsvWriter")

SUMMARY_COLUMNS = [
    'Employee Name', 'Department', 'Total Days', 'Present Days', 'Absent Days', 'Attendance %'
]


def _quote(value: str) -> str:
    """Wrap a value in double quotes, doubling embedded quotes."""
    return '"' + value.replace('"', '""') + '"'


class CsvWriter:
    """Generates CSV attendance reports."""

    DELIMITER = ','
    LINE_END = '\n'

    def build_header(self, year: int, month: int) -> List[str]:
        """Header cells for a month."""
        headers = list(SUMMARY_COLUMNS)
        for day in range(1, days_in_month(year, month) + 1):
            headers.append(f"Day {day}")
        return headers

    def build_row(self, monthly: MonthlyAttendance, dates: Sequence[str]) -> List[str]:
        """Cells for one employee."""
        row = [
            _quote(monthly.employee_name),
            _quote(monthly.department),
            str(monthly.total_days),
            str(monthly.present_days),
            str(monthly.absent_days),
            format_percentage(monthly.attendance_percentage),
        ]
        for iso_date in dates:
            row.append(monthly.status_on(iso_date).label)
        return row

    def generate(
        self,
        monthly_data: Sequence[MonthlyAttendance],
        year: int,
        month: int
    ) -> str:
        """
        Render monthly data as CSV text.

        Args:
            monthly_data: Aggregation output, rows written in this order
            year: Report year
            month: Report month (1-12)

        Returns:
            CSV text
        """
        dates = month_dates(year, month)
        lines = [self.DELIMITER.join(self.build_header(year, month))]
        for monthly in monthly_data:
            lines.append(self.DELIMITER.join(self.build_row(monthly, dates)))
        return self.LINE_END.join(lines) + self.LINE_END

    def write(
        self,
        monthly_data: Sequence[MonthlyAttendance],
        year: int,
        month: int,
        output_path: Path
    ) -> Path:
        """Write the CSV text to a UTF-8 file and return its path."""
        content = self.generate(monthly_data, year, month)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        # newline='' keeps the "\n" terminator on every platform
        with open(output_path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        logger.info(f"CSV report saved: {output_path} ({len(monthly_data)} rows)")
        return output_path


def to_csv(monthly_data: Sequence[MonthlyAttendance], year: int, month: int) -> str:
    """Render monthly data as CSV text."""
    return CsvWriter().generate(monthly_data, year, month)
