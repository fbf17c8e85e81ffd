"""
Excel Writer Module

Generates formatted Excel attendance reports with styling.
Applies color formatting based on attendance status and rate tier.
"""

from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from attendit.config.config_manager import ColorLogic
from attendit.domain.date_range import month_dates, parse_date
from attendit.domain.entities import AttendanceStatus, MonthlyAttendance, RateTier
from attendit.infrastructure.logger import get_logger

logger = get_logger("ExcelWriter")

SUMMARY_SHEET = "Attendance Report"
DAILY_SHEET = "Daily Breakdown"

SUMMARY_HEADERS = [
    'Employee Name', 'Department', 'Total Days', 'Present Days', 'Absent Days', 'Attendance %'
]


class ExcelWriter:
    """
    Generates formatted Excel attendance reports.

    Output format:
    - "Attendance Report" sheet: one summary row per employee
    - "Daily Breakdown" sheet: name column plus one P/A column per day

    Styling:
    - Rate cell colored by RateTier
    - Daily cells colored present/absent per color_logic
    - Weekend headers shaded gray
    """

    COLORS = {
        'green': PatternFill(start_color='90EE90', end_color='90EE90', fill_type='solid'),
        'red': PatternFill(start_color='FF6B6B', end_color='FF6B6B', fill_type='solid'),
        'yellow': PatternFill(start_color='FFD700', end_color='FFD700', fill_type='solid'),
        'orange': PatternFill(start_color='FFA500', end_color='FFA500', fill_type='solid'),
        'blue': PatternFill(start_color='6B8CFF', end_color='6B8CFF', fill_type='solid'),
        'purple': PatternFill(start_color='DDA0DD', end_color='DDA0DD', fill_type='solid'),
        'pink': PatternFill(start_color='FFB6C1', end_color='FFB6C1', fill_type='solid'),
        'black': PatternFill(start_color='333333', end_color='333333', fill_type='solid'),
        'gray': PatternFill(start_color='D3D3D3', end_color='D3D3D3', fill_type='solid'),
        'header': PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid'),
    }

    HEX_TO_NAME = {
        '#90EE90': 'green', '#90ee90': 'green',
        '#FF6B6B': 'red', '#ff6b6b': 'red',
        '#FFD700': 'yellow', '#ffd700': 'yellow',
        '#FFA500': 'orange', '#ffa500': 'orange',
        '#6B8CFF': 'blue', '#6b8cff': 'blue',
        '#DDA0DD': 'purple', '#dda0dd': 'purple',
        '#FFB6C1': 'pink', '#ffb6c1': 'pink',
        '#333333': 'black',
        '#D3D3D3': 'gray', '#d3d3d3': 'gray',
    }

    BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    WEEKDAY_LABELS = ['Mo', 'Tu', 'We', 'Th', 'Fr', 'Sa', 'Su']

    def __init__(self, color_logic: Optional[ColorLogic] = None):
        self.color_logic = color_logic or ColorLogic()
        self.wb: Optional[Workbook] = None

    def _get_fill(self, color_value: str) -> Optional[PatternFill]:
        """Get PatternFill from color value (name or hex code).

        Returns:
            PatternFill object or None if color is invalid/none/transparent
        """
        if not color_value or color_value in ('none', 'transparent'):
            return None

        if color_value in self.COLORS:
            return self.COLORS[color_value]

        if color_value in self.HEX_TO_NAME:
            return self.COLORS[self.HEX_TO_NAME[color_value]]

        return None

    def _is_dark_color(self, color_value: str) -> bool:
        """Check if color is dark (needs white text)."""
        if color_value in ('black', 'blue', 'purple'):
            return True
        if color_value in self.HEX_TO_NAME:
            return self.HEX_TO_NAME[color_value] in ('black', 'blue', 'purple')
        return False

    def _rate_color(self, tier: RateTier) -> str:
        if tier == RateTier.HIGH:
            return self.color_logic.high_rate_color
        elif tier == RateTier.MEDIUM:
            return self.color_logic.medium_rate_color
        else:
            return self.color_logic.low_rate_color

    def _style_header(self, cell) -> None:
        cell.font = Font(bold=True, color='FFFFFF')
        cell.fill = self.COLORS['header']
        cell.alignment = Alignment(horizontal='center', vertical='center')
        cell.border = self.BORDER

    def _apply_color(self, cell, color_value: str) -> None:
        fill = self._get_fill(color_value)
        if fill:
            cell.fill = fill
            if self._is_dark_color(color_value):
                cell.font = Font(color='FFFFFF')

    def create_report(
        self,
        monthly_data: Sequence[MonthlyAttendance],
        year: int,
        month: int,
        output_path: Path
    ) -> Path:
        """
        Create a complete attendance workbook.

        Args:
            monthly_data: Aggregation output, rows written in this order
            year: Report year
            month: Report month
            output_path: Path to save the Excel file

        Returns:
            Path to the created file
        """
        self.wb = Workbook()

        summary_ws = self.wb.active
        summary_ws.title = SUMMARY_SHEET
        self._write_summary_sheet(summary_ws, monthly_data)

        daily_ws = self.wb.create_sheet(DAILY_SHEET)
        self._write_daily_sheet(daily_ws, monthly_data, year, month)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(output_path)
        logger.info(f"Excel report saved: {output_path}")
        return output_path

    def _write_summary_sheet(self, ws, monthly_data: Sequence[MonthlyAttendance]) -> None:
        """Write one summary row per employee."""
        for col, header in enumerate(SUMMARY_HEADERS, start=1):
            cell = ws.cell(1, col, header)
            self._style_header(cell)

        for row, monthly in enumerate(monthly_data, start=2):
            values = [
                monthly.employee_name,
                monthly.department,
                monthly.total_days,
                monthly.present_days,
                monthly.absent_days,
                monthly.attendance_percentage,
            ]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(row, col, value)
                cell.border = self.BORDER
                if col > 2:
                    cell.alignment = Alignment(horizontal='center')

            rate_cell = ws.cell(row, len(values))
            rate_cell.number_format = '0.00"%"'
            self._apply_color(rate_cell, self._rate_color(monthly.rate_tier))

        ws.column_dimensions['A'].width = 24
        ws.column_dimensions['B'].width = 18
        for col in range(3, len(SUMMARY_HEADERS) + 1):
            ws.column_dimensions[get_column_letter(col)].width = 14
        ws.freeze_panes = 'A2'

    def _write_daily_sheet(
        self,
        ws,
        monthly_data: Sequence[MonthlyAttendance],
        year: int,
        month: int
    ) -> None:
        """Write the day-by-day grid (P = present, A = absent)."""
        dates = month_dates(year, month)

        self._style_header(ws.cell(1, 1, "Employee Name"))
        for col, iso_date in enumerate(dates, start=2):
            d: date = parse_date(iso_date)
            cell = ws.cell(1, col, f"{d.day}\n{self.WEEKDAY_LABELS[d.weekday()]}")
            self._style_header(cell)
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            if d.weekday() >= 5:
                cell.fill = self.COLORS['gray']
                cell.font = Font(bold=True)

        for row, monthly in enumerate(monthly_data, start=2):
            name_cell = ws.cell(row, 1, monthly.employee_name)
            name_cell.font = Font(bold=True)
            name_cell.border = self.BORDER

            for col, iso_date in enumerate(dates, start=2):
                status = monthly.status_on(iso_date)
                is_present = status == AttendanceStatus.PRESENT
                cell = ws.cell(row, col, "P" if is_present else "A")
                cell.alignment = Alignment(horizontal='center')
                cell.border = self.BORDER
                self._apply_color(
                    cell,
                    self.color_logic.present_color if is_present else self.color_logic.absent_color
                )

        ws.column_dimensions['A'].width = 24
        for col in range(2, len(dates) + 2):
            ws.column_dimensions[get_column_letter(col)].width = 5
        ws.row_dimensions[1].height = 30
        ws.freeze_panes = 'B2'
