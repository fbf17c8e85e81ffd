"""
Aggregation Module

Turns sparse daily attendance records into per-employee monthly summaries.
"""

from typing import Dict, List, Mapping, Optional, Sequence

from .date_range import month_dates, validate_month
from .entities import (
    AttendanceStatus, DailyRecord, Employee, MonthlyAttendance, RateTier,
    resolve_historical_status
)
from .exceptions import InvalidArgumentError
from .sorting import sort_attendance_list


class AttendanceAggregator:
    """
    Calculates monthly attendance summaries.

    Provides:
    - Attendance percentage calculation
    - Rate tier grading (low / medium / high)
    - Per-employee and whole-roster monthly aggregation
    """

    def __init__(self, high_threshold: float = 90, low_threshold: float = 70):
        """
        Initialize aggregator.

        Args:
            high_threshold: Percentage at or above which a rate is HIGH
            low_threshold: Percentage below which a rate is LOW
        """
        if low_threshold > high_threshold:
            raise InvalidArgumentError(
                f"low_threshold ({low_threshold}) must not exceed high_threshold ({high_threshold})"
            )
        self.high_threshold = high_threshold
        self.low_threshold = low_threshold

    def calculate_rate(self, present_days: int, total_days: int) -> float:
        """
        Calculate attendance percentage.

        Args:
            present_days: Number of days present
            total_days: Number of days in the period

        Returns:
            Percentage (0-100) rounded to 2 decimals
        """
        if total_days <= 0:
            return 0.0
        return round(present_days / total_days * 100, 2)

    def get_rate_tier(self, rate: float) -> RateTier:
        """Get tier for an attendance percentage."""
        if rate >= self.high_threshold:
            return RateTier.HIGH
        elif rate < self.low_threshold:
            return RateTier.LOW
        else:
            return RateTier.MEDIUM

    def calculate_employee_month(
        self,
        employee: Employee,
        records_by_date: Mapping[str, Mapping[str, object]],
        dates: Sequence[str],
        year: int,
        month: int
    ) -> MonthlyAttendance:
        """
        Calculate one employee's monthly attendance.

        Args:
            employee: The employee
            records_by_date: Sparse date -> (employee id -> status) mapping
            dates: Every ISO date of the month, ascending
            year: Year
            month: Month

        Returns:
            MonthlyAttendance covering every date in `dates`
        """
        daily: Dict[str, AttendanceStatus] = {}
        present_days = 0

        for iso_date in dates:
            day_record = records_by_date.get(iso_date) or {}
            status = resolve_historical_status(day_record.get(employee.id))
            daily[iso_date] = status
            if status == AttendanceStatus.PRESENT:
                present_days += 1

        total_days = len(dates)
        rate = self.calculate_rate(present_days, total_days)

        return MonthlyAttendance(
            employee_id=employee.id,
            employee_name=employee.name,
            department=employee.department,
            year=year,
            month=month,
            total_days=total_days,
            present_days=present_days,
            absent_days=total_days - present_days,
            attendance_percentage=rate,
            daily_records=daily,
            rate_tier=self.get_rate_tier(rate)
        )

    def aggregate(
        self,
        employees: Sequence[Employee],
        records_by_date: Optional[Mapping[str, DailyRecord]],
        year: int,
        month: int
    ) -> List[MonthlyAttendance]:
        """
        Aggregate a full roster for one month.

        Args:
            employees: The full roster, unfiltered
            records_by_date: Daily records keyed by ISO date; dates may be
                missing (treated as empty) or outside the month (ignored)
            year: Year
            month: Month (1-12)

        Returns:
            One MonthlyAttendance per employee, sorted by name

        Raises:
            InvalidArgumentError: If (year, month) is not a valid month
        """
        validate_month(year, month)
        dates = month_dates(year, month)
        records_by_date = records_by_date or {}

        report = [
            self.calculate_employee_month(employee, records_by_date, dates, year, month)
            for employee in employees
        ]
        return sort_attendance_list(report, "name")


def aggregate(
    employees: Sequence[Employee],
    daily_records_by_date: Optional[Mapping[str, DailyRecord]],
    year: int,
    month: int
) -> List[MonthlyAttendance]:
    """Aggregate a roster for one month using the default rate thresholds."""
    return AttendanceAggregator().aggregate(employees, daily_records_by_date, year, month)
