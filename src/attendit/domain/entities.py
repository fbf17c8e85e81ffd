"""
Domain Entities Module

Core domain entities using dataclasses for the attendance system.
These entities represent the core business concepts independent of infrastructure.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Dict, Optional

from .exceptions import InvalidArgumentError


class AttendanceStatus(Enum):
    """Status of an employee on a given day.

    Only PRESENT and ABSENT are ever persisted. NOT_MARKED is the live
    value for an employee missing from the day's record.
    """
    PRESENT = "present"
    ABSENT = "absent"
    NOT_MARKED = "not_marked"

    @classmethod
    def parse(cls, value) -> "AttendanceStatus":
        """
        Convert a stored value or enum member to an AttendanceStatus.

        Raises:
            InvalidArgumentError: If the value is not a known status
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidArgumentError(f"Unknown attendance status: {value!r}") from None

    @property
    def label(self) -> str:
        """Display label used in exported reports."""
        return {
            AttendanceStatus.PRESENT: "Present",
            AttendanceStatus.ABSENT: "Absent",
            AttendanceStatus.NOT_MARKED: "Not Marked",
        }[self]


class RateTier(Enum):
    """Tier for attendance rate display and summary counters."""
    LOW = auto()     # < low threshold (default 70%)
    MEDIUM = auto()  # >= low threshold and < high threshold
    HIGH = auto()    # >= high threshold (default 90%)


# One day's sparse mapping of employee id -> status
DailyRecord = Dict[str, AttendanceStatus]


def resolve_historical_status(value) -> AttendanceStatus:
    """
    Collapse a stored value to PRESENT or ABSENT.

    Missing, unknown and not-marked values all count as absent once a day
    is part of a historical report.
    """
    if value is None:
        return AttendanceStatus.ABSENT
    try:
        status = AttendanceStatus.parse(value)
    except InvalidArgumentError:
        return AttendanceStatus.ABSENT
    if status == AttendanceStatus.PRESENT:
        return AttendanceStatus.PRESENT
    return AttendanceStatus.ABSENT


@dataclass(frozen=True)
class Identity:
    """Opaque handle for the authenticated user performing writes."""
    uid: str


@dataclass
class Employee:
    """
    Represents an employee in the roster.

    Attributes:
        id: Stable document id
        name: Display name
        email: Contact email
        department: Department name
        position: Job title
        employee_id: Externally assigned employee number
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """
    id: str
    name: str
    email: str = ""
    department: str = ""
    position: str = ""
    employee_id: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match over the searchable fields."""
        needle = query.lower()
        return any(
            needle in value.lower()
            for value in (self.name, self.email, self.department, self.position, self.employee_id)
        )


@dataclass
class MonthlyAttendance:
    """
    Container for an employee's monthly attendance summary.

    Attributes:
        employee_id: Id of the employee this summary belongs to
        employee_name: Display name at aggregation time
        department: Department at aggregation time
        year: Year of the report
        month: Month of the report (1-12)
        total_days: Calendar days in the month
        present_days: Days marked present
        absent_days: Days marked absent or never marked
        attendance_percentage: present / total * 100, rounded to 2 decimals
        daily_records: Status for every ISO date in the month
        rate_tier: Tier based on attendance_percentage
    """
    employee_id: str
    employee_name: str
    year: int
    month: int
    department: str = ""
    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    attendance_percentage: float = 0.0
    daily_records: Dict[str, AttendanceStatus] = field(default_factory=dict)
    rate_tier: RateTier = RateTier.LOW

    def status_on(self, iso_date: str) -> AttendanceStatus:
        """Present or absent for a date; stored strings are accepted, anything else is absent."""
        return resolve_historical_status(self.daily_records.get(iso_date))


@dataclass
class DailyStats:
    """
    Live counters for one day under editing.

    Attributes:
        date: ISO date of the day
        present: Employees marked present
        absent: Employees marked absent
        not_marked: Roster employees without a status
    """
    date: str
    present: int = 0
    absent: int = 0
    not_marked: int = 0

    @property
    def total(self) -> int:
        return self.present + self.absent + self.not_marked
