"""
Repository Interfaces Module

Narrow async interfaces to the employee roster and the attendance
document store. The core only talks to these; concrete stores live in
the infrastructure layer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .entities import DailyRecord, Employee


@dataclass
class EmployeePage:
    """
    One page of a roster query.

    Attributes:
        employees: Employees on this page, ordered by name
        cursor: Opaque cursor to pass to the next page() call
        has_more: Whether another page may follow
    """
    employees: List[Employee] = field(default_factory=list)
    cursor: Optional[str] = None
    has_more: bool = False


class EmployeeDirectory(ABC):
    """Abstract roster store."""

    @abstractmethod
    async def list_all(self) -> List[Employee]:
        """Return every employee ordered by name."""
        pass

    @abstractmethod
    async def page(
        self,
        size: int,
        cursor: Optional[str] = None,
        query: Optional[str] = None
    ) -> EmployeePage:
        """
        Return one page of employees ordered by name.

        Args:
            size: Maximum employees per page
            cursor: Cursor from the previous page, None for the first
            query: Optional case-insensitive search text
        """
        pass

    @abstractmethod
    async def add(self, employee: Employee) -> Employee:
        """Store a new employee; returns it with id and timestamps set."""
        pass

    @abstractmethod
    async def update(self, employee_id: str, **changes) -> Employee:
        """Update descriptive fields of an employee."""
        pass

    @abstractmethod
    async def delete(self, employee_id: str) -> None:
        """Remove an employee from the roster."""
        pass


class AttendanceRecordStore(ABC):
    """Abstract attendance document store keyed by ISO date."""

    @abstractmethod
    async def get_by_date(self, iso_date: str) -> DailyRecord:
        """Return the record for a date, empty if none was ever saved."""
        pass

    @abstractmethod
    async def set_by_date(self, iso_date: str, record: DailyRecord) -> None:
        """Merge `record` into the stored record for `iso_date`."""
        pass

    @abstractmethod
    async def get_by_date_range(self, start_date: str, end_date: str) -> Dict[str, DailyRecord]:
        """Return every saved record with start_date <= date <= end_date."""
        pass

    async def get_report(
        self,
        start_date: str,
        end_date: str,
        employee_ids: Optional[Iterable[str]] = None
    ) -> Dict[str, DailyRecord]:
        """
        Range query optionally restricted to some employees.

        Dates are kept even when none of the requested employees appear.
        """
        records = await self.get_by_date_range(start_date, end_date)
        wanted = set(employee_ids or ())
        if not wanted:
            return records
        return {
            iso_date: {emp_id: status for emp_id, status in record.items() if emp_id in wanted}
            for iso_date, record in records.items()
        }
