"""
Memory Store Module

In-process implementations of the employee directory and the attendance
record store. Also holds the record/roster helpers shared with the JSON
store.
"""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from attendit.domain.date_range import parse_date
from attendit.domain.entities import AttendanceStatus, DailyRecord, Employee
from attendit.domain.exceptions import InvalidArgumentError, PersistenceError
from attendit.domain.repositories import (
    AttendanceRecordStore, EmployeeDirectory, EmployeePage
)

EDITABLE_EMPLOYEE_FIELDS = ('name', 'email', 'department', 'position', 'employee_id')

_CURSOR_SEP = '\x1f'


def normalize_record(record) -> DailyRecord:
    """
    Validate a record before it is written.

    Raises:
        InvalidArgumentError: For unknown statuses or NOT_MARKED entries
    """
    normalized: DailyRecord = {}
    for employee_id, value in record.items():
        status = AttendanceStatus.parse(value)
        if status == AttendanceStatus.NOT_MARKED:
            raise InvalidArgumentError(
                f"Cannot persist '{status.value}' for employee {employee_id}"
            )
        normalized[str(employee_id)] = status
    return normalized


def employee_order_key(employee: Employee) -> tuple:
    return (employee.name, employee.id)


def make_cursor(employee: Employee) -> str:
    return f"{employee.name}{_CURSOR_SEP}{employee.id}"


def _parse_cursor(cursor: str) -> tuple:
    name, _, employee_id = cursor.partition(_CURSOR_SEP)
    return (name, employee_id)


def paginate(
    employees: Iterable[Employee],
    size: int,
    cursor: Optional[str] = None,
    query: Optional[str] = None
) -> EmployeePage:
    """
    Order, filter and slice a roster.

    Args:
        employees: Unordered roster
        size: Page size (must be positive)
        cursor: Cursor returned with the previous page
        query: Optional case-insensitive search text

    Returns:
        EmployeePage positioned after `cursor`
    """
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise InvalidArgumentError(f"Page size must be a positive integer, got {size!r}")

    ordered = sorted(employees, key=employee_order_key)
    if query:
        ordered = [e for e in ordered if e.matches(query)]
    if cursor:
        after = _parse_cursor(cursor)
        ordered = [e for e in ordered if employee_order_key(e) > after]

    page = ordered[:size]
    has_more = len(ordered) > size
    return EmployeePage(
        employees=page,
        cursor=make_cursor(page[-1]) if page else cursor,
        has_more=has_more
    )


def apply_employee_changes(
    employee: Employee,
    changes: dict,
    now: datetime
) -> Employee:
    """Return a copy of `employee` with descriptive fields changed."""
    unknown = set(changes) - set(EDITABLE_EMPLOYEE_FIELDS)
    if unknown:
        raise InvalidArgumentError(f"Cannot update employee fields: {sorted(unknown)}")
    return replace(employee, updated_at=now, **changes)


class InMemoryEmployeeDirectory(EmployeeDirectory):
    """Employee directory held in a dict keyed by employee id."""

    def __init__(
        self,
        employees: Optional[Iterable[Employee]] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self._clock = clock
        self._employees: Dict[str, Employee] = {}
        for employee in employees or []:
            self._employees[employee.id] = employee

    async def list_all(self) -> List[Employee]:
        return sorted(self._employees.values(), key=employee_order_key)

    async def page(
        self,
        size: int,
        cursor: Optional[str] = None,
        query: Optional[str] = None
    ) -> EmployeePage:
        return paginate(self._employees.values(), size, cursor, query)

    async def add(self, employee: Employee) -> Employee:
        now = self._clock()
        stored = replace(
            employee,
            id=employee.id or uuid.uuid4().hex,
            created_at=employee.created_at or now,
            updated_at=now
        )
        if stored.id in self._employees:
            raise PersistenceError(
                f"Employee {stored.id} already exists", operation="add", key=stored.id
            )
        self._employees[stored.id] = stored
        return stored

    async def update(self, employee_id: str, **changes) -> Employee:
        current = self._employees.get(employee_id)
        if current is None:
            raise PersistenceError(
                f"Employee {employee_id} not found", operation="update", key=employee_id
            )
        updated = apply_employee_changes(current, changes, self._clock())
        self._employees[employee_id] = updated
        return updated

    async def delete(self, employee_id: str) -> None:
        if self._employees.pop(employee_id, None) is None:
            raise PersistenceError(
                f"Employee {employee_id} not found", operation="delete", key=employee_id
            )


class InMemoryAttendanceStore(AttendanceRecordStore):
    """Attendance documents held in a dict keyed by ISO date."""

    def __init__(self, records: Optional[Dict[str, DailyRecord]] = None):
        self._documents: Dict[str, DailyRecord] = {}
        for iso_date, record in (records or {}).items():
            parse_date(iso_date)
            self._documents[iso_date] = normalize_record(record)

    async def get_by_date(self, iso_date: str) -> DailyRecord:
        parse_date(iso_date)
        return dict(self._documents.get(iso_date, {}))

    async def set_by_date(self, iso_date: str, record: DailyRecord) -> None:
        parse_date(iso_date)
        incoming = normalize_record(record)
        merged = dict(self._documents.get(iso_date, {}))
        merged.update(incoming)
        self._documents[iso_date] = merged

    async def get_by_date_range(self, start_date: str, end_date: str) -> Dict[str, DailyRecord]:
        parse_date(start_date)
        parse_date(end_date)
        return {
            iso_date: dict(record)
            for iso_date, record in sorted(self._documents.items())
            if start_date <= iso_date <= end_date
        }
