"""
JSON Store Module

File-backed document store for employees and attendance records.

Layout under the session root:
- employees.json: { employee id: employee document }
- attendance/YYYY-MM-DD.json: { "records": {...}, "updatedAt": ..., "updatedBy": ... }

Both stores share one StoreSession, passed in explicitly, instead of a
process-wide client.
"""

import json
import os
import tempfile
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from attendit.domain.date_range import parse_date
from attendit.domain.entities import DailyRecord, Employee, Identity
from attendit.domain.exceptions import InvalidArgumentError, PersistenceError
from attendit.domain.repositories import (
    AttendanceRecordStore, EmployeeDirectory, EmployeePage
)
from attendit.infrastructure.logger import get_logger
from attendit.infrastructure.memory_store import (
    apply_employee_changes, employee_order_key, normalize_record, paginate
)

logger = get_logger("JsonStore")

EMPLOYEES_FILE = "employees.json"
ATTENDANCE_DIR = "attendance"


@dataclass
class StoreSession:
    """
    Connection state shared by the JSON stores.

    Attributes:
        root: Directory holding the documents
        identity: Authenticated user stamped on writes, if any
        clock: Source of write timestamps
    """
    root: Path
    identity: Optional[Identity] = None
    clock: Callable[[], datetime] = datetime.now

    @property
    def employees_path(self) -> Path:
        return self.root / EMPLOYEES_FILE

    @property
    def attendance_dir(self) -> Path:
        return self.root / ATTENDANCE_DIR

    @property
    def uid(self) -> str:
        return self.identity.uid if self.identity else ""


def _read_json(path: Path, operation: str, key: str):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"{operation} failed for {key}: {e}")
        raise PersistenceError(f"Failed to read {path}: {e}", operation=operation, key=key) from e


def _write_json(path: Path, data, operation: str, key: str) -> None:
    """Write JSON atomically via a temp file in the same directory."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        logger.error(f"{operation} failed for {key}: {e}")
        raise PersistenceError(f"Failed to write {path}: {e}", operation=operation, key=key) from e


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _employee_to_doc(employee: Employee) -> dict:
    return {
        "name": employee.name,
        "email": employee.email,
        "department": employee.department,
        "position": employee.position,
        "employeeId": employee.employee_id,
        "createdAt": employee.created_at.isoformat() if employee.created_at else None,
        "updatedAt": employee.updated_at.isoformat() if employee.updated_at else None,
    }


def _doc_to_employee(employee_id: str, doc: dict) -> Employee:
    return Employee(
        id=employee_id,
        name=doc.get("name", ""),
        email=doc.get("email", ""),
        department=doc.get("department", ""),
        position=doc.get("position", ""),
        employee_id=doc.get("employeeId", ""),
        created_at=_parse_timestamp(doc.get("createdAt")),
        updated_at=_parse_timestamp(doc.get("updatedAt")),
    )


class JsonEmployeeDirectory(EmployeeDirectory):
    """Employee directory stored in a single JSON document."""

    def __init__(self, session: StoreSession):
        self._session = session

    def _load(self) -> Dict[str, Employee]:
        path = self._session.employees_path
        if not path.exists():
            return {}
        data = _read_json(path, "list_employees", EMPLOYEES_FILE)
        if not isinstance(data, dict):
            raise PersistenceError(
                f"Corrupt employee document {path}", operation="list_employees", key=EMPLOYEES_FILE
            )
        try:
            return {emp_id: _doc_to_employee(emp_id, doc) for emp_id, doc in data.items()}
        except (AttributeError, TypeError) as e:
            raise PersistenceError(
                f"Corrupt employee document {path}: {e}", operation="list_employees", key=EMPLOYEES_FILE
            ) from e

    def _save(self, employees: Dict[str, Employee], operation: str, key: str) -> None:
        data = {emp_id: _employee_to_doc(emp) for emp_id, emp in employees.items()}
        _write_json(self._session.employees_path, data, operation, key)

    async def list_all(self) -> List[Employee]:
        return sorted(self._load().values(), key=employee_order_key)

    async def page(
        self,
        size: int,
        cursor: Optional[str] = None,
        query: Optional[str] = None
    ) -> EmployeePage:
        return paginate(self._load().values(), size, cursor, query)

    async def add(self, employee: Employee) -> Employee:
        employees = self._load()
        now = self._session.clock()
        stored = replace(
            employee,
            id=employee.id or uuid.uuid4().hex,
            created_at=employee.created_at or now,
            updated_at=now
        )
        if stored.id in employees:
            raise PersistenceError(
                f"Employee {stored.id} already exists", operation="add", key=stored.id
            )
        employees[stored.id] = stored
        self._save(employees, "add", stored.id)
        logger.info(f"Employee added: {stored.id} ({stored.name})")
        return stored

    async def update(self, employee_id: str, **changes) -> Employee:
        employees = self._load()
        current = employees.get(employee_id)
        if current is None:
            raise PersistenceError(
                f"Employee {employee_id} not found", operation="update", key=employee_id
            )
        updated = apply_employee_changes(current, changes, self._session.clock())
        employees[employee_id] = updated
        self._save(employees, "update", employee_id)
        logger.info(f"Employee updated: {employee_id}")
        return updated

    async def delete(self, employee_id: str) -> None:
        employees = self._load()
        if employees.pop(employee_id, None) is None:
            raise PersistenceError(
                f"Employee {employee_id} not found", operation="delete", key=employee_id
            )
        self._save(employees, "delete", employee_id)
        logger.info(f"Employee deleted: {employee_id}")


class JsonAttendanceStore(AttendanceRecordStore):
    """Attendance records stored as one JSON document per date."""

    def __init__(self, session: StoreSession):
        self._session = session

    def _path_for(self, iso_date: str) -> Path:
        return self._session.attendance_dir / f"{iso_date}.json"

    def _read_record(self, iso_date: str) -> DailyRecord:
        path = self._path_for(iso_date)
        if not path.exists():
            return {}
        doc = _read_json(path, "get_by_date", iso_date)
        # Metadata (updatedAt, updatedBy) stays out of the returned record
        try:
            return normalize_record(doc.get("records", {}))
        except (AttributeError, InvalidArgumentError) as e:
            raise PersistenceError(
                f"Corrupt attendance document {path}: {e}", operation="get_by_date", key=iso_date
            ) from e

    async def get_by_date(self, iso_date: str) -> DailyRecord:
        parse_date(iso_date)
        return self._read_record(iso_date)

    async def set_by_date(self, iso_date: str, record: DailyRecord) -> None:
        parse_date(iso_date)
        incoming = normalize_record(record)
        merged = self._read_record(iso_date)
        merged.update(incoming)
        doc = {
            "records": {emp_id: status.value for emp_id, status in merged.items()},
            "updatedAt": self._session.clock().isoformat(),
            "updatedBy": self._session.uid,
        }
        _write_json(self._path_for(iso_date), doc, "set_by_date", iso_date)
        logger.debug(f"Attendance merged for {iso_date}: {len(incoming)} entries")

    async def get_by_date_range(self, start_date: str, end_date: str) -> Dict[str, DailyRecord]:
        parse_date(start_date)
        parse_date(end_date)
        directory = self._session.attendance_dir
        if not directory.exists():
            return {}

        records: Dict[str, DailyRecord] = {}
        for path in sorted(directory.glob("*.json")):
            iso_date = path.stem
            if start_date <= iso_date <= end_date:
                records[iso_date] = self._read_record(iso_date)
        return records
