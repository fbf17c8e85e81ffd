"""
Attendance Session Module

Working state for marking one day's attendance: load the day's record,
change statuses in memory, then merge-save the result.
"""

from datetime import date
from typing import Callable, Dict, List, Optional

from attendit.domain.date_range import parse_date, today_iso
from attendit.domain.entities import AttendanceStatus, DailyRecord, DailyStats, Employee
from attendit.domain.exceptions import InvalidArgumentError, PersistenceError
from attendit.domain.repositories import AttendanceRecordStore, EmployeeDirectory
from attendit.infrastructure.logger import get_logger

logger = get_logger("AttendanceSession")

MARKABLE_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.ABSENT)


class DailyAttendanceSession:
    """
    In-memory editing surface for a single date.

    The working set only holds employees that have been marked; everyone
    else on the roster reads as NOT_MARKED until a status is set. Nothing
    reaches the store until save().
    """

    def __init__(self, store: AttendanceRecordStore, directory: EmployeeDirectory):
        self._store = store
        self._directory = directory
        self._date: Optional[str] = None
        self._working: Dict[str, AttendanceStatus] = {}
        self._roster: Optional[List[Employee]] = None
        self._load_generation = 0
        self._dirty = False

    @property
    def current_date(self) -> Optional[str]:
        return self._date

    @property
    def roster(self) -> List[Employee]:
        """Roster snapshot taken at load time."""
        return list(self._roster or [])

    @property
    def records(self) -> DailyRecord:
        """Copy of the working set."""
        return dict(self._working)

    @property
    def is_dirty(self) -> bool:
        """True when there are local changes not yet saved."""
        return self._dirty

    async def load_roster(self) -> List[Employee]:
        """Refresh the roster snapshot from the directory."""
        self._roster = await self._directory.list_all()
        logger.debug(f"Roster snapshot loaded: {len(self._roster)} employees")
        return self.roster

    async def load(self, iso_date: str, refresh_roster: bool = False) -> DailyRecord:
        """
        Load a date's record as the working set.

        Any unsaved edits for the previously loaded date are discarded.
        When loads overlap, only the most recently started one is applied.

        Args:
            iso_date: Date to edit (YYYY-MM-DD)
            refresh_roster: Re-fetch the roster even if a snapshot exists

        Returns:
            The record as loaded from the store
        """
        parse_date(iso_date)
        self._load_generation += 1
        generation = self._load_generation

        record = await self._store.get_by_date(iso_date)
        roster = None
        if refresh_roster or self._roster is None:
            roster = await self._directory.list_all()

        if generation != self._load_generation:
            logger.debug(f"Discarding stale load for {iso_date}")
            return dict(record)

        if roster is not None:
            self._roster = roster
        self._date = iso_date
        self._working = {
            emp_id: AttendanceStatus.parse(status) for emp_id, status in record.items()
        }
        self._dirty = False
        logger.info(f"Attendance loaded for {iso_date}: {len(self._working)} marked")
        return dict(record)

    async def load_today(self, today: Optional[Callable[[], date]] = None) -> DailyRecord:
        """Load the current date."""
        return await self.load(today_iso(today))

    def _require_loaded(self) -> str:
        if self._date is None:
            raise InvalidArgumentError("No date loaded; call load() first")
        return self._date

    def set_status(self, employee_id: str, status) -> None:
        """
        Mark one employee locally.

        Raises:
            InvalidArgumentError: If no date is loaded or the status is not
                present/absent
        """
        self._require_loaded()
        parsed = AttendanceStatus.parse(status)
        if parsed not in MARKABLE_STATUSES:
            raise InvalidArgumentError(f"Cannot set status '{parsed.value}'")
        if self._working.get(employee_id) != parsed:
            self._working[employee_id] = parsed
            self._dirty = True

    def status_of(self, employee_id: str) -> AttendanceStatus:
        """Live status; NOT_MARKED when the employee has no entry."""
        return self._working.get(employee_id, AttendanceStatus.NOT_MARKED)

    def mark_all_present(self) -> None:
        """Mark every roster employee present."""
        self._mark_all(AttendanceStatus.PRESENT)

    def mark_all_absent(self) -> None:
        """Mark every roster employee absent."""
        self._mark_all(AttendanceStatus.ABSENT)

    def _mark_all(self, status: AttendanceStatus) -> None:
        self._require_loaded()
        for employee in self._roster or []:
            self.set_status(employee.id, status)

    def stats(self) -> DailyStats:
        """Present / absent / not-marked counts over the roster snapshot."""
        iso_date = self._require_loaded()
        stats = DailyStats(date=iso_date)
        for employee in self._roster or []:
            status = self.status_of(employee.id)
            if status == AttendanceStatus.PRESENT:
                stats.present += 1
            elif status == AttendanceStatus.ABSENT:
                stats.absent += 1
            else:
                stats.not_marked += 1
        return stats

    async def save(self) -> None:
        """
        Merge-write the working set for the loaded date.

        Entries persisted by other sessions for the same date are kept.

        Raises:
            InvalidArgumentError: If no date is loaded
            PersistenceError: If the store write fails; the working set is
                left untouched so the caller can retry
        """
        iso_date = self._require_loaded()
        snapshot = dict(self._working)
        try:
            await self._store.set_by_date(iso_date, snapshot)
        except PersistenceError as e:
            logger.error(f"Saving attendance for {iso_date} failed: {e}")
            raise
        if self._working == snapshot:
            self._dirty = False
        logger.info(f"Attendance saved for {iso_date}: {len(snapshot)} entries")

    def reset(self) -> None:
        """Forget the loaded date, the working set and the roster snapshot."""
        self._load_generation += 1
        self._date = None
        self._working = {}
        self._roster = None
        self._dirty = False
