"""
Unit tests for DailyAttendanceSession.
"""

import asyncio
from datetime import date

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from attendit.application.attendance_session import DailyAttendanceSession
from attendit.domain.entities import AttendanceStatus, Employee
from attendit.domain.exceptions import InvalidArgumentError, PersistenceError
from attendit.infrastructure.memory_store import (
    InMemoryAttendanceStore, InMemoryEmployeeDirectory
)

PRESENT = AttendanceStatus.PRESENT
ABSENT = AttendanceStatus.ABSENT
NOT_MARKED = AttendanceStatus.NOT_MARKED

DAY = "2025-03-10"


class FlakyStore(InMemoryAttendanceStore):
    """Store whose writes fail until `fail_writes` is cleared."""

    def __init__(self, records=None):
        super().__init__(records)
        self.fail_writes = True

    async def set_by_date(self, iso_date, record):
        if self.fail_writes:
            raise PersistenceError("store unavailable", operation="set_by_date", key=iso_date)
        await super().set_by_date(iso_date, record)


class GatedStore(InMemoryAttendanceStore):
    """Store that blocks reads of one date until the gate opens."""

    def __init__(self, records, gated_date):
        super().__init__(records)
        self.gated_date = gated_date
        self.gate = asyncio.Event()

    async def get_by_date(self, iso_date):
        if iso_date == self.gated_date:
            await self.gate.wait()
        return await super().get_by_date(iso_date)


@pytest.fixture
def directory():
    return InMemoryEmployeeDirectory([
        Employee(id="e1", name="Alice"),
        Employee(id="e2", name="Bob"),
        Employee(id="e3", name="Carol"),
    ])


class TestLoad:
    """Tests for loading a day."""

    def test_load_empty_day(self, directory):
        session = DailyAttendanceSession(InMemoryAttendanceStore(), directory)
        record = asyncio.run(session.load(DAY))

        assert record == {}
        assert session.current_date == DAY
        assert [e.id for e in session.roster] == ["e1", "e2", "e3"]
        assert session.status_of("e1") == NOT_MARKED

    def test_load_existing_day(self, directory):
        store = InMemoryAttendanceStore({DAY: {"e1": "present", "e2": "absent"}})
        session = DailyAttendanceSession(store, directory)
        record = asyncio.run(session.load(DAY))

        assert record == {"e1": PRESENT, "e2": ABSENT}
        assert session.status_of("e1") == PRESENT
        assert session.status_of("e2") == ABSENT
        assert session.status_of("e3") == NOT_MARKED

    def test_load_discards_unsaved_edits(self, directory):
        store = InMemoryAttendanceStore({"2025-03-11": {"e2": "present"}})
        session = DailyAttendanceSession(store, directory)

        async def scenario():
            await session.load(DAY)
            session.set_status("e1", PRESENT)
            await session.load("2025-03-11")

        asyncio.run(scenario())
        assert session.records == {"e2": PRESENT}
        assert session.is_dirty is False

    def test_last_load_wins(self, directory):
        async def scenario():
            store = GatedStore({
                "2025-03-01": {"e1": "present"},
                "2025-03-02": {"e2": "present"},
            }, gated_date="2025-03-01")
            session = DailyAttendanceSession(store, directory)

            slow = asyncio.ensure_future(session.load("2025-03-01"))
            await asyncio.sleep(0)
            await session.load("2025-03-02")
            store.gate.set()
            await slow
            return session

        session = asyncio.run(scenario())
        assert session.current_date == "2025-03-02"
        assert session.records == {"e2": PRESENT}

    def test_load_today_uses_clock(self, directory):
        session = DailyAttendanceSession(InMemoryAttendanceStore(), directory)
        asyncio.run(session.load_today(lambda: date(2025, 3, 10)))
        assert session.current_date == DAY

    def test_load_rejects_bad_date(self, directory):
        session = DailyAttendanceSession(InMemoryAttendanceStore(), directory)
        with pytest.raises(InvalidArgumentError):
            asyncio.run(session.load("10/03/2025"))


class TestSetStatus:
    """Tests for local mutation."""

    def test_requires_load(self, directory):
        session = DailyAttendanceSession(InMemoryAttendanceStore(), directory)
        with pytest.raises(InvalidArgumentError):
            session.set_status("e1", PRESENT)

    def test_last_value_wins_and_is_local(self, directory):
        store = InMemoryAttendanceStore()
        session = DailyAttendanceSession(store, directory)
        asyncio.run(session.load(DAY))

        session.set_status("e1", PRESENT)
        session.set_status("e1", ABSENT)
        session.set_status("e1", "present")

        assert session.records == {"e1": PRESENT}
        assert session.is_dirty
        assert asyncio.run(store.get_by_date(DAY)) == {}

    def test_idempotent(self, directory):
        store = InMemoryAttendanceStore({DAY: {"e1": "present"}})
        session = DailyAttendanceSession(store, directory)
        asyncio.run(session.load(DAY))

        session.set_status("e1", PRESENT)
        assert session.records == {"e1": PRESENT}
        assert session.is_dirty is False

    @pytest.mark.parametrize("status", [NOT_MARKED, "late", ""])
    def test_rejects_unmarkable_status(self, directory, status):
        session = DailyAttendanceSession(InMemoryAttendanceStore(), directory)
        asyncio.run(session.load(DAY))
        with pytest.raises(InvalidArgumentError):
            session.set_status("e1", status)

    def test_mark_all(self, directory):
        session = DailyAttendanceSession(InMemoryAttendanceStore(), directory)
        asyncio.run(session.load(DAY))

        session.mark_all_present()
        assert session.records == {"e1": PRESENT, "e2": PRESENT, "e3": PRESENT}

        session.mark_all_absent()
        assert session.records == {"e1": ABSENT, "e2": ABSENT, "e3": ABSENT}

    def test_stats(self, directory):
        session = DailyAttendanceSession(InMemoryAttendanceStore(), directory)
        asyncio.run(session.load(DAY))
        session.set_status("e1", PRESENT)
        session.set_status("e2", ABSENT)

        stats = session.stats()
        assert stats.date == DAY
        assert (stats.present, stats.absent, stats.not_marked) == (1, 1, 1)
        assert stats.total == 3


class TestSave:
    """Tests for persisting the working set."""

    def test_save_persists_working_set(self, directory):
        store = InMemoryAttendanceStore()
        session = DailyAttendanceSession(store, directory)

        async def scenario():
            await session.load(DAY)
            session.set_status("e1", PRESENT)
            session.set_status("e2", ABSENT)
            await session.save()
            return await store.get_by_date(DAY)

        assert asyncio.run(scenario()) == {"e1": PRESENT, "e2": ABSENT}
        assert session.is_dirty is False

    def test_save_merges_with_other_sessions(self, directory):
        store = InMemoryAttendanceStore()
        first = DailyAttendanceSession(store, directory)
        second = DailyAttendanceSession(store, directory)

        async def scenario():
            await first.load(DAY)
            await second.load(DAY)
            second.set_status("e2", PRESENT)
            await second.save()
            first.set_status("e1", ABSENT)
            await first.save()
            return await store.get_by_date(DAY)

        assert asyncio.run(scenario()) == {"e1": ABSENT, "e2": PRESENT}

    def test_failed_save_keeps_working_set(self, directory):
        store = FlakyStore()
        session = DailyAttendanceSession(store, directory)
        asyncio.run(session.load(DAY))
        session.set_status("e1", PRESENT)

        with pytest.raises(PersistenceError):
            asyncio.run(session.save())

        assert session.records == {"e1": PRESENT}
        assert session.is_dirty

        store.fail_writes = False
        asyncio.run(session.save())
        assert asyncio.run(store.get_by_date(DAY)) == {"e1": PRESENT}
        assert session.is_dirty is False

    def test_save_requires_load(self, directory):
        session = DailyAttendanceSession(InMemoryAttendanceStore(), directory)
        with pytest.raises(InvalidArgumentError):
            asyncio.run(session.save())

    def test_reset(self, directory):
        session = DailyAttendanceSession(InMemoryAttendanceStore(), directory)
        asyncio.run(session.load(DAY))
        session.set_status("e1", PRESENT)
        session.reset()

        assert session.current_date is None
        assert session.records == {}
        assert session.roster == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
