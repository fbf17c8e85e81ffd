"""
Unit tests for AttendanceReportService.
"""

import asyncio
import tempfile
from datetime import datetime
from unittest.mock import patch

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from attendit.application.report_service import AttendanceReportService
from attendit.config.config_manager import AppConfig
from attendit.domain.entities import AttendanceStatus, Employee
from attendit.domain.exceptions import InvalidArgumentError, PersistenceError
from attendit.infrastructure.json_store import JsonAttendanceStore, JsonEmployeeDirectory
from attendit.infrastructure.memory_store import (
    InMemoryAttendanceStore, InMemoryEmployeeDirectory
)

PRESENT = AttendanceStatus.PRESENT


class CountingStore(InMemoryAttendanceStore):
    """Records how the service queries the store."""

    def __init__(self, records=None):
        super().__init__(records)
        self.range_calls = []
        self.date_calls = 0

    async def get_by_date(self, iso_date):
        self.date_calls += 1
        return await super().get_by_date(iso_date)

    async def get_by_date_range(self, start_date, end_date):
        self.range_calls.append((start_date, end_date))
        return await super().get_by_date_range(start_date, end_date)


class BrokenStore(InMemoryAttendanceStore):
    async def get_by_date_range(self, start_date, end_date):
        raise PersistenceError("backend down", operation="get_by_date_range", key=start_date)


@pytest.fixture
def directory():
    return InMemoryEmployeeDirectory([
        Employee(id="e1", name="Zed", department="Ops"),
        Employee(id="e2", name="Amy", department="Sales"),
    ])


@pytest.fixture
def store():
    return CountingStore({
        "2024-02-01": {"e1": "present", "e2": "present"},
        "2024-02-29": {"e2": "present"},
        "2024-03-01": {"e1": "present"},
    })


@pytest.fixture
def service(directory, store):
    return AttendanceReportService(directory, store, clock=lambda: datetime(2024, 3, 5, 12, 0))


class TestLoadMonthlyAttendance:
    """Tests for the aggregation entry point."""

    def test_single_range_fetch_for_month(self, service, store):
        asyncio.run(service.load_monthly_attendance(2024, 2))
        assert store.range_calls == [("2024-02-01", "2024-02-29")]
        assert store.date_calls == 0

    def test_results_sorted_by_name(self, service):
        monthly = asyncio.run(service.load_monthly_attendance(2024, 2))
        assert [m.employee_name for m in monthly] == ["Amy", "Zed"]

        amy, zed = monthly
        assert amy.present_days == 2
        assert amy.total_days == 29
        assert zed.present_days == 1
        assert zed.daily_records["2024-02-29"] == AttendanceStatus.ABSENT

    def test_sort_by_rate_from_config(self, directory, store):
        config = AppConfig()
        config.report.sort_by = "attendance_rate"
        service = AttendanceReportService(directory, store, config)

        monthly = asyncio.run(service.load_monthly_attendance(2024, 3))
        assert [m.employee_name for m in monthly] == ["Zed", "Amy"]

    def test_invalid_month(self, service, store):
        with pytest.raises(InvalidArgumentError):
            asyncio.run(service.load_monthly_attendance(2024, 13))
        assert store.range_calls == []

    def test_store_failure_propagates(self, directory):
        service = AttendanceReportService(directory, BrokenStore())
        with pytest.raises(PersistenceError):
            asyncio.run(service.load_monthly_attendance(2024, 2))


class TestBuildSummary:

    def test_uses_injected_clock(self, service):
        monthly = asyncio.run(service.load_monthly_attendance(2024, 2))
        summary = service.build_summary(monthly, 2024, 2)

        assert summary.title == "Attendance Report - February 2024"
        assert summary.subtitle == "Generated on 2024-03-05"
        assert summary.summary.total_employees == 2

    def test_thresholds_from_config(self, directory, store):
        config = AppConfig()
        config.report.high_threshold = 80
        config.report.low_threshold = 50
        service = AttendanceReportService(directory, store, config)

        monthly = asyncio.run(service.load_monthly_attendance(2024, 2))
        summary = service.build_summary(monthly, 2024, 2)
        assert (summary.high_threshold, summary.low_threshold) == (80, 50)


class TestExportReport:
    """Tests for writing report files."""

    def test_default_format_is_csv(self, service):
        with tempfile.TemporaryDirectory() as tmpdir:
            result = asyncio.run(service.export_report(2024, 2, Path(tmpdir)))

            assert result.success
            assert result.employee_count == 2
            assert list(result.output_paths) == ["csv"]
            path = result.output_paths["csv"]
            assert path.name == "attendance_2024_02.csv"
            lines = path.read_text(encoding='utf-8').splitlines()
            assert len(lines) == 3
            assert lines[1].startswith('"Amy","Sales",29,2,27,6.9%')

    def test_all_formats(self, service):
        with tempfile.TemporaryDirectory() as tmpdir:
            result = asyncio.run(
                service.export_report(2024, 2, Path(tmpdir), formats=["csv", "xlsx", "pdf"])
            )

            assert set(result.output_paths) == {"csv", "xlsx", "pdf"}
            for path in result.output_paths.values():
                assert path.exists()
            assert result.output_paths["pdf"].name == "attendance_report_2024_02.pdf"
            assert result.warnings == []

    def test_unknown_format_rejected(self, service, store):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(InvalidArgumentError):
                asyncio.run(service.export_report(2024, 2, Path(tmpdir), formats=["docx"]))
        assert store.range_calls == []

    def test_pdf_failure_becomes_warning(self, service):
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch(
                "attendit.infrastructure.pdf_writer.PdfWriter.create_report",
                side_effect=RuntimeError("no font")
            ):
                result = asyncio.run(
                    service.export_report(2024, 2, Path(tmpdir), formats=["csv", "pdf"])
                )

            assert result.success
            assert "csv" in result.output_paths
            assert "pdf" not in result.output_paths
            assert result.warnings == ["PDF generation failed: no font"]

    def test_output_dir_from_config(self, directory, store):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = AppConfig()
            config.output.output_dir = str(Path(tmpdir) / "monthly")
            service = AttendanceReportService(directory, store, config)

            result = asyncio.run(service.export_report(2024, 2))
            assert result.output_paths["csv"].parent == Path(tmpdir) / "monthly"


class TestCreateRoster:

    def test_page_size_from_config(self, directory, store):
        config = AppConfig()
        config.storage.page_size = 1
        roster = AttendanceReportService(directory, store, config).create_roster()

        assert roster.page_size == 1
        employees = asyncio.run(roster.load(refresh=True))
        assert [e.name for e in employees] == ["Amy"]
        assert roster.has_more


class TestFromConfig:

    def test_builds_json_backed_service(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = AppConfig()
            config.storage.data_dir = tmpdir
            config.storage.user_uid = "admin"
            service = AttendanceReportService.from_config(config)

            assert isinstance(service._directory, JsonEmployeeDirectory)
            assert isinstance(service._store, JsonAttendanceStore)

            async def scenario():
                await service._directory.add(Employee(id="e1", name="Alice"))
                await service._store.set_by_date("2024-02-01", {"e1": PRESENT})
                return await service.load_monthly_attendance(2024, 2)

            monthly = asyncio.run(scenario())
            assert monthly[0].present_days == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
