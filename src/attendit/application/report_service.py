"""
Report Service Module

Application layer service that orchestrates monthly report generation:
fetch the month from the stores, aggregate, and export.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from attendit.application.employee_roster import EmployeeRoster
from attendit.config.config_manager import AppConfig
from attendit.domain.aggregation import AttendanceAggregator
from attendit.domain.date_range import month_bounds, validate_month
from attendit.domain.entities import Identity, MonthlyAttendance
from attendit.domain.exceptions import InvalidArgumentError
from attendit.domain.report_summary import ReportSummary, build_report_summary
from attendit.domain.repositories import AttendanceRecordStore, EmployeeDirectory
from attendit.domain.sorting import sort_attendance_list
from attendit.infrastructure.csv_writer import CsvWriter
from attendit.infrastructure.logger import configure_log_file, get_logger

logger = get_logger("ReportService")

SUPPORTED_FORMATS = ("csv", "xlsx", "pdf")

_PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


@dataclass
class ReportResult:
    """Result of report export."""
    success: bool
    year: int
    month: int
    output_paths: Dict[str, Path] = field(default_factory=dict)
    employee_count: int = 0
    warnings: List[str] = field(default_factory=list)


class AttendanceReportService:
    """
    Application service for monthly attendance reports.

    This service:
    - Fetches the roster and the month's records in one call each
    - Aggregates through AttendanceAggregator
    - Writes CSV, Excel and PDF outputs
    """

    def __init__(
        self,
        directory: EmployeeDirectory,
        store: AttendanceRecordStore,
        config: Optional[AppConfig] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self._directory = directory
        self._store = store
        self._config = config or AppConfig()
        self._clock = clock
        self._aggregator = AttendanceAggregator(
            high_threshold=self._config.report.high_threshold,
            low_threshold=self._config.report.low_threshold
        )

    @property
    def config(self) -> AppConfig:
        return self._config

    async def load_monthly_attendance(self, year: int, month: int) -> List[MonthlyAttendance]:
        """
        Aggregate the whole roster for a month.

        Raises:
            InvalidArgumentError: If (year, month) is invalid
            PersistenceError: If either store fails
        """
        validate_month(year, month)
        start_date, end_date = month_bounds(year, month)

        logger.info(f"Loading attendance for {year}-{month:02d}")
        records = await self._store.get_by_date_range(start_date, end_date)
        employees = await self._directory.list_all()

        monthly = self._aggregator.aggregate(employees, records, year, month)
        monthly = sort_attendance_list(monthly, self._config.report.sort_by)

        logger.info(
            f"Aggregated {len(monthly)} employees over {len(records)} recorded days "
            f"for {year}-{month:02d}"
        )
        return monthly

    def build_summary(
        self,
        monthly_data: Sequence[MonthlyAttendance],
        year: int,
        month: int
    ) -> ReportSummary:
        """Structured summary for the given aggregation output."""
        return build_report_summary(
            monthly_data, year, month,
            generated_at=self._clock(),
            high_threshold=self._config.report.high_threshold,
            low_threshold=self._config.report.low_threshold
        )

    def create_roster(self) -> EmployeeRoster:
        """Paginated roster over the same directory, sized by storage.page_size."""
        return EmployeeRoster(self._directory, page_size=self._config.storage.page_size)

    def _resolve_output_dir(self, output_dir: Optional[Path]) -> Path:
        if output_dir:
            return Path(output_dir)
        if self._config.output.output_dir:
            return Path(self._config.output.output_dir)
        return _PROJECT_ROOT / "reports"

    async def export_report(
        self,
        year: int,
        month: int,
        output_dir: Optional[Path] = None,
        formats: Optional[Sequence[str]] = None
    ) -> ReportResult:
        """
        Aggregate a month and write the requested report files.

        Args:
            year: Report year
            month: Report month
            output_dir: Destination directory; defaults to config
            formats: Any of "csv", "xlsx", "pdf"; defaults to config

        Returns:
            ReportResult listing the files written

        Raises:
            InvalidArgumentError: For invalid months or unknown formats
            PersistenceError: If the stores fail
        """
        from attendit.infrastructure.excel_writer import ExcelWriter
        from attendit.infrastructure.pdf_writer import PdfWriter, format_filename

        formats = list(formats or self._config.output.default_formats)
        unknown = [f for f in formats if f not in SUPPORTED_FORMATS]
        if unknown:
            raise InvalidArgumentError(f"Unsupported report formats: {unknown}")

        monthly = await self.load_monthly_attendance(year, month)
        target_dir = self._resolve_output_dir(output_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        output = self._config.output
        color_logic = self._config.report.color_logic

        result = ReportResult(
            success=True,
            year=year,
            month=month,
            employee_count=len(monthly)
        )

        if "csv" in formats:
            path = target_dir / format_filename(output.csv_filename_pattern, year, month)
            CsvWriter().write(monthly, year, month, path)
            result.output_paths["csv"] = path

        if "xlsx" in formats:
            path = target_dir / format_filename(output.excel_filename_pattern, year, month)
            logger.info(f"Writing Excel report: {path}")
            ExcelWriter(color_logic).create_report(monthly, year, month, path)
            result.output_paths["xlsx"] = path

        if "pdf" in formats:
            path = target_dir / format_filename(output.pdf_filename_pattern, year, month)
            try:
                writer = PdfWriter(
                    color_logic=color_logic,
                    custom_font_path=output.custom_font_path or None
                )
                writer.create_report(self.build_summary(monthly, year, month), year, month, path)
                result.output_paths["pdf"] = path
            except Exception as e:
                # PDF failure does not fail the other outputs
                logger.error(f"PDF generation failed: {e}")
                result.warnings.append(f"PDF generation failed: {e}")

        return result

    @staticmethod
    def from_config(config: AppConfig) -> "AttendanceReportService":
        """
        Build a service backed by the JSON stores described in config.

        Also points the log file at config.logging.log_file when set.
        """
        from attendit.infrastructure.json_store import (
            JsonAttendanceStore, JsonEmployeeDirectory, StoreSession
        )

        if config.logging.log_file:
            configure_log_file(config.logging.log_file)

        data_dir = Path(config.storage.data_dir) if config.storage.data_dir else _PROJECT_ROOT / "data"
        identity = Identity(config.storage.user_uid) if config.storage.user_uid else None
        session = StoreSession(root=data_dir, identity=identity)

        return AttendanceReportService(
            JsonEmployeeDirectory(session),
            JsonAttendanceStore(session),
            config
        )
