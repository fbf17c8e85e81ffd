"""
Configuration Manager Module

Handles loading, saving, and managing application configuration.
Provides bi-directional mapping between dataclasses and JSON persistence.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from attendit.infrastructure.logger import get_logger

logger = get_logger("ConfigManager")


@dataclass
class ColorLogic:
    """Colors used by the Excel and PDF reports.

    Color values: 'red', 'orange', 'yellow', 'green', 'blue', 'purple', 'pink', 'black', 'none'
    """
    present_color: str = "green"
    absent_color: str = "red"
    high_rate_color: str = "green"
    medium_rate_color: str = "yellow"
    low_rate_color: str = "red"


@dataclass
class StorageSettings:
    """Document store location and write identity."""
    data_dir: str = ""      # Empty = "data" under the project root
    user_uid: str = ""      # Stamped as updatedBy on attendance writes
    page_size: int = 20     # Roster page size


@dataclass
class ReportSettings:
    """Aggregation and summary settings."""
    sort_by: str = "name"   # "name" or "attendance_rate"
    high_threshold: float = 90
    low_threshold: float = 70
    color_logic: ColorLogic = field(default_factory=ColorLogic)


@dataclass
class OutputSettings:
    """Output settings for exported reports."""
    output_dir: str = ""    # Empty = "reports" under the project root
    csv_filename_pattern: str = "attendance_{year}_{month}.csv"
    excel_filename_pattern: str = "attendance_{year}_{month}.xlsx"
    pdf_filename_pattern: str = "attendance_report_{year}_{month}.pdf"
    default_formats: List[str] = field(default_factory=lambda: ["csv"])
    custom_font_path: str = ""  # TTF font for non Latin-1 names in PDF output


@dataclass
class LoggingSettings:
    log_file: str = ""      # Empty = attendit.log under the project root


@dataclass
class AppConfig:
    """Main application configuration container."""
    storage: StorageSettings = field(default_factory=StorageSettings)
    report: ReportSettings = field(default_factory=ReportSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


class ConfigManager:
    """
    Manages application configuration with JSON persistence.

    Responsibilities:
    - Load configuration from JSON file
    - Save configuration to JSON file
    - Provide default configuration
    - Convert between dataclass and dict representations
    """

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: AppConfig = AppConfig()

    @property
    def config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def load(self) -> AppConfig:
        """Load configuration from JSON file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._config = self._dict_to_config(data)
            except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Failed to load config, using defaults. Error: {e}")
                self._config = AppConfig()
        else:
            self._config = AppConfig()
        return self._config

    def save(self) -> None:
        """Save current configuration to JSON file."""
        data = self._config_to_dict(self._config)
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def update(self, **kwargs) -> None:
        """Update specific configuration sections."""
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
            else:
                logger.warning(f"Ignoring unknown config section: {key}")
        self.save()

    def _config_to_dict(self, config: AppConfig) -> dict:
        """Convert AppConfig dataclass to dictionary."""
        return {
            "storage": {
                "data_dir": config.storage.data_dir,
                "user_uid": config.storage.user_uid,
                "page_size": config.storage.page_size
            },
            "report": {
                "sort_by": config.report.sort_by,
                "high_threshold": config.report.high_threshold,
                "low_threshold": config.report.low_threshold,
                "color_logic": {
                    "present_color": config.report.color_logic.present_color,
                    "absent_color": config.report.color_logic.absent_color,
                    "high_rate_color": config.report.color_logic.high_rate_color,
                    "medium_rate_color": config.report.color_logic.medium_rate_color,
                    "low_rate_color": config.report.color_logic.low_rate_color
                }
            },
            "output": {
                "output_dir": config.output.output_dir,
                "csv_filename_pattern": config.output.csv_filename_pattern,
                "excel_filename_pattern": config.output.excel_filename_pattern,
                "pdf_filename_pattern": config.output.pdf_filename_pattern,
                "default_formats": list(config.output.default_formats),
                "custom_font_path": config.output.custom_font_path
            },
            "logging": {
                "log_file": config.logging.log_file
            }
        }

    def _dict_to_config(self, data: dict) -> AppConfig:
        """Convert dictionary to AppConfig dataclass."""
        storage_data = data.get("storage", {})
        report_data = data.get("report", {})
        output_data = data.get("output", {})
        logging_data = data.get("logging", {})

        storage = StorageSettings(
            data_dir=storage_data.get("data_dir", ""),
            user_uid=storage_data.get("user_uid", ""),
            page_size=storage_data.get("page_size", 20)
        )

        color_logic_data = report_data.get("color_logic", {})
        report = ReportSettings(
            sort_by=report_data.get("sort_by", "name"),
            high_threshold=report_data.get("high_threshold", 90),
            low_threshold=report_data.get("low_threshold", 70),
            color_logic=ColorLogic(
                present_color=color_logic_data.get("present_color", "green"),
                absent_color=color_logic_data.get("absent_color", "red"),
                high_rate_color=color_logic_data.get("high_rate_color", "green"),
                medium_rate_color=color_logic_data.get("medium_rate_color", "yellow"),
                low_rate_color=color_logic_data.get("low_rate_color", "red")
            )
        )

        output = OutputSettings(
            output_dir=output_data.get("output_dir", ""),
            csv_filename_pattern=output_data.get("csv_filename_pattern", "attendance_{year}_{month}.csv"),
            excel_filename_pattern=output_data.get("excel_filename_pattern", "attendance_{year}_{month}.xlsx"),
            pdf_filename_pattern=output_data.get("pdf_filename_pattern", "attendance_report_{year}_{month}.pdf"),
            default_formats=list(output_data.get("default_formats", ["csv"])),
            custom_font_path=output_data.get("custom_font_path", "")
        )

        return AppConfig(
            storage=storage,
            report=report,
            output=output,
            logging=LoggingSettings(log_file=logging_data.get("log_file", ""))
        )
