"""
Unit tests for ConfigManager and the settings dataclasses.
"""

import pytest
import json
import tempfile
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from attendit.config.config_manager import (
    ConfigManager, AppConfig, ColorLogic, OutputSettings,
    ReportSettings, StorageSettings
)


class TestColorLogic:
    """Tests for ColorLogic dataclass."""

    def test_default_values(self):
        cl = ColorLogic()

        assert cl.present_color == "green"
        assert cl.absent_color == "red"
        assert cl.high_rate_color == "green"
        assert cl.medium_rate_color == "yellow"
        assert cl.low_rate_color == "red"

    def test_default_colors_are_valid(self):
        valid = ["red", "orange", "yellow", "green", "blue", "purple", "pink", "black", "none"]
        cl = ColorLogic()
        for color in (cl.present_color, cl.absent_color, cl.high_rate_color,
                      cl.medium_rate_color, cl.low_rate_color):
            assert color in valid


class TestSettingsDefaults:
    """Defaults of the remaining sections."""

    def test_output_settings(self):
        output = OutputSettings()

        assert output.output_dir == ""
        assert output.csv_filename_pattern == "attendance_{year}_{month}.csv"
        assert output.excel_filename_pattern == "attendance_{year}_{month}.xlsx"
        assert output.pdf_filename_pattern == "attendance_report_{year}_{month}.pdf"
        assert output.default_formats == ["csv"]

    def test_default_formats_not_shared(self):
        first, second = OutputSettings(), OutputSettings()
        first.default_formats.append("pdf")
        assert second.default_formats == ["csv"]

    def test_report_and_storage(self):
        report = ReportSettings()
        storage = StorageSettings()

        assert report.sort_by == "name"
        assert report.high_threshold == 90
        assert report.low_threshold == 70
        assert storage.page_size == 20
        assert storage.data_dir == ""


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_load_default_config(self):
        """Missing file gives the defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir) / "config.json")
            config = manager.load()

            assert isinstance(config, AppConfig)
            assert config.report.color_logic.present_color == "green"
            assert config.output.default_formats == ["csv"]

    def test_save_and_load_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "nested" / "config.json"
            manager = ConfigManager(config_path)

            config = manager.load()
            config.storage.user_uid = "admin"
            config.report.sort_by = "attendance_rate"
            config.report.color_logic.medium_rate_color = "orange"
            config.output.default_formats = ["csv", "pdf"]
            config.logging.log_file = "/var/log/attendit.log"
            manager.save()

            config2 = ConfigManager(config_path).load()

            assert config2.storage.user_uid == "admin"
            assert config2.report.sort_by == "attendance_rate"
            assert config2.report.color_logic.medium_rate_color == "orange"
            assert config2.output.default_formats == ["csv", "pdf"]
            assert config2.logging.log_file == "/var/log/attendit.log"

    def test_partial_file_fills_defaults(self):
        """Sections and keys absent from the file keep their defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump({"report": {"high_threshold": 95}}, f)

            config = ConfigManager(config_path).load()

            assert config.report.high_threshold == 95
            assert config.report.low_threshold == 70
            assert config.output.csv_filename_pattern == "attendance_{year}_{month}.csv"
            assert config.storage.page_size == 20

    @pytest.mark.parametrize("content", ["{not json", "[]"])
    def test_unreadable_file_falls_back_to_defaults(self, content):
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            config_path.write_text(content, encoding='utf-8')

            config = ConfigManager(config_path).load()
            assert config == AppConfig()

    def test_update_saves_known_sections(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            manager = ConfigManager(config_path)
            manager.load()

            manager.update(storage=StorageSettings(page_size=50), bogus=1)

            assert not hasattr(manager.config, "bogus")
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            assert data["storage"]["page_size"] == 50
            assert set(data) == {"storage", "report", "output", "logging"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
