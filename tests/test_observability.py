"""
Tests for observability — logging setup.
"""

import logging
from pathlib import Path

from docker_install.core.observability.logging_config import _parse_level, setup_logging


class TestParseLevel:
    def test_names(self):
        assert _parse_level("debug") == logging.DEBUG
        assert _parse_level("WARNING") == logging.WARNING

    def test_defaults_to_info(self):
        assert _parse_level(None) == logging.INFO
        assert _parse_level("chatty") == logging.INFO


class TestSetupLogging:
    def test_timestamped_lines_on_stdout(self, capsys):
        setup_logging("INFO")
        logging.getLogger("docker_install.test").info("Installing Docker packages")
        out = capsys.readouterr().out
        assert out.startswith("[")
        assert "] Installing Docker packages" in out
        # [YYYY-MM-DD HH:MM:SS]
        assert out.index("]") == 20

    def test_level_filters(self, capsys):
        setup_logging("WARNING")
        logging.getLogger("docker_install.test").info("hidden")
        assert capsys.readouterr().out == ""

    def test_debug_format_has_location(self, capsys):
        setup_logging("DEBUG")
        logging.getLogger("docker_install.test").debug("probe")
        assert "docker_install.test:" in capsys.readouterr().out

    def test_file_handler(self, tmp_path: Path, capsys):
        log_file = tmp_path / "run.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        logging.getLogger("docker_install.test").debug("to file only")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "to file only" in log_file.read_text()
        assert "to file only" not in capsys.readouterr().out

    def test_replaces_existing_handlers(self):
        setup_logging("INFO")
        setup_logging("INFO")
        assert len(logging.getLogger().handlers) == 1
