"""Tests for logging service configuration."""

import logging
from pathlib import Path
from unittest.mock import patch

from rental_ledger.services.logging import get_log_level, setup_server_logging


class TestServerLogging:
    """Test server logging configuration."""

    def setup_method(self):
        """Save original handlers before each test."""
        self.root_logger = logging.getLogger()
        self.original_handlers = self.root_logger.handlers.copy()
        self.original_level = self.root_logger.level

    def teardown_method(self):
        """Restore original handlers after each test."""
        for handler in self.root_logger.handlers[:]:
            handler.close()
            self.root_logger.removeHandler(handler)
        for handler in self.original_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.original_level)

    def test_creates_log_directory(self, tmp_path) -> None:
        """Verify setup_server_logging creates the log directory if missing."""
        log_file = tmp_path / "logs" / "server.log"
        assert not log_file.parent.exists()

        setup_server_logging(str(log_file))

        assert log_file.parent.exists()

    def test_creates_stdout_and_file_handlers(self, tmp_path) -> None:
        """Verify both stdout and file handlers are installed."""
        setup_server_logging(str(tmp_path / "server.log"))

        assert len(self.root_logger.handlers) == 2
        assert any(isinstance(h, logging.FileHandler) for h in self.root_logger.handlers)

    def test_handlers_use_configured_level(self, tmp_path) -> None:
        """Verify LOG_LEVEL applies to the root logger and its handlers."""
        with patch.dict("os.environ", {"LOG_LEVEL": "WARNING"}, clear=False):
            setup_server_logging(str(tmp_path / "server.log"))

        assert self.root_logger.level == logging.WARNING
        for handler in self.root_logger.handlers:
            assert handler.level == logging.WARNING

    def test_writes_to_file(self, tmp_path) -> None:
        """Verify log records reach the log file."""
        log_file = tmp_path / "server.log"
        with patch.dict("os.environ", {"LOG_LEVEL": "INFO"}, clear=False):
            setup_server_logging(str(log_file))

        logging.getLogger("rental_ledger.test").info("Recorded payment: contract=1")
        for handler in self.root_logger.handlers:
            handler.flush()

        assert "Recorded payment: contract=1" in Path(log_file).read_text()


class TestGetLogLevel:
    """Test LOG_LEVEL parsing."""

    def test_unknown_level_defaults_to_info(self) -> None:
        with patch.dict("os.environ", {"LOG_LEVEL": "CHATTY"}, clear=False):
            assert get_log_level() == logging.INFO

    def test_level_is_case_insensitive(self) -> None:
        with patch.dict("os.environ", {"LOG_LEVEL": "debug"}, clear=False):
            assert get_log_level() == logging.DEBUG


class TestLevelArgument:
    """Test the explicit level passed from AppConfig."""

    def setup_method(self):
        self.root_logger = logging.getLogger()
        self.original_handlers = self.root_logger.handlers.copy()
        self.original_level = self.root_logger.level
        self.engine_level = logging.getLogger("sqlalchemy.engine").level

    def teardown_method(self):
        for handler in self.root_logger.handlers[:]:
            handler.close()
            self.root_logger.removeHandler(handler)
        for handler in self.original_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.original_level)
        logging.getLogger("sqlalchemy.engine").setLevel(self.engine_level)

    def test_level_argument_wins_over_environment(self, tmp_path) -> None:
        with patch.dict("os.environ", {"LOG_LEVEL": "ERROR"}, clear=False):
            setup_server_logging(str(tmp_path / "server.log"), "DEBUG")

        assert self.root_logger.level == logging.DEBUG

    def test_sqlalchemy_engine_is_quiet_outside_debug(self, tmp_path) -> None:
        setup_server_logging(str(tmp_path / "server.log"), "INFO")

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_uvicorn_loggers_propagate_to_root(self, tmp_path) -> None:
        setup_server_logging(str(tmp_path / "server.log"), "INFO")

        assert logging.getLogger("uvicorn.access").propagate is True
        assert logging.getLogger("uvicorn.access").handlers == []
