"""
Unit tests for logging utilities.

Tests the logging configuration, logger naming and the export session
reporter.
"""

import logging
import os
import tempfile
from unittest.mock import Mock, patch

import pytest

from ocpexport.utils.logging import ExportLogger, get_logger, setup_logging


class TestLoggingSetup:
    """Test logging setup and configuration."""

    def teardown_method(self):
        """Restore the default configuration."""
        setup_logging(level="INFO")

    def test_setup_logging_default(self):
        """Test default logging setup."""
        with patch.dict("os.environ", {}, clear=False):
            os.environ.pop("OCPEXPORT_LOG_LEVEL", None)
            setup_logging()

        logger = logging.getLogger("ocpexport")
        assert logger.level == logging.INFO
        assert len(logger.handlers) > 0
        assert logger.propagate is False

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    def test_setup_logging_levels(self, level):
        """Test logging setup with each level."""
        setup_logging(level=level)
        assert logging.getLogger("ocpexport").level == getattr(logging, level)

    def test_setup_logging_lowercase_level(self):
        """Test that level names are case-insensitive."""
        setup_logging(level="debug")
        assert logging.getLogger("ocpexport").level == logging.DEBUG

    def test_setup_logging_invalid_level(self):
        """Test logging setup with invalid level defaults to INFO."""
        setup_logging(level="INVALID")
        assert logging.getLogger("ocpexport").level == logging.INFO

    def test_setup_logging_environment_variable(self):
        """Test logging setup with environment variable."""
        with patch.dict("os.environ", {"OCPEXPORT_LOG_LEVEL": "DEBUG"}):
            setup_logging()
            assert logging.getLogger("ocpexport").level == logging.DEBUG

    def test_setup_logging_with_file(self):
        """Test logging setup with file output."""
        with tempfile.NamedTemporaryFile(suffix=".log", delete=False) as f:
            log_file = f.name

        try:
            setup_logging(log_file=log_file)
            logger = logging.getLogger("ocpexport")

            handler_types = [type(h).__name__ for h in logger.handlers]
            assert "StreamHandler" in handler_types
            assert "FileHandler" in handler_types

            get_logger("file_test").info("Test message")
            for handler in logger.handlers:
                handler.flush()
            with open(log_file, "r") as f:
                content = f.read()
            assert "Test message" in content
            assert "ocpexport.file_test" in content
            assert "INFO" in content
        finally:
            setup_logging(level="INFO")
            if os.path.exists(log_file):
                os.unlink(log_file)

    def test_setup_logging_removes_existing_handlers(self):
        """Test that setup_logging removes existing handlers."""
        logger = logging.getLogger("ocpexport")
        dummy_handler = logging.StreamHandler()
        logger.addHandler(dummy_handler)

        setup_logging()

        assert dummy_handler not in logger.handlers
        assert len(logger.handlers) == 1


class TestGetLogger:
    """Test logger naming."""

    def test_prefixes_package_name(self):
        """Test that foreign names are placed under the package logger."""
        logger = get_logger("test_module")
        assert logger.name == "ocpexport.test_module"
        assert logger is get_logger("test_module")

    def test_module_names_unchanged(self):
        """Test that package module names are used as is."""
        assert get_logger("ocpexport.export.resolver").name == "ocpexport.export.resolver"
        assert get_logger("ocpexport").name == "ocpexport"

    def test_hierarchy(self):
        """Test that child loggers hang below the package logger."""
        child = get_logger("parent.child")
        assert child.name == "ocpexport.parent.child"
        assert child.name.startswith("ocpexport.")


class TestExportLogger:
    """Test the export session reporter."""

    def test_creation(self):
        """Test reporter creation."""
        reporter = ExportLogger("test_component")
        assert reporter.logger.name == "ocpexport.test_component"
        assert isinstance(reporter.logger, logging.Logger)

    @patch("ocpexport.utils.logging.get_logger")
    def test_log_export_start(self, mock_get_logger):
        """Test logging the start of an export."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        ExportLogger("test").log_export_start("mpc", "/tmp/out")

        mock_logger.info.assert_called_once()
        message = mock_logger.info.call_args[0][0]
        assert "'mpc'" in message
        assert "/tmp/out" in message

    @patch("ocpexport.utils.logging.get_logger")
    def test_log_resolution(self, mock_get_logger):
        """Test logging the bound strategies."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        ExportLogger("test").log_resolution("RK4", "GAUSS_NEWTON_CONDENSED")

        message = mock_logger.info.call_args[0][0]
        assert "RK4" in message
        assert "GAUSS_NEWTON_CONDENSED" in message

    @patch("ocpexport.utils.logging.get_logger")
    def test_log_artifact(self, mock_get_logger):
        """Test that written artifacts are logged at debug level."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        ExportLogger("test").log_artifact("export/Makefile")

        mock_logger.debug.assert_called_once()
        assert "export/Makefile" in mock_logger.debug.call_args[0][0]

    @patch("ocpexport.utils.logging.get_logger")
    def test_log_artifact_skipped(self, mock_get_logger):
        """Test that skipped artifacts are warnings."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        ExportLogger("test").log_artifact_skipped("Simulink interface", "HPMPC is not supported")

        mock_logger.warning.assert_called_once()
        message = mock_logger.warning.call_args[0][0]
        assert "Skipping Simulink interface" in message
        assert "HPMPC is not supported" in message

    @patch("ocpexport.utils.logging.get_logger")
    def test_log_qp_dimensions(self, mock_get_logger):
        """Test the code generation summary."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        ExportLogger("test").log_qp_dimensions(20, 4)

        message = mock_logger.info.call_args[0][0]
        assert "Number of QP variables: 20" in message
        assert "Number of path and point constraints: 4" in message

    def test_log_banner(self):
        """Test the tool banner."""
        reporter = ExportLogger("banner")
        with patch.object(reporter.logger, "info") as mock_info:
            reporter.log_banner("ocpexport", "0.1.0")
        mock_info.assert_called_once_with("ocpexport 0.1.0")


if __name__ == "__main__":
    pytest.main([__file__])
