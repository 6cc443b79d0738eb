"""
Unit tests for the exception hierarchy.

Tests message formatting, attached details and the relations between
the export error classes.
"""

import pytest

from ocpexport.utils.exceptions import (
    CodeExportError,
    InvalidArgumentsError,
    InvalidObjectiveForExportError,
    InvalidOptionError,
    NotImplementedYetError,
    OCPExportError,
    UnableToExportCodeError,
)


class TestOCPExportError:
    """Test the base exception."""

    def test_basic(self):
        """Test an error without details."""
        error = OCPExportError("Test error message")
        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.details == {}

    def test_with_details(self):
        """Test that details are appended to the message."""
        error = OCPExportError("Unsupported combination", {"qp_solver": "FORCES", "N": 20})
        assert error.details == {"qp_solver": "FORCES", "N": 20}
        assert str(error) == "Unsupported combination (qp_solver=FORCES, N=20)"

    @pytest.mark.parametrize("error_class", [
        InvalidArgumentsError,
        InvalidOptionError,
        InvalidObjectiveForExportError,
        NotImplementedYetError,
        UnableToExportCodeError,
        CodeExportError,
    ])
    def test_hierarchy(self, error_class):
        """Test that every export error derives from the base class."""
        assert issubclass(error_class, OCPExportError)
        with pytest.raises(OCPExportError):
            raise error_class("failure")


class TestInvalidOptionError:
    """Test option errors."""

    def test_option_and_value(self):
        """Test the offending option in the details."""
        error = InvalidOptionError("Block size must divide the horizon", option="CONDENSING_BLOCK_SIZE", value=3)
        assert error.option == "CONDENSING_BLOCK_SIZE"
        assert error.value == 3
        assert "option=CONDENSING_BLOCK_SIZE" in str(error)
        assert "value=3" in str(error)

    def test_without_context(self):
        """Test an option error without option name."""
        error = InvalidOptionError("Unknown integrator")
        assert error.details == {}
        assert str(error) == "Unknown integrator"


class TestUnableToExportCodeError:
    """Test I/O errors."""

    def test_path(self):
        """Test the failing destination in the details."""
        error = UnableToExportCodeError("Cannot write", path="/tmp/x/Makefile")
        assert error.path == "/tmp/x/Makefile"
        assert "path=/tmp/x/Makefile" in str(error)


class TestCodeExportError:
    """Test the orchestrator error."""

    def test_cause_and_step(self):
        """Test the failing step and its cause."""
        cause = NotImplementedYetError("MEX needs hard-coded constraints")
        error = CodeExportError("Export failed", cause=cause, step="matlab_interface")
        assert error.cause is cause
        assert error.step == "matlab_interface"
        assert "step=matlab_interface" in str(error)

    def test_chaining(self):
        """Test that the cause is chained when raised from it."""
        cause = InvalidArgumentsError("bad combination")
        with pytest.raises(CodeExportError) as exc_info:
            try:
                raise cause
            except OCPExportError as e:
                raise CodeExportError("Export failed", cause=e, step="resolve") from e
        assert exc_info.value.__cause__ is cause
        assert exc_info.value.cause is cause

    def test_without_step(self):
        """Test an export error without step."""
        error = CodeExportError("Export failed")
        assert error.step is None
        assert error.cause is None
        assert str(error) == "Export failed"
