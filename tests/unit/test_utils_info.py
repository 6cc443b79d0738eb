"""
Unit tests for package information utilities.
"""

import platform
import sys
from unittest.mock import patch

import pytest

import ocpexport
from ocpexport.utils.info import get_ocpexport_info, get_system_info, main, print_info, supported_combinations


class TestSystemInfo:
    """Test system information collection."""

    def test_get_system_info(self):
        """Test the reported interpreter and library versions."""
        import numpy

        info = get_system_info()
        assert info["python_version"] == sys.version
        assert info["platform"] == platform.platform()
        assert info["numpy_version"] == numpy.__version__
        assert "jinja2_version" in info
        assert "yaml_version" in info


class TestOcpexportInfo:
    """Test package information."""

    def test_version_and_strategies(self):
        """Test version and registered strategies."""
        info = get_ocpexport_info()
        assert info["version"] == ocpexport.__version__
        assert "RK4" in info["integrators"]
        assert "GAUSS_NEWTON_HPMPC" in info["solvers"]

    def test_supported_combinations(self):
        """Test the table of resolvable triples."""
        rows = supported_combinations()
        assert len(rows) == 18
        assert ("FULL_CONDENSING", "QPOASES", "EXACT_HESSIAN", "GAUSS_NEWTON_CONDENSED") in rows
        assert not any(row[:2] == ("FULL_CONDENSING", "FORCES") for row in rows)


class TestPrintInfo:
    """Test the info command."""

    def test_print_info(self, capsys):
        """Test the printed report."""
        print_info()
        out = capsys.readouterr().out
        assert f"ocpexport Version: {ocpexport.__version__}" in out
        assert "Supported combinations:" in out
        assert "GAUSS_NEWTON_BLOCK_QPDUNES" in out

    def test_main_failure(self, capsys):
        """Test that errors exit with status 1."""
        with patch("ocpexport.utils.info.print_info", side_effect=RuntimeError("boom")):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1
        assert "boom" in capsys.readouterr().out
