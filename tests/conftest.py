"""
Pytest configuration and shared fixtures for ocpexport tests.

This module provides common test fixtures, configuration, and utilities
used across the test suite.
"""

import pytest
import numpy as np
from pathlib import Path
from unittest.mock import Mock
from typing import Any, Dict

from ocpexport.ocp.problem import OCP, Bound, Constraints, LSQTerm, ModelData, Objective
from ocpexport.options.store import ConfigurationStore
from ocpexport.utils.logging import ExportLogger


# Problem fixtures
def build_ocp(
    N: int = 20,
    nx: int = 4,
    nu: int = 1,
    ny: int = 5,
    nyn: int = 4,
    state_bounds=(),
    control_bounds=(Bound(0, -1.0, 1.0),),
    **model_kwargs,
) -> OCP:
    """Build a least-squares tracking problem."""
    objective = Objective(
        lsq=LSQTerm(ny, np.eye(ny)) if ny else None,
        lsq_end=LSQTerm(nyn, np.eye(nyn)) if nyn else None,
    )
    return OCP(
        N=N,
        model=ModelData(nx=nx, nu=nu, **model_kwargs),
        objective=objective,
        constraints=Constraints(state_bounds=tuple(state_bounds), control_bounds=tuple(control_bounds)),
        end_time=2.0,
    )


@pytest.fixture
def default_ocp():
    """Cart-pole sized problem: 4 states, 1 control, 20 intervals."""
    return build_ocp()


@pytest.fixture
def make_ocp():
    """Factory for problems with custom dimensions."""
    return build_ocp


@pytest.fixture
def default_options():
    """Option store holding only defaults."""
    return ConfigurationStore()


@pytest.fixture
def make_options():
    """Factory for option stores from keyword overrides."""
    def _make(**overrides: Any) -> ConfigurationStore:
        return ConfigurationStore({key.upper(): value for key, value in overrides.items()})
    return _make


# Output fixtures
@pytest.fixture
def export_dir(tmp_path):
    """Export folder inside the pytest temporary directory."""
    return tmp_path / "export"


@pytest.fixture
def mock_reporter():
    """Reporter recording every call."""
    reporter = Mock(spec=ExportLogger)
    reporter.logger = Mock()
    return reporter


@pytest.fixture
def problem_data() -> Dict[str, Any]:
    """Problem description as read from a YAML or JSON file."""
    return {
        "ocp": {
            "N": 10,
            "end_time": 1.0,
            "model": {"nx": 4, "nu": 1},
            "objective": {"lsq": {"ny": 5}, "lsq_end": {"ny": 4}},
            "constraints": {"control_bounds": [{"index": 0, "lower": -1.0, "upper": 1.0}]},
        },
        "options": {"QP_SOLVER": "QPOASES", "HESSIAN_APPROXIMATION": "GAUSS_NEWTON"},
    }


# Utility fixtures for tests
def _read_artifact(folder: Path, name: str) -> str:
    """Return the text of an exported file."""
    path = Path(folder) / name
    assert path.exists(), f"Expected artifact {name} in {folder}"
    return path.read_text()


def _define_value(text: str, name: str) -> int:
    """Value of a ``#define NAME value`` line."""
    for line in text.splitlines():
        parts = line.split()
        if len(parts) == 3 and parts[0] == "#define" and parts[1] == name:
            return int(parts[2])
    pytest.fail(f"No #define {name} found")


@pytest.fixture
def read_artifact():
    """Reader of exported files that fails when the file is missing."""
    return _read_artifact


@pytest.fixture
def define_value():
    """Parser of `#define` values in generated headers."""
    return _define_value


# Pytest hooks for test collection and reporting
def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        # Add markers based on test path
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests for complete export sessions"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
