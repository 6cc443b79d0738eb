"""
Export Option Store.

This module defines every option recognized by the export pipeline,
together with its closed value domain and its default, and the store
that holds one session's option values.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from ..utils.constants import (
    DEFAULT_MODULE_NAME,
    HessianApproximationMode,
    IntegratorType,
    LinearAlgebraSolver,
    QPSolverName,
    SparseQPSolutionMethod,
    StateDiscretizationType,
    parse_enum,
)
from ..utils.exceptions import InvalidOptionError
from ..utils.logging import get_logger

logger = get_logger(__name__)


class OptionKey(Enum):
    """Recognized export options."""

    QP_SOLVER = "qp_solver"
    SPARSE_QP_SOLUTION = "sparse_qp_solution"
    HESSIAN_APPROXIMATION = "hessian_approximation"
    DISCRETIZATION_TYPE = "discretization_type"
    INTEGRATOR_TYPE = "integrator_type"
    NUM_INTEGRATOR_STEPS = "num_integrator_steps"
    LEVENBERG_MARQUARDT = "levenberg_marquardt"
    LINEAR_ALGEBRA_SOLVER = "linear_algebra_solver"
    CONDENSING_BLOCK_SIZE = "condensing_block_size"
    GENERATE_MAKE_FILE = "generate_make_file"
    GENERATE_TEST_FILE = "generate_test_file"
    GENERATE_MATLAB_INTERFACE = "generate_matlab_interface"
    GENERATE_SIMULINK_INTERFACE = "generate_simulink_interface"
    USE_SINGLE_PRECISION = "use_single_precision"
    CG_HARDCODE_CONSTRAINT_VALUES = "cg_hardcode_constraint_values"
    FIX_INITIAL_STATE = "fix_initial_state"
    CG_USE_ARRIVAL_COST = "cg_use_arrival_cost"
    CG_COMPUTE_COVARIANCE_MATRIX = "cg_compute_covariance_matrix"
    CG_MODULE_NAME = "cg_module_name"
    CG_EXPORT_FOLDER_NAME = "cg_export_folder_name"


@dataclass(frozen=True)
class OptionSpec:
    """Value domain and default of one option."""

    kind: type
    default: Any
    minimum: Optional[float] = None

    def coerce(self, key: OptionKey, value: Any) -> Any:
        """Convert ``value`` into the option's domain or raise."""
        if issubclass(self.kind, Enum):
            try:
                return parse_enum(self.kind, value)
            except ValueError:
                allowed = ", ".join(member.name for member in self.kind)
                raise InvalidOptionError(
                    f"Invalid value for {key.name}, expected one of: {allowed}",
                    option=key.name,
                    value=value,
                ) from None

        if self.kind is bool:
            if isinstance(value, bool):
                return value
            if isinstance(value, int) and value in (0, 1):
                return bool(value)
            if isinstance(value, str) and value.lower() in ("yes", "no", "true", "false", "1", "0"):
                return value.lower() in ("yes", "true", "1")
            raise InvalidOptionError(f"{key.name} expects a boolean", option=key.name, value=value)

        if self.kind is int:
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                raise InvalidOptionError(f"{key.name} expects an integer", option=key.name, value=value)
            try:
                coerced = int(value)
            except ValueError:
                raise InvalidOptionError(f"{key.name} expects an integer", option=key.name, value=value) from None
        elif self.kind is float:
            if isinstance(value, bool):
                raise InvalidOptionError(f"{key.name} expects a number", option=key.name, value=value)
            try:
                coerced = float(value)
            except (TypeError, ValueError):
                raise InvalidOptionError(f"{key.name} expects a number", option=key.name, value=value) from None
        else:
            if not isinstance(value, str) or not value:
                raise InvalidOptionError(f"{key.name} expects a non-empty string", option=key.name, value=value)
            return value

        if self.minimum is not None and coerced < self.minimum:
            raise InvalidOptionError(
                f"{key.name} must be at least {self.minimum}", option=key.name, value=value
            )
        return coerced


OPTION_SPECS: Dict[OptionKey, OptionSpec] = {
    OptionKey.QP_SOLVER: OptionSpec(QPSolverName, QPSolverName.QPOASES),
    OptionKey.SPARSE_QP_SOLUTION: OptionSpec(
        SparseQPSolutionMethod, SparseQPSolutionMethod.FULL_CONDENSING
    ),
    OptionKey.HESSIAN_APPROXIMATION: OptionSpec(
        HessianApproximationMode, HessianApproximationMode.GAUSS_NEWTON
    ),
    OptionKey.DISCRETIZATION_TYPE: OptionSpec(
        StateDiscretizationType, StateDiscretizationType.MULTIPLE_SHOOTING
    ),
    OptionKey.INTEGRATOR_TYPE: OptionSpec(IntegratorType, IntegratorType.RK4),
    OptionKey.NUM_INTEGRATOR_STEPS: OptionSpec(int, 1, minimum=1),
    OptionKey.LEVENBERG_MARQUARDT: OptionSpec(float, 0.0, minimum=0.0),
    OptionKey.LINEAR_ALGEBRA_SOLVER: OptionSpec(LinearAlgebraSolver, LinearAlgebraSolver.GAUSS_LU),
    OptionKey.CONDENSING_BLOCK_SIZE: OptionSpec(int, 0, minimum=0),
    OptionKey.GENERATE_MAKE_FILE: OptionSpec(bool, True),
    OptionKey.GENERATE_TEST_FILE: OptionSpec(bool, True),
    OptionKey.GENERATE_MATLAB_INTERFACE: OptionSpec(bool, False),
    OptionKey.GENERATE_SIMULINK_INTERFACE: OptionSpec(bool, False),
    OptionKey.USE_SINGLE_PRECISION: OptionSpec(bool, False),
    OptionKey.CG_HARDCODE_CONSTRAINT_VALUES: OptionSpec(bool, True),
    OptionKey.FIX_INITIAL_STATE: OptionSpec(bool, True),
    OptionKey.CG_USE_ARRIVAL_COST: OptionSpec(bool, False),
    OptionKey.CG_COMPUTE_COVARIANCE_MATRIX: OptionSpec(bool, False),
    OptionKey.CG_MODULE_NAME: OptionSpec(str, DEFAULT_MODULE_NAME),
    OptionKey.CG_EXPORT_FOLDER_NAME: OptionSpec(str, "export"),
}


class ConfigurationStore:
    """
    Option values of one export session.

    Every recognized key starts at its default, so every key read
    downstream holds a value from its domain. Once the session resolves,
    the store is frozen and further writes are rejected.
    """

    def __init__(self, values: Optional[Mapping[Any, Any]] = None):
        self._values: Dict[OptionKey, Any] = {key: spec.default for key, spec in OPTION_SPECS.items()}
        self._frozen = False
        if values:
            for key, value in values.items():
                self.set(key, value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConfigurationStore":
        """Build a store from plain data, e.g. a parsed YAML section."""
        return cls(data)

    @staticmethod
    def _key(key: Any) -> OptionKey:
        try:
            return parse_enum(OptionKey, key)
        except ValueError:
            raise InvalidOptionError(f"Unknown option '{key}'", option=str(key)) from None

    def set(self, key: Any, value: Any) -> None:
        """
        Assign an option value.

        Raises:
            InvalidOptionError: For unknown keys, out-of-domain values or
                writes to a frozen store
        """
        option = self._key(key)
        if self._frozen:
            raise InvalidOptionError(
                "Options are read-only once the export session is resolved", option=option.name
            )
        self._values[option] = OPTION_SPECS[option].coerce(option, value)
        logger.debug(f"Option {option.name} = {self._values[option]}")

    def get(self, key: Any) -> Any:
        """Return the value of an option."""
        return self._values[self._key(key)]

    def __getitem__(self, key: Any) -> Any:
        return self.get(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.set(key, value)

    def __iter__(self) -> Iterator[Tuple[OptionKey, Any]]:
        return iter(self._values.items())

    def freeze(self) -> None:
        """Make the store read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def copy(self) -> "ConfigurationStore":
        """Return an unfrozen copy with the same values."""
        clone = ConfigurationStore()
        clone._values = dict(self._values)
        return clone

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the store using option and member names."""
        return {
            key.value: value.name if isinstance(value, Enum) else value
            for key, value in self._values.items()
        }
