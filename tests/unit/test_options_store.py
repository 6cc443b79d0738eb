"""
Unit tests for the export option store.

Tests defaults, value coercion into the closed option domains and the
read-only state after resolution.
"""

import pytest

from ocpexport.options.store import OPTION_SPECS, ConfigurationStore, OptionKey
from ocpexport.utils.constants import (
    DEFAULT_MODULE_NAME,
    HessianApproximationMode,
    IntegratorType,
    QPSolverName,
    SparseQPSolutionMethod,
)
from ocpexport.utils.exceptions import InvalidOptionError


class TestDefaults:
    """Test default option values."""

    def test_every_key_has_a_default(self):
        """Test that every recognized key is readable on a fresh store."""
        store = ConfigurationStore()
        for key in OptionKey:
            assert store.get(key) == OPTION_SPECS[key].default

    def test_documented_defaults(self):
        """Test a representative set of default values."""
        store = ConfigurationStore()
        assert store.get(OptionKey.QP_SOLVER) == QPSolverName.QPOASES
        assert store.get(OptionKey.SPARSE_QP_SOLUTION) == SparseQPSolutionMethod.FULL_CONDENSING
        assert store.get(OptionKey.HESSIAN_APPROXIMATION) == HessianApproximationMode.GAUSS_NEWTON
        assert store.get(OptionKey.INTEGRATOR_TYPE) == IntegratorType.RK4
        assert store.get(OptionKey.GENERATE_MAKE_FILE) is True
        assert store.get(OptionKey.GENERATE_MATLAB_INTERFACE) is False
        assert store.get(OptionKey.CG_HARDCODE_CONSTRAINT_VALUES) is True
        assert store.get(OptionKey.CG_MODULE_NAME) == DEFAULT_MODULE_NAME

    def test_iteration_yields_all_keys(self):
        """Test iterating over key/value pairs."""
        keys = [key for key, _ in ConfigurationStore()]
        assert set(keys) == set(OptionKey)


class TestCoercion:
    """Test conversion of user values into option domains."""

    def setup_method(self):
        """Set up a fresh store."""
        self.store = ConfigurationStore()

    def test_enum_by_member_name(self):
        """Test enum options given by member name."""
        self.store.set("QP_SOLVER", "qpdunes")
        assert self.store.get(OptionKey.QP_SOLVER) == QPSolverName.QPDUNES

    def test_enum_by_member_value(self):
        """Test enum options given by member value."""
        self.store.set(OptionKey.QP_SOLVER, "qpOASES")
        assert self.store.get(OptionKey.QP_SOLVER) == QPSolverName.QPOASES

    def test_enum_out_of_domain(self):
        """Test that unknown enum values are rejected with the allowed set."""
        with pytest.raises(InvalidOptionError) as exc_info:
            self.store.set(OptionKey.QP_SOLVER, "CPLEX")
        assert exc_info.value.option == "QP_SOLVER"
        assert "QPOASES" in str(exc_info.value)

    @pytest.mark.parametrize("value,expected", [
        (True, True), (0, False), ("yes", True), ("NO", False), ("true", True), ("0", False),
    ])
    def test_bool_values(self, value, expected):
        """Test accepted spellings of boolean options."""
        self.store.set(OptionKey.GENERATE_TEST_FILE, value)
        assert self.store.get(OptionKey.GENERATE_TEST_FILE) is expected

    def test_bool_rejects_other_values(self):
        """Test that non-boolean values are rejected."""
        with pytest.raises(InvalidOptionError):
            self.store.set(OptionKey.GENERATE_TEST_FILE, "maybe")
        with pytest.raises(InvalidOptionError):
            self.store.set(OptionKey.GENERATE_TEST_FILE, 2)

    def test_int_from_string(self):
        """Test integer options given as strings, as on the command line."""
        self.store.set(OptionKey.NUM_INTEGRATOR_STEPS, "40")
        assert self.store.get(OptionKey.NUM_INTEGRATOR_STEPS) == 40

    def test_int_minimum(self):
        """Test that integer options enforce their minimum."""
        with pytest.raises(InvalidOptionError):
            self.store.set(OptionKey.NUM_INTEGRATOR_STEPS, 0)
        with pytest.raises(InvalidOptionError):
            self.store.set(OptionKey.CONDENSING_BLOCK_SIZE, -1)

    def test_int_rejects_bool_and_float(self):
        """Test that booleans and floats are not integers here."""
        with pytest.raises(InvalidOptionError):
            self.store.set(OptionKey.NUM_INTEGRATOR_STEPS, True)
        with pytest.raises(InvalidOptionError):
            self.store.set(OptionKey.NUM_INTEGRATOR_STEPS, 2.5)

    def test_float_option(self):
        """Test the Levenberg-Marquardt regularization value."""
        self.store.set(OptionKey.LEVENBERG_MARQUARDT, "1e-4")
        assert self.store.get(OptionKey.LEVENBERG_MARQUARDT) == pytest.approx(1e-4)
        with pytest.raises(InvalidOptionError):
            self.store.set(OptionKey.LEVENBERG_MARQUARDT, -1.0)

    def test_string_option(self):
        """Test that string options must be non-empty."""
        self.store.set(OptionKey.CG_MODULE_NAME, "pendulum")
        assert self.store[OptionKey.CG_MODULE_NAME] == "pendulum"
        with pytest.raises(InvalidOptionError):
            self.store.set(OptionKey.CG_MODULE_NAME, "")

    def test_unknown_key(self):
        """Test that unknown option keys are rejected."""
        with pytest.raises(InvalidOptionError) as exc_info:
            self.store.set("MAX_NUM_ITERATIONS", 3)
        assert exc_info.value.option == "MAX_NUM_ITERATIONS"

    def test_item_assignment(self):
        """Test dictionary-style assignment."""
        self.store["hessian_approximation"] = "EXACT_HESSIAN"
        assert self.store.get("HESSIAN_APPROXIMATION") == HessianApproximationMode.EXACT_HESSIAN


class TestFreezing:
    """Test the read-only state of a resolved session."""

    def test_frozen_store_rejects_writes(self):
        """Test that writes fail after freezing and values are kept."""
        store = ConfigurationStore({"QP_SOLVER": "QPDUNES"})
        store.freeze()

        assert store.frozen
        with pytest.raises(InvalidOptionError):
            store.set(OptionKey.QP_SOLVER, "QPOASES")
        assert store.get(OptionKey.QP_SOLVER) == QPSolverName.QPDUNES

    def test_copy_is_writable(self):
        """Test that a copy of a frozen store can be changed independently."""
        store = ConfigurationStore()
        store.freeze()
        clone = store.copy()

        clone.set(OptionKey.QP_SOLVER, "FORCES")
        assert not clone.frozen
        assert store.get(OptionKey.QP_SOLVER) == QPSolverName.QPOASES


class TestSerialization:
    """Test conversion from and to plain data."""

    def test_from_dict(self):
        """Test building a store from parsed file data."""
        store = ConfigurationStore.from_dict({
            "QP_SOLVER": "QPDUNES",
            "sparse_qp_solution": "SPARSE_SOLVER",
            "NUM_INTEGRATOR_STEPS": 30,
        })
        assert store.get(OptionKey.QP_SOLVER) == QPSolverName.QPDUNES
        assert store.get(OptionKey.SPARSE_QP_SOLUTION) == SparseQPSolutionMethod.SPARSE_SOLVER
        assert store.get(OptionKey.NUM_INTEGRATOR_STEPS) == 30

    def test_to_dict_uses_names(self):
        """Test that enum values are serialized by member name."""
        data = ConfigurationStore({"QP_SOLVER": "FORCES"}).to_dict()
        assert data["qp_solver"] == "FORCES"
        assert data["num_integrator_steps"] == 1

    def test_to_dict_round_trip(self):
        """Test that serialized data rebuilds an equal store."""
        original = ConfigurationStore({"INTEGRATOR_TYPE": "IRK_GL4", "LEVENBERG_MARQUARDT": 0.5})
        rebuilt = ConfigurationStore.from_dict(original.to_dict())
        assert dict(rebuilt) == dict(original)
