"""
Unit tests for the problem description.
"""

import numpy as np
import pytest

from ocpexport.ocp.problem import OCP, Bound, Grid, LSQTerm, ModelData, Objective
from ocpexport.utils.constants import WeightingMatricesType


class TestModelData:
    """Test model metadata validation."""

    def test_negative_dimension(self):
        """Test that negative dimensions are rejected."""
        with pytest.raises(ValueError):
            ModelData(nx=2, nu=-1)

    def test_needs_differential_state(self):
        """Test that a model without differential states is rejected."""
        with pytest.raises(ValueError):
            ModelData(nx=0, nu=1)


class TestObjective:
    """Test objective classification."""

    def test_empty_objective(self):
        """Test an objective without least-squares terms."""
        objective = Objective()
        assert objective.ny == 0
        assert objective.nyn == 0
        assert objective.weighting_matrices_type() == WeightingMatricesType.EMPTY

    def test_constant_weights(self):
        """Test an objective with weights known at export time."""
        objective = Objective(lsq=LSQTerm(3, np.eye(3)), lsq_end=LSQTerm(2, np.eye(2)))
        assert objective.ny == 3
        assert objective.nyn == 2
        assert objective.weighting_matrices_type() == WeightingMatricesType.CONSTANT

    def test_varying_weights(self):
        """Test that one varying term makes the weights varying."""
        objective = Objective(lsq=LSQTerm(3, varying=True), lsq_end=LSQTerm(2, np.eye(2)))
        assert objective.weighting_matrices_type() == WeightingMatricesType.VARYING

    def test_weight_is_converted_to_matrix(self):
        """Test that nested lists become a 2D array."""
        term = LSQTerm(2, [[1, 0], [0, 2]])
        assert isinstance(term.weight, np.ndarray)
        assert term.weight.shape == (2, 2)
        assert term.is_constant

    def test_general_terms(self):
        """Test detection of Mayer and Lagrange terms."""
        assert Objective(num_mayer_terms=1).has_general_terms()
        assert Objective(num_lagrange_terms=2).has_general_terms()
        assert not Objective(lsq=LSQTerm(1)).has_general_terms()


class TestBounds:
    """Test bound helpers."""

    def test_one_sided_bound(self):
        """Test a bound with only an upper limit."""
        bound = Bound(0, upper=3.0)
        assert not bound.has_lower
        assert bound.has_upper

    def test_bound_index_out_of_range(self, make_ocp):
        """Test that bounds must address existing components."""
        with pytest.raises(ValueError):
            make_ocp(nu=1, control_bounds=(Bound(1, -1.0, 1.0),))
        with pytest.raises(ValueError):
            make_ocp(nx=2, state_bounds=(Bound(5, 0.0, 1.0),))


class TestOCP:
    """Test the problem object."""

    def test_horizon_must_be_positive(self):
        """Test that N must be at least one."""
        with pytest.raises(ValueError):
            OCP(N=0, model=ModelData(nx=1))

    def test_time_interval(self):
        """Test that the end time must exceed the start time."""
        with pytest.raises(ValueError):
            OCP(N=5, model=ModelData(nx=1), start_time=1.0, end_time=1.0)

    def test_control_grid(self, default_ocp):
        """Test the uniform control grid."""
        grid = default_ocp.control_grid()
        assert grid.num_intervals == 20
        assert grid.step == pytest.approx(0.1)
        assert len(grid.points()) == 21

    def test_integration_grid(self, default_ocp):
        """Test that integration steps are spread over the shooting intervals."""
        bound = default_ocp.with_integration_steps(60)
        grid = bound.integration_grid()
        assert grid.num_intervals == 3
        assert grid.step == pytest.approx(0.1 / 3)

    def test_integration_grid_has_at_least_one_step(self, default_ocp):
        """Test fewer integration steps than intervals."""
        grid = default_ocp.with_integration_steps(5).integration_grid()
        assert grid.num_intervals == 1

    def test_with_integration_steps_returns_copy(self, default_ocp):
        """Test that binding integration steps leaves the problem untouched."""
        bound = default_ocp.with_integration_steps(40)
        assert bound.model.num_integration_steps == 40
        assert default_ocp.model.num_integration_steps == 1
        with pytest.raises(ValueError):
            default_ocp.with_integration_steps(0)

    def test_from_dict(self, problem_data):
        """Test building a problem from parsed file data."""
        ocp = OCP.from_dict(problem_data["ocp"])
        assert ocp.N == 10
        assert ocp.nx == 4
        assert ocp.nu == 1
        assert ocp.objective.ny == 5
        assert ocp.objective.nyn == 4
        assert ocp.constraints.control_bounds == (Bound(0, -1.0, 1.0),)
        assert ocp.has_equidistant_control_grid()


class TestGrid:
    """Test the time grid."""

    def test_points(self):
        """Test grid points including both ends."""
        points = Grid(0.0, 1.0, 4).points()
        np.testing.assert_allclose(points, [0.0, 0.25, 0.5, 0.75, 1.0])
