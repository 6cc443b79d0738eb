"""
Optimal Control Problem Description.

This module defines the immutable data structures describing the problem
handed to the export pipeline: dimensions, the dynamic model metadata,
the objective shape and the constraints. Only the information the
exporter needs is modelled; symbolic expressions stay with the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

import numpy as np

from ..utils.constants import WeightingMatricesType


@dataclass(frozen=True)
class Grid:
    """Uniform time grid with ``num_intervals`` intervals."""
    start: float
    end: float
    num_intervals: int

    @property
    def step(self) -> float:
        return (self.end - self.start) / self.num_intervals

    def points(self) -> np.ndarray:
        return np.linspace(self.start, self.end, self.num_intervals + 1)


@dataclass(frozen=True)
class ModelData:
    """Metadata of the dynamic model."""
    nx: int
    nu: int = 0
    nxa: int = 0
    ndx: int = 0
    nod: int = 0
    nui: int = 0
    np: int = 0
    discretized: bool = False
    implicit: bool = False
    rhs_name: str = "rhs"
    num_integration_steps: int = 1

    def __post_init__(self):
        for name in ("nx", "nu", "nxa", "ndx", "nod", "nui", "np"):
            if getattr(self, name) < 0:
                raise ValueError(f"Model dimension {name} must be non-negative")
        if self.nx == 0:
            raise ValueError("Model must have at least one differential state")


@dataclass(frozen=True)
class LSQTerm:
    """Least-squares objective term ``||h(x, u) - y||^2_W``."""
    ny: int
    weight: Optional[np.ndarray] = field(default=None, compare=False)
    varying: bool = False

    def __post_init__(self):
        if self.ny < 0:
            raise ValueError("Residual dimension must be non-negative")
        if self.weight is not None:
            weight = np.atleast_2d(np.asarray(self.weight, dtype=float))
            object.__setattr__(self, "weight", weight)

    @property
    def is_constant(self) -> bool:
        """True when the weighting matrix is known at export time."""
        return self.weight is not None and not self.varying


@dataclass(frozen=True)
class Objective:
    """Shape of the objective: least-squares terms plus general terms."""
    lsq: Optional[LSQTerm] = None
    lsq_end: Optional[LSQTerm] = None
    num_mayer_terms: int = 0
    num_lagrange_terms: int = 0
    linear_terms: bool = False

    def has_general_terms(self) -> bool:
        return self.num_mayer_terms > 0 or self.num_lagrange_terms > 0

    @property
    def ny(self) -> int:
        return self.lsq.ny if self.lsq is not None else 0

    @property
    def nyn(self) -> int:
        return self.lsq_end.ny if self.lsq_end is not None else 0

    def weighting_matrices_type(self) -> WeightingMatricesType:
        """Classify the weighting matrices of the least-squares terms."""
        terms = [t for t in (self.lsq, self.lsq_end) if t is not None]
        if not terms:
            return WeightingMatricesType.EMPTY
        if any(t.varying for t in terms):
            return WeightingMatricesType.VARYING
        return WeightingMatricesType.CONSTANT


@dataclass(frozen=True)
class Bound:
    """Box bound on one component of the state or control vector."""
    index: int
    lower: float = -np.inf
    upper: float = np.inf

    @property
    def has_lower(self) -> bool:
        return bool(np.isfinite(self.lower))

    @property
    def has_upper(self) -> bool:
        return bool(np.isfinite(self.upper))


@dataclass(frozen=True)
class Constraints:
    """Box bounds and counts of general path and point constraints."""
    state_bounds: Tuple[Bound, ...] = ()
    control_bounds: Tuple[Bound, ...] = ()
    num_path_constraints: int = 0
    num_point_constraints: int = 0


@dataclass(frozen=True)
class OCP:
    """
    Optimal control problem over ``N`` control intervals.

    The exporter only reads this object. The resolver derives a copy with
    the requested number of integration steps bound.
    """
    N: int
    model: ModelData
    objective: Objective = field(default_factory=Objective)
    constraints: Constraints = field(default_factory=Constraints)
    start_time: float = 0.0
    end_time: float = 1.0
    equidistant_control_grid: bool = True

    def __post_init__(self):
        if self.N < 1:
            raise ValueError("Horizon length N must be at least 1")
        if self.end_time <= self.start_time:
            raise ValueError("End time must be larger than start time")
        for bound in self.constraints.state_bounds:
            if not 0 <= bound.index < self.model.nx:
                raise ValueError(f"State bound index {bound.index} out of range")
        for bound in self.constraints.control_bounds:
            if not 0 <= bound.index < self.model.nu:
                raise ValueError(f"Control bound index {bound.index} out of range")

    @property
    def nx(self) -> int:
        return self.model.nx

    @property
    def ndx(self) -> int:
        return self.model.ndx

    @property
    def nxa(self) -> int:
        return self.model.nxa

    @property
    def nu(self) -> int:
        return self.model.nu

    @property
    def np(self) -> int:
        return self.model.np

    @property
    def nod(self) -> int:
        return self.model.nod

    def has_objective(self) -> bool:
        """True when the objective has Mayer or Lagrange terms."""
        return self.objective.has_general_terms()

    def has_equidistant_control_grid(self) -> bool:
        return self.equidistant_control_grid

    def control_grid(self) -> Grid:
        return Grid(self.start_time, self.end_time, self.N)

    def integration_grid(self) -> Grid:
        """Integration grid of one shooting interval."""
        steps = max(1, self.model.num_integration_steps // self.N)
        shooting = self.control_grid()
        return Grid(0.0, shooting.step, steps)

    def with_integration_steps(self, num_steps: int) -> "OCP":
        """Return a copy with ``num_steps`` integration steps over the horizon."""
        if num_steps < 1:
            raise ValueError("Number of integration steps must be at least 1")
        return replace(self, model=replace(self.model, num_integration_steps=num_steps))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OCP":
        """
        Build a problem from plain data.

        Expected layout::

            N: 20
            end_time: 2.0
            model: {nx: 4, nu: 1}
            objective: {lsq: {ny: 5, weight: [[...]]}, lsq_end: {ny: 4}}
            constraints:
              control_bounds: [{index: 0, lower: -1, upper: 1}]
        """
        model = ModelData(**data["model"])

        obj_data: Dict[str, Any] = dict(data.get("objective", {}))
        for term in ("lsq", "lsq_end"):
            if obj_data.get(term) is not None:
                obj_data[term] = LSQTerm(**obj_data[term])
        objective = Objective(**obj_data)

        con_data: Dict[str, Any] = dict(data.get("constraints", {}))
        for kind in ("state_bounds", "control_bounds"):
            con_data[kind] = tuple(Bound(**b) for b in con_data.get(kind, ()))
        constraints = Constraints(**con_data)

        return cls(
            N=int(data["N"]),
            model=model,
            objective=objective,
            constraints=constraints,
            start_time=float(data.get("start_time", 0.0)),
            end_time=float(data.get("end_time", 1.0)),
            equidistant_control_grid=bool(data.get("equidistant_control_grid", True)),
        )
