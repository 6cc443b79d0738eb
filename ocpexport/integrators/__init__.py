"""
Integrator export strategies.

Explicit Runge-Kutta schemes, Gauss-Legendre and Radau IIA collocation
and the factory that selects one of them by ``IntegratorType``.
"""

from .base import IntegratorExport, RungeKuttaExport
from .explicit import ExplicitEulerExport, ExplicitRungeKuttaExport, RK2Export, RK3Export, RK4Export
from .implicit import (
    GaussLegendreExport,
    ImplicitRungeKuttaExport,
    RadauIIAExport,
    collocation_tableau,
    gauss_legendre_nodes,
    radau_iia_nodes,
)
from .linear_solvers import LinearSolverExport, create_linear_solver
from .registry import IntegratorExportFactory

__all__ = [
    "IntegratorExport",
    "RungeKuttaExport",
    "ExplicitRungeKuttaExport",
    "ExplicitEulerExport",
    "RK2Export",
    "RK3Export",
    "RK4Export",
    "ImplicitRungeKuttaExport",
    "GaussLegendreExport",
    "RadauIIAExport",
    "collocation_tableau",
    "gauss_legendre_nodes",
    "radau_iia_nodes",
    "LinearSolverExport",
    "create_linear_solver",
    "IntegratorExportFactory",
]
