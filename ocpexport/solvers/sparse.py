"""
Sparse Solvers.

These strategies keep the states as QP variables and pass the
multistage QP to a structure exploiting backend: FORCES, qpDUNES or
HPMPC. The QP variables are ordered stage by stage as
``x_0, u_0, x_1, u_1, ..., x_N``.
"""

from __future__ import annotations

from typing import Dict, List

from ..codegen.declarations import DataDeclaration, ExportFunction
from ..codegen.export_file import ExportFile
from ..utils.constants import VARIABLES_INSTANCE_NAME, WORKSPACE_INSTANCE_NAME, QPSolverName, SolverStrategy
from .base import WORKSPACE, BoundCounting, NLPSolverExport


class SparseSolverExport(NLPSolverExport):
    """Base class of solvers passing the uncondensed QP to the backend."""

    @property
    def stage_dim(self) -> int:
        return self.nx + self.nu

    def get_num_qp_vars(self) -> int:
        return (self.N + 1) * self.nx + self.N * self.nu

    def _qp_data_declarations(self) -> List[DataDeclaration]:
        N, nx = self.N, self.nx
        nv = self.get_num_qp_vars()
        return [
            DataDeclaration("qpH", N * self.stage_dim * self.stage_dim + nx * nx, struct=WORKSPACE),
            DataDeclaration("qpg", nv, struct=WORKSPACE),
            DataDeclaration("qpLb", nv, struct=WORKSPACE),
            DataDeclaration("qpUb", nv, struct=WORKSPACE),
            DataDeclaration("qpC", N * nx, self.stage_dim, struct=WORKSPACE),
            DataDeclaration("qpc", N * nx, struct=WORKSPACE),
            DataDeclaration("qpPrimal", nv, struct=WORKSPACE),
            DataDeclaration("qpLambda", N * nx, struct=WORKSPACE),
        ]

    def _qp_prototypes(self) -> List[ExportFunction]:
        return [
            ExportFunction(self.fn("prepareQP")),
            ExportFunction(self.fn("embedFdb")),
            ExportFunction(self.fn("expand")),
        ]

    def _prepare_lines(self, sink: ExportFile) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        N, nx, nu = self.N, self.nx, self.nu
        nd = self.stage_dim
        lines = [
            f"for (lRun1 = 0; lRun1 < {N * nd * nd + nx * nx}; ++lRun1)",
            f"    {ws}.qpH[lRun1] = 0.0;",
            f"for (lRun1 = 0; lRun1 < {N}; ++lRun1)",
            "{",
            f"    for (row = 0; row < {nx}; ++row)",
            "    {",
            f"        for (col = 0; col < {nx}; ++col)",
            f"            {ws}.qpC[lRun1 * {nx * nd} + row * {nd} + col] = {ws}.evGx[lRun1 * {nx * nx} + row * {nx} + col];",
            f"        for (col = 0; col < {nu}; ++col)",
            f"            {ws}.qpC[lRun1 * {nx * nd} + row * {nd} + {nx} + col] = "
            f"{ws}.evGu[lRun1 * {nx * nu} + row * {nu} + col];",
            f"        {ws}.qpc[lRun1 * {nx} + row] = {ws}.d[lRun1 * {nx} + row];",
            "    }",
        ]
        if self.exact_hessian:
            lines += [
                f"    for (row = 0; row < {nd * nd}; ++row)",
                f"        {ws}.qpH[lRun1 * {nd * nd} + row] = {ws}.evHessian[row];",
            ]
        if self.levenberg_marquardt > 0:
            lines += [
                f"    for (row = 0; row < {nd}; ++row)",
                f"        {ws}.qpH[lRun1 * {nd * nd} + row * {nd + 1}] += {sink.format_real(self.levenberg_marquardt)};",
            ]
        lines.append("}")
        return lines

    def _embed_lines(self) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        var = VARIABLES_INSTANCE_NAME
        N, nx, nu = self.N, self.nx, self.nu
        nd = self.stage_dim
        lines = [
            f"for (lRun1 = 0; lRun1 < {self.get_num_qp_vars()}; ++lRun1)",
            "{",
            f"    {ws}.qpg[lRun1] = 0.0;",
            f"    {ws}.qpLb[lRun1] = -1e12;",
            f"    {ws}.qpUb[lRun1] = 1e12;",
            "}",
        ]
        if nu:
            lines += [
                f"for (lRun1 = 0; lRun1 < {N}; ++lRun1)",
                f"    for (row = 0; row < {nu}; ++row)",
                "    {",
                f"        {ws}.qpLb[lRun1 * {nd} + {nx} + row] = "
                f"{self._bound_source('lbValues')}[lRun1 * {nu} + row] - {var}.u[lRun1 * {nu} + row];",
                f"        {ws}.qpUb[lRun1 * {nd} + {nx} + row] = "
                f"{self._bound_source('ubValues')}[lRun1 * {nu} + row] - {var}.u[lRun1 * {nu} + row];",
                "    }",
            ]
        indices = self.bounded_state_indices()
        nb = len(indices)
        if nb:
            idx = ", ".join(str(i) for i in indices)
            lines += [
                "{",
                f"    static const int xBoundIndices[ {nb} ] = {{ {idx} }};",
                f"    for (lRun1 = 0; lRun1 < {N}; ++lRun1)",
                f"        for (row = 0; row < {nb}; ++row)",
                "        {",
                f"            {ws}.qpLb[(lRun1 + 1) * {nd} + xBoundIndices[row]] = "
                f"{self._bound_source('lbXValues')}[lRun1 * {nb} + row] - {var}.x[(lRun1 + 1) * {nx} + xBoundIndices[row]];",
                f"            {ws}.qpUb[(lRun1 + 1) * {nd} + xBoundIndices[row]] = "
                f"{self._bound_source('ubXValues')}[lRun1 * {nb} + row] - {var}.x[(lRun1 + 1) * {nx} + xBoundIndices[row]];",
                "        }",
                "}",
            ]
        if self.initial_state_fixed:
            lines += [
                f"for (row = 0; row < {nx}; ++row)",
                "{",
                f"    {ws}.qpLb[row] = {var}.x0[row] - {var}.x[row];",
                f"    {ws}.qpUb[row] = {ws}.qpLb[row];",
                "}",
            ]
        return lines

    def _expand_lines(self) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        var = VARIABLES_INSTANCE_NAME
        N, nx, nu = self.N, self.nx, self.nu
        nd = self.stage_dim
        return [
            f"for (lRun1 = 0; lRun1 < {N}; ++lRun1)",
            "{",
            f"    for (row = 0; row < {nx}; ++row)",
            f"        {var}.x[lRun1 * {nx} + row] += {ws}.qpPrimal[lRun1 * {nd} + row];",
            f"    for (row = 0; row < {nu}; ++row)",
            f"        {var}.u[lRun1 * {nu} + row] += {ws}.qpPrimal[lRun1 * {nd} + {nx} + row];",
            "}",
            f"for (row = 0; row < {nx}; ++row)",
            f"    {var}.x[{N * nx} + row] += {ws}.qpPrimal[{N * nd} + row];",
        ]

    def _qp_bodies(self, sink: ExportFile) -> Dict[str, List[str]]:
        declare = ["int lRun1, row, col;", ""]
        return {
            "prepareQP": declare + self._prepare_lines(sink),
            "embedFdb": ["int lRun1, row;", ""] + self._embed_lines(),
            "expand": ["int lRun1, row;", ""] + self._expand_lines(),
        }

    def _preparation_lines(self) -> List[str]:
        return [f"{self.fn('prepareQP')}();"]

    def _feedback_lines(self) -> List[str]:
        return [
            "int tmp;",
            "",
            f"{self.fn('embedFdb')}();",
            f"tmp = {self.fn('solve')}();",
            f"{self.fn('expand')}();",
            "return tmp;",
        ]


class GaussNewtonForcesExport(SparseSolverExport, BoundCounting):
    """
    Gauss-Newton real-time iteration with FORCES.

    FORCES takes simple bounds as compact lists, so the number of lower
    and upper bounds over the horizon is part of the generated layout.
    """

    strategy = SolverStrategy.GAUSS_NEWTON_FORCES
    qp_solver = QPSolverName.FORCES

    def _count_bounds(self, attribute: str) -> int:
        controls = len({b.index for b in self.control_bounds if getattr(b, attribute)})
        states = len({b.index for b in self.state_bounds if getattr(b, attribute)})
        initial = self.nx if self.initial_state_fixed else 0
        return self.N * (controls + states) + initial

    def get_num_lower_bounds(self) -> int:
        return self._count_bounds("has_lower")

    def get_num_upper_bounds(self) -> int:
        return self._count_bounds("has_upper")


class GaussNewtonQpDunesExport(SparseSolverExport):
    """Gauss-Newton real-time iteration with qpDUNES."""

    strategy = SolverStrategy.GAUSS_NEWTON_QPDUNES
    qp_solver = QPSolverName.QPDUNES


class ExactHessianQpDunesExport(GaussNewtonQpDunesExport):
    """Exact-Hessian real-time iteration with qpDUNES."""

    strategy = SolverStrategy.EXACT_HESSIAN_QPDUNES
    exact_hessian = True


class GaussNewtonHpmpcExport(SparseSolverExport):
    """Gauss-Newton real-time iteration with HPMPC."""

    strategy = SolverStrategy.GAUSS_NEWTON_HPMPC
    qp_solver = QPSolverName.HPMPC
