"""
Condensing Based Solvers.

These strategies eliminate the states from the QP and hand a dense
problem in the control moves to qpOASES. The plain variant condenses
with cubic complexity in the horizon length, the N2 variants with
quadratic complexity; the factorization variant additionally keeps a
Cholesky factor of the condensed Hessian.
"""

from __future__ import annotations

from typing import Dict, List

from ..codegen.declarations import DataDeclaration, ExportFunction
from ..codegen.export_file import ExportFile
from ..utils.constants import VARIABLES_INSTANCE_NAME, WORKSPACE_INSTANCE_NAME, QPSolverName, SolverStrategy
from .base import WORKSPACE, NLPSolverExport


class GaussNewtonCondensedExport(NLPSolverExport):
    """Gauss-Newton real-time iteration with full condensing."""

    strategy = SolverStrategy.GAUSS_NEWTON_CONDENSED
    qp_solver = QPSolverName.QPOASES

    @property
    def x_offset(self) -> int:
        """Leading QP variables for the initial state when it is free."""
        return 0 if self.initial_state_fixed else self.nx

    def get_num_qp_vars(self) -> int:
        return self.x_offset + self.N * self.nu

    def get_num_qp_constraints(self) -> int:
        """State bounds turn into affine constraints once the states are condensed."""
        return self.N * self.num_bounded_states() + self.get_num_complex_constraints()

    def _qp_data_declarations(self) -> List[DataDeclaration]:
        N, nx, nu = self.N, self.nx, self.nu
        nv = self.get_num_qp_vars()
        nc = self.get_num_qp_constraints()
        return [
            DataDeclaration("C", N * nx, nx, struct=WORKSPACE),
            DataDeclaration("E", N * (N + 1) // 2 * nx, nu, struct=WORKSPACE),
            DataDeclaration("Dx0", nx, struct=WORKSPACE),
            DataDeclaration("H", nv, nv, struct=WORKSPACE),
            DataDeclaration("g", nv, struct=WORKSPACE),
            DataDeclaration("lb", nv, struct=WORKSPACE),
            DataDeclaration("ub", nv, struct=WORKSPACE),
            DataDeclaration("A", nc, nv, struct=WORKSPACE),
            DataDeclaration("lbA", nc, struct=WORKSPACE),
            DataDeclaration("ubA", nc, struct=WORKSPACE),
            DataDeclaration("xVars", nv, struct=WORKSPACE),
            DataDeclaration("yVars", nv + nc, struct=WORKSPACE),
        ]

    def _qp_prototypes(self) -> List[ExportFunction]:
        return [
            ExportFunction(self.fn("condensePrep")),
            ExportFunction(self.fn("condenseFdb")),
            ExportFunction(self.fn("expand")),
        ]

    def _sensitivity_lines(self) -> List[str]:
        """Products of the state sensitivities: ``C`` and the lower block triangle ``E``."""
        ws = WORKSPACE_INSTANCE_NAME
        N, nx, nu = self.N, self.nx, self.nu
        return [
            f"for (lRun1 = 0; lRun1 < {nx * nx}; ++lRun1)",
            f"    {ws}.C[lRun1] = {ws}.evGx[lRun1];",
            f"for (lRun1 = 1; lRun1 < {N}; ++lRun1)",
            f"    for (row = 0; row < {nx}; ++row)",
            f"        for (col = 0; col < {nx}; ++col)",
            "        {",
            f"            {ws}.C[lRun1 * {nx * nx} + row * {nx} + col] = 0.0;",
            f"            for (lRun2 = 0; lRun2 < {nx}; ++lRun2)",
            f"                {ws}.C[lRun1 * {nx * nx} + row * {nx} + col] += "
            f"{ws}.evGx[lRun1 * {nx * nx} + row * {nx} + lRun2] * {ws}.C[(lRun1 - 1) * {nx * nx} + lRun2 * {nx} + col];",
            "        }",
            f"for (lRun1 = 0; lRun1 < {N}; ++lRun1)",
            "{",
            f"    for (lRun3 = 0; lRun3 < {nx * nu}; ++lRun3)",
            f"        {ws}.E[(lRun1 * (lRun1 + 1) / 2 + lRun1) * {nx * nu} + lRun3] = {ws}.evGu[lRun1 * {nx * nu} + lRun3];",
            "    for (lRun2 = 0; lRun2 < lRun1; ++lRun2)",
            f"        for (row = 0; row < {nx}; ++row)",
            f"            for (col = 0; col < {nu}; ++col)",
            "            {",
            f"                {ws}.E[(lRun1 * (lRun1 + 1) / 2 + lRun2) * {nx * nu} + row * {nu} + col] = 0.0;",
            f"                for (lRun3 = 0; lRun3 < {nx}; ++lRun3)",
            f"                    {ws}.E[(lRun1 * (lRun1 + 1) / 2 + lRun2) * {nx * nu} + row * {nu} + col] += "
            f"{ws}.evGx[lRun1 * {nx * nx} + row * {nx} + lRun3] "
            f"* {ws}.E[((lRun1 - 1) * lRun1 / 2 + lRun2) * {nx * nu} + lRun3 * {nu} + col];",
            "            }",
            "}",
        ]

    def _hessian_assembly_lines(self, sink: ExportFile) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        N, nx, nu = self.N, self.nx, self.nu
        nv = self.get_num_qp_vars()
        off = self.x_offset
        lines = [
            f"for (lRun1 = 0; lRun1 < {nv * nv}; ++lRun1)",
            f"    {ws}.H[lRun1] = 0.0;",
            f"for (lRun1 = 0; lRun1 < {N}; ++lRun1)",
            "    for (lRun2 = 0; lRun2 <= lRun1; ++lRun2)",
            "        for (lRun3 = 0; lRun3 <= lRun1; ++lRun3)",
            f"            for (row = 0; row < {nu}; ++row)",
            f"                for (col = 0; col < {nu}; ++col)",
            f"                    for (lRun4 = 0; lRun4 < {nx}; ++lRun4)",
            f"                        {ws}.H[({off} + lRun2 * {nu} + row) * {nv} + {off} + lRun3 * {nu} + col] += "
            f"{ws}.E[(lRun1 * (lRun1 + 1) / 2 + lRun2) * {nx * nu} + lRun4 * {nu} + row] "
            f"* {ws}.E[(lRun1 * (lRun1 + 1) / 2 + lRun3) * {nx * nu} + lRun4 * {nu} + col];",
        ]
        if self.levenberg_marquardt > 0:
            lines += [
                f"for (lRun1 = 0; lRun1 < {nv}; ++lRun1)",
                f"    {ws}.H[lRun1 * {nv} + lRun1] += {sink.format_real(self.levenberg_marquardt)};",
            ]
        return lines

    def _feedback_bound_lines(self) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        var = VARIABLES_INSTANCE_NAME
        N, nx, nu = self.N, self.nx, self.nu
        off = self.x_offset
        indices = self.bounded_state_indices()
        nb = len(indices)
        lines = []
        if self.initial_state_fixed:
            lines += [
                f"for (lRun1 = 0; lRun1 < {nx}; ++lRun1)",
                f"    {ws}.Dx0[lRun1] = {var}.x0[lRun1] - {var}.x[lRun1];",
            ]
        if nu:
            lines += [
                f"for (lRun1 = 0; lRun1 < {N * nu}; ++lRun1)",
                "{",
                f"    {ws}.g[{off} + lRun1] = 0.0;",
                f"    {ws}.lb[{off} + lRun1] = {self._bound_source('lbValues')}[lRun1] - {var}.u[lRun1];",
                f"    {ws}.ub[{off} + lRun1] = {self._bound_source('ubValues')}[lRun1] - {var}.u[lRun1];",
                "}",
            ]
        if nb:
            idx = ", ".join(str(i) for i in indices)
            lines += [
                "{",
                f"    static const int xBoundIndices[ {nb} ] = {{ {idx} }};",
                f"    for (lRun1 = 0; lRun1 < {N}; ++lRun1)",
                f"        for (lRun2 = 0; lRun2 < {nb}; ++lRun2)",
                "        {",
                f"            row = (lRun1 + 1) * {nx} + xBoundIndices[lRun2];",
                f"            {ws}.lbA[lRun1 * {nb} + lRun2] = "
                f"{self._bound_source('lbXValues')}[lRun1 * {nb} + lRun2] - {var}.x[row];",
                f"            {ws}.ubA[lRun1 * {nb} + lRun2] = "
                f"{self._bound_source('ubXValues')}[lRun1 * {nb} + lRun2] - {var}.x[row];",
                "        }",
                "}",
            ]
        num_complex = self.get_num_complex_constraints()
        if num_complex:
            lines += [
                f"for (lRun1 = 0; lRun1 < {num_complex}; ++lRun1)",
                "{",
                f"    {ws}.lbA[{N * nb} + lRun1] = {ws}.lbPathCon[lRun1];",
                f"    {ws}.ubA[{N * nb} + lRun1] = {ws}.ubPathCon[lRun1];",
                "}",
            ]
        return lines

    def _expand_lines(self) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        var = VARIABLES_INSTANCE_NAME
        N, nx, nu = self.N, self.nx, self.nu
        off = self.x_offset
        lines = [
            f"for (lRun1 = 0; lRun1 < {N * nu}; ++lRun1)",
            f"    {var}.u[lRun1] += {ws}.xVars[{off} + lRun1];",
        ]
        if off:
            lines += [
                f"for (lRun1 = 0; lRun1 < {nx}; ++lRun1)",
                f"    {ws}.Dx0[lRun1] = {ws}.xVars[lRun1];",
            ]
        lines += [
            f"for (lRun1 = 0; lRun1 < {nx}; ++lRun1)",
            f"    {var}.x[lRun1] += {ws}.Dx0[lRun1];",
            f"for (lRun1 = 0; lRun1 < {N}; ++lRun1)",
            f"    for (row = 0; row < {nx}; ++row)",
            "    {",
            f"        {var}.x[(lRun1 + 1) * {nx} + row] += {ws}.d[lRun1 * {nx} + row];",
            f"        for (col = 0; col < {nx}; ++col)",
            f"            {var}.x[(lRun1 + 1) * {nx} + row] += {ws}.C[lRun1 * {nx * nx} + row * {nx} + col] * {ws}.Dx0[col];",
            "        for (lRun2 = 0; lRun2 <= lRun1; ++lRun2)",
            f"            for (col = 0; col < {nu}; ++col)",
            f"                {var}.x[(lRun1 + 1) * {nx} + row] += "
            f"{ws}.E[(lRun1 * (lRun1 + 1) / 2 + lRun2) * {nx * nu} + row * {nu} + col] "
            f"* {ws}.xVars[{off} + lRun2 * {nu} + col];",
            "    }",
        ]
        return lines

    def _qp_bodies(self, sink: ExportFile) -> Dict[str, List[str]]:
        return {
            "condensePrep": ["int lRun1, lRun2, lRun3, lRun4, row, col;", ""]
            + self._sensitivity_lines() + self._hessian_assembly_lines(sink),
            "condenseFdb": ["int lRun1, lRun2, row;", ""] + self._feedback_bound_lines(),
            "expand": ["int lRun1, lRun2, row, col;", ""] + self._expand_lines(),
        }

    def _preparation_lines(self) -> List[str]:
        return [f"{self.fn('condensePrep')}();"]

    def _feedback_lines(self) -> List[str]:
        return [
            "int tmp;",
            "",
            f"{self.fn('condenseFdb')}();",
            f"tmp = {self.fn('solve')}();",
            f"{self.fn('expand')}();",
            "return tmp;",
        ]


class GaussNewtonCN2Export(GaussNewtonCondensedExport):
    """
    Gauss-Newton real-time iteration with N^2 condensing.

    The condensed Hessian is built block column by block column with the
    intermediate products ``W1`` and ``W2``.
    """

    strategy = SolverStrategy.GAUSS_NEWTON_CN2

    def _qp_data_declarations(self) -> List[DataDeclaration]:
        nx, nu = self.nx, self.nu
        return super()._qp_data_declarations() + [
            DataDeclaration("W1", nx, nu, struct=WORKSPACE),
            DataDeclaration("W2", nx, nu, struct=WORKSPACE),
            DataDeclaration("sbar", (self.N + 1) * nx, struct=WORKSPACE),
        ]

    def _hessian_assembly_lines(self, sink: ExportFile) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        N, nx, nu = self.N, self.nx, self.nu
        nv = self.get_num_qp_vars()
        off = self.x_offset
        lines = [
            f"for (lRun1 = 0; lRun1 < {nv * nv}; ++lRun1)",
            f"    {ws}.H[lRun1] = 0.0;",
            f"for (lRun2 = 0; lRun2 < {N}; ++lRun2)",
            "{",
            f"    for (lRun4 = 0; lRun4 < {nx * nu}; ++lRun4)",
            f"        {ws}.W1[lRun4] = {ws}.E[({(N - 1) * N // 2} + lRun2) * {nx * nu} + lRun4];",
            f"    for (lRun1 = {N - 1}; lRun1 >= lRun2; --lRun1)",
            "    {",
            f"        for (row = 0; row < {nu}; ++row)",
            f"            for (col = 0; col < {nu}; ++col)",
            f"                for (lRun4 = 0; lRun4 < {nx}; ++lRun4)",
            f"                    {ws}.H[({off} + lRun1 * {nu} + row) * {nv} + {off} + lRun2 * {nu} + col] += "
            f"{ws}.evGu[lRun1 * {nx * nu} + lRun4 * {nu} + row] * {ws}.W1[lRun4 * {nu} + col];",
            "        if (lRun1 == 0)",
            "            break;",
            f"        for (row = 0; row < {nx}; ++row)",
            f"            for (col = 0; col < {nu}; ++col)",
            "            {",
            f"                {ws}.W2[row * {nu} + col] = 0.0;",
            f"                for (lRun4 = 0; lRun4 < {nx}; ++lRun4)",
            f"                    {ws}.W2[row * {nu} + col] += "
            f"{ws}.evGx[lRun1 * {nx * nx} + lRun4 * {nx} + row] * {ws}.W1[lRun4 * {nu} + col];",
            "            }",
            f"        for (lRun4 = 0; lRun4 < {nx * nu}; ++lRun4)",
            f"            {ws}.W1[lRun4] = {ws}.W2[lRun4];",
            "    }",
            "}",
            f"for (lRun1 = 0; lRun1 < {nv}; ++lRun1)",
            "    for (lRun2 = 0; lRun2 < lRun1; ++lRun2)",
            f"        {ws}.H[lRun2 * {nv} + lRun1] = {ws}.H[lRun1 * {nv} + lRun2];",
        ]
        if self.levenberg_marquardt > 0:
            lines += [
                f"for (lRun1 = 0; lRun1 < {nv}; ++lRun1)",
                f"    {ws}.H[lRun1 * {nv} + lRun1] += {sink.format_real(self.levenberg_marquardt)};",
            ]
        return lines


class ExactHessianCN2Export(GaussNewtonCN2Export):
    """N^2 condensing with the regularized exact Hessian of the Lagrangian."""

    strategy = SolverStrategy.EXACT_HESSIAN_CN2
    exact_hessian = True


class GaussNewtonCN2FactorizationExport(GaussNewtonCN2Export):
    """N^2 condensing that factorizes the condensed Hessian before the QP."""

    strategy = SolverStrategy.GAUSS_NEWTON_CN2_FACTORIZATION

    def _qp_data_declarations(self) -> List[DataDeclaration]:
        nv = self.get_num_qp_vars()
        return super()._qp_data_declarations() + [
            DataDeclaration("R", nv, nv, struct=WORKSPACE, description="Cholesky factor of the condensed Hessian"),
        ]

    def _qp_prototypes(self) -> List[ExportFunction]:
        return super()._qp_prototypes() + [ExportFunction(self.fn("cholesky"))]

    def _qp_bodies(self, sink: ExportFile) -> Dict[str, List[str]]:
        ws = WORKSPACE_INSTANCE_NAME
        nv = self.get_num_qp_vars()
        bodies = super()._qp_bodies(sink)
        bodies["condensePrep"] = bodies["condensePrep"] + [f"{self.fn('cholesky')}();"]
        bodies["cholesky"] = [
            "int i, j, k;",
            f"{sink.real_type} sum;",
            "",
            f"for (i = 0; i < {nv * nv}; ++i)",
            f"    {ws}.R[i] = 0.0;",
            f"for (j = 0; j < {nv}; ++j)",
            "{",
            f"    sum = {ws}.H[j * {nv} + j];",
            "    for (k = 0; k < j; ++k)",
            f"        sum -= {ws}.R[k * {nv} + j] * {ws}.R[k * {nv} + j];",
            f"    {ws}.R[j * {nv} + j] = sqrt(sum > 0.0 ? sum : 1e-12);",
            f"    for (i = j + 1; i < {nv}; ++i)",
            "    {",
            f"        sum = {ws}.H[j * {nv} + i];",
            "        for (k = 0; k < j; ++k)",
            f"            sum -= {ws}.R[k * {nv} + j] * {ws}.R[k * {nv} + i];",
            f"        {ws}.R[j * {nv} + i] = sum / {ws}.R[j * {nv} + j];",
            "    }",
            "}",
        ]
        return bodies
