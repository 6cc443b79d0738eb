"""
Implicit Runge-Kutta Integrators.

Collocation methods of the Gauss-Legendre and Radau IIA families. The
tableaus are computed from the collocation nodes: ``A`` and ``b``
integrate the Lagrange basis polynomials of the nodes. The stage
equations are solved with a fixed number of Newton iterations whose
linear systems go through the configured linear solver.
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np
from numpy.polynomial import Polynomial
from numpy.polynomial import legendre

from ..codegen.declarations import INT, DataDeclaration, ExportFunction, FunctionArgument
from ..codegen.export_file import ExportFile
from ..options.store import ConfigurationStore, OptionKey
from ..utils.constants import DEFAULT_MODULE_NAME, WORKSPACE_INSTANCE_NAME, ExportStruct, IntegratorType
from .base import RungeKuttaExport
from .linear_solvers import LinearSolverExport, create_linear_solver

# Newton iterations per integration step
NUM_NEWTON_ITERATIONS = 3


def collocation_tableau(nodes):
    """
    Butcher tableau of the collocation method with the given nodes.

    Args:
        nodes: Collocation nodes in ``[0, 1]``

    Returns:
        Tuple ``(A, b, c)`` of numpy arrays
    """
    c = np.asarray(nodes, dtype=float)
    s = len(c)
    A = np.zeros((s, s))
    b = np.zeros(s)
    for j in range(s):
        others = np.delete(c, j)
        basis = Polynomial.fromroots(others) / np.prod(c[j] - others)
        primitive = basis.integ()
        A[:, j] = primitive(c)
        b[j] = primitive(1.0)
    return A, b, c


def gauss_legendre_nodes(num_stages: int) -> np.ndarray:
    """Roots of the shifted Legendre polynomial of degree ``num_stages``."""
    roots, _ = legendre.leggauss(num_stages)
    return np.sort((roots + 1.0) / 2.0)


def radau_iia_nodes(num_stages: int) -> np.ndarray:
    """Right Radau nodes: roots of ``P_s - P_{s-1}`` on ``[0, 1]``, ending at 1."""
    poly = legendre.Legendre.basis(num_stages) - legendre.Legendre.basis(num_stages - 1)
    roots = np.real(poly.roots())
    return np.sort((roots + 1.0) / 2.0)


class ImplicitRungeKuttaExport(RungeKuttaExport):
    """
    Base class of collocation integrators.

    Handles fully implicit models with algebraic states. The model is
    evaluated in residual form together with its Jacobian with respect to
    states, algebraic states, controls and state derivatives.
    """

    stages: int = 1

    def __init__(self, module_name: str = DEFAULT_MODULE_NAME, options: Optional[ConfigurationStore] = None):
        super().__init__(module_name, options)
        self.linear_solver: Optional[LinearSolverExport] = None

    def setup(self) -> None:
        model = self._require_model()
        dim = self.num_stages * (model.nx + model.nxa)
        self.linear_solver = create_linear_solver(
            self.options.get(OptionKey.LINEAR_ALGEBRA_SOLVER), self.module_name, dim
        )

    @property
    def uses_complex_arithmetic(self) -> bool:
        return self.linear_solver is not None and self.linear_solver.uses_complex_arithmetic

    @property
    def system_dim(self) -> int:
        model = self._require_model()
        return self.num_stages * (model.nx + model.nxa)

    @property
    def jacobian_cols(self) -> int:
        """Columns of the model Jacobian: states, algebraic states, controls, state derivatives."""
        model = self._require_model()
        return 2 * model.nx + model.nxa + model.nu

    def model_functions(self) -> List[ExportFunction]:
        model = self._require_model()
        args = (FunctionArgument("in", is_const=True), FunctionArgument("out"))
        return [
            ExportFunction(
                f"{self.module_name}_{model.rhs_name}",
                args,
                description="Residual of the implicit model.",
            ),
            ExportFunction(
                f"{self.module_name}_{model.rhs_name}_jac",
                args,
                description="Jacobian of the implicit model residual.",
            ),
        ]

    def _data_declarations(self) -> List[DataDeclaration]:
        model = self._require_model()
        nz = model.nx + model.nxa
        dim = self.system_dim
        declarations = [
            DataDeclaration("rk_ttt", 1, struct=ExportStruct.WORKSPACE),
            DataDeclaration("rk_xxx", model.nx + nz + model.nu + model.nod, struct=ExportStruct.WORKSPACE),
            DataDeclaration("rk_kkk", self.num_stages, nz, struct=ExportStruct.WORKSPACE),
            DataDeclaration("rk_A", dim, dim, struct=ExportStruct.WORKSPACE),
            DataDeclaration("rk_b", dim, struct=ExportStruct.WORKSPACE),
            DataDeclaration("rk_diffsTemp", self.num_stages * nz, self.jacobian_cols, struct=ExportStruct.WORKSPACE),
        ]
        return declarations + self.linear_solver.get_data_declarations()

    def _auxiliary_code(self, sink: ExportFile) -> None:
        sink.add_line("#include <math.h>")
        sink.add_line()
        self._tableau_code(sink)
        for function in self.linear_solver.get_functions(sink.real_type):
            sink.add_function(function)

    def _stage_input_lines(self, nz: int) -> List[str]:
        """Fill ``rk_xxx`` with the state, algebraic state and derivative of one stage."""
        model = self.model
        ws = WORKSPACE_INSTANCE_NAME
        s = self.num_stages
        lines = [
            f"for (i = 0; i < {model.nx}; ++i)",
            "{",
            f"    {ws}.rk_xxx[i] = rk_eta[i];",
            f"    for (j = 0; j < {s}; ++j)",
            f"        {ws}.rk_xxx[i] += rk_h * rk_tableau_A[stage * {s} + j] * {ws}.rk_kkk[j * {nz} + i];",
            "}",
        ]
        if model.nxa > 0:
            lines += [
                f"for (i = 0; i < {model.nxa}; ++i)",
                f"    {ws}.rk_xxx[{model.nx} + i] = {ws}.rk_kkk[stage * {nz} + {model.nx} + i];",
            ]
        lines += [
            f"for (i = 0; i < {model.nx}; ++i)",
            f"    {ws}.rk_xxx[{nz + model.nu + model.nod} + i] = {ws}.rk_kkk[stage * {nz} + i];",
        ]
        return lines

    def _build_integrate(self, sink: ExportFile) -> ExportFunction:
        model = self._require_model()
        ws = WORKSPACE_INSTANCE_NAME
        nx, nu = model.nx, model.nu
        nz = nx + model.nxa
        s = self.num_stages
        dim = self.system_dim
        cols = self.jacobian_cols
        nv = self.num_integrated
        residual, jacobian = (f.name for f in self.model_functions())
        solver = self.linear_solver

        def indent(lines, depth):
            return [("    " * depth + line) if line else line for line in lines]

        newton = [f"{residual}( {ws}.rk_xxx, &{ws}.rk_b[stage * {nz}] );"]
        assemble = [
            "if (iter == 0)",
            "{",
            f"    {jacobian}( {ws}.rk_xxx, &{ws}.rk_diffsTemp[stage * {nz * cols}] );",
            f"    for (j = 0; j < {s}; ++j)",
            f"        for (i = 0; i < {nz}; ++i)",
            f"            for (k = 0; k < {nz}; ++k)",
            "            {",
            f"                tmp = (k < {nx}) ? rk_h * rk_tableau_A[stage * {s} + j] "
            f"* {ws}.rk_diffsTemp[stage * {nz * cols} + i * {cols} + k] : 0.0;",
            "                if (j == stage)",
            f"                    tmp += (k < {nx}) ? {ws}.rk_diffsTemp[stage * {nz * cols} + i * {cols} + "
            f"{nz + nu} + k] : {ws}.rk_diffsTemp[stage * {nz * cols} + i * {cols} + k];",
            f"                {ws}.rk_A[(stage * {nz} + i) * {dim} + j * {nz} + k] = tmp;",
            "            }",
            "}",
        ]
        sensitivities = [
            f"for (run2 = 0; run2 < {nx + nu}; ++run2)",
            "{",
            f"    for (i = 0; i < {dim}; ++i)",
            f"        {ws}.rk_b[i] = -{ws}.rk_diffsTemp[i * {cols} + (run2 < {nx} ? run2 : {nz} + run2 - {nx})];",
        ]
        sensitivities += indent(solver.solve_lines(f"{ws}.rk_A", f"{ws}.rk_b", reuse=True), 1)
        sensitivities += [
            f"    for (i = 0; i < {nz}; ++i)",
            f"        for (stage = 0; stage < {s}; ++stage)",
            f"            rk_eta[{nz} + i * {nx + nu} + run2] += rk_h * rk_tableau_b[stage] "
            f"* {ws}.rk_b[stage * {nz} + i];",
            "}",
        ]

        body = [
            "int i, j, k, iter, run1, run2, stage;",
            f"{sink.real_type} tmp;",
            f"{sink.real_type} rk_h = {sink.format_real(self.grid.step)};",
            "",
            "if (resetIntegrator)",
            f"    for (i = 0; i < {s * nz}; ++i)",
            f"        {ws}.rk_kkk[i] = 0.0;",
            f"for (i = 0; i < {nu + model.nod}; ++i)",
            f"    {ws}.rk_xxx[{nz} + i] = rk_eta[{nv} + i];",
            f"{ws}.rk_ttt = 0.0;",
            "",
            f"for (run1 = 0; run1 < {self.num_steps}; ++run1)",
            "{",
            f"    for (iter = 0; iter < {NUM_NEWTON_ITERATIONS}; ++iter)",
            "    {",
            f"        for (stage = 0; stage < {s}; ++stage)",
            "        {",
        ]
        body += indent(self._stage_input_lines(nz) + newton + assemble, 3)
        body += ["        }", "        if (iter == 0)", "        {"]
        body += indent(solver.solve_lines(f"{ws}.rk_A", f"{ws}.rk_b", reuse=False), 3)
        body += ["        }", "        else", "        {"]
        body += indent(solver.solve_lines(f"{ws}.rk_A", f"{ws}.rk_b", reuse=True), 3)
        body += [
            "        }",
            f"        for (i = 0; i < {dim}; ++i)",
            f"            {ws}.rk_kkk[i] -= {ws}.rk_b[i];",
            "    }",
            f"    for (i = 0; i < {nx}; ++i)",
            f"        for (stage = 0; stage < {s}; ++stage)",
            f"            rk_eta[i] += rk_h * rk_tableau_b[stage] * {ws}.rk_kkk[stage * {nz} + i];",
        ]
        if model.nxa > 0:
            body += [
                f"    for (i = 0; i < {model.nxa}; ++i)",
                f"        rk_eta[{nx} + i] = {ws}.rk_kkk[{(s - 1) * nz + nx} + i];",
            ]
        body += indent(sensitivities, 1)
        body += [
            f"    {ws}.rk_ttt += {sink.format_real(1.0 / self.num_steps)};",
            "}",
            "return 0;",
        ]
        return ExportFunction(
            self.integrate_function_name,
            (FunctionArgument("rk_eta"), FunctionArgument("resetIntegrator", INT, is_array=False)),
            return_type=INT,
            body=tuple(body),
        )


class GaussLegendreExport(ImplicitRungeKuttaExport):
    """Gauss-Legendre collocation, order ``2 * stages``."""

    def butcher_tableau(self):
        return collocation_tableau(gauss_legendre_nodes(self.stages))


class RadauIIAExport(ImplicitRungeKuttaExport):
    """Radau IIA collocation, order ``2 * stages - 1``."""

    def butcher_tableau(self):
        return collocation_tableau(radau_iia_nodes(self.stages))


class GaussLegendre2Export(GaussLegendreExport):
    integrator_type = IntegratorType.IRK_GL2
    stages = 1


class GaussLegendre4Export(GaussLegendreExport):
    integrator_type = IntegratorType.IRK_GL4
    stages = 2


class GaussLegendre6Export(GaussLegendreExport):
    integrator_type = IntegratorType.IRK_GL6
    stages = 3


class GaussLegendre8Export(GaussLegendreExport):
    integrator_type = IntegratorType.IRK_GL8
    stages = 4


class RadauIIA1Export(RadauIIAExport):
    integrator_type = IntegratorType.IRK_RIIA1
    stages = 1


class RadauIIA3Export(RadauIIAExport):
    integrator_type = IntegratorType.IRK_RIIA3
    stages = 2


class RadauIIA5Export(RadauIIAExport):
    integrator_type = IntegratorType.IRK_RIIA5
    stages = 3
