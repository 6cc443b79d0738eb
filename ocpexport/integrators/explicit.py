"""
Explicit Runge-Kutta Integrators.

Explicit schemes evaluate the right-hand side once per stage and need
no linear algebra. They integrate ordinary differential equations in
explicit form only.
"""

from __future__ import annotations

from typing import List

from ..codegen.declarations import INT, DataDeclaration, ExportFunction, FunctionArgument
from ..codegen.export_file import ExportFile
from ..ocp.problem import ModelData
from ..utils.constants import WORKSPACE_INSTANCE_NAME, ExportStruct, IntegratorType
from ..utils.exceptions import InvalidArgumentsError
from .base import RungeKuttaExport


class ExplicitRungeKuttaExport(RungeKuttaExport):
    """Base class of explicit Runge-Kutta schemes."""

    def _check_model(self, model: ModelData) -> None:
        super()._check_model(model)
        if model.nxa > 0:
            raise InvalidArgumentsError(
                f"Explicit integrator {self.name} does not support algebraic states",
                {"nxa": model.nxa},
            )
        if model.implicit:
            raise InvalidArgumentsError(
                f"Explicit integrator {self.name} needs an explicit ODE model",
                {"integrator": self.name},
            )

    def _data_declarations(self) -> List[DataDeclaration]:
        return [
            DataDeclaration("rk_ttt", 1, struct=ExportStruct.WORKSPACE),
            DataDeclaration("rk_xxx", self.state_size, struct=ExportStruct.WORKSPACE),
            DataDeclaration("rk_kkk", self.num_stages, self.num_integrated, struct=ExportStruct.WORKSPACE),
        ]

    def _auxiliary_code(self, sink: ExportFile) -> None:
        self._tableau_code(sink)

    def _build_integrate(self, sink: ExportFile) -> ExportFunction:
        model = self._require_model()
        ws = WORKSPACE_INSTANCE_NAME
        nv = self.num_integrated
        stages = self.num_stages
        rhs = self.model_functions()[0].name

        body = [
            "int i, j, run1, stage;",
            f"{sink.real_type} rk_h = {sink.format_real(self.grid.step)};",
            "",
            "(void)resetIntegrator;",
            f"{ws}.rk_ttt = 0.0;",
            f"for (i = {nv}; i < {self.state_size}; ++i)",
            f"    {ws}.rk_xxx[i] = rk_eta[i];",
            "",
            f"for (run1 = 0; run1 < {self.num_steps}; ++run1)",
            "{",
            f"    for (stage = 0; stage < {stages}; ++stage)",
            "    {",
            f"        for (i = 0; i < {nv}; ++i)",
            "        {",
            f"            {ws}.rk_xxx[i] = rk_eta[i];",
            "            for (j = 0; j < stage; ++j)",
            f"                {ws}.rk_xxx[i] += rk_h * rk_tableau_A[stage * {stages} + j] * {ws}.rk_kkk[j * {nv} + i];",
            "        }",
            f"        {rhs}( {ws}.rk_xxx, &{ws}.rk_kkk[stage * {nv}] );",
            "    }",
            f"    for (i = 0; i < {nv}; ++i)",
            f"        for (stage = 0; stage < {stages}; ++stage)",
            f"            rk_eta[i] += rk_h * rk_tableau_b[stage] * {ws}.rk_kkk[stage * {nv} + i];",
            f"    {ws}.rk_ttt += {sink.format_real(1.0 / self.num_steps)};",
            "}",
            "return 0;",
        ]
        if model.nu + model.nod == 0:
            # Nothing to copy behind the integrated vector
            body[4:8] = [f"{ws}.rk_ttt = 0.0;", ""]
        return ExportFunction(
            self.integrate_function_name,
            (FunctionArgument("rk_eta"), FunctionArgument("resetIntegrator", INT, is_array=False)),
            return_type=INT,
            body=tuple(body),
        )


class ExplicitEulerExport(ExplicitRungeKuttaExport):
    integrator_type = IntegratorType.EX_EULER

    def butcher_tableau(self):
        return [[0.0]], [1.0], [0.0]


class RK2Export(ExplicitRungeKuttaExport):
    """Explicit midpoint rule."""
    integrator_type = IntegratorType.RK2

    def butcher_tableau(self):
        return [[0.0, 0.0], [0.5, 0.0]], [0.0, 1.0], [0.0, 0.5]


class RK3Export(ExplicitRungeKuttaExport):
    """Kutta's third order method."""
    integrator_type = IntegratorType.RK3

    def butcher_tableau(self):
        A = [[0.0, 0.0, 0.0], [0.5, 0.0, 0.0], [-1.0, 2.0, 0.0]]
        return A, [1.0 / 6.0, 2.0 / 3.0, 1.0 / 6.0], [0.0, 0.5, 1.0]


class RK4Export(ExplicitRungeKuttaExport):
    """Classical fourth order Runge-Kutta method."""
    integrator_type = IntegratorType.RK4

    def butcher_tableau(self):
        A = [
            [0.0, 0.0, 0.0, 0.0],
            [0.5, 0.0, 0.0, 0.0],
            [0.0, 0.5, 0.0, 0.0],
            [0.0, 0.0, 1.0, 0.0],
        ]
        return A, [1.0 / 6.0, 1.0 / 3.0, 1.0 / 3.0, 1.0 / 6.0], [0.0, 0.5, 0.5, 1.0]
