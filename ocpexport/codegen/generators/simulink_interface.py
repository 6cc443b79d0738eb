"""
Simulink Interface Generator.

Produces the S-function wrapper (header and source) around the generated
real-time iteration solver and the MATLAB script that builds it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...utils.constants import (
    DEFAULT_REAL_TYPE,
    VARIABLES_INSTANCE_NAME,
    VARIABLES_STRUCT_NAME,
    WORKSPACE_INSTANCE_NAME,
    WORKSPACE_STRUCT_NAME,
)
from ...utils.exceptions import InvalidArgumentsError
from ..templates import JinjaTemplateRenderer
from .base import TemplateBasedGenerator, include_guard

# QP backend sources and include folders for the build script
_QP_BUILD_FILES = {
    "QPOASES": (
        [
            "{module}_qpoases_interface.cpp",
            "qpoases/SRC/QProblem.cpp",
            "qpoases/SRC/QProblemB.cpp",
            "qpoases/SRC/Bounds.cpp",
            "qpoases/SRC/Constraints.cpp",
            "qpoases/SRC/SubjectTo.cpp",
            "qpoases/SRC/Indexlist.cpp",
            "qpoases/SRC/CyclingManager.cpp",
            "qpoases/SRC/Utils.cpp",
            "qpoases/SRC/MessageHandling.cpp",
        ],
        ["qpoases", "qpoases/INCLUDE", "qpoases/SRC"],
    ),
    "QPDUNES": (
        ["{module}_qpdunes_interface.c"],
        ["qpdunes/include"],
    ),
}


class _SimulinkFile(TemplateBasedGenerator):

    def __init__(self, template_name, destination, template_renderer, context):
        super().__init__(template_name, destination, template_renderer)
        self._context = context

    def _build_template_context(self) -> Dict[str, Any]:
        return {**self._context, "guard": include_guard(self.destination.name)}


class SimulinkInterfaceGenerator:
    """Generator for the Simulink S-function wrapper."""

    def __init__(
        self,
        makefile_destination: Union[str, Path],
        header_destination: Union[str, Path],
        source_destination: Union[str, Path],
        module_name: str,
        template_renderer: Optional[JinjaTemplateRenderer] = None,
    ):
        self.module_name = module_name
        self._context: Dict[str, Any] = {}
        self._files = [
            _SimulinkFile("make_solver_sfunction.m.j2", makefile_destination, template_renderer, self._context),
            _SimulinkFile("solver_sfunction.h.j2", header_destination, template_renderer, self._context),
            _SimulinkFile("solver_sfunction.c.j2", source_destination, template_renderer, self._context),
        ]

    def configure(
        self,
        N: int,
        NX: int,
        NDX: int,
        NXA: int,
        NU: int,
        NOD: int,
        NY: int,
        NYN: int,
        initial_state_fixed: bool,
        weighting_matrices_type: int,
        hardcoded_constraints: bool,
        use_arrival_cost: bool,
        compute_covariance_matrix: bool,
        qp_solver: str,
        use_single_precision: bool = False,
        real_type: str = DEFAULT_REAL_TYPE,
    ) -> "SimulinkInterfaceGenerator":
        """
        Configure the wrapper with the problem dimensions and flags.

        Raises:
            InvalidArgumentsError: If ``qp_solver`` has no S-function support
        """
        if qp_solver not in _QP_BUILD_FILES:
            raise InvalidArgumentsError(
                f"No Simulink build recipe for QP solver {qp_solver}", {"qp_solver": qp_solver}
            )
        sources, include_folders = _QP_BUILD_FILES[qp_solver]

        self._context.clear()
        self._context.update({
            "module_name": self.module_name,
            "prefix": self.module_name,
            "N": N,
            "NX": NX,
            "NDX": NDX,
            "NXA": NXA,
            "NU": NU,
            "NOD": NOD,
            "NY": NY,
            "NYN": NYN,
            "initial_state_fixed": initial_state_fixed,
            "weighting_matrices_type": int(weighting_matrices_type),
            "hardcoded_constraints": hardcoded_constraints,
            "use_arrival_cost": use_arrival_cost,
            "compute_covariance_matrix": compute_covariance_matrix,
            "qp_solver": qp_solver,
            "qp_sources": [s.format(module=self.module_name) for s in sources],
            "qp_include_folders": include_folders,
            "use_single_precision": use_single_precision,
            "real_type": real_type,
            "variables_struct": VARIABLES_STRUCT_NAME,
            "workspace_struct": WORKSPACE_STRUCT_NAME,
            "variables_instance": VARIABLES_INSTANCE_NAME,
            "workspace_instance": WORKSPACE_INSTANCE_NAME,
        })
        for generated in self._files:
            generated._mark_configured()
        return self

    def export_code(self) -> List[Path]:
        """Write the build script, header and source."""
        return [generated.export_code() for generated in self._files]
