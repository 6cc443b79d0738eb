"""
ocpexport: Code Export for Real-Time Optimal Control Solvers

Turns an optimal control problem description and a set of export options
into a self-contained C solver package: integrator, real-time iteration
solver, common header, build files and optional MATLAB and Simulink
interfaces.

Usage:
    from ocpexport import OCP, ModelData, ConfigurationStore, OCPExport

    ocp = OCP(N=20, model=ModelData(nx=4, nu=1))
    options = ConfigurationStore({"QP_SOLVER": "QPOASES"})
    OCPExport(ocp, options).export_code("export")
"""

__version__ = "0.1.0"
__author__ = "ocpexport Team"
__email__ = "ocpexport@example.com"

# Public API exports
from .ocp import OCP, Bound, Constraints, LSQTerm, ModelData, Objective
from .options import ConfigurationStore, OptionKey
from .export import ComponentResolver, OCPExport, ResolvedPlan, check_consistency
from .utils.config import get_config, ExportToolConfig
from .utils.exceptions import OCPExportError, CodeExportError

__all__ = [
    "OCP",
    "Bound",
    "Constraints",
    "LSQTerm",
    "ModelData",
    "Objective",
    "ConfigurationStore",
    "OptionKey",
    "OCPExport",
    "ComponentResolver",
    "ResolvedPlan",
    "check_consistency",
    "get_config",
    "ExportToolConfig",
    "OCPExportError",
    "CodeExportError",
]
