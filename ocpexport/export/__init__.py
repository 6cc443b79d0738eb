"""
Export session: validation, resolution and orchestration.
"""

from .orchestrator import ARTIFACTS, ExportArtifact, GenerationMethod, OCPExport
from .plan import ResolvedPlan
from .resolver import ComponentResolver, build_header_constants, select_solver_strategy
from .validator import check_consistency

__all__ = [
    "OCPExport",
    "ExportArtifact",
    "GenerationMethod",
    "ARTIFACTS",
    "ResolvedPlan",
    "ComponentResolver",
    "select_solver_strategy",
    "build_header_constants",
    "check_consistency",
]
