"""
NLP solver export strategies.

Condensed, block condensed and sparse real-time iteration solvers and
the factory that selects one of them by ``SolverStrategy``.
"""

from .base import BlockCondensing, BoundCounting, NLPSolverExport
from .block import GaussNewtonBlockCN2Export, GaussNewtonBlockForcesExport, GaussNewtonBlockQpDunesExport
from .condensed import (
    ExactHessianCN2Export,
    GaussNewtonCN2Export,
    GaussNewtonCN2FactorizationExport,
    GaussNewtonCondensedExport,
)
from .registry import NLPSolverFactory
from .sparse import (
    ExactHessianQpDunesExport,
    GaussNewtonForcesExport,
    GaussNewtonHpmpcExport,
    GaussNewtonQpDunesExport,
    SparseSolverExport,
)

__all__ = [
    "NLPSolverExport",
    "BoundCounting",
    "BlockCondensing",
    "GaussNewtonCondensedExport",
    "GaussNewtonCN2Export",
    "ExactHessianCN2Export",
    "GaussNewtonCN2FactorizationExport",
    "GaussNewtonBlockCN2Export",
    "GaussNewtonBlockQpDunesExport",
    "GaussNewtonBlockForcesExport",
    "SparseSolverExport",
    "GaussNewtonForcesExport",
    "GaussNewtonQpDunesExport",
    "ExactHessianQpDunesExport",
    "GaussNewtonHpmpcExport",
    "NLPSolverFactory",
]
