"""
Optimal control problem description consumed by the exporter.
"""

from .problem import (
    OCP,
    Bound,
    Constraints,
    Grid,
    LSQTerm,
    ModelData,
    Objective,
)

__all__ = [
    "OCP",
    "Bound",
    "Constraints",
    "Grid",
    "LSQTerm",
    "ModelData",
    "Objective",
]
