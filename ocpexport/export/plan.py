"""
Resolved Export Plan.

The immutable result of a successful resolution: the bound integrator
and solver strategies and the header constants derived from them. Every
artifact of a session reads from the same plan.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from ..codegen.generators.common_header import HeaderConstant
from ..integrators.base import IntegratorExport
from ..solvers.base import NLPSolverExport
from ..utils.constants import SolverStrategy


@dataclass(frozen=True)
class ResolvedPlan:
    """Strategies and header constants of a ready export session."""
    integrator: IntegratorExport
    solver: NLPSolverExport
    strategy: SolverStrategy
    common_header_name: str
    header_constants: Tuple[HeaderConstant, ...]

    def constant(self, name: str) -> int:
        """
        Value of a header constant.

        Raises:
            KeyError: If the plan has no constant of that name
        """
        for header_constant in self.header_constants:
            if header_constant.name == name:
                return header_constant.value
        raise KeyError(name)

    def constants_dict(self) -> Dict[str, int]:
        return {c.name: c.value for c in self.header_constants}
