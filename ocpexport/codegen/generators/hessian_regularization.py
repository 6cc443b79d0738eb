"""
Hessian Regularization Generator.

Exact-Hessian solvers need a routine that makes each stage block of the
Hessian positive definite before it reaches the QP backend. The routine
mirrors negative eigenvalues and lifts small ones to a fixed floor.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

from ...utils.constants import DEFAULT_PRECISION, DEFAULT_REAL_TYPE, HESSIAN_REGULARIZATION_FLOOR
from ...utils.exceptions import InvalidArgumentsError
from ..templates import JinjaTemplateRenderer
from .base import TemplateBasedGenerator


class HessianRegularizationGenerator(TemplateBasedGenerator):
    """Generator for ``<module>_hessian_regularization.c``."""

    def __init__(
        self,
        destination: Union[str, Path],
        module_name: str,
        template_renderer: Optional[JinjaTemplateRenderer] = None,
    ):
        super().__init__("hessian_regularization.c.j2", destination, template_renderer)
        self.module_name = module_name
        self.dim = 0
        self.regularization_floor = HESSIAN_REGULARIZATION_FLOOR
        self.real_type = DEFAULT_REAL_TYPE
        self.precision = DEFAULT_PRECISION

    def configure(
        self,
        dim: int,
        regularization_floor: float = HESSIAN_REGULARIZATION_FLOOR,
        real_type: str = DEFAULT_REAL_TYPE,
        precision: int = DEFAULT_PRECISION,
    ) -> "HessianRegularizationGenerator":
        """
        Args:
            dim: Size of one stage block, ``nx + nu``
            regularization_floor: Smallest eigenvalue magnitude kept
        """
        if dim < 1:
            raise InvalidArgumentsError("Hessian block dimension must be positive", {"dim": dim})
        if regularization_floor <= 0:
            raise InvalidArgumentsError(
                "Regularization floor must be positive", {"floor": regularization_floor}
            )
        self.dim = dim
        self.regularization_floor = regularization_floor
        self.real_type = real_type
        self.precision = precision
        self._mark_configured()
        return self

    def _build_template_context(self) -> Dict[str, Any]:
        return {
            "common_header": f"{self.module_name}_common.h",
            "prefix": self.module_name,
            "dim": self.dim,
            "dim_macro": "ACADO_HESSIAN_BLOCK_DIM",
            "floor_macro": "ACADO_HESSIAN_REGULARIZATION",
            "regularization_floor": self.regularization_floor,
            "precision": self.precision,
            "real_type": self.real_type,
            "max_sweeps": 50,
        }
