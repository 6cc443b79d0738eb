"""
Common Header Generator.

Produces ``<module>_common.h``: the scalar typedef, the named problem
constants, the variables and workspace structs and the prototypes of
every generated function.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from ...utils.constants import (
    DEFAULT_PRECISION,
    DEFAULT_REAL_TYPE,
    VARIABLES_INSTANCE_NAME,
    VARIABLES_STRUCT_NAME,
    WORKSPACE_INSTANCE_NAME,
    WORKSPACE_STRUCT_NAME,
    QPSolverName,
)
from ..templates import JinjaTemplateRenderer
from .base import TemplateBasedGenerator, include_guard


@dataclass(frozen=True)
class HeaderConstant:
    """A ``#define`` of the common header."""
    name: str
    value: Union[int, float]
    description: str


_QP_INTERFACE_HEADERS = {
    QPSolverName.QPOASES: "{module}_qpoases_interface.hpp",
    QPSolverName.QPDUNES: "{module}_qpdunes_interface.h",
    QPSolverName.FORCES: "{module}_forces_interface.h",
    QPSolverName.HPMPC: "{module}_hpmpc_interface.h",
}


class CommonHeaderGenerator(TemplateBasedGenerator):
    """Generator for the header shared by all generated sources."""

    def __init__(
        self,
        destination: Union[str, Path],
        template_renderer: Optional[JinjaTemplateRenderer] = None,
    ):
        super().__init__("common_header.h.j2", destination, template_renderer)
        self._context: Dict[str, Any] = {}

    def configure(
        self,
        module_name: str,
        use_single_precision: bool,
        use_complex_arithmetic: bool,
        qp_solver: QPSolverName,
        constants: Iterable[HeaderConstant],
        variables: str,
        workspace: str,
        functions: str,
        real_type: str = DEFAULT_REAL_TYPE,
        precision: int = DEFAULT_PRECISION,
    ) -> "CommonHeaderGenerator":
        """
        Configure the header contents.

        Args:
            module_name: Prefix of generated files and symbols
            use_single_precision: Typedef the real type to ``float``
            use_complex_arithmetic: Include ``complex.h``
            qp_solver: Backend whose interface header gets included
            constants: Named constants; written sorted by name
            variables: Rendered declarations of the variables struct
            workspace: Rendered declarations of the workspace struct
            functions: Rendered function prototypes
            real_type: Name of the scalar type
            precision: Digits of non-integer constants
        """
        ordered: Tuple[HeaderConstant, ...] = tuple(sorted(constants, key=lambda c: c.name))
        self._context = {
            "guard": include_guard(self.destination.name),
            "module_name": module_name,
            "use_single_precision": use_single_precision,
            "use_complex_arithmetic": use_complex_arithmetic,
            "qp_include": _QP_INTERFACE_HEADERS[qp_solver].format(module=module_name),
            "constants": [(c.name, c.value, c.description) for c in ordered],
            "variables": variables,
            "workspace": workspace,
            "functions": functions,
            "real_type": real_type,
            "precision": precision,
            "variables_struct": VARIABLES_STRUCT_NAME,
            "workspace_struct": WORKSPACE_STRUCT_NAME,
            "variables_instance": VARIABLES_INSTANCE_NAME,
            "workspace_instance": WORKSPACE_INSTANCE_NAME,
        }
        self._mark_configured()
        return self

    def _build_template_context(self) -> Dict[str, Any]:
        return self._context
