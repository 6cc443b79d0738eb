"""
Auxiliary Functions Generator.

Produces the ``<module>_auxiliary_functions.{h,c}`` pair with accessors,
printing helpers and a wall-clock timer for the generated solver.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...utils.constants import DEFAULT_REAL_TYPE, VARIABLES_INSTANCE_NAME
from ..templates import JinjaTemplateRenderer
from .base import TemplateBasedGenerator, include_guard


class _AuxiliaryFile(TemplateBasedGenerator):

    def __init__(self, template_name, destination, template_renderer, context):
        super().__init__(template_name, destination, template_renderer)
        self._context = context

    def _build_template_context(self) -> Dict[str, Any]:
        return {**self._context, "guard": include_guard(self.destination.name)}


class AuxiliaryFunctionsGenerator:
    """Generator for the auxiliary header and source pair."""

    def __init__(
        self,
        header_destination: Union[str, Path],
        source_destination: Union[str, Path],
        module_name: str,
        template_renderer: Optional[JinjaTemplateRenderer] = None,
    ):
        self._context: Dict[str, Any] = {
            "module_name": module_name,
            "prefix": module_name,
            "common_header": f"{module_name}_common.h",
            "variables_instance": VARIABLES_INSTANCE_NAME,
            "real_type": DEFAULT_REAL_TYPE,
        }
        self._files = [
            _AuxiliaryFile("auxiliary_functions.h.j2", header_destination, template_renderer, self._context),
            _AuxiliaryFile("auxiliary_functions.c.j2", source_destination, template_renderer, self._context),
        ]

    def configure(self, real_type: str = DEFAULT_REAL_TYPE) -> "AuxiliaryFunctionsGenerator":
        self._context["real_type"] = real_type
        for generated in self._files:
            generated._mark_configured()
        return self

    def export_code(self) -> List[Path]:
        """Write both files."""
        return [generated.export_code() for generated in self._files]
