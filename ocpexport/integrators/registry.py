"""
Integrator Export Registry.

Maps every ``IntegratorType`` onto the class that exports it. The
resolver asks the factory for a fresh instance per session.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Type

from ..options.store import ConfigurationStore
from ..utils.constants import DEFAULT_MODULE_NAME, IntegratorType, parse_enum
from ..utils.exceptions import InvalidOptionError
from ..utils.logging import get_logger
from .base import IntegratorExport
from .explicit import ExplicitEulerExport, RK2Export, RK3Export, RK4Export
from .implicit import (
    GaussLegendre2Export,
    GaussLegendre4Export,
    GaussLegendre6Export,
    GaussLegendre8Export,
    RadauIIA1Export,
    RadauIIA3Export,
    RadauIIA5Export,
)

logger = get_logger(__name__)


class IntegratorExportFactory:
    """Registry of integrator export classes keyed by scheme type."""

    _registry: Dict[IntegratorType, Type[IntegratorExport]] = {}

    @classmethod
    def register(cls, integrator_type: IntegratorType, export_class: Type[IntegratorExport]) -> None:
        """Register (or replace) the exporter of a scheme."""
        cls._registry[integrator_type] = export_class

    @classmethod
    def unregister(cls, integrator_type: IntegratorType) -> None:
        cls._registry.pop(integrator_type, None)

    @classmethod
    def is_registered(cls, integrator_type: IntegratorType) -> bool:
        return integrator_type in cls._registry

    @classmethod
    def registered_types(cls) -> List[IntegratorType]:
        return [t for t in IntegratorType if t in cls._registry]

    @classmethod
    def create(
        cls,
        integrator_type,
        module_name: str = DEFAULT_MODULE_NAME,
        options: Optional[ConfigurationStore] = None,
    ) -> IntegratorExport:
        """
        Instantiate the exporter of a scheme.

        Args:
            integrator_type: Member or name of ``IntegratorType``
            module_name: Prefix of generated symbols
            options: Option store of the session

        Raises:
            InvalidOptionError: If no exporter is registered for the type
        """
        try:
            key = parse_enum(IntegratorType, integrator_type)
            export_class = cls._registry[key]
        except (ValueError, KeyError):
            raise InvalidOptionError(
                "Unknown integrator type", option="INTEGRATOR_TYPE", value=integrator_type
            ) from None
        logger.debug(f"Creating integrator {export_class.__name__} for {key.name}")
        return export_class(module_name, options)


for _export_class in (
    ExplicitEulerExport,
    RK2Export,
    RK3Export,
    RK4Export,
    GaussLegendre2Export,
    GaussLegendre4Export,
    GaussLegendre6Export,
    GaussLegendre8Export,
    RadauIIA1Export,
    RadauIIA3Export,
    RadauIIA5Export,
):
    IntegratorExportFactory.register(_export_class.integrator_type, _export_class)
