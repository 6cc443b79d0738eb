"""
NLP Solver Export Registry.

Maps every ``SolverStrategy`` tag onto the class that exports it. The
resolver picks the tag from the option table and asks the factory for a
fresh instance.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Type

from ..options.store import ConfigurationStore
from ..utils.constants import DEFAULT_MODULE_NAME, SolverStrategy, parse_enum
from ..utils.exceptions import InvalidOptionError
from ..utils.logging import get_logger
from .base import NLPSolverExport
from .block import GaussNewtonBlockForcesExport, GaussNewtonBlockQpDunesExport
from .condensed import (
    ExactHessianCN2Export,
    GaussNewtonCN2Export,
    GaussNewtonCN2FactorizationExport,
    GaussNewtonCondensedExport,
)
from .sparse import (
    ExactHessianQpDunesExport,
    GaussNewtonForcesExport,
    GaussNewtonHpmpcExport,
    GaussNewtonQpDunesExport,
)

logger = get_logger(__name__)


class NLPSolverFactory:
    """Registry of solver export classes keyed by strategy tag."""

    _registry: Dict[SolverStrategy, Type[NLPSolverExport]] = {}

    @classmethod
    def register(cls, strategy: SolverStrategy, export_class: Type[NLPSolverExport]) -> None:
        """Register (or replace) the exporter of a strategy."""
        cls._registry[strategy] = export_class

    @classmethod
    def unregister(cls, strategy: SolverStrategy) -> None:
        cls._registry.pop(strategy, None)

    @classmethod
    def is_registered(cls, strategy: SolverStrategy) -> bool:
        return strategy in cls._registry

    @classmethod
    def registered_strategies(cls) -> List[SolverStrategy]:
        return [s for s in SolverStrategy if s in cls._registry]

    @classmethod
    def create(
        cls,
        strategy,
        module_name: str = DEFAULT_MODULE_NAME,
        options: Optional[ConfigurationStore] = None,
    ) -> NLPSolverExport:
        """
        Instantiate the exporter of a strategy.

        Args:
            strategy: Member or name of ``SolverStrategy``
            module_name: Prefix of generated symbols
            options: Option store of the session

        Raises:
            InvalidOptionError: If no exporter is registered for the tag
        """
        try:
            key = parse_enum(SolverStrategy, strategy)
            export_class = cls._registry[key]
        except (ValueError, KeyError):
            raise InvalidOptionError("Cannot allocate the solver object", value=strategy) from None
        logger.debug(f"Creating solver {export_class.__name__} for {key.name}")
        return export_class(module_name, options)


for _export_class in (
    GaussNewtonCondensedExport,
    GaussNewtonCN2Export,
    ExactHessianCN2Export,
    GaussNewtonCN2FactorizationExport,
    GaussNewtonBlockQpDunesExport,
    GaussNewtonBlockForcesExport,
    GaussNewtonForcesExport,
    GaussNewtonQpDunesExport,
    ExactHessianQpDunesExport,
    GaussNewtonHpmpcExport,
):
    NLPSolverFactory.register(_export_class.strategy, _export_class)
