"""
Consistency Validation.

Rejects problem and option combinations that cannot be exported before
any strategy is constructed. The checks are pure: they read the problem
and the option store and either return or raise.
"""

from __future__ import annotations

from ..ocp.problem import OCP
from ..options.store import ConfigurationStore, OptionKey
from ..utils.constants import HessianApproximationMode, StateDiscretizationType
from ..utils.exceptions import InvalidArgumentsError, InvalidObjectiveForExportError, InvalidOptionError
from ..utils.logging import get_logger

logger = get_logger(__name__)

EXPORTABLE_HESSIAN_MODES = (HessianApproximationMode.GAUSS_NEWTON, HessianApproximationMode.EXACT_HESSIAN)
EXPORTABLE_DISCRETIZATIONS = (StateDiscretizationType.SINGLE_SHOOTING, StateDiscretizationType.MULTIPLE_SHOOTING)


def check_consistency(ocp: OCP, options: ConfigurationStore) -> None:
    """
    Check that ``ocp`` can be exported with ``options``.

    Args:
        ocp: Problem to export
        options: Option store of the session

    Raises:
        InvalidObjectiveForExportError: If an exact-Hessian objective does not
            have neither a single Mayer nor a single Lagrange term
        InvalidArgumentsError: If the model has uncontrolled inputs or free
            parameters
        InvalidOptionError: If the Hessian mode or discretization is outside
            the exportable subset
    """
    hessian = options.get(OptionKey.HESSIAN_APPROXIMATION)
    objective = ocp.objective

    if ocp.has_objective() and hessian == HessianApproximationMode.EXACT_HESSIAN:
        if not (objective.num_mayer_terms == 1 or objective.num_lagrange_terms == 1):
            raise InvalidObjectiveForExportError(
                "Exact-Hessian export needs a single Mayer or a single Lagrange term",
                {"mayer": objective.num_mayer_terms, "lagrange": objective.num_lagrange_terms},
            )

    if ocp.model.nui > 0:
        raise InvalidArgumentsError(
            "Uncontrolled inputs are not supported by the export", {"nui": ocp.model.nui}
        )

    if ocp.model.np > 0:
        raise InvalidArgumentsError(
            "Free parameters are not supported by the export, use online data instead",
            {"np": ocp.model.np},
        )

    if hessian not in EXPORTABLE_HESSIAN_MODES:
        raise InvalidOptionError(
            "Only Gauss-Newton and exact Hessian can be exported",
            option=OptionKey.HESSIAN_APPROXIMATION.name,
            value=hessian.name,
        )

    discretization = options.get(OptionKey.DISCRETIZATION_TYPE)
    if discretization not in EXPORTABLE_DISCRETIZATIONS:
        raise InvalidOptionError(
            "Only single and multiple shooting can be exported",
            option=OptionKey.DISCRETIZATION_TYPE.name,
            value=discretization.name,
        )

    logger.debug(f"Problem with N={ocp.N}, nx={ocp.nx}, nu={ocp.nu} passed consistency checks")
