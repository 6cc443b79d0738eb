"""
Component Resolution.

Binds one integrator strategy and one solver strategy to an export
session. The solver strategy follows from a closed decision table over
the condensing method, the QP backend and the Hessian mode; the header
constants are derived once from the bound strategies.
"""

from __future__ import annotations

from typing import List, Optional

from ..codegen.generators.common_header import HeaderConstant
from ..integrators.base import IntegratorExport
from ..integrators.registry import IntegratorExportFactory
from ..ocp.problem import OCP
from ..options.store import ConfigurationStore, OptionKey
from ..solvers.base import NLPSolverExport
from ..solvers.registry import NLPSolverFactory
from ..utils.constants import (
    HEADER_CONSTANT_PREFIX,
    ExportStatus,
    HessianApproximationMode,
    QPSolverName,
    SolverStrategy,
    SparseQPSolutionMethod,
)
from ..utils.exceptions import InvalidArgumentsError
from ..utils.logging import get_logger
from .plan import ResolvedPlan
from .validator import check_consistency

logger = get_logger(__name__)

GN = HessianApproximationMode.GAUSS_NEWTON
EH = HessianApproximationMode.EXACT_HESSIAN


def select_solver_strategy(
    method: SparseQPSolutionMethod,
    qp_solver: QPSolverName,
    hessian: HessianApproximationMode,
) -> SolverStrategy:
    """
    Pick the solver strategy of a (condensing method, backend, Hessian) triple.

    Raises:
        InvalidArgumentsError: If the triple is outside the supported table
    """
    if method in (SparseQPSolutionMethod.FULL_CONDENSING, SparseQPSolutionMethod.CONDENSING):
        if qp_solver == QPSolverName.QPOASES:
            return SolverStrategy.GAUSS_NEWTON_CONDENSED

    elif method in (SparseQPSolutionMethod.FULL_CONDENSING_N2, SparseQPSolutionMethod.CONDENSING_N2):
        if qp_solver == QPSolverName.QPOASES:
            if hessian == GN:
                return SolverStrategy.GAUSS_NEWTON_CN2
            if hessian == EH:
                return SolverStrategy.EXACT_HESSIAN_CN2

    elif method == SparseQPSolutionMethod.BLOCK_CONDENSING_N2:
        if hessian == GN:
            if qp_solver == QPSolverName.QPDUNES:
                return SolverStrategy.GAUSS_NEWTON_BLOCK_QPDUNES
            if qp_solver == QPSolverName.FORCES:
                return SolverStrategy.GAUSS_NEWTON_BLOCK_FORCES

    elif method == SparseQPSolutionMethod.FULL_CONDENSING_N2_FACTORIZATION:
        if qp_solver == QPSolverName.QPOASES:
            return SolverStrategy.GAUSS_NEWTON_CN2_FACTORIZATION

    elif method == SparseQPSolutionMethod.SPARSE_SOLVER:
        if qp_solver == QPSolverName.HPMPC:
            return SolverStrategy.GAUSS_NEWTON_HPMPC
        if qp_solver == QPSolverName.QPDUNES:
            return SolverStrategy.EXACT_HESSIAN_QPDUNES if hessian == EH else SolverStrategy.GAUSS_NEWTON_QPDUNES
        if qp_solver == QPSolverName.FORCES:
            return SolverStrategy.GAUSS_NEWTON_FORCES

    raise InvalidArgumentsError(
        f"QP solver {qp_solver.name} cannot be combined with {method.name} and {hessian.name}",
        {"qp_solver": qp_solver.name, "sparse_qp_solution": method.name, "hessian": hessian.name},
    )


def _const(name: str, value, description: str) -> HeaderConstant:
    return HeaderConstant(f"{HEADER_CONSTANT_PREFIX}{name}", int(value), description)


def build_header_constants(
    ocp: OCP,
    options: ConfigurationStore,
    integrator: IntegratorExport,
    solver: NLPSolverExport,
) -> List[HeaderConstant]:
    """Derive the ``#define`` table of the common header."""
    constants = [
        _const("N", solver.N, "Number of control/estimation intervals."),
        _const("NX", solver.nx, "Number of differential variables."),
        _const("NXD", solver.ndx, "Number of differential derivative variables."),
        _const("NXA", solver.nxa, "Number of algebraic variables."),
        _const("NU", solver.nu, "Number of control variables."),
        _const("NOD", solver.nod, "Number of online data values."),
        _const("NY", solver.get_ny(), "Number of references/measurements per node on the first N nodes."),
        _const("NYN", solver.get_nyn(), "Number of references/measurements on the last (N + 1)st node."),
        _const("RK_NSTAGES", integrator.num_stages, "Number of Runge-Kutta stages per integration step."),
        _const(
            "INITIAL_STATE_FIXED",
            solver.initial_state_fixed,
            "Indicator for fixed initial state.",
        ),
        _const(
            "WEIGHTING_MATRICES_TYPE",
            solver.weighting_matrices_type(),
            "Indicator for type of fixed weighting matrices.",
        ),
        _const("USE_LINEAR_TERMS", solver.using_linear_terms(), "Indicator for usage of linear terms in the objective."),
        _const(
            "HARDCODED_CONSTRAINT_VALUES",
            options.get(OptionKey.CG_HARDCODE_CONSTRAINT_VALUES),
            "Flag indicating whether constraint values are hard-coded or not.",
        ),
        _const(
            "USE_ARRIVAL_COST",
            options.get(OptionKey.CG_USE_ARRIVAL_COST),
            "Providing interface for arrival cost.",
        ),
        _const(
            "COMPUTE_COVARIANCE_MATRIX",
            options.get(OptionKey.CG_COMPUTE_COVARIANCE_MATRIX),
            "Compute covariance matrix of the last state estimate.",
        ),
        _const("QP_NV", solver.get_num_qp_vars(), "Number of QP variables."),
    ]

    if ocp.has_equidistant_control_grid():
        constants.append(_const("RK_NIS", integrator.num_steps, "Number of integration steps per shooting interval."))

    block = solver.as_block_condensing()
    constants.append(_const("BLOCK_CONDENSING", block is not None, "Indicator for block condensing."))
    if block is not None:
        constants.append(_const(
            "QP_NCA",
            block.get_num_state_bounds_per_block() * block.get_number_of_blocks(),
            "Number of affine constraints of the block condensed QP.",
        ))
    else:
        bounds = solver.as_bound_counting()
        if bounds is not None:
            constants.append(_const("QP_NLB", bounds.get_num_lower_bounds(), "Number of lower bounds of the QP."))
            constants.append(_const("QP_NUB", bounds.get_num_upper_bounds(), "Number of upper bounds of the QP."))

    return sorted(constants, key=lambda c: c.name)


class ComponentResolver:
    """
    Resolver of one export session.

    The session starts ``NOT_INITIALIZED``. A successful ``resolve()``
    commits the plan, freezes the option store and moves to ``READY``;
    later calls return the same plan. A failed resolution leaves the
    session untouched.
    """

    def __init__(self, ocp: OCP, options: ConfigurationStore):
        self.ocp = ocp
        self.options = options
        self._plan: Optional[ResolvedPlan] = None
        self._status = ExportStatus.NOT_INITIALIZED

    @property
    def status(self) -> ExportStatus:
        return self._status

    @property
    def plan(self) -> Optional[ResolvedPlan]:
        return self._plan

    @property
    def module_name(self) -> str:
        return self.options.get(OptionKey.CG_MODULE_NAME)

    def resolve(self) -> ResolvedPlan:
        """
        Bind the integrator and solver strategies.

        Returns:
            The plan of the session

        Raises:
            InvalidArgumentsError: For unsupported problems or option triples
            InvalidOptionError: For unknown strategies or invalid option values
            InvalidObjectiveForExportError: For objectives the solver cannot handle
        """
        if self._status == ExportStatus.READY:
            return self._plan

        ocp, options = self.ocp, self.options
        check_consistency(ocp, options)

        module_name = self.module_name
        integrator = IntegratorExportFactory.create(
            options.get(OptionKey.INTEGRATOR_TYPE), module_name, options
        )
        bound = ocp.with_integration_steps(options.get(OptionKey.NUM_INTEGRATOR_STEPS))
        integrator.set_model_data(bound.model, bound.integration_grid())

        strategy = select_solver_strategy(
            options.get(OptionKey.SPARSE_QP_SOLUTION),
            options.get(OptionKey.QP_SOLVER),
            options.get(OptionKey.HESSIAN_APPROXIMATION),
        )
        solver = NLPSolverFactory.create(strategy, module_name, options)
        solver.set_dimensions(ocp.nx, ocp.ndx, ocp.nxa, ocp.nu, ocp.np, ocp.N, ocp.nod)
        solver.set_integrator_export(integrator)
        solver.set_objective(ocp.objective)
        solver.set_constraints(ocp)
        solver.set_levenberg_marquardt(options.get(OptionKey.LEVENBERG_MARQUARDT))
        solver.setup()

        plan = ResolvedPlan(
            integrator=integrator,
            solver=solver,
            strategy=strategy,
            common_header_name=f"{module_name}_common.h",
            header_constants=tuple(build_header_constants(ocp, options, integrator, solver)),
        )

        self._plan = plan
        self._status = ExportStatus.READY
        options.freeze()
        logger.info(f"Resolved {integrator.name} with {strategy.name}")
        return plan
