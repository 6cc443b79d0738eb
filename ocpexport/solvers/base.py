"""
Base Classes for NLP Solver Export.

An NLP solver export generates the real-time iteration of a shooting
based SQP method around one QP backend: model simulation through the
exported integrator, objective evaluation, QP preparation, the feedback
step and the helpers for shifting and initialization.

Concrete strategies differ in how the QP is formulated (condensed,
block condensed or sparse) and which curvature model they use. They
plug their QP data and the bodies of the QP specific steps into the
hooks of ``NLPSolverExport``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..codegen.declarations import INT, REAL, DataDeclaration, ExportFunction, FunctionArgument, filter_struct
from ..codegen.export_file import ExportFile
from ..integrators.base import IntegratorExport
from ..ocp.problem import OCP, Bound, Objective
from ..options.store import ConfigurationStore, OptionKey
from ..utils.constants import (
    DEFAULT_MODULE_NAME,
    VARIABLES_INSTANCE_NAME,
    WORKSPACE_INSTANCE_NAME,
    ExportStruct,
    QPSolverName,
    SolverStrategy,
    WeightingMatricesType,
)
from ..utils.exceptions import InvalidArgumentsError, InvalidObjectiveForExportError
from ..utils.logging import get_logger

logger = get_logger(__name__)

VARIABLES = ExportStruct.VARIABLES
WORKSPACE = ExportStruct.WORKSPACE


class BoundCounting(ABC):
    """Solvers that pass simple bounds to the QP backend as index lists."""

    @abstractmethod
    def get_num_lower_bounds(self) -> int:
        pass

    @abstractmethod
    def get_num_upper_bounds(self) -> int:
        pass


class BlockCondensing(ABC):
    """Solvers that condense the horizon into blocks of equal length."""

    @abstractmethod
    def get_num_state_bounds_per_block(self) -> int:
        pass

    @abstractmethod
    def get_number_of_blocks(self) -> int:
        pass


class NLPSolverExport(ABC):
    """
    Base class for exported real-time iteration solvers.

    The resolver drives an instance through ``set_dimensions``,
    ``set_integrator_export``, ``set_objective``, ``set_constraints``,
    ``set_levenberg_marquardt`` and finally ``setup``.
    """

    strategy: SolverStrategy
    qp_solver: QPSolverName
    exact_hessian: bool = False

    def __init__(self, module_name: str = DEFAULT_MODULE_NAME, options: Optional[ConfigurationStore] = None):
        """
        Initialize the solver export.

        Args:
            module_name: Prefix of generated symbols
            options: Option store of the session
        """
        self.module_name = module_name
        self.options = options if options is not None else ConfigurationStore()

        self.nx = self.ndx = self.nxa = self.nu = self.np = self.nod = 0
        self.N = 0

        self.integrator: Optional[IntegratorExport] = None
        self.objective: Optional[Objective] = None
        self.state_bounds: Tuple[Bound, ...] = ()
        self.control_bounds: Tuple[Bound, ...] = ()
        self.num_path_constraints = 0
        self.num_point_constraints = 0
        self.levenberg_marquardt = 0.0
        self._is_setup = False

    @property
    def name(self) -> str:
        return self.strategy.name

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def set_dimensions(self, nx: int, ndx: int, nxa: int, nu: int, np: int, N: int, nod: int) -> None:
        if N < 1 or nx < 1:
            raise InvalidArgumentsError("Solver needs at least one state and one interval", {"nx": nx, "N": N})
        self.nx, self.ndx, self.nxa, self.nu, self.np, self.N, self.nod = nx, ndx, nxa, nu, np, N, nod

    def set_integrator_export(self, integrator: IntegratorExport) -> None:
        self.integrator = integrator

    def set_objective(self, objective: Objective) -> None:
        """
        Attach the objective.

        Raises:
            InvalidObjectiveForExportError: If the objective has terms the
                curvature model cannot handle, or weights of wrong shape
        """
        if not self.exact_hessian and objective.has_general_terms():
            raise InvalidObjectiveForExportError(
                f"{self.name} supports least-squares objectives only",
                {"mayer": objective.num_mayer_terms, "lagrange": objective.num_lagrange_terms},
            )
        for label, term in (("stage", objective.lsq), ("terminal", objective.lsq_end)):
            if term is not None and term.weight is not None and term.weight.shape != (term.ny, term.ny):
                raise InvalidObjectiveForExportError(
                    f"Weighting matrix of the {label} term must be {term.ny}x{term.ny}",
                    {"shape": term.weight.shape},
                )
        self.objective = objective

    def set_constraints(self, ocp: OCP) -> None:
        self.state_bounds = ocp.constraints.state_bounds
        self.control_bounds = ocp.constraints.control_bounds
        self.num_path_constraints = ocp.constraints.num_path_constraints
        self.num_point_constraints = ocp.constraints.num_point_constraints

    def set_levenberg_marquardt(self, value: float) -> None:
        if value < 0:
            raise InvalidArgumentsError("Levenberg-Marquardt regularization must be non-negative", {"value": value})
        self.levenberg_marquardt = value

    def setup(self) -> None:
        """
        Check that the solver is fully configured and derive its QP layout.

        Raises:
            InvalidArgumentsError: If dimensions, integrator or objective are missing
        """
        if self.N == 0:
            raise InvalidArgumentsError(f"{self.name}: dimensions are not set")
        if self.integrator is None or not self.integrator.is_bound:
            raise InvalidArgumentsError(f"{self.name}: no integrator with model data attached")
        if self.objective is None:
            raise InvalidArgumentsError(f"{self.name}: no objective attached")
        self._setup()
        self._is_setup = True
        logger.debug(f"{self.name} set up with {self.get_num_qp_vars()} QP variables")

    def _setup(self) -> None:
        pass

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def initial_state_fixed(self) -> bool:
        return bool(self.options.get(OptionKey.FIX_INITIAL_STATE))

    @property
    def hardcoded_constraints(self) -> bool:
        return bool(self.options.get(OptionKey.CG_HARDCODE_CONSTRAINT_VALUES))

    def get_ny(self) -> int:
        return self.objective.ny if self.objective is not None else 0

    def get_nyn(self) -> int:
        return self.objective.nyn if self.objective is not None else 0

    @abstractmethod
    def get_num_qp_vars(self) -> int:
        """Number of QP variables handed to the backend."""
        pass

    def weighting_matrices_type(self) -> WeightingMatricesType:
        if self.objective is None:
            return WeightingMatricesType.EMPTY
        return self.objective.weighting_matrices_type()

    def using_linear_terms(self) -> bool:
        return self.objective is not None and self.objective.linear_terms

    def get_num_complex_constraints(self) -> int:
        return self.N * self.num_path_constraints + self.num_point_constraints

    def bounded_state_indices(self) -> List[int]:
        return sorted({b.index for b in self.state_bounds if b.has_lower or b.has_upper})

    def num_bounded_states(self) -> int:
        return len(self.bounded_state_indices())

    def as_bound_counting(self) -> Optional[BoundCounting]:
        return self if isinstance(self, BoundCounting) else None

    def as_block_condensing(self) -> Optional[BlockCondensing]:
        return self if isinstance(self, BlockCondensing) else None

    def fn(self, name: str) -> str:
        return f"{self.module_name}_{name}"

    # -------------------------------------------------------------------------
    # Declarations
    # -------------------------------------------------------------------------

    def _data_declarations(self) -> List[DataDeclaration]:
        N, nx, nu, nod = self.N, self.nx, self.nu, self.nod
        ny, nyn = self.get_ny(), self.get_nyn()
        varying = self.weighting_matrices_type() == WeightingMatricesType.VARYING

        declarations = [
            DataDeclaration("x", (N + 1) * nx, struct=VARIABLES, description="Differential states"),
            DataDeclaration("u", N * nu, struct=VARIABLES, description="Controls"),
            DataDeclaration("od", (N + 1) * nod, struct=VARIABLES, description="Online data"),
            DataDeclaration("y", N * ny, struct=VARIABLES, description="References of the stage terms"),
            DataDeclaration("yN", nyn, struct=VARIABLES, description="Reference of the terminal term"),
            DataDeclaration("W", (N if varying else 1) * ny, ny, struct=VARIABLES),
            DataDeclaration("WN", nyn, nyn, struct=VARIABLES),
        ]
        if self.initial_state_fixed:
            declarations.append(DataDeclaration("x0", nx, struct=VARIABLES, description="Current state feedback"))
        if self.options.get(OptionKey.CG_USE_ARRIVAL_COST):
            declarations += [
                DataDeclaration("xAC", nx, struct=VARIABLES),
                DataDeclaration("SAC", nx, nx, struct=VARIABLES),
                DataDeclaration("WL", nx, nx, struct=VARIABLES),
            ]
        if self.options.get(OptionKey.CG_COMPUTE_COVARIANCE_MATRIX):
            declarations.append(DataDeclaration("sigmaN", nx, nx, struct=VARIABLES))
        if not self.hardcoded_constraints:
            declarations += [
                DataDeclaration(name, values.size, struct=VARIABLES)
                for name, values in self._constraint_values().items()
            ]

        declarations += [
            DataDeclaration("state", self.integrator.state_size, struct=WORKSPACE),
            DataDeclaration("d", N * nx, struct=WORKSPACE),
            DataDeclaration("Dy", N * ny, struct=WORKSPACE),
            DataDeclaration("DyN", nyn, struct=WORKSPACE),
            DataDeclaration("evGx", N * nx, nx, struct=WORKSPACE),
            DataDeclaration("evGu", N * nx, nu, struct=WORKSPACE),
            DataDeclaration("objValueIn", nx + nu + nod, struct=WORKSPACE),
            DataDeclaration("objValueOut", ny * (1 + nx + nu), struct=WORKSPACE),
            DataDeclaration("conValueIn", nx + nu + nod if self.num_path_constraints else 0, struct=WORKSPACE),
            DataDeclaration("conValueOut", self.num_path_constraints, struct=WORKSPACE),
            DataDeclaration("lbPathCon", self.get_num_complex_constraints(), struct=WORKSPACE),
            DataDeclaration("ubPathCon", self.get_num_complex_constraints(), struct=WORKSPACE),
        ]
        if self.exact_hessian:
            declarations += [
                DataDeclaration("evHessian", nx + nu, nx + nu, struct=WORKSPACE),
                DataDeclaration("mu", N * nx, struct=WORKSPACE, description="Multipliers of the continuity constraints"),
            ]
        return declarations + self._qp_data_declarations()

    @abstractmethod
    def _qp_data_declarations(self) -> List[DataDeclaration]:
        pass

    def get_data_declarations(self, struct: Optional[ExportStruct] = None) -> List[DataDeclaration]:
        """Memory of the solver, optionally restricted to one struct."""
        return filter_struct(self._data_declarations(), struct)

    def _external_functions(self) -> List[ExportFunction]:
        """Functions the solver calls but does not define."""
        io = (FunctionArgument("in", is_const=True), FunctionArgument("out"))
        functions = [
            ExportFunction(self.fn("evaluateLSQ"), io, description="Stage residuals and their Jacobians."),
            ExportFunction(self.fn("evaluateLSQEndTerm"), io, description="Terminal residual and its Jacobian."),
        ]
        if self.num_path_constraints:
            functions.append(ExportFunction(self.fn("evaluatePathConstraints"), io))
        if self.exact_hessian:
            functions += [
                ExportFunction(self.fn("evaluateLagrangianHessian"), io),
                ExportFunction(self.fn("regularize"), (FunctionArgument("hessian"),)),
            ]
        return functions

    def _public_functions(self) -> List[ExportFunction]:
        return [
            ExportFunction(self.fn("initializeSolver"), return_type=INT,
                           description="Initialize the workspace; call once before anything else."),
            ExportFunction(self.fn("preparationStep"), return_type=INT,
                           description="Simulate the model and prepare the QP."),
            ExportFunction(self.fn("feedbackStep"), return_type=INT,
                           description="Embed the current state and solve the QP."),
            ExportFunction(self.fn("getKKT"), return_type=REAL),
            ExportFunction(self.fn("getObjective"), return_type=REAL),
            ExportFunction(
                self.fn("shiftStates"),
                (FunctionArgument("strategy", INT, is_array=False), FunctionArgument("xEnd"), FunctionArgument("uEnd")),
            ),
            ExportFunction(self.fn("shiftControls"), (FunctionArgument("uEnd"),)),
            ExportFunction(self.fn("initializeNodesByForwardSimulation")),
            ExportFunction(self.fn("modelSimulation"), return_type=INT),
            ExportFunction(self.fn("evaluateObjective")),
        ]

    def _qp_prototypes(self) -> List[ExportFunction]:
        """Strategy specific helpers defined in the solver source."""
        return []

    def _qp_bodies(self, sink: ExportFile) -> Dict[str, List[str]]:
        """Bodies of the strategy specific helpers keyed by short name."""
        return {}

    def _define(self, prototypes: List[ExportFunction], bodies: Dict[str, List[str]]) -> List[ExportFunction]:
        functions = []
        for prototype in prototypes:
            short = prototype.name[len(self.module_name) + 1:]
            functions.append(
                ExportFunction(prototype.name, prototype.arguments, prototype.return_type, tuple(bodies[short]))
            )
        return functions

    def get_function_declarations(self) -> List[ExportFunction]:
        """Prototypes of every solver function the common header must know."""
        return self._public_functions() + self._qp_prototypes() + self._external_functions()

    # -------------------------------------------------------------------------
    # Code
    # -------------------------------------------------------------------------

    def _constraint_values(self) -> Dict[str, np.ndarray]:
        """
        Bound values over the horizon, node major.

        Control bounds cover nodes ``0..N-1``, state bounds the bounded
        components at nodes ``1..N``. General constraints are stated as
        ``h(x, u) <= 0``.
        """
        lower_u = np.full((self.N, self.nu), -np.inf)
        upper_u = np.full((self.N, self.nu), np.inf)
        for bound in self.control_bounds:
            lower_u[:, bound.index] = max(lower_u[0, bound.index], bound.lower)
            upper_u[:, bound.index] = min(upper_u[0, bound.index], bound.upper)

        indices = self.bounded_state_indices()
        lower_x = np.full((self.N, len(indices)), -np.inf)
        upper_x = np.full((self.N, len(indices)), np.inf)
        for bound in self.state_bounds:
            if bound.index in indices:
                column = indices.index(bound.index)
                lower_x[:, column] = max(lower_x[0, column], bound.lower)
                upper_x[:, column] = min(upper_x[0, column], bound.upper)

        num_complex = self.get_num_complex_constraints()
        return {
            "lbValues": lower_u.ravel(),
            "ubValues": upper_u.ravel(),
            "lbXValues": lower_x.ravel(),
            "ubXValues": upper_x.ravel(),
            "lbAValues": np.full(num_complex, -np.inf),
            "ubAValues": np.zeros(num_complex),
        }

    def _bound_source(self, name: str) -> str:
        if self.hardcoded_constraints:
            return name
        return f"{VARIABLES_INSTANCE_NAME}.{name}"

    @abstractmethod
    def _preparation_lines(self) -> List[str]:
        """Statements building the QP after simulation and objective evaluation."""
        pass

    @abstractmethod
    def _feedback_lines(self) -> List[str]:
        """Statements embedding the current state, solving and expanding the QP."""
        pass

    def _hessian_lines(self) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        nv = self.nx + self.nu
        return [
            f"for (lRun1 = 0; lRun1 < {self.N}; ++lRun1)",
            "{",
            f"    for (lRun2 = 0; lRun2 < {self.nx}; ++lRun2)",
            f"        {ws}.objValueIn[lRun2] = {VARIABLES_INSTANCE_NAME}.x[lRun1 * {self.nx} + lRun2];",
            f"    {self.fn('evaluateLagrangianHessian')}( {ws}.objValueIn, {ws}.evHessian );",
            f"    {self.fn('regularize')}( {ws}.evHessian );",
            "}",
        ] if self.exact_hessian and nv > 0 else []

    def _common_functions(self, sink: ExportFile) -> List[ExportFunction]:
        ws = WORKSPACE_INSTANCE_NAME
        var = VARIABLES_INSTANCE_NAME
        N, nx, nu, nod = self.N, self.nx, self.nu, self.nod
        ny, nyn = self.get_ny(), self.get_nyn()
        nz = nx + self.nxa
        sens = nz * (1 + nx + nu)
        integrate = self.integrator.integrate_function_name

        simulation = [
            "int ret = 0;",
            "int lRun1, lRun2;",
            "",
            f"for (lRun1 = 0; lRun1 < {N}; ++lRun1)",
            "{",
            f"    for (lRun2 = 0; lRun2 < {nx}; ++lRun2)",
            f"        {ws}.state[lRun2] = {var}.x[lRun1 * {nx} + lRun2];",
            f"    for (lRun2 = 0; lRun2 < {nu}; ++lRun2)",
            f"        {ws}.state[{sens} + lRun2] = {var}.u[lRun1 * {nu} + lRun2];",
            f"    for (lRun2 = 0; lRun2 < {nod}; ++lRun2)",
            f"        {ws}.state[{sens + nu} + lRun2] = {var}.od[lRun1 * {nod} + lRun2];",
            "",
            f"    ret = {integrate}( {ws}.state, 1 );",
            "",
            f"    for (lRun2 = 0; lRun2 < {nx}; ++lRun2)",
            f"        {ws}.d[lRun1 * {nx} + lRun2] = {ws}.state[lRun2] - {var}.x[lRun1 * {nx} + {nx} + lRun2];",
            f"    for (lRun2 = 0; lRun2 < {nx * nx}; ++lRun2)",
            f"        {ws}.evGx[lRun1 * {nx * nx} + lRun2] = "
            f"{ws}.state[{nz} + (lRun2 / {nx}) * {nx + nu} + lRun2 % {nx}];",
            f"    for (lRun2 = 0; lRun2 < {nx * nu}; ++lRun2)",
            f"        {ws}.evGu[lRun1 * {nx * nu} + lRun2] = "
            f"{ws}.state[{nz + nx} + (lRun2 / {max(nu, 1)}) * {nx + nu} + lRun2 % {max(nu, 1)}];",
            "}",
            "return ret;",
        ]

        objective = [
            "int lRun1, lRun2;",
            "",
            f"for (lRun1 = 0; lRun1 < {N}; ++lRun1)",
            "{",
            f"    for (lRun2 = 0; lRun2 < {nx}; ++lRun2)",
            f"        {ws}.objValueIn[lRun2] = {var}.x[lRun1 * {nx} + lRun2];",
            f"    for (lRun2 = 0; lRun2 < {nu}; ++lRun2)",
            f"        {ws}.objValueIn[{nx} + lRun2] = {var}.u[lRun1 * {nu} + lRun2];",
            f"    for (lRun2 = 0; lRun2 < {nod}; ++lRun2)",
            f"        {ws}.objValueIn[{nx + nu} + lRun2] = {var}.od[lRun1 * {nod} + lRun2];",
            f"    {self.fn('evaluateLSQ')}( {ws}.objValueIn, {ws}.objValueOut );",
            f"    for (lRun2 = 0; lRun2 < {ny}; ++lRun2)",
            f"        {ws}.Dy[lRun1 * {ny} + lRun2] = {ws}.objValueOut[lRun2] - {var}.y[lRun1 * {ny} + lRun2];",
            "}",
            f"for (lRun2 = 0; lRun2 < {nx}; ++lRun2)",
            f"    {ws}.objValueIn[lRun2] = {var}.x[{N * nx} + lRun2];",
            f"{self.fn('evaluateLSQEndTerm')}( {ws}.objValueIn, {ws}.objValueOut );",
            f"for (lRun2 = 0; lRun2 < {nyn}; ++lRun2)",
            f"    {ws}.DyN[lRun2] = {ws}.objValueOut[lRun2] - {var}.yN[lRun2];",
        ]
        if self.num_path_constraints:
            npc = self.num_path_constraints
            objective += [
                f"for (lRun1 = 0; lRun1 < {N}; ++lRun1)",
                "{",
                f"    for (lRun2 = 0; lRun2 < {nx}; ++lRun2)",
                f"        {ws}.conValueIn[lRun2] = {var}.x[lRun1 * {nx} + lRun2];",
                f"    for (lRun2 = 0; lRun2 < {nu}; ++lRun2)",
                f"        {ws}.conValueIn[{nx} + lRun2] = {var}.u[lRun1 * {nu} + lRun2];",
                f"    {self.fn('evaluatePathConstraints')}( {ws}.conValueIn, {ws}.conValueOut );",
                f"    for (lRun2 = 0; lRun2 < {npc}; ++lRun2)",
                "    {",
                f"        {ws}.lbPathCon[lRun1 * {npc} + lRun2] = {self._bound_source('lbAValues')}[lRun1 * {npc} + lRun2] "
                f"- {ws}.conValueOut[lRun2];",
                f"        {ws}.ubPathCon[lRun1 * {npc} + lRun2] = {self._bound_source('ubAValues')}[lRun1 * {npc} + lRun2] "
                f"- {ws}.conValueOut[lRun2];",
                "    }",
                "}",
            ]

        preparation = ["int ret;", "int lRun1, lRun2;", "", f"ret = {self.fn('modelSimulation')}();",
                       f"{self.fn('evaluateObjective')}();"]
        preparation += self._hessian_lines()
        preparation += self._preparation_lines()
        preparation += ["(void)lRun1;", "(void)lRun2;", "return ret;"]

        kkt_terms = [
            f"{sink.real_type} kkt = 0.0;",
            "int lRun1;",
            "",
            f"for (lRun1 = 0; lRun1 < {N * nx}; ++lRun1)",
            f"    kkt += fabs({ws}.d[lRun1]);",
            "return kkt;",
        ]

        objective_value = [
            f"{sink.real_type} objVal = 0.0;",
            "int lRun1, lRun2;",
            "",
            f"for (lRun1 = 0; lRun1 < {N * ny}; ++lRun1)",
            f"    objVal += {ws}.Dy[lRun1] * {ws}.Dy[lRun1] * {var}.W[(lRun1 % {max(ny, 1)}) * {ny + 1}];",
            f"for (lRun2 = 0; lRun2 < {nyn}; ++lRun2)",
            f"    objVal += {ws}.DyN[lRun2] * {ws}.DyN[lRun2] * {var}.WN[lRun2 * {nyn + 1}];",
            "return 0.5 * objVal;",
        ]

        shift_states = [
            "int index;",
            "",
            f"for (index = 0; index < {N}; ++index)",
            f"    memcpy(&{var}.x[index * {nx}], &{var}.x[(index + 1) * {nx}], {nx} * sizeof({sink.real_type}));",
            "if (strategy == 1 && xEnd != 0)",
            f"    memcpy(&{var}.x[{N * nx}], xEnd, {nx} * sizeof({sink.real_type}));",
            "else if (strategy == 2)",
            "{",
            f"    memcpy({ws}.state, &{var}.x[{N * nx}], {nx} * sizeof({sink.real_type}));",
            "    if (uEnd != 0)",
            f"        memcpy(&{ws}.state[{sens}], uEnd, {nu} * sizeof({sink.real_type}));",
            "    else",
            f"        memcpy(&{ws}.state[{sens}], &{var}.u[{(N - 1) * nu}], {nu} * sizeof({sink.real_type}));",
            f"    {integrate}( {ws}.state, 1 );",
            f"    memcpy(&{var}.x[{N * nx}], {ws}.state, {nx} * sizeof({sink.real_type}));",
            "}",
        ]

        shift_controls = [
            "int index;",
            "",
            f"for (index = 0; index < {N - 1}; ++index)",
            f"    memcpy(&{var}.u[index * {nu}], &{var}.u[(index + 1) * {nu}], {nu} * sizeof({sink.real_type}));",
            "if (uEnd != 0)",
            f"    memcpy(&{var}.u[{(N - 1) * nu}], uEnd, {nu} * sizeof({sink.real_type}));",
        ]

        forward_simulation = [
            "int index;",
            "",
            f"for (index = 0; index < {N}; ++index)",
            "{",
            f"    memcpy({ws}.state, &{var}.x[index * {nx}], {nx} * sizeof({sink.real_type}));",
            f"    memcpy(&{ws}.state[{sens}], &{var}.u[index * {nu}], {nu} * sizeof({sink.real_type}));",
            f"    {integrate}( {ws}.state, index == 0 );",
            f"    memcpy(&{var}.x[(index + 1) * {nx}], {ws}.state, {nx} * sizeof({sink.real_type}));",
            "}",
        ]

        initialize = ["int ret = 0;", "", f"memset(&{ws}, 0, sizeof( {ws} ));", "return ret;"]

        bodies = {
            "initializeSolver": initialize,
            "preparationStep": preparation,
            "feedbackStep": self._feedback_lines(),
            "getKKT": kkt_terms,
            "getObjective": objective_value,
            "shiftStates": shift_states,
            "shiftControls": shift_controls,
            "initializeNodesByForwardSimulation": forward_simulation,
            "modelSimulation": simulation,
            "evaluateObjective": objective,
        }
        return self._define(self._public_functions(), bodies)

    def get_code(self, sink: ExportFile) -> None:
        """Emit the solver source into ``sink``."""
        if not self._is_setup:
            raise InvalidArgumentsError(f"{self.name} must be set up before code export")
        sink.add_line("#include <math.h>")
        sink.add_line("#include <string.h>")
        sink.add_line()
        sink.add_comment(f"{self.name} solver, QP backend {self.qp_solver.value}")
        sink.add_line()
        if self.hardcoded_constraints:
            for name, values in self._constraint_values().items():
                if values.size:
                    sink.add_line(f"static const {sink.real_type} {name}[ {values.size} ] = {sink.format_array(values)};")
            sink.add_line()
        for function in self._define(self._qp_prototypes(), self._qp_bodies(sink)):
            sink.add_function(function)
        for function in self._common_functions(sink):
            sink.add_function(function)
