"""
Export Orchestration.

``OCPExport`` drives one export session: it resolves the integrator and
solver strategies, then writes the common header, the integrator and
solver sources, the auxiliary functions and the optional build, test,
MATLAB and Simulink artifacts into the export folder.

Artifacts that a configuration cannot support are skipped with a
warning. Anything else that goes wrong aborts the export with a
``CodeExportError``; files written before the failure stay in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from ..codegen.declarations import DeclarationBlock
from ..codegen.export_file import ExportFile
from ..codegen.generators import (
    AuxiliaryFunctionsGenerator,
    CommonHeaderGenerator,
    HessianRegularizationGenerator,
    SimulinkInterfaceGenerator,
)
from ..codegen.template_emitter import TemplateEmitter, TemplateKey
from ..ocp.problem import OCP
from ..options.store import ConfigurationStore, OptionKey
from ..utils.constants import (
    DEFAULT_INT_TYPE,
    DEFAULT_PRECISION,
    DEFAULT_REAL_TYPE,
    HESSIAN_REGULARIZATION_FLOOR,
    ExportStatus,
    ExportStruct,
    HessianApproximationMode,
    QPSolverName,
    SolverStrategy,
)
from ..utils.exceptions import CodeExportError, NotImplementedYetError, OCPExportError
from ..utils.logging import ExportLogger
from .plan import ResolvedPlan
from .resolver import ComponentResolver


class GenerationMethod(Enum):
    """How an artifact is produced."""

    COLLABORATOR = "collaborator"  # Integrator or solver writes into a sink
    TEMPLATE_COPY = "template_copy"  # Static template copied by the emitter
    HEADER = "header"  # Common header
    GENERATED = "generated"  # Jinja2 generator


def _flag(key: OptionKey) -> Callable[[ConfigurationStore], bool]:
    return lambda options: bool(options.get(key))


def _always(options: ConfigurationStore) -> bool:
    return True


def _exact_hessian(options: ConfigurationStore) -> bool:
    return options.get(OptionKey.HESSIAN_APPROXIMATION) == HessianApproximationMode.EXACT_HESSIAN


@dataclass(frozen=True)
class ExportArtifact:
    """A file the orchestrator may produce, and the export step writing it."""
    name: str
    method: GenerationMethod
    step: str
    gate: Callable[[ConfigurationStore], bool] = _always

    def file_name(self, module_name: str) -> str:
        return self.name.format(module=module_name)

    def enabled(self, options: ConfigurationStore) -> bool:
        return self.gate(options)


ARTIFACTS = (
    ExportArtifact("{module}_common.h", GenerationMethod.HEADER, "common_header"),
    ExportArtifact("{module}_integrator.c", GenerationMethod.COLLABORATOR, "integrator"),
    ExportArtifact("{module}_solver.c", GenerationMethod.COLLABORATOR, "solver"),
    ExportArtifact("{module}_auxiliary_functions.h", GenerationMethod.GENERATED, "auxiliary_functions"),
    ExportArtifact("{module}_auxiliary_functions.c", GenerationMethod.GENERATED, "auxiliary_functions"),
    ExportArtifact("Makefile", GenerationMethod.TEMPLATE_COPY, "makefile", _flag(OptionKey.GENERATE_MAKE_FILE)),
    ExportArtifact("test.c", GenerationMethod.TEMPLATE_COPY, "test_file", _flag(OptionKey.GENERATE_TEST_FILE)),
    ExportArtifact(
        "{module}_solver_mex.c", GenerationMethod.TEMPLATE_COPY, "matlab_interface",
        _flag(OptionKey.GENERATE_MATLAB_INTERFACE),
    ),
    ExportArtifact(
        "make_{module}_solver.m", GenerationMethod.TEMPLATE_COPY, "matlab_interface",
        _flag(OptionKey.GENERATE_MATLAB_INTERFACE),
    ),
    ExportArtifact(
        "{module}_solver_sfunction.h", GenerationMethod.GENERATED, "simulink_interface",
        _flag(OptionKey.GENERATE_SIMULINK_INTERFACE),
    ),
    ExportArtifact(
        "{module}_solver_sfunction.c", GenerationMethod.GENERATED, "simulink_interface",
        _flag(OptionKey.GENERATE_SIMULINK_INTERFACE),
    ),
    ExportArtifact(
        "make_{module}_solver_sfunction.m", GenerationMethod.GENERATED, "simulink_interface",
        _flag(OptionKey.GENERATE_SIMULINK_INTERFACE),
    ),
    ExportArtifact(
        "{module}_hessian_regularization.c", GenerationMethod.GENERATED, "hessian_regularization", _exact_hessian
    ),
)


# Build recipes keyed by (backend, exact Hessian)
_MAKEFILES = {
    (QPSolverName.QPOASES, False): TemplateKey.MAKEFILE_QPOASES,
    (QPSolverName.QPOASES, True): TemplateKey.MAKEFILE_EH_QPOASES,
    (QPSolverName.FORCES, False): TemplateKey.MAKEFILE_FORCES,
    (QPSolverName.QPDUNES, False): TemplateKey.MAKEFILE_QPDUNES,
    (QPSolverName.QPDUNES, True): TemplateKey.MAKEFILE_EH_QPDUNES,
    (QPSolverName.HPMPC, False): TemplateKey.MAKEFILE_HPMPC,
}

_SIMULINK_BACKENDS = (QPSolverName.QPOASES, QPSolverName.QPDUNES)


class OCPExport:
    """
    Export session of one optimal control problem.

    Example:
        >>> options = ConfigurationStore({"QP_SOLVER": "QPOASES"})
        >>> OCPExport(ocp, options).export_code("export")
    """

    def __init__(
        self,
        ocp: OCP,
        options: Optional[ConfigurationStore] = None,
        reporter: Optional[ExportLogger] = None,
    ):
        """
        Initialize the export session.

        Args:
            ocp: Problem to export
            options: Option store; defaults are used when omitted
            reporter: Sink of progress messages and warnings
        """
        self.ocp = ocp
        self.options = options if options is not None else ConfigurationStore()
        self.reporter = reporter or ExportLogger("export")
        self._resolver = ComponentResolver(self.ocp, self.options)

    @property
    def status(self) -> ExportStatus:
        return self._resolver.status

    @property
    def plan(self) -> Optional[ResolvedPlan]:
        return self._resolver.plan

    @property
    def module_name(self) -> str:
        return self.options.get(OptionKey.CG_MODULE_NAME)

    def resolve(self) -> ResolvedPlan:
        """Resolve the session; errors propagate unchanged."""
        was_ready = self.status == ExportStatus.READY
        plan = self._resolver.resolve()
        if not was_ready:
            self.reporter.log_resolution(plan.integrator.name, plan.strategy.name)
        return plan

    def artifacts(self) -> List[ExportArtifact]:
        """Artifacts the current options allow, before backend specific checks."""
        return [artifact for artifact in ARTIFACTS if artifact.enabled(self.options)]

    def _step_enabled(self, step: str) -> bool:
        return any(artifact.enabled(self.options) for artifact in ARTIFACTS if artifact.step == step)

    def print_dimensions_qp(self) -> None:
        """Report the QP dimensions of a resolved session."""
        if self.status != ExportStatus.READY:
            return
        solver = self.plan.solver
        self.reporter.log_qp_dimensions(solver.get_num_qp_vars(), solver.get_num_complex_constraints())

    # =========================================================================
    # Export
    # =========================================================================

    def export_code(
        self,
        dir_name: Optional[Union[str, Path]] = None,
        real_type: str = DEFAULT_REAL_TYPE,
        int_type: str = DEFAULT_INT_TYPE,
        precision: int = DEFAULT_PRECISION,
    ) -> List[Path]:
        """
        Export the solver package into ``dir_name``.

        Args:
            dir_name: Output folder; defaults to ``CG_EXPORT_FOLDER_NAME``
            real_type: Name of the generated scalar type
            int_type: Name of the generated integer type
            precision: Digits of printed numeric literals

        Returns:
            Paths of the written files, in writing order

        Raises:
            CodeExportError: If a step fails; the failing step's exception
                is chained
        """
        destination = Path(dir_name if dir_name is not None else self.options.get(OptionKey.CG_EXPORT_FOLDER_NAME))
        written: List[Path] = []
        step = "create_folder"

        try:
            destination.mkdir(parents=True, exist_ok=True)

            step = "resolve"
            plan = self.resolve()
            self.reporter.log_export_start(self.module_name, str(destination))

            step = "common_header"
            written.append(self._export_common_header(plan, destination, real_type, int_type, precision))

            step = "integrator"
            written.append(self._export_collaborator(
                plan.integrator, plan, destination / f"{self.module_name}_integrator.c",
                real_type, int_type, precision,
            ))

            step = "solver"
            written.append(self._export_collaborator(
                plan.solver, plan, destination / f"{self.module_name}_solver.c",
                real_type, int_type, precision,
            ))

            step = "auxiliary_functions"
            written.extend(self._export_auxiliary_functions(destination, real_type))

            if self._step_enabled("makefile"):
                step = "makefile"
                written.extend(self._export_makefile(plan, destination))

            if self._step_enabled("test_file"):
                step = "test_file"
                written.append(self._copy(TemplateKey.DUMMY_TEST_FILE, destination / "test.c", ""))

            if self._step_enabled("matlab_interface"):
                step = "matlab_interface"
                written.extend(self._export_matlab_interface(plan, destination))

            if self._step_enabled("simulink_interface"):
                step = "simulink_interface"
                written.extend(self._export_simulink_interface(plan, destination, real_type))

            if self._step_enabled("hessian_regularization"):
                step = "hessian_regularization"
                written.append(self._export_hessian_regularization(plan, destination, real_type, precision))

        except (OCPExportError, OSError) as e:
            self.reporter.logger.error(f"Export failed at step '{step}': {e}")
            raise CodeExportError(f"Code export failed at step '{step}': {e}", cause=e, step=step) from e

        for path in written:
            self.reporter.log_artifact(str(path))
        return written

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _export_common_header(
        self, plan: ResolvedPlan, destination: Path, real_type: str, int_type: str, precision: int
    ) -> Path:
        integrator, solver = plan.integrator, plan.solver

        blocks = {}
        for struct in (ExportStruct.VARIABLES, ExportStruct.WORKSPACE):
            block = DeclarationBlock()
            block.extend(integrator.get_data_declarations(struct))
            block.extend(solver.get_data_declarations(struct))
            blocks[struct] = block.render(real_type, int_type)

        functions = DeclarationBlock()
        functions.extend(integrator.get_function_declarations())
        functions.extend(solver.get_function_declarations())

        generator = CommonHeaderGenerator(destination / plan.common_header_name)
        generator.configure(
            module_name=self.module_name,
            use_single_precision=self.options.get(OptionKey.USE_SINGLE_PRECISION),
            use_complex_arithmetic=integrator.uses_complex_arithmetic,
            qp_solver=solver.qp_solver,
            constants=plan.header_constants,
            variables=blocks[ExportStruct.VARIABLES],
            workspace=blocks[ExportStruct.WORKSPACE],
            functions=functions.render(real_type, int_type),
            real_type=real_type,
            precision=precision,
        )
        return generator.export_code()

    @staticmethod
    def _export_collaborator(
        collaborator, plan: ResolvedPlan, path: Path, real_type: str, int_type: str, precision: int
    ) -> Path:
        sink = ExportFile(path, plan.common_header_name, real_type, int_type, precision)
        collaborator.get_code(sink)
        sink.export_code()
        return path

    def _export_auxiliary_functions(self, destination: Path, real_type: str) -> List[Path]:
        generator = AuxiliaryFunctionsGenerator(
            destination / f"{self.module_name}_auxiliary_functions.h",
            destination / f"{self.module_name}_auxiliary_functions.c",
            self.module_name,
        )
        return generator.configure(real_type).export_code()

    def _copy(self, template_key: TemplateKey, path: Path, comment_token: str) -> Path:
        return TemplateEmitter.copy(
            template_key, path, comment_token, True, {"MODULE_NAME": self.module_name}
        )

    def _export_makefile(self, plan: ResolvedPlan, destination: Path) -> List[Path]:
        qp_solver = plan.solver.qp_solver
        template_key = _MAKEFILES.get((qp_solver, _exact_hessian(self.options)))
        if template_key is None:
            self.reporter.log_artifact_skipped("Makefile", f"no build recipe for {qp_solver.value}")
            return []
        return [self._copy(template_key, destination / "Makefile", "#")]

    def _export_matlab_interface(self, plan: ResolvedPlan, destination: Path) -> List[Path]:
        if not self.options.get(OptionKey.CG_HARDCODE_CONSTRAINT_VALUES):
            raise NotImplementedYetError(
                "MATLAB interface requires hard-coded constraint values",
                {"option": OptionKey.CG_HARDCODE_CONSTRAINT_VALUES.name},
            )

        solver = plan.solver
        module = self.module_name
        exact_hessian = _exact_hessian(self.options)
        written = []

        mex_key = TemplateKey.EH_SOLVER_MEX if exact_hessian else TemplateKey.SOLVER_MEX
        written.append(self._copy(mex_key, destination / f"{module}_solver_mex.c", ""))

        qp_solver = solver.qp_solver
        if qp_solver == QPSolverName.QPOASES:
            make_key = TemplateKey.MAKE_MEX_EH_QPOASES if exact_hessian else TemplateKey.MAKE_MEX_QPOASES
        elif qp_solver == QPSolverName.FORCES:
            make_key = TemplateKey.MAKE_MEX_FORCES
        elif qp_solver == QPSolverName.QPDUNES:
            if exact_hessian:
                make_key = TemplateKey.MAKE_MEX_EH_QPDUNES
            elif plan.strategy == SolverStrategy.GAUSS_NEWTON_BLOCK_QPDUNES:
                make_key = TemplateKey.MAKE_MEX_BLOCK_QPDUNES
            else:
                make_key = TemplateKey.MAKE_MEX_QPDUNES
        else:
            self.reporter.log_artifact_skipped(
                f"make_{module}_solver.m", f"MEX build script is not available for {qp_solver.value}"
            )
            return written

        written.append(self._copy(make_key, destination / f"make_{module}_solver.m", "%"))
        return written

    def _export_simulink_interface(self, plan: ResolvedPlan, destination: Path, real_type: str) -> List[Path]:
        if not self.options.get(OptionKey.CG_HARDCODE_CONSTRAINT_VALUES):
            raise NotImplementedYetError(
                "Simulink interface requires hard-coded constraint values",
                {"option": OptionKey.CG_HARDCODE_CONSTRAINT_VALUES.name},
            )

        solver = plan.solver
        if solver.qp_solver not in _SIMULINK_BACKENDS:
            self.reporter.log_artifact_skipped(
                "Simulink interface", f"only qpOASES and qpDUNES are supported, not {solver.qp_solver.value}"
            )
            return []

        module = self.module_name
        generator = SimulinkInterfaceGenerator(
            destination / f"make_{module}_solver_sfunction.m",
            destination / f"{module}_solver_sfunction.h",
            destination / f"{module}_solver_sfunction.c",
            module,
        )
        generator.configure(
            N=solver.N,
            NX=solver.nx,
            NDX=solver.ndx,
            NXA=solver.nxa,
            NU=solver.nu,
            NOD=solver.nod,
            NY=solver.get_ny(),
            NYN=solver.get_nyn(),
            initial_state_fixed=solver.initial_state_fixed,
            weighting_matrices_type=solver.weighting_matrices_type(),
            hardcoded_constraints=solver.hardcoded_constraints,
            use_arrival_cost=self.options.get(OptionKey.CG_USE_ARRIVAL_COST),
            compute_covariance_matrix=self.options.get(OptionKey.CG_COMPUTE_COVARIANCE_MATRIX),
            qp_solver=solver.qp_solver.name,
            use_single_precision=self.options.get(OptionKey.USE_SINGLE_PRECISION),
            real_type=real_type,
        )
        return generator.export_code()

    def _export_hessian_regularization(
        self, plan: ResolvedPlan, destination: Path, real_type: str, precision: int
    ) -> Path:
        solver = plan.solver
        generator = HessianRegularizationGenerator(
            destination / f"{self.module_name}_hessian_regularization.c", self.module_name
        )
        generator.configure(solver.nx + solver.nu, HESSIAN_REGULARIZATION_FLOOR, real_type, precision)
        return generator.export_code()
