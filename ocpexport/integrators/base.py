"""
Base Classes for Integrator Export.

An integrator export turns a continuous-time model and a fixed
integration grid into the C function ``<module>_integrate``. It
declares the workspace memory it needs and the model functions it
calls; the common header collects both.

Runge-Kutta schemes share the stage loop structure and differ only in
their Butcher tableau and in how stage values are obtained, so the
tableau lives on ``RungeKuttaExport`` as numpy arrays.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from ..codegen.declarations import INT, DataDeclaration, ExportFunction, FunctionArgument, filter_struct
from ..codegen.export_file import ExportFile
from ..ocp.problem import Grid, ModelData
from ..options.store import ConfigurationStore
from ..utils.constants import DEFAULT_MODULE_NAME, ExportStruct, IntegratorType
from ..utils.exceptions import InvalidArgumentsError
from ..utils.logging import get_logger

logger = get_logger(__name__)


class IntegratorExport(ABC):
    """
    Base class for exported integrators.

    Subclasses implement ``setup`` (called once the model is bound),
    ``num_stages`` and ``_build_integrate``.
    """

    integrator_type: Optional[IntegratorType] = None

    def __init__(self, module_name: str = DEFAULT_MODULE_NAME, options: Optional[ConfigurationStore] = None):
        """
        Initialize the integrator export.

        Args:
            module_name: Prefix of generated symbols
            options: Option store of the session
        """
        self.module_name = module_name
        self.options = options if options is not None else ConfigurationStore()
        self.model: Optional[ModelData] = None
        self.grid: Optional[Grid] = None

    @property
    def name(self) -> str:
        return self.integrator_type.name if self.integrator_type else self.__class__.__name__

    def set_model_data(self, model: ModelData, grid: Grid) -> None:
        """
        Bind the model and the integration grid of one shooting interval.

        Raises:
            InvalidArgumentsError: If the scheme cannot integrate the model
        """
        self._check_model(model)
        self.model = model
        self.grid = grid
        self.setup()
        logger.debug(
            f"{self.name} bound to model nx={model.nx} nxa={model.nxa} nu={model.nu}, "
            f"{grid.num_intervals} steps of {grid.step:g}"
        )

    def _check_model(self, model: ModelData) -> None:
        """Reject models the scheme cannot handle."""
        pass

    @abstractmethod
    def setup(self) -> None:
        """Derive internal dimensions from the bound model."""
        pass

    @property
    @abstractmethod
    def num_stages(self) -> int:
        """Number of stages of the integration scheme."""
        pass

    @property
    def is_bound(self) -> bool:
        return self.model is not None

    def _require_model(self) -> ModelData:
        if self.model is None:
            raise InvalidArgumentsError(f"{self.name} has no model data", {"integrator": self.name})
        return self.model

    # -------------------------------------------------------------------------
    # Dimensions
    # -------------------------------------------------------------------------

    @property
    def num_steps(self) -> int:
        return self.grid.num_intervals if self.grid is not None else 0

    @property
    def num_integrated(self) -> int:
        """Length of the integrated vector: states plus forward sensitivities."""
        model = self._require_model()
        nz = model.nx + model.nxa
        return nz * (1 + model.nx + model.nu)

    @property
    def state_size(self) -> int:
        """Length of the ``rk_eta`` argument of the integrate function."""
        model = self._require_model()
        return self.num_integrated + model.nu + model.nod

    @property
    def uses_complex_arithmetic(self) -> bool:
        return False

    # -------------------------------------------------------------------------
    # Declarations
    # -------------------------------------------------------------------------

    @property
    def integrate_function_name(self) -> str:
        return f"{self.module_name}_integrate"

    def integrate_prototype(self) -> ExportFunction:
        return ExportFunction(
            self.integrate_function_name,
            (FunctionArgument("rk_eta"), FunctionArgument("resetIntegrator", INT, is_array=False)),
            return_type=INT,
            description="Integrate the model over one shooting interval.",
        )

    def model_functions(self) -> List[ExportFunction]:
        """Model evaluation functions provided next to the generated code."""
        model = self._require_model()
        rhs = f"{self.module_name}_{model.rhs_name}_forw"
        return [
            ExportFunction(
                rhs,
                (FunctionArgument("in", is_const=True), FunctionArgument("out")),
                description="Right-hand side with forward sensitivities.",
            )
        ]

    @abstractmethod
    def _data_declarations(self) -> List[DataDeclaration]:
        pass

    def get_data_declarations(self, struct: Optional[ExportStruct] = None) -> List[DataDeclaration]:
        """Memory of the integrator, optionally restricted to one struct."""
        self._require_model()
        return filter_struct(self._data_declarations(), struct)

    def get_function_declarations(self) -> List[ExportFunction]:
        """Prototypes of the integrate function and the model functions it calls."""
        self._require_model()
        return [self.integrate_prototype()] + self.model_functions()

    # -------------------------------------------------------------------------
    # Code
    # -------------------------------------------------------------------------

    @abstractmethod
    def _build_integrate(self, sink: ExportFile) -> ExportFunction:
        pass

    def _auxiliary_code(self, sink: ExportFile) -> None:
        """Emit helpers that precede the integrate function."""
        pass

    def get_code(self, sink: ExportFile) -> None:
        """Emit the integrator source into ``sink``."""
        self._require_model()
        sink.add_comment(f"{self.name} integrator, {self.num_stages} stage(s), {self.num_steps} step(s)")
        sink.add_line()
        self._auxiliary_code(sink)
        sink.add_function(self._build_integrate(sink))


class RungeKuttaExport(IntegratorExport):
    """Integrator defined by a Butcher tableau ``(A, b, c)``."""

    def __init__(self, module_name: str = DEFAULT_MODULE_NAME, options: Optional[ConfigurationStore] = None):
        super().__init__(module_name, options)
        A, b, c = self.butcher_tableau()
        self.A = np.atleast_2d(np.asarray(A, dtype=float))
        self.b = np.asarray(b, dtype=float)
        self.c = np.asarray(c, dtype=float)
        if self.A.shape != (len(self.b), len(self.b)) or len(self.c) != len(self.b):
            raise ValueError(f"Inconsistent Butcher tableau for {self.__class__.__name__}")

    @abstractmethod
    def butcher_tableau(self):
        """Return ``(A, b, c)`` of the scheme."""
        pass

    @property
    def num_stages(self) -> int:
        return len(self.b)

    def _check_model(self, model: ModelData) -> None:
        if model.discretized:
            raise InvalidArgumentsError(
                f"{self.name} needs a continuous-time model", {"integrator": self.name}
            )

    def setup(self) -> None:
        self._require_model()

    def _tableau_code(self, sink: ExportFile) -> None:
        sink.add_line(f"static const {sink.real_type} rk_tableau_A[ {self.A.size} ] = {sink.format_array(self.A)};")
        sink.add_line(f"static const {sink.real_type} rk_tableau_b[ {self.b.size} ] = {sink.format_array(self.b)};")
        sink.add_line(f"static const {sink.real_type} rk_tableau_c[ {self.c.size} ] = {sink.format_array(self.c)};")
        sink.add_line()
