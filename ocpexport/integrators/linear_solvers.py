"""
Linear System Solvers for Implicit Integrators.

Implicit Runge-Kutta schemes solve one dense linear system per Newton
iteration. Each exporter here emits a factorizing solve function and a
second function that reuses the factorization for further right-hand
sides (sensitivities and later Newton iterations).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Type

from ..codegen.declarations import INT, REAL, DataDeclaration, ExportFunction, FunctionArgument
from ..utils.constants import WORKSPACE_INSTANCE_NAME, ExportStruct, LinearAlgebraSolver
from ..utils.exceptions import InvalidOptionError


class LinearSolverExport(ABC):
    """Dense linear solver of fixed dimension."""

    solver_type: LinearAlgebraSolver
    scalar = REAL
    abs_function = "fabs"

    def __init__(self, module_name: str, dim: int):
        self.module_name = module_name
        self.dim = dim

    @property
    def solve_name(self) -> str:
        return f"{self.module_name}_solve_dim{self.dim}_system"

    @property
    def reuse_name(self) -> str:
        return f"{self.module_name}_solve_dim{self.dim}_system_reuse"

    @property
    def uses_complex_arithmetic(self) -> bool:
        return False

    @abstractmethod
    def get_data_declarations(self) -> List[DataDeclaration]:
        pass

    @abstractmethod
    def get_functions(self, real_type: str) -> List[ExportFunction]:
        pass

    @abstractmethod
    def solve_lines(self, matrix: str, rhs: str, reuse: bool) -> List[str]:
        """C statements solving ``matrix * x = rhs`` in place of ``rhs``."""
        pass


class GaussianEliminationExport(LinearSolverExport):
    """LU factorization with partial pivoting."""

    solver_type = LinearAlgebraSolver.GAUSS_LU

    def get_data_declarations(self) -> List[DataDeclaration]:
        return [
            DataDeclaration("rk_perm", self.dim, kind=INT, struct=ExportStruct.WORKSPACE),
            DataDeclaration("rk_bPerm", self.dim, kind=self.scalar, struct=ExportStruct.WORKSPACE),
        ]

    def get_functions(self, real_type: str) -> List[ExportFunction]:
        n = self.dim
        s = self.scalar
        work_type = real_type if s == REAL else s
        absf = self.abs_function
        solve = ExportFunction(
            self.solve_name,
            (
                FunctionArgument("A", s),
                FunctionArgument("b", s),
                FunctionArgument("rk_perm", INT),
                FunctionArgument("rk_bPerm", s),
            ),
            return_type=REAL,
            body=(
                f"{real_type} det = 1.0;" if s == REAL else "double det = 1.0;",
                "int i, j, k, p;",
                "double valueMax, value;",
                f"{work_type} swap;",
                "",
                f"for (i = 0; i < {n}; ++i)",
                "    rk_perm[i] = i;",
                f"for (k = 0; k < {n} - 1; ++k)",
                "{",
                "    p = k;",
                f"    valueMax = {absf}(A[k * {n} + k]);",
                f"    for (i = k + 1; i < {n}; ++i)",
                "    {",
                f"        value = {absf}(A[i * {n} + k]);",
                "        if (value > valueMax)",
                "        {",
                "            p = i;",
                "            valueMax = value;",
                "        }",
                "    }",
                "    if (p != k)",
                "    {",
                f"        for (j = 0; j < {n}; ++j)",
                "        {",
                f"            swap = A[k * {n} + j];",
                f"            A[k * {n} + j] = A[p * {n} + j];",
                f"            A[p * {n} + j] = swap;",
                "        }",
                "        i = rk_perm[k];",
                "        rk_perm[k] = rk_perm[p];",
                "        rk_perm[p] = i;",
                "    }",
                f"    for (i = k + 1; i < {n}; ++i)",
                "    {",
                f"        A[i * {n} + k] /= A[k * {n} + k];",
                f"        for (j = k + 1; j < {n}; ++j)",
                f"            A[i * {n} + j] -= A[i * {n} + k] * A[k * {n} + j];",
                "    }",
                "}",
                f"for (k = 0; k < {n}; ++k)",
                f"    det *= {absf}(A[k * {n} + k]);",
                f"{self.reuse_name}( A, b, rk_perm, rk_bPerm );",
                "return det;",
            ),
        )
        reuse = ExportFunction(
            self.reuse_name,
            (
                FunctionArgument("A", s, is_const=True),
                FunctionArgument("b", s),
                FunctionArgument("rk_perm", INT, is_const=True),
                FunctionArgument("rk_bPerm", s),
            ),
            body=(
                "int i, j;",
                "",
                f"for (i = 0; i < {n}; ++i)",
                "    rk_bPerm[i] = b[rk_perm[i]];",
                f"for (i = 1; i < {n}; ++i)",
                "    for (j = 0; j < i; ++j)",
                f"        rk_bPerm[i] -= A[i * {n} + j] * rk_bPerm[j];",
                f"for (i = {n} - 1; i >= 0; --i)",
                "{",
                f"    for (j = i + 1; j < {n}; ++j)",
                f"        rk_bPerm[i] -= A[i * {n} + j] * rk_bPerm[j];",
                f"    rk_bPerm[i] /= A[i * {n} + i];",
                "    b[i] = rk_bPerm[i];",
                "}",
            ),
        )
        return [solve, reuse]

    def solve_lines(self, matrix: str, rhs: str, reuse: bool) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        name = self.reuse_name if reuse else self.solve_name
        return [f"{name}( {matrix}, {rhs}, {ws}.rk_perm, {ws}.rk_bPerm );"]


class HouseholderQRExport(LinearSolverExport):
    """QR factorization with Householder reflections."""

    solver_type = LinearAlgebraSolver.HOUSEHOLDER_QR

    def get_data_declarations(self) -> List[DataDeclaration]:
        return [DataDeclaration("rk_auxQR", self.dim, struct=ExportStruct.WORKSPACE)]

    def get_functions(self, real_type: str) -> List[ExportFunction]:
        n = self.dim
        solve = ExportFunction(
            self.solve_name,
            (FunctionArgument("A"), FunctionArgument("b"), FunctionArgument("rk_auxQR")),
            return_type=REAL,
            body=(
                f"{real_type} det = 1.0;",
                f"{real_type} norm, alpha, dot;",
                "int i, j, k;",
                "",
                f"for (k = 0; k < {n}; ++k)",
                "{",
                "    norm = 0.0;",
                f"    for (i = k; i < {n}; ++i)",
                f"        norm += A[i * {n} + k] * A[i * {n} + k];",
                "    norm = sqrt(norm);",
                f"    alpha = (A[k * {n} + k] > 0) ? -norm : norm;",
                f"    A[k * {n} + k] -= alpha;",
                "    rk_auxQR[k] = alpha;",
                "    det *= alpha;",
                "    norm = 0.0;",
                f"    for (i = k; i < {n}; ++i)",
                f"        norm += A[i * {n} + k] * A[i * {n} + k];",
                "    if (norm > 0.0)",
                "    {",
                "        norm = sqrt(norm);",
                f"        for (i = k; i < {n}; ++i)",
                f"            A[i * {n} + k] /= norm;",
                "    }",
                f"    for (j = k + 1; j < {n}; ++j)",
                "    {",
                "        dot = 0.0;",
                f"        for (i = k; i < {n}; ++i)",
                f"            dot += A[i * {n} + k] * A[i * {n} + j];",
                f"        for (i = k; i < {n}; ++i)",
                f"            A[i * {n} + j] -= 2.0 * dot * A[i * {n} + k];",
                "    }",
                "}",
                f"{self.reuse_name}( A, b, rk_auxQR );",
                "return fabs(det);",
            ),
        )
        reuse = ExportFunction(
            self.reuse_name,
            (
                FunctionArgument("A", is_const=True),
                FunctionArgument("b"),
                FunctionArgument("rk_auxQR", is_const=True),
            ),
            body=(
                f"{real_type} dot;",
                "int i, k;",
                "",
                f"for (k = 0; k < {n}; ++k)",
                "{",
                "    dot = 0.0;",
                f"    for (i = k; i < {n}; ++i)",
                f"        dot += A[i * {n} + k] * b[i];",
                f"    for (i = k; i < {n}; ++i)",
                f"        b[i] -= 2.0 * dot * A[i * {n} + k];",
                "}",
                f"for (i = {n} - 1; i >= 0; --i)",
                "{",
                f"    for (k = i + 1; k < {n}; ++k)",
                f"        b[i] -= A[i * {n} + k] * b[k];",
                "    b[i] /= rk_auxQR[i];",
                "}",
            ),
        )
        return [solve, reuse]

    def solve_lines(self, matrix: str, rhs: str, reuse: bool) -> List[str]:
        name = self.reuse_name if reuse else self.solve_name
        return [f"{name}( {matrix}, {rhs}, {WORKSPACE_INSTANCE_NAME}.rk_auxQR );"]


class ComplexGaussianEliminationExport(GaussianEliminationExport):
    """
    LU factorization in complex arithmetic.

    The simplified Newton iteration of collocation methods decouples the
    stage system into complex blocks; the system is copied into complex
    workspace, solved and copied back.
    """

    solver_type = LinearAlgebraSolver.SIMPLIFIED_IRK_NEWTON
    scalar = "double complex"
    abs_function = "cabs"

    @property
    def solve_name(self) -> str:
        return f"{self.module_name}_solve_complex_dim{self.dim}_system"

    @property
    def reuse_name(self) -> str:
        return f"{self.module_name}_solve_complex_dim{self.dim}_system_reuse"

    @property
    def uses_complex_arithmetic(self) -> bool:
        return True

    def get_data_declarations(self) -> List[DataDeclaration]:
        return super().get_data_declarations() + [
            DataDeclaration("rk_Ac", self.dim, self.dim, kind=self.scalar, struct=ExportStruct.WORKSPACE),
            DataDeclaration("rk_bc", self.dim, kind=self.scalar, struct=ExportStruct.WORKSPACE),
        ]

    def solve_lines(self, matrix: str, rhs: str, reuse: bool) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        n = self.dim
        lines = []
        if not reuse:
            lines += [
                f"for (i = 0; i < {n * n}; ++i)",
                f"    {ws}.rk_Ac[i] = {matrix}[i];",
            ]
        lines += [
            f"for (i = 0; i < {n}; ++i)",
            f"    {ws}.rk_bc[i] = {rhs}[i];",
        ]
        lines += super().solve_lines(f"{ws}.rk_Ac", f"{ws}.rk_bc", reuse)
        lines += [
            f"for (i = 0; i < {n}; ++i)",
            f"    {rhs}[i] = creal({ws}.rk_bc[i]);",
        ]
        return lines


_LINEAR_SOLVERS: Dict[LinearAlgebraSolver, Type[LinearSolverExport]] = {
    LinearAlgebraSolver.GAUSS_LU: GaussianEliminationExport,
    LinearAlgebraSolver.HOUSEHOLDER_QR: HouseholderQRExport,
    LinearAlgebraSolver.SIMPLIFIED_IRK_NEWTON: ComplexGaussianEliminationExport,
}


def create_linear_solver(solver_type: LinearAlgebraSolver, module_name: str, dim: int) -> LinearSolverExport:
    """
    Instantiate the exporter of a linear solver.

    Raises:
        InvalidOptionError: If no exporter is registered for ``solver_type``
    """
    try:
        cls = _LINEAR_SOLVERS[solver_type]
    except KeyError:
        raise InvalidOptionError(
            "Unknown linear algebra solver", option="LINEAR_ALGEBRA_SOLVER", value=solver_type
        ) from None
    return cls(module_name, dim)
