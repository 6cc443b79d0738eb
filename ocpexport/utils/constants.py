"""
Constants and Enumerations for the OCP Export Tool.

This module consolidates the closed option enumerations, generated-code
naming constants and other fixed values shared across the package,
providing a single source of truth for the export pipeline.
"""

from __future__ import annotations

from enum import Enum, IntEnum


# =============================================================================
# QP Backend and Condensing Options
# =============================================================================

class QPSolverName(Enum):
    """QP backends the generated solver can be linked against."""

    QPOASES = "qpOASES"  # Dense, condensed QPs
    QPDUNES = "qpDUNES"  # Dual Newton strategy, block-sparse QPs
    FORCES = "FORCES"  # Interior point, multistage QPs
    HPMPC = "HPMPC"  # Riccati-based interior point


class SparseQPSolutionMethod(Enum):
    """How the structured QP is prepared before it reaches the backend."""

    FULL_CONDENSING = "full_condensing"
    CONDENSING = "condensing"
    FULL_CONDENSING_N2 = "full_condensing_n2"
    CONDENSING_N2 = "condensing_n2"
    BLOCK_CONDENSING_N2 = "block_condensing_n2"
    FULL_CONDENSING_N2_FACTORIZATION = "full_condensing_n2_factorization"
    SPARSE_SOLVER = "sparse_solver"


class HessianApproximationMode(Enum):
    """Curvature model of the SQP iterations."""

    CONSTANT_HESSIAN = "constant_hessian"
    GAUSS_NEWTON = "gauss_newton"
    FULL_BFGS_UPDATE = "full_bfgs_update"
    BLOCK_BFGS_UPDATE = "block_bfgs_update"
    EXACT_HESSIAN = "exact_hessian"


class StateDiscretizationType(Enum):
    """Discretization of the dynamics over the horizon."""

    SINGLE_SHOOTING = "single_shooting"
    MULTIPLE_SHOOTING = "multiple_shooting"
    COLLOCATION = "collocation"


class IntegratorType(Enum):
    """Integration schemes available for export."""

    EX_EULER = "ex_euler"
    RK2 = "rk2"
    RK3 = "rk3"
    RK4 = "rk4"
    IRK_GL2 = "irk_gl2"
    IRK_GL4 = "irk_gl4"
    IRK_GL6 = "irk_gl6"
    IRK_GL8 = "irk_gl8"
    IRK_RIIA1 = "irk_riia1"
    IRK_RIIA3 = "irk_riia3"
    IRK_RIIA5 = "irk_riia5"


class LinearAlgebraSolver(Enum):
    """Linear solver used inside implicit integrators."""

    GAUSS_LU = "gauss_lu"
    HOUSEHOLDER_QR = "householder_qr"
    SIMPLIFIED_IRK_NEWTON = "simplified_irk_newton"


# =============================================================================
# Solver Generation Strategies
# =============================================================================

class SolverStrategy(Enum):
    """Concrete NLP solver generators selected by the resolver."""

    GAUSS_NEWTON_CONDENSED = "gauss_newton_condensed"
    GAUSS_NEWTON_CN2 = "gauss_newton_cn2"
    EXACT_HESSIAN_CN2 = "exact_hessian_cn2"
    GAUSS_NEWTON_CN2_FACTORIZATION = "gauss_newton_cn2_factorization"
    GAUSS_NEWTON_BLOCK_QPDUNES = "gauss_newton_block_qpdunes"
    GAUSS_NEWTON_BLOCK_FORCES = "gauss_newton_block_forces"
    GAUSS_NEWTON_FORCES = "gauss_newton_forces"
    GAUSS_NEWTON_QPDUNES = "gauss_newton_qpdunes"
    EXACT_HESSIAN_QPDUNES = "exact_hessian_qpdunes"
    GAUSS_NEWTON_HPMPC = "gauss_newton_hpmpc"


class WeightingMatricesType(IntEnum):
    """Indicator written to the common header for the objective weights."""

    EMPTY = 0
    CONSTANT = 1
    VARYING = 2


# =============================================================================
# Generated Code Layout
# =============================================================================

class ExportStruct(Enum):
    """Visibility class of a generated data declaration."""

    VARIABLES = "variables"  # Externally addressable solver state
    WORKSPACE = "workspace"  # Internal scratch memory


class ExportStatus(Enum):
    """Status of an export session."""

    NOT_INITIALIZED = "not_initialized"
    READY = "ready"


VARIABLES_STRUCT_NAME = "ACADOvariables"
WORKSPACE_STRUCT_NAME = "ACADOworkspace"
VARIABLES_INSTANCE_NAME = "acadoVariables"
WORKSPACE_INSTANCE_NAME = "acadoWorkspace"

HEADER_CONSTANT_PREFIX = "ACADO_"

DEFAULT_MODULE_NAME = "acado"
DEFAULT_REAL_TYPE = "real_t"
DEFAULT_INT_TYPE = "int"
DEFAULT_PRECISION = 16

# Fixed floor of the eigenvalue regularization in exact-Hessian solvers
HESSIAN_REGULARIZATION_FLOOR = 1e-12


def parse_enum(enum_cls, value):
    """
    Convert a user supplied value into a member of ``enum_cls``.

    Accepts members, member names (case-insensitive) and member values.

    Raises:
        ValueError: If the value does not name a member
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip()
        for member in enum_cls:
            if member.name == key.upper() or str(member.value).lower() == key.lower():
                return member
    else:
        for member in enum_cls:
            if member.value == value:
                return member
    raise ValueError(f"{value!r} is not a valid {enum_cls.__name__}")
