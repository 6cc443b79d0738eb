"""
Block Condensing Solvers.

The horizon is split into blocks of ``CONDENSING_BLOCK_SIZE`` intervals.
Inside each block the states are condensed away, the block start states
stay QP variables. The result is a shorter multistage QP handed to
qpDUNES or FORCES.
"""

from __future__ import annotations

from typing import Dict, List

from ..codegen.declarations import DataDeclaration, ExportFunction
from ..codegen.export_file import ExportFile
from ..options.store import OptionKey
from ..utils.constants import VARIABLES_INSTANCE_NAME, WORKSPACE_INSTANCE_NAME, QPSolverName, SolverStrategy
from ..utils.exceptions import InvalidOptionError
from .base import WORKSPACE, BlockCondensing, NLPSolverExport


class GaussNewtonBlockCN2Export(NLPSolverExport, BlockCondensing):
    """Gauss-Newton real-time iteration with N^2 block condensing."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.block_size = 0

    def _setup(self) -> None:
        size = int(self.options.get(OptionKey.CONDENSING_BLOCK_SIZE)) or self.N
        if self.N % size != 0:
            raise InvalidOptionError(
                f"Block size must divide the horizon length {self.N}",
                option=OptionKey.CONDENSING_BLOCK_SIZE.name,
                value=size,
            )
        self.block_size = size

    def get_number_of_blocks(self) -> int:
        return self.N // self.block_size if self.block_size else 0

    def get_num_state_bounds_per_block(self) -> int:
        return self.num_bounded_states() * self.block_size

    @property
    def block_dim(self) -> int:
        """QP variables of one block: its start state and its control moves."""
        return self.nx + self.block_size * self.nu

    def get_num_qp_vars(self) -> int:
        return self.get_number_of_blocks() * self.block_dim + self.nx

    def get_num_affine_constraints(self) -> int:
        return self.get_num_state_bounds_per_block() * self.get_number_of_blocks()

    def _qp_data_declarations(self) -> List[DataDeclaration]:
        nx, nu = self.nx, self.nu
        nb = self.get_number_of_blocks()
        bs = self.block_size
        nd = self.block_dim
        nv = self.get_num_qp_vars()
        nca = self.get_num_affine_constraints()
        return [
            DataDeclaration("C", self.N * nx, nx, struct=WORKSPACE),
            DataDeclaration("E", nb * bs * (bs + 1) // 2 * nx, nu, struct=WORKSPACE),
            DataDeclaration("qpH", nb * nd * nd + nx * nx, struct=WORKSPACE),
            DataDeclaration("qpg", nv, struct=WORKSPACE),
            DataDeclaration("qpLb", nv, struct=WORKSPACE),
            DataDeclaration("qpUb", nv, struct=WORKSPACE),
            DataDeclaration("qpC", nb * nx, nd, struct=WORKSPACE),
            DataDeclaration("qpc", nb * nx, struct=WORKSPACE),
            DataDeclaration("qpA", nca, nd, struct=WORKSPACE),
            DataDeclaration("qpLbA", nca, struct=WORKSPACE),
            DataDeclaration("qpUbA", nca, struct=WORKSPACE),
            DataDeclaration("qpPrimal", nv, struct=WORKSPACE),
            DataDeclaration("qpLambda", nb * nx, struct=WORKSPACE),
        ]

    def _qp_prototypes(self) -> List[ExportFunction]:
        return [
            ExportFunction(self.fn("condensePrep")),
            ExportFunction(self.fn("condenseFdb")),
            ExportFunction(self.fn("expand")),
        ]

    def _condense_lines(self, sink: ExportFile) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        nx, nu = self.nx, self.nu
        bs = self.block_size
        nd = self.block_dim
        tri = bs * (bs + 1) // 2
        lines = [
            f"for (lRun1 = 0; lRun1 < {self.get_number_of_blocks()}; ++lRun1)",
            "{",
            f"    for (lRun2 = 0; lRun2 < {bs}; ++lRun2)",
            "    {",
            "        node = lRun1 * %d + lRun2;" % bs,
            f"        for (row = 0; row < {nx}; ++row)",
            f"            for (col = 0; col < {nx}; ++col)",
            "            {",
            f"                {ws}.C[node * {nx * nx} + row * {nx} + col] = 0.0;",
            "                if (lRun2 == 0)",
            f"                    {ws}.C[node * {nx * nx} + row * {nx} + col] = {ws}.evGx[node * {nx * nx} + row * {nx} + col];",
            "                else",
            f"                    for (lRun3 = 0; lRun3 < {nx}; ++lRun3)",
            f"                        {ws}.C[node * {nx * nx} + row * {nx} + col] += "
            f"{ws}.evGx[node * {nx * nx} + row * {nx} + lRun3] * {ws}.C[(node - 1) * {nx * nx} + lRun3 * {nx} + col];",
            "            }",
            f"        for (lRun3 = 0; lRun3 < {nx * nu}; ++lRun3)",
            f"            {ws}.E[(lRun1 * {tri} + lRun2 * (lRun2 + 1) / 2 + lRun2) * {nx * nu} + lRun3] = "
            f"{ws}.evGu[node * {nx * nu} + lRun3];",
            "    }",
            f"    for (row = 0; row < {nx}; ++row)",
            "    {",
            f"        for (col = 0; col < {nx}; ++col)",
            f"            {ws}.qpC[lRun1 * {nx * nd} + row * {nd} + col] = "
            f"{ws}.C[(lRun1 * {bs} + {bs - 1}) * {nx * nx} + row * {nx} + col];",
            f"        for (col = 0; col < {bs * nu}; ++col)",
            f"            {ws}.qpC[lRun1 * {nx * nd} + row * {nd} + {nx} + col] = "
            f"{ws}.E[(lRun1 * {tri} + {tri - bs} + col / {max(nu, 1)}) * {nx * nu} + row * {nu} + col % {max(nu, 1)}];",
            f"        {ws}.qpc[lRun1 * {nx} + row] = {ws}.d[(lRun1 * {bs} + {bs - 1}) * {nx} + row];",
            "    }",
        ]
        if self.levenberg_marquardt > 0:
            lines += [
                f"    for (row = 0; row < {nd}; ++row)",
                f"        {ws}.qpH[lRun1 * {nd * nd} + row * {nd + 1}] += {sink.format_real(self.levenberg_marquardt)};",
            ]
        lines.append("}")
        return lines

    def _feedback_bound_lines(self) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        var = VARIABLES_INSTANCE_NAME
        nx, nu = self.nx, self.nu
        bs = self.block_size
        nd = self.block_dim
        lines = [
            f"for (lRun1 = 0; lRun1 < {self.get_num_qp_vars()}; ++lRun1)",
            "{",
            f"    {ws}.qpg[lRun1] = 0.0;",
            f"    {ws}.qpLb[lRun1] = -1e12;",
            f"    {ws}.qpUb[lRun1] = 1e12;",
            "}",
        ]
        if nu:
            lines += [
                f"for (lRun1 = 0; lRun1 < {self.N}; ++lRun1)",
                f"    for (row = 0; row < {nu}; ++row)",
                "    {",
                f"        col = (lRun1 / {bs}) * {nd} + {nx} + (lRun1 % {bs}) * {nu} + row;",
                f"        {ws}.qpLb[col] = {self._bound_source('lbValues')}[lRun1 * {nu} + row] - {var}.u[lRun1 * {nu} + row];",
                f"        {ws}.qpUb[col] = {self._bound_source('ubValues')}[lRun1 * {nu} + row] - {var}.u[lRun1 * {nu} + row];",
                "    }",
            ]
        nsb = self.num_bounded_states()
        if nsb:
            idx = ", ".join(str(i) for i in self.bounded_state_indices())
            lines += [
                "{",
                f"    static const int xBoundIndices[ {nsb} ] = {{ {idx} }};",
                f"    for (lRun1 = 0; lRun1 < {self.N}; ++lRun1)",
                f"        for (row = 0; row < {nsb}; ++row)",
                "        {",
                f"            col = lRun1 * {nsb} + row;",
                f"            {ws}.qpLbA[col] = {self._bound_source('lbXValues')}[col] "
                f"- {var}.x[(lRun1 + 1) * {nx} + xBoundIndices[row]];",
                f"            {ws}.qpUbA[col] = {self._bound_source('ubXValues')}[col] "
                f"- {var}.x[(lRun1 + 1) * {nx} + xBoundIndices[row]];",
                "        }",
                "}",
            ]
        if self.initial_state_fixed:
            lines += [
                f"for (row = 0; row < {nx}; ++row)",
                "{",
                f"    {ws}.qpLb[row] = {var}.x0[row] - {var}.x[row];",
                f"    {ws}.qpUb[row] = {ws}.qpLb[row];",
                "}",
            ]
        return lines

    def _expand_lines(self) -> List[str]:
        ws = WORKSPACE_INSTANCE_NAME
        var = VARIABLES_INSTANCE_NAME
        nx, nu = self.nx, self.nu
        bs = self.block_size
        nd = self.block_dim
        return [
            f"for (lRun1 = 0; lRun1 < {self.N}; ++lRun1)",
            f"    for (row = 0; row < {nu}; ++row)",
            f"        {var}.u[lRun1 * {nu} + row] += "
            f"{ws}.qpPrimal[(lRun1 / {bs}) * {nd} + {nx} + (lRun1 % {bs}) * {nu} + row];",
            f"for (lRun1 = 0; lRun1 < {self.get_number_of_blocks()}; ++lRun1)",
            f"    for (row = 0; row < {nx}; ++row)",
            f"        {var}.x[lRun1 * {bs * nx} + row] += {ws}.qpPrimal[lRun1 * {nd} + row];",
            f"for (row = 0; row < {nx}; ++row)",
            f"    {var}.x[{self.N * nx} + row] += {ws}.qpPrimal[{self.get_number_of_blocks() * nd} + row];",
        ]

    def _qp_bodies(self, sink: ExportFile) -> Dict[str, List[str]]:
        return {
            "condensePrep": ["int lRun1, lRun2, lRun3, node, row, col;", ""] + self._condense_lines(sink),
            "condenseFdb": ["int lRun1, row, col;", ""] + self._feedback_bound_lines(),
            "expand": ["int lRun1, row;", ""] + self._expand_lines(),
        }

    def _preparation_lines(self) -> List[str]:
        return [f"{self.fn('condensePrep')}();"]

    def _feedback_lines(self) -> List[str]:
        return [
            "int tmp;",
            "",
            f"{self.fn('condenseFdb')}();",
            f"tmp = {self.fn('solve')}();",
            f"{self.fn('expand')}();",
            "return tmp;",
        ]


class GaussNewtonBlockQpDunesExport(GaussNewtonBlockCN2Export):
    strategy = SolverStrategy.GAUSS_NEWTON_BLOCK_QPDUNES
    qp_solver = QPSolverName.QPDUNES


class GaussNewtonBlockForcesExport(GaussNewtonBlockCN2Export):
    strategy = SolverStrategy.GAUSS_NEWTON_BLOCK_FORCES
    qp_solver = QPSolverName.FORCES
