"""
Declarations of Generated Data and Functions.

Integrator and solver generators describe the memory and the functions
they need with the immutable records defined here. The orchestrator
collects them for the common header, the generators render their
definitions into their own source files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ..utils.constants import ExportStruct


REAL = "real"
INT = "int"


def resolve_type(kind: str, real_type: str, int_type: str) -> str:
    """Map an abstract scalar kind onto the configured C type name."""
    if kind == REAL:
        return real_type
    if kind == INT:
        return int_type
    return kind


@dataclass(frozen=True)
class DataDeclaration:
    """A block of memory in the variables or workspace struct."""
    name: str
    rows: int
    cols: int = 1
    kind: str = REAL
    struct: ExportStruct = ExportStruct.WORKSPACE
    description: str = ""

    def __post_init__(self):
        if not self.name:
            raise ValueError("Declaration name cannot be empty")
        if self.rows < 0 or self.cols < 0:
            raise ValueError(f"Invalid dimensions for '{self.name}'")

    @property
    def size(self) -> int:
        return self.rows * self.cols

    @property
    def is_empty(self) -> bool:
        return self.size == 0

    def render(self, real_type: str, int_type: str) -> str:
        c_type = resolve_type(self.kind, real_type, int_type)
        if self.size == 1:
            code = f"{c_type} {self.name};"
        else:
            code = f"{c_type} {self.name}[ {self.size} ];"
        if self.description:
            return f"/** {self.description} */\n{code}"
        return code


@dataclass(frozen=True)
class FunctionArgument:
    """Argument of a generated C function."""
    name: str
    kind: str = REAL
    is_array: bool = True
    is_const: bool = False

    def render(self, real_type: str, int_type: str) -> str:
        c_type = resolve_type(self.kind, real_type, int_type)
        if not self.is_array:
            return f"{c_type} {self.name}"
        if self.is_const:
            return f"const {c_type}* const {self.name}"
        return f"{c_type}* const {self.name}"


@dataclass(frozen=True)
class ExportFunction:
    """A generated C function: signature plus body lines."""
    name: str
    arguments: Tuple[FunctionArgument, ...] = ()
    return_type: str = "void"
    body: Tuple[str, ...] = ()
    description: str = ""

    def signature(self, real_type: str, int_type: str) -> str:
        ret = resolve_type(self.return_type, real_type, int_type)
        if self.arguments:
            args = ", ".join(a.render(real_type, int_type) for a in self.arguments)
        else:
            args = "void"
        return f"{ret} {self.name}( {args} )"

    def prototype(self, real_type: str, int_type: str) -> str:
        proto = self.signature(real_type, int_type) + ";"
        if self.description:
            return f"/** {self.description} */\n{proto}"
        return proto

    def definition(self, real_type: str, int_type: str) -> str:
        lines = [self.signature(real_type, int_type), "{"]
        lines.extend(f"{line}" if not line else f"    {line}" for line in self.body)
        lines.append("}")
        return "\n".join(lines)


@dataclass
class DeclarationBlock:
    """Ordered collection of declarations rendered into one text block."""
    items: List[object] = field(default_factory=list)

    def extend(self, declarations: Iterable[object]) -> None:
        self.items.extend(declarations)

    def render(self, real_type: str, int_type: str) -> str:
        rendered = []
        for item in self.items:
            if isinstance(item, DataDeclaration):
                if item.is_empty:
                    continue
                rendered.append(item.render(real_type, int_type))
            elif isinstance(item, ExportFunction):
                rendered.append(item.prototype(real_type, int_type))
            else:
                raise TypeError(f"Cannot render declaration of type {type(item).__name__}")
        return "\n\n".join(rendered)


def filter_struct(declarations: Iterable[DataDeclaration], struct: Optional[ExportStruct]) -> List[DataDeclaration]:
    """Keep the declarations of one visibility class (all when ``struct`` is None)."""
    return [d for d in declarations if struct is None or d.struct == struct]
