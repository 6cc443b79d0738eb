"""
Code generation building blocks.

Declarations, the source file sink, the static template emitter and the
templated generators used by the export pipeline.
"""

from .declarations import (
    DataDeclaration,
    DeclarationBlock,
    ExportFunction,
    FunctionArgument,
    INT,
    REAL,
)
from .export_file import ExportFile, generation_notice
from .template_emitter import TemplateEmitter, TemplateKey
from .generators import (
    AuxiliaryFunctionsGenerator,
    CommonHeaderGenerator,
    HeaderConstant,
    HessianRegularizationGenerator,
    SimulinkInterfaceGenerator,
)

__all__ = [
    "DataDeclaration",
    "DeclarationBlock",
    "ExportFunction",
    "FunctionArgument",
    "INT",
    "REAL",
    "ExportFile",
    "generation_notice",
    "TemplateEmitter",
    "TemplateKey",
    "AuxiliaryFunctionsGenerator",
    "CommonHeaderGenerator",
    "HeaderConstant",
    "HessianRegularizationGenerator",
    "SimulinkInterfaceGenerator",
]
