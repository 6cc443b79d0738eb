"""
Templated File Generators.

Each generator renders Jinja2 templates into files of the export folder:
- CommonHeaderGenerator: the header shared by every generated source
- AuxiliaryFunctionsGenerator: accessor, printing and timing helpers
- HessianRegularizationGenerator: eigenvalue regularization for exact Hessians
- SimulinkInterfaceGenerator: S-function wrapper and its build script
"""

from .base import TemplateBasedGenerator, include_guard
from .common_header import CommonHeaderGenerator, HeaderConstant
from .auxiliary_functions import AuxiliaryFunctionsGenerator
from .hessian_regularization import HessianRegularizationGenerator
from .simulink_interface import SimulinkInterfaceGenerator

__all__ = [
    "TemplateBasedGenerator",
    "include_guard",
    "CommonHeaderGenerator",
    "HeaderConstant",
    "AuxiliaryFunctionsGenerator",
    "HessianRegularizationGenerator",
    "SimulinkInterfaceGenerator",
]
