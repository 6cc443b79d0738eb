"""
Utils package for ocpexport.

This module provides the shared constants, the exception hierarchy,
logging helpers and the tool configuration.
"""

from .constants import *
from .exceptions import (
    OCPExportError,
    InvalidArgumentsError,
    InvalidOptionError,
    InvalidObjectiveForExportError,
    NotImplementedYetError,
    UnableToExportCodeError,
    CodeExportError,
)
from .logging import ExportLogger, get_logger, setup_logging
from .config import (
    ExportToolConfig,
    CodegenConfig,
    LoggingConfig,
    get_config,
    set_config,
    load_config,
)
