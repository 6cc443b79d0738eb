"""
Logging configuration and utilities.

This module provides centralized logging configuration for the
ocpexport package with appropriate formatting and levels, and the
reporter object the orchestrator uses to narrate an export session.
"""

import logging
import os
from typing import Optional


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure logging for the ocpexport package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
    """
    if level is None:
        level = os.environ.get("OCPEXPORT_LOG_LEVEL", "INFO")

    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("ocpexport")
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    if name == "ocpexport" or name.startswith("ocpexport."):
        return logging.getLogger(name)
    return logging.getLogger(f"ocpexport.{name}")


class ExportLogger:
    """
    Reporter for export sessions.

    Passed into the orchestrator so that every message of a session goes
    through one object instead of process-wide prints.
    """

    def __init__(self, name: str = "export"):
        """
        Initialize reporter for a specific component.

        Args:
            name: Component name for logging context
        """
        self.logger = get_logger(name)

    def log_banner(self, tool_name: str, version: str) -> None:
        """Log the tool banner at the start of a session."""
        self.logger.info(f"{tool_name} {version}")

    def log_export_start(self, module_name: str, destination: str) -> None:
        """
        Log beginning of an export.

        Args:
            module_name: Prefix of the generated files
            destination: Output folder
        """
        self.logger.info(f"Exporting module '{module_name}' into {destination}")

    def log_resolution(self, integrator: str, solver: str) -> None:
        """
        Log the strategies bound by the resolver.

        Args:
            integrator: Integration scheme name
            solver: Solver strategy name
        """
        self.logger.info(f"Resolved integrator '{integrator}' and solver '{solver}'")

    def log_artifact(self, path: str) -> None:
        """Log a written artifact."""
        self.logger.debug(f"Wrote {path}")

    def log_artifact_skipped(self, artifact: str, reason: str) -> None:
        """
        Log an artifact that was skipped for an unsupported configuration.

        Args:
            artifact: Artifact description
            reason: Why it is not available
        """
        self.logger.warning(f"Skipping {artifact}: {reason}")

    def log_qp_dimensions(self, num_qp_vars: int, num_complex_constraints: int) -> None:
        """
        Log QP dimensions of a resolved session.

        Args:
            num_qp_vars: Number of QP variables
            num_complex_constraints: Number of path and point constraints
        """
        self.logger.info(
            "Code generation summary:\n"
            f"\t* Number of QP variables: {num_qp_vars}\n"
            f"\t* Number of path and point constraints: {num_complex_constraints}"
        )


setup_logging()
