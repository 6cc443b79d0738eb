"""
Custom exception definitions.

This module defines the exception hierarchy for export-specific errors.
Configuration and resolution problems are detected before any artifact
content is written; I/O problems abort the pipeline where they occur.
"""

from typing import Optional


class OCPExportError(Exception):
    """
    Base exception for all export-related errors.

    This is the root exception class for all errors raised by the
    validator, the resolver, the code generators and the orchestrator.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize export error.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class InvalidArgumentsError(OCPExportError):
    """
    Raised when the problem or the option combination cannot be exported.

    Covers unsupported model features (uncontrolled inputs, free
    parameters) and QP backend / condensing pairings outside the
    supported table.
    """


class InvalidOptionError(OCPExportError):
    """
    Raised when an option holds a value the generator does not support.
    """

    def __init__(self, message: str, option: Optional[str] = None, value=None):
        """
        Initialize invalid option error.

        Args:
            message: Error description
            option: Optional name of the offending option
            value: Optional offending value
        """
        details = {}
        if option is not None:
            details['option'] = option
        if value is not None:
            details['value'] = value

        super().__init__(message, details)
        self.option = option
        self.value = value


class InvalidObjectiveForExportError(OCPExportError):
    """
    Raised when the objective shape is incompatible with the chosen solver.
    """


class NotImplementedYetError(OCPExportError):
    """
    Raised when a requested interface needs a feature that is not available
    for the current configuration.
    """


class UnableToExportCodeError(OCPExportError):
    """
    Raised when an artifact cannot be rendered or written.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        """
        Initialize export I/O error.

        Args:
            message: Error description
            path: Optional destination that failed
        """
        details = {}
        if path is not None:
            details['path'] = path

        super().__init__(message, details)
        self.path = path


class CodeExportError(OCPExportError):
    """
    Raised by the orchestrator when a fatal step aborts the export.

    The failing step's exception is attached as ``cause`` and chained as
    ``__cause__``.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None, step: Optional[str] = None):
        """
        Initialize code export error.

        Args:
            message: Error description
            cause: Exception raised by the failing step
            step: Name of the pipeline step that failed
        """
        details = {}
        if step is not None:
            details['step'] = step

        super().__init__(message, details)
        self.cause = cause
        self.step = step
