"""
Generated Source File Sink.

An ``ExportFile`` collects the code emitted by a generator and writes it
as one C source file that includes the common header. The sink carries
the scalar type names and the printing precision so that generators stay
independent of them.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

import numpy as np

from ..utils.constants import DEFAULT_INT_TYPE, DEFAULT_PRECISION, DEFAULT_REAL_TYPE
from ..utils.exceptions import UnableToExportCodeError
from ..utils.logging import get_logger
from .declarations import ExportFunction

logger = get_logger(__name__)


AUTO_GENERATION_NOTICE = "This file was auto-generated by ocpexport. Do not edit."


def generation_notice(comment_token: str = "") -> str:
    """Return the auto-generation notice commented with ``comment_token``."""
    if not comment_token:
        return f"/*\n *    {AUTO_GENERATION_NOTICE}\n */\n"
    return f"{comment_token}\n{comment_token}    {AUTO_GENERATION_NOTICE}\n{comment_token}\n"


class ExportFile:
    """Code sink for one generated C source file."""

    def __init__(
        self,
        path: Union[str, Path],
        header_name: str = "",
        real_type: str = DEFAULT_REAL_TYPE,
        int_type: str = DEFAULT_INT_TYPE,
        precision: int = DEFAULT_PRECISION,
    ):
        self.path = Path(path)
        self.header_name = header_name
        self.real_type = real_type
        self.int_type = int_type
        self.precision = precision
        self._chunks: List[str] = []

    def add_comment(self, text: str) -> None:
        self._chunks.append(f"/* {text} */")

    def add_line(self, line: str = "") -> None:
        self._chunks.append(line)

    def add_block(self, code: str) -> None:
        self._chunks.append(code.rstrip("\n"))

    def add_function(self, function: ExportFunction) -> None:
        self._chunks.append(function.definition(self.real_type, self.int_type))
        self._chunks.append("")

    def format_real(self, value: float) -> str:
        """Format a numeric literal with the configured precision."""
        if np.isposinf(value):
            return "1e12"
        if np.isneginf(value):
            return "-1e12"
        return f"{value:.{self.precision}e}"

    def format_array(self, values) -> str:
        """Format a flat initializer list."""
        flat = np.asarray(values, dtype=float).ravel()
        return "{ " + ", ".join(self.format_real(v) for v in flat) + " }"

    def render(self) -> str:
        parts = [generation_notice()]
        if self.header_name:
            parts.append(f'#include "{self.header_name}"\n')
        parts.append("\n".join(self._chunks))
        return "\n".join(parts).rstrip("\n") + "\n"

    def export_code(self) -> None:
        """
        Write the collected code.

        Raises:
            UnableToExportCodeError: If the file cannot be written
        """
        try:
            self.path.write_text(self.render())
        except OSError as e:
            raise UnableToExportCodeError(f"Cannot write {self.path.name}: {e}", path=str(self.path)) from e
        logger.debug(f"Exported {self.path}")
