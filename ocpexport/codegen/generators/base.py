"""
Base Classes for Templated File Generators.

A templated generator renders one Jinja2 template into one destination
file. Generators are configured first and exported afterwards, so a
generator that was never configured refuses to write.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ...utils.exceptions import UnableToExportCodeError
from ...utils.logging import get_logger
from ..templates import JinjaTemplateRenderer, create_template_renderer

logger = get_logger(__name__)


class TemplateBasedGenerator(ABC):
    """Base class for generators backed by a single template."""

    def __init__(
        self,
        template_name: str,
        destination: Union[str, Path],
        template_renderer: Optional[JinjaTemplateRenderer] = None,
    ):
        """Initialize with a template name and the output file."""
        self._template_renderer = template_renderer or create_template_renderer()
        self._template_name = template_name
        self.destination = Path(destination)
        self._configured = False

    @abstractmethod
    def _build_template_context(self) -> Dict[str, Any]:
        """Build the template context from the configured values."""
        pass

    def _mark_configured(self) -> None:
        self._configured = True

    def generate(self) -> str:
        """Render the file contents."""
        if not self._configured:
            raise UnableToExportCodeError(
                f"{self.__class__.__name__} must be configured before export",
                path=str(self.destination),
            )
        return self._template_renderer.render_file(self._template_name, self._build_template_context())

    def export_code(self) -> Path:
        """
        Render and write the file.

        Raises:
            UnableToExportCodeError: If rendering or writing fails
        """
        content = self.generate()
        try:
            self.destination.write_text(content)
        except OSError as e:
            raise UnableToExportCodeError(
                f"Cannot write {self.destination.name}: {e}", path=str(self.destination)
            ) from e
        logger.debug(f"{self.__class__.__name__} wrote {self.destination}")
        return self.destination


def include_guard(file_name: str) -> str:
    """Derive a C include guard from a file name."""
    stem = "".join(c if c.isalnum() else "_" for c in file_name)
    return f"{stem.upper()}_"
