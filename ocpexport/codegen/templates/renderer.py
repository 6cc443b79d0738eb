"""
Template Rendering Engine.

This module provides template-based code generation using Jinja2
templates, with filters for emitting C preprocessor definitions and
comments.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError

from ...utils.exceptions import UnableToExportCodeError

GENERATED_TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "generated")


class JinjaTemplateRenderer:
    """Jinja2-based template renderer for generated C and MATLAB files."""

    def __init__(self, template_dir: Optional[str] = None):
        """Initialize the template renderer."""
        if template_dir is None:
            template_dir = GENERATED_TEMPLATE_DIR

        self._template_dir = Path(template_dir)
        self._env = Environment(
            loader=FileSystemLoader(str(self._template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

        self._setup_custom_filters()

    def _setup_custom_filters(self) -> None:
        """Set up custom Jinja2 filters for C generation."""

        def indent_filter(text: str, width: int = 4, first: bool = False) -> str:
            """Indent text by the specified width."""
            lines = text.splitlines()
            if not lines:
                return text

            indent = " " * width
            if first:
                return "\n".join(indent + line if line else line for line in lines)
            return lines[0] + "\n" + "\n".join(indent + line if line else line for line in lines[1:])

        def c_bool(value: Any) -> str:
            """Render a truth value as a C integer literal."""
            return "1" if value else "0"

        def join_with_commas(items: List[str]) -> str:
            """Join items with commas and proper spacing."""
            return ", ".join(str(item) for item in items)

        def c_real(value: float, precision: int = 16) -> str:
            """Render a floating point literal."""
            return f"{value:.{precision}e}"

        self._env.filters["indent"] = indent_filter
        self._env.filters["c_bool"] = c_bool
        self._env.filters["join_commas"] = join_with_commas
        self._env.filters["c_real"] = c_real

        self._env.globals["range"] = range
        self._env.globals["len"] = len
        self._env.globals["enumerate"] = enumerate

    def render(self, template: str, context: Dict[str, Any]) -> str:
        """Render a template string with the given context."""
        try:
            template_obj = self._env.from_string(template)
            return template_obj.render(**context)
        except TemplateError as e:
            raise UnableToExportCodeError(f"Template rendering failed: {e}") from e

    def render_file(self, template_path: str, context: Dict[str, Any]) -> str:
        """Render a template file with the given context."""
        try:
            template = self._env.get_template(template_path)
            return template.render(**context)
        except TemplateError as e:
            raise UnableToExportCodeError(f"Template file '{template_path}' rendering failed: {e}") from e

    def list_templates(self) -> List[str]:
        """List available template files."""
        return self._env.list_templates()


_default_renderer: Optional[JinjaTemplateRenderer] = None


def create_template_renderer(template_dir: Optional[str] = None) -> JinjaTemplateRenderer:
    """Create a template renderer; the default directory renderer is shared."""
    global _default_renderer
    if template_dir is not None:
        return JinjaTemplateRenderer(template_dir)
    if _default_renderer is None:
        _default_renderer = JinjaTemplateRenderer()
    return _default_renderer


def validate_template_syntax(template: str) -> bool:
    """Return True when ``template`` parses as a Jinja2 template."""
    try:
        Template(template)
    except TemplateError:
        return False
    return True
