"""
Template Rendering System.

Templates are organized by how they are used:
- generated/: Jinja2 templates rendered with problem-specific context
- static/: files copied verbatim by the template emitter
"""

from .renderer import (
    JinjaTemplateRenderer,
    create_template_renderer,
    validate_template_syntax,
)

__all__ = [
    "JinjaTemplateRenderer",
    "create_template_renderer",
    "validate_template_syntax",
]
