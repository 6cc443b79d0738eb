"""
Static Template Emitter.

Copies packaged template files into the export folder. The emitter holds
no state; identical inputs always produce identical files.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from ..utils.exceptions import UnableToExportCodeError
from ..utils.logging import get_logger
from .export_file import generation_notice

logger = get_logger(__name__)

STATIC_TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates", "static")

# Lines with this prefix describe the template itself and are dropped
BOILERPLATE_PREFIX = "##"


class TemplateKey(Enum):
    """Packaged static templates."""

    MAKEFILE_QPOASES = "makefile_qpoases"
    MAKEFILE_EH_QPOASES = "makefile_eh_qpoases"
    MAKEFILE_FORCES = "makefile_forces"
    MAKEFILE_QPDUNES = "makefile_qpdunes"
    MAKEFILE_EH_QPDUNES = "makefile_eh_qpdunes"
    MAKEFILE_HPMPC = "makefile_hpmpc"
    DUMMY_TEST_FILE = "dummy_test_file.c"
    SOLVER_MEX = "solver_mex.c"
    EH_SOLVER_MEX = "eh_solver_mex.c"
    MAKE_MEX_QPOASES = "make_mex_qpoases.m"
    MAKE_MEX_EH_QPOASES = "make_mex_eh_qpoases.m"
    MAKE_MEX_FORCES = "make_mex_forces.m"
    MAKE_MEX_QPDUNES = "make_mex_qpdunes.m"
    MAKE_MEX_EH_QPDUNES = "make_mex_eh_qpdunes.m"
    MAKE_MEX_BLOCK_QPDUNES = "make_mex_block_qpdunes.m"


_TEMPLATE_FILES: Dict[TemplateKey, str] = {
    key: os.path.join(STATIC_TEMPLATE_DIR, key.value) for key in TemplateKey
}


def template_path(template_key: TemplateKey) -> str:
    """
    Resolve a template key to its packaged file.

    An unknown key is a programming error and raises ``KeyError``.
    """
    return _TEMPLATE_FILES[template_key]


class TemplateEmitter:
    """Copier of packaged templates into destination files."""

    @staticmethod
    def render(
        template_key: TemplateKey,
        comment_token: str = "",
        strip_boilerplate: bool = True,
        substitutions: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Return the destination text for a template."""
        with open(template_path(template_key), "r") as f:
            text = f.read()

        if strip_boilerplate:
            lines = text.splitlines(keepends=True)
            while lines and (lines[0].startswith(BOILERPLATE_PREFIX) or not lines[0].strip()):
                lines.pop(0)
            text = generation_notice(comment_token) + "\n" + "".join(lines)

        for name, value in (substitutions or {}).items():
            text = text.replace(f"@{name}@", value)
        return text

    @classmethod
    def copy(
        cls,
        template_key: TemplateKey,
        destination: Union[str, Path],
        comment_token: str = "",
        strip_boilerplate: bool = True,
        substitutions: Optional[Mapping[str, str]] = None,
    ) -> Path:
        """
        Copy a template into ``destination``.

        Args:
            template_key: Which packaged template to copy
            destination: Output file path
            comment_token: Line comment prefix of the destination language;
                empty selects a C block comment
            strip_boilerplate: Replace the template description block by
                the auto-generation notice
            substitutions: ``@NAME@`` placeholders to replace

        Returns:
            The destination path

        Raises:
            UnableToExportCodeError: If the destination cannot be written
        """
        text = cls.render(template_key, comment_token, strip_boilerplate, substitutions)

        destination = Path(destination)
        try:
            destination.write_text(text)
        except OSError as e:
            raise UnableToExportCodeError(f"Cannot write {destination.name}: {e}", path=str(destination)) from e

        logger.debug(f"Copied template {template_key.name} to {destination}")
        return destination
