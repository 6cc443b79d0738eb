"""
Unit tests for the static template emitter.
"""

import os

import pytest

from ocpexport.codegen.export_file import AUTO_GENERATION_NOTICE
from ocpexport.codegen.template_emitter import (
    BOILERPLATE_PREFIX,
    TemplateEmitter,
    TemplateKey,
    template_path,
)
from ocpexport.utils.exceptions import UnableToExportCodeError


class TestTemplateLookup:
    """Test resolution of template keys."""

    @pytest.mark.parametrize("key", list(TemplateKey))
    def test_every_key_is_packaged(self, key):
        """Test that every template key resolves to an existing file."""
        assert os.path.isfile(template_path(key))

    def test_unknown_key(self):
        """Test that an unknown key is a programming error."""
        with pytest.raises(KeyError):
            template_path("makefile_cplex")


class TestRender:
    """Test rendering of template text."""

    def test_boilerplate_replaced_by_notice(self):
        """Test that the template description is replaced by the notice."""
        text = TemplateEmitter.render(TemplateKey.DUMMY_TEST_FILE)
        assert text.startswith("/*\n")
        assert AUTO_GENERATION_NOTICE in text
        assert not any(line.startswith(BOILERPLATE_PREFIX) for line in text.splitlines())

    def test_line_comment_token(self):
        """Test the notice for languages with line comments."""
        text = TemplateEmitter.render(TemplateKey.MAKEFILE_QPOASES, comment_token="#")
        first_lines = text.splitlines()[:3]
        assert first_lines[0] == "#"
        assert first_lines[1] == f"#    {AUTO_GENERATION_NOTICE}"

    def test_matlab_comment_token(self):
        """Test the notice in MATLAB scripts."""
        text = TemplateEmitter.render(TemplateKey.MAKE_MEX_QPOASES, comment_token="%")
        assert text.splitlines()[1] == f"%    {AUTO_GENERATION_NOTICE}"

    def test_verbatim_copy(self):
        """Test copying without touching the boilerplate."""
        text = TemplateEmitter.render(TemplateKey.DUMMY_TEST_FILE, strip_boilerplate=False)
        with open(template_path(TemplateKey.DUMMY_TEST_FILE)) as f:
            assert text == f.read()

    def test_substitutions(self):
        """Test that module name placeholders are replaced."""
        text = TemplateEmitter.render(TemplateKey.DUMMY_TEST_FILE, substitutions={"MODULE_NAME": "pendulum"})
        assert '#include "pendulum_common.h"' in text
        assert "@MODULE_NAME@" not in text

    def test_render_is_deterministic(self):
        """Test that identical inputs give identical text."""
        first = TemplateEmitter.render(TemplateKey.MAKEFILE_QPDUNES, "#")
        second = TemplateEmitter.render(TemplateKey.MAKEFILE_QPDUNES, "#")
        assert first == second


class TestCopy:
    """Test copying templates into files."""

    def test_copy_writes_file(self, tmp_path):
        """Test that copy writes the rendered text."""
        destination = tmp_path / "test.c"
        result = TemplateEmitter.copy(TemplateKey.DUMMY_TEST_FILE, destination, "", True, {"MODULE_NAME": "acado"})

        assert result == destination
        assert destination.read_text() == TemplateEmitter.render(
            TemplateKey.DUMMY_TEST_FILE, "", True, {"MODULE_NAME": "acado"}
        )

    def test_copy_overwrites(self, tmp_path):
        """Test that an existing destination is replaced."""
        destination = tmp_path / "Makefile"
        destination.write_text("stale")
        TemplateEmitter.copy(TemplateKey.MAKEFILE_HPMPC, destination, "#")
        assert "stale" not in destination.read_text()

    def test_copy_into_missing_folder(self, tmp_path):
        """Test that an unwritable destination raises an export error."""
        destination = tmp_path / "missing" / "Makefile"
        with pytest.raises(UnableToExportCodeError) as exc_info:
            TemplateEmitter.copy(TemplateKey.MAKEFILE_QPOASES, destination, "#")
        assert exc_info.value.path == str(destination)
        assert isinstance(exc_info.value.__cause__, OSError)
