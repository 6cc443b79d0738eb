"""
Unit tests for generated declarations and the source file sink.
"""

import numpy as np
import pytest

from ocpexport.codegen.declarations import (
    INT,
    DataDeclaration,
    DeclarationBlock,
    ExportFunction,
    FunctionArgument,
    filter_struct,
)
from ocpexport.codegen.export_file import AUTO_GENERATION_NOTICE, ExportFile, generation_notice
from ocpexport.utils.constants import ExportStruct
from ocpexport.utils.exceptions import UnableToExportCodeError


class TestDataDeclaration:
    """Test data declarations."""

    def test_array(self):
        """Test an array declaration."""
        decl = DataDeclaration("x", 21, 4, struct=ExportStruct.VARIABLES)
        assert decl.size == 84
        assert decl.render("real_t", "int") == "real_t x[ 84 ];"

    def test_scalar(self):
        """Test a scalar declaration."""
        assert DataDeclaration("rk_ttt", 1).render("double", "int") == "double rk_ttt;"

    def test_int_kind_and_description(self):
        """Test integer declarations with a description."""
        decl = DataDeclaration("iA", 3, kind=INT, description="Active set.")
        assert decl.render("real_t", "long") == "/** Active set. */\nlong iA[ 3 ];"

    def test_invalid(self):
        """Test rejected declarations."""
        with pytest.raises(ValueError):
            DataDeclaration("", 1)
        with pytest.raises(ValueError):
            DataDeclaration("x", -1)

    def test_filter_struct(self):
        """Test selecting one visibility class."""
        decls = [
            DataDeclaration("x", 4, struct=ExportStruct.VARIABLES),
            DataDeclaration("rk_ttt", 1, struct=ExportStruct.WORKSPACE),
        ]
        assert [d.name for d in filter_struct(decls, ExportStruct.VARIABLES)] == ["x"]
        assert len(filter_struct(decls, None)) == 2


class TestExportFunction:
    """Test generated function records."""

    def test_void_signature(self):
        """Test a function without arguments."""
        fn = ExportFunction("acado_preparationStep")
        assert fn.prototype("real_t", "int") == "void acado_preparationStep( void );"

    def test_arguments(self):
        """Test argument rendering."""
        fn = ExportFunction(
            "acado_integrate",
            (FunctionArgument("rk_eta"), FunctionArgument("resetIntegrator", INT, is_array=False)),
            return_type=INT,
        )
        assert fn.signature("real_t", "int") == "int acado_integrate( real_t* const rk_eta, int resetIntegrator )"

    def test_const_argument(self):
        """Test read-only array arguments."""
        assert FunctionArgument("in", is_const=True).render("real_t", "int") == "const real_t* const in"

    def test_definition_indents_body(self):
        """Test that body lines are indented and blank lines kept."""
        fn = ExportFunction("f", body=("int i;", "", "i = 0;"))
        assert fn.definition("real_t", "int") == "void f( void )\n{\n    int i;\n\n    i = 0;\n}"


class TestDeclarationBlock:
    """Test rendering of declaration blocks."""

    def test_skips_empty_declarations(self):
        """Test that zero-sized memory is not declared."""
        block = DeclarationBlock()
        block.extend([DataDeclaration("od", 0), DataDeclaration("x", 2)])
        assert block.render("real_t", "int") == "real_t x[ 2 ];"

    def test_mixed_items(self):
        """Test data and function declarations together."""
        block = DeclarationBlock([DataDeclaration("x", 2), ExportFunction("f")])
        assert block.render("real_t", "int") == "real_t x[ 2 ];\n\nvoid f( void );"

    def test_unknown_item(self):
        """Test that unsupported items are rejected."""
        with pytest.raises(TypeError):
            DeclarationBlock(["x"]).render("real_t", "int")


class TestExportFile:
    """Test the generated source sink."""

    def test_render_includes_header(self, tmp_path):
        """Test notice and common header include."""
        sink = ExportFile(tmp_path / "acado_solver.c", "acado_common.h")
        sink.add_comment("solver")
        text = sink.render()
        assert text.startswith(generation_notice())
        assert '#include "acado_common.h"' in text
        assert "/* solver */" in text
        assert text.endswith("\n")

    def test_format_real_precision(self, tmp_path):
        """Test numeric literals with the configured precision."""
        sink = ExportFile(tmp_path / "f.c", precision=3)
        assert sink.format_real(0.25) == "2.500e-01"
        assert sink.format_real(np.inf) == "1e12"
        assert sink.format_real(-np.inf) == "-1e12"

    def test_format_array(self, tmp_path):
        """Test flat initializer lists of matrices."""
        sink = ExportFile(tmp_path / "f.c", precision=1)
        assert sink.format_array(np.eye(2)) == "{ 1.0e+00, 0.0e+00, 0.0e+00, 1.0e+00 }"

    def test_add_function(self, tmp_path):
        """Test function definitions in the sink."""
        sink = ExportFile(tmp_path / "f.c", real_type="float")
        sink.add_function(ExportFunction("g", (FunctionArgument("a"),)))
        assert "void g( float* const a )\n{\n}" in sink.render()

    def test_export_code(self, tmp_path):
        """Test writing the file."""
        sink = ExportFile(tmp_path / "f.c")
        sink.add_line("int x;")
        sink.export_code()
        assert AUTO_GENERATION_NOTICE in (tmp_path / "f.c").read_text()

    def test_export_code_failure(self, tmp_path):
        """Test writing into a missing folder."""
        sink = ExportFile(tmp_path / "missing" / "f.c")
        with pytest.raises(UnableToExportCodeError):
            sink.export_code()
