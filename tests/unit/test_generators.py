"""
Unit tests for the templated file generators.

Tests the Jinja2 renderer, the common header, the auxiliary functions,
the Hessian regularization and the Simulink interface generators.
"""

import pytest

from ocpexport.codegen.export_file import AUTO_GENERATION_NOTICE
from ocpexport.codegen.generators import (
    AuxiliaryFunctionsGenerator,
    CommonHeaderGenerator,
    HeaderConstant,
    HessianRegularizationGenerator,
    SimulinkInterfaceGenerator,
    include_guard,
)
from ocpexport.codegen.templates import (
    JinjaTemplateRenderer,
    create_template_renderer,
    validate_template_syntax,
)
from ocpexport.utils.constants import QPSolverName
from ocpexport.utils.exceptions import InvalidArgumentsError, UnableToExportCodeError


class TestTemplateRenderer:
    """Test the Jinja2 renderer and its filters."""

    def setup_method(self):
        """Set up a renderer on the packaged templates."""
        self.renderer = JinjaTemplateRenderer()

    def test_c_bool_filter(self):
        """Test rendering of truth values."""
        assert self.renderer.render("{{ a | c_bool }}/{{ b | c_bool }}", {"a": True, "b": 0}) == "1/0"

    def test_c_real_filter(self):
        """Test rendering of floating point literals."""
        assert self.renderer.render("{{ x | c_real(3) }}", {"x": 0.5}) == "5.000e-01"

    def test_join_commas_filter(self):
        """Test joining lists."""
        assert self.renderer.render("{{ xs | join_commas }}", {"xs": [1, 2, 3]}) == "1, 2, 3"

    def test_undefined_variable(self):
        """Test that missing context variables fail rendering."""
        with pytest.raises(UnableToExportCodeError):
            self.renderer.render("{{ missing }}", {})

    def test_missing_template_file(self):
        """Test rendering an unknown template file."""
        with pytest.raises(UnableToExportCodeError):
            self.renderer.render_file("no_such_template.j2", {})

    def test_list_templates(self):
        """Test that the packaged templates are visible."""
        templates = self.renderer.list_templates()
        assert "common_header.h.j2" in templates
        assert "hessian_regularization.c.j2" in templates

    def test_shared_default_renderer(self):
        """Test that the default renderer is created once."""
        assert create_template_renderer() is create_template_renderer()

    def test_validate_template_syntax(self):
        """Test template syntax validation."""
        assert validate_template_syntax("{% if x %}y{% endif %}")
        assert not validate_template_syntax("{% if x %}y")


class TestIncludeGuard:
    """Test include guard derivation."""

    @pytest.mark.parametrize("file_name,guard", [
        ("acado_common.h", "ACADO_COMMON_H_"),
        ("my-module_solver_sfunction.h", "MY_MODULE_SOLVER_SFUNCTION_H_"),
    ])
    def test_guard(self, file_name, guard):
        """Test guards for header file names."""
        assert include_guard(file_name) == guard


class TestCommonHeaderGenerator:
    """Test the common header generator."""

    def _configure(self, generator, **overrides):
        settings = dict(
            module_name="acado",
            use_single_precision=False,
            use_complex_arithmetic=False,
            qp_solver=QPSolverName.QPOASES,
            constants=[
                HeaderConstant("ACADO_NX", 4, "Number of differential variables."),
                HeaderConstant("ACADO_N", 20, "Number of control/estimation intervals."),
            ],
            variables="real_t x[ 84 ];",
            workspace="real_t rk_ttt;",
            functions="void acado_preparationStep( void );",
        )
        settings.update(overrides)
        return generator.configure(**settings)

    def test_unconfigured_generator_refuses_export(self, tmp_path):
        """Test that export requires configuration."""
        generator = CommonHeaderGenerator(tmp_path / "acado_common.h")
        with pytest.raises(UnableToExportCodeError):
            generator.export_code()

    def test_header_contents(self, tmp_path):
        """Test the generated header."""
        generator = self._configure(CommonHeaderGenerator(tmp_path / "acado_common.h"))
        path = generator.export_code()
        text = path.read_text()

        assert AUTO_GENERATION_NOTICE in text
        assert "#ifndef ACADO_COMMON_H_" in text
        assert "typedef double real_t;" in text
        assert '#include "acado_qpoases_interface.hpp"' in text
        assert "#define ACADO_N 20" in text
        assert "    real_t x[ 84 ];" in text
        assert "void acado_preparationStep( void );" in text
        assert "complex.h" not in text

    def test_constants_sorted(self, tmp_path):
        """Test that constants are written in name order."""
        text = self._configure(CommonHeaderGenerator(tmp_path / "acado_common.h")).generate()
        assert text.index("#define ACADO_N 20") < text.index("#define ACADO_NX 4")

    def test_single_precision_and_complex(self, tmp_path):
        """Test the float typedef and the complex include."""
        generator = self._configure(
            CommonHeaderGenerator(tmp_path / "acado_common.h"),
            use_single_precision=True,
            use_complex_arithmetic=True,
        )
        text = generator.generate()
        assert "typedef float real_t;" in text
        assert "#include <complex.h>" in text

    @pytest.mark.parametrize("qp_solver,include", [
        (QPSolverName.QPDUNES, "acado_qpdunes_interface.h"),
        (QPSolverName.FORCES, "acado_forces_interface.h"),
        (QPSolverName.HPMPC, "acado_hpmpc_interface.h"),
    ])
    def test_backend_include(self, tmp_path, qp_solver, include):
        """Test the backend interface include."""
        text = self._configure(CommonHeaderGenerator(tmp_path / "acado_common.h"), qp_solver=qp_solver).generate()
        assert f'#include "{include}"' in text

    def test_real_constant_precision(self, tmp_path):
        """Test that non-integer constants follow the printing precision."""
        generator = self._configure(
            CommonHeaderGenerator(tmp_path / "acado_common.h"),
            constants=[
                HeaderConstant("ACADO_TS", 0.05, "Sampling time."),
                HeaderConstant("ACADO_N", 20, "Number of control/estimation intervals."),
            ],
            precision=4,
        )
        text = generator.generate()
        assert "#define ACADO_TS 5.0000e-02" in text
        assert "#define ACADO_N 20" in text

    def test_generation_is_deterministic(self, tmp_path):
        """Test that identical configurations render identical headers."""
        first = self._configure(CommonHeaderGenerator(tmp_path / "acado_common.h")).generate()
        second = self._configure(CommonHeaderGenerator(tmp_path / "acado_common.h")).generate()
        assert first == second


class TestAuxiliaryFunctionsGenerator:
    """Test the auxiliary functions generator."""

    def test_exports_both_files(self, tmp_path):
        """Test that header and source are written with the module prefix."""
        generator = AuxiliaryFunctionsGenerator(
            tmp_path / "mpc_auxiliary_functions.h", tmp_path / "mpc_auxiliary_functions.c", "mpc"
        )
        paths = generator.configure("float_t").export_code()

        assert [p.name for p in paths] == ["mpc_auxiliary_functions.h", "mpc_auxiliary_functions.c"]
        header = paths[0].read_text()
        assert "#ifndef MPC_AUXILIARY_FUNCTIONS_H_" in header
        assert '#include "mpc_common.h"' in header
        assert "float_t* mpc_getVariablesX( );" in header


class TestHessianRegularizationGenerator:
    """Test the Hessian regularization generator."""

    def test_contents(self, tmp_path):
        """Test block dimension and floor."""
        generator = HessianRegularizationGenerator(tmp_path / "acado_hessian_regularization.c", "acado")
        text = generator.configure(5).export_code().read_text()

        assert '#include "acado_common.h"' in text
        assert "#define ACADO_HESSIAN_BLOCK_DIM 5" in text
        assert "#define ACADO_HESSIAN_REGULARIZATION 1.0000000000000000e-12" in text
        assert "acado_symmetricEVD" in text

    def test_precision(self, tmp_path):
        """Test the printing precision of the floor."""
        generator = HessianRegularizationGenerator(tmp_path / "r.c", "acado")
        text = generator.configure(3, 1e-8, "real_t", 4).generate()
        assert "#define ACADO_HESSIAN_REGULARIZATION 1.0000e-08" in text

    @pytest.mark.parametrize("dim,floor", [(0, 1e-12), (3, 0.0), (3, -1.0)])
    def test_invalid_configuration(self, tmp_path, dim, floor):
        """Test rejected dimensions and floors."""
        generator = HessianRegularizationGenerator(tmp_path / "r.c", "acado")
        with pytest.raises(InvalidArgumentsError):
            generator.configure(dim, floor)


class TestSimulinkInterfaceGenerator:
    """Test the Simulink interface generator."""

    def _generator(self, tmp_path, module="acado"):
        return SimulinkInterfaceGenerator(
            tmp_path / f"make_{module}_solver_sfunction.m",
            tmp_path / f"{module}_solver_sfunction.h",
            tmp_path / f"{module}_solver_sfunction.c",
            module,
        )

    def _configure(self, generator, qp_solver="QPOASES"):
        return generator.configure(
            N=10, NX=4, NDX=0, NXA=0, NU=1, NOD=0, NY=5, NYN=4,
            initial_state_fixed=True,
            weighting_matrices_type=1,
            hardcoded_constraints=True,
            use_arrival_cost=False,
            compute_covariance_matrix=False,
            qp_solver=qp_solver,
        )

    def test_exports_three_files(self, tmp_path):
        """Test the build script, header and source."""
        paths = self._configure(self._generator(tmp_path)).export_code()
        assert [p.name for p in paths] == [
            "make_acado_solver_sfunction.m",
            "acado_solver_sfunction.h",
            "acado_solver_sfunction.c",
        ]
        assert "#define SFUN_N 10" in paths[1].read_text()
        assert "S_FUNCTION_NAME acado_solver_sfunction" in paths[2].read_text()

    def test_qpoases_build_sources(self, tmp_path):
        """Test that the build script lists the backend sources."""
        paths = self._configure(self._generator(tmp_path, "mpc")).export_code()
        script = paths[0].read_text()
        assert "mpc_qpoases_interface.cpp" in script
        assert "qpoases/SRC/QProblem.cpp" in script

    def test_qpdunes_build_sources(self, tmp_path):
        """Test the qpDUNES build script."""
        paths = self._configure(self._generator(tmp_path), "QPDUNES").export_code()
        assert "acado_qpdunes_interface.c" in paths[0].read_text()

    @pytest.mark.parametrize("qp_solver", ["FORCES", "HPMPC"])
    def test_unsupported_backend(self, tmp_path, qp_solver):
        """Test that backends without S-function support are rejected."""
        with pytest.raises(InvalidArgumentsError):
            self._configure(self._generator(tmp_path), qp_solver)
