"""
Unit tests for the command-line export tool.
"""

import json

import pytest
import yaml

from ocpexport.cli import build_parser, load_problem, main
from ocpexport.options.store import OptionKey
from ocpexport.utils.config import ExportToolConfig, set_config
from ocpexport.utils.constants import QPSolverName
from ocpexport.utils.exceptions import InvalidArgumentsError


@pytest.fixture
def problem_file(tmp_path, problem_data):
    path = tmp_path / "problem.yaml"
    path.write_text(yaml.safe_dump(problem_data))
    return path


@pytest.fixture(autouse=True)
def quiet_config(tmp_path):
    """Use a tool configuration without banner for every test."""
    config_file = tmp_path / "tool.yaml"
    config_file.write_text(yaml.safe_dump({"codegen": {"print_banner": False}}))
    set_config(ExportToolConfig(str(config_file)))
    yield
    set_config(None)


class TestLoadProblem:
    """Test reading problem descriptions."""

    def test_yaml(self, problem_file):
        """Test a YAML problem description."""
        ocp, options = load_problem(str(problem_file))
        assert ocp.N == 10
        assert ocp.nx == 4
        assert ocp.objective.ny == 5
        assert ocp.constraints.control_bounds[0].upper == 1.0
        assert options.get(OptionKey.QP_SOLVER) == QPSolverName.QPOASES

    def test_json(self, tmp_path, problem_data):
        """Test a JSON problem description."""
        path = tmp_path / "problem.json"
        path.write_text(json.dumps(problem_data))
        ocp, _ = load_problem(str(path))
        assert ocp.nu == 1

    def test_defaults_are_overridden_by_file(self, tmp_path, problem_data):
        """Test that options of the file win over defaults."""
        problem_data["options"]["CG_MODULE_NAME"] = "pendulum"
        path = tmp_path / "problem.yaml"
        path.write_text(yaml.safe_dump(problem_data))

        _, options = load_problem(str(path), {"CG_MODULE_NAME": "acado", "CG_EXPORT_FOLDER_NAME": "out"})
        assert options.get(OptionKey.CG_MODULE_NAME) == "pendulum"
        assert options.get(OptionKey.CG_EXPORT_FOLDER_NAME) == "out"

    def test_missing_ocp_section(self, tmp_path):
        """Test a description without problem."""
        path = tmp_path / "problem.yaml"
        path.write_text(yaml.safe_dump({"options": {}}))
        with pytest.raises(InvalidArgumentsError):
            load_problem(str(path))

    def test_missing_file(self, tmp_path):
        """Test an unreadable description."""
        with pytest.raises(InvalidArgumentsError):
            load_problem(str(tmp_path / "missing.yaml"))

    def test_invalid_problem(self, tmp_path, problem_data):
        """Test a description with an invalid horizon."""
        problem_data["ocp"]["N"] = 0
        path = tmp_path / "problem.yaml"
        path.write_text(yaml.safe_dump(problem_data))
        with pytest.raises(InvalidArgumentsError):
            load_problem(str(path))


class TestMain:
    """Test the command entry point."""

    def test_parser(self):
        """Test argument parsing."""
        args = build_parser().parse_args(["p.yaml", "-o", "out", "-O", "QP_SOLVER=QPDUNES", "--precision", "8"])
        assert args.problem == "p.yaml"
        assert args.output == "out"
        assert args.option == ["QP_SOLVER=QPDUNES"]
        assert args.precision == 8

    def test_export(self, problem_file, tmp_path):
        """Test a successful export."""
        out = tmp_path / "out"
        assert main([str(problem_file), "-o", str(out)]) == 0
        assert (out / "acado_common.h").exists()
        assert (out / "acado_solver.c").exists()

    def test_option_override(self, problem_file, tmp_path):
        """Test overriding an option on the command line."""
        out = tmp_path / "out"
        code = main([str(problem_file), "-o", str(out), "-O", "CG_MODULE_NAME=mpc", "-O", "GENERATE_MAKE_FILE=no"])
        assert code == 0
        assert (out / "mpc_common.h").exists()
        assert not (out / "Makefile").exists()

    def test_real_type(self, problem_file, tmp_path):
        """Test the scalar type name option."""
        out = tmp_path / "out"
        assert main([str(problem_file), "-o", str(out), "--real-type", "float_t"]) == 0
        assert "typedef double float_t;" in (out / "acado_common.h").read_text()

    def test_malformed_override(self, problem_file, tmp_path, capsys):
        """Test an override without value."""
        assert main([str(problem_file), "-o", str(tmp_path / "out"), "-O", "QP_SOLVER"]) == 1
        assert "KEY=VALUE" in capsys.readouterr().err

    def test_export_failure(self, problem_file, tmp_path, capsys):
        """Test that export errors give exit code 1."""
        code = main([str(problem_file), "-o", str(tmp_path / "out"), "-O", "QP_SOLVER=FORCES"])
        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_unknown_option(self, problem_file, tmp_path):
        """Test an override of an unknown option."""
        assert main([str(problem_file), "-o", str(tmp_path / "out"), "-O", "NO_SUCH_OPTION=1"]) == 1
