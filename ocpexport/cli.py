"""
Command-line export tool.

Reads a problem description (YAML or JSON) with an ``ocp`` section and an
optional ``options`` section and exports the solver package::

    ocpexport problem.yaml -o export --real-type real_t
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from . import __version__
from .export import OCPExport
from .ocp.problem import OCP
from .options.store import ConfigurationStore, OptionKey
from .utils.config import get_config, load_config, set_config
from .utils.exceptions import InvalidArgumentsError, OCPExportError
from .utils.logging import ExportLogger, setup_logging


def load_problem(path: str, defaults: Optional[Dict[Any, Any]] = None) -> Tuple[OCP, ConfigurationStore]:
    """
    Load a problem description file.

    Options of the file are applied on top of ``defaults``.

    Raises:
        InvalidArgumentsError: If the file cannot be read or has no ``ocp`` section
    """
    problem_file = Path(path)
    try:
        with open(problem_file, "r") as f:
            if problem_file.suffix.lower() in (".yaml", ".yml"):
                data: Dict[str, Any] = yaml.safe_load(f) or {}
            else:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise InvalidArgumentsError(f"Cannot read problem description: {e}", {"path": path}) from e

    if "ocp" not in data:
        raise InvalidArgumentsError("Problem description has no 'ocp' section", {"path": path})

    try:
        ocp = OCP.from_dict(data["ocp"])
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidArgumentsError(f"Invalid problem description: {e}", {"path": path}) from e

    options = dict(defaults or {})
    options.update(data.get("options") or {})
    return ocp, ConfigurationStore.from_dict(options)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ocpexport", description="Export a real-time optimal control solver as C code"
    )
    parser.add_argument("problem", help="Problem description file (YAML or JSON)")
    parser.add_argument("--output", "-o", help="Export folder (default: CG_EXPORT_FOLDER_NAME)")
    parser.add_argument("--config", help="Tool configuration file")
    parser.add_argument("--real-type", help="Name of the generated scalar type")
    parser.add_argument("--int-type", help="Name of the generated integer type")
    parser.add_argument("--precision", type=int, help="Digits of printed numeric literals")
    parser.add_argument(
        "--option", "-O", action="append", default=[], metavar="KEY=VALUE",
        help="Override an export option, e.g. -O QP_SOLVER=QPDUNES",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the ocpexport command."""
    args = build_parser().parse_args(argv)

    if args.config:
        set_config(load_config(args.config))
    config = get_config()

    log_file = config.logging.log_file if config.logging.enable_file_logging else None
    setup_logging("DEBUG" if args.verbose else config.logging.level, log_file)

    reporter = ExportLogger("cli")
    if config.codegen.print_banner:
        reporter.log_banner("ocpexport", __version__)

    try:
        defaults = {
            OptionKey.CG_MODULE_NAME: config.codegen.module_name,
            OptionKey.CG_EXPORT_FOLDER_NAME: config.codegen.output_folder,
        }
        ocp, options = load_problem(args.problem, defaults)
        for override in args.option:
            key, sep, value = override.partition("=")
            if not sep:
                raise InvalidArgumentsError(f"Option override must be KEY=VALUE, got '{override}'")
            options.set(key, value)

        export = OCPExport(ocp, options, reporter)
        export.export_code(
            args.output,
            real_type=args.real_type or config.codegen.real_type,
            int_type=args.int_type or config.codegen.int_type,
            precision=args.precision if args.precision is not None else config.codegen.precision,
        )
        export.print_dimensions_qp()
    except OCPExportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
