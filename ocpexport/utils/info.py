"""
Package information utility.

This module provides a command-line utility for displaying the
installed version, the registered strategies and the supported
combinations of condensing method, QP backend and Hessian mode.
"""

import sys
import platform
from typing import Any, Dict, List, Tuple

import ocpexport

from .constants import HessianApproximationMode, QPSolverName, SparseQPSolutionMethod
from .exceptions import InvalidArgumentsError


def get_system_info() -> Dict[str, Any]:
    """
    Get system information relevant to ocpexport.

    Returns:
        Dictionary containing system information
    """
    import jinja2
    import numpy
    import yaml

    return {
        'python_version': sys.version,
        'platform': platform.platform(),
        'numpy_version': numpy.__version__,
        'jinja2_version': jinja2.__version__,
        'yaml_version': yaml.__version__,
    }


def get_ocpexport_info() -> Dict[str, Any]:
    """
    Get ocpexport-specific information.

    Returns:
        Dictionary containing version and registered strategies
    """
    from ocpexport.integrators import IntegratorExportFactory
    from ocpexport.solvers import NLPSolverFactory

    return {
        'version': ocpexport.__version__,
        'author': ocpexport.__author__,
        'integrators': [t.name for t in IntegratorExportFactory.registered_types()],
        'solvers': [s.name for s in NLPSolverFactory.registered_strategies()],
    }


def supported_combinations() -> List[Tuple[str, str, str, str]]:
    """List every (method, backend, Hessian) triple that resolves, with its strategy."""
    from ocpexport.export.resolver import select_solver_strategy

    rows = []
    for method in SparseQPSolutionMethod:
        for qp_solver in QPSolverName:
            for hessian in (HessianApproximationMode.GAUSS_NEWTON, HessianApproximationMode.EXACT_HESSIAN):
                try:
                    strategy = select_solver_strategy(method, qp_solver, hessian)
                except InvalidArgumentsError:
                    continue
                rows.append((method.name, qp_solver.name, hessian.name, strategy.name))
    return rows


def print_info() -> None:
    """Print formatted information about ocpexport and the system."""
    print("ocpexport: Real-Time OCP Solver Code Export")
    print("=" * 44)

    info = get_ocpexport_info()
    print(f"\nocpexport Version: {info['version']}")
    print(f"Author: {info['author']}")
    print(f"Integrators: {', '.join(info['integrators'])}")
    print(f"Solver Strategies: {', '.join(info['solvers'])}")

    print("\nSupported combinations:")
    for method, qp_solver, hessian, strategy in supported_combinations():
        print(f"  {method:<34} {qp_solver:<8} {hessian:<15} -> {strategy}")

    system_info = get_system_info()
    print(f"\nPython Version: {system_info['python_version'].split()[0]}")
    print(f"Platform: {system_info['platform']}")
    print(f"NumPy Version: {system_info['numpy_version']}")
    print(f"Jinja2 Version: {system_info['jinja2_version']}")
    print(f"PyYAML Version: {system_info['yaml_version']}")


def main() -> None:
    """Main entry point for the ocpexport-info command."""
    try:
        print_info()
    except Exception as e:
        print(f"Error getting package information: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
