"""Solver registry: maps stable type names to solver constructors.

The mapping is built once at import and is read-only afterwards.
"""

from __future__ import annotations

import logging
import types
from typing import Any, Callable, Mapping

from dynsolvers.config import PinocchioParameters, parameters_from_dict
from dynsolvers.errors import ConfigurationError
from dynsolvers.solvers._base import DynamicsSolver
from dynsolvers.solvers.cartpole import CartpoleDynamicsSolver

logger = logging.getLogger(__name__)


def _pinocchio_solver(parameters: Any = None) -> DynamicsSolver:
    from dynsolvers.solvers.articulated import PinocchioDynamicsSolver

    return PinocchioDynamicsSolver(parameters)


SOLVERS: Mapping[str, Callable[..., DynamicsSolver]] = types.MappingProxyType(
    {
        CartpoleDynamicsSolver.type_name: CartpoleDynamicsSolver,
        "PinocchioDynamicsSolver": _pinocchio_solver,
    }
)

PARAMETERS: Mapping[str, type] = types.MappingProxyType(
    {
        CartpoleDynamicsSolver.type_name: CartpoleDynamicsSolver.parameters_class,
        "PinocchioDynamicsSolver": PinocchioParameters,
    }
)


def available_solvers() -> list[str]:
    return sorted(SOLVERS)


def create_solver(name: str, parameters: Any = None) -> DynamicsSolver:
    """Instantiate the solver registered under *name*.

    Raises:
        ConfigurationError: If *name* is not registered or *parameters*
            do not belong to that solver.
    """
    if name not in SOLVERS:
        raise ConfigurationError(
            f"Unknown solver: {name}. Available: {available_solvers()}"
        )
    logger.debug("Creating solver %s", name)
    return SOLVERS[name](parameters)


def create_solver_from_config(
    name: str, data: Mapping[str, Any]
) -> DynamicsSolver:
    """Instantiate *name* with parameters built from a plain mapping."""
    if name not in PARAMETERS:
        raise ConfigurationError(
            f"Unknown solver: {name}. Available: {available_solvers()}"
        )
    return create_solver(name, parameters_from_dict(PARAMETERS[name], data))
