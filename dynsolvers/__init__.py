"""dynsolvers: differentiable dynamics models for trajectory optimization."""

import logging

from dynsolvers.config import (
    CartpoleParameters,
    PinocchioParameters,
    describe,
    load_parameters,
    parameters_from_dict,
)
from dynsolvers.dynamics.cartpole import cartpole_dynamics, cartpole_jacobians
from dynsolvers.errors import ConfigurationError, DimensionError, DynamicsSolverError
from dynsolvers.evaluation.derivatives import (
    check_derivatives,
    finite_difference_jacobians,
)
from dynsolvers.evaluation.simulate import rollout
from dynsolvers.manifold import (
    ArgumentPosition,
    ConfigurationSpace,
    EuclideanSpace,
    PeriodicSpace,
)
from dynsolvers.registry import (
    available_solvers,
    create_solver,
    create_solver_from_config,
)
from dynsolvers.scene import BaseType, KinematicDescription
from dynsolvers.solvers._base import DynamicsSolver
from dynsolvers.solvers.cartpole import CartpoleDynamicsSolver
from dynsolvers.utils.wrapping import wrap_angles

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Contract
    "DynamicsSolver",
    "ArgumentPosition",
    # Solvers
    "CartpoleDynamicsSolver",
    # Dynamics
    "cartpole_dynamics",
    "cartpole_jacobians",
    # Scene
    "BaseType",
    "KinematicDescription",
    # Configuration spaces
    "ConfigurationSpace",
    "EuclideanSpace",
    "PeriodicSpace",
    # Parameters
    "CartpoleParameters",
    "PinocchioParameters",
    "parameters_from_dict",
    "load_parameters",
    "describe",
    # Registry
    "available_solvers",
    "create_solver",
    "create_solver_from_config",
    # Errors
    "DynamicsSolverError",
    "ConfigurationError",
    "DimensionError",
    # Evaluation
    "rollout",
    "finite_difference_jacobians",
    "check_derivatives",
    # Utilities
    "wrap_angles",
]
