"""Dynamics solvers.

``dynsolvers.solvers.articulated`` (the Pinocchio-backed solver) is not
imported here so that Pinocchio stays an optional dependency.
"""

from dynsolvers.solvers._base import DynamicsSolver
from dynsolvers.solvers.cartpole import CartpoleDynamicsSolver

__all__ = [
    "DynamicsSolver",
    "CartpoleDynamicsSolver",
]
