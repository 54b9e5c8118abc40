"""Closed-form single-pole-on-cart solver."""

from __future__ import annotations

import math
from typing import Any

import torch

from dynsolvers.config import CartpoleParameters
from dynsolvers.dynamics.cartpole import cartpole_dynamics, cartpole_jacobians
from dynsolvers.errors import ConfigurationError
from dynsolvers.manifold import EuclideanSpace, PeriodicSpace
from dynsolvers.scene import KinematicDescription
from dynsolvers.solvers._base import DTYPE, DynamicsSolver


class CartpoleDynamicsSolver(DynamicsSolver):
    """4-D cart-pole with analytic dynamics and Jacobians.

    State: ``[x, theta, x_dot, theta_dot]``, control: horizontal force on
    the cart. ``theta = 0`` is the hanging position.

    Dimensions are fixed (2 positions, 2 velocities, 1 control). The
    scene check only verifies that the kinematic description has two
    controlled joints; it does not identify the mechanism.

    ``state_delta`` is plain subtraction unless ``wrap_angle`` is set in
    the parameters, in which case the pole-angle difference is wrapped.

    Args:
        parameters: Physical constants, defaults to ``CartpoleParameters()``.
    """

    type_name = "CartpoleDynamicsSolver"
    parameters_class = CartpoleParameters

    def __init__(self, parameters: CartpoleParameters | None = None) -> None:
        super().__init__(parameters)
        self._num_positions = 2
        self._num_velocities = 2
        self._num_controls = 1

    def _bind(self, description: KinematicDescription) -> None:
        if description.num_controlled_joints != 2:
            raise ConfigurationError(
                "Robot model may not be a cart-pole: expected 2 controlled "
                f"joints, got {description.num_controlled_joints}"
            )
        if self._parameters.wrap_angle:
            self._space = PeriodicSpace(2, wrap_dims=(1,))
        else:
            self._space = EuclideanSpace(2)

    @property
    def _constants(self) -> dict[str, float]:
        p = self._parameters
        return {"m_c": p.m_c, "m_p": p.m_p, "l": p.l, "g": p.g}

    @property
    def control_limits(self) -> tuple[torch.Tensor, torch.Tensor] | None:
        max_force = self._parameters.max_force
        if max_force is None:
            return None
        return (
            torch.tensor([-max_force], dtype=DTYPE),
            torch.tensor([max_force], dtype=DTYPE),
        )

    def _compute_f(self, x: torch.Tensor, u: torch.Tensor) -> None:
        xdot = cartpole_dynamics(x.unsqueeze(0), u.unsqueeze(0), **self._constants)
        self._xdot.copy_(xdot[0])

    def _compute_derivatives(self, x: torch.Tensor, u: torch.Tensor) -> None:
        fx, fu = cartpole_jacobians(
            x.unsqueeze(0), u.unsqueeze(0), **self._constants
        )
        # Rows 0-1 (configuration rate) are constant and set at binding.
        self._fx[2:].copy_(fx[0, 2:])
        self._fu[2:].copy_(fu[0, 2:])

    def inverse_dynamics(self, x: Any) -> torch.Tensor:
        """Cart force that zeroes the cart acceleration at *x*.

        The system is under-actuated, so the pole acceleration is in
        general not zero under this force.
        """
        x = self._check_state(x)
        p = self._parameters
        theta = x[1]
        theta_dot = x[3]
        force = -p.m_p * torch.sin(theta) * (
            p.l * theta_dot**2 + p.g * torch.cos(theta)
        )
        return force.reshape(1)

    def get_position(self, x: Any) -> torch.Tensor:
        """``(cart position, pi - theta)``: pole angle measured from upright."""
        x = self._check_state(x)
        return torch.stack([x[0], math.pi - x[1]])
