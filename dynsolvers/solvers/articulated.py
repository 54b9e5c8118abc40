"""Articulated-body solver backed by Pinocchio.

Forward dynamics, its derivatives, inverse dynamics and the configuration
manifold operators are all delegated to Pinocchio. Only fixed-base
mechanisms are supported.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pinocchio as pin
import torch

from dynsolvers.config import PinocchioParameters
from dynsolvers.errors import ConfigurationError
from dynsolvers.manifold import ArgumentPosition, ConfigurationSpace
from dynsolvers.scene import BaseType, KinematicDescription
from dynsolvers.solvers._base import DTYPE, DynamicsSolver

logger = logging.getLogger(__name__)

SUPPORTED_BASE_TYPES = (BaseType.FIXED,)

_PIN_ARGUMENT = {
    ArgumentPosition.ARG0: pin.ArgumentPosition.ARG0,
    ArgumentPosition.ARG1: pin.ArgumentPosition.ARG1,
}


def _to_numpy(t: torch.Tensor) -> np.ndarray:
    return np.ascontiguousarray(t.detach().cpu().numpy(), dtype=np.float64)


def _to_torch(a: Any) -> torch.Tensor:
    return torch.from_numpy(np.array(a, dtype=np.float64))


class PinocchioConfigurationSpace(ConfigurationSpace):
    """Configuration space of a Pinocchio model (``nq >= nv``)."""

    def __init__(self, model: pin.Model) -> None:
        super().__init__(model.nq, model.nv)
        self.model = model

    def difference(self, q0: torch.Tensor, q1: torch.Tensor) -> torch.Tensor:
        return _to_torch(pin.difference(self.model, _to_numpy(q0), _to_numpy(q1)))

    def integrate(self, q: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
        return _to_torch(pin.integrate(self.model, _to_numpy(q), _to_numpy(v)))

    def d_difference(
        self,
        q0: torch.Tensor,
        q1: torch.Tensor,
        arg: ArgumentPosition,
    ) -> torch.Tensor:
        return _to_torch(
            pin.dDifference(
                self.model, _to_numpy(q0), _to_numpy(q1), _PIN_ARGUMENT[arg]
            )
        )

    def neutral(self) -> torch.Tensor:
        return _to_torch(pin.neutral(self.model))


class PinocchioDynamicsSolver(DynamicsSolver):
    """Fixed-base articulated mechanism described by a URDF.

    Dimensions come from the model: ``num_positions = nq``,
    ``num_velocities = num_controls = nv``. Every joint is actuated.

    ``fx`` has the block structure ``[[0, I], [ddq_dq, ddq_dv]]`` and
    ``fu`` is ``[0; ddq_dtau]``. The identity block is written once at
    binding; the other blocks come from a single
    ``computeABADerivatives`` call, whose result is reused when ``fx``
    and ``fu`` are requested at the same ``(x, u)``.

    Args:
        parameters: Solver settings, defaults to ``PinocchioParameters()``.
    """

    type_name = "PinocchioDynamicsSolver"
    parameters_class = PinocchioParameters

    def __init__(self, parameters: PinocchioParameters | None = None) -> None:
        super().__init__(parameters)
        self.model: pin.Model | None = None
        self.data: pin.Data | None = None
        self._derivatives_at: tuple[torch.Tensor, ...] | None = None

    def _bind(self, description: KinematicDescription) -> None:
        if description.base_type not in SUPPORTED_BASE_TYPES:
            raise ConfigurationError(
                f"{self.type_name} supports base types "
                f"{[b.value for b in SUPPORTED_BASE_TYPES]}, "
                f"got {description.base_type.value!r}"
            )
        if not description.urdf:
            raise ConfigurationError(
                f"{self.type_name} needs a URDF in the kinematic description"
            )

        try:
            model = pin.buildModelFromXML(description.urdf)
        except (RuntimeError, ValueError) as e:
            raise ConfigurationError(f"Cannot build Pinocchio model: {e}") from e

        if model.nv != description.num_controlled_joints:
            logger.warning(
                "Kinematic description reports %d controlled joints but the "
                "Pinocchio model has nv=%d",
                description.num_controlled_joints,
                model.nv,
            )

        self.model = model
        self.data = model.createData()
        self._space = PinocchioConfigurationSpace(model)
        self._num_positions = model.nq
        self._num_velocities = model.nv
        self._num_controls = model.nv

    @property
    def control_limits(self) -> tuple[torch.Tensor, torch.Tensor] | None:
        limit = self._parameters.control_limit
        if limit is None:
            return None
        upper = torch.full((self._num_controls,), limit, dtype=DTYPE)
        return -upper, upper

    def _split(self, x: torch.Tensor) -> tuple[np.ndarray, np.ndarray]:
        nq = self._num_positions
        return _to_numpy(x[:nq]), _to_numpy(x[nq:])

    def _compute_f(self, x: torch.Tensor, u: torch.Tensor) -> None:
        q, v = self._split(x)
        ddq = pin.aba(self.model, self.data, q, v, _to_numpy(u))
        nv = self._num_velocities
        self._xdot[:nv] = x[self._num_positions:]
        self._xdot[nv:] = _to_torch(ddq)

    def _compute_derivatives(self, x: torch.Tensor, u: torch.Tensor) -> None:
        nv = self._num_velocities
        if self._derivatives_at is not None:
            last_x, last_u, ddq_dx, ddq_du = self._derivatives_at
            if torch.equal(last_x, x) and torch.equal(last_u, u):
                # Callers may have edited the aliased buffers; restore them
                # from the private copy of the last engine result.
                self._fx[nv:] = ddq_dx
                self._fu[nv:] = ddq_du
                return

        q, v = self._split(x)
        ddq_dq, ddq_dv, ddq_dtau = pin.computeABADerivatives(
            self.model, self.data, q, v, _to_numpy(u)
        )
        self._fx[nv:, :nv] = _to_torch(ddq_dq)
        self._fx[nv:, nv:] = _to_torch(ddq_dv)
        self._fu[nv:, :] = _to_torch(ddq_dtau)
        self._derivatives_at = (
            x.clone(),
            u.clone(),
            self._fx[nv:].clone(),
            self._fu[nv:].clone(),
        )

    def inverse_dynamics(self, x: Any) -> torch.Tensor:
        """Gravity, Coriolis and centrifugal compensation torque at *x*."""
        x = self._check_state(x)
        q, v = self._split(x)
        tau = pin.rnea(
            self.model, self.data, q, v, np.zeros(self._num_velocities)
        )
        return _to_torch(tau)

    def neutral_state(self) -> torch.Tensor:
        """Neutral configuration with zero velocity."""
        self._require_bound()
        return torch.cat(
            [
                self._space.neutral(),
                torch.zeros(self._num_velocities, dtype=DTYPE),
            ]
        )
