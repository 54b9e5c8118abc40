"""Contract shared by every dynamics solver."""

from __future__ import annotations

import logging
from typing import Any, ClassVar

import torch

from dynsolvers.errors import ConfigurationError, DimensionError
from dynsolvers.manifold import ArgumentPosition, ConfigurationSpace
from dynsolvers.scene import KinematicDescription

logger = logging.getLogger(__name__)

DTYPE = torch.float64


def as_vector(value: Any, size: int, name: str) -> torch.Tensor:
    """Convert *value* to a flat float64 tensor of exactly *size* entries."""
    vec = torch.as_tensor(value, dtype=DTYPE).reshape(-1)
    if vec.numel() != size:
        raise DimensionError(
            f"{name} has {vec.numel()} entries, expected {size}"
        )
    return vec


class DynamicsSolver:
    """Continuous-time dynamics ``xdot = f(x, u)`` with Jacobians.

    A solver is default-constructed, optionally given a parameter set via
    :meth:`instantiate`, and bound exactly once to a kinematic description
    via :meth:`assign_scene`. After binding, every per-step operation is
    repeatable and only touches the solver's scratch buffers.

    The state is ``[q; v]`` with ``num_positions`` configuration and
    ``num_velocities`` velocity entries. Jacobians and state differences
    live in the tangent space of dimension ``ndx = 2 * num_velocities``.

    Tensors returned by :meth:`f`, :meth:`fx`, :meth:`fu` and
    :meth:`compute_derivatives` alias the solver's buffers and are only
    valid until the next call on the same instance; pass ``copy=True`` to
    get a fresh tensor. Instances are not safe to share across threads.

    Subclasses set ``type_name`` and ``parameters_class`` and implement
    :meth:`_bind`, :meth:`_compute_f` and :meth:`_compute_derivatives`.

    Args:
        parameters: Parameter set, defaults to ``parameters_class()``.
    """

    type_name: ClassVar[str] = ""
    parameters_class: ClassVar[type] = type(None)

    def __init__(self, parameters: Any = None) -> None:
        self._parameters = (
            parameters if parameters is not None else self.parameters_class()
        )
        self._check_parameters(self._parameters)
        self._num_positions = 0
        self._num_velocities = 0
        self._num_controls = 0
        self._space: ConfigurationSpace | None = None
        self._bound = False

        self._xdot: torch.Tensor | None = None
        self._fx: torch.Tensor | None = None
        self._fu: torch.Tensor | None = None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(nq={self._num_positions}, "
            f"nv={self._num_velocities}, nu={self._num_controls}, "
            f"bound={self._bound})"
        )

    # ------------------------------------------------------------------
    # Dimensions and parameters
    # ------------------------------------------------------------------

    @property
    def num_positions(self) -> int:
        return self._num_positions

    @property
    def num_velocities(self) -> int:
        return self._num_velocities

    @property
    def num_controls(self) -> int:
        return self._num_controls

    @property
    def ndx(self) -> int:
        """Tangent (state-derivative) dimension."""
        return 2 * self._num_velocities

    @property
    def state_dim(self) -> int:
        return self._num_positions + self._num_velocities

    @property
    def is_bound(self) -> bool:
        return self._bound

    @property
    def parameters(self) -> Any:
        return self._parameters

    @property
    def dt(self) -> float:
        """Step size used by :meth:`simulate_one_step`."""
        return self._parameters.dt

    @property
    def configuration_space(self) -> ConfigurationSpace:
        self._require_bound()
        return self._space

    @property
    def derivative_buffers(self) -> tuple[torch.Tensor, torch.Tensor]:
        """The ``(fx, fu)`` scratch buffers, without recomputing them."""
        self._require_bound()
        return self._fx, self._fu

    @property
    def control_limits(self) -> tuple[torch.Tensor, torch.Tensor] | None:
        """``(lower, upper)`` control bounds, or ``None`` if unbounded."""
        return None

    def instantiate(self, parameters: Any) -> None:
        """Replace the parameter set. Only allowed before binding."""
        if self._bound:
            raise ConfigurationError(
                f"{self.type_name} is already bound; parameters are fixed"
            )
        self._check_parameters(parameters)
        self._parameters = parameters

    def _check_parameters(self, parameters: Any) -> None:
        if not isinstance(parameters, self.parameters_class):
            raise ConfigurationError(
                f"{self.type_name} expects {self.parameters_class.__name__}, "
                f"got {type(parameters).__name__}"
            )

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def assign_scene(self, description: KinematicDescription) -> None:
        """Bind the solver to a kinematic description.

        Validates the description, fixes the dimensions and allocates the
        scratch buffers. The configuration-rate block of ``fx`` (top-right
        ``nv x nv``, the identity) is written here once.

        Raises:
            ConfigurationError: If the description is incompatible or the
                solver is already bound.
        """
        if self._bound:
            raise ConfigurationError(
                f"{self.type_name} is already bound to a scene; "
                "create a new solver instead of rebinding"
            )
        self._bind(description)

        nv = self._num_velocities
        ndx = self.ndx
        self._xdot = torch.zeros(ndx, dtype=DTYPE)
        self._fx = torch.zeros(ndx, ndx, dtype=DTYPE)
        self._fx[:nv, nv:] = torch.eye(nv, dtype=DTYPE)
        self._fu = torch.zeros(ndx, self._num_controls, dtype=DTYPE)
        self._bound = True

        logger.info(
            "Bound %s to %r: nq=%d nv=%d nu=%d",
            self.type_name,
            description.name,
            self._num_positions,
            self._num_velocities,
            self._num_controls,
        )

    def _bind(self, description: KinematicDescription) -> None:
        """Validate *description*, set dimensions and ``self._space``."""
        raise NotImplementedError

    def _require_bound(self) -> None:
        if not self._bound:
            raise ConfigurationError(
                f"{self.type_name} has no scene; call assign_scene() first"
            )

    def _check_state(self, x: Any, name: str = "x") -> torch.Tensor:
        self._require_bound()
        return as_vector(x, self.state_dim, name)

    def _check_control(self, u: Any) -> torch.Tensor:
        return as_vector(u, self._num_controls, "u")

    # ------------------------------------------------------------------
    # Dynamics and derivatives
    # ------------------------------------------------------------------

    def f(self, x: Any, u: Any, *, copy: bool = False) -> torch.Tensor:
        """Continuous-time state derivative ``[v; a]`` of size ``ndx``."""
        x = self._check_state(x)
        u = self._check_control(u)
        self._compute_f(x, u)
        return self._xdot.clone() if copy else self._xdot

    def compute_derivatives(
        self, x: Any, u: Any, *, copy: bool = False
    ) -> tuple[torch.Tensor, torch.Tensor]:
        """Both Jacobians ``(fx, fu)`` at ``(x, u)`` from one evaluation."""
        x = self._check_state(x)
        u = self._check_control(u)
        self._compute_derivatives(x, u)
        if copy:
            return self._fx.clone(), self._fu.clone()
        return self._fx, self._fu

    def fx(self, x: Any, u: Any, *, copy: bool = False) -> torch.Tensor:
        """Jacobian of :meth:`f` w.r.t. the state, shape ``(ndx, ndx)``."""
        return self.compute_derivatives(x, u, copy=copy)[0]

    def fu(self, x: Any, u: Any, *, copy: bool = False) -> torch.Tensor:
        """Jacobian of :meth:`f` w.r.t. the control, shape ``(ndx, nu)``."""
        return self.compute_derivatives(x, u, copy=copy)[1]

    def _compute_f(self, x: torch.Tensor, u: torch.Tensor) -> None:
        """Write ``f(x, u)`` into ``self._xdot``."""
        raise NotImplementedError

    def _compute_derivatives(self, x: torch.Tensor, u: torch.Tensor) -> None:
        """Write the non-constant blocks of ``self._fx`` and ``self._fu``."""
        raise NotImplementedError

    def inverse_dynamics(self, x: Any) -> torch.Tensor:
        """Control holding the state with zero commanded acceleration."""
        raise NotImplementedError(
            f"{self.type_name} does not provide inverse dynamics"
        )

    def get_position(self, x: Any) -> torch.Tensor:
        """Configuration read-out; the raw configuration block by default."""
        x = self._check_state(x)
        return x[: self._num_positions].clone()

    def clamp_control(self, u: Any) -> torch.Tensor:
        """Clamp each control entry to :attr:`control_limits`."""
        u = self._check_control(u)
        limits = self.control_limits
        if limits is None:
            return u
        lower, upper = limits
        return torch.max(torch.min(u, upper), lower)

    # ------------------------------------------------------------------
    # State-space operations
    # ------------------------------------------------------------------

    def state_delta(self, x_1: Any, x_2: Any) -> torch.Tensor:
        """Tangent vector ``x_1 ⊖ x_2`` of size ``ndx``."""
        x_1 = self._check_state(x_1, "x_1")
        x_2 = self._check_state(x_2, "x_2")
        nq = self._num_positions

        dq = self._space.difference(x_2[:nq], x_1[:nq])
        dv = x_1[nq:] - x_2[nq:]
        return torch.cat([dq, dv])

    def d_state_delta(
        self,
        x_1: Any,
        x_2: Any,
        first_or_second: ArgumentPosition | int,
    ) -> torch.Tensor:
        """Jacobian of :meth:`state_delta` w.r.t. ``x_1`` or ``x_2``.

        Args:
            x_1: First state.
            x_2: Second state.
            first_or_second: ``ARG0`` for ``x_1``, ``ARG1`` for ``x_2``.

        Returns:
            ``(ndx, ndx)`` Jacobian in tangent coordinates.
        """
        x_1 = self._check_state(x_1, "x_1")
        x_2 = self._check_state(x_2, "x_2")
        try:
            arg = ArgumentPosition(first_or_second)
        except ValueError:
            raise DimensionError(
                "Can only take the derivative w.r.t. x_1 or x_2 "
                f"(ARG0 or ARG1), got {first_or_second!r}"
            ) from None

        nq = self._num_positions
        nv = self._num_velocities
        J = torch.eye(self.ndx, dtype=DTYPE)

        # state_delta(x_1, x_2) = difference(q_2, q_1), so x_1 is the
        # second argument of the configuration difference and vice versa.
        if arg is ArgumentPosition.ARG0:
            J[:nv, :nv] = self._space.d_difference(
                x_2[:nq], x_1[:nq], ArgumentPosition.ARG1
            )
        else:
            J[:nv, :nv] = self._space.d_difference(
                x_2[:nq], x_1[:nq], ArgumentPosition.ARG0
            )
            J[nv:, nv:] *= -1.0
        return J

    def integrate(self, x: Any, dx: Any, dt: float) -> torch.Tensor:
        """Advance *x* by the tangent increment ``dt * dx``."""
        x = self._check_state(x)
        dx = as_vector(dx, self.ndx, "dx")
        nq = self._num_positions
        nv = self._num_velocities

        step = dt * dx
        q = self._space.integrate(x[:nq], step[:nv])
        v = x[nq:] + step[nv:]
        return torch.cat([q, v])

    def simulate_one_step(self, x: Any, u: Any) -> torch.Tensor:
        """Forward-Euler step ``integrate(x, f(x, u), dt)``."""
        x = self._check_state(x)
        return self.integrate(x, self.f(x, u), self.dt)
