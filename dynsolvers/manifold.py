"""Configuration spaces: difference, integration and difference Jacobians.

A configuration space maps between configurations ``q`` (``nq`` entries)
and tangent vectors (``nv`` entries). ``difference(q0, q1)`` returns the
tangent vector ``q1 ⊖ q0`` that ``integrate(q0, .)`` maps back onto ``q1``.
"""

from __future__ import annotations

import enum

import torch

from dynsolvers.utils.wrapping import wrap_angles


class ArgumentPosition(enum.Enum):
    """Selects the argument a difference Jacobian is taken against."""

    ARG0 = 0
    ARG1 = 1


class ConfigurationSpace:
    """Interface shared by all configuration spaces.

    Args:
        nq: Configuration dimension.
        nv: Tangent dimension.
    """

    def __init__(self, nq: int, nv: int) -> None:
        self.nq = nq
        self.nv = nv

    def difference(self, q0: torch.Tensor, q1: torch.Tensor) -> torch.Tensor:
        raise NotImplementedError

    def integrate(self, q: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
        raise NotImplementedError

    def d_difference(
        self,
        q0: torch.Tensor,
        q1: torch.Tensor,
        arg: ArgumentPosition,
    ) -> torch.Tensor:
        raise NotImplementedError


class EuclideanSpace(ConfigurationSpace):
    """``R^n``: plain subtraction and addition."""

    def __init__(self, n: int) -> None:
        super().__init__(n, n)

    def difference(self, q0: torch.Tensor, q1: torch.Tensor) -> torch.Tensor:
        return q1 - q0

    def integrate(self, q: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
        return q + v

    def d_difference(
        self,
        q0: torch.Tensor,
        q1: torch.Tensor,
        arg: ArgumentPosition,
    ) -> torch.Tensor:
        eye = torch.eye(self.nv, dtype=q0.dtype, device=q0.device)
        return -eye if arg is ArgumentPosition.ARG0 else eye


class PeriodicSpace(EuclideanSpace):
    """``R^n`` where the coordinates in *wrap_dims* are angles.

    Differences of angular coordinates are wrapped to ``[-pi, pi)``, so
    the geodesic (shortest) difference is returned. ``integrate`` does not
    normalize, hence ``integrate(q0, difference(q0, q1))`` equals ``q1``
    only modulo ``2*pi`` on those coordinates. The Jacobians equal the
    Euclidean ones away from the wrap point.

    Args:
        n: Configuration dimension.
        wrap_dims: Indices of the angular coordinates.
    """

    def __init__(self, n: int, wrap_dims: tuple[int, ...]) -> None:
        super().__init__(n)
        self.wrap_dims = tuple(wrap_dims)

    def difference(self, q0: torch.Tensor, q1: torch.Tensor) -> torch.Tensor:
        return wrap_angles(q1 - q0, self.wrap_dims, inplace=True)
