"""Finite-difference checks of a solver's analytic Jacobians."""

from __future__ import annotations

from typing import Any

import torch

from dynsolvers.solvers._base import DTYPE, DynamicsSolver, as_vector


def finite_difference_jacobians(
    solver: DynamicsSolver,
    x: Any,
    u: Any,
    *,
    eps: float = 1e-6,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Central finite-difference estimates of ``fx`` and ``fu``.

    State perturbations are applied in tangent coordinates through
    ``solver.integrate``, so configurations on a manifold stay valid.

    Returns:
        ``(fx, fu)`` of shapes ``(ndx, ndx)`` and ``(ndx, nu)``.
    """
    x = as_vector(x, solver.state_dim, "x")
    u = as_vector(u, solver.num_controls, "u")
    ndx = solver.ndx
    nu = solver.num_controls

    fx = torch.empty(ndx, ndx, dtype=DTYPE)
    for j in range(ndx):
        e = torch.zeros(ndx, dtype=DTYPE)
        e[j] = 1.0
        f_plus = solver.f(solver.integrate(x, e, eps), u, copy=True)
        f_minus = solver.f(solver.integrate(x, e, -eps), u, copy=True)
        fx[:, j] = (f_plus - f_minus) / (2 * eps)

    fu = torch.empty(ndx, nu, dtype=DTYPE)
    for j in range(nu):
        du = torch.zeros(nu, dtype=DTYPE)
        du[j] = eps
        f_plus = solver.f(x, u + du, copy=True)
        f_minus = solver.f(x, u - du, copy=True)
        fu[:, j] = (f_plus - f_minus) / (2 * eps)

    return fx, fu


def check_derivatives(
    solver: DynamicsSolver,
    x: Any,
    u: Any,
    *,
    eps: float = 1e-6,
    atol: float = 1e-4,
) -> bool:
    """Whether ``fx``/``fu`` match finite differences within *atol*."""
    fx_fd, fu_fd = finite_difference_jacobians(solver, x, u, eps=eps)
    fx, fu = solver.compute_derivatives(x, u)
    return bool(
        torch.allclose(fx, fx_fd, rtol=0.0, atol=atol)
        and torch.allclose(fu, fu_fd, rtol=0.0, atol=atol)
    )
