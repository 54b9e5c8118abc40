"""Cart-pole dynamics and their closed-form Jacobians."""

from __future__ import annotations

import torch


def cartpole_dynamics(
    x: torch.Tensor,
    u: torch.Tensor,
    *,
    m_c: float = 1.0,
    m_p: float = 0.1,
    l: float = 0.5,
    g: float = 9.81,
) -> torch.Tensor:
    """Batched cart-pole dynamics.

    The pole angle is measured from the hanging position, so ``theta = pi``
    is the upright equilibrium.

    Args:
        x: States of shape ``(B, 4)``: ``[x, theta, x_dot, theta_dot]``.
        u: Controls of shape ``(B,)`` or ``(B, 1)``: horizontal force.
        m_c: Cart mass.
        m_p: Pole mass.
        l: Pole length.
        g: Gravitational acceleration.

    Returns:
        State derivatives of shape ``(B, 4)``.
    """
    theta = x[:, 1]
    theta_dot = x[:, 3]
    F = u.reshape(-1)

    sin_th = torch.sin(theta)
    cos_th = torch.cos(theta)
    theta_dot_sq = theta_dot**2
    denom = m_c + m_p * sin_th**2

    x_ddot = (F + m_p * sin_th * (l * theta_dot_sq + g * cos_th)) / denom
    theta_ddot = -(
        l * m_p * cos_th * sin_th * theta_dot_sq
        + F * cos_th
        + (m_c + m_p) * g * sin_th
    ) / (l * denom)

    dxdt = torch.empty_like(x)
    dxdt[:, 0] = x[:, 2]
    dxdt[:, 1] = theta_dot
    dxdt[:, 2] = x_ddot
    dxdt[:, 3] = theta_ddot
    return dxdt


def cartpole_jacobians(
    x: torch.Tensor,
    u: torch.Tensor,
    *,
    m_c: float = 1.0,
    m_p: float = 0.1,
    l: float = 0.5,
    g: float = 9.81,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Exact partial derivatives of :func:`cartpole_dynamics`.

    Args:
        x: States of shape ``(B, 4)``: ``[x, theta, x_dot, theta_dot]``.
        u: Controls of shape ``(B,)`` or ``(B, 1)``.
        m_c: Cart mass.
        m_p: Pole mass.
        l: Pole length.
        g: Gravitational acceleration.

    Returns:
        ``(fx, fu)`` of shapes ``(B, 4, 4)`` and ``(B, 4, 1)``.
    """
    theta = x[:, 1]
    tdot = x[:, 3]
    F = u.reshape(-1)

    sin_th = torch.sin(theta)
    cos_th = torch.cos(theta)
    tdot_sq = tdot**2
    denom = m_c + m_p * sin_th**2
    denom_l = l * m_c + l * m_p * sin_th**2

    B = x.shape[0]
    fx = torch.zeros(B, 4, 4, dtype=x.dtype, device=x.device)
    fx[:, 0, 2] = 1.0
    fx[:, 1, 3] = 1.0

    fx[:, 2, 1] = (
        -2 * m_p * (m_p * (g * cos_th + l * tdot_sq) * sin_th + F)
        * sin_th * cos_th / denom**2
        + (-g * m_p * sin_th**2 + m_p * (g * cos_th + l * tdot_sq) * cos_th)
        / denom
    )
    fx[:, 2, 3] = 2 * l * m_p * tdot * sin_th / denom

    fx[:, 3, 1] = (
        -2 * l * m_p
        * (
            -g * (m_c + m_p) * sin_th
            - l * m_p * tdot_sq * sin_th * cos_th
            - F * cos_th
        )
        * sin_th * cos_th / denom_l**2
        + (
            -g * (m_c + m_p) * cos_th
            + l * m_p * tdot_sq * sin_th**2
            - l * m_p * tdot_sq * cos_th**2
            + F * sin_th
        )
        / denom_l
    )
    fx[:, 3, 3] = -2 * l * m_p * tdot * sin_th * cos_th / denom_l

    fu = torch.zeros(B, 4, 1, dtype=x.dtype, device=x.device)
    fu[:, 2, 0] = 1.0 / denom
    fu[:, 3, 0] = -cos_th / denom_l
    return fx, fu
