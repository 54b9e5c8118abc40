"""Open-loop rollouts with a solver's default discrete step."""

from __future__ import annotations

from typing import Any

import torch

from dynsolvers.solvers._base import DTYPE, DynamicsSolver, as_vector


@torch.no_grad()
def rollout(
    solver: DynamicsSolver,
    initial_state: Any,
    controls: Any,
) -> torch.Tensor:
    """Apply ``simulate_one_step`` once per control row.

    Args:
        solver: A bound solver.
        initial_state: ``(state_dim,)`` starting state.
        controls: ``(T, num_controls)`` control sequence, or ``(T,)`` for
            single-control solvers.

    Returns:
        ``(T + 1, state_dim)`` trajectory including the initial state.
    """
    controls = torch.as_tensor(controls, dtype=DTYPE)
    if controls.dim() == 1:
        controls = controls.unsqueeze(-1)

    time_steps = controls.shape[0]
    state = as_vector(initial_state, solver.state_dim, "initial_state")

    traj = torch.empty(time_steps + 1, solver.state_dim, dtype=DTYPE)
    traj[0] = state
    for t in range(time_steps):
        state = solver.simulate_one_step(state, controls[t])
        traj[t + 1] = state
    return traj
