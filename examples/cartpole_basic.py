"""Basic cart-pole example.

Binds the analytic cart-pole solver, checks its Jacobians against finite
differences and rolls out a short open-loop trajectory.
"""

import math

import torch
import dynsolvers


def main() -> None:
    solver = dynsolvers.create_solver_from_config(
        "CartpoleDynamicsSolver", {"m_c": 1.0, "m_p": 0.1, "l": 0.5, "dt": 0.02}
    )
    solver.assign_scene(dynsolvers.KinematicDescription(num_controlled_joints=2))
    print(dynsolvers.describe(solver.parameters))

    x0 = torch.tensor([0.0, math.pi - 0.1, 0.0, 0.0], dtype=torch.float64)
    u0 = torch.tensor([0.0], dtype=torch.float64)
    print(f"Jacobians exact: {dynsolvers.check_derivatives(solver, x0, u0)}")

    controls = torch.full((50,), 2.0, dtype=torch.float64)
    traj = dynsolvers.rollout(solver, x0, controls)
    final = solver.get_position(traj[-1])
    print(f"Cart at {final[0].item():.3f} m, pole {final[1].item():.3f} rad from upright")


if __name__ == "__main__":
    main()
