"""Articulated-body example.

Loads a URDF (given on the command line), binds the Pinocchio solver and
prints the gravity-compensation torque at the neutral configuration.
Requires the ``pinocchio`` extra.
"""

import argparse
from pathlib import Path

import dynsolvers
from dynsolvers.solvers.articulated import PinocchioDynamicsSolver


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("urdf", type=Path, help="Fixed-base robot URDF")
    parser.add_argument("--dt", type=float, default=0.01)
    args = parser.parse_args()

    solver = PinocchioDynamicsSolver(dynsolvers.PinocchioParameters(dt=args.dt))
    solver.assign_scene(
        dynsolvers.KinematicDescription.from_urdf(args.urdf.read_text())
    )
    print(solver)

    x = solver.neutral_state()
    tau = solver.inverse_dynamics(x)
    print(f"Holding torque at neutral: {tau.tolist()}")

    fx, fu = solver.compute_derivatives(x, tau)
    print(f"fx {tuple(fx.shape)}, fu {tuple(fu.shape)}")


if __name__ == "__main__":
    main()
