"""Tests for the analytic cart-pole solver."""

import math

import torch
import pytest

from dynsolvers import (
    ArgumentPosition,
    CartpoleDynamicsSolver,
    CartpoleParameters,
    ConfigurationError,
    DimensionError,
    KinematicDescription,
    check_derivatives,
)


def make_solver(**params) -> CartpoleDynamicsSolver:
    solver = CartpoleDynamicsSolver(CartpoleParameters(**params))
    solver.assign_scene(KinematicDescription(num_controlled_joints=2))
    return solver


@pytest.fixture
def solver() -> CartpoleDynamicsSolver:
    return make_solver()


class TestBinding:
    def test_two_joints_binds(self) -> None:
        solver = CartpoleDynamicsSolver()
        solver.assign_scene(KinematicDescription(num_controlled_joints=2))
        assert solver.is_bound
        assert solver.num_positions == 2
        assert solver.num_velocities == 2
        assert solver.num_controls == 1
        assert solver.ndx == 4
        assert solver.state_dim == 4

    @pytest.mark.parametrize("joints", [0, 1, 3, 7])
    def test_wrong_joint_count_fails(self, joints: int) -> None:
        solver = CartpoleDynamicsSolver()
        with pytest.raises(ConfigurationError):
            solver.assign_scene(KinematicDescription(num_controlled_joints=joints))
        assert not solver.is_bound

    def test_rebinding_fails(self, solver: CartpoleDynamicsSolver) -> None:
        with pytest.raises(ConfigurationError):
            solver.assign_scene(KinematicDescription(num_controlled_joints=2))

    def test_unbound_calls_fail(self) -> None:
        solver = CartpoleDynamicsSolver()
        with pytest.raises(ConfigurationError):
            solver.f(torch.zeros(4), torch.zeros(1))

    def test_fx_buffer_after_binding(self, solver: CartpoleDynamicsSolver) -> None:
        fx, fu = solver.derivative_buffers
        expected = torch.zeros(4, 4, dtype=torch.float64)
        expected[:2, 2:] = torch.eye(2, dtype=torch.float64)
        assert torch.equal(fx, expected)
        assert torch.equal(fu, torch.zeros(4, 1, dtype=torch.float64))

    def test_type_name(self) -> None:
        assert CartpoleDynamicsSolver.type_name == "CartpoleDynamicsSolver"


class TestDynamics:
    def test_upright_equilibrium(self, solver: CartpoleDynamicsSolver) -> None:
        xdot = solver.f([0.0, math.pi, 0.0, 0.0], [0.0])
        assert torch.allclose(xdot, torch.zeros(4, dtype=torch.float64), atol=1e-12)

    def test_wrong_state_size(self, solver: CartpoleDynamicsSolver) -> None:
        with pytest.raises(DimensionError):
            solver.f(torch.zeros(3), torch.zeros(1))
        with pytest.raises(DimensionError):
            solver.fx(torch.zeros(5), torch.zeros(1))

    def test_wrong_control_size(self, solver: CartpoleDynamicsSolver) -> None:
        with pytest.raises(DimensionError):
            solver.f(torch.zeros(4), torch.zeros(2))
        with pytest.raises(DimensionError):
            solver.fu(torch.zeros(4), torch.zeros(0))

    def test_f_aliases_buffer(self, solver: CartpoleDynamicsSolver) -> None:
        a = solver.f([0.0, 0.3, 0.0, 0.0], [1.0])
        first = a.clone()
        b = solver.f([0.0, -0.3, 0.0, 0.0], [1.0])
        assert a is b
        assert not torch.equal(a, first)

    def test_copy_returns_fresh_tensor(self, solver: CartpoleDynamicsSolver) -> None:
        a = solver.f([0.0, 0.3, 0.0, 0.0], [1.0], copy=True)
        b = solver.f([0.0, -0.3, 0.0, 0.0], [1.0], copy=True)
        assert a is not b
        assert not torch.equal(a, b)

    def test_jacobian_shapes(self, solver: CartpoleDynamicsSolver) -> None:
        x = [0.1, 0.2, 0.3, 0.4]
        assert solver.fx(x, [0.5]).shape == (4, 4)
        assert solver.fu(x, [0.5]).shape == (4, 1)

    def test_identity_block_survives(self, solver: CartpoleDynamicsSolver) -> None:
        fx = solver.fx([0.1, 1.2, -0.3, 2.0], [3.0])
        assert torch.equal(fx[:2, 2:], torch.eye(2, dtype=torch.float64))
        assert torch.equal(fx[:2, :2], torch.zeros(2, 2, dtype=torch.float64))
        assert fx[2:].abs().sum() > 0

    def test_edited_buffers_are_recomputed(
        self, solver: CartpoleDynamicsSolver
    ) -> None:
        x = [0.1, 1.2, -0.3, 2.0]
        expected = solver.fx(x, [3.0], copy=True)
        J = solver.fx(x, [3.0])
        J[2:] *= 0.01
        assert torch.allclose(solver.fx(x, [3.0]), expected)

    def test_jacobians_match_finite_differences(
        self, solver: CartpoleDynamicsSolver
    ) -> None:
        gen = torch.Generator().manual_seed(11)
        for _ in range(25):
            x = torch.rand(4, generator=gen, dtype=torch.float64) * 4 - 2
            x[1] = x[1] * math.pi
            u = torch.rand(1, generator=gen, dtype=torch.float64) * 20 - 10
            assert check_derivatives(solver, x, u, eps=1e-6, atol=1e-4)

    def test_other_parameters(self) -> None:
        solver = make_solver(m_c=2.5, m_p=0.7, l=1.3, g=3.7)
        assert check_derivatives(solver, [0.3, 2.0, -1.0, 0.5], [-4.0])

    def test_inverse_dynamics_zeroes_cart_acceleration(
        self, solver: CartpoleDynamicsSolver
    ) -> None:
        x = torch.tensor([0.0, 0.7, 0.2, -1.5], dtype=torch.float64)
        u = solver.inverse_dynamics(x)
        assert u.shape == (1,)
        assert solver.f(x, u)[2].item() == pytest.approx(0.0, abs=1e-12)


class TestStateOperations:
    def test_get_position_remaps_angle(self, solver: CartpoleDynamicsSolver) -> None:
        pos = solver.get_position([1.5, 0.5, 3.0, 4.0])
        assert torch.allclose(
            pos, torch.tensor([1.5, math.pi - 0.5], dtype=torch.float64)
        )

    def test_state_delta_is_subtraction(self, solver: CartpoleDynamicsSolver) -> None:
        x1 = torch.tensor([1.0, math.pi - 0.1, 0.5, 0.0], dtype=torch.float64)
        x2 = torch.tensor([0.0, -math.pi + 0.1, 0.0, 1.0], dtype=torch.float64)
        assert torch.allclose(solver.state_delta(x1, x2), x1 - x2)

    def test_state_delta_self_is_zero(self, solver: CartpoleDynamicsSolver) -> None:
        x = torch.tensor([0.3, 5.0, -2.0, 1.0], dtype=torch.float64)
        assert torch.equal(solver.state_delta(x, x), torch.zeros(4, dtype=torch.float64))

    def test_wrapped_state_delta(self) -> None:
        solver = make_solver(wrap_angle=True)
        x1 = torch.tensor([1.0, math.pi - 0.1, 0.5, 0.0], dtype=torch.float64)
        x2 = torch.tensor([0.0, -math.pi + 0.1, 0.0, 1.0], dtype=torch.float64)
        delta = solver.state_delta(x1, x2)
        expected = torch.tensor([1.0, -0.2, 0.5, -1.0], dtype=torch.float64)
        assert torch.allclose(delta, expected)

    def test_round_trip(self, solver: CartpoleDynamicsSolver) -> None:
        x1 = torch.tensor([0.4, 2.0, -1.0, 0.3], dtype=torch.float64)
        x2 = torch.tensor([-1.0, -0.5, 2.0, 0.0], dtype=torch.float64)
        back = solver.integrate(x2, solver.state_delta(x1, x2), 1.0)
        assert torch.allclose(back, x1)

    def test_zero_increment_is_identity(self, solver: CartpoleDynamicsSolver) -> None:
        x = torch.tensor([0.4, 2.0, -1.0, 0.3], dtype=torch.float64)
        assert torch.equal(solver.integrate(x, torch.zeros(4), 0.5), x)

    def test_d_state_delta(self, solver: CartpoleDynamicsSolver) -> None:
        x1 = torch.randn(4, dtype=torch.float64)
        x2 = torch.randn(4, dtype=torch.float64)
        eye = torch.eye(4, dtype=torch.float64)
        assert torch.equal(solver.d_state_delta(x1, x2, ArgumentPosition.ARG0), eye)
        assert torch.equal(solver.d_state_delta(x1, x2, ArgumentPosition.ARG1), -eye)

    @pytest.mark.parametrize("bad", [2, -1, "ARG0"])
    def test_d_state_delta_bad_selector(
        self, solver: CartpoleDynamicsSolver, bad
    ) -> None:
        with pytest.raises(DimensionError):
            solver.d_state_delta(torch.zeros(4), torch.zeros(4), bad)

    def test_wrong_tangent_size(self, solver: CartpoleDynamicsSolver) -> None:
        with pytest.raises(DimensionError):
            solver.integrate(torch.zeros(4), torch.zeros(3), 1.0)


class TestDiscreteStep:
    def test_simulate_one_step_is_euler(self) -> None:
        solver = make_solver(dt=0.05)
        x = torch.tensor([0.0, 0.4, 0.1, -0.2], dtype=torch.float64)
        u = torch.tensor([2.0], dtype=torch.float64)
        expected = x + 0.05 * solver.f(x, u, copy=True)
        assert torch.allclose(solver.simulate_one_step(x, u), expected)

    def test_euler_consistency(self) -> None:
        x = torch.tensor([0.0, 0.4, 0.1, -0.2], dtype=torch.float64)
        u = torch.tensor([2.0], dtype=torch.float64)
        for dt in (1e-1, 1e-2, 1e-3, 1e-4):
            solver = make_solver(dt=dt)
            rate = (solver.simulate_one_step(x, u) - x) / dt
            assert torch.allclose(rate, solver.f(x, u), atol=1e-8)

    def test_control_limits(self) -> None:
        assert make_solver().control_limits is None
        solver = make_solver(max_force=10.0)
        lower, upper = solver.control_limits
        assert lower.item() == -10.0
        assert upper.item() == 10.0
        assert solver.clamp_control([25.0]).item() == 10.0
        assert solver.clamp_control([-3.0]).item() == -3.0
