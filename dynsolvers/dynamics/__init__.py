from dynsolvers.dynamics.cartpole import cartpole_dynamics, cartpole_jacobians

__all__ = [
    "cartpole_dynamics",
    "cartpole_jacobians",
]
