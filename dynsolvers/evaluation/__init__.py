from dynsolvers.evaluation.derivatives import (
    check_derivatives,
    finite_difference_jacobians,
)
from dynsolvers.evaluation.simulate import rollout

__all__ = [
    "check_derivatives",
    "finite_difference_jacobians",
    "rollout",
]
