from dynsolvers.utils.wrapping import wrap_angles

__all__ = [
    "wrap_angles",
]
