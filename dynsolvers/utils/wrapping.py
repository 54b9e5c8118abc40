"""Angle wrapping utilities for periodic configuration coordinates."""

from __future__ import annotations

import math

import torch

_TWO_PI = 2 * math.pi


def wrap_angles(
    tensor: torch.Tensor,
    dims: tuple[int, ...] = (0,),
    *,
    inplace: bool = False,
) -> torch.Tensor:
    """Wrap specified coordinates of a tensor to ``[-pi, pi)``.

    Works on any tensor whose last axis is the coordinate axis, so a
    single vector ``(n,)`` and a batch ``(B, n)`` are handled alike.

    Args:
        tensor: Input tensor with coordinates along the last axis.
        dims: Indices (into the last axis) that should be wrapped.
        inplace: If True, modify the tensor in place (caller must own it).

    Returns:
        A tensor with the specified coordinates wrapped.
    """
    if not dims:
        return tensor
    result = tensor if inplace else tensor.clone()
    for d in dims:
        result[..., d] = torch.remainder(result[..., d] + math.pi, _TWO_PI) - math.pi
    return result
