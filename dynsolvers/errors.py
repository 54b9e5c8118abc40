"""Exceptions raised by dynamics solvers."""

from __future__ import annotations


class DynamicsSolverError(Exception):
    """Base class for all solver errors."""


class ConfigurationError(DynamicsSolverError, ValueError):
    """Scene, parameters or lifecycle state incompatible with a solver."""


class DimensionError(DynamicsSolverError, ValueError):
    """Vector size or argument selector does not match the bound solver."""
