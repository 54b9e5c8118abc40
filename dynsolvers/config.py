"""Typed parameter sets for the dynamics solvers, with a strict JSON loader."""

from __future__ import annotations

import json
import logging
import math
import types
import typing
from dataclasses import MISSING, dataclass, fields
from pathlib import Path
from typing import Any, Mapping, TypeVar

from dynsolvers.errors import ConfigurationError

logger = logging.getLogger(__name__)

P = TypeVar("P")


def _require_positive(owner: str, name: str, value: float) -> None:
    if not math.isfinite(value) or value <= 0.0:
        raise ConfigurationError(
            f"{owner}.{name} must be finite and positive, got {value!r}"
        )


@dataclass(frozen=True)
class CartpoleParameters:
    """Physical constants of the single-pole-on-cart model.

    Attributes:
        m_c: Cart mass.
        m_p: Pole mass.
        l: Pole length.
        g: Gravitational acceleration (magnitude).
        dt: Step size of ``simulate_one_step``.
        max_force: Symmetric force bound reported by ``control_limits``.
        wrap_angle: Wrap the pole-angle difference to ``[-pi, pi)`` in
            ``state_delta`` instead of plain subtraction.
    """

    m_c: float = 1.0
    m_p: float = 0.1
    l: float = 0.5
    g: float = 9.81
    dt: float = 0.01
    max_force: float | None = None
    wrap_angle: bool = False

    def __post_init__(self) -> None:
        name = type(self).__name__
        for field_name in ("m_c", "m_p", "l", "dt"):
            _require_positive(name, field_name, getattr(self, field_name))
        if not math.isfinite(self.g) or self.g < 0.0:
            raise ConfigurationError(
                f"{name}.g must be finite and non-negative, got {self.g!r}"
            )
        if self.max_force is not None:
            _require_positive(name, "max_force", self.max_force)


@dataclass(frozen=True)
class PinocchioParameters:
    """Settings of the articulated-body model.

    Attributes:
        dt: Step size of ``simulate_one_step``.
        control_limit: Symmetric per-joint effort bound reported by
            ``control_limits``.
    """

    dt: float = 0.01
    control_limit: float | None = None

    def __post_init__(self) -> None:
        name = type(self).__name__
        _require_positive(name, "dt", self.dt)
        if self.control_limit is not None:
            _require_positive(name, "control_limit", self.control_limit)


def _coerce(owner: str, name: str, hint: Any, value: Any) -> Any:
    """Convert a plain JSON value to the annotated field type."""
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        args = typing.get_args(hint)
        if value is None and type(None) in args:
            return None
        hint = next(a for a in args if a is not type(None))
    if hint is bool:
        if not isinstance(value, bool):
            raise ConfigurationError(
                f"{owner}.{name} expects a boolean, got {value!r}"
            )
        return value
    if hint is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(
                f"{owner}.{name} expects a number, got {value!r}"
            )
        return float(value)
    return value


def parameters_from_dict(cls: type[P], data: Mapping[str, Any]) -> P:
    """Build a parameter object of type *cls* from a plain mapping.

    Unknown keys are rejected rather than ignored, and values are checked
    against the annotated field types.

    Raises:
        ConfigurationError: On unknown keys, missing required keys, or
            values of the wrong type or range.
    """
    owner = cls.__name__
    hints = typing.get_type_hints(cls)
    known = {f.name: f for f in fields(cls)}

    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigurationError(
            f"Unknown {owner} field(s): {unknown}. Known: {sorted(known)}"
        )

    missing = sorted(
        name
        for name, f in known.items()
        if name not in data
        and f.default is MISSING
        and f.default_factory is MISSING
    )
    if missing:
        raise ConfigurationError(f"Missing required {owner} field(s): {missing}")

    kwargs = {
        name: _coerce(owner, name, hints[name], value)
        for name, value in data.items()
    }
    logger.debug("Building %s from %s", owner, kwargs)
    return cls(**kwargs)


def load_parameters(cls: type[P], path: str | Path) -> P:
    """Read a JSON object from *path* and build *cls* from it."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Parameter file not found: {path}")

    with open(path) as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Parameter file {path} must contain a JSON object"
        )
    return parameters_from_dict(cls, data)


def describe(parameters: Any) -> str:
    """Readable multi-line summary of a parameter set."""
    lines = [f"{type(parameters).__name__}:"]
    for f in fields(parameters):
        lines.append(f"  {f.name} = {getattr(parameters, f.name)!r}")
    return "\n".join(lines)
