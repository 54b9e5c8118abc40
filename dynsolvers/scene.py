"""Kinematic description consumed by ``DynamicsSolver.assign_scene``."""

from __future__ import annotations

import enum
import xml.etree.ElementTree as ET
from dataclasses import dataclass


class BaseType(enum.Enum):
    """How the root of the kinematic tree is attached to the world."""

    FIXED = "fixed"
    PLANAR = "planar"
    FLOATING = "floating"


@dataclass(frozen=True)
class KinematicDescription:
    """Boundary view of a robot model.

    Attributes:
        num_controlled_joints: Number of controlled degrees of freedom.
        base_type: Declared base topology.
        urdf: URDF XML text, required by solvers that build an engine model.
        name: Robot name, informational only.
    """

    num_controlled_joints: int
    base_type: BaseType = BaseType.FIXED
    urdf: str | None = None
    name: str = ""

    @classmethod
    def from_urdf(
        cls,
        urdf: str,
        base_type: BaseType = BaseType.FIXED,
    ) -> KinematicDescription:
        """Build a description from URDF text.

        Every ``<joint>`` whose type is not ``fixed`` counts as controlled.
        """
        root = ET.fromstring(urdf)
        controlled = [
            joint
            for joint in root.iter("joint")
            if joint.get("type", "fixed") != "fixed"
        ]
        return cls(
            num_controlled_joints=len(controlled),
            base_type=base_type,
            urdf=urdf,
            name=root.get("name", ""),
        )
