"""
Puzzle components - data-only component definitions.

All components are Pydantic models containing only data and small
derived properties. Logic lives in puzzle.systems.
"""

from puzzle.components.transform import Vector3, Quaternion, Transform, UP
from puzzle.components.physics import BoxCollider, CollisionLayer
from puzzle.components.mechanisms import (
    Box,
    BoxRole,
    Generator,
    IndicatorColor,
    Mirror,
    MirrorMode,
    MirrorDirection,
    WaterRise,
    Player,
)

__all__ = [
    # Transform
    "Vector3",
    "Quaternion",
    "Transform",
    "UP",
    # Physics
    "BoxCollider",
    "CollisionLayer",
    # Mechanisms
    "Box",
    "BoxRole",
    "Generator",
    "IndicatorColor",
    "Mirror",
    "MirrorMode",
    "MirrorDirection",
    "WaterRise",
    "Player",
]
