"""
Transform components - position and rotation in 3D world space.
"""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np

from stage.core.component import Component


class Vector3(NamedTuple):
    """Immutable 3D vector (world units)."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @staticmethod
    def from_array(values: np.ndarray) -> Vector3:
        """Build a vector from a numpy array of length 3."""
        return Vector3(float(values[0]), float(values[1]), float(values[2]))

    def to_array(self) -> np.ndarray:
        """Get the vector as a float64 numpy array."""
        return np.array(self, dtype=np.float64)

    def distance_to(self, other: Vector3) -> float:
        """Euclidean distance to another vector."""
        return float(np.linalg.norm(self.to_array() - other.to_array()))

    def normalized(self) -> Vector3:
        """Get a unit-length copy."""
        arr = self.to_array()
        length = np.linalg.norm(arr)
        if length == 0:
            raise ValueError("Cannot normalize a zero vector")
        return Vector3.from_array(arr / length)


UP = Vector3(0.0, 1.0, 0.0)


class Quaternion(NamedTuple):
    """
    Immutable rotation quaternion, stored as (x, y, z, w).

    Snapshots copy quaternions verbatim, so a restored mirror carries
    exactly the rotation it was saved with.
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @staticmethod
    def identity() -> Quaternion:
        return Quaternion(0.0, 0.0, 0.0, 1.0)

    @staticmethod
    def from_axis_angle(axis: Vector3, degrees: float) -> Quaternion:
        """Rotation of `degrees` around `axis` (right-handed)."""
        unit = axis.normalized()
        half = math.radians(degrees) / 2.0
        s = math.sin(half)
        return Quaternion(unit.x * s, unit.y * s, unit.z * s, math.cos(half))

    def inverse(self) -> Quaternion:
        """Inverse rotation (assumes a unit quaternion)."""
        return Quaternion(-self.x, -self.y, -self.z, self.w)

    def to_matrix(self) -> np.ndarray:
        """3x3 rotation matrix."""
        x, y, z, w = self
        return np.array([
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ], dtype=np.float64)

    def rotate(self, vector: Vector3) -> Vector3:
        """Apply this rotation to a vector."""
        return Vector3.from_array(self.to_matrix() @ vector.to_array())

    def angle_to(self, other: Quaternion) -> float:
        """Smallest angle in degrees between two rotations."""
        dot = abs(float(np.dot(np.array(self), np.array(other))))
        return math.degrees(2.0 * math.acos(min(1.0, dot)))


class Transform(Component):
    """
    Position and orientation in world space.

    Attributes:
        position: World position
        rotation: World rotation
    """
    position: Vector3 = Vector3()
    rotation: Quaternion = Quaternion()

    def move_to(self, position: Vector3) -> None:
        """Move to absolute position."""
        self.position = position

    def transform_point(self, local: Vector3) -> Vector3:
        """Convert a point from this transform's local frame to world space."""
        rotated = self.rotation.rotate(local)
        return Vector3.from_array(rotated.to_array() + self.position.to_array())

    def inverse_transform_point(self, world: Vector3) -> Vector3:
        """Convert a world-space point into this transform's local frame."""
        relative = Vector3.from_array(world.to_array() - self.position.to_array())
        return self.rotation.inverse().rotate(relative)

    def transform_direction(self, local: Vector3) -> Vector3:
        """Rotate a local direction into world space."""
        return self.rotation.rotate(local)
