"""
Physics components - collision volumes and layers for spatial queries.
"""

from __future__ import annotations

from enum import IntFlag

import numpy as np

from stage.core.component import Component
from puzzle.components.transform import Vector3


class CollisionLayer(IntFlag):
    """Collision layers for ray cast filtering."""
    NONE = 0
    DEFAULT = 1 << 0
    FLOATING = 1 << 1
    PLAYER = 1 << 2
    WATER = 1 << 3
    MECHANISM = 1 << 4

    # Common masks
    ALL = 0xFFFFFFFF
    BOXES = DEFAULT | FLOATING


class BoxCollider(Component):
    """
    Axis-aligned collision box centred on the entity transform.

    Attributes:
        size: Full extents along x, y and z
        center: Offset of the box centre from the transform position
        layer: What layer this collider is on
    """
    size: Vector3 = Vector3(1.0, 1.0, 1.0)
    center: Vector3 = Vector3()
    layer: int = CollisionLayer.DEFAULT.value

    def get_bounds(self, position: Vector3) -> tuple[np.ndarray, np.ndarray]:
        """
        Get world-space bounds at a position.

        Returns:
            (minimum corner, maximum corner)
        """
        centre = position.to_array() + self.center.to_array()
        half = self.size.to_array() / 2.0
        return centre - half, centre + half

    def in_mask(self, mask: int) -> bool:
        """Check if this collider's layer is included in a mask."""
        return (self.layer & mask) != 0
