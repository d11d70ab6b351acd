"""
Ray casting against box colliders.

Provides the spatial query used to walk a tower of boxes. Any object
with a matching raycast() method can stand in for WorldRaycaster
(e.g. a physics backend or a test double).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from stage.core import World, Entity
from puzzle.components import Transform, BoxCollider, CollisionLayer, Vector3


@dataclass(frozen=True)
class RaycastHit:
    """Nearest hit along a ray."""
    entity: Entity
    point: Vector3
    distance: float


class SpatialQuery(Protocol):
    """Anything that can report the nearest hit along a ray."""

    def raycast(
        self,
        origin: Vector3,
        direction: Vector3,
        max_distance: float = math.inf,
        layer_mask: int = CollisionLayer.ALL,
    ) -> RaycastHit | None:
        ...


class WorldRaycaster:
    """
    Ray casts against every BoxCollider in a World.

    Colliders that contain the ray origin are ignored, so a ray cast
    from a box centre never reports the box itself. The nearest hit
    wins; equal distances resolve to the oldest entity.
    """

    def __init__(self, world: World):
        self.world = world

    def raycast(
        self,
        origin: Vector3,
        direction: Vector3,
        max_distance: float = math.inf,
        layer_mask: int = CollisionLayer.ALL,
    ) -> RaycastHit | None:
        """
        Cast a ray and return the nearest hit.

        Args:
            origin: Ray start in world space
            direction: Ray direction (need not be normalized)
            max_distance: Ignore hits further than this
            layer_mask: Only colliders on these layers are considered

        Returns:
            The nearest hit, or None
        """
        o = origin.to_array()
        d = direction.normalized().to_array()

        best: RaycastHit | None = None

        for entity in self.world.get_entities_with(Transform, BoxCollider):
            if self.world.is_pending_destroy(entity):
                continue

            collider = entity.get(BoxCollider)
            if not collider.in_mask(layer_mask):
                continue

            lo, hi = collider.get_bounds(entity.get(Transform).position)
            distance = self._intersect(o, d, lo, hi)
            if distance is None or distance > max_distance:
                continue

            if best is None or distance < best.distance:
                best = RaycastHit(
                    entity=entity,
                    point=Vector3.from_array(o + d * distance),
                    distance=distance,
                )

        return best

    @staticmethod
    def _intersect(o: np.ndarray, d: np.ndarray, lo: np.ndarray, hi: np.ndarray) -> float | None:
        """Slab test. Returns entry distance, or None on miss."""
        if np.all(o > lo) and np.all(o < hi):
            return None

        t_near = -math.inf
        t_far = math.inf

        for axis in range(3):
            if d[axis] == 0.0:
                if o[axis] < lo[axis] or o[axis] > hi[axis]:
                    return None
                continue

            t1 = (lo[axis] - o[axis]) / d[axis]
            t2 = (hi[axis] - o[axis]) / d[axis]
            t_near = max(t_near, min(t1, t2))
            t_far = min(t_far, max(t1, t2))

        if t_near > t_far or t_far < 0 or t_near < 0:
            return None

        return float(t_near)
