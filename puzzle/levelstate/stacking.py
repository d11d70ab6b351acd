"""
Stack detection - find the boxes stacked on top of a carried box.

Starting from a carried box, a ray is cast upward; every resting box it
hits is reclassified as carried and becomes the next ray origin. The
walk ends at the first miss or at anything that is not a resting box.
"""

from __future__ import annotations

import logging

from stage.core import Entity, World
from puzzle.components import Box, Transform, Vector3
from puzzle.errors import DegenerateStackQuery
from puzzle.systems.mechanisms import carry_box, is_resting_box
from puzzle.systems.raycast import SpatialQuery


logger = logging.getLogger(__name__)


def detect_carried_stack(
    world: World,
    anchor: Entity,
    spatial_query: SpatialQuery,
    up: Vector3,
    *,
    max_distance: float,
    layer_mask: int,
    max_iterations: int | None = None,
) -> list[Entity]:
    """
    Walk the tower above `anchor`, reclassifying each box as carried.

    Args:
        world: World holding the boxes
        anchor: The box the player holds
        spatial_query: Ray cast provider
        up: Upward direction in world space
        max_distance: Longest hop between two stacked boxes
        layer_mask: Layers the probe ray considers
        max_iterations: Ray cast budget (defaults to the box count)

    Returns:
        Newly carried boxes, bottom to top

    Raises:
        DegenerateStackQuery: If the query reports a box already visited
            by this walk or the budget is exhausted
    """
    if max_iterations is None:
        max_iterations = world.count_with(Box)

    visited = {anchor.id}
    stack: list[Entity] = []
    origin = anchor.get(Transform).position

    for _ in range(max_iterations + 1):
        hit = spatial_query.raycast(origin, up, max_distance, layer_mask)
        if hit is None:
            break

        if hit.entity.id in visited:
            logger.error("Stack query revisited %s above %s", hit.entity.name, anchor.name)
            raise DegenerateStackQuery(
                f"Ray from {origin} reported {hit.entity.name} twice while "
                f"walking the stack above {anchor.name}"
            )

        if not is_resting_box(hit.entity):
            break

        carry_box(hit.entity)
        visited.add(hit.entity.id)
        stack.append(hit.entity)
        origin = hit.entity.get(Transform).position
    else:
        logger.error("Stack above %s exceeded %d ray casts", anchor.name, max_iterations)
        raise DegenerateStackQuery(
            f"Stack above {anchor.name} exceeded {max_iterations} ray casts"
        )

    logger.debug("Stack above %s: %d box(es)", anchor.name, len(stack))
    return stack
