import logging
import pytest
from puzzle.components import Box, BoxRole, CollisionLayer, Vector3, UP
from puzzle.errors import DegenerateStackQuery
from puzzle.levelstate import detect_carried_stack
from puzzle.systems import carry_box
from puzzle.systems.raycast import RaycastHit
from puzzle.world import create_box, create_generator

def detect(world, anchor, query, **kwargs):
    return detect_carried_stack(
        world, anchor, query, UP,
        max_distance=1.0, layer_mask=CollisionLayer.BOXES, **kwargs,
    )

def test_full_tower_is_carried(world, raycaster, tower):
    boxes = tower(4, metal_levels=(2,))
    carry_box(boxes[0])

    stack = detect(world, boxes[0], raycaster)

    assert stack == boxes[1:]
    assert all(b.get(Box).role == BoxRole.CARRIED for b in boxes)

def test_single_box_has_empty_stack(world, raycaster, tower):
    (box,) = tower(1)
    carry_box(box)

    assert detect(world, box, raycaster) == []

def test_gap_ends_the_walk(world, raycaster):
    bottom = create_box(world, Vector3(0, 0.5, 0))
    middle = create_box(world, Vector3(0, 1.5, 0))
    floating = create_box(world, Vector3(0, 3.5, 0))
    carry_box(bottom)

    stack = detect(world, bottom, raycaster)

    assert stack == [middle]
    assert floating.get(Box).is_resting

def test_walk_stops_at_non_box(world, raycaster):
    bottom = create_box(world, Vector3(0, 0.5, 0))
    create_generator(world, Vector3(0, 1.5, 0))
    above = create_box(world, Vector3(0, 2.5, 0))
    carry_box(bottom)

    # Generators are outside the box mask, so the probe sees the gap
    assert detect(world, bottom, raycaster) == []
    assert above.get(Box).is_resting

def test_walk_stops_at_already_carried_box(world, raycaster, tower):
    boxes = tower(3)
    carry_box(boxes[0])
    carry_box(boxes[2])

    assert detect(world, boxes[0], raycaster) == [boxes[1]]

def test_neighbouring_tower_untouched(world, raycaster, tower):
    held = tower(2)
    other = tower(3, x=1.0)
    carry_box(held[0])

    detect(world, held[0], raycaster)

    assert all(b.get(Box).is_resting for b in other)

class LoopingQuery:
    """Always reports the same box, as a broken physics backend might."""

    def __init__(self, entity):
        self.entity = entity

    def raycast(self, origin, direction, max_distance=float("inf"), layer_mask=CollisionLayer.ALL):
        return RaycastHit(entity=self.entity, point=origin, distance=0.5)

def test_repeated_hit_is_degenerate(world, tower, caplog):
    boxes = tower(2)
    carry_box(boxes[0])

    with caplog.at_level(logging.ERROR, logger="puzzle.levelstate.stacking"):
        with pytest.raises(DegenerateStackQuery):
            detect(world, boxes[0], LoopingQuery(boxes[1]))

    assert any("revisited" in r.getMessage() for r in caplog.records)

def test_anchor_hit_is_degenerate(world, tower):
    boxes = tower(1)
    carry_box(boxes[0])

    with pytest.raises(DegenerateStackQuery):
        detect(world, boxes[0], LoopingQuery(boxes[0]))

def test_iteration_budget(world, raycaster, tower, caplog):
    boxes = tower(4)
    carry_box(boxes[0])

    with caplog.at_level(logging.ERROR, logger="puzzle.levelstate.stacking"):
        with pytest.raises(DegenerateStackQuery):
            detect(world, boxes[0], raycaster, max_iterations=2)

    assert any("exceeded 2 ray casts" in r.getMessage() for r in caplog.records)
