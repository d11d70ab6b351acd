import json
import pytest
from puzzle.checkpoint import CarriedBoxesBuffer
from puzzle.components import (
    Box, Generator, IndicatorColor, Mirror, MirrorMode, MirrorDirection,
    Quaternion, Transform, Vector3, WaterRise, UP,
)
from puzzle.errors import ConsistencyMismatch, WaterLayerMismatch
from puzzle.events import MechanismEvent
from puzzle.levelstate import (
    CarriedBox, LevelSnapshot, SavedBox, SavedMirror, position_key,
    restore_carried_boxes, restore_level_state,
)
from puzzle.systems import is_activated
from puzzle.world import create_box, create_generator, create_mirror, create_player, create_water

def box_positions(world):
    return [e.get(Transform).position for e in world.get_entities_with(Box)]

def test_boxes_replaced_by_saved_ones(world):
    create_box(world, Vector3(0, 0.5, 0))
    create_box(world, Vector3(1, 0.5, 0))
    snapshot = LevelSnapshot(
        level_id=1,
        resting_boxes=[SavedBox(is_metal=True, position=Vector3(7, 0.5, 2))],
    )

    created = restore_level_state(world, snapshot)

    assert box_positions(world) == [Vector3(7, 0.5, 2)]
    assert created[0].get(Box).is_metal is True
    assert created[0].get(Box).is_resting

def test_generator_activation_restored(world, event_bus):
    activated = []
    event_bus.subscribe(MechanismEvent.GENERATOR_ACTIVATED, lambda e: activated.append(e), weak=False)

    on = create_generator(world, Vector3(3, 0, 0))
    off = create_generator(world, Vector3(4, 0, 0))
    snapshot = LevelSnapshot(
        level_id=1,
        generators={
            position_key(Vector3(3, 0, 0)): True,
            position_key(Vector3(4, 0, 0)): False,
        },
    )

    restore_level_state(world, snapshot, event_bus)

    assert is_activated(on)
    assert not is_activated(off)
    assert len(activated) == 1

def test_active_generator_is_not_switched_off(world):
    generator = create_generator(world, Vector3(3, 0, 0), activated=True)
    snapshot = LevelSnapshot(level_id=1, generators={position_key(Vector3(3, 0, 0)): False})

    restore_level_state(world, snapshot)

    assert generator.get(Generator).indicator == IndicatorColor.GREEN

def test_mirror_state_restored(world):
    mirror = create_mirror(world, Vector3(5, 1, 0))
    turned = Quaternion.from_axis_angle(UP, 90)
    snapshot = LevelSnapshot(
        level_id=1,
        mirrors={
            position_key(Vector3(5, 1, 0)): SavedMirror(
                rotation=turned, mode=MirrorMode.PASS, direction=MirrorDirection.DOWN,
            ),
        },
    )

    restore_level_state(world, snapshot)

    assert mirror.get(Transform).rotation == turned
    assert mirror.get(Mirror).mode == MirrorMode.PASS
    assert mirror.get(Mirror).direction == MirrorDirection.DOWN

def test_missing_generator_leaves_world_untouched(world):
    box = create_box(world, Vector3(0, 0.5, 0))
    generator = create_generator(world, Vector3(3, 0, 0))
    mirror = create_mirror(world, Vector3(5, 1, 0))
    snapshot = LevelSnapshot(
        level_id=2,
        resting_boxes=[SavedBox(is_metal=False, position=Vector3(9, 0.5, 0))],
        generators={position_key(Vector3(8, 0, 0)): True},
        mirrors={
            position_key(Vector3(5, 1, 0)): SavedMirror(
                rotation=Quaternion.from_axis_angle(UP, 90),
                mode=MirrorMode.BLOCK,
                direction=MirrorDirection.UP,
            ),
        },
    )

    with pytest.raises(ConsistencyMismatch) as exc_info:
        restore_level_state(world, snapshot)

    assert exc_info.value.kind == "generator"
    assert exc_info.value.level_id == 2
    assert list(world.get_entities_with(Box)) == [box]
    assert not is_activated(generator)
    assert mirror.get(Mirror).mode == MirrorMode.REFLECT

def test_missing_mirror_raises(world):
    create_mirror(world, Vector3(5, 1, 0))
    with pytest.raises(ConsistencyMismatch) as exc_info:
        restore_level_state(world, LevelSnapshot(level_id=1))
    assert exc_info.value.kind == "mirror"

def test_water_restored_without_animation(world):
    water = create_water(world, capacity=2)
    snapshot = LevelSnapshot(level_id=1, water_layers=json.dumps({"layers": [1.0, 0.5]}))

    restore_level_state(world, snapshot)

    assert water.get(WaterRise).layers == [1.0, 0.5]
    assert water.get(WaterRise).animating is False

def test_water_mismatch_leaves_world_untouched(world):
    box = create_box(world, Vector3(0, 0.5, 0))
    create_water(world, capacity=3)
    snapshot = LevelSnapshot(level_id=1, water_layers=json.dumps({"layers": [1.0]}))

    with pytest.raises(WaterLayerMismatch):
        restore_level_state(world, snapshot)

    assert list(world.get_entities_with(Box)) == [box]

def test_carried_boxes_placed_around_player(world):
    player = create_player(world, Vector3(2, 0, 0), rotation=Quaternion.from_axis_angle(UP, 180))
    buffer = CarriedBoxesBuffer()
    buffer.fill([
        CarriedBox(is_metal=False, local_offset=Vector3(0, 0.5, 1)),
        CarriedBox(is_metal=True, local_offset=Vector3(0, 1.5, 1)),
    ])

    boxes = restore_carried_boxes(world, player, buffer)

    assert buffer.is_empty
    assert [b.get(Box).is_metal for b in boxes] == [False, True]
    assert all(b.get(Box).is_resting for b in boxes)
    assert list(boxes[0].get(Transform).position) == pytest.approx([2, 0.5, -1], abs=1e-9)
    assert list(boxes[1].get(Transform).position) == pytest.approx([2, 1.5, -1], abs=1e-9)

def test_empty_buffer_places_nothing(world, player):
    assert restore_carried_boxes(world, player, CarriedBoxesBuffer()) == []
    assert world.count_with(Box) == 0
