import json
import pytest
from puzzle.components import (
    Box, BoxRole, Generator, IndicatorColor, Mirror, MirrorMode, MirrorDirection,
    Quaternion, Transform, Vector3, WaterRise, UP,
)
from puzzle.errors import MultipleWaterMechanisms, WaterLayerMismatch
from puzzle.events import MechanismEvent
from puzzle.systems import (
    carry_box, rest_box, is_resting_box,
    activate_generator, is_activated, apply_mirror_state, read_mirror_state,
    serialize_water_layers, parse_water_layers,
    recover_water_layers, recover_water_layers_fast, advance_water, find_water,
)
from puzzle.world import create_box, create_generator, create_mirror, create_water

def test_box_role_transitions(world):
    box = create_box(world, Vector3(0, 0.5, 0))
    assert is_resting_box(box)

    carry_box(box)
    assert box.get(Box).role == BoxRole.CARRIED
    assert not is_resting_box(box)

    rest_box(box)
    assert box.get(Box).is_resting

def test_invalid_role_transitions(world):
    box = create_box(world, Vector3(0, 0.5, 0))
    with pytest.raises(ValueError):
        rest_box(box)

    carry_box(box)
    with pytest.raises(ValueError):
        carry_box(box)

def test_non_box_is_not_resting_box(world):
    generator = create_generator(world, Vector3())
    assert not is_resting_box(generator)

def test_metal_and_wood_prefabs(world):
    wood = create_box(world, Vector3(0, 0.5, 0))
    metal = create_box(world, Vector3(2, 0.5, 0), is_metal=True)
    assert wood.get(Box).is_metal is False
    assert metal.get(Box).is_metal is True
    assert wood.has_tag("box") and metal.has_tag("box")

def test_generator_activation_is_idempotent(world, event_bus):
    received = []
    event_bus.subscribe(MechanismEvent.GENERATOR_ACTIVATED, lambda e: received.append(e), weak=False)

    generator = create_generator(world, Vector3(4, 0, 0))
    assert not is_activated(generator)

    assert activate_generator(generator, event_bus) is True
    assert activate_generator(generator, event_bus) is False

    assert generator.get(Generator).indicator == IndicatorColor.GREEN
    assert is_activated(generator)
    assert len(received) == 1

def test_apply_mirror_state(world, event_bus):
    received = []
    event_bus.subscribe(MechanismEvent.MIRROR_CHANGED, lambda e: received.append(e), weak=False)

    mirror = create_mirror(world, Vector3(6, 1, 0))
    turned = Quaternion.from_axis_angle(UP, 90)

    apply_mirror_state(mirror, turned, MirrorMode.BLOCK, MirrorDirection.UP, event_bus)

    assert mirror.get(Transform).rotation == turned
    assert mirror.get(Mirror).mode == MirrorMode.BLOCK
    assert mirror.get(Mirror).direction == MirrorDirection.UP
    assert read_mirror_state(mirror) == (turned, MirrorMode.BLOCK, MirrorDirection.UP)
    assert len(received) == 1

def test_water_starts_empty(world):
    water = create_water(world, capacity=4)
    assert water.get(WaterRise).layers == [0.0, 0.0, 0.0, 0.0]

def test_water_serialize_and_fast_recover(world):
    water = create_water(world, capacity=3)
    water.get(WaterRise).layers = [1.0, 0.5, 0.0]
    blob = serialize_water_layers(water)

    other = create_water(world, capacity=3)
    recover_water_layers_fast(other, blob)

    assert other.get(WaterRise).layers == [1.0, 0.5, 0.0]
    assert other.get(WaterRise).animating is False

def test_animating_water_serializes_targets(world):
    water = create_water(world, capacity=2)
    state = water.get(WaterRise)
    state.animating = True
    state.targets = [1.0, 1.0]

    assert json.loads(serialize_water_layers(water)) == {"layers": [1.0, 1.0]}

def test_water_layer_count_mismatch(world):
    water = create_water(world, capacity=3)
    with pytest.raises(WaterLayerMismatch) as exc_info:
        parse_water_layers(water, json.dumps({"layers": [1.0, 1.0]}))

    assert exc_info.value.expected == 3
    assert exc_info.value.actual == 2

def test_malformed_water_blob(world):
    water = create_water(world, capacity=1)
    with pytest.raises(ValueError):
        parse_water_layers(water, "[1, 2, 3]")

def test_animated_recovery_reaches_targets(world):
    water = create_water(world, capacity=2)
    state = water.get(WaterRise)
    state.rise_speed = 0.5

    recover_water_layers(water, json.dumps({"layers": [1.0, 0.25]}))
    assert state.animating is True

    advance_water(water, 1.0)
    assert state.layers == pytest.approx([0.5, 0.25])
    assert state.animating is True

    advance_water(water, 1.0)
    assert state.layers == [1.0, 0.25]
    assert state.animating is False
    assert state.targets == []

def test_find_water(world):
    assert find_water(world) is None

    water = create_water(world)
    assert find_water(world) is water

    create_water(world, name="SecondWater")
    with pytest.raises(MultipleWaterMechanisms):
        find_water(world)
