import json
import pytest
from puzzle.components import MirrorMode, MirrorDirection, Quaternion, Vector3, UP
from puzzle.levelstate import LevelSnapshot, SavedBox, SavedMirror, position_key

def make_snapshot():
    return LevelSnapshot(
        level_id=3,
        resting_boxes=[
            SavedBox(is_metal=False, position=Vector3(1.0, 0.5, 0.0)),
            SavedBox(is_metal=True, position=Vector3(2.0, 0.5, 0.0)),
        ],
        generators={position_key(Vector3(3.0, 0.0, 0.0)): True},
        mirrors={
            position_key(Vector3(4.0, 1.0, 0.0)): SavedMirror(
                rotation=Quaternion.from_axis_angle(UP, 90),
                mode=MirrorMode.REFLECT,
                direction=MirrorDirection.LEFT,
            ),
        },
        water_layers='{"layers": [1.0, 0.0]}',
    )

def test_position_key_absorbs_float_noise():
    assert position_key(Vector3(1.0, 2.0, 3.0)) == position_key(Vector3(1.00000001, 1.99999999, 3.0))
    assert position_key(Vector3(1.0, 2.0, 3.0)) != position_key(Vector3(1.001, 2.0, 3.0))

def test_position_key_groups_by_nearest_multiple_of_quantum():
    assert position_key(Vector3(0.14, 0, 0), 0.1) == position_key(Vector3(0.06, 0, 0), 0.1)
    # Nearby values straddling a rounding boundary get different keys
    assert position_key(Vector3(0.149, 0, 0), 0.1) != position_key(Vector3(0.151, 0, 0), 0.1)

def test_lookup_by_scene_position():
    snapshot = make_snapshot()

    assert snapshot.generator_state(Vector3(3.0, 0.0, 0.0)) is True
    assert snapshot.generator_state(Vector3(9.0, 0.0, 0.0)) is None

    mirror = snapshot.mirror_state(Vector3(4.0, 1.0, 0.0))
    assert mirror.direction == MirrorDirection.LEFT

def test_snapshot_is_immutable():
    snapshot = make_snapshot()

    with pytest.raises(AttributeError):
        snapshot.level_id = 4
    with pytest.raises(TypeError):
        snapshot.generators[(0, 0, 0)] = False

    assert isinstance(snapshot.resting_boxes, tuple)

def test_snapshot_does_not_alias_caller_maps():
    generators = {(0, 0, 0): False}
    snapshot = LevelSnapshot(level_id=1, generators=generators)

    generators[(0, 0, 0)] = True

    assert snapshot.generators[(0, 0, 0)] is False

def test_dict_round_trip_through_json():
    snapshot = make_snapshot()

    data = json.loads(json.dumps(snapshot.to_dict()))
    restored = LevelSnapshot.from_dict(data)

    assert restored == snapshot
    assert restored.mirror_state(Vector3(4.0, 1.0, 0.0)).mode == MirrorMode.REFLECT

def test_from_dict_rejects_unknown_mode():
    data = make_snapshot().to_dict()
    data["mirrors"][0]["mode"] = "SPIN"

    with pytest.raises(KeyError):
        LevelSnapshot.from_dict(data)

def test_custom_quantum_is_kept():
    snapshot = LevelSnapshot(level_id=1, position_quantum=0.5)
    assert snapshot.key_for(Vector3(1.0, 1.2, 0.0)) == (2, 2, 0)
    assert LevelSnapshot.from_dict(snapshot.to_dict()).position_quantum == 0.5
