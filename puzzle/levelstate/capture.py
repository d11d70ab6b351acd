"""
Capture routine - build a LevelSnapshot from the live world.

Capture is all-or-nothing: if anything goes wrong, box roles changed
during the call are put back and the carried boxes buffer is left
untouched before the error propagates.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, TypeVar

from stage.core import Entity, World
from puzzle.checkpoint.buffer import CarriedBoxesBuffer
from puzzle.components import (
    Box,
    BoxRole,
    Generator,
    Mirror,
    Player,
    Transform,
)
from puzzle.config import LevelStateConfig
from puzzle.errors import DuplicatePositionKey, StaleCarriedBuffer
from puzzle.levelstate.snapshot import (
    CarriedBox,
    LevelSnapshot,
    PositionKey,
    SavedBox,
    SavedMirror,
    position_key,
)
from puzzle.levelstate.stacking import detect_carried_stack
from puzzle.systems.mechanisms import (
    find_water,
    is_activated,
    read_mirror_state,
    rest_box,
    serialize_water_layers,
)
from puzzle.systems.raycast import SpatialQuery


logger = logging.getLogger(__name__)

T = TypeVar('T')


def capture_level_state(
    world: World,
    level_id: int,
    player: Entity,
    spatial_query: SpatialQuery,
    carried_buffer: CarriedBoxesBuffer,
    *,
    is_level_exit: bool,
    config: LevelStateConfig | None = None,
) -> LevelSnapshot:
    """
    Capture the level's state and fill the carried boxes buffer.

    Args:
        world: The level's world
        level_id: Level identifier recorded in the snapshot
        player: Player entity; its transform frames carried box offsets
        spatial_query: Ray cast provider for stack detection
        carried_buffer: Receives the boxes leaving with the player
        is_level_exit: True when the player is leaving for another level.
            Otherwise carried boxes are first demoted to resting, so an
            intra-level save keeps every box in this level.
        config: Capture tuning

    Returns:
        The new snapshot

    Raises:
        StaleCarriedBuffer: If the buffer still holds unconsumed entries
        DegenerateStackQuery: If stack detection makes no progress
        DuplicatePositionKey: If two generators or two mirrors share a key
        MultipleWaterMechanisms: If the level has more than one water mechanism
    """
    config = config or LevelStateConfig()

    if not carried_buffer.is_empty:
        logger.error(
            "Carried boxes buffer holds %d unconsumed entries at capture of level %s",
            len(carried_buffer), level_id,
        )
        raise StaleCarriedBuffer(
            f"{len(carried_buffer)} carried box(es) from a previous transition were never restored"
        )

    roles_before = {entity.id: entity.get(Box).role for entity in world.get_entities_with(Box)}

    try:
        carried = _classify_carried(world, spatial_query, is_level_exit, config)
        carried_entries = _carried_entries(carried, player)

        resting_boxes = tuple(
            SavedBox(is_metal=entity.get(Box).is_metal, position=entity.get(Transform).position)
            for entity in _live(world, Box)
            if entity.get(Box).is_resting
        )

        generators = _index_by_position(
            _live(world, Generator), "generator", config.position_quantum, is_activated,
        )
        mirrors = _index_by_position(
            _live(world, Mirror), "mirror", config.position_quantum, _saved_mirror,
        )

        water = find_water(world)
        water_layers = serialize_water_layers(water) if water else None

        snapshot = LevelSnapshot(
            level_id=level_id,
            resting_boxes=resting_boxes,
            generators=generators,
            mirrors=mirrors,
            water_layers=water_layers,
            position_quantum=config.position_quantum,
        )
    except Exception:
        _restore_roles(world, roles_before)
        raise

    if carried:
        state = player.get(Player)
        state.active = True
        state.moving_box = False

    carried_buffer.fill(carried_entries)

    logger.info(
        "Captured level %s: %d resting box(es), %d carried, %d generator(s), %d mirror(s)%s",
        level_id,
        len(snapshot.resting_boxes),
        len(carried_entries),
        len(snapshot.generators),
        len(snapshot.mirrors),
        ", water" if water_layers is not None else "",
    )
    return snapshot


def _live(world: World, component_type: type) -> Iterable[Entity]:
    """Entities with a component and a transform, skipping pending destroys."""
    for entity in world.get_entities_with(component_type, Transform):
        if not world.is_pending_destroy(entity):
            yield entity


def _classify_carried(
    world: World,
    spatial_query: SpatialQuery,
    is_level_exit: bool,
    config: LevelStateConfig,
) -> list[Entity]:
    """Apply the demotion rule, then extend every held box by its stack."""
    if not is_level_exit:
        for entity in _live(world, Box):
            if entity.get(Box).is_carried:
                rest_box(entity)

    anchors = [entity for entity in _live(world, Box) if entity.get(Box).is_carried]

    carried: list[Entity] = []
    for anchor in anchors:
        carried.append(anchor)
        carried.extend(detect_carried_stack(
            world,
            anchor,
            spatial_query,
            config.up,
            max_distance=config.stack_probe_distance,
            layer_mask=config.box_layer_mask,
            max_iterations=config.max_stack_iterations,
        ))
    return carried


def _carried_entries(carried: list[Entity], player: Entity) -> list[CarriedBox]:
    frame = player.get(Transform)
    return [
        CarriedBox(
            is_metal=entity.get(Box).is_metal,
            local_offset=frame.inverse_transform_point(entity.get(Transform).position),
        )
        for entity in carried
    ]


def _saved_mirror(entity: Entity) -> SavedMirror:
    rotation, mode, direction = read_mirror_state(entity)
    return SavedMirror(rotation=rotation, mode=mode, direction=direction)


def _index_by_position(
    entities: Iterable[Entity],
    kind: str,
    quantum: float,
    read_state: Callable[[Entity], T],
) -> dict[PositionKey, T]:
    """Key entity state by quantized position, refusing collisions."""
    indexed: dict[PositionKey, T] = {}
    for entity in entities:
        position = entity.get(Transform).position
        key = position_key(position, quantum)
        if key in indexed:
            logger.error("Duplicate %s position %s (%s)", kind, position, entity.name)
            raise DuplicatePositionKey(kind, position)
        indexed[key] = read_state(entity)
    return indexed


def _restore_roles(world: World, roles: dict[int, BoxRole]) -> None:
    for entity in world.get_entities_with(Box):
        role = roles.get(entity.id)
        if role is not None and entity.get(Box).role != role:
            entity.get(Box).role = role
