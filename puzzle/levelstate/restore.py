"""
Restore routine - rebuild a level's state from a LevelSnapshot.

Boxes are destroyed and recreated; generators, mirrors and water are
updated in place. Every lookup is validated before the world is
touched, so a snapshot that does not fit the level leaves the level
exactly as it was.
"""

from __future__ import annotations

import logging

from stage.core import Entity, EventBus, World
from puzzle.checkpoint.buffer import CarriedBoxesBuffer
from puzzle.components import Box, Generator, Mirror, Transform
from puzzle.errors import ConsistencyMismatch
from puzzle.levelstate.snapshot import LevelSnapshot, SavedMirror
from puzzle.systems.mechanisms import (
    activate_generator,
    apply_mirror_state,
    find_water,
    parse_water_layers,
    recover_water_layers_fast,
)
from puzzle.world.entities import create_box


logger = logging.getLogger(__name__)


def restore_level_state(
    world: World,
    snapshot: LevelSnapshot,
    event_bus: EventBus | None = None,
) -> list[Entity]:
    """
    Apply a snapshot to the level's world.

    Args:
        world: The level's world, holding design-time placement
        snapshot: State captured for this level
        event_bus: Receives mechanism events

    Returns:
        The newly created resting boxes

    Raises:
        ConsistencyMismatch: If a generator or mirror has no saved state
        MultipleWaterMechanisms: If the level has more than one water mechanism
        WaterLayerMismatch: If the saved water does not fit the mechanism
    """
    generator_plan = _plan_generators(world, snapshot)
    mirror_plan = _plan_mirrors(world, snapshot)

    water = find_water(world)
    if water is not None and snapshot.water_layers is not None:
        # Fail before mutating anything
        parse_water_layers(water, snapshot.water_layers)

    # Design-time placeholder boxes make way for the saved ones
    for entity in list(world.get_entities_with(Box)):
        if entity.get(Box).is_resting:
            world.destroy_entity(entity)
    world.flush()

    boxes = [
        create_box(world, saved.position, is_metal=saved.is_metal)
        for saved in snapshot.resting_boxes
    ]

    for entity, activated in generator_plan:
        if activated:
            activate_generator(entity, event_bus)

    for entity, saved in mirror_plan:
        apply_mirror_state(entity, saved.rotation, saved.mode, saved.direction, event_bus)

    if water is not None and snapshot.water_layers is not None:
        recover_water_layers_fast(water, snapshot.water_layers, event_bus)

    logger.info(
        "Restored level %s: %d box(es), %d generator(s), %d mirror(s)",
        snapshot.level_id, len(boxes), len(generator_plan), len(mirror_plan),
    )
    return boxes


def restore_carried_boxes(
    world: World,
    player: Entity,
    carried_buffer: CarriedBoxesBuffer,
) -> list[Entity]:
    """
    Drain the carried boxes buffer into the level around the player.

    Each box is placed at its recorded offset in the player's frame and
    rests in the new level from then on.
    """
    frame = player.get(Transform)
    boxes = [
        create_box(world, frame.transform_point(entry.local_offset), is_metal=entry.is_metal)
        for entry in carried_buffer.drain()
    ]
    if boxes:
        logger.info("Placed %d carried box(es) around %s", len(boxes), player.name)
    return boxes


def _plan_generators(world: World, snapshot: LevelSnapshot) -> list[tuple[Entity, bool]]:
    plan = []
    for entity in world.get_entities_with(Generator, Transform):
        position = entity.get(Transform).position
        activated = snapshot.generator_state(position)
        if activated is None:
            logger.error("Generator %s at %s missing from snapshot", entity.name, position)
            raise ConsistencyMismatch("generator", position, snapshot.level_id)
        plan.append((entity, activated))
    return plan


def _plan_mirrors(world: World, snapshot: LevelSnapshot) -> list[tuple[Entity, SavedMirror]]:
    plan = []
    for entity in world.get_entities_with(Mirror, Transform):
        position = entity.get(Transform).position
        saved = snapshot.mirror_state(position)
        if saved is None:
            logger.error("Mirror %s at %s missing from snapshot", entity.name, position)
            raise ConsistencyMismatch("mirror", position, snapshot.level_id)
        plan.append((entity, saved))
    return plan
