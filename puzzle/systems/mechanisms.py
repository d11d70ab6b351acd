"""
Mechanism logic - box roles, generator activation, mirrors, water.

Components stay data-only; every state change of a mechanism goes
through one of these functions.
"""

from __future__ import annotations

import json
import logging

from stage.core import Entity, EventBus, World
from puzzle.components import (
    Box,
    BoxRole,
    Generator,
    IndicatorColor,
    Mirror,
    MirrorMode,
    MirrorDirection,
    Quaternion,
    Transform,
    WaterRise,
)
from puzzle.events import MechanismEvent
from puzzle.errors import MultipleWaterMechanisms, WaterLayerMismatch


logger = logging.getLogger(__name__)


# Box roles

def carry_box(entity: Entity) -> None:
    """
    Reclassify a resting box as carried.

    Raises:
        ValueError: If the box is already carried
    """
    box = entity.get(Box)
    if box.role != BoxRole.RESTING:
        raise ValueError(f"{entity.name} is not resting and cannot be carried")
    box.role = BoxRole.CARRIED


def rest_box(entity: Entity) -> None:
    """
    Reclassify a carried box as resting.

    Raises:
        ValueError: If the box is already resting
    """
    box = entity.get(Box)
    if box.role != BoxRole.CARRIED:
        raise ValueError(f"{entity.name} is not carried and cannot be put down")
    box.role = BoxRole.RESTING


def is_resting_box(entity: Entity) -> bool:
    box = entity.try_get(Box)
    return box is not None and box.is_resting


# Generators

def is_activated(entity: Entity) -> bool:
    """Whether a generator is working, read from its indicator lamp."""
    return entity.get(Generator).activated


def activate_generator(entity: Entity, event_bus: EventBus | None = None) -> bool:
    """
    Start a generator. Activation is one-way.

    Returns:
        True if the generator was switched on by this call
    """
    generator = entity.get(Generator)
    if generator.activated:
        return False

    generator.indicator = IndicatorColor.GREEN
    logger.debug("Generator %s activated", entity.name)

    if event_bus:
        event_bus.publish(MechanismEvent.GENERATOR_ACTIVATED, entity=entity)
    return True


# Mirrors

def read_mirror_state(entity: Entity) -> tuple[Quaternion, MirrorMode, MirrorDirection]:
    """Current (rotation, mode, direction) of a mirror."""
    mirror = entity.get(Mirror)
    return entity.get(Transform).rotation, mirror.mode, mirror.direction


def apply_mirror_state(
    entity: Entity,
    rotation: Quaternion,
    mode: MirrorMode,
    direction: MirrorDirection,
    event_bus: EventBus | None = None,
) -> None:
    """Overwrite a mirror's rotation, mode and direction in place."""
    mirror = entity.get(Mirror)
    entity.get(Transform).rotation = rotation
    mirror.mode = mode
    mirror.direction = direction

    if event_bus:
        event_bus.publish(MechanismEvent.MIRROR_CHANGED, entity=entity)


# Water

def serialize_water_layers(entity: Entity) -> str:
    """Serialize water layers to an opaque string."""
    water = entity.get(WaterRise)
    # Mid-animation saves store where the water is heading
    layers = water.targets if water.animating else water.layers
    return json.dumps({"layers": [float(v) for v in layers]})


def parse_water_layers(entity: Entity, blob: str) -> list[float]:
    """
    Decode a blob produced by serialize_water_layers for this mechanism.

    Raises:
        WaterLayerMismatch: If the layer count differs from the capacity
        ValueError: If the blob is not valid serialized layers
    """
    water = entity.get(WaterRise)
    data = json.loads(blob)
    if not isinstance(data, dict) or not isinstance(data.get("layers"), list):
        raise ValueError(f"Malformed water layer blob: {blob!r}")

    layers = [float(v) for v in data["layers"]]
    if len(layers) != water.capacity:
        raise WaterLayerMismatch(expected=water.capacity, actual=len(layers))
    return layers


def recover_water_layers_fast(
    entity: Entity,
    blob: str,
    event_bus: EventBus | None = None,
) -> None:
    """Set water layers from a blob immediately, without animation."""
    layers = parse_water_layers(entity, blob)
    water = entity.get(WaterRise)
    water.layers = layers
    water.targets = []
    water.animating = False

    if event_bus:
        event_bus.publish(MechanismEvent.WATER_RECOVERED, entity=entity, animated=False)


def recover_water_layers(entity: Entity, blob: str, event_bus: EventBus | None = None) -> None:
    """Start rising towards the layers in a blob; see advance_water()."""
    water = entity.get(WaterRise)
    water.targets = parse_water_layers(entity, blob)
    water.animating = True

    if event_bus:
        event_bus.publish(MechanismEvent.WATER_RECOVERED, entity=entity, animated=True)


def advance_water(entity: Entity, dt: float) -> None:
    """Move animating layers towards their targets."""
    water = entity.get(WaterRise)
    if not water.animating:
        return

    step = water.rise_speed * dt
    layers = []
    for current, target in zip(water.layers, water.targets):
        if current < target:
            current = min(target, current + step)
        else:
            current = max(target, current - step)
        layers.append(current)

    water.layers = layers
    if layers == water.targets:
        water.animating = False
        water.targets = []


def find_water(world: World) -> Entity | None:
    """
    Get the level's water mechanism, if any.

    Raises:
        MultipleWaterMechanisms: If there is more than one
    """
    waters = [
        entity for entity in world.get_entities_with(WaterRise)
        if not world.is_pending_destroy(entity)
    ]
    if len(waters) > 1:
        raise MultipleWaterMechanisms(
            f"Found {len(waters)} water mechanisms: {', '.join(w.name for w in waters)}"
        )
    return waters[0] if waters else None
