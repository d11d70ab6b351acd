"""
Entity factories - boxes, generators, mirrors, water and the player.

Level builders use these for design-time placement; the restore
routine uses create_box() to rebuild saved boxes.
"""

from __future__ import annotations

from stage.core import Entity, World
from puzzle.components import (
    Box,
    BoxRole,
    BoxCollider,
    CollisionLayer,
    Generator,
    IndicatorColor,
    Mirror,
    MirrorMode,
    MirrorDirection,
    Player,
    Quaternion,
    Transform,
    Vector3,
    WaterRise,
)


def create_box(
    world: World,
    position: Vector3,
    is_metal: bool = False,
    role: BoxRole = BoxRole.RESTING,
) -> Entity:
    """
    Factory function to create a box.

    Wooden boxes sit on the floating layer, metal boxes on the default
    layer; both are hit by stack probes.

    Args:
        world: World to add the box to
        position: World position of the box centre
        is_metal: Metal or wooden prefab
        role: Initial classification

    Returns:
        The created box entity
    """
    box = world.create_entity("MetalBox" if is_metal else "Box")
    box.add_tag("box")

    box.add(Transform(position=position))
    box.add(Box(is_metal=is_metal, role=role))
    box.add(BoxCollider(
        layer=(CollisionLayer.DEFAULT if is_metal else CollisionLayer.FLOATING).value,
    ))

    return box


def create_generator(
    world: World,
    position: Vector3,
    activated: bool = False,
    name: str = "Generator",
) -> Entity:
    """Factory function to create a generator."""
    generator = world.create_entity(name)
    generator.add_tag("generator")

    generator.add(Transform(position=position))
    generator.add(Generator(
        indicator=IndicatorColor.GREEN if activated else IndicatorColor.RED,
    ))
    generator.add(BoxCollider(layer=CollisionLayer.MECHANISM.value))

    return generator


def create_mirror(
    world: World,
    position: Vector3,
    rotation: Quaternion = Quaternion(),
    mode: MirrorMode = MirrorMode.REFLECT,
    direction: MirrorDirection = MirrorDirection.RIGHT,
    name: str = "Mirror",
) -> Entity:
    """Factory function to create a mirror."""
    mirror = world.create_entity(name)
    mirror.add_tag("mirror")

    mirror.add(Transform(position=position, rotation=rotation))
    mirror.add(Mirror(mode=mode, direction=direction))
    mirror.add(BoxCollider(
        size=Vector3(1.0, 1.0, 0.1),
        layer=CollisionLayer.MECHANISM.value,
    ))

    return mirror


def create_water(
    world: World,
    position: Vector3 = Vector3(),
    capacity: int = 3,
    name: str = "Water",
) -> Entity:
    """Factory function to create the rising water mechanism."""
    water = world.create_entity(name)
    water.add_tag("water")

    water.add(Transform(position=position))
    water.add(WaterRise(capacity=capacity))

    return water


def create_player(
    world: World,
    position: Vector3 = Vector3(),
    rotation: Quaternion = Quaternion(),
    name: str = "Player",
) -> Entity:
    """
    Factory function to create the player.

    The player transform is the reference frame for carried boxes.
    """
    player = world.create_entity(name)
    player.add_tag("player")

    player.add(Transform(position=position, rotation=rotation))
    player.add(Player())
    player.add(BoxCollider(
        size=Vector3(0.8, 1.8, 0.8),
        layer=CollisionLayer.PLAYER.value,
    ))

    return player
